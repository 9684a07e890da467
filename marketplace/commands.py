# marketplace/commands.py
import os
import click
from flask.cli import with_appcontext

from marketplace.extensions import db


@click.command("create-admin")
@click.option("--email", default=lambda: os.environ.get("ADMIN_EMAIL", "admin@example.com"),
              show_default=True, help="Admin e-mail")
@click.option("--password", default=lambda: os.environ.get("ADMIN_PASSWORD"),
              help="Password (prompted when not given)")
@click.option("--force", is_flag=True, default=False,
              help="Reset password and role when the account already exists")
@with_appcontext
def create_admin(email: str, password: str | None, force: bool):
    """Create or reset an ADMIN account."""
    from marketplace.models import User, UserRole, UserStatus

    db.create_all()

    if not password:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    email = email.strip().lower()
    u = User.query.filter_by(email=email).first()
    if u and not force:
        click.echo(f"User '{email}' already exists. Use --force to reset the password.")
        return

    if not u:
        u = User(email=email)
        db.session.add(u)

    u.role = UserRole.ADMIN
    u.status = UserStatus.ACTIVE
    u.set_password(password)
    db.session.commit()
    click.echo(f"Admin ready: {email}")


@click.command("init-db")
@with_appcontext
def init_db():
    """Create all tables for the configured database."""
    from marketplace import models as _models  # noqa: F401

    db.create_all()
    tables = sorted(db.metadata.tables)
    click.echo("Tables: " + ", ".join(tables))


def register_commands(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(init_db)
