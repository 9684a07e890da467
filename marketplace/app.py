# marketplace/app.py
import logging

# Show INFO logs even outside the werkzeug access log
logging.basicConfig(level=logging.INFO)

from flask import Flask, jsonify
from marketplace.config import Config

# Extensions
from marketplace.extensions import db, login_manager, bcrypt, migrate, cors, init_mail
from marketplace.errors import register_error_handlers
from marketplace.commands import register_commands

# Blueprints
from marketplace.auth import auth_bp
from marketplace.api.routes.user_routes import api_users
from marketplace.api.routes.category_routes import api_categories
from marketplace.api.routes.shop_routes import api_shops
from marketplace.api.routes.product_routes import api_products
from marketplace.api.routes.order_routes import order_bp
from marketplace.api.routes.payment_routes import payment_bp
from marketplace import models as _models  # noqa: F401


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    init_mail(app)

    cors.init_app(
        app,
        resources={
            r"/api/*": {
                "origins": app.config.get("CORS_ORIGINS") or [],
                "supports_credentials": True,
            }
        },
    )

    # Register blueprints
    app.register_blueprint(api_users)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_categories)
    app.register_blueprint(api_shops)
    app.register_blueprint(api_products)
    app.register_blueprint(order_bp)
    app.register_blueprint(payment_bp)

    register_error_handlers(app)
    register_commands(app)

    @app.get("/")
    def index():
        return jsonify({"ok": True, "message": "Marketplace API is running"}), 200

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
