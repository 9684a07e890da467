# marketplace/auth/login_routes.py
from flask import Blueprint, current_app
from flask_login import current_user

from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.auth.guards import auth_required
from marketplace.auth.tokens import ACCESS, REFRESH, create_token, load_token
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import User, UserStatus

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

MIN_PASSWORD_LENGTH = 6


def _active_user_by_email(email: str) -> User:
    user = User.query.filter_by(email=email).first()
    if not user or user.status == UserStatus.DELETED:
        raise ApiError(404, "User not found")
    if user.status == UserStatus.BLOCKED:
        raise ApiError(403, "User is blocked")
    return user


@auth_bp.post("/login")
def login():
    data = get_payload()
    email = payload_str(data, "email").lower()
    password = payload_str(data, "password", strip=False)
    if not email or not password:
        raise ApiError(400, "Missing 'email' or 'password'")

    user = _active_user_by_email(email)
    if not user.check_password(password):
        current_app.logger.info("[AUTH] bad password for %r", email)
        raise ApiError(401, "Password is incorrect")

    current_app.logger.info("[AUTH] login uid=%s role=%s", user.id, user.role)
    return send_response(
        {
            "accessToken": create_token(ACCESS, user.email, user.role),
            "refreshToken": create_token(REFRESH, user.email, user.role),
            "needsPasswordChange": bool(user.needs_password_change),
        },
        "Logged in successfully",
    )


@auth_bp.post("/refresh-token")
def refresh_token():
    token = payload_str(get_payload(), "refreshToken")
    if not token:
        raise ApiError(401, "Missing refresh token")
    data = load_token(REFRESH, token)
    user = _active_user_by_email(data["email"])
    return send_response(
        {
            "accessToken": create_token(ACCESS, user.email, user.role),
            "needsPasswordChange": bool(user.needs_password_change),
        },
        "Access token refreshed",
    )


@auth_bp.post("/change-password")
@auth_required()
def change_password():
    data = get_payload()
    old_pwd = payload_str(data, "oldPassword", strip=False)
    new_pwd = payload_str(data, "newPassword")

    if not current_user.check_password(old_pwd):
        raise ApiError(401, "Old password is incorrect")
    if len(new_pwd) < MIN_PASSWORD_LENGTH:
        raise ApiError(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    current_user.set_password(new_pwd)
    current_user.needs_password_change = False
    db.session.commit()
    return send_response(None, "Password changed")
