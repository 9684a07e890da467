# marketplace/auth/password_reset_routes.py
import time
from urllib.parse import urlencode

from flask import current_app

from marketplace.api.utils.email import send_email
from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.auth.login_routes import auth_bp, MIN_PASSWORD_LENGTH, _active_user_by_email
from marketplace.auth.tokens import RESET, create_token, load_token
from marketplace.errors import ApiError
from marketplace.extensions import db


@auth_bp.post("/forgot-password")
def forgot_password():
    """Mail a short-lived reset link to the account owner."""
    t0 = time.perf_counter()
    email = payload_str(get_payload(), "email").lower()
    if not email:
        raise ApiError(400, "Missing 'email'")

    user = _active_user_by_email(email)
    token = create_token(RESET, user.email, user.role)
    link = f"{current_app.config['RESET_PASSWORD_UI_LINK']}?{urlencode({'email': user.email, 'token': token})}"

    body = (
        "Hello,\n\n"
        "we received a request to reset your password. Use the link below:\n\n"
        f"{link}\n\n"
        f"The link is valid for {current_app.config['RESET_TOKEN_MAX_AGE'] // 60} minutes. "
        "If you did not ask for it, ignore this e-mail.\n"
    )
    send_email(
        subject=current_app.config.get("PASSWORD_RESET_SUBJECT", "Reset your password"),
        recipients=[user.email],
        body=body,
    )
    dt = (time.perf_counter() - t0) * 1000
    current_app.logger.info("[FORGOT] reset mail sent to uid=%s (%.1f ms)", user.id, dt)
    return send_response(None, "Reset link sent, check your e-mail")


@auth_bp.post("/reset-password")
def reset_password():
    data = get_payload()
    email = payload_str(data, "email").lower()
    token = payload_str(data, "token")
    new_pwd = payload_str(data, "newPassword")

    if len(new_pwd) < MIN_PASSWORD_LENGTH:
        raise ApiError(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    user = _active_user_by_email(email)
    try:
        claims = load_token(RESET, token)
    except ApiError:
        raise ApiError(403, "Reset link is invalid or expired")
    if claims.get("email") != user.email:
        raise ApiError(403, "Reset link is invalid or expired")

    user.set_password(new_pwd)
    user.needs_password_change = False
    db.session.commit()
    current_app.logger.info("[RESET] password changed for uid=%s", user.id)
    return send_response(None, "Password reset successfully")
