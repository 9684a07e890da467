# marketplace/auth/guards.py
from functools import wraps

from flask import request, current_app
from flask_login import current_user

from marketplace.auth.tokens import ACCESS, load_token
from marketplace.errors import ApiError
from marketplace.extensions import login_manager
from marketplace.models import User


def _bearer_token() -> str | None:
    raw = (request.headers.get("Authorization") or "").strip()
    if not raw:
        return None
    if raw.lower().startswith("bearer "):
        raw = raw[7:].strip()
    return raw or None


@login_manager.request_loader
def load_user_from_request(req):
    token = _bearer_token()
    if not token:
        return None
    try:
        data = load_token(ACCESS, token)
    except ApiError as e:
        current_app.logger.info("[AUTH] rejected token: %s", e.message)
        return None
    user = User.query.filter_by(email=data["email"]).first()
    if user is None or not user.is_active:
        return None
    return user


def auth_required(*roles):
    """Require a valid access token; when roles are given, the user's role must be one of them."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                raise ApiError(401, "You are not authorized")
            if roles and current_user.role not in roles:
                raise ApiError(403, "You do not have permission for this action")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
