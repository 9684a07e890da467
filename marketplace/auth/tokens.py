# marketplace/auth/tokens.py
from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from marketplace.errors import ApiError

ACCESS = "ACCESS"
REFRESH = "REFRESH"
RESET = "RESET"

_SALT_KEYS = {
    ACCESS: ("ACCESS_TOKEN_SALT", "ACCESS_TOKEN_MAX_AGE"),
    REFRESH: ("REFRESH_TOKEN_SALT", "REFRESH_TOKEN_MAX_AGE"),
    RESET: ("RESET_TOKEN_SALT", "RESET_TOKEN_MAX_AGE"),
}


def _get_serializer(kind: str) -> URLSafeTimedSerializer:
    secret = current_app.config.get("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY is not set; tokens cannot be signed.")
    salt_key, _ = _SALT_KEYS[kind]
    return URLSafeTimedSerializer(secret_key=secret, salt=current_app.config[salt_key])


def create_token(kind: str, email: str, role: str) -> str:
    return _get_serializer(kind).dumps({"email": email, "role": role})


def load_token(kind: str, token: str) -> dict:
    """Decode a token of the given kind; raises ApiError 401 when invalid or expired."""
    _, max_age_key = _SALT_KEYS[kind]
    try:
        data = _get_serializer(kind).loads(token, max_age=current_app.config[max_age_key])
    except SignatureExpired:
        raise ApiError(401, "Token has expired")
    except BadSignature:
        raise ApiError(401, "Invalid token")
    if not isinstance(data, dict) or not data.get("email"):
        raise ApiError(401, "Invalid token")
    return data
