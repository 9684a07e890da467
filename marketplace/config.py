# marketplace/config.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"))

INSTANCE_DIR = os.path.join(BASE_DIR, "instance")


def _env(key: str, default=None):
    v = os.getenv(key)
    return v if v not in (None, "", "None") else default


def _env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v in (None, "", "None"):
        return default
    return str(v).strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, default))
    except (TypeError, ValueError):
        return default


def _env_list(key: str, default: str = "") -> list[str]:
    raw = _env(key, default) or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _resolve_sqlite_uri(db_url: str | None) -> str:
    if not db_url:
        os.makedirs(INSTANCE_DIR, exist_ok=True)
        db_path = os.path.join(INSTANCE_DIR, "marketplace.db")
        return "sqlite:///" + db_path.replace("\\", "/")

    if db_url.startswith("sqlite:///"):
        raw_path = db_url.replace("sqlite:///", "", 1)
        if not os.path.isabs(raw_path):
            raw_path = os.path.join(BASE_DIR, raw_path)
        db_path = os.path.normpath(raw_path)
        os.makedirs(os.path.dirname(db_path), exist_ok=True)
        return "sqlite:///" + db_path.replace("\\", "/")

    # Heroku-style URLs are rejected by SQLAlchemy 2.x
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)

    return db_url


class Config:
    SECRET_KEY = _env("SECRET_KEY", "dev-please-change-me")

    SQLALCHEMY_DATABASE_URI = _resolve_sqlite_uri(_env("DATABASE_URL"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_AS_ASCII = False

    CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    # Tokens (itsdangerous)
    ACCESS_TOKEN_SALT = _env("ACCESS_TOKEN_SALT", "mp-access")
    ACCESS_TOKEN_MAX_AGE = _env_int("ACCESS_TOKEN_MAX_AGE", 24 * 3600)
    REFRESH_TOKEN_SALT = _env("REFRESH_TOKEN_SALT", "mp-refresh")
    REFRESH_TOKEN_MAX_AGE = _env_int("REFRESH_TOKEN_MAX_AGE", 30 * 24 * 3600)
    RESET_TOKEN_SALT = _env("RESET_TOKEN_SALT", "mp-password-reset")
    RESET_TOKEN_MAX_AGE = _env_int("RESET_TOKEN_MAX_AGE", 600)
    RESET_PASSWORD_UI_LINK = _env("RESET_PASSWORD_UI_LINK", "http://localhost:3000/reset-password")
    PASSWORD_RESET_SUBJECT = _env("PASSWORD_RESET_SUBJECT", "Reset your marketplace password")

    # Pagination
    DEFAULT_PAGE_LIMIT = _env_int("DEFAULT_PAGE_LIMIT", 10)
    MAX_PAGE_LIMIT = _env_int("MAX_PAGE_LIMIT", 100)

    # Mail
    MAIL_SERVER = _env("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = _env_int("MAIL_PORT", 465)
    MAIL_USE_SSL = _env_bool("MAIL_USE_SSL", True)
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", False)
    MAIL_USERNAME = _env("MAIL_USERNAME")
    MAIL_PASSWORD = _env("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = _env("MAIL_DEFAULT_SENDER", _env("MAIL_USERNAME"))
    MAIL_SUPPRESS_SEND = _env_bool("MAIL_SUPPRESS_SEND", False)
    MAIL_DEBUG = _env_bool("MAIL_DEBUG", False)
    ORDER_NOTIFY_EMAIL = _env("ORDER_NOTIFY_EMAIL")

    # Payment gateway
    PAYMENT_STORE_ID = _env("PAYMENT_STORE_ID", "aamarpaytest")
    PAYMENT_SIGNATURE_KEY = _env("PAYMENT_SIGNATURE_KEY", "")
    PAYMENT_INIT_URL = _env("PAYMENT_INIT_URL", "https://sandbox.aamarpay.com/jsonpost.php")
    PAYMENT_VERIFY_URL = _env(
        "PAYMENT_VERIFY_URL", "https://sandbox.aamarpay.com/api/v1/trxcheck/request.php"
    )
    PAYMENT_SUCCESS_URL = _env(
        "PAYMENT_SUCCESS_URL", "http://localhost:5000/api/payment/confirmation?status=success"
    )
    PAYMENT_FAIL_URL = _env(
        "PAYMENT_FAIL_URL", "http://localhost:5000/api/payment/confirmation?status=failed"
    )
    PAYMENT_CANCEL_URL = _env("PAYMENT_CANCEL_URL", "http://localhost:3000")
    PAYMENT_CURRENCY = _env("PAYMENT_CURRENCY", "BDT")
    PAYMENT_TIMEOUT = _env_int("PAYMENT_TIMEOUT", 10)


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    MAIL_SUPPRESS_SEND = True
    MAIL_SERVER = "localhost"
    MAIL_DEFAULT_SENDER = "noreply@example.com"
    BCRYPT_LOG_ROUNDS = 4
