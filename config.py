# config.py
import os
from decimal import Decimal


def _getenv(key: str, default: str | None = None) -> str | None:
    """Small wrapper to read environment variables."""
    val = os.getenv(key)
    return val if (val is not None and val != "") else default


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _as_decimal(value: str | None, default: str) -> Decimal:
    if value is None or value == "":
        return Decimal(default)
    return Decimal(value)


def _as_list(value: str | None, default: list[str]) -> list[str]:
    if value is None or value == "":
        return list(default)
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _normalize_db_url(db_url: str) -> str:
    # Render/Heroku sometimes provide "postgres://"; SQLAlchemy wants "postgresql://"
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


class BaseConfig:
    # -------------------
    # Core / Flask
    # -------------------
    ENV = _getenv("FLASK_ENV", "development")
    DEBUG = _as_bool(_getenv("FLASK_DEBUG"), default=(ENV != "production"))
    TESTING = _as_bool(_getenv("FLASK_TESTING"), default=False)

    SECRET_KEY = _getenv("SECRET_KEY", "dev-secret-key")
    APP_BASE_URL = _getenv("APP_BASE_URL", "http://localhost:5000")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = _getenv("SESSION_COOKIE_SAMESITE", "Lax")

    # JSON API; forms are posted by our own client
    WTF_CSRF_ENABLED = _as_bool(_getenv("WTF_CSRF_ENABLED"), default=False)

    # -------------------
    # Database
    # -------------------
    _db_url = _getenv("DATABASE_URL", "sqlite:///instance/app.db")
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(_db_url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    # -------------------
    # Logging
    # -------------------
    LOG_TO_FILE = _as_bool(_getenv("LOG_TO_FILE"), default=False)
    LOG_DIR = _getenv("LOG_DIR", "logs")
    LOG_LEVEL = _getenv("LOG_LEVEL", "INFO")

    # -------------------
    # Mail / SendGrid
    # -------------------
    SENDGRID_API_KEY = _getenv("SENDGRID_API_KEY", "")
    MAIL_SERVER = _getenv("MAIL_SERVER", "")
    MAIL_PORT = _as_int(_getenv("MAIL_PORT"), default=587)
    MAIL_USE_TLS = _as_bool(_getenv("MAIL_USE_TLS"), default=True)
    MAIL_USERNAME = _getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = _getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = _getenv("MAIL_DEFAULT_SENDER", "ENVO-EARN <onboarding@envo-earn.com>")

    # -------------------
    # Object storage
    # -------------------
    STORAGE_BACKEND = _getenv("STORAGE_BACKEND", "local")  # local | cloudinary
    UPLOAD_FOLDER = _getenv("UPLOAD_FOLDER", "payment-proofs")
    CLOUDINARY_CLOUD_NAME = _getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY = _getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET = _getenv("CLOUDINARY_API_SECRET", "")
    CLOUDINARY_FOLDER = _getenv("CLOUDINARY_FOLDER", "payment-proofs")

    # -------------------
    # Scheduled jobs
    # -------------------
    CRON_SECRET = _getenv("CRON_SECRET", "")
    BUSINESS_TIMEZONE = _getenv("BUSINESS_TIMEZONE", "Asia/Karachi")

    # -------------------
    # Investment / referrals (PKR)
    # -------------------
    DAILY_EARNING_AMOUNT = _as_decimal(_getenv("DAILY_EARNING_AMOUNT"), default="200.00")
    REFERRAL_BONUS = _as_decimal(_getenv("REFERRAL_BONUS"), default="200.00")
    TOP_TIER_REFERRAL_BONUS = _as_decimal(_getenv("TOP_TIER_REFERRAL_BONUS"), default="800.00")
    SIGNUP_REFERRAL_BONUS = _as_decimal(_getenv("SIGNUP_REFERRAL_BONUS"), default="200.00")
    TOP_TIER_PLAN_ID = _getenv("TOP_TIER_PLAN_ID", "3")

    PAYMENT_PLATFORMS = _as_list(_getenv("PAYMENT_PLATFORMS"), default=["easypaisa", "jazzcash"])

    # -------------------
    # Withdrawals
    # -------------------
    MIN_WITHDRAWAL_AMOUNT = _as_decimal(_getenv("MIN_WITHDRAWAL_AMOUNT"), default="600.00")
    WITHDRAWAL_LOCK_THRESHOLD = _as_int(_getenv("WITHDRAWAL_LOCK_THRESHOLD"), default=2)
    REQUIRED_REFERRALS_TO_UNLOCK = _as_int(_getenv("REQUIRED_REFERRALS_TO_UNLOCK"), default=2)


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    # Tighten cookie security for HTTPS deployments
    SESSION_COOKIE_SECURE = True

    REQUIRED_SETTINGS = ("SECRET_KEY", "DATABASE_URL", "CRON_SECRET")


class TestingConfig(BaseConfig):
    ENV = "testing"
    DEBUG = False
    TESTING = True

    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    SENDGRID_API_KEY = ""
    MAIL_SERVER = ""
    MAIL_SUPPRESS_SEND = True

    STORAGE_BACKEND = "local"
    CRON_SECRET = "test-cron-secret"
    APP_BASE_URL = "http://testserver"


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
