import os


def _normalize_database_url(url: str) -> str:
    # Render/Heroku sometimes provide postgres:// which SQLAlchemy expects as postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    # Base directory of the backend (one level above this `ghbuys` package)
    BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BACKEND_DIR, "instance")

    ENV = (os.getenv("GHBUYS_ENV", "dev") or "dev").strip().lower()
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()

    _default_sqlite_path = os.path.join(INSTANCE_DIR, "ghbuys.db").replace("\\", "/")
    _db_url = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL") or f"sqlite:///{_default_sqlite_path}"
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(_db_url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS: comma-separated origins for the storefront and admin builds
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    # Paystack
    PAYSTACK_SECRET_KEY = os.getenv("PAYSTACK_SECRET_KEY", "").strip()
    PAYSTACK_PUBLIC_KEY = os.getenv("PAYSTACK_PUBLIC_KEY", "").strip()
    PAYSTACK_WEBHOOK_SECRET = (os.getenv("PAYSTACK_WEBHOOK_SECRET") or os.getenv("PAYSTACK_SECRET_KEY") or "").strip()
    PAYSTACK_BASE_URL = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co").rstrip("/")
    PAYSTACK_TIMEOUT = int(_float_env("PAYSTACK_TIMEOUT", 20))

    # Marketplace
    STORE_CURRENCY = os.getenv("STORE_CURRENCY", "GHS")
    PLATFORM_COMMISSION_RATE = _float_env("PLATFORM_COMMISSION_RATE", 0.05)
    VAT_RATE = _float_env("VAT_RATE", 0.125)
    NHIL_RATE = _float_env("NHIL_RATE", 0.025)
    GETFUND_RATE = _float_env("GETFUND_RATE", 0.025)

    # Email metadata (delivery itself is handled outside this service)
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@ghbuys.com")
    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@ghbuys.com")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@ghbuys.com")
    BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:9000").rstrip("/")
    BUSINESS_NAME = os.getenv("BUSINESS_NAME", "GH Buys Marketplace")


def is_production(env: str) -> bool:
    return env in ("prod", "production")


def validate_config(config) -> list[str]:
    """Return human readable configuration problems for the given mapping."""
    errors = []
    env = str(config.get("ENV") or "dev")
    if is_production(env):
        if not config.get("PAYSTACK_SECRET_KEY"):
            errors.append("PAYSTACK_SECRET_KEY is required in production")
        if not config.get("PAYSTACK_PUBLIC_KEY"):
            errors.append("PAYSTACK_PUBLIC_KEY is required in production")
        if "dev" in str(config.get("SECRET_KEY") or ""):
            errors.append("SECRET_KEY must be changed in production")
    if not config.get("PAYSTACK_WEBHOOK_SECRET"):
        errors.append("PAYSTACK_WEBHOOK_SECRET is not set; all webhooks will be rejected")
    return errors
