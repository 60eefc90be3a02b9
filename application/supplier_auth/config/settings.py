import os
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class AuthConfigs:
    def __init__(self):

        # Environment settings
        self.DEBUG = _env_bool("DEBUG", "false")
        self.APPLICATION_ENVIRONMENT = os.getenv("APPLICATION_ENVIRONMENT", "LOCAL")
        self.APP_NAME = os.getenv("APP_NAME", "supplier-auth")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.API_PREFIX = os.getenv("API_PREFIX", "/api/auth")
        self.ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*")
        self.TRUST_PROXY_HEADERS = _env_bool("TRUST_PROXY_HEADERS", "false")

        # Database settings
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./supplier_auth.db")

        # Redis settings
        self.STATE_BACKEND = os.getenv("STATE_BACKEND", "memory").lower()
        self.REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
        self.REDIS_CACHE_DB = int(os.getenv("REDIS_CACHE_DB", "3"))

        # Token settings
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.TOKEN_EXPIRY_DAYS = int(os.getenv("TOKEN_EXPIRY_DAYS", "7"))
        self.TOKEN_REVOCATION_GRACE_SECONDS = int(os.getenv("TOKEN_REVOCATION_GRACE_SECONDS", "60"))
        self.BLACKLIST_MAX_SIZE = int(os.getenv("BLACKLIST_MAX_SIZE", "10000"))

        # OTP settings
        self.OTP_EXPIRY_MINUTES = int(os.getenv("OTP_EXPIRY_MINUTES", "10"))
        self.OTP_REQUEST_RATE_LIMIT = int(os.getenv("OTP_REQUEST_RATE_LIMIT", "5"))
        self.OTP_REQUEST_RATE_WINDOW_SECONDS = int(os.getenv("OTP_REQUEST_RATE_WINDOW_SECONDS", "900"))
        self.OTP_VERIFY_RATE_LIMIT = int(os.getenv("OTP_VERIFY_RATE_LIMIT", "10"))
        self.OTP_VERIFY_RATE_WINDOW_SECONDS = int(os.getenv("OTP_VERIFY_RATE_WINDOW_SECONDS", "900"))

        # Cleanup settings
        self.CLEANUP_ENABLED = _env_bool("CLEANUP_ENABLED", "true")
        self.CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600"))

        # WhatsApp settings
        self.WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "https://graph.facebook.com/v19.0")
        self.WHATSAPP_ACCESS_TOKEN = os.getenv("WHATSAPP_ACCESS_TOKEN", "")
        self.WHATSAPP_PHONE_NUMBER_ID = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
        self.WHATSAPP_TIMEOUT = int(os.getenv("WHATSAPP_TIMEOUT", "10"))

        # Sentry settings
        self.SENTRY_ENABLED = _env_bool("SENTRY_ENABLED", "false")
        self.SENTRY_DSN = os.getenv("SENTRY_DSN", "")
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
        self.SENTRY_RELEASE = os.getenv("SENTRY_RELEASE", "supplier-auth@1.0.0")
        self.SENTRY_TRACES_SAMPLE_RATE = os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
        self.SENTRY_PROFILES_SAMPLE_RATE = os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "0.1")

        # Logging settings
        self.LOG_TO_FILE = _env_bool("LOG_TO_FILE", "false")
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.AUDIT_LOGGING_ENABLED = _env_bool("AUDIT_LOGGING_ENABLED", "false")
        self.CAPTURE_RESPONSE_BODY = _env_bool("CAPTURE_RESPONSE_BODY", "false")
        self.SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL", "")
