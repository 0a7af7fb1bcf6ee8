# core/config.py
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings read from the environment (and a local .env file)."""
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///readloom.db"))
    secret_key: str = field(default_factory=lambda: os.getenv("SECRET_KEY", "dev-secret-change-me"))
    session_cookie_name: str = field(default_factory=lambda: os.getenv("SESSION_COOKIE_NAME", "readloom_session"))
    session_https_only: bool = field(default_factory=lambda: _as_bool(os.getenv("SESSION_HTTPS_ONLY", "0")))
    cors_origins: List[str] = field(
        default_factory=lambda: _as_list(os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"))
    )

    # Payments
    stripe_secret_key: str = field(default_factory=lambda: os.getenv("STRIPE_SECRET_KEY", ""))
    stripe_webhook_secret: str = field(default_factory=lambda: os.getenv("STRIPE_WEBHOOK_SECRET", ""))
    app_base_url: str = field(default_factory=lambda: os.getenv("APP_BASE_URL", "http://localhost:3000"))

    # Moderation
    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"))

    # Video rooms
    hms_management_token: str = field(default_factory=lambda: os.getenv("HMS_MANAGEMENT_TOKEN", ""))
    hms_template_id: str = field(default_factory=lambda: os.getenv("HMS_TEMPLATE_ID", ""))

    # Email
    resend_api_key: str = field(default_factory=lambda: os.getenv("RESEND_API_KEY", ""))
    resend_from_email: str = field(default_factory=lambda: os.getenv("RESEND_FROM_EMAIL", "noreply@readloom.local"))

    default_country: str = field(default_factory=lambda: os.getenv("DEFAULT_COUNTRY", "Pakistan"))
    http_timeout: float = field(default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "10")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a stream handler on the root logger once."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel((level or get_settings().log_level).upper())
