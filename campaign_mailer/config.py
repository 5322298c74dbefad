"""
Application configuration.

All environment variables are read once, here, into an EmailSettings
instance. Services receive the settings object (or the pieces they need)
explicitly and never read the environment themselves.

Environment variables
---------------------
EMAIL_PROVIDER                   console | sendgrid | mailgun | queue (default: console)
EMAIL_FROM                       Default sender address
EMAIL_FROM_NAME                  Default sender display name
EMAIL_API_KEY                    SendGrid / Mailgun API key
MAILGUN_DOMAIN                   Mailgun sending domain
EMAIL_HTTP_TIMEOUT               Provider API timeout in seconds (default: 10)
EMAIL_QUEUE_STORE                supabase | memory (default: supabase)
EMAIL_QUEUE_BUCKET               Supabase Storage bucket holding queued emails
EMAIL_QUEUE_API_KEY              Bearer token required by POST /api/queue/drain
EMAIL_QUEUE_DEFAULT_BATCH_SIZE   Drain limit when the request omits one (default: 10)
SUPABASE_URL / SUPABASE_SERVICE_KEY   Supabase project used by the queue store
CORS_ORIGINS                     Comma-separated extra CORS origins
"""

import logging
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_FROM_EMAIL = "noreply@example.com"
DEFAULT_FROM_NAME = "Pressure Campaign"
DEFAULT_QUEUE_BUCKET = "email-queue"
DEFAULT_BATCH_SIZE = 10
DEFAULT_HTTP_TIMEOUT = 10.0


class EmailConfigError(ValueError):
    """Raised at startup when a selected provider is missing required settings."""


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'. Falling back to default ({default}).")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}. Falling back to default ({default}).")
        return default
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'. Falling back to default ({default}).")
        return default


class EmailSettings(BaseModel):
    """Everything the email subsystem needs, resolved once at startup."""
    model_config = {"frozen": True}

    provider: str = "console"
    from_email: str = DEFAULT_FROM_EMAIL
    from_name: str = DEFAULT_FROM_NAME
    api_key: Optional[str] = None
    mailgun_domain: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    queue_store: str = "supabase"
    queue_bucket: str = DEFAULT_QUEUE_BUCKET
    queue_api_key: Optional[str] = None
    queue_default_batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)

    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    cors_origins: List[str] = []

    @classmethod
    def from_env(cls) -> "EmailSettings":
        """Build settings from the process environment (and a .env file if present)."""
        load_dotenv()

        cors_env = os.getenv("CORS_ORIGINS", "").strip()
        cors_origins = [o.strip() for o in cors_env.split(",") if o.strip()] if cors_env else []

        return cls(
            provider=(os.getenv("EMAIL_PROVIDER") or "console").strip().lower(),
            from_email=os.getenv("EMAIL_FROM") or DEFAULT_FROM_EMAIL,
            from_name=os.getenv("EMAIL_FROM_NAME") or DEFAULT_FROM_NAME,
            api_key=os.getenv("EMAIL_API_KEY") or None,
            mailgun_domain=os.getenv("MAILGUN_DOMAIN") or None,
            http_timeout=_float_env("EMAIL_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            queue_store=(os.getenv("EMAIL_QUEUE_STORE") or "supabase").strip().lower(),
            queue_bucket=os.getenv("EMAIL_QUEUE_BUCKET") or DEFAULT_QUEUE_BUCKET,
            queue_api_key=os.getenv("EMAIL_QUEUE_API_KEY") or None,
            queue_default_batch_size=_int_env("EMAIL_QUEUE_DEFAULT_BATCH_SIZE", DEFAULT_BATCH_SIZE),
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_service_key=os.getenv("SUPABASE_SERVICE_KEY") or None,
            cors_origins=cors_origins,
        )


@lru_cache
def get_settings() -> EmailSettings:
    """FastAPI dependency returning the process-wide settings (built on first use)."""
    return EmailSettings.from_env()
