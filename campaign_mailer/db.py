"""
Storage client configuration.

The email queue lives in a Supabase Storage bucket. The Supabase client,
the queue store and the delivery backend are built once from EmailSettings
and handed to routes through FastAPI dependencies, so tests can swap any of
them with app.dependency_overrides.
"""

import logging
from functools import lru_cache

from supabase import create_client, Client

from campaign_mailer.config import EmailConfigError, EmailSettings, get_settings
from campaign_mailer.services.email.base import EmailBackend
from campaign_mailer.services.email.factory import create_email_backend
from campaign_mailer.services.queue_store import (
    InMemoryQueueStore,
    QueueStore,
    SupabaseQueueStore,
)

logger = logging.getLogger(__name__)


def create_supabase_admin(settings: EmailSettings) -> Client:
    """Service-role client (bypasses RLS) for queue bucket access."""
    if not settings.supabase_url or not settings.supabase_service_key:
        raise EmailConfigError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set for the supabase queue store"
        )
    return create_client(settings.supabase_url, settings.supabase_service_key)


def create_queue_store(settings: EmailSettings) -> QueueStore:
    """Build the queue store named by settings.queue_store."""
    if settings.queue_store == "memory":
        logger.warning("Using in-memory email queue store; queued emails are lost on restart")
        return InMemoryQueueStore()
    if settings.queue_store != "supabase":
        raise EmailConfigError(
            f"Unknown queue store {settings.queue_store!r}. Supported stores: ['memory', 'supabase']"
        )
    return SupabaseQueueStore(create_supabase_admin(settings), settings.queue_bucket)


@lru_cache
def get_queue_store() -> QueueStore:
    """FastAPI dependency: the process-wide queue store."""
    return create_queue_store(get_settings())


@lru_cache
def get_email_backend() -> EmailBackend:
    """
    FastAPI dependency: the process-wide delivery backend.

    The queue store is only built when the queue provider is selected, so a
    console or direct-provider deployment needs no Supabase credentials.
    """
    settings = get_settings()
    store = get_queue_store() if settings.provider == "queue" else None
    return create_email_backend(settings, store)
