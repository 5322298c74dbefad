"""
Delivery backend factory.

Selects a backend from EmailSettings.provider:

  console   - log only (default, and the fallback for unknown names)
  sendgrid  - requires api_key
  mailgun   - requires api_key and mailgun_domain
  queue     - requires a QueueStore

Adding a new provider:
  1. Subclass EmailBackend (or HttpEmailBackend) in its own module.
  2. Write a _build_<provider>(settings, store) function.
  3. Register it in _BUILDERS.

An unrecognised or empty provider name never selects a network backend:
it logs and falls back to console. A recognised provider with missing
credentials raises EmailConfigError so the misconfiguration surfaces at
startup instead of on the first send.
"""

import logging
from typing import Callable, Optional

from campaign_mailer.config import EmailConfigError, EmailSettings
from campaign_mailer.services.email.base import EmailBackend
from campaign_mailer.services.email.console import ConsoleEmailBackend
from campaign_mailer.services.email.mailgun import MailgunEmailBackend
from campaign_mailer.services.email.queue import QueueEmailBackend
from campaign_mailer.services.email.sendgrid import SendGridEmailBackend
from campaign_mailer.services.queue_store import QueueStore

logger = logging.getLogger(__name__)


def _build_console(settings: EmailSettings, store: Optional[QueueStore]) -> EmailBackend:
    return ConsoleEmailBackend(settings.from_email, settings.from_name)


def _build_sendgrid(settings: EmailSettings, store: Optional[QueueStore]) -> EmailBackend:
    if not settings.api_key:
        raise EmailConfigError("EMAIL_API_KEY is required for SendGrid")
    return SendGridEmailBackend(
        settings.api_key,
        settings.from_email,
        settings.from_name,
        timeout=settings.http_timeout,
    )


def _build_mailgun(settings: EmailSettings, store: Optional[QueueStore]) -> EmailBackend:
    if not settings.api_key or not settings.mailgun_domain:
        raise EmailConfigError("EMAIL_API_KEY and MAILGUN_DOMAIN are required for Mailgun")
    return MailgunEmailBackend(
        settings.api_key,
        settings.mailgun_domain,
        settings.from_email,
        settings.from_name,
        timeout=settings.http_timeout,
    )


def _build_queue(settings: EmailSettings, store: Optional[QueueStore]) -> EmailBackend:
    if store is None:
        raise EmailConfigError("A queue store is required for the queue email provider")
    return QueueEmailBackend(store, settings.from_email, settings.from_name)


_BUILDERS: dict[str, Callable[[EmailSettings, Optional[QueueStore]], EmailBackend]] = {
    "console": _build_console,
    "sendgrid": _build_sendgrid,
    "mailgun": _build_mailgun,
    "queue": _build_queue,
}


def supported_providers() -> list[str]:
    return sorted(_BUILDERS)


def create_email_backend(
    settings: EmailSettings,
    store: Optional[QueueStore] = None,
) -> EmailBackend:
    """Build the delivery backend named by settings.provider."""
    resolved = (settings.provider or "").lower().strip()

    builder = _BUILDERS.get(resolved)
    if builder is None:
        logger.info(
            f"Using console email provider (EMAIL_PROVIDER={settings.provider!r}). "
            f"Supported providers: {supported_providers()}"
        )
        builder = _build_console

    return builder(settings, store)
