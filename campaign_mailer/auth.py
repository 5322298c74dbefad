"""
Shared-secret authentication for the queue drain endpoint.

When EMAIL_QUEUE_API_KEY is configured, callers must send
``Authorization: Bearer <key>``. When it is not configured the endpoint is
open: that is convenient for local development and unsafe in production,
so every open request logs a warning.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException

from campaign_mailer.config import EmailSettings, get_settings

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a "Bearer <token>" header, or None if malformed."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]


async def verify_queue_token(
    authorization: Optional[str] = Header(None),
    settings: EmailSettings = Depends(get_settings),
) -> None:
    """
    Check the drain caller's bearer token against the configured queue key.

    Raises:
        HTTPException: 401 if a key is configured and the token is missing or wrong
    """
    expected = settings.queue_api_key
    if not expected:
        logger.warning("[Email Queue] No EMAIL_QUEUE_API_KEY configured - allowing all requests")
        return

    provided = _extract_bearer_token(authorization)
    if provided is None or not secrets.compare_digest(provided.encode(), expected.encode()):
        logger.warning("[Email Queue] Unauthorized drain attempt")
        raise HTTPException(status_code=401, detail="Unauthorized")
