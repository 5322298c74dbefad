"""
Campaign Mailer API
FastAPI application for constituent-to-MP campaign emails and the
outbound email queue.
"""

import logging
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from campaign_mailer.config import EmailConfigError, EmailSettings, get_settings
from campaign_mailer.db import get_email_backend, get_queue_store
from campaign_mailer.routers import email, queue
from campaign_mailer.services.email.base import EmailBackend
from campaign_mailer.services.queue_store import QueueStore, QueueStoreError

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Campaign Mailer API",
    description="Constituent campaign emails to MPs, with a drainable outbound email queue",
    version="0.1.0",
)


def get_cors_origins(settings: EmailSettings) -> List[str]:
    """
    Build the list of allowed CORS origins.

    Always includes the local dev servers; extra origins come from
    CORS_ORIGINS. Duplicates are removed while preserving order.
    """
    always_included = [
        "http://localhost:3000",
        "http://localhost:8888",
    ]

    seen: set = set()
    origins: List[str] = []
    for origin in always_included + settings.cors_origins:
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(get_settings()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(email.router, prefix="/api/email", tags=["email"])
app.include_router(queue.router, prefix="/api/queue", tags=["queue"])


@app.on_event("startup")
async def log_email_config() -> None:
    """Log which delivery backend and queue store this process will use."""
    settings = get_settings()
    logger.info(
        "Campaign Mailer starting:\n"
        "  Email provider: %s\n"
        "  Queue store:    %s (bucket=%s)\n"
        "  Drain auth:     %s",
        settings.provider,
        settings.queue_store,
        settings.queue_bucket,
        "bearer key" if settings.queue_api_key else "OPEN (set EMAIL_QUEUE_API_KEY in production)",
    )


@app.on_event("shutdown")
async def close_email_backend() -> None:
    """Close the process-wide delivery backend if one was ever built."""
    if get_email_backend.cache_info().currsize:
        await get_email_backend().aclose()


@app.exception_handler(EmailConfigError)
@app.exception_handler(QueueStoreError)
async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Building the queue store (or delivery backend) happens in a dependency,
    outside the route's own error handling. Report it in the same shape the
    drain endpoint uses for whole-operation failures.
    """
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to process request", "message": str(exc)},
    )


@app.get("/")
async def root():
    return {"message": "Campaign Mailer API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/email")
async def health_email(backend: EmailBackend = Depends(get_email_backend)):
    """Report the configured delivery backend (never its credentials)."""
    return {"status": "ok", "email": backend.describe()}


@app.get("/health/queue")
async def health_queue(store: QueueStore = Depends(get_queue_store)):
    """
    Test queue store access.

    Lists the store and reports how many emails are pending. Returns 503 if
    the store is unreachable.
    """
    try:
        keys = await store.list_keys()
    except Exception as exc:
        logger.error(f"Queue health check failed: {exc}")
        raise HTTPException(
            status_code=503,
            detail=f"Queue store check failed: {str(exc)}",
        )

    return {"status": "ok", "queue": "reachable", "pending": len(keys)}
