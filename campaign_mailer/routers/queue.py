"""
Email queue router.

Gives an external consumer (a cron job, a worker on another host) a way to
pull queued emails and deliver them itself.

Endpoints:
  POST /drain   - claim and remove up to `limit` queued emails (auth: Bearer key)

Request body (optional):
  {"limit": 10}

Response 200:
  {"jobs": [MessageRecord, ...], "returned": <int>}

Claimed jobs are deleted before the response is sent. If the consumer fails
to deliver them, they are not redelivered: retries are the consumer's job.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from campaign_mailer.auth import verify_queue_token
from campaign_mailer.config import EmailSettings, get_settings
from campaign_mailer.db import get_queue_store
from campaign_mailer.models.queue import DrainRequest, DrainResponse
from campaign_mailer.services.queue_drain import drain_queue
from campaign_mailer.services.queue_store import QueueStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/drain",
    response_model=DrainResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_queue_token)],
)
async def drain(
    body: Optional[DrainRequest] = None,
    settings: EmailSettings = Depends(get_settings),
    store: QueueStore = Depends(get_queue_store),
):
    """
    Fetch and remove up to `limit` emails from the queue.

    Individual records that cannot be read or removed are skipped and logged;
    the batch may therefore be smaller than `limit`. Only a failure affecting
    the whole operation (e.g. the store cannot be listed) returns 500.
    """
    limit = body.limit if body and body.limit else settings.queue_default_batch_size

    try:
        jobs = await drain_queue(store, limit)
    except Exception as e:
        logger.error(f"[Email Queue] Drain failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process request", "message": str(e)},
        )

    return DrainResponse(jobs=jobs, returned=len(jobs))
