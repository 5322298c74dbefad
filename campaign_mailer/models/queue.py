"""
Request/response bodies for the queue drain endpoint.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt

from campaign_mailer.models.email import MessageRecord


class DrainRequest(BaseModel):
    """
    Body for POST /api/queue/drain.

    limit is optional; the configured default batch size is used when absent.
    It must be a JSON integer: booleans, floats and numeric strings are rejected.
    """
    limit: Optional[StrictInt] = Field(default=None, gt=0)


class DrainResponse(BaseModel):
    """Claimed records plus a count. ``returned`` may be less than the requested limit."""
    jobs: List[MessageRecord] = []
    returned: int = 0
