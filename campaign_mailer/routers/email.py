"""
Email preview router.

Endpoints:
  POST /preview   - render the MP email a constituent is about to send

Uses the same template renderers as the real send so the preview always
matches what the MP receives.
"""

import logging
import re

from fastapi import APIRouter, HTTPException

from campaign_mailer.models.campaign import PreviewRequest
from campaign_mailer.services.email_templates import MPEmailData, render_mp_email_preview
from campaign_mailer.services.validation import format_postcode, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter()

_PARLIAMENT_DOMAIN = "parliament.uk"


def _fallback_mp_email(mp_name: str) -> str:
    """Guess an address like "jane.smith@parliament.uk" when none is on record."""
    local_part = re.sub(r"\s+", ".", mp_name.strip().lower())
    return f"{local_part}@{_PARLIAMENT_DOMAIN}"


@router.post("/preview")
async def preview_email(body: PreviewRequest):
    mp = body.mp.model_dump() if body.mp is not None else None
    result = validate_submission(
        body.name, body.email, body.postcode, mp, require_mp_email=False,
    )
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.error)

    data = MPEmailData(
        mp_name=body.mp.name,
        constituency=body.mp.constituency,
        postcode=format_postcode(body.postcode),
        campaign_description=body.campaign.body,
        user_name=body.name,
        user_email=body.email,
    )
    preview = render_mp_email_preview(data, body.campaign.subject)

    return {
        "success": True,
        "preview": {
            "to": {
                "name": body.mp.name,
                "email": body.mp.email or _fallback_mp_email(body.mp.name),
            },
            **preview,
        },
    }
