"""
MP email dispatch.

Builds the constituent's message to their MP and hands it to whichever
delivery backend is configured. The constituent is always CC'd, after any
campaign-level CC addresses.
"""

import logging

from campaign_mailer.models.campaign import CampaignEmail, Constituent, MP
from campaign_mailer.models.email import SendRequest, SendResult
from campaign_mailer.services.email.base import EmailBackend
from campaign_mailer.services.email_templates import (
    MPEmailData,
    render_mp_email_html,
    render_mp_email_text,
)
from campaign_mailer.services.validation import format_postcode

logger = logging.getLogger(__name__)


def compose_mp_email(campaign: CampaignEmail, mp: MP, constituent: Constituent) -> SendRequest:
    """Build the SendRequest for one constituent's email to their MP."""
    if not mp.email:
        raise ValueError(f"MP {mp.name} has no email address")

    data = MPEmailData(
        mp_name=mp.name,
        constituency=mp.constituency,
        postcode=format_postcode(constituent.postcode),
        campaign_description=campaign.body,
        user_name=constituent.name,
        user_email=constituent.email,
    )

    cc = [*campaign.cc, constituent.email]
    return SendRequest(
        to=mp.email,
        cc=cc,
        bcc=campaign.bcc or None,
        subject=campaign.subject,
        text=render_mp_email_text(data),
        html=render_mp_email_html(data),
    )


async def send_mp_email(
    backend: EmailBackend,
    campaign: CampaignEmail,
    mp: MP,
    constituent: Constituent,
) -> SendResult:
    """Compose and send the MP email. Composition errors come back as a failed result."""
    try:
        request = compose_mp_email(campaign, mp, constituent)
    except ValueError as e:
        logger.error(f"Could not compose email to MP {mp.name}: {e}")
        return SendResult.failure(str(e))

    result = await backend.send(request)
    if result.success:
        logger.info(f"Email to MP {mp.name} ({mp.constituency}) accepted: {result.message_id}")
    else:
        logger.error(f"Failed to send email to MP {mp.name}: {result.error}")
    return result
