"""
Mailgun backend (v3 messages API).

Requires EMAIL_API_KEY and MAILGUN_DOMAIN. Recipients are sent as repeated
form fields, one per address.
"""

import logging

from campaign_mailer.models.email import SendRequest, SendResult
from campaign_mailer.services.email.base import HttpEmailBackend, now_ms

logger = logging.getLogger(__name__)

MAILGUN_API_BASE = "https://api.mailgun.net/v3"


class MailgunEmailBackend(HttpEmailBackend):
    name = "mailgun"

    def __init__(self, api_key: str, domain: str, from_email: str, from_name: str, **kwargs):
        super().__init__(from_email, from_name, **kwargs)
        self.api_key = api_key
        self.domain = domain

    @property
    def url(self) -> str:
        return f"{MAILGUN_API_BASE}/{self.domain}/messages"

    def build_form(self, request: SendRequest) -> dict:
        form: dict = {
            "from": f"{self.sender_name(request)} <{self.sender(request)}>",
            "to": list(request.to),
            "subject": request.subject,
            "text": request.text,
        }
        if request.cc:
            form["cc"] = list(request.cc)
        if request.bcc:
            form["bcc"] = list(request.bcc)
        if request.html:
            form["html"] = request.html
        return form

    async def _send(self, request: SendRequest) -> SendResult:
        # httpx encodes list values as repeated urlencoded fields
        response = await self._post(
            self.url,
            data=self.build_form(request),
            auth=("api", self.api_key),
        )

        if not response.is_success:
            logger.error(f"Mailgun error {response.status_code}: {response.text}")
            return SendResult.failure(f"Mailgun API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            payload = None
        message_id = (payload.get("id") if isinstance(payload, dict) else None) or f"mailgun-{now_ms()}"
        logger.info(f"Mailgun accepted message {message_id} to {', '.join(request.to)}")
        return SendResult.ok(message_id)
