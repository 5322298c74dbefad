"""
SendGrid backend (v3 Mail Send API).

Requires EMAIL_API_KEY.
"""

import logging

from campaign_mailer.models.email import SendRequest, SendResult
from campaign_mailer.services.email.base import HttpEmailBackend, now_ms

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailBackend(HttpEmailBackend):
    name = "sendgrid"

    def __init__(self, api_key: str, from_email: str, from_name: str, **kwargs):
        super().__init__(from_email, from_name, **kwargs)
        self.api_key = api_key

    def build_payload(self, request: SendRequest) -> dict:
        personalization: dict = {"to": [{"email": addr} for addr in request.to]}
        if request.cc:
            personalization["cc"] = [{"email": addr} for addr in request.cc]
        if request.bcc:
            personalization["bcc"] = [{"email": addr} for addr in request.bcc]

        content = [{"type": "text/plain", "value": request.text}]
        if request.html:
            content.append({"type": "text/html", "value": request.html})

        return {
            "personalizations": [personalization],
            "from": {"email": self.sender(request), "name": self.sender_name(request)},
            "subject": request.subject,
            "content": content,
        }

    async def _send(self, request: SendRequest) -> SendResult:
        response = await self._post(
            SENDGRID_API_URL,
            json=self.build_payload(request),
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        if not response.is_success:
            logger.error(f"SendGrid error {response.status_code}: {response.text}")
            return SendResult.failure(f"SendGrid API error: {response.status_code}")

        message_id = response.headers.get("x-message-id") or f"sendgrid-{now_ms()}"
        logger.info(f"SendGrid accepted message {message_id} to {', '.join(request.to)}")
        return SendResult.ok(message_id)
