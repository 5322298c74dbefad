"""Console backend: logs emails instead of sending them. The fail-safe default."""

import logging

from campaign_mailer.models.email import SendRequest, SendResult
from campaign_mailer.services.email.base import EmailBackend, now_ms

logger = logging.getLogger(__name__)


class ConsoleEmailBackend(EmailBackend):
    name = "console"

    async def _send(self, request: SendRequest) -> SendResult:
        lines = [
            "=== EMAIL (CONSOLE MODE) ===",
            f"From: {self.sender_name(request)} <{self.sender(request)}>",
            f"To: {', '.join(request.to)}",
        ]
        if request.cc:
            lines.append(f"CC: {', '.join(request.cc)}")
        if request.bcc:
            lines.append(f"BCC: {', '.join(request.bcc)}")
        lines.append(f"Subject: {request.subject}")
        lines.append("--- TEXT ---")
        lines.append(request.text)
        if request.html:
            lines.append("--- HTML ---")
            lines.append(request.html)
        lines.append("=== END EMAIL ===")

        logger.info("\n".join(lines))
        return SendResult.ok(f"console-{now_ms()}")
