"""
Queue backend: persists each message to the queue store instead of sending it.

A successful result means the record was written, nothing more. Delivery
happens later, outside this service, by a consumer that drains the queue
through POST /api/queue/drain.
"""

import logging

from campaign_mailer.models.email import MessageRecord, SendRequest, SendResult
from campaign_mailer.services.email.base import EmailBackend
from campaign_mailer.services.queue_store import QueueStore

logger = logging.getLogger(__name__)


class QueueEmailBackend(EmailBackend):
    name = "queue"

    def __init__(self, store: QueueStore, from_email: str, from_name: str):
        super().__init__(from_email, from_name)
        self.store = store

    async def _send(self, request: SendRequest) -> SendResult:
        record = MessageRecord.from_request(request, self.from_email, self.from_name)

        await self.store.put(record.id, record.to_json_dict())

        logger.info(
            f"Email queued: {record.id} to={', '.join(record.to)} subject='{record.subject}'"
        )
        return SendResult.ok(record.id)

    def describe(self) -> dict:
        summary = super().describe()
        summary["store"] = type(self.store).__name__
        return summary
