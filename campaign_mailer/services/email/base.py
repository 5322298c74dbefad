"""
Delivery backend base class.

Every transport (console, SendGrid, Mailgun, queue) exposes the same
contract:

    result = await backend.send(SendRequest(...))

send() never raises. Subclasses implement _send(); anything it raises is
logged and turned into SendResult(success=False, error=...). Recipient
normalisation (str -> list) happens once, in SendRequest, before a backend
ever sees the request.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from campaign_mailer.models.email import SendRequest, SendResult

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class EmailBackend(ABC):
    """Common behaviour for all delivery backends."""

    #: Registry name, also reported by the health endpoint.
    name: str = "base"

    def __init__(self, from_email: str, from_name: str):
        self.from_email = from_email
        self.from_name = from_name

    def sender(self, request: SendRequest) -> str:
        return request.from_email or self.from_email

    def sender_name(self, request: SendRequest) -> str:
        return request.from_name or self.from_name

    async def send(self, request: SendRequest) -> SendResult:
        """Send (or enqueue) one message. Failures come back as a result, never an exception."""
        try:
            return await self._send(request)
        except Exception as e:
            logger.exception(f"{self.name} backend failed to send '{request.subject}'")
            return SendResult.failure(str(e) or type(e).__name__)

    @abstractmethod
    async def _send(self, request: SendRequest) -> SendResult:
        ...

    def describe(self) -> dict:
        """Non-secret summary of this backend for the health endpoint."""
        return {
            "provider": self.name,
            "from": self.from_email,
            "from_name": self.from_name,
        }

    async def aclose(self) -> None:
        """Release any resources held by the backend."""


class HttpEmailBackend(EmailBackend):
    """
    Base for backends that call a provider's HTTP API.

    A shared httpx.AsyncClient may be injected (tests pass one built on
    httpx.MockTransport); otherwise a short-lived client is opened per send.
    Timeouts and connection errors surface as httpx exceptions, which send()
    turns into failed results like any other transport error.
    """

    def __init__(
        self,
        from_email: str,
        from_name: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(from_email, from_name)
        self.timeout = timeout
        self._client = client

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, **kwargs)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
