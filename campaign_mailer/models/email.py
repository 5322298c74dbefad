"""
Pydantic models for outbound email.

Models:
  SendRequest    - what a caller asks a delivery backend to send
  SendResult     - what every delivery backend returns
  MessageRecord  - the immutable queued email stored by the queue backend

Wire names follow the queue consumer's JSON contract, so ``from_email``,
``from_name``, ``message_id`` and ``created_at`` serialise as ``from``,
``fromName``, ``messageId`` and ``createdAt``.
"""

import time
from typing import Any, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


Recipients = Union[str, List[str]]


def _as_list(value: Any) -> Any:
    """Wrap a single address in a list; leave lists (and None) alone."""
    if isinstance(value, str):
        return [value]
    return value


class SendRequest(BaseModel):
    """
    A send request accepted by every delivery backend.

    ``to``/``cc``/``bcc`` accept a single address or a list and are always
    lists after validation. ``to``, ``subject`` and ``text`` must be non-blank.
    """
    model_config = {"populate_by_name": True}

    to: List[str] = Field(min_length=1)
    cc: Optional[List[str]] = None
    bcc: Optional[List[str]] = None
    subject: str = Field(min_length=1)
    text: str = Field(min_length=1)
    html: Optional[str] = None
    from_email: Optional[str] = Field(default=None, alias="from")
    from_name: Optional[str] = Field(default=None, alias="fromName")

    @field_validator("to", "cc", "bcc", mode="before")
    @classmethod
    def normalize_recipients(cls, v: Any) -> Any:
        return _as_list(v)

    @field_validator("to")
    @classmethod
    def reject_blank_recipients(cls, v: List[str]) -> List[str]:
        if any(not addr or not addr.strip() for addr in v):
            raise ValueError("recipient addresses must not be blank")
        return v

    @field_validator("subject", "text")
    @classmethod
    def reject_blank_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class SendResult(BaseModel):
    """Outcome of a single send. ``message_id`` is set on success, ``error`` on failure."""
    model_config = {"populate_by_name": True}

    success: bool
    message_id: Optional[str] = Field(default=None, alias="messageId")
    error: Optional[str] = None

    @classmethod
    def ok(cls, message_id: str) -> "SendResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def failure(cls, error: str) -> "SendResult":
        return cls(success=False, error=error or "Unknown error")


class MessageRecord(BaseModel):
    """
    A queued email, fully resolved at enqueue time.

    Records are written once and never updated: the queue store only ever
    reads or deletes them. ``created_at`` is milliseconds since the epoch.
    """
    model_config = {"populate_by_name": True, "frozen": True}

    id: str
    to: List[str] = Field(min_length=1)
    cc: Optional[List[str]] = None
    bcc: Optional[List[str]] = None
    subject: str
    text: str
    html: Optional[str] = None
    from_email: str = Field(alias="from")
    from_name: str = Field(alias="fromName")
    created_at: int = Field(alias="createdAt")

    @classmethod
    def from_request(
        cls,
        request: SendRequest,
        default_from: str,
        default_from_name: str,
    ) -> "MessageRecord":
        """Build a new record with a fresh uuid4 id and the current time."""
        return cls(
            id=str(uuid4()),
            to=list(request.to),
            cc=list(request.cc) if request.cc else None,
            bcc=list(request.bcc) if request.bcc else None,
            subject=request.subject,
            text=request.text,
            html=request.html,
            from_email=request.from_email or default_from,
            from_name=request.from_name or default_from_name,
            created_at=int(time.time() * 1000),
        )

    def to_json_dict(self) -> dict:
        """JSON-ready dict using wire names, with unset optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
