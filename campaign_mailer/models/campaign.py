"""
Pydantic models for the MP email flow.

The campaign definition itself is loaded by the caller; these models only
describe the pieces the email composer needs.
"""

from typing import List, Optional
from pydantic import BaseModel


class CampaignEmail(BaseModel):
    """Campaign-level email settings: subject, body and fixed CC/BCC lists."""
    subject: str
    body: str
    cc: List[str] = []
    bcc: List[str] = []


class MP(BaseModel):
    name: str
    constituency: str
    email: Optional[str] = None
    party: Optional[str] = None


class Constituent(BaseModel):
    """The person writing to their MP. Always CC'd on the MP email."""
    name: str
    email: str
    postcode: str
    address: Optional[str] = None


class PreviewMP(BaseModel):
    """MP details as sent by the form; completeness is checked by validate_mp."""
    name: str = ""
    constituency: str = ""
    email: Optional[str] = None


class PreviewRequest(BaseModel):
    """Request body for POST /api/email/preview."""
    name: str = ""
    email: str = ""
    postcode: str = ""
    mp: Optional[PreviewMP] = None
    campaign: CampaignEmail
