"""Offer Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from internhub.schemas.candidate import CandidateBrief
from internhub.schemas.common import CamelModel


class OfferDetails(CamelModel):
    """Template values for the offer email; unset fields fall back to settings."""

    position: str | None = None
    department: str | None = None
    mode: str | None = None
    duration: str | None = None


class OfferCreate(CamelModel):
    candidate_id: str
    email: str | None = None
    mobile: str | None = None


class OfferSend(OfferCreate):
    details: OfferDetails = Field(default_factory=OfferDetails)


class OfferResend(CamelModel):
    offer_id: str
    notify: bool = True
    details: OfferDetails = Field(default_factory=OfferDetails)


class OfferRespond(CamelModel):
    token: str = Field(..., min_length=1)
    action: Literal["accept", "decline"]


class PhysicalLetterUpdate(CamelModel):
    offer_id: str
    collected: bool


class OfferOut(CamelModel):
    id: str
    candidate_id: str
    email: str
    mobile: str | None = None
    status: str
    sent_at: datetime
    expires_at: datetime
    responded_at: datetime | None = None
    physical_letter_collected: bool = False
    created_at: datetime
    updated_at: datetime
    candidate: CandidateBrief | None = None


class OfferIssued(CamelModel):
    """Returned by create/send/resend: the link token is needed to build the email."""

    offer_id: str
    token: str
    status: str
    sent_at: datetime
    expires_at: datetime
    email_sent: bool = False


class OfferStatusOut(CamelModel):
    candidate_id: str
    status: str


class OfferResponseOut(CamelModel):
    success: bool = True
    status: str


class OfferPreview(CamelModel):
    """What the public response page shows before the candidate clicks."""

    full_name: str | None = None
    status: str
    expires_at: datetime


class PhysicalLetterResult(CamelModel):
    success: bool = True
    message: str
    offer: OfferOut
    profile_updated: bool = False


class ExpirySweepResult(CamelModel):
    expired: int


class OfferLetterSyncResult(CamelModel):
    success: bool = True
    message: str
    matched: int
    updated: int
