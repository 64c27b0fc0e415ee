"""Intern Pydantic schemas (conversion/update DTOs and response models)."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from internhub.schemas.common import CamelModel


class InternConvert(CamelModel):
    student_id: str = Field(..., min_length=1)
    offer_id: str = Field(..., min_length=1)
    domain_preference_id: str = Field(..., min_length=1)


class InternUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    # Intern
    full_name: str | None = None
    email: str | None = None
    mobile: str | None = None
    college_name: str | None = None
    degree: str | None = None
    branch: str | None = None
    year_of_study: str | None = None
    city_state: str | None = None
    address: str | None = None

    # Profile
    preferred_domain: str | None = None
    skill_level: str | None = None
    technical_skills: list[str] | None = None
    prior_experience: str | None = None
    portfolio_url: str | None = None
    offer_status: Literal["not_sent", "sent", "accepted", "declined", "expired"] | None = None
    internship_status: Literal["not_started", "active", "completed", "terminated"] | None = None
    internship_fee_paid: bool | None = None
    offer_letter_issued: bool | None = None
    offer_letter_url: str | None = None
    certificate_issued: bool | None = None
    certificate_url: str | None = None
    notes: str | None = None


class InternProfileOut(CamelModel):
    id: str
    intern_id: str
    preferred_domain: str | None = None
    skill_level: str | None = None
    technical_skills: list[str] = []
    prior_experience: str | None = None
    portfolio_url: str | None = None
    offer_status: str
    internship_status: str
    internship_fee_paid: bool
    fee_paid_at: datetime | None = None
    offer_letter_issued: bool
    offer_letter_issued_at: datetime | None = None
    offer_letter_url: str | None = None
    certificate_issued: bool
    certificate_issued_at: datetime | None = None
    certificate_url: str | None = None
    joined_at: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class InternOut(CamelModel):
    id: str
    full_name: str
    email: str
    mobile: str | None = None
    college_name: str | None = None
    degree: str | None = None
    branch: str | None = None
    year_of_study: str | None = None
    city_state: str | None = None
    address: str | None = None
    created_at: datetime
    updated_at: datetime
    profile: InternProfileOut | None = None


class InternBrief(CamelModel):
    id: str
    full_name: str
    email: str
    created_at: datetime


class ReconcileResult(CamelModel):
    repaired: int
    intern_ids: list[str]
