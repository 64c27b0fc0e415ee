"""Candidate and domain-preference response models, plus sync results."""


from datetime import datetime

from internhub.schemas.common import CamelModel


class CandidateOut(CamelModel):
    id: str
    submitted_at: datetime | None = None
    full_name: str
    email: str
    mobile: str | None = None
    city_state: str | None = None
    address: str | None = None
    college_name: str | None = None
    degree: str | None = None
    branch: str | None = None
    year_of_study: str | None = None
    preferred_domain: str | None = None
    technical_skills: list[str] = []
    prior_experience: str | None = None
    portfolio_url: str | None = None
    created_at: datetime
    updated_at: datetime


class CandidateBrief(CamelModel):
    id: str
    full_name: str
    email: str
    mobile: str | None = None
    college_name: str | None = None


class CandidateWithOfferStatus(CamelModel):
    id: str
    full_name: str
    email: str
    mobile: str | None = None
    college_name: str | None = None
    degree: str | None = None
    branch: str | None = None
    year_of_study: str | None = None
    technical_skills: list[str] = []
    city_state: str | None = None
    created_at: datetime
    offer_status: str = "not_sent"
    offer_id: str | None = None
    offer_sent_at: datetime | None = None
    offer_expires_at: datetime | None = None


class CollegeList(CamelModel):
    colleges: list[str]
    count: int


class DomainPreferenceOut(CamelModel):
    id: str
    submitted_at: datetime | None = None
    full_name: str
    email: str
    contact_number: str | None = None
    college_name: str | None = None
    year_of_study: str | None = None
    domain: str | None = None
    skill_level: str | None = None
    interest_reason: str | None = None
    technologies: list[str] = []
    email_address: str | None = None
    portfolio_url: str | None = None


class DomainPreferenceFilters(CamelModel):
    colleges: list[str]
    domains: list[str]
    skill_levels: list[str]


class CandidateSyncResult(CamelModel):
    total_sheet_rows: int
    inserted: int
    updated: int
    skipped: int


class DomainPreferenceImportResult(CamelModel):
    total_sheet_rows: int
    imported: int
    skipped: int
