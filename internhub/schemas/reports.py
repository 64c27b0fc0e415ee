"""Dashboard and summary response models (chart-ready shapes)."""


from datetime import datetime
from typing import Literal

from internhub.schemas.common import CamelModel, DatedCount, NamedCount


class RecentCandidate(CamelModel):
    key: str
    name: str
    email: str
    college: str | None = None
    skills: int
    applied: str


class RecentOffer(CamelModel):
    key: str
    name: str
    email: str
    status: str
    sent_at: datetime


class DashboardStats(CamelModel):
    # Candidates
    total_students: int
    unique_colleges: int
    unique_skills: int
    avg_skills_per_student: str
    total_skills_mentioned: int
    students_with_skills: int
    college_data: list[NamedCount]
    skill_data: list[NamedCount]
    domain_data: list[NamedCount]
    year_data: list[NamedCount]
    daily_applications: list[DatedCount]

    # Offers
    total_offers: int
    not_sent: int
    pending: int
    accepted: int
    declined: int
    expired: int
    response_rate: int
    daily_offers: list[DatedCount]
    top_colleges_by_acceptance: list[NamedCount]

    recent_students: list[RecentCandidate]
    recent_offers: list[RecentOffer]


class OfferSummary(CamelModel):
    total: int
    not_sent: int
    pending: int
    accepted: int
    declined: int
    expired: int
    daily_trend: list[DatedCount]
    college_distribution: list[NamedCount]


class DomainPreferenceSummary(CamelModel):
    total: int
    domain_stats: dict[str, int]
    college_stats: dict[str, int]
    skill_level_stats: dict[str, int]
    skill_level_by_domain: dict[str, dict[str, int]]
    technology_stats: dict[str, int]
    monthly_stats: dict[str, int]


class InternTotals(CamelModel):
    total_interns: int
    active_interns: int
    completed_interns: int
    terminated_interns: int
    fee_paid_interns: int
    certificate_issued_interns: int
    offer_letter_issued_interns: int


class DomainBreakdown(CamelModel):
    domain: str
    total: int = 0
    active: int = 0
    completed: int = 0
    terminated: int = 0
    fee_paid: int = 0
    certificate_issued: int = 0


class MonthlyConversion(CamelModel):
    month: str
    count: int
    domains: dict[str, int]


class InternActivity(CamelModel):
    id: str
    full_name: str
    email: str
    preferred_domain: str | None = None
    internship_status: str | None = None
    created_at: datetime
    updated_at: datetime
    activity: Literal["created", "updated"]


class SkillLevelCount(CamelModel):
    level: str
    count: int


class InternRow(CamelModel):
    """Flattened intern + profile row used by the intern summary."""

    id: str
    full_name: str
    email: str
    college_name: str | None = None
    preferred_domain: str | None = None
    skill_level: str | None = None
    offer_status: str | None = None
    internship_status: str | None = None
    internship_fee_paid: bool = False
    offer_letter_issued: bool = False
    certificate_issued: bool = False
    joined_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    profile_updated_at: datetime | None = None


class InternSummary(CamelModel):
    total_stats: InternTotals
    domain_stats: list[DomainBreakdown]
    monthly_conversions: list[MonthlyConversion]
    recent_activity: list[InternActivity]
    skill_level_stats: list[SkillLevelCount]
    interns: list[InternRow]
