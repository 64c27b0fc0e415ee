"""Dashboard and summary aggregations.

The module-level functions are pure: they take already-loaded rows and a
``now`` and return chart-ready response models, so they can be tested
without a database. :class:`ReportService` loads the rows and calls them.
Offer statuses are read through :func:`effective_status`, so a pending
offer past its window is reported as expired even before anything wrote
the transition.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.pagination import PaginationParams
from internhub.domain.candidate import Candidate
from internhub.domain.domain_preference import DomainPreference
from internhub.domain.intern import Intern, InternProfile, InternshipStatus
from internhub.domain.mixins import utcnow
from internhub.domain.offer import NOT_SENT, Offer, OfferStatus
from internhub.repositories.candidate import CandidateRepository
from internhub.repositories.domain_preference import DomainPreferenceRepository
from internhub.repositories.intern import InternRepository
from internhub.repositories.offer import OfferRepository
from internhub.schemas.candidate import CandidateWithOfferStatus, DomainPreferenceFilters
from internhub.schemas.common import DatedCount, NamedCount
from internhub.schemas.reports import (
    DashboardStats,
    DomainBreakdown,
    DomainPreferenceSummary,
    InternActivity,
    InternRow,
    InternSummary,
    InternTotals,
    MonthlyConversion,
    OfferSummary,
    RecentCandidate,
    RecentOffer,
    SkillLevelCount,
)
from internhub.services.offers import is_expired

UNKNOWN = "Unknown"
# Placeholder strings that leak in from the spreadsheet as college names
_JUNK_COLLEGES = frozenset({"", "undefined", "null"})

InternWithProfile = tuple[Intern, InternProfile | None]


# ---------------------------------------------------------------------------
# Small helpers
# ---------------------------------------------------------------------------

def effective_status(offer: Offer, now: datetime) -> str:
    return OfferStatus.EXPIRED.value if is_expired(offer, now) else offer.status


def short_day_label(moment: datetime | date) -> str:
    """``Oct 19`` style label used by the dashboard's daily series."""
    return f"{moment:%b} {moment.day}"


def _named(counter: Counter, limit: int | None = None) -> list[NamedCount]:
    return [NamedCount(name=name, value=value) for name, value in counter.most_common(limit)]


def _top(counter: Counter, limit: int | None = None) -> dict[str, int]:
    return dict(counter.most_common(limit))


def _daily_series(moments: Iterable[datetime]) -> list[DatedCount]:
    """Counts per calendar day, labelled ``Mon D`` and ordered by month then day."""
    buckets: Counter = Counter()
    labels: dict[tuple[int, int], str] = {}
    for moment in moments:
        key = (moment.month, moment.day)
        labels[key] = short_day_label(moment)
        buckets[key] += 1
    return [DatedCount(date=labels[key], count=buckets[key]) for key in sorted(buckets)]


def _offer_counts(offers: Sequence[Offer], now: datetime) -> Counter:
    counts: Counter = Counter({status.value: 0 for status in OfferStatus})
    for offer in offers:
        counts[effective_status(offer, now)] += 1
    return counts


def _not_sent(candidate_count: int, offers: Sequence[Offer]) -> int:
    return candidate_count - len({o.candidate_id for o in offers})


def _accepted_by_college(offers: Sequence[Offer], colleges: dict[str, str | None], now: datetime) -> Counter:
    counter: Counter = Counter()
    for offer in offers:
        if effective_status(offer, now) != OfferStatus.ACCEPTED.value:
            continue
        college = colleges.get(offer.candidate_id)
        if college:
            counter[college] += 1
    return counter


# ---------------------------------------------------------------------------
# Pure aggregations
# ---------------------------------------------------------------------------

def dashboard_stats(candidates: Sequence[Candidate], offers: Sequence[Offer], now: datetime) -> DashboardStats:
    colleges: Counter = Counter()
    domains: Counter = Counter()
    years: Counter = Counter()
    skills: Counter = Counter()
    total_skills = 0
    with_skills = 0

    for c in candidates:
        if c.college_name:
            colleges[c.college_name] += 1
        if c.preferred_domain:
            domains[c.preferred_domain] += 1
        if c.year_of_study:
            years[c.year_of_study] += 1
        if c.technical_skills:
            with_skills += 1
            total_skills += len(c.technical_skills)
            for skill in c.technical_skills:
                if skill and skill.strip():
                    skills[skill] += 1

    counts = _offer_counts(offers, now)
    total_offers = len(offers)
    not_sent = _not_sent(len(candidates), offers)

    denominator = total_offers - not_sent
    if denominator > 0:
        ratio = (counts[OfferStatus.ACCEPTED.value] + counts[OfferStatus.DECLINED.value]) / denominator
        response_rate = int(ratio * 100 + 0.5)
    else:
        response_rate = 0

    by_id = {c.id: c for c in candidates}
    recent_candidates = sorted(candidates, key=lambda c: c.created_at, reverse=True)[:5]
    recent_offers = sorted(offers, key=lambda o: o.sent_at, reverse=True)[:5]

    return DashboardStats(
        total_students=len(candidates),
        unique_colleges=len(colleges),
        unique_skills=len(skills),
        avg_skills_per_student=f"{total_skills / with_skills:.1f}" if with_skills else "0",
        total_skills_mentioned=total_skills,
        students_with_skills=with_skills,
        college_data=_named(colleges),
        skill_data=_named(skills, 15),
        domain_data=_named(domains),
        year_data=_named(years),
        daily_applications=_daily_series(c.created_at for c in candidates if c.created_at),
        total_offers=total_offers,
        not_sent=not_sent,
        pending=counts[OfferStatus.PENDING.value],
        accepted=counts[OfferStatus.ACCEPTED.value],
        declined=counts[OfferStatus.DECLINED.value],
        expired=counts[OfferStatus.EXPIRED.value],
        response_rate=response_rate,
        daily_offers=_daily_series(o.sent_at for o in offers),
        top_colleges_by_acceptance=_named(
            _accepted_by_college(offers, {c.id: c.college_name for c in candidates}, now), 10
        ),
        recent_students=[
            RecentCandidate(
                key=c.id,
                name=c.full_name,
                email=c.email,
                college=c.college_name,
                skills=len(c.technical_skills or []),
                applied=f"{c.created_at.month}/{c.created_at.day}/{c.created_at.year}",
            )
            for c in recent_candidates
        ],
        recent_offers=[
            RecentOffer(
                key=o.id,
                name=by_id[o.candidate_id].full_name if o.candidate_id in by_id else UNKNOWN,
                email=o.email,
                status=effective_status(o, now),
                sent_at=o.sent_at,
            )
            for o in recent_offers
        ],
    )


def offer_summary(candidates: Sequence[Candidate], offers: Sequence[Offer], now: datetime) -> OfferSummary:
    counts = _offer_counts(offers, now)

    since = now - timedelta(days=30)
    trend: Counter = Counter(o.sent_at.strftime("%Y-%m-%d") for o in offers if o.sent_at >= since)

    return OfferSummary(
        total=len(candidates),
        not_sent=_not_sent(len(candidates), offers),
        pending=counts[OfferStatus.PENDING.value],
        accepted=counts[OfferStatus.ACCEPTED.value],
        declined=counts[OfferStatus.DECLINED.value],
        expired=counts[OfferStatus.EXPIRED.value],
        daily_trend=[DatedCount(date=day, count=trend[day]) for day in sorted(trend)],
        college_distribution=_named(
            _accepted_by_college(offers, {c.id: c.college_name for c in candidates}, now), 10
        ),
    )


def domain_preference_summary(preferences: Sequence[DomainPreference]) -> DomainPreferenceSummary:
    domains: Counter = Counter()
    colleges: Counter = Counter()
    levels: Counter = Counter()
    by_domain: dict[str, Counter] = defaultdict(Counter)
    technologies: Counter = Counter()
    months: Counter = Counter()

    for p in preferences:
        domain = p.domain or UNKNOWN
        level = p.skill_level or UNKNOWN
        domains[domain] += 1
        colleges[p.college_name or UNKNOWN] += 1
        levels[level] += 1
        by_domain[domain][level] += 1
        for tech in p.technologies or []:
            if tech and tech.strip():
                technologies[tech] += 1
        if p.submitted_at:
            months[p.submitted_at.strftime("%Y-%m")] += 1

    return DomainPreferenceSummary(
        total=len(preferences),
        domain_stats=_top(domains, 10),
        college_stats=_top(colleges, 10),
        skill_level_stats=dict(levels),
        skill_level_by_domain={d: dict(c) for d, c in by_domain.items()},
        technology_stats=_top(technologies, 15),
        monthly_stats=dict(months),
    )


def domain_preference_filters(preferences: Sequence[DomainPreference]) -> DomainPreferenceFilters:
    return DomainPreferenceFilters(
        colleges=sorted({p.college_name for p in preferences if p.college_name}),
        domains=sorted({p.domain for p in preferences if p.domain}),
        skill_levels=sorted({p.skill_level for p in preferences if p.skill_level}),
    )


def _intern_row(intern: Intern, profile: InternProfile | None) -> InternRow:
    if profile is None:
        return InternRow(
            id=intern.id,
            full_name=intern.full_name,
            email=intern.email,
            college_name=intern.college_name,
            created_at=intern.created_at,
            updated_at=intern.updated_at,
        )
    return InternRow(
        id=intern.id,
        full_name=intern.full_name,
        email=intern.email,
        college_name=intern.college_name,
        preferred_domain=profile.preferred_domain,
        skill_level=profile.skill_level,
        offer_status=profile.offer_status,
        internship_status=profile.internship_status,
        internship_fee_paid=profile.internship_fee_paid,
        offer_letter_issued=profile.offer_letter_issued,
        certificate_issued=profile.certificate_issued,
        joined_at=profile.joined_at,
        completed_at=profile.completed_at,
        created_at=intern.created_at,
        updated_at=intern.updated_at,
        profile_updated_at=profile.updated_at,
    )


def intern_summary(rows: Sequence[InternWithProfile], now: datetime) -> InternSummary:
    """Rows are expected newest first (as returned by the intern repository)."""
    flat = [_intern_row(intern, profile) for intern, profile in rows]

    def _count(predicate: Callable[[InternRow], bool]) -> int:
        return sum(1 for r in flat if predicate(r))

    totals = InternTotals(
        total_interns=len(flat),
        active_interns=_count(lambda r: r.internship_status == InternshipStatus.ACTIVE.value),
        completed_interns=_count(lambda r: r.internship_status == InternshipStatus.COMPLETED.value),
        terminated_interns=_count(lambda r: r.internship_status == InternshipStatus.TERMINATED.value),
        fee_paid_interns=_count(lambda r: r.internship_fee_paid),
        certificate_issued_interns=_count(lambda r: r.certificate_issued),
        offer_letter_issued_interns=_count(lambda r: r.offer_letter_issued),
    )

    domains: dict[str, DomainBreakdown] = {}
    months: dict[str, MonthlyConversion] = {}
    levels: Counter = Counter()
    for r in flat:
        domain = r.preferred_domain or UNKNOWN
        d = domains.setdefault(domain, DomainBreakdown(domain=domain))
        d.total += 1
        if r.internship_status == InternshipStatus.ACTIVE.value:
            d.active += 1
        elif r.internship_status == InternshipStatus.COMPLETED.value:
            d.completed += 1
        elif r.internship_status == InternshipStatus.TERMINATED.value:
            d.terminated += 1
        if r.internship_fee_paid:
            d.fee_paid += 1
        if r.certificate_issued:
            d.certificate_issued += 1

        month = r.created_at.strftime("%Y-%m")
        m = months.setdefault(month, MonthlyConversion(month=month, count=0, domains={}))
        m.count += 1
        m.domains[domain] = m.domains.get(domain, 0) + 1

        levels[r.skill_level or UNKNOWN] += 1

    since = now - timedelta(days=30)
    recent = [
        InternActivity(
            id=r.id,
            full_name=r.full_name,
            email=r.email,
            preferred_domain=r.preferred_domain,
            internship_status=r.internship_status,
            created_at=r.created_at,
            updated_at=r.profile_updated_at or r.updated_at,
            activity="created" if r.created_at >= since else "updated",
        )
        for r in flat
        if r.created_at >= since or (r.profile_updated_at and r.profile_updated_at >= since)
    ]

    return InternSummary(
        total_stats=totals,
        domain_stats=list(domains.values()),
        monthly_conversions=sorted(months.values(), key=lambda m: m.month, reverse=True),
        recent_activity=recent,
        skill_level_stats=[SkillLevelCount(level=k, count=v) for k, v in levels.items()],
        interns=flat[:10],
    )


def candidates_with_offer_status(
    candidates: Sequence[Candidate], offers: Sequence[Offer], now: datetime
) -> list[CandidateWithOfferStatus]:
    """Each candidate with the status of its most recently sent offer."""
    latest: dict[str, Offer] = {}
    for offer in offers:
        current = latest.get(offer.candidate_id)
        if current is None or offer.sent_at > current.sent_at:
            latest[offer.candidate_id] = offer

    rows = []
    for c in candidates:
        offer = latest.get(c.id)
        rows.append(
            CandidateWithOfferStatus(
                id=c.id,
                full_name=c.full_name,
                email=c.email,
                mobile=c.mobile,
                college_name=c.college_name,
                degree=c.degree,
                branch=c.branch,
                year_of_study=c.year_of_study,
                technical_skills=list(c.technical_skills or []),
                city_state=c.city_state,
                created_at=c.created_at,
                offer_status=effective_status(offer, now) if offer else NOT_SENT,
                offer_id=offer.id if offer else None,
                offer_sent_at=offer.sent_at if offer else None,
                offer_expires_at=offer.expires_at if offer else None,
            )
        )
    return rows


def college_names(candidates: Iterable[Candidate]) -> list[str]:
    """Distinct college names compared case-insensitively, first spelling kept."""
    seen: dict[str, str] = {}
    for c in candidates:
        name = c.college_name
        if name is None or name.strip().lower() in _JUNK_COLLEGES:
            continue
        seen.setdefault(name.lower(), name)
    return sorted(seen.values())


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ReportService:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._candidates = CandidateRepository(session)
        self._offers = OfferRepository(session)
        self._preferences = DomainPreferenceRepository(session)
        self._interns = InternRepository(session)

    async def dashboard(self) -> DashboardStats:
        return dashboard_stats(await self._candidates.all(), await self._offers.all(), self._clock())

    async def offer_summary(self) -> OfferSummary:
        return offer_summary(await self._candidates.all(), await self._offers.all(), self._clock())

    async def domain_preference_summary(self) -> DomainPreferenceSummary:
        return domain_preference_summary(await self._preferences.all())

    async def domain_preference_filters(self) -> DomainPreferenceFilters:
        return domain_preference_filters(await self._preferences.all())

    async def intern_summary(self) -> InternSummary:
        return intern_summary(await self._interns.with_profiles(), self._clock())

    async def candidates_with_offer_status(self) -> list[CandidateWithOfferStatus]:
        return candidates_with_offer_status(
            await self._candidates.all(), await self._offers.all(), self._clock()
        )

    async def college_names(self) -> list[str]:
        return college_names(await self._candidates.all(order="asc"))

    async def list_candidates(
        self,
        pagination: PaginationParams,
        search: str | None = None,
        college: str | None = None,
    ) -> tuple[list[Candidate], int]:
        return await self._candidates.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            conditions=CandidateRepository.search_conditions(search, college),
        )

    async def list_domain_preferences(
        self,
        pagination: PaginationParams,
        search: str | None = None,
        domain: str | None = None,
        college: str | None = None,
        skill_level: str | None = None,
    ) -> tuple[list[DomainPreference], int]:
        return await self._preferences.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            conditions=DomainPreferenceRepository.search_conditions(
                search, domain, college, skill_level
            ),
        )
