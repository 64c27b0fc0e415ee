"""Intern service — candidate → intern conversion, intern edits and profile repair.

Conversion writes two rows (intern, then profile). When the profile write
fails the session is rolled back, which undoes the intern insert, and the
caller gets a PartialFailureError. Interns that still end up without a profile
(older data, manual edits) are found by :meth:`InternService.find_orphans` and
repaired by :meth:`InternService.reconcile_orphans`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.exceptions import ConflictError, MismatchError, NotFoundError, PartialFailureError
from internhub.domain.audit import AuditAction, AuditEntity
from internhub.domain.intern import Intern, InternProfile, InternshipStatus, ProfileOfferStatus
from internhub.domain.mixins import utcnow
from internhub.domain.offer import Offer, OfferStatus
from internhub.repositories.candidate import CandidateRepository
from internhub.repositories.domain_preference import DomainPreferenceRepository
from internhub.repositories.intern import InternProfileRepository, InternRepository
from internhub.repositories.offer import OfferRepository
from internhub.schemas.intern import InternUpdate
from internhub.services.audit import AuditLogger, RequestMeta, describe_changes, detect_changes

logger = logging.getLogger(__name__)

INTERN_FIELDS = (
    "full_name", "email", "mobile", "college_name", "degree",
    "branch", "year_of_study", "city_state", "address",
)
PROFILE_FIELDS = (
    "preferred_domain", "skill_level", "technical_skills", "prior_experience",
    "portfolio_url", "offer_status", "internship_status", "internship_fee_paid",
    "offer_letter_issued", "offer_letter_url", "certificate_issued",
    "certificate_url", "notes",
)
# Required intern fields are only overwritten by non-empty values
_REQUIRED_INTERN_FIELDS = frozenset({"full_name", "email"})
# NOT NULL profile columns; an explicit null leaves them unchanged
_NON_NULL_PROFILE_FIELDS = frozenset(
    {"offer_status", "internship_status", "internship_fee_paid", "offer_letter_issued",
     "certificate_issued", "technical_skills"}
)

# Boolean flag -> timestamp stamped when the flag flips to true
_FLAG_TIMESTAMPS = {
    "internship_fee_paid": "fee_paid_at",
    "offer_letter_issued": "offer_letter_issued_at",
    "certificate_issued": "certificate_issued_at",
}

_OFFER_TO_PROFILE_STATUS = {
    OfferStatus.PENDING.value: ProfileOfferStatus.NOT_SENT.value,
    OfferStatus.ACCEPTED.value: ProfileOfferStatus.ACCEPTED.value,
    OfferStatus.DECLINED.value: ProfileOfferStatus.DECLINED.value,
    OfferStatus.EXPIRED.value: ProfileOfferStatus.EXPIRED.value,
}


def normalize_name(name: str) -> str:
    """``"jane.DOE"`` -> ``"Jane Doe"``. Idempotent."""
    words = name.replace(".", " ").split()
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def profile_offer_status(offer: Offer | None) -> str:
    if offer is None:
        return ProfileOfferStatus.NOT_SENT.value
    return _OFFER_TO_PROFILE_STATUS.get(offer.status, ProfileOfferStatus.NOT_SENT.value)


def _short_date(moment: datetime) -> str:
    return f"{moment.month}/{moment.day}/{moment.year}"


class InternService:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self._session = session
        self._clock = clock
        self._candidates = CandidateRepository(session)
        self._offers = OfferRepository(session)
        self._preferences = DomainPreferenceRepository(session)
        self._interns = InternRepository(session)
        self._profiles = InternProfileRepository(session)
        self._audit = AuditLogger(session)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    async def convert(
        self,
        student_id: str,
        offer_id: str,
        domain_preference_id: str,
        meta: RequestMeta | None = None,
    ) -> tuple[Intern, InternProfile]:
        candidate = await self._candidates.get_by_id(student_id)
        if not candidate:
            raise NotFoundError("Candidate", student_id)

        offer = await self._offers.get_by_id(offer_id)
        if not offer:
            raise NotFoundError("Offer", offer_id)

        # Joined by candidate email; the supplied id is informational only
        preference = await self._preferences.get_by_email(candidate.email)
        if not preference:
            raise NotFoundError("Domain preference")
        if preference.id != domain_preference_id:
            logger.info(
                "Domain preference %s requested, %s matched by email",
                domain_preference_id, preference.id,
            )

        if candidate.email != offer.email:
            raise MismatchError("Email mismatch between candidate and offer records")
        if candidate.mobile and offer.mobile and candidate.mobile != offer.mobile:
            raise MismatchError("Phone number mismatch between candidate and offer records")

        if await self._interns.get_by_email(candidate.email):
            raise ConflictError(f"An intern with email {candidate.email} already exists")

        email = candidate.email
        now = self._clock()
        intern = await self._interns.create(
            full_name=normalize_name(candidate.full_name),
            email=candidate.email,
            mobile=candidate.mobile,
            college_name=candidate.college_name,
            degree=candidate.degree,
            branch=candidate.branch,
            year_of_study=candidate.year_of_study,
            city_state=candidate.city_state,
            address=candidate.address,
        )

        try:
            profile = await self._profiles.create(
                intern_id=intern.id,
                preferred_domain=preference.domain,
                skill_level=preference.skill_level,
                technical_skills=list(candidate.technical_skills or []),
                prior_experience=candidate.prior_experience or "",
                portfolio_url=preference.portfolio_url or "",
                offer_status=profile_offer_status(offer),
                internship_status=InternshipStatus.ACTIVE.value,
                internship_fee_paid=False,
                offer_letter_issued=bool(offer.physical_letter_collected),
                certificate_issued=False,
                joined_at=now,
                notes=f"Converted from candidate record on {_short_date(now)}",
            )
        except SQLAlchemyError as exc:
            # Compensate: the rollback discards the intern insert as well
            await self._session.rollback()
            logger.error(
                "Profile write failed for intern %s; intern insert rolled back", email, exc_info=True,
            )
            raise PartialFailureError(
                f"Intern {email} could not be created: profile write failed"
            ) from exc

        await self._audit.record(
            AuditEntity.INTERN,
            intern.id,
            AuditAction.CREATE,
            description=f"Created intern from candidate {candidate.full_name}",
            meta=meta,
        )
        await self._audit.record(
            AuditEntity.INTERN_PROFILE,
            profile.id,
            AuditAction.CREATE,
            description=f"Created intern profile for {intern.full_name}",
            meta=meta,
        )
        logger.info("Candidate %s converted to intern %s", candidate.id, intern.id)
        return intern, profile

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_intern(
        self, intern_id: str, body: InternUpdate, meta: RequestMeta | None = None
    ) -> tuple[Intern, InternProfile]:
        intern = await self._interns.get_by_id(intern_id)
        if not intern:
            raise NotFoundError("Intern", intern_id)
        profile = await self._profiles.get_by_intern_id(intern_id)
        if not profile:
            raise NotFoundError("Intern profile", intern_id)

        supplied = body.model_dump(exclude_unset=True)

        new_email = supplied.get("email")
        if new_email and new_email.lower() != intern.email.lower():
            other = await self._interns.get_by_email(new_email)
            if other is not None and other.id != intern.id:
                raise ConflictError(f"An intern with email {new_email} already exists")

        # Intern
        before = intern.to_dict()
        for field in INTERN_FIELDS:
            if field not in supplied:
                continue
            value = supplied[field]
            if field in _REQUIRED_INTERN_FIELDS and not value:
                continue
            setattr(intern, field, value)
        intern_changes = detect_changes(before, intern.to_dict())
        if intern_changes:
            await self._interns.save(intern)
            await self._audit.record(
                AuditEntity.INTERN,
                intern.id,
                AuditAction.UPDATE,
                changes=intern_changes,
                description=describe_changes(intern_changes, intern.full_name),
                meta=meta,
            )

        # Profile
        before = profile.to_dict()
        now = self._clock()
        for field in PROFILE_FIELDS:
            if field not in supplied:
                continue
            if supplied[field] is None and field in _NON_NULL_PROFILE_FIELDS:
                continue
            self._apply_profile_field(profile, field, supplied[field], now)
        profile_changes = detect_changes(before, profile.to_dict())
        if profile_changes:
            await self._profiles.save(profile)
            await self._audit.record(
                AuditEntity.INTERN_PROFILE,
                profile.id,
                AuditAction.UPDATE,
                changes=profile_changes,
                description=describe_changes(profile_changes, intern.full_name),
                meta=meta,
            )

        logger.info(
            "Intern %s updated (%d intern, %d profile changes)",
            intern.id, len(intern_changes), len(profile_changes),
        )
        return intern, profile

    @staticmethod
    def _apply_profile_field(profile: InternProfile, field: str, value: Any, now: datetime) -> None:
        if field in _FLAG_TIMESTAMPS:
            value = bool(value)
            stamp = _FLAG_TIMESTAMPS[field]
            if value and not getattr(profile, field):
                setattr(profile, stamp, now)
        elif field == "internship_status":
            if value == InternshipStatus.COMPLETED.value and profile.internship_status != value:
                profile.completed_at = now
        elif field == "technical_skills":
            value = list(value or [])
        setattr(profile, field, value)

    # ------------------------------------------------------------------
    # Listing and repair
    # ------------------------------------------------------------------

    async def list_interns(self) -> list[tuple[Intern, InternProfile | None]]:
        return await self._interns.with_profiles()

    async def find_orphans(self) -> list[Intern]:
        return await self._interns.without_profile()

    async def reconcile_orphans(self, meta: RequestMeta | None = None) -> list[str]:
        """Create a default profile for every intern that lacks one. Returns repaired ids."""
        repaired: list[str] = []
        now = self._clock()
        for intern in await self.find_orphans():
            preference = await self._preferences.get_by_email(intern.email)
            candidate = await self._candidates.get_by_email(intern.email)
            offer = await self._offers.latest_for_candidate(candidate.id) if candidate else None

            profile = await self._profiles.create(
                intern_id=intern.id,
                preferred_domain=preference.domain if preference else None,
                skill_level=preference.skill_level if preference else None,
                technical_skills=list(candidate.technical_skills or []) if candidate else [],
                prior_experience=(candidate.prior_experience or "") if candidate else "",
                portfolio_url=(preference.portfolio_url or "") if preference else "",
                offer_status=profile_offer_status(offer),
                internship_status=InternshipStatus.ACTIVE.value,
                offer_letter_issued=bool(offer and offer.physical_letter_collected),
                joined_at=intern.created_at,
                notes=f"Profile restored by reconciliation on {_short_date(now)}",
            )
            await self._audit.record(
                AuditEntity.INTERN_PROFILE,
                profile.id,
                AuditAction.CREATE,
                description=f"Restored missing intern profile for {intern.full_name}",
                meta=meta,
            )
            repaired.append(intern.id)

        if repaired:
            logger.warning("Reconciled %d intern(s) without a profile", len(repaired))
        return repaired
