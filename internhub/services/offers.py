"""Offer lifecycle service — the pending → accepted / declined / expired state machine.

Transitions:
  (new) ──create/send──▶ pending ──respond(accept)──▶ accepted
                            │    ──respond(decline)─▶ declined
                            │    ──now > expires_at─▶ expired
  declined / expired ──resend──▶ pending (new token, new window)

Expiry is evaluated lazily: :func:`is_expired` is checked on every read and
write entry point, and :meth:`OfferService.expire_old_offers` runs before a
new offer is created so a stale pending offer never blocks a fresh one.
There is no background scheduler; :meth:`OfferService.sweep_expired_offers`
is the explicit bulk variant.

Accepted and declined are terminal for ``respond``. Accepted is also terminal
for ``resend`` unless ``settings.allow_resend_accepted`` is set. The one
deliberate bypass is the physical-letter toggle, which confirms an offline
acceptance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.config import Settings
from internhub.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PartialFailureError,
    UpstreamError,
    ValidationError,
)
from internhub.core.pagination import PaginationParams
from internhub.domain.audit import AuditAction, AuditEntity
from internhub.domain.candidate import Candidate
from internhub.domain.intern import ProfileOfferStatus
from internhub.domain.mixins import utcnow
from internhub.domain.offer import NOT_SENT, Offer, OfferAction, OfferStatus, generate_token
from internhub.integrations.mailer import OfferMailer
from internhub.repositories.candidate import CandidateRepository
from internhub.repositories.intern import InternProfileRepository, InternRepository
from internhub.repositories.offer import OfferRepository
from internhub.schemas.offer import OfferDetails
from internhub.services.audit import AuditLogger, RequestMeta, describe_changes, detect_changes

logger = logging.getLogger(__name__)


def is_expired(offer: Offer, now: datetime) -> bool:
    """A pending offer whose response window has closed."""
    return offer.status == OfferStatus.PENDING.value and now > offer.expires_at


@dataclass
class IssuedOffer:
    offer: Offer
    email_sent: bool = False


class OfferService:
    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        mailer: OfferMailer | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session = session
        self._settings = settings
        self._mailer = mailer
        self._clock = clock
        self._offers = OfferRepository(session)
        self._candidates = CandidateRepository(session)
        self._interns = InternRepository(session)
        self._profiles = InternProfileRepository(session)
        self._audit = AuditLogger(session)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_offer(
        self, candidate_id: str, email: str | None = None, mobile: str | None = None
    ) -> Offer:
        """Open a pending offer with the standard response window."""
        _, offer = await self._open_offer(
            candidate_id, email, mobile, self._settings.offer_expiry_hours
        )
        return offer

    async def send_offer(
        self,
        candidate_id: str,
        email: str | None = None,
        mobile: str | None = None,
        details: OfferDetails | None = None,
    ) -> IssuedOffer:
        """Open a pending offer with the extended window and email the response links."""
        candidate, offer = await self._open_offer(
            candidate_id, email, mobile, self._settings.offer_send_expiry_hours
        )
        sent = await self._notify(offer, candidate.full_name, details)
        return IssuedOffer(offer=offer, email_sent=sent)

    async def _open_offer(
        self, candidate_id: str, email: str | None, mobile: str | None, window_hours: int
    ) -> tuple[Candidate, Offer]:
        candidate = await self._candidates.get_by_id(candidate_id)
        if not candidate:
            raise NotFoundError("Candidate", candidate_id)

        await self.expire_old_offers(candidate_id)

        if await self._offers.find_for_candidate(candidate_id, OfferStatus.PENDING):
            raise ConflictError("Candidate already has a pending offer")
        if await self._offers.find_for_candidate(candidate_id, OfferStatus.ACCEPTED):
            raise ConflictError("Candidate already accepted an offer")

        now = self._clock()
        offer = await self._offers.create(
            candidate_id=candidate_id,
            email=email or candidate.email,
            mobile=mobile if mobile is not None else candidate.mobile,
            token=generate_token(),
            status=OfferStatus.PENDING.value,
            sent_at=now,
            expires_at=now + timedelta(hours=window_hours),
            responded_at=None,
        )
        logger.info(
            "Offer %s created for candidate %s (expires %s)",
            offer.id, candidate_id, offer.expires_at.isoformat(),
        )
        return candidate, offer

    async def resend_offer(
        self, offer_id: str, notify: bool = True, details: OfferDetails | None = None
    ) -> IssuedOffer:
        """Reset an offer to pending with a fresh token and response window."""
        offer = await self._offers.get_by_id(offer_id)
        if not offer:
            raise NotFoundError("Offer", offer_id)

        if offer.status == OfferStatus.ACCEPTED.value and not self._settings.allow_resend_accepted:
            raise InvalidStateError("Offer already accepted; it cannot be resent", reason="accepted")

        await self.expire_old_offers(offer.candidate_id)
        other = await self._offers.find_for_candidate(offer.candidate_id, OfferStatus.PENDING)
        if other is not None and other.id != offer.id:
            raise ConflictError("Candidate already has another pending offer")

        now = self._clock()
        offer.token = generate_token()
        offer.status = OfferStatus.PENDING.value
        offer.sent_at = now
        offer.expires_at = now + timedelta(hours=self._settings.offer_expiry_hours)
        offer.responded_at = None
        await self._offers.save(offer)
        logger.info("Offer %s resent (expires %s)", offer.id, offer.expires_at.isoformat())

        sent = False
        if notify:
            candidate = await self._candidates.get_by_id(offer.candidate_id)
            full_name = candidate.full_name if candidate else offer.email
            sent = await self._notify(offer, full_name, details)
        return IssuedOffer(offer=offer, email_sent=sent)

    async def _notify(self, offer: Offer, full_name: str, details: OfferDetails | None) -> bool:
        """Email the response links. The offer row is kept if the email fails."""
        if self._mailer is None:
            return False
        try:
            return await self._mailer.send_offer(offer.email, full_name, offer.token, details)
        except UpstreamError as exc:
            await self._session.commit()
            logger.error("Offer %s saved but email failed: %s", offer.id, exc.message)
            raise PartialFailureError(
                f"Offer {offer.id} was saved but the email could not be sent: {exc.message}"
            ) from exc

    # ------------------------------------------------------------------
    # Response and expiry
    # ------------------------------------------------------------------

    async def respond_to_offer(self, token: str, action: str) -> Offer:
        try:
            verdict = OfferAction(action)
        except ValueError:
            raise ValidationError("Invalid action") from None

        offer = await self._offers.get_by_token(token)
        if not offer:
            raise NotFoundError("Offer")

        if offer.status != OfferStatus.PENDING.value:
            raise InvalidStateError(f"Offer already {offer.status}", reason="already_responded")

        now = self._clock()
        if is_expired(offer, now):
            offer.status = OfferStatus.EXPIRED.value
            await self._offers.save(offer)
            # The expiry must survive the error response
            await self._session.commit()
            logger.info("Offer %s expired on response attempt", offer.id)
            raise InvalidStateError("Offer expired", reason="expired")

        offer.status = (
            OfferStatus.ACCEPTED.value if verdict is OfferAction.ACCEPT else OfferStatus.DECLINED.value
        )
        offer.responded_at = now
        await self._offers.save(offer)
        logger.info("Offer %s %s", offer.id, offer.status)
        return offer

    async def expire_old_offers(self, candidate_id: str) -> int:
        """Expire this candidate's pending offers past their window. Idempotent."""
        count = await self._offers.expire_pending(self._clock(), candidate_id)
        if count:
            logger.info("Expired %d stale offer(s) for candidate %s", count, candidate_id)
        return count

    async def sweep_expired_offers(self) -> int:
        count = await self._offers.expire_pending(self._clock())
        logger.info("Expiry sweep moved %d offer(s) to expired", count)
        return count

    async def status_of(self, candidate_id: str) -> str:
        """Status of the most recently sent offer, or ``not_sent``."""
        offer = await self._offers.latest_for_candidate(candidate_id)
        if not offer:
            return NOT_SENT
        await self._lazy_expire(offer)
        return offer.status

    async def preview(self, token: str) -> tuple[Offer, Candidate | None]:
        offer = await self._offers.get_by_token(token)
        if not offer:
            raise NotFoundError("Offer")
        await self._lazy_expire(offer)
        candidate = await self._candidates.get_by_id(offer.candidate_id)
        return offer, candidate

    async def _lazy_expire(self, offer: Offer) -> None:
        if is_expired(offer, self._clock()):
            offer.status = OfferStatus.EXPIRED.value
            await self._offers.save(offer)
            logger.info("Offer %s expired on read", offer.id)

    # ------------------------------------------------------------------
    # Physical offer letters
    # ------------------------------------------------------------------

    async def set_physical_letter_collected(
        self, offer_id: str, collected: bool, meta: RequestMeta | None = None
    ) -> tuple[Offer, bool]:
        """Toggle the paper-letter flag. Collecting it confirms acceptance.

        Returns ``(offer, profile_updated)``.
        """
        offer = await self._offers.get_by_id(offer_id)
        if not offer:
            raise NotFoundError("Offer", offer_id)

        now = self._clock()
        offer.physical_letter_collected = collected
        if collected and offer.status != OfferStatus.ACCEPTED.value:
            logger.info("Offer %s accepted via physical letter (was %s)", offer.id, offer.status)
            offer.status = OfferStatus.ACCEPTED.value
            offer.responded_at = now
        await self._offers.save(offer)

        profile_updated = False
        if collected:
            profile_updated = await self._mark_letter_issued(offer, now, meta, force_status=True)
        return offer, profile_updated

    async def sync_offer_letters(self, meta: RequestMeta | None = None) -> tuple[int, int]:
        """Backfill ``offer_letter_issued`` for accepted offers with a collected letter.

        Returns ``(matched_offers, updated_profiles)``.
        """
        offers = await self._offers.with_physical_letter(
            collected=True, status=OfferStatus.ACCEPTED
        )
        updated = 0
        for offer in offers:
            if await self._mark_letter_issued(offer, offer.updated_at, meta, force_status=False):
                updated += 1
        logger.info("Offer letter sync: %d offers, %d profiles updated", len(offers), updated)
        return len(offers), updated

    async def _mark_letter_issued(
        self,
        offer: Offer,
        issued_at: datetime,
        meta: RequestMeta | None,
        force_status: bool,
    ) -> bool:
        intern = await self._interns.get_by_email(offer.email)
        if intern is None:
            return False
        profile = await self._profiles.get_by_intern_id(intern.id)
        if profile is None:
            logger.warning("Intern %s has no profile; letter flag not mirrored", intern.id)
            return False

        before = profile.to_dict()
        if not profile.offer_letter_issued:
            profile.offer_letter_issued = True
            profile.offer_letter_issued_at = issued_at
        if force_status:
            profile.offer_status = ProfileOfferStatus.ACCEPTED.value

        changes = detect_changes(before, profile.to_dict())
        if not changes:
            return False
        await self._profiles.save(profile)
        await self._audit.record(
            AuditEntity.INTERN_PROFILE,
            profile.id,
            AuditAction.UPDATE,
            changes=changes,
            description=describe_changes(changes, intern.full_name),
            meta=meta,
        )
        return True

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_offers(
        self,
        pagination: PaginationParams,
        search: str | None = None,
        status: str | None = None,
    ) -> tuple[list[Offer], int, dict[str, Candidate]]:
        """Offers newest first, with the candidates they reference."""
        items, total = await self._offers.search(
            text=search,
            status=status,
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
        )
        candidates = await self._candidates.get_many(list({o.candidate_id for o in items}))
        return items, total, candidates

    async def list_physical_letters(
        self, collected: bool | None = None, candidate_id: str | None = None
    ) -> tuple[list[Offer], dict[str, Candidate]]:
        offers = await self._offers.with_physical_letter(collected=collected, candidate_id=candidate_id)
        candidates = await self._candidates.get_many(list({o.candidate_id for o in offers}))
        return offers, candidates
