"""Offer repository — lifecycle queries used by the offer service."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_, select, update

from internhub.domain.candidate import Candidate
from internhub.domain.offer import Offer, OfferStatus
from internhub.repositories.base import BaseRepository


class OfferRepository(BaseRepository[Offer]):
    model = Offer
    default_order = "sent_at"

    async def get_by_token(self, token: str) -> Offer | None:
        result = await self._session.execute(select(Offer).where(Offer.token == token))
        return result.scalars().first()

    async def find_for_candidate(self, candidate_id: str, status: OfferStatus) -> Offer | None:
        result = await self._session.execute(
            select(Offer)
            .where(Offer.candidate_id == candidate_id)
            .where(Offer.status == status.value)
            .order_by(Offer.sent_at.desc())
        )
        return result.scalars().first()

    async def latest_for_candidate(self, candidate_id: str) -> Offer | None:
        result = await self._session.execute(
            select(Offer)
            .where(Offer.candidate_id == candidate_id)
            .order_by(Offer.sent_at.desc(), Offer.created_at.desc())
        )
        return result.scalars().first()

    async def expire_pending(self, now: datetime, candidate_id: str | None = None) -> int:
        """Move pending offers whose window closed before ``now`` to expired."""
        stmt = (
            update(Offer)
            .where(Offer.status == OfferStatus.PENDING.value)
            .where(Offer.expires_at < now)
            .values(status=OfferStatus.EXPIRED.value, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        if candidate_id is not None:
            stmt = stmt.where(Offer.candidate_id == candidate_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount or 0

    async def with_physical_letter(
        self,
        collected: bool | None = None,
        candidate_id: str | None = None,
        status: OfferStatus | None = None,
    ) -> list[Offer]:
        q = select(Offer)
        if collected is not None:
            q = q.where(Offer.physical_letter_collected.is_(collected))
        if candidate_id:
            q = q.where(Offer.candidate_id == candidate_id)
        if status is not None:
            q = q.where(Offer.status == status.value)
        result = await self._session.execute(q.order_by(Offer.updated_at.desc()))
        return list(result.scalars().all())

    async def search(
        self,
        *,
        text: str | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 10,
        order_by: str | None = None,
        order: str = "desc",
    ) -> tuple[list[Offer], int]:
        """Offers matching a free-text search over offer email and candidate fields."""
        conds = []
        if text:
            pattern = f"%{text.lower()}%"
            candidate_ids = select(Candidate.id).where(
                or_(
                    func.lower(Candidate.full_name).like(pattern),
                    func.lower(Candidate.email).like(pattern),
                    func.lower(Candidate.college_name).like(pattern),
                )
            )
            conds.append(
                or_(func.lower(Offer.email).like(pattern), Offer.candidate_id.in_(candidate_ids))
            )
        return await self.list(
            offset=offset,
            limit=limit,
            order_by=order_by,
            order=order,
            filters={"status": status},
            conditions=conds,
        )
