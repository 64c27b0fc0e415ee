"""Intern and intern-profile repositories."""

from __future__ import annotations

from sqlalchemy import func, select

from internhub.domain.intern import Intern, InternProfile
from internhub.repositories.base import BaseRepository
from internhub.repositories.candidate import normalize_email


class InternRepository(BaseRepository[Intern]):
    model = Intern

    async def get_by_email(self, email: str | None) -> Intern | None:
        key = normalize_email(email)
        if not key:
            return None
        result = await self._session.execute(
            select(Intern).where(func.lower(Intern.email) == key)
        )
        return result.scalars().first()

    async def with_profiles(self) -> list[tuple[Intern, InternProfile | None]]:
        """Every intern joined to its profile (left join), newest first."""
        result = await self._session.execute(
            select(Intern, InternProfile)
            .join(InternProfile, InternProfile.intern_id == Intern.id, isouter=True)
            .order_by(Intern.created_at.desc())
        )
        return [(intern, profile) for intern, profile in result.all()]

    async def without_profile(self) -> list[Intern]:
        result = await self._session.execute(
            select(Intern)
            .join(InternProfile, InternProfile.intern_id == Intern.id, isouter=True)
            .where(InternProfile.id.is_(None))
            .order_by(Intern.created_at.asc())
        )
        return list(result.scalars().all())


class InternProfileRepository(BaseRepository[InternProfile]):
    model = InternProfile

    async def get_by_intern_id(self, intern_id: str) -> InternProfile | None:
        result = await self._session.execute(
            select(InternProfile).where(InternProfile.intern_id == intern_id)
        )
        return result.scalars().first()
