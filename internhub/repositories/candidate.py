"""Candidate repository — lookups and upsert-by-email for the sheet sync."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, or_, select

from internhub.domain.candidate import Candidate
from internhub.repositories.base import BaseRepository


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class CandidateRepository(BaseRepository[Candidate]):
    model = Candidate

    async def get_by_email(self, email: str) -> Candidate | None:
        result = await self._session.execute(
            select(Candidate).where(func.lower(Candidate.email) == normalize_email(email))
        )
        return result.scalars().first()

    async def upsert_by_email(self, email: str, fields: dict[str, Any]) -> tuple[Candidate, bool]:
        """Insert or overwrite the candidate with this email. Returns (row, created)."""
        existing = await self.get_by_email(email)
        if existing is None:
            return await self.create(email=email, **fields), True
        for key, value in fields.items():
            setattr(existing, key, value)
        return await self.save(existing), False

    async def get_many(self, ids: list[str]) -> dict[str, Candidate]:
        if not ids:
            return {}
        result = await self._session.execute(select(Candidate).where(Candidate.id.in_(ids)))
        return {c.id: c for c in result.scalars().all()}

    @staticmethod
    def search_conditions(search: str | None = None, college: str | None = None) -> list:
        """Free-text search over name/email/mobile/college plus an exact college filter."""
        conds = []
        if search:
            pattern = f"%{search.lower()}%"
            conds.append(
                or_(
                    func.lower(Candidate.full_name).like(pattern),
                    func.lower(Candidate.email).like(pattern),
                    func.lower(Candidate.mobile).like(pattern),
                    func.lower(Candidate.college_name).like(pattern),
                )
            )
        if college:
            conds.append(func.lower(Candidate.college_name) == college.strip().lower())
        return conds
