"""Domain-preference repository.

``get_by_email`` is the single email join used by the importer and by intern
conversion; nothing else should query preferences by email inline.
"""

from __future__ import annotations

from sqlalchemy import func, or_, select

from internhub.domain.domain_preference import DomainPreference
from internhub.repositories.base import BaseRepository
from internhub.repositories.candidate import normalize_email


class DomainPreferenceRepository(BaseRepository[DomainPreference]):
    model = DomainPreference
    default_order = "submitted_at"

    async def get_by_email(self, email: str | None) -> DomainPreference | None:
        key = normalize_email(email)
        if not key:
            return None
        result = await self._session.execute(
            select(DomainPreference)
            .where(func.lower(DomainPreference.email) == key)
            .order_by(DomainPreference.created_at.asc())
        )
        return result.scalars().first()

    async def existing_emails(self) -> set[str]:
        result = await self._session.execute(select(DomainPreference.email))
        return {normalize_email(e) for e in result.scalars().all()}

    @staticmethod
    def search_conditions(
        search: str | None = None,
        domain: str | None = None,
        college: str | None = None,
        skill_level: str | None = None,
    ) -> list:
        conds = []
        if search:
            pattern = f"%{search.lower()}%"
            conds.append(
                or_(
                    func.lower(DomainPreference.full_name).like(pattern),
                    func.lower(DomainPreference.email).like(pattern),
                    func.lower(DomainPreference.contact_number).like(pattern),
                    func.lower(DomainPreference.college_name).like(pattern),
                )
            )
        if domain:
            conds.append(DomainPreference.domain == domain)
        if college:
            conds.append(func.lower(DomainPreference.college_name).like(f"%{college.lower()}%"))
        if skill_level:
            conds.append(DomainPreference.skill_level == skill_level)
        return conds
