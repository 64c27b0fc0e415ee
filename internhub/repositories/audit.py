"""Audit log repository — append and read only (no update / delete methods)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, case, func, select

from internhub.domain.audit import AuditAction, AuditEntity, AuditLog
from internhub.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    model = AuditLog
    default_order = "performed_at"

    def append(self, entry: AuditLog) -> None:
        """Stage an audit row on the request session."""
        self._session.add(entry)

    @staticmethod
    def conditions(
        entity_type: str | None = None,
        action: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ColumnElement[bool]]:
        conds: list[ColumnElement[bool]] = []
        if entity_type:
            conds.append(AuditLog.entity_type == entity_type)
        if action:
            conds.append(AuditLog.action == action)
        if start:
            conds.append(AuditLog.performed_at >= start)
        if end:
            conds.append(AuditLog.performed_at <= end)
        return conds

    async def stats(self) -> dict[str, int]:
        def _count_if(cond: ColumnElement[bool]):
            return func.coalesce(func.sum(case((cond, 1), else_=0)), 0)

        row = (
            await self._session.execute(
                select(
                    func.count(AuditLog.id),
                    _count_if(AuditLog.action == AuditAction.CREATE.value),
                    _count_if(AuditLog.action == AuditAction.UPDATE.value),
                    _count_if(AuditLog.action == AuditAction.DELETE.value),
                    _count_if(AuditLog.entity_type == AuditEntity.INTERN.value),
                    _count_if(AuditLog.entity_type == AuditEntity.INTERN_PROFILE.value),
                )
            )
        ).one()
        keys = (
            "total_logs",
            "create_actions",
            "update_actions",
            "delete_actions",
            "intern_logs",
            "profile_logs",
        )
        return {key: int(value or 0) for key, value in zip(keys, row)}

    async def activity_since(self, since: datetime, limit: int = 10) -> list[dict[str, Any]]:
        """Per-performer activity since ``since``, busiest first."""
        count_col = func.count(AuditLog.id).label("count")
        result = await self._session.execute(
            select(
                AuditLog.performed_by,
                count_col,
                func.max(AuditLog.performed_at).label("last_activity"),
            )
            .where(AuditLog.performed_at >= since)
            .group_by(AuditLog.performed_by)
            .order_by(count_col.desc())
            .limit(limit)
        )
        rows = result.all()
        if not rows:
            return []

        # Actions per performer, in order
        performers = [r.performed_by for r in rows]
        actions_result = await self._session.execute(
            select(AuditLog.performed_by, AuditLog.action)
            .where(AuditLog.performed_at >= since)
            .where(AuditLog.performed_by.in_(performers))
            .order_by(AuditLog.performed_at.asc())
        )
        actions: dict[str, list[str]] = {p: [] for p in performers}
        for performer, action in actions_result.all():
            actions[performer].append(action)

        return [
            {
                "performed_by": r.performed_by,
                "count": r.count,
                "last_activity": r.last_activity,
                "actions": actions[r.performed_by],
            }
            for r in rows
        ]
