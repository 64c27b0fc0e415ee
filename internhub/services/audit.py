"""Intern audit trail — change detection, human-readable summaries, recording and queries.

Recording is best-effort: :meth:`AuditLogger.record` never raises, so an
audit failure can never undo the intern mutation it describes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.pagination import PaginationParams
from internhub.domain.audit import AuditAction, AuditEntity, AuditLog
from internhub.domain.mixins import utcnow
from internhub.repositories.audit import AuditLogRepository

logger = logging.getLogger(__name__)

Changes = dict[str, dict[str, Any]]

# Identity, bookkeeping and reference fields never show up in a diff
IGNORED_FIELDS: frozenset[str] = frozenset(
    {"id", "_id", "__v", "version", "created_at", "updated_at", "intern_id"}
)

_FIELD_PHRASES: dict[str, str] = {
    "internship_status": "internship status from {old} to {new}",
    "offer_status": "offer status from {old} to {new}",
    "internship_fee_paid": "internship fee payment to {new}",
    "offer_letter_issued": "offer letter issued to {new}",
    "certificate_issued": "certificate issued to {new}",
}

_MAX_MENTIONS = 2


@dataclass(frozen=True)
class RequestMeta:
    """Who triggered a mutation, captured from the incoming request."""

    performed_by: str = "system"
    ip_address: str | None = None
    user_agent: str | None = None


# ---------------------------------------------------------------------------
# Diffing and descriptions (pure)
# ---------------------------------------------------------------------------

def _serialized(value: Any) -> Any:
    return to_jsonable_python(value, fallback=str)


def detect_changes(old: Mapping[str, Any], new: Mapping[str, Any]) -> Changes:
    """Field-level diff over the keys of ``new``, compared by serialized value."""
    changes: Changes = {}
    for key, new_value in new.items():
        if key in IGNORED_FIELDS or key.startswith("_"):
            continue
        old_value = old.get(key)
        if _serialized(old_value) != _serialized(new_value):
            changes[key] = {"from": old_value, "to": new_value}
    return changes


def format_value(value: Any) -> str:
    if value is None:
        return "empty"
    if isinstance(value, (list, tuple)):
        return f"{len(value)} items" if value else "empty"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return f"{value.month}/{value.day}/{value.year}"
    return str(value)


def describe_changes(changes: Mapping[str, Mapping[str, Any]], subject: str) -> str:
    """One-line summary such as ``Updated Jane Doe: offer status from sent to accepted``."""
    mentions: list[str] = []
    for field, change in changes.items():
        old = format_value(change.get("from"))
        new = format_value(change.get("to"))
        phrase = _FIELD_PHRASES.get(field, "{field} from {old} to {new}")
        mentions.append(phrase.format(field=field.replace("_", " "), old=old, new=new))

    if not mentions:
        return f"Updated {subject}"
    summary = ", ".join(mentions[:_MAX_MENTIONS])
    extra = len(mentions) - _MAX_MENTIONS
    if extra > 0:
        summary += f" and {extra} more"
    return f"Updated {subject}: {summary}"


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------

class AuditLogger:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = AuditLogRepository(session)

    async def record(
        self,
        entity_type: AuditEntity,
        entity_id: str,
        action: AuditAction,
        *,
        changes: Changes | None = None,
        description: str | None = None,
        meta: RequestMeta | None = None,
    ) -> AuditLog | None:
        """Append one audit row. Failures are logged and swallowed.

        Pending changes are flushed first so the audit INSERT runs alone inside
        a SAVEPOINT; if it fails only the savepoint is rolled back.
        """
        meta = meta or RequestMeta()
        await self._session.flush()
        try:
            async with self._session.begin_nested():
                entry = AuditLog(
                    entity_type=entity_type.value,
                    entity_id=entity_id,
                    action=action.value,
                    changes={
                        field: {"from": _serialized(c.get("from")), "to": _serialized(c.get("to"))}
                        for field, c in (changes or {}).items()
                    },
                    description=description,
                    performed_by=meta.performed_by or "system",
                    ip_address=meta.ip_address,
                    user_agent=meta.user_agent,
                    performed_at=utcnow(),
                )
                self._repo.append(entry)
                await self._session.flush()
        except Exception:
            logger.exception(
                "Failed to create audit log: %s on %s %s", action.value, entity_type.value, entity_id
            )
            return None
        logger.info("Audit log created: %s on %s %s", action.value, entity_type.value, entity_id)
        return entry


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class AuditLogService:
    def __init__(self, session: AsyncSession):
        self._repo = AuditLogRepository(session)

    async def list_logs(
        self,
        pagination: PaginationParams,
        entity_type: str | None = None,
        action: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[list[AuditLog], int]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort or "performed_at",
            order=pagination.order,
            conditions=AuditLogRepository.conditions(entity_type, action, start, end),
        )

    async def stats(self) -> dict[str, int]:
        return await self._repo.stats()

    async def user_activity(self, days: int = 30) -> list[dict[str, Any]]:
        return await self._repo.activity_since(utcnow() - timedelta(days=days))
