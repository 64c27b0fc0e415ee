"""Audit trail query endpoint (read-only)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.pagination import PageMeta, PaginationParams
from internhub.core.response import DataResponse
from internhub.db.base import get_db
from internhub.schemas.audit import AuditLogOut, AuditLogPage, AuditStats, UserActivity
from internhub.services.audit import AuditLogService

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=DataResponse[AuditLogPage])
async def list_audit_logs(
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    action: Optional[str] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=1000),
    session: AsyncSession = Depends(get_db),
):
    """Logs newest first, plus overall counters and 30-day per-user activity."""
    pagination = PaginationParams.of(page=page, limit=limit)
    svc = AuditLogService(session)
    logs, total = await svc.list_logs(
        pagination, entity_type=entity_type, action=action, start=start_date, end=end_date
    )
    return {
        "data": AuditLogPage(
            logs=[AuditLogOut.model_validate(log) for log in logs],
            stats=AuditStats(**await svc.stats()),
            user_activity=[UserActivity(**row) for row in await svc.user_activity()],
            pagination=PageMeta.build(total, page, limit),
        )
    }
