"""Audit log response models."""


from datetime import datetime
from typing import Any

from internhub.core.pagination import PageMeta
from internhub.schemas.common import CamelModel


class AuditLogOut(CamelModel):
    id: str
    entity_type: str
    entity_id: str
    action: str
    changes: dict[str, Any] = {}
    description: str | None = None
    performed_by: str
    performed_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


class AuditStats(CamelModel):
    total_logs: int = 0
    create_actions: int = 0
    update_actions: int = 0
    delete_actions: int = 0
    intern_logs: int = 0
    profile_logs: int = 0


class UserActivity(CamelModel):
    performed_by: str
    count: int
    last_activity: datetime
    actions: list[str]


class AuditLogPage(CamelModel):
    logs: list[AuditLogOut]
    stats: AuditStats
    user_activity: list[UserActivity]
    pagination: PageMeta
