from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from internhub.core.pagination import PaginationParams
from internhub.domain.audit import AuditAction, AuditEntity
from internhub.repositories.audit import AuditLogRepository
from internhub.services.audit import (
    AuditLogger,
    AuditLogService,
    RequestMeta,
    describe_changes,
    detect_changes,
    format_value,
)


# ---------------------------------------------------------------------------
# detect_changes
# ---------------------------------------------------------------------------

def test_identical_records_have_no_changes():
    record = {"full_name": "Jane Doe", "technical_skills": ["Python"], "internship_fee_paid": False}
    assert detect_changes(record, dict(record)) == {}


def test_bookkeeping_fields_are_never_reported():
    old = {"id": "1", "updated_at": "a", "created_at": "a", "intern_id": "x", "_secret": 1, "notes": "a"}
    new = {"id": "2", "updated_at": "b", "created_at": "b", "intern_id": "y", "_secret": 2, "notes": "b"}
    assert detect_changes(old, new) == {"notes": {"from": "a", "to": "b"}}


def test_values_are_compared_in_serialized_form():
    moment = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
    assert detect_changes({"joined_at": moment}, {"joined_at": moment.isoformat()}) == {}
    assert detect_changes({"technical_skills": ["a"]}, {"technical_skills": ["a", "b"]}) == {
        "technical_skills": {"from": ["a"], "to": ["a", "b"]}
    }


def test_new_keys_are_reported_against_missing_values():
    assert detect_changes({}, {"mobile": "9000000001"}) == {
        "mobile": {"from": None, "to": "9000000001"}
    }


# ---------------------------------------------------------------------------
# format_value / describe_changes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "empty"),
        ([], "empty"),
        (["a", "b", "c"], "3 items"),
        (True, "yes"),
        (False, "no"),
        (date(2026, 3, 7), "3/7/2026"),
        (datetime(2026, 10, 19, 23, 0, tzinfo=timezone.utc), "10/19/2026"),
        (0, "0"),
        ("Backend", "Backend"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_describe_changes_uses_field_phrases():
    changes = {"internship_status": {"from": "active", "to": "completed"}}
    assert describe_changes(changes, "Jane Doe") == (
        "Updated Jane Doe: internship status from active to completed"
    )


def test_describe_changes_mentions_at_most_two_fields():
    changes = {
        "certificate_issued": {"from": False, "to": True},
        "college_name": {"from": None, "to": "North College"},
        "notes": {"from": "a", "to": "b"},
        "mobile": {"from": "1", "to": "2"},
    }
    assert describe_changes(changes, "Jane Doe") == (
        "Updated Jane Doe: certificate issued to yes, "
        "college name from empty to North College and 2 more"
    )


def test_describe_without_changes():
    assert describe_changes({}, "Jane Doe") == "Updated Jane Doe"


# ---------------------------------------------------------------------------
# AuditLogger
# ---------------------------------------------------------------------------

async def test_record_stores_serialized_changes(session):
    moment = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    entry = await AuditLogger(session).record(
        AuditEntity.INTERN_PROFILE,
        "profile-1",
        AuditAction.UPDATE,
        changes={"fee_paid_at": {"from": None, "to": moment}},
        description="Updated Jane Doe: fee paid at from empty to 10/19/2026",
        meta=RequestMeta(performed_by="hr@example.com", ip_address="10.1.1.1", user_agent="ua"),
    )
    await session.flush()

    assert entry is not None
    assert entry.entity_type == "intern_profile"
    assert entry.action == "update"
    assert entry.changes == {"fee_paid_at": {"from": None, "to": "2026-10-19T08:00:00Z"}}
    assert entry.performed_by == "hr@example.com"
    assert entry.performed_at is not None


async def test_record_defaults_to_system(session):
    entry = await AuditLogger(session).record(AuditEntity.INTERN, "intern-1", AuditAction.CREATE)
    assert entry.performed_by == "system"
    assert entry.changes == {}


async def test_record_failure_is_swallowed(session, monkeypatch, caplog):
    def broken_append(self, entry):
        raise RuntimeError("audit table unavailable")

    monkeypatch.setattr(AuditLogRepository, "append", broken_append)

    entry = await AuditLogger(session).record(AuditEntity.INTERN, "intern-1", AuditAction.DELETE)

    assert entry is None
    assert "Failed to create audit log" in caplog.text


# ---------------------------------------------------------------------------
# AuditLogService
# ---------------------------------------------------------------------------

async def _seed(session):
    audit = AuditLogger(session)
    alice = RequestMeta(performed_by="alice@example.com")
    bob = RequestMeta(performed_by="bob@example.com")
    await audit.record(AuditEntity.INTERN, "i-1", AuditAction.CREATE, meta=alice)
    await audit.record(AuditEntity.INTERN_PROFILE, "p-1", AuditAction.CREATE, meta=alice)
    await audit.record(AuditEntity.INTERN_PROFILE, "p-1", AuditAction.UPDATE, meta=bob)
    await session.flush()


async def test_stats_count_by_action_and_entity(session):
    await _seed(session)

    stats = await AuditLogService(session).stats()

    assert stats == {
        "total_logs": 3,
        "create_actions": 2,
        "update_actions": 1,
        "delete_actions": 0,
        "intern_logs": 1,
        "profile_logs": 2,
    }


async def test_stats_on_an_empty_table(session):
    stats = await AuditLogService(session).stats()
    assert set(stats.values()) == {0}


async def test_user_activity_is_busiest_first(session):
    await _seed(session)

    activity = await AuditLogService(session).user_activity()

    assert [row["performed_by"] for row in activity] == ["alice@example.com", "bob@example.com"]
    assert activity[0]["count"] == 2
    assert sorted(activity[0]["actions"]) == ["create", "create"]
    assert activity[1]["actions"] == ["update"]
    assert activity[0]["last_activity"].tzinfo is not None


async def test_list_logs_filters(session):
    await _seed(session)
    svc = AuditLogService(session)

    logs, total = await svc.list_logs(PaginationParams.of(limit=50), entity_type="intern_profile")
    assert total == 2
    assert {log.entity_id for log in logs} == {"p-1"}

    logs, total = await svc.list_logs(PaginationParams.of(limit=50), action="update")
    assert total == 1
    assert logs[0].performed_by == "bob@example.com"

    future = datetime(2999, 1, 1, tzinfo=timezone.utc)
    _, total = await svc.list_logs(PaginationParams.of(limit=50), start=future)
    assert total == 0
