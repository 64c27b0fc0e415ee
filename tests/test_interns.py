from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from internhub.core.exceptions import ConflictError, MismatchError, NotFoundError, PartialFailureError
from internhub.domain.audit import AuditLog
from internhub.domain.candidate import Candidate
from internhub.domain.intern import Intern, InternProfile
from internhub.repositories.intern import InternProfileRepository
from internhub.schemas.intern import InternUpdate
from internhub.services.audit import RequestMeta
from internhub.services.interns import InternService, normalize_name
from internhub.services.offers import OfferService
from tests.conftest import add_candidate, add_preference


@pytest.fixture
def interns(session, clock):
    return InternService(session, clock=clock)


@pytest.fixture
def offers(session, settings, clock):
    return OfferService(session, settings, clock=clock)


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def _audit_rows(session, entity_id: str) -> list[AuditLog]:
    await session.flush()
    result = await session.execute(
        select(AuditLog).where(AuditLog.entity_id == entity_id).order_by(AuditLog.performed_at)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Name normalization
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("jane.DOE", "Jane Doe"),
        ("  mary   ann  o.neil ", "Mary Ann O Neil"),
        ("J.R.R. tolkien", "J R R Tolkien"),
        ("", ""),
        ("...", ""),
        ("ÉLODIE durand", "Élodie Durand"),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected
    assert normalize_name(normalize_name(raw)) == normalize_name(raw)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

async def test_convert_creates_intern_and_profile(session, interns, offers, clock):
    candidate = await add_candidate(session, full_name="jane.DOE")
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)
    await offers.respond_to_offer(offer.token, "accept")
    meta = RequestMeta(performed_by="hr@example.com", ip_address="10.0.0.1", user_agent="pytest")

    intern, profile = await interns.convert(candidate.id, offer.id, preference.id, meta)

    assert intern.full_name == "Jane Doe"
    assert intern.email == candidate.email
    assert intern.college_name == "North College"
    assert profile.intern_id == intern.id
    assert profile.preferred_domain == "Backend"
    assert profile.skill_level == "Intermediate"
    assert profile.technical_skills == ["Python", "SQL"]
    assert profile.portfolio_url == "https://jane.dev"
    assert profile.offer_status == "accepted"
    assert profile.internship_status == "active"
    assert profile.offer_letter_issued is False
    assert profile.joined_at == clock.now
    assert profile.notes == (
        f"Converted from candidate record on {clock.now.month}/{clock.now.day}/{clock.now.year}"
    )

    intern_logs = await _audit_rows(session, intern.id)
    profile_logs = await _audit_rows(session, profile.id)
    assert [(l.entity_type, l.action) for l in intern_logs] == [("intern", "create")]
    assert [(l.entity_type, l.action) for l in profile_logs] == [("intern_profile", "create")]
    assert intern_logs[0].performed_by == "hr@example.com"
    assert intern_logs[0].ip_address == "10.0.0.1"
    assert profile_logs[0].description == "Created intern profile for Jane Doe"


async def test_convert_maps_pending_offer_to_not_sent(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)

    _, profile = await interns.convert(candidate.id, offer.id, preference.id)

    assert profile.offer_status == "not_sent"


async def test_convert_joins_domain_preference_by_email_not_id(session, interns, offers):
    candidate = await add_candidate(session)
    await add_preference(session, email="someone-else@example.com", domain="Design")
    mine = await add_preference(session, domain="Data")
    offer = await offers.create_offer(candidate.id)

    _, profile = await interns.convert(candidate.id, offer.id, "an-unrelated-id")

    assert profile.preferred_domain == mine.domain


async def test_convert_rejects_email_mismatch(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id, email="other@example.com")

    with pytest.raises(MismatchError):
        await interns.convert(candidate.id, offer.id, preference.id)

    assert await _count(session, Intern) == 0
    assert await _count(session, InternProfile) == 0


async def test_convert_email_comparison_is_case_sensitive(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id, email="JANE@example.com")

    with pytest.raises(MismatchError):
        await interns.convert(candidate.id, offer.id, preference.id)


async def test_convert_rejects_phone_mismatch(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id, mobile="9111111111")

    with pytest.raises(MismatchError):
        await interns.convert(candidate.id, offer.id, preference.id)
    assert await _count(session, Intern) == 0


async def test_convert_ignores_phone_when_one_side_is_missing(session, interns, offers):
    candidate = await add_candidate(session, mobile=None)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id, mobile="9111111111")

    intern, _ = await interns.convert(candidate.id, offer.id, preference.id)

    assert intern.mobile is None


async def test_convert_requires_every_record(session, interns, offers):
    candidate = await add_candidate(session)
    offer = await offers.create_offer(candidate.id)

    with pytest.raises(NotFoundError):
        await interns.convert("missing", offer.id, "x")
    with pytest.raises(NotFoundError):
        await interns.convert(candidate.id, "missing", "x")
    with pytest.raises(NotFoundError):
        await interns.convert(candidate.id, offer.id, "x")


async def test_convert_twice_conflicts(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)
    await interns.convert(candidate.id, offer.id, preference.id)

    with pytest.raises(ConflictError):
        await interns.convert(candidate.id, offer.id, preference.id)
    assert await _count(session, Intern) == 1


async def test_profile_failure_rolls_back_the_intern(session, interns, offers, monkeypatch):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)
    ids = (candidate.id, offer.id, preference.id)
    await session.commit()

    async def broken_create(self, **kwargs):
        raise OperationalError("INSERT INTO intern_profiles", {}, Exception("disk I/O error"))

    monkeypatch.setattr(InternProfileRepository, "create", broken_create)

    with pytest.raises(PartialFailureError):
        await interns.convert(*ids)

    assert await _count(session, Intern) == 0
    assert await _count(session, Candidate) == 1


async def test_audit_insert_failure_keeps_the_conversion(
    session, interns, offers, failing_audit_inserts, caplog
):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)

    intern, profile = await interns.convert(candidate.id, offer.id, preference.id)
    await session.commit()

    assert await _count(session, Intern) == 1
    assert await _count(session, InternProfile) == 1
    assert await _count(session, AuditLog) == 0
    assert profile.intern_id == intern.id
    assert "Failed to create audit log" in caplog.text


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

async def _converted(session, interns, offers):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await offers.create_offer(candidate.id)
    return await interns.convert(candidate.id, offer.id, preference.id)


async def test_update_records_field_level_changes(session, interns, offers, clock):
    intern, profile = await _converted(session, interns, offers)
    clock.advance(days=3)

    body = InternUpdate(mobile="9222222222", internshipFeePaid=True, notes="Paid in cash")
    await interns.update_intern(intern.id, body)

    assert intern.mobile == "9222222222"
    assert profile.internship_fee_paid is True
    assert profile.fee_paid_at == clock.now

    intern_update = [l for l in await _audit_rows(session, intern.id) if l.action == "update"]
    assert len(intern_update) == 1
    assert intern_update[0].changes == {"mobile": {"from": "9000000001", "to": "9222222222"}}
    assert intern_update[0].description == "Updated Jane Doe: mobile from 9000000001 to 9222222222"

    profile_update = [l for l in await _audit_rows(session, profile.id) if l.action == "update"]
    assert len(profile_update) == 1
    assert set(profile_update[0].changes) == {"internship_fee_paid", "fee_paid_at", "notes"}
    assert profile_update[0].description.startswith(
        "Updated Jane Doe: internship fee payment to yes, "
    )
    assert profile_update[0].description.endswith(" and 1 more")


async def test_update_completion_stamps_completed_at(session, interns, offers, clock):
    intern, profile = await _converted(session, interns, offers)
    clock.advance(days=90)

    await interns.update_intern(intern.id, InternUpdate(internshipStatus="completed"))

    assert profile.internship_status == "completed"
    assert profile.completed_at == clock.now


async def test_update_ignores_null_for_required_profile_fields(session, interns, offers):
    intern, profile = await _converted(session, interns, offers)

    body = InternUpdate(
        internshipStatus=None, offerStatus=None, internshipFeePaid=None, notes="Checked in"
    )
    await interns.update_intern(intern.id, body)
    await session.commit()

    assert profile.internship_status == "active"
    assert profile.offer_status == "not_sent"
    assert profile.internship_fee_paid is False
    assert profile.notes == "Checked in"


async def test_update_without_changes_writes_no_audit_rows(session, interns, offers):
    intern, profile = await _converted(session, interns, offers)

    await interns.update_intern(intern.id, InternUpdate(mobile=intern.mobile, fullName=""))

    assert intern.full_name == "Jane Doe"
    assert [l.action for l in await _audit_rows(session, intern.id)] == ["create"]
    assert [l.action for l in await _audit_rows(session, profile.id)] == ["create"]


async def test_update_rejects_an_email_taken_by_another_intern(session, interns, offers):
    intern, _ = await _converted(session, interns, offers)
    session.add(Intern(full_name="Other", email="other@example.com"))
    await session.flush()

    with pytest.raises(ConflictError):
        await interns.update_intern(intern.id, InternUpdate(email="Other@example.com"))


async def test_update_unknown_intern(interns):
    with pytest.raises(NotFoundError):
        await interns.update_intern("missing", InternUpdate(notes="x"))


# ---------------------------------------------------------------------------
# Listing and repair
# ---------------------------------------------------------------------------

async def test_list_interns_includes_interns_without_profiles(session, interns, offers):
    intern, profile = await _converted(session, interns, offers)
    session.add(Intern(full_name="Orphan", email="orphan@example.com"))
    await session.flush()

    rows = await interns.list_interns()

    by_email = {i.email: p for i, p in rows}
    assert by_email[intern.email] is profile
    assert by_email["orphan@example.com"] is None


async def test_reconcile_repairs_interns_without_profiles(session, interns):
    await add_preference(session, email="orphan@example.com", domain="Mobile")
    orphan = Intern(full_name="Orphan", email="orphan@example.com")
    session.add(orphan)
    await session.flush()

    assert [i.id for i in await interns.find_orphans()] == [orphan.id]

    repaired = await interns.reconcile_orphans()

    assert repaired == [orphan.id]
    assert await interns.find_orphans() == []
    profile = await InternProfileRepository(session).get_by_intern_id(orphan.id)
    assert profile.preferred_domain == "Mobile"
    assert profile.offer_status == "not_sent"
    assert [l.action for l in await _audit_rows(session, profile.id)] == ["create"]
    assert await interns.reconcile_orphans() == []
