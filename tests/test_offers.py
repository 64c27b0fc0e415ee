from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest
from sqlalchemy import func, select

from internhub.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)
from internhub.domain.audit import AuditLog
from internhub.domain.offer import Offer, OfferStatus
from internhub.integrations.mailer import OfferMailer
from internhub.services.interns import InternService
from internhub.services.offers import OfferService, is_expired
from tests.conftest import add_candidate, add_preference, make_settings


@pytest.fixture
def service(session, settings, clock):
    return OfferService(session, settings, clock=clock)


async def _offer_count(session, candidate_id: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(Offer).where(Offer.candidate_id == candidate_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# is_expired
# ---------------------------------------------------------------------------

def test_is_expired_only_for_pending_offers_past_their_window(clock):
    offer = Offer(status=OfferStatus.PENDING.value, expires_at=clock.now)
    assert not is_expired(offer, clock.now)
    assert is_expired(offer, clock.now + timedelta(seconds=1))

    offer.status = OfferStatus.ACCEPTED.value
    assert not is_expired(offer, clock.now + timedelta(days=30))


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

async def test_create_offer_opens_a_pending_offer_for_24_hours(session, service, clock):
    candidate = await add_candidate(session)

    offer = await service.create_offer(candidate.id)

    assert offer.status == OfferStatus.PENDING.value
    assert offer.email == candidate.email
    assert offer.mobile == candidate.mobile
    assert offer.sent_at == clock.now
    assert offer.expires_at == clock.now + timedelta(hours=24)
    assert offer.responded_at is None
    assert len(offer.token) == 64
    int(offer.token, 16)
    assert await _offer_count(session, candidate.id) == 1


async def test_create_offer_twice_conflicts(session, service):
    candidate = await add_candidate(session)
    await service.create_offer(candidate.id)

    with pytest.raises(ConflictError):
        await service.create_offer(candidate.id)
    assert await _offer_count(session, candidate.id) == 1


async def test_create_offer_for_unknown_candidate(service):
    with pytest.raises(NotFoundError):
        await service.create_offer("missing")


async def test_stale_pending_offer_does_not_block_a_new_one(session, service, clock):
    candidate = await add_candidate(session)
    first = await service.create_offer(candidate.id)

    clock.advance(hours=25)
    second = await service.create_offer(candidate.id)

    assert first.status == OfferStatus.EXPIRED.value
    assert second.status == OfferStatus.PENDING.value
    assert second.token != first.token


async def test_accepted_offer_blocks_a_new_one(session, service):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    await service.respond_to_offer(offer.token, "accept")

    with pytest.raises(ConflictError):
        await service.create_offer(candidate.id)


async def test_send_offer_uses_the_longer_window_and_emails_links(session, clock):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, text="OK")

    settings = make_settings(
        emailjs_service_id="svc", emailjs_template_id="tpl", emailjs_public_key="pub",
    )
    mailer = OfferMailer(settings, transport=httpx.MockTransport(handler))
    service = OfferService(session, settings, mailer, clock=clock)
    candidate = await add_candidate(session)

    result = await service.send_offer(candidate.id)

    assert result.email_sent is True
    assert result.offer.expires_at == clock.now + timedelta(hours=48)
    params = sent[0]["template_params"]
    assert sent[0]["service_id"] == "svc"
    assert params["email"] == candidate.email
    assert params["accept_link"] == f"https://hire.example.com/respond/{result.offer.token}?action=accept"
    assert params["decline_link"].endswith("?action=decline")


async def test_send_offer_keeps_the_offer_when_email_fails(session, clock):
    settings = make_settings(
        emailjs_service_id="svc", emailjs_template_id="tpl", emailjs_public_key="pub",
    )
    mailer = OfferMailer(settings, transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    service = OfferService(session, settings, mailer, clock=clock)
    candidate_id = (await add_candidate(session)).id

    with pytest.raises(PartialFailureError):
        await service.send_offer(candidate_id)

    await session.rollback()
    assert await _offer_count(session, candidate_id) == 1


async def test_send_offer_without_email_configuration(session, settings, clock):
    service = OfferService(session, settings, OfferMailer(settings), clock=clock)
    candidate = await add_candidate(session)

    result = await service.send_offer(candidate.id)

    assert result.email_sent is False
    assert result.offer.status == OfferStatus.PENDING.value


# ---------------------------------------------------------------------------
# Responding
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("action, expected", [("accept", "accepted"), ("decline", "declined")])
async def test_respond_resolves_a_pending_offer(session, service, clock, action, expected):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    clock.advance(hours=2)

    result = await service.respond_to_offer(offer.token, action)

    assert result.status == expected
    assert result.responded_at == clock.now


async def test_respond_after_expiry_marks_the_offer_expired(session, service, clock):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    clock.advance(hours=25)

    with pytest.raises(InvalidStateError) as first:
        await service.respond_to_offer(offer.token, "accept")
    assert first.value.reason == "expired"

    stored = await session.get(Offer, offer.id, populate_existing=True)
    assert stored.status == OfferStatus.EXPIRED.value
    assert stored.responded_at is None

    with pytest.raises(InvalidStateError) as second:
        await service.respond_to_offer(offer.token, "accept")
    assert second.value.reason == "already_responded"


async def test_resolved_token_cannot_be_reused(session, service):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    await service.respond_to_offer(offer.token, "decline")

    for action in ("accept", "decline"):
        with pytest.raises(InvalidStateError) as exc:
            await service.respond_to_offer(offer.token, action)
        assert exc.value.reason == "already_responded"
    assert offer.status == OfferStatus.DECLINED.value


async def test_respond_with_unknown_token(service):
    with pytest.raises(NotFoundError):
        await service.respond_to_offer("nope", "accept")


async def test_respond_with_unknown_action(session, service):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)

    with pytest.raises(ValidationError):
        await service.respond_to_offer(offer.token, "maybe")
    assert offer.status == OfferStatus.PENDING.value


# ---------------------------------------------------------------------------
# Resend
# ---------------------------------------------------------------------------

async def test_resend_resets_a_declined_offer(session, service, clock):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    old_token = offer.token
    await service.respond_to_offer(old_token, "decline")
    clock.advance(hours=3)

    result = await service.resend_offer(offer.id, notify=False)

    assert result.offer.id == offer.id
    assert result.offer.status == OfferStatus.PENDING.value
    assert result.offer.token != old_token
    assert result.offer.responded_at is None
    assert result.offer.sent_at == clock.now
    assert result.offer.expires_at == clock.now + timedelta(hours=24)
    with pytest.raises(NotFoundError):
        await service.respond_to_offer(old_token, "accept")


async def test_resend_refuses_an_accepted_offer(session, service):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    await service.respond_to_offer(offer.token, "accept")

    with pytest.raises(InvalidStateError) as exc:
        await service.resend_offer(offer.id, notify=False)
    assert exc.value.reason == "accepted"
    assert offer.status == OfferStatus.ACCEPTED.value


async def test_resend_of_accepted_offer_can_be_enabled(session, clock):
    service = OfferService(session, make_settings(allow_resend_accepted=True), clock=clock)
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    await service.respond_to_offer(offer.token, "accept")

    result = await service.resend_offer(offer.id, notify=False)

    assert result.offer.status == OfferStatus.PENDING.value


async def test_resend_conflicts_with_another_pending_offer(session, service, clock):
    candidate = await add_candidate(session)
    old = await service.create_offer(candidate.id)
    await service.respond_to_offer(old.token, "decline")
    await service.create_offer(candidate.id)

    with pytest.raises(ConflictError):
        await service.resend_offer(old.id, notify=False)


async def test_resend_unknown_offer(service):
    with pytest.raises(NotFoundError):
        await service.resend_offer("missing")


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------

async def test_expire_old_offers_is_idempotent(session, service, clock):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    clock.advance(hours=24, seconds=1)

    assert await service.expire_old_offers(candidate.id) == 1
    first_status = offer.status
    assert await service.expire_old_offers(candidate.id) == 0

    assert first_status == offer.status == OfferStatus.EXPIRED.value


async def test_expire_old_offers_leaves_other_candidates_alone(session, service, clock):
    jane = await add_candidate(session)
    john = await add_candidate(session, full_name="John", email="john@example.com")
    jane_offer = await service.create_offer(jane.id)
    john_offer = await service.create_offer(john.id)
    clock.advance(hours=30)

    await service.expire_old_offers(jane.id)

    assert jane_offer.status == OfferStatus.EXPIRED.value
    assert john_offer.status == OfferStatus.PENDING.value


async def test_sweep_expires_every_stale_offer(session, service, clock):
    for n in range(3):
        candidate = await add_candidate(session, email=f"c{n}@example.com")
        await service.create_offer(candidate.id)
    clock.advance(hours=30)

    assert await service.sweep_expired_offers() == 3
    assert await service.sweep_expired_offers() == 0


async def test_status_of(session, service, clock):
    candidate = await add_candidate(session)
    assert await service.status_of(candidate.id) == "not_sent"

    await service.create_offer(candidate.id)
    assert await service.status_of(candidate.id) == "pending"

    clock.advance(hours=25)
    assert await service.status_of(candidate.id) == "expired"


async def test_status_of_reports_the_most_recently_sent_offer(session, service, clock):
    candidate = await add_candidate(session)
    first = await service.create_offer(candidate.id)
    await service.respond_to_offer(first.token, "decline")
    clock.advance(hours=1)
    second = await service.create_offer(candidate.id)
    await service.respond_to_offer(second.token, "accept")

    assert await service.status_of(candidate.id) == "accepted"


# ---------------------------------------------------------------------------
# Physical letters
# ---------------------------------------------------------------------------

async def test_physical_letter_accepts_a_pending_offer(session, service, clock):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)

    updated, profile_updated = await service.set_physical_letter_collected(offer.id, True)

    assert updated.status == OfferStatus.ACCEPTED.value
    assert updated.responded_at == clock.now
    assert updated.physical_letter_collected is True
    assert profile_updated is False


async def test_physical_letter_marks_the_intern_profile(session, service, clock):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await service.create_offer(candidate.id)
    _, profile = await InternService(session, clock=clock).convert(candidate.id, offer.id, preference.id)
    assert profile.offer_letter_issued is False
    assert profile.offer_status == "not_sent"

    _, profile_updated = await service.set_physical_letter_collected(offer.id, True)

    assert profile_updated is True
    assert profile.offer_letter_issued is True
    assert profile.offer_letter_issued_at == clock.now
    assert profile.offer_status == "accepted"
    await session.flush()
    logs = (await session.execute(select(AuditLog).where(AuditLog.entity_id == profile.id))).scalars().all()
    assert [log.action for log in logs].count("update") == 1


async def test_unmarking_a_physical_letter_keeps_acceptance(session, service):
    candidate = await add_candidate(session)
    offer = await service.create_offer(candidate.id)
    await service.set_physical_letter_collected(offer.id, True)

    updated, _ = await service.set_physical_letter_collected(offer.id, False)

    assert updated.physical_letter_collected is False
    assert updated.status == OfferStatus.ACCEPTED.value


async def test_sync_offer_letters_backfills_profiles(session, service, clock):
    candidate = await add_candidate(session)
    preference = await add_preference(session)
    offer = await service.create_offer(candidate.id)
    await service.respond_to_offer(offer.token, "accept")
    _, profile = await InternService(session, clock=clock).convert(candidate.id, offer.id, preference.id)
    offer.physical_letter_collected = True
    await session.flush()

    assert await service.sync_offer_letters() == (1, 1)
    assert profile.offer_letter_issued is True
    assert await service.sync_offer_letters() == (1, 0)


async def test_list_offers_searches_candidate_fields(session, service, clock):
    jane = await add_candidate(session)
    john = await add_candidate(session, full_name="John Smith", email="john@example.com", college_name="South")
    await service.create_offer(jane.id)
    clock.advance(minutes=5)
    await service.create_offer(john.id)

    from internhub.core.pagination import PaginationParams

    items, total, candidates = await service.list_offers(PaginationParams.of(), search="south")
    assert total == 1
    assert items[0].candidate_id == john.id
    assert candidates[john.id].full_name == "John Smith"

    items, total, _ = await service.list_offers(PaginationParams.of())
    assert total == 2
    assert [o.candidate_id for o in items] == [john.id, jane.id]
