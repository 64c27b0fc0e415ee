"""Offer administration endpoints (session-gated)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.config import Settings
from internhub.core.pagination import PaginationParams
from internhub.core.response import DataResponse, ListResponse, paginated
from internhub.db.base import get_db
from internhub.domain.candidate import Candidate
from internhub.domain.offer import Offer
from internhub.integrations.mailer import OfferMailer
from internhub.routers.deps import get_mailer, get_request_meta, get_settings
from internhub.schemas.candidate import CandidateBrief
from internhub.schemas.offer import (
    ExpirySweepResult,
    OfferCreate,
    OfferIssued,
    OfferOut,
    OfferResend,
    OfferSend,
    OfferStatusOut,
    PhysicalLetterResult,
    PhysicalLetterUpdate,
)
from internhub.schemas.reports import OfferSummary
from internhub.services.audit import RequestMeta
from internhub.services.offers import IssuedOffer, OfferService
from internhub.services.reports import ReportService

router = APIRouter(prefix="/offers", tags=["Offers"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(session: AsyncSession, settings: Settings, mailer: OfferMailer | None = None) -> OfferService:
    return OfferService(session, settings, mailer)


def _offer_out(offer: Offer, candidates: dict[str, Candidate]) -> OfferOut:
    out = OfferOut.model_validate(offer)
    candidate = candidates.get(offer.candidate_id)
    if candidate is not None:
        out.candidate = CandidateBrief.model_validate(candidate)
    return out


def _issued(result: IssuedOffer) -> OfferIssued:
    offer = result.offer
    return OfferIssued(
        offer_id=offer.id,
        token=offer.token,
        status=offer.status,
        sent_at=offer.sent_at,
        expires_at=offer.expires_at,
        email_sent=result.email_sent,
    )


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[OfferOut])
async def list_offers(
    search: Optional[str] = Query(default=None, description="Match offer email or candidate name/email/college"),
    filter_status: Optional[str] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """List offers, most recently sent first."""
    items, total, candidates = await _svc(session, settings).list_offers(
        pagination, search=search, status=filter_status
    )
    return paginated([_offer_out(o, candidates) for o in items], total, pagination.page, pagination.limit)


@router.post("", response_model=DataResponse[OfferIssued], status_code=status.HTTP_201_CREATED)
async def create_offer(
    body: OfferCreate,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create a pending offer without sending an email."""
    offer = await _svc(session, settings).create_offer(body.candidate_id, body.email, body.mobile)
    return {"data": _issued(IssuedOffer(offer=offer))}


@router.post("/send", response_model=DataResponse[OfferIssued], status_code=status.HTTP_201_CREATED)
async def send_offer(
    body: OfferSend,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: OfferMailer = Depends(get_mailer),
):
    """Create a pending offer and email the accept/decline links."""
    result = await _svc(session, settings, mailer).send_offer(
        body.candidate_id, body.email, body.mobile, body.details
    )
    return {"data": _issued(result)}


@router.post("/resend", response_model=DataResponse[OfferIssued])
async def resend_offer(
    body: OfferResend,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: OfferMailer = Depends(get_mailer),
):
    result = await _svc(session, settings, mailer).resend_offer(
        body.offer_id, notify=body.notify, details=body.details
    )
    return {"data": _issued(result)}


@router.post("/physical-letter", response_model=DataResponse[PhysicalLetterResult])
async def update_physical_letter(
    body: PhysicalLetterUpdate,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Mark a signed paper offer letter as collected (confirms acceptance)."""
    svc = _svc(session, settings)
    offer, profile_updated = await svc.set_physical_letter_collected(body.offer_id, body.collected, meta)
    message = "Physical letter marked as collected" if body.collected else "Physical letter unmarked"
    return {
        "data": PhysicalLetterResult(
            message=message,
            offer=OfferOut.model_validate(offer),
            profile_updated=profile_updated,
        )
    }


@router.get("/physical-letter", response_model=DataResponse[list[OfferOut]])
async def list_physical_letters(
    collected: Optional[bool] = Query(default=None),
    candidate_id: Optional[str] = Query(default=None, alias="candidateId"),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    offers, candidates = await _svc(session, settings).list_physical_letters(collected, candidate_id)
    return {"data": [_offer_out(o, candidates) for o in offers]}


@router.get("/status", response_model=DataResponse[OfferStatusOut])
async def offer_status(
    candidate_id: str = Query(..., alias="candidateId"),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Status of the candidate's latest offer, or ``not_sent``."""
    current = await _svc(session, settings).status_of(candidate_id)
    return {"data": OfferStatusOut(candidate_id=candidate_id, status=current)}


@router.get("/summary", response_model=DataResponse[OfferSummary])
async def offer_summary(session: AsyncSession = Depends(get_db)):
    return {"data": await ReportService(session).offer_summary()}


@router.post("/expire", response_model=DataResponse[ExpirySweepResult])
async def expire_offers(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Expire every pending offer whose window has closed."""
    count = await _svc(session, settings).sweep_expired_offers()
    return {"data": ExpirySweepResult(expired=count)}
