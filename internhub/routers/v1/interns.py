"""Intern endpoints — conversion, edits, summary and profile repair."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.response import DataResponse
from internhub.db.base import get_db
from internhub.domain.intern import Intern, InternProfile
from internhub.routers.deps import get_request_meta
from internhub.schemas.intern import (
    InternBrief,
    InternConvert,
    InternOut,
    InternProfileOut,
    InternUpdate,
    ReconcileResult,
)
from internhub.schemas.reports import InternSummary
from internhub.services.audit import RequestMeta
from internhub.services.interns import InternService
from internhub.services.reports import ReportService

router = APIRouter(prefix="/interns", tags=["Interns"])


def _intern_out(intern: Intern, profile: InternProfile | None) -> InternOut:
    out = InternOut.model_validate(intern)
    if profile is not None:
        out.profile = InternProfileOut.model_validate(profile)
    return out


@router.get("", response_model=DataResponse[list[InternOut]])
async def list_interns(session: AsyncSession = Depends(get_db)):
    rows = await InternService(session).list_interns()
    return {"data": [_intern_out(intern, profile) for intern, profile in rows]}


@router.post("", response_model=DataResponse[InternOut], status_code=status.HTTP_201_CREATED)
async def convert_candidate(
    body: InternConvert,
    session: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Convert a candidate with an offer into an intern + profile."""
    intern, profile = await InternService(session).convert(
        body.student_id, body.offer_id, body.domain_preference_id, meta
    )
    return {"data": _intern_out(intern, profile)}


@router.get("/summary", response_model=DataResponse[InternSummary])
async def intern_summary(session: AsyncSession = Depends(get_db)):
    return {"data": await ReportService(session).intern_summary()}


@router.get("/orphans", response_model=DataResponse[list[InternBrief]])
async def orphans(session: AsyncSession = Depends(get_db)):
    """Interns with no profile (half-completed conversions)."""
    interns = await InternService(session).find_orphans()
    return {"data": [InternBrief.model_validate(i) for i in interns]}


@router.post("/reconcile", response_model=DataResponse[ReconcileResult])
async def reconcile(
    session: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    repaired = await InternService(session).reconcile_orphans(meta)
    return {"data": ReconcileResult(repaired=len(repaired), intern_ids=repaired)}


@router.put("/{intern_id}", response_model=DataResponse[InternOut])
async def update_intern(
    intern_id: str,
    body: InternUpdate,
    session: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    intern, profile = await InternService(session).update_intern(intern_id, body, meta)
    return {"data": _intern_out(intern, profile)}
