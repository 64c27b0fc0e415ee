"""Candidate listing endpoints (rows are written only by the sheet sync)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.pagination import PaginationParams
from internhub.core.response import DataResponse, ListResponse, paginated
from internhub.db.base import get_db
from internhub.schemas.candidate import CandidateOut, CandidateWithOfferStatus, CollegeList
from internhub.services.reports import ReportService

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.get("", response_model=ListResponse[CandidateOut])
async def list_candidates(
    search: Optional[str] = Query(default=None, description="Match name, email, mobile or college"),
    college: Optional[str] = Query(default=None, description="Exact college name (case-insensitive)"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await ReportService(session).list_candidates(pagination, search=search, college=college)
    return paginated(
        [CandidateOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/with-offer-status", response_model=DataResponse[list[CandidateWithOfferStatus]])
async def candidates_with_offer_status(session: AsyncSession = Depends(get_db)):
    """Every candidate, newest first, with the status of their latest offer."""
    return {"data": await ReportService(session).candidates_with_offer_status()}


@router.get("/colleges", response_model=DataResponse[CollegeList])
async def colleges(session: AsyncSession = Depends(get_db)):
    names = await ReportService(session).college_names()
    return {"data": CollegeList(colleges=names, count=len(names))}
