"""Domain-preference survey endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.pagination import PaginationParams
from internhub.core.response import DataResponse, ListResponse, paginated
from internhub.db.base import get_db
from internhub.schemas.candidate import DomainPreferenceFilters, DomainPreferenceOut
from internhub.schemas.reports import DomainPreferenceSummary
from internhub.services.reports import ReportService

router = APIRouter(prefix="/domain-preferences", tags=["Domain preferences"])


@router.get("", response_model=ListResponse[DomainPreferenceOut])
async def list_domain_preferences(
    search: Optional[str] = Query(default=None),
    domain: Optional[str] = Query(default=None),
    college: Optional[str] = Query(default=None),
    skill_level: Optional[str] = Query(default=None, alias="skillLevel"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await ReportService(session).list_domain_preferences(
        pagination, search=search, domain=domain, college=college, skill_level=skill_level
    )
    return paginated(
        [DomainPreferenceOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/filters", response_model=DataResponse[DomainPreferenceFilters])
async def filters(session: AsyncSession = Depends(get_db)):
    return {"data": await ReportService(session).domain_preference_filters()}


@router.get("/summary", response_model=DataResponse[DomainPreferenceSummary])
async def summary(session: AsyncSession = Depends(get_db)):
    return {"data": await ReportService(session).domain_preference_summary()}
