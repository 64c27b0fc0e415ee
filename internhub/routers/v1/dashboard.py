"""Dashboard statistics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.response import DataResponse
from internhub.db.base import get_db
from internhub.schemas.reports import DashboardStats
from internhub.services.reports import ReportService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DataResponse[DashboardStats])
async def dashboard_stats(session: AsyncSession = Depends(get_db)):
    return {"data": await ReportService(session).dashboard()}
