"""Sync endpoints — spreadsheet imports and offer-letter reconciliation."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.config import Settings
from internhub.core.response import DataResponse
from internhub.db.base import get_db
from internhub.integrations.sheets import SheetsClient
from internhub.routers.deps import get_request_meta, get_settings, get_sheets_client
from internhub.schemas.candidate import CandidateSyncResult, DomainPreferenceImportResult
from internhub.schemas.offer import OfferLetterSyncResult
from internhub.services.audit import RequestMeta
from internhub.services.importer import SpreadsheetImporter
from internhub.services.offers import OfferService

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post("/candidates", response_model=DataResponse[CandidateSyncResult])
async def sync_candidates(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sheets: SheetsClient = Depends(get_sheets_client),
):
    """Pull the candidate form sheet and upsert every row by email."""
    stats = await SpreadsheetImporter(session, settings, sheets).pull_candidates()
    return {"data": CandidateSyncResult(**asdict(stats))}


@router.post("/domain-preferences", response_model=DataResponse[DomainPreferenceImportResult])
async def sync_domain_preferences(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sheets: SheetsClient = Depends(get_sheets_client),
):
    """Import new domain-preference rows; emails already present are skipped."""
    stats = await SpreadsheetImporter(session, settings, sheets).pull_domain_preferences()
    return {"data": DomainPreferenceImportResult(**asdict(stats))}


@router.post("/offer-letters", response_model=DataResponse[OfferLetterSyncResult])
async def sync_offer_letters(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    meta: RequestMeta = Depends(get_request_meta),
):
    matched, updated = await OfferService(session, settings).sync_offer_letters(meta)
    return {
        "data": OfferLetterSyncResult(
            message=f"Updated {updated} intern profile(s) from {matched} collected letter(s)",
            matched=matched,
            updated=updated,
        )
    }
