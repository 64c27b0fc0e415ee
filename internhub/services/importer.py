"""Spreadsheet importer — candidates and domain preferences from Google Forms sheets.

Both sheets carry a header row. Candidates are upserted by email (a re-sync
overwrites every mapped column); domain preferences are insert-only and the
first row seen for an email wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from dateutil import parser as date_parser
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.core.config import Settings
from internhub.integrations.sheets import SheetsClient
from internhub.repositories.candidate import CandidateRepository, normalize_email
from internhub.repositories.domain_preference import DomainPreferenceRepository

logger = logging.getLogger(__name__)

Row = Sequence[str]

# Candidate form columns, in sheet order
CANDIDATE_COLUMNS = (
    "submitted_at",
    "full_name",
    "email",
    "mobile",
    "city_state",
    "address",
    "college_name",
    "degree",
    "branch",
    "year_of_study",
    "preferred_domain",
    "technical_skills",
    "prior_experience",
    "portfolio_url",
    "motivation",
    "declaration",
)

# Domain-preference form columns; 9..11 are the three technology picks
PREFERENCE_COLUMNS = (
    "submitted_at",
    "full_name",
    "email",
    "contact_number",
    "college_name",
    "year_of_study",
    "domain",
    "skill_level",
    "interest_reason",
)
_TECH_COLUMNS = (9, 10, 11)
_EMAIL_ADDRESS_COLUMN = 12


@dataclass
class CandidateSyncStats:
    total_sheet_rows: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass
class PreferenceImportStats:
    total_sheet_rows: int = 0
    imported: int = 0
    skipped: int = 0


def cell(row: Row, index: int) -> str | None:
    """Trimmed cell value, or None when the cell is missing or blank."""
    if index >= len(row) or row[index] is None:
        return None
    value = str(row[index]).strip()
    return value or None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a form timestamp; naive values are taken as UTC, garbage as None."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        logger.warning("Unparsable sheet timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def split_skills(value: str | None) -> list[str]:
    if not value:
        return []
    return [s.strip() for s in value.split(",") if s.strip()]


def candidate_fields(row: Row) -> dict[str, Any]:
    """Map one candidate sheet row to column values (email excluded)."""
    fields: dict[str, Any] = {}
    for index, name in enumerate(CANDIDATE_COLUMNS):
        if name == "email":
            continue
        raw = cell(row, index)
        if name == "submitted_at":
            fields[name] = parse_timestamp(raw)
        elif name == "technical_skills":
            fields[name] = split_skills(raw)
        elif name == "full_name":
            fields[name] = raw or ""
        else:
            fields[name] = raw
    return fields


def preference_fields(row: Row) -> dict[str, Any]:
    fields: dict[str, Any] = {name: cell(row, i) for i, name in enumerate(PREFERENCE_COLUMNS)}
    fields["submitted_at"] = parse_timestamp(fields["submitted_at"])
    fields["full_name"] = fields["full_name"] or ""
    fields["technologies"] = [t for t in (cell(row, i) for i in _TECH_COLUMNS) if t]
    fields["email_address"] = cell(row, _EMAIL_ADDRESS_COLUMN) or fields["email"]
    return fields


class SpreadsheetImporter:
    def __init__(self, session: AsyncSession, settings: Settings, sheets: SheetsClient | None = None):
        self._settings = settings
        self._sheets = sheets or SheetsClient(settings)
        self._candidates = CandidateRepository(session)
        self._preferences = DomainPreferenceRepository(session)

    # ------------------------------------------------------------------
    # Fetch + import
    # ------------------------------------------------------------------

    async def pull_candidates(self) -> CandidateSyncStats:
        rows = await self._sheets.fetch_values(
            self._settings.candidates_spreadsheet_id, self._settings.candidates_range
        )
        return await self.sync_candidates(rows)

    async def pull_domain_preferences(self) -> PreferenceImportStats:
        rows = await self._sheets.fetch_values(
            self._settings.domain_preferences_spreadsheet_id,
            self._settings.domain_preferences_range,
        )
        return await self.import_domain_preferences(rows)

    # ------------------------------------------------------------------
    # Row processing
    # ------------------------------------------------------------------

    async def sync_candidates(self, rows: Sequence[Row]) -> CandidateSyncStats:
        data_rows = rows[1:]
        stats = CandidateSyncStats(total_sheet_rows=len(data_rows))
        for row in data_rows:
            email = cell(row, 2)
            if not email:
                stats.skipped += 1
                continue
            _, created = await self._candidates.upsert_by_email(email, candidate_fields(row))
            if created:
                stats.inserted += 1
            else:
                stats.updated += 1

        logger.info(
            "Candidate sync: %d rows, %d inserted, %d updated, %d skipped",
            stats.total_sheet_rows, stats.inserted, stats.updated, stats.skipped,
        )
        return stats

    async def import_domain_preferences(self, rows: Sequence[Row]) -> PreferenceImportStats:
        data_rows = rows[1:]
        stats = PreferenceImportStats(total_sheet_rows=len(data_rows))
        seen = await self._preferences.existing_emails()

        for row in data_rows:
            if not cell(row, 0):
                stats.skipped += 1
                continue
            fields = preference_fields(row)
            key = normalize_email(fields["email"])
            if not key or key in seen:
                logger.debug("Domain preference for %r already present, skipping", fields["email"])
                stats.skipped += 1
                continue
            await self._preferences.create(**fields)
            seen.add(key)
            stats.imported += 1

        logger.info(
            "Domain preference import: %d rows, %d imported, %d skipped",
            stats.total_sheet_rows, stats.imported, stats.skipped,
        )
        return stats
