"""Google Sheets v4 client — reads a value range as rows of strings."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from internhub.core.config import Settings
from internhub.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class SheetsClient:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport

    async def fetch_values(self, spreadsheet_id: str | None, cell_range: str) -> list[list[str]]:
        """Return the rows of ``cell_range`` (header row included).

        Trailing empty cells are omitted by the API, so rows can be ragged.
        """
        s = self._settings
        if not spreadsheet_id:
            raise UpstreamError("Spreadsheet id is not configured")
        if not s.google_sheets_api_key:
            raise UpstreamError("Google Sheets API key is not configured")

        url = f"{s.sheets_base_url}/{spreadsheet_id}/values/{quote(cell_range, safe='')}"
        try:
            async with httpx.AsyncClient(
                timeout=s.sheets_timeout, transport=self._transport
            ) as client:
                response = await client.get(url, params={"key": s.google_sheets_api_key})
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Sheets API returned %s for %s (%s)",
                exc.response.status_code, spreadsheet_id, cell_range,
            )
            raise UpstreamError(
                f"Google Sheets returned {exc.response.status_code} for range '{cell_range}'"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Sheets API request failed for %s: %s", spreadsheet_id, exc)
            raise UpstreamError(f"Google Sheets unreachable: {exc}") from exc

        rows = body.get("values") or []
        logger.info("Fetched %d rows from %s (%s)", len(rows), spreadsheet_id, cell_range)
        return [[str(cell) for cell in row] for row in rows]
