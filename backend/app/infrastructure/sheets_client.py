"""Google Sheets Client — gspread service-account access for import and export.

Invariants:
    - Credentials come from the GOOGLE_SHEETS_CREDENTIALS JSON string only
    - gspread is synchronous: every call runs in a worker thread
    - gspread / auth failures surface as SheetsAPIError

Design Decisions:
    - Only the first worksheet is read or written; the spreadsheets are flat tables
"""

import asyncio
import json
import logging

import gspread

from app.core.errors import SheetsAPIError

logger = logging.getLogger(__name__)


class SheetsClient:
    def __init__(self, credentials_json: str):
        if not credentials_json:
            raise SheetsAPIError("Google Sheets credentials not configured", "not_configured")
        try:
            creds = json.loads(credentials_json)
        except json.JSONDecodeError as e:
            raise SheetsAPIError("Google Sheets credentials are not valid JSON", "bad_credentials") from e
        self._creds = creds
        self._client: gspread.Client | None = None

    def _gc(self) -> gspread.Client:
        if self._client is None:
            self._client = gspread.service_account_from_dict(self._creds)
        return self._client

    def _open(self, spreadsheet: str) -> gspread.Spreadsheet:
        if spreadsheet.startswith(("http://", "https://")):
            return self._gc().open_by_url(spreadsheet)
        return self._gc().open_by_key(spreadsheet)

    def _read_sync(self, spreadsheet: str) -> list[list[str]]:
        return self._open(spreadsheet).get_worksheet(0).get_all_values()

    def _write_sync(self, spreadsheet: str, rows: list[list]) -> int:
        worksheet = self._open(spreadsheet).get_worksheet(0)
        worksheet.clear()
        worksheet.update(rows, "A1")
        return len(rows)

    async def read_first_sheet(self, spreadsheet: str) -> list[list[str]]:
        """All values of the first worksheet, header row included."""
        return await self._run(self._read_sync, spreadsheet)

    async def replace_first_sheet(self, spreadsheet: str, rows: list[list]) -> int:
        """Clear the first worksheet and write rows from A1."""
        return await self._run(self._write_sync, spreadsheet, rows)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except gspread.exceptions.SpreadsheetNotFound as e:
            raise SheetsAPIError("Spreadsheet not found or not shared", "not_found") from e
        except (gspread.exceptions.GSpreadException, ValueError) as e:
            logger.error(f"Google Sheets call failed: {e}")
            raise SheetsAPIError(str(e), "api_error") from e
