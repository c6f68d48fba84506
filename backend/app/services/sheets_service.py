"""Sheets Service — AI-services directory import and prompt export via Google Sheets.

Invariants:
    - AI-services rows read from row 2, columns A-F; missing cells become ""
    - Fully empty rows skipped
    - Export writes a header row then one row per prompt owned by the caller
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import SheetsAPIError
from app.models.prompt import Prompt

logger = logging.getLogger(__name__)

AI_SERVICE_COLUMNS = ("name", "description", "category", "website", "pricing", "features")
EXPORT_HEADER = ["ID", "Name", "Prompt", "Negative Prompt", "Tags", "Public", "Created At"]


def rows_to_ai_services(rows: list[list[str]]) -> list[dict]:
    services = []
    for row in rows[1:]:
        cells = [(row[i] if i < len(row) else "") for i in range(len(AI_SERVICE_COLUMNS))]
        if not any(c.strip() for c in cells):
            continue
        services.append(dict(zip(AI_SERVICE_COLUMNS, cells)))
    return services


def prompt_to_row(prompt: Prompt) -> list:
    return [
        prompt.id,
        prompt.name,
        prompt.prompt_content,
        prompt.negative_prompt or "",
        ", ".join(prompt.tags or []),
        "TRUE" if prompt.is_public else "FALSE",
        prompt.created_at.isoformat() if prompt.created_at else "",
    ]


class SheetsService:
    def __init__(self, sheets, spreadsheet_id: str = ""):
        self.sheets = sheets
        self.spreadsheet_id = spreadsheet_id

    async def ai_services(self) -> list[dict]:
        if not self.spreadsheet_id:
            raise SheetsAPIError("AI services spreadsheet not configured", "not_configured")
        return rows_to_ai_services(await self.sheets.read_first_sheet(self.spreadsheet_id))

    async def export_prompts(
        self, db: AsyncSession, user_id: uuid.UUID, spreadsheet_url: str,
    ) -> int:
        result = await db.execute(
            select(Prompt)
            .where(Prompt.user_id == user_id)
            .order_by(Prompt.created_at.desc())
        )
        rows = [EXPORT_HEADER] + [prompt_to_row(p) for p in result.scalars().all()]
        await self.sheets.replace_first_sheet(spreadsheet_url, rows)
        logger.info(f"Exported {len(rows) - 1} prompts", extra={"user_id": user_id})
        return len(rows) - 1
