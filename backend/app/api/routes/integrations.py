"""Integration Routes — Google Sheets import/export."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_sheets_client
from app.config import get_settings
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.integrations import AIServiceRow, SheetsExportRequest
from app.services.sheets_service import SheetsService

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


@router.get("/ai-services")
async def list_ai_services(sheets=Depends(get_sheets_client)):
    service = SheetsService(sheets, get_settings().ai_services_spreadsheet_id)
    return {"services": [AIServiceRow(**row) for row in await service.ai_services()]}


@router.post("/sheets/export-prompts")
async def export_prompts(
    body: SheetsExportRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    sheets=Depends(get_sheets_client),
):
    exported = await SheetsService(sheets).export_prompts(db, user.id, body.spreadsheet_url)
    return {"exported": exported}
