"""Integration Schemas — Google Sheets interchange."""

from pydantic import BaseModel, Field


class SheetsExportRequest(BaseModel):
    spreadsheet_url: str = Field(min_length=10, max_length=1000)


class AIServiceRow(BaseModel):
    name: str
    description: str
    category: str
    website: str
    pricing: str
    features: str
