"""Prompt Miner Routes — Gemini prompt extraction and image generation."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user, get_gemini_client
from app.models.user import User
from app.schemas.tools import ExtractRequest, GenerateImageRequest
from app.services.prompt_miner import PromptMinerService

router = APIRouter(prefix="/api/prompt-miner", tags=["prompt-miner"])


@router.post("/extract")
async def extract_prompts(
    body: ExtractRequest,
    user: User = Depends(get_current_user),
    gemini=Depends(get_gemini_client),
):
    return {"prompts": await PromptMinerService(gemini).extract(body)}


@router.post("/generate-image")
async def generate_image(
    body: GenerateImageRequest,
    user: User = Depends(get_current_user),
    gemini=Depends(get_gemini_client),
):
    return await PromptMinerService(gemini).generate_image(body.prompt)
