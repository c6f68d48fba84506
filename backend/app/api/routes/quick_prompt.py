"""Quick-Prompt Routes — prompt enhancement with provider fallback."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_anthropic_client, get_gemini_client
from app.config import get_settings
from app.schemas.tools import EnhanceRequest
from app.services.prompt_enhancer import PromptEnhancerService

router = APIRouter(prefix="/api/quick-prompt", tags=["quick-prompt"])


@router.post("/enhance")
async def enhance_prompt(
    body: EnhanceRequest,
    gemini=Depends(get_gemini_client),
    anthropic=Depends(get_anthropic_client),
):
    service = PromptEnhancerService(
        gemini=gemini, anthropic=anthropic, anthropic_model=get_settings().anthropic_model,
    )
    return await service.enhance(body)
