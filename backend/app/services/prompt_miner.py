"""Prompt Miner — extracts generative-AI prompts from files, text and links via Gemini.

Invariants:
    - No Gemini client configured -> GeminiAPIError "not_configured" (503)
    - URL sources use Google Search grounding and free-text output; others request JSON
    - Unparseable output -> GeminiAPIError (502), except the URL prose fallback

Design Decisions:
    - Parsing/mapping delegated to core.prompt_extraction (pure, tested without network)
"""

import logging

from app.core.errors import GeminiAPIError
from app.core.prompt_extraction import (
    EXTRACTION_SCHEMA,
    SYSTEM_INSTRUCTION,
    build_instruction,
    is_url,
    map_extracted_prompt,
    parse_model_output,
    strip_data_url,
)
from app.schemas.tools import ExtractRequest

logger = logging.getLogger(__name__)


def _require(gemini):
    if gemini is None:
        raise GeminiAPIError(
            "Gemini API key is not configured", "not_configured", http_status=503,
        )
    return gemini


class PromptMinerService:
    def __init__(self, gemini=None):
        self.gemini = gemini

    async def extract(self, body: ExtractRequest) -> list[dict]:
        gemini = _require(self.gemini)
        url_source = body.task_type == "url" or (
            body.task_type == "text" and is_url(body.data.strip())
        )
        instruction = build_instruction(url_source)

        if body.task_type == "file":
            contents = gemini.build_contents(
                instruction,
                inline_data=strip_data_url(body.data),
                mime_type=body.mime_type,
            )
            original_image = body.data
        else:
            contents = gemini.build_contents(
                instruction, text=f"Analyze the following content:\n{body.data}",
            )
            original_image = None

        raw_text = await gemini.generate_text(
            contents,
            system_instruction=SYSTEM_INSTRUCTION,
            response_schema=None if url_source else EXTRACTION_SCHEMA,
            use_search=url_source,
        )
        items = parse_model_output(raw_text, url_source)
        if items is None:
            logger.warning(
                "Unparseable prompt miner output",
                extra={"provider": "gemini", "path": body.task_type},
            )
            raise GeminiAPIError("Failed to parse AI response", "invalid_response")

        logger.info(f"Extracted {len(items)} prompts from {body.task_type}",
                    extra={"provider": "gemini"})
        return [map_extracted_prompt(item, body.name, original_image) for item in items]

    async def generate_image(self, prompt: str) -> dict:
        result = await _require(self.gemini).generate_image(prompt)
        if result is None:
            raise GeminiAPIError("No image generated", "no_image")
        image, mime_type = result
        return {"image": image, "mime_type": mime_type}
