"""Prompt Enhancer — quick-prompt generation through Gemini, Anthropic or a local fallback.

Invariants:
    - Never fails on provider errors: degrades to error_fallback_enhance and reports it
    - Unconfigured provider (no client) behaves like provider="fallback"
    - Happy talk applied after the LLM step, compression last; a provider failure
      returns the error fallback text untouched
    - diagnostics.original_length / final_length measure characters

Design Decisions:
    - Providers injected as already-built clients (None when unconfigured) so routes
      and tests decide availability, not this service
"""

import logging
import random

from app.core.errors import ExternalServiceError
from app.core.prompt_enhancement import (
    add_happy_talk,
    build_system_prompt,
    clean_llm_response,
    compress_prompt,
    error_fallback_enhance,
    fallback_enhance,
)
from app.schemas.tools import EnhanceRequest

logger = logging.getLogger(__name__)


class PromptEnhancerService:
    def __init__(
        self,
        gemini=None,
        anthropic=None,
        anthropic_model: str = "claude-sonnet-4-5",
        rng: random.Random | None = None,
    ):
        self.gemini = gemini
        self.anthropic = anthropic
        self.anthropic_model = anthropic_model
        self.rng = rng

    async def _call_provider(self, provider: str, system: str, prompt: str) -> str:
        if provider == "gemini":
            contents = self.gemini.build_contents(prompt)
            return await self.gemini.generate_text(contents, system_instruction=system)
        return await self.anthropic.complete_text(
            model=self.anthropic_model, system=system, prompt=prompt,
        )

    def _available(self, provider: str) -> bool:
        if provider == "gemini":
            return self.gemini is not None
        if provider == "anthropic":
            return self.anthropic is not None
        return False

    async def enhance(self, body: EnhanceRequest) -> dict:
        diagnostics: dict = {
            "fallback_used": False,
            "original_length": len(body.prompt),
            "happy_talk_applied": False,
            "compression": body.compression,
        }
        provider_used = body.provider
        provider_failed = False

        if not self._available(body.provider):
            enhanced = fallback_enhance(body.prompt)
            provider_used = "fallback"
            diagnostics["fallback_used"] = True
        else:
            system = build_system_prompt(
                body.master_prompt,
                body.character.name if body.character else None,
                body.character.description if body.character else None,
                body.subject_context,
            )
            try:
                enhanced = clean_llm_response(
                    await self._call_provider(body.provider, system, body.prompt),
                )
                if not enhanced:
                    raise ValueError("Empty response from provider")
            except (ExternalServiceError, ValueError) as e:
                logger.warning(
                    f"Enhancement provider failed: {e}",
                    extra={"provider": body.provider},
                )
                enhanced = error_fallback_enhance(body.prompt)
                provider_used = "fallback"
                diagnostics["fallback_used"] = True
                diagnostics["error"] = str(e)
                provider_failed = True

        if not provider_failed:
            if body.happy_talk:
                enhanced, diagnostics["happy_talk_applied"] = add_happy_talk(enhanced, self.rng)
            if body.compression != "none":
                enhanced = compress_prompt(enhanced, body.compression)

        diagnostics["final_length"] = len(enhanced)
        return {
            "enhanced_prompt": enhanced,
            "original_prompt": body.prompt,
            "provider_used": provider_used,
            "diagnostics": diagnostics,
        }
