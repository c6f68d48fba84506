"""Gemini Client — google-genai async calls with tenacity retry and error mapping.

Invariants:
    - Server errors (5xx) and empty candidates are retried up to max_attempts
    - Client errors (4xx) fail immediately
    - Every failure surfaces as GeminiAPIError (502); callers never see SDK exceptions

Design Decisions:
    - Retry policy built per instance so max_attempts follows settings
    - Content assembly lives here so services never import google.genai types
"""

import base64
import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from app.core.errors import GeminiAPIError

logger = logging.getLogger(__name__)


class RetryableError(RuntimeError):
    pass


def _retry_policy(max_attempts: int):
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(initial=1.5, max=30),
        retry=retry_if_exception_type((RetryableError, genai_errors.ServerError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


class GeminiClient:
    """Text, JSON and image generation against the Gemini API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        image_model: str = "gemini-2.0-flash-exp",
        max_attempts: int = 3,
    ):
        self._client = genai.Client(api_key=api_key).aio
        self.model = model
        self.image_model = image_model
        self._generate = _retry_policy(max_attempts)(self._generate_once)

    @staticmethod
    def build_contents(
        instruction: str,
        *,
        text: str | None = None,
        inline_data: str | None = None,
        mime_type: str | None = None,
    ) -> list:
        """Instruction plus either base64 inline data or free text."""
        parts: list = []
        if inline_data is not None:
            try:
                raw = base64.b64decode(inline_data, validate=False)
            except ValueError as e:
                raise GeminiAPIError(
                    "File data is not valid base64", "invalid_input", http_status=400,
                ) from e
            parts.append(genai_types.Part.from_bytes(
                data=raw, mime_type=mime_type or "application/octet-stream",
            ))
        if text is not None:
            parts.append(genai_types.Part.from_text(text=text))
        parts.append(genai_types.Part.from_text(text=instruction))
        return [genai_types.Content(role="user", parts=parts)]

    async def generate_text(
        self,
        contents,
        *,
        system_instruction: str | None = None,
        response_schema: dict | None = None,
        use_search: bool = False,
    ) -> str:
        """Generate text; JSON mode when a response_schema is given."""
        config = genai_types.GenerateContentConfig(system_instruction=system_instruction)
        if use_search:
            config.tools = [genai_types.Tool(google_search=genai_types.GoogleSearch())]
        elif response_schema is not None:
            config.response_mime_type = "application/json"
            config.response_schema = response_schema
        response = await self._guarded(self.model, contents, config)
        return response.text or ""

    async def generate_image(self, prompt: str) -> tuple[str, str] | None:
        """Return (base64 image, mime type), or None when no image part came back."""
        config = genai_types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = await self._guarded(self.image_model, prompt, config)
        for part in response.candidates[0].content.parts or []:
            blob = part.inline_data
            if blob is not None and blob.data:
                return base64.b64encode(blob.data).decode("ascii"), blob.mime_type or "image/png"
        return None

    async def _guarded(self, model: str, contents, config):
        try:
            return await self._generate(model, contents, config)
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}", extra={"provider": "gemini"})
            raise GeminiAPIError(str(e), f"status_{e.code}") from e
        except RetryableError as e:
            raise GeminiAPIError(str(e), "empty_response") from e

    async def _generate_once(self, model: str, contents, config):
        response = await self._client.models.generate_content(
            model=model, contents=contents, config=config,
        )
        if not response.candidates:
            raise RetryableError("Empty completion from Gemini")
        if not response.candidates[0].content:
            raise RetryableError("Empty content in Gemini completion")
        return response
