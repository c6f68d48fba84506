"""Tool Schemas — aspect ratio, prompt miner and quick-prompt payloads.

Invariants:
    - AspectRatioRequest: positive dimensions, at most one resize target
    - ExtractRequest: task_type and name required; data required for every task
    - EnhanceRequest.compression limited to none/light/medium/heavy
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class AspectRatioRequest(BaseModel):
    width: float = Field(gt=0, le=100_000)
    height: float = Field(gt=0, le=100_000)
    target_width: float | None = Field(None, gt=0, le=100_000)
    target_height: float | None = Field(None, gt=0, le=100_000)
    megapixels: float | None = Field(None, gt=0, le=1000)

    @model_validator(mode="after")
    def single_target(self):
        targets = [t for t in (self.target_width, self.target_height, self.megapixels) if t]
        if len(targets) > 1:
            raise ValueError("provide at most one of target_width, target_height, megapixels")
        return self


class CharacterRef(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)


class EnhanceRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=10_000)
    provider: Literal["gemini", "anthropic", "fallback"] = "gemini"
    master_prompt: str | None = Field(None, max_length=5000)
    character: CharacterRef | None = None
    subject_context: str | None = Field(None, max_length=2000)
    happy_talk: bool = False
    compression: Literal["none", "light", "medium", "heavy"] = "none"


class ExtractRequest(BaseModel):
    task_type: Literal["file", "text", "url"]
    data: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=500)
    mime_type: str | None = Field(None, max_length=100)


class GenerateImageRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=10_000)
