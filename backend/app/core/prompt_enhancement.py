"""Prompt Enhancement — pure text transforms for the quick-prompt generator.

Invariants:
    - build_system_prompt always ends with the "Provide ONLY..." instruction
    - clean_llm_response strips wrapping quotes, "Enhanced/Generated prompt:" prefixes, ** markers
    - add_happy_talk never adds modifiers when one is already present
    - compress_prompt output fits the level's limit unless keyword words alone exceed it

Design Decisions:
    - Randomness injected (rng param) so happy-talk selection is testable
    - Two fallbacks: FALLBACK_SUFFIX when the caller picks no LLM,
      ERROR_FALLBACK_SUFFIX when the chosen LLM fails
"""

import random
import re


DEFAULT_MASTER_PROMPT = (
    "Transform this into a highly detailed, cinematic prompt optimized for AI "
    "image generation. Include camera angles, lighting, composition, and "
    "artistic style."
)
CLOSING_INSTRUCTION = (
    "Provide ONLY the enhanced prompt text, no explanations or meta-text."
)
FALLBACK_SUFFIX = (
    ", professional photography, dramatic lighting, high resolution, detailed composition"
)
ERROR_FALLBACK_SUFFIX = ", professional quality, detailed, high resolution"

HAPPY_MODIFIERS = (
    "masterpiece", "best quality", "ultra-detailed", "professional",
    "stunning", "beautiful", "perfect",
)
COMPRESSION_LIMITS = {"light": 500, "medium": 350, "heavy": 200}
PRIORITY_KEYWORDS = (
    "cinematic", "dramatic", "portrait", "landscape", "lighting", "composition",
    "style", "detailed", "resolution", "camera", "lens", "shot",
)

_QUOTE_RE = re.compile(r"""^["']|["']$""")
_PREFIX_RE = re.compile(r"^(?:Enhanced|Generated) prompt:\s*", re.IGNORECASE)


def build_system_prompt(
    master_prompt: str | None = None,
    character_name: str | None = None,
    character_description: str | None = None,
    subject: str | None = None,
) -> str:
    """Assemble the system instruction sent to the enhancement LLM."""
    system_prompt = master_prompt or DEFAULT_MASTER_PROMPT
    if character_name:
        system_prompt += (
            f'\n\nIMPORTANT: Replace any generic character references with '
            f'"{character_name}" - {character_description or ""}'
        )
    if subject:
        system_prompt += f"\n\nOriginal subject context: {subject}"
    return system_prompt + "\n\n" + CLOSING_INSTRUCTION


def clean_llm_response(response: str) -> str:
    text = _QUOTE_RE.sub("", response.strip())
    text = _PREFIX_RE.sub("", text)
    text = text.replace("**", "")
    return text.strip()


def add_happy_talk(prompt: str, rng: random.Random | None = None) -> tuple[str, bool]:
    """Prepend two quality modifiers unless one is already present.

    Returns (prompt, applied).
    """
    lowered = prompt.lower()
    if any(mod in lowered for mod in HAPPY_MODIFIERS):
        return prompt, False
    chosen = (rng or random).sample(HAPPY_MODIFIERS, 2)
    return f"{', '.join(chosen)}, {prompt}", True


def compress_prompt(prompt: str, level: str = "medium") -> str:
    """Shorten to the level limit, keeping keyword-bearing words first."""
    max_length = COMPRESSION_LIMITS.get(level, COMPRESSION_LIMITS["medium"])
    if len(prompt) <= max_length:
        return prompt

    words = prompt.split()

    def is_priority(word: str) -> bool:
        lowered = word.lower()
        return any(kw in lowered for kw in PRIORITY_KEYWORDS)

    compressed = " ".join(w for w in words if is_priority(w))
    for word in (w for w in words if not is_priority(w)):
        candidate = f"{compressed} {word}" if compressed else word
        if len(candidate) > max_length:
            break
        compressed = candidate
    return compressed


def fallback_enhance(prompt: str) -> str:
    return f"{prompt}{FALLBACK_SUFFIX}"


def error_fallback_enhance(prompt: str) -> str:
    return f"{prompt}{ERROR_FALLBACK_SUFFIX}"
