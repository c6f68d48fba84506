"""Prompt Enhancement — tests for the pure quick-prompt transforms.

Tests cover:
    - build_system_prompt defaults, character and subject sections
    - clean_llm_response prefix/quote/markdown stripping
    - add_happy_talk application and skip rule
    - compress_prompt limits and keyword priority
    - fallback suffixes
"""

import random

from app.core.prompt_enhancement import (
    CLOSING_INSTRUCTION,
    COMPRESSION_LIMITS,
    DEFAULT_MASTER_PROMPT,
    ERROR_FALLBACK_SUFFIX,
    FALLBACK_SUFFIX,
    HAPPY_MODIFIERS,
    add_happy_talk,
    build_system_prompt,
    clean_llm_response,
    compress_prompt,
    error_fallback_enhance,
    fallback_enhance,
)


# ─── build_system_prompt ─────────────────────────────────────────

def test_system_prompt_defaults():
    system = build_system_prompt()
    assert system.startswith(DEFAULT_MASTER_PROMPT)
    assert system.endswith(CLOSING_INSTRUCTION)


def test_system_prompt_with_character_and_subject():
    system = build_system_prompt("Be brief.", "Mara", "a desert pilot", "fox")
    assert system.startswith("Be brief.")
    assert 'with "Mara" - a desert pilot' in system
    assert "Original subject context: fox" in system
    assert system.endswith(CLOSING_INSTRUCTION)


# ─── clean_llm_response ──────────────────────────────────────────

def test_clean_llm_response_strips_wrapping():
    assert clean_llm_response('"Enhanced prompt: a **bold** fox"') == "a bold fox"


def test_clean_llm_response_generated_prefix_case_insensitive():
    assert clean_llm_response("generated PROMPT:   misty lake") == "misty lake"


# ─── add_happy_talk ──────────────────────────────────────────────

def test_happy_talk_prepends_two_modifiers():
    text, applied = add_happy_talk("a fox", random.Random(0))
    assert applied is True
    assert text.endswith(", a fox")
    prefix = text[: -len(", a fox")]
    used = [m for m in HAPPY_MODIFIERS if m in prefix]
    assert len(used) >= 2


def test_happy_talk_skips_when_modifier_present():
    assert add_happy_talk("Masterpiece fox portrait") == ("Masterpiece fox portrait", False)


# ─── compress_prompt ─────────────────────────────────────────────

def test_compress_short_prompt_untouched():
    assert compress_prompt("a fox", "heavy") == "a fox"


def test_compress_keeps_priority_words_first():
    prompt = "cinematic " + "filler " * 100 + "dramatic lighting"
    result = compress_prompt(prompt, "heavy")
    assert len(result) <= COMPRESSION_LIMITS["heavy"]
    assert result.startswith("cinematic dramatic lighting filler")


def test_compress_unknown_level_uses_medium():
    prompt = "word " * 200
    assert len(compress_prompt(prompt, "extreme")) <= COMPRESSION_LIMITS["medium"]


# ─── fallbacks ───────────────────────────────────────────────────

def test_fallbacks_append_suffixes():
    assert fallback_enhance("fox") == "fox" + FALLBACK_SUFFIX
    assert error_fallback_enhance("fox") == "fox" + ERROR_FALLBACK_SUFFIX
