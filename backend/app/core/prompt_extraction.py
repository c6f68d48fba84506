"""Prompt Extraction — pure request shaping and response coercion for the prompt miner.

Invariants:
    - clean_json keeps the outermost [...] span when present, else strips ``` fences
    - coerce_prompt_list always returns a list of dicts (dict wrapped, scalars dropped)
    - URL sources fall back to one "Extracted from Link" prompt when the model
      returns prose longer than LINK_FALLBACK_MIN_CHARS
    - Every mapped prompt has a fresh uuid4 id and a non-empty title

Design Decisions:
    - Parsing separated from the Gemini call: the brittle part (model output
      shape) is unit-testable without network
"""

import json
import uuid


LINK_FALLBACK_MIN_CHARS: int = 20
LINK_FALLBACK_MAX_CHARS: int = 500

SYSTEM_INSTRUCTION = (
    "You are an expert AI Data Parser specialized in extracting generative AI "
    "metadata and prompts from mixed media."
)

BASE_INSTRUCTION = (
    "Analyze the provided content.\n"
    'Identify and extract any "Generative AI Prompts" present.\n'
    "A prompt is a detailed text description used to generate images or text.\n"
    "Sometimes prompts are in metadata, screenshots of web UIs, or just plain text lists.\n"
    "If an image is a screenshot of a prompt interface (like Civitai, Midjourney "
    "Discord), extract the prompt text carefully."
)
URL_INSTRUCTION = (
    "Since this is a URL, use Google Search to retrieve the context, caption, or "
    "text content of the page. Look for image generation parameters, prompts, or "
    "art descriptions in the post caption or comments.\n"
    "IMPORTANT: Return ONLY a JSON array of the extracted data. Do not include "
    "markdown formatting or conversational text."
)
JSON_INSTRUCTION = (
    "Return a JSON array of the extracted prompts. If no prompts are found, "
    "return an empty array."
)

EXTRACTION_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING", "description": "A short, descriptive title for the prompt."},
            "content": {"type": "STRING", "description": "The full generative AI prompt text found."},
            "negativePrompt": {"type": "STRING", "description": "Any negative prompt text found (optional)."},
            "tags": {
                "type": "ARRAY", "items": {"type": "STRING"},
                "description": "Keywords describing the style or subject.",
            },
            "suggestedModel": {
                "type": "STRING",
                "description": "The likely AI model this prompt is for (e.g. Midjourney, Stable Diffusion).",
            },
            "imageParams": {
                "type": "STRING",
                "description": "Any parameters like --ar 16:9, steps, cfg scale found.",
            },
        },
        "required": ["title", "content", "tags"],
    },
}


def is_url(data: str | None) -> bool:
    return isinstance(data, str) and data.startswith(("http://", "https://"))


def strip_data_url(data: str) -> str:
    """Drop a 'data:<mime>;base64,' prefix when present."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def build_instruction(url_source: bool) -> str:
    tail = URL_INSTRUCTION if url_source else JSON_INSTRUCTION
    return f"{BASE_INSTRUCTION}\n\n{tail}"


def clean_json(text: str) -> str:
    clean = text.strip()
    first, last = clean.find("["), clean.rfind("]")
    if first != -1 and last > first:
        clean = clean[first:last + 1]
    elif clean.startswith("```"):
        clean = clean.removeprefix("```json").removeprefix("```")
        clean = clean.removesuffix("```")
    return clean.strip()


def coerce_prompt_list(parsed: object) -> list[dict]:
    if isinstance(parsed, list):
        return [p for p in parsed if isinstance(p, dict)]
    if isinstance(parsed, dict):
        return [parsed]
    return []


def parse_model_output(raw_text: str, url_source: bool) -> list[dict] | None:
    """Parse model text into raw prompt dicts; None when unusable."""
    try:
        parsed = json.loads(clean_json(raw_text or "[]"))
    except json.JSONDecodeError:
        if url_source and len(raw_text) > LINK_FALLBACK_MIN_CHARS:
            return [{
                "title": "Extracted from Link",
                "content": raw_text[:LINK_FALLBACK_MAX_CHARS],
                "tags": ["link-content"],
                "suggestedModel": "Unknown",
            }]
        return None
    return coerce_prompt_list(parsed)


def map_extracted_prompt(
    raw: dict, source_name: str, original_source_image: str | None = None,
) -> dict:
    """Shape one model item into the API's extracted-prompt record."""
    tags = raw.get("tags") or []
    return {
        "id": str(uuid.uuid4()),
        "title": raw.get("title") or f"Prompt from {source_name}",
        "content": raw.get("content") or "",
        "negative_prompt": raw.get("negativePrompt"),
        "model": raw.get("suggestedModel") or "Unknown",
        "image_params": raw.get("imageParams"),
        "tags": [str(t) for t in tags] if isinstance(tags, list) else [],
        "source": source_name,
        "images": [],
        "original_source_image": original_source_image,
    }
