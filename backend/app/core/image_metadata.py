"""Image Metadata Analysis — pure AI-source detection over decoded image text fields.

Invariants:
    - Detection order: Midjourney, ComfyUI, Stable Diffusion, else unknown
    - Confidence: ComfyUI workflow/prompt chunk 0.9, filename-only 0.7;
      Stable Diffusion 0.8; Midjourney 0.9
    - Parsers never raise on malformed text; missing fields are simply absent

Design Decisions:
    - Input is the already-decoded text-chunk dict (from infrastructure/image_reader),
      so every rule here runs on plain strings in tests
    - Regexes mirror the A1111 "parameters" layout and Midjourney CLI flags
"""

import json
import math
import re

from app.core.aspect_ratio import format_aspect_ratio
from app.core.domain_types import AISource


_MJ_MARKERS = re.compile(r"--v\s+\d+|--chaos\s+\d+|--ar\s+\d+:\d+|Job ID:")
_MJ_FILENAME = re.compile(r"^u\d+_.*_[a-f0-9-]{36}_\d+")
_MJ_USERNAME = re.compile(r"^u(\d+)_")

_MJ_FLAGS: tuple[tuple[str, re.Pattern, type], ...] = (
    ("mj_version", re.compile(r"--v\s+(\d+(?:\.\d+)?)"), str),
    ("mj_aspect_ratio", re.compile(r"--ar\s+(\d+:\d+)"), str),
    ("mj_chaos", re.compile(r"--chaos\s+(\d+)"), int),
    ("mj_experimental", re.compile(r"--exp\s+(\d+)"), int),
    ("mj_omni_reference", re.compile(r"--oref\s+([^\s]+)"), str),
    ("mj_quality", re.compile(r"--q(?:uality)?\s+(\d+(?:\.\d+)?)"), float),
    ("mj_stylize", re.compile(r"--s(?:tylize)?\s+(\d+)"), int),
    ("mj_weirdness", re.compile(r"--(?:weird|w)\s+(\d+)"), int),
    ("mj_seed", re.compile(r"--seed\s+(\d+)"), str),
    ("mj_style_weight", re.compile(r"--sw\s+(\d+(?:\.\d+)?)"), float),
    ("mj_image_weight", re.compile(r"--iw\s+(\d+(?:\.\d+)?)"), float),
    ("mj_character_weight", re.compile(r"--cw\s+(\d+(?:\.\d+)?)"), float),
    ("mj_omni_weight", re.compile(r"--ow\s+(\d+(?:\.\d+)?)"), float),
    ("mj_character_reference", re.compile(r"--cref\s+([^\s]+)"), str),
    ("mj_job_id", re.compile(r"Job ID:\s*([a-f0-9-]+)", re.IGNORECASE), str),
)
_MJ_PROMPT = re.compile(r"^(.*?)(?:\s--|\sJob ID:|$)", re.DOTALL)
_MJ_SREF = re.compile(r"--sref\s+([^\-]+?)(?:\s--|\s*$)")
_MJ_RAW = re.compile(r"--(?:style\s+)?raw\b")

_SD_PROMPT = re.compile(r"^(.*?)(?:Negative prompt:|Steps:|$)", re.DOTALL)
_SD_NEGATIVE = re.compile(r"Negative prompt:\s*(.*?)(?:Steps:|$)", re.DOTALL)
_SD_FIELDS: tuple[tuple[str, re.Pattern, type], ...] = (
    ("steps", re.compile(r"Steps:\s*(\d+)", re.IGNORECASE), int),
    ("cfg_scale", re.compile(r"CFG scale:\s*([\d.]+)", re.IGNORECASE), float),
    ("seed", re.compile(r"Seed:\s*(\d+)", re.IGNORECASE), str),
    ("sampler", re.compile(r"Sampler:\s*([^\n,]+)", re.IGNORECASE), str),
    ("checkpoint", re.compile(r"Model:\s*([^\n,]+)", re.IGNORECASE), str),
)

EXIF_KEYS = ("Make", "Model", "Software", "DateTime", "ExposureTime", "FNumber", "ISOSpeedRatings")


def _apply_patterns(text: str, patterns, target: dict) -> None:
    for key, pattern, cast in patterns:
        match = pattern.search(text)
        if not match:
            continue
        try:
            target[key] = cast(match.group(1).strip())
        except ValueError:
            continue


def parse_midjourney(description: str) -> dict:
    metadata: dict = {}
    prompt_match = _MJ_PROMPT.match(description)
    if prompt_match and prompt_match.group(1).strip():
        metadata["prompt"] = prompt_match.group(1).strip()
    _apply_patterns(description, _MJ_FLAGS, metadata)
    sref = _MJ_SREF.search(description)
    if sref:
        metadata["mj_style_references"] = sref.group(1).strip().split()
    if _MJ_RAW.search(description):
        metadata["mj_raw"] = True
    return metadata


def parse_stable_diffusion(parameters: str) -> dict:
    metadata: dict = {}
    prompt_match = _SD_PROMPT.match(parameters)
    if prompt_match and prompt_match.group(1).strip():
        metadata["prompt"] = prompt_match.group(1).strip()
    negative = _SD_NEGATIVE.search(parameters)
    if negative:
        metadata["negative_prompt"] = negative.group(1).strip()
    _apply_patterns(parameters, _SD_FIELDS, metadata)
    metadata["full_parameters_text"] = parameters
    return metadata


def _chunk(text_chunks: dict[str, str], name: str) -> str:
    for key, value in text_chunks.items():
        if key.lower() == name.lower():
            return value
    return ""


def detect_midjourney(filename: str, text_chunks: dict[str, str]) -> dict | None:
    description = _chunk(text_chunks, "Description")
    if description and _MJ_MARKERS.search(description):
        metadata = parse_midjourney(description)
        author = _MJ_USERNAME.match(filename)
        if author:
            metadata["mj_author"] = author.group(1)
        return {"source": AISource.MIDJOURNEY.value, "confidence": 0.9, "metadata": metadata}
    if _MJ_FILENAME.match(filename):
        author = _MJ_USERNAME.match(filename)
        metadata = {"mj_author": author.group(1)} if author else {}
        return {"source": AISource.MIDJOURNEY.value, "confidence": 0.7, "metadata": metadata}
    return None


def detect_comfyui(filename: str, text_chunks: dict[str, str]) -> dict | None:
    for key, value in text_chunks.items():
        lowered = key.lower()
        if "workflow" not in lowered and "comfy" not in lowered:
            continue
        try:
            workflow = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(workflow, dict) and (
            "nodes" in workflow or "last_node_id" in workflow or "version" in workflow
        ):
            return {
                "source": AISource.COMFYUI.value, "confidence": 0.9,
                "metadata": {"workflow": workflow},
            }

    prompt_text = text_chunks.get("prompt")
    if prompt_text:
        try:
            prompt_data = json.loads(prompt_text)
        except (json.JSONDecodeError, TypeError):
            prompt_data = None
        if isinstance(prompt_data, dict) and prompt_data:
            return {
                "source": AISource.COMFYUI.value, "confidence": 0.9,
                "metadata": {"prompt_data": prompt_data},
            }

    if "comfyui" in filename.lower():
        return {"source": AISource.COMFYUI.value, "confidence": 0.7, "metadata": {}}
    return None


def detect_stable_diffusion(text_chunks: dict[str, str]) -> dict | None:
    parameters = _chunk(text_chunks, "parameters") or _chunk(text_chunks, "Description")
    if not parameters:
        return None
    if (
        "stable diffusion" in parameters.lower()
        or "Steps:" in parameters
        or "CFG scale:" in parameters
    ):
        return {
            "source": AISource.STABLE_DIFFUSION.value, "confidence": 0.8,
            "metadata": parse_stable_diffusion(parameters),
        }
    return None


def detect_ai_source(filename: str, text_chunks: dict[str, str]) -> dict:
    """Run detectors in priority order."""
    for result in (
        detect_midjourney(filename, text_chunks),
        detect_comfyui(filename, text_chunks),
        detect_stable_diffusion(text_chunks),
    ):
        if result:
            return result
    return {"source": AISource.UNKNOWN.value, "confidence": 0.0, "metadata": {}}


def format_bytes(size: int, decimals: int = 2) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB", "TB")
    exponent = min(int(math.log(size, 1024)), len(units) - 1)
    places = max(decimals, 0)
    text = f"{size / (1024 ** exponent):.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {units[exponent]}"


def filter_exif(exif: dict) -> dict:
    """Keep only camera-relevant EXIF fields."""
    return {
        key: value for key, value in exif.items()
        if key in EXIF_KEYS or "Camera" in key or "Lens" in key
    }


def summarize_image(
    *,
    filename: str,
    width: int,
    height: int,
    size_bytes: int,
    image_format: str | None,
    mode: str | None,
    text_chunks: dict[str, str],
    exif: dict,
) -> dict:
    """Assemble the analyzer response from decoded image facts."""
    ratio = width / height if height else 0
    summary: dict = {
        "file_name": filename,
        "width": width,
        "height": height,
        "dimension_string": f"{width}x{height}",
        "aspect_ratio": round(ratio, 4) if ratio else None,
        "aspect_ratio_formatted": format_aspect_ratio(ratio),
        "size": size_bytes,
        "formatted_size": format_bytes(size_bytes),
        "format": image_format,
        "color_mode": mode,
        "has_alpha": bool(mode and ("A" in mode or mode == "P")),
        "text_chunks": text_chunks,
    }
    camera = filter_exif(exif)
    if camera:
        summary["exif"] = camera
    detection = detect_ai_source(filename, text_chunks)
    if detection["source"] != AISource.UNKNOWN:
        summary["ai_generation"] = {
            "source": detection["source"],
            "confidence": detection["confidence"],
            **detection["metadata"],
        }
    return summary
