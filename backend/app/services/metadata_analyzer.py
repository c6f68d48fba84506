"""Metadata Analyzer — decodes an uploaded image and summarizes its metadata."""

import logging

from app.core.errors import InvalidRequestError
from app.core.image_metadata import summarize_image
from app.infrastructure.image_reader import read_image

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 25 * 1024 * 1024


def analyze_image(filename: str, data: bytes) -> dict:
    if not data:
        raise InvalidRequestError("Empty file", field="file")
    if len(data) > MAX_UPLOAD_BYTES:
        raise InvalidRequestError("File too large (max 25 MB)", field="file")
    facts = read_image(data)
    summary = summarize_image(
        filename=filename,
        width=facts.width,
        height=facts.height,
        size_bytes=len(data),
        image_format=facts.format,
        mode=facts.mode,
        text_chunks=facts.text_chunks,
        exif=facts.exif,
    )
    source = summary.get("ai_generation", {}).get("source", "unknown")
    logger.info(f"Analyzed {filename}: {source}", extra={"path": filename})
    return summary
