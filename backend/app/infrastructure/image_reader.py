"""Image Reader — Pillow decoding of dimensions, text chunks and EXIF.

Invariants:
    - Unreadable bytes raise InvalidRequestError (400), never a Pillow exception
    - Pixel counts over Image.MAX_IMAGE_PIXELS are rejected before decoding
    - text_chunks holds only string values (PNG tEXt/zTXt/iTXt, plus str info keys)
    - EXIF values are JSON-safe (rationals and bytes stringified)
"""

import io
import warnings
from dataclasses import dataclass, field

from PIL import ExifTags, Image, UnidentifiedImageError

from app.core.errors import InvalidRequestError

_EXIF_IFD = 0x8769


@dataclass
class ImageFacts:
    width: int
    height: int
    format: str | None
    mode: str | None
    text_chunks: dict[str, str] = field(default_factory=dict)
    exif: dict = field(default_factory=dict)


def _json_safe(value):
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").strip("\x00")
    return str(value)


def _read_exif(img: Image.Image) -> dict:
    exif = img.getexif()
    tags: dict = {}
    for tag_id, value in exif.items():
        tags[ExifTags.TAGS.get(tag_id, str(tag_id))] = _json_safe(value)
    for tag_id, value in exif.get_ifd(_EXIF_IFD).items():
        tags[ExifTags.TAGS.get(tag_id, str(tag_id))] = _json_safe(value)
    return tags


def read_image(data: bytes) -> ImageFacts:
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            img = Image.open(io.BytesIO(data))
        with img:
            chunks = {k: v for k, v in img.info.items() if isinstance(v, str)}
            png_text = getattr(img, "text", None)
            if png_text:
                chunks.update({k: str(v) for k, v in png_text.items()})
            return ImageFacts(
                width=img.width,
                height=img.height,
                format=img.format,
                mode=img.mode,
                text_chunks=chunks,
                exif=_read_exif(img),
            )
    except (
        UnidentifiedImageError, OSError, SyntaxError,
        Image.DecompressionBombError, Image.DecompressionBombWarning,
    ) as e:
        raise InvalidRequestError("Invalid image file", field="file") from e
