"""Tool Routes — image metadata analyzer and aspect-ratio calculator."""

from fastapi import APIRouter, File, UploadFile

from app.core.aspect_ratio import (
    STANDARD_RATIOS, match_standard, resize_to_height, resize_to_pixels,
    resize_to_width, simplify,
)
from app.schemas.tools import AspectRatioRequest
from app.services.metadata_analyzer import analyze_image

router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.post("/metadata")
async def analyze_metadata(file: UploadFile = File(...)):
    data = await file.read()
    return analyze_image(file.filename or "upload", data)


@router.post("/aspect-ratio")
async def calculate_aspect_ratio(body: AspectRatioRequest):
    ratio_w, ratio_h = simplify(body.width, body.height)
    result = {
        "ratio": f"{ratio_w}:{ratio_h}",
        "ratio_width": ratio_w,
        "ratio_height": ratio_h,
        "decimal": round(body.width / body.height, 4),
        "standard": match_standard(body.width, body.height),
    }
    if body.target_width:
        resized = resize_to_width(body.width, body.height, body.target_width)
    elif body.target_height:
        resized = resize_to_height(body.width, body.height, body.target_height)
    elif body.megapixels:
        resized = resize_to_pixels(body.width, body.height, body.megapixels * 1_000_000)
    else:
        resized = None
    if resized:
        result["resized"] = {"width": resized[0], "height": resized[1]}
    return result


@router.get("/aspect-ratio/standard")
async def list_standard_ratios():
    return {
        "ratios": [
            {"label": r.label, "width": r.width, "height": r.height, "description": r.description}
            for r in STANDARD_RATIOS
        ],
    }
