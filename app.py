from fastapi import FastAPI, File, UploadFile, Form, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

import logging
import tempfile
import os
import shutil
from typing import Optional, Dict, Any

import numpy as np

from scanner.edge_detection import detect_document_edges
from scanner.file_converter import convert_to_frames, frame_to_png
from scanner.overlay import draw_document_overlay, new_surface
from scanner.photo import validate_passport_photo
from scanner.quality import analyze_image_quality
from config import settings

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Document Scanner Service",
    description="Document edge detection and capture quality checks for KYC onboarding",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def load_upload(upload: UploadFile) -> np.ndarray:
    """
    Save an upload to a temp dir and decode its first image/page.
    Raises HTTPException(400) when the file cannot be decoded.
    """
    if not upload or not upload.filename:
        raise HTTPException(status_code=400, detail="No image uploaded")

    temp_dir = tempfile.mkdtemp(prefix="scan_")
    try:
        raw_path = os.path.join(temp_dir, f"raw_{os.path.basename(upload.filename)}")

        with open(raw_path, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)

        # Multi-page PDFs: only the first page is analysed
        frames = convert_to_frames(raw_path)
        if not frames:
            raise ValueError(f"No images produced for {upload.filename}")
        return frames[0]

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


# ------------------------
# Document Scanning API
# ------------------------
@app.post("/scan/analyze")
async def analyze_scan(
    image: UploadFile = File(...),
    min_area: Optional[float] = Form(None),
    max_area: Optional[float] = Form(None),
    epsilon: Optional[float] = Form(None)
):
    """
    Detect the document outline and grade frame quality.
    Supports JPG / PNG / HEIC / PDF uploads.
    """
    frame = load_upload(image)

    try:
        quality = analyze_image_quality(frame)
        detected = detect_document_edges(
            frame,
            min_area=min_area,
            max_area=max_area,
            epsilon=epsilon,
        )
    except Exception as e:
        logger.exception("Scan analysis failed")
        raise HTTPException(
            status_code=500,
            detail=f"Scan analysis failed: {str(e)}"
        )

    height, width = frame.shape[:2]
    result: Dict[str, Any] = {
        "document": detected.to_dict() if detected else None,
        "quality": quality.to_dict(),
        "capture_ready": bool(detected and detected.confidence > settings.READY_CONFIDENCE),
        "frame": {"width": width, "height": height},
    }
    return result


@app.post("/scan/overlay")
async def scan_overlay(
    image: UploadFile = File(...),
    min_area: Optional[float] = Form(None),
    max_area: Optional[float] = Form(None)
):
    """Render the live-feedback overlay for a frame as a transparent PNG"""
    frame = load_upload(image)

    try:
        detected = detect_document_edges(frame, min_area=min_area, max_area=max_area)
        height, width = frame.shape[:2]
        surface = new_surface(width, height)
        draw_document_overlay(surface, width, height, detected)
        png = frame_to_png(np.asarray(surface))
    except Exception as e:
        logger.exception("Overlay rendering failed")
        raise HTTPException(
            status_code=500,
            detail=f"Overlay rendering failed: {str(e)}"
        )

    return Response(content=png, media_type="image/png")


# ------------------------
# Passport Photo API
# ------------------------
@app.post("/photo/validate")
async def validate_photo(photo: UploadFile = File(...)):
    frame = load_upload(photo)

    try:
        return validate_passport_photo(frame)
    except Exception as e:
        logger.exception("Photo validation failed")
        raise HTTPException(
            status_code=500,
            detail=f"Photo validation failed: {str(e)}"
        )


# ------------------------
# Health Check
# ------------------------
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "document-scanner"
    }


# ------------------------
# Local Dev Entry
# ------------------------
if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
