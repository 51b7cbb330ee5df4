import io
import os
from typing import List

import numpy as np
from PIL import Image, UnidentifiedImageError
import pillow_heif
from pdf2image import convert_from_path
from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError

pillow_heif.register_heif_opener()

SUPPORTED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".heic"}
PDF_EXT = ".pdf"
PDF_DPI = 150


def image_to_frame(img: Image.Image) -> np.ndarray:
    """PIL image -> (H, W, 4) RGBA uint8 frame"""
    return np.array(img.convert("RGBA"), dtype=np.uint8)


def frame_to_png(frame: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(frame)).save(buffer, "PNG")
    return buffer.getvalue()


def convert_to_frames(input_path: str) -> List[np.ndarray]:
    """
    Converts input file (image / HEIC / PDF) into RGBA frames.
    Returns one frame per image or PDF page.
    """
    ext = os.path.splitext(input_path)[1].lower()

    # -------- Case 1: Normal image or HEIC --------
    if ext in SUPPORTED_IMAGE_EXTS:
        try:
            with Image.open(input_path) as img:
                return [image_to_frame(img)]
        except (UnidentifiedImageError, OSError) as e:
            # truncated files open lazily and only fail on load
            raise ValueError(f"Could not decode image: {os.path.basename(input_path)}") from e

    # -------- Case 2: PDF --------
    if ext == PDF_EXT:
        try:
            pages = convert_from_path(input_path, dpi=PDF_DPI)
            return [image_to_frame(page) for page in pages]
        except (PDFPageCountError, PDFSyntaxError, OSError) as e:
            raise ValueError(f"Could not read PDF: {os.path.basename(input_path)}") from e

    raise ValueError(f"Unsupported file type: {ext}")
