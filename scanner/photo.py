import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np

from config import settings
from .filters import luminance, to_grayscale
from .models import ensure_frame

logger = logging.getLogger(__name__)


class PassportPhotoValidator:
    """
    Validates an uploaded passport photo.

    Portraits have soft skin tones and few hard edges, so the focus check
    here is a mean neighbour difference with a much lower bar than the
    document blur check. The two must stay separate.
    """

    def __init__(self):
        self.min_size = settings.PHOTO_MIN_SIZE
        self.min_aspect = settings.PHOTO_MIN_ASPECT
        self.max_aspect = settings.PHOTO_MAX_ASPECT
        self.min_brightness = settings.PHOTO_MIN_BRIGHTNESS
        self.max_brightness = settings.PHOTO_MAX_BRIGHTNESS
        self.blur_threshold = settings.PHOTO_BLUR_THRESHOLD

    def check_resolution(self, frame: np.ndarray) -> Tuple[bool, Optional[str]]:
        h, w = frame.shape[:2]
        if w < self.min_size or h < self.min_size:
            return False, "Image resolution is too low. Please use a higher quality photo."
        return True, None

    def check_aspect_ratio(self, frame: np.ndarray) -> Tuple[bool, Optional[str]]:
        """Roughly 35x45mm (0.77) up to 2x2in (1.0), with some slack"""
        h, w = frame.shape[:2]
        ratio = w / h
        if ratio < self.min_aspect or ratio > self.max_aspect:
            return False, ("Image dimensions do not match standard passport photo "
                           "aspect ratio (approx 3.5:4.5 or 1:1).")
        return True, None

    def check_brightness(self, frame: np.ndarray) -> Tuple[bool, Optional[str]]:
        mean = float(luminance(frame).mean())
        if mean < self.min_brightness:
            return False, "Image is too dark. Please ensure good lighting."
        if mean > self.max_brightness:
            return False, "Image is too bright/overexposed."
        return True, None

    def focus_score(self, frame: np.ndarray) -> float:
        """Sum of |left| and |top| neighbour differences, averaged over all pixels"""
        gray = to_grayscale(frame).astype(np.int32)
        h, w = gray.shape
        inner = gray[1:, 1:]
        score = np.abs(inner - gray[1:, :-1]).sum() + np.abs(inner - gray[:-1, 1:]).sum()
        return float(score) / (w * h)

    def check_focus(self, frame: np.ndarray) -> Tuple[bool, Optional[str]]:
        score = self.focus_score(frame)
        logger.debug("Image focus score: %.2f", score)
        if score < self.blur_threshold:
            return False, "Image appears to be blurry. Please upload a clearer photo."
        return True, None

    def evaluate(self, frame: np.ndarray) -> Dict[str, Any]:
        frame = ensure_frame(frame)

        checks = [
            self.check_resolution,
            self.check_aspect_ratio,
            self.check_brightness,
            self.check_focus,
        ]

        errors = []
        for check in checks:
            ok, msg = check(frame)
            if not ok:
                errors.append(msg)

        return {
            "is_valid": not errors,
            "errors": errors,
        }


def validate_passport_photo(frame: np.ndarray) -> Dict[str, Any]:
    return PassportPhotoValidator().evaluate(frame)
