import math
from typing import Tuple

import numpy as np

from config import settings, BLUR_WARNING, LOW_LIGHT_WARNING
from .filters import LAPLACIAN_KERNEL, correlate_interior, luminance, to_grayscale
from .models import ImageQuality, ensure_frame


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ImageQualityAnalyzer:
    """
    Evaluates live camera frames for document capture.
    Flags blur and low light so the user can be prompted to retake.
    """

    def __init__(self, blur_threshold: float = None, low_light_threshold: float = None):
        self.blur_threshold = settings.BLUR_THRESHOLD if blur_threshold is None else blur_threshold
        self.low_light_threshold = (
            settings.LOW_LIGHT_THRESHOLD if low_light_threshold is None else low_light_threshold
        )
        self.sample_stride = settings.BRIGHTNESS_SAMPLE_STRIDE

    def laplacian_variance(self, frame: np.ndarray) -> float:
        """Mean squared Laplacian response over interior pixels"""
        gray = to_grayscale(frame)
        h, w = gray.shape
        if h < 3 or w < 3:
            return 0.0
        response = correlate_interior(gray, LAPLACIAN_KERNEL)[1:-1, 1:-1]
        return float(np.mean(response * response))

    def detect_blur(self, frame: np.ndarray) -> Tuple[bool, int]:
        """Check for blur using Laplacian variance"""
        variance = self.laplacian_variance(frame)
        return variance < self.blur_threshold, round_half_up(variance)

    def mean_brightness(self, frame: np.ndarray) -> float:
        """Average luminance over every n-th pixel in row-major order"""
        samples = frame.reshape(-1, 4)[::self.sample_stride]
        return float(luminance(samples).mean())

    def detect_low_light(self, frame: np.ndarray) -> Tuple[bool, int]:
        brightness = self.mean_brightness(frame)
        return brightness < self.low_light_threshold, round_half_up(brightness)

    def analyze(self, frame: np.ndarray) -> ImageQuality:
        frame = ensure_frame(frame)
        is_blurry, blur_score = self.detect_blur(frame)
        is_low_light, brightness = self.detect_low_light(frame)

        warnings = []
        if is_blurry:
            warnings.append(BLUR_WARNING)
        if is_low_light:
            warnings.append(LOW_LIGHT_WARNING)

        return ImageQuality(
            is_blurry=is_blurry,
            blur_score=blur_score,
            is_low_light=is_low_light,
            brightness=brightness,
            warnings=tuple(warnings),
        )


def analyze_image_quality(frame: np.ndarray) -> ImageQuality:
    return ImageQualityAnalyzer().analyze(frame)
