from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np


class Point(NamedTuple):
    x: int
    y: int


@dataclass(frozen=True)
class DetectedDocument:
    """A quadrilateral found in a single frame, corners clockwise from top-left"""
    corners: Tuple[Point, Point, Point, Point]
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "corners": [{"x": p.x, "y": p.y} for p in self.corners],
            "confidence": round(self.confidence, 4),
        }


@dataclass(frozen=True)
class ImageQuality:
    is_blurry: bool
    blur_score: int
    is_low_light: bool
    brightness: int
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_blurry": self.is_blurry,
            "blur_score": self.blur_score,
            "is_low_light": self.is_low_light,
            "brightness": self.brightness,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class CaptureResult:
    """Snapshot handed to the wizard when the user presses capture"""
    screenshot: Optional[bytes]
    detection: Optional[DetectedDocument]
    quality: Optional[ImageQuality]
    advisories: List[str] = field(default_factory=list)

    @property
    def has_document(self) -> bool:
        return self.detection is not None


def ensure_frame(frame: np.ndarray) -> np.ndarray:
    """
    Validate a frame and return it as an (H, W, 4) RGBA uint8 array.
    RGB frames get an opaque alpha channel; the input is never modified.
    """
    frame = np.asarray(frame)
    if frame.dtype != np.uint8:
        raise ValueError(f"Frame must be uint8, got {frame.dtype}")
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError(f"Frame must have shape (H, W, 4), got {frame.shape}")
    h, w = frame.shape[:2]
    if h <= 0 or w <= 0:
        raise ValueError(f"Frame has invalid dimensions ({w}x{h})")
    if frame.shape[2] == 3:
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        frame = np.concatenate([frame, alpha], axis=2)
    return frame
