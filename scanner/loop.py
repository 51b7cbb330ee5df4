import logging
import threading
import time
from typing import Callable, List, Optional, Protocol

import numpy as np

from config import settings
from .edge_detection import detect_document_edges
from .models import CaptureResult, DetectedDocument, ImageQuality
from .overlay import draw_document_overlay, new_surface
from .quality import ImageQualityAnalyzer

logger = logging.getLogger(__name__)

DetectionCallback = Callable[[Optional[DetectedDocument]], None]


class FrameSource(Protocol):
    """Camera or video feed consumed by the detection loop"""

    def is_ready(self) -> bool: ...

    def get_current_frame(self) -> Optional[np.ndarray]: ...

    def get_screenshot(self) -> Optional[bytes]: ...


def capture_advisories(quality: Optional[ImageQuality]) -> List[str]:
    """Retake prompts shown after a capture"""
    if quality is None:
        return []
    advisories = []
    if quality.is_blurry:
        advisories.append(
            f"Image appears blurry (score: {quality.blur_score}). "
            "Consider retaking for better results."
        )
    if quality.is_low_light:
        advisories.append(
            f"Image has low lighting (brightness: {quality.brightness}). "
            "Consider retaking in better light."
        )
    return advisories


class DetectionLoop:
    """
    Throttled per-frame document detection.

    tick() is meant to be called at display rate. A cycle only runs when the
    source is ready, no other cycle is in progress and more than
    detection_interval milliseconds have passed since the last one.
    """

    def __init__(self,
                 source: FrameSource,
                 on_document_detected: Optional[DetectionCallback] = None,
                 detection_interval: int = None,
                 min_area: float = None,
                 max_area: float = None,
                 epsilon: float = None,
                 draw_overlay: bool = True,
                 clock: Callable[[], float] = time.monotonic):
        self.source = source
        self.on_document_detected = on_document_detected
        self.detection_interval = (
            settings.DETECTION_INTERVAL_MS if detection_interval is None else detection_interval
        )
        self.min_area = settings.SCAN_MIN_AREA if min_area is None else min_area
        self.max_area = settings.SCAN_MAX_AREA if max_area is None else max_area
        self.epsilon = settings.EPSILON if epsilon is None else epsilon
        self.draw_overlay = draw_overlay
        self.clock = clock

        self.quality_analyzer = ImageQualityAnalyzer()
        self.current_detection: Optional[DetectedDocument] = None
        self.image_quality: Optional[ImageQuality] = None
        self.overlay = None
        self.is_processing = False
        self._last_run: Optional[float] = None
        self._was_ready = False

    @property
    def capture_ready(self) -> bool:
        detection = self.current_detection
        return detection is not None and detection.confidence > settings.READY_CONFIDENCE

    def _due(self, now: float) -> bool:
        if self._last_run is None:
            return True
        return (now - self._last_run) * 1000 > self.detection_interval

    def tick(self) -> bool:
        """Run one detection cycle if due. Returns True when a cycle ran."""
        now = self.clock()
        if self.is_processing or not self._due(now) or not self.source.is_ready():
            return False

        frame = self.source.get_current_frame()
        if frame is None:
            return False

        self.is_processing = True
        self._last_run = now
        try:
            self._process(frame)
        except Exception:
            logger.exception("Error processing frame")
        finally:
            self.is_processing = False
        return True

    def _process(self, frame: np.ndarray):
        self.image_quality = self.quality_analyzer.analyze(frame)

        detected = detect_document_edges(
            frame,
            min_area=self.min_area,
            max_area=self.max_area,
            epsilon=self.epsilon,
        )
        self.current_detection = detected

        ready = self.capture_ready
        if ready and not self._was_ready:
            logger.info("Document ready for capture (confidence=%.2f)", detected.confidence)
        self._was_ready = ready

        if self.on_document_detected:
            self.on_document_detected(detected)

        if self.draw_overlay:
            height, width = frame.shape[:2]
            # Only reallocated when the frame size changes
            if self.overlay is None or self.overlay.size != (width, height):
                self.overlay = new_surface(width, height)
            draw_document_overlay(self.overlay, width, height, detected)

    def run(self, stop_event: threading.Event, tick_seconds: float = 1 / 60):
        """Drive tick() until stop_event is set"""
        while not stop_event.is_set():
            self.tick()
            stop_event.wait(tick_seconds)

    def capture(self) -> CaptureResult:
        return CaptureResult(
            screenshot=self.source.get_screenshot(),
            detection=self.current_detection,
            quality=self.image_quality,
            advisories=capture_advisories(self.image_quality),
        )
