import logging
from typing import Iterable, List, Optional

import numpy as np

from config import settings
from .contours import find_contours
from .filters import edge_mask
from .geometry import (
    approximate_closed_polygon,
    is_rectangular,
    order_corners,
    polygon_area,
)
from .models import DetectedDocument, Point, ensure_frame

logger = logging.getLogger(__name__)


class DocumentClassifier:
    """
    Picks the document quadrilateral among simplified contours.

    A candidate must have four corners within the configured angle range and
    a relative area inside [min_area, max_area]. The largest candidate wins;
    among equal areas the first one seen is kept.
    """

    def __init__(self, frame_area: int, min_area: float = None, max_area: float = None):
        self.frame_area = frame_area
        self.min_area = settings.MIN_AREA if min_area is None else min_area
        self.max_area = settings.MAX_AREA if max_area is None else max_area
        self.full_confidence_area = settings.FULL_CONFIDENCE_AREA

    def relative_area(self, polygon: List[Point]) -> float:
        return polygon_area(polygon) / self.frame_area

    def accepts(self, polygon: List[Point]) -> bool:
        if not is_rectangular(polygon):
            return False
        relative_area = self.relative_area(polygon)
        return self.min_area <= relative_area <= self.max_area

    def confidence(self, relative_area: float) -> float:
        return min(1.0, relative_area / self.full_confidence_area)

    def best(self, polygons: Iterable[List[Point]]) -> Optional[DetectedDocument]:
        best_polygon = None
        best_area = 0.0

        for polygon in polygons:
            if not self.accepts(polygon):
                continue
            area = polygon_area(polygon)
            if area > best_area:
                best_area = area
                best_polygon = polygon

        if best_polygon is None:
            return None

        corners = tuple(Point(int(p[0]), int(p[1])) for p in order_corners(best_polygon))
        return DetectedDocument(
            corners=corners,
            confidence=self.confidence(best_area / self.frame_area),
        )


def detect_document_edges(frame: np.ndarray,
                          min_area: float = None,
                          max_area: float = None,
                          epsilon: float = None) -> Optional[DetectedDocument]:
    """
    Locate a document in a single RGBA frame.

    Args:
        frame: (H, W, 4) uint8 RGBA array, left untouched
        min_area: smallest accepted polygon area as a fraction of the frame
        max_area: largest accepted polygon area as a fraction of the frame
        epsilon: Douglas-Peucker tolerance per contour point

    Returns:
        DetectedDocument, or None when no quadrilateral qualifies
    """
    frame = ensure_frame(frame)
    if epsilon is None:
        epsilon = settings.EPSILON

    height, width = frame.shape[:2]
    classifier = DocumentClassifier(width * height, min_area, max_area)

    binary = edge_mask(frame)
    contours = find_contours(binary)
    polygons = (approximate_closed_polygon(c, epsilon * len(c)) for c in contours)
    detected = classifier.best(polygons)

    if detected is not None:
        logger.debug("Document detected (confidence=%.2f)", detected.confidence)
    return detected
