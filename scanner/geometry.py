import math
from typing import List, Sequence

import numpy as np

from config import settings
from .models import Point


def perpendicular_distance(point, line_start, line_end) -> float:
    """Distance from point to the infinite line through line_start and line_end"""
    dx = line_end[0] - line_start[0]
    dy = line_end[1] - line_start[1]
    norm = math.hypot(dx, dy)
    if norm == 0:
        return 0.0
    return abs(dy * point[0] - dx * point[1]
               + line_end[0] * line_start[1] - line_end[1] * line_start[0]) / norm


def _segment_distances(pts: np.ndarray, start: int, end: int) -> np.ndarray:
    """Vectorised perpendicular_distance for pts[start + 1:end]"""
    x0, y0 = pts[start]
    x1, y1 = pts[end]
    dx, dy = x1 - x0, y1 - y0
    norm = math.hypot(dx, dy)
    inner = pts[start + 1:end]
    if norm == 0:
        return np.zeros(len(inner))
    return np.abs(dy * inner[:, 0] - dx * inner[:, 1] + x1 * y0 - y1 * x0) / norm


def approximate_polygon(points: Sequence[Point], epsilon: float) -> List[Point]:
    """
    Douglas-Peucker simplification of an open polyline.

    The point farthest from the chord between the current endpoints is kept
    when its distance exceeds epsilon, and both halves are simplified in
    turn; otherwise the span collapses to its endpoints. Ties go to the
    first farthest point. Sequences of two points or fewer are returned
    unchanged.

    Uses an explicit work stack, so long contours cannot hit the recursion
    limit.
    """
    points = list(points)
    if len(points) <= 2:
        return points

    pts = np.asarray(points, dtype=np.float64)
    keep = np.zeros(len(points), dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, len(points) - 1)]
    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue
        distances = _segment_distances(pts, start, end)
        offset = int(np.argmax(distances))
        if distances[offset] > epsilon:
            split = start + 1 + offset
            keep[split] = True
            stack.append((split, end))
            stack.append((start, split))

    return [p for p, k in zip(points, keep) if k]


def approximate_closed_polygon(contour: Sequence[Point], epsilon: float) -> List[Point]:
    """
    Simplify a closed boundary.

    The loop is cut at the point farthest from its first point and each half
    is simplified with approximate_polygon. The closing point is not repeated.
    """
    contour = list(contour)
    if len(contour) <= 2:
        return contour

    pts = np.asarray(contour, dtype=np.float64)
    far = int(np.argmax(np.hypot(pts[:, 0] - pts[0, 0], pts[:, 1] - pts[0, 1])))
    if far == 0:
        return contour[:1]

    first_half = approximate_polygon(contour[:far + 1], epsilon)
    second_half = approximate_polygon(contour[far:] + contour[:1], epsilon)
    return first_half[:-1] + second_half[:-1]


def polygon_area(polygon: Sequence[Point]) -> float:
    """Absolute shoelace area"""
    area = 0
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return abs(area / 2)


def is_rectangular(polygon: Sequence[Point],
                   min_angle: float = None,
                   max_angle: float = None) -> bool:
    """
    True for convex quadrilaterals whose corners all lie within
    [min_angle, max_angle] degrees. Zero-length edges fail the check.
    """
    if min_angle is None:
        min_angle = settings.MIN_ANGLE
    if max_angle is None:
        max_angle = settings.MAX_ANGLE

    if len(polygon) != 4:
        return False

    turn_sign = 0
    for i in range(4):
        p1 = polygon[i]
        p2 = polygon[(i + 1) % 4]
        p3 = polygon[(i + 2) % 4]

        v1 = (p2[0] - p1[0], p2[1] - p1[1])
        v2 = (p3[0] - p2[0], p3[1] - p2[1])

        mag1 = math.hypot(*v1)
        mag2 = math.hypot(*v2)
        if mag1 == 0 or mag2 == 0:
            return False

        cos = (v1[0] * v2[0] + v1[1] * v2[1]) / (mag1 * mag2)
        angle = math.degrees(math.acos(max(-1.0, min(1.0, cos))))
        if angle < min_angle or angle > max_angle:
            return False

        # A simple quadrilateral turns the same way at every corner
        cross = v1[0] * v2[1] - v1[1] * v2[0]
        sign = (cross > 0) - (cross < 0)
        if sign == 0 or (turn_sign and sign != turn_sign):
            return False
        turn_sign = sign

    return True


def order_corners(corners: Sequence[Point]) -> List[Point]:
    """
    Order four corners clockwise (image coordinates) starting at the corner
    with the smallest x + y.
    """
    corners = list(corners)
    if len(corners) != 4:
        return corners

    cx = sum(p[0] for p in corners) / 4
    cy = sum(p[1] for p in corners) / 4
    ordered = sorted(corners, key=lambda p: math.atan2(p[1] - cy, p[0] - cx))

    start = min(range(4), key=lambda i: ordered[i][0] + ordered[i][1])
    return ordered[start:] + ordered[:start]
