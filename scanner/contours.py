import logging
from typing import List

import numpy as np

from config import settings
from .models import Point

logger = logging.getLogger(__name__)

# 8-neighbourhood in flood-fill push order (row by row, left to right)
NEIGHBOURS = [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)]

# Clockwise sweep (image coordinates, y down) starting west
SWEEP = [(-1, 0), (-1, -1), (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1)]


def flood_components(binary: np.ndarray,
                     min_points: int = None,
                     max_points: int = None) -> List[List[int]]:
    """
    Collect 8-connected components of 255-valued pixels.

    Components are discovered in row-major scan order and returned as lists
    of flat pixel indices in visitation order. A component stops growing once
    it reaches max_points; pixels left unvisited can seed later components.
    Components with min_points pixels or fewer are dropped.
    """
    if min_points is None:
        min_points = settings.MIN_CONTOUR_POINTS
    if max_points is None:
        max_points = settings.MAX_CONTOUR_POINTS

    height, width = binary.shape
    mask = (binary.ravel() == 255).tobytes()
    visited = bytearray(height * width)
    components = []

    for seed in np.flatnonzero(binary.ravel() == 255).tolist():
        if visited[seed]:
            continue

        pixels = []
        stack = [seed]
        while stack:
            idx = stack.pop()
            if visited[idx] or not mask[idx]:
                continue
            visited[idx] = 1
            pixels.append(idx)
            if len(pixels) >= max_points:
                break

            y, x = divmod(idx, width)
            for dx, dy in NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height:
                    stack.append(ny * width + nx)

        if len(pixels) > min_points:
            components.append(pixels)

    return components


def trace_boundary(pixels: List[int], width: int) -> List[Point]:
    """
    Order the outer boundary of a component with a Moore-neighbour sweep.

    Tracing starts at the component's first pixel in scan order and walks
    clockwise until it re-enters the start pixel along the first move.
    The result has no repeated points.
    """
    members = set(pixels)
    start = min(pixels)
    sy, sx = divmod(start, width)

    def occupied(x, y):
        return 0 <= x < width and y >= 0 and y * width + x in members

    def next_step(x, y, from_dir):
        for i in range(8):
            d = (from_dir + i) % 8
            dx, dy = SWEEP[d]
            if occupied(x + dx, y + dy):
                return x + dx, y + dy, d
        return None

    trace = [(sx, sy)]
    # Nothing is left of or above the start pixel, so sweep from the west
    step = next_step(sx, sy, 0)
    if step is None:
        return [Point(sx, sy)]
    first = step[:2]

    x, y, d = step
    limit = 4 * len(members) + 8
    while len(trace) < limit:
        # Resume the sweep just after the pixel we came from
        step = next_step(x, y, (d + 5) % 8)
        if (x, y) == (sx, sy) and step[:2] == first:
            break
        trace.append((x, y))
        x, y, d = step

    ordered = dict.fromkeys(trace)
    return [Point(px, py) for px, py in ordered]


def find_contours(binary: np.ndarray,
                  min_points: int = None,
                  max_points: int = None) -> List[List[Point]]:
    """Boundary-ordered contours of every non-trivial edge component"""
    width = binary.shape[1]
    components = flood_components(binary, min_points, max_points)
    contours = [trace_boundary(pixels, width) for pixels in components]
    logger.debug("Found %d contours", len(contours))
    return contours
