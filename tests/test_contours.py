from unittest import TestCase

import numpy as np

from scanner.contours import find_contours, flood_components, trace_boundary
from scanner.filters import edge_mask
from scanner.models import Point
from tests.synthetic import rectangle_frame


def binary_with_blocks(width, height, blocks):
    binary = np.zeros((height, width), dtype=np.uint8)
    for x0, y0, x1, y1 in blocks:
        binary[y0:y1, x0:x1] = 255
    return binary


class FloodComponentTests(TestCase):
    def test_components_in_scan_order(self):
        binary = binary_with_blocks(40, 40, [(25, 2, 35, 12), (2, 20, 12, 30)])
        components = flood_components(binary, min_points=0)
        self.assertEqual(len(components), 2)
        # First seed is the top-left pixel of the upper block
        self.assertEqual(components[0][0], 2 * 40 + 25)
        self.assertEqual(len(components[0]), 100)
        self.assertEqual(len(components[1]), 100)

    def test_diagonal_pixels_are_connected(self):
        binary = np.zeros((10, 10), dtype=np.uint8)
        for i in range(1, 9):
            binary[i, i] = 255
        components = flood_components(binary, min_points=0)
        self.assertEqual(len(components), 1)
        self.assertEqual(len(components[0]), 8)

    def test_small_components_are_dropped(self):
        # 7x7 = 49 and 8x8 = 64 pixels
        binary = binary_with_blocks(40, 40, [(1, 1, 8, 8), (20, 20, 28, 28)])
        components = flood_components(binary)
        self.assertEqual(len(components), 1)
        self.assertEqual(len(components[0]), 64)

    def test_exactly_minimum_is_dropped(self):
        binary = binary_with_blocks(40, 40, [(1, 1, 11, 6)])
        self.assertEqual(flood_components(binary), [])

    def test_growth_is_capped(self):
        binary = binary_with_blocks(30, 30, [(5, 5, 25, 25)])
        components = flood_components(binary, min_points=0, max_points=100)
        self.assertEqual(len(components[0]), 100)
        self.assertTrue(all(len(c) <= 100 for c in components))
        # Truncated pixels seed later components, nothing is lost
        self.assertEqual(sum(len(c) for c in components), 400)

    def test_each_pixel_visited_once(self):
        binary = binary_with_blocks(30, 30, [(3, 3, 20, 9), (10, 9, 14, 25)])
        components = flood_components(binary, min_points=0)
        pixels = [idx for c in components for idx in c]
        self.assertEqual(len(pixels), len(set(pixels)))
        self.assertEqual(len(pixels), int((binary == 255).sum()))

    def test_empty_mask(self):
        self.assertEqual(flood_components(np.zeros((10, 10), dtype=np.uint8)), [])


class TraceBoundaryTests(TestCase):
    def test_square_traced_clockwise_from_top_left(self):
        width = 20
        pixels = [y * width + x for y in range(5, 8) for x in range(5, 8)]
        boundary = trace_boundary(pixels, width)
        self.assertEqual(boundary, [
            Point(5, 5), Point(6, 5), Point(7, 5),
            Point(7, 6), Point(7, 7), Point(6, 7),
            Point(5, 7), Point(5, 6),
        ])

    def test_single_pixel(self):
        self.assertEqual(trace_boundary([3 * 10 + 4], 10), [Point(4, 3)])

    def test_line_has_no_duplicates(self):
        width = 20
        pixels = [2 * width + x for x in range(3, 12)]
        boundary = trace_boundary(pixels, width)
        self.assertEqual(len(boundary), len(set(boundary)))
        self.assertEqual(set(boundary), {Point(x, 2) for x in range(3, 12)})

    def test_interior_pixels_excluded(self):
        width = 30
        pixels = [y * width + x for y in range(2, 12) for x in range(4, 14)]
        boundary = trace_boundary(pixels, width)
        self.assertEqual(len(boundary), 36)
        for p in boundary:
            self.assertTrue(p.x in (4, 13) or p.y in (2, 11))


class FindContoursTests(TestCase):
    def test_rectangle_outline_is_one_contour(self):
        frame = rectangle_frame(200, 160, 50, 40, 150, 120)
        contours = find_contours(edge_mask(frame))
        self.assertEqual(len(contours), 1)
        xs = [p.x for p in contours[0]]
        ys = [p.y for p in contours[0]]
        self.assertEqual((min(xs), max(xs)), (48, 151))
        self.assertEqual((min(ys), max(ys)), (38, 121))

    def test_blank_mask_has_no_contours(self):
        self.assertEqual(find_contours(np.zeros((50, 50), dtype=np.uint8)), [])
