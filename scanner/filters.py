import cv2
import numpy as np

from config import settings

GAUSSIAN_KERNEL = np.array([
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
], dtype=np.float64) / 16

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.float64)

SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.float64)

LAPLACIAN_KERNEL = np.array([
    [0, 1, 0],
    [1, -4, 1],
    [0, 1, 0],
], dtype=np.float64)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Store float samples the way a clamped byte buffer does (round half to even)"""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Float luminance of RGB(A) samples using the ITU luminosity weights"""
    return rgba[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def correlate_interior(gray: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Apply a 3x3 kernel at every interior pixel.

    Returns a float64 array the size of the input whose first/last rows and
    columns are zero. The interior does not depend on the border mode.
    """
    response = cv2.filter2D(gray.astype(np.float64), cv2.CV_64F, kernel)
    out = np.zeros_like(response)
    if gray.shape[0] > 2 and gray.shape[1] > 2:
        out[1:-1, 1:-1] = response[1:-1, 1:-1]
    return out


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    return to_uint8(luminance(frame))


def gaussian_blur(gray: np.ndarray) -> np.ndarray:
    """3x3 Gaussian smoothing; border pixels stay zero"""
    return to_uint8(correlate_interior(gray, GAUSSIAN_KERNEL))


def sobel_edges(gray: np.ndarray) -> np.ndarray:
    """Sobel gradient magnitude clamped to 255; border pixels stay zero"""
    gx = correlate_interior(gray, SOBEL_X)
    gy = correlate_interior(gray, SOBEL_Y)
    return to_uint8(np.minimum(255, np.sqrt(gx * gx + gy * gy)))


def threshold(edges: np.ndarray, thresh: int = None) -> np.ndarray:
    if thresh is None:
        thresh = settings.EDGE_THRESHOLD
    return np.where(edges > thresh, 255, 0).astype(np.uint8)


def edge_mask(frame: np.ndarray, thresh: int = None) -> np.ndarray:
    """Grayscale -> blur -> Sobel -> threshold"""
    gray = to_grayscale(frame)
    blurred = gaussian_blur(gray)
    edges = sobel_edges(blurred)
    return threshold(edges, thresh)
