"""Grayscale conversion, Gaussian pre-blur and gradient-magnitude edge maps."""

from __future__ import annotations

import cv2
import numpy as np

EDGE_OPERATORS = ("sobel", "forward")


def to_grayscale(rgba: np.ndarray) -> np.ndarray:
    """Luminance floor(0.299 R + 0.587 G + 0.114 B) as a (H, W) uint8 array."""
    rgb = rgba[..., :3].astype(np.int32)
    gray = (299 * rgb[..., 0] + 587 * rgb[..., 1] + 114 * rgb[..., 2]) // 1000
    return gray.astype(np.uint8)


def gaussian_kernel(radius: int) -> np.ndarray:
    """(2r+1) x (2r+1) unnormalized Gaussian with sigma = radius / 3."""
    sigma = radius / 3
    ax = np.arange(-radius, radius + 1, dtype=np.float64)
    xx, yy = np.meshgrid(ax, ax)
    return np.exp(-(xx * xx + yy * yy) / (2 * sigma * sigma))


def gaussian_blur(gray: np.ndarray, radius: int = 2) -> np.ndarray:
    """Blur with a kernel truncated and renormalized at the image border.

    Each output pixel is divided by the sum of the kernel weights that land
    inside the image, so borders are not darkened by zero padding.
    """
    if radius <= 0:
        return gray.copy()

    kernel = gaussian_kernel(radius)
    src = gray.astype(np.float64)
    num = cv2.filter2D(src, -1, kernel, borderType=cv2.BORDER_CONSTANT)
    den = cv2.filter2D(np.ones_like(src), -1, kernel, borderType=cv2.BORDER_CONSTANT)
    # Epsilon keeps exact averages from flooring one below
    return np.floor(num / den + 1e-6).clip(0, 255).astype(np.uint8)


def _clamp_magnitude(gx: np.ndarray, gy: np.ndarray) -> np.ndarray:
    mag = np.minimum(255.0, np.sqrt(gx * gx + gy * gy))
    edges = mag.astype(np.uint8)
    # No wraparound: border pixels carry no gradient
    edges[0, :] = 0
    edges[-1, :] = 0
    edges[:, 0] = 0
    edges[:, -1] = 0
    return edges


def sobel_edges(gray: np.ndarray) -> np.ndarray:
    """3x3 Sobel gradient magnitude, clamped to 255, zero on the border."""
    src = gray.astype(np.float64)
    gx = cv2.Sobel(src, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(src, cv2.CV_64F, 0, 1, ksize=3)
    return _clamp_magnitude(gx, gy)


def forward_difference_edges(gray: np.ndarray) -> np.ndarray:
    """1-pixel forward-difference gradient; cheaper and noisier than Sobel."""
    src = gray.astype(np.float64)
    gx = np.zeros_like(src)
    gy = np.zeros_like(src)
    gx[:, :-1] = np.abs(src[:, 1:] - src[:, :-1])
    gy[:-1, :] = np.abs(src[1:, :] - src[:-1, :])
    return _clamp_magnitude(gx, gy)


def edge_map(rgba: np.ndarray, blur_radius: int = 2, operator: str = "sobel") -> np.ndarray:
    """Grayscale -> optional blur -> edge magnitude."""
    if operator not in EDGE_OPERATORS:
        raise ValueError(f"Unknown edge operator: {operator!r} (expected one of {EDGE_OPERATORS})")

    gray = to_grayscale(rgba)
    if blur_radius > 0:
        gray = gaussian_blur(gray, blur_radius)
    if operator == "forward":
        return forward_difference_edges(gray)
    return sobel_edges(gray)
