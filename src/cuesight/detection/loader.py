"""Decode an encoded image into a read-only RGBA working buffer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

ImageSource = bytes | bytearray | memoryview | str | Path | np.ndarray


class ImageDecodeError(RuntimeError):
    """The image could not be decoded into a pixel buffer."""


@dataclass
class LoadedImage:
    """Working-resolution RGBA pixels plus the downscale factor."""

    pixels: np.ndarray  # (H, W, 4) uint8, RGBA, read-only
    scale: float  # working / original, <= 1.0
    original_width: int
    original_height: int

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


def decode_image(data: bytes | bytearray | memoryview) -> np.ndarray:
    """Decode PNG/JPEG/... bytes to an (H, W, 4) uint8 RGBA array."""
    buf = np.frombuffer(data, dtype=np.uint8)
    if buf.size == 0:
        raise ImageDecodeError("Cannot decode image: empty input")

    try:
        img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise ImageDecodeError(f"Cannot decode image: {e}") from e
    if img is None:
        raise ImageDecodeError("Cannot decode image: unsupported or corrupt data")

    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ImageDecodeError(f"Cannot decode image: unsupported sample type {img.dtype}")

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ImageDecodeError(f"Cannot decode image: unsupported channel count {img.shape[2]}")


def _as_rgba(array: np.ndarray) -> np.ndarray:
    """Accept an already-decoded RGB or RGBA uint8 array."""
    if array.dtype != np.uint8 or array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected an (H, W, 3|4) uint8 RGB(A) array, got {array.dtype} {array.shape}"
        )
    if array.shape[2] == 3:
        return cv2.cvtColor(array, cv2.COLOR_RGB2RGBA)
    return array.copy()


def load_image(source: ImageSource, max_dimension: int = 800) -> LoadedImage:
    """Decode ``source`` and downscale so the long side is <= max_dimension.

    ``source`` may be encoded bytes, a file path, or an RGB/RGBA array (RGB
    channel order, not OpenCV's BGR).
    """
    if isinstance(source, np.ndarray):
        rgba = _as_rgba(source)
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        rgba = decode_image(path.read_bytes())
    else:
        rgba = decode_image(source)

    height, width = rgba.shape[:2]
    if width == 0 or height == 0:
        raise ImageDecodeError("Cannot decode image: zero-sized image")

    scale = min(1.0, max_dimension / max(width, height))
    if scale < 1.0:
        size = (max(1, int(width * scale)), max(1, int(height * scale)))
        rgba = cv2.resize(rgba, size, interpolation=cv2.INTER_AREA)

    rgba.flags.writeable = False
    return LoadedImage(pixels=rgba, scale=scale, original_width=width, original_height=height)
