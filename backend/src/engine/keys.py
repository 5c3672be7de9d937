"""Sort keys — pure RGBA pixel -> uint8 extractors, plus the key registry.

Every key function takes an array of RGBA pixels with any leading shape
(a single pixel, a row, a whole frame) and returns the uint8 keys with the
leading shape kept. Alpha is never looked at.
"""

from enum import Enum
from typing import Callable

import cv2
import numpy as np

KeyFn = Callable[[np.ndarray], np.ndarray]


class SortKey(Enum):
    LIGHTNESS = "lightness"
    HUE = "hue"
    SATURATION = "saturation"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


def _convert(pixels: np.ndarray, code: int) -> np.ndarray:
    """Run an OpenCV colour conversion over RGB, whatever the leading shape."""
    lead = pixels.shape[:-1]
    if pixels.size == 0:
        return np.zeros(lead + (3,), dtype=np.uint8)
    rgb = np.ascontiguousarray(pixels[..., :3], dtype=np.uint8).reshape(1, -1, 3)
    out = cv2.cvtColor(rgb, code)
    return out.reshape(lead + out.shape[2:])


def lightness(pixels: np.ndarray) -> np.ndarray:
    """Rec. 601 luma (0.299 R + 0.587 G + 0.114 B), rounded.

    Gray pixels map to their own channel value.
    """
    lead = pixels.shape[:-1]
    if pixels.size == 0:
        return np.zeros(lead, dtype=np.uint8)
    rgb = np.ascontiguousarray(pixels[..., :3], dtype=np.uint8).reshape(1, -1, 3)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY).reshape(lead)


def hue(pixels: np.ndarray) -> np.ndarray:
    """HSV hue scaled to the full 0-255 range (0 = red)."""
    return _convert(pixels, cv2.COLOR_RGB2HSV_FULL)[..., 0]


def saturation(pixels: np.ndarray) -> np.ndarray:
    """HSV saturation, 0-255. Black and grays are 0."""
    return _convert(pixels, cv2.COLOR_RGB2HSV_FULL)[..., 1]


def red(pixels: np.ndarray) -> np.ndarray:
    return pixels[..., 0].astype(np.uint8, copy=True)


def green(pixels: np.ndarray) -> np.ndarray:
    return pixels[..., 1].astype(np.uint8, copy=True)


def blue(pixels: np.ndarray) -> np.ndarray:
    return pixels[..., 2].astype(np.uint8, copy=True)


_REGISTRY: dict[SortKey, dict] = {}


def register(key: SortKey, fn: KeyFn, label: str):
    """Register a key function."""
    _REGISTRY[key] = {"fn": fn, "label": label}


def get(key: SortKey | str) -> KeyFn:
    """Key function for a SortKey (or its string value)."""
    key = SortKey(key)
    info = _REGISTRY.get(key)
    if info is None:
        raise ValueError(f"unknown sort key: {key.value}")
    return info["fn"]


def list_all() -> list[dict]:
    """List registered keys with their labels."""
    return [{"id": k.value, "label": info["label"]} for k, info in _REGISTRY.items()]


def key_of(pixel, key: SortKey | str) -> int:
    """Key of a single RGBA pixel as a plain int."""
    return int(get(key)(np.asarray(pixel, dtype=np.uint8)))


def _auto_register():
    for key, fn, label in [
        (SortKey.LIGHTNESS, lightness, "Lightness"),
        (SortKey.HUE, hue, "Hue"),
        (SortKey.SATURATION, saturation, "Saturation"),
        (SortKey.RED, red, "Red"),
        (SortKey.GREEN, green, "Green"),
        (SortKey.BLUE, blue, "Blue"),
    ]:
        register(key, fn, label)


_auto_register()
