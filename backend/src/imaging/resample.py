"""Exact-size resampling with Pillow's bicubic (Catmull-Rom) filter."""

import numpy as np
from PIL import Image


def resize_exact(frame: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an RGBA frame to exactly width x height, ignoring aspect ratio.

    Same size returns a copy. An empty source or target has nothing to
    sample, so the result is a fully transparent frame of the target size.
    """
    h, w = frame.shape[:2]
    if (w, h) == (width, height):
        return frame.copy()
    if width == 0 or height == 0 or w == 0 or h == 0:
        return np.zeros((height, width, 4), dtype=np.uint8)

    img = Image.fromarray(np.ascontiguousarray(frame))
    resized = img.resize((width, height), Image.Resampling.BICUBIC)
    return np.array(resized.convert("RGBA"))
