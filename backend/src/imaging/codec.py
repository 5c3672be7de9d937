"""Image decode/encode for the render collaborator (Pillow)."""

import logging
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_STEM = "pixel_unsort"


def load_rgba(path: str | Path) -> np.ndarray:
    """Decode an image file to an RGBA frame (H, W, 4) uint8."""
    with Image.open(path) as img:
        rgba = img.convert("RGBA")
        frame = np.array(rgba)
    logger.debug("Loaded %s as %dx%d RGBA", Path(path).name, frame.shape[1], frame.shape[0])
    return frame


def save_png(frame: np.ndarray, path: str | Path) -> Path:
    """Encode an RGBA frame as PNG. Returns the path written."""
    path = Path(path)
    Image.fromarray(np.ascontiguousarray(frame)).save(path, format="PNG")
    return path


def next_save_path(directory: str | Path, stem: str = DEFAULT_STEM) -> Path:
    """First ``<stem>_<n>.png`` in ``directory`` that doesn't exist yet (n from 0)."""
    directory = Path(directory)
    num = 0
    candidate = directory / f"{stem}_{num}.png"
    while candidate.exists():
        num += 1
        candidate = directory / f"{stem}_{num}.png"
    return candidate
