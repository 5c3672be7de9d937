import numpy as np
import pytest


@pytest.fixture
def make_frame():
    """Seeded random RGBA frame factory."""

    def _make(h=24, w=32, seed=42):
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, (h, w, 4), dtype=np.uint8)

    return _make


@pytest.fixture
def gray_frame():
    """Build an opaque gray RGBA frame from a 2D list of lightness values."""

    def _make(values):
        v = np.asarray(values, dtype=np.uint8)
        frame = np.empty(v.shape + (4,), dtype=np.uint8)
        frame[..., 0] = v
        frame[..., 1] = v
        frame[..., 2] = v
        frame[..., 3] = 255
        return frame

    return _make
