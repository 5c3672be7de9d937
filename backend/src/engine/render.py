"""Render — pixel sort / unsort of a frame.

Sort rearranges the sort image by its own keys. Unsort builds the same
permutation from the sort image and scatters the pixels of a second
("unsort") image through it, after resampling that image to the sort
image's size.
"""

import logging
import time

import numpy as np
import sentry_sdk

from engine import direct, keys, permutation
from engine.keys import SortKey
from engine.modes import DrawType, SortBy, SortOrder
from imaging.resample import resize_exact

logger = logging.getLogger(__name__)

# Timing threshold (milliseconds)
RENDER_WARN_MS = 2000


def _check_frame(frame, name: str):
    if not isinstance(frame, np.ndarray):
        raise TypeError(f"{name} is {type(frame).__name__}, expected ndarray")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError(f"{name} has shape {frame.shape}, expected (H, W, 4)")
    if frame.dtype != np.uint8:
        raise ValueError(f"{name} has dtype {frame.dtype}, expected uint8")


def render(
    sort_image: np.ndarray,
    unsort_image: np.ndarray,
    sort_by: SortBy,
    sort_key: SortKey,
    draw_type: DrawType,
    row_order: SortOrder,
    col_order: SortOrder,
    pre_sort: bool = False,
) -> np.ndarray:
    """Render one output frame.

    Args:
        sort_image:   RGBA frame (H, W, 4) uint8 whose keys drive the sort.
        unsort_image: RGBA frame of any size; only read for DrawType.UNSORT.
        sort_by:      Axis combinator.
        sort_key:     Which pixel key to sort by.
        draw_type:    SORT rearranges sort_image, UNSORT scatters unsort_image.
        row_order:    Direction of row passes.
        col_order:    Direction of column passes.
        pre_sort:     Unsort only: direct-sort the resampled unsort image
                      with the same settings before scattering it.

    Returns:
        RGBA frame with sort_image's dimensions.

    Raises:
        TypeError, ValueError: If either frame is not an (H, W, 4) uint8 array.
    """
    _check_frame(sort_image, "sort_image")
    _check_frame(unsort_image, "unsort_image")

    h, w = sort_image.shape[:2]
    if w == 0 or h == 0:
        return np.zeros((h, w, 4), dtype=np.uint8)

    sentry_sdk.add_breadcrumb(
        category="render",
        message=f"{draw_type.value} {sort_by.value} by {sort_key.value}",
        data={"size": [w, h], "pre_sort": pre_sort},
        level="info",
    )

    key_fn = keys.get(sort_key)
    t0 = time.monotonic()

    if draw_type is DrawType.SORT:
        if sort_by is SortBy.NOTHING:
            output = permutation.gather(sort_image, permutation.identity(w, h))
        else:
            output = direct.sort_image(sort_image, key_fn, sort_by, row_order, col_order)
    else:
        uh, uw = unsort_image.shape[:2]
        if uw == 0 or uh == 0:
            logger.warning(
                "Unsort image is empty; rendering a transparent %dx%d frame", w, h
            )
        source = resize_exact(unsort_image, w, h)
        if pre_sort:
            source = direct.sort_image(source, key_fn, sort_by, row_order, col_order)
        px_map = permutation.build(sort_image, key_fn, sort_by, row_order, col_order)
        output = permutation.scatter(source, px_map)

    elapsed_ms = (time.monotonic() - t0) * 1000
    if elapsed_ms > RENDER_WARN_MS:
        logger.warning(
            "Render %s/%s took %.0fms (>%dms warn threshold) at %dx%d",
            draw_type.value,
            sort_by.value,
            elapsed_ms,
            RENDER_WARN_MS,
            w,
            h,
        )
    else:
        logger.info(
            "Rendered %s/%s by %s at %dx%d in %.0fms",
            draw_type.value,
            sort_by.value,
            sort_key.value,
            w,
            h,
            elapsed_ms,
        )

    return output
