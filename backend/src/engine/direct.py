"""Direct sort path — sorts pixel buffers without building a coordinate grid.

Only used when the sort image is also the output ("sort" draw type). Rows are
sorted directly; columns go through a 90 degree rotation so they can be
sorted as rows, then rotated back. Rotating clockwise turns a column read
top-to-bottom into a row read right-to-left, hence the negated order.
"""

import cv2
import numpy as np

from engine.keys import KeyFn
from engine.modes import SortBy, SortOrder


def sort_rows(frame: np.ndarray, key_fn: KeyFn, order: SortOrder) -> np.ndarray:
    """Stable-sort the pixels of every row by key."""
    if frame.shape[0] == 0 or frame.shape[1] == 0:
        return frame.copy()

    keys = order.direction() * key_fn(frame).astype(np.int16)
    idx = np.argsort(keys, axis=1, kind="stable")
    return np.take_along_axis(frame, idx[:, :, np.newaxis], axis=1)


def sort_columns(frame: np.ndarray, key_fn: KeyFn, order: SortOrder) -> np.ndarray:
    """Stable-sort the pixels of every column by key (rotation trick)."""
    if frame.shape[0] == 0 or frame.shape[1] == 0:
        return frame.copy()

    rotated = cv2.rotate(np.ascontiguousarray(frame), cv2.ROTATE_90_CLOCKWISE)
    sorted_rows = sort_rows(rotated, key_fn, -order)
    return cv2.rotate(sorted_rows, cv2.ROTATE_90_COUNTERCLOCKWISE)


def sort_image(
    frame: np.ndarray,
    key_fn: KeyFn,
    sort_by: SortBy,
    row_order: SortOrder,
    col_order: SortOrder,
) -> np.ndarray:
    """Sort ``frame`` along the axes selected by ``sort_by``.

    Combined modes sort the output of the first axis along the second.
    """
    if sort_by is SortBy.ROW:
        return sort_rows(frame, key_fn, row_order)
    if sort_by is SortBy.COLUMN:
        return sort_columns(frame, key_fn, col_order)
    if sort_by is SortBy.ROW_COL:
        return sort_columns(sort_rows(frame, key_fn, row_order), key_fn, col_order)
    if sort_by is SortBy.COL_ROW:
        return sort_rows(sort_columns(frame, key_fn, col_order), key_fn, row_order)
    return frame.copy()
