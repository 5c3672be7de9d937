"""Permutation builder — coordinate grids sorted by row and/or column.

A permutation grid is a ``Grid`` whose cell (x, y) holds the (x, y)
coordinate of the source pixel that lands at (x, y) when the grid is
gathered. Gathering a grid sorts the image; scattering through the same grid
undoes that, which is what "unsort" does with a second image.

Strategy per axis pass:
  1. Look up the key of the pixel each cell currently points at.
  2. Multiply by the order's direction so descending is an ascending sort.
  3. Stable argsort along the axis (all rows or all columns at once).
  4. Reorder the cells with the resulting indices.

Each pass only moves cells within one row (column), so every row (column)
stays a permutation of its own coordinate set, and chaining passes keeps the
grid a bijection over the whole image. Combined (RowCol / ColRow) grids are
true compositions: the second pass reorders the coordinates the first pass
produced, so gathering one equals the direct two-pass sort.
"""

import logging

import numpy as np

from engine.grid import Grid
from engine.keys import KeyFn
from engine.modes import SortBy, SortOrder

logger = logging.getLogger(__name__)


def identity(width: int, height: int) -> Grid:
    """Grid whose cell (x, y) is (x, y)."""
    return Grid.from_indices(width, height, lambda x, y: np.stack([x, y], axis=-1))


def _start(frame: np.ndarray, grid: Grid | None) -> Grid:
    h, w = frame.shape[:2]
    if grid is None:
        return identity(w, h)
    if (grid.width, grid.height) != (w, h):
        raise ValueError(
            f"Grid is {grid.width}x{grid.height} but image is {w}x{h}"
        )
    return grid


def _directed_keys(
    frame: np.ndarray, key_fn: KeyFn, order: SortOrder, cells: np.ndarray
) -> np.ndarray:
    """Key of the pixel each cell points at, signed by the sort direction."""
    keys = key_fn(frame).astype(np.int16)
    return order.direction() * keys[cells[..., 1], cells[..., 0]]


def row_pass(
    frame: np.ndarray, key_fn: KeyFn, order: SortOrder, grid: Grid | None = None
) -> Grid:
    """Stable-sort every row of ``grid`` (identity if None) by pixel key.

    The input grid is left untouched.
    """
    px_map = _start(frame, grid)
    if px_map.width == 0 or px_map.height == 0:
        return px_map.copy()

    cells = px_map.cells
    keys = _directed_keys(frame, key_fn, order, cells)
    idx = np.argsort(keys, axis=1, kind="stable")
    return Grid(np.take_along_axis(cells, idx[:, :, np.newaxis], axis=1))


def column_pass(
    frame: np.ndarray, key_fn: KeyFn, order: SortOrder, grid: Grid | None = None
) -> Grid:
    """Stable-sort every column of ``grid`` (identity if None) by pixel key."""
    px_map = _start(frame, grid)
    if px_map.width == 0 or px_map.height == 0:
        return px_map.copy()

    cells = px_map.cells
    keys = _directed_keys(frame, key_fn, order, cells)
    idx = np.argsort(keys, axis=0, kind="stable")
    return Grid(np.take_along_axis(cells, idx[:, :, np.newaxis], axis=0))


def build(
    frame: np.ndarray,
    key_fn: KeyFn,
    sort_by: SortBy,
    row_order: SortOrder,
    col_order: SortOrder,
) -> Grid:
    """Build the permutation grid for ``sort_by`` from the identity grid."""
    h, w = frame.shape[:2]
    logger.debug("Building %s permutation grid for %dx%d image", sort_by.value, w, h)

    if sort_by is SortBy.ROW:
        return row_pass(frame, key_fn, row_order)
    if sort_by is SortBy.COLUMN:
        return column_pass(frame, key_fn, col_order)
    if sort_by is SortBy.ROW_COL:
        px_map = row_pass(frame, key_fn, row_order)
        return column_pass(frame, key_fn, col_order, px_map)
    if sort_by is SortBy.COL_ROW:
        px_map = column_pass(frame, key_fn, col_order)
        return row_pass(frame, key_fn, row_order, px_map)
    return identity(w, h)


def inverse(grid: Grid) -> Grid:
    """Destination map of a bijective grid.

    Sorting the slots by the original position each one points at yields,
    for every source position, the slot it was moved to.
    """
    h, w = grid.height, grid.width
    if w == 0 or h == 0:
        return grid.copy()

    cells = grid.cells
    original = cells[..., 1] * w + cells[..., 0]
    slots = np.argsort(original, axis=None, kind="stable")
    inv = np.stack([slots % w, slots // w], axis=-1).reshape(h, w, 2)
    return Grid(inv)


def is_bijection(grid: Grid) -> bool:
    """True if every coordinate of the grid's extent appears exactly once."""
    h, w = grid.height, grid.width
    cells = grid.cells
    xs, ys = cells[..., 0], cells[..., 1]
    if np.any(xs < 0) or np.any(xs >= w) or np.any(ys < 0) or np.any(ys >= h):
        return False
    original = (ys * w + xs).ravel()
    return bool(np.array_equal(np.sort(original), np.arange(w * h)))


def gather(frame: np.ndarray, grid: Grid) -> np.ndarray:
    """``out[y, x] = frame[grid[x, y]]`` — the "sort" application."""
    if frame.shape[:2] != (grid.height, grid.width):
        raise ValueError(
            f"Grid is {grid.width}x{grid.height} but image is "
            f"{frame.shape[1]}x{frame.shape[0]}"
        )
    cells = grid.cells
    return frame[cells[..., 1], cells[..., 0]]


def scatter(frame: np.ndarray, grid: Grid) -> np.ndarray:
    """``out[grid[x, y]] = frame[y, x]`` — the "unsort" application."""
    return gather(frame, inverse(grid))
