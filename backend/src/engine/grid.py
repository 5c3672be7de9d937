"""Grid — fixed-size, row-major 2D container backed by a numpy array.

Cells are addressed as ``grid[x, y]``. Storage is ``(height, width, *cell)``
so a full row is a contiguous O(1) view while a column has to be gathered
across rows.
"""

from typing import Callable

import numpy as np


def _check_size(width: int, height: int):
    if width < 0 or height < 0:
        raise ValueError(f"Grid size must be non-negative, got {width}x{height}")


class Grid:
    """Owned width x height grid of cells.

    A cell can be a scalar or a fixed-size vector (e.g. an (x, y) pair);
    ``cell_shape`` is whatever trails the two grid axes in the backing array.
    """

    def __init__(self, cells: np.ndarray):
        if cells.ndim < 2:
            raise ValueError(f"Grid needs at least 2 dimensions, got {cells.ndim}")
        self._cells = cells

    @classmethod
    def generate(cls, width: int, height: int, fn: Callable[[int, int], object]) -> "Grid":
        """Build a grid whose cell (x, y) is ``fn(x, y)``.

        ``fn`` is called once per cell with plain ints, so it may branch on
        the coordinates. Tuples, lists and arrays become vector cells; every
        cell must have the same shape.
        """
        _check_size(width, height)
        if width == 0 or height == 0:
            return cls(np.empty((height, width), dtype=np.intp))
        cells = np.array([[fn(x, y) for x in range(width)] for y in range(height)])
        return cls(cells)

    @classmethod
    def from_indices(
        cls, width: int, height: int, fn: Callable[[np.ndarray, np.ndarray], np.ndarray]
    ) -> "Grid":
        """Vectorized ``generate``: ``fn`` gets the (height, width) x and y index arrays.

        The result must have leading shape (height, width); trailing axes are
        the cell shape.
        """
        _check_size(width, height)
        ys, xs = np.indices((height, width), dtype=np.intp)
        cells = np.asarray(fn(xs, ys))
        if cells.shape[:2] != (height, width):
            raise ValueError(
                f"Generator returned shape {cells.shape}, expected ({height}, {width}, ...)"
            )
        return cls(cells)

    @property
    def width(self) -> int:
        return self._cells.shape[1]

    @property
    def height(self) -> int:
        return self._cells.shape[0]

    @property
    def cells(self) -> np.ndarray:
        """Backing array, shape (height, width, *cell_shape)."""
        return self._cells

    def _check(self, x: int, y: int):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Cell ({x}, {y}) out of bounds for {self.width}x{self.height} grid"
            )

    def __getitem__(self, xy: tuple[int, int]):
        x, y = xy
        self._check(x, y)
        return self._cells[y, x]

    def __setitem__(self, xy: tuple[int, int], value):
        x, y = xy
        self._check(x, y)
        self._cells[y, x] = value

    def row(self, y: int) -> np.ndarray:
        """Row ``y`` as a view into the grid."""
        if not 0 <= y < self.height:
            raise IndexError(f"Row {y} out of bounds for height {self.height}")
        return self._cells[y]

    def column(self, x: int) -> np.ndarray:
        """Column ``x`` gathered into a new array."""
        if not 0 <= x < self.width:
            raise IndexError(f"Column {x} out of bounds for width {self.width}")
        return self._cells[:, x].copy()

    def set_row(self, y: int, values) -> None:
        self.row(y)[...] = values

    def set_column(self, x: int, values) -> None:
        if not 0 <= x < self.width:
            raise IndexError(f"Column {x} out of bounds for width {self.width}")
        self._cells[:, x] = values

    def copy(self) -> "Grid":
        return type(self)(self._cells.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells.shape == other._cells.shape and bool(
            np.array_equal(self._cells, other._cells)
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"{type(self).__name__}(width={self.width}, height={self.height})"
