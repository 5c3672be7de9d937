"""Render modes — sort axis combinator, sort direction, draw type."""

from enum import Enum


class SortBy(Enum):
    ROW = "row"
    COLUMN = "column"
    ROW_COL = "row_col"
    COL_ROW = "col_row"
    NOTHING = "nothing"


class SortOrder(Enum):
    """Increasing or decreasing direction of the sort key.

    ``-order`` flips the direction; flipping twice gives the original back.
    """

    ASCENDING = "ascending"
    DESCENDING = "descending"

    def direction(self) -> int:
        return 1 if self is SortOrder.ASCENDING else -1

    def __neg__(self) -> "SortOrder":
        if self is SortOrder.ASCENDING:
            return SortOrder.DESCENDING
        return SortOrder.ASCENDING


class DrawType(Enum):
    SORT = "sort"
    UNSORT = "unsort"
