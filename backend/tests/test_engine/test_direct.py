"""Tests for engine.direct — buffer sorts and the rotation trick."""

import numpy as np
import pytest

from engine import direct, keys, permutation
from engine.keys import SortKey
from engine.modes import SortBy, SortOrder

pytestmark = pytest.mark.smoke

ASC = SortOrder.ASCENDING
DESC = SortOrder.DESCENDING
LIGHTNESS = keys.get(SortKey.LIGHTNESS)


@pytest.mark.parametrize("order", [ASC, DESC])
def test_sort_rows_monotonic(order, make_frame):
    frame = make_frame(16, 25)
    out = direct.sort_rows(frame, LIGHTNESS, order)
    k = LIGHTNESS(out).astype(int)
    assert np.all(np.diff(k, axis=1) * order.direction() >= 0)


def test_sort_rows_is_stable(gray_frame):
    # Same lightness, alpha tags the original position
    frame = gray_frame([[50, 20, 50, 50, 20]])
    frame[0, :, 3] = [0, 1, 2, 3, 4]
    asc = direct.sort_rows(frame, LIGHTNESS, ASC)
    desc = direct.sort_rows(frame, LIGHTNESS, DESC)
    assert asc[0, :, 3].tolist() == [1, 4, 0, 2, 3]
    assert desc[0, :, 3].tolist() == [0, 2, 3, 1, 4]


@pytest.mark.parametrize("order", [ASC, DESC])
def test_sort_columns_is_stable(order, gray_frame):
    frame = gray_frame([[50], [20], [50], [50], [20]])
    frame[:, 0, 3] = [0, 1, 2, 3, 4]
    out = direct.sort_columns(frame, LIGHTNESS, order)
    expected = [1, 4, 0, 2, 3] if order is ASC else [0, 2, 3, 1, 4]
    assert out[:, 0, 3].tolist() == expected


def test_sort_columns_preserves_dimensions(make_frame):
    frame = make_frame(7, 13)
    out = direct.sort_columns(frame, LIGHTNESS, DESC)
    assert out.shape == (7, 13, 4)
    assert out.dtype == np.uint8


@pytest.mark.parametrize("order", [ASC, DESC])
@pytest.mark.parametrize("key", list(SortKey))
def test_rotation_trick_matches_column_grid(order, key, make_frame):
    frame = make_frame(19, 11)
    key_fn = keys.get(key)
    via_rotation = direct.sort_columns(frame, key_fn, order)
    via_grid = permutation.gather(frame, permutation.column_pass(frame, key_fn, order))
    np.testing.assert_array_equal(via_rotation, via_grid)


@pytest.mark.parametrize("sort_by", list(SortBy))
@pytest.mark.parametrize("row_order", [ASC, DESC])
@pytest.mark.parametrize("col_order", [ASC, DESC])
def test_direct_path_matches_grid_gather(sort_by, row_order, col_order, make_frame):
    frame = make_frame(14, 9, seed=7)
    key_fn = keys.get(SortKey.HUE)
    out = direct.sort_image(frame, key_fn, sort_by, row_order, col_order)
    grid = permutation.build(frame, key_fn, sort_by, row_order, col_order)
    np.testing.assert_array_equal(out, permutation.gather(frame, grid))


def test_sort_is_a_rearrangement(make_frame):
    frame = make_frame(10, 10)
    out = direct.sort_image(frame, LIGHTNESS, SortBy.ROW_COL, ASC, DESC)
    flat_in = frame.reshape(-1, 4)
    flat_out = out.reshape(-1, 4)
    assert sorted(map(tuple, flat_in.tolist())) == sorted(map(tuple, flat_out.tolist()))


def test_nothing_returns_copy(make_frame):
    frame = make_frame(4, 4)
    out = direct.sort_image(frame, LIGHTNESS, SortBy.NOTHING, ASC, ASC)
    np.testing.assert_array_equal(out, frame)
    assert out is not frame


@pytest.mark.parametrize("shape", [(0, 0, 4), (0, 5, 4), (5, 0, 4)])
def test_empty_frames(shape):
    frame = np.zeros(shape, dtype=np.uint8)
    assert direct.sort_rows(frame, LIGHTNESS, ASC).shape == shape
    assert direct.sort_columns(frame, LIGHTNESS, ASC).shape == shape


def test_single_row_and_column(gray_frame):
    row = gray_frame([[3, 1, 2]])
    col = gray_frame([[3], [1], [2]])
    assert direct.sort_columns(row, LIGHTNESS, ASC)[..., 0].tolist() == [[3, 1, 2]]
    assert direct.sort_columns(col, LIGHTNESS, ASC)[..., 0].tolist() == [[1], [2], [3]]
    assert direct.sort_rows(row, LIGHTNESS, DESC)[..., 0].tolist() == [[3, 2, 1]]
