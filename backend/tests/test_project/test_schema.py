"""Tests for render recipe schema."""

import pytest

from engine.keys import SortKey
from engine.modes import DrawType, SortBy, SortOrder
from project.schema import (
    CURRENT_VERSION,
    PARAMS,
    deserialize,
    new_recipe,
    serialize,
    to_render_args,
    validate,
)

pytestmark = pytest.mark.smoke


def test_new_recipe_defaults():
    r = new_recipe()
    assert r["version"] == CURRENT_VERSION
    assert r["sort_by"] == "row"
    assert r["sort_key"] == "lightness"
    assert r["draw_type"] == "sort"
    assert r["row_order"] == "ascending"
    assert r["col_order"] == "ascending"
    assert r["pre_sort"] is False


def test_new_recipe_overrides():
    r = new_recipe(sort_by="col_row", pre_sort=True)
    assert r["sort_by"] == "col_row"
    assert r["pre_sort"] is True
    assert validate(r) == []


def test_roundtrip_serialize_deserialize():
    r = new_recipe(sort_key="hue", draw_type="unsort", col_order="descending")
    assert deserialize(serialize(r)) == r


def test_validate_missing_keys():
    errors = validate({"version": "1.0.0"})
    assert len(errors) == 1
    assert "Missing keys" in errors[0]


def test_validate_not_a_dict():
    assert validate([]) == ["Recipe must be a JSON object"]


def test_validate_bad_choice():
    errors = validate(new_recipe(sort_by="diagonal"))
    assert any("'sort_by'" in e for e in errors)


def test_validate_pre_sort_must_be_bool():
    errors = validate(new_recipe(pre_sort="yes"))
    assert any("'pre_sort'" in e for e in errors)


def test_validate_version_type():
    errors = validate(new_recipe(version=1))
    assert "'version' must be a string" in errors


def test_deserialize_invalid_json():
    with pytest.raises(ValueError, match="Invalid JSON"):
        deserialize("{not json")


def test_deserialize_invalid_recipe():
    with pytest.raises(ValueError, match="Invalid recipe"):
        deserialize('{"version": "1.0.0"}')


def test_to_render_args():
    args = to_render_args(
        new_recipe(
            sort_by="row_col",
            sort_key="blue",
            draw_type="unsort",
            row_order="descending",
            pre_sort=True,
        )
    )
    assert args == {
        "sort_by": SortBy.ROW_COL,
        "sort_key": SortKey.BLUE,
        "draw_type": DrawType.UNSORT,
        "row_order": SortOrder.DESCENDING,
        "col_order": SortOrder.ASCENDING,
        "pre_sort": True,
    }


def test_params_choices_cover_enums():
    assert set(PARAMS["sort_by"]["choices"]) == {m.value for m in SortBy}
    assert set(PARAMS["sort_key"]["choices"]) == {k.value for k in SortKey}
