"""Render recipe schema — serialize/deserialize render parameters.

A recipe is a plain dict (JSON on disk) holding everything ``render`` needs
besides the two images.
"""

import json

from engine.keys import SortKey
from engine.modes import DrawType, SortBy, SortOrder

CURRENT_VERSION = "1.0.0"

PARAMS: dict = {
    "sort_by": {
        "type": "choice",
        "choices": [m.value for m in SortBy],
        "default": SortBy.ROW.value,
        "label": "Sort By",
    },
    "sort_key": {
        "type": "choice",
        "choices": [k.value for k in SortKey],
        "default": SortKey.LIGHTNESS.value,
        "label": "Sort Key",
    },
    "draw_type": {
        "type": "choice",
        "choices": [d.value for d in DrawType],
        "default": DrawType.SORT.value,
        "label": "Draw",
    },
    "row_order": {
        "type": "choice",
        "choices": [o.value for o in SortOrder],
        "default": SortOrder.ASCENDING.value,
        "label": "Row Order",
    },
    "col_order": {
        "type": "choice",
        "choices": [o.value for o in SortOrder],
        "default": SortOrder.ASCENDING.value,
        "label": "Column Order",
    },
    "pre_sort": {
        "type": "bool",
        "default": False,
        "label": "Pre-Sort",
    },
}

_ENUMS = {
    "sort_by": SortBy,
    "sort_key": SortKey,
    "draw_type": DrawType,
    "row_order": SortOrder,
    "col_order": SortOrder,
}

REQUIRED_KEYS = {"version"} | set(PARAMS)


def new_recipe(**overrides) -> dict:
    """Create a recipe with defaults, then apply ``overrides``."""
    recipe = {"version": CURRENT_VERSION}
    recipe.update({name: spec["default"] for name, spec in PARAMS.items()})
    recipe.update(overrides)
    return recipe


def validate(recipe: dict) -> list[str]:
    """Validate a recipe dict. Returns list of error strings (empty = valid)."""
    if not isinstance(recipe, dict):
        return ["Recipe must be a JSON object"]

    errors = []

    missing = REQUIRED_KEYS - set(recipe.keys())
    if missing:
        errors.append(f"Missing keys: {sorted(missing)}")
        return errors

    if not isinstance(recipe["version"], str):
        errors.append("'version' must be a string")

    for name, spec in PARAMS.items():
        value = recipe[name]
        if spec["type"] == "bool":
            if not isinstance(value, bool):
                errors.append(f"'{name}' must be true or false")
        elif value not in spec["choices"]:
            errors.append(
                f"'{name}' must be one of {spec['choices']}, got {value!r}"
            )

    return errors


def serialize(recipe: dict) -> str:
    """Serialize recipe to JSON string."""
    return json.dumps(recipe, indent=2)


def deserialize(data: str) -> dict:
    """Deserialize JSON string to recipe dict. Raises ValueError on invalid JSON or schema."""
    try:
        recipe = json.loads(data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    errors = validate(recipe)
    if errors:
        raise ValueError(f"Invalid recipe: {'; '.join(errors)}")

    return recipe


def to_render_args(recipe: dict) -> dict:
    """Convert a valid recipe into keyword arguments for ``render``."""
    args = {name: enum(recipe[name]) for name, enum in _ENUMS.items()}
    args["pre_sort"] = bool(recipe["pre_sort"])
    return args
