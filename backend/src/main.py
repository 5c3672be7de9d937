"""pixelunsort command line — load two images, render, save a PNG.

Usage:
    pixelunsort sort.png                              # row sort by lightness
    pixelunsort sort.png other.jpg --mode unsort      # scatter other.jpg
    pixelunsort a.png b.png --mode unsort --sort-by row_col --key hue --pre-sort
    pixelunsort a.png --recipe look.json -o out.png
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import sentry_sdk
from PIL import Image, UnidentifiedImageError

from _version import __version__
from diagnostics import init_diagnostics
from engine.render import render
from imaging.codec import load_rgba, next_save_path, save_png
from project import schema
from security import (
    strip_pii,
    validate_dimensions,
    validate_image_path,
    validate_output_path,
)

logger = logging.getLogger(__name__)

_CONSENT_PATH = "~/.pixelunsort/telemetry_consent"

# CLI flag -> recipe key
_RECIPE_FLAGS = {
    "mode": "draw_type",
    "sort_by": "sort_by",
    "key": "sort_key",
    "row_order": "row_order",
    "col_order": "col_order",
    "pre_sort": "pre_sort",
}


def _init_sentry():
    """Consent-gated Sentry init: no DSN unless the user opted in."""
    consent = Path(os.path.expanduser(_CONSENT_PATH))
    dsn = ""
    if consent.exists() and consent.read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"pixelunsort@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelunsort",
        description="Pixel sort an image, or unsort a second image through its sort order.",
    )
    parser.add_argument("sort_image", help="Image whose keys drive the sort")
    parser.add_argument(
        "unsort_image",
        nargs="?",
        help="Image scattered in unsort mode (default: the sort image)",
    )
    parser.add_argument(
        "--mode", choices=schema.PARAMS["draw_type"]["choices"], help="sort or unsort"
    )
    parser.add_argument("--sort-by", choices=schema.PARAMS["sort_by"]["choices"])
    parser.add_argument("--key", choices=schema.PARAMS["sort_key"]["choices"])
    parser.add_argument("--row-order", choices=schema.PARAMS["row_order"]["choices"])
    parser.add_argument("--col-order", choices=schema.PARAMS["col_order"]["choices"])
    parser.add_argument(
        "--pre-sort",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Sort the unsort image before scattering it",
    )
    parser.add_argument("--recipe", help="Load render parameters from a recipe file")
    parser.add_argument("--save-recipe", help="Write the effective recipe to this file")
    parser.add_argument(
        "--swap", action="store_true", help="Exchange the sort and unsort images"
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output .png file or directory (default: ~/Downloads or the working directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def _default_output_dir() -> Path:
    downloads = Path.home() / "Downloads"
    return downloads if downloads.is_dir() else Path.cwd()


def _resolve_output(output: str | None) -> Path:
    if output is None:
        return next_save_path(_default_output_dir())
    path = Path(output)
    if path.is_dir():
        return next_save_path(path)
    return path


def _load_recipe(args: argparse.Namespace) -> tuple[dict, list[str]]:
    """Recipe from --recipe (or defaults), with explicit flags applied on top."""
    recipe = schema.new_recipe()
    if args.recipe:
        try:
            recipe = schema.deserialize(Path(args.recipe).read_text())
        except (OSError, ValueError) as e:
            return recipe, [f"Recipe {args.recipe}: {e}"]

    for flag, name in _RECIPE_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            recipe[name] = value
    return recipe, schema.validate(recipe)


def _capture_render_failure(e: Exception, recipe: dict, shape: tuple):
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("sort_by", recipe.get("sort_by"))
        scope.fingerprint = ["render-crash", recipe.get("draw_type"), type(e).__name__]
        scope.set_context(
            "render",
            {
                "frame_shape": list(shape),
                "param_keys": sorted(k for k in recipe if k != "version"),
            },
        )
        sentry_sdk.capture_exception(e, scope=scope)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    init_diagnostics(verbose=args.verbose)
    _init_sentry()

    sort_path = args.sort_image
    unsort_path = args.unsort_image or args.sort_image
    if args.swap:
        sort_path, unsort_path = unsort_path, sort_path

    errors = validate_image_path(sort_path)
    if unsort_path != sort_path:
        errors += validate_image_path(unsort_path)

    recipe, recipe_errors = _load_recipe(args)
    errors += recipe_errors

    output_path = _resolve_output(args.output)
    errors += validate_output_path(str(output_path))
    if args.save_recipe:
        recipe_parent = Path(args.save_recipe).resolve().parent
        if not recipe_parent.is_dir():
            errors.append(f"Recipe directory does not exist: {recipe_parent}")

    if errors:
        for err in errors:
            print(f"error: {err}", file=sys.stderr)
        return 2

    try:
        sort_frame = load_rgba(sort_path)
        unsort_frame = sort_frame if unsort_path == sort_path else load_rgba(unsort_path)
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.warning("Image decode failed: %s", type(e).__name__)
        print(f"error: Cannot decode image: {e}", file=sys.stderr)
        return 2
    for frame in (sort_frame, unsort_frame):
        errors += validate_dimensions(frame.shape[1], frame.shape[0])
    if errors:
        for err in errors:
            print(f"error: {err}", file=sys.stderr)
        return 2

    try:
        output = render(sort_frame, unsort_frame, **schema.to_render_args(recipe))
    except Exception as e:
        _capture_render_failure(e, recipe, sort_frame.shape)
        logger.error("Render failed: %s", type(e).__name__)
        raise

    save_png(output, output_path)
    logger.info("Saved %dx%d output", output.shape[1], output.shape[0])

    if args.save_recipe:
        Path(args.save_recipe).write_text(schema.serialize(recipe))

    print(output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
