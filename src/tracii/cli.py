import argparse
import logging
import sys
import tempfile
from pathlib import Path

import numpy as np

from tracii.charsets import LIMITED, PRINTABLE
from tracii.export import ExportError, export_glyph_renders, save_composite
from tracii.fonts import FontDecodeError, FontNotFoundError, FontSource, find_font
from tracii.palette import DEFAULT_BACKGROUND, DEFAULT_FOREGROUND, xterm_color_pairs
from tracii.pane import DEFAULT_GRID, pane_scramble
from tracii.render import DEFAULT_CELL_HEIGHT, DEFAULT_CELL_RATIO, CellSpec, load_glyphs, render_all

EXIT_CONFIG = 1
EXIT_FONT = 2
EXIT_OUTPUT = 3

SCRAMBLE_BACKGROUND = (0, 0, 0)


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be parsable as a float, got {value!r}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracii", description="Render font glyphs into colour tiles")
    font = parser.add_mutually_exclusive_group(required=True)
    font.add_argument("--fontfile", metavar="font/path", help="Font file to use for rendering")
    font.add_argument("--fontname", metavar="name", help="The name of a font to use")
    parser.add_argument(
        "--cellratio",
        metavar="h/w",
        type=_positive_float,
        default=DEFAULT_CELL_RATIO,
        help=f"The height to width ratio of a glyph cell (default: {DEFAULT_CELL_RATIO})",
    )
    parser.add_argument(
        "--cellheight",
        metavar="px",
        type=_positive_int,
        default=DEFAULT_CELL_HEIGHT,
        help=f"Height of a glyph cell in pixels (default: {DEFAULT_CELL_HEIGHT})",
    )
    parser.add_argument(
        "--workdir",
        metavar="path/to",
        default=None,
        help="Directory for artifacts (default: a new temporary directory)",
    )
    parser.add_argument(
        "--exportglyphs", action="store_true", default=False, help="Export the glyph renders to WORKDIR/glyph_renders"
    )
    parser.add_argument(
        "--color256", action="store_true", default=False, help="Render every pair of the first 57 xterm colours"
    )
    parser.add_argument("--limited", action="store_true", default=False, help="Only render a handful of characters")
    parser.add_argument(
        "--grid",
        nargs=2,
        type=_positive_int,
        metavar=("W", "H"),
        default=list(DEFAULT_GRID),
        help=f"Columns and rows of the scramble grid (default: {DEFAULT_GRID[0]} {DEFAULT_GRID[1]})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the scramble shuffle")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the pipeline for parsed arguments and return the process exit status."""
    try:
        font_path = Path(args.fontfile) if args.fontfile else find_font(args.fontname)
    except FontNotFoundError as e:
        print(e, file=sys.stderr)
        return EXIT_CONFIG
    if not font_path.exists():
        print(f"{font_path} does not exist", file=sys.stderr)
        return EXIT_CONFIG

    try:
        cell = CellSpec(height=args.cellheight, ratio=args.cellratio)
    except ValueError as e:
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    if args.workdir is not None:
        work_dir = Path(args.workdir)
        if not work_dir.is_dir():
            print(f"{work_dir} does not exist", file=sys.stderr)
            return EXIT_CONFIG
    else:
        try:
            work_dir = Path(tempfile.mkdtemp(prefix="tracii"))
        except OSError as e:
            print(f"There was an error making a temporary directory: {e}", file=sys.stderr)
            return EXIT_CONFIG

    print(f"Work dir: {work_dir}")

    try:
        source = FontSource.load(font_path)
        glyphs = load_glyphs(source, LIMITED if args.limited else PRINTABLE)
        if args.color256:
            color_pairs = list(xterm_color_pairs())
        else:
            color_pairs = [(DEFAULT_BACKGROUND, DEFAULT_FOREGROUND)]
        renders = render_all(source, glyphs, color_pairs, cell)
    except FontDecodeError as e:
        print(e, file=sys.stderr)
        return EXIT_FONT

    try:
        if args.exportglyphs:
            export_glyph_renders(work_dir, renders)

        width_count, height_count = args.grid
        canvas = pane_scramble(
            [render.buffer for render in renders],
            SCRAMBLE_BACKGROUND,
            width_count,
            height_count,
            rng=np.random.default_rng(args.seed),
        )
        if canvas is not None:
            save_composite(work_dir, canvas)
    except ExportError as e:
        print(e, file=sys.stderr)
        return EXIT_OUTPUT

    print(f"Work dir: {work_dir}")
    return 0


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run(args))
