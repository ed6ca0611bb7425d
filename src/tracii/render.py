import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from tracii.fonts import GLYPH_SCALE, Coverage, FontSource, Glyph
from tracii.palette import Color

logger = logging.getLogger(__name__)

DEFAULT_CELL_HEIGHT = 80
DEFAULT_CELL_RATIO = 1.9


@dataclass(frozen=True)
class CellSpec:
    """Size of every render in a batch: height in pixels and height/width ratio."""

    height: int
    ratio: float = DEFAULT_CELL_RATIO

    def __post_init__(self):
        if self.height <= 0:
            raise ValueError(f"Cell height must be positive, got {self.height}")
        if not (self.ratio > 0 and math.isfinite(self.ratio)):
            raise ValueError(f"Cell ratio must be a positive number, got {self.ratio}")
        if self.width == 0:
            raise ValueError(f"Cell ratio {self.ratio} leaves no width at height {self.height}")

    @property
    def width(self) -> int:
        return math.floor(self.height / self.ratio)


@dataclass(frozen=True)
class GlyphRender:
    char: str
    buffer: np.ndarray  # (cell.height, cell.width, 3) uint8, read-only
    background: Color
    foreground: Color

    @property
    def width(self) -> int:
        return self.buffer.shape[1]

    @property
    def height(self) -> int:
        return self.buffer.shape[0]


def _centre_offset(cell_size: int, glyph_size: int) -> int:
    return max(0, (cell_size - glyph_size) // 2)


def render_glyph(coverage: Coverage, background: Color, foreground: Color, cell: CellSpec) -> np.ndarray:
    """Blend a glyph's coverage between two colours, centred in a cell-sized buffer.

    Each covered pixel gets fg * t + bg * (1 - t) per channel, truncated to uint8.
    A glyph larger than the cell is pinned to the top-left and cropped.
    """
    out = np.empty((cell.height, cell.width, 3), dtype=np.uint8)
    out[:, :] = background

    bbox = coverage.bbox
    x_offset = _centre_offset(cell.width, bbox.width)
    y_offset = _centre_offset(cell.height, bbox.height)

    # Portion of the coverage that fits in the cell
    visible_w = min(bbox.width, cell.width - x_offset)
    visible_h = min(bbox.height, cell.height - y_offset)
    if visible_w < bbox.width or visible_h < bbox.height:
        logger.debug(
            "Glyph %dx%d exceeds cell %dx%d, cropping",
            bbox.width,
            bbox.height,
            cell.width,
            cell.height,
        )
    if visible_w <= 0 or visible_h <= 0:
        return out

    t = coverage.values[:visible_h, :visible_w].astype(np.float64)[..., np.newaxis]
    fg = np.asarray(foreground, dtype=np.float64)
    bg = np.asarray(background, dtype=np.float64)
    blended = (fg * t + bg * (1.0 - t)).astype(np.uint8)

    region = out[y_offset : y_offset + visible_h, x_offset : x_offset + visible_w]
    covered = t[..., 0] > 0
    region[covered] = blended[covered]
    return out


def load_glyphs(source: FontSource, chars: Iterable[str]) -> list[tuple[str, Glyph]]:
    """Look up each character, skipping (with a warning) those the font lacks."""
    glyphs = []
    for char in chars:
        glyph = source.lookup(char)
        if glyph is None:
            logger.warning("There was an error loading the glyph for %r, skipping", char)
            continue
        glyphs.append((char, glyph))
    return glyphs


def render_all(
    source: FontSource,
    glyphs: Sequence[tuple[str, Glyph]],
    color_pairs: Iterable[tuple[Color, Color]],
    cell: CellSpec,
    scale: tuple[float, float] = GLYPH_SCALE,
) -> list[GlyphRender]:
    """Render every glyph under every (background, foreground) pair.

    Output order is colour pair major: all glyphs for the first pair in input
    order, then all glyphs for the second pair, and so on.
    """
    coverages = [source.rasterize(glyph, scale) for _, glyph in glyphs]

    renders: list[GlyphRender] = []
    for background, foreground in color_pairs:
        for (char, _), coverage in zip(glyphs, coverages):
            buffer = render_glyph(coverage, background, foreground, cell)
            buffer.flags.writeable = False
            renders.append(
                GlyphRender(
                    char=char,
                    buffer=buffer,
                    background=tuple(background),
                    foreground=tuple(foreground),
                )
            )
    logger.debug("Rendered %d glyphs at %dx%d", len(renders), cell.width, cell.height)
    return renders
