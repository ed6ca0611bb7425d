import glob
import io
import logging
import math
import struct
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from fontTools.ttLib import TTCollection, TTFont, TTLibError
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

# Pixels along (x, y) spanned by the font's ascent-to-descent height; independent of the cell
GLYPH_SCALE = (40.0, 80.0)

_HOME = Path.home()

# (directory, recurse into subdirectories)
FONT_DIRECTORIES: list[tuple[Path, bool]] = [
    (Path("/Library/Fonts"), False),
    (Path("/Network/Library/Fonts"), False),
    (Path("/System/Library/Fonts"), False),
    (Path("/System Folder/Fonts"), False),
    (_HOME / "Library" / "Fonts", False),
    (Path("/usr/share/fonts"), True),
    (Path("/usr/local/share/fonts"), True),
    (_HOME / ".local" / "share" / "fonts", True),
    (_HOME / ".fonts", True),
]


class FontNotFoundError(LookupError):
    pass


class FontDecodeError(ValueError):
    pass


@dataclass(frozen=True)
class Glyph:
    char: str
    name: str  # glyph name in the font's cmap


@dataclass(frozen=True)
class BoundingBox:
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0


@dataclass(frozen=True)
class Coverage:
    """Rasterized coverage of one glyph, cropped to its bounding box.

    values has shape (bbox.height, bbox.width) with entries in [0, 1].
    """

    bbox: BoundingBox
    values: np.ndarray

    @classmethod
    def empty(cls) -> "Coverage":
        return cls(BoundingBox(0, 0, 0, 0), np.zeros((0, 0), dtype=np.float32))


def find_font(name: str, directories: Iterable[tuple[Path, bool]] | None = None) -> Path:
    """Resolve a font name to exactly one file by globbing the font directories."""
    if directories is None:
        directories = FONT_DIRECTORIES
    pattern_name = glob.escape(name) + "*"
    candidates: list[Path] = []
    for directory, recursive in directories:
        pattern = directory / "**" / pattern_name if recursive else directory / pattern_name
        candidates.extend(Path(p) for p in sorted(glob.glob(str(pattern), recursive=recursive)))

    if not candidates:
        raise FontNotFoundError(f"Unable to locate a font with the name {name}")
    if len(candidates) > 1:
        listing = "\n".join(f"\t{c}" for c in candidates)
        raise FontNotFoundError(
            f"Found the following font files matching {name}:\n{listing}\nThere can only be one viable file"
        )
    return candidates[0]


def _decode_fonts(blob: bytes) -> list[TTFont]:
    if blob[:4] == b"ttcf":
        return list(TTCollection(io.BytesIO(blob)).fonts)
    return [TTFont(io.BytesIO(blob))]


class FontSource:
    """A single decoded font: cmap lookup via fontTools, coverage via FreeType."""

    def __init__(self, blob: bytes, cmap: dict[int, str], name: str = "<memory>", em_per_height: float = 1.0):
        self.blob = blob
        self.cmap = cmap
        self.name = name
        # Em size relative to the ascent-to-descent height; scales are given in the latter
        self.em_per_height = em_per_height
        self._sized: dict[int, ImageFont.FreeTypeFont] = {}

    @classmethod
    def from_bytes(cls, blob: bytes, name: str = "<memory>") -> "FontSource":
        try:
            fonts = _decode_fonts(blob)
        except (TTLibError, struct.error) as e:
            raise FontDecodeError(f"Could not decode {name}: {e}") from e

        if not fonts:
            raise FontDecodeError(f"There were no fonts in {name}")
        if len(fonts) > 1:
            raise FontDecodeError(f"There was more than one font in {name}")

        try:
            cmap = fonts[0].getBestCmap() or {}
        except (TTLibError, struct.error, KeyError) as e:
            raise FontDecodeError(f"Could not read the character map of {name}: {e}") from e

        try:
            units_per_em = fonts[0]["head"].unitsPerEm
            hhea = fonts[0]["hhea"]
            line_height = hhea.ascent - hhea.descent
        except (TTLibError, struct.error, KeyError) as e:
            raise FontDecodeError(f"Could not read the vertical metrics of {name}: {e}") from e
        if line_height <= 0:
            raise FontDecodeError(f"{name} has a non-positive ascent to descent height: {line_height}")

        logger.debug("Loaded %s with %d mapped characters", name, len(cmap))
        return cls(blob, dict(cmap), name=name, em_per_height=units_per_em / line_height)

    @classmethod
    def load(cls, path: str | Path) -> "FontSource":
        path = Path(path)
        try:
            blob = path.read_bytes()
        except OSError as e:
            raise FontDecodeError(f"There was an error reading from {path}: {e}") from e
        return cls.from_bytes(blob, name=str(path))

    def lookup(self, char: str) -> Glyph | None:
        name = self.cmap.get(ord(char))
        if name is None:
            return None
        return Glyph(char=char, name=name)

    def _font(self, size: int) -> ImageFont.FreeTypeFont:
        if size not in self._sized:
            try:
                self._sized[size] = ImageFont.truetype(io.BytesIO(self.blob), size)
            except OSError as e:
                raise FontDecodeError(f"FreeType could not open {self.name}: {e}") from e
        return self._sized[size]

    def rasterize(self, glyph: Glyph, scale: tuple[float, float] = GLYPH_SCALE) -> Coverage:
        """Rasterize a glyph positioned at the origin and crop it to its visible coverage.

        scale is in pixels for the font's ascent-to-descent height, not per em.
        """
        scale_x, scale_y = scale
        font = self._font(max(1, math.floor(scale_y * self.em_per_height)))
        left, top, right, bottom = font.getbbox(glyph.char)
        width, height = right - left, bottom - top
        if width <= 0 or height <= 0:
            return Coverage.empty()

        img = Image.new("L", (width, height), 0)
        draw = ImageDraw.Draw(img)
        draw.text((-left, -top), glyph.char, fill=255, font=font)

        # FreeType only takes one pixel size; squeeze or stretch horizontally afterwards
        x_factor = scale_x / scale_y
        if x_factor != 1.0:
            img = img.resize((max(1, round(width * x_factor)), height), Image.BOX)
            left = round(left * x_factor)

        visible = img.getbbox()
        if visible is None:
            return Coverage.empty()
        img = img.crop(visible)
        values = np.asarray(img, dtype=np.float32) / 255.0
        bbox = BoundingBox(
            left + visible[0],
            top + visible[1],
            left + visible[2],
            top + visible[3],
        )
        return Coverage(bbox=bbox, values=values)
