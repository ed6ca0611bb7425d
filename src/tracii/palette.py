from collections.abc import Iterator

Color = tuple[int, int, int]

DEFAULT_BACKGROUND: Color = (240, 40, 14)
DEFAULT_FOREGROUND: Color = (9, 200, 220)

# xterm system colours 0-15
_SYSTEM = [
    (0, 0, 0),
    (128, 0, 0),
    (0, 128, 0),
    (128, 128, 0),
    (0, 0, 128),
    (128, 0, 128),
    (0, 128, 128),
    (192, 192, 192),
    (128, 128, 128),
    (255, 0, 0),
    (0, 255, 0),
    (255, 255, 0),
    (0, 0, 255),
    (255, 0, 255),
    (0, 255, 255),
    (255, 255, 255),
]

# Channel levels of the 6x6x6 colour cube (16-231)
CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def _build_xterm_256() -> tuple[Color, ...]:
    colours = list(_SYSTEM)
    for r in CUBE_LEVELS:
        for g in CUBE_LEVELS:
            for b in CUBE_LEVELS:
                colours.append((r, g, b))
    # Grayscale ramp 232-255
    colours.extend((v, v, v) for v in range(8, 248, 10))
    return tuple(colours)


XTERM_256 = _build_xterm_256()


def xterm_color(index: int) -> Color:
    """Look up an xterm 256-colour palette entry."""
    if not 0 <= index < len(XTERM_256):
        raise IndexError(f"xterm colour index out of range: {index}")
    return XTERM_256[index]


def xterm_color_pairs(limit: int = 56) -> Iterator[tuple[Color, Color]]:
    """Yield (background, foreground) pairs for palette indices 0..limit.

    Background is the outer loop; a colour is never paired with itself.
    """
    for b in range(limit + 1):
        for f in range(limit + 1):
            if b == f:
                continue
            yield xterm_color(b), xterm_color(f)
