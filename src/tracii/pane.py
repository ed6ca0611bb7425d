import logging
from collections.abc import Sequence

import numpy as np

from tracii.palette import Color

logger = logging.getLogger(__name__)

DEFAULT_GRID = (10, 5)


def pane_scramble(
    tiles: Sequence[np.ndarray],
    background: Color,
    width_count: int,
    height_count: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray | None:
    """Shuffle up to width_count * height_count tiles into a grid canvas.

    Tiles are (height, width, 3) uint8 arrays. The first tile of the input (the
    "offering") fixes the cell size. Cells are filled column by column: the
    k-th shuffled tile lands in column k // height_count, row k % height_count.
    Cells left over when tiles run out keep the background.

    Returns None when there are no tiles or any used tile differs in size from
    the offering.
    """
    if width_count < 1 or height_count < 1:
        raise ValueError(f"Grid must be at least 1x1, got {width_count}x{height_count}")
    if len(tiles) == 0:
        return None
    if rng is None:
        rng = np.random.default_rng()

    panes = list(tiles[: width_count * height_count])
    panes = [panes[i] for i in rng.permutation(len(panes))]

    offering = tiles[0]
    tile_h, tile_w = offering.shape[:2]

    canvas = np.empty((height_count * tile_h, width_count * tile_w, 3), dtype=np.uint8)
    canvas[:, :] = background

    remaining = iter(panes)
    for w in range(width_count):
        for h in range(height_count):
            pane = next(remaining, None)
            if pane is None:
                return canvas

            if pane.shape[1] != tile_w:
                logger.error("The offering pane had width %d, found a pane with width %d", tile_w, pane.shape[1])
                return None
            if pane.shape[0] != tile_h:
                logger.error("The offering pane had height %d, found a pane with height %d", tile_h, pane.shape[0])
                return None

            y, x = h * tile_h, w * tile_w
            canvas[y : y + tile_h, x : x + tile_w] = pane

    return canvas
