from collections import Counter

import numpy as np
import pytest

from tracii.pane import pane_scramble
from tests.conftest import make_tile

BG = (0, 0, 0)


def _cells(canvas, tile_w, tile_h):
    """Split a canvas into its cells, column by column."""
    rows = canvas.shape[0] // tile_h
    cols = canvas.shape[1] // tile_w
    return [canvas[h * tile_h : (h + 1) * tile_h, w * tile_w : (w + 1) * tile_w] for w in range(cols) for h in range(rows)]


def test_empty_tiles_gives_no_composite():
    assert pane_scramble([], BG, 10, 5) is None


def test_single_tile_single_cell_is_the_tile():
    rng = np.random.default_rng(0)
    tile = rng.integers(0, 256, size=(8, 4, 3), dtype=np.uint8)
    canvas = pane_scramble([tile], BG, 1, 1)
    np.testing.assert_array_equal(canvas, tile)


def test_canvas_dimensions_follow_offering():
    tiles = [make_tile(4, 6, i) for i in range(50)]
    canvas = pane_scramble(tiles, BG, 10, 5)
    assert canvas.shape == (5 * 6, 10 * 4, 3)
    assert canvas.dtype == np.uint8


@pytest.mark.parametrize("seed", range(10))
def test_width_mismatch_gives_no_composite(seed):
    tiles = [make_tile(4, 4, 1), make_tile(4, 4, 2), make_tile(5, 4, 3)]
    assert pane_scramble(tiles, BG, 3, 1, rng=np.random.default_rng(seed)) is None


@pytest.mark.parametrize("seed", range(10))
def test_height_mismatch_gives_no_composite(seed):
    tiles = [make_tile(4, 4, 1), make_tile(4, 3, 2)]
    assert pane_scramble(tiles, BG, 1, 2, rng=np.random.default_rng(seed)) is None


def test_odd_offering_gives_no_composite():
    tiles = [make_tile(2, 2, 1), make_tile(3, 3, 2), make_tile(3, 3, 3)]
    assert pane_scramble(tiles, BG, 3, 1) is None


def test_tiles_beyond_grid_are_ignored():
    # The mismatched tile never makes it into the working set
    tiles = [make_tile(2, 2, 1), make_tile(2, 2, 2), make_tile(9, 9, 3)]
    canvas = pane_scramble(tiles, BG, 2, 1)
    assert canvas is not None
    assert sorted(int(c[0, 0, 0]) for c in _cells(canvas, 2, 2)) == [1, 2]


def test_partial_grid_keeps_background():
    bg = (7, 8, 9)
    tiles = [make_tile(3, 2, v) for v in (100, 150, 200)]
    canvas = pane_scramble(tiles, bg, 2, 2, rng=np.random.default_rng(3))
    cells = _cells(canvas, 3, 2)

    # Column-major: the last cell (column 1, row 1) is the unfilled one
    assert (cells[3] == np.array(bg, dtype=np.uint8)).all()
    placed = sorted(int(c[0, 0, 0]) for c in cells[:3])
    assert placed == [100, 150, 200]
    for cell in cells[:3]:
        assert (cell == cell[0, 0]).all()


def test_cells_are_exact_tile_copies():
    rng = np.random.default_rng(11)
    tiles = [rng.integers(0, 256, size=(5, 3, 3), dtype=np.uint8) for _ in range(6)]
    canvas = pane_scramble(tiles, BG, 3, 2, rng=np.random.default_rng(5))
    cells = _cells(canvas, 3, 5)
    remaining = [t.tobytes() for t in tiles]
    for cell in cells:
        remaining.remove(cell.tobytes())
    assert remaining == []


def test_seeded_scramble_is_repeatable():
    tiles = [make_tile(2, 2, i) for i in range(12)]
    first = pane_scramble(tiles, BG, 4, 3, rng=np.random.default_rng(42))
    second = pane_scramble(tiles, BG, 4, 3, rng=np.random.default_rng(42))
    np.testing.assert_array_equal(first, second)


def test_input_list_is_not_modified():
    tiles = [make_tile(2, 2, i) for i in range(5)]
    before = [id(t) for t in tiles]
    pane_scramble(tiles, BG, 5, 1)
    assert [id(t) for t in tiles] == before


def test_permutation_is_uniform():
    n = 3
    trials = 6000
    tiles = [make_tile(1, 1, i) for i in range(n)]
    rng = np.random.default_rng(1234)
    counts = Counter()
    for _ in range(trials):
        canvas = pane_scramble(tiles, BG, n, 1, rng=rng)
        for slot in range(n):
            counts[(int(canvas[0, slot, 0]), slot)] += 1

    expected = trials / n
    for tile in range(n):
        for slot in range(n):
            # Every tile must be able to land in every slot, including the last
            assert abs(counts[(tile, slot)] - expected) < expected * 0.1


@pytest.mark.parametrize("width_count,height_count", [(0, 5), (10, 0)])
def test_empty_grid_is_rejected(width_count, height_count):
    with pytest.raises(ValueError):
        pane_scramble([make_tile(2, 2, 0)], BG, width_count, height_count)
