import shutil
import subprocess

import numpy as np
import pytest

from tracii.fonts import BoundingBox, Coverage

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
]


def _find_monospace_font():
    """Find a monospace font on the system."""
    for path in _FONT_CANDIDATES:
        if shutil.os.path.exists(path):
            return path
    result = shutil.which("fc-match")
    if result:
        out = subprocess.run(["fc-match", "-f", "%{file}", "monospace"], capture_output=True, text=True)
        if out.returncode == 0 and out.stdout.strip() and not out.stdout.strip().endswith(".ttc"):
            return out.stdout.strip()
    return None


FONT_PATH = _find_monospace_font()
needs_font = pytest.mark.skipif(FONT_PATH is None, reason="No monospace font found on system")


def make_coverage(values, x0=0, y0=0):
    """Build a Coverage from a 2D list/array of coverage values."""
    values = np.asarray(values, dtype=np.float32)
    h, w = values.shape
    return Coverage(bbox=BoundingBox(x0, y0, x0 + w, y0 + h), values=values)


def make_tile(width, height, value):
    """A flat (height, width, 3) uint8 tile."""
    tile = np.empty((height, width, 3), dtype=np.uint8)
    tile[:, :] = value
    return tile
