import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
from PIL import Image

from tracii.render import GlyphRender

logger = logging.getLogger(__name__)

RENDER_DIR_NAME = "glyph_renders"
COMPOSITE_NAME = "scramble.png"


class ExportError(OSError):
    pass


def _save(buffer: np.ndarray, path: Path, what: str) -> None:
    try:
        Image.fromarray(buffer).save(path)
    except (OSError, ValueError) as e:
        raise ExportError(f"There was an error saving {what} to {path}: {e}") from e
    logger.debug("Wrote %s", path)


def export_glyph_renders(work_dir: str | Path, renders: Sequence[GlyphRender]) -> Path:
    """Write each render to WORK_DIR/glyph_renders/<index>-glyph-render.png.

    The index is the render's position in the batch. The directory must not exist yet.
    """
    render_dir = Path(work_dir) / RENDER_DIR_NAME
    try:
        render_dir.mkdir()
    except OSError as e:
        raise ExportError(f"There was an error making the render dir {render_dir}: {e}") from e

    for index, render in enumerate(renders):
        _save(render.buffer, render_dir / f"{index}-glyph-render.png", f"the render for {render.char!r}")
    logger.info("Exported %d glyph renders to %s", len(renders), render_dir)
    return render_dir


def save_composite(work_dir: str | Path, canvas: np.ndarray, name: str = COMPOSITE_NAME) -> Path:
    path = Path(work_dir) / name
    _save(canvas, path, "the render scramble")
    return path
