"""Grey-scale image loading for the encoder.

Turns an image file into the ``(H, W) uint8`` sample grid the encoder
consumes.  PGM (P2/P5) is the native input format; any other format
Pillow can open is converted to 8-bit grey (mode ``L``) on the way in.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class SketchImageError(Exception):
    """Raised when an input image cannot be decoded."""

    pass


def load_grey_grid(path: str | Path) -> np.ndarray:
    """Load *path* as a grey-scale sample grid.

    Parameters
    ----------
    path : str | Path
        Image file (``.pgm`` or any Pillow-readable format).

    Returns
    -------
    np.ndarray
        ``(H, W)`` array of ``uint8`` samples, row-major.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SketchImageError
        If Pillow cannot decode the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        with Image.open(path) as img:
            if img.mode != "L":
                logger.info("Converting %s from mode %s to 8-bit grey", path.name, img.mode)
                img = img.convert("L")
            grid = np.asarray(img, dtype=np.uint8).copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise SketchImageError(f"Unable to decode image {path}: {exc}") from exc

    logger.info("Loaded %s: %dx%d (width x height)", path.name, grid.shape[1], grid.shape[0])
    return grid
