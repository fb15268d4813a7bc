"""Filesystem helpers for sketch streams, snapshots and config files.

Sketch files are re-read by the player on every frame, so writers never
leave a truncated stream behind: output goes to a sibling temp file that
replaces the target only once it is complete.

Usage:
    from sketch.utils import fs
    fs.atomic_write_bytes("drawing.sk", stream)
    fs.atomic_save_image(canvas, "drawing.png")
    cfg = fs.load_yaml("sketch.yaml")
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import numpy as np
import yaml
from PIL import Image


def ensure_dir(p: str | Path) -> Path:
    """``mkdir -p`` *p* and return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


@contextmanager
def _replacing(target: Path, tmp: Path, what: str) -> Iterator[Path]:
    """Yield *tmp* for writing, then move it over *target*.

    Any failure removes *tmp* and surfaces as ``RuntimeError``.
    """
    ensure_dir(target.parent)
    try:
        yield tmp
        tmp.replace(target)
    except Exception as e:
        tmp.unlink(missing_ok=True)
        raise RuntimeError(f"Failed to write {what} {target} atomically: {e}") from e


def atomic_write_bytes(path: str | Path, data: bytes, tmp_suffix: str = ".tmp") -> None:
    """Write a command stream (or any bytes) to *path* atomically.

    Parameters
    ----------
    path : str | Path
        Destination, e.g. ``cat.sk``.
    data : bytes
        Full file contents.
    tmp_suffix : str
        Appended to the destination name for the temp file, so ``cat.sk``
        is staged as ``cat.sk.tmp`` in the same directory.

    Raises
    ------
    RuntimeError
        If writing or the final rename fails.
    """
    path = Path(path)
    with _replacing(path, path.with_name(path.name + tmp_suffix), "file") as tmp:
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())


def atomic_save_image(
    img: np.ndarray,
    path: str | Path,
    pil_kwargs: dict[str, Any] | None = None,
) -> None:
    """Save a rendered canvas through Pillow, atomically.

    ``(H, W, 3)`` arrays are saved as RGB and ``(H, W)`` or ``(H, W, 1)``
    as grey.  Non-``uint8`` input is clipped to 0..255 first.  The format
    follows the extension of *path*; the temp name keeps that extension
    (``snap.png`` is staged as ``snap.tmp.png``).
    """
    path = Path(path)
    arr = np.asarray(img)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]

    with _replacing(path, path.with_name(f"{path.stem}.tmp{path.suffix}"), "image") as tmp:
        Image.fromarray(arr).save(tmp, **(pil_kwargs or {}))


def load_yaml(path: str | Path) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns ``None`` for an empty document.

    Raises
    ------
    FileNotFoundError
        If *path* is missing.
    yaml.YAMLError
        If the document does not parse; the message names the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
