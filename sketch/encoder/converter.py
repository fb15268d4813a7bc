"""Sketch encoder: grey-scale sample grid to sketch command stream.

The grid is scanned row-major.  For every pixel the encoder looks at its
left and right neighbours in the same row and emits only what the player
needs to reproduce the run structure:

    ============  ============  =========================
    equals_prev   equals_next   emitted
    ============  ============  =========================
    False         False         colour + position
    False         True          colour only (run starts)
    True          False         position only (run ends)
    True          True          nothing (inside a run)
    ============  ============  =========================

``generate_commands`` maps ``(True, True)`` to colour + position; the
scan loop suppresses that case before it gets there.

Neighbour test
--------------
By default ``equals_prev`` is ``grid[i][j-1] == grid[i][j]``.  Setting
``legacy_neighbour_test`` computes ``!=`` for the left neighbour, matching
the first converter in its suppression decisions only; coordinate and
colour chunks are always written in the corrected form.  The last-column
bound is always ``width - 1``.

Range policy
------------
Coordinates travel as at most two 6-bit chunks, so grids larger than
256 x 256 are rejected with ``SketchRangeError`` before any byte is
produced.  Samples must be integers in 0..255.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from sketch.commands.model import (
    MAX_COORDINATE,
    MAX_GREY,
    SketchRangeError,
    colour_and_position_commands,
    colour_commands,
    position_commands,
)
from sketch.utils import fs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncoderOptions:
    """Encoder behaviour switches.

    Parameters
    ----------
    legacy_neighbour_test : bool
        Compute the left-neighbour flag as an inequality, matching the
        first converter byte-for-byte in its suppression decisions.
    """

    legacy_neighbour_test: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_grid(grid: np.ndarray) -> np.ndarray:
    """Validate shape and sample range, return a uint8 view of *grid*."""
    arr = np.asarray(grid)
    if arr.ndim != 2:
        raise SketchRangeError(f"Grid must be 2-D (rows, cols), got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        raise SketchRangeError(f"Grid samples must be integers, got dtype {arr.dtype}")

    height, width = arr.shape
    limit = MAX_COORDINATE + 1
    if width > limit or height > limit:
        raise SketchRangeError(
            f"Grid {width}x{height} exceeds the {limit}x{limit} coordinate range"
        )
    if arr.size and (arr.min() < 0 or arr.max() > MAX_GREY):
        raise SketchRangeError(
            f"Grid samples must be in [0, {MAX_GREY}], got [{arr.min()}, {arr.max()}]"
        )
    return arr.astype(np.uint8, copy=False)


def neighbour_flags(
    row: np.ndarray,
    col: int,
    legacy: bool = False,
) -> tuple[bool, bool]:
    """Return ``(equals_prev, equals_next)`` for ``row[col]``.

    Parameters
    ----------
    row : np.ndarray
        One grid row.
    col : int
        Column index.
    legacy : bool
        Use the inequality form of the left-neighbour test.
    """
    value = row[col]
    equals_prev = False
    equals_next = False

    if col > 0:
        if legacy:
            equals_prev = bool(row[col - 1] != value)
        else:
            equals_prev = bool(row[col - 1] == value)

    if col < len(row) - 1:
        equals_next = bool(row[col + 1] == value)

    return equals_prev, equals_next


def generate_commands(
    grey: int,
    row: int,
    col: int,
    equals_prev: bool,
    equals_next: bool,
) -> bytes:
    """Command bytes for one pixel given its neighbour flags."""
    if not equals_prev and equals_next:
        return colour_commands(grey)
    if equals_prev and not equals_next:
        return position_commands(row, col)
    return colour_and_position_commands(grey, row, col)


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


class SketchEncoder:
    """Convert grey-scale grids to sketch command streams.

    Parameters
    ----------
    options : EncoderOptions | None
        Behaviour switches; defaults to ``EncoderOptions()``.

    Attributes
    ----------
    stats : Counter
        Per-pixel case counts of the last ``encode`` call (``suppressed``,
        ``colour``, ``position``, ``full``) plus ``bytes`` written.
    """

    def __init__(self, options: EncoderOptions | None = None) -> None:
        self._opts = options or EncoderOptions()
        self.stats: Counter = Counter()

    @property
    def options(self) -> EncoderOptions:
        return self._opts

    def encode(self, grid: np.ndarray) -> bytes:
        """Encode a full grid.

        Parameters
        ----------
        grid : np.ndarray
            ``(H, W)`` integer samples in 0..255.

        Returns
        -------
        bytes
            Complete command stream (no header).

        Raises
        ------
        SketchRangeError
            If the grid shape or sample values are out of range.
        """
        arr = _as_grid(grid)
        legacy = self._opts.legacy_neighbour_test
        self.stats = Counter()
        out = bytearray()

        for i, row in enumerate(arr):
            for j in range(len(row)):
                equals_prev, equals_next = neighbour_flags(row, j, legacy)

                if equals_prev and equals_next:
                    self.stats["suppressed"] += 1
                    continue

                if not equals_prev and equals_next:
                    self.stats["colour"] += 1
                elif equals_prev and not equals_next:
                    self.stats["position"] += 1
                else:
                    self.stats["full"] += 1

                out += generate_commands(int(row[j]), i, j, equals_prev, equals_next)

        self.stats["bytes"] = len(out)
        logger.info(
            "Encoded %dx%d grid: %d bytes (full=%d colour=%d position=%d suppressed=%d)",
            arr.shape[1], arr.shape[0], len(out),
            self.stats["full"], self.stats["colour"],
            self.stats["position"], self.stats["suppressed"],
        )
        return bytes(out)

    def encode_to_file(self, grid: np.ndarray, path: str | Path) -> Path:
        """Encode *grid* and write the stream atomically to *path*."""
        path = Path(path)
        stream = self.encode(grid)
        fs.atomic_write_bytes(path, stream)
        logger.info("Wrote %s (%d bytes)", path, len(stream))
        return path


# ---------------------------------------------------------------------------
# Built-in consistency checks
# ---------------------------------------------------------------------------

# (grey, row, col, equals_prev, equals_next)
_CHECK_VECTORS = (
    (0, 0, 56, False, False),
    (0, 128, 4, False, False),
    (0, 90, 128, False, False),
    (0, 128, 200, False, False),
    (100, 0, 0, False, True),
    (255, 0, 0, False, True),
    (128, 0, 0, True, False),
    (128, 0, 199, True, False),
    (128, 199, 0, True, False),
    (128, 199, 199, True, False),
    (69, 0, 0, True, True),
    (69, 0, 134, True, True),
    (69, 134, 0, True, True),
    (69, 134, 134, True, True),
)


def self_check() -> list[str]:
    """Check ``generate_commands`` against the command-group builders.

    Returns
    -------
    list[str]
        One message per failing vector; empty when everything passes.
    """
    failures: list[str] = []
    for grey, row, col, prev, nxt in _CHECK_VECTORS:
        if not prev and nxt:
            expected = colour_commands(grey)
        elif prev and not nxt:
            expected = position_commands(row, col)
        else:
            expected = colour_and_position_commands(grey, row, col)

        got = generate_commands(grey, row, col, prev, nxt)
        if got != expected:
            failures.append(
                f"generate_commands({grey}, {row}, {col}, {prev}, {nxt}) "
                f"returned {got.hex()} expected {expected.hex()}"
            )
    return failures
