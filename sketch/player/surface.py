"""Drawing surfaces: the side-effect boundary of the player.

The executor only needs five primitives: ``line``, ``block``,
``set_colour``, ``show`` and ``pause``.  ``DrawingSurface`` names that
contract; two implementations ship here:

RasterSurface
    numpy ``(H, W, 3) uint8`` RGB canvas.  Lines are rasterised with
    ``cv2.line``; blocks are array fills clipped to the canvas.  Used by
    the viewer window and by headless rendering.

RecordingSurface
    Appends every call to ``calls`` as a tuple.  Used for ``--trace``
    output and by tests.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# cv2 rasterises with int32 fixed-point coordinates
_COORD_LIMIT = 1 << 24


class DrawingSurface(Protocol):
    """Primitive drawing operations the executor calls."""

    def line(self, x0: int, y0: int, x1: int, y1: int) -> None: ...

    def block(self, x: int, y: int, width: int, height: int) -> None: ...

    def set_colour(self, rgb: int) -> None: ...

    def show(self) -> None: ...

    def pause(self, ms: int) -> None: ...


def rgb_tuple(rgb: int) -> tuple[int, int, int]:
    """Split packed ``0xRRGGBB`` into ``(r, g, b)``."""
    return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF


# ---------------------------------------------------------------------------
# Raster
# ---------------------------------------------------------------------------


class RasterSurface:
    """In-memory RGB canvas.

    Parameters
    ----------
    width, height : int
        Canvas size in pixels.
    background : tuple[int, int, int]
        Initial fill colour (RGB).
    on_show : Callable[[np.ndarray], None] | None
        Called with the canvas on every ``show()``.
    on_pause : Callable[[int], None] | None
        Called with the duration in ms on every ``pause()``.  Defaults to
        ``time.sleep``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        background: tuple[int, int, int] = (255, 255, 255),
        on_show: Callable[[np.ndarray], None] | None = None,
        on_pause: Callable[[int], None] | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.canvas = np.empty((height, width, 3), dtype=np.uint8)
        self.canvas[:, :] = background
        self.colour: tuple[int, int, int] = (0, 0, 0)
        self.show_count = 0
        self._on_show = on_show
        self._on_pause = on_pause

    def line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        if max(abs(x0), abs(y0), abs(x1), abs(y1)) > _COORD_LIMIT:
            logger.debug("Skipping line with far endpoint (%d,%d)-(%d,%d)", x0, y0, x1, y1)
            return
        cv2.line(self.canvas, (int(x0), int(y0)), (int(x1), int(y1)), self.colour, 1)

    def block(self, x: int, y: int, width: int, height: int) -> None:
        """Fill ``width`` x ``height`` pixels from ``(x, y)``.

        Negative sizes extend left / up.  The fill is clipped to the canvas.
        """
        x0, x1 = sorted((x, x + width))
        y0, y1 = sorted((y, y + height))
        x0, x1 = max(x0, 0), min(x1, self.width)
        y0, y1 = max(y0, 0), min(y1, self.height)
        if x0 < x1 and y0 < y1:
            self.canvas[y0:y1, x0:x1] = self.colour

    def set_colour(self, rgb: int) -> None:
        self.colour = rgb_tuple(rgb)

    def show(self) -> None:
        self.show_count += 1
        if self._on_show is not None:
            self._on_show(self.canvas)

    def pause(self, ms: int) -> None:
        if self._on_pause is not None:
            self._on_pause(ms)
        else:
            time.sleep(ms / 1000.0)

    def snapshot(self) -> np.ndarray:
        """Copy of the current canvas."""
        return self.canvas.copy()


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


class RecordingSurface:
    """Surface that records calls instead of drawing."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        self.calls.append(("line", x0, y0, x1, y1))

    def block(self, x: int, y: int, width: int, height: int) -> None:
        self.calls.append(("block", x, y, width, height))

    def set_colour(self, rgb: int) -> None:
        self.calls.append(("colour", rgb))

    def show(self) -> None:
        self.calls.append(("show",))

    def pause(self, ms: int) -> None:
        self.calls.append(("pause", ms))

    def of_kind(self, kind: str) -> list[tuple]:
        """Recorded calls whose name is *kind*."""
        return [c for c in self.calls if c[0] == kind]

    def clear(self) -> None:
        self.calls.clear()
