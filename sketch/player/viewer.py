"""Sketch viewer: the outer driver around SketchPlayer.

Interactive mode opens an OpenCV window and repeatedly:

    1. plays one frame (``player.step()``),
    2. waits ``frame_interval_ms`` for a key press.

The configured quit key (escape by default) or closing the window ends
the loop.  ``TOOL PAUSE`` is implemented with ``cv2.waitKey`` so the
window keeps repainting; the quit key also works mid-pause and ends the frame
at once, skipping the rest of its commands.

Headless mode (``render_sketch``) replays a number of frames onto a
``RasterSurface`` and returns the canvas, for PNG snapshots and tests.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from sketch.configs.loader import SketchConfig
from sketch.player.executor import SketchPlayer
from sketch.player.surface import RasterSurface

logger = logging.getLogger(__name__)


def render_sketch(
    path: str | Path,
    config: SketchConfig,
    frames: int = 1,
) -> np.ndarray:
    """Replay *frames* invocations of *path* without a window.

    Parameters
    ----------
    path : str | Path
        Sketch file.
    config : SketchConfig
        Canvas size and background come from ``config.canvas``.
    frames : int
        Number of ``step()`` calls.  Each call resets the pen but not the
        canvas, so frames accumulate.

    Returns
    -------
    np.ndarray
        ``(H, W, 3) uint8`` RGB canvas.
    """
    if frames < 1:
        raise ValueError(f"frames must be >= 1, got {frames}")

    canvas_cfg = config.canvas
    surface = RasterSurface(
        canvas_cfg.width_px,
        canvas_cfg.height_px,
        background=canvas_cfg.background_rgb,
        on_pause=lambda ms: None,
    )
    player = SketchPlayer(path, surface)
    for _ in range(frames):
        player.step()
    logger.info("Rendered %d frame(s) of %s", frames, Path(path).name)
    return surface.snapshot()


class SketchViewer:
    """Interactive window driving a SketchPlayer.

    Parameters
    ----------
    path : str | Path
        Sketch file.
    config : SketchConfig
        Canvas and viewer settings.
    """

    def __init__(self, path: str | Path, config: SketchConfig) -> None:
        self._cfg = config
        self.path = Path(path)
        self.title = f"{config.viewer.window_title_prefix}: {self.path.name}"
        self.quit_requested = False

        canvas_cfg = config.canvas
        self.surface = RasterSurface(
            canvas_cfg.width_px,
            canvas_cfg.height_px,
            background=canvas_cfg.background_rgb,
            on_show=self._present,
            on_pause=self._wait,
        )
        self.player = SketchPlayer(self.path, self.surface)

    # ------------------------------------------------------------------
    # Surface hooks
    # ------------------------------------------------------------------

    def _present(self, canvas: np.ndarray) -> None:
        scale = self._cfg.viewer.scale
        frame = cv2.cvtColor(canvas, cv2.COLOR_RGB2BGR)
        if scale > 1:
            frame = cv2.resize(
                frame, None, fx=scale, fy=scale, interpolation=cv2.INTER_NEAREST,
            )
        cv2.imshow(self.title, frame)
        self._poll(1)

    def _wait(self, ms: int) -> None:
        if self.quit_requested:
            return
        self._poll(max(int(ms), 1))

    def _poll(self, ms: int) -> None:
        key = cv2.waitKey(ms)
        if key != -1 and (key & 0xFF) == self._cfg.viewer.quit_key:
            logger.info("Quit key pressed")
            self.quit_requested = True

    def _window_closed(self) -> bool:
        try:
            return cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) < 1
        except cv2.error:
            return True

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> int:
        """Play until the quit key is pressed or the window is closed.

        Returns
        -------
        int
            Number of frames played.
        """
        cv2.namedWindow(self.title, cv2.WINDOW_AUTOSIZE)
        logger.info("Viewing %s (press key %d to quit)", self.path, self._cfg.viewer.quit_key)

        try:
            while not self.quit_requested:
                result = self.player.step(lambda: self.quit_requested)
                if result.stopped:
                    break
                if result.end_of_stream:
                    logger.debug("End of stream after %d frame(s)", self.player.frames_played)
                self._poll(self._cfg.viewer.frame_interval_ms)
                if self._window_closed():
                    break
        finally:
            cv2.destroyWindow(self.title)

        logger.info("Viewer stopped after %d frame(s)", self.player.frames_played)
        return self.player.frames_played
