"""Sketch executor: replays a command stream against a drawing surface.

Provides:
    - PenState: the mutable pen (position, target, tool, DATA accumulator)
      plus the resume cursor of one playback session
    - SketchExecutor: obeys one byte at a time; runs one frame per call
    - SketchPlayer: file-backed session that re-opens the stream on every
      step and resumes from the saved cursor

Frames
------
``TOOL NEXTFRAME`` ends the current invocation.  The offset just after it
is saved in ``PenState.resume_offset`` and the next invocation starts
there.  Reaching the end of the stream resets the cursor to 0, so a
stream without NEXTFRAME markers is redrawn from scratch on every call.

After each invocation the surface is shown once and the pen is reset
(``x = y = tx = ty = 0``, tool ``LINE``).

Totality:
    Every byte value decodes to an opcode/operand pair.  Unknown TOOL
    selectors are no-ops.  No input raises.

Usage:
    from sketch.player import SketchPlayer, RasterSurface

    surface = RasterSurface(200, 200)
    player = SketchPlayer("drawing.sk", surface)
    result = player.step()
    print(result.resume_offset, result.end_of_stream)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Callable

from sketch.commands.model import (
    DRAWING_TOOLS,
    Opcode,
    Tool,
    accumulate,
    opcode,
    operand,
    unpack_colour,
)
from sketch.player.surface import DrawingSurface

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass
class PenState:
    """Pen and cursor state of one playback session.

    Attributes
    ----------
    x, y : int
        Current pen position.
    tx, ty : int
        Pending target, moved by ``DX``/``DY`` and set by TARGETX/TARGETY.
    tool : Tool
        Active drawing tool (``NONE``, ``LINE`` or ``BLOCK``).
    data : int
        DATA accumulator; cleared by every TOOL command.
    data_chunks : int
        Number of DATA commands folded into ``data`` since it was cleared.
    resume_offset : int
        Byte offset the next invocation starts from.
    frame_ended : bool
        Set by ``TOOL NEXTFRAME``; cleared after the invocation.
    """

    x: int = 0
    y: int = 0
    tx: int = 0
    ty: int = 0
    tool: Tool = Tool.LINE
    data: int = 0
    data_chunks: int = 0
    resume_offset: int = 0
    frame_ended: bool = False

    def clear_data(self) -> None:
        self.data = 0
        self.data_chunks = 0

    def reset_pen(self) -> None:
        """Reset position, target, tool and the frame flag."""
        self.x = 0
        self.y = 0
        self.tx = 0
        self.ty = 0
        self.tool = Tool.LINE
        self.frame_ended = False

    def reset(self) -> None:
        """Return to the initial session state."""
        self.reset_pen()
        self.clear_data()
        self.resume_offset = 0


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one invocation.

    Attributes
    ----------
    start_offset : int
        Offset the invocation started from.
    resume_offset : int
        Offset the next invocation will start from (0 after end of stream).
    commands : int
        Number of command bytes obeyed.
    end_of_stream : bool
        True if the source was exhausted rather than stopped by NEXTFRAME.
    stopped : bool
        True if the caller's stop check cut the frame short.  The
        surface was not shown and the cursor points at the next unread byte.
    """

    start_offset: int
    resume_offset: int
    commands: int
    end_of_stream: bool
    stopped: bool = False


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class SketchExecutor:
    """Obey sketch commands against a drawing surface.

    Parameters
    ----------
    surface : DrawingSurface
        Receives every drawing side effect.
    """

    def __init__(self, surface: DrawingSurface) -> None:
        self._surface = surface

    @property
    def surface(self) -> DrawingSurface:
        return self._surface

    # ------------------------------------------------------------------
    # Single command
    # ------------------------------------------------------------------

    def obey(self, state: PenState, byte: int) -> None:
        """Execute one command byte, updating *state* in place."""
        op = opcode(byte)

        if op is Opcode.DX:
            state.tx += operand(byte)
        elif op is Opcode.DY:
            self._move_y(state, operand(byte))
        elif op is Opcode.TOOL:
            self._tool(state, operand(byte, signed=False))
        else:
            state.data = accumulate((byte,), state.data)
            state.data_chunks += 1

    def _move_y(self, state: PenState, delta: int) -> None:
        state.ty += delta

        if state.tool is Tool.LINE:
            self._surface.line(state.x, state.y, state.tx, state.ty)
        elif state.tool is Tool.BLOCK:
            self._surface.block(state.x, state.y, state.tx - state.x, state.ty - state.y)

        state.x = state.tx
        state.y = state.ty

    def _tool(self, state: PenState, selector: int) -> None:
        tool = Tool.from_selector(selector)

        if tool is None:
            logger.debug("Ignoring unknown tool selector %d", selector)
        elif tool in DRAWING_TOOLS:
            state.tool = tool
        elif tool is Tool.COLOUR:
            self._surface.set_colour(unpack_colour(state.data, state.data_chunks))
        elif tool is Tool.TARGETX:
            state.tx = state.data
        elif tool is Tool.TARGETY:
            state.ty = state.data
        elif tool is Tool.SHOW:
            self._surface.show()
        elif tool is Tool.PAUSE:
            self._surface.pause(state.data)
        elif tool is Tool.NEXTFRAME:
            state.frame_ended = True

        state.clear_data()

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def run_frame(
        self,
        source: BinaryIO | bytes,
        state: PenState,
        should_stop: Callable[[], bool] | None = None,
    ) -> FrameResult:
        """Run one invocation from ``state.resume_offset``.

        Parameters
        ----------
        source : BinaryIO | bytes
            Seekable binary stream, or the raw command bytes.
        state : PenState
            Session state; updated in place.
        should_stop : Callable[[], bool] | None
            Checked after every command.  When it returns True the frame
            ends at once: no ``show()``, and the cursor is left on the next
            unread byte.

        Returns
        -------
        FrameResult
            Where this invocation started and where the next one resumes.
        """
        if isinstance(source, (bytes, bytearray)):
            source = BytesIO(source)

        start = state.resume_offset
        source.seek(start)
        stream = source.read()

        count = 0
        end_of_stream = True
        for count, byte in enumerate(stream, start=1):
            self.obey(state, byte)
            if state.frame_ended:
                state.resume_offset = start + count
                end_of_stream = False
                break
            if should_stop is not None and should_stop():
                state.resume_offset = start + count
                state.reset_pen()
                logger.debug("Frame %d stopped early at offset %d", start, start + count)
                return FrameResult(
                    start_offset=start,
                    resume_offset=state.resume_offset,
                    commands=count,
                    end_of_stream=False,
                    stopped=True,
                )

        if end_of_stream:
            state.resume_offset = 0
            state.clear_data()

        self._surface.show()
        state.reset_pen()

        logger.debug(
            "Frame %d..%d: %d commands%s",
            start, start + count, count, " (end of stream)" if end_of_stream else "",
        )
        return FrameResult(
            start_offset=start,
            resume_offset=state.resume_offset,
            commands=count,
            end_of_stream=end_of_stream,
        )


# ---------------------------------------------------------------------------
# File-backed session
# ---------------------------------------------------------------------------


class SketchPlayer:
    """Playback session over a ``.sk`` file.

    The file is opened for each step and closed before ``step()``
    returns; only the integer cursor in ``state`` survives between steps.

    Parameters
    ----------
    path : str | Path
        Sketch file.
    surface : DrawingSurface
        Drawing target.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    """

    def __init__(self, path: str | Path, surface: DrawingSurface) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Sketch file not found: {self.path}")
        self.state = PenState()
        self.executor = SketchExecutor(surface)
        self.frames_played = 0

    def step(self, should_stop: Callable[[], bool] | None = None) -> FrameResult:
        """Play the next frame; see ``SketchExecutor.run_frame`` for *should_stop*."""
        with open(self.path, "rb") as f:
            result = self.executor.run_frame(f, self.state, should_stop)
        if not result.stopped:
            self.frames_played += 1
        return result

    def rewind(self) -> None:
        """Restart the session from the first byte."""
        self.state.reset()
