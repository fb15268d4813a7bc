"""Tests for the sketch executor and file-backed player.

Validates every command transition, DATA accumulation and clearing, the
frame loop (NEXTFRAME resumption, end-of-stream reset, pen reset), decoder
totality, and encoder -> executor end-to-end behaviour.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from sketch.commands.model import Tool, colour_commands, position_commands
from sketch.encoder.converter import SketchEncoder
from sketch.player.executor import FrameResult, PenState, SketchExecutor, SketchPlayer
from sketch.player.surface import RecordingSurface


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture()
def executor(surface: RecordingSurface) -> SketchExecutor:
    return SketchExecutor(surface)


@pytest.fixture()
def state() -> PenState:
    return PenState()


def _obey_all(executor: SketchExecutor, state: PenState, stream: bytes) -> None:
    for b in stream:
        executor.obey(state, b)


# ---------------------------------------------------------------------------
# Single commands
# ---------------------------------------------------------------------------


class TestMoves:
    def test_initial_state(self, state: PenState) -> None:
        assert (state.x, state.y, state.tx, state.ty) == (0, 0, 0, 0)
        assert state.tool is Tool.LINE
        assert state.data == 0
        assert state.resume_offset == 0

    def test_dx_moves_target_only(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        executor.obey(state, 0x3D)  # DX -3
        assert state.tx == -3
        assert state.x == 0
        assert surface.calls == []

    def test_dy_draws_line(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0x05, 0x45]))  # DX 5, DY 5
        assert surface.calls == [("line", 0, 0, 5, 5)]
        assert (state.x, state.y) == (5, 5)

    def test_dy_draws_block(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0x82, 0x04, 0x43]))  # BLOCK, DX 4, DY 3
        assert surface.calls == [("block", 0, 0, 4, 3)]

    def test_block_negative_size(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        state.x, state.y, state.tx, state.ty = 10, 10, 10, 10
        _obey_all(executor, state, bytes([0x82, 0x3E, 0x7E]))  # BLOCK, DX -2, DY -2
        assert surface.calls == [("block", 10, 10, -2, -2)]

    def test_tool_none_moves_without_drawing(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0x80, 0x07, 0x47]))  # NONE, DX 7, DY 7
        assert surface.calls == []
        assert (state.x, state.y) == (7, 7)
        assert state.tool is Tool.NONE


class TestData:
    def test_accumulates_msb_first(self, executor: SketchExecutor, state: PenState) -> None:
        _obey_all(executor, state, bytes([0xC3, 0xC8]))
        assert state.data == 200
        assert state.data_chunks == 2

    def test_target_x_and_y(self, executor: SketchExecutor, state: PenState) -> None:
        _obey_all(executor, state, bytes([0xC3, 0xC8, 0x84, 0xE3, 0x85]))
        assert state.tx == 200
        assert state.ty == 35
        assert state.data == 0

    def test_colour(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, colour_commands(10))
        assert surface.calls == [("colour", 0x0A0A0A)]
        assert state.data == 0
        assert state.data_chunks == 0

    def test_colour_without_tail(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0xFF, 0xC0, 0xC0, 0xC0, 0x83]))
        assert surface.calls == [("colour", 0xFC0000)]

    def test_pause_uses_data(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0xC1, 0xCA, 0x87]))
        assert surface.calls == [("pause", 74)]
        assert state.data == 0

    def test_show(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        executor.obey(state, 0x86)
        assert surface.calls == [("show",)]

    def test_tool_selection_clears_data(self, executor: SketchExecutor, state: PenState) -> None:
        _obey_all(executor, state, bytes([0xC5, 0x82]))
        assert state.tool is Tool.BLOCK
        assert state.data == 0

    def test_unknown_selector_is_noop(
        self, executor: SketchExecutor, state: PenState, surface: RecordingSurface,
    ) -> None:
        _obey_all(executor, state, bytes([0xC5, 0xAA]))  # DATA 5, TOOL 42
        assert surface.calls == []
        assert state.data == 0
        assert state.tool is Tool.LINE

    def test_next_frame_sets_flag(self, executor: SketchExecutor, state: PenState) -> None:
        executor.obey(state, 0x88)
        assert state.frame_ended is True


class TestTotality:
    def test_every_byte_obeyed(self, executor: SketchExecutor) -> None:
        for b in range(256):
            executor.obey(PenState(), b)

    def test_run_frame_over_all_bytes(self, executor: SketchExecutor) -> None:
        state = PenState()
        stream = bytes(b for b in range(256) if b != 0x88)
        result = executor.run_frame(stream, state)
        assert result.end_of_stream is True
        assert result.commands == 255


# ---------------------------------------------------------------------------
# Frame loop
# ---------------------------------------------------------------------------


FRAMED = bytes([0x05, 0x45, 0x88, 0x03, 0x42])  # line, NEXTFRAME, line


class TestRunFrame:
    def test_resumes_after_next_frame(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        first = executor.run_frame(FRAMED, state)
        assert surface.calls == [("line", 0, 0, 5, 5), ("show",)]
        assert first == FrameResult(start_offset=0, resume_offset=3, commands=3, end_of_stream=False)

        surface.clear()
        second = executor.run_frame(FRAMED, state)
        assert surface.calls == [("line", 0, 0, 3, 2), ("show",)]
        assert second == FrameResult(start_offset=3, resume_offset=0, commands=2, end_of_stream=True)

    def test_restarts_after_end_of_stream(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        offsets = [executor.run_frame(FRAMED, state).resume_offset for _ in range(4)]
        assert offsets == [3, 0, 3, 0]

    def test_pen_reset_after_frame(self, executor: SketchExecutor, state: PenState) -> None:
        executor.run_frame(bytes([0x82, 0x05, 0x45]), state)
        assert (state.x, state.y, state.tx, state.ty) == (0, 0, 0, 0)
        assert state.tool is Tool.LINE
        assert state.frame_ended is False

    def test_partial_data_cleared_at_end(self, executor: SketchExecutor, state: PenState) -> None:
        executor.run_frame(bytes([0xC5, 0xC6]), state)
        assert state.data == 0
        assert state.resume_offset == 0

    def test_empty_stream(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        result = executor.run_frame(b"", state)
        assert result.commands == 0
        assert result.end_of_stream is True
        assert surface.calls == [("show",)]

    def test_repeated_calls_redraw(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        stream = bytes([0x05, 0x45])
        executor.run_frame(stream, state)
        executor.run_frame(stream, state)
        assert surface.of_kind("line") == [("line", 0, 0, 5, 5)] * 2


# ---------------------------------------------------------------------------
# File-backed player
# ---------------------------------------------------------------------------


class TestSketchPlayer:
    def test_missing_file(self, surface: RecordingSurface, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Sketch file not found"):
            SketchPlayer(tmp_path / "missing.sk", surface)

    def test_steps_through_frames(self, surface: RecordingSurface, tmp_path: Path) -> None:
        path = tmp_path / "anim.sk"
        path.write_bytes(FRAMED)
        player = SketchPlayer(path, surface)

        assert player.step().resume_offset == 3
        assert player.state.resume_offset == 3
        assert player.step().end_of_stream is True
        assert player.frames_played == 2
        assert surface.of_kind("line") == [("line", 0, 0, 5, 5), ("line", 0, 0, 3, 2)]

    def test_rewind(self, surface: RecordingSurface, tmp_path: Path) -> None:
        path = tmp_path / "anim.sk"
        path.write_bytes(FRAMED)
        player = SketchPlayer(path, surface)
        player.step()
        player.rewind()
        assert player.step().start_offset == 0


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


class TestEndToEnd:
    def test_two_by_two(self, executor: SketchExecutor, surface: RecordingSurface) -> None:
        grid = np.array([[10, 10], [10, 200]], dtype=np.uint8)
        stream = SketchEncoder().encode(grid)
        executor.run_frame(stream, PenState())

        assert surface.calls == [
            ("colour", 0x0A0A0A),
            ("line", 0, 0, 1, 0),
            ("colour", 0x0A0A0A),
            ("line", 1, 0, 0, 1),
            ("colour", 0xC8C8C8),
            ("line", 0, 1, 1, 1),
            ("show",),
        ]

    def test_every_line_ends_on_its_pixel(self, executor: SketchExecutor, surface: RecordingSurface) -> None:
        rng = np.random.default_rng(7)
        grid = rng.integers(0, 4, size=(6, 9), dtype=np.uint8)
        executor.run_frame(SketchEncoder().encode(grid), PenState())

        colour = None
        for call in surface.calls:
            if call[0] == "colour":
                colour = call[1]
            elif call[0] == "line":
                _, _, _, x1, y1 = call
                grey = int(grid[y1, x1])
                assert colour == (grey << 16) | (grey << 8) | grey

    def test_position_only_after_colour(self) -> None:
        surface = RecordingSurface()
        stream = colour_commands(7) + position_commands(200, 130)
        SketchExecutor(surface).run_frame(stream, PenState())
        assert surface.of_kind("line") == [("line", 0, 0, 130, 200)]


# ---------------------------------------------------------------------------
# Early stop
# ---------------------------------------------------------------------------


class TestShouldStop:
    def test_stops_after_current_command(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        stream = bytes([0xC5, 0x87, 0x05, 0x45])  # PAUSE 5, then a line
        result = executor.run_frame(
            stream, state, should_stop=lambda: bool(surface.of_kind("pause")),
        )
        assert result == FrameResult(
            start_offset=0, resume_offset=2, commands=2, end_of_stream=False, stopped=True,
        )
        assert surface.calls == [("pause", 5)]
        assert state.resume_offset == 2

    def test_resumes_from_stop_point(
        self, executor: SketchExecutor, surface: RecordingSurface, state: PenState,
    ) -> None:
        stream = bytes([0xC5, 0x87, 0x05, 0x45])
        executor.run_frame(stream, state, should_stop=lambda: True)
        surface.clear()
        result = executor.run_frame(stream, state)
        assert result.start_offset == 1
        # DATA 5 was read before the stop and still feeds the PAUSE
        assert surface.calls == [("pause", 5), ("line", 0, 0, 5, 5), ("show",)]

    def test_never_stopping_matches_default(self, executor: SketchExecutor, state: PenState) -> None:
        result = executor.run_frame(FRAMED, state, should_stop=lambda: False)
        assert result.stopped is False
        assert result.resume_offset == 3

    def test_player_does_not_count_stopped_frame(
        self, surface: RecordingSurface, tmp_path: Path,
    ) -> None:
        path = tmp_path / "anim.sk"
        path.write_bytes(FRAMED)
        player = SketchPlayer(path, surface)
        assert player.step(lambda: True).stopped is True
        assert player.frames_played == 0
        assert player.step().resume_offset == 3
        assert player.frames_played == 1
