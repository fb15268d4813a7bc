"""Sketch command model: the byte vocabulary shared by encoder and player.

Every command is a single byte::

    bit  7 6 | 5 4 3 2 1 0
         opc | operand

``opc`` selects one of four operations (``DX``, ``DY``, ``TOOL``, ``DATA``).
The 6-bit operand is a signed delta for ``DX``/``DY`` (two's complement,
-32..31) and an unsigned value (0..63) for ``TOOL`` and ``DATA``.  The bit
extraction is identical for both; the caller picks the interpretation.

Large values
------------
Values wider than 6 bits are built by a run of ``DATA`` commands, most
significant chunk first, and consumed by the next ``TOOL`` command:

    - Coordinates: one chunk below 64, two chunks (high 2 bits, low 6
      bits) up to 255.  Followed by ``TOOL TARGETX`` / ``TOOL TARGETY``.
    - Colours: four chunks of 24-bit packed RGB, then the fixed tail
      ``DATA 63``, ``DATA 3``, then ``TOOL COLOUR``.  The tail is part of
      the file format and is emitted byte-for-byte.

Nothing in this module holds state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

OPCODE_SHIFT = 6
OPERAND_MASK = 0x3F
CHUNK_BITS = 6

MIN_DELTA = -32
MAX_DELTA = 31
MAX_COORDINATE = 255
MAX_GREY = 255

COLOUR_CHUNKS = 4
COLOUR_TAIL: tuple[int, ...] = (63, 3)
RGB_MASK = 0xFFFFFF


class SketchRangeError(ValueError):
    """Raised when a value does not fit the range a command can carry."""

    pass


# ---------------------------------------------------------------------------
# Opcodes and tools
# ---------------------------------------------------------------------------


class Opcode(IntEnum):
    """Two-bit operation selector (bits 7-6)."""

    DX = 0
    DY = 1
    TOOL = 2
    DATA = 3


class Tool(IntEnum):
    """``TOOL`` operand selectors.

    ``NONE``, ``LINE`` and ``BLOCK`` are drawing tools that persist on the
    pen.  The remaining members are pseudo-tools that act once and consume
    the ``DATA`` accumulator.
    """

    NONE = 0
    LINE = 1
    BLOCK = 2
    COLOUR = 3
    TARGETX = 4
    TARGETY = 5
    SHOW = 6
    PAUSE = 7
    NEXTFRAME = 8

    @classmethod
    def from_selector(cls, selector: int) -> Tool | None:
        """Return the tool for *selector*, or ``None`` if it is unassigned."""
        try:
            return cls(selector)
        except ValueError:
            return None


DRAWING_TOOLS = frozenset({Tool.NONE, Tool.LINE, Tool.BLOCK})


# ---------------------------------------------------------------------------
# Byte-level encode / decode
# ---------------------------------------------------------------------------


def opcode(byte: int) -> Opcode:
    """Extract the opcode from the two most significant bits."""
    return Opcode((byte & 0xFF) >> OPCODE_SHIFT)


def operand(byte: int, signed: bool = True) -> int:
    """Extract the 6-bit operand.

    Parameters
    ----------
    byte : int
        Command byte (0..255).
    signed : bool
        ``True`` reads two's complement (-32..31), as used by ``DX``/``DY``.
        ``False`` reads 0..63, as used by ``TOOL`` and ``DATA``.
    """
    value = byte & OPERAND_MASK
    if signed and value > MAX_DELTA:
        return value - (OPERAND_MASK + 1)
    return value


def make_command(op: Opcode, value: int) -> int:
    """Build one command byte.

    Raises
    ------
    SketchRangeError
        If *value* is outside -32..31 for ``DX``/``DY`` or 0..63 otherwise.
    """
    if op in (Opcode.DX, Opcode.DY):
        if not MIN_DELTA <= value <= MAX_DELTA:
            raise SketchRangeError(
                f"{op.name} delta must be in [{MIN_DELTA}, {MAX_DELTA}], got {value}"
            )
    elif not 0 <= value <= OPERAND_MASK:
        raise SketchRangeError(
            f"{op.name} operand must be in [0, {OPERAND_MASK}], got {value}"
        )
    return (int(op) << OPCODE_SHIFT) | (value & OPERAND_MASK)


def tool_command(tool: Tool) -> int:
    """Return the ``TOOL`` byte selecting *tool*."""
    return make_command(Opcode.TOOL, int(tool))


# ---------------------------------------------------------------------------
# DATA chunking
# ---------------------------------------------------------------------------


def encode_data_chunks(value: int, chunk_count: int) -> bytes:
    """Split *value* into ``chunk_count`` DATA bytes, most significant first.

    Raises
    ------
    SketchRangeError
        If *value* is negative or needs more than ``6 * chunk_count`` bits.
    """
    if chunk_count < 1:
        raise SketchRangeError(f"chunk_count must be >= 1, got {chunk_count}")
    if value < 0 or value >> (CHUNK_BITS * chunk_count):
        raise SketchRangeError(
            f"Value {value} does not fit in {chunk_count} DATA chunk(s)"
        )
    return bytes(
        make_command(Opcode.DATA, (value >> (CHUNK_BITS * k)) & OPERAND_MASK)
        for k in reversed(range(chunk_count))
    )


def accumulate(chunks: Iterable[int], data: int = 0) -> int:
    """Fold chunks into an accumulator exactly as the player does.

    Accepts raw chunk values or whole DATA bytes (the opcode bits are
    masked off).
    """
    for chunk in chunks:
        data = (data << CHUNK_BITS) | (chunk & OPERAND_MASK)
    return data


def coordinate_chunks(value: int) -> bytes:
    """DATA bytes for one target coordinate (one chunk below 64, else two)."""
    if not 0 <= value <= MAX_COORDINATE:
        raise SketchRangeError(
            f"Coordinate must be in [0, {MAX_COORDINATE}], got {value}"
        )
    # One chunk holds 6 bits, so 64..255 always need two
    return encode_data_chunks(value, 1 if value <= OPERAND_MASK else 2)


def grey_to_rgb(grey: int) -> int:
    """Pack a grey level as 24-bit ``0xRRGGBB``."""
    if not 0 <= grey <= MAX_GREY:
        raise SketchRangeError(f"Grey value must be in [0, {MAX_GREY}], got {grey}")
    return (grey << 16) | (grey << 8) | grey


def unpack_colour(data: int, chunk_count: int = COLOUR_CHUNKS) -> int:
    """Recover packed RGB from a colour accumulator.

    The first four chunks carry the colour; chunks after the fourth are
    the fixed tail and are shifted out.
    """
    extra = chunk_count - COLOUR_CHUNKS
    if extra > 0:
        data >>= CHUNK_BITS * extra
    return data & RGB_MASK


# ---------------------------------------------------------------------------
# Command groups
# ---------------------------------------------------------------------------


def colour_commands(grey: int) -> bytes:
    """Seven bytes that set the pen colour to *grey*."""
    return (
        encode_data_chunks(grey_to_rgb(grey), COLOUR_CHUNKS)
        + bytes(make_command(Opcode.DATA, c) for c in COLOUR_TAIL)
        + bytes([tool_command(Tool.COLOUR)])
    )


def position_commands(row: int, col: int) -> bytes:
    """Set target to ``(col, row)`` and trigger the draw with ``DY 0``."""
    return (
        coordinate_chunks(col)
        + bytes([tool_command(Tool.TARGETX)])
        + coordinate_chunks(row)
        + bytes([tool_command(Tool.TARGETY), make_command(Opcode.DY, 0)])
    )


def colour_and_position_commands(grey: int, row: int, col: int) -> bytes:
    """Colour set followed by position set."""
    return colour_commands(grey) + position_commands(row, col)


# ---------------------------------------------------------------------------
# Disassembly
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Command:
    """One decoded command byte.

    Parameters
    ----------
    offset : int
        Byte offset in the stream.
    byte : int
        Raw command byte.
    """

    offset: int
    byte: int

    @property
    def opcode(self) -> Opcode:
        return opcode(self.byte)

    @property
    def operand(self) -> int:
        """Signed for ``DX``/``DY``, unsigned otherwise."""
        return operand(self.byte, signed=self.opcode in (Opcode.DX, Opcode.DY))

    @property
    def tool(self) -> Tool | None:
        if self.opcode is not Opcode.TOOL:
            return None
        return Tool.from_selector(self.operand)

    def describe(self) -> str:
        """Mnemonic form, e.g. ``DX -3``, ``TOOL LINE``, ``DATA 63``."""
        if self.opcode is Opcode.TOOL:
            tool = self.tool
            return f"TOOL {tool.name}" if tool is not None else f"TOOL ?{self.operand}"
        return f"{self.opcode.name} {self.operand}"


def disassemble(stream: bytes) -> list[Command]:
    """Decode every byte of *stream*.  Never fails."""
    return [Command(offset=i, byte=b) for i, b in enumerate(stream)]
