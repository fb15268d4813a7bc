"""
Sketch command model.

Byte layout, tool selectors and the builders for colour / position command
groups.  Shared by the encoder and the player; depends on nothing else in
the package.
"""

from sketch.commands.model import (
    COLOUR_TAIL,
    Command,
    Opcode,
    SketchRangeError,
    Tool,
    accumulate,
    colour_and_position_commands,
    colour_commands,
    coordinate_chunks,
    disassemble,
    encode_data_chunks,
    make_command,
    opcode,
    operand,
    position_commands,
    unpack_colour,
)

__all__ = [
    "COLOUR_TAIL",
    "Command",
    "Opcode",
    "SketchRangeError",
    "Tool",
    "accumulate",
    "colour_and_position_commands",
    "colour_commands",
    "coordinate_chunks",
    "disassemble",
    "encode_data_chunks",
    "make_command",
    "opcode",
    "operand",
    "position_commands",
    "unpack_colour",
]
