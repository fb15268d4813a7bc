"""Grey-scale grid to sketch command stream."""

from sketch.encoder.converter import (
    EncoderOptions,
    SketchEncoder,
    generate_commands,
    neighbour_flags,
    self_check,
)

__all__ = [
    "EncoderOptions",
    "SketchEncoder",
    "generate_commands",
    "neighbour_flags",
    "self_check",
]
