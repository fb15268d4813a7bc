"""
Sketch player.

Pen state and execution loop, drawing surfaces, and the window/headless
drivers.
"""

from sketch.player.executor import FrameResult, PenState, SketchExecutor, SketchPlayer
from sketch.player.surface import DrawingSurface, RasterSurface, RecordingSurface

__all__ = [
    "DrawingSurface",
    "FrameResult",
    "PenState",
    "RasterSurface",
    "RecordingSurface",
    "SketchExecutor",
    "SketchPlayer",
]
