"""
Sketch Package.

Compact binary drawing-command format for 2D line/block sketches, with a
grey-scale image encoder and a resumable, frame-based player.

Subpackages:
    commands: Command byte layout, DATA chunking, colour/position builders
    encoder: Grey-scale grid to sketch command stream
    player: Pen state, execution loop, drawing surfaces, viewer window
    imaging: Loading grey-scale images into sample grids
    configs: Canvas/viewer/encoder configuration loading and validation
    utils: Atomic file writes, YAML loading, unified logging
"""

__version__ = "1.0.0"

__all__ = ["commands", "encoder", "player", "imaging", "configs", "utils"]
