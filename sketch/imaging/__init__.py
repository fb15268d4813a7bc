"""Image loading boundary for the encoder."""

from sketch.imaging.greyscale import SketchImageError, load_grey_grid

__all__ = ["SketchImageError", "load_grey_grid"]
