"""Command-line entry points (sketch-convert, sketch-view)."""
