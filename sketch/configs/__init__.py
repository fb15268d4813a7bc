"""Sketch configuration loading and validation."""

from sketch.configs.loader import (
    CanvasConfig,
    ConfigError,
    EncoderConfig,
    LoggingConfig,
    SketchConfig,
    ViewerConfig,
    load_config,
)

__all__ = [
    "CanvasConfig",
    "ConfigError",
    "EncoderConfig",
    "LoggingConfig",
    "SketchConfig",
    "ViewerConfig",
    "load_config",
]
