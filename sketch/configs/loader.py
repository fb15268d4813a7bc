"""Configuration loader for the sketch tools.

Loads and validates ``sketch.yaml`` into typed, frozen dataclasses.
Canvas size, viewer timing, the quit key and encoder options all come
from the config; the scripts hardcode none of them.

Usage::

    from sketch.configs.loader import load_config
    cfg = load_config()                      # default path
    cfg = load_config("/custom/sketch.yaml") # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sketch.commands.model import MAX_COORDINATE
from sketch.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses (one per YAML section)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CanvasConfig:
    """Drawing surface size in pixels and its background colour."""

    width_px: int
    height_px: int
    background_rgb: tuple[int, int, int]


@dataclass(frozen=True)
class ViewerConfig:
    """Interactive window settings.

    ``frame_interval_ms`` is both the delay between player steps and the
    key-poll timeout passed to ``cv2.waitKey``.
    """

    window_title_prefix: str
    scale: int
    frame_interval_ms: int
    quit_key: int


@dataclass(frozen=True)
class EncoderConfig:
    """Converter options."""

    legacy_neighbour_test: bool
    output_suffix: str


@dataclass(frozen=True)
class LoggingConfig:
    """Defaults for ``setup_logging`` (CLI flags override them)."""

    level: str
    file: str | None
    json: bool


@dataclass(frozen=True)
class SketchConfig:
    """Complete configuration loaded from ``sketch.yaml``."""

    canvas: CanvasConfig
    viewer: ViewerConfig
    encoder: EncoderConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: SketchConfig) -> None:
    """Cross-field checks that dataclass construction cannot express."""
    limit = MAX_COORDINATE + 1
    for name, value in (("width_px", cfg.canvas.width_px),
                        ("height_px", cfg.canvas.height_px)):
        if not 0 < value <= limit:
            raise ConfigError(f"canvas.{name} must be in [1, {limit}], got {value}")

    if len(cfg.canvas.background_rgb) != 3 or any(
        not 0 <= c <= 255 for c in cfg.canvas.background_rgb
    ):
        raise ConfigError(
            f"canvas.background_rgb must be 3 values in [0, 255], "
            f"got {cfg.canvas.background_rgb!r}"
        )

    if cfg.viewer.scale < 1:
        raise ConfigError(f"viewer.scale must be >= 1, got {cfg.viewer.scale}")
    if cfg.viewer.frame_interval_ms < 1:
        raise ConfigError(
            f"viewer.frame_interval_ms must be >= 1, got {cfg.viewer.frame_interval_ms}"
        )
    if not 0 <= cfg.viewer.quit_key <= 255:
        raise ConfigError(f"viewer.quit_key must be in [0, 255], got {cfg.viewer.quit_key}")

    if not cfg.encoder.output_suffix.startswith("."):
        raise ConfigError(
            f"encoder.output_suffix must start with '.', got {cfg.encoder.output_suffix!r}"
        )

    if cfg.logging.level.upper() not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {_LOG_LEVELS}, got {cfg.logging.level!r}"
        )


def _flag(section: dict[str, Any], key: str) -> bool:
    """Read an optional YAML boolean; quoted strings like ``"false"`` are rejected."""
    value = section.get(key.rsplit(".", 1)[1], False)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> SketchConfig:
    """Load and validate the sketch configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``sketch.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    SketchConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "sketch.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        cv = data["canvas"]
        canvas = CanvasConfig(
            width_px=int(cv["width_px"]),
            height_px=int(cv["height_px"]),
            background_rgb=tuple(int(c) for c in cv.get("background_rgb", [255, 255, 255])),
        )

        vw = data["viewer"]
        viewer = ViewerConfig(
            window_title_prefix=str(vw.get("window_title_prefix", "Sketch")),
            scale=int(vw.get("scale", 1)),
            frame_interval_ms=int(vw["frame_interval_ms"]),
            quit_key=int(vw.get("quit_key", 27)),
        )

        en = data.get("encoder", {}) or {}
        encoder = EncoderConfig(
            legacy_neighbour_test=_flag(en, "encoder.legacy_neighbour_test"),
            output_suffix=str(en.get("output_suffix", ".sk")),
        )

        lg = data.get("logging", {}) or {}
        log_file = lg.get("file")
        logging_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")),
            file=str(log_file) if log_file else None,
            json=_flag(lg, "logging.json"),
        )

        config = SketchConfig(
            canvas=canvas,
            viewer=viewer,
            encoder=encoder,
            logging=logging_cfg,
        )

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc

    _validate_config(config)
    return config
