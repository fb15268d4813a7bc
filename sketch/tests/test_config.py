"""Tests for the YAML configuration loader."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from sketch.configs.loader import ConfigError, SketchConfig, load_config


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "sketch.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


@pytest.fixture()
def base_data() -> dict:
    return {
        "canvas": {"width_px": 200, "height_px": 200, "background_rgb": [255, 255, 255]},
        "viewer": {
            "window_title_prefix": "Sketch",
            "scale": 2,
            "frame_interval_ms": 20,
            "quit_key": 27,
        },
        "encoder": {"legacy_neighbour_test": False, "output_suffix": ".sk"},
        "logging": {"level": "INFO", "file": None, "json": False},
    }


class TestDefaultConfig:
    def test_loads(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, SketchConfig)
        assert (cfg.canvas.width_px, cfg.canvas.height_px) == (200, 200)
        assert cfg.canvas.background_rgb == (255, 255, 255)
        assert cfg.viewer.quit_key == 27
        assert cfg.encoder.legacy_neighbour_test is False
        assert cfg.encoder.output_suffix == ".sk"
        assert cfg.logging.file is None

    def test_frozen(self) -> None:
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.canvas.width_px = 10  # type: ignore[misc]


class TestExplicitPath:
    def test_round_trip(self, tmp_path: Path, base_data: dict) -> None:
        base_data["encoder"]["legacy_neighbour_test"] = True
        cfg = load_config(_write_config(tmp_path, base_data))
        assert cfg.encoder.legacy_neighbour_test is True
        assert cfg.viewer.scale == 2

    def test_optional_sections_default(self, tmp_path: Path, base_data: dict) -> None:
        del base_data["encoder"]
        del base_data["logging"]
        cfg = load_config(_write_config(tmp_path, base_data))
        assert cfg.encoder.output_suffix == ".sk"
        assert cfg.logging.level == "INFO"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="Empty"):
            load_config(path)


class TestValidation:
    def test_missing_key(self, tmp_path: Path, base_data: dict) -> None:
        del base_data["canvas"]["width_px"]
        with pytest.raises(ConfigError, match="Missing required configuration key"):
            load_config(_write_config(tmp_path, base_data))

    def test_non_numeric_value(self, tmp_path: Path, base_data: dict) -> None:
        base_data["viewer"]["scale"] = "big"
        with pytest.raises(ConfigError, match="Invalid configuration value"):
            load_config(_write_config(tmp_path, base_data))

    @pytest.mark.parametrize("width", [0, 257])
    def test_canvas_width_range(self, tmp_path: Path, base_data: dict, width: int) -> None:
        base_data["canvas"]["width_px"] = width
        with pytest.raises(ConfigError, match="width_px"):
            load_config(_write_config(tmp_path, base_data))

    def test_background_values(self, tmp_path: Path, base_data: dict) -> None:
        base_data["canvas"]["background_rgb"] = [0, 0, 300]
        with pytest.raises(ConfigError, match="background_rgb"):
            load_config(_write_config(tmp_path, base_data))

    def test_output_suffix(self, tmp_path: Path, base_data: dict) -> None:
        base_data["encoder"]["output_suffix"] = "sk"
        with pytest.raises(ConfigError, match="output_suffix"):
            load_config(_write_config(tmp_path, base_data))

    def test_log_level(self, tmp_path: Path, base_data: dict) -> None:
        base_data["logging"]["level"] = "LOUD"
        with pytest.raises(ConfigError, match="logging.level"):
            load_config(_write_config(tmp_path, base_data))

    def test_frame_interval(self, tmp_path: Path, base_data: dict) -> None:
        base_data["viewer"]["frame_interval_ms"] = 0
        with pytest.raises(ConfigError, match="frame_interval_ms"):
            load_config(_write_config(tmp_path, base_data))


class TestBooleanFlags:
    @pytest.mark.parametrize("value", ["false", "yes", 0, 1])
    def test_legacy_flag_must_be_bool(self, tmp_path: Path, base_data: dict, value) -> None:
        base_data["encoder"]["legacy_neighbour_test"] = value
        with pytest.raises(ConfigError, match="encoder.legacy_neighbour_test"):
            load_config(_write_config(tmp_path, base_data))

    def test_json_flag_must_be_bool(self, tmp_path: Path, base_data: dict) -> None:
        base_data["logging"]["json"] = "false"
        with pytest.raises(ConfigError, match="logging.json"):
            load_config(_write_config(tmp_path, base_data))

    def test_real_booleans_accepted(self, tmp_path: Path, base_data: dict) -> None:
        base_data["logging"]["json"] = True
        cfg = load_config(_write_config(tmp_path, base_data))
        assert cfg.logging.json is True
