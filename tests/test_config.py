"""Tests for EngineConfig."""

import json

import pytest

from spectracanvas.config import EngineConfig
from spectracanvas.modes import Mode


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()

        assert (config.width, config.height, config.fps) == (1280, 720, 60)
        assert config.watermark_text == "Idea by Geeksing"
        assert config.fft_size == 2048
        assert config.bin_count == 1024
        assert config.smoothing == 0.8

    def test_hue_shift_normalized(self):
        assert EngineConfig(hue_shift=400).hue_shift == 40
        assert EngineConfig(hue_shift=-20).hue_shift == 340

    @pytest.mark.parametrize(
        "overrides",
        [
            {"fps": 0},
            {"fft_size": 1000},
            {"smoothing": 1.0},
            {"min_decibels": -10.0, "max_decibels": -30.0},
            {"shard_count": -1},
            {"mode": "spiral"},
            {"width": 0},
            {"height": -5},
            {"width": 640.5},
            {"network_nodes": 201},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            EngineConfig(**overrides)

    def test_mode_accepts_enum_member(self):
        assert EngineConfig(mode=Mode.NEBULA).mode == "nebula"

    def test_node_cap_is_inclusive(self):
        assert EngineConfig(network_nodes=200).network_nodes == 200

    def test_from_dict_ignores_unknown_keys(self):
        config = EngineConfig.from_dict({"width": 640, "theme": "dark"})

        assert config.width == 640

    def test_from_json(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"mode": "nebula", "nebula_stars": 40, "seed": 3}))

        config = EngineConfig.from_json(path)

        assert config.mode == "nebula"
        assert config.nebula_stars == 40
        assert config.seed == 3
