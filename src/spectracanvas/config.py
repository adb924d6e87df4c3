"""
Engine configuration.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union


@dataclass
class EngineConfig:
    """Configuration shared by the frame driver, fields and sources."""

    width: int = 1280
    height: int = 720
    fps: int = 60

    # Start-up control values (changed later through EngineState)
    mode: str = "circular"
    hue_shift: int = 0

    # Particle field sizes
    network_nodes: int = 50
    watercolor_blobs: int = 7
    nebula_stars: int = 150
    shard_count: int = 150

    # Watermark overlay
    watermark_text: str = "Idea by Geeksing"
    watermark_margin: int = 20
    watermark_size: int = 14

    # Reproducibility (None = fresh entropy every run)
    seed: Optional[int] = None

    # Analyser settings for PCM-fed sources
    fft_size: int = 2048
    smoothing: float = 0.8
    min_decibels: float = -100.0
    max_decibels: float = -30.0

    def __post_init__(self):
        # Deferred: the modes and fields packages import this module
        from spectracanvas.fields.network import NetworkField
        from spectracanvas.modes.base import Mode

        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        try:
            self.mode = Mode(self.mode).value
        except ValueError:
            choices = ", ".join(m.value for m in Mode)
            raise ValueError(f"mode must be one of {choices}, got {self.mode!r}") from None
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.fft_size < 32 or self.fft_size & (self.fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {self.fft_size}")
        if not 0.0 <= self.smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {self.smoothing}")
        if self.min_decibels >= self.max_decibels:
            raise ValueError("min_decibels must be below max_decibels")
        for name in ("network_nodes", "watercolor_blobs", "nebula_stars", "shard_count"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.network_nodes > NetworkField.MAX_NODES:
            raise ValueError(
                f"network_nodes must be at most {NetworkField.MAX_NODES}, got {self.network_nodes}"
            )
        self.hue_shift = int(self.hue_shift) % 360

    @property
    def bin_count(self) -> int:
        """Number of frequency bins an analyser of this size produces."""
        return self.fft_size // 2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Build a config from a mapping, ignoring keys it does not know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "EngineConfig":
        with open(path) as f:
            return cls.from_dict(json.load(f))
