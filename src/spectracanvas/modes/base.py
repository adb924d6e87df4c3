"""
Mode identifiers, per-frame draw context, and the strategy record.
"""

import enum
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from spectracanvas.core.color import ColorState
from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.core.source import SpectrumFrame
from spectracanvas.fields.base import ParticleField
from spectracanvas.fields.manager import FieldKind
from spectracanvas.render.canvas import Canvas


class Mode(str, enum.Enum):
    CIRCULAR = "circular"
    BARS = "bars"
    WAVE = "wave"
    NETWORK = "network"
    WATERCOLOR = "watercolor"
    NEBULA = "nebula"
    RADIAL_INK = "radial_ink"


@dataclass
class FrameContext:
    """Everything one tick's draw sees. Built once per tick, never mutated mid-draw."""

    canvas: Canvas
    frame: SpectrumFrame
    metrics: AudioMetrics
    color: ColorState
    fields: Dict[FieldKind, ParticleField] = field(default_factory=dict)
    elapsed: float = 0.0
    rotation: float = 0.0
    rng: random.Random = field(default_factory=random.Random)

    @property
    def width(self) -> int:
        return self.canvas.width

    @property
    def height(self) -> int:
        return self.canvas.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.canvas.width / 2, self.canvas.height / 2)


@dataclass(frozen=True)
class ModeStrategy:
    """How one mode draws and which fields it needs."""

    mode: Mode
    draw: Callable[[FrameContext], None]
    fields: Tuple[FieldKind, ...] = ()
    light_background: bool = False
