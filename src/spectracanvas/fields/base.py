"""
Base class for persistent particle fields.
"""

import abc
from dataclasses import dataclass
from typing import Optional

import numpy as np

from spectracanvas.core.metrics import AudioMetrics


@dataclass(frozen=True)
class Bounds:
    """Surface dimensions a field was generated for."""

    width: float
    height: float

    @property
    def extent(self) -> np.ndarray:
        return np.array([self.width, self.height], dtype=np.float64)


def wrap(values: np.ndarray, low: float, high: float) -> np.ndarray:
    """Teleport values below ``low`` to ``high`` and values above ``high`` to ``low``."""
    out = np.where(values < low, high, values)
    return np.where(out > high, low, out)


def wrap_positions(positions: np.ndarray, bounds: Bounds, margin: float = 0.0):
    """Wrap (N, 2) positions in place to [-margin, dim + margin] per axis."""
    positions[:, 0] = wrap(positions[:, 0], -margin, bounds.width + margin)
    positions[:, 1] = wrap(positions[:, 1], -margin, bounds.height + margin)


class ParticleField(abc.ABC):
    """
    A fixed-size simulation owned by the field manager.

    Fields are generated once for a surface size by ``init`` and then
    stepped every tick by ``advance``. All randomness comes from the
    generator handed in at construction, so a field is reproducible from
    its seed and independent of every other field.
    """

    DEFAULT_COUNT = 0

    def __init__(
        self,
        bounds: Bounds,
        count: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.count = self.DEFAULT_COUNT if count is None else int(count)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.bounds = bounds
        self.init(bounds)

    def __len__(self) -> int:
        return self.count

    @abc.abstractmethod
    def init(self, bounds: Bounds):
        """Generate initial particle state within ``bounds``."""

    @abc.abstractmethod
    def advance(self, metrics: AudioMetrics, bounds: Bounds, elapsed: float = 0.0):
        """Step the simulation by one tick."""

    @abc.abstractmethod
    def draw(self, canvas, metrics: AudioMetrics, hue: float):
        """Draw the field with ``hue`` as the mode's seed hue."""
