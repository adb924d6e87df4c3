"""
Nebula field: stationary twinkling stars.
"""

import math

import numpy as np

from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.fields.base import Bounds, ParticleField
from spectracanvas.render.canvas import RadialGradient

TWINKLE_RATE = 10.0  # rad/s


class NebulaField(ParticleField):
    """Stars never move; only twinkle and the high-band boost evolve."""

    DEFAULT_COUNT = 150

    def init(self, bounds: Bounds):
        n = self.count
        self.positions = self.rng.random((n, 2)) * bounds.extent
        self.sizes = self.rng.random(n) * 3.0 + 1.0
        self.base_alpha = self.rng.random(n) * 0.8 + 0.1
        self.phases = self.rng.random(n) * math.pi * 2

        self.twinkle = np.zeros(n)
        self.size_multiplier = 1.0
        self.alphas = self.base_alpha.copy()

    def advance(self, metrics: AudioMetrics, bounds: Bounds, elapsed: float = 0.0):
        self.twinkle = np.sin(elapsed * TWINKLE_RATE + self.phases)
        self.size_multiplier = 1.0 + metrics.high * 3.0
        self.alphas = np.clip(
            self.base_alpha + self.twinkle * 0.2 + metrics.high * 1.5, 0.0, 1.0
        )

    @property
    def render_sizes(self) -> np.ndarray:
        return self.sizes * self.size_multiplier * 3.0

    def draw(self, canvas, metrics: AudioMetrics, hue: float):
        for (x, y), size, alpha in zip(self.positions, self.render_sizes, self.alphas):
            glow = RadialGradient(
                center=(x, y),
                inner_radius=0.0,
                outer_radius=size,
                stops=(
                    (0.0, (1.0, 1.0, 1.0, alpha)),
                    (0.3, (1.0, 1.0, 1.0, alpha * 0.3)),
                    (1.0, (1.0, 1.0, 1.0, 0.0)),
                ),
            )
            canvas.fill_circle(x, y, size, glow)
