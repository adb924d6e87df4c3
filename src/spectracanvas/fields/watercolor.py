"""
Watercolor field: a handful of large, slow pigment blobs.

Blobs bounce off a bound extended 100px past each edge and each one
listens to a different band, assigned round-robin (bass, mid, high).
"""

import math

import numpy as np

from spectracanvas.core.color import hsla, wrap_hue
from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.fields.base import Bounds, ParticleField
from spectracanvas.render.canvas import RadialGradient

BOUNCE_MARGIN = 100.0


class WatercolorField(ParticleField):
    DEFAULT_COUNT = 7

    def init(self, bounds: Bounds):
        n = self.count
        self.positions = self.rng.random((n, 2)) * bounds.extent
        self.radii = 180.0 + self.rng.random(n) * 200.0
        self.hues = 200.0 + self.rng.random(n) * 60.0  # blues and purples
        self.velocities = (self.rng.random((n, 2)) - 0.5) * 0.5
        self.phases = self.rng.random(n) * math.pi * 2
        self.bands = np.arange(n) % 3

    def advance(self, metrics: AudioMetrics, bounds: Bounds, elapsed: float = 0.0):
        self.positions += self.velocities * (1.0 + metrics.bass * 5.0)

        low = -BOUNCE_MARGIN
        high = bounds.extent + BOUNCE_MARGIN
        # Only flip components still heading outward so a blob cannot stick
        outward = (
            ((self.positions < low) & (self.velocities < 0))
            | ((self.positions > high) & (self.velocities > 0))
        )
        self.velocities[outward] *= -1

    def reactivity(self, metrics: AudioMetrics) -> np.ndarray:
        """Level of each blob's assigned band."""
        levels = np.array([metrics.bass, metrics.mid, metrics.high])
        return levels[self.bands]

    def draw(self, canvas, metrics: AudioMetrics, hue: float):
        for (x, y), radius, blob_hue, react in zip(
            self.positions, self.radii, self.hues, self.reactivity(metrics)
        ):
            r = radius * (0.5 + react * 2.5)
            h = wrap_hue(blob_hue + hue)
            sat = 0.6 + react * 0.4
            alpha = 0.3 + react * 0.5

            gradient = RadialGradient(
                center=(x, y),
                inner_radius=0.0,
                outer_radius=r,
                stops=(
                    (0.0, hsla(h, sat, 0.6, alpha)),
                    (0.6, hsla(h, sat, 0.7, alpha * 0.5)),
                    (1.0, hsla(h, sat, 0.9, 0.0)),
                ),
            )
            canvas.fill_circle(x, y, r, gradient)
