"""
Shard field: slow translucent triangles used as background texture.

Each shard keeps two vertex offsets fixed at creation, so its shape is
stable while it drifts. The field also owns one static grain raster
sized to the surface; both are regenerated whenever the surface is.
"""

import numpy as np

from spectracanvas.core.color import hsla
from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.fields.base import Bounds, ParticleField, wrap_positions
from spectracanvas.render.canvas import LinearGradient, RadialGradient

WRAP_MARGIN = 150.0
HIGHLIGHT_CHANCE = 0.05
GRADIENT_SPAN = 50.0
NOISE_LEVEL = 15

STYLE_DARK = "dark"
STYLE_PAPER = "paper"


def glow_opacity(bass: float) -> float:
    return min(1.0, bass * 0.8)


class ShardField(ParticleField):
    DEFAULT_COUNT = 150

    def init(self, bounds: Bounds):
        n = self.count
        self.noise = self._make_noise(int(bounds.width), int(bounds.height))

        self.sizes = self.rng.random(n) * 300.0 + 100.0
        # (n, 2 vertices, xy) relative to the shard's anchor point
        self.vertex_offsets = (self.rng.random((n, 2, 2)) - 0.5) * self.sizes[:, None, None]
        self.positions = self.rng.random((n, 2)) * bounds.extent
        self.velocities = (self.rng.random((n, 2)) - 0.5) * 0.2

        self.is_light = self.rng.random(n) > 0.5
        light_opacity = self.rng.random(n) * 0.1
        dark_opacity = self.rng.random(n) * 0.05
        self.opacity = np.where(self.is_light, light_opacity, dark_opacity)
        self.is_highlight = self.rng.random(n) > 1.0 - HIGHLIGHT_CHANCE

    def _make_noise(self, width: int, height: int) -> np.ndarray:
        """Low-level grey grain as an (H, W, 4) RGBA raster."""
        raster = np.empty((height, width, 4), dtype=np.uint8)
        grey = np.rint(self.rng.random((height, width)) * NOISE_LEVEL).astype(np.uint8)
        raster[..., 0] = grey
        raster[..., 1] = grey
        raster[..., 2] = grey
        raster[..., 3] = np.rint(self.rng.random((height, width)) * NOISE_LEVEL).astype(np.uint8)
        return raster

    def advance(self, metrics: AudioMetrics, bounds: Bounds, elapsed: float = 0.0):
        self.positions += self.velocities
        wrap_positions(self.positions, bounds, margin=WRAP_MARGIN)

    def triangles(self) -> np.ndarray:
        """Current vertices as an (n, 3, 2) array."""
        anchor = self.positions[:, None, :]
        offsets = np.concatenate([np.zeros((self.count, 1, 2)), self.vertex_offsets], axis=1)
        return anchor + offsets

    def _stops(self, index: int, style: str, hue: float):
        if style == STYLE_DARK:
            if self.is_light[index]:
                start = hsla(hue, 0.4, 0.15, 0.15)
            else:
                start = hsla(hue, 0.4, 0.0, 0.4)
        else:
            shade = 1.0 if self.is_light[index] else 0.0
            start = (shade, shade, shade, float(self.opacity[index]))
        end = start[:3] + (0.0,)
        return ((0.0, start), (1.0, end))

    def draw(self, canvas, metrics: AudioMetrics, hue: float, style: str = STYLE_PAPER):
        """
        Draw every shard with a short diagonal fade from its anchor.

        ``dark`` renders hue-tinted highlight/shadow shards for dark
        backgrounds; ``paper`` renders white/black shards at their own
        opacity for light backgrounds.
        """
        for k, triangle in enumerate(self.triangles()):
            x, y = self.positions[k]
            gradient = LinearGradient(
                start=(x, y),
                end=(x + GRADIENT_SPAN, y + GRADIENT_SPAN),
                stops=self._stops(k, style, hue),
            )
            canvas.fill_polygon(triangle, gradient)

    def draw_grain(self, canvas, alpha: float = 0.5):
        with canvas.layer(alpha=alpha):
            canvas.draw_image(self.noise)

    def draw_highlights(self, canvas, metrics: AudioMetrics) -> int:
        """
        Bass/mid glow bursts on highlight shards.

        Even-index shards follow the bass, odd-index shards the mids.

        Returns:
            Number of glows drawn.
        """
        if glow_opacity(metrics.bass) <= 0.05:
            return 0

        drawn = 0
        for k in np.flatnonzero(self.is_highlight):
            trigger = metrics.bass if k % 2 == 0 else metrics.mid
            active = trigger * 0.6
            if active <= 0.1:
                continue

            x, y = self.positions[k]
            radius = self.sizes[k] * 0.5 * (1.0 + trigger)
            glow = RadialGradient(
                center=(x, y),
                inner_radius=0.0,
                outer_radius=radius,
                stops=(
                    (0.0, (1.0, 1.0, 1.0, min(1.0, active))),
                    (0.5, (220 / 255, 230 / 255, 1.0, min(1.0, active * 0.5))),
                    (1.0, (1.0, 1.0, 1.0, 0.0)),
                ),
            )
            canvas.fill_circle(x, y, radius, glow)
            drawn += 1
        return drawn
