"""
Network field: drifting nodes joined by bass-reactive connection lines.
"""

import numpy as np

from spectracanvas.core.color import hsla
from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.fields.base import Bounds, ParticleField, wrap_positions


def connection_distance(bass: float) -> float:
    """Pairs closer than this are connected; louder bass reaches further."""
    return 120.0 + bass * 350.0


class NetworkField(ParticleField):
    """
    Nodes wrap at the surface edges. Connections are recomputed every
    tick over all i < j pairs, so cost grows with count squared and the
    count is capped.
    """

    DEFAULT_COUNT = 50
    MAX_NODES = 200

    def init(self, bounds: Bounds):
        if self.count > self.MAX_NODES:
            raise ValueError(
                f"Network field supports at most {self.MAX_NODES} nodes, got {self.count}"
            )
        n = self.count
        self.positions = self.rng.random((n, 2)) * bounds.extent
        self.velocities = (self.rng.random((n, 2)) - 0.5) * 0.5
        self.radii = self.rng.random(n) * 2.0 + 1.0

    def advance(self, metrics: AudioMetrics, bounds: Bounds, elapsed: float = 0.0):
        self.positions += self.velocities * (1.0 + metrics.bass * 0.5)
        wrap_positions(self.positions, bounds)

    def connections(self, bass: float):
        """
        Connected pairs for the current positions.

        Returns:
            Tuple of (i, j, opacity) arrays, one entry per connected pair.
        """
        if self.count < 2:
            empty = np.array([], dtype=np.intp)
            return empty, empty, np.array([], dtype=np.float64)

        i, j = np.triu_indices(self.count, k=1)
        delta = self.positions[i] - self.positions[j]
        dist = np.hypot(delta[:, 0], delta[:, 1])

        threshold = connection_distance(bass)
        close = dist < threshold
        opacity = (1.0 - dist[close] / threshold) * (0.3 + bass * 0.8)
        return i[close], j[close], opacity

    def node_radii(self, metrics: AudioMetrics) -> np.ndarray:
        return self.radii + metrics.bass * 6.0 + metrics.mid * 3.0

    def draw(self, canvas, metrics: AudioMetrics, hue: float):
        """Each node, then its connections to higher-numbered nodes."""
        bass = metrics.bass
        line_width = (0.5 + bass * 1.5) * 0.5
        node_color = hsla(hue, 0.9, 0.75)
        line_color = hsla(hue, 0.8, 0.75)

        i, j, opacity = self.connections(bass)
        # i comes out of triu_indices sorted, so each node's pairs are contiguous
        bounds = np.searchsorted(i, np.arange(self.count + 1))

        for node, ((x, y), r) in enumerate(zip(self.positions, self.node_radii(metrics))):
            canvas.fill_circle(x, y, r, node_color)

            lo, hi = bounds[node], bounds[node + 1]
            if lo == hi:
                continue
            ends = np.stack([self.positions[i[lo:hi]], self.positions[j[lo:hi]]], axis=1)
            canvas.segments(ends, line_color, line_width, opacity[lo:hi])
