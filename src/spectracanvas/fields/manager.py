"""
Lazy ownership of the particle fields.

A field is created the first time a mode that needs it becomes active,
kept across mode switches, and regenerated only when the surface size
changes.
"""

import enum
import logging
from collections import Counter
from typing import Dict, Iterable, Optional

import numpy as np

from spectracanvas.config import EngineConfig
from spectracanvas.core.metrics import AudioMetrics
from spectracanvas.fields.base import Bounds, ParticleField
from spectracanvas.fields.nebula import NebulaField
from spectracanvas.fields.network import NetworkField
from spectracanvas.fields.shards import ShardField
from spectracanvas.fields.watercolor import WatercolorField

logger = logging.getLogger(__name__)


class FieldKind(enum.Enum):
    NETWORK = "network"
    WATERCOLOR = "watercolor"
    NEBULA = "nebula"
    SHARDS = "shards"


FIELD_TYPES = {
    FieldKind.NETWORK: NetworkField,
    FieldKind.WATERCOLOR: WatercolorField,
    FieldKind.NEBULA: NebulaField,
    FieldKind.SHARDS: ShardField,
}


class FieldManager:
    """
    Owns at most one instance per field kind.

    Every created field gets its own generator spawned from one seed
    sequence, so fields are reproducible for a given seed and creation
    order and never share random state.
    """

    def __init__(self, config: Optional[EngineConfig] = None, seed: Optional[int] = None):
        self.cfg = config or EngineConfig()
        self._seeds = np.random.SeedSequence(seed if seed is not None else self.cfg.seed)
        self._fields: Dict[FieldKind, ParticleField] = {}
        self.bounds: Optional[Bounds] = None
        self.creations: Counter = Counter()

    def __contains__(self, kind: FieldKind) -> bool:
        return kind in self._fields

    def get(self, kind: FieldKind) -> Optional[ParticleField]:
        return self._fields.get(kind)

    def _count_for(self, kind: FieldKind) -> int:
        return {
            FieldKind.NETWORK: self.cfg.network_nodes,
            FieldKind.WATERCOLOR: self.cfg.watercolor_blobs,
            FieldKind.NEBULA: self.cfg.nebula_stars,
            FieldKind.SHARDS: self.cfg.shard_count,
        }[kind]

    def _create(self, kind: FieldKind, bounds: Bounds) -> ParticleField:
        rng = np.random.default_rng(self._seeds.spawn(1)[0])
        field = FIELD_TYPES[kind](bounds, count=self._count_for(kind), rng=rng)
        self.creations[kind] += 1
        logger.info(
            "Created %s field: %d particles at %dx%d",
            kind.value, len(field), bounds.width, bounds.height,
        )
        return field

    def ensure(self, kinds: Iterable[FieldKind], bounds: Bounds) -> Dict[FieldKind, ParticleField]:
        """Get-or-create each kind for ``bounds``; existing fields are returned untouched."""
        if self.bounds is not None and bounds != self.bounds:
            self.resize(bounds)
        self.bounds = bounds

        result = {}
        for kind in kinds:
            if kind not in self._fields:
                self._fields[kind] = self._create(kind, bounds)
            result[kind] = self._fields[kind]
        return result

    def resize(self, bounds: Bounds):
        """Regenerate every existing field for a new surface size."""
        self.bounds = bounds
        for kind in list(self._fields):
            self._fields[kind] = self._create(kind, bounds)

    def advance(self, kinds: Iterable[FieldKind], metrics: AudioMetrics, bounds: Bounds, elapsed: float):
        for kind in kinds:
            self._fields[kind].advance(metrics, bounds, elapsed)
