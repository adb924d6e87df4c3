"""Persistent particle simulations."""

from spectracanvas.fields.base import Bounds, ParticleField
from spectracanvas.fields.manager import FIELD_TYPES, FieldKind, FieldManager
from spectracanvas.fields.nebula import NebulaField
from spectracanvas.fields.network import NetworkField
from spectracanvas.fields.shards import ShardField
from spectracanvas.fields.watercolor import WatercolorField

__all__ = [
    "Bounds",
    "FIELD_TYPES",
    "FieldKind",
    "FieldManager",
    "NebulaField",
    "NetworkField",
    "ParticleField",
    "ShardField",
    "WatercolorField",
]
