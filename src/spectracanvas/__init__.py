"""
spectracanvas: audio-reactive spectrum visualizer.

Turns live frequency/time-domain snapshots into animated frames across
seven visualization modes.
"""

__version__ = "0.1.0"

from spectracanvas.config import EngineConfig
from spectracanvas.engine import EngineState, FrameDriver
from spectracanvas.modes import Mode

__all__ = [
    "EngineConfig",
    "EngineState",
    "FrameDriver",
    "Mode",
    "__version__",
]
