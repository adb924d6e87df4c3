"""Per-frame inputs: spectrum sources, metrics and color."""

from spectracanvas.core.color import ColorState, base_hue, hsla, wrap_hue
from spectracanvas.core.metrics import AudioMetrics, extract_metrics
from spectracanvas.core.source import (
    AnalyserSource,
    SignalSpectrumSource,
    SpectrumFrame,
    SpectrumSource,
    StaticSpectrumSource,
)

__all__ = [
    "AnalyserSource",
    "AudioMetrics",
    "ColorState",
    "SignalSpectrumSource",
    "SpectrumFrame",
    "SpectrumSource",
    "StaticSpectrumSource",
    "base_hue",
    "extract_metrics",
    "hsla",
    "wrap_hue",
]
