"""Draw strategies, one per visualization mode."""

from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy
from spectracanvas.modes.classic import BARS, CIRCULAR, WAVE
from spectracanvas.modes.nebula import NEBULA
from spectracanvas.modes.network import NETWORK
from spectracanvas.modes.radial_ink import RADIAL_INK
from spectracanvas.modes.watercolor import WATERCOLOR

REGISTRY = {
    strategy.mode: strategy
    for strategy in (CIRCULAR, BARS, WAVE, NETWORK, WATERCOLOR, NEBULA, RADIAL_INK)
}


def get_strategy(mode) -> ModeStrategy:
    """Look up a strategy by ``Mode`` or its string value."""
    try:
        return REGISTRY[Mode(mode)]
    except ValueError:
        raise ValueError(
            f"Unknown mode {mode!r}; expected one of {[m.value for m in Mode]}"
        ) from None


__all__ = [
    "FrameContext",
    "Mode",
    "ModeStrategy",
    "REGISTRY",
    "get_strategy",
]
