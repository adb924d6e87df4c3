"""
Final per-frame pass: the watermark overlay.
"""

from spectracanvas.config import EngineConfig
from spectracanvas.core.color import RGBA, rgba
from spectracanvas.modes.base import ModeStrategy
from spectracanvas.render.canvas import Canvas


def watermark_color(light_background: bool) -> RGBA:
    """Dark text on light-background modes, white text otherwise; both at 40%."""
    if light_background:
        return rgba(0, 0, 0, 0.4)
    return rgba(255, 255, 255, 0.4)


def draw_watermark(canvas: Canvas, text: str, light_background: bool, margin: int = 20, size: int = 14):
    canvas.text(
        text,
        canvas.width - margin,
        canvas.height - margin,
        watermark_color(light_background),
        size=size,
        anchor="rb",
    )


def finalize(canvas: Canvas, strategy: ModeStrategy, cfg: EngineConfig):
    """
    Close out a frame after the mode has drawn.

    Drawing state left over by the mode (blend, alpha, translation) is
    cleared first so the watermark is always composited the same way.
    """
    canvas.reset_state()
    draw_watermark(
        canvas,
        cfg.watermark_text,
        strategy.light_background,
        margin=cfg.watermark_margin,
        size=cfg.watermark_size,
    )
