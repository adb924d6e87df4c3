"""
Watercolor mode: pigment blobs multiplied over a near-white wash.
"""

from spectracanvas.core.color import rgba
from spectracanvas.fields.manager import FieldKind
from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy
from spectracanvas.render.canvas import BlendMode


def wash_alpha(bass: float) -> float:
    """Opacity of the white wash; drops on loud bass so old pigment flashes through."""
    return 0.1 + (1.0 - bass) * 0.2


def draw_watercolor(ctx: FrameContext):
    canvas = ctx.canvas
    canvas.fill(rgba(255, 255, 255, wash_alpha(ctx.metrics.bass)))

    with canvas.layer(blend=BlendMode.MULTIPLY):
        ctx.fields[FieldKind.WATERCOLOR].draw(canvas, ctx.metrics, ctx.color.base)


WATERCOLOR = ModeStrategy(
    Mode.WATERCOLOR,
    draw_watercolor,
    fields=(FieldKind.WATERCOLOR,),
    light_background=True,
)
