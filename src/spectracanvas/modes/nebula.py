"""
Nebula mode: three screen-blended gas clouds under a twinkling starfield.

The center cloud breathes with the bass. Two orbs wander on
Lissajous-style paths with mismatched rates so they never fall into
sync; one follows the mids, the other the highs.
"""

import math
from typing import Tuple

from spectracanvas.core.color import hsla, rgba
from spectracanvas.fields.manager import FieldKind
from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy
from spectracanvas.render.canvas import BlendMode, RadialGradient

Point = Tuple[float, float]


def orb_positions(elapsed: float, width: int, height: int) -> Tuple[Point, Point]:
    cx, cy = width / 2, height / 2
    mid_orb = (
        cx + math.sin(elapsed) * (width * 0.3),
        cy + math.cos(elapsed * 0.7) * (height * 0.3),
    )
    high_orb = (
        cx + math.cos(elapsed * 1.3) * (width * 0.35),
        cy + math.sin(elapsed * 1.1) * (height * 0.25),
    )
    return mid_orb, high_orb


def draw_cloud(canvas, x: float, y: float, radius: float, hue: float,
               saturation: float, lightness: float, alpha: float):
    gradient = RadialGradient(
        center=(x, y),
        inner_radius=0.0,
        outer_radius=radius,
        stops=(
            (0.0, hsla(hue, saturation, lightness, alpha)),
            (1.0, hsla(hue, saturation, lightness, 0.0)),
        ),
    )
    canvas.fill_circle(x, y, radius, gradient)


def draw_nebula(ctx: FrameContext):
    canvas = ctx.canvas
    bass, mid, high = ctx.metrics.bass, ctx.metrics.mid, ctx.metrics.high
    height = ctx.height
    cx, cy = ctx.center

    canvas.fill(rgba(2, 2, 5))

    with canvas.layer(blend=BlendMode.SCREEN):
        draw_cloud(
            canvas, cx, cy, height * (0.4 + bass * 0.8),
            ctx.color.offset(270), 0.8, 0.5 + bass * 0.4, 0.3 + bass * 0.5,
        )
        (x1, y1), (x2, y2) = orb_positions(ctx.elapsed, ctx.width, height)
        draw_cloud(
            canvas, x1, y1, height * (0.3 + mid * 0.5),
            ctx.color.offset(320), 0.7, 0.6, 0.2 + mid * 0.4,
        )
        draw_cloud(
            canvas, x2, y2, height * (0.3 + high * 0.5),
            ctx.color.offset(230), 0.9, 0.6, 0.2 + high * 0.4,
        )

    ctx.fields[FieldKind.NEBULA].draw(canvas, ctx.metrics, ctx.color.base)


NEBULA = ModeStrategy(Mode.NEBULA, draw_nebula, fields=(FieldKind.NEBULA,))
