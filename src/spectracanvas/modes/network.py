"""
Network mode: a dark shard backdrop with a shaking node graph on top.
"""

import random
from typing import Tuple

from spectracanvas.core.color import hsla
from spectracanvas.fields.manager import FieldKind
from spectracanvas.fields.shards import STYLE_DARK
from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy

HUE_OFFSET = 220.0


def shake_offset(bass: float, rng: random.Random) -> Tuple[float, float]:
    """Random camera jitter, each axis within ±bass (a 2*bass wide range)."""
    shake = bass * 2
    return ((rng.random() - 0.5) * shake, (rng.random() - 0.5) * shake)


def draw_network(ctx: FrameContext):
    canvas = ctx.canvas
    hue = ctx.color.offset(HUE_OFFSET)

    canvas.fill(hsla(hue, 0.3, 0.04))
    ctx.fields[FieldKind.SHARDS].draw(canvas, ctx.metrics, hue, style=STYLE_DARK)

    with canvas.layer(offset=shake_offset(ctx.metrics.bass, ctx.rng)):
        ctx.fields[FieldKind.NETWORK].draw(canvas, ctx.metrics, hue)


NETWORK = ModeStrategy(
    Mode.NETWORK,
    draw_network,
    fields=(FieldKind.SHARDS, FieldKind.NETWORK),
)
