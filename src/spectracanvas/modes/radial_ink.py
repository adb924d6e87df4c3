"""
Radial ink mode: spectrum bars bleeding in and out of a pulsing ink pool,
printed onto crumpled paper.

Layer order: paper tone, drifting paper shards, film grain, overlay
glows on highlight shards, then the ink itself under multiply.
"""

import math
from typing import List, Tuple

import numpy as np

from spectracanvas.core.color import hsla, rgba
from spectracanvas.fields.manager import FieldKind
from spectracanvas.fields.shards import STYLE_PAPER
from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy
from spectracanvas.render.canvas import BlendMode, LinearGradient, RadialGradient

SLOTS = 120
SPECTRUM_SHARE = 0.82
CENTER_GAP = 10.0
PAPER_TONE = rgba(0xE8, 0xEC, 0xF0)
GRAIN_ALPHA = 0.5

Point = Tuple[float, float]


def ink_radius_base(width: int, height: int) -> float:
    return min(width, height) / 4.5


def ink_pool_size(radius_base: float, bass: float) -> float:
    return radius_base * 0.5 * (0.8 + bass * 0.6)


def ink_start_radius(radius_base: float, bass: float) -> float:
    """Ring where each bar is rooted; pushed outward on bass."""
    return radius_base * 0.9 + bass * radius_base * 0.2


def ink_bar_lengths(frequency, width: int, height: int, bass: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Outward and inward bar lengths for every slot.

    Slots sample the lower 82% of the spectrum. There is no minimum
    length, so silent bins leave gaps. Inward bars mirror the outward
    ones but stop short of the pool plus a fixed gap.

    Returns:
        ``(outward, inward)`` arrays of length ``SLOTS``.
    """
    data = np.asarray(frequency, dtype=np.float64).ravel()
    if data.size == 0:
        return np.zeros(SLOTS), np.zeros(SLOTS)

    step = math.floor(data.size * SPECTRUM_SHARE) / SLOTS
    index = np.minimum(np.floor(np.arange(SLOTS) * step).astype(int), data.size - 1)
    values = data[index] / 255.0
    outward = values * values * (height / 5) * (1.0 + bass)

    radius_base = ink_radius_base(width, height)
    room = max(0.0, ink_start_radius(radius_base, bass) - (ink_pool_size(radius_base, bass) + CENTER_GAP))
    inward = np.minimum(outward, room)
    return outward, inward


def _bar_quad(center: Point, theta: float, half_width: float, r0: float, r1: float) -> List[Point]:
    cx, cy = center
    dx, dy = -math.sin(theta), math.cos(theta)
    px, py = math.cos(theta), math.sin(theta)
    return [
        (cx + dx * r0 - px * half_width, cy + dy * r0 - py * half_width),
        (cx + dx * r0 + px * half_width, cy + dy * r0 + py * half_width),
        (cx + dx * r1 + px * half_width, cy + dy * r1 + py * half_width),
        (cx + dx * r1 - px * half_width, cy + dy * r1 - py * half_width),
    ]


def _bar_gradient(center: Point, theta: float, r0: float, r1: float, hue: float) -> LinearGradient:
    cx, cy = center
    dx, dy = -math.sin(theta), math.cos(theta)
    return LinearGradient(
        start=(cx + dx * r0, cy + dy * r0),
        end=(cx + dx * r1, cy + dy * r1),
        stops=(
            (0.0, hsla(hue, 0.8, 0.4, 0.6)),
            (1.0, hsla(hue, 0.8, 0.9, 0.0)),
        ),
    )


def draw_ink(ctx: FrameContext):
    canvas = ctx.canvas
    bass = ctx.metrics.bass
    center = ctx.center

    radius_base = ink_radius_base(ctx.width, ctx.height)
    pool = ink_pool_size(radius_base, bass)
    start = ink_start_radius(radius_base, bass)

    pool_hue = ctx.color.offset(200 - bass * 30)
    pool_paint = RadialGradient(
        center=center,
        inner_radius=0.0,
        outer_radius=pool,
        stops=(
            (0.0, hsla(pool_hue, 0.7, 0.5, 0.5 + bass * 0.3)),
            (1.0, hsla(pool_hue, 0.7, 0.9, 0.0)),
        ),
    )
    canvas.fill_circle(center[0], center[1], pool, pool_paint)

    half_width = 2 * math.pi * radius_base / SLOTS * 0.5 / 2
    outward, inward = ink_bar_lengths(ctx.frame.frequency, ctx.width, ctx.height, bass)
    for i in range(SLOTS):
        theta = ctx.rotation + i / SLOTS * math.pi * 2
        hue = ctx.color.offset(180 + i / SLOTS * 60)
        if outward[i] > 0:
            end = start + outward[i]
            canvas.fill_polygon(
                _bar_quad(center, theta, half_width, start, end),
                _bar_gradient(center, theta, start, end, hue),
            )
        if inward[i] > 0:
            end = start - inward[i]
            canvas.fill_polygon(
                _bar_quad(center, theta, half_width, end, start),
                _bar_gradient(center, theta, start, end, hue),
            )


def draw_radial_ink(ctx: FrameContext):
    canvas = ctx.canvas
    shards = ctx.fields[FieldKind.SHARDS]

    canvas.fill(PAPER_TONE)
    shards.draw(canvas, ctx.metrics, ctx.color.base, style=STYLE_PAPER)
    shards.draw_grain(canvas, alpha=GRAIN_ALPHA)

    with canvas.layer(blend=BlendMode.OVERLAY):
        shards.draw_highlights(canvas, ctx.metrics)

    with canvas.layer(blend=BlendMode.MULTIPLY):
        draw_ink(ctx)


RADIAL_INK = ModeStrategy(
    Mode.RADIAL_INK,
    draw_radial_ink,
    fields=(FieldKind.SHARDS,),
    light_background=True,
)
