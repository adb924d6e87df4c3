"""
Classic spectrum modes: circular, bars and waveform.

All three fade the previous frame with translucent black instead of
clearing it, which leaves short motion trails.
"""

import math
from typing import List, Tuple

import numpy as np

from spectracanvas.core.color import hsla
from spectracanvas.modes.base import FrameContext, Mode, ModeStrategy
from spectracanvas.render.canvas import RadialGradient

BAR_COUNT = 120
TRAIL_FADE = 0.2
WAVE_TRAIL_FADE = 0.03


def _fade(canvas, alpha: float):
    canvas.fill((0.0, 0.0, 0.0, alpha))


# --- Circular ---

def circular_disc_scale(bass: float) -> float:
    """
    Pulse scale of the central disc.

    Full-scale input pushes bass to about 1.445, yet a full-scale frame must
    show the disc at exactly 1.8, so bass is capped at 1 here. The cap is
    local to the disc; every other bass-driven formula uses the raw value.
    """
    return 1.0 + min(bass, 1.0) * 0.8


def circular_bar_lengths(frequency, width: int, height: int) -> np.ndarray:
    """Length of each of the 120 radial bars, sampled at stride N // 120."""
    data = np.asarray(frequency, dtype=np.float64).ravel()
    if data.size == 0:
        return np.zeros(BAR_COUNT)
    step = data.size // BAR_COUNT
    values = data[np.arange(BAR_COUNT) * step] / 255.0
    max_bar_height = min(width, height) / 2
    return values * values * max_bar_height * 1.5


def draw_circular(ctx: FrameContext):
    canvas = ctx.canvas
    cx, cy = ctx.center
    _fade(canvas, TRAIL_FADE)

    primary = hsla(ctx.color.base, 1.0, 0.5)
    radius = min(ctx.width, ctx.height) / 4
    scale = circular_disc_scale(ctx.metrics.bass)
    ring = radius * scale

    disc = RadialGradient(
        center=(cx, cy),
        inner_radius=radius * 0.1,
        outer_radius=ring,
        stops=(
            (0.0, (1.0, 1.0, 1.0, 1.0)),
            (0.5, primary),
            (1.0, (0.0, 0.0, 0.0, 0.0)),
        ),
    )
    canvas.fill_circle(cx, cy, ring * 0.8, disc)

    for i, length in enumerate(circular_bar_lengths(ctx.frame.frequency, ctx.width, ctx.height)):
        if length <= 0:
            continue
        angle = i / BAR_COUNT * math.pi * 2
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        start = (cx + cos_a * ring, cy + sin_a * ring)
        end = (cx + cos_a * (ring + length), cy + sin_a * (ring + length))
        color = hsla(ctx.color.offset(i / BAR_COUNT * 60), 0.8, 0.6)
        canvas.line(start, end, color, 3)


# --- Bars ---

def bar_heights(frequency, height: int) -> np.ndarray:
    values = np.asarray(frequency, dtype=np.float64).ravel() / 255.0
    return values * values * height * 0.4


def draw_bars(ctx: FrameContext):
    canvas = ctx.canvas
    _fade(canvas, TRAIL_FADE)

    heights = bar_heights(ctx.frame.frequency, ctx.height)
    n = len(heights)
    if n == 0:
        return

    center_y = ctx.height / 2
    bar_width = ctx.width / n * 1.25
    x = 0.0
    for i, bar_height in enumerate(heights):
        if bar_height > 0:
            color = hsla(ctx.color.offset(i / n * 60), 0.8, 0.5)
            canvas.fill_rect(x, center_y - bar_height, bar_width, bar_height, color)
            canvas.fill_rect(x, center_y, bar_width, bar_height, color)
        x += bar_width + 1
        if x > ctx.width:
            break


# --- Wave ---

def wave_points(time_domain, width: int, height: int) -> List[Tuple[float, float]]:
    """Polyline through the time-domain samples, closed off at mid-height on the right."""
    samples = np.asarray(time_domain, dtype=np.float64).ravel()
    n = samples.size
    if n == 0:
        return []
    xs = np.arange(n) * (width / n)
    ys = height / 2 + (samples / 128.0 - 1.0) * height / 2
    points = list(zip(xs.tolist(), ys.tolist()))
    points.append((float(width), height / 2))
    return points


def draw_wave(ctx: FrameContext):
    canvas = ctx.canvas
    _fade(canvas, WAVE_TRAIL_FADE)
    primary = hsla(ctx.color.base, 1.0, 0.5)
    canvas.polyline(wave_points(ctx.frame.time_domain, ctx.width, ctx.height), primary, 1.5)


CIRCULAR = ModeStrategy(Mode.CIRCULAR, draw_circular)
BARS = ModeStrategy(Mode.BARS, draw_bars)
WAVE = ModeStrategy(Mode.WAVE, draw_wave)
