"""
Raster drawing surface with canvas-style compositing.

The surface is an opaque float32 RGB buffer in [0, 1]. Every primitive
computes a coverage mask over its clipped bounding box (PIL for polygons,
lines and text; numpy for discs), shades the covered pixels with a solid
color or gradient, and blends the result into the buffer:

    out = dst + (blend(dst, src) - dst) * coverage * src_alpha * layer_alpha

Blend functions follow the separable W3C compositing formulas.
"""

import contextlib
import enum
import functools
import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

Point = Tuple[float, float]
RGBA = Tuple[float, float, float, float]
Stop = Tuple[float, RGBA]

GRADIENT_STEPS = 1024
# Masks covering less than this share of their trimmed box are blended
# pixel by pixel instead of as a rectangle
SPARSE_COVERAGE = 0.9


class SurfaceUnavailableError(RuntimeError):
    """The drawing surface cannot be created or has gone away."""


class BlendMode(enum.Enum):
    NORMAL = "source-over"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"


def _blend_normal(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    return src


def _blend_multiply(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    return dst * src


def _blend_screen(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    return 1.0 - (1.0 - dst) * (1.0 - src)


def _blend_overlay(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    return np.where(
        dst <= 0.5,
        2.0 * dst * src,
        1.0 - 2.0 * (1.0 - dst) * (1.0 - src),
    )


BLEND_FUNCS = {
    BlendMode.NORMAL: _blend_normal,
    BlendMode.MULTIPLY: _blend_multiply,
    BlendMode.SCREEN: _blend_screen,
    BlendMode.OVERLAY: _blend_overlay,
}


def _interpolate_stops(stops: Sequence[Stop], t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate color stops at parameter ``t`` (clamped to [0, 1]).

    Stops are sampled once into a ``GRADIENT_STEPS`` table and pixels
    look their color up by nearest entry; output is 8-bit, so the
    quantization is below what a frame can show.
    """
    offsets = [offset for offset, _ in stops]
    colors = np.array([color for _, color in stops], dtype=np.float32)
    samples = np.linspace(0.0, 1.0, GRADIENT_STEPS)
    table = np.stack(
        [np.interp(samples, offsets, colors[:, c]) for c in range(4)], axis=-1
    ).astype(np.float32)

    index = np.clip(t * (GRADIENT_STEPS - 1) + 0.5, 0, GRADIENT_STEPS - 1).astype(np.intp)
    shaded = table[index]
    return shaded[..., :3], shaded[..., 3]


@dataclass(frozen=True)
class LinearGradient:
    """Gradient along the segment ``start`` -> ``end``; constant beyond the ends."""

    start: Point
    end: Point
    stops: Tuple[Stop, ...]

    def shade(self, xs: np.ndarray, ys: np.ndarray, shape: Tuple[int, int]):
        x0, y0 = self.start
        dx = self.end[0] - x0
        dy = self.end[1] - y0
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = np.zeros(shape, dtype=np.float32)
        else:
            t = np.broadcast_to(((xs - x0) * dx + (ys - y0) * dy) / length_sq, shape)
        return _interpolate_stops(self.stops, t)


@dataclass(frozen=True)
class RadialGradient:
    """Concentric gradient from ``inner_radius`` to ``outer_radius`` around ``center``."""

    center: Point
    inner_radius: float
    outer_radius: float
    stops: Tuple[Stop, ...]

    def shade(self, xs: np.ndarray, ys: np.ndarray, shape: Tuple[int, int]):
        cx, cy = self.center
        dist = np.broadcast_to(np.hypot(xs - cx, ys - cy), shape)
        span = self.outer_radius - self.inner_radius
        if span <= 0:
            t = (dist >= self.outer_radius).astype(np.float32)
        else:
            t = (dist - self.inner_radius) / span
        return _interpolate_stops(self.stops, t)


Paint = Union[RGBA, LinearGradient, RadialGradient]


def _shade(paint: Paint, xs: np.ndarray, ys: np.ndarray, shape: Tuple[int, int]):
    if isinstance(paint, (LinearGradient, RadialGradient)):
        return paint.shade(xs, ys, shape)
    rgb = np.broadcast_to(np.asarray(paint[:3], dtype=np.float32), shape + (3,))
    alpha = np.full(shape, paint[3], dtype=np.float32)
    return rgb, alpha


def _trim(box, coverage: np.ndarray):
    """Shrink ``box`` and ``coverage`` to the covered rows and columns."""
    covered = coverage > 0
    rows = np.flatnonzero(covered.any(axis=1))
    if rows.size == 0:
        return None, None
    cols = np.flatnonzero(covered.any(axis=0))
    r0, r1 = int(rows[0]), int(rows[-1]) + 1
    c0, c1 = int(cols[0]), int(cols[-1]) + 1
    ix0, iy0 = box[0], box[1]
    return (ix0 + c0, iy0 + r0, ix0 + c1, iy0 + r1), coverage[r0:r1, c0:c1]


@functools.lru_cache(maxsize=8)
def _load_font(size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size)


class Canvas:
    """
    Opaque RGB drawing surface.

    Drawing state (blend mode, layer alpha, translation) is changed only
    through ``layer()``, which restores it on exit like a canvas
    save()/restore() pair.
    """

    def __init__(self, width: int, height: int, background: Tuple[float, float, float] = (0.0, 0.0, 0.0)):
        if not isinstance(width, (int, np.integer)) or not isinstance(height, (int, np.integer)):
            raise SurfaceUnavailableError(f"Surface size must be integral, got {width!r}x{height!r}")
        if width <= 0 or height <= 0:
            raise SurfaceUnavailableError(f"Surface size must be positive, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        self.pixels = np.empty((self.height, self.width, 3), dtype=np.float32)
        self.pixels[:] = background

        self.blend = BlendMode.NORMAL
        self.alpha = 1.0
        self.origin: Point = (0.0, 0.0)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @contextlib.contextmanager
    def layer(
        self,
        blend: Optional[BlendMode] = None,
        alpha: Optional[float] = None,
        offset: Optional[Point] = None,
    ) -> Iterator["Canvas"]:
        """Temporarily change blend mode, multiply layer alpha, or translate."""
        saved = (self.blend, self.alpha, self.origin)
        if blend is not None:
            self.blend = blend
        if alpha is not None:
            self.alpha = self.alpha * alpha
        if offset is not None:
            self.origin = (self.origin[0] + offset[0], self.origin[1] + offset[1])
        try:
            yield self
        finally:
            self.blend, self.alpha, self.origin = saved

    def reset_state(self):
        """Back to normal blending, full alpha and no translation."""
        self.blend = BlendMode.NORMAL
        self.alpha = 1.0
        self.origin = (0.0, 0.0)

    # --- internals ---

    def _to_device(self, points: Sequence[Point]) -> list:
        ox, oy = self.origin
        return [(float(x) + ox, float(y) + oy) for x, y in points]

    def _region(self, x0: float, y0: float, x1: float, y1: float):
        """Clip a device-space box to the surface; None if nothing remains."""
        if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
            return None
        ix0 = max(0, int(math.floor(x0)))
        iy0 = max(0, int(math.floor(y0)))
        ix1 = min(self.width, int(math.ceil(x1)))
        iy1 = min(self.height, int(math.ceil(y1)))
        if ix0 >= ix1 or iy0 >= iy1:
            return None
        return ix0, iy0, ix1, iy1

    def _grid(self, box):
        """Pixel-center coordinates for a box, in the current (local) space."""
        ix0, iy0, ix1, iy1 = box
        ox, oy = self.origin
        xs = (np.arange(ix0, ix1, dtype=np.float32) + 0.5 - ox)[np.newaxis, :]
        ys = (np.arange(iy0, iy1, dtype=np.float32) + 0.5 - oy)[:, np.newaxis]
        return xs, ys

    def _apply(self, box, rgb: np.ndarray, alpha: np.ndarray):
        weight = alpha * self.alpha
        if not np.any(weight > 0):
            return
        ix0, iy0, ix1, iy1 = box
        dst = self.pixels[iy0:iy1, ix0:ix1]
        blended = BLEND_FUNCS[self.blend](dst, rgb)
        dst += (blended - dst) * weight[..., np.newaxis]
        np.clip(dst, 0.0, 1.0, out=dst)

    def _apply_pixels(self, rows: np.ndarray, cols: np.ndarray, rgb: np.ndarray, alpha: np.ndarray):
        """Blend a scattered set of device pixels."""
        weight = alpha * self.alpha
        if not np.any(weight > 0):
            return
        dst = self.pixels[rows, cols]
        blended = BLEND_FUNCS[self.blend](dst, rgb)
        dst += (blended - dst) * weight[:, np.newaxis]
        np.clip(dst, 0.0, 1.0, out=dst)
        self.pixels[rows, cols] = dst

    def _composite(self, box, coverage, paint: Paint):
        """
        Shade and blend ``paint`` over ``box`` weighted by ``coverage``.

        A scalar coverage blends the whole box. A mask is first trimmed to
        its covered rows and columns; sparse masks (thin lines, discs)
        are then shaded and blended only where coverage is non-zero.
        """
        if np.ndim(coverage) == 0:
            xs, ys = self._grid(box)
            rgb, alpha = _shade(paint, xs, ys, (box[3] - box[1], box[2] - box[0]))
            self._apply(box, rgb, alpha * coverage)
            return

        box, coverage = _trim(box, coverage)
        if box is None:
            return
        rows, cols = np.nonzero(coverage)
        if rows.size >= coverage.size * SPARSE_COVERAGE:
            xs, ys = self._grid(box)
            rgb, alpha = _shade(paint, xs, ys, coverage.shape)
            self._apply(box, rgb, alpha * coverage)
            return

        ix0, iy0 = box[0], box[1]
        ox, oy = self.origin
        xs = cols.astype(np.float32) + np.float32(ix0 + 0.5 - ox)
        ys = rows.astype(np.float32) + np.float32(iy0 + 0.5 - oy)
        rgb, alpha = _shade(paint, xs, ys, xs.shape)
        self._apply_pixels(rows + iy0, cols + ix0, rgb, alpha * coverage[rows, cols])

    def _mask(self, box, draw_fn) -> np.ndarray:
        ix0, iy0, ix1, iy1 = box
        mask = Image.new("L", (ix1 - ix0, iy1 - iy0), 0)
        draw_fn(ImageDraw.Draw(mask), ix0, iy0)
        return np.asarray(mask, dtype=np.float32) / 255.0

    # --- primitives ---

    def fill(self, paint: Paint):
        """Paint the whole surface (translation does not apply)."""
        box = (0, 0, self.width, self.height)
        self._composite(box, 1.0, paint)

    def fill_rect(self, x: float, y: float, width: float, height: float, paint: Paint):
        (x0, y0), = self._to_device([(x, y)])
        x1, y1 = x0 + width, y0 + height
        box = self._region(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))
        if box is None:
            return
        self._composite(box, 1.0, paint)

    def fill_polygon(self, points: Sequence[Point], paint: Paint):
        pts = self._to_device(points)
        if len(pts) < 3:
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        box = self._region(min(xs), min(ys), max(xs), max(ys))
        if box is None:
            return

        def draw(d, ix0, iy0):
            d.polygon([(x - ix0, y - iy0) for x, y in pts], fill=255)

        self._composite(box, self._mask(box, draw), paint)

    def fill_circle(self, cx: float, cy: float, radius: float, paint: Paint):
        if radius <= 0:
            return
        (dcx, dcy), = self._to_device([(cx, cy)])
        box = self._region(dcx - radius, dcy - radius, dcx + radius, dcy + radius)
        if box is None:
            return
        xs, ys = self._grid(box)
        dist = np.hypot(xs - cx, ys - cy)
        # One-pixel soft edge
        coverage = np.clip(radius + 0.5 - dist, 0.0, 1.0)
        self._composite(box, coverage, paint)

    def polyline(self, points: Sequence[Point], color: RGBA, width: float = 1.0):
        pts = self._to_device(points)
        if len(pts) < 2 or width <= 0:
            return
        pad = width / 2 + 1
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        box = self._region(min(xs) - pad, min(ys) - pad, max(xs) + pad, max(ys) + pad)
        if box is None:
            return
        stroke = max(1, int(round(width)))

        def draw(d, ix0, iy0):
            d.line([(x - ix0, y - iy0) for x, y in pts], fill=255, width=stroke, joint="curve")

        coverage = self._mask(box, draw)
        if width < 1.0:
            # Hairlines are drawn one pixel wide at reduced strength
            coverage *= width
        self._composite(box, coverage, color)

    def line(self, start: Point, end: Point, color: RGBA, width: float = 1.0):
        self.polyline([start, end], color, width)

    def segments(
        self,
        segments: np.ndarray,
        color: RGBA,
        width: float = 1.0,
        opacities: Optional[np.ndarray] = None,
    ):
        """
        Stroke many straight segments of one color in a single pass.

        ``segments`` is an (N, 2, 2) array of start/end points. Each segment
        is rasterized into a shared mask at its own opacity; where segments
        cross, the more opaque one shows instead of the two adding up.
        """
        pts = np.asarray(segments, dtype=np.float64).reshape(-1, 2, 2) + np.asarray(self.origin)
        if len(pts) == 0 or width <= 0:
            return
        if opacities is None:
            opacities = np.ones(len(pts))
        levels = np.round(np.clip(opacities, 0.0, 1.0) * 255).astype(int)

        pad = width / 2 + 1
        box = self._region(
            float(pts[..., 0].min()) - pad,
            float(pts[..., 1].min()) - pad,
            float(pts[..., 0].max()) + pad,
            float(pts[..., 1].max()) + pad,
        )
        if box is None:
            return
        stroke = max(1, int(round(width)))

        def draw(d, ix0, iy0):
            for k in np.argsort(levels, kind="stable"):
                if levels[k] == 0:
                    continue
                (x0, y0), (x1, y1) = pts[k]
                d.line([(x0 - ix0, y0 - iy0), (x1 - ix0, y1 - iy0)], fill=int(levels[k]), width=stroke)

        coverage = self._mask(box, draw)
        if width < 1.0:
            coverage *= width
        self._composite(box, coverage, color)

    def draw_image(self, image: np.ndarray, x: int = 0, y: int = 0):
        """Composite an (H, W, 4) RGBA raster (uint8 or float in [0, 1])."""
        if image.dtype == np.uint8:
            image = image.astype(np.float32) / 255.0
        h, w = image.shape[:2]
        (dx, dy), = self._to_device([(x, y)])
        dx, dy = int(round(dx)), int(round(dy))
        box = self._region(dx, dy, dx + w, dy + h)
        if box is None:
            return
        ix0, iy0, ix1, iy1 = box
        crop = image[iy0 - dy:iy1 - dy, ix0 - dx:ix1 - dx]
        self._apply(box, crop[..., :3], crop[..., 3])

    def text(self, text: str, x: float, y: float, color: RGBA, size: int = 14, anchor: str = "rb"):
        """Draw text anchored at (x, y); default anchor is right/bottom."""
        if not text:
            return
        font = _load_font(size)
        (tx, ty), = self._to_device([(x, y)])
        measure = ImageDraw.Draw(Image.new("L", (1, 1)))
        left, top, right, bottom = measure.textbbox((tx, ty), text, font=font, anchor=anchor)
        box = self._region(left, top, right, bottom)
        if box is None:
            return

        def draw(d, ix0, iy0):
            d.text((tx - ix0, ty - iy0), text, font=font, fill=255, anchor=anchor)

        self._composite(box, self._mask(box, draw), color)

    def to_array(self) -> np.ndarray:
        """Current frame as (H, W, 3) uint8 RGB."""
        return (np.clip(self.pixels, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
