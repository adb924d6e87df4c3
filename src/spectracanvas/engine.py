"""
Frame driver.

Pulls one spectrum snapshot per tick, derives metrics and color,
advances the particle fields the active mode needs, lets the mode draw,
and finishes with the watermark. Everything happens on the caller's
thread; pacing is delegated to a ``clock.tick(fps)`` object between
ticks.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

import numpy as np
import pygame

from spectracanvas.compositor import finalize
from spectracanvas.config import EngineConfig
from spectracanvas.core.color import ColorState
from spectracanvas.core.metrics import extract_metrics
from spectracanvas.core.source import SpectrumSource
from spectracanvas.fields.base import Bounds
from spectracanvas.fields.manager import FieldManager
from spectracanvas.modes import FrameContext, Mode, get_strategy
from spectracanvas.render.canvas import Canvas, SurfaceUnavailableError

logger = logging.getLogger(__name__)

ROTATION_STEP = 0.002
ROTATION_BASS = 0.005


@dataclass
class EngineState:
    """Externally controlled inputs, read once at the start of every tick."""

    mode: Mode = Mode.CIRCULAR
    hue_shift: int = 0

    def set_mode(self, mode):
        mode = Mode(mode)
        if mode is not self.mode:
            logger.debug("Mode switch: %s -> %s", self.mode.value, mode.value)
        self.mode = mode

    def set_hue_shift(self, degrees: int):
        self.hue_shift = int(degrees) % 360

    def snapshot(self) -> Tuple[Mode, int]:
        return self.mode, self.hue_shift


class FrameDriver:
    """
    Owns the canvas and particle fields and renders one frame per tick.

    A tick that raises anything other than ``SurfaceUnavailableError``
    is logged and counted in ``skipped_frames``; the next tick proceeds
    normally. A missing or closed source ends the loop.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        source: Optional[SpectrumSource] = None,
        state: Optional[EngineState] = None,
        clock: Callable[[], float] = time.monotonic,
        seed: Optional[int] = None,
    ):
        self.cfg = config or EngineConfig()
        self.state = state or EngineState(Mode(self.cfg.mode), self.cfg.hue_shift)
        self.clock = clock

        seed = seed if seed is not None else self.cfg.seed
        self.fields = FieldManager(self.cfg, seed=seed)
        self._rng = random.Random(seed)

        self.canvas: Optional[Canvas] = Canvas(self.cfg.width, self.cfg.height)
        self._requested_size = (self.cfg.width, self.cfg.height)

        self.source: Optional[SpectrumSource] = None
        self._start = 0.0
        self.rotation = 0.0
        self.frame_index = 0
        self.skipped_frames = 0

        if source is not None:
            self.attach(source)

    @property
    def running(self) -> bool:
        return self.source is not None and not self.source.closed

    @property
    def elapsed(self) -> float:
        """Seconds since the current source was attached."""
        return self.clock() - self._start

    def attach(self, source: SpectrumSource):
        self.source = source
        self._start = self.clock()
        logger.info("Attached %s", type(source).__name__)

    def detach(self):
        """Stop ticking. The source itself is left alone."""
        if self.source is not None:
            logger.info("Detached %s after %d frames", type(self.source).__name__, self.frame_index)
        self.source = None

    def release(self):
        """Drop the canvas; any further tick fails with ``SurfaceUnavailableError``."""
        self.canvas = None

    def request_size(self, width: int, height: int):
        """Ask for a new surface size; applied at the start of the next tick."""
        self._requested_size = (width, height)

    def _sync_surface(self):
        width, height = self._requested_size
        if self.canvas.size == (width, height):
            return
        self.canvas = Canvas(width, height)
        self.fields.resize(Bounds(self.canvas.width, self.canvas.height))
        logger.info("Surface resized to %dx%d", self.canvas.width, self.canvas.height)

    def tick(self) -> bool:
        """
        Render one frame.

        Returns:
            False when there is no live source and nothing was drawn,
            True otherwise (including ticks that were skipped on error).

        Raises:
            SurfaceUnavailableError: The canvas is gone or cannot be built.
        """
        if not self.running:
            return False
        if self.canvas is None:
            raise SurfaceUnavailableError("No canvas to draw on")

        self._sync_surface()
        try:
            self._render()
        except SurfaceUnavailableError:
            raise
        except Exception:
            self.skipped_frames += 1
            logger.exception("Skipped frame %d", self.frame_index)
        self.frame_index += 1
        return True

    def _render(self):
        mode, hue_shift = self.state.snapshot()
        strategy = get_strategy(mode)
        elapsed = self.elapsed

        frame = self.source.read_frame()
        metrics = extract_metrics(frame.frequency)
        color = ColorState(hue_shift, elapsed)
        self.rotation += ROTATION_STEP + metrics.bass * ROTATION_BASS

        bounds = Bounds(self.canvas.width, self.canvas.height)
        fields = self.fields.ensure(strategy.fields, bounds)
        self.fields.advance(strategy.fields, metrics, bounds, elapsed)

        ctx = FrameContext(
            canvas=self.canvas,
            frame=frame,
            metrics=metrics,
            color=color,
            fields=fields,
            elapsed=elapsed,
            rotation=self.rotation,
            rng=self._rng,
        )
        try:
            strategy.draw(ctx)
        finally:
            finalize(self.canvas, strategy, self.cfg)

    def frames(self, count: Optional[int] = None) -> Iterator[np.ndarray]:
        """Yield rendered frames as uint8 arrays until ``count`` or the source ends."""
        produced = 0
        while count is None or produced < count:
            if not self.tick():
                return
            produced += 1
            yield self.canvas.to_array()

    def run(
        self,
        present: Optional[Callable[[Canvas], None]] = None,
        max_frames: Optional[int] = None,
        clock=None,
    ) -> int:
        """
        Tick until the source ends, pacing with ``clock.tick(fps)``.

        Args:
            present: Called with the canvas after every tick.
            max_frames: Stop after this many ticks.
            clock: Pacing object; defaults to ``pygame.time.Clock()``.

        Returns:
            Number of ticks run.
        """
        clock = clock or pygame.time.Clock()
        ticks = 0
        while max_frames is None or ticks < max_frames:
            if not self.tick():
                break
            ticks += 1
            if present is not None:
                present(self.canvas)
            clock.tick(self.cfg.fps)

        logger.info("Stopped after %d ticks (%d skipped)", ticks, self.skipped_frames)
        return ticks
