"""Tests for the frame driver, engine state and watermark pass."""

import logging

import numpy as np
import pytest

from spectracanvas import modes
from spectracanvas.compositor import draw_watermark, watermark_color
from spectracanvas.config import EngineConfig
from spectracanvas.core.metrics import extract_metrics
from spectracanvas.core.source import SignalSpectrumSource, StaticSpectrumSource
from spectracanvas.engine import ROTATION_STEP, EngineState, FrameDriver
from spectracanvas.fields.manager import FieldKind
from spectracanvas.modes import Mode, ModeStrategy
from spectracanvas.render.canvas import Canvas, SurfaceUnavailableError

from conftest import FakeClock


def _driver(config, source=None, mode=Mode.CIRCULAR, clock=None):
    state = EngineState(mode=mode)
    return FrameDriver(config, source=source, state=state, clock=clock or FakeClock())


class TestEngineState:
    def test_hue_shift_wraps(self):
        state = EngineState()

        state.set_hue_shift(370)
        assert state.hue_shift == 10

        state.set_hue_shift(-10)
        assert state.hue_shift == 350

    def test_set_mode_by_value(self):
        state = EngineState()
        state.set_mode("nebula")

        assert state.mode is Mode.NEBULA

    def test_set_unknown_mode(self):
        with pytest.raises(ValueError):
            EngineState().set_mode("spiral")

    def test_mode_switch_is_logged(self, caplog):
        state = EngineState()
        with caplog.at_level(logging.DEBUG, logger="spectracanvas.engine"):
            state.set_mode(Mode.WAVE)

        assert "circular -> wave" in caplog.text


class TestTick:
    def test_no_source_draws_nothing(self, small_config):
        driver = _driver(small_config)

        assert driver.tick() is False
        assert driver.frame_index == 0
        assert np.allclose(driver.canvas.pixels, 0.0)

    def test_tick_renders(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)

        assert driver.tick() is True
        assert driver.frame_index == 1
        assert driver.canvas.pixels.max() > 0.0

    def test_detach_stops(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)
        driver.tick()

        driver.detach()

        assert not driver.running
        assert driver.tick() is False
        assert driver.frame_index == 1

    def test_closed_source_stops(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)
        sweep_source.close()

        assert driver.tick() is False

    def test_released_canvas_is_fatal(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)
        driver.release()

        with pytest.raises(SurfaceUnavailableError):
            driver.tick()

    def test_invalid_requested_size_is_fatal(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)
        driver.request_size(0, 100)

        with pytest.raises(SurfaceUnavailableError):
            driver.tick()

    def test_failing_draw_is_skipped(self, small_config, sweep_source, caplog, monkeypatch):
        def explode(ctx):
            raise RuntimeError("bad frame")

        monkeypatch.setitem(modes.REGISTRY, Mode.CIRCULAR, ModeStrategy(Mode.CIRCULAR, explode))
        driver = _driver(small_config, sweep_source)

        with caplog.at_level(logging.ERROR, logger="spectracanvas.engine"):
            assert driver.tick() is True
            assert driver.tick() is True

        assert driver.skipped_frames == 2
        assert "Skipped frame 0" in caplog.text
        assert "bad frame" in caplog.text

    def test_recovers_after_skipped_frame(self, small_config, sweep_source, monkeypatch):
        def explode(ctx):
            raise RuntimeError("bad frame")

        driver = _driver(small_config, sweep_source)
        with monkeypatch.context() as m:
            m.setitem(modes.REGISTRY, Mode.CIRCULAR, ModeStrategy(Mode.CIRCULAR, explode))
            driver.tick()

        driver.tick()

        assert driver.skipped_frames == 1
        assert driver.frame_index == 2

    def test_rotation_accumulates(self, small_config, silent_source):
        driver = _driver(small_config, silent_source)
        for _ in range(5):
            driver.tick()

        assert driver.rotation == pytest.approx(5 * ROTATION_STEP)

    def test_elapsed_follows_clock(self, small_config, silent_source):
        clock = FakeClock(start=100.0)
        driver = _driver(small_config, silent_source, clock=clock)
        clock.advance(2.5)

        assert driver.elapsed == pytest.approx(2.5)


class TestResize:
    def test_resize_rebuilds_canvas_and_noise(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source, mode=Mode.RADIAL_INK)
        driver.tick()
        old_shards = driver.fields.get(FieldKind.SHARDS)
        assert old_shards.noise.shape == (120, 160, 4)

        driver.request_size(200, 100)
        driver.tick()

        shards = driver.fields.get(FieldKind.SHARDS)
        assert driver.canvas.size == (200, 100)
        assert shards is not old_shards
        assert shards.noise.shape == (100, 200, 4)

    def test_same_size_is_not_a_resize(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source, mode=Mode.NETWORK)
        driver.tick()
        canvas = driver.canvas
        network = driver.fields.get(FieldKind.NETWORK)

        driver.request_size(160, 120)
        driver.tick()

        assert driver.canvas is canvas
        assert driver.fields.get(FieldKind.NETWORK) is network

    def test_resize_is_logged(self, small_config, sweep_source, caplog):
        driver = _driver(small_config, sweep_source)
        driver.request_size(64, 48)

        with caplog.at_level(logging.INFO, logger="spectracanvas.engine"):
            driver.tick()

        assert "Surface resized to 64x48" in caplog.text


class TestModeSwitching:
    def test_watercolor_blobs_survive_nebula(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source, mode=Mode.WATERCOLOR)
        driver.tick()
        blobs = driver.fields.get(FieldKind.WATERCOLOR)

        driver.state.set_mode(Mode.NEBULA)
        driver.tick()
        positions = blobs.positions.copy()
        driver.state.set_mode(Mode.WATERCOLOR)
        driver.tick()

        assert driver.fields.get(FieldKind.WATERCOLOR) is blobs
        assert driver.fields.creations[FieldKind.WATERCOLOR] == 1
        # Blobs were frozen while Nebula was active and moved again after
        assert not np.array_equal(blobs.positions, positions)

    def test_inactive_fields_are_not_advanced(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source, mode=Mode.NETWORK)
        driver.tick()
        nodes = driver.fields.get(FieldKind.NETWORK)
        positions = nodes.positions.copy()

        driver.state.set_mode(Mode.BARS)
        driver.tick()

        assert np.array_equal(nodes.positions, positions)


class TestLoop:
    def test_frames_generator(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)

        frames = list(driver.frames(3))

        assert len(frames) == 3
        assert all(f.shape == (120, 160, 3) and f.dtype == np.uint8 for f in frames)

    def test_frames_stop_without_source(self, small_config):
        assert list(_driver(small_config).frames(3)) == []

    def test_run_paces_with_clock(self, small_config, sweep_source):
        driver = _driver(small_config, sweep_source)
        pacer = FakeClock()
        presented = []

        ticks = driver.run(present=presented.append, max_frames=4, clock=pacer)

        assert ticks == 4
        assert pacer.ticks == [small_config.fps] * 4
        assert presented == [driver.canvas] * 4

    def test_run_ends_with_signal(self, small_config, sample_rate):
        clock = FakeClock()
        signal = np.zeros(int(sample_rate * 0.1), dtype=np.float32)
        source = SignalSpectrumSource(signal, sample_rate, clock=clock, fft_size=256)
        driver = _driver(small_config, source, clock=clock)

        ticks = driver.run(max_frames=100, clock=clock)

        assert source.closed
        assert not driver.running
        assert 5 <= ticks <= 8

    def test_run_without_source(self, small_config):
        pacer = FakeClock()

        assert _driver(small_config).run(clock=pacer) == 0
        assert pacer.ticks == []


class TestWatermark:
    def test_colors(self):
        assert watermark_color(True) == pytest.approx((0.0, 0.0, 0.0, 0.4))
        assert watermark_color(False) == pytest.approx((1.0, 1.0, 1.0, 0.4))

    def test_white_on_dark(self):
        canvas = Canvas(240, 60)
        draw_watermark(canvas, "Idea by Geeksing", light_background=False)

        corner = canvas.pixels[20:40, 100:220]
        assert 0.2 < corner.max() <= 0.4 + 1e-5
        assert canvas.pixels[:, :60].max() == 0.0

    def test_dark_on_light(self):
        canvas = Canvas(240, 60, background=(1.0, 1.0, 1.0))
        draw_watermark(canvas, "Idea by Geeksing", light_background=True)

        assert canvas.pixels[20:40, 100:220].min() < 0.8
        assert canvas.pixels.min() >= 0.6 - 1e-5

    @pytest.mark.parametrize("mode", [Mode.WATERCOLOR, Mode.NEBULA])
    def test_every_frame_is_watermarked(self, small_config, silent_source, monkeypatch, mode):
        """Text lands in the bottom-right corner even if the mode leaves state behind."""
        def leaves_state(ctx):
            ctx.canvas.fill((0.5, 0.5, 0.5, 1.0))
            ctx.canvas.alpha = 0.0

        monkeypatch.setitem(modes.REGISTRY, mode, ModeStrategy(mode, leaves_state))
        driver = _driver(small_config, silent_source, mode=mode)
        driver.tick()

        corner = driver.canvas.pixels[80:100, 40:140]
        assert not np.allclose(corner, 0.5)
        assert np.allclose(driver.canvas.pixels[:40, :40], 0.5)


class TestFrameCost:
    def test_network_lines_are_batched_per_node(self, full_scale_source, monkeypatch):
        """A loud network frame at the default size composites per node, not per line."""
        config = EngineConfig(mode="network", seed=1)
        driver = _driver(config, full_scale_source, mode=Mode.NETWORK)
        composites = []
        original = Canvas._composite

        def counting(self, box, coverage, paint):
            composites.append(box)
            return original(self, box, coverage, paint)

        monkeypatch.setattr(Canvas, "_composite", counting)

        driver.tick()

        network = driver.fields.get(FieldKind.NETWORK)
        bass = extract_metrics(full_scale_source.read_frame().frequency).bass
        pairs = len(network.connections(bass)[0])
        assert driver.skipped_frames == 0
        assert pairs > 4 * config.network_nodes
        # Background, shards, one disc and one line batch per node, watermark
        assert len(composites) <= 1 + config.shard_count + 2 * config.network_nodes + 1
