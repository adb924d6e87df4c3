"""Tests for spectrum sources."""

import numpy as np
import pytest

from spectracanvas.core.source import (
    AnalyserSource,
    SignalSpectrumSource,
    SpectrumFrame,
    StaticSpectrumSource,
)

from conftest import FakeClock


class TestStaticSource:
    def test_defaults_are_silence(self):
        source = StaticSpectrumSource(n=64)

        assert (source.get_frequency_data() == 0).all()
        assert (source.get_time_domain_data() == 128).all()

    def test_read_frame_is_a_copy(self):
        source = StaticSpectrumSource(frequency=np.full(8, 10, dtype=np.uint8))
        frame = source.read_frame()

        frame.frequency[:] = 99

        assert (source.get_frequency_data() == 10).all()

    def test_set_replaces_arrays(self):
        source = StaticSpectrumSource(n=8)
        source.set(frequency=[1, 2, 3])

        assert source.read_frame().frequency.tolist() == [1, 2, 3]
        assert len(source.read_frame().time_domain) == 8

    def test_close(self):
        source = StaticSpectrumSource()
        assert not source.closed

        source.close()

        assert source.closed


class TestSpectrumFrame:
    def test_silence(self):
        frame = SpectrumFrame.silence(32)

        assert len(frame) == 32
        assert frame.frequency.dtype == np.uint8
        assert (frame.time_domain == 128).all()


class TestAnalyserSource:
    def test_silence(self):
        source = AnalyserSource(fft_size=256)

        assert source.bin_count == 128
        assert (source.get_frequency_data() == 0).all()
        assert (source.get_time_domain_data() == 128).all()

    def test_tone_peaks_at_its_bin(self, tone):
        y, _ = tone
        source = AnalyserSource(fft_size=256)
        source.push(y[:256])

        for _ in range(10):
            data = source.get_frequency_data()

        assert data.shape == (128,)
        assert data[16] == data.max()
        assert data[16] > 200
        assert data[100] < data[16]

    def test_smoothing_ramps_up(self, tone):
        y, _ = tone
        source = AnalyserSource(fft_size=256, smoothing=0.8)
        source.push(y[:256])

        first = int(source.get_frequency_data()[16])
        for _ in range(5):
            later = int(source.get_frequency_data()[16])

        assert first < later
        assert later == 255

    def test_time_domain_bytes(self):
        source = AnalyserSource(fft_size=64)

        source.push(np.ones(64))
        assert (source.get_time_domain_data() == 255).all()

        source.push(-np.ones(64))
        assert (source.get_time_domain_data() == 0).all()

        source.push(np.full(64, 0.5))
        assert (source.get_time_domain_data() == 192).all()

    def test_push_keeps_latest_window(self):
        source = AnalyserSource(fft_size=64)
        source.push(np.full(32, -1.0))
        source.push(np.zeros(16))

        recent = source.get_time_domain_data()

        # Latest 32 samples: 16 of -1.0 then 16 of silence
        assert recent[:16].tolist() == [0] * 16
        assert recent[16:].tolist() == [128] * 16

    def test_oversized_push(self):
        source = AnalyserSource(fft_size=64)
        source.push(np.concatenate([np.zeros(100), np.ones(64)]))

        assert (source.get_time_domain_data() == 255).all()

    @pytest.mark.parametrize("fft_size", [16, 100, 1000])
    def test_invalid_fft_size(self, fft_size):
        with pytest.raises(ValueError, match="power of two"):
            AnalyserSource(fft_size=fft_size)

    def test_invalid_decibel_range(self):
        with pytest.raises(ValueError):
            AnalyserSource(min_decibels=-30, max_decibels=-100)


class TestSignalSource:
    def test_plays_against_clock(self, tone):
        y, sr = tone
        clock = FakeClock()
        source = SignalSpectrumSource(y, sr, clock=clock, fft_size=256)

        source.read_frame()
        assert source.position == 0.0

        clock.advance(0.1)
        frame = source.read_frame()

        assert source.position == pytest.approx(0.1)
        assert frame.frequency[16] > 0
        assert not source.closed

    def test_closes_at_end(self, tone):
        y, sr = tone
        clock = FakeClock()
        source = SignalSpectrumSource(y, sr, clock=clock, fft_size=256)
        source.read_frame()

        clock.advance(source.duration + 0.01)
        source.read_frame()

        assert source.closed
        assert source.position == pytest.approx(source.duration)

    def test_stereo_is_downmixed(self, sample_rate):
        stereo = np.stack([np.ones(800), -np.ones(800)]).astype(np.float32)
        source = SignalSpectrumSource(stereo, sample_rate, clock=FakeClock())

        assert source.signal.shape == (800,)
        assert np.allclose(source.signal, 0.0)

    def test_invalid_sample_rate(self):
        with pytest.raises(ValueError):
            SignalSpectrumSource(np.zeros(10), 0)
