"""Tests for band level extraction."""

import numpy as np
import pytest

from spectracanvas.core.metrics import AudioMetrics, extract_metrics


class TestExtractMetrics:
    """Tests for extract_metrics()."""

    def test_silence_is_zero(self):
        metrics = extract_metrics(np.zeros(1024, dtype=np.uint8))

        assert metrics == AudioMetrics(0.0, 0.0, 0.0)

    def test_full_scale_levels(self):
        """Weighted bass average is 0.85 of full scale, so bass = 0.85^2 * 2."""
        metrics = extract_metrics(np.full(1024, 255, dtype=np.uint8))

        assert metrics.bass == pytest.approx(1.445)
        assert metrics.mid == pytest.approx(1.0)
        assert metrics.high == pytest.approx(1.0)

    def test_bass_monotonic_in_low_bins(self):
        """Raising any bass bin never lowers the bass level."""
        data = np.full(1024, 40, dtype=np.uint8)
        previous = extract_metrics(data).bass

        for i in range(20):
            data[i] = 200
            current = extract_metrics(data).bass
            assert current > previous
            previous = current

    def test_kick_bins_weigh_less_than_sub_bass(self):
        sub = np.zeros(1024, dtype=np.uint8)
        sub[0] = 255
        kick = np.zeros(1024, dtype=np.uint8)
        kick[10] = 255

        assert extract_metrics(sub).bass > extract_metrics(kick).bass

    def test_bands_are_independent(self):
        data = np.zeros(1024, dtype=np.uint8)
        data[20:100] = 255

        metrics = extract_metrics(data)

        assert metrics.bass == 0.0
        assert metrics.mid == pytest.approx(1.0)
        assert metrics.high == 0.0

    def test_short_array_counts_missing_bins_as_zero(self):
        """Ten bins of full scale: bass averages over 20 nominal bins."""
        metrics = extract_metrics(np.full(10, 255, dtype=np.uint8))

        assert metrics.bass == pytest.approx(((5 + 5 * 0.8) / 20) ** 2 * 2)
        assert metrics.mid == 0.0
        assert metrics.high == 0.0

    def test_empty_array(self):
        metrics = extract_metrics(np.array([], dtype=np.uint8))

        assert metrics == AudioMetrics(0.0, 0.0, 0.0)

    def test_deterministic(self):
        data = np.random.default_rng(0).integers(0, 256, 1024).astype(np.uint8)

        assert extract_metrics(data) == extract_metrics(data.copy())


class TestAudioMetrics:
    def test_band_round_robin(self):
        metrics = AudioMetrics(bass=0.9, mid=0.5, high=0.1)

        assert [metrics.band(i) for i in range(6)] == [0.9, 0.5, 0.1, 0.9, 0.5, 0.1]
