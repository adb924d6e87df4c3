"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from spectracanvas.config import EngineConfig
from spectracanvas.core.source import StaticSpectrumSource

# Analyser bin count used throughout the tests
TEST_BINS = 1024
TEST_SR = 8000


class FakeClock:
    """
    Stand-in for both the engine's time source and the pacing clock.

    Calling it returns the current time; ``tick(fps)`` advances time by
    one frame period, like ``pygame.time.Clock.tick`` would wait for.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self.ticks = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    def tick(self, fps: int = 0) -> int:
        self.ticks.append(fps)
        if fps:
            self.now += 1.0 / fps
        return 0


@pytest.fixture
def small_config() -> EngineConfig:
    """Small surface and particle counts so full renders stay fast."""
    return EngineConfig(
        width=160,
        height=120,
        network_nodes=20,
        watercolor_blobs=7,
        nebula_stars=30,
        shard_count=20,
        seed=7,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def silent_source() -> StaticSpectrumSource:
    return StaticSpectrumSource(n=TEST_BINS)


@pytest.fixture
def full_scale_source() -> StaticSpectrumSource:
    """Every frequency bin at 255, waveform at full positive swing."""
    return StaticSpectrumSource(
        frequency=np.full(TEST_BINS, 255, dtype=np.uint8),
        time_domain=np.full(TEST_BINS, 255, dtype=np.uint8),
    )


@pytest.fixture
def sweep_source() -> StaticSpectrumSource:
    """Falling spectrum and a sine waveform, roughly what music looks like."""
    frequency = np.linspace(255, 0, TEST_BINS).astype(np.uint8)
    phase = np.linspace(0, 4 * np.pi, TEST_BINS)
    time_domain = (128 + 100 * np.sin(phase)).astype(np.uint8)
    return StaticSpectrumSource(frequency=frequency, time_domain=time_domain)


@pytest.fixture
def sample_rate() -> int:
    return TEST_SR


@pytest.fixture
def tone(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Half-second 500 Hz sine at half amplitude.

    500 Hz lands exactly on bin 16 of a 256-point analyser at 8 kHz.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    t = np.arange(int(sample_rate * 0.5)) / sample_rate
    y = 0.5 * np.sin(2 * np.pi * 500.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, tone):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = tone
    audio_path = tmp_path / "tone.wav"
    sf.write(audio_path, y, sr)
    return audio_path
