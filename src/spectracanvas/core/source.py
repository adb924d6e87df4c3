"""
Spectrum sources.

The renderer consumes a frequency-magnitude byte array and a time-domain
byte array every tick. Sources here either hold fixed arrays or derive
both from PCM the way a browser analyser node does: Blackman window,
magnitude FFT, exponential smoothing, then a linear decibel-to-byte map.
"""

import abc
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy import signal as scipy_signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpectrumFrame:
    """One analysis window: frequency magnitudes and time-domain samples (0-255)."""

    frequency: np.ndarray
    time_domain: np.ndarray

    @classmethod
    def silence(cls, n: int = 1024) -> "SpectrumFrame":
        return cls(
            frequency=np.zeros(n, dtype=np.uint8),
            time_domain=np.full(n, 128, dtype=np.uint8),
        )

    def __len__(self) -> int:
        return len(self.frequency)


class SpectrumSource(abc.ABC):
    """Read-only provider of the latest spectrum snapshot."""

    _closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Mark the source as torn down. Drivers stop ticking on the next check."""
        self._closed = True

    @abc.abstractmethod
    def get_frequency_data(self) -> np.ndarray:
        """Latest frequency magnitudes as uint8."""

    @abc.abstractmethod
    def get_time_domain_data(self) -> np.ndarray:
        """Latest time-domain samples as uint8 (128 = zero crossing)."""

    def read_frame(self) -> SpectrumFrame:
        """Snapshot both arrays so a tick never sees them change underneath it."""
        return SpectrumFrame(
            frequency=np.array(self.get_frequency_data(), dtype=np.uint8, copy=True),
            time_domain=np.array(self.get_time_domain_data(), dtype=np.uint8, copy=True),
        )


class StaticSpectrumSource(SpectrumSource):
    """Serves whatever arrays were last assigned to it."""

    def __init__(self, frequency=None, time_domain=None, n: int = 1024):
        self.frequency = np.zeros(n, dtype=np.uint8)
        self.time_domain = np.full(n, 128, dtype=np.uint8)
        self.set(frequency, time_domain)

    def set(self, frequency=None, time_domain=None):
        if frequency is not None:
            self.frequency = np.asarray(frequency, dtype=np.uint8)
        if time_domain is not None:
            self.time_domain = np.asarray(time_domain, dtype=np.uint8)

    def get_frequency_data(self) -> np.ndarray:
        return self.frequency

    def get_time_domain_data(self) -> np.ndarray:
        return self.time_domain


class AnalyserSource(SpectrumSource):
    """
    PCM-fed analyser producing byte spectra.

    Samples are floats in [-1, 1]. ``push`` appends them to a ring buffer
    of ``fft_size`` samples; reads analyse the current ring contents.
    """

    def __init__(
        self,
        fft_size: int = 2048,
        smoothing: float = 0.8,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {fft_size}")
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be below max_decibels")

        self.fft_size = fft_size
        self.bin_count = fft_size // 2
        self.smoothing = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self._ring = np.zeros(fft_size, dtype=np.float32)
        self._window = scipy_signal.windows.blackman(fft_size).astype(np.float32)
        self._smoothed = np.zeros(self.bin_count, dtype=np.float64)

    def push(self, samples: np.ndarray):
        """Append new PCM samples to the analysis window."""
        samples = np.asarray(samples, dtype=np.float32).ravel()
        n = samples.size
        if n == 0:
            return
        if n >= self.fft_size:
            self._ring[:] = samples[-self.fft_size:]
        else:
            self._ring = np.roll(self._ring, -n)
            self._ring[-n:] = samples

    def get_frequency_data(self) -> np.ndarray:
        spectrum = np.abs(np.fft.rfft(self._ring * self._window))[: self.bin_count]
        spectrum /= self.fft_size

        tau = self.smoothing
        self._smoothed = tau * self._smoothed + (1.0 - tau) * spectrum

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(self._smoothed)

        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor((db - self.min_decibels) * scale)
        return np.clip(scaled, 0, 255).astype(np.uint8)

    def get_time_domain_data(self) -> np.ndarray:
        recent = self._ring[-self.bin_count:]
        return np.clip(np.floor(128.0 * (1.0 + recent)), 0, 255).astype(np.uint8)


class SignalSpectrumSource(AnalyserSource):
    """
    Plays a decoded signal against a clock.

    Before each read the samples that have elapsed since the first read
    are pushed into the analyser. Once the signal is exhausted the
    source closes itself.
    """

    def __init__(
        self,
        signal: np.ndarray,
        sample_rate: int,
        clock: Callable[[], float] = time.monotonic,
        **analyser_kwargs,
    ):
        super().__init__(**analyser_kwargs)
        signal = np.asarray(signal, dtype=np.float32)
        if signal.ndim > 1:
            signal = signal.mean(axis=0)
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self.signal = signal
        self.sample_rate = sample_rate
        self.clock = clock
        self._start: Optional[float] = None
        self._cursor = 0

    @property
    def position(self) -> float:
        """Playback position in seconds."""
        return self._cursor / self.sample_rate

    @property
    def duration(self) -> float:
        return len(self.signal) / self.sample_rate

    def _advance(self):
        if self.closed:
            return
        now = self.clock()
        if self._start is None:
            self._start = now
        target = min(int((now - self._start) * self.sample_rate), len(self.signal))
        if target > self._cursor:
            self.push(self.signal[self._cursor:target])
            self._cursor = target
        if self._cursor >= len(self.signal):
            logger.info("Signal exhausted after %.2fs, closing source", self.position)
            self.close()

    def get_frequency_data(self) -> np.ndarray:
        self._advance()
        return super().get_frequency_data()

    def get_time_domain_data(self) -> np.ndarray:
        self._advance()
        return super().get_time_domain_data()
