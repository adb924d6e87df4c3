"""
Banded audio metrics.

Maps a frequency-magnitude byte array to three perceptual levels:
- Bass: bins [0, 5) at full weight plus the kick region [5, 20) at 0.8,
  squared and doubled so loud low end dominates.
- Mid: bins [20, 100), the vocal / low-mid range, linear.
- High: everything from bin 100 up, linear.
"""

from dataclasses import dataclass

import numpy as np

SUB_BASS_END = 5
KICK_END = 20
MID_END = 100

SUB_BASS_WEIGHT = 1.0
KICK_WEIGHT = 0.8


@dataclass(frozen=True)
class AudioMetrics:
    """Per-frame levels. Non-negative; bass may exceed 1.0."""

    bass: float = 0.0
    mid: float = 0.0
    high: float = 0.0

    def band(self, index: int) -> float:
        """Level for a round-robin band index (0 = bass, 1 = mid, 2 = high)."""
        return (self.bass, self.mid, self.high)[index % 3]


def _band_average(total: float, width: int) -> float:
    if width <= 0:
        return 0.0
    return total / width


def extract_metrics(frequency) -> AudioMetrics:
    """
    Compute bass/mid/high levels from raw magnitude bytes.

    Bins a short array does not reach count as zero, so a degenerate
    frame yields flat levels instead of an error.

    Args:
        frequency: Sequence of N magnitudes in [0, 255].

    Returns:
        AudioMetrics for this frame.
    """
    data = np.asarray(frequency, dtype=np.float64).ravel()
    n = data.size

    bass_total = (
        data[:SUB_BASS_END].sum() * SUB_BASS_WEIGHT
        + data[SUB_BASS_END:KICK_END].sum() * KICK_WEIGHT
    )
    mid_total = data[KICK_END:MID_END].sum()
    high_total = data[MID_END:].sum()

    bass_avg = _band_average(bass_total, KICK_END)
    mid_avg = _band_average(mid_total, MID_END - KICK_END)
    high_avg = _band_average(high_total, n - MID_END)

    return AudioMetrics(
        bass=float((bass_avg / 255.0) ** 2 * 2.0),
        mid=float(mid_avg / 255.0),
        high=float(high_avg / 255.0),
    )
