"""Synthetic signals with exactly predictable peaks.

Each frame carries a single sine whose frequency sits exactly on an FFT bin,
so its power lands in that one bin (amplitude * FRAME_SIZE / 2) and every
other bin stays at numerical zero.
"""

from typing import Optional, Sequence

import numpy as np

from probefinder.config import FRAME_SIZE
from probefinder.types import Signal

SAMPLE_RATE = 44100.0


def tone_frame(bins: Sequence[int], amplitudes: Optional[Sequence[float]] = None,
               n: int = FRAME_SIZE) -> np.ndarray:
    """One frame holding a bin-centred sine per entry of *bins*."""
    if amplitudes is None:
        amplitudes = [0.5] * len(bins)
    t = np.arange(n)
    frame = np.zeros(n)
    for b, a in zip(bins, amplitudes):
        frame += a * np.sin(2 * np.pi * b * t / n)
    return frame


def silent_frame(n: int = FRAME_SIZE) -> np.ndarray:
    return np.zeros(n)


def ramp_frames(n_frames: int, start_bin: int = 20, step: int = 3,
                amplitude: float = 0.5) -> list:
    """Frame t holds one tone at bin start_bin + step * t."""
    return [tone_frame([start_bin + step * t], [amplitude]) for t in range(n_frames)]


def make_signal(frames, name: str = "synthetic", sample_rate: float = SAMPLE_RATE) -> Signal:
    return Signal(np.concatenate(frames), sample_rate, name)


def ramp_signal(n_frames: int = 86, start_bin: int = 20, step: int = 3,
                name: str = "ramp") -> Signal:
    return make_signal(ramp_frames(n_frames, start_bin, step), name=name)
