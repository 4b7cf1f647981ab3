"""
Spectral analysis: per-frame power spectra and global peak extraction.

Peaks are selected in two stages:
1. Inside a frame, a bin above the frame's average power (a "candidate") is a
   local peak when it beats the +/-3 closest candidates by PEAK_THRESHOLD.
2. Across frames, a local peak is promoted to a global peak when it beats the
   same bin and the average power of every frame within +/-3 frames. Peaks in
   the final frame are never promoted, so a one-frame signal has none.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.fft
from joblib import Parallel, delayed

from .config import FRAME_SIZE, PEAK_NEIGHBOURHOOD, PEAK_THRESHOLD
from .errors import InvalidSignal
from .types import Peak, Signal

logger = logging.getLogger(__name__)


def _local_peak_mask(candidate_powers: np.ndarray, threshold: float,
                     neighbourhood: int) -> np.ndarray:
    """Flag candidates that beat every other candidate within +/-neighbourhood positions."""
    n = len(candidate_powers)
    keep = np.ones(n, dtype=bool)
    for d in range(1, neighbourhood + 1):
        if d >= n:
            break
        # compare each candidate with the one d positions to its right / left
        keep[:-d] &= (candidate_powers[:-d] - candidate_powers[d:]) >= threshold
        keep[d:] &= (candidate_powers[d:] - candidate_powers[:-d]) >= threshold
    return keep


class PowerSpectrum:
    """Power of the non-redundant bins of one frame, with its local peaks."""

    def __init__(self, frame: np.ndarray, index: int,
                 threshold: float = PEAK_THRESHOLD,
                 neighbourhood: int = PEAK_NEIGHBOURHOOD):
        frame = np.asarray(frame, dtype=np.float64)
        if frame.ndim != 1 or len(frame) == 0:
            raise ValueError(f"Frame {index} must be a non-empty 1-D array")
        self.index = index
        self.frame_size = len(frame)

        # real frame treated as complex with zero imaginary part
        transformed = scipy.fft.fft(frame)
        powers = np.abs(transformed[: self.frame_size // 2])
        powers.setflags(write=False)
        self.powers = powers
        self.average_power = float(powers.mean()) if len(powers) else 0.0

        candidates = np.flatnonzero(powers > self.average_power)
        mask = _local_peak_mask(powers[candidates], threshold, neighbourhood)
        self.peaks: Tuple[Peak, ...] = tuple(
            Peak(index, int(b), float(powers[b])) for b in candidates[mask]
        )

    def __len__(self) -> int:
        return len(self.powers)

    def power_at(self, frequency: int) -> float:
        return float(self.powers[frequency])

    @property
    def max_power(self) -> float:
        return float(self.powers.max()) if len(self.powers) else 0.0

    def __repr__(self):
        return (f"PowerSpectrum(index={self.index}, average_power={self.average_power:.3f}, "
                f"peaks={len(self.peaks)})")


def frame_signal(samples: np.ndarray, frame_size: int = FRAME_SIZE) -> np.ndarray:
    """Split samples into disjoint frames, dropping the trailing partial frame."""
    n_frames = len(samples) // frame_size
    return np.reshape(samples[: n_frames * frame_size], (n_frames, frame_size))


class Spectrogram:
    """Sequence of PowerSpectrum frames and the global peaks promoted from them."""

    def __init__(self, signal: Signal, frame_size: int = FRAME_SIZE,
                 threshold: float = PEAK_THRESHOLD,
                 neighbourhood: int = PEAK_NEIGHBOURHOOD,
                 n_jobs: Optional[int] = None):
        """
        Args:
            signal: Mono signal to analyse
            frame_size: Samples per frame
            threshold: Minimum power margin a peak must hold over its competitors
            neighbourhood: +/- frames (and candidate positions) a peak is compared against
            n_jobs: Compute frame spectra in parallel with joblib (None = sequential)
        """
        if len(signal) == 0:
            raise InvalidSignal(f"Signal '{signal.name}' has no samples")
        self.signal = signal
        self.frame_size = frame_size
        self.threshold = threshold
        self.neighbourhood = neighbourhood

        frames = frame_signal(signal.samples, frame_size)
        if n_jobs is None or n_jobs == 1 or len(frames) < 2:
            spectra = [PowerSpectrum(f, i, threshold, neighbourhood) for i, f in enumerate(frames)]
        else:
            # every frame must exist before promotion looks at its neighbours
            spectra = Parallel(n_jobs=n_jobs, prefer="threads")(
                delayed(PowerSpectrum)(f, i, threshold, neighbourhood)
                for i, f in enumerate(frames)
            )
        self.spectra: List[PowerSpectrum] = list(spectra)
        self.peaks: List[Peak] = self._extract_peaks()
        logger.debug("Spectrogram '%s': %d frames, %d global peaks",
                     signal.name, len(self.spectra), len(self.peaks))

    def __len__(self) -> int:
        return len(self.spectra)

    def __getitem__(self, index: int) -> PowerSpectrum:
        return self.spectra[index]

    @property
    def power_matrix(self) -> np.ndarray:
        """(n_frames, frame_size // 2) array of bin powers."""
        if not self.spectra:
            return np.zeros((0, self.frame_size // 2))
        return np.vstack([s.powers for s in self.spectra])

    def _extract_peaks(self) -> List[Peak]:
        n_frames = len(self.spectra)
        if n_frames == 0:
            return []
        powers = self.power_matrix
        averages = np.array([s.average_power for s in self.spectra])

        global_peaks: List[Peak] = []
        # the last frame only ever serves as a neighbour
        for index, spectrum in enumerate(self.spectra[:-1]):
            if not spectrum.peaks:
                continue
            lo = max(0, index - self.neighbourhood)
            hi = min(n_frames, index + self.neighbourhood + 1)
            neighbours = [i for i in range(lo, hi) if i != index]

            bins = np.array([p.frequency for p in spectrum.peaks])
            peak_powers = powers[index, bins]
            # (a) beat the same bin in every neighbouring frame
            beats_bins = (peak_powers - powers[neighbours][:, bins]) >= self.threshold
            # (b) beat the average power of every neighbouring frame
            beats_average = (peak_powers[None, :] - averages[neighbours][:, None]) >= self.threshold
            promoted = np.all(beats_bins & beats_average, axis=0)
            global_peaks.extend(p for p, keep in zip(spectrum.peaks, promoted) if keep)
        return global_peaks


def extract_peaks(signal: Signal, frame_size: int = FRAME_SIZE,
                  n_jobs: Optional[int] = None) -> Sequence[Peak]:
    """Global peaks of *signal*, ordered by frame then bin."""
    return Spectrogram(signal, frame_size=frame_size, n_jobs=n_jobs).peaks
