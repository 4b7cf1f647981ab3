"""
ProbeFinder - acoustic fingerprinting and song identification.

The pipeline:
1. Split the signal into fixed-size frames and compute each frame's power spectrum
2. Keep peaks that dominate both their spectral and their temporal neighbourhood
3. Pair nearby peaks into translation-invariant probes (dt, f1, f2)
4. Index probes per track, and identify queries by voting over time offsets
"""

from .config import FRAME_SIZE, PEAK_THRESHOLD, ProbeConfig
from .errors import InvalidSignal, ProbeFinderError, TransformFailure, UnknownTrack
from .hashing import ProbeExtractor
from .indexing import FingerprintIndex
from .matching import Histogram, Match, MatchResults
from .spectrum import PowerSpectrum, Spectrogram
from .types import HashPoint, MaxMatch, Peak, Probe, ProbeDataPoint, Signal

__all__ = [
    'FRAME_SIZE', 'PEAK_THRESHOLD', 'ProbeConfig',
    'ProbeFinderError', 'InvalidSignal', 'TransformFailure', 'UnknownTrack',
    'Signal', 'Peak', 'Probe', 'ProbeDataPoint', 'HashPoint', 'MaxMatch',
    'PowerSpectrum', 'Spectrogram', 'ProbeExtractor', 'FingerprintIndex',
    'Histogram', 'MatchResults', 'Match',
]
