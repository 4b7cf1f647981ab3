"""
Value types shared by the fingerprinting pipeline.

All of them are structural: equality and hashing come from their defining
fields only, never from identity.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from .config import FRAME_SIZE
from .errors import InvalidSignal


@dataclass(frozen=True, eq=False)
class Signal:
    """Normalized mono samples in [-1, 1] plus their sample rate and a name."""
    samples: np.ndarray
    sample_rate: float
    name: str = ""

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise InvalidSignal(
                f"Signal '{self.name}' must be mono (1-D), got shape {samples.shape}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate

    def num_frames(self, frame_size: int = FRAME_SIZE) -> int:
        return len(self.samples) // frame_size

    def hz_per_bin(self, frame_size: int = FRAME_SIZE) -> float:
        return self.sample_rate / frame_size


@dataclass(frozen=True, order=True)
class Peak:
    """A (frame, bin) location that dominates its spectral/temporal neighbourhood.

    Ordered by time, then frequency. Power takes no part in equality.
    """
    time: int
    frequency: int
    power: float = field(default=0.0, compare=False)


@dataclass(frozen=True, order=True)
class Probe:
    """Translation-invariant fingerprint built from an anchor peak and a later peak."""
    dt: int
    first_frequency: int
    second_frequency: int

    @classmethod
    def from_peaks(cls, anchor: Peak, other: Peak) -> "Probe":
        return cls(
            dt=abs(other.time - anchor.time),
            first_frequency=anchor.frequency,
            second_frequency=other.frequency,
        )


@dataclass(frozen=True)
class ProbeDataPoint:
    """Where, in one indexed track, a probe's anchor peak occurs."""
    track_id: int
    frame_index: int


class HashPoint(NamedTuple):
    probe: Probe
    anchor_time: int


class MaxMatch(NamedTuple):
    delta: int
    count: int
