import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .config import DEFAULT_PROBE_CONFIG, FRAME_SIZE, ProbeConfig
from .errors import InvalidSignal, TransformFailure
from .hashing import ProbeExtractor
from .matching import MatchResults
from .spectrum import Spectrogram
from .types import HashPoint, Probe, ProbeDataPoint, Signal

logger = logging.getLogger(__name__)

# insertion-ordered set of data points
Bucket = Dict[ProbeDataPoint, None]


class FingerprintIndex:
    """
    Inverted index from Probe to the (track, anchor frame) points where it occurs.

    Concurrent ``index_track`` calls are safe: bucket writes are serialized.
    Queries are read-only and may run concurrently with each other, but not
    with indexing unless the caller provides its own exclusion.
    """

    def __init__(self, probe_config: ProbeConfig = DEFAULT_PROBE_CONFIG,
                 frame_size: int = FRAME_SIZE, n_jobs: Optional[int] = None):
        self.probe_config = probe_config
        self.frame_size = frame_size
        self.n_jobs = n_jobs
        self._extractor = ProbeExtractor(probe_config)
        self._buckets: Dict[Probe, Bucket] = {}
        self._track_ids: Dict[int, None] = {}
        self._write_lock = threading.Lock()

    # ---------- pipeline ---------- #

    def hash_points(self, signal: Signal) -> List[HashPoint]:
        """Spectrogram -> peaks -> probes for one signal."""
        spectrogram = Spectrogram(signal, frame_size=self.frame_size, n_jobs=self.n_jobs)
        return self._extractor.extract(spectrogram.peaks)

    def _validate(self, signal: Signal) -> None:
        if len(signal) == 0:
            raise InvalidSignal(f"Signal '{signal.name}' has no samples")

    # ---------- write path ---------- #

    def index_track(self, signal: Signal, track_id: int) -> int:
        """
        Add every probe of *signal* to the index under *track_id*.

        Re-indexing the same track is idempotent.

        Returns:
            Number of hash points generated from the signal
        """
        if track_id < 0:
            raise ValueError(f"Track id must be non-negative, got {track_id}")
        self._validate(signal)
        if signal.num_frames(self.frame_size) == 0:
            raise TransformFailure(
                f"Signal '{signal.name}' has {len(signal)} samples, "
                f"fewer than one frame of {self.frame_size}"
            )

        hash_points = self.hash_points(signal)

        with self._write_lock:
            buckets = self._buckets
            for probe, anchor_time in hash_points:
                bucket = buckets.get(probe)
                if bucket is None:
                    bucket = buckets[probe] = {}
                bucket.setdefault(ProbeDataPoint(track_id, anchor_time), None)
            self._track_ids.setdefault(track_id, None)

        logger.debug("Indexed track %d ('%s'): %d hash points",
                     track_id, signal.name, len(hash_points))
        return len(hash_points)

    def index_tracks(self, items: Iterable[Tuple[Signal, int]],
                     cancel: Optional[threading.Event] = None,
                     progress: bool = True) -> Dict[int, int]:
        """
        Index a batch of (signal, track_id) pairs.

        Args:
            items: Signals with their track ids
            cancel: When set, stops the batch before the next track starts
            progress: Show a tqdm progress bar

        Returns:
            {track_id: number of hash points} for the tracks indexed
        """
        counts: Dict[int, int] = {}
        for signal, track_id in tqdm(items, desc="Indexing tracks", unit="track",
                                     disable=not progress):
            if cancel is not None and cancel.is_set():
                logger.info("Indexing cancelled after %d tracks", len(counts))
                break
            counts[track_id] = self.index_track(signal, track_id)
        return counts

    def remove_track(self, track_id: int) -> int:
        """Drop every data point of *track_id*. Returns how many were removed."""
        removed = 0
        with self._write_lock:
            for probe in list(self._buckets):
                bucket = self._buckets[probe]
                stale = [p for p in bucket if p.track_id == track_id]
                for point in stale:
                    del bucket[point]
                removed += len(stale)
                if not bucket:
                    del self._buckets[probe]
            self._track_ids.pop(track_id, None)
        return removed

    # ---------- read path ---------- #

    def query(self, signal: Signal) -> MatchResults:
        """Vote, per indexed track, for the offset of every colliding probe."""
        self._validate(signal)
        results = MatchResults(signal.name, signal.sample_rate, self.frame_size)
        if signal.num_frames(self.frame_size) == 0:
            return results

        buckets = self._buckets
        for probe, anchor_time in self.hash_points(signal):
            bucket = buckets.get(probe)
            if bucket:
                results.tally(anchor_time, bucket)
        return results

    # ---------- introspection ---------- #

    def bucket(self, probe: Probe) -> List[ProbeDataPoint]:
        return list(self._buckets.get(probe, ()))

    def __contains__(self, probe) -> bool:
        return probe in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    @property
    def num_data_points(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    @property
    def track_ids(self) -> List[int]:
        return list(self._track_ids)

    def __repr__(self):
        return (f"FingerprintIndex(tracks={len(self._track_ids)}, probes={len(self)}, "
                f"data_points={self.num_data_points})")
