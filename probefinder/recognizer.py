import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from tqdm import tqdm

from .audio import cut_audio, inject_noise, load_signal
from .base import BaseSongRecognizer
from .catalog import TrackCatalog, TrackInfo
from .config import (AUDIO_PATTERN, DEFAULT_PROBE_CONFIG, FRAME_SIZE, MIN_MATCH_RATE,
                     MIN_VOTES, ProbeConfig)
from .errors import ProbeFinderError
from .indexing import FingerprintIndex
from .types import Signal

logger = logging.getLogger(__name__)


class Timer:
    """Context manager for timing code blocks with optional debug logging."""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.timings: Dict[str, float] = {}

    @contextmanager
    def measure(self, label: str):
        """Time a block of code and optionally log the result."""
        start = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start
        self.timings[label] = elapsed
        if self.debug:
            logger.info("%s: %.4fs", label, elapsed)

    def log(self, message: str, *args):
        """Log a message only if debug mode is enabled."""
        if self.debug:
            logger.info(message, *args)

    @property
    def total(self) -> float:
        return sum(self.timings.values())


class ProbeRecognizer(BaseSongRecognizer):
    """
    Peak-pair probe fingerprinting with offset-histogram matching.

    Keeps a TrackCatalog (id -> description) next to a FingerprintIndex
    (probe -> occurrences). Both live in memory only.
    """

    def __init__(self, probe_config: ProbeConfig = DEFAULT_PROBE_CONFIG,
                 frame_size: int = FRAME_SIZE,
                 min_match_rate: float = MIN_MATCH_RATE,
                 min_votes: int = MIN_VOTES,
                 n_jobs: Optional[int] = None):
        """
        Args:
            probe_config: Target-zone selectivity for probe extraction
            frame_size: Samples per analysis frame
            min_match_rate: Winners below this match rate are reported as no match
            min_votes: Winners with fewer votes at their best offset are reported as no match
            n_jobs: Parallel jobs for per-frame spectra (None = sequential)
        """
        self.catalog = TrackCatalog()
        self.index = FingerprintIndex(probe_config, frame_size=frame_size, n_jobs=n_jobs)
        self.min_match_rate = min_match_rate
        self.min_votes = min_votes

    @property
    def name(self) -> str:
        return "Probe"

    @property
    def num_indexed_songs(self) -> int:
        return len(self.catalog)

    # ---------- indexing ---------- #

    def index_signal(self, signal: Signal, description: Optional[str] = None) -> TrackInfo:
        """Catalogue *signal* under a fresh track id and index its probes."""
        info = self.catalog.add(description if description is not None else signal.name)
        try:
            count = self.index.index_track(signal, info.track_id)
        except ProbeFinderError:
            self.catalog.remove(info.track_id)
            raise
        self.catalog.set_hash_points(info.track_id, count)
        logger.debug("Indexed '%s' as track %d (%d hash points)",
                     info.description, info.track_id, count)
        return info

    def index_song(self, audio_path: Path) -> Optional[int]:
        """Add a single song to the index. Already-catalogued names are skipped."""
        audio_path = Path(audio_path)
        song_name = audio_path.stem
        if self.catalog.find(song_name) is not None:
            return None

        signal = load_signal(audio_path)
        return self.index_signal(signal, song_name).track_id

    def index_folder(self, folder: Path, pattern: str = AUDIO_PATTERN) -> int:
        """Index all songs in a folder. Unreadable or too-short files are skipped."""
        audio_paths = sorted(Path(folder).glob(pattern))
        count = 0
        for audio_path in tqdm(audio_paths, desc="Indexing songs", unit="song"):
            try:
                if self.index_song(audio_path) is not None:
                    count += 1
            except (ProbeFinderError, RuntimeError, OSError) as e:
                logger.warning("Skipping %s: %s", audio_path.name, e)
        logger.info("Indexed %d of %d files from %s", count, len(audio_paths), folder)
        return count

    def remove_song(self, track_id: int) -> TrackInfo:
        info = self.catalog.remove(track_id)
        self.index.remove_track(track_id)
        return info

    # ---------- recognition ---------- #

    def recognize(
        self,
        query_path: Path,
        clip_length_sec: Optional[float] = None,
        snr_db: Optional[float] = None,
        debug: bool = False,
        seed: Optional[int] = None,
    ) -> Tuple[Optional[str], float, Dict[str, Any]]:
        """
        Recognize a song from an audio query.

        Args:
            query_path: Path to the audio file to recognize
            clip_length_sec: Optional clip length in seconds
            snr_db: Optional SNR for noise injection
            debug: If True, log timing information for each step
            seed: Seed for clip position and noise

        Returns:
            Tuple of (song_name, match_rate, metadata)
        """
        timer = Timer(debug=debug)

        with timer.measure("Load audio"):
            signal = load_signal(query_path)

        if clip_length_sec is not None:
            with timer.measure("Cut audio"):
                signal = cut_audio(signal, clip_length_sec,
                                   seed=seed if seed is not None else 42)

        if snr_db is not None:
            with timer.measure("Inject noise"):
                signal = inject_noise(signal, snr_db, seed=seed)

        return self.recognize_signal(signal, timer=timer)

    def recognize_signal(
        self,
        signal: Signal,
        timer: Optional[Timer] = None,
    ) -> Tuple[Optional[str], float, Dict[str, Any]]:
        """Match an already-decoded signal against the index."""
        timer = timer or Timer()

        with timer.measure("Hash matching and voting"):
            results = self.index.query(signal)

        with timer.measure("Scoring"):
            best = results.best_match()

        timer.log("  Candidate songs: %d", len(results))
        timer.log("  Total votes: %d", results.total_votes())

        accepted = (
            best is not None
            and best.match_rate >= self.min_match_rate
            and best.vote_count >= self.min_votes
        )
        song_name = self.catalog.get(best.track_id).description if accepted else None
        match_rate = best.match_rate if accepted else 0.0

        timer.log("Total recognition time: %.4fs", timer.total)

        metadata = {
            "track_id": best.track_id if accepted else None,
            "num_candidate_songs": len(results),
            "num_total_votes": results.total_votes(),
            "best_song_votes": best.vote_count if best else 0,
            "best_song_total_votes": best.total_votes if best else 0,
            "best_song_match_rate": best.match_rate if best else 0.0,
            "offset_frames": best.offset_frames if accepted else None,
            "offset_seconds": best.offset_seconds if accepted else None,
            "best_song_offset_distribution": (
                results.histogram(best.track_id).as_dict() if best else {}
            ),
            "timings": timer.timings,
            "total_time": timer.total,
        }
        return song_name, float(match_rate), metadata
