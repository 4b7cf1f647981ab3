"""
Offset voting and best-match selection.

Every query probe found in the index votes, for each stored occurrence, for
the offset ``query_anchor - indexed_anchor`` of that occurrence's track. A
true match piles its votes on a single offset; the candidate with the highest
share of its votes on its best offset (its match rate) wins.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from .config import FRAME_SIZE
from .types import MaxMatch, ProbeDataPoint


class Histogram:
    """Vote counts per time offset (in frames) for one (query, track) pair."""

    def __init__(self):
        self._votes: Counter = Counter()

    def vote(self, offset: int) -> None:
        self._votes[offset] += 1

    def count(self, offset: int) -> int:
        return self._votes.get(offset, 0)

    def total_votes(self) -> int:
        return sum(self._votes.values())

    def best_offset(self) -> MaxMatch:
        """Offset with the most votes. Ties go to the smallest offset."""
        if not self._votes:
            raise ValueError("Empty histogram has no best offset")
        delta, count = max(self._votes.items(), key=lambda kv: (kv[1], -kv[0]))
        return MaxMatch(delta, count)

    def match_rate(self) -> float:
        total = self.total_votes()
        if total == 0:
            return 0.0
        return self.best_offset().count / total

    def as_dict(self) -> Dict[int, int]:
        return dict(sorted(self._votes.items()))

    def __len__(self) -> int:
        return len(self._votes)

    def __repr__(self):
        return f"Histogram({self.as_dict()})"


@dataclass(frozen=True)
class Match:
    track_id: int
    offset_frames: int
    offset_seconds: float
    vote_count: int
    total_votes: int
    match_rate: float


class MatchResults:
    """Per-track offset histograms collected for one query."""

    def __init__(self, name: str = "", sample_rate: float = 44100.0,
                 frame_size: int = FRAME_SIZE):
        self.name = name
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self._histograms: Dict[int, Histogram] = {}

    def tally(self, query_anchor: int, data_points: Iterable[ProbeDataPoint]) -> None:
        """Record one vote per stored occurrence of a probe seen at *query_anchor*."""
        for point in data_points:
            histogram = self._histograms.get(point.track_id)
            if histogram is None:
                histogram = self._histograms[point.track_id] = Histogram()
            histogram.vote(query_anchor - point.frame_index)

    def histogram(self, track_id: int) -> Optional[Histogram]:
        return self._histograms.get(track_id)

    @property
    def track_ids(self) -> List[int]:
        return list(self._histograms)

    def total_votes(self) -> int:
        return sum(h.total_votes() for h in self._histograms.values())

    def __len__(self) -> int:
        return len(self._histograms)

    def __contains__(self, track_id) -> bool:
        return track_id in self._histograms

    def __iter__(self) -> Iterator[int]:
        return iter(self._histograms)

    def _to_match(self, track_id: int, histogram: Histogram) -> Match:
        best = histogram.best_offset()
        total = histogram.total_votes()
        return Match(
            track_id=track_id,
            offset_frames=best.delta,
            offset_seconds=best.delta * self.frame_size / self.sample_rate,
            vote_count=best.count,
            total_votes=total,
            match_rate=best.count / total,
        )

    def ranked(self) -> List[Match]:
        """
        Candidates best first: highest match rate, then most votes at the
        best offset, then lowest track id.
        """
        matches = [self._to_match(tid, h) for tid, h in self._histograms.items()
                   if h.total_votes() > 0]
        matches.sort(key=lambda m: (-m.match_rate, -m.vote_count, m.track_id))
        return matches

    def best_match(self) -> Optional[Match]:
        """The identified track, or None when no track received any vote."""
        ranked = self.ranked()
        return ranked[0] if ranked else None

    def __repr__(self):
        return f"MatchResults(name={self.name!r}, candidates={len(self)}, votes={self.total_votes()})"
