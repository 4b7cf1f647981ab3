import threading
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .errors import UnknownTrack


@dataclass
class TrackInfo:
    track_id: int
    description: str
    num_hash_points: int = 0


class TrackCatalog:
    """Assigns unique, monotonically increasing track ids and keeps their descriptions."""

    def __init__(self):
        self._tracks: Dict[int, TrackInfo] = {}
        self._by_description: Dict[str, int] = {}
        self._next_id = 0
        self._lock = threading.Lock()

    def add(self, description: str) -> TrackInfo:
        """Register a new track, even if the description is already known."""
        with self._lock:
            info = TrackInfo(self._next_id, description)
            self._next_id += 1
            self._tracks[info.track_id] = info
            self._by_description.setdefault(description, info.track_id)
            return info

    def get(self, track_id: int) -> TrackInfo:
        try:
            return self._tracks[track_id]
        except KeyError:
            raise UnknownTrack(track_id) from None

    def find(self, description: str) -> Optional[TrackInfo]:
        track_id = self._by_description.get(description)
        return None if track_id is None else self._tracks[track_id]

    def set_hash_points(self, track_id: int, count: int) -> None:
        self.get(track_id).num_hash_points = count

    def remove(self, track_id: int) -> TrackInfo:
        with self._lock:
            info = self._tracks.pop(track_id, None)
            if info is None:
                raise UnknownTrack(track_id)
            if self._by_description.get(info.description) == track_id:
                del self._by_description[info.description]
            return info

    def __contains__(self, track_id) -> bool:
        return track_id in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[TrackInfo]:
        return iter(list(self._tracks.values()))
