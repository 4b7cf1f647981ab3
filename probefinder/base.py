"""
Base interface for song recognizers.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


class BaseSongRecognizer(ABC):
    """
    Abstract base class for song recognition systems.

    A recognizer owns a catalog of indexed songs and answers "which of them
    is this clip?". Storage of the index is left to the caller.
    """

    @abstractmethod
    def index_song(self, audio_path: Path) -> Optional[int]:
        """
        Add a single song to the index.

        Args:
            audio_path: Path to the audio file to index

        Returns:
            The song's track id, or None if it was already indexed
        """

    @abstractmethod
    def index_folder(self, folder: Path, pattern: str = "*.wav") -> int:
        """
        Index all songs in a folder matching the given pattern.

        Args:
            folder: Path to folder containing audio files
            pattern: Glob pattern for audio files

        Returns:
            Number of songs successfully indexed
        """

    @abstractmethod
    def recognize(
        self,
        query_path: Path,
        clip_length_sec: Optional[float] = None,
        snr_db: Optional[float] = None,
    ) -> Tuple[Optional[str], float, Dict[str, Any]]:
        """
        Recognize a song from an audio query.

        Args:
            query_path: Path to the query audio file
            clip_length_sec: Optional clip length to use (for testing with shorter clips)
            snr_db: Optional SNR in dB for noise injection (for testing robustness)

        Returns:
            Tuple of (song_name, confidence_score, metadata_dict)
            - song_name: Name of the recognized song, or None if not found
            - confidence_score: Match rate of the winner in [0, 1]
            - metadata_dict: Additional information (votes, offset, timing)
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this recognition approach."""

    @property
    @abstractmethod
    def num_indexed_songs(self) -> int:
        """Return the number of songs currently indexed."""
