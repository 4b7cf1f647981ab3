# ---------- CONFIG ---------- #

from dataclasses import dataclass

# Samples per analysis frame. Changing it invalidates every existing index.
FRAME_SIZE = 1024
POWER_SIZE = FRAME_SIZE // 2

# A peak must beat its competitors (neighbouring candidates in the same frame,
# the same bin in neighbouring frames, and their average power) by this much.
PEAK_THRESHOLD = 1.25
# +/- window, in candidate positions inside a frame and in frames across time
PEAK_NEIGHBOURHOOD = 3

# Target zone of a probe: anchor frame + TIME_OFFSET, anchor bin + FREQ_OFFSET
TIME_OFFSET = 10
FREQ_OFFSET = 5
# Loosest selectivity allowed when stepping a ProbeConfig
MAX_TIME_OFFSET = 10
MAX_FREQ_OFFSET = 5

AUDIO_PATTERN = "*.wav"
SUPPORTED_SUFFIXES = (".wav", ".flac", ".ogg", ".aiff", ".aif", ".mp3")

# Matches below these are reported as "no match" by the recognizer
MIN_MATCH_RATE = 0.0
MIN_VOTES = 1


@dataclass(frozen=True)
class ProbeConfig:
    """Immutable selectivity settings for probe extraction.

    Smaller offsets give fewer, more selective probes; larger offsets give
    more, less selective ones.
    """
    time_offset: int = TIME_OFFSET
    freq_offset: int = FREQ_OFFSET

    def __post_init__(self):
        if self.time_offset < 1 or self.freq_offset < 1:
            raise ValueError(
                f"Probe offsets must be >= 1, got time_offset={self.time_offset}, "
                f"freq_offset={self.freq_offset}"
            )

    def increase_selectivity(self) -> "ProbeConfig":
        """Step both offsets down by one. Reaching the floor resets both to 1."""
        time_offset = self.time_offset - 1
        freq_offset = self.freq_offset - 1
        if time_offset <= 0 or freq_offset <= 0:
            return ProbeConfig(1, 1)
        return ProbeConfig(time_offset, freq_offset)

    def decrease_selectivity(self) -> "ProbeConfig":
        """Step both offsets up by one, capped at the defaults."""
        time_offset = self.time_offset + 1
        freq_offset = self.freq_offset + 1
        if time_offset > MAX_TIME_OFFSET or freq_offset > MAX_FREQ_OFFSET:
            return ProbeConfig(MAX_TIME_OFFSET, MAX_FREQ_OFFSET)
        return ProbeConfig(time_offset, freq_offset)

    def stepped(self, steps: int) -> "ProbeConfig":
        """Apply *steps* selectivity steps: positive is more selective, negative less."""
        config = self
        for _ in range(abs(steps)):
            config = config.increase_selectivity() if steps > 0 else config.decrease_selectivity()
        return config


DEFAULT_PROBE_CONFIG = ProbeConfig()
