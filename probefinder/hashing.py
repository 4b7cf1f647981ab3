from typing import Iterator, List, Sequence

from .config import DEFAULT_PROBE_CONFIG, ProbeConfig
from .types import HashPoint, Peak, Probe


class ProbeExtractor:
    """
    Pairs global peaks into combinatorial probes.

    Each peak serves as an anchor. Later peaks inside the anchor's target zone
    (at most ``time_offset`` frames later, strictly higher frequency by at most
    ``freq_offset`` bins, never the same frame) are paired with it, producing
    one HashPoint(Probe(dt, f_anchor, f_target), anchor_time) per pair.
    """

    def __init__(self, config: ProbeConfig = DEFAULT_PROBE_CONFIG):
        self.config = config

    def iter_hash_points(self, peaks: Sequence[Peak]) -> Iterator[HashPoint]:
        """
        peaks: global peaks ordered by time then frequency (as a Spectrogram yields them)
        """
        time_offset = self.config.time_offset
        freq_offset = self.config.freq_offset
        n_peaks = len(peaks)

        for i in range(n_peaks):
            anchor = peaks[i]
            t_a = anchor.time
            f_a = anchor.frequency
            time_bound = t_a + time_offset
            freq_bound = f_a + freq_offset

            j = i + 1
            while j < n_peaks:
                other = peaks[j]
                if other.time > time_bound:
                    break  # peaks are time-ordered: nothing later can qualify
                if other.time != t_a and f_a < other.frequency <= freq_bound:
                    yield HashPoint(Probe(other.time - t_a, f_a, other.frequency), t_a)
                j += 1

    def extract(self, peaks: Sequence[Peak]) -> List[HashPoint]:
        return list(self.iter_hash_points(peaks))


def extract_hash_points(peaks: Sequence[Peak],
                        config: ProbeConfig = DEFAULT_PROBE_CONFIG) -> List[HashPoint]:
    return ProbeExtractor(config).extract(peaks)
