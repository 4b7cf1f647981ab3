import numpy as np
import pytest

from probefinder.errors import InvalidSignal
from probefinder.types import Peak, Probe, ProbeDataPoint, Signal


class TestPeak:

    def test_power_takes_no_part_in_equality(self):
        assert Peak(3, 40, 1.0) == Peak(3, 40, 99.0)
        assert hash(Peak(3, 40, 1.0)) == hash(Peak(3, 40, 99.0))

    def test_ordered_by_time_then_frequency(self):
        peaks = [Peak(2, 5), Peak(0, 30), Peak(2, 1), Peak(0, 4)]
        assert sorted(peaks) == [Peak(0, 4), Peak(0, 30), Peak(2, 1), Peak(2, 5)]


class TestProbe:

    def test_structural_equality(self):
        assert Probe(1, 10, 12) == Probe(1, 10, 12)
        assert Probe(1, 10, 12) != Probe(1, 12, 10)
        assert len({Probe(1, 10, 12), Probe(1, 10, 12), Probe(2, 10, 12)}) == 2

    def test_data_point_hashable(self):
        points = {ProbeDataPoint(0, 3), ProbeDataPoint(0, 3), ProbeDataPoint(1, 3)}
        assert len(points) == 2


class TestSignal:

    def test_samples_are_float64_and_read_only(self):
        signal = Signal([0, 1, 0, -1], 8000, "ints")
        assert signal.samples.dtype == np.float64
        with pytest.raises(ValueError):
            signal.samples[0] = 0.5

    def test_caller_array_is_not_shared(self):
        raw = np.zeros(16)
        signal = Signal(raw, 8000)
        raw[0] = 1.0
        assert signal.samples[0] == 0.0

    def test_frames_and_duration(self):
        signal = Signal(np.zeros(44100 * 2), 44100.0)
        assert signal.duration == 2.0
        assert signal.num_frames() == 86
        assert signal.num_frames(2048) == 43
        assert signal.hz_per_bin() == pytest.approx(44100.0 / 1024)

    def test_multichannel_samples_are_invalid(self):
        with pytest.raises(InvalidSignal):
            Signal(np.zeros((2, 1024)), 44100.0, "stereo")

    @pytest.mark.parametrize("sample_rate", [0, -44100.0])
    def test_sample_rate_must_be_positive(self, sample_rate):
        with pytest.raises(ValueError):
            Signal(np.zeros(1024), sample_rate)
