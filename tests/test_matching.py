import numpy as np
import pytest

from probefinder.matching import Histogram, MatchResults
from probefinder.types import MaxMatch, ProbeDataPoint


def results_from(votes, sample_rate=44100.0):
    """Build MatchResults from {track_id: [offset, ...]}."""
    results = MatchResults("query", sample_rate=sample_rate)
    for track_id, offsets in votes.items():
        for offset in offsets:
            # query anchor = offset, indexed anchor = 0
            results.tally(offset, [ProbeDataPoint(track_id, 0)])
    return results


class TestHistogram:

    def test_vote_and_total(self):
        h = Histogram()
        for offset in [3, 3, -2, 3, 7]:
            h.vote(offset)
        assert h.count(3) == 3
        assert h.count(99) == 0
        assert h.total_votes() == 5
        assert len(h) == 3
        assert h.best_offset() == MaxMatch(3, 3)
        assert h.match_rate() == pytest.approx(0.6)

    def test_ties_go_to_smallest_offset(self):
        h = Histogram()
        for offset in [12, 4, -6, 12, 4, -6]:
            h.vote(offset)
        assert h.best_offset() == MaxMatch(-6, 2)

    def test_tie_breaking_ignores_insertion_order(self):
        a, b = Histogram(), Histogram()
        for offset in [5, 1, 9]:
            a.vote(offset)
        for offset in [9, 5, 1]:
            b.vote(offset)
        assert a.best_offset() == b.best_offset() == MaxMatch(1, 1)

    def test_empty_histogram(self):
        h = Histogram()
        assert h.total_votes() == 0
        assert h.match_rate() == 0.0
        with pytest.raises(ValueError):
            h.best_offset()


class TestMatchResults:

    def test_tally_computes_query_minus_indexed_offset(self):
        results = MatchResults("q")
        results.tally(10, [ProbeDataPoint(3, 4), ProbeDataPoint(3, 6), ProbeDataPoint(7, 10)])
        assert results.histogram(3).as_dict() == {4: 1, 6: 1}
        assert results.histogram(7).as_dict() == {0: 1}
        assert results.histogram(8) is None
        assert sorted(results) == [3, 7]
        assert 3 in results and 8 not in results

    def test_best_match_uses_match_rate_not_raw_votes(self):
        results = results_from({1: [0] * 10 + [1] * 10 + [2] * 10, 2: [5] * 4})
        best = results.best_match()
        assert best.track_id == 2
        assert best.vote_count == 4
        assert best.match_rate == 1.0
        assert best.offset_frames == 5
        assert best.offset_seconds == pytest.approx(5 * 1024 / 44100.0)

    def test_equal_match_rate_prefers_more_votes(self):
        results = results_from({1: [3] * 2, 2: [8] * 9})
        assert results.best_match().track_id == 2

    def test_full_tie_prefers_lowest_track_id(self):
        results = results_from({5: [1, 1], 4: [2, 2]})
        assert results.best_match().track_id == 4

    def test_ranked_orders_all_candidates(self):
        results = results_from({1: [0, 0, 1], 2: [4, 4], 3: [0, 1, 2, 3]})
        assert [m.track_id for m in results.ranked()] == [2, 1, 3]

    def test_no_votes_means_no_match(self):
        results = MatchResults("q")
        assert results.best_match() is None
        assert results.ranked() == []
        assert results.total_votes() == 0

    def test_negative_offsets_convert_to_negative_seconds(self):
        results = results_from({0: [-20] * 3}, sample_rate=22050.0)
        assert results.best_match().offset_seconds == pytest.approx(-20 * 1024 / 22050.0)

    def test_match_rate_bounds_and_vote_conservation(self):
        rng = np.random.default_rng(3)
        votes = {tid: list(rng.integers(-30, 30, size=rng.integers(1, 50)))
                 for tid in range(6)}
        results = results_from(votes)
        for match in results.ranked():
            assert 0.0 <= match.match_rate <= 1.0
            assert match.total_votes == len(votes[match.track_id])
            assert results.histogram(match.track_id).total_votes() == len(votes[match.track_id])
        assert results.total_votes() == sum(len(v) for v in votes.values())
