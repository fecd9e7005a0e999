"""Unit tests for candidate spacing."""

from parasect.utils.spacing import choose_candidates


class TestChooseCandidates:
    def test_single_candidate_is_midpoint(self):
        assert choose_candidates(0, 10, 1) == [5]

    def test_three_candidates_split_into_four_parts(self):
        assert choose_candidates(50, 500, 3) == [162, 275, 388]

    def test_parts_are_roughly_equal(self):
        low, high, count = 0, 999, 7
        points = choose_candidates(low, high, count)
        edges = [low - 1] + points + [high + 1]
        pieces = [b - a - 1 for a, b in zip(edges, edges[1:])]

        assert len(points) == count
        assert max(pieces) - min(pieces) <= 1

    def test_never_more_than_available(self):
        assert choose_candidates(0, 2, 5) == [0, 1, 2]

    def test_busy_indices_are_skipped_and_split_the_interval(self):
        assert choose_candidates(0, 10, 1, busy=[5]) == [2]
        assert choose_candidates(0, 10, 2, busy=[5]) == [2, 8]

    def test_busy_indices_outside_interval_are_ignored(self):
        assert choose_candidates(0, 10, 1, busy=[20, -4]) == [5]

    def test_all_busy_returns_nothing(self):
        assert choose_candidates(0, 2, 3, busy=[0, 1, 2]) == []

    def test_empty_interval_or_no_slots(self):
        assert choose_candidates(5, 4, 2) == []
        assert choose_candidates(0, 10, 0) == []

    def test_largest_gap_gets_the_points(self):
        # [0, 2] is small, [4, 100] is large: the new point goes to the large gap.
        assert choose_candidates(0, 100, 1, busy=[3]) == [52]

    def test_results_are_unique_sorted_and_in_range(self):
        for count in range(1, 12):
            points = choose_candidates(-20, 20, count, busy=[-7, 0, 13])
            assert points == sorted(set(points))
            assert all(-20 <= p <= 20 for p in points)
            assert not {-7, 0, 13} & set(points)

    def test_huge_ranges(self):
        points = choose_candidates(0, 10**40, 3)
        assert len(points) == 3
        assert points[0] < points[1] < points[2]
