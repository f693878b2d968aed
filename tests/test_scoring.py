"""Tests for the platform scoring rules."""

import pytest

from codescore.services import scoring


class TestLeetCode:
    def test_total_accepted_and_score(self):
        buckets = [
            {"difficulty": "Easy", "count": 50},
            {"difficulty": "Medium", "count": 30},
            {"difficulty": "Hard", "count": 5},
        ]
        solved = scoring.leetcode_total_accepted(buckets)
        assert solved == 85
        assert scoring.leetcode_score(solved) == 850

    def test_aggregate_bucket_is_not_double_counted(self):
        buckets = [
            {"difficulty": "All", "count": 85},
            {"difficulty": "Easy", "count": 50},
            {"difficulty": "Medium", "count": 30},
            {"difficulty": "Hard", "count": 5},
        ]
        assert scoring.leetcode_total_accepted(buckets) == 85

    def test_rating_prefers_star_rating(self):
        assert scoring.leetcode_rating({"starRating": 4, "reputation": 120}) == 4

    def test_rating_falls_back_to_reputation_then_zero(self):
        assert scoring.leetcode_rating({"starRating": 0, "reputation": 120}) == 120
        assert scoring.leetcode_rating({}) == 0


class TestCodeforces:
    def test_typical_profile(self):
        assert scoring.codeforces_score(problems_solved=25, rating=1450, contests=3) == 3800

    def test_unrated_user_gets_no_rating_bonus(self):
        assert scoring.codeforces_score(problems_solved=2, rating=0, contests=0) == 200

    def test_solved_problems_are_distinct_ok_pairs(self):
        submissions = [
            {"verdict": "OK", "problem": {"contestId": 1, "index": "A"}},
            {"verdict": "OK", "problem": {"contestId": 1, "index": "A"}},
            {"verdict": "WRONG_ANSWER", "problem": {"contestId": 1, "index": "B"}},
            {"verdict": "OK", "problem": {"contestId": 1, "index": "B"}},
            {"verdict": "OK", "problem": {"contestId": 2, "index": "A"}},
        ]
        assert scoring.codeforces_solved_problems(submissions) == 3

    def test_contests_counted_only_as_contestant(self):
        submissions = [
            {"contestId": 1, "author": {"participantType": "CONTESTANT"}},
            {"contestId": 1, "author": {"participantType": "CONTESTANT"}},
            {"contestId": 2, "author": {"participantType": "PRACTICE"}},
            {"contestId": 3, "author": {"participantType": "VIRTUAL"}},
            {"contestId": 4, "author": {"participantType": "CONTESTANT"}},
        ]
        assert scoring.codeforces_contests_as_contestant(submissions) == 2


class TestCodeChef:
    def test_typical_profile(self):
        assert scoring.codechef_score(rating=1500, problems_fully_solved=40, contest_count=10) == 9580
        assert scoring.codechef_stars(1500) == 3

    def test_rating_bonus_only_above_baseline(self):
        assert scoring.codechef_score(rating=1200, problems_fully_solved=10, contest_count=1) == 70
        assert scoring.codechef_score(rating=900, problems_fully_solved=10, contest_count=1) == 70

    def test_bonus_is_floored(self):
        # (1205 - 1200)^2 / 10 = 2.5
        assert scoring.codechef_score(rating=1205, problems_fully_solved=0, contest_count=0) == 2

    @pytest.mark.parametrize(
        "rating,stars",
        [(None, 1), (0, 1), (1399, 1), (1400, 2), (1599, 2), (1600, 3), (1999, 4), (2000, 5), (2499, 6), (2500, 7)],
    )
    def test_star_breakpoints(self, rating, stars):
        assert scoring.codechef_stars(rating) == stars


class TestHackerRank:
    def test_practice_totals(self):
        tracks = [
            {"practice": {"score": 120.5, "rank": 3000}},
            {"practice": {"score": 80, "rank": 1500}},
            {"practice": {"score": 10, "rank": None}},
            {"contest": {"score": 999}},
        ]
        assert scoring.hackerrank_practice_totals(tracks) == (210, 1500)

    def test_no_ranked_tracks_gives_rank_zero(self):
        assert scoring.hackerrank_practice_totals([{"practice": {"score": 5}}]) == (5, 0)
        assert scoring.hackerrank_practice_totals([]) == (0, 0)

    def test_problem_count_sums_histories(self):
        assert scoring.hackerrank_problem_count({"2024-01-01": 3, "2024-01-02": 4}) == 7
        assert scoring.hackerrank_problem_count({}) == 0


def test_formulas_are_repeatable():
    submissions = [
        {"verdict": "OK", "contestId": 5, "problem": {"contestId": 5, "index": "C"}, "author": {"participantType": "CONTESTANT"}},
    ]
    first = [scoring.codeforces_solved_problems(submissions), scoring.codeforces_contests_as_contestant(submissions)]
    second = [scoring.codeforces_solved_problems(submissions), scoring.codeforces_contests_as_contestant(submissions)]
    assert first == second == [1, 1]
    assert scoring.codechef_score(1834, 211, 37) == scoring.codechef_score(1834, 211, 37)
