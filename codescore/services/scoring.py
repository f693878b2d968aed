"""
Platform scoring rules.

Pure functions over raw platform data: no I/O, no shared state. Given the same
inputs they always return the same numbers, whatever order they are called in.
"""

from collections.abc import Iterable, Mapping
from typing import Any

LEETCODE_POINTS_PER_SOLVE = 10
LEETCODE_AGGREGATE_BUCKET = "All"

CODEFORCES_POINTS_PER_SOLVE = 100
CODEFORCES_POINTS_PER_RATING_STEP = 50
CODEFORCES_RATING_STEP = 100
CODEFORCES_POINTS_PER_CONTEST = 200

CODECHEF_POINTS_PER_SOLVE = 2
CODECHEF_RATING_BASELINE = 1200
CODECHEF_POINTS_PER_CONTEST = 50
# (upper bound exclusive, stars); anything above the last bound is 7 stars
CODECHEF_STAR_BREAKPOINTS = ((1400, 1), (1600, 2), (1800, 3), (2000, 4), (2200, 5), (2500, 6))


# LeetCode


def leetcode_total_accepted(ac_submission_num: Iterable[Mapping[str, Any]]) -> int:
    """Sum accepted counts over the difficulty buckets, skipping the aggregate 'All' bucket."""
    return sum(
        int(bucket.get("count") or 0)
        for bucket in ac_submission_num
        if bucket.get("difficulty") != LEETCODE_AGGREGATE_BUCKET
    )


def leetcode_score(total_accepted: int) -> int:
    return total_accepted * LEETCODE_POINTS_PER_SOLVE


def leetcode_rating(profile: Mapping[str, Any]) -> int:
    """Star rating, falling back to reputation, else 0."""
    return int(profile.get("starRating") or profile.get("reputation") or 0)


# Codeforces


def codeforces_solved_problems(submissions: Iterable[Mapping[str, Any]]) -> int:
    """Distinct (contestId, index) pairs with an OK verdict."""
    solved = set()
    for submission in submissions:
        if submission.get("verdict") != "OK":
            continue
        problem = submission.get("problem") or {}
        solved.add((problem.get("contestId"), problem.get("index")))
    return len(solved)


def codeforces_contests_as_contestant(submissions: Iterable[Mapping[str, Any]]) -> int:
    contests = {
        submission.get("contestId")
        for submission in submissions
        if (submission.get("author") or {}).get("participantType") == "CONTESTANT"
    }
    contests.discard(None)
    return len(contests)


def codeforces_score(problems_solved: int, rating: int, contests: int) -> int:
    rating_bonus = (rating // CODEFORCES_RATING_STEP) * CODEFORCES_POINTS_PER_RATING_STEP if rating else 0
    return (
        problems_solved * CODEFORCES_POINTS_PER_SOLVE + rating_bonus + contests * CODEFORCES_POINTS_PER_CONTEST
    )


# CodeChef


def codechef_score(rating: int, problems_fully_solved: int, contest_count: int) -> int:
    """floor(solved*2 + (rating-1200)^2/10 + contests*50), with the bonus only above 1200."""
    squared = (rating - CODECHEF_RATING_BASELINE) ** 2 if rating > CODECHEF_RATING_BASELINE else 0
    # Integer form of the floor; the two other terms are whole numbers already.
    return (
        problems_fully_solved * CODECHEF_POINTS_PER_SOLVE
        + squared // 10
        + contest_count * CODECHEF_POINTS_PER_CONTEST
    )


def codechef_stars(rating: int | None) -> int:
    if not rating:
        return 1
    for upper_bound, stars in CODECHEF_STAR_BREAKPOINTS:
        if rating < upper_bound:
            return stars
    return 7


# HackerRank


def hackerrank_practice_totals(tracks: Iterable[Mapping[str, Any]]) -> tuple[int, int]:
    """
    Returns (score, best_rank) across all tracks.

    score is the floored sum of practice scores; best_rank is the smallest defined
    practice rank, or 0 when no track has one.
    """
    total = 0.0
    best_rank = None
    for track in tracks:
        practice = track.get("practice") or {}
        total += float(practice.get("score") or 0)
        rank = practice.get("rank")
        if rank and (best_rank is None or rank < best_rank):
            best_rank = rank
    return int(total), int(best_rank or 0)


def hackerrank_problem_count(submission_histories: Mapping[str, Any]) -> int:
    return sum(int(count or 0) for count in submission_histories.values())
