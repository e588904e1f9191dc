"""Read-time streak figures derived from the practice_streaks date set.

This is the strict streak: a day without practice ends it, and today
itself must be present. The write-time streak kept on user_achievements
allows one day of grace instead (see ledger.advance_write_streak); the two
are reported separately.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class PracticeStreakSummary:
    current_streak: int = 0
    longest_streak: int = 0
    consistency_percent: int = 0

    @property
    def consistency(self) -> str:
        return f"{self.consistency_percent}%"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(value + 0.5)


def current_streak(dates: set[date], today: date) -> int:
    """Consecutive practiced days ending at today; 0 if today is missing."""
    streak = 0
    check = today
    while check in dates:
        streak += 1
        check -= timedelta(days=1)
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    """Longest run of consecutive days. Duplicates are ignored."""
    longest = 0
    run = 0
    previous: date | None = None
    for d in sorted(set(dates)):
        if previous is not None and (d - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = d
    return longest


def consistency_percent(dates: set[date], today: date) -> int:
    """Practiced days this calendar month over days elapsed so far this month."""
    practiced = sum(1 for d in dates if d.year == today.year and d.month == today.month)
    return round_half_up(100 * practiced / today.day)


def compute_practice_streak(dates: Iterable[date], today: date) -> PracticeStreakSummary:
    """Derive current/longest streak and monthly consistency from practice dates."""
    unique = set(dates)
    if not unique:
        return PracticeStreakSummary()
    return PracticeStreakSummary(
        current_streak=current_streak(unique, today),
        longest_streak=longest_streak(unique),
        consistency_percent=consistency_percent(unique, today),
    )
