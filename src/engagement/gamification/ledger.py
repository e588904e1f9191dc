"""Points & badge evaluation over a member's engagement state.

Everything here is pure: record_event() takes a state snapshot and returns
a new one, so a caller either persists the whole result or discards it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, tzinfo
from typing import Any

from engagement.errors import InvalidInput
from engagement.gamification.badge_catalog import BADGE_CATALOG, Badge, BadgeMetrics, evaluate_badges
from engagement.gamification.week_utils import (
    as_utc,
    current_week_window,
    day_key,
    in_window,
    local_today,
    next_weekly_reset,
    parse_day_key,
    utc_now,
    week_window,
    yesterday_key,
)

logger = logging.getLogger(__name__)

_COUNTER_FIELDS = (
    "current_streak",
    "longest_streak",
    "total_sessions",
    "sessions_today",
    "sessions_this_week",
    "sessions_this_month",
)


@dataclass(frozen=True)
class MemberEngagementState:
    """Snapshot of one user_achievements row."""

    member_id: str
    user_name: str | None = None
    user_picture: str | None = None
    team_id: str | None = None
    current_streak: int = 0
    longest_streak: int = 0
    daily_points: Mapping[str, float] = field(default_factory=dict)
    total_sessions: int = 0
    sessions_today: int = 0
    sessions_this_week: int = 0
    sessions_this_month: int = 0
    last_session_date: str | None = None
    unlocked_badges: tuple[str, ...] = ()
    weekly_reset_at: datetime | None = None

    @property
    def metrics(self) -> BadgeMetrics:
        return BadgeMetrics(
            current_streak=self.current_streak,
            total_sessions=self.total_sessions,
            sessions_today=self.sessions_today,
            sessions_this_week=self.sessions_this_week,
            sessions_this_month=self.sessions_this_month,
        )


@dataclass(frozen=True)
class EventOutcome:
    state: MemberEngagementState
    newly_unlocked: tuple[str, ...] = ()


def coerce_points(value: Any) -> float:
    """Best-effort numeric conversion. Anything unusable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def iter_daily_points(daily_points: Mapping[str, Any] | None) -> Iterator[tuple[date, float]]:
    """Yield (day, points) pairs, skipping keys that are not day keys."""
    for key, value in (daily_points or {}).items():
        try:
            day = parse_day_key(key)
        except InvalidInput:
            logger.warning("Skipping malformed day key in daily_points: %r", key)
            continue
        yield day, coerce_points(value)


def clean_daily_points(daily_points: Mapping[str, Any] | None) -> dict[str, float]:
    """Day-keyed points with malformed keys dropped and values coerced."""
    return {day_key(day): points for day, points in iter_daily_points(daily_points)}


def advance_write_streak(current: int, last_session_date: str | None, today: date) -> int:
    """Streak after a session today, with one day of grace.

    Same day keeps the streak (at least 1), yesterday extends it, any older
    or missing last session restarts at 1.
    """
    today_key = day_key(today)
    if last_session_date == today_key:
        return max(current, 1)
    if last_session_date == yesterday_key(today):
        return current + 1
    return 1


def _same_month(last_session_date: str | None, today: date) -> bool:
    if not last_session_date:
        return False
    try:
        last = parse_day_key(last_session_date)
    except InvalidInput:
        return False
    return (last.year, last.month) == (today.year, today.month)


def record_event(
    state: MemberEngagementState,
    points: Any,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
    catalog: Iterable[Badge] = BADGE_CATALOG,
) -> EventOutcome:
    """Apply one recorded session (with its points) to a member's state."""
    now = as_utc(now) if now is not None else utc_now()
    today = local_today(now, tz)
    today_key = day_key(today)
    same_day = state.last_session_date == today_key

    daily_points = dict(state.daily_points)
    daily_points[today_key] = coerce_points(daily_points.get(today_key)) + coerce_points(points)

    current = advance_write_streak(state.current_streak, state.last_session_date, today)
    longest = max(state.longest_streak, current)

    week_expired = state.weekly_reset_at is None or as_utc(state.weekly_reset_at) <= now
    sessions_this_week = 1 if week_expired else state.sessions_this_week + 1
    sessions_this_month = (
        state.sessions_this_month + 1 if _same_month(state.last_session_date, today) else 1
    )

    updated = replace(
        state,
        current_streak=current,
        longest_streak=longest,
        daily_points=daily_points,
        total_sessions=state.total_sessions + 1,
        sessions_today=state.sessions_today + 1 if same_day else 1,
        sessions_this_week=sessions_this_week,
        sessions_this_month=sessions_this_month,
        last_session_date=today_key,
        weekly_reset_at=next_weekly_reset(now, tz),
    )

    unlocked, newly = evaluate_badges(updated.metrics, state.unlocked_badges, catalog)
    return EventOutcome(
        state=replace(updated, unlocked_badges=tuple(unlocked)),
        newly_unlocked=tuple(newly),
    )


def weekly_total(
    daily_points: Mapping[str, Any] | None,
    weekly_reset_at: datetime | date | str | None,
    tz: str | tzinfo | None = None,
) -> float:
    """Sum of points for days in [reset - 7d, reset)."""
    if weekly_reset_at is None:
        return 0.0
    start, end = week_window(weekly_reset_at, tz)
    return sum((points for day, points in iter_daily_points(daily_points) if in_window(day, start, end)), 0.0)


def total_points(daily_points: Mapping[str, Any] | None) -> float:
    return sum((points for _day, points in iter_daily_points(daily_points)), 0.0)


def weekly_chart(
    daily_points: Mapping[str, Any] | None,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> list[dict[str, Any]]:
    """Running total of this week's points, one item per day with points."""
    start, end = current_week_window(now, tz)
    days = sorted(
        (day, points) for day, points in iter_daily_points(daily_points) if in_window(day, start, end)
    )
    chart = []
    running = 0.0
    for day, points in days:
        running += points
        chart.append({
            "day": day.strftime("%A"),
            "date": day_key(day),
            "you": running,
        })
    return chart


def reconcile_state(state: MemberEngagementState) -> MemberEngagementState:
    """Clamp a stored state back onto the ledger invariants.

    Never raises: an inconsistent row is corrected and the anomaly logged.
    """
    fixes: dict[str, Any] = {}
    for name in _COUNTER_FIELDS:
        raw = getattr(state, name)
        value = max(_as_int(raw), 0)
        if value != raw:
            fixes[name] = value

    current = fixes.get("current_streak", state.current_streak)
    longest = fixes.get("longest_streak", state.longest_streak)
    if longest < current:
        fixes["longest_streak"] = current

    if len(set(state.unlocked_badges)) != len(state.unlocked_badges):
        fixes["unlocked_badges"] = tuple(dict.fromkeys(state.unlocked_badges))

    daily_points = clean_daily_points(state.daily_points)
    if daily_points != dict(state.daily_points):
        fixes["daily_points"] = daily_points

    if not fixes:
        return state
    logger.warning(
        "Inconsistent engagement state for member %s, correcting %s",
        state.member_id, ", ".join(sorted(fixes)),
    )
    return replace(state, **fixes)
