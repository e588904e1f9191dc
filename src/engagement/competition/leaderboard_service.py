"""Leaderboard reads and weekly league settlement.

Rankings are computed on demand from user_achievements. A member takes
part in a weekly board only while their stored weekly_reset_at equals the
boundary that closes the current week; older rows belong to a past week.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.competition.ranking import (
    DEFAULT_LIMIT,
    SCOPE_POLICIES,
    RankingCandidate,
    RankingEntry,
    RankingScope,
    assign_ranks,
    rank_members,
)
from engagement.db.models import UserAchievement
from engagement.gamification.achievement_service import BADGE_UNLOCKED_CHANNEL
from engagement.gamification.badge_catalog import league_badge_for_rank
from engagement.gamification.ledger import MemberEngagementState, total_points, weekly_total
from engagement.gamification.week_utils import as_utc, next_weekly_reset, utc_now
from engagement.redis_client import publish_event

logger = logging.getLogger(__name__)

WEEKLY_SCOPES = (RankingScope.WEEKLY, RankingScope.TEAM_WEEKLY)
TEAM_SCOPES = (RankingScope.TEAM_WEEKLY, RankingScope.TEAM_ALL_TIME)


def _candidate(row_or_state: UserAchievement | MemberEngagementState, points: float) -> RankingCandidate:
    return RankingCandidate(
        member_id=row_or_state.member_id,
        points=points,
        display_name=row_or_state.user_name,
        avatar_url=row_or_state.user_picture,
        badges=tuple(row_or_state.unlocked_badges or ()),
    )


async def load_weekly_candidates(
    db: AsyncSession,
    reset_at: datetime,
    tz: str | tzinfo | None = None,
    team_id: str | None = None,
) -> list[RankingCandidate]:
    """Members whose ledger belongs to the week closing at reset_at."""
    stmt = select(UserAchievement).where(UserAchievement.weekly_reset_at == as_utc(reset_at))
    if team_id is not None:
        stmt = stmt.where(UserAchievement.team_id == team_id)
    result = await db.execute(stmt)
    return [
        _candidate(row, weekly_total(row.daily_points, reset_at, tz))
        for row in result.scalars()
    ]


async def load_all_time_candidates(
    db: AsyncSession,
    team_id: str | None = None,
) -> list[RankingCandidate]:
    stmt = select(UserAchievement)
    if team_id is not None:
        stmt = stmt.where(UserAchievement.team_id == team_id)
    result = await db.execute(stmt)
    return [_candidate(row, total_points(row.daily_points)) for row in result.scalars()]


def viewer_candidate(
    scope: RankingScope,
    state: MemberEngagementState,
    reset_at: datetime,
    tz: str | tzinfo | None = None,
) -> RankingCandidate:
    """The viewer's own score in a scope. A stale week counts as 0."""
    if scope in WEEKLY_SCOPES:
        current = state.weekly_reset_at is not None and as_utc(state.weekly_reset_at) == as_utc(reset_at)
        points = weekly_total(state.daily_points, reset_at, tz) if current else 0.0
    else:
        points = total_points(state.daily_points)
    return _candidate(state, points)


async def build_leaderboard(
    db: AsyncSession,
    scope: RankingScope,
    viewer: MemberEngagementState | None = None,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[RankingEntry]:
    """Ranked entries for one scope, including the viewer.

    Team scopes need a viewer with a team; otherwise they are empty.
    """
    reset_at = next_weekly_reset(now, tz)
    team_id = viewer.team_id if viewer is not None else None
    if scope in TEAM_SCOPES and not team_id:
        return []

    if scope in WEEKLY_SCOPES:
        members = await load_weekly_candidates(
            db, reset_at, tz, team_id if scope in TEAM_SCOPES else None,
        )
    else:
        members = await load_all_time_candidates(db, team_id if scope in TEAM_SCOPES else None)

    viewer_entry = viewer_candidate(scope, viewer, reset_at, tz) if viewer is not None else None
    return rank_members(scope, members, viewer_entry, limit)


async def get_league(
    db: AsyncSession,
    viewer: MemberEngagementState | None,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
    limit: int = DEFAULT_LIMIT,
) -> dict[RankingScope, list[RankingEntry]]:
    """Weekly, all-time and team-weekly boards for the league page."""
    return {
        scope: await build_leaderboard(db, scope, viewer, now, tz, limit)
        for scope in (RankingScope.WEEKLY, RankingScope.ALL_TIME, RankingScope.TEAM_WEEKLY)
    }


def previous_weekly_reset(now: datetime | None = None, tz: str | tzinfo | None = None) -> datetime:
    """The weekly boundary that has most recently passed."""
    upcoming = next_weekly_reset(now, tz)
    # Eight days back lands in the week before the one in progress.
    return next_weekly_reset(upcoming - timedelta(days=8), tz)


async def settle_weekly_league(
    db: AsyncSession,
    redis: object | None = None,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> dict[str, str]:
    """Award league badges for the week that closed at the last boundary.

    Rank 1..3 of the global weekly board (gapped ranks, ties share) earn
    league_first/second/third. Re-running for the same week awards nothing
    new. Returns {member_id: badge_id} for badges added in this run.
    """
    now = as_utc(now) if now is not None else utc_now()
    closed_at = previous_weekly_reset(now, tz)

    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.weekly_reset_at == closed_at)
        .execution_options(populate_existing=True)
    )
    rows = list(result.scalars())
    scored = [(row, weekly_total(row.daily_points, closed_at, tz)) for row in rows]
    scored = [(row, points) for row, points in scored if points > 0]
    scored.sort(key=lambda item: (-item[1], item[0].member_id))

    policy = SCOPE_POLICIES[RankingScope.WEEKLY]
    ranks = assign_ranks([points for _row, points in scored], policy.rank_mode)

    awarded: dict[str, str] = {}
    for (row, _points), rank in zip(scored, ranks):
        badge_id = league_badge_for_rank(rank)
        if badge_id is None:
            break
        badges = list(row.unlocked_badges or ())
        if badge_id in badges:
            continue
        row.unlocked_badges = [*badges, badge_id]
        awarded[row.member_id] = badge_id

    await db.commit()
    logger.info(
        "League settled for week closing %s: %d ranked, %d badges awarded",
        closed_at.isoformat(), len(scored), len(awarded),
    )
    for member_id, badge_id in awarded.items():
        await publish_event(redis, BADGE_UNLOCKED_CHANNEL, {
            "member_id": member_id,
            "badge_ids": [badge_id],
        })
    return awarded
