"""Weekly league settlement awards podium badges once per week."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.competition.leaderboard_service import previous_weekly_reset, settle_weekly_league
from engagement.gamification.achievement_service import load_state, record_session

WEDNESDAY = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
# Five minutes after the boundary that closes WEDNESDAY's week.
SETTLEMENT = datetime(2024, 1, 14, 0, 5, tzinfo=timezone.utc)


async def _seed(db: AsyncSession, scores: dict[str, float], now: datetime = WEDNESDAY) -> None:
    for member_id, points in scores.items():
        await record_session(db, None, member_id, points=points, now=now)


def test_previous_weekly_reset() -> None:
    assert previous_weekly_reset(SETTLEMENT) == datetime(2024, 1, 14, tzinfo=timezone.utc)
    assert previous_weekly_reset(WEDNESDAY) == datetime(2024, 1, 7, tzinfo=timezone.utc)


def test_previous_weekly_reset_local_zone() -> None:
    # Sunday 00:05 UTC is still Saturday in New York: the last local boundary is a week earlier.
    assert previous_weekly_reset(SETTLEMENT, "America/New_York") == datetime(2024, 1, 7, 5, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_podium_awarded(db_session: AsyncSession) -> None:
    await _seed(db_session, {"a": 50, "b": 40, "c": 30, "d": 20})

    awarded = await settle_weekly_league(db_session, now=SETTLEMENT)

    assert awarded == {"a": "league_first", "b": "league_second", "c": "league_third"}
    d = await load_state(db_session, "d")
    assert not any(b.startswith("league_") for b in d.unlocked_badges)


@pytest.mark.asyncio
async def test_ties_share_rank_with_gaps(db_session: AsyncSession) -> None:
    await _seed(db_session, {"a": 50, "b": 50, "c": 30, "d": 20})

    awarded = await settle_weekly_league(db_session, now=SETTLEMENT)

    assert awarded == {"a": "league_first", "b": "league_first", "c": "league_third"}


@pytest.mark.asyncio
async def test_rerun_awards_nothing(db_session: AsyncSession) -> None:
    await _seed(db_session, {"a": 50})
    assert await settle_weekly_league(db_session, now=SETTLEMENT) == {"a": "league_first"}
    assert await settle_weekly_league(db_session, now=SETTLEMENT) == {}

    state = await load_state(db_session, "a")
    assert state.unlocked_badges.count("league_first") == 1


@pytest.mark.asyncio
async def test_zero_point_members_not_ranked(db_session: AsyncSession) -> None:
    await _seed(db_session, {"a": 0, "b": 3})
    assert await settle_weekly_league(db_session, now=SETTLEMENT) == {"b": "league_first"}


@pytest.mark.asyncio
async def test_only_the_closed_week_counts(db_session: AsyncSession) -> None:
    await _seed(db_session, {"stale": 90}, now=WEDNESDAY - timedelta(days=7))
    await _seed(db_session, {"current": 10})
    assert await settle_weekly_league(db_session, now=SETTLEMENT) == {"current": "league_first"}


@pytest.mark.asyncio
async def test_publishes_unlocks(db_session: AsyncSession, fake_redis) -> None:
    await _seed(db_session, {"a": 50})
    await settle_weekly_league(db_session, fake_redis, now=SETTLEMENT)
    assert [json.loads(m) for _c, m in fake_redis.published] == [{"member_id": "a", "badge_ids": ["league_first"]}]
