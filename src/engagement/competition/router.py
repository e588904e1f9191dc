"""League and leaderboard endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.competition.leaderboard_service import build_leaderboard, get_league
from engagement.competition.ranking import RankingScope
from engagement.competition.schemas import LeaderboardResponse, RankingEntryResponse
from engagement.config import get_settings
from engagement.dependencies import get_db, get_now, get_timezone
from engagement.gamification.achievement_service import get_state
from engagement.gamification.schemas import EngagementStateResponse, LeagueResponse

router = APIRouter(prefix="/api/v1", tags=["Competition"])


def _entries(entries) -> list[RankingEntryResponse]:
    return [RankingEntryResponse.from_entry(e) for e in entries]


@router.get("/league", response_model=LeagueResponse)
async def league(
    member_id: str | None = Query(None, alias="memberId"),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """Weekly, all-time and team boards with the viewer always included."""
    state = await get_state(db, member_id)
    boards = await get_league(db, state, now, tz, get_settings().leaderboard_size)
    return LeagueResponse(
        weekly_rankings=_entries(boards[RankingScope.WEEKLY]),
        all_time_rankings=_entries(boards[RankingScope.ALL_TIME]),
        team_rankings=_entries(boards[RankingScope.TEAM_WEEKLY]),
        user_data=EngagementStateResponse.from_state(state, tz, now),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    member_id: str | None = Query(None, alias="memberId"),
    scope: RankingScope = Query(RankingScope.WEEKLY),
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """A single ranking scope. limit defaults to the configured board size."""
    state = await get_state(db, member_id)
    entries = await build_leaderboard(db, scope, state, now, tz, limit or get_settings().leaderboard_size)
    return LeaderboardResponse(scope=scope, entries=_entries(entries))
