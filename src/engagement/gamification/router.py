"""Engagement API endpoints: achievements, badge catalog, practice streaks."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.competition.leaderboard_service import build_leaderboard
from engagement.competition.ranking import RankingScope
from engagement.competition.schemas import RankingEntryResponse
from engagement.config import get_settings
from engagement.dependencies import get_db, get_now, get_redis_dep, get_timezone
from engagement.gamification import achievement_service, streak_service
from engagement.gamification.badge_catalog import BADGE_CATALOG, badges_in_category
from engagement.gamification.ledger import weekly_chart
from engagement.gamification.schemas import (
    AchievementsResponse,
    BadgeCatalogResponse,
    BadgeResponse,
    ChartPoint,
    EngagementStateResponse,
    PracticeRecordResponse,
    PracticeStreakResponse,
    RecordPracticeRequest,
    RecordSessionRequest,
    RecordSessionResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Engagement"])


def _badge_group(category: str, unlocked: set[str]) -> list[BadgeResponse]:
    return [BadgeResponse.from_badge(b, b.id in unlocked) for b in badges_in_category(category)]


@router.get("/badges", response_model=BadgeCatalogResponse)
async def list_badges():
    """Static badge catalog."""
    return BadgeCatalogResponse(badges=[BadgeResponse.from_badge(b) for b in BADGE_CATALOG])


@router.post("/achievements", response_model=RecordSessionResponse)
async def record_achievement_session(
    body: RecordSessionRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """Record one session with its points and re-evaluate badges."""
    outcome = await achievement_service.record_session(
        db,
        redis,
        body.member_id,
        points=body.points,
        user_name=body.user_name,
        user_picture=body.user_picture,
        team_id=body.team_id,
        now=now,
        tz=tz,
    )
    state = EngagementStateResponse.from_state(outcome.state, tz, now)
    return RecordSessionResponse(
        **state.model_dump(),
        newly_unlocked=list(outcome.newly_unlocked),
    )


@router.get("/achievements", response_model=AchievementsResponse)
async def get_achievements(
    member_id: str | None = Query(None, alias="memberId"),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """Badge groups, the member's ledger, weekly boards and this week's chart."""
    state = await achievement_service.get_state(db, member_id)
    unlocked = set(state.unlocked_badges)
    limit = get_settings().leaderboard_size

    weekly = await build_leaderboard(db, RankingScope.WEEKLY, state, now, tz, limit)
    team = await build_leaderboard(db, RankingScope.TEAM_WEEKLY, state, now, tz, limit)

    return AchievementsResponse(
        streak_achievements=_badge_group("streak", unlocked),
        call_achievements=_badge_group("calls", unlocked),
        activity_achievements=_badge_group("activity", unlocked),
        league_achievements=_badge_group("league", unlocked),
        user_data=EngagementStateResponse.from_state(state, tz, now),
        weekly_rankings=[RankingEntryResponse.from_entry(e) for e in weekly],
        team_rankings=[RankingEntryResponse.from_entry(e) for e in team],
        chart_data=[ChartPoint(**point) for point in weekly_chart(state.daily_points, now, tz)],
    )


@router.post("/streaks", response_model=PracticeRecordResponse)
async def record_practice(
    body: RecordPracticeRequest,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """Mark today as practiced. Repeating it the same day changes nothing."""
    today, count = await streak_service.record_practice(db, body.member_id, now, tz)
    return PracticeRecordResponse(
        message="Practice recorded successfully",
        today_date=today.isoformat(),
        practice_count=count,
    )


@router.get("/streaks", response_model=PracticeStreakResponse)
async def get_practice_streak(
    member_id: str | None = Query(None, alias="memberId"),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    member_id = achievement_service.require_member_id(member_id)
    summary, dates = await streak_service.get_practice_streak(db, member_id, now, tz)
    return PracticeStreakResponse(
        current=summary.current_streak,
        longest=summary.longest_streak,
        consistency=summary.consistency,
        consistency_percent=summary.consistency_percent,
        dates=dates,
    )
