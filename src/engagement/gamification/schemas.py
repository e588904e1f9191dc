"""Pydantic request/response models for engagement endpoints.

Request bodies accept both snake_case and the host page's camelCase keys.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from engagement.competition.schemas import RankingEntryResponse
from engagement.gamification.badge_catalog import Badge
from engagement.gamification.ledger import (
    MemberEngagementState,
    clean_daily_points,
    total_points,
    weekly_total,
)
from engagement.gamification.week_utils import as_utc, next_weekly_reset, utc_now


def _alias(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel)


# --- Requests ---


class MemberRequest(BaseModel):
    member_id: str = Field(..., min_length=1, max_length=128, validation_alias=_alias("member_id", "memberId"))

    @field_validator("member_id")
    @classmethod
    def strip_member_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Member ID required")
        return v


class RecordSessionRequest(MemberRequest):
    user_name: str | None = Field(None, max_length=256, validation_alias=_alias("user_name", "userName"))
    user_picture: str | None = Field(None, max_length=2048, validation_alias=_alias("user_picture", "userPicture"))
    team_id: str | None = Field(None, max_length=128, validation_alias=_alias("team_id", "teamId"))
    # Coerced by the ledger; malformed values count as 0.
    points: Any = 0


class RecordPracticeRequest(MemberRequest):
    pass


# --- Badges ---


class BadgeResponse(BaseModel):
    id: str
    category: str
    threshold_kind: str
    title: str
    subtitle: str
    description: str
    image: str
    target: int | None = None
    period: str | None = None
    rank: int | None = None
    unlocked: bool = False

    @classmethod
    def from_badge(cls, badge: Badge, unlocked: bool = False) -> BadgeResponse:
        return cls(
            id=badge.id,
            category=badge.category,
            threshold_kind=badge.threshold_kind.value,
            title=badge.title,
            subtitle=badge.subtitle,
            description=badge.description,
            image=badge.image,
            target=badge.target,
            period=badge.period.value if badge.period else None,
            rank=badge.rank,
            unlocked=unlocked,
        )


class BadgeCatalogResponse(BaseModel):
    badges: list[BadgeResponse]


# --- Engagement state ---


class EngagementStateResponse(BaseModel):
    member_id: str
    user_name: str | None = None
    user_picture: str | None = None
    team_id: str | None = None
    current_streak: int = 0
    longest_streak: int = 0
    total_sessions: int = 0
    sessions_today: int = 0
    sessions_this_week: int = 0
    sessions_this_month: int = 0
    last_session_date: str | None = None
    unlocked_badges: list[str] = []
    weekly_reset_at: datetime
    daily_points: dict[str, float] = {}
    weekly_total: float = 0.0
    total_points: float = 0.0

    @classmethod
    def from_state(
        cls,
        state: MemberEngagementState,
        tz: str | tzinfo | None = None,
        now: datetime | None = None,
    ) -> EngagementStateResponse:
        """Render a state as of `now`. A week that has already closed totals 0."""
        now = now or utc_now()
        reset_at = state.weekly_reset_at
        week_open = reset_at is not None and as_utc(reset_at) > now
        if not week_open:
            reset_at = next_weekly_reset(now, tz)
        return cls(
            member_id=state.member_id,
            user_name=state.user_name,
            user_picture=state.user_picture,
            team_id=state.team_id,
            current_streak=state.current_streak,
            longest_streak=state.longest_streak,
            total_sessions=state.total_sessions,
            sessions_today=state.sessions_today,
            sessions_this_week=state.sessions_this_week,
            sessions_this_month=state.sessions_this_month,
            last_session_date=state.last_session_date,
            unlocked_badges=list(state.unlocked_badges),
            weekly_reset_at=reset_at,
            daily_points=clean_daily_points(state.daily_points),
            weekly_total=weekly_total(state.daily_points, reset_at, tz) if week_open else 0.0,
            total_points=total_points(state.daily_points),
        )


class RecordSessionResponse(EngagementStateResponse):
    newly_unlocked: list[str] = []


class ChartPoint(BaseModel):
    day: str
    date: str
    you: float


class AchievementsResponse(BaseModel):
    streak_achievements: list[BadgeResponse]
    call_achievements: list[BadgeResponse]
    activity_achievements: list[BadgeResponse]
    league_achievements: list[BadgeResponse]
    user_data: EngagementStateResponse
    weekly_rankings: list[RankingEntryResponse] = []
    team_rankings: list[RankingEntryResponse] = []
    chart_data: list[ChartPoint] = []


class LeagueResponse(BaseModel):
    weekly_rankings: list[RankingEntryResponse]
    all_time_rankings: list[RankingEntryResponse]
    team_rankings: list[RankingEntryResponse]
    user_data: EngagementStateResponse | None = None


# --- Practice streak ---


class PracticeRecordResponse(BaseModel):
    message: str
    today_date: str
    practice_count: int


class PracticeStreakResponse(BaseModel):
    current: int
    longest: int
    consistency: str
    consistency_percent: int
    dates: list[date]
