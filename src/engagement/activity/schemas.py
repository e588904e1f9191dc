"""Pydantic models for activity session endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from engagement.activity.service import ActivityCounts
from engagement.gamification.schemas import MemberRequest


class ActivitySessionRequest(MemberRequest):
    pass


class ActivityCountsResponse(BaseModel):
    today: int
    week: int
    month: int
    year: int

    @classmethod
    def from_counts(cls, counts: ActivityCounts) -> ActivityCountsResponse:
        return cls(today=counts.today, week=counts.week, month=counts.month, year=counts.year)
