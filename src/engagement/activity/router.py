"""Activity session endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.activity.schemas import ActivityCountsResponse, ActivitySessionRequest
from engagement.activity.service import get_activity_counts, record_activity_session
from engagement.dependencies import get_db, get_now, get_timezone

router = APIRouter(prefix="/api/v1", tags=["Activity"])


@router.post("/activity-sessions", response_model=ActivityCountsResponse)
async def log_activity_session(
    body: ActivitySessionRequest,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    """Log a session and return the updated counts."""
    counts = await record_activity_session(db, body.member_id, now, tz)
    return ActivityCountsResponse.from_counts(counts)


@router.get("/activity-sessions", response_model=ActivityCountsResponse)
async def activity_counts(
    member_id: str | None = Query(None, alias="memberId"),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: str = Depends(get_timezone),
):
    counts = await get_activity_counts(db, member_id, now, tz)
    return ActivityCountsResponse.from_counts(counts)
