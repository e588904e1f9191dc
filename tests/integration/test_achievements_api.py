"""Achievements endpoints: record a session, read the ledger back."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.models import UserAchievement


async def _record(client: AsyncClient, member_id: str = "m1", points: object = 1, **extra) -> dict:
    response = await client.post("/api/v1/achievements", json={"memberId": member_id, "points": points, **extra})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_first_session_creates_ledger(client: AsyncClient) -> None:
    data = await _record(client, points=5, userName="Ada", teamId="t1")
    assert data["member_id"] == "m1"
    assert data["user_name"] == "Ada"
    assert data["team_id"] == "t1"
    assert data["current_streak"] == 1
    assert data["longest_streak"] == 1
    assert data["total_sessions"] == 1
    assert data["daily_points"] == {"2024-01-10": 5.0}
    assert data["weekly_total"] == 5.0
    assert data["weekly_reset_at"].startswith("2024-01-14T00:00:00")
    assert data["newly_unlocked"] == []


@pytest.mark.asyncio
async def test_snake_case_body_accepted(client: AsyncClient) -> None:
    response = await client.post("/api/v1/achievements", json={"member_id": "m1", "points": 2, "team_id": "t9"})
    assert response.status_code == 200
    assert response.json()["team_id"] == "t9"


@pytest.mark.asyncio
async def test_profile_kept_when_later_session_omits_it(client: AsyncClient) -> None:
    await _record(client, userName="Ada", teamId="t1")
    data = await _record(client)
    assert data["user_name"] == "Ada"
    assert data["team_id"] == "t1"


@pytest.mark.asyncio
async def test_streak_across_days(client: AsyncClient, clock) -> None:
    for day in range(3):
        if day:
            clock.now += timedelta(days=1)
        data = await _record(client)
    assert data["current_streak"] == 3

    # skip a day
    clock.now += timedelta(days=2)
    data = await _record(client)
    assert data["current_streak"] == 1
    assert data["longest_streak"] == 3


@pytest.mark.asyncio
async def test_badge_unlock_is_published(client: AsyncClient, fake_redis) -> None:
    for _ in range(9):
        await _record(client)
    assert fake_redis.published == []

    data = await _record(client)
    assert data["newly_unlocked"] == ["calls_10", "daily_10"]
    assert len(fake_redis.published) == 1
    channel, message = fake_redis.published[0]
    assert channel == "pubsub:badge_unlocked"
    assert json.loads(message) == {"member_id": "m1", "badge_ids": ["calls_10", "daily_10"]}

    data = await _record(client)
    assert data["newly_unlocked"] == []
    assert data["unlocked_badges"] == ["calls_10", "daily_10"]


@pytest.mark.asyncio
async def test_malformed_points_count_as_zero(client: AsyncClient) -> None:
    data = await _record(client, points="lots")
    assert data["total_sessions"] == 1
    assert data["weekly_total"] == 0.0


@pytest.mark.asyncio
async def test_missing_member_id_is_rejected(client: AsyncClient) -> None:
    response = await client.post("/api/v1/achievements", json={"points": 1})
    assert response.status_code == 422
    assert response.json()["detail"] == "Validation error"


@pytest.mark.asyncio
async def test_blank_member_id_is_rejected(client: AsyncClient) -> None:
    response = await client.post("/api/v1/achievements", json={"memberId": "   "})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_requires_member_id(client: AsyncClient) -> None:
    response = await client.get("/api/v1/achievements")
    assert response.status_code == 400
    assert response.json() == {"detail": "Member ID required"}


@pytest.mark.asyncio
async def test_get_unknown_member_returns_empty_state(client: AsyncClient) -> None:
    response = await client.get("/api/v1/achievements", params={"memberId": "nobody"})
    assert response.status_code == 200
    data = response.json()
    assert data["user_data"]["total_sessions"] == 0
    assert data["user_data"]["weekly_total"] == 0.0
    assert data["weekly_rankings"] == []
    assert data["team_rankings"] == []
    assert data["chart_data"] == []
    assert all(not b["unlocked"] for b in data["streak_achievements"])


@pytest.mark.asyncio
async def test_get_groups_badges_and_flags_unlocked(client: AsyncClient) -> None:
    for _ in range(10):
        await _record(client)
    data = (await client.get("/api/v1/achievements", params={"memberId": "m1"})).json()

    assert [b["id"] for b in data["streak_achievements"]][:2] == ["streak_5", "streak_10"]
    calls = {b["id"]: b["unlocked"] for b in data["call_achievements"]}
    assert calls["calls_10"] is True
    assert calls["calls_25"] is False
    activity = {b["id"]: b["unlocked"] for b in data["activity_achievements"]}
    assert activity == {"daily_10": True, "weekly_50": False, "monthly_100": False}
    assert len(data["league_achievements"]) == 3


@pytest.mark.asyncio
async def test_get_includes_rankings_and_chart(client: AsyncClient, clock) -> None:
    await _record(client, "a", points=10, teamId="t1")
    await _record(client, "b", points=30, teamId="t1")
    await _record(client, "c", points=20, teamId="t2")
    clock.now += timedelta(days=1)
    await _record(client, "a", points=5, teamId="t1")

    data = (await client.get("/api/v1/achievements", params={"memberId": "a"})).json()

    weekly = [(e["member_id"], e["points"], e["rank"]) for e in data["weekly_rankings"]]
    assert weekly == [("b", 30.0, 1), ("c", 20.0, 2), ("a", 15.0, 3)]
    team = [(e["member_id"], e["rank"], e["is_viewer"]) for e in data["team_rankings"]]
    assert team == [("b", 1, False), ("a", 2, True)]
    assert data["chart_data"] == [
        {"day": "Wednesday", "date": "2024-01-10", "you": 10.0},
        {"day": "Thursday", "date": "2024-01-11", "you": 15.0},
    ]


@pytest.mark.asyncio
async def test_badges_catalog(client: AsyncClient) -> None:
    response = await client.get("/api/v1/badges")
    assert response.status_code == 200
    badges = response.json()["badges"]
    assert len(badges) == 22
    assert {"id", "category", "title", "subtitle", "description", "image"} <= set(badges[0])


@pytest.mark.asyncio
async def test_weekly_total_resets_after_sunday(client: AsyncClient, clock) -> None:
    await _record(client, points=8)
    clock.now += timedelta(days=7)

    user = (await client.get("/api/v1/achievements", params={"memberId": "m1"})).json()["user_data"]
    assert user["weekly_total"] == 0.0
    assert user["total_points"] == 8.0
    assert user["weekly_reset_at"].startswith("2024-01-21T00:00:00")


@pytest.mark.asyncio
async def test_unreadable_stored_points_count_as_zero(client: AsyncClient, db_session: AsyncSession) -> None:
    db_session.add(UserAchievement(
        member_id="m1",
        daily_points={"2024-01-08": None, "2024-01-09": "abc", "2024-01-10": 3, "someday": 7},
        weekly_reset_at=datetime(2024, 1, 14, tzinfo=timezone.utc),
    ))
    await db_session.commit()

    response = await client.get("/api/v1/achievements", params={"memberId": "m1"})
    assert response.status_code == 200, response.text
    user = response.json()["user_data"]
    assert user["daily_points"] == {"2024-01-08": 0.0, "2024-01-09": 0.0, "2024-01-10": 3.0}
    assert user["weekly_total"] == 3.0

    response = await client.get("/api/v1/league", params={"memberId": "m1"})
    assert response.status_code == 200, response.text

    data = await _record(client, points=2)
    assert data["daily_points"] == {"2024-01-08": 0.0, "2024-01-09": 0.0, "2024-01-10": 5.0}
    assert data["total_points"] == 5.0
