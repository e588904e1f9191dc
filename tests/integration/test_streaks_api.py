"""Practice streak endpoints and the strict read-time streak."""

from datetime import timedelta

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_record_practice(client: AsyncClient) -> None:
    response = await client.post("/api/v1/streaks", json={"memberId": "m1"})
    assert response.status_code == 200
    assert response.json() == {
        "message": "Practice recorded successfully",
        "today_date": "2024-01-10",
        "practice_count": 1,
    }


@pytest.mark.asyncio
async def test_record_practice_idempotent_per_day(client: AsyncClient) -> None:
    await client.post("/api/v1/streaks", json={"memberId": "m1"})
    response = await client.post("/api/v1/streaks", json={"memberId": "m1"})
    assert response.json()["practice_count"] == 1


@pytest.mark.asyncio
async def test_streak_summary(client: AsyncClient, clock) -> None:
    start = clock.now
    for day in (0, 1, 2, 4, 5):
        clock.now = start + timedelta(days=day)
        await client.post("/api/v1/streaks", json={"memberId": "m1"})

    response = await client.get("/api/v1/streaks", params={"memberId": "m1"})
    assert response.status_code == 200
    data = response.json()
    assert data["current"] == 2
    assert data["longest"] == 3
    # 5 practiced days out of 15 elapsed in January
    assert data["consistency_percent"] == 33
    assert data["consistency"] == "33%"
    assert data["dates"] == ["2024-01-15", "2024-01-14", "2024-01-12", "2024-01-11", "2024-01-10"]


@pytest.mark.asyncio
async def test_streak_is_zero_without_practice_today(client: AsyncClient, clock) -> None:
    await client.post("/api/v1/streaks", json={"memberId": "m1"})
    clock.now += timedelta(days=1)
    data = (await client.get("/api/v1/streaks", params={"memberId": "m1"})).json()
    assert data["current"] == 0
    assert data["longest"] == 1


@pytest.mark.asyncio
async def test_unknown_member_all_zero(client: AsyncClient) -> None:
    data = (await client.get("/api/v1/streaks", params={"memberId": "ghost"})).json()
    assert data == {"current": 0, "longest": 0, "consistency": "0%", "consistency_percent": 0, "dates": []}


@pytest.mark.asyncio
async def test_session_also_counts_as_practice(client: AsyncClient) -> None:
    await client.post("/api/v1/achievements", json={"memberId": "m1", "points": 1})
    data = (await client.get("/api/v1/streaks", params={"memberId": "m1"})).json()
    assert data["current"] == 1
    assert data["dates"] == ["2024-01-10"]


@pytest.mark.asyncio
async def test_requires_member_id(client: AsyncClient) -> None:
    response = await client.get("/api/v1/streaks")
    assert response.status_code == 400
    assert response.json()["detail"] == "Member ID required"
