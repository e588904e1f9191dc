"""Activity session log and per-period counts."""

from datetime import timedelta

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_log_returns_counts(client: AsyncClient) -> None:
    response = await client.post("/api/v1/activity-sessions", json={"memberId": "m1"})
    assert response.status_code == 200
    assert response.json() == {"today": 1, "week": 1, "month": 1, "year": 1}


@pytest.mark.asyncio
async def test_counts_per_period(client: AsyncClient, clock) -> None:
    now = clock.now  # 2024-01-10
    for days_ago in (0, 0, 3, 9, 40):
        clock.now = now - timedelta(days=days_ago)
        await client.post("/api/v1/activity-sessions", json={"memberId": "m1"})
    await client.post("/api/v1/activity-sessions", json={"memberId": "someone-else"})

    clock.now = now
    response = await client.get("/api/v1/activity-sessions", params={"memberId": "m1"})
    assert response.status_code == 200
    # 40 days back is in December 2023, outside this year
    assert response.json() == {"today": 2, "week": 3, "month": 4, "year": 4}


@pytest.mark.asyncio
async def test_unknown_member_zero(client: AsyncClient) -> None:
    data = (await client.get("/api/v1/activity-sessions", params={"memberId": "ghost"})).json()
    assert data == {"today": 0, "week": 0, "month": 0, "year": 0}


@pytest.mark.asyncio
async def test_requires_member_id(client: AsyncClient) -> None:
    response = await client.get("/api/v1/activity-sessions")
    assert response.status_code == 400
