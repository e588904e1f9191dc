"""Pydantic request/response models for leaderboard endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from engagement.competition.ranking import RankingEntry, RankingScope


class RankingEntryResponse(BaseModel):
    member_id: str
    display_name: str | None = None
    avatar_url: str | None = None
    points: float
    badges: list[str] = []
    rank: int
    is_viewer: bool = False

    @classmethod
    def from_entry(cls, entry: RankingEntry) -> RankingEntryResponse:
        return cls(
            member_id=entry.member_id,
            display_name=entry.display_name,
            avatar_url=entry.avatar_url,
            points=entry.points,
            badges=list(entry.badges),
            rank=entry.rank,
            is_viewer=entry.is_viewer,
        )


class LeaderboardResponse(BaseModel):
    scope: RankingScope
    entries: list[RankingEntryResponse]
