"""Leaderboard ranking over an immutable snapshot of member scores.

Scopes differ in two ways that callers rely on:
- the global weekly board uses gapped ranks (RANK(): 1, 1, 3), every other
  board uses dense ranks (DENSE_RANK(): 1, 1, 2);
- weekly boards drop members with no positive points, all-time boards keep
  them.
The viewer always appears: if outside the top entries, their own entry is
appended last with rank = members strictly ahead + 1.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

DEFAULT_LIMIT = 10


class RankingScope(str, Enum):
    WEEKLY = "weekly"
    TEAM_WEEKLY = "team_weekly"
    ALL_TIME = "all_time"
    TEAM_ALL_TIME = "team_all_time"


class RankMode(str, Enum):
    DENSE = "dense"
    GAPPED = "gapped"


@dataclass(frozen=True)
class ScopePolicy:
    rank_mode: RankMode
    exclude_non_positive: bool


SCOPE_POLICIES: dict[RankingScope, ScopePolicy] = {
    RankingScope.WEEKLY: ScopePolicy(RankMode.GAPPED, exclude_non_positive=True),
    RankingScope.TEAM_WEEKLY: ScopePolicy(RankMode.DENSE, exclude_non_positive=True),
    RankingScope.ALL_TIME: ScopePolicy(RankMode.DENSE, exclude_non_positive=False),
    RankingScope.TEAM_ALL_TIME: ScopePolicy(RankMode.DENSE, exclude_non_positive=False),
}


@dataclass(frozen=True)
class RankingCandidate:
    member_id: str
    points: float
    display_name: str | None = None
    avatar_url: str | None = None
    badges: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankingEntry:
    member_id: str
    display_name: str | None
    avatar_url: str | None
    points: float
    badges: tuple[str, ...]
    rank: int
    is_viewer: bool = False


def assign_ranks(points: Sequence[float], mode: RankMode) -> list[int]:
    """Ranks for points already sorted descending."""
    ranks: list[int] = []
    previous: float | None = None
    rank = 0
    for position, value in enumerate(points, start=1):
        if value != previous:
            rank = rank + 1 if mode is RankMode.DENSE else position
            previous = value
        ranks.append(rank)
    return ranks


def rank_of(points: float, members: Sequence[RankingCandidate]) -> int:
    """Standard competition rank: members with strictly more points, plus one."""
    return sum(1 for m in members if m.points > points) + 1


def _entry(candidate: RankingCandidate, rank: int, viewer_id: str | None) -> RankingEntry:
    return RankingEntry(
        member_id=candidate.member_id,
        display_name=candidate.display_name,
        avatar_url=candidate.avatar_url,
        points=candidate.points,
        badges=tuple(candidate.badges),
        rank=rank,
        is_viewer=candidate.member_id == viewer_id,
    )


def rank_members(
    scope: RankingScope,
    members: Sequence[RankingCandidate],
    viewer: RankingCandidate | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[RankingEntry]:
    """Top `limit` entries for a scope, with the viewer appended if absent."""
    viewer_id = viewer.member_id if viewer else None

    policy = SCOPE_POLICIES[scope]
    eligible = [m for m in members if m.points > 0] if policy.exclude_non_positive else list(members)
    # An empty board shows the viewer only once they have points.
    if not eligible:
        if viewer is not None and viewer.points > 0:
            return [_entry(viewer, 1, viewer_id)]
        return []

    ordered = sorted(eligible, key=lambda m: (-m.points, m.member_id))
    ranks = assign_ranks([m.points for m in ordered], policy.rank_mode)

    top = [_entry(m, r, viewer_id) for m, r in zip(ordered[:limit], ranks[:limit])]

    if viewer is not None and all(e.member_id != viewer_id for e in top):
        top.append(_entry(viewer, rank_of(viewer.points, members), viewer_id))
    return top
