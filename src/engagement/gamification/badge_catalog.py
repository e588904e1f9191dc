"""Static badge catalog and threshold evaluation.

Badges are not stored per definition; a member row only keeps the list of
unlocked badge IDs. Evaluation is a set union: a badge once unlocked is
never removed, even if the metric behind it later reads lower.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

_IMG = "https://res.cloudinary.com/dmbzcxhjn/image/upload"


class ThresholdKind(str, Enum):
    STREAK = "streak"
    TOTAL_CALLS = "total_calls"
    PERIOD_SESSIONS = "period_sessions"
    LEAGUE_RANK = "league_rank"


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class Badge:
    id: str
    category: str
    threshold_kind: ThresholdKind
    title: str
    subtitle: str
    image: str
    target: int | None = None
    period: Period | None = None
    rank: int | None = None

    @property
    def description(self) -> str:
        return self.title


@dataclass(frozen=True)
class BadgeMetrics:
    """The cumulative figures badge thresholds are checked against."""

    current_streak: int = 0
    total_sessions: int = 0
    sessions_today: int = 0
    sessions_this_week: int = 0
    sessions_this_month: int = 0

    def period_count(self, period: Period) -> int:
        if period is Period.DAY:
            return self.sessions_today
        if period is Period.WEEK:
            return self.sessions_this_week
        return self.sessions_this_month


def _streak(days: int, image: str) -> Badge:
    return Badge(
        id=f"streak_{days}",
        category="streak",
        threshold_kind=ThresholdKind.STREAK,
        title=f"{days} Day Streak",
        subtitle=f"Practice for {days} consecutive days",
        image=f"{_IMG}/{image}",
        target=days,
    )


def _calls(count: int, image: str) -> Badge:
    return Badge(
        id=f"calls_{count}",
        category="calls",
        threshold_kind=ThresholdKind.TOTAL_CALLS,
        title=f"{count} Calls",
        subtitle=f"Complete {count} calls",
        image=f"{_IMG}/{image}",
        target=count,
    )


BADGE_CATALOG: tuple[Badge, ...] = (
    # Streaks
    _streak(5, "v1731206168/a-3d-render-of-a-chunky-cartoon-calendar-icon-with-HWOAO1EUTGSglSzZlSFjHA-dQjZimptRd-0SpN_-6oU5w-removebg-preview_iatnoy.png"),
    _streak(10, "v1731206168/a-3d-render-of-a-chunky-cartoon-calendar-icon-with-QHfb4ipTQUu1iR54Vmxo6g-RFBtanJsS0aS2a2tOFHHXg-removebg-preview_kzjyge.png"),
    _streak(30, "v1731206168/a-pixar-style-3d-render-of-a-cartoon-calendar-icon-CSU-cRrnTDCAuvGYTSV90w-taY5gPBoQxydiszFPNpDvQ-removebg-preview_hnqjkl.png"),
    _streak(90, "v1731206168/a-pixar-style-3d-render-of-a-cartoon-calendar-icon-RCaF4tpKT7aJoICZ2L508Q-UCW5RDP4Q4KfvoRnq8NlfA-removebg-preview_tevelw.png"),
    _streak(180, "v1731206168/a-pixar-style-3d-render-of-a-cartoon-calendar-icon-L5aDOKYDTgKsB2lxHimuQQ-2xr3cxz6RCeNCL9HhBtylA-removebg-preview_oooy2m.png"),
    _streak(365, "v1731206168/a-pixar-style-3d-render-of-a-cartoon-calendar-icon-9Ut5P-Z7Q-qcpgWOIlslCA-YQ3T7zHwThCVVysgv9KyEg-removebg-preview_dlplgi.png"),
    # Total calls
    _calls(10, "v1731206170/WhatsApp_Image_2024-11-07_at_23.19.01_2cecae84-removebg-preview_radody.png"),
    _calls(25, "v1731206169/WhatsApp_Image_2024-11-07_at_23.19.00_410bcd52-removebg-preview_bi6eon.png"),
    _calls(50, "v1731206170/WhatsApp_Image_2024-11-07_at_23.19.00_e9686083-removebg-preview_qt9tyx.png"),
    _calls(100, "v1731206169/WhatsApp_Image_2024-11-07_at_23.18.59_aaafd20b-removebg-preview_mniysw.png"),
    _calls(250, "v1731206169/WhatsApp_Image_2024-11-07_at_23.18.58_e34cbb5f-removebg-preview_nm6c8a.png"),
    _calls(500, "v1731206170/WhatsApp_Image_2024-11-07_at_23.18.59_dac37adb-removebg-preview_xfpwp9.png"),
    _calls(750, "v1731206169/WhatsApp_Image_2024-11-07_at_23.18.57_f7535a53-removebg-preview_we2xbp.png"),
    _calls(1000, "v1731206168/WhatsApp_Image_2024-11-07_at_23.18.57_717b1f9c-removebg-preview_yupyox.png"),
    _calls(1500, "v1731206169/WhatsApp_Image_2024-11-07_at_23.18.58_44ffd513-removebg-preview_jsmszk.png"),
    _calls(2500, "v1731206169/WhatsApp_Image_2024-11-07_at_23.19.01_b4416b2f-removebg-preview_jd6136.png"),
    # Session activity within a period
    Badge(
        id="daily_10",
        category="activity",
        threshold_kind=ThresholdKind.PERIOD_SESSIONS,
        title="10 Sessions in a Day",
        subtitle="Complete 10 sessions in one day",
        image=f"{_IMG}/v1731206168/InBodPWuQrymOXROYwUwow-removebg-preview_b9fn8n.png",
        target=10,
        period=Period.DAY,
    ),
    Badge(
        id="weekly_50",
        category="activity",
        threshold_kind=ThresholdKind.PERIOD_SESSIONS,
        title="50 Sessions in a Week",
        subtitle="Complete 50 sessions in one week",
        image=f"{_IMG}/v1731206169/DuZdTwN_T8SRiCdUHDt-AQ-removebg-preview_1_jcg1nm.png",
        target=50,
        period=Period.WEEK,
    ),
    Badge(
        id="monthly_100",
        category="activity",
        threshold_kind=ThresholdKind.PERIOD_SESSIONS,
        title="100 Sessions in a Month",
        subtitle="Complete 100 sessions in one month",
        image=f"{_IMG}/v1731206169/73z7d5wLQiyhufwfTdw5OA-removebg-preview_1_ktrxif.png",
        target=100,
        period=Period.MONTH,
    ),
    # Weekly league placement
    Badge(
        id="league_first",
        category="league",
        threshold_kind=ThresholdKind.LEAGUE_RANK,
        title="League Champion",
        subtitle="Finish first in weekly league",
        image=f"{_IMG}/v1732605321/a-3d-render-of-a-large-radiant-gold-medal-with-a-b-T5VpM4deRuWtnNpknWeXKA-oVpwYeqBTOuOBOCRRskHXg-removebg-preview_qzif0n.png",
        rank=1,
    ),
    Badge(
        id="league_second",
        category="league",
        threshold_kind=ThresholdKind.LEAGUE_RANK,
        title="League Runner-up",
        subtitle="Finish second in weekly league",
        image=f"{_IMG}/v1732605321/a-3d-render-of-a-large-radiant-silver-medal-with-a-SF8CEVMrSWaKtCH-SS0KPw-xITb8y53Tw-95YbTOpEHoQ-removebg-preview_g0hbaj.png",
        rank=2,
    ),
    Badge(
        id="league_third",
        category="league",
        threshold_kind=ThresholdKind.LEAGUE_RANK,
        title="League Top 3",
        subtitle="Finish third in weekly league",
        image=f"{_IMG}/v1732605321/a-3d-render-of-a-large-radiant-bronze-medal-with-a-t0r6ItMuRVOEve22GfVYdw-KxQg20b_SdOR5Y3HVUaVZg-removebg-preview_p9tfee.png",
        rank=3,
    ),
)

BADGE_CATEGORIES: tuple[str, ...] = ("streak", "calls", "activity", "league")


def badges_in_category(category: str, catalog: Iterable[Badge] = BADGE_CATALOG) -> list[Badge]:
    return [b for b in catalog if b.category == category]


def threshold_met(badge: Badge, metrics: BadgeMetrics) -> bool:
    """Whether the metrics satisfy a threshold badge. Rank badges never match here."""
    if badge.target is None:
        return False
    if badge.threshold_kind is ThresholdKind.STREAK:
        return metrics.current_streak >= badge.target
    if badge.threshold_kind is ThresholdKind.TOTAL_CALLS:
        return metrics.total_sessions >= badge.target
    if badge.threshold_kind is ThresholdKind.PERIOD_SESSIONS and badge.period is not None:
        return metrics.period_count(badge.period) >= badge.target
    return False


def evaluate_badges(
    metrics: BadgeMetrics,
    unlocked: Sequence[str],
    catalog: Iterable[Badge] = BADGE_CATALOG,
) -> tuple[list[str], list[str]]:
    """Union newly met threshold badges into the unlocked list.

    Returns (all_unlocked, newly_unlocked). Existing entries keep their
    order; badges already present are never added twice.
    """
    merged = list(dict.fromkeys(unlocked))
    seen = set(merged)
    newly: list[str] = []
    for badge in catalog:
        if badge.id not in seen and threshold_met(badge, metrics):
            merged.append(badge.id)
            seen.add(badge.id)
            newly.append(badge.id)
    return merged, newly


def league_badge_for_rank(rank: int, catalog: Iterable[Badge] = BADGE_CATALOG) -> str | None:
    """Badge ID awarded for finishing the weekly league at this rank, if any."""
    for badge in catalog:
        if badge.threshold_kind is ThresholdKind.LEAGUE_RANK and badge.rank == rank:
            return badge.id
    return None
