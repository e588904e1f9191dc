"""Badge catalog shape and threshold evaluation."""

from engagement.gamification.badge_catalog import (
    BADGE_CATALOG,
    BADGE_CATEGORIES,
    BadgeMetrics,
    Period,
    ThresholdKind,
    badges_in_category,
    evaluate_badges,
    league_badge_for_rank,
    threshold_met,
)


def _badge(badge_id: str):
    return next(b for b in BADGE_CATALOG if b.id == badge_id)


class TestCatalog:
    def test_ids_unique(self):
        ids = [b.id for b in BADGE_CATALOG]
        assert len(ids) == len(set(ids))

    def test_every_badge_in_a_known_category(self):
        assert {b.category for b in BADGE_CATALOG} == set(BADGE_CATEGORIES)

    def test_streak_tiers(self):
        assert [b.target for b in badges_in_category("streak")] == [5, 10, 30, 90, 180, 365]

    def test_call_tiers(self):
        assert [b.target for b in badges_in_category("calls")] == [
            10, 25, 50, 100, 250, 500, 750, 1000, 1500, 2500,
        ]

    def test_activity_periods(self):
        periods = {b.id: (b.period, b.target) for b in badges_in_category("activity")}
        assert periods == {
            "daily_10": (Period.DAY, 10),
            "weekly_50": (Period.WEEK, 50),
            "monthly_100": (Period.MONTH, 100),
        }

    def test_description_is_title(self):
        badge = _badge("streak_30")
        assert badge.description == badge.title


class TestThresholds:
    def test_streak_threshold_inclusive(self):
        assert threshold_met(_badge("streak_5"), BadgeMetrics(current_streak=5))
        assert not threshold_met(_badge("streak_5"), BadgeMetrics(current_streak=4))

    def test_total_calls(self):
        assert threshold_met(_badge("calls_25"), BadgeMetrics(total_sessions=30))

    def test_period_counter(self):
        assert threshold_met(_badge("weekly_50"), BadgeMetrics(sessions_this_week=50))
        assert not threshold_met(_badge("weekly_50"), BadgeMetrics(sessions_this_month=500))

    def test_league_badges_never_met_by_metrics(self):
        huge = BadgeMetrics(10_000, 10_000, 10_000, 10_000, 10_000)
        for badge in badges_in_category("league"):
            assert badge.threshold_kind is ThresholdKind.LEAGUE_RANK
            assert not threshold_met(badge, huge)


class TestEvaluateBadges:
    def test_returns_newly_unlocked(self):
        unlocked, newly = evaluate_badges(BadgeMetrics(current_streak=10, total_sessions=12), [])
        assert newly == ["streak_5", "streak_10", "calls_10"]
        assert unlocked == newly

    def test_idempotent(self):
        metrics = BadgeMetrics(current_streak=10, total_sessions=12)
        first, _ = evaluate_badges(metrics, [])
        second, newly = evaluate_badges(metrics, first)
        assert second == first
        assert newly == []

    def test_never_removes(self):
        unlocked, newly = evaluate_badges(BadgeMetrics(), ["streak_365", "league_first"])
        assert unlocked == ["streak_365", "league_first"]
        assert newly == []

    def test_existing_order_kept(self):
        unlocked, _ = evaluate_badges(BadgeMetrics(total_sessions=10), ["league_third"])
        assert unlocked == ["league_third", "calls_10"]


class TestLeagueBadgeForRank:
    def test_top_three(self):
        assert league_badge_for_rank(1) == "league_first"
        assert league_badge_for_rank(2) == "league_second"
        assert league_badge_for_rank(3) == "league_third"

    def test_outside_podium(self):
        assert league_badge_for_rank(4) is None
