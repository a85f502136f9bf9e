"""
Unit Tests for Streak Tracking

Tests for:
- Current streak anchor rule (today vs yesterday)
- Longest streak over gaps and failures
- Global (any topic) vs per-topic met rule
- Milestones in StreakData
- StreakTrackingService with a mocked database session
"""

from datetime import date, datetime, timezone

import pytest

from goals.services.tracking.streak_tracking import (
    StreakCalculator,
    StreakTrackingService,
    current_streak,
    longest_streak,
)


def at(day: int, hour: int = 9, minute: int = 0) -> datetime:
    """UTC instant on day `day` of March 2024."""
    return datetime(2024, 3, day, hour, minute, tzinfo=timezone.utc)


def march(day: int) -> date:
    return date(2024, 3, day)


# =============================================================================
# Static helpers
# =============================================================================


class TestCalculateCurrentStreak:
    """Tests for StreakCalculator._calculate_current_streak."""

    @pytest.mark.parametrize(
        "met_by_day,today,expected",
        [
            pytest.param({}, march(5), 0, id="empty"),
            pytest.param({march(4): True, march(5): True}, march(5), 2, id="today_met"),
            pytest.param(
                {march(3): True, march(4): True}, march(5), 2, id="today_absent_anchor_yesterday"
            ),
            pytest.param(
                {march(4): True, march(5): False}, march(5), 1, id="today_unmet_anchor_yesterday"
            ),
            pytest.param({march(3): True}, march(5), 0, id="yesterday_absent"),
            pytest.param(
                {march(2): True, march(4): True, march(5): True}, march(5), 2, id="gap_breaks"
            ),
            pytest.param(
                {march(3): True, march(4): False, march(5): True}, march(5), 1, id="miss_breaks"
            ),
            pytest.param(
                {date(2024, 2, 28): True, date(2024, 2, 29): True},
                march(1),
                2,
                id="yesterday_across_month_end",
            ),
        ],
    )
    def test_anchor_and_walk(self, met_by_day: dict, today: date, expected: int) -> None:
        assert StreakCalculator._calculate_current_streak(met_by_day, today) == expected


class TestCalculateLongestStreak:
    """Tests for StreakCalculator._calculate_longest_streak."""

    @pytest.mark.parametrize(
        "met_by_day,expected",
        [
            pytest.param({}, 0, id="empty_returns_0"),
            pytest.param({march(1): True}, 1, id="single_met_day"),
            pytest.param({march(1): False}, 0, id="single_missed_day"),
            pytest.param(
                {march(1): True, march(2): True, march(4): True}, 2, id="gap_restarts"
            ),
            pytest.param(
                {march(1): True, march(2): False, march(3): True, march(4): True},
                2,
                id="miss_resets",
            ),
            pytest.param(
                {march(d): True for d in range(10, 15)} | {march(1): True, march(2): True},
                5,
                id="longest_of_several",
            ),
        ],
    )
    def test_longest(self, met_by_day: dict, expected: int) -> None:
        assert StreakCalculator._calculate_longest_streak(met_by_day) == expected


# =============================================================================
# Session-based streaks
# =============================================================================


class TestSessionStreaks:
    """Streaks computed from sessions."""

    def test_gap_in_days(self, make_topic, make_session) -> None:
        """Met on days 1, 2 and 4 with today = day 4: longest 2, current 1."""
        topic = make_topic(goals=[(30, at(1))])
        sessions = [make_session(topic, at(d)) for d in (1, 2, 4)]

        assert longest_streak(sessions) == 2
        assert current_streak(sessions, today=march(4)) == 1

    def test_topic_without_sessions(self, make_topic, make_session) -> None:
        studied = make_topic("Studied", goals=[(30, at(1))])
        idle = make_topic("Idle")
        sessions = [make_session(studied, at(d)) for d in (1, 2)]

        assert current_streak(sessions, topic_id=idle.id, today=march(2)) == 0
        assert longest_streak(sessions, topic_id=idle.id) == 0
        assert current_streak([], today=march(2)) == 0

    def test_open_today_keeps_streak(self, make_topic, make_session) -> None:
        """Short session today does not break yesterday's streak."""
        topic = make_topic(goals=[(30, at(1))])
        sessions = [make_session(topic, at(d)) for d in (1, 2, 3)]
        sessions.append(make_session(topic, at(4), minutes=5))

        assert current_streak(sessions, today=march(4)) == 3

    def test_longest_at_least_current(self, make_topic, make_session) -> None:
        topic = make_topic(goals=[(30, at(1))])
        sessions = [make_session(topic, at(d)) for d in (1, 3, 4, 5, 6)]

        for today in range(1, 10):
            assert longest_streak(sessions) >= current_streak(sessions, today=march(today))


class TestGlobalVersusTopic:
    """Global streaks count a day if any topic met; topic streaks only their own."""

    @pytest.fixture
    def two_topics(self, make_topic, make_session):
        math = make_topic("Math", goals=[(30, at(1))])
        art = make_topic("Art", goals=[(30, at(1))])
        sessions = [
            make_session(math, at(1)),
            make_session(art, at(2)),
            make_session(math, at(3)),
            make_session(art, at(3), minutes=5),
        ]
        return math, art, sessions

    def test_global_counts_any_topic(self, two_topics) -> None:
        _, _, sessions = two_topics
        calculator = StreakCalculator(sessions)

        assert calculator.met_by_day() == {march(1): True, march(2): True, march(3): True}
        assert calculator.current_streak(today=march(3)) == 3

    def test_topic_day_with_other_topic_only_is_unmet(self, two_topics) -> None:
        math, art, sessions = two_topics
        calculator = StreakCalculator(sessions)

        assert calculator.met_by_day(math.id) == {
            march(1): True,
            march(2): False,
            march(3): True,
        }
        assert calculator.current_streak(math.id, today=march(3)) == 1
        assert calculator.longest_streak(art.id) == 1
        assert calculator.last_met_day(art.id) == march(2)


class TestStreakData:
    """Tests for StreakCalculator.streak_data() milestones."""

    def test_milestones(self, make_topic, make_session) -> None:
        topic = make_topic(goals=[(30, at(1))])
        sessions = [make_session(topic, at(d)) for d in range(1, 9)]

        data = StreakCalculator(sessions).streak_data(today=march(8))

        assert data.current_streak == 8
        assert data.longest_streak == 8
        assert data.is_active_today is True
        assert data.last_met_day == march(8)
        assert data.milestones_reached == [3, 7]
        assert data.next_milestone == 14

    def test_topic_scope_matches_calculator(self, make_topic, make_session) -> None:
        """Per-topic data agrees with the calculator's own per-topic answers."""
        math = make_topic("Math", goals=[(30, at(1))])
        art = make_topic("Art", goals=[(30, at(1))])
        sessions = [
            make_session(math, at(1)),
            make_session(math, at(2)),
            make_session(art, at(3)),
        ]
        calculator = StreakCalculator(sessions)

        data = calculator.streak_data(math.id, today=march(3))

        assert data.topic_id == math.id
        assert data.last_met_day == calculator.last_met_day(math.id) == march(2)
        assert data.current_streak == calculator.current_streak(math.id, today=march(3)) == 2
        assert data.longest_streak == 2
        assert data.is_active_today is False
        assert data.milestones_reached == []
        assert data.next_milestone == 3


# =============================================================================
# Service
# =============================================================================


class TestStreakTrackingService:
    """StreakTrackingService with mocked database."""

    @pytest.mark.asyncio
    async def test_get_streak_data(self, mock_db_session, make_result, make_topic, make_session):
        topic = make_topic(goals=[(30, at(1))])
        sessions = [make_session(topic, at(d)) for d in (1, 2, 3)]
        mock_db_session.execute.return_value = make_result(scalars=sessions)

        data = await StreakTrackingService(mock_db_session).get_streak_data(today=march(3))

        assert data.topic_id is None
        assert data.current_streak == 3
        query = mock_db_session.execute.call_args.args[0]
        assert query.get_execution_options()["populate_existing"] is True

    @pytest.mark.asyncio
    async def test_get_streak_overview(
        self, mock_db_session, make_result, make_topic, make_session
    ):
        math = make_topic("Math", goals=[(30, at(1))])
        idle = make_topic("Idle", goals=[(30, at(1))])
        sessions = [make_session(math, at(d)) for d in (2, 3)]
        mock_db_session.execute.side_effect = [
            make_result(scalars=sessions),
            make_result(scalars=[idle.id, math.id]),
        ]

        overview = await StreakTrackingService(mock_db_session).get_streak_overview(
            today=march(3)
        )

        assert overview.overall.current_streak == 2
        assert [s.topic_id for s in overview.by_topic] == [idle.id, math.id]
        assert overview.by_topic[0].current_streak == 0
        assert overview.by_topic[1].longest_streak == 2
