"""Tests for the PlayerDataService facade and the change notifier."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from connectfive.core.exceptions import StatsValidationError, StoreError
from connectfive.models.player_stat import Difficulty, GameResult
from connectfive.schemas.stats import PlayerStatsView
from connectfive.services.notifications import StatsChanged, StatsChangeNotifier
from connectfive.services.player_data import PlayerDataService
from connectfive.services.stats_service import StatsAggregationService

pytestmark = pytest.mark.unit


@pytest.fixture
def notifier():
    return StatsChangeNotifier()


@pytest.fixture
def players(db, clock, notifier):
    return PlayerDataService(StatsAggregationService(db, clock=clock), notifier)


def _failing_stats(exc: Exception) -> MagicMock:
    stats = MagicMock(spec=StatsAggregationService)
    stats.get_top_players.side_effect = exc
    stats.upsert_result.side_effect = exc
    return stats


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_top_players_are_reshaped_for_display(players):
    players.update_player_stats("Ann", Difficulty.MEDIUM, GameResult.WIN, timedelta(seconds=30))
    players.update_player_stats("Ann", Difficulty.MEDIUM, GameResult.LOSS, timedelta(seconds=60))

    [view] = players.get_top_players(Difficulty.MEDIUM, 5)

    assert isinstance(view, PlayerStatsView)
    assert view.player_id == "ann"
    assert view.player_name == "Ann"
    assert view.difficulty is Difficulty.MEDIUM
    assert view.games_played == 2
    assert view.wins == 1
    assert view.losses == 1
    assert view.win_streak == 0
    assert view.best_win_streak == 1
    assert view.total_play_time == timedelta(seconds=90)
    assert view.win_rate == 50.0


def test_top_players_empty_when_no_records(players):
    assert players.get_top_players(Difficulty.HARD) == []


def test_top_players_store_fault_returns_empty(notifier):
    facade = PlayerDataService(_failing_stats(StoreError("down")), notifier)
    assert facade.get_top_players(Difficulty.EASY, 5) == []


def test_top_players_unexpected_error_returns_empty(notifier):
    facade = PlayerDataService(_failing_stats(RuntimeError("boom")), notifier)
    assert facade.get_top_players("Easy", 5) == []


def test_top_players_invalid_difficulty_returns_empty(players):
    assert players.get_top_players("Nightmare", 5) == []


def test_get_player_stats_is_not_available_server_side(players, caplog):
    players.update_player_stats("Ann", Difficulty.EASY, GameResult.WIN, 5)
    with caplog.at_level("WARNING"):
        assert players.get_player_stats("ann") is None
    assert "not implemented" in caplog.text


# ---------------------------------------------------------------------------
# Writes and notifications
# ---------------------------------------------------------------------------


def test_update_publishes_change_event(players, notifier):
    events = []
    notifier.subscribe(events.append)

    view = players.update_player_stats("Ann", "Hard", "Win", 12)

    assert view.wins == 1
    assert len(events) == 1
    event = events[0]
    assert isinstance(event, StatsChanged)
    assert event.player_id == "ann"
    assert event.player_name == "Ann"
    assert event.difficulty is Difficulty.HARD
    assert event.result is GameResult.WIN


def test_update_failure_propagates_without_notifying(notifier):
    events = []
    notifier.subscribe(events.append)
    facade = PlayerDataService(_failing_stats(StoreError("down")), notifier)

    with pytest.raises(StoreError):
        facade.update_player_stats("Ann", Difficulty.EASY, GameResult.WIN, 5)

    assert events == []


def test_update_validation_error_propagates(players, notifier):
    events = []
    notifier.subscribe(events.append)

    with pytest.raises(StatsValidationError):
        players.update_player_stats("", Difficulty.EASY, GameResult.WIN, 5)

    assert events == []


def test_unsubscribed_callback_is_not_called(players, notifier):
    events = []
    unsubscribe = notifier.subscribe(events.append)
    unsubscribe()
    # Calling twice is harmless
    unsubscribe()

    players.update_player_stats("Ann", Difficulty.EASY, GameResult.DRAW, 5)

    assert events == []
    assert len(notifier) == 0


def test_failing_subscriber_does_not_block_others_or_the_write(players, notifier):
    received = []

    def broken(event):
        raise RuntimeError("listener crashed")

    notifier.subscribe(broken)
    notifier.subscribe(received.append)

    view = players.update_player_stats("Ann", Difficulty.EASY, GameResult.WIN, 5)

    assert view.wins == 1
    assert len(received) == 1


def test_notifier_clear_removes_everyone(notifier):
    notifier.subscribe(lambda event: None)
    notifier.subscribe(lambda event: None)
    notifier.clear()
    assert len(notifier) == 0
