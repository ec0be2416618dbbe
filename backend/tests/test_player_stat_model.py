"""
test_player_stat_model.py

Unit tests for PlayerStatRecord.record_game and the enum parsers.
No database involved: records are transient ORM instances.
"""

from datetime import datetime, timedelta, timezone

import pytest

from connectfive.core.exceptions import StatsValidationError
from connectfive.models.player_stat import (
    Difficulty,
    GameResult,
    PlayerStatRecord,
    player_id_for,
)

pytestmark = pytest.mark.unit

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def _record(name: str = "Ann") -> PlayerStatRecord:
    return PlayerStatRecord.create(name, Difficulty.MEDIUM, NOW)


def test_new_record_is_keyed_by_difficulty_and_lowercase_name():
    record = _record("AnnMarie")
    assert record.partition_key == "Medium"
    assert record.row_key == "annmarie"
    assert record.player_id == "annmarie"
    assert record.player_name == "AnnMarie"
    assert record.difficulty is Difficulty.MEDIUM
    assert record.games_played == 0
    assert record.win_rate == 0.0


def test_first_win_seeds_counters():
    record = _record()
    record.record_game(GameResult.WIN, timedelta(seconds=30), NOW)

    assert record.wins == 1
    assert record.games_played == 1
    assert record.current_win_streak == 1
    assert record.best_win_streak == 1
    assert record.average_game_time_seconds == pytest.approx(30.0)
    assert record.last_played == NOW


def test_loss_after_win_resets_streak_and_averages_time():
    record = _record()
    record.record_game(GameResult.WIN, timedelta(seconds=30), NOW)
    record.record_game(GameResult.LOSS, timedelta(seconds=60), NOW)

    assert record.wins == 1
    assert record.losses == 1
    assert record.games_played == 2
    assert record.current_win_streak == 0
    assert record.best_win_streak == 1
    assert record.average_game_time_seconds == pytest.approx(45.0)
    assert record.total_play_time == timedelta(seconds=90)


def test_draw_breaks_streak():
    record = _record()
    record.record_game(GameResult.WIN, timedelta(seconds=10), NOW)
    record.record_game(GameResult.WIN, timedelta(seconds=10), NOW)
    record.record_game(GameResult.DRAW, timedelta(seconds=10), NOW)

    assert record.draws == 1
    assert record.current_win_streak == 0
    assert record.best_win_streak == 2


def test_best_streak_only_grows():
    record = _record()
    sequence = ["Win", "Win", "Win", "Loss", "Win", "Win", "Draw", "Win"]
    for result in sequence:
        record.record_game(GameResult(result), timedelta(seconds=5), NOW)

    assert record.best_win_streak == 3
    assert record.current_win_streak == 1
    assert record.games_played == record.wins + record.losses + record.draws
    assert record.best_win_streak >= record.current_win_streak


def test_win_rate_is_a_percentage():
    record = _record()
    for result in (GameResult.WIN, GameResult.WIN, GameResult.LOSS, GameResult.DRAW):
        record.record_game(result, timedelta(0), NOW)
    assert record.win_rate == pytest.approx(50.0)


def test_zero_length_games_keep_average_at_zero():
    record = _record()
    record.record_game(GameResult.LOSS, timedelta(0), NOW)
    assert record.average_game_time_seconds == 0.0


@pytest.mark.parametrize("raw", ["Medium", "medium", " MEDIUM "])
def test_difficulty_parse_is_case_insensitive(raw):
    assert Difficulty.parse(raw) is Difficulty.MEDIUM


@pytest.mark.parametrize("raw", ["Impossible", "", None, 2])
def test_difficulty_parse_rejects_unknown_values(raw):
    with pytest.raises(StatsValidationError):
        Difficulty.parse(raw)


def test_game_result_parse():
    assert GameResult.parse("draw") is GameResult.DRAW
    assert GameResult.parse(GameResult.WIN) is GameResult.WIN
    with pytest.raises(StatsValidationError):
        GameResult.parse("Forfeit")


def test_player_id_ignores_case_and_surrounding_spaces():
    assert player_id_for("  Ann ") == player_id_for("ANN") == "ann"
