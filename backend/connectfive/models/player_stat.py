from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Union

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from connectfive.core.database import Base
from connectfive.core.exceptions import StatsValidationError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    """AI opponent strength tier; partitions the stat table."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        """Case-insensitive lookup by value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise StatsValidationError(f"Unknown difficulty: {value!r}")


class GameResult(str, Enum):
    WIN = "Win"
    LOSS = "Loss"
    DRAW = "Draw"

    @classmethod
    def parse(cls, value: Union["GameResult", str]) -> "GameResult":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise StatsValidationError(f"Unknown game result: {value!r}")


def player_id_for(player_name: str) -> str:
    """Row key for a player: names are matched case-insensitively."""
    return player_name.strip().lower()


class PlayerStatRecord(Base):
    """
    Aggregate statistics for one player against one difficulty.

    partition_key = difficulty, row_key = lower-cased player name. The
    ``etag`` column is SQLAlchemy's version counter: every UPDATE is issued
    as ``... WHERE etag = <value read>`` so a concurrent writer makes the
    flush fail with StaleDataError instead of silently overwriting.
    """

    __tablename__ = "player_stats"

    partition_key = Column(String(16), primary_key=True)
    row_key = Column(String(50), primary_key=True)
    player_name = Column(String(50), nullable=False)
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    draws = Column(Integer, default=0, nullable=False)
    games_played = Column(Integer, default=0, nullable=False)
    average_game_time_seconds = Column(Float, default=0.0, nullable=False)
    current_win_streak = Column(Integer, default=0, nullable=False)
    best_win_streak = Column(Integer, default=0, nullable=False)
    last_played = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    etag = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_player_stats_partition_wins", "partition_key", "wins"),
    )
    __mapper_args__ = {"version_id_col": etag}

    @classmethod
    def create(
        cls, player_name: str, difficulty: Difficulty, now: datetime
    ) -> "PlayerStatRecord":
        """Blank record for a player's first game under ``difficulty``."""
        return cls(
            partition_key=difficulty.value,
            row_key=player_id_for(player_name),
            player_name=player_name,
            wins=0,
            losses=0,
            draws=0,
            games_played=0,
            average_game_time_seconds=0.0,
            current_win_streak=0,
            best_win_streak=0,
            last_played=now,
        )

    @property
    def player_id(self) -> str:
        return self.row_key

    @property
    def difficulty(self) -> Difficulty:
        return Difficulty(self.partition_key)

    @property
    def win_rate(self) -> float:
        if not self.games_played:
            return 0.0
        return self.wins / self.games_played * 100.0

    @property
    def total_play_time(self) -> timedelta:
        return timedelta(seconds=self.average_game_time_seconds * self.games_played)

    def record_game(
        self, result: GameResult, duration: timedelta, now: datetime
    ) -> None:
        """Fold one completed game into the aggregates."""
        self.games_played += 1
        self.last_played = now

        # Cumulative moving average over all games, including this one
        previous_total = self.average_game_time_seconds * (self.games_played - 1)
        self.average_game_time_seconds = (
            previous_total + duration.total_seconds()
        ) / self.games_played

        if result == GameResult.WIN:
            self.wins += 1
            self.current_win_streak += 1
            self.best_win_streak = max(self.best_win_streak, self.current_win_streak)
        elif result == GameResult.LOSS:
            self.losses += 1
            self.current_win_streak = 0
        else:
            self.draws += 1
            self.current_win_streak = 0

    def __repr__(self) -> str:
        return (
            f"<PlayerStatRecord {self.partition_key}/{self.row_key} "
            f"W{self.wins} L{self.losses} D{self.draws}>"
        )
