from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from connectfive.models.player_stat import Difficulty, GameResult


class PlayerStatUpdate(BaseModel):
    """One completed game, as reported by the client."""

    player_name: str = Field(min_length=1, max_length=50)
    difficulty: Difficulty
    result: GameResult
    game_time_milliseconds: float = Field(ge=0)

    @field_validator("player_name")
    @classmethod
    def player_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player name cannot be blank")
        return v.strip()

    @property
    def game_duration(self) -> timedelta:
        return timedelta(milliseconds=self.game_time_milliseconds)


class PlayerStatRecordOut(BaseModel):
    """Storage-shaped stat record returned by the leaderboard endpoint."""

    model_config = ConfigDict(from_attributes=True)

    player_id: str
    player_name: str
    difficulty: Difficulty
    wins: int
    losses: int
    draws: int
    games_played: int
    win_rate: float
    average_game_time_seconds: float
    current_win_streak: int
    best_win_streak: int
    last_played: datetime


class PlayerStatsView(BaseModel):
    """UI-shaped view of a stat record; rebuilt on every read."""

    player_id: str
    player_name: str
    difficulty: Difficulty
    games_played: int
    wins: int
    losses: int
    draws: int
    win_streak: int
    best_win_streak: int
    total_play_time: timedelta
    last_played: datetime

    @computed_field
    @property
    def win_rate(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return round(self.wins / self.games_played * 100, 2)
