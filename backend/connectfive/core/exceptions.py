"""
Error taxonomy for the statistics service.

Validation problems are raised before the store is touched. Store problems
wrap the underlying SQLAlchemy error as ``__cause__``. Missing data is never
an error: reads return an empty list or ``None`` instead.
"""


class ConnectFiveError(Exception):
    """Base class for every error raised by the statistics layer."""


class StatsValidationError(ConnectFiveError, ValueError):
    """Malformed input such as an empty player name or unknown difficulty."""


class StoreError(ConnectFiveError):
    """The stat store is unavailable or rejected the operation."""


class StoreConflictError(StoreError):
    """Optimistic-concurrency retries ran out for a single stat record."""

    def __init__(self, player_id: str, difficulty: str, attempts: int):
        self.player_id = player_id
        self.difficulty = difficulty
        self.attempts = attempts
        super().__init__(
            f"Stat record {difficulty}/{player_id} kept changing; "
            f"gave up after {attempts} attempts"
        )
