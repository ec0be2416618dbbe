"""
Stats aggregation over the player_stats table.

Writes are read-modify-write cycles guarded by the record's ``etag`` version
column. A concurrent writer makes our flush fail (StaleDataError on update,
IntegrityError on a racing first insert); the cycle is then rolled back and
replayed against fresh data, up to ``max_attempts`` times. Nothing here
holds an in-process lock, so several API instances can share one store.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from connectfive.core.config import settings
from connectfive.core.exceptions import (
    StatsValidationError,
    StoreConflictError,
    StoreError,
)
from connectfive.models.player_stat import (
    Difficulty,
    GameResult,
    PlayerStatRecord,
    player_id_for,
    utc_now,
)

logger = logging.getLogger(__name__)

MAX_PLAYER_NAME_LENGTH = 50


@dataclass
class StoreHealth:
    ok: bool
    error: Optional[str] = None
    response_time_ms: float = 0.0


class StatsAggregationService:
    def __init__(
        self,
        db: Session,
        max_attempts: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        if max_attempts is None:
            max_attempts = settings.UPSERT_MAX_ATTEMPTS
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self._clock = clock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_result(
        self,
        player_name: str,
        difficulty: Union[Difficulty, str],
        result: Union[GameResult, str],
        game_duration: Union[timedelta, float],
    ) -> PlayerStatRecord:
        """
        Record one completed game for (player, difficulty).

        Creates the record on the first game, otherwise increments it.
        Not idempotent: calling twice counts two games.

        Raises:
            StatsValidationError: bad input; the store is not touched.
            StoreConflictError: the record kept changing under us.
            StoreError: any other store failure.
        """
        name = self._validate_player_name(player_name)
        difficulty = Difficulty.parse(difficulty)
        result = GameResult.parse(result)
        duration = self._validate_duration(game_duration)
        player_id = player_id_for(name)
        log_extra = {
            "player_name": name,
            "difficulty": difficulty.value,
            "game_result": result.value,
        }

        for attempt in range(1, self.max_attempts + 1):
            created = False
            try:
                record = self.db.get(PlayerStatRecord, (difficulty.value, player_id))
                created = record is None
                if created:
                    logger.info(
                        "No stat record yet; creating one",
                        extra=log_extra,
                    )
                    record = PlayerStatRecord.create(name, difficulty, self._clock())
                    self.db.add(record)
                else:
                    record.player_name = name
                record.record_game(result, duration, self._clock())
                self.db.commit()
            except (StaleDataError, IntegrityError) as exc:
                # Only a racing first insert explains an IntegrityError
                if isinstance(exc, IntegrityError) and not created:
                    raise self._store_error(exc, name, difficulty, log_extra) from exc
                self.db.rollback()
                logger.info(
                    "Stat record changed concurrently; retrying",
                    extra={**log_extra, "attempt": attempt},
                )
                continue
            except SQLAlchemyError as exc:
                raise self._store_error(exc, name, difficulty, log_extra) from exc

            logger.info("Upserted player stat", extra={**log_extra, "attempt": attempt})
            return record

        logger.warning("Gave up upserting player stat", extra=log_extra)
        raise StoreConflictError(player_id, difficulty.value, self.max_attempts)

    def _store_error(
        self,
        exc: SQLAlchemyError,
        name: str,
        difficulty: Difficulty,
        log_extra: dict,
    ) -> StoreError:
        """Roll back after a store failure and wrap it as StoreError."""
        self.db.rollback()
        logger.error("Error upserting player stat", extra=log_extra, exc_info=exc)
        return StoreError(f"Could not save stats for {name!r} on {difficulty.value}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_top_players(
        self, difficulty: Union[Difficulty, str], count: Optional[int] = None
    ) -> List[PlayerStatRecord]:
        """
        Best players for a difficulty, most wins first.

        Equal win counts are ordered by player id so the ranking is stable.
        A store failure is logged and yields an empty list.
        """
        difficulty = Difficulty.parse(difficulty)
        if count is None:
            count = settings.LEADERBOARD_DEFAULT_COUNT
        if count <= 0:
            return []

        try:
            records = (
                self.db.query(PlayerStatRecord)
                .filter(PlayerStatRecord.partition_key == difficulty.value)
                .order_by(PlayerStatRecord.wins.desc(), PlayerStatRecord.row_key.asc())
                .limit(count)
                .all()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning(
                f"Error retrieving top players: {exc}",
                extra={"difficulty": difficulty.value},
            )
            return []

        logger.debug(
            f"Found {len(records)} top players", extra={"difficulty": difficulty.value}
        )
        return records

    def check_connection(self) -> StoreHealth:
        """Probe the stat table. Never raises."""
        start = time.perf_counter()
        try:
            self.db.query(PlayerStatRecord.row_key).limit(1).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            elapsed = (time.perf_counter() - start) * 1000
            logger.warning(f"Stat store connectivity check failed: {exc}")
            return StoreHealth(ok=False, error=str(exc), response_time_ms=elapsed)
        elapsed = (time.perf_counter() - start) * 1000
        return StoreHealth(ok=True, response_time_ms=elapsed)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_player_name(player_name: str) -> str:
        if not isinstance(player_name, str) or not player_name.strip():
            raise StatsValidationError("Player name is required")
        name = player_name.strip()
        # The row key is the lower-cased name, which can be longer
        if (
            len(name) > MAX_PLAYER_NAME_LENGTH
            or len(player_id_for(name)) > MAX_PLAYER_NAME_LENGTH
        ):
            raise StatsValidationError(
                f"Player name cannot exceed {MAX_PLAYER_NAME_LENGTH} characters"
            )
        return name

    @staticmethod
    def _validate_duration(game_duration: Union[timedelta, float]) -> timedelta:
        if isinstance(game_duration, timedelta):
            duration = game_duration
        elif isinstance(game_duration, (int, float)) and not isinstance(
            game_duration, bool
        ):
            duration = timedelta(seconds=game_duration)
        else:
            raise StatsValidationError("Game duration must be a timedelta or seconds")
        if duration < timedelta(0):
            raise StatsValidationError("Game duration cannot be negative")
        return duration
