"""Player data facade: stat records reshaped for the game UI."""

import logging
from datetime import timedelta
from typing import List, Optional, Union

from connectfive.models.player_stat import Difficulty, GameResult, PlayerStatRecord
from connectfive.schemas.stats import PlayerStatsView
from connectfive.services.notifications import StatsChanged, StatsChangeNotifier
from connectfive.services.stats_service import StatsAggregationService

logger = logging.getLogger(__name__)


def to_view(record: PlayerStatRecord) -> PlayerStatsView:
    return PlayerStatsView(
        player_id=record.player_id,
        player_name=record.player_name,
        difficulty=record.difficulty,
        games_played=record.games_played,
        wins=record.wins,
        losses=record.losses,
        draws=record.draws,
        win_streak=record.current_win_streak,
        best_win_streak=record.best_win_streak,
        total_play_time=record.total_play_time,
        last_played=record.last_played,
    )


class PlayerDataService:
    """
    Server-side player data access for the UI.

    Reads are best-effort: any failure is logged and an empty result is
    returned. Writes are not: failures propagate so the UI can tell the
    player their result was not saved.
    """

    def __init__(self, stats: StatsAggregationService, notifier: StatsChangeNotifier):
        self.stats = stats
        self.notifier = notifier

    def get_top_players(
        self, difficulty: Union[Difficulty, str], count: Optional[int] = None
    ) -> List[PlayerStatsView]:
        try:
            records = self.stats.get_top_players(difficulty, count)
            return [to_view(record) for record in records]
        except Exception:
            logger.error(
                "Error getting top players",
                extra={"difficulty": str(getattr(difficulty, "value", difficulty))},
                exc_info=True,
            )
            return []

    def update_player_stats(
        self,
        player_name: str,
        difficulty: Union[Difficulty, str],
        result: Union[GameResult, str],
        game_duration: Union[timedelta, float],
    ) -> PlayerStatsView:
        try:
            record = self.stats.upsert_result(
                player_name, difficulty, result, game_duration
            )
        except Exception:
            logger.error(
                "Error updating player stats",
                extra={"player_name": player_name},
                exc_info=True,
            )
            raise

        view = to_view(record)
        self.notifier.publish(
            StatsChanged(
                player_id=view.player_id,
                player_name=view.player_name,
                difficulty=view.difficulty,
                result=GameResult.parse(result),
            )
        )
        return view

    def get_player_stats(self, player_id: str) -> Optional[PlayerStatsView]:
        # Lookup by id alone is not supported when rendering on the server
        logger.warning(
            "get_player_stats by id is not implemented for server-side rendering",
            extra={"player_name": player_id},
        )
        return None
