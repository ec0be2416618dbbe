import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from connectfive.core.config import settings
from connectfive.core.dependencies import get_player_data_service, get_stats_service
from connectfive.core.exceptions import StatsValidationError, StoreError
from connectfive.core.limiter import limiter
from connectfive.models.player_stat import Difficulty
from connectfive.schemas.stats import PlayerStatRecordOut, PlayerStatsView, PlayerStatUpdate
from connectfive.services.player_data import PlayerDataService
from connectfive.services.stats_service import StatsAggregationService

router = APIRouter()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_difficulty(difficulty: str) -> Difficulty:
    """Path difficulty, matched case-insensitively ("medium" == "Medium")."""
    try:
        return Difficulty.parse(difficulty)
    except StatsValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )


def _record_game(update: PlayerStatUpdate, players: PlayerDataService) -> None:
    """Save one game through the facade, mapping faults to HTTP errors."""
    try:
        players.update_player_stats(
            update.player_name,
            update.difficulty,
            update.result,
            update.game_duration,
        )
    except StatsValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating player statistics.",
        )

    logger.info(
        "Game result recorded",
        extra={
            "player_name": update.player_name,
            "difficulty": update.difficulty.value,
            "game_result": update.result.value,
        },
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/{difficulty}", response_model=List[PlayerStatRecordOut])
def get_top_players(
    difficulty: Difficulty = Depends(_parse_difficulty),
    count: int = Query(
        default=settings.LEADERBOARD_DEFAULT_COUNT,
        ge=0,
        le=settings.LEADERBOARD_MAX_COUNT,
    ),
    stats: StatsAggregationService = Depends(get_stats_service),
):
    """Top players for a difficulty, most wins first. Empty on store failure."""
    return stats.get_top_players(difficulty, count)


@router.get("/{difficulty}/players", response_model=List[PlayerStatsView])
def get_top_player_views(
    difficulty: Difficulty = Depends(_parse_difficulty),
    count: int = Query(
        default=settings.LEADERBOARD_DEFAULT_COUNT,
        ge=0,
        le=settings.LEADERBOARD_MAX_COUNT,
    ),
    players: PlayerDataService = Depends(get_player_data_service),
):
    """Same ranking as above, reshaped for display."""
    return players.get_top_players(difficulty, count)


@router.put("/players/{player_name}/stats", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.STATS_WRITE_RATE_LIMIT)
def update_player_stats(
    request: Request,
    player_name: str,
    update: PlayerStatUpdate,
    players: PlayerDataService = Depends(get_player_data_service),
):
    if player_name.strip() != update.player_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Player name in URL does not match player name in request body.",
        )

    _record_game(update, players)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/playerstats", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.STATS_WRITE_RATE_LIMIT)
def post_player_stats(
    request: Request,
    update: PlayerStatUpdate,
    players: PlayerDataService = Depends(get_player_data_service),
):
    _record_game(update, players)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
