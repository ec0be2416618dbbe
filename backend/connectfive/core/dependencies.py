from fastapi import Depends
from sqlalchemy.orm import Session

from connectfive.core.config import settings
from connectfive.core.database import get_db
from connectfive.services.notifications import stats_changes
from connectfive.services.player_data import PlayerDataService
from connectfive.services.stats_service import StatsAggregationService


def get_stats_service(db: Session = Depends(get_db)) -> StatsAggregationService:
    return StatsAggregationService(db, max_attempts=settings.UPSERT_MAX_ATTEMPTS)


def get_player_data_service(
    stats: StatsAggregationService = Depends(get_stats_service),
) -> PlayerDataService:
    return PlayerDataService(stats, notifier=stats_changes)
