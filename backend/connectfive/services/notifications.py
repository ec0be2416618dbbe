"""
Stats change notifications.

The facade publishes a StatsChanged event after every successful write.
Whoever renders leaderboards subscribes here and decides for itself when to
refresh; the facade never holds on to subscribers.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

from connectfive.models.player_stat import Difficulty, GameResult, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsChanged:
    player_id: str
    player_name: str
    difficulty: Difficulty
    result: GameResult
    occurred_at: datetime = field(default_factory=utc_now)


Subscriber = Callable[[StatsChanged], None]


class StatsChangeNotifier:
    """Callback registry for StatsChanged events."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: StatsChanged) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                # The write already succeeded; one bad listener must not hide it
                logger.exception(
                    "Stats change subscriber failed",
                    extra={
                        "player_name": event.player_name,
                        "difficulty": event.difficulty.value,
                    },
                )

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)


# Shared by the API host; see main.py lifespan
stats_changes = StatsChangeNotifier()
