"""
In-memory calculation history and random-draw leaderboard.

Each client's random draws are folded into a running aggregate: the sum
and count of all draws plus the smallest and largest draw with the
expression that produced each. Ties keep the earlier expression.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, List

from .records import CalculationRecord, RandomDrawRecord

logger = logging.getLogger(__name__)

DEFAULT_STANDINGS_LIMIT = 1000


@dataclass(frozen=True)
class LeaderboardEntry:
    """Running aggregate of one client's random draws."""

    client_id: str
    total_value: float
    count: int
    min_value: float
    min_expression: str
    max_value: float
    max_expression: str

    @classmethod
    def first(cls, client_id: str, value: float, expression: str) -> LeaderboardEntry:
        """Creates the aggregate for a client's first draw."""
        return cls(
            client_id=client_id,
            total_value=value,
            count=1,
            min_value=value,
            min_expression=expression,
            max_value=value,
            max_expression=expression,
        )

    def update(self, value: float, expression: str) -> LeaderboardEntry:
        """Returns a new aggregate with one more draw folded in."""
        entry = replace(
            self, total_value=self.total_value + value, count=self.count + 1
        )
        if value < entry.min_value:
            entry = replace(entry, min_value=value, min_expression=expression)
        if value > entry.max_value:
            entry = replace(entry, max_value=value, max_expression=expression)
        return entry


class InMemoryLeaderboard:
    """
    CalculationSink keeping history and leaderboard aggregates in memory.

    Safe to share between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: List[CalculationRecord] = []
        self._entries: Dict[str, LeaderboardEntry] = {}

    def record_calculation(self, record: CalculationRecord) -> None:
        with self._lock:
            self._history.append(record)

    def record_random_draw(self, record: RandomDrawRecord) -> None:
        with self._lock:
            current = self._entries.get(record.client_id)
            if current is None:
                entry = LeaderboardEntry.first(
                    record.client_id, record.value, record.expression
                )
            else:
                entry = current.update(record.value, record.expression)
            self._entries[record.client_id] = entry

        logger.debug(
            "leaderboard_updated",
            extra={
                "client_id": record.client_id,
                "count": entry.count,
                "total_value": entry.total_value,
            },
        )

    @property
    def history(self) -> List[CalculationRecord]:
        """History entries in arrival order."""
        with self._lock:
            return list(self._history)

    def entry(self, client_id: str) -> LeaderboardEntry | None:
        with self._lock:
            return self._entries.get(client_id)

    def standings(self, limit: int = DEFAULT_STANDINGS_LIMIT) -> List[LeaderboardEntry]:
        """Entries ordered by total value, highest first."""
        with self._lock:
            entries = list(self._entries.values())
        entries.sort(key=lambda e: e.total_value, reverse=True)
        return entries[:limit]
