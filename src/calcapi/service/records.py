"""
Records handed to persistence after each calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class CalculationRecord:
    """One history entry: who asked, what they asked, what they got."""

    client_id: str
    expression: str

    # Trimmed result text, or the configured failure marker
    result: str


@dataclass(frozen=True)
class RandomDrawRecord:
    """Numeric result of a calculation that invoked `rand`."""

    client_id: str
    value: float
    expression: str


class CalculationSink(Protocol):
    """Protocol for calculation record consumers."""

    def record_calculation(self, record: CalculationRecord) -> None:
        """Stores a history entry."""
        ...

    def record_random_draw(self, record: RandomDrawRecord) -> None:
        """Folds a random draw into the client's aggregates."""
        ...


class NullSink:
    """Sink that discards every record."""

    def record_calculation(self, record: CalculationRecord) -> None:
        pass

    def record_random_draw(self, record: RandomDrawRecord) -> None:
        pass
