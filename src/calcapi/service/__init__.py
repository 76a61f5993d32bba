"""
Calculator service boundary: configuration, result trimming, history and
leaderboard recording around the expression engine.
"""

from .calculator import (
    EMPTY_EXPRESSION_MESSAGE,
    CalculationResponse,
    Calculator,
    trim_result,
)
from .config import (
    ENV_VAR_HIGH_PRECISION,
    ENV_VAR_LOG_LEVEL,
    ENV_VAR_MAX_EXPRESSION_LENGTH,
    CalculatorConfig,
)
from .leaderboard import InMemoryLeaderboard, LeaderboardEntry
from .records import (
    CalculationRecord,
    CalculationSink,
    NullSink,
    RandomDrawRecord,
)

__all__ = [
    # Config
    "CalculatorConfig",
    "ENV_VAR_HIGH_PRECISION",
    "ENV_VAR_LOG_LEVEL",
    "ENV_VAR_MAX_EXPRESSION_LENGTH",
    # Records
    "CalculationRecord",
    "RandomDrawRecord",
    "CalculationSink",
    "NullSink",
    # Leaderboard
    "LeaderboardEntry",
    "InMemoryLeaderboard",
    # Calculator
    "Calculator",
    "CalculationResponse",
    "EMPTY_EXPRESSION_MESSAGE",
    "trim_result",
]
