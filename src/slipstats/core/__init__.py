"""
SlipStats Core - Foundation modules for replay statistics.

This module contains the fundamental components:
- constants: Game constants, enums and lookup tables
- config: Application configuration management
- utils: General utility functions
- schemas: Match record data contracts
- loader: Building match records from replay exports
"""

from slipstats.core.constants import (
    CHARACTER_NAMES,
    DEFAULT_STARTING_STOCKS,
    FRAMES_PER_SECOND,
    NO_WINNER,
    OPENING_TYPE_LABELS,
    PUNISH_HIGH_THRESHOLD,
    PUNISH_MEDIUM_THRESHOLD,
    STAGE_NAMES,
    UNRESOLVED_INDEX,
    OpeningType,
    Perspective,
    PunishSeverity,
    Slot,
)
from slipstats.core.schemas import (
    MatchRecord,
    MatchSettings,
    MatchStats,
    MoveHit,
    OverallMetrics,
    PlayerSlot,
    PunishEvent,
    RatePair,
    StockRecord,
)

__all__ = [
    # Enums
    "OpeningType",
    "Perspective",
    "PunishSeverity",
    "Slot",
    # Constants
    "CHARACTER_NAMES",
    "DEFAULT_STARTING_STOCKS",
    "FRAMES_PER_SECOND",
    "NO_WINNER",
    "OPENING_TYPE_LABELS",
    "PUNISH_HIGH_THRESHOLD",
    "PUNISH_MEDIUM_THRESHOLD",
    "STAGE_NAMES",
    "UNRESOLVED_INDEX",
    # Schemas (data contracts)
    "MatchRecord",
    "MatchSettings",
    "MatchStats",
    "MoveHit",
    "OverallMetrics",
    "PlayerSlot",
    "PunishEvent",
    "RatePair",
    "StockRecord",
]
