"""
SlipStats Analysis - the aggregation engine.

- game: per-match lookups (player slot, stocks, winner, stage, teams)
- punish: derived values of a single punish
- models: immutable summary tallies
- aggregates: folds over match collections
"""

from slipstats.analysis.aggregates import (
    PlayerReport,
    build_player_report,
    get_best_punish,
    get_character_usage,
    get_global_stats,
    get_match_global_stats,
    get_opponent_summary,
    get_player_punishes,
    get_top_punishes,
    resolve_target_slot,
)
from slipstats.analysis.game import (
    UnresolvedPlayerError,
    get_character_name,
    get_last_player_stock,
    get_match_winner,
    get_player_index,
    get_player_name,
    get_player_stocks,
    get_stage_name,
    get_teams,
)
from slipstats.analysis.models import (
    CharacterTally,
    CharacterUsage,
    GlobalStats,
    OpponentRecord,
    OpponentTally,
    RankedPunish,
)
from slipstats.analysis.punish import (
    classify_punish_damage,
    describe_punish,
    format_damage_range,
    get_opening_label,
    get_punish_damage,
    get_punish_severity,
)

__all__ = [
    # Aggregations
    "PlayerReport",
    "build_player_report",
    "get_best_punish",
    "get_character_usage",
    "get_global_stats",
    "get_match_global_stats",
    "get_opponent_summary",
    "get_player_punishes",
    "get_top_punishes",
    "resolve_target_slot",
    # Per-match
    "UnresolvedPlayerError",
    "get_character_name",
    "get_last_player_stock",
    "get_match_winner",
    "get_player_index",
    "get_player_name",
    "get_player_stocks",
    "get_stage_name",
    "get_teams",
    # Models
    "CharacterTally",
    "CharacterUsage",
    "GlobalStats",
    "OpponentRecord",
    "OpponentTally",
    "RankedPunish",
    # Punish values
    "classify_punish_damage",
    "describe_punish",
    "format_damage_range",
    "get_opening_label",
    "get_punish_damage",
    "get_punish_severity",
]
