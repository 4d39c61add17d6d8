"""
SlipStats - Player statistics across Slippi replays

Aggregates already-parsed Super Smash Bros. Melee replays into a player's
season stats: win/loss record, head-to-head summaries, character usage and
their best punishes.

Usage:
    from slipstats import load_matches, get_global_stats, get_top_punishes

    matches = load_matches(["exports/"])
    stats = get_global_stats(matches, "MANG#0")
    print(stats.wins, stats.count, stats.conversion_rate)

    for entry in get_top_punishes(matches, "MANG#0")[:20]:
        print(entry.match.display_name, entry.move_count)
"""

__version__ = "0.1.0"
__author__ = "SlipStats Contributors"


def __getattr__(name):
    """Lazy import so that `import slipstats` stays cheap."""
    # Loading
    if name == "MatchRecord":
        from slipstats.core.schemas import MatchRecord
        return MatchRecord
    elif name == "load_matches":
        from slipstats.core.loader import load_matches
        return load_matches
    elif name == "match_from_dict":
        from slipstats.core.loader import match_from_dict
        return match_from_dict
    # Per-match
    elif name == "get_player_index":
        from slipstats.analysis.game import get_player_index
        return get_player_index
    elif name == "get_match_winner":
        from slipstats.analysis.game import get_match_winner
        return get_match_winner
    # Aggregations
    elif name == "get_global_stats":
        from slipstats.analysis.aggregates import get_global_stats
        return get_global_stats
    elif name == "get_character_usage":
        from slipstats.analysis.aggregates import get_character_usage
        return get_character_usage
    elif name == "get_opponent_summary":
        from slipstats.analysis.aggregates import get_opponent_summary
        return get_opponent_summary
    elif name == "get_top_punishes":
        from slipstats.analysis.aggregates import get_top_punishes
        return get_top_punishes
    elif name == "build_player_report":
        from slipstats.analysis.aggregates import build_player_report
        return build_player_report
    elif name == "Perspective":
        from slipstats.core.constants import Perspective
        return Perspective
    raise AttributeError(f"module 'slipstats' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Loading
    "MatchRecord",
    "load_matches",
    "match_from_dict",
    # Per-match
    "get_player_index",
    "get_match_winner",
    # Aggregations
    "get_global_stats",
    "get_character_usage",
    "get_opponent_summary",
    "get_top_punishes",
    "build_player_report",
    "Perspective",
]
