"""
Aggregation engine - multi-match statistics for one player.

Every public function here is a pure fold over a list of MatchRecords:
nothing is cached, inputs are never mutated and each call builds fresh
output. Matches are folded with ``functools.reduce`` into frozen
accumulators (see analysis/models.py), so partial results computed over
separate chunks of a collection can be combined with ``+``.

Preconditions:
- Only singles (two-player) matches are aggregated; others are skipped.
- Unavailable (corrupt) matches are skipped and logged.
- Matches where the player tag is not found are skipped, or raise
  UnresolvedPlayerError when ``strict=True``.

Usage:
    stats = get_global_stats(matches, "MANG#0")
    print(stats.wins, stats.conversion_rate)

    for row in get_character_usage(matches, "MANG#0", Perspective.OPPONENT):
        print(row.character_id, row.count, row.wins)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import reduce
from typing import Any

from slipstats.analysis.game import (
    UnresolvedPlayerError,
    get_match_winner,
    get_player_index,
)
from slipstats.analysis.models import (
    CharacterTally,
    CharacterUsage,
    GlobalStats,
    OpponentRecord,
    OpponentTally,
    RankedPunish,
)
from slipstats.core.config import AnalysisConfig
from slipstats.core.constants import (
    DEFAULT_STARTING_STOCKS,
    NO_WINNER,
    PUNISH_HIGH_THRESHOLD,
    PUNISH_MEDIUM_THRESHOLD,
    UNRESOLVED_INDEX,
    Perspective,
    Slot,
)
from slipstats.core.schemas import MatchRecord, PunishEvent
from slipstats.core.utils import timed

logger = logging.getLogger(__name__)


# ============================================================================
# Per-match helpers
# ============================================================================


def resolve_target_slot(match: MatchRecord, tag: str, strict: bool = False) -> Slot | None:
    """
    Slot the player played in, or None if the match cannot be aggregated.

    Raises:
        UnresolvedPlayerError: strict mode and the tag is in neither slot
    """
    if not match.is_available:
        logger.warning(f"Skipping unavailable replay {match.display_name}: {match.error}")
        return None

    if not match.is_singles:
        logger.warning(
            f"Skipping {match.display_name}: {len(match.settings.players)} players, "
            "only singles matches are aggregated"
        )
        return None

    index = get_player_index(match, tag)
    if index == UNRESOLVED_INDEX:
        if strict:
            raise UnresolvedPlayerError(tag, match)
        logger.debug(f"Player {tag!r} not in {match.display_name}, skipping")
        return None

    return Slot(index)


def did_player_win(
    match: MatchRecord, slot: Slot, starting_stocks: int = DEFAULT_STARTING_STOCKS
) -> bool:
    """True only when the slot is the decided winner; draws count for no one."""
    return get_match_winner(match, starting_stocks) == slot


def get_player_punishes(match: MatchRecord, slot: int) -> list[PunishEvent]:
    """Punishes landed by a slot, in match order."""
    if match.stats is None:
        return []
    return [p for p in match.stats.conversions if p.player_index == slot]


def get_best_punish(match: MatchRecord, slot: int) -> PunishEvent | None:
    """The slot's punish with the most moves; the earliest one on ties."""
    candidates = [p for p in get_player_punishes(match, slot) if p.moves]
    return max(candidates, key=lambda p: p.move_count, default=None)


# ============================================================================
# Character usage
# ============================================================================


def get_character_usage(
    matches: Sequence[MatchRecord],
    tag: str,
    perspective: Perspective | str = Perspective.SELF,
    *,
    starting_stocks: int = DEFAULT_STARTING_STOCKS,
    strict: bool = False,
) -> list[CharacterUsage]:
    """
    Games and wins grouped by character.

    With Perspective.SELF rows are the player's own characters; with
    Perspective.OPPONENT they are the characters played against. In both
    cases ``wins`` counts games the player won.

    Returns:
        Rows sorted by games played, most first; ties keep first-seen order
    """
    perspective = Perspective(perspective)

    def fold(groups: dict[int, CharacterTally], match: MatchRecord) -> dict[int, CharacterTally]:
        target = resolve_target_slot(match, tag, strict)
        if target is None:
            return groups

        subject = match.player(target if perspective is Perspective.SELF else target.opponent)
        if subject is None:
            logger.warning(f"Missing player entry in {match.display_name}, skipping")
            return groups

        won = did_player_win(match, target, starting_stocks)
        tally = groups.get(subject.character_id, CharacterTally()).add_game(won, subject.tag)
        return {**groups, subject.character_id: tally}

    groups = reduce(fold, matches, {})
    rows = [CharacterUsage(character_id=cid, tally=tally) for cid, tally in groups.items()]
    return sorted(rows, key=lambda row: -row.count)


# ============================================================================
# Opponents
# ============================================================================


def get_opponent_summary(
    matches: Sequence[MatchRecord],
    tag: str,
    *,
    starting_stocks: int = DEFAULT_STARTING_STOCKS,
    strict: bool = False,
) -> list[OpponentRecord]:
    """
    Head-to-head record against every opponent.

    Returns:
        Rows sorted by games played, most first; ties keep first-seen order
    """

    def fold(groups: dict[str, OpponentTally], match: MatchRecord) -> dict[str, OpponentTally]:
        target = resolve_target_slot(match, tag, strict)
        if target is None:
            return groups

        opponent = match.player(target.opponent)
        if opponent is None:
            logger.warning(f"Missing opponent entry in {match.display_name}, skipping")
            return groups

        won = did_player_win(match, target, starting_stocks)
        tally = groups.get(opponent.tag, OpponentTally()).add_game(won, opponent.character_id)
        return {**groups, opponent.tag: tally}

    groups = reduce(fold, matches, {})
    rows = [OpponentRecord(tag=name, tally=tally) for name, tally in groups.items()]
    return sorted(rows, key=lambda row: -row.count)


# ============================================================================
# Punishes
# ============================================================================


def get_top_punishes(
    matches: Sequence[MatchRecord],
    tag: str,
    *,
    strict: bool = False,
) -> list[RankedPunish]:
    """
    Each match's longest punish by the player, ranked across matches.

    Matches without a punish by the player are left out, so the result is
    never longer than ``matches``. The full ranking is returned; slicing
    to a display count is up to the caller.
    """

    def fold(ranked: tuple[RankedPunish, ...], match: MatchRecord) -> tuple[RankedPunish, ...]:
        target = resolve_target_slot(match, tag, strict)
        if target is None:
            return ranked
        best = get_best_punish(match, target)
        if best is None:
            return ranked
        return ranked + (RankedPunish(match=match, punish=best),)

    ranked = reduce(fold, matches, ())
    return sorted(ranked, key=lambda entry: -entry.move_count)


# ============================================================================
# Global stats
# ============================================================================


def get_match_global_stats(
    match: MatchRecord,
    tag: str,
    *,
    starting_stocks: int = DEFAULT_STARTING_STOCKS,
    strict: bool = False,
) -> GlobalStats:
    """
    GlobalStats for a single match.

    A match that cannot be aggregated yields a summary with ``skipped=1``
    and nothing else, so it still adds up correctly.
    """
    target = resolve_target_slot(match, tag, strict)
    if target is None:
        return GlobalStats(skipped=1)

    own = match.overall_for(target)
    theirs = match.overall_for(target.opponent)
    opponent = match.player(target.opponent)
    if own is None or theirs is None or opponent is None:
        logger.warning(f"Missing overall stats in {match.display_name}, skipping")
        return GlobalStats(skipped=1)

    winner = get_match_winner(match, starting_stocks)
    won = winner == target
    return GlobalStats(
        count=1,
        wins=int(won),
        draws=int(winner == NO_WINNER),
        opponents=(
            OpponentRecord(
                tag=opponent.tag, tally=OpponentTally().add_game(won, opponent.character_id)
            ),
        ),
        time=match.last_frame,
        kills=own.kill_count,
        deaths=theirs.kill_count,
        damage_done=own.total_damage,
        damage_received=theirs.total_damage,
        conversion_rate_pair=own.successful_conversions,
        openings_per_kill_pair=own.openings_per_kill,
        damage_per_opening_pair=own.damage_per_opening,
        neutral_win_ratio_pair=own.neutral_win_ratio,
        inputs_per_minute_pair=own.inputs_per_minute,
        digital_inputs_per_minute_pair=own.digital_inputs_per_minute,
        punishes=tuple(RankedPunish(match=match, punish=p) for p in get_player_punishes(match, target)),
    )


def get_global_stats(
    matches: Sequence[MatchRecord],
    tag: str,
    *,
    starting_stocks: int = DEFAULT_STARTING_STOCKS,
    strict: bool = False,
) -> GlobalStats:
    """
    Season totals for a player across a match collection.

    Ratios (conversion rate, openings per kill, ...) are computed from the
    summed counts and totals, not averaged per match; they come out NaN
    when nothing was recorded.
    """
    stats = reduce(
        lambda acc, match: acc
        + get_match_global_stats(match, tag, starting_stocks=starting_stocks, strict=strict),
        matches,
        GlobalStats(),
    )
    logger.debug(
        f"Global stats for {tag!r}: {stats.count} matches, {stats.skipped} skipped, "
        f"{stats.wins} wins"
    )
    return stats


# ============================================================================
# Player report
# ============================================================================


@dataclass(frozen=True)
class PlayerReport:
    """All summaries for one player over one match collection."""

    tag: str
    global_stats: GlobalStats
    characters: tuple[CharacterUsage, ...] = ()
    opponent_characters: tuple[CharacterUsage, ...] = ()
    opponents: tuple[OpponentRecord, ...] = ()
    top_punishes: tuple[RankedPunish, ...] = ()
    # Damage tiers used when describing punishes
    medium_threshold: float = PUNISH_MEDIUM_THRESHOLD
    high_threshold: float = PUNISH_HIGH_THRESHOLD

    def to_dict(self, punish_limit: int | None = None) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        punishes = self.top_punishes if punish_limit is None else self.top_punishes[:punish_limit]
        return {
            "tag": self.tag,
            "global": self.global_stats.to_dict(),
            "characters": [row.to_dict() for row in self.characters],
            "opponent_characters": [row.to_dict() for row in self.opponent_characters],
            "opponents": [row.to_dict() for row in self.opponents],
            "top_punishes": [
                entry.to_dict(self.medium_threshold, self.high_threshold) for entry in punishes
            ],
        }


@timed
def build_player_report(
    matches: Sequence[MatchRecord],
    tag: str,
    config: AnalysisConfig | None = None,
) -> PlayerReport:
    """Run every aggregation for a player with settings from AnalysisConfig."""
    config = config or AnalysisConfig()
    options = {"starting_stocks": config.starting_stocks, "strict": config.strict_identity}

    return PlayerReport(
        tag=tag,
        global_stats=get_global_stats(matches, tag, **options),
        characters=tuple(get_character_usage(matches, tag, Perspective.SELF, **options)),
        opponent_characters=tuple(
            get_character_usage(matches, tag, Perspective.OPPONENT, **options)
        ),
        opponents=tuple(get_opponent_summary(matches, tag, **options)),
        top_punishes=tuple(get_top_punishes(matches, tag, strict=config.strict_identity)),
        medium_threshold=config.punish_medium_threshold,
        high_threshold=config.punish_high_threshold,
    )

