"""
Summary models produced by the aggregation engine.

Every model is a frozen value. Folding a match into a tally returns a new
tally, and two tallies built from disjoint match lists combine with ``+``,
so partial folds over partitions of a collection can be merged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from slipstats.core.constants import PUNISH_HIGH_THRESHOLD, PUNISH_MEDIUM_THRESHOLD
from slipstats.core.schemas import MatchRecord, PunishEvent, RatePair


def _merge_unique(left: tuple, right: tuple) -> tuple:
    """Concatenate keeping first-seen order and dropping repeats."""
    return left + tuple(item for item in dict.fromkeys(right) if item not in left)


def _merge_opponents(left: tuple, right: tuple) -> tuple:
    """Combine two opponent row tuples by tag, keeping first-seen tag order."""
    merged = {row.tag: row.tally for row in left}
    for row in right:
        merged[row.tag] = merged[row.tag] + row.tally if row.tag in merged else row.tally
    return tuple(OpponentRecord(tag=tag, tally=tally) for tag, tally in merged.items())


def _finite_or_none(value: float, digits: int) -> float | None:
    """Round for serialization; non-finite values become None (JSON null)."""
    return round(value, digits) if math.isfinite(value) else None


# ============================================================================
# Character usage
# ============================================================================


@dataclass(frozen=True)
class CharacterTally:
    """Games, wins and distinct players seen on one character."""

    count: int = 0
    wins: int = 0
    players: tuple[str, ...] = ()

    @property
    def win_rate(self) -> float:
        return self.wins / self.count if self.count else 0.0

    def add_game(self, won: bool, player: str) -> CharacterTally:
        return CharacterTally(
            count=self.count + 1,
            wins=self.wins + int(won),
            players=_merge_unique(self.players, (player,)),
        )

    def __add__(self, other: CharacterTally) -> CharacterTally:
        return CharacterTally(
            count=self.count + other.count,
            wins=self.wins + other.wins,
            players=_merge_unique(self.players, other.players),
        )


@dataclass(frozen=True)
class CharacterUsage:
    """One row of a character usage breakdown."""

    character_id: int
    tally: CharacterTally

    @property
    def count(self) -> int:
        return self.tally.count

    @property
    def wins(self) -> int:
        return self.tally.wins

    @property
    def players(self) -> tuple[str, ...]:
        return self.tally.players

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "character_id": self.character_id,
            "count": self.count,
            "wins": self.wins,
            "win_rate": round(self.tally.win_rate * 100, 1),
            "players": list(self.players),
        }


# ============================================================================
# Opponents
# ============================================================================


@dataclass(frozen=True)
class OpponentTally:
    """Games, wins against, and characters played by one opponent."""

    count: int = 0
    wins: int = 0
    character_ids: tuple[int, ...] = ()

    @property
    def win_rate(self) -> float:
        return self.wins / self.count if self.count else 0.0

    def add_game(self, won: bool, character_id: int) -> OpponentTally:
        return OpponentTally(
            count=self.count + 1,
            wins=self.wins + int(won),
            character_ids=_merge_unique(self.character_ids, (character_id,)),
        )

    def __add__(self, other: OpponentTally) -> OpponentTally:
        return OpponentTally(
            count=self.count + other.count,
            wins=self.wins + other.wins,
            character_ids=_merge_unique(self.character_ids, other.character_ids),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "wins": self.wins,
            "win_rate": round(self.win_rate * 100, 1),
            "character_ids": list(self.character_ids),
        }


@dataclass(frozen=True)
class OpponentRecord:
    """One row of a head-to-head summary."""

    tag: str
    tally: OpponentTally

    @property
    def count(self) -> int:
        return self.tally.count

    @property
    def wins(self) -> int:
        return self.tally.wins

    @property
    def character_ids(self) -> tuple[int, ...]:
        return self.tally.character_ids

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"tag": self.tag, **self.tally.to_dict()}


# ============================================================================
# Punishes
# ============================================================================


@dataclass(frozen=True)
class RankedPunish:
    """A punish together with the match it happened in."""

    match: MatchRecord
    punish: PunishEvent

    @property
    def move_count(self) -> int:
        return self.punish.move_count

    def to_dict(
        self,
        medium_threshold: float = PUNISH_MEDIUM_THRESHOLD,
        high_threshold: float = PUNISH_HIGH_THRESHOLD,
    ) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        from slipstats.analysis.punish import describe_punish

        return describe_punish(self.match, self.punish, medium_threshold, high_threshold)


# ============================================================================
# Global stats
# ============================================================================


@dataclass(frozen=True)
class GlobalStats:
    """
    Season-level totals for one player.

    Counters are sums over every folded match; the ratio properties divide
    the summed rate pairs and are NaN/inf when nothing was recorded.
    """

    count: int = 0  # Matches folded in
    skipped: int = 0  # Matches left out (unavailable or player not found)
    wins: int = 0
    draws: int = 0  # Matches with no decided winner
    opponents: tuple[OpponentRecord, ...] = ()
    time: int = 0  # Frames
    kills: int = 0
    deaths: int = 0
    damage_done: float = 0.0
    damage_received: float = 0.0
    conversion_rate_pair: RatePair = field(default_factory=RatePair)
    openings_per_kill_pair: RatePair = field(default_factory=RatePair)
    damage_per_opening_pair: RatePair = field(default_factory=RatePair)
    neutral_win_ratio_pair: RatePair = field(default_factory=RatePair)
    inputs_per_minute_pair: RatePair = field(default_factory=RatePair)
    digital_inputs_per_minute_pair: RatePair = field(default_factory=RatePair)
    punishes: tuple[RankedPunish, ...] = ()

    @property
    def conversion_rate(self) -> float:
        return self.conversion_rate_pair.ratio

    @property
    def openings_per_kill(self) -> float:
        return self.openings_per_kill_pair.ratio

    @property
    def damage_per_opening(self) -> float:
        return self.damage_per_opening_pair.ratio

    @property
    def neutral_win_ratio(self) -> float:
        return self.neutral_win_ratio_pair.ratio

    @property
    def inputs_per_minute(self) -> float:
        return self.inputs_per_minute_pair.ratio

    @property
    def digital_inputs_per_minute(self) -> float:
        return self.digital_inputs_per_minute_pair.ratio

    @property
    def opponents_by_tag(self) -> dict[str, OpponentTally]:
        return {row.tag: row.tally for row in self.opponents}

    @property
    def losses(self) -> int:
        """Folded matches the other player won."""
        return self.count - self.wins - self.draws

    def __add__(self, other: GlobalStats) -> GlobalStats:
        return GlobalStats(
            count=self.count + other.count,
            skipped=self.skipped + other.skipped,
            wins=self.wins + other.wins,
            draws=self.draws + other.draws,
            opponents=_merge_opponents(self.opponents, other.opponents),
            time=self.time + other.time,
            kills=self.kills + other.kills,
            deaths=self.deaths + other.deaths,
            damage_done=self.damage_done + other.damage_done,
            damage_received=self.damage_received + other.damage_received,
            conversion_rate_pair=self.conversion_rate_pair + other.conversion_rate_pair,
            openings_per_kill_pair=self.openings_per_kill_pair + other.openings_per_kill_pair,
            damage_per_opening_pair=self.damage_per_opening_pair + other.damage_per_opening_pair,
            neutral_win_ratio_pair=self.neutral_win_ratio_pair + other.neutral_win_ratio_pair,
            inputs_per_minute_pair=self.inputs_per_minute_pair + other.inputs_per_minute_pair,
            digital_inputs_per_minute_pair=(
                self.digital_inputs_per_minute_pair + other.digital_inputs_per_minute_pair
            ),
            punishes=self.punishes + other.punishes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization. Non-finite ratios become null."""
        return {
            "count": self.count,
            "skipped": self.skipped,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "time_frames": self.time,
            "kills": self.kills,
            "deaths": self.deaths,
            "damage_done": round(self.damage_done, 1),
            "damage_received": round(self.damage_received, 1),
            "conversion_rate": _finite_or_none(self.conversion_rate, 3),
            "openings_per_kill": _finite_or_none(self.openings_per_kill, 2),
            "damage_per_opening": _finite_or_none(self.damage_per_opening, 2),
            "neutral_win_ratio": _finite_or_none(self.neutral_win_ratio, 3),
            "inputs_per_minute": _finite_or_none(self.inputs_per_minute, 1),
            "digital_inputs_per_minute": _finite_or_none(self.digital_inputs_per_minute, 1),
            "opponents": {row.tag: row.tally.to_dict() for row in self.opponents},
            "punish_count": len(self.punishes),
        }
