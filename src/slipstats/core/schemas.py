"""
SlipStats Data Contracts

Every record that crosses the boundary between the replay loader and the
aggregation engine is defined here. Records are frozen: the engine reads
them and never mutates them.

Producers: core/loader.py, test factories, callers with their own parser
Consumers: analysis/game.py, analysis/aggregates.py, analysis/punish.py
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from slipstats.core.constants import OpeningType
from slipstats.core.utils import ratio as _ratio

# ============================================================
# PER-PLAYER RECORDS
# ============================================================


@dataclass(frozen=True)
class RatePair:
    """A numerator/denominator pair reported by the replay parser."""

    count: float = 0.0
    total: float = 0.0

    @property
    def ratio(self) -> float:
        """count / total; NaN or infinite when total is zero."""
        return _ratio(self.count, self.total)

    def __add__(self, other: RatePair) -> RatePair:
        return RatePair(count=self.count + other.count, total=self.total + other.total)


@dataclass(frozen=True)
class PlayerSlot:
    """One player's entry in the match settings."""

    player_index: int
    port: int
    character_id: int
    character_color: int = 0
    tag: str = ""  # Resolved display tag
    team_id: int | None = None  # Only present in team matches


@dataclass(frozen=True)
class StockRecord:
    """One stock (life) of a player. Stocks that never ended have end_percent 0."""

    player_index: int
    count: int
    end_percent: float = 0.0


@dataclass(frozen=True)
class MoveHit:
    """A single hit inside a punish. Opaque to the aggregation engine."""

    frame: int
    move_id: int
    hit_count: int = 1
    damage: float = 0.0


@dataclass(frozen=True)
class PunishEvent:
    """A conversion: a string of hits one player lands on the other."""

    player_index: int  # The punishing player
    start_frame: int
    end_frame: int | None  # None while the punish was still ongoing
    start_percent: float
    current_percent: float
    opening_type: OpeningType
    moves: tuple[MoveHit, ...] = ()
    did_kill: bool = False

    @property
    def move_count(self) -> int:
        return len(self.moves)


@dataclass(frozen=True)
class OverallMetrics:
    """Per-player match summary computed by the replay parser."""

    player_index: int
    kill_count: int = 0
    total_damage: float = 0.0
    successful_conversions: RatePair = field(default_factory=RatePair)
    damage_per_opening: RatePair = field(default_factory=RatePair)
    openings_per_kill: RatePair = field(default_factory=RatePair)
    neutral_win_ratio: RatePair = field(default_factory=RatePair)
    inputs_per_minute: RatePair = field(default_factory=RatePair)
    digital_inputs_per_minute: RatePair = field(default_factory=RatePair)


# ============================================================
# MATCH RECORD
# ============================================================


@dataclass(frozen=True)
class MatchSettings:
    """Immutable settings captured at game start."""

    players: tuple[PlayerSlot, ...]
    stage_id: int | None = None
    is_teams: bool = False


@dataclass(frozen=True)
class MatchStats:
    """Frame-level statistics computed over the whole match."""

    last_frame: int = 0
    stocks: tuple[StockRecord, ...] = ()
    conversions: tuple[PunishEvent, ...] = ()
    overall: tuple[OverallMetrics, ...] = ()


@dataclass(frozen=True)
class MatchRecord:
    """
    One parsed replay.

    A record whose settings or stats failed to parse is kept in the
    collection but reports itself as unavailable; aggregations skip it
    instead of failing the whole run.
    """

    file_path: Path
    settings: MatchSettings | None = None
    stats: MatchStats | None = None
    start_time: datetime | None = None
    error: str | None = None  # Why the record is unavailable, if it is

    @property
    def is_available(self) -> bool:
        return self.settings is not None and self.stats is not None

    @property
    def is_singles(self) -> bool:
        """True for two-player matches, the only shape the engine aggregates."""
        return self.settings is not None and len(self.settings.players) == 2

    @property
    def display_name(self) -> str:
        """File name without its extension."""
        return Path(self.file_path).stem

    @property
    def last_frame(self) -> int:
        return self.stats.last_frame if self.stats is not None else 0

    def player(self, index: int) -> PlayerSlot | None:
        """Look up a player by match-local index."""
        if self.settings is None:
            return None
        for slot in self.settings.players:
            if slot.player_index == index:
                return slot
        return None

    def player_tags(self) -> list[str]:
        """Resolved tags ordered by player index."""
        if self.settings is None:
            return []
        ordered = sorted(self.settings.players, key=lambda p: p.player_index)
        return [p.tag for p in ordered]

    def overall_for(self, index: int) -> OverallMetrics | None:
        """Overall metrics for a player index, if the parser produced them."""
        if self.stats is None:
            return None
        for metrics in self.stats.overall:
            if metrics.player_index == index:
                return metrics
        return None
