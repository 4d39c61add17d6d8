"""
Per-match helpers: player lookup, stocks, winner and match info.

Everything here reads a single MatchRecord. Indices are match-local player
indices (0 or 1 in singles); lookups that fail return sentinels
(UNRESOLVED_INDEX, NO_WINNER, None) rather than raising.
"""

import logging
from itertools import groupby

from slipstats.core.constants import (
    CHARACTER_NAMES,
    DEFAULT_STARTING_STOCKS,
    NO_WINNER,
    STAGE_NAMES,
    UNRESOLVED_INDEX,
    Slot,
)
from slipstats.core.schemas import MatchRecord, PlayerSlot, StockRecord

logger = logging.getLogger(__name__)


class UnresolvedPlayerError(LookupError):
    """Raised in strict mode when a player tag is not found in a match."""

    def __init__(self, tag: str, match: MatchRecord):
        super().__init__(f"Player {tag!r} not found in {match.display_name}")
        self.tag = tag
        self.match = match


def get_player_index(match: MatchRecord, tag: str) -> int:
    """
    Find which slot a display tag played in.

    Tags are compared exactly against slot 0, then slot 1.

    Returns:
        0 or 1, or UNRESOLVED_INDEX (-1) if neither slot carries the tag
    """
    tags = match.player_tags()
    for index in (Slot.FIRST, Slot.SECOND):
        if index < len(tags) and tags[index] == tag:
            return int(index)
    return UNRESOLVED_INDEX


def get_player_name(match: MatchRecord, index: int) -> str | None:
    """Display tag of the player at an index, None if unavailable."""
    player = match.player(index)
    return player.tag if player is not None else None


def get_player_stocks(match: MatchRecord, index: int) -> list[StockRecord]:
    """All stock records of one player, in the order the parser wrote them."""
    if match.stats is None:
        return []
    return [s for s in match.stats.stocks if s.player_index == index]


def get_last_player_stock(
    match: MatchRecord,
    index: int,
    starting_stocks: int = DEFAULT_STARTING_STOCKS,
) -> StockRecord:
    """
    The stock a player ended the match on.

    A player with no stock records is assumed to still be on their starting
    stock at 0%. Otherwise the record with the lowest count is returned; on
    equal counts the first record wins.
    """
    stocks = get_player_stocks(match, index)
    if not stocks:
        return StockRecord(player_index=index, count=starting_stocks, end_percent=0.0)
    return min(stocks, key=lambda s: s.count)


def get_match_winner(match: MatchRecord, starting_stocks: int = DEFAULT_STARTING_STOCKS) -> int:
    """
    Decide which slot won a singles match.

    1. More stocks left wins.
    2. Equal stocks: lower end percent on the last stock wins.
    3. Otherwise NO_WINNER (-1). Callers must not count -1 as a loss for
       either side.
    """
    first = get_last_player_stock(match, Slot.FIRST, starting_stocks)
    second = get_last_player_stock(match, Slot.SECOND, starting_stocks)

    if first.count > second.count:
        return int(Slot.FIRST)
    if first.count < second.count:
        return int(Slot.SECOND)
    if first.end_percent < second.end_percent:
        return int(Slot.FIRST)
    if first.end_percent > second.end_percent:
        return int(Slot.SECOND)
    return NO_WINNER


def get_stage_name(match: MatchRecord) -> str | None:
    """
    Stage name for a match.

    Returns None when the match settings are unavailable and "Unknown" when
    the stage id is missing or not a known stage.
    """
    if match.settings is None:
        return None
    stage_id = match.settings.stage_id
    name = STAGE_NAMES.get(stage_id) if stage_id is not None else None
    if name is None:
        logger.debug(f"Unknown stage id {stage_id} in {match.display_name}")
        return "Unknown"
    return name


def get_character_name(character_id: int | None) -> str:
    """Character name for an external character id."""
    if character_id is None:
        return "Unknown"
    return CHARACTER_NAMES.get(character_id, f"Character {character_id}")


def get_teams(match: MatchRecord) -> list[list[PlayerSlot]]:
    """
    Group players into the sides of a match.

    Team matches group by team id, other matches put every port on its own
    side. Sides are ordered by team id / port.
    """
    if match.settings is None:
        return []

    def side_key(player: PlayerSlot) -> int:
        if match.settings.is_teams and player.team_id is not None:
            return player.team_id
        return player.port

    ordered = sorted(match.settings.players, key=side_key)
    return [list(group) for _, group in groupby(ordered, key=side_key)]
