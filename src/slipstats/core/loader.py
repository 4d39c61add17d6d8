"""
Replay Export Loader for SlipStats

Builds MatchRecord objects from JSON exports of already-parsed Slippi
replays (the ``settings``, ``stats`` and ``metadata`` objects produced by
slippi-js, dumped to one JSON file per game).

Binary .slp parsing is not done here. A file that cannot be read or whose
settings/stats have the wrong shape still yields a MatchRecord, flagged as
unavailable, so one bad file never aborts loading a whole folder.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from slipstats.core.constants import OpeningType
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
from slipstats.core.utils import safe_float, safe_int

logger = logging.getLogger(__name__)

# Errors that mean "this part of the export is malformed"
SHAPE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


# ============================================================================
# Field Parsers
# ============================================================================


def _parse_rate_pair(data: dict[str, Any] | None) -> RatePair:
    if not data:
        return RatePair()
    return RatePair(count=safe_float(data.get("count")), total=safe_float(data.get("total")))


def resolve_player_tag(player: dict[str, Any], metadata: dict[str, Any] | None = None) -> str:
    """
    Pick the display tag for a player entry.

    Order: Slippi display name, connect code, netplay names recorded in
    metadata, in-game nametag, then ``Player <port>``.
    """
    for key in ("displayName", "connectCode"):
        value = player.get(key)
        if value:
            return str(value)

    if metadata:
        player_meta = (metadata.get("players") or {}).get(str(player.get("playerIndex"))) or {}
        names = player_meta.get("names") or {}
        for key in ("netplay", "code"):
            if names.get(key):
                return str(names[key])

    if player.get("nametag"):
        return str(player["nametag"])

    return f"Player {safe_int(player.get('port'), safe_int(player.get('playerIndex')) + 1)}"


def parse_settings(data: dict[str, Any], metadata: dict[str, Any] | None = None) -> MatchSettings:
    """Parse a slippi-js settings object."""
    players = []
    for entry in data["players"]:
        team_id = entry.get("teamId")
        players.append(
            PlayerSlot(
                player_index=int(entry["playerIndex"]),
                port=safe_int(entry.get("port"), int(entry["playerIndex"]) + 1),
                character_id=int(entry["characterId"]),
                character_color=safe_int(entry.get("characterColor")),
                tag=resolve_player_tag(entry, metadata),
                team_id=int(team_id) if team_id is not None else None,
            )
        )

    stage_id = data.get("stageId")
    return MatchSettings(
        players=tuple(players),
        stage_id=int(stage_id) if stage_id is not None else None,
        is_teams=bool(data.get("isTeams", False)),
    )


def _parse_opening_type(value: Any) -> OpeningType:
    try:
        return OpeningType(value)
    except ValueError:
        logger.debug(f"Unrecognised opening type: {value!r}")
        return OpeningType.UNKNOWN


def parse_punish(data: dict[str, Any]) -> PunishEvent:
    """Parse one slippi-js conversion."""
    end_frame = data.get("endFrame")
    moves = tuple(
        MoveHit(
            frame=safe_int(move.get("frame")),
            move_id=safe_int(move.get("moveId")),
            hit_count=safe_int(move.get("hitCount"), 1),
            damage=safe_float(move.get("damage")),
        )
        for move in data.get("moves") or []
    )
    return PunishEvent(
        player_index=int(data["playerIndex"]),
        start_frame=safe_int(data.get("startFrame")),
        end_frame=int(end_frame) if end_frame is not None else None,
        start_percent=safe_float(data.get("startPercent")),
        current_percent=safe_float(data.get("currentPercent")),
        opening_type=_parse_opening_type(data.get("openingType")),
        moves=moves,
        did_kill=bool(data.get("didKill", False)),
    )


def parse_overall(data: dict[str, Any]) -> OverallMetrics:
    """Parse one slippi-js overall stats entry."""
    return OverallMetrics(
        player_index=int(data["playerIndex"]),
        kill_count=safe_int(data.get("killCount")),
        total_damage=safe_float(data.get("totalDamage")),
        successful_conversions=_parse_rate_pair(data.get("successfulConversions")),
        damage_per_opening=_parse_rate_pair(data.get("damagePerOpening")),
        openings_per_kill=_parse_rate_pair(data.get("openingsPerKill")),
        neutral_win_ratio=_parse_rate_pair(data.get("neutralWinRatio")),
        inputs_per_minute=_parse_rate_pair(data.get("inputsPerMinute")),
        digital_inputs_per_minute=_parse_rate_pair(data.get("digitalInputsPerMinute")),
    )


def parse_stats(data: dict[str, Any], last_frame: Any = None) -> MatchStats:
    """Parse a slippi-js stats object."""
    stocks = tuple(
        StockRecord(
            player_index=int(stock["playerIndex"]),
            count=int(stock["count"]),
            # A stock still alive at game end has no end percent
            end_percent=safe_float(stock.get("endPercent")),
        )
        for stock in data.get("stocks") or []
    )
    return MatchStats(
        last_frame=safe_int(data.get("lastFrame", last_frame)),
        stocks=stocks,
        conversions=tuple(parse_punish(c) for c in data.get("conversions") or []),
        overall=tuple(parse_overall(o) for o in data.get("overall") or []),
    )


def _parse_start_time(metadata: dict[str, Any] | None) -> datetime | None:
    if not metadata or not metadata.get("startAt"):
        return None
    try:
        return datetime.fromisoformat(str(metadata["startAt"]))
    except ValueError:
        logger.debug(f"Unparseable startAt: {metadata['startAt']!r}")
        return None


# ============================================================================
# Index Normalisation
# ============================================================================


def normalize_player_indices(
    settings: MatchSettings, stats: MatchStats | None
) -> tuple[MatchSettings, MatchStats | None]:
    """
    Renumber players to 0..N-1 in playerIndex order.

    slippi-js writes playerIndex as port - 1, so a game on ports 1 and 3
    arrives with indices 0 and 2. Stocks, conversions and overall entries
    are renumbered with the same mapping; entries for an index no player
    has are dropped.
    """
    ordered = sorted(settings.players, key=lambda p: p.player_index)
    mapping = {player.player_index: new for new, player in enumerate(ordered)}
    if all(old == new for old, new in mapping.items()):
        return settings, stats

    logger.debug(f"Renumbering player indices {sorted(mapping)} to 0..{len(mapping) - 1}")
    settings = replace(
        settings,
        players=tuple(replace(p, player_index=mapping[p.player_index]) for p in ordered),
    )
    if stats is None:
        return settings, None

    def renumber(records: tuple) -> tuple:
        kept = tuple(
            replace(r, player_index=mapping[r.player_index])
            for r in records
            if r.player_index in mapping
        )
        if len(kept) != len(records):
            logger.debug(f"Dropped {len(records) - len(kept)} entries for unknown players")
        return kept

    stats = replace(
        stats,
        stocks=renumber(stats.stocks),
        conversions=renumber(stats.conversions),
        overall=renumber(stats.overall),
    )
    return settings, stats


# ============================================================================
# Record Construction
# ============================================================================


def match_from_dict(data: dict[str, Any], file_path: Path | str = "<memory>") -> MatchRecord:
    """
    Build a MatchRecord from an exported replay dictionary.

    Settings and stats are parsed independently: a malformed section is
    dropped (making the record unavailable) without losing the other one.
    """
    file_path = Path(file_path)
    metadata = data.get("metadata") or {}
    errors: list[str] = []

    settings = None
    try:
        settings = parse_settings(data["settings"], metadata)
    except SHAPE_ERRORS as e:
        errors.append(f"settings: {e!r}")

    stats = None
    try:
        stats = parse_stats(data["stats"], data.get("lastFrame", metadata.get("lastFrame")))
    except SHAPE_ERRORS as e:
        errors.append(f"stats: {e!r}")

    if settings is not None:
        settings, stats = normalize_player_indices(settings, stats)

    if errors:
        logger.warning(f"Replay export {file_path.name} is incomplete: {'; '.join(errors)}")

    return MatchRecord(
        file_path=file_path,
        settings=settings,
        stats=stats,
        start_time=_parse_start_time(metadata),
        error="; ".join(errors) or None,
    )


def load_match(path: Path) -> MatchRecord:
    """Load one exported replay, never raising for bad content."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read replay export {path}: {e}")
        return MatchRecord(file_path=path, error=str(e))

    if not isinstance(data, dict):
        logger.warning(f"Replay export {path} is not a JSON object")
        return MatchRecord(file_path=path, error="export is not a JSON object")

    return match_from_dict(data, path)


def find_exports(folder: Path, pattern: str = "*.json", recursive: bool = False) -> list[Path]:
    """List replay exports in a folder, sorted by path."""
    found = folder.rglob(pattern) if recursive else folder.glob(pattern)
    return sorted(p for p in found if p.is_file())


def load_matches(
    sources: Iterable[Path | str],
    pattern: str = "*.json",
    recursive: bool = False,
) -> list[MatchRecord]:
    """
    Load replay exports from files and/or folders.

    Args:
        sources: Files or folders to load
        pattern: Glob used inside folders
        recursive: Descend into subfolders

    Returns:
        One MatchRecord per file, in source order (folders expanded sorted)
    """
    matches: list[MatchRecord] = []
    for source in sources:
        source = Path(source)
        if source.is_dir():
            paths = find_exports(source, pattern, recursive)
            logger.debug(f"Found {len(paths)} exports in {source}")
        else:
            paths = [source]
        matches.extend(load_match(p) for p in paths)

    unavailable = sum(1 for m in matches if not m.is_available)
    logger.info(f"Loaded {len(matches)} replays ({unavailable} unavailable)")
    return matches
