"""
Derived values for a single punish.

Pure functions of a PunishEvent used by rankings, exports and the CLI.
"""

from typing import Any

from slipstats.analysis.game import get_player_name, get_stage_name
from slipstats.core.constants import (
    OPENING_TYPE_LABELS,
    PUNISH_HIGH_THRESHOLD,
    PUNISH_MEDIUM_THRESHOLD,
    OpeningType,
    PunishSeverity,
    Slot,
)
from slipstats.core.schemas import MatchRecord, PunishEvent
from slipstats.core.utils import frames_to_duration


def get_punish_damage(punish: PunishEvent) -> float:
    """Percent dealt during the punish."""
    return punish.current_percent - punish.start_percent


def classify_punish_damage(
    damage: float,
    medium_threshold: float = PUNISH_MEDIUM_THRESHOLD,
    high_threshold: float = PUNISH_HIGH_THRESHOLD,
) -> PunishSeverity:
    """
    Severity tier for an amount of punish damage.

    Below 35% is LOW, 35% up to 70% is MEDIUM, 70% and above is HIGH.
    """
    if damage >= high_threshold:
        return PunishSeverity.HIGH
    if damage >= medium_threshold:
        return PunishSeverity.MEDIUM
    return PunishSeverity.LOW


def get_punish_severity(punish: PunishEvent, **thresholds: float) -> PunishSeverity:
    return classify_punish_damage(get_punish_damage(punish), **thresholds)


def get_opening_label(opening_type: OpeningType | str) -> str:
    """Human-readable name of an opening type."""
    try:
        return OPENING_TYPE_LABELS[OpeningType(opening_type)]
    except ValueError:
        return OPENING_TYPE_LABELS[OpeningType.UNKNOWN]


def format_damage_range(punish: PunishEvent) -> str:
    """Percent range as "(start% - end%)", truncated to whole percents."""
    return f"({int(punish.start_percent)}% - {int(punish.current_percent)}%)"


def describe_punish(
    match: MatchRecord,
    punish: PunishEvent,
    medium_threshold: float = PUNISH_MEDIUM_THRESHOLD,
    high_threshold: float = PUNISH_HIGH_THRESHOLD,
) -> dict[str, Any]:
    """Flat description of a punish for tables and exports."""
    attacker = match.player(punish.player_index)
    opponent = None
    if match.is_singles and punish.player_index in (Slot.FIRST, Slot.SECOND):
        opponent = match.player(Slot(punish.player_index).opponent)
    damage = get_punish_damage(punish)

    return {
        "file": str(match.file_path),
        "stage": get_stage_name(match),
        "player": get_player_name(match, punish.player_index),
        "player_character_id": attacker.character_id if attacker else None,
        "opponent": opponent.tag if opponent else None,
        "opponent_character_id": opponent.character_id if opponent else None,
        "opening": get_opening_label(punish.opening_type),
        "damage": round(damage, 1),
        "severity": classify_punish_damage(damage, medium_threshold, high_threshold).value,
        "start_percent": round(punish.start_percent, 1),
        "end_percent": round(punish.current_percent, 1),
        "moves": punish.move_count,
        "did_kill": punish.did_kill,
        "start": frames_to_duration(punish.start_frame),
        "end": frames_to_duration(punish.end_frame),
    }
