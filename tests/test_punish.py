"""Tests for derived punish values."""

import pytest
from factories import make_match, make_punish

from slipstats.analysis.punish import (
    classify_punish_damage,
    describe_punish,
    format_damage_range,
    get_opening_label,
    get_punish_damage,
    get_punish_severity,
)
from slipstats.core.constants import OpeningType, PunishSeverity


class TestPunishDamage:
    """Tests for damage and severity."""

    def test_damage(self):
        punish = make_punish(0, start_percent=12.0, current_percent=57.5)
        assert get_punish_damage(punish) == pytest.approx(45.5)

    @pytest.mark.parametrize(
        "damage,expected",
        [
            (0.0, PunishSeverity.LOW),
            (34.9, PunishSeverity.LOW),
            (35.0, PunishSeverity.MEDIUM),
            (69.9, PunishSeverity.MEDIUM),
            (70.0, PunishSeverity.HIGH),
            (140.0, PunishSeverity.HIGH),
        ],
    )
    def test_default_thresholds(self, damage, expected):
        assert classify_punish_damage(damage) is expected

    def test_custom_thresholds(self):
        severity = classify_punish_damage(50.0, medium_threshold=20, high_threshold=40)
        assert severity is PunishSeverity.HIGH

    def test_punish_severity(self):
        punish = make_punish(0, start_percent=10.0, current_percent=55.0)
        assert get_punish_severity(punish) is PunishSeverity.MEDIUM
        assert get_punish_severity(punish, high_threshold=40.0) is PunishSeverity.HIGH


class TestPunishFormatting:
    """Tests for labels and display strings."""

    def test_opening_labels(self):
        assert get_opening_label(OpeningType.COUNTER_ATTACK) == "Counter Hit"
        assert get_opening_label(OpeningType.NEUTRAL_WIN) == "Neutral"
        assert get_opening_label("trade") == "Trade"

    def test_unknown_opening_label(self):
        assert get_opening_label("grab") == "Unknown"

    def test_damage_range_truncates(self):
        punish = make_punish(0, start_percent=10.7, current_percent=55.2)
        assert format_damage_range(punish) == "(10% - 55%)"


class TestDescribePunish:
    """Tests for the flat punish description."""

    def test_description(self):
        punish = make_punish(
            1,
            4,
            start_percent=20.0,
            current_percent=95.0,
            opening_type=OpeningType.COUNTER_ATTACK,
            start_frame=3600,
            end_frame=3900,
            did_kill=True,
        )
        match = make_match("Game_9", punishes=(punish,), stage_id=8)

        description = describe_punish(match, punish)

        assert description["file"].endswith("Game_9.json")
        assert description["stage"] == "Yoshi's Story"
        assert description["player"] == "B"
        assert description["player_character_id"] == 20
        assert description["opponent"] == "A"
        assert description["opponent_character_id"] == 2
        assert description["opening"] == "Counter Hit"
        assert description["damage"] == 75.0
        assert description["severity"] == "high"
        assert description["moves"] == 4
        assert description["did_kill"] is True
        assert description["start"] == "1:00"
        assert description["end"] == "1:05"

    def test_ongoing_punish_has_no_end(self):
        punish = make_punish(0, end_frame=None)
        description = describe_punish(make_match(punishes=(punish,)), punish)
        assert description["end"] == "-"

    def test_no_opponent_outside_singles(self):
        punish = make_punish(0)
        match = make_match(players=(("A", 2), ("B", 20), ("C", 9)), punishes=(punish,))
        assert describe_punish(match, punish)["opponent"] is None
