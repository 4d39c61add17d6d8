"""Tests for building match records from replay exports."""

import json
from datetime import timezone

import pytest
from factories import make_export

from slipstats.analysis.aggregates import get_global_stats, get_top_punishes
from slipstats.analysis.game import get_match_winner
from slipstats.core.constants import OpeningType
from slipstats.core.loader import (
    find_exports,
    load_match,
    load_matches,
    match_from_dict,
    resolve_player_tag,
)


def write_export(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestResolvePlayerTag:
    """Tests for picking a player's display tag."""

    def test_display_name_first(self):
        player = {"playerIndex": 0, "port": 1, "displayName": "Mango", "connectCode": "MANG#0"}
        assert resolve_player_tag(player) == "Mango"

    def test_connect_code(self):
        player = {"playerIndex": 0, "port": 1, "displayName": "", "connectCode": "MANG#0"}
        assert resolve_player_tag(player) == "MANG#0"

    def test_metadata_netplay_name(self):
        metadata = {"players": {"1": {"names": {"netplay": "Hbox", "code": "HBOX#1"}}}}
        assert resolve_player_tag({"playerIndex": 1, "port": 2}, metadata) == "Hbox"

    def test_metadata_code(self):
        metadata = {"players": {"1": {"names": {"netplay": None, "code": "HBOX#1"}}}}
        assert resolve_player_tag({"playerIndex": 1, "port": 2}, metadata) == "HBOX#1"

    def test_nametag(self):
        assert resolve_player_tag({"playerIndex": 0, "port": 3, "nametag": "ARMD"}) == "ARMD"

    def test_port_fallback(self):
        assert resolve_player_tag({"playerIndex": 0, "port": 3}) == "Player 3"


class TestMatchFromDict:
    """Tests for parsing an export dictionary."""

    def test_settings(self):
        match = match_from_dict(make_export(stage_id=8), "Game_1.json")
        assert match.is_available
        assert match.is_singles
        assert match.display_name == "Game_1"
        assert match.settings.stage_id == 8
        assert match.player_tags() == ["A", "B"]
        assert match.player(1).character_id == 20

    def test_stocks(self):
        export = make_export(
            stocks=[
                {"playerIndex": 0, "count": 4, "endPercent": 88.5},
                {"playerIndex": 0, "count": 3, "endPercent": None},
            ]
        )
        stocks = match_from_dict(export).stats.stocks
        assert [(s.count, s.end_percent) for s in stocks] == [(4, 88.5), (3, 0.0)]

    def test_conversions(self):
        export = make_export(
            conversions=[
                {
                    "playerIndex": 1,
                    "startFrame": 1200,
                    "endFrame": None,
                    "startPercent": 10,
                    "currentPercent": 52.5,
                    "openingType": "counter-attack",
                    "didKill": False,
                    "moves": [
                        {"frame": 1200, "moveId": 17, "hitCount": 1, "damage": 12},
                        {"frame": 1230, "moveId": 21, "hitCount": 2, "damage": 30.5},
                    ],
                },
                {"playerIndex": 0, "startFrame": 10, "openingType": "mystery", "moves": []},
            ]
        )
        first, second = match_from_dict(export).stats.conversions
        assert first.player_index == 1
        assert first.end_frame is None
        assert first.opening_type is OpeningType.COUNTER_ATTACK
        assert first.move_count == 2
        assert first.moves[1].damage == 30.5
        assert second.opening_type is OpeningType.UNKNOWN
        assert second.move_count == 0

    def test_overall(self):
        export = make_export(
            overall=[
                {
                    "playerIndex": 0,
                    "killCount": 4,
                    "totalDamage": 321.4,
                    "successfulConversions": {"count": 5, "total": 10, "ratio": 0.5},
                    "inputsPerMinute": {"count": 900, "total": 3.2, "ratio": 281.25},
                },
                {"playerIndex": 1},
            ]
        )
        match = match_from_dict(export)
        overall = match.overall_for(0)
        assert overall.kill_count == 4
        assert overall.successful_conversions.ratio == 0.5
        assert overall.inputs_per_minute.count == 900
        assert match.overall_for(1).kill_count == 0

    def test_last_frame(self):
        assert match_from_dict(make_export(last_frame=7200)).last_frame == 7200

    def test_start_time(self):
        export = make_export(metadata={"startAt": "2024-01-01T12:00:00Z"})
        start = match_from_dict(export).start_time
        assert (start.year, start.hour) == (2024, 12)
        assert start.utcoffset() == timezone.utc.utcoffset(None)

    def test_bad_start_time_ignored(self):
        export = make_export(metadata={"startAt": "yesterday"})
        match = match_from_dict(export)
        assert match.start_time is None
        assert match.is_available

    def test_missing_stats_is_unavailable(self):
        export = make_export()
        del export["stats"]
        match = match_from_dict(export)
        assert not match.is_available
        assert match.settings is not None
        assert "stats" in match.error

    def test_malformed_settings_is_unavailable(self):
        export = make_export(players=({"playerIndex": 0},))
        match = match_from_dict(export)
        assert not match.is_available
        assert match.stats is not None
        assert "settings" in match.error

    def test_team_ids(self):
        players = (
            {"playerIndex": i, "port": i + 1, "characterId": 2, "displayName": tag, "teamId": team}
            for i, (tag, team) in enumerate([("A", 0), ("B", 1), ("C", 0), ("D", 1)])
        )
        export = make_export(players=tuple(players))
        export["settings"]["isTeams"] = True
        match = match_from_dict(export)
        assert match.settings.is_teams
        assert not match.is_singles
        assert [p.team_id for p in match.settings.players] == [0, 1, 0, 1]


class TestNonContiguousPorts:
    """Tests for games played on ports that are not 1 and 2."""

    @pytest.fixture
    def match(self):
        players = (
            {"playerIndex": 0, "port": 1, "characterId": 2, "displayName": "A"},
            {"playerIndex": 2, "port": 3, "characterId": 20},
        )
        export = make_export(
            players,
            stocks=[
                {"playerIndex": 0, "count": 3, "endPercent": 10},
                {"playerIndex": 2, "count": 1, "endPercent": 90},
            ],
            conversions=[
                {
                    "playerIndex": 2,
                    "startFrame": 100,
                    "startPercent": 0,
                    "currentPercent": 30,
                    "openingType": "neutral-win",
                    "moves": [{"frame": 100, "moveId": 13, "hitCount": 1, "damage": 30}],
                },
            ],
            overall=[
                {"playerIndex": 0, "killCount": 3, "totalDamage": 300},
                {"playerIndex": 2, "killCount": 1, "totalDamage": 120},
                {"playerIndex": 5, "killCount": 9},
            ],
            metadata={"players": {"2": {"names": {"netplay": "B"}}}},
        )
        return match_from_dict(export, "Game_1.json")

    def test_indices_renumbered(self, match):
        assert [(p.player_index, p.port) for p in match.settings.players] == [(0, 1), (1, 3)]
        assert match.player_tags() == ["A", "B"]

    def test_stats_follow_players(self, match):
        assert [s.player_index for s in match.stats.stocks] == [0, 1]
        assert match.stats.conversions[0].player_index == 1
        assert match.overall_for(1).kill_count == 1
        assert [o.player_index for o in match.stats.overall] == [0, 1]

    def test_aggregates_see_the_game(self, match):
        assert get_match_winner(match) == 0
        stats = get_global_stats([match], "A")
        assert (stats.count, stats.wins, stats.skipped) == (1, 1, 0)
        assert get_global_stats([match], "B").count == 1
        assert len(get_top_punishes([match], "B")) == 1

    def test_contiguous_indices_untouched(self):
        export = make_export()
        match = match_from_dict(export)
        assert [p.player_index for p in match.settings.players] == [0, 1]


class TestLoadFiles:
    """Tests for reading exports from disk."""

    def test_load_match(self, tmp_path):
        path = write_export(tmp_path / "Game_1.json", make_export())
        match = load_match(path)
        assert match.is_available
        assert match.file_path == path

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        match = load_match(path)
        assert not match.is_available
        assert match.error

    def test_non_object_export(self, tmp_path):
        path = write_export(tmp_path / "list.json", [1, 2, 3])
        assert not load_match(path).is_available

    def test_missing_file(self, tmp_path):
        assert not load_match(tmp_path / "absent.json").is_available

    def test_find_exports_sorted(self, tmp_path):
        for name in ("b.json", "a.json", "notes.txt"):
            (tmp_path / name).write_text("{}")
        assert [p.name for p in find_exports(tmp_path)] == ["a.json", "b.json"]

    def test_find_exports_recursive(self, tmp_path):
        (tmp_path / "week1").mkdir()
        (tmp_path / "week1" / "g.json").write_text("{}")
        assert find_exports(tmp_path) == []
        assert [p.name for p in find_exports(tmp_path, recursive=True)] == ["g.json"]

    def test_load_matches_mixes_files_and_folders(self, tmp_path):
        folder = tmp_path / "exports"
        folder.mkdir()
        write_export(folder / "Game_2.json", make_export())
        write_export(folder / "Game_1.json", make_export())
        (folder / "Game_3.json").write_text("garbage")
        single = write_export(tmp_path / "Game_0.json", make_export())

        matches = load_matches([single, folder])

        assert [m.display_name for m in matches] == ["Game_0", "Game_1", "Game_2", "Game_3"]
        assert [m.is_available for m in matches] == [True, True, True, False]

    def test_load_matches_accepts_strings(self, tmp_path):
        write_export(tmp_path / "Game_1.json", make_export())
        assert len(load_matches([str(tmp_path)])) == 1
