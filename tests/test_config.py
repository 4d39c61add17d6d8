"""Tests for configuration loading and saving."""

import json
import logging
import logging.handlers

import pytest
import yaml

from slipstats.core.config import (
    DEFAULT_CONFIG_YAML,
    AnalysisConfig,
    LoggingConfig,
    SlipStatsConfig,
    config_to_dict,
    configure_logging,
    dict_to_config,
    generate_default_config,
    get_config,
    load_config,
    load_config_file,
    load_env_config,
    merge_configs,
    reset_config,
    save_config,
    set_config,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_analysis_defaults(self):
        config = AnalysisConfig()
        assert config.starting_stocks == 4
        assert config.punish_medium_threshold == 35.0
        assert config.punish_high_threshold == 70.0
        assert config.top_punish_count == 20
        assert config.strict_identity is False

    def test_template_matches_defaults(self):
        data = yaml.safe_load(DEFAULT_CONFIG_YAML)
        config = dict_to_config(data)
        assert config.analysis == AnalysisConfig()
        assert config.loader == SlipStatsConfig().loader
        assert config.export == SlipStatsConfig().export


class TestLoading:
    """Tests for reading config files and environment variables."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "slipstats.yaml"
        path.write_text("analysis:\n  starting_stocks: 3\n  strict_identity: true\n")
        config = load_config(path)
        assert config.analysis.starting_stocks == 3
        assert config.analysis.strict_identity is True

    def test_load_json(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"loader": {"recursive": True}}))
        assert load_config(path).loader.recursive is True

    def test_load_toml(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('[export]\ndefault_format = "csv"\n')
        assert load_config(path).export.default_format == "csv"

    def test_missing_file_is_empty(self, tmp_path):
        assert load_config_file(tmp_path / "absent.yaml") == {}

    def test_unknown_format_is_empty(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[analysis]\n")
        assert load_config_file(path) == {}

    def test_discovers_file_in_working_directory(self, tmp_path):
        (tmp_path / "slipstats.yaml").write_text("analysis:\n  top_punish_count: 5\n")
        assert load_config().analysis.top_punish_count == 5

    def test_no_files_gives_defaults(self):
        assert load_config() == SlipStatsConfig()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SLIPSTATS_STARTING_STOCKS", "3")
        monkeypatch.setenv("SLIPSTATS_STRICT_IDENTITY", "true")
        monkeypatch.setenv("SLIPSTATS_LOG_LEVEL", "DEBUG")
        assert load_env_config() == {
            "analysis": {"starting_stocks": 3, "strict_identity": True},
            "logging": {"level": "DEBUG"},
        }

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "slipstats.yaml"
        path.write_text("analysis:\n  starting_stocks: 3\n")
        monkeypatch.setenv("SLIPSTATS_STARTING_STOCKS", "5")
        assert load_config(path).analysis.starting_stocks == 5

    def test_env_numeric_strings_stay_strings(self, monkeypatch):
        monkeypatch.setenv("SLIPSTATS_LOG_LEVEL", "10")
        monkeypatch.setenv("SLIPSTATS_FILE_PATTERN", "2024")
        assert load_env_config() == {
            "logging": {"level": "10"},
            "loader": {"file_pattern": "2024"},
        }

    def test_env_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("SLIPSTATS_STARTING_STOCKS", "3")
        assert load_config(include_env=False).analysis.starting_stocks == 4


class TestConversion:
    """Tests for dictionary helpers."""

    def test_merge_configs_is_recursive(self):
        base = {"analysis": {"starting_stocks": 4, "top_punish_count": 20}}
        override = {"analysis": {"starting_stocks": 3}, "loader": {"recursive": True}}
        assert merge_configs(base, override) == {
            "analysis": {"starting_stocks": 3, "top_punish_count": 20},
            "loader": {"recursive": True},
        }

    def test_dict_to_config_ignores_unknown_keys(self):
        config = dict_to_config({"analysis": {"starting_stocks": 2, "bogus": 1}, "other": {}})
        assert config.analysis.starting_stocks == 2
        assert not hasattr(config.analysis, "bogus")

    def test_empty_section(self):
        assert dict_to_config({"analysis": None}) == SlipStatsConfig()


class TestSaving:
    """Tests for writing config files."""

    @pytest.mark.parametrize("name", ["out.yaml", "out.json"])
    def test_round_trip(self, tmp_path, name):
        config = SlipStatsConfig()
        config.analysis.starting_stocks = 3
        config.export.csv_delimiter = ";"
        path = tmp_path / name

        save_config(config, path)

        assert load_config(path, include_env=False) == config

    def test_unknown_format_raises(self, tmp_path):
        with pytest.raises(ValueError):
            save_config(SlipStatsConfig(), tmp_path / "out.txt")

    def test_config_to_dict(self):
        data = config_to_dict(SlipStatsConfig())
        assert data["analysis"]["starting_stocks"] == 4
        assert data["config_version"] == "1.0"

    def test_generate_default_yaml(self, tmp_path):
        path = tmp_path / "slipstats.yaml"
        generate_default_config(path)
        assert path.read_text() == DEFAULT_CONFIG_YAML

    def test_generate_default_json(self, tmp_path):
        path = tmp_path / "slipstats.json"
        generate_default_config(path)
        assert load_config(path, include_env=False) == SlipStatsConfig()


class TestGlobalConfig:
    """Tests for the process-wide configuration."""

    def test_get_config_loads_once(self):
        assert get_config() is get_config()

    def test_set_and_reset(self):
        custom = SlipStatsConfig(analysis=AnalysisConfig(starting_stocks=2))
        set_config(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom


class TestConfigureLogging:
    """Tests for applying logging settings."""

    def test_level(self):
        configure_logging(LoggingConfig(level="warning"))
        assert logging.getLogger().level == logging.WARNING

    def test_numeric_level(self):
        configure_logging(LoggingConfig(level=30))
        assert logging.getLogger().level == logging.WARNING

    def test_numeric_level_from_env(self, monkeypatch):
        monkeypatch.setenv("SLIPSTATS_LOG_LEVEL", "10")
        configure_logging(load_config().logging)
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(LoggingConfig(level="chatty"))
        assert logging.getLogger().level == logging.INFO

    def test_verbose_forces_debug(self):
        configure_logging(LoggingConfig(level="ERROR"), verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_log_file(self, tmp_path):
        configure_logging(LoggingConfig(file=str(tmp_path / "slipstats.log")))
        handlers = logging.getLogger().handlers
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)
        for handler in handlers:
            handler.close()
