"""
Configuration Management for SlipStats

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (SLIPSTATS_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from slipstats.core.constants import (
    DEFAULT_STARTING_STOCKS,
    PUNISH_HIGH_THRESHOLD,
    PUNISH_MEDIUM_THRESHOLD,
    TOP_PUNISH_DISPLAY_COUNT,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class AnalysisConfig:
    """Configuration for the aggregation engine."""

    # Stocks assumed for a player with no stock records (game ruleset)
    starting_stocks: int = DEFAULT_STARTING_STOCKS

    # Punish damage tiers, in percent
    punish_medium_threshold: float = PUNISH_MEDIUM_THRESHOLD
    punish_high_threshold: float = PUNISH_HIGH_THRESHOLD

    # How many ranked punishes to display
    top_punish_count: int = TOP_PUNISH_DISPLAY_COUNT

    # Raise instead of skipping matches where the player tag is not found
    strict_identity: bool = False


@dataclass
class LoaderConfig:
    """Configuration for loading replay stat exports."""

    file_pattern: str = "*.json"
    recursive: bool = False


@dataclass
class ExportConfig:
    """Configuration for data export."""

    default_format: str = "json"
    json_indent: int = 2
    csv_delimiter: str = ","


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str | int = "INFO"  # Level name or number
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class SlipStatsConfig:
    """Main configuration container."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "slipstats.yaml")
    paths.append(Path.cwd() / "slipstats.toml")
    paths.append(Path.cwd() / "slipstats.json")
    paths.append(Path.cwd() / ".slipstats.yaml")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "slipstats" / "config.yaml")
    paths.append(home / ".config" / "slipstats" / "config.toml")
    paths.append(home / ".slipstats.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "slipstats" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


ENV_MAPPINGS: dict[str, tuple[str, str]] = {
    "SLIPSTATS_LOG_LEVEL": ("logging", "level"),
    "SLIPSTATS_LOG_FILE": ("logging", "file"),
    "SLIPSTATS_STARTING_STOCKS": ("analysis", "starting_stocks"),
    "SLIPSTATS_TOP_PUNISHES": ("analysis", "top_punish_count"),
    "SLIPSTATS_STRICT_IDENTITY": ("analysis", "strict_identity"),
    "SLIPSTATS_FILE_PATTERN": ("loader", "file_pattern"),
    "SLIPSTATS_RECURSIVE": ("loader", "recursive"),
    "SLIPSTATS_EXPORT_FORMAT": ("export", "default_format"),
}

# Values kept as strings even when they look numeric
STRING_ENV_VARS = {
    "SLIPSTATS_LOG_LEVEL",
    "SLIPSTATS_LOG_FILE",
    "SLIPSTATS_FILE_PATTERN",
    "SLIPSTATS_EXPORT_FORMAT",
}


def _convert_env_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}

            config[section][key] = value if env_var in STRING_ENV_VARS else _convert_env_value(value)

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> SlipStatsConfig:
    """Convert a dictionary to SlipStatsConfig, ignoring unknown keys."""
    config = SlipStatsConfig()

    for section_name in ("analysis", "loader", "export", "logging"):
        section = getattr(config, section_name)
        for key, value in (data.get(section_name) or {}).items():
            if hasattr(section, key):
                setattr(section, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {section_name}.{key}")

    if "config_version" in data:
        config.config_version = str(data["config_version"])

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> SlipStatsConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged SlipStatsConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def save_config(config: SlipStatsConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (YAML or JSON, detected from extension)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


def config_to_dict(config: SlipStatsConfig) -> dict[str, Any]:
    """Convert SlipStatsConfig to a dictionary."""
    return asdict(config)


# ============================================================================
# Logging Setup
# ============================================================================


def resolve_log_level(level: str | int) -> int:
    """Numeric logging level from a name ("debug") or a number (10 or "10")."""
    if isinstance(level, int):
        return level
    level = str(level).strip()
    if level.isdigit():
        return int(level)
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(logging_config: LoggingConfig, verbose: bool = False) -> None:
    """Apply logging settings to the root logger."""
    level = logging.DEBUG if verbose else resolve_log_level(logging_config.level)
    logging.basicConfig(level=level, format=logging_config.format, force=True)

    if logging_config.file:
        handler = logging.handlers.RotatingFileHandler(
            logging_config.file,
            maxBytes=logging_config.file_max_bytes,
            backupCount=logging_config.file_backup_count,
        )
        handler.setFormatter(logging.Formatter(logging_config.format))
        logging.getLogger().addHandler(handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: SlipStatsConfig | None = None


def get_config() -> SlipStatsConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: SlipStatsConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# SlipStats Configuration

# Aggregation settings
analysis:
  starting_stocks: 4          # Stocks assumed when a player has no stock records
  punish_medium_threshold: 35.0
  punish_high_threshold: 70.0
  top_punish_count: 20
  strict_identity: false      # Fail instead of skipping games without the player

# Replay export loading
loader:
  file_pattern: "*.json"
  recursive: false

# Export settings
export:
  default_format: json
  json_indent: 2
  csv_delimiter: ","

# Logging settings
logging:
  level: INFO
  # file: /path/to/slipstats.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        save_config(SlipStatsConfig(), path)

    logger.info(f"Generated default config at: {path}")
