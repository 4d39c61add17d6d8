"""
Export Functionality for SlipStats

Provides export formats for player reports:
- JSON (default): the complete report, one document
- CSV: one table per summary (global, characters, opponents, punishes)

Tables are built as pandas DataFrames so they can also be used directly
for further analysis.
"""

import json
import logging
import math
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from slipstats import __version__
from slipstats.analysis.aggregates import PlayerReport
from slipstats.analysis.game import get_character_name
from slipstats.analysis.models import CharacterUsage, OpponentRecord, RankedPunish
from slipstats.core.config import ExportConfig
from slipstats.core.constants import PUNISH_HIGH_THRESHOLD, PUNISH_MEDIUM_THRESHOLD

logger = logging.getLogger(__name__)


# ============================================================================
# DataFrame Builders
# ============================================================================


def characters_to_dataframe(rows: Sequence[CharacterUsage]) -> pd.DataFrame:
    """Character usage rows as a DataFrame, one row per character."""
    records = []
    for row in rows:
        record = row.to_dict()
        record["character"] = get_character_name(row.character_id)
        record["players"] = ";".join(row.players)
        records.append(record)
    return pd.DataFrame.from_records(
        records,
        columns=["character_id", "character", "count", "wins", "win_rate", "players"],
    )


def opponents_to_dataframe(rows: Sequence[OpponentRecord]) -> pd.DataFrame:
    """Head-to-head rows as a DataFrame, one row per opponent."""
    records = []
    for row in rows:
        record = row.to_dict()
        record["characters"] = ";".join(get_character_name(cid) for cid in row.character_ids)
        del record["character_ids"]
        records.append(record)
    return pd.DataFrame.from_records(
        records, columns=["tag", "count", "wins", "win_rate", "characters"]
    )


def punishes_to_dataframe(
    entries: Sequence[RankedPunish],
    medium_threshold: float = PUNISH_MEDIUM_THRESHOLD,
    high_threshold: float = PUNISH_HIGH_THRESHOLD,
) -> pd.DataFrame:
    """Ranked punishes as a DataFrame, in ranking order."""
    df = pd.DataFrame.from_records(
        [entry.to_dict(medium_threshold, high_threshold) for entry in entries]
    )
    if not df.empty:
        df.insert(0, "rank", range(1, len(df) + 1))
    return df


def global_stats_to_dataframe(report: PlayerReport) -> pd.DataFrame:
    """Single-row DataFrame of the global summary (opponent breakdown omitted)."""
    summary = report.global_stats.to_dict()
    summary.pop("opponents")
    return pd.DataFrame.from_records([{"tag": report.tag, **summary}])


# ============================================================================
# JSON Export
# ============================================================================


def _json_safe(value: Any) -> Any:
    """Replace NaN/inf (not valid JSON) with None, recursively."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def export_to_json(
    report: PlayerReport,
    output_path: Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
    punish_limit: int | None = None,
) -> str:
    """
    Export a player report to JSON.

    Args:
        report: Report to export
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata
        punish_limit: Keep only the top N punishes

    Returns:
        JSON string
    """
    export_data = _json_safe(report.to_dict(punish_limit=punish_limit))

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "slipstats_json",
                "version": __version__,
            },
            **export_data,
        }

    json_str = json.dumps(export_data, indent=indent, default=str, ensure_ascii=False)

    if output_path:
        output_path.write_text(json_str, encoding="utf-8")
        logger.info(f"Exported JSON to: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def export_to_csv(
    report: PlayerReport,
    output_path: Path,
    delimiter: str = ",",
    punish_limit: int | None = None,
) -> list[Path]:
    """
    Export a player report as CSV tables.

    ``output_path`` receives the global summary; the other tables are written
    next to it as ``<stem>_characters.csv``, ``<stem>_opponent_characters.csv``,
    ``<stem>_opponents.csv`` and ``<stem>_punishes.csv``.

    Returns:
        Paths written, summary first
    """
    punishes = report.top_punishes if punish_limit is None else report.top_punishes[:punish_limit]
    tables = {
        output_path: global_stats_to_dataframe(report),
        output_path.with_name(f"{output_path.stem}_characters.csv"): characters_to_dataframe(
            report.characters
        ),
        output_path.with_name(
            f"{output_path.stem}_opponent_characters.csv"
        ): characters_to_dataframe(report.opponent_characters),
        output_path.with_name(f"{output_path.stem}_opponents.csv"): opponents_to_dataframe(
            report.opponents
        ),
        output_path.with_name(f"{output_path.stem}_punishes.csv"): punishes_to_dataframe(
            punishes, report.medium_threshold, report.high_threshold
        ),
    }

    for path, df in tables.items():
        df.to_csv(path, sep=delimiter, index=False)
        logger.debug(f"Wrote {len(df)} rows to {path}")

    logger.info(f"Exported CSV tables to: {output_path.parent}")
    return list(tables)


# ============================================================================
# Dispatch
# ============================================================================


def export_report(
    report: PlayerReport,
    output_path: Path,
    format: str | None = None,
    config: ExportConfig | None = None,
    punish_limit: int | None = None,
) -> None:
    """
    Export a report to the specified format.

    Format is detected from the file extension if not specified.

    Args:
        report: Report to export
        output_path: Path to write the export
        format: Optional format override (json, csv)
        config: Export settings (indentation, delimiter)
        punish_limit: Keep only the top N punishes
    """
    config = config or ExportConfig()
    if format is None:
        format = output_path.suffix.lstrip(".").lower() or config.default_format

    if format == "json":
        export_to_json(report, output_path, indent=config.json_indent, punish_limit=punish_limit)
    elif format == "csv":
        export_to_csv(
            report, output_path, delimiter=config.csv_delimiter, punish_limit=punish_limit
        )
    else:
        raise ValueError(f"Unsupported export format: {format}")
