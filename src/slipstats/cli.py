"""
SlipStats CLI - Command Line Interface for Slippi replay statistics

Provides commands for:
- Season stats for a player across replay exports
- Ranking a player's best punishes
- Inspecting a single replay export
- Generating a default configuration file
"""

import logging
import platform as plat
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from slipstats import __version__
from slipstats.analysis.aggregates import PlayerReport, build_player_report, get_top_punishes
from slipstats.analysis.game import (
    UnresolvedPlayerError,
    get_character_name,
    get_last_player_stock,
    get_match_winner,
    get_stage_name,
    get_teams,
)
from slipstats.analysis.models import CharacterUsage, RankedPunish
from slipstats.analysis.punish import (
    classify_punish_damage,
    format_damage_range,
    get_opening_label,
    get_punish_damage,
)
from slipstats.core.config import (
    configure_logging,
    generate_default_config,
    get_config,
    load_config,
    set_config,
)
from slipstats.core.constants import NO_WINNER, SEVERITY_COLORS
from slipstats.core.loader import load_match, load_matches
from slipstats.core.schemas import MatchRecord
from slipstats.core.utils import PerformanceMonitor, format_ratio, frames_to_duration
from slipstats.export import export_report

app = typer.Typer(
    name="slipstats",
    help="Player statistics across Slippi replays - records, matchups and best punishes",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]SlipStats[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """SlipStats - Slippi replay statistics"""
    config = load_config(config_file)
    set_config(config)
    configure_logging(config.logging, verbose=verbose)


# ============================================================================
# Helpers
# ============================================================================


def _load_or_exit(sources: list[Path]) -> list[MatchRecord]:
    config = get_config()
    with PerformanceMonitor("Loading replay exports", log_level=logging.DEBUG):
        matches = load_matches(
            sources, pattern=config.loader.file_pattern, recursive=config.loader.recursive
        )

    if not matches:
        console.print("[red]No replay exports found.[/red]")
        raise typer.Exit(1)

    unavailable = sum(1 for m in matches if not m.is_available)
    if unavailable:
        console.print(f"[yellow]{unavailable} of {len(matches)} replays could not be read[/yellow]")
    return matches


def _character_cell(character_id: int | None) -> str:
    return get_character_name(character_id) if character_id is not None else "-"


def _punish_table(entries: Sequence[RankedPunish], title: str = "Top Punishes") -> Table:
    analysis = get_config().analysis
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Player", style="cyan")
    table.add_column("Opponent", style="magenta")
    table.add_column("Opening")
    table.add_column("Damage", justify="right")
    table.add_column("Range")
    table.add_column("Moves", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")

    for rank, entry in enumerate(entries, start=1):
        punish = entry.punish
        player = entry.match.player(punish.player_index)
        opponent = next(
            (p for p in entry.match.settings.players if p.player_index != punish.player_index),
            None,
        )
        damage = get_punish_damage(punish)
        color = SEVERITY_COLORS[
            classify_punish_damage(
                damage, analysis.punish_medium_threshold, analysis.punish_high_threshold
            )
        ]
        table.add_row(
            str(rank),
            f"{player.tag} ({_character_cell(player.character_id)})" if player else "-",
            f"{opponent.tag} ({_character_cell(opponent.character_id)})" if opponent else "-",
            get_opening_label(punish.opening_type),
            f"[{color}]{int(damage)}%[/{color}]",
            format_damage_range(punish),
            str(punish.move_count),
            frames_to_duration(punish.start_frame),
            frames_to_duration(punish.end_frame),
        )
    return table


def _character_table(rows: Sequence[CharacterUsage], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Character", style="cyan")
    table.add_column("Games", justify="right")
    table.add_column("Wins", justify="right")
    table.add_column("Win %", justify="right")
    table.add_column("Players")
    for row in rows:
        table.add_row(
            get_character_name(row.character_id),
            str(row.count),
            str(row.wins),
            f"{row.tally.win_rate * 100:.1f}%",
            ", ".join(row.players),
        )
    return table


def _display_report(report: PlayerReport, top: int) -> None:
    stats = report.global_stats

    summary = Table(show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("Games", str(stats.count))
    summary.add_row("Record", f"{stats.wins} - {stats.losses}")
    summary.add_row("Play Time", frames_to_duration(stats.time))
    summary.add_row("Kills / Deaths", f"{stats.kills} / {stats.deaths}")
    summary.add_row("Damage Done / Received", f"{stats.damage_done:.0f}% / {stats.damage_received:.0f}%")
    summary.add_row("Conversion Rate", format_ratio(stats.conversion_rate * 100, 1, "%"))
    summary.add_row("Openings / Kill", format_ratio(stats.openings_per_kill))
    summary.add_row("Damage / Opening", format_ratio(stats.damage_per_opening))
    summary.add_row("Neutral Win Ratio", format_ratio(stats.neutral_win_ratio * 100, 1, "%"))
    summary.add_row("Inputs / Minute", format_ratio(stats.inputs_per_minute, 1))
    summary.add_row("Digital Inputs / Minute", format_ratio(stats.digital_inputs_per_minute, 1))
    if stats.skipped:
        summary.add_row("Skipped Replays", f"[yellow]{stats.skipped}[/yellow]")
    console.print(Panel(summary, title=f"[bold]{report.tag}[/bold]", expand=False))

    console.print(_character_table(report.characters, "Characters Played"))
    console.print(_character_table(report.opponent_characters, "Characters Faced"))

    opponents = Table(title="Opponents")
    opponents.add_column("Opponent", style="magenta")
    opponents.add_column("Games", justify="right")
    opponents.add_column("Wins", justify="right")
    opponents.add_column("Win %", justify="right")
    opponents.add_column("Characters")
    for row in report.opponents:
        opponents.add_row(
            row.tag,
            str(row.count),
            str(row.wins),
            f"{row.tally.win_rate * 100:.1f}%",
            ", ".join(get_character_name(cid) for cid in row.character_ids),
        )
    console.print(opponents)

    console.print(_punish_table(report.top_punishes[:top]))


# ============================================================================
# Commands
# ============================================================================


@app.command()
def stats(
    sources: list[Path] = typer.Argument(
        ..., help="Replay export files or folders", exists=True, resolve_path=True
    ),
    player: str = typer.Option(..., "--player", "-p", help="Player tag, e.g. MANG#0"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Export report (format from extension: .json, .csv)"
    ),
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Number of punishes to show"),
    strict: bool = typer.Option(
        False, "--strict", help="Fail if the player is missing from any replay"
    ),
) -> None:
    """
    Show a player's record, matchups and best punishes.
    """
    config = get_config()
    if strict:
        config.analysis.strict_identity = True
    top = top if top is not None else config.analysis.top_punish_count

    matches = _load_or_exit(sources)

    try:
        report = build_player_report(matches, player, config.analysis)
    except UnresolvedPlayerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if report.global_stats.count == 0:
        console.print(f"[yellow]Player {player!r} was not found in any readable replay.[/yellow]")
        raise typer.Exit(1)

    _display_report(report, top)

    if output:
        try:
            export_report(report, output, config=config.export, punish_limit=top)
        except (OSError, ValueError) as e:
            console.print(f"[red]Export failed:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"\n[green]Report exported to {output}[/green]")


@app.command()
def punishes(
    sources: list[Path] = typer.Argument(
        ..., help="Replay export files or folders", exists=True, resolve_path=True
    ),
    player: str = typer.Option(..., "--player", "-p", help="Player tag, e.g. MANG#0"),
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Number of punishes to show"),
) -> None:
    """
    Rank a player's longest punish from every replay.
    """
    config = get_config()
    top = top if top is not None else config.analysis.top_punish_count
    matches = _load_or_exit(sources)

    try:
        ranked = get_top_punishes(matches, player, strict=config.analysis.strict_identity)
    except UnresolvedPlayerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not ranked:
        console.print(f"[yellow]No punishes found for {player!r}.[/yellow]")
        raise typer.Exit(1)

    console.print(_punish_table(ranked[:top], title=f"Top Punishes - {player}"))


@app.command()
def game(
    export_path: Path = typer.Argument(
        ..., help="A single replay export", exists=True, dir_okay=False, resolve_path=True
    ),
) -> None:
    """
    Show stage, players, final stocks and winner of one replay.
    """
    match = load_match(export_path)
    if not match.is_available:
        console.print(f"[red]Replay could not be read:[/red] {match.error}")
        raise typer.Exit(1)

    starting_stocks = get_config().analysis.starting_stocks
    winner = get_match_winner(match, starting_stocks) if match.is_singles else NO_WINNER

    table = Table(title=match.display_name)
    table.add_column("Side", justify="right", style="dim")
    table.add_column("Port", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Character")
    table.add_column("Stocks", justify="right")
    table.add_column("End %", justify="right")
    table.add_column("Result")

    for side, team in enumerate(get_teams(match), start=1):
        for player in team:
            last_stock = get_last_player_stock(match, player.player_index, starting_stocks)
            result = ""
            if winner != NO_WINNER:
                result = "[green]Win[/green]" if winner == player.player_index else "Loss"
            table.add_row(
                str(side),
                str(player.port),
                player.tag,
                get_character_name(player.character_id),
                str(last_stock.count),
                f"{last_stock.end_percent:.0f}%",
                result,
            )

    console.print(table)
    console.print(f"Stage: {get_stage_name(match)}    Duration: {frames_to_duration(match.last_frame)}")
    if match.is_singles and winner == NO_WINNER:
        console.print("[yellow]No winner could be determined[/yellow]")


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path("slipstats.yaml"), help="Where to write the config file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        console.print(f"[red]{path} already exists[/red] (use --force to overwrite)")
        raise typer.Exit(1)
    generate_default_config(path)
    console.print(f"[green]Wrote default config to {path}[/green]")


@app.command()
def info() -> None:
    """
    Display information about SlipStats and the environment.
    """
    import pandas as pd

    config = get_config()
    console.print(f"\n[bold blue]SlipStats[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", plat.python_version())
    table.add_row("Platform", plat.system())
    table.add_row("pandas", pd.__version__)
    table.add_row("Starting Stocks", str(config.analysis.starting_stocks))
    table.add_row("Top Punishes", str(config.analysis.top_punish_count))
    table.add_row("Strict Identity", str(config.analysis.strict_identity))
    table.add_row("Export Pattern", config.loader.file_pattern)

    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
