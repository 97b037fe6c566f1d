"""
CLI entrypoint for Brand Visibility.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich tables and colored text
- Agent-friendly output: Structured JSON for automation

Commands:
    analyze: Score one AI response for an organization
    validate: Validate configuration
    seed: Write the configured catalogs into a SQLite catalog database

Exit codes:
    0: Success (including safe-default analyses)
    1: Configuration error (missing file, invalid YAML, bad input)
    2: Database error (cannot create/access SQLite)

Examples:
    brand-visibility analyze -c brand_visibility.config.yaml --org acme --file answer.txt
    brand-visibility analyze -c brand_visibility.config.yaml --org acme --text "..." --format json
    brand-visibility seed -c brand_visibility.config.yaml --db catalog.db
"""

from pathlib import Path

import typer
from rich.traceback import install as install_rich_traceback

from brand_visibility.analyzer import analyze_response
from brand_visibility.config.loader import build_catalog_store, load_config
from brand_visibility.exceptions import CatalogError, ConfigurationError
from brand_visibility.storage.db import SqliteCatalogStore, seed_from_config
from brand_visibility.utils.console import (
    error,
    info,
    output_mode,
    print_analysis_table,
    success,
)
from brand_visibility.utils.logging import setup_logging

install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_DB_ERROR = 2

app = typer.Typer(
    name="brand-visibility",
    help="Score how visible your brand is in AI model answers",
    add_completion=False,
)


def _set_format(format: str) -> None:
    if format not in ("text", "json"):
        error(f"Invalid format: {format}. Must be 'text' or 'json'")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    output_mode.format = format


def _fail(message: str, error_type: str, exit_code: int) -> None:
    error(message)
    if output_mode.is_agent():
        output_mode.add_json("error", message)
        output_mode.add_json("error_type", error_type)
        output_mode.flush_json()
    raise typer.Exit(exit_code)


@app.command()
def analyze(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    org: str = typer.Option(..., "--org", "-o", help="Organization id to analyze for"),
    text: str | None = typer.Option(None, "--text", "-t", help="Response text to analyze"),
    file: Path | None = typer.Option(
        None,
        "--file",
        help="Read the response text from a file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    db: Path | None = typer.Option(
        None,
        "--db",
        help="Read catalogs from this SQLite database instead of the config file",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Analyze one AI model response for brand and competitor mentions.

    Prints the visibility score, whether the org brand appeared, its rank
    among first mentions, and the brands and competitors found. A missing
    catalog yields the safe-default analysis, not an error.
    """
    _set_format(format)
    setup_logging(verbose=verbose)

    if (text is None) == (file is None):
        _fail("Provide exactly one of --text or --file", "invalid_input", EXIT_CONFIG_ERROR)

    try:
        runtime_config = load_config(config)
    except ConfigurationError as e:
        _fail(str(e), "config_error", EXIT_CONFIG_ERROR)

    if file is not None:
        try:
            text = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _fail(f"Failed to read {file}: {e}", "invalid_input", EXIT_CONFIG_ERROR)

    store = SqliteCatalogStore(db) if db is not None else build_catalog_store(runtime_config)

    outcome = analyze_response(org, text, store, runtime_config.analyzer_settings())
    payload = outcome.to_dict()

    if output_mode.is_agent():
        output_mode.add_json("org_id", org)
        for key, value in payload.items():
            output_mode.add_json(key, value)
        output_mode.flush_json()
    else:
        print_analysis_table(org, payload)

    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def validate(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    format: str = typer.Option("text", "--format", "-f", help="Output format: 'text' or 'json'"),
):
    """
    Validate configuration file.

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid
    """
    _set_format(format)

    try:
        runtime_config = load_config(config)
    except ConfigurationError as e:
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
        _fail(str(e), "validation_error", EXIT_CONFIG_ERROR)

    success("Configuration is valid")
    info(f"Organizations: {len(runtime_config.organizations)}")
    info(f"Global competitors: {len(runtime_config.global_competitors)}")
    info(
        f"Scoring: {runtime_config.scoring.penalty} penalty, "
        f"+{runtime_config.scoring.top_rank_bonus} top-rank bonus"
    )

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("organizations_count", len(runtime_config.organizations))
        output_mode.add_json(
            "global_competitors_count", len(runtime_config.global_competitors)
        )
        output_mode.add_json("penalty", runtime_config.scoring.penalty)
        output_mode.flush_json()

    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def seed(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    db: Path = typer.Option(..., "--db", help="SQLite catalog database to write"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: 'text' or 'json'"),
):
    """
    Write the organizations section of the config into a catalog database.

    Existing rows for the same (organization, brand name) are updated.
    """
    _set_format(format)

    try:
        runtime_config = load_config(config)
    except ConfigurationError as e:
        _fail(str(e), "config_error", EXIT_CONFIG_ERROR)

    try:
        written = seed_from_config(str(db), runtime_config)
    except CatalogError as e:
        _fail(str(e), "database_error", EXIT_DB_ERROR)

    success(f"Wrote {written} catalog entries to {db}")

    if output_mode.is_agent():
        output_mode.add_json("entries_written", written)
        output_mode.add_json("db_path", str(db))
        output_mode.flush_json()

    raise typer.Exit(EXIT_SUCCESS)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
):
    """
    Brand Visibility - score brand mentions in AI model answers.

    Use 'brand-visibility COMMAND --help' for detailed command documentation.
    """
    if version:
        from rich.console import Console

        Console().print(f"[bold cyan]brand-visibility[/bold cyan] version {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        from rich.console import Console

        console = Console()
        console.print("[yellow]Use --help to see available commands[/yellow]")
        console.print()
        console.print("Commands:")
        console.print("  analyze   Score one AI response for an organization")
        console.print("  validate  Validate configuration")
        console.print("  seed      Write configured catalogs into a SQLite database")


def _read_version() -> str:
    """Read version from package metadata (pyproject.toml)."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("brand-visibility")
    except PackageNotFoundError:
        from brand_visibility import __version__

        return __version__


if __name__ == "__main__":
    app()
