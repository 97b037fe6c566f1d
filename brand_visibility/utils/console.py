"""
Rich console utilities for dual-mode CLI output.

Human Mode (--format text):
    - Rich colored messages and tables

Agent Mode (--format json):
    - Structured JSON output to stdout
    - No ANSI codes

Examples:
    >>> output_mode.format = "json"
    >>> success("Config loaded")  # Buffered, not printed
    >>> output_mode.add_json("valid", True)
    >>> output_mode.flush_json()   # Outputs JSON to stdout
"""

from __future__ import annotations

import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        _json_buffer: Internal buffer for JSON output in agent mode
    """

    def __init__(self, format_type: str = "text"):
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Add key-value pair to JSON buffer (agent mode)."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear buffer.

        Only outputs in agent mode. In human mode, this is a no-op.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


def success(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """Errors go to stderr in human mode; agent mode reports them in JSON."""
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}")


def warning(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[yellow]⚠[/yellow] {message}")


def info(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[blue]ℹ[/blue] {message}")


def _score_style(score: float) -> str:
    if score >= 7:
        return "green"
    if score >= 4:
        return "yellow"
    return "red"


def print_analysis_table(org_id: str, outcome_dict: dict[str, Any]) -> None:
    """
    Display one analysis outcome as a Rich table (human mode only).

    Args:
        org_id: Organization the response was analyzed for
        outcome_dict: AnalysisOutcome.to_dict() payload
    """
    if not output_mode.is_human():
        return

    analysis = outcome_dict["analysis"]
    score = analysis["score"]
    prominence = analysis["orgBrandProminence"]

    table = Table(title=f"Brand visibility: {org_id}", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Score", f"[{_score_style(score)}]{score}[/{_score_style(score)}] / 10")
    table.add_row("Org brand present", "yes" if analysis["orgBrandPresent"] else "no")
    table.add_row("Prominence", f"#{prominence}" if prominence is not None else "-")
    table.add_row("Brands", ", ".join(analysis["brands"]) or "-")
    table.add_row("Competitors", ", ".join(analysis["competitors"]) or "-")
    if outcome_dict["status"] == "default":
        table.add_row("Status", f"[yellow]default ({outcome_dict['reason']})[/yellow]")

    console.print(table)
