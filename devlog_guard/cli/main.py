"""
CLI interface for DevLog Guard.

Provides operator access to the usage ledger and offline access to the
extractor and claim validator.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devlog_guard.config.loader import load_guard_config
from devlog_guard.core.extractor import extract_code_fragments
from devlog_guard.core.ledger import UsageLedger, build_ledger
from devlog_guard.core.validator import is_evidence_missing, validate_generated_texts
from devlog_guard.observability.logger import setup_logging

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to YAML configuration (defaults to $DEVLOG_GUARD_CONFIG)"
)


def _load_ledger(config_path: Optional[str]) -> UsageLedger:
    return build_ledger(load_guard_config(config_path))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error reading {path}:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """DevLog Guard CLI."""
    setup_logging(logging.WARNING)
    if ctx.invoked_subcommand is None:
        console.print("DevLog Guard - Use --help to see available commands")


@app.command()
def init(config: Optional[str] = ConfigOption):
    """Initialize the usage ledger database."""
    try:
        ledger = _load_ledger(config)
        ledger.repository.initialize_schema()
        console.print(f"[green]✓[/] Ledger initialized at {ledger.repository.db_path}")
    except Exception as e:
        console.print(f"[red]Error initializing ledger:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def budget(config: Optional[str] = ConfigOption):
    """Show the current month's usage against the budget."""
    try:
        status = _load_ledger(config).get_budget_status()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title=f"Budget status {status.month}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Requests", f"{status.request_count:,}")
    table.add_row("Prompt tokens", f"{status.prompt_tokens:,}")
    table.add_row("Completion tokens", f"{status.completion_tokens:,}")
    table.add_row("Total tokens", f"{status.total_tokens:,} / {status.max_monthly_tokens:,}")
    table.add_row("Tokens remaining", f"{status.tokens_remaining:,}")
    table.add_row("Estimated cost", f"{_format_currency(status.estimated_cost)} / {_format_currency(status.budget_limit)}")
    table.add_row("Budget remaining", _format_currency(status.budget_remaining))
    table.add_row("Resets at", status.resets_at.isoformat())
    console.print(table)

    if status.is_exceeded:
        console.print("[bold red]Budget exceeded:[/] generation is paused until the reset date")
    else:
        console.print("[green]✓[/] Within budget")


@app.command()
def reset(
    month: Optional[str] = typer.Option(
        None,
        "--month",
        "-m",
        help="Month to reset as YYYY-MM (defaults to the current month)"
    ),
    config: Optional[str] = ConfigOption,
):
    """Discard a month's recorded usage."""
    try:
        ledger = _load_ledger(config)
        target = month or ledger.current_month()
        ledger.reset_monthly_usage(target)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Usage for {target} has been reset")


@app.command()
def extract(
    log_file: Path = typer.Argument(..., help="Raw work log to scan for code"),
    config: Optional[str] = ConfigOption,
):
    """Print the code fragments recovered from a raw log."""
    settings = load_guard_config(config).extraction
    fragments = extract_code_fragments(_read_text(log_file), settings.max_fragments, settings.max_lines)

    if not fragments:
        console.print("[dim]No code fragments found.[/]")
        return

    for index, fragment in enumerate(fragments, start=1):
        suffix = " (truncated)" if fragment.truncated else ""
        console.print(f"\n[bold]Fragment {index}[/bold] {escape(f'[{fragment.language}]')}{suffix}", highlight=False)
        console.print(fragment.code, markup=False, highlight=False)


@app.command()
def check(
    text_file: Path = typer.Argument(..., help="Generated post to validate"),
    before: Optional[str] = typer.Option(None, "--before", help="Before-evidence as supplied"),
    after: Optional[str] = typer.Option(None, "--after", help="After-evidence as supplied"),
    enforced: bool = typer.Option(
        False,
        "--enforced",
        "-e",
        help="Exit with error code if any warning is found"
    ),
):
    """Validate a generated post against the supplied evidence."""
    warnings = validate_generated_texts([_read_text(text_file)], before, after)

    if is_evidence_missing(before, after):
        console.print("[yellow]No evidence supplied[/]")

    if warnings is None:
        console.print("[green]✓[/] No warnings")
        return

    for warning in warnings:
        console.print(f"[yellow]![/] {warning}", highlight=False)

    if enforced:
        sys.exit(EXIT_CODE_FAIL)


def _format_currency(amount) -> str:
    """Format currency with six decimal places."""
    return f"${float(amount):,.6f}"


if __name__ == "__main__":
    app()
