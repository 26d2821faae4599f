"""CLI interface for dircleaner."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

import click

from dircleaner.core.scanner import ScanError, scan
from dircleaner.core.session import DecisionSource, DeletionSession
from dircleaner.models.file_match import FileMatch, ScanResult
from dircleaner.models.outcome import DeletionOutcome, OutcomeStatus
from dircleaner.settings import Settings
from dircleaner.utils import bytes_to_human, format_relative_time, format_timestamp

_NAME_PROMPT = "File name to search for (including its extension)"
_MISSING = object()


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _run_scan(root: Path, target_name: str) -> ScanResult:
    try:
        return scan(root, target_name)
    except ScanError as exc:
        raise click.UsageError(str(exc)) from exc


def _format_time(value: datetime | None, settings: Settings) -> str:
    text = format_timestamp(value, settings.get_typed("display.time_format", str))
    if value is not None and settings.get_typed("display.relative_times", bool):
        text = f"{text} ({format_relative_time(value)})"
    return text


def _show_matches(matches: Sequence[FileMatch], settings: Settings) -> None:
    for i, match in enumerate(matches, 1):
        click.echo(click.style(f"Entry {i}", bold=True))
        click.echo(f"  file name:     {match.name}")
        click.echo(f"  directory:     {match.folder.as_posix()}")
        click.echo(f"  creation date: {_format_time(match.creation_time, settings)}")
        click.echo(f"  modified:      {_format_time(match.modified_time, settings)}")
        click.echo(f"  size:          {bytes_to_human(match.size_bytes)}")
        if match.metadata_error:
            click.echo(f"  {click.style('metadata unavailable:', fg='yellow')} {match.metadata_error}")
    if any(m.creation_time is None and not m.metadata_error for m in matches):
        click.echo(
            click.style(
                "\nThis filesystem does not record creation dates; compare the modified dates instead.",
                fg="bright_black",
            )
        )


def _show_warnings(result: ScanResult) -> None:
    if result.complete:
        return
    for warning in result.warnings:
        click.echo(f"  {click.style('!', fg='yellow')} skipped {warning}", err=True)
    click.echo(
        click.style(
            f"{len(result.warnings)} location(s) could not be read; the list may be incomplete.",
            fg="yellow",
        ),
        err=True,
    )


class ConsoleDecisions(DecisionSource):
    """Asks the keep/delete questions on the terminal."""

    def __init__(self, settings: Settings, target_name: str) -> None:
        self.settings = settings
        self.target_name = target_name

    def present(self, matches: Sequence[FileMatch]) -> None:
        click.echo(f"\nFound {len(matches)} file(s) named {click.style(self.target_name, fg='cyan', bold=True)}:\n")
        _show_matches(matches, self.settings)
        click.echo()

    def no_matches(self) -> None:
        click.echo(f"No files named '{self.target_name}' found.")

    def keep_all(self, matches: Sequence[FileMatch]) -> bool:
        return click.confirm(
            "Do you want to keep every file?",
            default=self.settings.get_typed("prompt.keep_all_default", bool),
        )

    def keep(self, match: FileMatch, position: int, total: int) -> bool:
        return click.confirm(
            f"[{position}/{total}] Keep {match.relative_path.as_posix()}?",
            default=True,
        )

    def outcome(self, match: FileMatch, outcome: DeletionOutcome) -> None:
        path = match.relative_path.as_posix()
        if outcome.status is OutcomeStatus.DELETED:
            click.echo(f"  {click.style('✓', fg='green')} {path} — deleted")
        elif outcome.is_failure:
            click.echo(f"  {click.style('✗', fg='red')} {path} — {outcome.reason}")
        else:
            click.echo(f"  {click.style('·', fg='bright_black')} {path} — kept")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """dircleaner — find files sharing a name in a directory tree and delete the copies you don't need."""
    _setup_logging(verbose)


# ── find ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--name", "-n", "target_name", prompt=_NAME_PROMPT, help="Exact file name to look for")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def find(root: Path, target_name: str, as_json: bool) -> None:
    """List files named NAME under ROOT (preview only, never deletes)."""
    result = _run_scan(root, target_name)

    if as_json:
        data = {
            "root": str(result.root),
            "target_name": result.target_name,
            "complete": result.complete,
            "matches": [m.to_dict() for m in result],
            "warnings": [{"path": str(w.path), "reason": w.reason} for w in result.warnings],
        }
        click.echo(json.dumps(data, indent=2))
        return

    if not result:
        click.echo(f"No files named '{target_name}' found.")
    else:
        click.echo(f"\nFound {len(result)} file(s) named {click.style(target_name, fg='cyan', bold=True)}:\n")
        _show_matches(result.matches, Settings())
        click.echo()
    _show_warnings(result)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--name", "-n", "target_name", prompt=_NAME_PROMPT, help="Exact file name to look for")
def clean(root: Path, target_name: str) -> None:
    """Find files named NAME under ROOT and choose which copies to delete."""
    result = _run_scan(root, target_name)
    _show_warnings(result)

    session = DeletionSession(ConsoleDecisions(Settings(), target_name))
    outcomes = session.run(result)
    if not outcomes:
        return

    counts = {status: 0 for status in OutcomeStatus}
    for _, outcome in outcomes:
        counts[outcome.status] += 1

    if counts[OutcomeStatus.DELETED] == 0 and counts[OutcomeStatus.FAILED] == 0:
        click.echo("\nNothing deleted. Good bye!")
        return

    click.echo(
        f"\nDeleted {click.style(str(counts[OutcomeStatus.DELETED]), fg='green', bold=True)} file(s), "
        f"kept {counts[OutcomeStatus.KEPT]}, "
        f"{counts[OutcomeStatus.FAILED]} failed.\n"
    )
    if counts[OutcomeStatus.FAILED]:
        sys.exit(1)


# ── config ───────────────────────────────────────────────────────────────

@main.command("config")
@click.argument("key", required=False)
@click.argument("value", required=False)
def config_cmd(key: str | None, value: str | None) -> None:
    """Show or change display settings.

    Without arguments, print the settings file location.  With KEY, print
    its value.  With KEY and VALUE, store VALUE (parsed as JSON when
    possible, e.g. true or 42).
    """
    settings = Settings()
    if key is None:
        click.echo(f"Settings file: {settings.path}")
        return

    if value is None:
        current = settings.get(key, _MISSING)
        if current is _MISSING:
            click.echo(f"Unknown setting '{key}'.", err=True)
            sys.exit(1)
        click.echo(json.dumps(current))
        return

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    settings.set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")
