"""Command-line interface for refbuild.

Provides the ``baseline``, ``previous``, ``history`` and ``check-config``
subcommands, all reading builds from a directory laid out as described in
:mod:`refbuild.store`.
"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Callable

import click

from refbuild import __version__
from refbuild.config import (
    LookupConfig,
    config_from_profile,
    load_profile,
    validate_config,
)
from refbuild.formatting import format_outcome, format_result, format_table
from refbuild.history import HistoryError, HistoryWalker, ReferenceFilter
from refbuild.logging import get_logger, setup_logging
from refbuild.store import BuildStore, StoredBuild

log = get_logger("cli")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """refbuild: find reference builds for CI analysis results."""


def _lookup_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that walks a job's history."""
    options = [
        click.argument("build", default="latest"),
        click.option(
            "--profile",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="YAML lookup profile; command-line options override it.",
        ),
        click.option("--builds-dir", type=click.Path(path_type=Path), default=None),
        click.option("--job", type=str, default=None, help="Job name (default: main)."),
        click.option("--id", "analysis_id", type=str, default=None, help="Analysis ID to follow."),
        click.option("--kind", type=str, default=None, help="Analysis kind to follow."),
        click.option("-v", "--verbose", is_flag=True, help="Show detailed output."),
        click.option("-q", "--quiet", is_flag=True, help="Only show errors."),
        click.option("--log-file", type=click.Path(path_type=Path), default=None),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_config(profile: Path | None, **overrides: Any) -> LookupConfig:
    try:
        data = load_profile(profile) if profile is not None else {}
        config = config_from_profile(data, cli_overrides=overrides)
    except (FileNotFoundError, ValueError) as exc:
        raise click.UsageError(str(exc)) from exc
    return config


def _open_walker(config: LookupConfig, build: str) -> HistoryWalker:
    if config.analysis_id and config.kind:
        raise click.UsageError("--id and --kind are mutually exclusive.")
    store = BuildStore(config.builds_dir)
    baseline: StoredBuild | None = store.get(config.job, build)
    if baseline is None:
        raise click.ClickException(
            f"Build {build!r} of job {config.job!r} not found in {config.builds_dir}"
        )
    log.debug("Baseline: %r", baseline)
    return HistoryWalker(baseline, config.selector())


# ---------------------------------------------------------------------------
# refbuild baseline
# ---------------------------------------------------------------------------


@main.command("baseline")
@_lookup_options
def baseline_cmd(
    build: str,
    profile: Path | None,
    builds_dir: Path | None,
    job: str | None,
    analysis_id: str | None,
    kind: str | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Show the analysis result of the baseline build."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    config = _resolve_config(
        profile, builds_dir=builds_dir, job=job, analysis_id=analysis_id, kind=kind
    )
    walker = _open_walker(config, build)
    try:
        result = walker.get_baseline()
    except (HistoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(format_result(result))


# ---------------------------------------------------------------------------
# refbuild previous
# ---------------------------------------------------------------------------


@main.command("previous")
@_lookup_options
@click.option(
    "--require-success",
    "require_overall_success",
    is_flag=True,
    help="Only accept builds whose overall outcome is SUCCESS.",
)
@click.option(
    "--ignore-analysis-outcome",
    is_flag=True,
    help="Accept builds whose analysis step did not succeed.",
)
@click.option("--strict", is_flag=True, help="Exit with an error if no reference exists.")
def previous_cmd(
    build: str,
    profile: Path | None,
    builds_dir: Path | None,
    job: str | None,
    analysis_id: str | None,
    kind: str | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
    require_overall_success: bool,
    ignore_analysis_outcome: bool,
    strict: bool,
) -> None:
    """Show the nearest reference build before BUILD."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    config = _resolve_config(
        profile,
        builds_dir=builds_dir,
        job=job,
        analysis_id=analysis_id,
        kind=kind,
        # Unset flags leave the profile value in place.
        require_overall_success=require_overall_success or None,
        ignore_analysis_outcome=ignore_analysis_outcome or None,
    )
    walker = _open_walker(config, build)
    reference_filter: ReferenceFilter = config.reference_filter
    try:
        result = walker.find_reference(reference_filter)
    except (HistoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    if result is None:
        if strict:
            raise click.ClickException("No reference build found.")
        click.echo("No reference build found.")
        return
    click.echo(format_result(result))


# ---------------------------------------------------------------------------
# refbuild history
# ---------------------------------------------------------------------------


@main.command("history")
@_lookup_options
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N builds.")
def history_cmd(
    build: str,
    profile: Path | None,
    builds_dir: Path | None,
    job: str | None,
    analysis_id: str | None,
    kind: str | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
    limit: int | None,
) -> None:
    """List BUILD followed by every earlier reference build, newest first."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    config = _resolve_config(
        profile, builds_dir=builds_dir, job=job, analysis_id=analysis_id, kind=kind
    )
    walker = _open_walker(config, build)

    rows: list[list[str]] = []
    try:
        for result in itertools.islice(walker.iterate(), limit):
            rows.append(
                [
                    f"#{result.build_number}",
                    format_outcome(result.plugin_outcome),
                    str(result.total_issues),
                    str(result.new_issues),
                    str(result.fixed_issues),
                ]
            )
    except (HistoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        format_table(
            ["Build", "Plugin outcome", "Total", "New", "Fixed"],
            rows,
            alignments=["r", "l", "r", "r", "r"],
        )
    )
    click.echo(f"\n{len(rows)} build(s)")


# ---------------------------------------------------------------------------
# refbuild check-config
# ---------------------------------------------------------------------------


@main.command("check-config")
@click.argument("profile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check_config_cmd(profile: Path) -> None:
    """Validate a YAML lookup profile."""
    config = _resolve_config(profile)
    problems = validate_config(config)
    for problem in problems:
        click.echo(f"{problem.severity.upper()}: {problem.field}: {problem.message}")

    if any(p.severity == "error" for p in problems):
        raise SystemExit(1)
    click.echo("Profile OK.")
