"""Cadence CLI - what to work on next."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from pathlib import Path

import click

from .adapters.json_store import StoreError
from .config import Config, load_config
from .core.allocation import Blocker
from .core.errors import EngineError, NoEligibleWork
from .core.pipeline import ProjectRisk, RecommendResponse
from .workflows import get_status, get_store, run_replan, what_now


def _json_default(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _echo_json(response) -> None:
    click.echo(json.dumps(asdict(response), indent=2, default=_json_default))


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option()
@click.option("--data", "data_file", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Plan file (defaults to DATA_FILE from cadence.conf)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, data_file: Path | None, debug: bool):
    """Cadence - deadline-aware planning."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config()
    if data_file:
        config.data_file = str(data_file)
    ctx.obj = config


def _show_blockers(blockers: list[Blocker]) -> None:
    if not blockers:
        return
    click.echo("\nBlocked:")
    for b in blockers:
        click.echo(f"  [{b.code.value}] {b.message}")


def _show_risks(risks: list[ProjectRisk]) -> None:
    if not risks:
        return
    click.echo("\nProjects:")
    for r in risks:
        target = f" (due {r.target_date})" if r.target_date else ""
        click.echo(
            f"  {r.level.value:9} {r.project_name}{target}: "
            f"{r.remaining_min}m left, needs {r.required_daily_min:.0f}m/day, "
            f"recent {r.recent_daily_min:.0f}m/day"
        )


def _show_recommendation(response: RecommendResponse) -> None:
    click.echo(
        f"Mode: {response.mode.value} "
        f"({response.allocated_min}m of {response.requested_min}m allocated)"
    )
    for s in response.slices:
        click.echo(f"\n  {s.allocated_min:4}m  {s.title or s.work_item_id}  [{s.risk_level.value}]")
        for reason in s.reasons:
            click.echo(f"         - {reason.message} ({reason.contribution:+.2f})")
    _show_blockers(response.blockers)
    _show_risks(response.risks)
    for message in response.policy_messages:
        click.echo(f"\n{message}")


@main.command("what-now")
@click.argument("minutes", type=int)
@click.option("--max-slices", type=int, default=None, help="Most slices to return")
@click.option("--project", "projects", multiple=True, help="Restrict to project ID (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def what_now_cmd(config: Config, minutes: int, max_slices: int | None, projects: tuple[str, ...], as_json: bool):
    """Recommend what to work on for MINUTES minutes."""
    store = get_store(config)
    try:
        response = what_now(store, config, minutes, max_slices=max_slices, project_scope=list(projects))
    except NoEligibleWork as e:
        if as_json:
            _echo_json(e.response)
            return
        click.echo(f"Nothing to schedule: {e.message}")
        if e.response is not None:
            _show_blockers(e.response.blockers)
        return
    except (EngineError, StoreError) as e:
        _fail(str(e))

    if as_json:
        _echo_json(response)
    else:
        _show_recommendation(response)


@main.command()
@click.option("--project", "projects", multiple=True, help="Restrict to project ID (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def status(config: Config, projects: tuple[str, ...], as_json: bool):
    """Show deadline risk for every active project."""
    store = get_store(config)
    try:
        response = get_status(store, config, project_scope=list(projects))
    except (EngineError, StoreError) as e:
        _fail(str(e))

    if as_json:
        _echo_json(response)
        return

    summary = response.summary
    click.echo(
        f"{summary.total} projects: {summary.critical} critical, "
        f"{summary.at_risk} at risk, {summary.on_track} on track"
    )
    click.echo(f"Mode if planned now: {summary.mode_if_now.value}")
    click.echo(summary.policy_message)

    if not response.projects:
        click.echo("\nNo active projects.")
        return

    click.echo()
    for p in response.projects:
        target = f"due {p.target_date}" if p.target_date else "no deadline"
        click.echo(f"{p.level.value:9} {p.project_name} ({target})")
        click.echo(
            f"          progress {p.progress_pct:.0f}% (items {p.structural_pct:.0f}%), "
            f"time elapsed {p.time_elapsed_pct:.0f}%"
        )
        click.echo(
            f"          {p.remaining_min}m left, needs {p.required_daily_min:.0f}m/day, "
            f"recent {p.recent_daily_min:.0f}m/day"
        )


@main.command()
@click.option("--project", "projects", multiple=True, help="Restrict to project ID (repeatable)")
@click.option("--dry-run", is_flag=True, help="Report changes without saving them")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def replan(config: Config, projects: tuple[str, ...], dry_run: bool, as_json: bool):
    """Re-estimate unit-tracked work and recompute risk."""
    store = get_store(config)
    try:
        response = run_replan(store, config, project_scope=list(projects), dry_run=dry_run)
    except (EngineError, StoreError) as e:
        _fail(str(e))

    if as_json:
        _echo_json(response)
        return

    for d in response.deltas:
        click.echo(
            f"{d.project_name}: {d.before.level.value} -> {d.after.level.value}, "
            f"{d.before.remaining_min}m -> {d.after.remaining_min}m left, "
            f"{d.before.required_daily_min:.0f} -> {d.after.required_daily_min:.0f}m/day"
        )
        for item_id, planned in sorted(d.reestimates.items()):
            click.echo(f"  {item_id}: planned {planned}m")

    suffix = " (dry run, nothing saved)" if dry_run else ""
    click.echo(
        f"\nRecomputed {response.recomputed_projects} projects, "
        f"{response.changed_items_count} items re-estimated{suffix}"
    )
    click.echo(f"Mode after: {response.mode_after.value}")
