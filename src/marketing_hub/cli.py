"""Marketing hub CLI."""

import json
import logging
import sys
from datetime import date, datetime, time, timedelta

import click

from .adapters.json_snapshot import SnapshotError
from .config import load_config
from .core.cost import (
    calculate_cost,
    format_duration,
    mix_color,
    parse_duration_to_hours,
    parse_duration_to_minutes,
)
from .core.metrics import Metrics, MonthRange, Totals
from .core.models import Event
from .workflows import (
    apply_patch,
    check_reminders,
    compute_year_metrics,
    expand_window,
    known_labels,
    toggle_item,
)

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"]


def _parse_months(ctx, param, value: str | None) -> MonthRange:
    """Parse "3-6" (0-based, inclusive) or a single month "5"."""
    if not value:
        return MonthRange()
    start, _, end = value.partition("-")
    try:
        return MonthRange(int(start), int(end or start))
    except ValueError:
        raise click.BadParameter(f"expected START-END with 0 <= START <= END <= 11, got {value!r}")


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="marketing-hub")
def main():
    """Marketing hub - calendar, projects and budget metrics."""
    pass


def _show_events(events: list[Event], as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared event display logic."""
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in events], indent=2, ensure_ascii=False))
        return

    if not events:
        click.echo(empty_msg)
        return

    current_date = None
    for event in events:
        event_date = event.date.date()
        if event_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {event_date.strftime('%A, %B %d')}")
            current_date = event_date

        done = "x" if event.completed else " "
        duration = f" ({event.duration})" if event.duration else ""
        tags = f" [{', '.join(event.tags)}]" if event.tags else ""
        click.echo(f"  [{done}] {event.date.strftime('%H:%M')} {event.title}{duration}{tags}")


@main.command()
@click.option("--from", "start", type=click.DateTime(_DATE_FORMATS), default=None,
              help="Window start, defaults to today")
@click.option("--to", "end", type=click.DateTime(_DATE_FORMATS), default=None,
              help="Window end (a bare date covers the whole day), defaults to a week later")
@click.option("--tag", "tags", multiple=True, help="Only events carrying this tag")
@click.option("--assignee", "assignees", multiple=True, help="Only events assigned to this person")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def expand(start, end, tags, assignees, as_json: bool):
    """List concrete event occurrences in a window."""
    start = start or datetime.combine(date.today(), time())
    end = end or start + timedelta(days=7)
    if end.time() == time():
        end = end + timedelta(days=1) - timedelta(microseconds=1)

    config = load_config()
    try:
        events = expand_window(config, start, end, list(tags), list(assignees))
    except SnapshotError as e:
        _fail(e)
    _show_events(events, as_json, "No events in this window.")


def _totals_dict(totals: Totals) -> dict:
    return {
        "estimated_value": totals.estimated_value,
        "estimated_cost": totals.estimated_cost,
        "real_value": totals.real_value,
        "real_cost": totals.real_cost,
        "real_production_cost": totals.real_production_cost,
        "real_time_cost": totals.real_time_cost,
    }


def _show_metrics(metrics: Metrics, as_json: bool) -> None:
    if as_json:
        click.echo(
            json.dumps(
                {
                    **_totals_dict(metrics.totals),
                    "prorated_expenses": metrics.prorated_expenses,
                    "months_selected": metrics.months_selected,
                    "estimated_margin": metrics.estimated_margin,
                    "real_margin": metrics.real_margin,
                    "by_tag": {t: _totals_dict(v) for t, v in metrics.by_tag.items()},
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    t = metrics.totals
    click.echo(f"Months selected:   {metrics.months_selected}")
    click.echo(f"Estimated value:   {t.estimated_value:12.2f}")
    click.echo(f"Estimated cost:    {t.estimated_cost:12.2f}")
    click.echo(f"Real value:        {t.real_value:12.2f}")
    click.echo(f"Real cost:         {t.real_cost:12.2f}")
    click.echo(f"  production:      {t.real_production_cost:12.2f}")
    click.echo(f"  time:            {t.real_time_cost:12.2f}")
    click.echo(f"Fixed expenses:    {metrics.prorated_expenses:12.2f}")
    click.echo(f"Real margin:       {metrics.real_margin:12.2f}")

    if metrics.by_tag:
        click.echo()
        click.echo("### By tag")
        for tag, v in metrics.by_tag.items():
            click.echo(
                f"  {tag:20} est {v.estimated_value:10.2f} / {v.estimated_cost:10.2f}"
                f"  real {v.real_value:10.2f} / {v.real_cost:10.2f}"
            )


@main.command()
@click.option("--year", "-y", type=int, default=None, help="Calendar year, defaults to this year")
@click.option("--months", "-m", callback=_parse_months, default=None,
              help="0-based month range, e.g. 0-2 for January to March")
@click.option("--tag", "tags", multiple=True, help="Restrict to this tag")
@click.option("--assignee", "assignees", multiple=True, help="Restrict to this person")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def metrics(year: int | None, months: MonthRange, tags, assignees, as_json: bool):
    """Estimated vs real cost and value for a period."""
    config = load_config()
    try:
        result = compute_year_metrics(
            config, year or date.today().year, months, list(tags), list(assignees)
        )
    except SnapshotError as e:
        _fail(e)
    _show_metrics(result, as_json)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tags(as_json: bool):
    """List known tags and assignees."""
    config = load_config()
    try:
        tag_names, people = known_labels(config)
    except SnapshotError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps({"tags": tag_names, "assignees": people}, indent=2, ensure_ascii=False))
        return
    click.echo(f"Tags: {', '.join(tag_names) or '-'}")
    click.echo(f"Assignees: {', '.join(people) or '-'}")


@main.command()
@click.argument("text")
def duration(text: str):
    """Normalize a free-text duration."""
    hours = parse_duration_to_hours(text)
    minutes = parse_duration_to_minutes(text)
    click.echo(f"{format_duration(minutes)} ({hours:g}h, {minutes} min)")


@main.command()
@click.argument("duration_text")
@click.option("--rate", "-r", type=float, default=None, help="Hourly rate, defaults to the market rate")
@click.option("--manual", type=float, default=None, help="Manually fixed cost")
@click.option("--people", "-p", type=int, default=1, help="Head count multiplier")
@click.option("--force", is_flag=True, help="Recompute even if a manual cost is set")
def cost(duration_text: str, rate: float | None, manual: float | None, people: int, force: bool):
    """Cost of a duration at an hourly rate."""
    config = load_config()
    rate = rate if rate is not None else config.market_rate
    click.echo(f"{calculate_cost(duration_text, rate, manual, max(1, people), force):g}")


@main.command()
@click.argument("colors", nargs=-1)
def mix(colors):
    """Average hex colors."""
    config = load_config()
    click.echo(mix_color(list(colors), fallback=config.fallback_color))


@main.command("apply")
@click.argument("patch_file", type=click.File("r"))
def apply_cmd(patch_file):
    """Apply a JSON patch (newEvents, updatedProjects, budgetUpdate, ...)."""
    try:
        patch = json.load(patch_file)
    except json.JSONDecodeError as e:
        _fail(e)
    if not isinstance(patch, dict):
        _fail(ValueError("patch must be a JSON object"))

    config = load_config()
    try:
        state = apply_patch(config, patch)
    except SnapshotError as e:
        _fail(e)
    except (TypeError, ValueError) as e:
        _fail(ValueError(f"malformed patch: {e}"))
    click.echo(f"{len(state.events)} events, {len(state.projects)} projects.")


@main.command()
@click.argument("project_id")
@click.argument("item_id")
def check(project_id: str, item_id: str):
    """Toggle a project checklist item."""
    config = load_config()
    try:
        project = toggle_item(config, project_id, item_id)
    except SnapshotError as e:
        _fail(e)
    if project is None:
        _fail(KeyError(f"no project {project_id}"))

    done = sum(1 for i in project.checklist if i.done)
    click.echo(f"{project.title}: {done}/{len(project.checklist)} done ({project.status.value})")


@main.command()
@click.option("--dry-run", is_flag=True, help="Do not record reminders as sent")
def remind(dry_run: bool):
    """Show reminders due now."""
    config = load_config()
    try:
        due = check_reminders(config, mark_sent=not dry_run)
    except SnapshotError as e:
        _fail(e)

    if not due:
        click.echo("No reminders due.")
        return
    for reminder in due:
        click.echo(f"[{reminder.notify_at.strftime('%H:%M')}] {reminder.message()}")


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def watch(debug: bool):
    """Check reminders every minute."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    from .scheduler import setup_scheduler

    scheduler = setup_scheduler(load_config())
    click.echo("Watching for reminders...")
    click.echo("Press Ctrl+C to stop")
    try:
        scheduler.start()
    except KeyboardInterrupt:
        click.echo("\nStopped.")
