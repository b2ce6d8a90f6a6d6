"""
Command-line interface for the compliance cycle engine.

Lets support staff inspect the cycles, due dates and statuses the engine
computes for an internship without going through the portal.
"""

import json as jsonlib
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table
from typer import Argument, Option
from typing_extensions import Annotated

from compliance_cycles.config import settings
from compliance_cycles.domain.cycle_service import CycleModel, CycleModelKind, build_cycle_model, resolve_now
from compliance_cycles.domain import dates
from compliance_cycles.domain.entities import MonthlyCycle
from compliance_cycles.domain.exceptions import InvalidArgument
from compliance_cycles.domain.monthly_cycle import MonthlyCycleModel
from compliance_cycles.domain.status import classify_report, classify_visit
from compliance_cycles.logging_setup import get_logger

console = Console()

app = typer.Typer(
    name="compliance-cycles",
    help="Inspect internship reporting and visit cycles, due dates and statuses.",
    add_completion=False,
)

ModelOption = Annotated[
    Optional[CycleModelKind],
    Option("--model", "-m", help="Cycle model to use. Defaults to DEFAULT_CYCLE_MODEL."),
]
NowOption = Annotated[
    Optional[str],
    Option("--now", help="Evaluate as of this instant (ISO date or datetime). Defaults to the clock."),
]
JsonOption = Annotated[bool, Option("--json", "-j", help="Output JSON to stdout.")]

_RICH_COLOURS = {"gray": "grey50", "orange": "dark_orange"}


def _build_model(kind: Optional[CycleModelKind]) -> CycleModel:
    return build_cycle_model(kind or settings.DEFAULT_CYCLE_MODEL, settings.to_domain_config())


def _fail(exc: InvalidArgument) -> NoReturn:
    get_logger("CLI").warning(f"Rejected input: {exc}")
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=2)


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _echo_json(payload: Any) -> None:
    typer.echo(jsonlib.dumps(payload, indent=2, default=_json_default))


def _cycle_row(cycle: Any) -> list[str]:
    if isinstance(cycle, MonthlyCycle):
        label = f"{cycle.month_name} {cycle.year}"
    else:
        label = f"Cycle {cycle.index}"
    row = [
        str(cycle.index),
        label,
        cycle.period_start.strftime("%Y-%m-%d"),
        cycle.period_end.strftime("%Y-%m-%d"),
        str(cycle.days_in_period),
        _fmt(cycle.report_due_at),
        _fmt(cycle.visit_due_at),
    ]
    if isinstance(cycle, MonthlyCycle):
        row.append(_fmt(cycle.is_included))
    return row


@app.command()
def cycles(
    start_date: Annotated[str, Argument(help="Internship start date (YYYY-MM-DD).")],
    end_date: Annotated[str, Argument(help="Internship end date (YYYY-MM-DD).")],
    model: ModelOption = None,
    show_all: Annotated[bool, Option("--all", "-a", help="Monthly model: include excluded months.")] = False,
    json_out: JsonOption = False,
) -> None:
    """List the cycles of an internship with their due dates."""
    engine = _build_model(model)
    try:
        if show_all and isinstance(engine, MonthlyCycleModel):
            rows = list(engine.all_months(start_date, end_date).months)
        else:
            rows = engine.cycles(start_date, end_date)
    except InvalidArgument as exc:
        _fail(exc)

    if json_out:
        _echo_json([asdict(cycle) for cycle in rows])
        return

    if not rows:
        console.print("[yellow]No cycles for this date range.[/yellow]")
        return

    table = Table(header_style="bold cyan", title=f"{engine.kind.value} cycles")
    headers = ["#", "Period", "From", "To", "Days", "Report due", "Visit due"]
    if isinstance(rows[0], MonthlyCycle):
        headers.append("Included")
    for header in headers:
        table.add_column(header)
    for cycle in rows:
        table.add_row(*_cycle_row(cycle))
    console.print(table)


@app.command()
def expected(
    start_date: Annotated[str, Argument(help="Internship start date (YYYY-MM-DD).")],
    end_date: Annotated[str, Argument(help="Internship end date (YYYY-MM-DD).")],
    model: ModelOption = None,
    now: NowOption = None,
    json_out: JsonOption = False,
) -> None:
    """Expected totals, counts due so far and the current cycle."""
    engine = _build_model(model)
    try:
        current = resolve_now(now)
        info = engine.current_cycle_info(start_date, end_date, current)
        summary = {
            "model": engine.kind.value,
            "as_of": current,
            "total_expected": engine.total_expected_count(start_date, end_date),
            "expected_reports": engine.expected_reports_as_of(start_date, end_date, current),
            "expected_visits": engine.expected_visits_as_of(start_date, end_date, current),
            "current_cycle": info.cycle.index if info.cycle else None,
            "next_report_due": engine.next_report_due_date(start_date, end_date, current),
            "next_visit_due": engine.next_visit_due_date(start_date, end_date, current),
        }
    except InvalidArgument as exc:
        _fail(exc)

    if json_out:
        _echo_json(summary)
        return

    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in summary.items():
        table.add_row(key.replace("_", " "), _fmt(value))
    console.print(table)


def _print_status(result: Any, json_out: bool) -> None:
    if json_out:
        _echo_json(asdict(result))
        return
    colour = _RICH_COLOURS.get(result.color, result.color)
    line = f"[{colour}]{result.status.value}[/{colour}] {result.label}"
    if result.is_overdue:
        line += f" ({result.days_overdue} day(s) overdue)"
    console.print(line)


@app.command(name="report-status")
def report_status(
    due_date: Annotated[str, Argument(help="Report due date/time (ISO format).")],
    status: Annotated[Optional[str], Option("--status", help="Recorded report status, if a report exists.")] = None,
    submitted_at: Annotated[Optional[str], Option("--submitted-at", help="Submission timestamp.")] = None,
    now: NowOption = None,
    json_out: JsonOption = False,
) -> None:
    """Classify a report against its due date."""
    try:
        current = resolve_now(now)
        due = _parse_due(due_date)
    except InvalidArgument as exc:
        _fail(exc)
    record = {"status": status, "submitted_at": submitted_at} if status or submitted_at else None
    _print_status(classify_report(due, record, current), json_out)


@app.command(name="visit-status")
def visit_status(
    due_date: Annotated[str, Argument(help="Visit due date/time (ISO format).")],
    status: Annotated[Optional[str], Option("--status", help="Recorded visit status, if a visit exists.")] = None,
    completed_at: Annotated[Optional[str], Option("--completed-at", help="Completion timestamp.")] = None,
    now: NowOption = None,
    json_out: JsonOption = False,
) -> None:
    """Classify a faculty visit against its due date."""
    try:
        current = resolve_now(now)
        due = _parse_due(due_date)
    except InvalidArgument as exc:
        _fail(exc)
    record = {"status": status, "completed_at": completed_at} if status or completed_at else None
    result = classify_visit(due, record, current, due_soon_days=settings.DUE_SOON_DAYS)
    _print_status(result, json_out)


def _parse_due(raw: str) -> datetime:
    """A bare date means the end of that day."""
    parsed = dates.coerce_datetime(raw, "due_date")
    if len(raw.strip()) == 10:
        return dates.end_of_day(parsed)
    return parsed


@app.command(name="config")
def show_config() -> None:
    """Print the active cycle rules."""
    table = Table(header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for name in (
        "DEFAULT_CYCLE_MODEL",
        "CYCLE_DURATION_DAYS",
        "SUBMISSION_GRACE_DAYS",
        "VISIT_GRACE_DAYS",
        "MAX_CYCLES",
        "MIN_DAYS_FOR_INCLUSION",
        "REPORT_DUE_DAY",
        "MAX_MONTHS",
        "DUE_SOON_DAYS",
    ):
        table.add_row(name, str(getattr(settings, name)))
    console.print(table)


if __name__ == "__main__":
    app()
