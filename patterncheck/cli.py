"""Command line harness for the pattern check plugin."""

from __future__ import annotations

import asyncio
import json
import uuid
from pathlib import Path
from typing import Any, List, Optional, Tuple

import typer
import yaml

from patterncheck import (
    ExecuteTaskRequest,
    FlowDefinition,
    PatternCheckError,
    PatternCheckPlugin,
    Result,
    get_reporter,
    load_config,
)
from patterncheck.reporting import BaseStepReporter, InMemoryStepReporter, StepRecord

app = typer.Typer(help="CLI for the flow pattern check")

steps_app = typer.Typer(help="Commands for inspecting reported steps")
app.add_typer(steps_app, name="steps")


@app.callback()
def main() -> None:
    """patterncheck CLI entry point."""
    pass


def _load_flow(path: Path) -> FlowDefinition:
    data = yaml.safe_load(path.read_text()) or {}
    if isinstance(data, list):
        data = {"patterns": data}
    return FlowDefinition.model_validate(data)


def _format_record(record: StepRecord) -> str:
    status = record.status.value if record.status else "-"
    return f"[{status}] {record.step_id}: " + " | ".join(record.lines)


async def _run(
    reporter: BaseStepReporter, request: ExecuteTaskRequest
) -> Tuple[Result, List[StepRecord]]:
    async with reporter:
        plugin = PatternCheckPlugin(reporter=reporter)
        result = await plugin.evaluate(request)
        try:
            history = await reporter.history(request.execution_id)
        except NotImplementedError:
            history = []
    return result, history


async def _history(reporter: BaseStepReporter, execution_id: str) -> List[StepRecord]:
    async with reporter:
        return await reporter.history(execution_id)


@app.command("run")
def run(
    flow_path: Path,
    payload_path: Path,
    execution_id: Optional[str] = typer.Option(None, help="Execution ID (default: random)"),
    step_id: str = typer.Option("pattern_check", help="Step ID to report under"),
    platform: Optional[str] = typer.Option(None, help="Platform the request targets"),
    reporter: Optional[str] = typer.Option(
        None, help="Reporter backend: inmemory, sqlite, postgres or http"
    ),
) -> None:
    """
    Check the patterns of a flow definition against a payload.

    FLOW_PATH is a YAML or JSON file holding a ``patterns`` list (or the list
    itself). PAYLOAD_PATH is a JSON document. Every reported step update is
    printed followed by the result.

    Exit codes: 0 when all patterns matched, 1 when some did not, 2 on error.

    Example:
        patterncheck run flow.yaml alert.json --platform alertflow
        # Output: [running] pattern_check: Checking for patterns
        #         [-] pattern_check: Pattern: severity == critical matched. Continue to next step
        #         [success] pattern_check: All patterns matched. Continue to next step
        #         {"success": true}
    """
    try:
        flow = _load_flow(flow_path)
        payload: Any = json.loads(payload_path.read_text())
    except PatternCheckError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        typer.secho(f"Cannot read input: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    request = ExecuteTaskRequest(
        platform=platform,
        execution_id=execution_id or str(uuid.uuid4()),
        step_id=step_id,
        flow=flow,
        payload=payload,
    )

    try:
        step_reporter = get_reporter(reporter, config=load_config())
        result, history = asyncio.run(_run(step_reporter, request))
    except (PatternCheckError, ValueError, RuntimeError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    for record in history:
        typer.echo(_format_record(record))
    typer.echo(result.model_dump_json(exclude_none=True))
    if not result.success:
        raise typer.Exit(code=1)


@app.command("describe")
def describe() -> None:
    """Print the plugin descriptor as JSON."""
    typer.echo(PatternCheckPlugin(reporter=get_reporter("inmemory")).describe().model_dump_json(indent=2))


@steps_app.command("show")
def steps_show(execution_id: str) -> None:
    """
    Show the step updates recorded for an execution.

    Reads from the configured SQLite or PostgreSQL reporter.

    Example:
        PATTERNCHECK_DATABASE_URL=sqlite:///tmp/steps.db patterncheck steps show abc123
        # Output: [running] pattern_check: Checking for patterns
        #         [noPatternMatch] pattern_check: Some patterns did not match. Cancel execution
    """
    try:
        step_reporter = get_reporter(config=load_config())
    except (ValueError, RuntimeError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    if isinstance(step_reporter, InMemoryStepReporter):
        typer.secho(
            "Configured reporter keeps no persistent step history; "
            "set reporter.database_url to a SQLite or PostgreSQL database",
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=2)

    try:
        records = asyncio.run(_history(step_reporter, execution_id))
    except NotImplementedError:
        typer.secho("Configured reporter does not keep step history", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    if not records:
        typer.echo("No steps recorded")
        raise typer.Exit(code=1)
    for record in records:
        when = record.finished_at or record.started_at
        typer.echo(_format_record(record) + (f" ({when})" if when else ""))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
