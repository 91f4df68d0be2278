"""Once command for execbeat CLI."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from execbeat.cli import app, console
from execbeat.cli.utils import load_config_or_exit
from execbeat.engine import CommandRunner, RunResult, build_events, classify_exit
from execbeat.models import CombinedOutput, EventRecord, StderrOutput
from execbeat.output import create_sink


@app.command()
def once(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: $EXECBEAT_CONFIG or ~/.execbeat/execbeat.yaml)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the events as JSON",
    ),
    publish: bool = typer.Option(
        False,
        "--publish",
        help="Also deliver the events to the configured output",
    ),
) -> None:
    """Run the command once, right now, and show its events.

    Useful to check the command and the segmentation settings before
    putting them on a schedule.

    Examples:
        execbeat once
        execbeat once --json
        execbeat once --publish
    """
    config = load_config_or_exit(config_path)
    exec_config = config.exec

    runner = CommandRunner(timeout=exec_config.timeout)
    result = runner.run(exec_config.command, exec_config.args)
    events = build_events(
        result,
        split_lines=exec_config.split_lines,
        document_type=exec_config.document_type,
        fields=exec_config.fields,
    )

    if publish:
        sink = create_sink(config.output)
        try:
            for event in events:
                sink.publish(event)
        finally:
            sink.close()

    if json_output:
        console.print_json(data=[event.to_event() for event in events])
    else:
        _display_events(result, events)


def _display_events(result: RunResult, events: list[EventRecord]) -> None:
    """Display a run and its events in a formatted table."""
    if result.succeeded:
        status = "[green]✓ success[/]"
    elif result.spawn_failed:
        status = "[red]✗ could not start[/]"
    else:
        category = classify_exit(result.exit_code)
        status = f"[red]✗ {category.value if category else 'failed'}[/]"
    if result.timed_out:
        status += " [yellow](timed out)[/]"

    console.print(
        f"[bold]{result.command}[/] exited with {result.exit_code} {status} "
        f"[dim]in {result.duration_ms}ms[/]"
    )
    console.print()

    table = Table(title=f"{len(events)} event(s)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Offset", justify="right")
    table.add_column("Output")

    for index, event in enumerate(events):
        output = event.exec
        offset = "-"
        if isinstance(output, CombinedOutput):
            text = output.stdout or output.stderr
        elif isinstance(output, StderrOutput):
            text = output.stderr
        else:
            text = output.stdout_line
            offset = str(output.line_offset)

        text = text.strip()
        if len(text) > 60:
            text = text[:60] + "..."
        table.add_row(str(index), output.kind, offset, escape(text))

    console.print(table)
