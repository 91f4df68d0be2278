"""execbeat CLI interface."""

import typer
from rich.console import Console

# CLI App
app = typer.Typer(
    name="execbeat",
    help="Run a command on a schedule and ship its output as structured events.",
    no_args_is_help=True,
)

# Console for rich output (stderr keeps stdout free for console-sink events)
console = Console(stderr=True)


# Import commands to register them
from execbeat.cli.commands import once, run, validate  # noqa: E402, F401


@app.command()
def version() -> None:
    """Show execbeat version."""
    from execbeat import __version__

    console.print(f"execbeat v{__version__}")


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
