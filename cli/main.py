#!/usr/bin/env python3
"""
bindctl - service binding inspection CLI

Main entrypoint for the bindctl command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import contexts, csv

app = typer.Typer(
    name="bindctl",
    help="Inspect service binding contexts against a live cluster",
    add_completion=False,
)

console = Console()

app.add_typer(contexts.app, name="contexts", help="Service context operations")
app.add_typer(csv.app, name="csv", help="ClusterServiceVersion operations")


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from binding_engine import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]bindctl[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
