"""
ClusterServiceVersion commands: kinds
"""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from binding_engine.core import BindingError
from binding_engine.watch import kinds_from_csv
from ._kube import connect

app = typer.Typer()
console = Console()


@app.command()
def kinds(
    name: str = typer.Option(..., "--name", "-n", help="ClusterServiceVersion name"),
    namespace: str = typer.Option("default", "--namespace", help="Namespace of the CSV"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    context: Optional[str] = typer.Option(None, "--context", help="kubeconfig context"),
):
    """
    List the kinds a ClusterServiceVersion adds to the operator's watch set.

    Examples:
        bindctl csv kinds --namespace operators --name postgresql-operator.v0.1.0
    """
    try:
        cluster, _ = connect(context)
        gvks = kinds_from_csv(cluster.fetch_csv(namespace, name))
    except BindingError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        print(json.dumps({
            "kinds": [{"group": g.group, "version": g.version, "kind": g.kind} for g in gvks],
            "count": len(gvks),
        }, indent=2))
        raise typer.Exit(0)

    table = Table(title=f"Owned kinds: {namespace}/{name}")
    table.add_column("Group", style="cyan")
    table.add_column("Version", style="yellow")
    table.add_column("Kind", style="green")
    for gvk in gvks:
        table.add_row(gvk.group, gvk.version, gvk.kind)
    console.print(table)
