"""
Service context commands: build
"""

import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from binding_engine.context import build_service_contexts
from binding_engine.core import BindingError, ServiceSelector
from binding_engine.core.canonical import canonical_json_str, contexts_to_canonical
from binding_operator.settings import DEFAULT_NAMING_TEMPLATE, OperatorConfig
from ._kube import connect

app = typer.Typer()
console = Console()


def _display(value) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


@app.command()
def build(
    name: str = typer.Option(..., "--name", "-n", help="Backing service name"),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Backing service kind"),
    resource: Optional[str] = typer.Option(None, "--resource", "-r", help="Backing service resource (plural)"),
    group: str = typer.Option("", "--group", "-g", help="API group (empty for core)"),
    version: str = typer.Option("v1", "--version", "-v", help="API version"),
    namespace: str = typer.Option("default", "--namespace", help="Namespace of the service"),
    service_id: Optional[str] = typer.Option(None, "--id", help="Id the service is referred to by"),
    owned: bool = typer.Option(False, "--owned", help="Include resources owned by the service"),
    as_files: bool = typer.Option(False, "--as-files", help="Mark contexts as bound as files"),
    naming_template: str = typer.Option(DEFAULT_NAMING_TEMPLATE, "--naming-template", help="Variable naming template"),
    show_values: bool = typer.Option(False, "--values", help="Show variable values"),
    json_output: bool = typer.Option(False, "--json", help="Output as canonical JSON"),
    context: Optional[str] = typer.Option(None, "--context", help="kubeconfig context"),
    verbose: bool = typer.Option(False, "--verbose", help="Log annotation processing"),
):
    """
    Build the service contexts a ServiceBinding would produce for one service.

    Examples:
        bindctl contexts build --group postgresql.example.com --kind Database --name db1
        bindctl contexts build --kind Secret --name db-creds --values
        bindctl contexts build -g postgresql.example.com -k Database -n db1 --owned --json
    """
    if not kind and not resource:
        console.print("[red]Error:[/red] one of --kind or --resource is required")
        raise typer.Exit(2)

    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    logger = logging.getLogger("bindctl")
    selector = ServiceSelector(
        name=name, kind=kind, group=group, version=version,
        resource=resource, namespace=namespace, id=service_id,
    )

    try:
        cluster, type_lookup = connect(context)
        contexts = build_service_contexts(
            cluster,
            type_lookup,
            namespace,
            [selector],
            include_owned_resources=owned,
            bind_as_files=as_files,
            naming_template=naming_template,
            logger=logger,
            owned_resource_types=OperatorConfig.from_env().owned_resource_types,
        )
    except BindingError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        out = contexts_to_canonical(contexts)
        if not show_values:
            for ctx in out:
                ctx["envVars"] = sorted(ctx["envVars"].keys())
        console.print(Syntax(canonical_json_str(out), "json", theme="monokai", word_wrap=True))
        raise typer.Exit(0)

    for skipped in contexts.skipped:
        console.print(f"[yellow]Skipped selector {skipped.selector.name}:[/yellow] {skipped.reason}")

    table = Table(title=f"Service contexts: {namespace}/{name}")
    table.add_column("Service", style="cyan")
    table.add_column("Owned by", style="dim")
    table.add_column("Variable", style="green")
    table.add_column("Value", style="yellow")

    for ctx in contexts:
        service = f"{ctx.kind}/{ctx.name}"
        if not ctx.env_vars:
            table.add_row(service, ctx.owned_by or "", "-", "-")
        for var, value in sorted(ctx.qualified_env_vars().items()):
            table.add_row(service, ctx.owned_by or "", var, _display(value) if show_values else "<hidden>")

    console.print(table)
    console.print(f"\n[bold]Total contexts:[/bold] {len(contexts)}")
