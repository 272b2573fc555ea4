import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich import print
from rich.panel import Panel
from rich.table import Table

from docpack.config import configure_logging, get_settings
from docpack.core.archive import Archive, CurrentArchive, DecodeError, MalformedArchive
from docpack.core.models import check_connectivity
from docpack.core.schemas import SymbolEdit
from docpack.core.service import DocpackService

logger = logging.getLogger(__name__)

APP_HELP = """
docpack: inspect and visualize documentation packages.

A docpack is the archive produced by the builder for one repository snapshot:
a code graph, generated documentation and package metadata (or, for older
builds, a manifest, a symbol list and per-symbol docs).
"""

app = typer.Typer(name="docpack", help=APP_HELP, no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    settings = get_settings()
    configure_logging(settings)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load(path: Path, tracked_branch: Optional[str] = None) -> Archive:
    service = DocpackService()
    try:
        return service.load(path.read_bytes(), tracked_branch=tracked_branch)
    except FileNotFoundError:
        print(f"[red]Error:[/red] {path} does not exist")
        raise typer.Exit(code=1)
    except DecodeError as e:
        kind = "Malformed archive" if isinstance(e, MalformedArchive) else "Unknown archive shape"
        print(f"[red]{kind}:[/red] {e}")
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect(
    path: Path = typer.Argument(..., help="Path to a .docpack file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the archive shape and what it contains."""
    archive = _load(path)

    if isinstance(archive, CurrentArchive):
        summary = {
            "shape": archive.shape.value,
            "repository": archive.graph.metadata.repository_name,
            "nodes": len(archive.graph.nodes),
            "edges": len(archive.graph.edges),
            "languages": archive.graph.metadata.languages,
            "documented_symbols": len(archive.documentation.symbol_summaries),
            "modules": len(archive.documentation.module_overviews),
            "generator": archive.metadata.generator,
            "format_version": archive.metadata.version,
        }
    else:
        summary = {
            "shape": archive.shape.value,
            "repository": archive.manifest.project.name,
            "symbols": len(archive.symbols),
            "docs": len(archive.docs),
            "docs_layout": archive.docs_layout.value,
            "public": archive.manifest.public,
            "format_version": archive.manifest.docpack_format,
        }
    summary["extra_members"] = sorted(archive.extra_members)

    if json_output:
        typer.echo(json.dumps(summary, indent=2))
        return

    table = Table(title=f"{path.name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in summary.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) or "-"
        table.add_row(key, str(value))
    print(table)


@app.command("visualize")
def visualize(
    path: Path = typer.Argument(..., help="Path to a .docpack file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the visualization graph JSON here"),
    top: int = typer.Option(10, "--top", "-n", min=1, max=10, help="Number of top symbols to show"),
):
    """Build the role-annotated visualization graph."""
    archive = _load(path)
    graph = DocpackService().visualize(archive)

    if output:
        output.write_text(graph.model_dump_json(indent=2))
        print(f"[green]Wrote[/green] {output}")

    stats = graph.stats
    print(Panel(
        f"Nodes: {stats.node_count}  Edges: {stats.edge_count}\n"
        f"Functions: {stats.function_count}  Types: {stats.type_count}  "
        f"Modules: {stats.module_count}  Clusters: {stats.cluster_count}\n"
        f"Languages: {', '.join(stats.languages) or '-'}",
        title="Visualization",
    ))

    table = Table(title="Top Symbols")
    table.add_column("Name", style="cyan")
    table.add_column("Role")
    table.add_column("Importance", justify="right")
    for symbol in stats.top_symbols[:top]:
        table.add_row(symbol.name, symbol.role.value, f"{symbol.importance:g}")
    print(table)


@app.command("check")
def check(
    path: Path = typer.Argument(..., help="Path to a .docpack file"),
):
    """Compare stored fan-in/fan-out with counts from the edge list."""
    archive = _load(path)
    mismatches = check_connectivity(DocpackService().graph(archive))

    if not mismatches:
        print("[green]Connectivity metadata matches the edge list.[/green]")
        return

    table = Table(title=f"{len(mismatches)} connectivity mismatches")
    table.add_column("Node", style="cyan")
    table.add_column("fan_in (stored/edges)", justify="right")
    table.add_column("fan_out (stored/edges)", justify="right")
    for m in mismatches:
        table.add_row(
            m.node_id,
            f"{m.stored_fan_in}/{m.edge_fan_in}",
            f"{m.stored_fan_out}/{m.edge_fan_out}",
        )
    print(table)


@app.command("apply-edits")
def apply_edits(
    path: Path = typer.Argument(..., help="Path to a .docpack file"),
    edits_path: Path = typer.Argument(..., help="JSON file with a list of symbol edits"),
    output: Path = typer.Option(..., "--output", "-o", help="Where to write the edited docpack"),
):
    """Merge symbol edits into a docpack and write a new archive."""
    archive = _load(path)

    try:
        edits: List[SymbolEdit] = TypeAdapter(List[SymbolEdit]).validate_json(edits_path.read_text())
    except FileNotFoundError:
        print(f"[red]Error:[/red] {edits_path} does not exist")
        raise typer.Exit(code=1)
    except ValidationError as e:
        print(f"[red]Invalid edits file:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        data, applied = DocpackService().export_with_edits(archive, edits)
    except ValueError as e:
        print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    output.write_bytes(data)
    print(f"[green]Applied {applied} of {len(edits)} edits[/green] -> {output}")


if __name__ == "__main__":
    app()
