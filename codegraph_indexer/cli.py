"""Typer-based CLI for the code graph indexer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__, config, config_manager
from .exporter import EXPORT_FORMATS, GraphExportError, load_graph_from_json
from .extractors import detect_language, get_extractor
from .graph import CodeGraph
from .models import Node
from .pipeline import analyze_codebase
from .processor import resolve_thread_count

app = typer.Typer(
    help="Index a multi-language source tree into a graph of code entities and relationships.",
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

USAGE = "Usage: codegraph-indexer index <root_path> [output_path] [thread_count] [format]"


def setup_logging(verbose: bool = False) -> None:
    """Route log records through a single rich handler on the root logger."""
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.INFO)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"codegraph-indexer v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Code graph indexer: entities, calls, imports and containment."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()
    setup_logging()


# ------------------------------------------------------------------
# Indexing
# ------------------------------------------------------------------

@app.command("index")
def index_codebase(
    root_path: Optional[Path] = typer.Argument(None, help="Root directory of the code base."),
    output_path: Optional[Path] = typer.Argument(None, help="Where to write the graph."),
    thread_count: Optional[str] = typer.Argument(
        None, help="Worker threads; 0 or omitted means one per CPU.",
    ),
    fmt: Optional[str] = typer.Argument(None, metavar="[FORMAT]", help="json or dot."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """Extract entities, infer relationships and export the graph."""
    if root_path is None:
        typer.echo(USAGE)
        raise typer.Exit()

    if verbose:
        setup_logging(verbose=True)

    settings = config_manager.load_config()
    output = output_path or Path(settings["output"])
    threads = resolve_thread_count(thread_count if thread_count is not None else settings["threads"])
    chosen_format = (fmt or settings["format"] or config.DEFAULT_FORMAT).lower()
    if chosen_format not in EXPORT_FORMATS:
        logger.warning("Unsupported output format '%s', using json", chosen_format)
        chosen_format = "json"
    skip_dirs = set(config.SKIP_DIRS) | set(settings.get("skip_dirs") or [])

    console.print(
        f"Indexing [cyan]{escape(str(root_path))}[/cyan] with {threads} threads "
        f"-> [cyan]{escape(str(output))}[/cyan] ({chosen_format})"
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TextColumn("{task.completed} files"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Extracting entities...", total=None)

            def _advance(path: Path) -> None:
                progress.update(task, advance=1, description=f"Extracted {path.name}")

            graph = analyze_codebase(
                root_path,
                output,
                threads,
                fmt=chosen_format,
                progress=_advance,
                skip_dirs=skip_dirs,
            )
    except (FileNotFoundError, NotADirectoryError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    except GraphExportError as exc:
        logger.error("Export failed: %s", exc)
        console.print(f"[red]Export failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    except Exception as exc:
        logger.error("Indexing failed: %s", exc, exc_info=verbose)
        console.print(f"[red]Indexing failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(
        f"[green]Done.[/green] Nodes: {graph.node_count()} | "
        f"Relationships: {graph.relationship_count()}"
    )


# ------------------------------------------------------------------
# Queries over an exported graph
# ------------------------------------------------------------------

def _load(graph_file: Path) -> CodeGraph:
    try:
        return load_graph_from_json(graph_file)
    except GraphExportError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


def _lookup(graph: CodeGraph, name: str) -> List[Node]:
    """Nodes named *name*, or qualified methods whose bare name is *name*."""
    nodes = graph.find_by_name(name)
    if nodes:
        return nodes
    suffix = f"::{name}"
    return sorted(
        (n for n in graph.all_nodes() if n.name.endswith(suffix)),
        key=lambda n: n.node_id,
    )


def _describe(node: Node) -> str:
    return (
        f"{escape(node.name)} [dim]({node.node_type.value})[/dim] "
        f"{escape(node.file_path)}:{node.start_line}-{node.end_line}"
    )


def _require(graph: CodeGraph, name: str) -> List[Node]:
    nodes = _lookup(graph, name)
    if not nodes:
        console.print(f"[yellow]No node named '{escape(name)}'.[/yellow]")
        raise typer.Exit(code=1)
    return nodes


@app.command("stats")
def stats(graph_file: Path = typer.Argument(..., help="Graph JSON written by 'index'.")):
    """Show node and relationship counts."""
    graph = _load(graph_file)
    summary = graph.stats()

    table = Table(title="Nodes", show_lines=False)
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for kind, count in sorted(summary["node_counts"].items()):
        table.add_row(kind, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{summary['total_nodes']}[/bold]")
    console.print(table)

    table = Table(title="Relationships", show_lines=False)
    table.add_column("Type", style="magenta")
    table.add_column("Count", justify="right", style="green")
    for kind, count in sorted(summary["relationship_counts"].items()):
        table.add_row(kind, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{summary['total_relationships']}[/bold]")
    console.print(table)


@app.command("callers")
def callers(
    graph_file: Path = typer.Argument(..., help="Graph JSON written by 'index'."),
    name: str = typer.Argument(..., help="Function or method name."),
):
    """List everything that calls NAME."""
    graph = _load(graph_file)
    for node in _require(graph, name):
        found = graph.find_callers(node.node_id)
        console.print(f"[bold]{escape(node.name)}[/bold] has {len(found)} caller(s)")
        for caller in found:
            console.print(f"  {_describe(caller)}")


@app.command("callees")
def callees(
    graph_file: Path = typer.Argument(..., help="Graph JSON written by 'index'."),
    name: str = typer.Argument(..., help="Function or method name."),
):
    """List everything NAME calls."""
    graph = _load(graph_file)
    for node in _require(graph, name):
        found = graph.find_called(node.node_id)
        console.print(f"[bold]{escape(node.name)}[/bold] calls {len(found)} unit(s)")
        for callee in found:
            console.print(f"  {_describe(callee)}")


@app.command("related")
def related(
    graph_file: Path = typer.Argument(..., help="Graph JSON written by 'index'."),
    name: str = typer.Argument(..., help="Entity name."),
    depth: int = typer.Option(1, "--depth", "-d", min=0, help="Maximum hops in either direction."),
):
    """List entities within DEPTH hops of NAME."""
    graph = _load(graph_file)
    for node in _require(graph, name):
        ids = graph.find_related(node.node_id, depth) - {node.node_id}
        console.print(
            f"[bold]{escape(node.name)}[/bold]: {len(ids)} related unit(s) within depth {depth}"
        )
        for related_id in sorted(ids):
            console.print(f"  {_describe(graph.nodes[related_id])}")


@app.command("references")
def references(
    graph_file: Path = typer.Argument(..., help="Graph JSON written by 'index'."),
    name: str = typer.Argument(..., help="Entity whose body is searched."),
    identifier: str = typer.Argument(..., help="Identifier to look for."),
):
    """Show where IDENTIFIER occurs inside NAME."""
    graph = _load(graph_file)
    for node in _require(graph, name):
        extractor = get_extractor(detect_language(node.file_path))
        if extractor is None:
            console.print(f"[yellow]Unsupported language: {escape(node.file_path)}[/yellow]")
            continue
        try:
            content = Path(node.file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            console.print(f"[yellow]Cannot read {escape(node.file_path)}: {escape(str(exc))}[/yellow]")
            continue

        ranges = extractor.extract_referenced_ranges(content, node.line_range, identifier)
        console.print(
            f"[bold]{escape(node.name)}[/bold]: {len(ranges)} reference(s) to '{escape(identifier)}'"
        )
        for start, end in ranges:
            location = f"{start}" if start == end else f"{start}-{end}"
            console.print(f"  {escape(node.file_path)}:{location}")


# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------

@app.command("show-config")
def show_config():
    """Show the effective indexer configuration."""
    settings = config_manager.load_config()
    table = Table(title=f"Configuration ({config.CONFIG_FILE})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.items():
        table.add_row(key, escape(str(value)))
    console.print(table)


@app.command("set-config")
def set_config(
    threads: Optional[int] = typer.Option(None, "--threads", help="Default worker threads (0 = per CPU)."),
    output: Optional[str] = typer.Option(None, "--output", help="Default output path."),
    fmt: Optional[str] = typer.Option(None, "--format", help="Default format: json or dot."),
):
    """Persist indexer defaults to the config file."""
    if fmt is not None and fmt.lower() not in EXPORT_FORMATS:
        console.print(f"[red]Unsupported format '{escape(fmt)}'. Choose from: {', '.join(EXPORT_FORMATS)}[/red]")
        raise typer.Exit(code=1)
    if threads is None and output is None and fmt is None:
        console.print("[yellow]Nothing to update.[/yellow]")
        raise typer.Exit()

    config.ensure_base_dirs()
    saved = config_manager.save_config(
        threads=threads, output=output, format=fmt.lower() if fmt else None,
    )
    if not saved:
        console.print("[red]Could not write configuration.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Configuration saved to {escape(str(config.CONFIG_FILE))}[/green]")


if __name__ == "__main__":
    app()
