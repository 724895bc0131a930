"""calltrace CLI - caller -> callee reference graphs for JavaScript and TypeScript files."""
import json
from pathlib import Path

import click
import typer
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn
)
from rich.table import Table

from .config import Config, __version__, get_config
from .analyzer.graph_builder import CallGraphBuilder, most_referenced, to_digraph
from .utils.mermaid import render_mermaid
from .utils.terminal import SafeConsole, configure_logging, sanitize_for_terminal

app = typer.Typer(
    name="calltrace",
    help="Build caller -> callee reference graphs from JavaScript/TypeScript source files",
    add_completion=False
)
console = SafeConsole()
# Progress bars and summaries go to stderr so stdout stays machine-readable
err_console = SafeConsole(stderr=True)

OUTPUT_FORMATS = ["json", "mermaid", "table"]


def _load_config() -> Config:
    try:
        return get_config()
    except ValueError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def _version_callback(value: bool):
    if value:
        typer.echo(f"calltrace {__version__}")
        raise typer.Exit()


def _require_path(path: Path):
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] Path does not exist: {escape(str(path))}")
        raise typer.Exit(1)


def _write_or_echo(text: str, output: str):
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        err_console.print(f"[green]Wrote[/green] {escape(output)}")
    else:
        typer.echo(text)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit"
    ),
):
    """Caller -> callee reference graphs for one source file at a time."""
    config = _load_config()
    configure_logging("DEBUG" if verbose else config.log_level)


@app.command()
def graph(
    file_path: str = typer.Argument(..., help="Source file to analyze (.js, .jsx, .ts, .tsx)"),
    output_format: str = typer.Option(
        "json", "--format", "-f",
        click_type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
        help="Output format: json pairs, mermaid diagram, or a table"
    ),
    permissive: bool = typer.Option(False, "--permissive", help="Resolve markup tags against local symbols too, not only imports"),
    component_tags_only: bool = typer.Option(False, "--component-tags-only", help="Only scan attributes of uppercase (component) tags"),
    output: str = typer.Option(None, "--output", "-o", help="Write the result to a file instead of stdout"),
):
    """Print the caller -> callee edges of one file."""
    path = Path(file_path)
    _require_path(path)

    config = _load_config()
    builder = CallGraphBuilder(
        config,
        permissive_markup=permissive or None,
        lowercase_tag_attributes=False if component_tags_only else None,
    )
    file_graph = builder.build_file(path)
    output_format = output_format.lower()

    if output_format == "json":
        _write_or_echo(json.dumps(file_graph.pairs), output)
        return

    if output_format == "mermaid":
        _write_or_echo(render_mermaid(file_graph.result.edges), output)
        return

    table = Table(title=f"Call graph: {escape(file_graph.file_path)}")
    table.add_column("Location", style="dim")
    table.add_column("Caller", style="cyan")
    table.add_column("")
    table.add_column("Callee", style="green")
    for edge in file_graph.result.edges:
        table.add_row(str(edge.location), escape(edge.caller), sanitize_for_terminal("→"), escape(edge.callee))
    console.print(table)

    if file_graph.skipped:
        console.print(f"[yellow]Skipped:[/yellow] {file_graph.skipped}")
    else:
        console.print(f"\n[bold]{len(file_graph.result.edges)}[/bold] edge(s), "
                      f"[bold]{len(file_graph.result.symbols)}[/bold] symbol(s)")


@app.command()
def symbols(
    file_path: str = typer.Argument(..., help="Source file to analyze (.js, .jsx, .ts, .tsx)"),
):
    """List the symbols declared in one file and what each of them references."""
    path = Path(file_path)
    _require_path(path)

    file_graph = CallGraphBuilder(_load_config()).build_file(path)

    table = Table(title=f"Symbols: {escape(file_graph.file_path)}")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Line", justify="right")
    table.add_column("References", style="green")
    for symbol in file_graph.result.symbols:
        table.add_row(
            escape(symbol.name),
            symbol.kind,
            str(symbol.line),
            escape(", ".join(sorted(symbol.callees))),
        )
    console.print(table)

    if file_graph.result.imports:
        console.print("\n[bold]Imports:[/bold]")
        for alias, original in file_graph.result.imports:
            if alias == original:
                console.print(f"  {escape(alias)}")
            else:
                console.print(sanitize_for_terminal(f"  {escape(alias)} ← {escape(original)}"))


@app.command()
def scan(
    project_path: str = typer.Argument(".", help="Project root to scan"),
    output: str = typer.Option(None, "--output", "-o", help="Write the JSON result to a file instead of stdout"),
    top: int = typer.Option(5, "--top", help="How many most-referenced symbols to list in the summary"),
):
    """Build one independent graph per supported file under a directory."""
    root = Path(project_path)
    _require_path(root)

    builder = CallGraphBuilder(_load_config())
    files = builder.discover_files(root)

    file_graphs = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=err_console,
        transient=True
    ) as progress:
        task = progress.add_task("[cyan]Walking source files...", total=len(files))
        for file_path in files:
            file_graphs.append(builder.build_file(file_path))
            progress.advance(task)

    result = {
        str(Path(fg.file_path).relative_to(root)): fg.pairs
        for fg in file_graphs
    }
    _write_or_echo(json.dumps(result, indent=2), output)

    digraph = to_digraph(file_graphs)
    summary = Table(title="Scan summary")
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("Files", str(len(file_graphs)))
    summary.add_row("Skipped", str(sum(1 for fg in file_graphs if fg.skipped)))
    summary.add_row("Edges", str(digraph.number_of_edges()))
    err_console.print(summary)

    ranked = most_referenced(digraph, limit=top)
    if ranked:
        err_console.print("\n[bold yellow]Most referenced:[/bold yellow]")
        for (file_name, name), callers in ranked:
            relative = Path(file_name).relative_to(root)
            err_console.print(f"  {escape(name)} [dim]({escape(str(relative))})[/dim]: {callers} caller(s)")


if __name__ == "__main__":
    app()
