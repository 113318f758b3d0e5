import asyncio
import json
import logging

from typer import Argument, Exit, Option, Typer
from typing import Annotated
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .benchmark import run_benchmark
from .categories import CategoryModel
from .config import resolve_settings
from .embeddings import create_embedding_provider
from .errors import ProviderFailure, QueryError
from .explorer import ExplorationResult, SemanticExplorer
from .similarity import SimilarityEngine

app = Typer(help="Explore semantically related words and word arithmetic.")
console = Console()

ProviderOption = Annotated[
    str | None,
    Option("--provider", "-p", help="Embedding provider: 'genai' or 'local'."),
]
AcceleratorOption = Annotated[
    str | None,
    Option("--accelerator", "-a", help="auto, cuda, mps, cpu or off."),
]
VerboseOption = Annotated[bool, Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_explorer(provider: str | None, accelerator: str | None) -> SemanticExplorer:
    try:
        return SemanticExplorer.from_env(
            create_embedding_provider(provider), accelerator=accelerator
        )
    except (OSError, ValueError) as exc:
        console.print(Panel(str(exc), title="Configuration error", border_style="bold red"))
        raise Exit(code=1)


def _run_query(explorer: SemanticExplorer, kind: str, query: str) -> ExplorationResult:
    runner = explorer.search if kind == "search" else explorer.compute
    try:
        with console.status(status="Resolving embeddings..."):
            return asyncio.run(runner(query))
    except (QueryError, ProviderFailure) as exc:
        console.print(Panel(str(exc), title="Query failed", border_style="bold red"))
        raise Exit(code=1)


def _print_results(result: ExplorationResult) -> None:
    title = f"{result.kind.capitalize()}: {result.query!r} ({result.category})"
    if result.degraded:
        title += " [expanded search]"
    if not result.results:
        console.print(Panel("No similar words found.", title=title, border_style="bold yellow"))
        return

    table = Table(title=title, title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Word", style="bold")
    table.add_column("Category")
    table.add_column("Similarity", justify="right")
    table.add_column("Cosine", justify="right")
    for index, candidate in enumerate(result.results, start=1):
        table.add_row(
            str(index),
            candidate.word,
            candidate.category,
            f"{round(candidate.adjusted_similarity * 100)}%",
            f"{candidate.cosine:.3f}",
        )
    console.print(table)

    first = result.graph.nodes_at("first")
    second = result.graph.nodes_at("second")
    lines = [f"[bold]{result.query}[/]"]
    for node in first:
        lines.append(f"  ├─ {node.id} ({node.similarity:.2f})")
        for child in second:
            if child.parent == node.id:
                lines.append(f"  │   └─ {child.id} ({child.similarity:.2f})")
    console.print(
        Panel("\n".join(lines), title="Neighbor graph", title_align="left", border_style="bold green")
    )
    console.print(f"[dim]similarity strategy: {result.strategy}[/]")


@app.command()
def search(
    word: Annotated[str, Argument(help="Word to find neighbors for.")],
    provider: ProviderOption = None,
    accelerator: AcceleratorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Find words semantically similar to WORD."""
    _configure_logging(verbose)
    explorer = _build_explorer(provider, accelerator)
    _print_results(_run_query(explorer, "search", word))


@app.command()
def compute(
    expression: Annotated[str, Argument(help="Expression such as 'rei - homem + mulher'.")],
    provider: ProviderOption = None,
    accelerator: AcceleratorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Evaluate word arithmetic and list the nearest words."""
    _configure_logging(verbose)
    explorer = _build_explorer(provider, accelerator)
    _print_results(_run_query(explorer, "compute", expression))


@app.command()
def graph(
    query: Annotated[str, Argument(help="A word, or an expression containing + or -.")],
    provider: ProviderOption = None,
    accelerator: AcceleratorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the full result and neighbor graph as JSON."""
    _configure_logging(verbose)
    explorer = _build_explorer(provider, accelerator)
    kind = "compute" if any(op in query for op in "+-") else "search"
    result = _run_query(explorer, kind, query)
    console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))


@app.command()
def categories() -> None:
    """Show the category table used to adjust similarity."""
    try:
        settings = resolve_settings()
        model = (
            CategoryModel.from_json(settings.categories_path)
            if settings.categories_path
            else CategoryModel()
        )
    except (OSError, ValueError) as exc:
        console.print(Panel(str(exc), title="Configuration error", border_style="bold red"))
        raise Exit(code=1)
    stats = model.stats()
    colors = model.colors()
    table = Table(title=f"{stats['unique_words']} unique words", title_justify="left")
    table.add_column("Category", style="bold")
    table.add_column("Weight", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Related", justify="right")
    for name, entry in stats["categories"].items():
        color = colors.get(name)
        label = f"[{color}]{name}[/]" if color else name
        table.add_row(label, f"{entry['weight']:.1f}", str(entry["words"]), str(entry["related"]))
    console.print(table)


@app.command()
def benchmark(
    dim: Annotated[int, Option("--dim", help="Embedding dimension.")] = 384,
    count: Annotated[int, Option("--count", help="Number of candidate vectors.")] = 100,
    iterations: Annotated[int, Option("--iterations", "-n")] = 5,
    accelerator: AcceleratorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Compare sequential and accelerated similarity timings."""
    _configure_logging(verbose)
    settings = resolve_settings(accelerator=accelerator)
    engine = SimilarityEngine(accelerator=settings.accelerator)
    report = run_benchmark(engine, dim=dim, count=count, iterations=iterations)

    table = Table(
        title=f"{report.count} vectors x {report.dim} dims, {report.iterations} iterations",
        title_justify="left",
    )
    table.add_column("Strategy", style="bold")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Min (ms)", justify="right")
    table.add_column("Max (ms)", justify="right")
    for name, stats in (("sequential", report.sequential), ("accelerated", report.accelerated)):
        if stats is None:
            table.add_row(name, "n/a", "n/a", "n/a")
        else:
            table.add_row(name, f"{stats.avg_ms:.2f}", f"{stats.min_ms:.2f}", f"{stats.max_ms:.2f}")
    console.print(table)
    if report.speedup is not None:
        console.print(f"Speedup: [bold]{report.speedup:.2f}x[/], max abs diff {report.max_abs_diff:.2e}")


@app.command()
def serve(
    host: Annotated[str, Option("--host")] = "127.0.0.1",
    port: Annotated[int, Option("--port")] = 8000,
    verbose: VerboseOption = False,
) -> None:
    """Run the HTTP API."""
    _configure_logging(verbose)
    from .server import run_server

    run_server(host=host, port=port)
