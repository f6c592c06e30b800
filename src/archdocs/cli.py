"""Command line interface for archdocs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from archdocs.config import DEFAULT_HOST, DEFAULT_PORT, AppConfig
from archdocs.errors import ConfigError
from archdocs.index.indexer import Indexer
from archdocs.index.search import QueryEngine
from archdocs.index.storage import DocumentIndex, IndexStore
from archdocs.rules import ClassificationRuleSet
from archdocs.web.app import app as web_app


console = Console()
app = typer.Typer(help="archdocs - classify and query architecture documentation")

DOCS_ROOT_OPTION = typer.Option(
    ..., "--docs-root", envvar="DOCS_ROOT_PATH", help="Root directory of the documentation tree"
)
CONFIG_OPTION = typer.Option(None, "--config", help="Mapping file (default: <docs-root>/arch-docs.yaml)")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_index(config: AppConfig) -> tuple[Indexer, DocumentIndex]:
    """Load rules and scan; exits with status 1 on configuration or root errors."""
    mapping_path = config.resolve_mapping_path(Path.cwd())
    try:
        rule_set = ClassificationRuleSet.from_yaml(mapping_path)
        indexer = Indexer(rule_set)
        return indexer, indexer.scan(config.docs_root)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        console.print(f"[red]Cannot scan docs root:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def scan(
    docs_root: Path = DOCS_ROOT_OPTION,
    config_path: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Scan the docs root and summarise the classified documents."""
    _setup_logging(verbose)
    _, index = _build_index(AppConfig(docs_root=docs_root, mapping_path=config_path))

    if len(index) == 0:
        console.print("[yellow]No documents matched the mapping rules.[/yellow]")
    else:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Area")
        table.add_column("Documents", justify="right")
        table.add_column("Size (bytes)", justify="right")
        for area, documents in index.by_area.items():
            table.add_row(area, str(len(documents)), str(sum(doc.size for doc in documents)))
        console.print(table)

    stats = index.stats
    console.print(
        f"Indexed: {stats.indexed}, unmatched: {stats.unmatched}, "
        f"unsupported: {stats.unsupported}, duplicates: {stats.duplicates}, failed: {stats.failed}"
    )


@app.command("list")
def list_documents(
    docs_root: Path = DOCS_ROOT_OPTION,
    config_path: Optional[Path] = CONFIG_OPTION,
    area: Optional[str] = typer.Option(None, help="Area filter, e.g. 'backend|frontend'"),
    lang: Optional[str] = typer.Option(None, help="Language filter, e.g. 'php|go'"),
    category: Optional[str] = typer.Option(None, help="Category filter, e.g. 'c1|c2'"),
    page: int = typer.Option(1, help="Page number"),
    limit: int = typer.Option(50, help="Items per page (max 200)"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List indexed documents with filters and pagination."""
    _setup_logging(verbose)
    _, index = _build_index(AppConfig(docs_root=docs_root, mapping_path=config_path))
    result = QueryEngine(index).list_documents(area=area, lang=lang, category=category, page=page, limit=limit)

    if not result.documents:
        console.print(f"[yellow]No documents on page {result.page} ({result.total_count} matching).[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("URI")
    table.add_column("Area")
    table.add_column("Lang")
    table.add_column("Category")
    table.add_column("Project")
    table.add_column("Size", justify="right")
    for doc in result.documents:
        table.add_row(
            doc.uri, doc.area, doc.lang or "-", ", ".join(doc.category), doc.project or "-", str(doc.size)
        )
    console.print(table)
    console.print(f"Page {result.page}/{result.total_pages} - {result.total_count} documents")


@app.command()
def serve(
    docs_root: Path = DOCS_ROOT_OPTION,
    config_path: Optional[Path] = CONFIG_OPTION,
    host: str = typer.Option(DEFAULT_HOST, help="Host interface"),
    port: int = typer.Option(DEFAULT_PORT, help="Server port"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Scan the docs root and serve the tool endpoints."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    _setup_logging(verbose)
    config = AppConfig(docs_root=docs_root, mapping_path=config_path, host=host, port=port)
    indexer, index = _build_index(config)
    web_app.state.store = IndexStore.from_index(index, indexer)

    console.print(
        f"Serving {len(index)} documents on http://{config.host}:{config.port} (docs root: {index.root})"
    )
    uvicorn.run(
        web_app,
        host=config.host,
        port=config.port,
        reload=False,
        log_level="debug" if verbose else "info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
