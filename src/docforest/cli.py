"""Command-line interface for docforest."""

from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import Annotated, TextIO

import typer

from . import context
from .access import AccessLevel, parse_kind
from .backends import create_backend
from .config import DocsConfig
from .document import DocumentGenerator, find_landing_page
from .exceptions import DocforestError
from .loader import discover_config, load_store
from .logger import setup_logger
from .models import OutputFormat, PageLayout

app = typer.Typer(
    name="docforest",
    help="Consolidate indexed source entities into rendered API documentation",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show merges, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: docforest_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for docforest commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_access_option(value: str | None) -> AccessLevel | None:
    if value is None:
        return None
    level = AccessLevel.parse(value)
    if level is None:
        valid = ", ".join(member.label for member in AccessLevel)
        typer.echo(f"Error: Invalid access level '{value}'. Must be one of: {valid}", err=True)
        raise typer.Exit(1)
    return level


def _load_config(files: list[Path], min_access: str | None, title: str | None) -> DocsConfig:
    """Discover the config file and apply command-line overrides."""
    context.set_overrides(_parse_access_option(min_access), title)
    try:
        config = discover_config(files[0] if files else None) or DocsConfig()
    except DocforestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    return context.apply_overrides(config)


@app.command()
def doc(  # noqa: PLR0913 - CLI command needs multiple options
    files: Annotated[list[Path], typer.Argument(help="Indexer payload files (JSON or YAML)")],
    *,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file (single page) or directory (multi page)"),
    ] = None,
    layout: Annotated[
        PageLayout | None, typer.Option("--layout", "-l", help="Page layout")
    ] = None,
    format: Annotated[  # noqa: A002 - 'format' is appropriate name for CLI option
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format"),
    ] = None,
    min_access: Annotated[
        str | None,
        typer.Option("--min-access", help="Lowest access level to document"),
    ] = None,
    title: Annotated[str | None, typer.Option("--title", help="Project title")] = None,
) -> None:
    """Generate documentation in Markdown or HTML."""
    config = _load_config(files, min_access, title)
    layout = layout or config.output.layout
    output_format = format or config.output.format

    if layout is PageLayout.MULTI_PAGE and output is None:
        typer.echo("Error: Multi page output requires --output directory", err=True)
        raise typer.Exit(1)

    store = load_store(files, config=config)
    backend = create_backend(output_format.value, config.output.code_syntax)
    generator = DocumentGenerator(store, backend, config)

    if layout is PageLayout.MULTI_PAGE:
        assert output is not None
        landing_text = None
        landing_path = find_landing_page(config.project_root) if config.project_root else None
        if landing_path is not None:
            landing_text = landing_path.read_text(encoding="utf-8")
        for relative_path, contents in generator.generate_pages(landing_text).items():
            target = output / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")
        typer.echo(f"Documentation written to {output}")
        return

    doc_output = generator.generate()
    if output:
        output.write_text(doc_output, encoding="utf-8")
        typer.echo(f"Documentation written to {output}")
    else:
        typer.echo(doc_output)


@app.command()
def index(
    files: Annotated[list[Path], typer.Argument(help="Indexer payload files (JSON or YAML)")],
    *,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="CSV output path")] = None,
    min_access: Annotated[
        str | None,
        typer.Option("--min-access", help="Lowest access level to include"),
    ] = None,
) -> None:
    """Export the lookup index (name, type, path) as CSV."""
    config = _load_config(files, min_access, None)
    store = load_store(files, config=config)
    generator = DocumentGenerator(store, create_backend("html"), config)

    if output:
        with output.open("w", newline="", encoding="utf-8") as f:
            _write_index_csv(generator, f)
        typer.echo(f"Index written to {output}")
    else:
        _write_index_csv(generator, sys.stdout)


def _write_index_csv(generator: DocumentGenerator, stream: TextIO) -> None:
    writer = csv.writer(stream)
    writer.writerow(["name", "type", "path"])
    for entry in generator.index_entries():
        writer.writerow([entry.name, entry.type, entry.path])


@app.command()
def search(
    files: Annotated[list[Path], typer.Argument(help="Indexer payload files (JSON or YAML)")],
    *,
    title: Annotated[
        str | None, typer.Option("--title", "-t", help="Case-insensitive title substring")
    ] = None,
    kind: Annotated[
        str | None, typer.Option("--kind", "-k", help="Kind label, e.g. class or 'global func'")
    ] = None,
    min_access: Annotated[
        str | None,
        typer.Option("--min-access", help="Lowest access level to include"),
    ] = None,
) -> None:
    """Search every entity, members included."""
    config = _load_config(files, min_access, None)
    store = load_store(files, config=config)
    results = store.search(
        title=title,
        kind=parse_kind(kind) if kind else None,
        minimum_access=config.minimum_access,
    )
    for entity in results:
        typer.echo(f"{entity.title}\t{entity.kind_label}\t{entity.access.label}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
