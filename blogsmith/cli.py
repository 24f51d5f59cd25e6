"""CLI entry point for blogsmith."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
import yaml
from bs4 import BeautifulSoup
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from blogsmith.config import BlogsmithConfig, load_config
from blogsmith.config.loader import DEFAULT_CONFIG_TEMPLATE
from blogsmith.content import build_pipeline
from blogsmith.content.enhancements import PostEnhancer
from blogsmith.diagrams import DiagramBlock, Dialect, diagram_url, encode as encode_source
from blogsmith.diagrams.lifecycle import DiagramLifecycleManager
from blogsmith.diagrams.models import RenderState
from blogsmith.diagrams.tags import DiagramTagProcessor
from blogsmith.scaffold import PostExistsError, PostGenerator, PostOptions, open_in_editor

app = typer.Typer(
    name="blogsmith",
    help="Static blog tooling: diagram tags, post enhancements and post scaffolding.",
)

config_app = typer.Typer(help="Manage blogsmith configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: BlogsmithConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> BlogsmithConfig:
    if _config is None:
        return load_config()
    return _config


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS.get(level, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", help="Path to blogsmith.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config.log_level)


def _read_source(file: str) -> str:
    if file == "-":
        return sys.stdin.read()
    return Path(file).read_text(encoding="utf-8")


@app.command()
def new(
    title: str | None = typer.Option(None, "--title", "-t", help="Post title (required)"),
    categories: str = typer.Option("", "--categories", "-c", help="Categories (comma-separated)"),
    tags: str = typer.Option("", "--tags", "-g", help="Tags (comma-separated)"),
    author: str | None = typer.Option(None, "--author", "-a", help="Author name"),
    template: str | None = typer.Option(
        None, "--template", "-T", help="Template (default, technical, tutorial, review)"
    ),
    editor: bool = typer.Option(True, "--editor/--no-editor", help="Open the post in $EDITOR"),
) -> None:
    """Create a new dated post from a template."""
    cfg = _get_config()
    if not title or not title.strip():
        rprint("[red]Error:[/red] Title is required")
        rprint("Usage: blogsmith new --title 'My New Post'")
        raise typer.Exit(1)

    try:
        options = PostOptions(
            title=title, categories=categories, tags=tags, author=author, template=template
        )
    except ValidationError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    generator = PostGenerator(cfg.posts)
    try:
        path = generator.create(options)
    except PostExistsError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint(f"[green]Created new post:[/green] {path}")
    rprint(f"Title: {options.title}")
    if options.categories:
        rprint(f"Categories: {', '.join(options.categories)}")
    if options.tags:
        rprint(f"Tags: {', '.join(options.tags)}")

    if editor and cfg.posts.open_editor:
        open_in_editor(path, os.environ.get("EDITOR"))


@app.command()
def encode(
    file: str = typer.Argument(..., help="Diagram source file, or - for stdin"),
    dialect: str = typer.Option("", "--dialect", "-d", help="Diagram dialect"),
    url: bool = typer.Option(False, "--url", help="Print the full rendering URL"),
) -> None:
    """Encode diagram source into a rendering-service token."""
    cfg = _get_config()
    try:
        resolved = Dialect.parse(dialect, default=cfg.diagrams.default_dialect)
        source = _read_source(file)
    except (ValueError, OSError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if url:
        block = DiagramBlock(dialect=resolved, source=source.strip())
        typer.echo(diagram_url(block, cfg.diagrams.kroki_url, cfg.diagrams.output_format))
    else:
        typer.echo(encode_source(source.strip(), resolved))


@app.command()
def render(
    file: Path = typer.Argument(..., help="Post or page source"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write result here"),
    output_ext: str = typer.Option(".html", "--output-ext", help="Extension of the rendered page"),
) -> None:
    """Run the content pipeline (emoji filter, diagram tags) over a file."""
    cfg = _get_config()
    if not file.is_file():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    pipeline = build_pipeline(cfg)
    result = pipeline.apply(
        file.read_text(encoding="utf-8"), {"output_ext": output_ext, "path": str(file)}
    )

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result, encoding="utf-8")
        blocks = [
            b for t in pipeline.transforms if isinstance(t, DiagramTagProcessor) for b in t.blocks
        ]
        rprint(f"[green]Written to[/green] {output} ({len(blocks)} diagram(s))")
    else:
        typer.echo(result)


async def _prerender(soup: BeautifulSoup, cfg: BlogsmithConfig) -> tuple[int, int]:
    async with DiagramLifecycleManager.with_http_backends(soup, cfg) as manager:
        manager.discover()
        done = await manager.render_all()
    failed = sum(1 for p in done if p.state is RenderState.failed)
    return len(done), failed


@app.command()
def enhance(
    file: Path = typer.Argument(..., help="Rendered HTML page"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write result here"),
    prerender: bool = typer.Option(
        False, "--prerender", help="Render diagrams now via the rendering service"
    ),
) -> None:
    """Add table of contents, reading time and code/image helpers to a page."""
    cfg = _get_config()
    if not file.is_file():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    soup = BeautifulSoup(file.read_text(encoding="utf-8"), "html.parser")
    PostEnhancer(soup, cfg.posts).enhance()

    if prerender:
        total, failed = asyncio.run(_prerender(soup, cfg))
        table = Table(title="Diagrams")
        table.add_column("Rendered", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_row(str(total - failed), str(failed))
        rprint(table)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(str(soup), encoding="utf-8")
        rprint(f"[green]Written to[/green] {output}")
    else:
        typer.echo(str(soup))


@config_app.command("show")
def config_show() -> None:
    """Show the resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a starter blogsmith.yaml in the current directory."""
    target = Path("blogsmith.yaml")
    if target.exists() and not force:
        rprint("[yellow]blogsmith.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(Panel(f"[green]Created[/green] {target}", border_style="blue"))


if __name__ == "__main__":
    app()
