"""Main CLI implementation using Typer."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lxdimage.builder import BuildResult, ImageBuilder, validate_spec
from lxdimage.cloudinit import cloud_init_templates
from lxdimage.errors import BuildError
from lxdimage.loader import fetch_source, load_config, load_spec
from lxdimage.models.config import BuilderConfig
from lxdimage.models.spec import BuildSpec
from lxdimage.providers.registry import get_runtime_registry
from lxdimage.utils.logging import setup_logging


logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="lxd-image-builder",
    help=(
        "Build LXD images from YAML build specifications.\n\n"
        "Usage: lxd-image-builder build SOURCE..."
    ),
    add_completion=False,
)

# Console for rich output
console = Console()


def _run_cli_command(handler: Callable[..., Any], **kwargs: Any) -> Any:
    """Helper to run a CLI step, turning build and OS errors into exit status 1."""
    try:
        return handler(**kwargs)
    except (BuildError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


async def build_source(source: str, config: BuilderConfig) -> BuildResult:
    """Fetch, parse and build a single specification."""
    data = await asyncio.to_thread(fetch_source, source)
    spec = load_spec(data)
    runtime = await get_runtime_registry().create(config)
    builder = ImageBuilder(runtime, config)
    return await builder.build(spec)


def run_build(source: str, config: BuilderConfig) -> BuildResult:
    """Run one build to completion on a fresh event loop."""
    return asyncio.run(build_source(source, config))


def _read_spec(source: str) -> BuildSpec:
    spec = load_spec(fetch_source(source))
    validate_spec(spec)
    return spec


@app.command("build")
def build_command(
    sources: List[str] = typer.Argument(
        ..., help="Build specification files or URLs"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Builder configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level"
    ),
    lxc: Optional[str] = typer.Option(
        None, "--lxc", help="Path to the lxc client"
    ),
    keep_going: bool = typer.Option(
        False, "--keep-going", "-k", help="Continue with remaining sources after a failure"
    ),
):
    """Build and import an image for each specification."""
    builder_config = _run_cli_command(
        load_config, path=config, log_level=log_level, lxc_binary=lxc
    )
    setup_logging(builder_config.log_level)

    failed = []
    for source in sources:
        logger.info(f"processing: {source}")
        try:
            result = _run_cli_command(run_build, source=source, config=builder_config)
        except typer.Exit:
            if not keep_going:
                raise
            failed.append(source)
            continue
        console.print(f"[green]Built[/green] {escape(result.alias)}")

    if failed:
        console.print(f"[red]Failed:[/red] {escape(', '.join(failed))}")
        raise typer.Exit(1)


@app.command("validate")
def validate_command(
    sources: List[str] = typer.Argument(
        ..., help="Build specification files or URLs"
    ),
):
    """Check specifications without building anything."""
    table = Table(title="Build specifications")
    table.add_column("Source", style="dim")
    table.add_column("Alias", style="cyan")
    table.add_column("Base", style="magenta")
    table.add_column("Templates")
    table.add_column("Commands")

    invalid = 0
    for source in sources:
        try:
            spec = _run_cli_command(_read_spec, source=source)
        except typer.Exit:
            invalid += 1
            continue
        table.add_row(
            escape(source),
            escape(spec.alias),
            escape(spec.base_image),
            str(len(spec.templates)),
            str(len(spec.commands)),
        )

    console.print(table)
    if invalid:
        raise typer.Exit(1)


@app.command("templates")
def templates_command():
    """Show the default cloud-init templates."""
    table = Table(title="Default templates")
    table.add_column("Template", style="cyan")
    table.add_column("Path")
    table.add_column("When", style="dim")

    for template in cloud_init_templates():
        table.add_row(template.template, template.path, ", ".join(template.when))

    console.print(table)


def main():
    """Main entry point for CLI."""
    app()
