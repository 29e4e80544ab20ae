"""Click CLI for img-size-cache — annotate documents and manage the size cache."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from img_size_cache.cache.store import DimensionCacheStore
from img_size_cache.config.hierarchy import load_config_hierarchy
from img_size_cache.config.loader import load_options_yaml
from img_size_cache.config.schema import AnnotatorOptions
from img_size_cache.types import AnnotationReport

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(str(default_level).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="img-size-cache")
def cli() -> None:
    """img-size-cache — annotate document images with cached pixel sizes."""


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Output file path.")
@click.option("--cache-file", type=click.Path(dir_okay=False), default=None, help="Cache file path.")
@click.option("--no-remote", is_flag=True, default=False, help="Do not fetch remote images.")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for relative image paths (default: working directory).",
)
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option(
    "--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="Options YAML file."
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def annotate(
    input_path: str,
    output: str | None,
    cache_file: str | None,
    no_remote: bool,
    base_dir: str | None,
    timeout: float | None,
    config_file: str | None,
    verbose: int,
) -> None:
    """Add width/height to every image in a markdown/HTML document."""
    from img_size_cache.core import annotate_file

    overrides = {
        "cache_file_path": cache_file,
        "process_remote_images": False if no_remote else None,
        "base_dir": base_dir,
        "request_timeout": timeout,
    }
    config = load_config_hierarchy(**overrides)
    _setup_logging(verbose, config["log_level"])

    if config_file:
        # An explicit options file replaces the hierarchy; flags still win
        try:
            base = load_options_yaml(config_file).model_dump()
        except ValueError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        base.update({key: value for key, value in overrides.items() if value is not None})
        options = AnnotatorOptions(**base)
    else:
        options = AnnotatorOptions(**config)

    try:
        result = annotate_file(input_path, output_path=output, options=options)
    except (OSError, UnicodeDecodeError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if output:
        console.print(f"[green]Written to {output}[/green]")
    else:
        click.echo(result.text, nl=False)

    if verbose >= 1:
        _print_summary(result.report)


def _print_summary(report: AnnotationReport) -> None:
    """Print an annotation summary."""
    error_console.print()
    table = Table(title="Annotation Summary", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Images", str(report.total))
    table.add_row("From cache", str(report.from_cache))
    table.add_row("Resolved", str(report.resolved))
    table.add_row("Skipped", str(report.skipped))
    if report.failed:
        table.add_row("Failed", f"[yellow]{report.failed}[/yellow]")
    table.add_row("Cache updated", "yes" if report.cache_updated else "no")

    error_console.print(table)

    for reference in report.failed_references:
        error_console.print(f"  [yellow]unsized:[/yellow] {reference}")


@cli.command("size")
@click.argument("reference")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def size(reference: str, timeout: float | None, verbose: int) -> None:
    """Print the pixel size of one image, without touching the cache."""
    from img_size_cache.resolver import get_image_size
    from img_size_cache.utils.urls import should_skip_url

    config = load_config_hierarchy(request_timeout=timeout)
    _setup_logging(verbose, config["log_level"])

    if should_skip_url(reference):
        error_console.print(f"[yellow]Cannot size embedded reference:[/yellow] {reference[:40]}")
        sys.exit(1)

    options = AnnotatorOptions(**config)
    result = asyncio.run(
        get_image_size(
            reference,
            timeout=options.request_timeout,
            user_agent=options.user_agent,
            base_dir=options.base_dir,
        )
    )
    if result is None:
        error_console.print(f"[red]Unable to get image dimensions:[/red] {reference}")
        sys.exit(1)
    console.print(f"{result.width}x{result.height}")


@cli.group()
@click.option("--cache-file", type=click.Path(dir_okay=False), default=None, help="Cache file path.")
@click.pass_context
def cache(ctx: click.Context, cache_file: str | None) -> None:
    """Cache management commands."""
    options = AnnotatorOptions(**load_config_hierarchy(cache_file_path=cache_file))
    ctx.obj = DimensionCacheStore(options.cache_file_path)


@cache.command("stats")
@click.pass_obj
def cache_stats(store: DimensionCacheStore) -> None:
    """Show cache statistics."""
    stats = store.stats()

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("File", str(stats.path))
    table.add_row("Exists", "yes" if stats.exists else "no")
    table.add_row("Entries", str(stats.entries))
    table.add_row("Remote", str(stats.remote_entries))
    table.add_row("Local", str(stats.local_entries))
    table.add_row("Size (KB)", f"{stats.size_kb:.1f}")

    console.print(table)


@cache.command("list")
@click.pass_obj
def cache_list(store: DimensionCacheStore) -> None:
    """List cached references and their sizes."""
    entries = store.load()

    table = Table(title="Cached Image Sizes", show_header=True)
    table.add_column("Reference", style="cyan", overflow="fold")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")

    for reference, dims in entries.items():
        table.add_row(reference, str(dims.width), str(dims.height))

    console.print(table)


@cache.command("remove")
@click.argument("references", nargs=-1, required=True)
@click.pass_obj
def cache_remove(store: DimensionCacheStore, references: tuple[str, ...]) -> None:
    """Remove references from the cache so they are resolved again."""
    removed = store.remove(references)
    console.print(f"[green]Removed {removed} entr{'y' if removed == 1 else 'ies'}.[/green]")


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
@click.pass_obj
def cache_clear(store: DimensionCacheStore) -> None:
    """Delete the cache file."""
    path = store.path
    if not store.clear():
        error_console.print(f"[red]Could not delete {path}[/red]")
        sys.exit(1)
    console.print("[green]Cache cleared.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
