"""
CLI for the URL cache.

Commands:
    urlcache path URL - Print the cache path derived from a URL
    urlcache show URL - Show cached headers and content size
    urlcache fetch URL - Fetch a URL through the cache
    urlcache config - Show current configuration
    urlcache version - Print version
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from urlcache import __version__
from urlcache.config import Settings, clear_settings_cache, get_settings
from urlcache.exceptions import (
    CacheNotFoundError,
    CacheParseError,
    UrlCacheError,
)
from urlcache.logging import setup_logging
from urlcache.naming import url_to_path
from urlcache.store import HttpCache

app = typer.Typer(
    name="urlcache",
    help="urlcache - filesystem cache of URL responses",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

CacheDirOption = Annotated[
    Optional[Path],
    typer.Option("--cache-dir", "-d", help="Cache directory (overrides CACHE_DIR)"),
]


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError:
        return None


def _require_settings() -> Settings:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'urlcache config' to see what's wrong."
        )
        raise typer.Exit(1)
    return settings


def _open_cache(settings: Settings, cache_dir: Path | None) -> HttpCache:
    if cache_dir is not None:
        settings = settings.model_copy(update={"CACHE_DIR": cache_dir})
    try:
        return settings.create_cache()
    except UrlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log cache activity at DEBUG level"),
    ] = False,
) -> None:
    """Filesystem cache of URL responses."""
    settings = _get_settings_safe()
    log_level = "DEBUG" if verbose else (settings.LOG_LEVEL if settings else "INFO")
    setup_logging(log_level=log_level, log_file=settings.LOG_FILE if settings else None)


@app.command()
def path(
    url: Annotated[str, typer.Argument(help="URL to derive the cache path for")],
    absolute: Annotated[
        bool,
        typer.Option("--absolute", "-a", help="Print the path under the cache directory"),
    ] = False,
    cache_dir: CacheDirOption = None,
) -> None:
    """Print the cache path for a URL.

    The path never depends on the URL fragment. Nothing is created on disk.
    """
    try:
        derived = url_to_path(url)
        if absolute:
            root = cache_dir if cache_dir is not None else _require_settings().CACHE_DIR
            derived = root.absolute() / derived
    except UrlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    typer.echo(derived.as_posix())


@app.command()
def show(
    url: Annotated[str, typer.Argument(help="URL to look up")],
    cache_dir: CacheDirOption = None,
) -> None:
    """Show the cached headers and content size of a URL."""
    cache = _open_cache(_require_settings(), cache_dir)

    try:
        content, headers = cache.get_bytes(url)
    except CacheNotFoundError:
        error_console.print(f"[yellow]Not cached:[/yellow] {url}")
        raise typer.Exit(1)
    except CacheParseError as e:
        error_console.print(f"[red]Corrupt cache entry:[/red] {e}")
        raise typer.Exit(1)
    except UrlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Headers", show_header=True)
    table.add_column("Header", style="cyan")
    table.add_column("Value", style="green")
    for name, value in sorted(headers.items()):
        table.add_row(name, value)

    console.print()
    console.print(table)
    console.print(f"\n[bold]Content:[/bold] {len(content)} bytes")
    console.print(f"[dim]File:[/dim] {cache.get_cache_path(url)}")
    console.print()


@app.command()
def fetch(
    url: Annotated[str, typer.Argument(help="URL to fetch")],
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Ignore any cached copy and download again"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the content to this file"),
    ] = None,
    cache_dir: CacheDirOption = None,
) -> None:
    """Fetch a URL, serving it from the cache when possible.

    Downloads are stored in the cache with their response headers.
    """
    settings = _require_settings()
    if cache_dir is not None:
        settings = settings.model_copy(update={"CACHE_DIR": cache_dir})

    try:
        with settings.create_fetcher() as fetcher:
            response = fetcher.fetch(url, use_cache=not no_cache)
    except UrlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    source = "cache" if response.from_cache else "network"
    console.print(
        Panel(
            f"[bold]URL:[/bold] {response.url}\n"
            f"[bold]Source:[/bold] {source}\n"
            f"[bold]Content-Type:[/bold] {response.content_type or 'unknown'}\n"
            f"[bold]Size:[/bold] {response.size} bytes",
            title="[bold cyan]Fetched[/bold cyan]",
            border_style="cyan",
        )
    )

    if output is not None:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(response.content)
        except OSError as e:
            error_console.print(f"[red]Error:[/red] Could not write {output}: {e}")
            raise typer.Exit(1)
        console.print(f"[dim]Saved to:[/dim] {output}")


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print()
    console.print("[bold]urlcache Configuration[/bold]")
    console.print()

    settings = _get_settings_safe()
    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check these environment variables:")
        error_console.print("  - FILE_MODE (octal, owner read/write, no execute bits)")
        error_console.print("  - LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
        error_console.print("  - REQUEST_TIMEOUT (positive number of seconds)")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.display_dict().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"urlcache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
