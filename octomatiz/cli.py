"""Thin CLI wrapper for octomatiz.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console

from octomatiz import __version__
from octomatiz.config import Settings, get_settings, print_settings_json

if TYPE_CHECKING:
    from octomatiz.storage import StorageGate

app = typer.Typer(
    name="octomatiz",
    help="OCTOmatiz - publish landing pages under short slugs and short links",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"octomatiz version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """OCTOmatiz - publish landing pages under short slugs and short links."""


def _open_gate(settings: Settings) -> "StorageGate":
    """Build a storage gate over the configured database."""
    from octomatiz.db import create_all_tables, get_engine, get_session_factory
    from octomatiz.storage import SqlKeyValueStore, StorageGate

    if not settings.kv_enabled:
        return StorageGate(None)
    engine = get_engine(settings.db_url)
    create_all_tables(engine)
    return StorageGate(SqlKeyValueStore(get_session_factory(engine)))


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
        return

    ttl_display = (
        f"{settings.page_ttl_seconds}s" if settings.page_ttl_seconds else "(never)"
    )
    providers_display = ", ".join(settings.shortener_providers) or "(internal only)"
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Storage:[/bold]")
    console.print(f"  Database URL:        {settings.db_url}")
    console.print(f"  KV enabled:          {settings.kv_enabled}")
    console.print(f"  Page TTL:            {ttl_display}")
    console.print()
    console.print("[bold]Publishing:[/bold]")
    console.print(f"  Public base URL:     {settings.public_base_url or '(request)'}")
    console.print(f"  Domain suffix:       {settings.domain_suffix}")
    console.print(f"  Page cache max-age:  {settings.page_cache_max_age}")
    console.print(f"  Shorteners:          {providers_display}")
    console.print(f"  Shortener timeout:   {settings.shortener_timeout}")
    console.print()
    console.print("[bold]Rate limiting:[/bold]")
    console.print(f"  Deploys per window:  {settings.deploy_rate_limit}")
    console.print(f"  Window (ms):         {settings.deploy_rate_window_ms}")
    console.print()
    console.print("[bold]Server:[/bold]")
    console.print(f"  Host:                {settings.host}")
    console.print(f"  Port:                {settings.port}")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (default from settings)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port (default from settings)"),
    ] = None,
) -> None:
    """Run the HTTP API server."""
    import uvicorn

    from web.app import create_app

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def slug(
    name: Annotated[str, typer.Argument(help="Business name")],
    check: Annotated[
        bool,
        typer.Option("--check", help="Probe the store for a free slug"),
    ] = False,
) -> None:
    """Show the slug a business name would be published under."""
    from octomatiz.slugs import allocate_unique_slug, base_slug_for

    base = base_slug_for(name)
    if not check:
        console.print(base)
        return

    gate = _open_gate(get_settings())
    console.print(asyncio.run(allocate_unique_slug(base, gate)))


@app.command()
def resolve(
    code: Annotated[str, typer.Argument(help="Short code")],
) -> None:
    """Resolve a short code to the slug it redirects to."""
    from octomatiz.shortener import resolve_short_code

    gate = _open_gate(get_settings())
    target = asyncio.run(resolve_short_code(code, gate))
    if target is None:
        console.print(f"[red]Short code not found: {code}[/red]")
        raise typer.Exit(code=1)
    console.print(target)


@app.command()
def page(
    slug_value: Annotated[str, typer.Argument(metavar="SLUG", help="Page slug")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the stored record as JSON"),
    ] = False,
) -> None:
    """Show the record published under a slug."""
    from octomatiz.slugs import landing_key

    gate = _open_gate(get_settings())
    result = asyncio.run(gate.get(landing_key(slug_value), as_json=True))
    if not result.ok:
        console.print(f"[red]Error: {result.error.error}[/red]")
        raise typer.Exit(code=1)
    if result.data is None:
        console.print(f"[red]Page not found: {slug_value}[/red]")
        raise typer.Exit(code=1)

    record = result.data
    if not isinstance(record, dict):
        console.print(f"[red]Malformed page record: {slug_value}[/red]")
        raise typer.Exit(code=1)
    if json_output:
        console.print_json(json.dumps(record))
        return
    console.print(f"[bold]Slug:[/bold]          {slug_value}")
    console.print(f"[bold]Business:[/bold]      {record.get('businessName')}")
    console.print(f"[bold]Project ID:[/bold]    {record.get('projectId') or '-'}")
    console.print(f"[bold]Created:[/bold]       {record.get('createdAt')}")
    console.print(f"[bold]Template:[/bold]      {record.get('template')}")
    console.print(f"[bold]Color theme:[/bold]   {record.get('colorTheme')}")
    console.print(f"[bold]HTML size:[/bold]     {len(record.get('html') or '')} chars")


if __name__ == "__main__":
    app()
