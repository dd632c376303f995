#!/usr/bin/env python3
"""
Appcast Notes - Preview Tool
============================

Developer CLI for rendering an appcast outside the host application.

Usage:
    python main.py --help                                   # Show all commands
    python main.py check-config                             # Show effective configuration
    python main.py render https://example.com/appcast.xml   # Print the document
    python main.py render URL --output notes.html           # Write it to a file
"""

import sys
import asyncio
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from appcast_notes.config.settings import get_settings
from appcast_notes.utils.exceptions import AppcastNotesError, get_user_friendly_message
from appcast_notes.utils.logging import configure_application_logging
from appcast_notes.utils.validators import validate_url
from appcast_notes.view.release_notes_view import render_release_notes

console = Console(stderr=True)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """Appcast Notes - render appcast release notes as HTML."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    try:
        settings = get_settings()
    except AppcastNotesError as e:
        console.print(f"[red]❌ {get_user_friendly_message(e)}[/red]")
        sys.exit(1)

    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
def check_config():
    """Show the effective configuration."""
    settings = get_settings()

    table = Table(title="Appcast Notes Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    rows = [
        ("fetch.request_timeout", settings.fetch.request_timeout or "transport default"),
        ("fetch.user_agent", settings.fetch.user_agent),
        ("view.overlap_policy", settings.view.overlap_policy.value),
        ("view.show_error_on_fetch_failure", settings.view.show_error_on_fetch_failure),
        ("view.parse_in_worker", settings.view.parse_in_worker),
        ("render.document_title", settings.render.document_title),
        ("render.display_timezone", settings.render.display_timezone or "feed wall clock"),
        ("logging.level", settings.get_effective_log_level()),
        ("logging.file_path", settings.logging.file_path or "-"),
    ]
    for name, value in rows:
        table.add_row(name, str(value))

    console.print(table)


@cli.command()
@click.argument('url')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Write the document to this file instead of stdout')
def render(url: str, output: Optional[Path]):
    """Fetch URL and render its release notes."""
    if not validate_url(url):
        console.print(f"[red]❌ Not a valid feed URL: {url}[/red]")
        sys.exit(2)

    document = asyncio.run(render_release_notes(url))
    if document is None:
        console.print(f"[red]❌ Could not fetch {url}[/red]")
        sys.exit(1)

    if output:
        output.write_text(document, encoding="utf-8")
        console.print(f"[green]✅ Wrote {output}[/green]")
    else:
        click.echo(document, nl=False)


if __name__ == '__main__':
    cli()
