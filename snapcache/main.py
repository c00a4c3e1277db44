"""Main entry point for the snapcache maintenance CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from snapcache.core.command_handler import CommandHandler

# --- Domain Layer ---
from snapcache.domain.exceptions import CacheError

# --- Infrastructure Layer ---
from snapcache.infrastructure.cache.codecs import available_codecs
from snapcache.infrastructure.cache.factory import CacheFactory
from snapcache.infrastructure.cli.display import ConsoleDisplay
from snapcache.infrastructure.config.settings import get_cache_dir, get_config, get_default_codec, load_configuration
from snapcache.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, resolve_level, setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(cache_dir: Optional[Path] = None, verbose: bool = False) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root.

    Raises:
        typer.Exit: If the cache directory or configured codec is unusable.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Configuration and logging
    load_configuration()
    log_level = logging.DEBUG if verbose else resolve_level(get_config('logging.level'))
    setup_logging(
        log_level=log_level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )

    # 2. Infrastructure adapters
    dependencies['ui'] = ConsoleDisplay()
    base_dir = cache_dir or get_cache_dir()
    try:
        dependencies['factory'] = CacheFactory(base_dir, codec=get_default_codec())
    except (CacheError, ValueError) as e:
        logger.error(f"Fatal error during initialization: {e}")
        dependencies['ui'].display_error(f"Cannot use cache directory {base_dir}: {e}")
        raise typer.Exit(code=1)

    # 3. Command handler
    dependencies['command_handler'] = CommandHandler(factory=dependencies['factory'], ui=dependencies['ui'])
    logger.debug("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="snapcache",
    help="snapcache: inspect and maintain single-file snapshot caches.",
    add_completion=False,
    no_args_is_help=True,
)

# --- CLI Options ---

IdentifierArgument = Annotated[str, typer.Argument(help="Cache identifier (file name relative to the cache directory).")]


def _handler(ctx: typer.Context) -> CommandHandler:
    return ctx.obj['command_handler']


def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)

# --- CLI Commands ---

@app.callback()
def main_callback(
    ctx: typer.Context,
    cache_dir: Annotated[
        Optional[Path],
        typer.Option("--dir", "-d", file_okay=False, help="Cache directory. Defaults to cache.dir / SNAPCACHE_CACHE_DIR."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Wire dependencies before any command runs."""
    ctx.obj = create_dependencies(cache_dir, verbose)


@app.command(name="list")
def list_command(ctx: typer.Context):
    """List all caches with their expiry status."""
    _finish(_handler(ctx).handle_list())


@app.command()
def inspect(ctx: typer.Context, identifier: IdentifierArgument):
    """Show the file layout and stored metadata of a cache without loading it."""
    _finish(_handler(ctx).handle_inspect(identifier))


@app.command()
def show(
    ctx: typer.Context,
    identifier: IdentifierArgument,
    codec: Annotated[
        Optional[str],
        typer.Option("--codec", "-c", help=f"Payload codec ({', '.join(available_codecs())})."),
    ] = None,
):
    """Load a cache and print its items. Expired caches are deleted."""
    _finish(_handler(ctx).handle_show(identifier, codec))


@app.command()
def clear(ctx: typer.Context, identifier: IdentifierArgument):
    """Delete one cache file."""
    _finish(_handler(ctx).handle_clear(identifier))


@app.command()
def purge(ctx: typer.Context):
    """Delete every expired cache file."""
    _finish(_handler(ctx).handle_purge())

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
