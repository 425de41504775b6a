"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler

from nzb_gateway import __version__
from nzb_gateway.core import NzbHandler, ZipBundler, build_download_link
from nzb_gateway.exceptions import ConfigurationError
from nzb_gateway.indexers import IndexerRegistry
from nzb_gateway.models.config import GatewayConfig
from nzb_gateway.models.download import (
    AccessSource,
    AccessType,
    DownloadType,
    SearchResult,
)
from nzb_gateway.models.stats import BundleStats
from nzb_gateway.net import NzbFetcher
from nzb_gateway.storage import (
    ConfigManager,
    DownloadHistory,
    SearchResultStore,
)
from nzb_gateway.utils.path import artifact_name
from nzb_gateway.utils.structured_logger import create_event_logger

from .formatters import (
    print_config,
    print_history_table,
    print_stats_table,
    print_zip_summary,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("nzb_gateway")

app = typer.Typer(
    name="nzb-gateway",
    help=(
        "Hands out NZBs for stored search results and keeps a download history."
        " Use 'nzb-gateway <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "nzb-gateway"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"

_search_results_adapter = TypeAdapter(list[SearchResult])


def _load_config() -> GatewayConfig:
    return ConfigManager(CONFIG_FILE).load_config()


@asynccontextmanager
async def _open_handler(config: GatewayConfig) -> AsyncIterator[NzbHandler]:
    """Wires the stores, fetcher and indexers into a handler and closes them after."""
    data_dir = Path(config.config_path) if config.config_path else CONFIG_DIR
    fetcher = NzbFetcher(timeout_s=config.fetch_timeout)
    indexers = IndexerRegistry.from_config(config)
    events = create_event_logger(
        log_dir=data_dir / "logs" if log.isEnabledFor(logging.DEBUG) else None
    )
    handler = NzbHandler(
        SearchResultStore(data_dir),
        DownloadHistory(data_dir),
        fetcher,
        indexers=indexers,
        events=events,
    )
    try:
        yield handler
    finally:
        await fetcher.close()
        await indexers.close()
        events.logger.close()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """NZB Gateway CLI"""
    if version:
        console.print(f"[bold]nzb-gateway[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("nzb_gateway").setLevel(log_level)

    if show_config:
        config = _load_config()
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    host: str = typer.Option("127.0.0.1", help="Host the application listens on."),
    port: int = typer.Option(5076, help="Port the application listens on."),
    api_key: str = typer.Option("", "--api-key", help="API key for external access."),
    external_url: str = typer.Option(
        "", "--external-url", help="Address under which external clients reach us."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Create a configuration file."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "host": host,
        "port": port,
        "api_key": api_key,
        "external_url": external_url,
    }
    try:
        GatewayConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings:\n{e}") from e

    ConfigManager(CONFIG_FILE).save_new_config(settings)
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(
        "[dim]Add indexers as \\[indexer:<name>] sections with 'host' and 'api_key'."
        "[/dim]"
    )


@app.command(name="import")
def import_results(
    source: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, help="JSON file with a list of search results."
    ),
):
    """Load search results into the local store."""
    try:
        results = _search_results_adapter.validate_json(source.read_bytes())
    except ValidationError as e:
        console.print(f"[red]✗ Invalid search result file:[/red]\n{e}")
        raise typer.Exit(code=1) from e

    config = _load_config()

    async def _import():
        store = SearchResultStore(Path(config.config_path))
        return await store.add(results)

    count = asyncio.run(_import())
    console.print(f"[green]✓ Imported {count} search results.[/green]")


@app.command(name="get")
def get_command(
    guid: int = typer.Argument(..., help="GUID of the search result."),
    redirect: bool = typer.Option(
        False, "--redirect", help="Only print the indexer link instead of downloading."
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None, "-o", "--output", help="Write the NZB here instead of '<title>.nzb'."
    ),
    user: str = typer.Option(
        "cli", "--user", help="User name recorded in the download history."
    ),
):
    """Download the NZB of a search result."""
    config = _load_config()
    access_type = AccessType.REDIRECT if redirect else AccessType.PROXY

    async def _get():
        async with _open_handler(config) as handler:
            return await handler.get_nzb_by_guid(
                guid, access_type, AccessSource.INTERNAL, user
            )

    result = asyncio.run(_get())
    if not result.successful:
        console.print(f"[red]✗ {result.error}[/red]")
        raise typer.Exit(code=1)

    if result.is_redirect:
        console.print(result.redirect_url)
        return

    target = output or Path(artifact_name(result.title, set()))
    target.write_bytes(result.content)
    console.print(f"[green]✓ Saved '{result.title}' to[/green] [cyan]{target}[/cyan]")


@app.command(name="zip")
def zip_command(
    guids: list[int] = typer.Argument(..., help="GUIDs of the search results."),  # noqa: B008
    output: Path = typer.Option(  # noqa: B008
        Path("nzbs.zip"), "-o", "--output", help="Where to write the ZIP."
    ),
    user: str = typer.Option(
        "cli", "--user", help="User name recorded in the download history."
    ),
):
    """Download several NZBs into one ZIP. Failed downloads are skipped."""
    config = _load_config()
    stats = BundleStats()

    async def _zip():
        async with _open_handler(config) as handler:
            bundler = ZipBundler(handler)
            return await bundler.get_nzbs_as_zip(
                guids, user, destination=output, stats=stats
            )

    zip_path = asyncio.run(_zip())
    print_zip_summary(zip_path, stats)


@app.command()
def link(
    guid: int = typer.Argument(..., help="GUID of the search result."),
    external: bool = typer.Option(
        False, "--external", help="Build the API link for external clients."
    ),
    torrent: bool = typer.Option(False, "--torrent", help="Link to a torrent."),
):
    """Print the download link for a search result."""
    config = _load_config()
    download_type = DownloadType.TORRENT if torrent else DownloadType.NZB
    url = build_download_link(
        config, guid, internal=not external, download_type=download_type
    )
    console.print(url, soft_wrap=True)


@app.command()
def nfo(guid: int = typer.Argument(..., help="GUID of the search result.")):
    """Show the NFO of a search result."""
    config = _load_config()

    async def _nfo():
        async with _open_handler(config) as handler:
            return await handler.get_nfo(guid)

    result = asyncio.run(_nfo())
    if not result.successful:
        console.print(f"[red]✗ {result.error}[/red]")
        raise typer.Exit(code=1)
    if not result.has_nfo:
        console.print("[yellow]The indexer has no NFO for this result.[/yellow]")
        return
    console.print(result.content, markup=False, highlight=False)


@app.command()
def history(
    limit: int = typer.Option(50, "-n", "--limit", help="Number of entries to show."),
):
    """Show the most recent downloads."""
    config = _load_config()

    async def _history():
        return await DownloadHistory(Path(config.config_path)).recent(limit)

    print_history_table(asyncio.run(_history()))


@app.command()
def stats():
    """Show statistics from the download history."""
    config = _load_config()

    async def _get_stats():
        return await DownloadHistory(Path(config.config_path)).get_stats()

    stats_data = asyncio.run(_get_stats())
    if stats_data:
        print_stats_table(stats_data)
    else:
        console.print("[yellow]Could not retrieve stats.[/yellow]")
