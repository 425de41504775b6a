"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nzb_gateway.models.download import AccessResult, DownloadRecord
from nzb_gateway.models.stats import BundleStats
from nzb_gateway.utils.formatting import format_size, format_timestamp, truncate

RESULT_STYLES = {
    AccessResult.SUCCESSFUL: "green",
    AccessResult.CONNECTION_ERROR: "red",
    AccessResult.UNKNOWN: "yellow",
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Run `nzb-gateway init` to create a configuration file.",
            "• Check the values with `nzb-gateway --show-config`.",
        ],
        "SearchResultNotFoundError": [
            "• The GUID may be outdated. Search again to get a fresh one.",
            "• Import results with `nzb-gateway import <file>`.",
        ],
        "NothingRetrievableError": [
            "• None of the indexers delivered an NZB.",
            "• Check `nzb-gateway history` for the individual errors.",
        ],
        "ArchiveAssemblyError": [
            "• Check that the output directory exists and is writable.",
            "• Make sure there is enough free disk space.",
        ],
        "IndexerNotFoundError": [
            "• Add an [indexer:<name>] section to the configuration file.",
        ],
        "CircuitBreakerError": [
            "• The indexer failed repeatedly and is cooling down.",
            "• Please try again in a minute.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "api_key" and value:
            value = "[hidden]"
        elif key == "indexers":
            value = ", ".join(indexer["name"] for indexer in value) or "(none)"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_history_table(records: list[DownloadRecord]):
    """Displays the most recent download history entries."""
    console = Console()
    if not records:
        console.print("[dim]No downloads recorded yet.[/dim]")
        return

    table = Table(title="Download History", box=box.ROUNDED)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("GUID", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Indexer")
    table.add_column("Access")
    table.add_column("Result")
    table.add_column("User/IP", style="dim")
    for record in records:
        style = RESULT_STYLES.get(record.result, "white")
        result_text = record.result.value
        if record.error:
            result_text += f" ({truncate(record.error, 40)})"
        table.add_row(
            format_timestamp(record.time),
            str(record.search_result_id),
            truncate(record.title),
            record.indexer_name,
            f"{record.access_type.value}/{record.access_source.value}",
            f"[{style}]{result_text}[/{style}]",
            record.username_or_ip or "",
        )
    console.print(table)


def print_stats_table(stats_data: dict[str, Any]):
    """Displays download history statistics."""
    console = Console()
    console.print(
        "\n[bold]Total Downloads Recorded:[/] "
        f"[green]{stats_data['total_downloads']}[/green]\n"
    )

    for result, count in sorted(stats_data.get("by_result", {}).items()):
        style = RESULT_STYLES.get(AccessResult(result), "white")
        console.print(f"  [{style}]{result}[/{style}]: {count}")

    if top_indexers := stats_data.get("top_indexers"):
        table = Table(title="Top Indexers")
        table.add_column("Rank", style="dim")
        table.add_column("Indexer", style="cyan")
        table.add_column("Downloads", justify="right", style="green")
        for i, (indexer, count) in enumerate(top_indexers, 1):
            table.add_row(str(i), indexer, str(count))
        console.print(table)
    else:
        console.print("[dim]No indexer data in history yet.[/dim]")


def print_zip_summary(zip_path: Path, stats: BundleStats):
    """Displays the result of a ZIP bundling run."""
    console = Console()
    size = zip_path.stat().st_size if zip_path.exists() else 0
    console.print(
        Panel(
            f"Wrote [cyan]{zip_path}[/cyan] ([magenta]{format_size(size)}[/magenta])\n"
            f"Bundled [green]{stats.bundled}[/green]/{stats.requested} NZB(s), "
            f"[red]{stats.failed}[/red] skipped.\n"
            "[dim]Skipped items are listed in `nzb-gateway history`.[/dim]",
            title="📦 [bold]ZIP Created[/bold]",
            border_style="green",
            expand=False,
        )
    )
