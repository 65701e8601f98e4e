"""Run a single uptime pass and print the ranked results.

Usage:
    python -m src.uptime.report
"""

import asyncio
import sys

from rich.console import Console
from rich.table import Table

from src.helpers.config import load_settings
from src.uptime.live import UptimeService
from src.uptime.models import UptimeMethod, UptimeStatus
from src.uptime.scheduler import PassResult

STATUS_STYLES = {
    UptimeStatus.EXCELLENT: "bold green",
    UptimeStatus.GOOD: "green",
    UptimeStatus.WARNING: "yellow",
    UptimeStatus.POOR: "red",
    UptimeStatus.CRITICAL: "bold red",
}


def build_table(result: PassResult) -> Table:
    """Render ranked uptime records as a Rich table."""
    table = Table(title="Validator Uptime", expand=True)
    table.add_column("#", justify="right")
    table.add_column("Moniker")
    table.add_column("Address", overflow="fold")
    table.add_column("Uptime", justify="right")
    table.add_column("Signed", justify="right")
    table.add_column("Proposed", justify="right")
    table.add_column("Status")
    table.add_column("Method")

    for record in result.records:
        style = STATUS_STYLES[record.status]
        method = (
            "[dim]estimate[/dim]"
            if record.method == UptimeMethod.STATISTICAL_FALLBACK
            else "blocks"
        )
        table.add_row(
            str(record.uptime_rank),
            record.moniker,
            record.address,
            f"{record.uptime_percentage:.1f}%",
            f"{record.signed_blocks}/{record.total_blocks}",
            str(record.proposed_blocks),
            f"[{style}]{record.status.value}[/{style}]",
            method,
        )
    return table


async def run_report(console: Console | None = None) -> PassResult:
    """Run one pass against the configured endpoints and print a summary."""
    console = console or Console()
    service = UptimeService(load_settings())
    try:
        with console.status("[cyan]Analyzing validator uptime...[/cyan]"):
            result = await service.scheduler.run_pass()
    finally:
        await service.cleanup()

    if not result.success:
        console.print(f"[bold red]✗ Uptime pass failed[/bold red] - {result.error}")
        return result

    console.print(build_table(result))
    if result.stats is not None:
        block_range = result.stats.block_range
        console.print(
            f"[cyan]Blocks {block_range.from_height:,} to {block_range.to_height:,}"
            f" ({block_range.total} blocks)[/cyan]"
        )
    console.print(
        f"[bold green]✓ {result.validators_processed} validators[/bold green] - "
        f"average uptime {result.network_average}%, "
        f"methods {result.method_distribution}"
    )
    return result


if __name__ == "__main__":
    outcome = asyncio.run(run_report())
    sys.exit(0 if outcome.success else 1)
