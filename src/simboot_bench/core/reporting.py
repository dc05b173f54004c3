"""
Summary tables for benchmark results.
"""

from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .metrics import BenchmarkResult, group_results_by_device, group_results_by_version

NOT_AVAILABLE = "N/A"


def format_seconds(value_ms: Optional[float]) -> str:
    """Format milliseconds as seconds with one decimal, or N/A."""
    if not value_ms:
        return NOT_AVAILABLE
    return f"{value_ms / 1000:.1f}"


def build_result_table(
    results: Sequence[BenchmarkResult], title: Optional[str] = None, platform: str = "iOS"
) -> Table:
    """Create a table with one row per result."""
    table = Table(title=title)
    table.add_column(f"{platform} Version", style="bold blue")
    table.add_column("Boot Time (sec)", style="red", justify="right")
    table.add_column("Time to Idle (sec)", style="red", justify="right")

    for result in results:
        table.add_row(
            escape(result.version_spec),
            format_seconds(result.avg_boot_time_ms),
            format_seconds(result.avg_time_to_idle_ms),
        )
    return table


def print_benchmark_summary(
    results: Sequence[BenchmarkResult],
    device_names: Sequence[str],
    console: Optional[Console] = None,
    platform: str = "iOS",
) -> None:
    """Print the summary of all benchmarks.

    With several requested devices there is one table per device; otherwise
    a single table with results grouped by version.

    Args:
        results: Completed benchmark results
        device_names: Device names that were requested
        console: Console to print to
        platform: Platform family shown in the version column
    """
    console = console or Console()

    if not results:
        console.print("[red]No benchmark results were collected due to errors[/red]")
        return

    console.print("\n" + "=" * 44)
    console.print("[bold blue]SUMMARY OF ALL BENCHMARKS[/bold blue]")
    console.print(f"[bold magenta](Average across {results[0].runs} runs)[/bold magenta]")
    console.print("=" * 44)

    if len(device_names) > 1:
        for device_name, device_results in group_results_by_device(results).items():
            console.print(f"\n[bold magenta]Device: {escape(device_name)}[/bold magenta]")
            console.print(build_result_table(device_results, platform=platform))
    else:
        rows: List[BenchmarkResult] = []
        for version_results in group_results_by_version(results).values():
            rows.extend(version_results)
        console.print(build_result_table(rows, platform=platform))
