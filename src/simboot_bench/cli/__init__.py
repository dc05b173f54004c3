"""
Command-line interface for the simulator boot benchmark.
"""

import logging
from typing import List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..core.benchmark_runner import BenchmarkRunner
from ..core.config import DEFAULT_SETTINGS
from ..core.errors import CatalogError
from ..core.host_info import HostInfo
from ..core.metrics import BenchmarkRequest
from ..core.reporting import print_benchmark_summary
from ..core.resolver import DeviceResolver
from ..core.simctl import SimctlClient

app = typer.Typer(
    help="Simulator Boot Benchmark - cold boot and time-to-idle of iOS simulators"
)
console = Console()
logger = logging.getLogger("simboot_bench")


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command("benchmark-boot")
def benchmark_boot(
    ios: Optional[List[str]] = typer.Option(
        None, "--ios", help="iOS version to benchmark (repeatable)"
    ),
    device: Optional[List[str]] = typer.Option(
        None, "--device", help="Device name to benchmark (repeatable)"
    ),
    runs: int = typer.Option(
        DEFAULT_SETTINGS.default_runs,
        "--runs",
        min=1,
        envvar="SIMBOOT_RUNS",
        help="Number of runs per combination",
    ),
    idle_threshold: float = typer.Option(
        DEFAULT_SETTINGS.default_idle_threshold,
        "--idle-threshold",
        min=0.0,
        envvar="SIMBOOT_IDLE_THRESHOLD",
        help="1m load average below which the host counts as idle",
    ),
    idle_timeout: float = typer.Option(
        DEFAULT_SETTINGS.default_idle_timeout_seconds,
        "--idle-timeout",
        min=1.0,
        envvar="SIMBOOT_IDLE_TIMEOUT",
        help="Maximum seconds to wait for the host to become idle",
    ),
    spawn_after_boot: Optional[List[str]] = typer.Option(
        None,
        "--spawn-after-boot",
        help="Command to spawn in the simulator right after boot (repeatable)",
    ),
    warm: bool = typer.Option(
        False, "--warm", help="Skip erasing the simulator before each boot"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Benchmark boot time for every iOS version and device combination."""
    ios_versions = list(ios or [])
    device_names = list(device or [])
    commands = list(spawn_after_boot or [])

    if not ios_versions or not device_names:
        rprint("[red]Please provide both --ios and --device flags[/red]")
        rprint(
            'Example: simboot-bench benchmark-boot --ios 16.4 --ios 17.0 '
            '--device "iPhone 15" --device "iPhone 14" --runs 3'
        )
        raise typer.Exit(code=1)

    _configure_logging(verbose)
    HostInfo().print_host_info(console)

    runner = BenchmarkRunner(settings=DEFAULT_SETTINGS)
    requests = [
        BenchmarkRequest(
            version_spec=version,
            device_name=name,
            run_count=runs,
            idle_threshold=idle_threshold,
            idle_timeout_seconds=idle_timeout,
            post_boot_commands=tuple(commands),
            erase_before_boot=not warm,
        )
        for version in ios_versions
        for name in device_names
    ]

    aborted = False
    try:
        logger.info("Gathering information about available iOS runtimes...")
        runner.client.get_runtimes()

        logger.info(
            "Starting benchmarks for %d iOS version(s) and %d "
            "device(s) with %d run(s)...",
            len(ios_versions),
            len(device_names),
            runs,
        )
        if commands:
            logger.info("Commands to execute in simulator after boot:")
            for i, cmd in enumerate(commands, start=1):
                logger.info("  %d. %s", i, cmd)

        runner.run_benchmarks(requests)
    except Exception:
        aborted = True
        logger.exception("Benchmark process aborted due to unexpected error")
    finally:
        print_benchmark_summary(
            runner.get_results(), device_names, console, DEFAULT_SETTINGS.platform_family
        )

    if aborted:
        raise typer.Exit(code=1)


@app.command()
def host_info() -> None:
    """Display host and CoreSimulator information."""
    HostInfo().print_host_info(console)


@app.command()
def list_runtimes() -> None:
    """List installed iOS simulator runtimes."""
    try:
        runtimes = SimctlClient(DEFAULT_SETTINGS).get_runtimes()
    except (CatalogError, OSError) as e:
        rprint(f"[red]Error listing runtimes: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if not runtimes:
        rprint("[yellow]No runtimes found[/yellow]")
        return

    table = Table(title="Available Runtimes")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="bold blue")
    table.add_column("Build", style="green")
    table.add_column("Available", style="magenta")
    for runtime in runtimes:
        table.add_row(
            runtime.name,
            runtime.version,
            runtime.build_version,
            "yes" if runtime.is_available else "no",
        )
    console.print(table)


@app.command()
def list_devices(
    ios: Optional[str] = typer.Option(
        None, "--ios", help="Only show devices for this iOS version"
    )
) -> None:
    """List simulator devices, optionally for a single iOS version."""
    client = SimctlClient(DEFAULT_SETTINGS)
    try:
        if ios:
            resolver = DeviceResolver(client)
            runtime = resolver.find_runtime(ios)
            if runtime is None:
                rprint(f'[yellow]No runtime found matching version "{escape(ios)}"[/yellow]')
                return
            groups = dict(resolver.device_groups(runtime))
        else:
            groups = client.get_devices()
    except (CatalogError, OSError) as e:
        rprint(f"[red]Error listing devices: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Simulator Devices")
    table.add_column("Runtime", style="cyan")
    table.add_column("Device", style="bold magenta")
    table.add_column("UDID", style="green")
    table.add_column("State", style="yellow")
    table.add_column("Available", style="blue")
    for key, devices in groups.items():
        for dev in devices:
            table.add_row(
                escape(key),
                escape(dev.name),
                dev.udid,
                dev.state,
                "yes" if dev.is_available else "no",
            )
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
