"""
Host information for benchmark reports.
"""

import platform
import subprocess
from typing import Dict, List, Optional

import psutil
from rich.console import Console
from rich.markup import escape

CORE_SIMULATOR_PLIST = (
    "/Library/Developer/PrivateFrameworks/CoreSimulator.framework/Resources/Info.plist"
)


class HostInfo:
    """Collect display-only information about the benchmark host."""

    UNKNOWN = "unknown"

    def _read_command(self, cmd: List[str]) -> Optional[str]:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except (subprocess.CalledProcessError, FileNotFoundError):
            return None
        return result.stdout.strip() or None

    def get_macos_version(self) -> str:
        """Get the macOS product version."""
        return self._read_command(["sw_vers", "--productVersion"]) or self.UNKNOWN

    def get_core_simulator_version(self) -> str:
        """Get the CoreSimulator.framework bundle version."""
        version = self._read_command(
            ["/usr/libexec/PlistBuddy", "-c", "print 'CFBundleVersion'", CORE_SIMULATOR_PLIST]
        )
        return version or self.UNKNOWN

    def get_system_info(self) -> Dict[str, str]:
        """Get system information."""
        return {
            "platform": platform.platform(),
            "python_version": platform.python_version(),
            "cpu_count": str(psutil.cpu_count(logical=True)),
            "macos_version": self.get_macos_version(),
            "core_simulator_version": self.get_core_simulator_version(),
        }

    def print_host_info(self, console: Optional[Console] = None) -> None:
        """Print formatted host information."""
        console = console or Console()
        info = self.get_system_info()

        console.print(
            f"[bold blue]macOS version:[/bold blue] [red]{escape(info['macos_version'])}[/red]"
        )
        console.print(
            "[bold blue]CoreSimulator.framework version:[/bold blue] "
            f"[red]{escape(info['core_simulator_version'])}[/red]"
        )
        console.print(f"[bold blue]Platform:[/bold blue] {escape(info['platform'])}")
        console.print(f"[bold blue]Python:[/bold blue] {info['python_version']}")
        console.print(f"[bold blue]Logical CPUs:[/bold blue] {info['cpu_count']}")
