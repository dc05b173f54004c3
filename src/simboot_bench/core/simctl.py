"""
Thin wrapper around ``xcrun simctl``.

Every call is a blocking subprocess invocation; a non-zero exit status is
the only failure signal, and stderr is kept for diagnostics. The runtime
and device catalogs are fetched lazily once per client and then reused.
"""

import json
import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_SETTINGS, BenchmarkSettings
from .errors import CatalogError, FatalSimulatorError, RecoverableSimulatorError

logger = logging.getLogger(__name__)

BOOTED = "booted"


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one simctl invocation."""

    args: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class Runtime:
    """An installed simulator OS image."""

    identifier: str
    name: str
    version: str
    is_available: bool = True
    build_version: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Runtime":
        return cls(
            identifier=data["identifier"],
            name=data["name"],
            version=data["version"],
            is_available=bool(data.get("isAvailable", True)),
            build_version=data.get("buildversion", ""),
        )


@dataclass(frozen=True)
class Device:
    """A simulator instance listed under a runtime key."""

    name: str
    udid: str
    state: str = "Shutdown"
    is_available: bool = True

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Device":
        return cls(
            name=data["name"],
            udid=data["udid"],
            state=data.get("state", "Shutdown"),
            is_available=bool(data.get("isAvailable", False)),
        )


@dataclass
class CatalogCache:
    """Single-assignment store for the fetched catalogs.

    Each slot is filled at most once and never invalidated, so every
    resolution in one session sees the same snapshot.
    """

    runtimes: Optional[List[Runtime]] = None
    devices: Optional[Dict[str, List[Device]]] = None
    fetch_count: Dict[str, int] = field(
        default_factory=lambda: {"runtimes": 0, "devices": 0}
    )


class SimctlClient:
    """Issue simctl commands and cache the runtime/device catalogs."""

    def __init__(
        self,
        settings: BenchmarkSettings = DEFAULT_SETTINGS,
        cache: Optional[CatalogCache] = None,
    ):
        """Initialize the client.

        Args:
            settings: Benchmark settings (command prefix, platform family)
            cache: Catalog cache to use; a fresh one is created if omitted
        """
        self.settings = settings
        self.cache = cache if cache is not None else CatalogCache()

    def run(self, args: Sequence[str]) -> CommandResult:
        """Run ``simctl <args>`` and capture its output.

        Raises:
            OSError: If the simctl executable cannot be started
        """
        cmd = [*self.settings.simctl_command, *args]
        logger.debug("Running: %s", shlex.join(cmd))
        completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        return CommandResult(
            args=cmd,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def _list_json(self, kind: str) -> Dict[str, Any]:
        result = self.run(["list", kind, "--json"])
        if not result.ok:
            raise CatalogError(
                f"'simctl list {kind}' exited with code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Could not parse 'simctl list {kind}' output: {e}") from e

    def get_runtimes(self) -> List[Runtime]:
        """Get the installed runtimes of the configured platform family.

        Returns:
            Runtimes in catalog order, fetched on first call only
        """
        if self.cache.runtimes is not None:
            return self.cache.runtimes

        data = self._list_json("runtimes")
        self.cache.fetch_count["runtimes"] += 1
        try:
            runtimes = [
                Runtime.from_json(entry)
                for entry in data["runtimes"]
                if self.settings.platform_family in entry.get("name", "")
            ]
        except (KeyError, TypeError) as e:
            raise CatalogError(f"Unexpected runtime catalog layout: {e}") from e

        self.cache.runtimes = runtimes

        logger.info("Available %s runtimes:", self.settings.platform_family)
        for runtime in runtimes:
            logger.info("- %s (version: %s)", runtime.name, runtime.version)

        return runtimes

    def get_devices(self) -> Dict[str, List[Device]]:
        """Get devices grouped by runtime key.

        Keys are whatever simctl reports: usually the runtime identifier,
        sometimes its display name.
        """
        if self.cache.devices is not None:
            return self.cache.devices

        data = self._list_json("devices")
        self.cache.fetch_count["devices"] += 1
        try:
            devices = {
                key: [Device.from_json(entry) for entry in entries]
                for key, entries in data["devices"].items()
            }
        except (KeyError, TypeError, AttributeError) as e:
            raise CatalogError(f"Unexpected device catalog layout: {e}") from e

        self.cache.devices = devices
        return devices

    def erase(self, udid: str) -> None:
        """Erase a simulator so the next boot is a cold boot."""
        logger.info("Erasing simulator with ID: %s to ensure cold boot...", udid)
        result = self.run(["erase", udid])
        if not result.ok:
            raise FatalSimulatorError(
                f"Failed to erase simulator with ID: {udid}. {result.stderr.strip()}"
            )
        logger.info("Simulator erased successfully.")

    def boot(self, udid: str) -> None:
        """Boot a simulator and block until it reports ready."""
        logger.info("Booting simulator with ID: %s", udid)
        result = self.run(["bootstatus", udid, "-b"])
        if not result.ok:
            raise FatalSimulatorError(
                f"Failed to boot simulator with ID: {udid}. {result.stderr.strip()}"
            )

    def launch(self, udid: str, bundle_id: str) -> None:
        """Launch an application inside a booted simulator."""
        result = self.run(["launch", udid, bundle_id])
        if not result.ok:
            raise FatalSimulatorError(
                f"Failed to launch {bundle_id} on simulator {udid}. {result.stderr.strip()}"
            )

    def execute_command(self, udid: str, command: str, critical: bool = False) -> CommandResult:
        """Spawn a shell-style command inside a booted simulator.

        Args:
            udid: Target simulator (or ``"booted"``)
            command: Command line, split with shell quoting rules
            critical: Raise FatalSimulatorError instead of
                RecoverableSimulatorError when the command fails

        Returns:
            CommandResult of the successful invocation
        """
        error_cls = FatalSimulatorError if critical else RecoverableSimulatorError
        logger.info("Executing in simulator: %s", command)

        try:
            argv = shlex.split(command)
            if not argv:
                raise ValueError("empty command")
            result = self.run(["spawn", udid, *argv])
        except (OSError, ValueError) as e:
            logger.error("Error executing command in simulator: %s", e)
            prefix = "Critical error" if critical else "Error"
            raise error_cls(f"{prefix} executing command in simulator: {e}") from e

        if not result.ok:
            logger.error(
                "Command failed in simulator with exit code %d", result.returncode
            )
            prefix = "Critical command" if critical else "Command"
            raise error_cls(
                f"{prefix} failed in simulator: {command}. Exit code: "
                f"{result.returncode}. Error: {result.stderr.strip()}"
            )

        logger.info("Success")
        output = result.stdout.strip()
        if output:
            logger.info("Output:\n%s", output)
        return result

    def shutdown(self, udid: str) -> None:
        """Shut down a simulator.

        A failure here may leave the simulator running, so it is fatal.
        """
        result = self.run(["shutdown", udid])
        if not result.ok:
            logger.error(
                "Error shutting down simulator: %s%s", result.stdout, result.stderr
            )
            raise FatalSimulatorError(
                f"Failed to shutdown simulator with ID: {udid}. This is a critical "
                "error as it may leave the simulator running."
            )
        logger.info("Simulator shut down successfully.")
