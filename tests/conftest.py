"""
Shared fakes for the simulator benchmark tests.
"""

import json
from typing import Dict, List, Optional, Sequence

import pytest

from simboot_bench.core.config import BenchmarkSettings
from simboot_bench.core.simctl import CommandResult, SimctlClient

RUNTIMES_JSON = {
    "runtimes": [
        {
            "identifier": "com.apple.CoreSimulator.SimRuntime.watchOS-10-0",
            "name": "watchOS 10.0",
            "version": "10.0",
            "isAvailable": True,
            "buildversion": "21R355",
        },
        {
            "identifier": "com.x.16-4",
            "name": "iOS 16.4",
            "version": "16.4",
            "isAvailable": True,
            "buildversion": "20E247",
        },
        {
            "identifier": "com.apple.CoreSimulator.SimRuntime.iOS-17-0",
            "name": "iOS 17.0",
            "version": "17.0",
            "isAvailable": True,
            "buildversion": "21A328",
        },
        {
            "identifier": "com.apple.CoreSimulator.SimRuntime.iOS-17-2",
            "name": "iOS 17.2",
            "version": "17.2",
            "isAvailable": True,
            "buildversion": "21C62",
        },
    ]
}

DEVICES_JSON = {
    "devices": {
        "com.x.16-4": [
            {"name": "iPhone 11", "udid": "ABC", "state": "Shutdown", "isAvailable": True},
            {"name": "iPhone 14", "udid": "GONE-14", "state": "Shutdown", "isAvailable": False},
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-17-0": [
            {"name": "iPhone 15", "udid": "UDID-15-170", "state": "Shutdown", "isAvailable": True},
            {"name": "iPhone 14", "udid": "UDID-14-170", "state": "Shutdown", "isAvailable": True},
        ],
        # keyed by a qualified display name instead of the identifier
        "iOS 17.2 (beta)": [
            {"name": "iPhone 15", "udid": "UDID-15-172", "state": "Shutdown", "isAvailable": True},
        ],
    }
}


class FakeClock:
    """Manually advanced clock whose sleep moves time forward."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeSimctlClient(SimctlClient):
    """SimctlClient answering from canned catalogs instead of xcrun.

    Args:
        clock: Clock advanced by ``boot_seconds`` on every boot
        boot_seconds: Boot duration, or one duration per boot in order
        fail_on: Subcommand -> number of times it fails (None: always)
        fail_stderr: stderr of failing calls, defaults to "<subcommand> failed"
    """

    def __init__(
        self,
        clock: Optional[FakeClock] = None,
        boot_seconds=10.0,
        fail_on: Optional[Dict[str, Optional[int]]] = None,
        runtimes: Optional[dict] = None,
        devices: Optional[dict] = None,
        settings: Optional[BenchmarkSettings] = None,
        fail_stderr: Optional[str] = None,
    ):
        super().__init__(settings or BenchmarkSettings())
        self.clock = clock
        self.boot_seconds = boot_seconds
        self.fail_on = dict(fail_on or {})
        self.fail_stderr = fail_stderr
        self.runtimes_json = runtimes if runtimes is not None else RUNTIMES_JSON
        self.devices_json = devices if devices is not None else DEVICES_JSON
        self.calls: List[List[str]] = []

    def _should_fail(self, sub: str) -> bool:
        if sub not in self.fail_on:
            return False
        remaining = self.fail_on[sub]
        if remaining is None:
            return True
        if remaining <= 0:
            return False
        self.fail_on[sub] = remaining - 1
        return True

    def _next_boot_seconds(self) -> float:
        if isinstance(self.boot_seconds, (list, tuple)):
            return self.boot_seconds[self.boot_count() - 1]
        return self.boot_seconds

    def run(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        sub = args[0]

        if sub == "list":
            payload = self.runtimes_json if args[1] == "runtimes" else self.devices_json
            return CommandResult(args, 0, json.dumps(payload), "")

        if sub == "bootstatus" and self.clock is not None:
            self.clock.advance(self._next_boot_seconds())

        if self._should_fail(sub):
            return CommandResult(args, 1, "", self.fail_stderr or f"{sub} failed")
        return CommandResult(args, 0, "", "")

    def calls_to(self, sub: str) -> List[List[str]]:
        return [call for call in self.calls if call[0] == sub]

    def boot_count(self) -> int:
        return len(self.calls_to("bootstatus"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_client(clock):
    return FakeSimctlClient(clock=clock)
