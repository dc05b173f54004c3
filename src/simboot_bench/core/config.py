"""
Benchmark settings shared by the simulator client, idle detector and runner.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BenchmarkSettings:
    """Tunable constants for a benchmark session."""

    simctl_command: Tuple[str, ...] = ("xcrun", "simctl")
    platform_family: str = "iOS"  # runtimes whose name lacks this are ignored
    usability_bundle_id: str = "com.apple.Preferences"

    # wait between repetitions of one combination
    stabilization_window_seconds: float = 60.0
    stabilization_sample_seconds: float = 10.0

    # load average lags behind the boot's CPU burst
    idle_grace_seconds: float = 10.0
    idle_poll_seconds: float = 3.0

    default_runs: int = 1
    default_idle_threshold: float = 2.0
    default_idle_timeout_seconds: float = 300.0

    def __post_init__(self):
        if not self.simctl_command:
            raise ValueError("simctl_command must not be empty")
        if self.stabilization_sample_seconds <= 0:
            raise ValueError("stabilization_sample_seconds must be positive")
        if self.idle_poll_seconds <= 0:
            raise ValueError("idle_poll_seconds must be positive")


DEFAULT_SETTINGS = BenchmarkSettings()
