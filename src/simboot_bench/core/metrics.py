"""
Benchmark requests, per-run measurements and their aggregation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class BenchmarkRequest:
    """One (version, device) combination to benchmark."""

    version_spec: str
    device_name: str
    run_count: int = 1
    idle_threshold: float = 2.0
    idle_timeout_seconds: float = 300.0
    post_boot_commands: Tuple[str, ...] = ()
    erase_before_boot: bool = True  # False measures a warm boot

    def __post_init__(self):
        if self.run_count < 1:
            raise ValueError(f"run_count must be at least 1, got {self.run_count}")
        if self.idle_threshold < 0:
            raise ValueError(f"idle_threshold must be non-negative, got {self.idle_threshold}")
        if self.idle_timeout_seconds <= 0:
            raise ValueError(
                f"idle_timeout_seconds must be positive, got {self.idle_timeout_seconds}"
            )
        # accept any sequence but store an immutable one
        object.__setattr__(self, "post_boot_commands", tuple(self.post_boot_commands))


@dataclass(frozen=True)
class RunMeasurement:
    """Timings of a single repetition."""

    boot_time_ms: float
    time_to_idle_ms: float  # measured from the start of the boot, not its end


@dataclass
class BenchmarkResult:
    """Averaged timings for one (version, device) combination."""

    version_spec: str
    device_name: str
    avg_boot_time_ms: float
    avg_time_to_idle_ms: Optional[float]
    runs: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def boot_time_seconds(self) -> float:
        return self.avg_boot_time_ms / 1000

    @property
    def time_to_idle_seconds(self) -> Optional[float]:
        if not self.avg_time_to_idle_ms:
            return None
        return self.avg_time_to_idle_ms / 1000


def aggregate_measurements(
    request: BenchmarkRequest,
    measurements: Sequence[RunMeasurement],
    udid: Optional[str] = None,
) -> BenchmarkResult:
    """Average the measurements of a combination.

    Args:
        request: Request the measurements belong to
        measurements: One measurement per completed repetition
        udid: Simulator the measurements were taken on

    Returns:
        BenchmarkResult whose averages are arithmetic means over all measurements
    """
    if not measurements:
        raise ValueError("Cannot aggregate zero measurements")

    boot_times = [m.boot_time_ms for m in measurements]
    idle_times = [m.time_to_idle_ms for m in measurements]

    metadata: Dict[str, Any] = {
        "boot_times_ms": boot_times,
        "time_to_idle_ms": idle_times,
        "post_boot_commands": list(request.post_boot_commands),
        "cold_boot": request.erase_before_boot,
    }
    if udid is not None:
        metadata["udid"] = udid

    return BenchmarkResult(
        version_spec=request.version_spec,
        device_name=request.device_name,
        avg_boot_time_ms=float(np.mean(boot_times)),
        avg_time_to_idle_ms=float(np.mean(idle_times)),
        runs=len(measurements),
        metadata=metadata,
    )


def _group_by(results: Sequence[BenchmarkResult], attr: str) -> Dict[str, List[BenchmarkResult]]:
    grouped: Dict[str, List[BenchmarkResult]] = {}
    for result in results:
        key = getattr(result, attr)
        if key not in grouped:
            grouped[key] = []
        grouped[key].append(result)
    return grouped


def group_results_by_device(results: Sequence[BenchmarkResult]) -> Dict[str, List[BenchmarkResult]]:
    """Group results by device name, preserving first-seen order."""
    return _group_by(results, "device_name")


def group_results_by_version(results: Sequence[BenchmarkResult]) -> Dict[str, List[BenchmarkResult]]:
    """Group results by requested version, preserving first-seen order."""
    return _group_by(results, "version_spec")
