"""
Simulator Boot Benchmark

Measures cold boot time and time to idle of iOS simulators across
combinations of iOS version and device, driven through ``xcrun simctl``.
"""

__version__ = "0.1.0"

from .core.benchmark_runner import BenchmarkRunner
from .core.host_info import HostInfo
from .core.metrics import BenchmarkRequest, BenchmarkResult

__all__ = [
    "BenchmarkRunner",
    "BenchmarkRequest",
    "BenchmarkResult",
    "HostInfo",
]
