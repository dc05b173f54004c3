"""
Core benchmark infrastructure.
"""

from .benchmark_runner import BenchmarkRunner
from .config import BenchmarkSettings
from .errors import CatalogError, FatalSimulatorError, RecoverableSimulatorError, SimulatorError
from .host_info import HostInfo
from .idle import IdleDetector
from .metrics import BenchmarkRequest, BenchmarkResult, RunMeasurement
from .resolver import DeviceResolver
from .simctl import SimctlClient

__all__ = [
    "BenchmarkRunner",
    "BenchmarkSettings",
    "BenchmarkRequest",
    "BenchmarkResult",
    "RunMeasurement",
    "DeviceResolver",
    "HostInfo",
    "IdleDetector",
    "SimctlClient",
    "SimulatorError",
    "RecoverableSimulatorError",
    "FatalSimulatorError",
    "CatalogError",
]
