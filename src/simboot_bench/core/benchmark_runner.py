"""
Benchmark runner driving the simulator boot lifecycle.
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Sequence

from .config import DEFAULT_SETTINGS, BenchmarkSettings
from .errors import FatalSimulatorError, RecoverableSimulatorError
from .idle import IdleDetector, one_minute_load
from .metrics import BenchmarkRequest, BenchmarkResult, RunMeasurement, aggregate_measurements
from .resolver import DeviceResolver
from .simctl import BOOTED, SimctlClient

logger = logging.getLogger(__name__)


class BenchmarkRunner:
    """Measure boot time and time to idle for (version, device) combinations.

    Everything runs sequentially: the idle signal is the host-wide load
    average, so overlapping boots would corrupt each other's timings.
    """

    def __init__(
        self,
        client: Optional[SimctlClient] = None,
        settings: BenchmarkSettings = DEFAULT_SETTINGS,
        resolver: Optional[DeviceResolver] = None,
        idle_detector: Optional[IdleDetector] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        load_average: Optional[Callable[[], float]] = None,
    ):
        """Initialize benchmark runner.

        Args:
            client: simctl wrapper; owns the catalog cache
            settings: Benchmark settings
            resolver: Device resolver, built on client if omitted
            idle_detector: Idle detector, built from clock/sleep if omitted
            clock: Monotonic clock in seconds used for boot timing
            sleep: Blocking sleep used for stabilization waits
            load_average: One-minute load average source
        """
        self.settings = settings
        self.client = client or SimctlClient(settings)
        self.resolver = resolver or DeviceResolver(self.client)
        self.clock = clock
        self.sleep = sleep
        self.load_average = load_average or one_minute_load
        self.idle_detector = idle_detector or IdleDetector(
            settings, load_average=self.load_average, clock=clock, sleep=sleep
        )
        self._results: List[BenchmarkResult] = []
        # udid -> label of the combination that first resolved to it
        self._claimed_udids: Dict[str, str] = {}

    def wait_for_stabilization(self) -> None:
        """Let residual load from the previous repetition decay."""
        window = self.settings.stabilization_window_seconds
        interval = self.settings.stabilization_sample_seconds
        logger.info("Waiting %d seconds for system load to stabilize...", window)

        waited = 0.0
        while waited < window:
            self.sleep(interval)
            waited += interval
            logger.info(
                "  Waited %ds of %ds (current 1m load: %.2f)...",
                waited,
                window,
                self.load_average(),
            )

    def measure_boot_time(self, udid: str, commands: Sequence[str] = ()) -> float:
        """Boot a simulator and verify it is usable.

        The measured time covers boot-to-ready, the post-boot commands and
        the launch of the usability-check app.

        Args:
            udid: Simulator to boot
            commands: Commands spawned inside the simulator right after boot;
                each one is critical

        Returns:
            Boot time in milliseconds
        """
        start = self.clock()
        self.client.boot(udid)

        if commands:
            logger.info("Executing %d post-boot command(s) in simulator...", len(commands))
            for i, command in enumerate(commands, start=1):
                logger.info("Executing command %d of %d:", i, len(commands))
                self.client.execute_command(udid, command, critical=True)

        logger.info("Basic boot completed. Launching Settings app to verify full usability...")
        self.client.launch(udid, self.settings.usability_bundle_id)

        boot_time_ms = (self.clock() - start) * 1000
        logger.info("Full boot + app launch time: %ds", round(boot_time_ms / 1000))
        return boot_time_ms

    def measure_run(self, udid: str, request: BenchmarkRequest) -> RunMeasurement:
        """Run one erase/boot/idle/shutdown repetition."""
        logger.info("--- %s Boot Test ---", "Cold" if request.erase_before_boot else "Warm")
        if request.erase_before_boot:
            self.client.erase(udid)

        boot_time_ms = self.measure_boot_time(udid, request.post_boot_commands)
        idle_ms = self.idle_detector.wait_for_idle(
            request.idle_threshold, request.idle_timeout_seconds
        )

        self.client.shutdown(udid)
        return RunMeasurement(boot_time_ms=boot_time_ms, time_to_idle_ms=boot_time_ms + idle_ms)

    def _recover(self) -> None:
        """Best-effort shutdown of whichever simulator is booted."""
        logger.warning("Attempting to shut down simulator to avoid leaving it running...")
        try:
            self.client.shutdown(BOOTED)
        except (FatalSimulatorError, OSError) as e:
            logger.error("Failed to shut down simulator during error recovery: %s", e)

    def run(self, request: BenchmarkRequest) -> Optional[BenchmarkResult]:
        """Benchmark one combination.

        Args:
            request: Combination and measurement parameters

        Returns:
            Averaged result, or None if the combination was skipped because of
            a recoverable or fatal simulator error

        Raises:
            Exception: Any error outside the simulator error taxonomy
        """
        platform = self.settings.platform_family
        label = f"{request.device_name} ({platform} {request.version_spec})"

        logger.info("=" * 40)
        logger.info("BENCHMARK: %s %s", platform, request.version_spec)
        logger.info("=" * 40)

        try:
            udid = self.resolver.resolve(request.version_spec, request.device_name)
            claimed_by = self._claimed_udids.get(udid)
            if claimed_by is not None:
                raise RecoverableSimulatorError(
                    f"Simulator {udid} was already benchmarked as {claimed_by}; skipping"
                )
            self._claimed_udids[udid] = label

            measurements: List[RunMeasurement] = []
            for i in range(request.run_count):
                logger.info("--- Run %d of %d ---", i + 1, request.run_count)
                # first run starts from a settled host
                if i > 0:
                    self.wait_for_stabilization()
                measurements.append(self.measure_run(udid, request))

            return aggregate_measurements(request, measurements, udid)

        except RecoverableSimulatorError as e:
            logger.error("Non-critical error benchmarking %s: %s", label, e)
            return None
        except FatalSimulatorError as e:
            logger.error("Critical error benchmarking %s: %s", label, e)
            self._recover()
            return None
        except Exception as e:
            logger.error("Unexpected error benchmarking %s: %s", label, e)
            raise

    def run_benchmarks(self, requests: Sequence[BenchmarkRequest]) -> List[BenchmarkResult]:
        """Benchmark every request in order.

        Skipped combinations are left out. Results gathered before an
        unexpected error remain available through get_results().

        Args:
            requests: Combinations to benchmark

        Returns:
            Results of the combinations that completed
        """
        results = []
        for request in requests:
            result = self.run(request)
            if result is not None:
                results.append(result)
                self._results.append(result)
        return results

    def get_results(self) -> List[BenchmarkResult]:
        """Get all collected results."""
        return self._results.copy()

    def clear_results(self) -> None:
        """Clear all collected results and forget which simulators were used."""
        self._results.clear()
        self._claimed_udids.clear()
