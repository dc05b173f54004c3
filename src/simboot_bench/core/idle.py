"""
Host idle detection based on the one-minute load average.
"""

import logging
import time
from typing import Callable, Optional

import psutil

from .config import DEFAULT_SETTINGS, BenchmarkSettings

logger = logging.getLogger(__name__)


def one_minute_load() -> float:
    """Get the host's one-minute load average."""
    return psutil.getloadavg()[0]


class IdleDetector:
    """Poll host load until it drops below a threshold or a timeout expires."""

    def __init__(
        self,
        settings: BenchmarkSettings = DEFAULT_SETTINGS,
        load_average: Optional[Callable[[], float]] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize idle detector.

        Args:
            settings: Supplies the grace period and poll interval
            load_average: Callable returning the one-minute load average
            clock: Monotonic clock in seconds
            sleep: Blocking sleep in seconds
        """
        self.settings = settings
        self.load_average = load_average or one_minute_load
        self.clock = clock
        self.sleep = sleep

    def wait_for_idle(self, threshold: float, timeout_seconds: float = 300.0) -> float:
        """Wait for the host to become idle.

        Idle means the load average is below threshold after the grace
        period has passed. Reaching the timeout is not an error; both
        outcomes return the elapsed time and differ only in the log line.

        Args:
            threshold: Load average below which the host counts as idle
            timeout_seconds: Maximum time to wait

        Returns:
            Elapsed time in milliseconds
        """
        logger.info("Waiting for system to idle...")
        grace = self.settings.idle_grace_seconds
        poll = self.settings.idle_poll_seconds

        start = self.clock()
        is_idle = False

        while self.clock() - start < timeout_seconds:
            elapsed = self.clock() - start
            load = self.load_average()
            logger.info("[%ds] 1m load: %.2f (threshold: %s)...", round(elapsed), load, threshold)

            if load < threshold and elapsed > grace:
                is_idle = True
                break
            self.sleep(poll)

        elapsed_ms = (self.clock() - start) * 1000

        if is_idle:
            logger.info("System idle reached after %ds", round(elapsed_ms / 1000))
        else:
            logger.warning(
                "Timed out waiting for system to become idle after %ss",
                timeout_seconds,
            )

        return elapsed_ms
