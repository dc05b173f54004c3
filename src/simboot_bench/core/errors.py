"""
Failure classes raised while driving simulators.
"""


class SimulatorError(RuntimeError):
    """Base class for failures the benchmark runner knows how to contain."""


class RecoverableSimulatorError(SimulatorError):
    """Failure that only skips the current combination.

    Raised when a runtime or device cannot be resolved, or when a
    non-critical command spawned inside the simulator fails. No simulator
    was left running, so no cleanup is needed.
    """


class FatalSimulatorError(SimulatorError):
    """Failure of a simulator lifecycle operation.

    Raised when erase, boot, a critical post-boot command, the usability
    launch or shutdown fails. The combination is abandoned and a forced
    shutdown is attempted so a booted simulator is not left behind.
    """


class CatalogError(RuntimeError):
    """Raised when the runtime or device catalog cannot be fetched or parsed.

    Deliberately outside the SimulatorError hierarchy: without a catalog no
    combination can run, so the whole benchmark aborts.
    """
