"""
Resolve a (version, device name) pair to a simulator UDID.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import RecoverableSimulatorError
from .simctl import Device, Runtime, SimctlClient

logger = logging.getLogger(__name__)


def runtime_matches(runtime: Runtime, version_spec: str) -> bool:
    """Check whether a runtime satisfies a user-supplied version.

    Matches on exact version ("17.0"), on the display name containing it
    ("iOS 17.0"), or, for a bare two-character major version such as
    "17", on the version prefix.
    """
    if runtime.version == version_spec:
        return True
    if version_spec in runtime.name:
        return True
    if len(version_spec) == 2 and "." not in version_spec:
        return runtime.version.startswith(version_spec)
    return False


def _find_available(devices: Iterable[Device], device_name: str) -> Optional[Device]:
    for device in devices:
        if device.name == device_name and device.is_available:
            return device
    return None


class DeviceResolver:
    """Map version/device pairs onto simulators using the cached catalogs."""

    def __init__(self, client: SimctlClient):
        self.client = client

    def find_runtime(self, version_spec: str) -> Optional[Runtime]:
        """Return the first runtime in catalog order matching version_spec."""
        for runtime in self.client.get_runtimes():
            if runtime_matches(runtime, version_spec):
                return runtime
        return None

    def device_groups(self, runtime: Runtime) -> List[Tuple[str, List[Device]]]:
        """Device groups that may belong to runtime, strictest keys first.

        The runtime and device catalogs key device groups inconsistently:
        groups keyed by the runtime identifier or name come first, then
        every group whose key merely contains the version or name.
        """
        groups: Dict[str, List[Device]] = self.client.get_devices()
        exact = [
            (key, devices)
            for key, devices in groups.items()
            if key in (runtime.identifier, runtime.name)
        ]
        loose = [
            (key, devices)
            for key, devices in groups.items()
            if runtime.version in key or runtime.name in key
        ]
        return exact + loose

    def find_device(self, runtime: Runtime, device_name: str) -> Optional[Device]:
        """Find an available device named device_name under runtime."""
        for _, devices in self.device_groups(runtime):
            device = _find_available(devices, device_name)
            if device is not None:
                return device
        return None

    def resolve(self, version_spec: str, device_name: str) -> str:
        """Resolve a version/device pair to a UDID.

        Args:
            version_spec: Version as typed by the user ("17", "17.0", "iOS 17.0")
            device_name: Exact device name ("iPhone 15")

        Returns:
            UDID of the first available matching simulator

        Raises:
            RecoverableSimulatorError: If no runtime or no available device matches
        """
        runtime = self.find_runtime(version_spec)
        if runtime is None:
            raise RecoverableSimulatorError(
                f'No {self.client.settings.platform_family} runtime found matching '
                f'version "{version_spec}". Check available runtimes.'
            )

        device = self.find_device(runtime, device_name)
        if device is None:
            raise RecoverableSimulatorError(
                f'No available device found with name "{device_name}" for '
                f'{self.client.settings.platform_family} version "{version_spec}"'
            )

        logger.debug("Resolved %s / %s to %s (%s)", version_spec, device_name, device.udid, runtime.identifier)
        return device.udid
