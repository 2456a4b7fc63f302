"""Workflows layer - orchestrate operations into user intents."""

from devman_cli.workflows.device import list_devices, remove_device, set_default_device
from devman_cli.workflows.enroll import EnrollmentCoordinator, build_coordinator, enroll

__all__ = [
    "enroll",
    "build_coordinator",
    "EnrollmentCoordinator",
    "list_devices",
    "remove_device",
    "set_default_device",
]
