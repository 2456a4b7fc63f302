"""Device workflows - list, remove and pick the default device."""

from devman_cli.lib.errors import DeviceError
from devman_cli.lib.registry import FileDeviceRegistry
from devman_cli.lib.result import Result
from devman_cli.lib.settings import Settings
from devman_cli.models import Device


async def list_devices(settings: Settings) -> Result[list[Device], DeviceError]:
    """List all registered devices."""
    return await FileDeviceRegistry(settings.registry_path).list_devices()


async def remove_device(settings: Settings, name: str) -> Result[None, DeviceError]:
    """Remove a device from the registry.

    Key files the device used are left on disk.
    """
    return await FileDeviceRegistry(settings.registry_path).remove(name)


async def set_default_device(settings: Settings, name: str) -> Result[Device, DeviceError]:
    """Make name the default device; all others lose the flag."""
    return await FileDeviceRegistry(settings.registry_path).set_default(name)
