"""Device registry.

FileDeviceRegistry keeps devices as a JSON array in a single file. Every
method does its whole read-modify-write without awaiting, so two enrollments
on the same event loop never interleave inside the file.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Protocol

from devman_cli.lib.errors import RegistryError
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.lib.storage import file
from devman_cli.models import Device, DeviceSpec

logger = logging.getLogger(__name__)


class DeviceRegistry(Protocol):
    async def add(self, spec: DeviceSpec) -> Result[Device, RegistryError]: ...

    async def remove(self, name: str) -> Result[None, RegistryError]: ...

    async def get(self, name: str) -> Result[Device | None, RegistryError]: ...


class FileDeviceRegistry:
    """JSON-file backed registry."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> list[Device]:
        raw = file.read(self.path)
        if not raw:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} does not contain a device list")
        if not all(isinstance(d, dict) for d in data):
            raise ValueError(f"{self.path} contains an entry that is not a device")
        return [Device.from_dict(d) for d in data]

    def _save(self, devices: list[Device]) -> None:
        file.write(self.path, json.dumps([d.to_dict() for d in devices], indent=2))

    def _read(self, name: str) -> Result[list[Device], RegistryError]:
        try:
            return Ok(self._load())
        except (OSError, ValueError, TypeError) as e:
            return Err(RegistryError(name, f"cannot read {self.path}: {e}"))

    def _write(self, name: str, devices: list[Device]) -> Result[None, RegistryError]:
        try:
            self._save(devices)
        except OSError as e:
            return Err(RegistryError(name, f"cannot write {self.path}: {e}"))
        return Ok(None)

    async def list_devices(self) -> Result[list[Device], RegistryError]:
        return self._read("*")

    async def get(self, name: str) -> Result[Device | None, RegistryError]:
        match self._read(name):
            case Err() as e:
                return e
            case Ok(devices):
                return Ok(next((d for d in devices if d.name == name), None))

    async def add(self, spec: DeviceSpec) -> Result[Device, RegistryError]:
        match self._read(spec.name):
            case Err() as e:
                return e
            case Ok(devices):
                pass

        if any(d.name == spec.name for d in devices):
            return Err(RegistryError(spec.name, "a device with this name already exists"))

        device = Device.from_spec(spec)
        if device.default:
            devices = [_with_default(d, False) for d in devices]
        elif not devices:
            device = _with_default(device, True)
        devices.append(device)

        match self._write(spec.name, devices):
            case Err() as e:
                return e
            case Ok(_):
                pass

        logger.info("Registered device %s (%s:%d)", device.name, device.host, device.port)
        return Ok(device)

    async def remove(self, name: str) -> Result[None, RegistryError]:
        match self._read(name):
            case Err() as e:
                return e
            case Ok(devices):
                pass

        removed = next((d for d in devices if d.name == name), None)
        if removed is None:
            return Err(RegistryError(name, "no such device"))

        remaining = [d for d in devices if d.name != name]
        if removed.default and remaining:
            remaining[0] = _with_default(remaining[0], True)

        match self._write(name, remaining):
            case Err() as e:
                return e
            case Ok(_):
                pass

        logger.info("Removed device %s", name)
        return Ok(None)

    async def set_default(self, name: str) -> Result[Device, RegistryError]:
        match self._read(name):
            case Err() as e:
                return e
            case Ok(devices):
                pass

        if not any(d.name == name for d in devices):
            return Err(RegistryError(name, "no such device"))

        devices = [_with_default(d, d.name == name) for d in devices]
        match self._write(name, devices):
            case Err() as e:
                return e
            case Ok(_):
                pass

        return Ok(next(d for d in devices if d.name == name))


def _with_default(device: Device, default: bool) -> Device:
    if device.default == default:
        return device
    return replace(device, default=default)
