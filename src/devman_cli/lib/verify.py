"""Post-registration verification over SSH."""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import asyncssh

from devman_cli.lib.errors import VerificationError
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.lib.settings import DEFAULT_VERIFY_COMMAND
from devman_cli.models import Device, VerificationResult

logger = logging.getLogger(__name__)


class VerificationService(Protocol):
    async def verify(self, device: Device) -> Result[VerificationResult, VerificationError]: ...


def _parse_info(output: str) -> dict[str, Any]:
    try:
        info = json.loads(output)
    except ValueError:
        return {"raw": output.strip()}
    return info if isinstance(info, dict) else {"raw": info}


class SshVerifier:
    """Logs in with the device's registered credentials and reads device info."""

    def __init__(self, key_dir: Path, command: str = DEFAULT_VERIFY_COMMAND) -> None:
        self.key_dir = Path(key_dir)
        self.command = command

    def _connect_options(self, device: Device) -> dict[str, Any]:
        options: dict[str, Any] = {
            "host": device.host,
            "port": device.port,
            "username": device.username,
            # Developer-mode devices regenerate host keys on every reset
            "known_hosts": None,
        }
        if device.private_key_name is not None:
            options["client_keys"] = [str(self.key_dir / device.private_key_name)]
            options["passphrase"] = device.passphrase
            options["password"] = None
        else:
            options["client_keys"] = None
            options["password"] = device.password
        return options

    async def verify(self, device: Device) -> Result[VerificationResult, VerificationError]:
        logger.debug("Verifying device %s at %s:%d", device.name, device.host, device.port)
        try:
            async with asyncssh.connect(**self._connect_options(device)) as conn:
                completed = await conn.run(self.command, check=False)
        except (OSError, asyncssh.Error, asyncssh.KeyImportError) as e:
            return Err(VerificationError(device.name, f"{type(e).__name__}: {e}"))

        if completed.exit_status not in (0, None):
            # Login succeeded, so the device counts as verified without info
            logger.debug(
                "'%s' on %s exited with %s: %s",
                self.command,
                device.name,
                completed.exit_status,
                str(completed.stderr or "").strip(),
            )
            return Ok(VerificationResult(device.name, {}))
        return Ok(VerificationResult(device.name, _parse_info(str(completed.stdout or ""))))
