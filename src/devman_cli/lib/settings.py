"""Enrollment settings.

A single explicit configuration value handed to every adapter. Defaults come
from lib.paths; the CLI overrides them from options and DEVMAN_* env vars.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

from devman_cli.lib import paths

DEFAULT_KEY_SOURCE_PORT = 9991
DEFAULT_PROFILE = "ose"
DEFAULT_VERIFY_COMMAND = "cat /var/run/nyx/os_info.json"


@dataclass(frozen=True)
class Settings:
    """Locations, ports and timeouts used by an enrollment."""

    key_dir: Path = field(default_factory=paths.ssh_dir)
    registry_path: Path = field(default_factory=paths.registry_path)
    key_source_port: int = DEFAULT_KEY_SOURCE_PORT
    fetch_timeout: float = 10.0
    verify_timeout: float = 15.0
    verify_command: str = DEFAULT_VERIFY_COMMAND
    profile: str = DEFAULT_PROFILE

    def with_overrides(
        self,
        key_dir: Path | None = None,
        registry_path: Path | None = None,
    ) -> "Settings":
        """Return a copy with any non-None location replaced."""
        changes: dict[str, Path] = {}
        if key_dir is not None:
            changes["key_dir"] = key_dir
        if registry_path is not None:
            changes["registry_path"] = registry_path
        return replace(self, **changes)
