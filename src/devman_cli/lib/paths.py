"""Default on-disk locations.

The only place that reads the process environment; everything else receives
paths through Settings.
"""

import os
from pathlib import Path

APP_NAME = "devman"


def ssh_dir() -> Path:
    """~/.ssh/ - where private keys are looked up and written."""
    return Path.home() / ".ssh"


def data_dir() -> Path:
    """~/.local/share/devman/"""
    base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / APP_NAME


def registry_path() -> Path:
    """Device registry file."""
    return data_dir() / "devices.json"
