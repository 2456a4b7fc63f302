"""Commands layer - CLI facade over workflows."""

from devman_cli.commands.device import device

__all__ = [
    "device",
]
