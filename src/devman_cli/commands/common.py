"""Shared CLI utilities.

Common options, Settings creation, error handling, output formatting.
"""

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click

from devman_cli.lib.errors import (
    InvalidRequestError,
    KeyConflictAbortedError,
    KeyMaterialError,
    KeySourceError,
    ProvisioningFailedError,
    RegistrationFailedError,
    RegistryError,
    RollbackFailedError,
    VerificationError,
)
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.lib.settings import Settings

# Type variables for decorators
P = ParamSpec("P")
T = TypeVar("T")

SECRET_FIELDS = frozenset({"password", "passphrase"})


def settings_options(fn: Callable[P, T]) -> Callable[P, T]:
    """Add --key-dir and --registry options."""
    fn = click.option(
        "--key-dir",
        type=click.Path(file_okay=False, path_type=Path),
        envvar="DEVMAN_KEY_DIR",
        default=None,
        help="Directory holding private keys [default: ~/.ssh]",
    )(fn)
    fn = click.option(
        "--registry",
        "registry_path",
        type=click.Path(dir_okay=False, path_type=Path),
        envvar="DEVMAN_REGISTRY",
        default=None,
        help="Device registry file",
    )(fn)
    return fn


def json_option(fn: Callable[P, T]) -> Callable[P, T]:
    """Add --json flag for JSON output."""
    return click.option(
        "--json",
        "as_json",
        is_flag=True,
        help="Output as JSON",
    )(fn)


def make_settings(key_dir: Path | None, registry_path: Path | None) -> Settings:
    """Create Settings from CLI options."""
    return Settings().with_overrides(key_dir=key_dir, registry_path=registry_path)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def handle_result(result: Result[T, Any], success_message: str | None = None) -> T:
    """Handle a Result, exiting on error with appropriate message.

    On Ok: returns the value, optionally prints success message
    On Err: prints error and exits with code 1
    """
    match result:
        case Ok(value):
            if success_message:
                click.secho(success_message, fg="green", bold=True)
            return value
        case Err(error):
            handle_error(error)
            sys.exit(1)  # Should never reach here, but for type checker


def handle_error(error: Any) -> None:
    """Print error message and exit."""
    message = _format_error(error)
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _format_error(error: Any) -> str:
    """Format error for display."""
    match error:
        case InvalidRequestError(field, reason):
            return f"Invalid {field}: {reason}"

        case KeyConflictAbortedError(key_name):
            return f"Private key '{key_name}' already exists and was kept. Nothing was registered."

        case KeyMaterialError(key_name, "parse", reason):
            return f"Private key '{key_name}' could not be read (wrong passphrase?): {reason}"

        case KeyMaterialError(key_name, stage, reason):
            return f"Private key '{key_name}' failed at {stage}: {reason}"

        case KeySourceError(address, reason):
            return (
                f"Could not fetch the private key from {address}: {reason}. "
                "Is key server mode enabled in the Developer Mode app?"
            )

        case ProvisioningFailedError(device_name, cause):
            return f"Enrolling '{device_name}' failed while provisioning credentials. {_format_error(cause)}"

        case RegistrationFailedError(device_name, reason):
            return (
                f"Enrolling '{device_name}' failed while registering the device: {reason}. "
                "Any key already written was left in place."
            )

        case RollbackFailedError(device_name, reason):
            return (
                f"Device '{device_name}' failed verification and could not be removed: {reason}. "
                f"It may still be registered; remove it with 'devman device remove {device_name}'."
            )

        case RegistryError(device_name, reason):
            return f"Device '{device_name}': {reason}"

        case VerificationError(device_name, reason):
            return f"Device '{device_name}' did not answer: {reason}"

        case _:
            return str(error)


def to_json(obj: Any) -> str:
    """Convert object to JSON string, dropping secrets."""
    return json.dumps(_to_serializable(obj), indent=2)


def _to_serializable(obj: Any) -> Any:
    """Convert object to JSON-serializable form."""
    if obj is None:
        return None
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _to_serializable(v) for k, v in obj.items() if k not in SECRET_FIELDS}
    if isinstance(obj, (list, tuple)):
        return [_to_serializable(v) for v in obj]
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_serializable(asdict(obj))
    return str(obj)


def echo_key_value(key: str, value: Any, indent: int = 0) -> None:
    """Print a key-value pair with optional indentation."""
    prefix = "  " * indent
    click.echo(f"{prefix}{key}: {value}")
