"""Device commands - enroll and manage SSH devices."""

import asyncio
from pathlib import Path

import click

from devman_cli.commands.common import (
    echo_key_value,
    handle_result,
    json_option,
    make_settings,
    settings_options,
    to_json,
)
from devman_cli.lib.prompt import ClickPrompt, StaticPrompt
from devman_cli.models import (
    DEFAULT_PORT,
    DEFAULT_USERNAME,
    AuthMode,
    EnrollmentOutcome,
    EnrollmentRequest,
    generated_key_name,
)
from devman_cli.workflows import enroll, list_devices, remove_device, set_default_device


@click.group()
def device() -> None:
    """Enroll and manage devices."""
    pass


@device.command("add")
@click.argument("name")
@click.option("--address", "-a", required=True, help="Device IP address or hostname")
@click.option("--port", default=DEFAULT_PORT, show_default=True, help="SSH port")
@click.option("--username", "-u", default=DEFAULT_USERNAME, show_default=True, help="SSH user")
@click.option(
    "--auth",
    type=click.Choice([m.value for m in AuthMode]),
    default=AuthMode.GENERATED_KEY.value,
    show_default=True,
    help="dev-key: fetch the key from the device; local-key: use a key you already have",
)
@click.option("--password", default=None, help="SSH password (password auth)")
@click.option(
    "--private-key",
    "private_key_name",
    default=None,
    help="Key file name inside the key directory (local-key auth)",
)
@click.option("--passphrase", default=None, help="Private key passphrase")
@click.option("--description", default=None, help="Free-form description")
@click.option("--yes", is_flag=True, help="Answer yes to every confirmation prompt")
@settings_options
def device_add(
    name: str,
    address: str,
    port: int,
    username: str,
    auth: str,
    password: str | None,
    private_key_name: str | None,
    passphrase: str | None,
    description: str | None,
    yes: bool,
    key_dir: Path | None,
    registry_path: Path | None,
) -> None:
    """Enroll a device and verify it answers over SSH.

    NAME is the identifier for this device in the registry.

    \b
    Examples:
      devman device add tv --address 192.168.1.20 --passphrase ABC123
      devman device add rpi --address 10.0.0.5 --port 22 -u pi --auth password --password x
      devman device add box --address box.lan --auth local-key --private-key id_ed25519
    """
    mode = AuthMode(auth)
    if mode == AuthMode.PASSWORD and password is None:
        password = click.prompt("SSH password", hide_input=True, default="", show_default=False)

    settings = make_settings(key_dir, registry_path)
    request = EnrollmentRequest(
        name=name,
        address=address,
        auth=mode,
        port=port,
        username=username,
        password=password,
        private_key_name=private_key_name,
        passphrase=passphrase,
        description=description,
    )

    click.echo(f"Adding device: {name}")
    echo_key_value("Address", f"{address}:{port}", indent=1)
    echo_key_value("User", username, indent=1)
    echo_key_value("Auth", mode.value, indent=1)
    if mode == AuthMode.GENERATED_KEY:
        echo_key_value("Key", settings.key_dir / generated_key_name(name), indent=1)
    click.echo()

    prompt = StaticPrompt(True) if yes else ClickPrompt()
    result = handle_result(asyncio.run(enroll(settings, request, prompt)))

    match result.outcome:
        case EnrollmentOutcome.REGISTERED:
            click.secho(f"Device '{name}' added and verified.", fg="green", bold=True)
            for key, value in sorted(result.verification.info.items()):
                echo_key_value(key, value, indent=1)
        case EnrollmentOutcome.REGISTERED_UNVERIFIED:
            click.secho(f"Device '{name}' added but not verified.", fg="yellow", bold=True)
        case EnrollmentOutcome.ROLLED_BACK:
            click.secho(f"Device '{name}' was not reachable and has been removed.", fg="yellow")


@device.command("list")
@settings_options
@json_option
def device_list(key_dir: Path | None, registry_path: Path | None, as_json: bool) -> None:
    """List registered devices.

    \b
    Examples:
      devman device list
      devman device list --json
    """
    settings = make_settings(key_dir, registry_path)
    devices = handle_result(asyncio.run(list_devices(settings)))

    if as_json:
        click.echo(to_json(devices))
        return

    if not devices:
        click.echo("No devices registered")
        click.echo()
        click.echo("Add one with: devman device add <name> --address <ip>")
        return

    for d in devices:
        marker = " (default)" if d.default else ""
        click.echo(f"  {d.name}{marker}")
        echo_key_value("Address", f"{d.username}@{d.host}:{d.port}", indent=2)
        echo_key_value("Auth", d.auth_label, indent=2)
        if d.description:
            echo_key_value("Description", d.description, indent=2)
        click.echo()


@device.command("remove")
@click.argument("name")
@settings_options
def device_remove(name: str, key_dir: Path | None, registry_path: Path | None) -> None:
    """Remove a device from the registry.

    Does NOT delete private key files.
    """
    settings = make_settings(key_dir, registry_path)
    handle_result(
        asyncio.run(remove_device(settings, name)),
        success_message=f"Device '{name}' removed.",
    )


@device.command("set-default")
@click.argument("name")
@settings_options
def device_set_default(name: str, key_dir: Path | None, registry_path: Path | None) -> None:
    """Make NAME the default device."""
    settings = make_settings(key_dir, registry_path)
    handle_result(
        asyncio.run(set_default_device(settings, name)),
        success_message=f"Device '{name}' is now the default.",
    )
