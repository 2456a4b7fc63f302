"""Shared pytest fixtures and fakes for devman tests."""

import asyncio
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from devman_cli.lib.errors import KeySourceError, RegistryError, VerificationError
from devman_cli.lib.keystore import KeyMaterialStore
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.models import Device, DeviceSpec, VerificationResult

# =============================================================================
# Key material
# =============================================================================


@pytest.fixture
def pem_key() -> bytes:
    """Unencrypted EC private key, traditional PEM."""
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def encrypted_pem_key() -> bytes:
    """EC private key encrypted with passphrase 'ABC123'."""
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(b"ABC123"),
    )


@pytest.fixture
def openssh_key() -> bytes:
    """Unencrypted Ed25519 key in OpenSSH format."""
    key = ed25519.Ed25519PrivateKey.generate()
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.OpenSSH,
        encryption_algorithm=serialization.NoEncryption(),
    )


# =============================================================================
# Fakes for the enrollment collaborators
# =============================================================================


class ScriptedPrompt:
    """Answers from a script, recording each question."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[tuple[str, str]] = []

    async def ask(self, title: str, message: str) -> bool:
        self.questions.append((title, message))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {title}")
        return self.answers.pop(0)


class FakeKeySource:
    def __init__(self, data: bytes = b"", error: str | None = None) -> None:
        self.data = data
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, address: str) -> Result[bytes, KeySourceError]:
        self.calls.append(address)
        if self.error is not None:
            return Err(KeySourceError(address, self.error))
        return Ok(self.data)


class RecordingKeyStore(KeyMaterialStore):
    """Real key store that records every call."""

    def __init__(self, key_dir: Path) -> None:
        super().__init__(key_dir)
        self.exists_calls: list[str] = []
        self.writes: list[str] = []

    def exists(self, key_name: str) -> bool:
        self.exists_calls.append(key_name)
        return super().exists(key_name)

    def write(self, key_name: str, data: bytes):
        self.writes.append(key_name)
        return super().write(key_name, data)

    @property
    def touched(self) -> bool:
        return bool(self.exists_calls or self.writes)


class FakeRegistry:
    """In-memory registry recording adds and removes."""

    def __init__(self, add_error: str | None = None, remove_error: str | None = None) -> None:
        self.devices: dict[str, Device] = {}
        self.added: list[DeviceSpec] = []
        self.removed: list[str] = []
        self.add_error = add_error
        self.remove_error = remove_error
        self.events: list[str] | None = None

    async def add(self, spec: DeviceSpec) -> Result[Device, RegistryError]:
        self.added.append(spec)
        if self.events is not None:
            self.events.append("add")
        if self.add_error is not None:
            return Err(RegistryError(spec.name, self.add_error))
        device = Device.from_spec(spec)
        self.devices[spec.name] = device
        return Ok(device)

    async def remove(self, name: str) -> Result[None, RegistryError]:
        self.removed.append(name)
        if self.events is not None:
            self.events.append("remove")
        if self.remove_error is not None:
            return Err(RegistryError(name, self.remove_error))
        self.devices.pop(name, None)
        return Ok(None)

    async def get(self, name: str) -> Result[Device | None, RegistryError]:
        return Ok(self.devices.get(name))


class FakeVerifier:
    """Verifier that succeeds, fails, raises, or hangs."""

    def __init__(
        self,
        fail: str | None = None,
        raises: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.fail = fail
        self.raises = raises
        self.hang = hang
        self.calls: list[str] = []
        self.events: list[str] | None = None

    async def verify(self, device: Device) -> Result[VerificationResult, VerificationError]:
        self.calls.append(device.name)
        if self.events is not None:
            self.events.append("verify")
        if self.hang:
            await asyncio.sleep(3600)
        if self.raises is not None:
            raise self.raises
        if self.fail is not None:
            return Err(VerificationError(device.name, self.fail))
        return Ok(VerificationResult(device.name, {"webos_release": "2.24.0"}))


@pytest.fixture
def key_dir(tmp_path: Path) -> Path:
    path = tmp_path / "ssh"
    path.mkdir()
    return path


@pytest.fixture
def key_store(key_dir: Path) -> RecordingKeyStore:
    return RecordingKeyStore(key_dir)
