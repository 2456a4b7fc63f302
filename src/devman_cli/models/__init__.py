"""Device enrollment data models.

Pure data structures with JSON serialization. No storage coupling.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields
from enum import StrEnum
from typing import Any, Self

from devman_cli.lib.errors import InvalidRequestError, VerificationError
from devman_cli.lib.result import Err, Ok, Result

DEFAULT_PORT = 9922
DEFAULT_USERNAME = "prisoner"
GENERATED_KEY_SUFFIX = "_webos"

# Unix username: lowercase, optionally ending with '$'
USERNAME_PATTERN = re.compile(r"^[a-z_]([a-z0-9_-]{0,31}|[a-z0-9_-]{0,30}\$)$")


class AuthMode(StrEnum):
    """How the device authenticates SSH sessions."""

    PASSWORD = "password"
    GENERATED_KEY = "dev-key"
    EXISTING_KEY = "local-key"


class EnrollmentOutcome(StrEnum):
    """Terminal state of an enrollment that did not abort."""

    REGISTERED = "registered"
    REGISTERED_UNVERIFIED = "registered-unverified"
    ROLLED_BACK = "rolled-back"


def generated_key_name(device_name: str) -> str:
    """Logical name of the key fetched from the device itself.

    Stable and derived from the device name only.
    """
    return f"{device_name}{GENERATED_KEY_SUFFIX}"


@dataclass(frozen=True)
class EnrollmentRequest:
    """Operator input for one enrollment attempt."""

    name: str
    address: str
    auth: AuthMode = AuthMode.GENERATED_KEY
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USERNAME
    password: str | None = None
    private_key_name: str | None = None
    passphrase: str | None = None
    description: str | None = None

    def validate(self) -> Result[Self, InvalidRequestError]:
        if not self.name or "/" in self.name or "\\" in self.name:
            return Err(InvalidRequestError("name", f"invalid device name {self.name!r}"))
        if not self.address:
            return Err(InvalidRequestError("address", "address is required"))
        if not 0 < self.port < 65536:
            return Err(InvalidRequestError("port", f"port {self.port} out of range"))
        if not USERNAME_PATTERN.match(self.username):
            return Err(InvalidRequestError("username", f"invalid username {self.username!r}"))
        if self.auth == AuthMode.PASSWORD and self.password is None:
            return Err(InvalidRequestError("password", "password mode needs a password"))
        if self.auth == AuthMode.EXISTING_KEY and not self.private_key_name:
            return Err(InvalidRequestError("private_key_name", "local-key mode needs a key name"))
        return Ok(self)


# =============================================================================
# Credentials
# =============================================================================


@dataclass(frozen=True)
class PasswordCredential:
    """Password authentication."""

    password: str

    @property
    def auth(self) -> AuthMode:
        return AuthMode.PASSWORD


@dataclass(frozen=True)
class KeyCredential:
    """Private key authentication, by logical key name."""

    auth: AuthMode
    key_name: str
    passphrase: str | None = None

    def __post_init__(self) -> None:
        if self.auth == AuthMode.PASSWORD:
            raise ValueError("KeyCredential cannot use password mode")
        if not self.key_name:
            raise ValueError("KeyCredential needs a key name")


type Credential = PasswordCredential | KeyCredential


@dataclass(frozen=True)
class KeyMaterial:
    """Raw private key bytes on their way to the key store."""

    key_name: str
    data: bytes = field(repr=False)


# =============================================================================
# Devices
# =============================================================================


@dataclass(frozen=True)
class DeviceSpec:
    """What the registry needs to add a device.

    Exactly one of password / private_key_name is set.
    """

    name: str
    host: str
    port: int
    username: str
    profile: str = "ose"
    default: bool = True
    description: str | None = None
    password: str | None = field(default=None, repr=False)
    private_key_name: str | None = None
    passphrase: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if (self.password is None) == (self.private_key_name is None):
            raise ValueError(
                f"Device '{self.name}' needs exactly one of password or private key"
            )

    @classmethod
    def from_credential(
        cls, request: EnrollmentRequest, credential: Credential, profile: str = "ose"
    ) -> Self:
        base = dict(
            name=request.name,
            host=request.address,
            port=request.port,
            username=request.username,
            profile=profile,
            default=True,
            description=request.description,
        )
        match credential:
            case PasswordCredential(password):
                return cls(**base, password=password)
            case KeyCredential(_, key_name, passphrase):
                return cls(**base, private_key_name=key_name, passphrase=passphrase)


@dataclass(frozen=True)
class Device:
    """A device as stored in the registry."""

    name: str
    host: str
    port: int
    username: str
    profile: str = "ose"
    default: bool = False
    description: str | None = None
    password: str | None = field(default=None, repr=False)
    private_key_name: str | None = None
    passphrase: str | None = field(default=None, repr=False)

    @property
    def auth_label(self) -> str:
        if self.private_key_name is not None:
            return f"key {self.private_key_name}"
        return "password"

    @classmethod
    def from_spec(cls, spec: DeviceSpec) -> Self:
        return cls(**asdict(spec))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# =============================================================================
# Verification / Outcome
# =============================================================================


@dataclass(frozen=True)
class VerificationResult:
    """What the device reported when it answered."""

    device_name: str
    info: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnrollmentResult:
    """Result of an enrollment that ran to a terminal outcome."""

    outcome: EnrollmentOutcome
    device: Device
    verification: VerificationResult | None = None
    verification_error: VerificationError | None = None
