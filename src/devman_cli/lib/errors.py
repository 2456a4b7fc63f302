"""Error types for device enrollment.

All errors are frozen dataclasses - no exceptions in business logic.
Pattern match on these in the CLI layer to provide user-friendly messages.
"""

from dataclasses import dataclass

# =============================================================================
# Request Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class InvalidRequestError:
    """Enrollment request failed validation before any step ran."""

    field: str
    reason: str


# =============================================================================
# Key Material Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class KeyConflictAbortedError:
    """A key with this name already exists and the operator declined to overwrite it."""

    key_name: str


@dataclass(frozen=True, slots=True)
class KeyMaterialError:
    """Key bytes could not be parsed or written.

    stage is "parse" or "write".
    """

    key_name: str
    stage: str
    reason: str


@dataclass(frozen=True, slots=True)
class KeySourceError:
    """Fetching key material from the device failed."""

    address: str
    reason: str


# =============================================================================
# Registry Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Device registry rejected or failed an operation."""

    device_name: str
    reason: str


# =============================================================================
# Verification Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class VerificationError:
    """Device did not answer or did not authenticate.

    Never fatal to an enrollment - it routes to the keep/rollback decision.
    """

    device_name: str
    reason: str


# =============================================================================
# Enrollment Stage Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class ProvisioningFailedError:
    """Credential provisioning failed; nothing was registered."""

    device_name: str
    cause: "ProvisionError"


@dataclass(frozen=True, slots=True)
class RegistrationFailedError:
    """Registry add failed after credentials were provisioned."""

    device_name: str
    reason: str


@dataclass(frozen=True, slots=True)
class RollbackFailedError:
    """Removing an unverified device failed; it may still be registered."""

    device_name: str
    reason: str


# =============================================================================
# Type Aliases for Error Unions
# =============================================================================

type ProvisionError = (
    InvalidRequestError | KeyConflictAbortedError | KeyMaterialError | KeySourceError
)
type EnrollError = (
    InvalidRequestError | ProvisioningFailedError | RegistrationFailedError | RollbackFailedError
)
type DeviceError = RegistryError
