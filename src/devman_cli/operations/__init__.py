"""Operations layer - atomic steps that return Result types."""

from devman_cli.operations.credentials import CredentialProvisioner

__all__ = [
    "CredentialProvisioner",
]
