"""Enrollment workflow - provision, register, verify, and roll back on request."""

import asyncio
import logging

from devman_cli.lib.errors import (
    EnrollError,
    ProvisioningFailedError,
    RegistrationFailedError,
    RollbackFailedError,
    VerificationError,
)
from devman_cli.lib.keysource import HttpKeySource, KeySource
from devman_cli.lib.keystore import KeyMaterialStore
from devman_cli.lib.prompt import ConfirmationPrompt
from devman_cli.lib.registry import DeviceRegistry, FileDeviceRegistry
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.lib.settings import Settings
from devman_cli.lib.verify import SshVerifier, VerificationService
from devman_cli.models import (
    Device,
    DeviceSpec,
    EnrollmentOutcome,
    EnrollmentRequest,
    EnrollmentResult,
    VerificationResult,
)
from devman_cli.operations.credentials import CredentialProvisioner

logger = logging.getLogger(__name__)

VERIFICATION_FAILED_TITLE = "Verification failed"


class EnrollmentCoordinator:
    """Sequences provision -> register -> verify -> rollback.

    Holds no per-attempt state; enroll calls are independent and may run
    concurrently for differently named devices.
    """

    def __init__(
        self,
        provisioner: CredentialProvisioner,
        registry: DeviceRegistry,
        verifier: VerificationService,
        prompt: ConfirmationPrompt,
        verify_timeout: float = 15.0,
        profile: str = "ose",
    ) -> None:
        self.provisioner = provisioner
        self.registry = registry
        self.verifier = verifier
        self.prompt = prompt
        self.verify_timeout = verify_timeout
        self.profile = profile

    async def enroll(self, request: EnrollmentRequest) -> Result[EnrollmentResult, EnrollError]:
        """Enroll a device.

        1. Validate the request
        2. Provision credentials (may prompt to overwrite a key)
        3. Add the device to the registry
        4. Verify the device answers
        5. On verification failure, ask whether to keep or remove the device

        Verification failure is an outcome, not an error. Key material written
        in step 2 is left in place if step 3 fails.
        """
        match request.validate():
            case Err() as e:
                return e
            case Ok(_):
                pass

        name = request.name
        logger.info("Enrolling %s (%s, auth=%s)", name, request.address, request.auth)

        # Provision
        match await self.provisioner.provision(request):
            case Err(cause):
                logger.warning("Provisioning failed for %s: %s", name, cause)
                return Err(ProvisioningFailedError(name, cause))
            case Ok(credential):
                pass

        # Register
        try:
            spec = DeviceSpec.from_credential(request, credential, profile=self.profile)
        except ValueError as e:
            return Err(RegistrationFailedError(name, str(e)))

        match await self.registry.add(spec):
            case Err(error):
                logger.warning("Registration failed for %s: %s", name, error.reason)
                return Err(RegistrationFailedError(name, error.reason))
            case Ok(device):
                pass

        # Verify
        match await self._verify(device):
            case Ok(verification):
                logger.info("Device %s verified", name)
                return Ok(EnrollmentResult(EnrollmentOutcome.REGISTERED, device, verification))
            case Err(failure):
                pass

        logger.warning("Verification failed for %s: %s", name, failure.reason)
        keep = await self.prompt.ask(
            VERIFICATION_FAILED_TITLE,
            f"Device '{name}' was added but could not be reached ({failure.reason}). "
            "Keep it in the device list?",
        )
        if keep:
            return Ok(
                EnrollmentResult(
                    EnrollmentOutcome.REGISTERED_UNVERIFIED, device, verification_error=failure
                )
            )

        # Roll back
        match await self.registry.remove(device.name):
            case Err(error):
                logger.error("Rollback of %s failed: %s", name, error.reason)
                return Err(RollbackFailedError(name, error.reason))
            case Ok(_):
                pass

        logger.info("Rolled back %s", name)
        return Ok(EnrollmentResult(EnrollmentOutcome.ROLLED_BACK, device, verification_error=failure))

    async def _verify(self, device: Device) -> Result[VerificationResult, VerificationError]:
        """Call the verifier once. Errors, exceptions and timeouts all count as failure."""
        try:
            async with asyncio.timeout(self.verify_timeout):
                return await self.verifier.verify(device)
        except TimeoutError:
            return Err(VerificationError(device.name, f"timed out after {self.verify_timeout}s"))
        except Exception as e:  # noqa: BLE001
            logger.debug("Verifier raised for %s", device.name, exc_info=True)
            return Err(VerificationError(device.name, f"{type(e).__name__}: {e}"))


def build_coordinator(
    settings: Settings,
    prompt: ConfirmationPrompt,
    key_source: KeySource | None = None,
    registry: DeviceRegistry | None = None,
    verifier: VerificationService | None = None,
) -> EnrollmentCoordinator:
    """Wire a coordinator from settings, with optional collaborator overrides."""
    provisioner = CredentialProvisioner(
        store=KeyMaterialStore(settings.key_dir),
        key_source=key_source
        or HttpKeySource(port=settings.key_source_port, timeout=settings.fetch_timeout),
        prompt=prompt,
    )
    return EnrollmentCoordinator(
        provisioner=provisioner,
        registry=registry or FileDeviceRegistry(settings.registry_path),
        verifier=verifier or SshVerifier(settings.key_dir, settings.verify_command),
        prompt=prompt,
        verify_timeout=settings.verify_timeout,
        profile=settings.profile,
    )


async def enroll(
    settings: Settings,
    request: EnrollmentRequest,
    prompt: ConfirmationPrompt,
) -> Result[EnrollmentResult, EnrollError]:
    """Enroll a device using the default adapters."""
    return await build_coordinator(settings, prompt).enroll(request)
