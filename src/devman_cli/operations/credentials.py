"""Credential provisioning - turn an enrollment request into a credential.

The request is validated first; an invalid one yields InvalidRequestError.

password   -> PasswordCredential with the password verbatim, no filesystem access
local-key  -> KeyCredential for a key the operator already has, no checks
dev-key    -> fetch the device's key, validate it, store it as <name>_webos;
              an existing key of that name is only replaced after the
              operator agrees
"""

import asyncio
import logging

from devman_cli.lib.errors import KeyConflictAbortedError, ProvisionError
from devman_cli.lib.keys import KeyParser
from devman_cli.lib.keysource import KeySource
from devman_cli.lib.keystore import KeyMaterialStore
from devman_cli.lib.prompt import ConfirmationPrompt
from devman_cli.lib.result import Err, Ok, Result
from devman_cli.models import (
    AuthMode,
    Credential,
    EnrollmentRequest,
    KeyCredential,
    KeyMaterial,
    PasswordCredential,
    generated_key_name,
)

logger = logging.getLogger(__name__)

OVERWRITE_TITLE = "Overwrite private key"


class CredentialProvisioner:
    """Produces the credential an enrollment registers with."""

    def __init__(
        self,
        store: KeyMaterialStore,
        key_source: KeySource,
        prompt: ConfirmationPrompt,
        parser: KeyParser | None = None,
    ) -> None:
        self.store = store
        self.key_source = key_source
        self.prompt = prompt
        self.parser = parser or KeyParser()

    async def provision(self, request: EnrollmentRequest) -> Result[Credential, ProvisionError]:
        # Also guards password / private_key_name below against None
        match request.validate():
            case Err() as e:
                return e
            case Ok(_):
                pass

        match request.auth:
            case AuthMode.PASSWORD:
                return Ok(PasswordCredential(request.password))
            case AuthMode.EXISTING_KEY:
                return Ok(
                    KeyCredential(AuthMode.EXISTING_KEY, request.private_key_name, request.passphrase)
                )
            case AuthMode.GENERATED_KEY:
                return await self._provision_generated_key(request)

    async def _provision_generated_key(
        self, request: EnrollmentRequest
    ) -> Result[Credential, ProvisionError]:
        key_name = generated_key_name(request.name)

        if self.store.exists(key_name):
            overwrite = await self.prompt.ask(
                OVERWRITE_TITLE,
                f"A private key named '{key_name}' already exists in {self.store.key_dir}. "
                "Replace it with the key from the device?",
            )
            if not overwrite:
                logger.info("Operator kept existing key %s, aborting", key_name)
                return Err(KeyConflictAbortedError(key_name))

        match await self.key_source.fetch(request.address):
            case Err() as e:
                return e
            case Ok(data):
                material = KeyMaterial(key_name, data)

        # Unparseable keys must never reach the disk
        match self.parser.parse(material.key_name, material.data, request.passphrase):
            case Err() as e:
                return e
            case Ok(_):
                pass

        match await asyncio.to_thread(self.store.write, material.key_name, material.data):
            case Err() as e:
                return e
            case Ok(_):
                pass

        return Ok(KeyCredential(AuthMode.GENERATED_KEY, key_name, request.passphrase))
