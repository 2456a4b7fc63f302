"""Key source - fetch a device's developer private key.

webOS devices in developer mode serve their SSH private key over plain HTTP
on port 9991 while key server mode is on.
"""

import logging
from typing import Protocol

import httpx

from devman_cli.lib.errors import KeySourceError
from devman_cli.lib.result import Err, Ok, Result

logger = logging.getLogger(__name__)

KEY_PATH = "/webos_rsa"


class KeySource(Protocol):
    async def fetch(self, address: str) -> Result[bytes, KeySourceError]: ...


class HttpKeySource:
    """Fetches http://<address>:<port>/webos_rsa."""

    def __init__(
        self,
        port: int = 9991,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.port = port
        self.timeout = timeout
        self.transport = transport

    def url_for(self, address: str) -> str:
        return f"http://{address}:{self.port}{KEY_PATH}"

    async def fetch(self, address: str) -> Result[bytes, KeySourceError]:
        url = self.url_for(address)
        logger.debug("Fetching private key from %s", url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return Err(KeySourceError(address, f"HTTP {e.response.status_code} from {url}"))
        except httpx.HTTPError as e:
            return Err(KeySourceError(address, f"{type(e).__name__}: {e}"))

        if not response.content:
            return Err(KeySourceError(address, "empty key returned"))
        return Ok(response.content)
