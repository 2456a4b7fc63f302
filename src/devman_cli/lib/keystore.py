"""Local private key store.

Keys live as plain files under one directory (normally ~/.ssh), addressed by
logical key name. Only existence checks and writes are supported; reading and
deleting keys is left to the surrounding filesystem.
"""

import contextlib
import logging
import os
import stat
from pathlib import Path

from devman_cli.lib.errors import KeyMaterialError
from devman_cli.lib.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class KeyMaterialStore:
    """Resolves logical key names to files under key_dir."""

    def __init__(self, key_dir: Path) -> None:
        self.key_dir = Path(key_dir)

    def path_for(self, key_name: str) -> Path:
        return self.key_dir / key_name

    def exists(self, key_name: str) -> bool:
        return self.path_for(key_name).exists()

    def write(self, key_name: str, data: bytes) -> Result[Path, KeyMaterialError]:
        """Write key bytes atomically with owner-only permissions.

        Replaces any existing key of the same name.
        """
        path = self.path_for(key_name)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            self.key_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, stat.S_IRUSR | stat.S_IWUSR)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp, stat.S_IRUSR | stat.S_IWUSR)
            tmp.replace(path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            return Err(KeyMaterialError(key_name, "write", str(e)))

        logger.info("Wrote private key %s to %s", key_name, path)
        return Ok(path)
