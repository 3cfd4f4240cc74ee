"""External signer: ``ethdo validator exit --offline``."""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Optional

from ..exceptions import ConfigError, ExternalToolError
from ..log import redact
from ..metrics import signer_duration, signer_failures

logger = logging.getLogger(__name__)


class EthdoSigner:
    """Runs ethdo once per exit against the preparation file in ``work_dir``.

    ethdo reads ``offline-preparation.json`` from its working directory, so
    every call must run in a directory that holds exactly the context of the
    exit being signed.
    """

    def __init__(self, binary: str = "ethdo", passphrase: str = ""):
        self.binary = binary
        self.passphrase = passphrase

    def check_available(self) -> str:
        """Resolve the binary on PATH.

        Raises:
            ConfigError: If the binary cannot be found
        """
        resolved = shutil.which(self.binary)
        if resolved is None:
            raise ConfigError(f"{self.binary} not found in PATH")
        return resolved

    def args(self, keystore_path: Path) -> list[str]:
        return [
            "validator", "exit",
            f"--validator={keystore_path}",
            f"--passphrase={self.passphrase}",
            "--json",
            "--offline",
        ]

    async def sign(
        self,
        keystore_path: Path,
        work_dir: Path,
        log: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ) -> bytes:
        """Return ethdo's combined output, which is the signed exit JSON.

        Raises:
            ExternalToolError: If ethdo cannot start, exits non-zero, or prints
                something that is not a JSON object
        """
        log = log or logger
        args = self.args(keystore_path)
        log.debug(f"Executing command: {self.binary} {' '.join(redact(args, [self.passphrase]))}")

        with signer_duration.time():
            try:
                proc = await asyncio.create_subprocess_exec(
                    self.binary, *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                    cwd=work_dir,
                )
            except OSError as e:
                signer_failures.inc()
                raise ExternalToolError(f"failed to start {self.binary}: {e}") from e

            output, _ = await proc.communicate()

        text = redact([output.decode(errors="replace").strip()], [self.passphrase])[0]
        if proc.returncode != 0:
            signer_failures.inc()
            log.error(f"{self.binary} command failed with exit status {proc.returncode}")
            raise ExternalToolError(f"{self.binary} command failed with exit status {proc.returncode}", text)

        try:
            signed = json.loads(output)
        except ValueError as e:
            signer_failures.inc()
            raise ExternalToolError(f"{self.binary} produced unreadable output", text) from e
        if not isinstance(signed, dict):
            signer_failures.inc()
            raise ExternalToolError(f"{self.binary} output is not a JSON object", text)

        log.debug(f"{self.binary} command completed successfully")
        return output
