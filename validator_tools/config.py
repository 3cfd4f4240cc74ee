"""Configuration for voluntary exit generation."""

import os
from dataclasses import dataclass, field

from .exceptions import ConfigError, ParseError
from .keystore import DEFAULT_KEYSTORE_PREFIX
from .spec.constants import WITHDRAWAL_CREDENTIALS_LENGTH
from .utils import decode_hex

DEFAULT_ITERATIONS = 50000
DEFAULT_PROGRESS_INTERVAL = 10.0
DEFAULT_SIGNER_BINARY = "ethdo"


def default_workers() -> int:
    return os.cpu_count() or 1


@dataclass
class GeneratorConfig:
    """Exit generation configuration."""

    output_dir: str = ""
    withdrawal_credentials: str = ""
    passphrase: str = field(default="", repr=False)
    beacon_url: str = "http://localhost:5052"
    keystore_dir: str = ""
    keystore_prefix: str = DEFAULT_KEYSTORE_PREFIX
    iterations: int = DEFAULT_ITERATIONS
    index_start: int = -1
    index_offset: int = 0
    workers: int = field(default_factory=default_workers)
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL
    signer_binary: str = DEFAULT_SIGNER_BINARY
    domain_bls_to_execution_change: str = ""
    check_passphrase: bool = False
    metrics_port: int = 0

    def validate(self) -> None:
        """Reject unusable settings before any network or filesystem work.

        Raises:
            ConfigError: On the first invalid setting
        """
        if not self.output_dir:
            raise ConfigError("output directory is required")
        if not self.beacon_url:
            raise ConfigError("beacon node URL is required")
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if self.iterations < 1:
            raise ConfigError(f"iterations must be at least 1, got {self.iterations}")
        if self.progress_interval <= 0:
            raise ConfigError(f"progress interval must be positive, got {self.progress_interval}")

        try:
            decode_hex(self.withdrawal_credentials, "withdrawal credentials", WITHDRAWAL_CREDENTIALS_LENGTH)
        except ParseError as e:
            raise ConfigError(str(e)) from e

    @property
    def explicit_start_index(self) -> bool:
        return self.index_start >= 0
