"""Data passed between the generator, its workers and the signing tool."""

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from ..beacon.config import BeaconConfig

PREP_FILE_NAME = "offline-preparation.json"
PREP_FILE_VERSION = "3"


@dataclass(frozen=True)
class ExitTask:
    """Sign one exit for ``validator_index`` with the keystore at ``keystore_path``."""

    validator_index: int
    pubkey: str
    keystore_path: Path


@dataclass
class ValidatorInfo:
    index: str
    pubkey: str
    state: str
    withdrawal_credentials: str


@dataclass
class PrepFile:
    """Offline preparation context read by ``ethdo validator exit --offline``."""

    validators: list[ValidatorInfo]
    genesis_validators_root: str
    epoch: str
    genesis_fork_version: str
    exit_fork_version: str
    current_fork_version: str
    bls_to_execution_change_domain_type: str
    voluntary_exit_domain_type: str
    version: str = PREP_FILE_VERSION

    @classmethod
    def for_task(cls, task: ExitTask, config: BeaconConfig, withdrawal_credentials: str) -> "PrepFile":
        """Context describing a single active validator at the task's index."""
        return cls(
            validators=[
                ValidatorInfo(
                    index=str(task.validator_index),
                    pubkey=task.pubkey,
                    state="active_ongoing",
                    withdrawal_credentials=withdrawal_credentials,
                )
            ],
            genesis_validators_root=config.genesis_validators_root,
            epoch=config.epoch,
            genesis_fork_version=config.genesis_fork_version,
            exit_fork_version=config.exit_fork_version,
            current_fork_version=config.current_fork_version,
            bls_to_execution_change_domain_type=config.bls_to_execution_change_domain_type,
            voluntary_exit_domain_type=config.voluntary_exit_domain_type,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        return {"version": data.pop("version"), **data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def write(self, directory: Path) -> Path:
        path = directory / PREP_FILE_NAME
        path.write_text(self.to_json())
        path.chmod(0o600)
        return path


@dataclass
class GenerationRunState:
    """Progress counters for one generation run.

    Only touched from the event loop, and only ever incremented (``completed``
    restarts at zero for every keystore).
    """

    total_keystores: int = 0
    current_keystore: int = 0
    iterations: int = 0
    completed: int = 0

    def start_keystore(self) -> int:
        self.current_keystore += 1
        self.completed = 0
        return self.current_keystore

    def task_done(self) -> None:
        self.completed += 1

    @property
    def percent(self) -> float:
        if not self.iterations:
            return 0.0
        return self.completed * 100 / self.iterations

    def progress_line(self) -> str:
        return (
            f"Progress: Keystore {self.current_keystore}/{self.total_keystores} - "
            f"{self.completed}/{self.iterations} exits generated ({self.percent:.1f}%)"
        )
