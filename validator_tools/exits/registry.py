"""Discovery of signed voluntary exit files.

A directory holds one ``<prefix>-<pubkey>.json`` file per exit. Files are
grouped per pubkey; each group gets its own minimal verification state so
the exits can later be checked in the order they were found.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from .filename import EXIT_FILE_SUFFIX, decode_exit_filename
from ..exceptions import (
    ConfigError,
    MissingExpectedPubkeyError,
    NoExitsFoundError,
    ParseError,
    UnexpectedPubkeyError,
)
from ..spec.constants import BLS_SIGNATURE_LENGTH, WITHDRAWAL_CREDENTIALS_LENGTH
from ..spec.network_config import NetworkConfig, load_network_config
from ..spec.types import SignedVoluntaryExit, VoluntaryExit
from ..spec.verification import ExitVerificationState
from ..utils import decode_hex, parse_uint, strip_0x

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitRecord:
    """One signed voluntary exit read from disk."""

    validator_index: int
    epoch: int
    signature: bytes
    pubkey: bytes
    path: Path

    @property
    def pubkey_hex(self) -> str:
        return self.pubkey.hex()

    def to_signed_exit(self) -> SignedVoluntaryExit:
        return SignedVoluntaryExit(
            message=VoluntaryExit(epoch=self.epoch, validator_index=self.validator_index),
            signature=self.signature,
        )


@dataclass(frozen=True)
class Parsed:
    record: ExitRecord


@dataclass(frozen=True)
class Skipped:
    path: Path
    reason: str


ScanResult = Union[Parsed, Skipped]


@dataclass
class ValidatorExitSet:
    """All exits found for one pubkey, in scan order."""

    pubkey: bytes
    state: ExitVerificationState
    exits: list[ExitRecord] = field(default_factory=list)

    @property
    def pubkey_hex(self) -> str:
        return self.pubkey.hex()

    @property
    def min_index(self) -> int:
        return min(e.validator_index for e in self.exits)

    @property
    def max_index(self) -> int:
        return max(e.validator_index for e in self.exits)

    def __len__(self) -> int:
        return len(self.exits)


@dataclass
class VoluntaryExits:
    """Exit sets keyed by lowercase, unprefixed hex pubkey."""

    network: NetworkConfig
    withdrawal_credentials: bytes
    exits_by_pubkey: dict[str, ValidatorExitSet] = field(default_factory=dict)

    @property
    def total_exits(self) -> int:
        return sum(len(s) for s in self.exits_by_pubkey.values())

    def __len__(self) -> int:
        return len(self.exits_by_pubkey)


def parse_exit_body(raw: str, pubkey: bytes, path: Path) -> ExitRecord:
    """Parse ``{"message": {"epoch", "validator_index"}, "signature"}``.

    Raises:
        ParseError: On malformed JSON or any malformed field
    """
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}") from e

    if not isinstance(body, dict) or not isinstance(body.get("message"), dict):
        raise ParseError("exit file has no message object")

    message = body["message"]
    return ExitRecord(
        validator_index=parse_uint(message.get("validator_index"), "validator_index", allow_int=False),
        epoch=parse_uint(message.get("epoch"), "epoch", allow_int=False),
        signature=decode_hex(body.get("signature"), "signature", BLS_SIGNATURE_LENGTH),
        pubkey=pubkey,
        path=path,
    )


def scan_exit_file(path: str | Path) -> ScanResult:
    """Read one exit file.

    Malformed names, unreadable files and malformed bodies all come back as
    ``Skipped``.
    """
    path = Path(path)
    try:
        _, pubkey = decode_exit_filename(path.name)
        raw = path.read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"file is not valid UTF-8: {e}") from e
        record = parse_exit_body(text, pubkey, path)
    except ParseError as e:
        return Skipped(path, str(e))
    except OSError as e:
        return Skipped(path, f"cannot read file: {e}")
    return Parsed(record)


def _scan_order(entry: os.DirEntry) -> tuple:
    # Numeric prefixes sort by value so "999-..." comes before "1000-...".
    prefix = entry.name.split("-", 1)[0]
    if prefix.isdigit():
        return (0, int(prefix), entry.name)
    return (1, 0, entry.name)


def _list_exit_files(directory: Path) -> list[Path]:
    with os.scandir(directory) as it:
        entries = [
            e for e in it
            if not e.is_dir() and e.name.endswith(EXIT_FILE_SUFFIX)
        ]
    return [Path(e.path) for e in sorted(entries, key=_scan_order)]


def normalize_pubkey(pubkey: str) -> str:
    return strip_0x(pubkey.strip()).lower()


def load_exits(
    directory: str | Path,
    network: str,
    withdrawal_credentials: str,
    expected_pubkeys: Iterable[str] = (),
    log: Optional[logging.Logger] = None,
) -> VoluntaryExits:
    """Scan ``directory`` and group every valid exit file by pubkey.

    The network and withdrawal credentials are resolved before any file is
    read. Files that cannot be parsed are skipped with a warning. When
    ``expected_pubkeys`` is given, a file for any other key is fatal and
    every listed key must have at least one exit.

    Raises:
        UnknownNetworkError: If ``network`` is not a known network or config file
        ConfigError: If the withdrawal credentials are not 32 bytes of hex
        UnexpectedPubkeyError: If a file belongs to a key that was not expected
        MissingExpectedPubkeyError: If an expected key has no exit files
        NoExitsFoundError: If no exit file was found at all
        OSError: If the directory cannot be listed
    """
    log = log or logger
    network_config = load_network_config(network)

    try:
        creds = decode_hex(withdrawal_credentials, "withdrawal credentials", WITHDRAWAL_CREDENTIALS_LENGTH)
    except ParseError as e:
        raise ConfigError(str(e)) from e

    expected = {normalize_pubkey(p) for p in expected_pubkeys if p.strip()}
    exits = VoluntaryExits(network=network_config, withdrawal_credentials=creds)

    directory = Path(directory)
    for path in _list_exit_files(directory):
        result = scan_exit_file(path)
        if isinstance(result, Skipped):
            log.warning(f"Skipping file {result.path.name}: {result.reason}")
            continue

        record = result.record
        pubkey = record.pubkey_hex
        if expected and pubkey not in expected:
            raise UnexpectedPubkeyError(pubkey)

        exit_set = exits.exits_by_pubkey.get(pubkey)
        if exit_set is None:
            exit_set = ValidatorExitSet(
                pubkey=record.pubkey,
                state=ExitVerificationState.seeded(
                    network_config, record.epoch, record.validator_index
                ),
            )
            exits.exits_by_pubkey[pubkey] = exit_set

        exit_set.exits.append(record)

    for pubkey in sorted(expected):
        if pubkey not in exits.exits_by_pubkey:
            raise MissingExpectedPubkeyError(pubkey)

    if not exits.exits_by_pubkey:
        raise NoExitsFoundError()

    log.info(
        f"Loaded {exits.total_exits} exits for {len(exits)} pubkeys from {directory}"
    )
    return exits
