"""Deposit data files: parsing, expectation checks and signature verification."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..exceptions import CriteriaMismatchError, ParseError, VerificationError
from ..metrics import deposits_verified
from ..spec.constants import (
    DEFAULT_DEPOSIT_AMOUNT,
    DOMAIN_DEPOSIT,
    FORK_VERSION_LENGTH,
    WITHDRAWAL_CREDENTIALS_LENGTH,
)
from ..spec.verification import is_valid_deposit_signature
from ..utils import decode_hex, parse_uint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositCriteria:
    """What the operator expects every deposit record to contain.

    Empty network, empty withdrawal credentials and a zero count are
    wildcards. The amount is always compared.
    """

    network: str = ""
    amount: int = DEFAULT_DEPOSIT_AMOUNT
    withdrawal_credentials: bytes = b""
    count: int = 0

    @classmethod
    def from_options(
        cls,
        network: str = "",
        amount: int = DEFAULT_DEPOSIT_AMOUNT,
        withdrawal_credentials: str = "",
        count: int = 0,
    ) -> "DepositCriteria":
        creds = b""
        if withdrawal_credentials:
            creds = decode_hex(
                withdrawal_credentials, "expected withdrawal credentials", WITHDRAWAL_CREDENTIALS_LENGTH
            )
        return cls(network=network, amount=amount, withdrawal_credentials=creds, count=count)


@dataclass(frozen=True)
class DepositRecord:
    """One entry of a deposit-data file."""

    pubkey: bytes
    withdrawal_credentials: bytes
    amount: int
    signature: bytes
    fork_version: str
    network_name: str
    deposit_message_root: str = ""
    deposit_data_root: str = ""
    deposit_cli_version: str = ""

    @property
    def pubkey_hex(self) -> str:
        return self.pubkey.hex()

    @classmethod
    def from_json(cls, entry: dict) -> "DepositRecord":
        if not isinstance(entry, dict):
            raise ParseError(f"deposit entry must be an object, got {type(entry).__name__}")

        try:
            return cls(
                pubkey=decode_hex(entry["pubkey"], "pubkey"),
                withdrawal_credentials=decode_hex(entry["withdrawal_credentials"], "withdrawal_credentials"),
                amount=parse_uint(entry["amount"], "amount"),
                signature=decode_hex(entry["signature"], "signature"),
                fork_version=str(entry.get("fork_version", "")),
                network_name=str(entry.get("network_name", "")),
                deposit_message_root=str(entry.get("deposit_message_root", "")),
                deposit_data_root=str(entry.get("deposit_data_root", "")),
                deposit_cli_version=str(entry.get("deposit_cli_version", "")),
            )
        except KeyError as e:
            raise ParseError(f"deposit entry is missing field {e.args[0]}") from e


def parse_deposit_data(raw: str) -> list[DepositRecord]:
    """Parse the JSON array produced by the deposit CLI."""
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"failed to unmarshal deposit data: {e}") from e

    if not isinstance(entries, list):
        raise ParseError("deposit data must be a JSON array")

    records = []
    for i, entry in enumerate(entries):
        try:
            records.append(DepositRecord.from_json(entry))
        except ParseError as e:
            raise ParseError(f"deposit entry {i}: {e}") from e
    return records


def load_deposit_data(path: str | Path) -> list[DepositRecord]:
    """Read and parse a deposit-data file.

    Raises:
        ParseError: If the file is not UTF-8 JSON in the deposit-data shape
        OSError: If the file cannot be read
    """
    with open(path, "rb") as f:
        raw = f.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"failed to unmarshal deposit data: file is not valid UTF-8: {e}") from e
    records = parse_deposit_data(text)

    logger.info(f"Loaded {len(records)} deposit records from {path}")
    return records


def validate_record(record: DepositRecord, criteria: DepositCriteria) -> None:
    """Compare one record with the operator's expectations."""
    if criteria.network and record.network_name != criteria.network:
        raise CriteriaMismatchError(
            f"network mismatch: expected {criteria.network}, got {record.network_name}",
            record.pubkey_hex,
        )

    if record.amount != criteria.amount:
        raise CriteriaMismatchError(
            f"amount mismatch: expected {criteria.amount}, got {record.amount}",
            record.pubkey_hex,
        )

    if criteria.withdrawal_credentials and record.withdrawal_credentials != criteria.withdrawal_credentials:
        raise CriteriaMismatchError(
            f"withdrawal credentials mismatch: expected {criteria.withdrawal_credentials.hex()}, "
            f"got {record.withdrawal_credentials.hex()}",
            record.pubkey_hex,
        )


def validate(records: Sequence[DepositRecord], criteria: DepositCriteria) -> None:
    """Check the whole batch against the operator's expectations.

    Raises:
        CriteriaMismatchError: On the count mismatch or the first record that differs
    """
    if criteria.count > 0 and len(records) != criteria.count:
        raise CriteriaMismatchError(f"count mismatch: expected {criteria.count}, got {len(records)}")

    for record in records:
        validate_record(record, criteria)


def verify(records: Sequence[DepositRecord], domain_type: bytes = DOMAIN_DEPOSIT) -> None:
    """Verify every record's signature under its declared fork version.

    Stops at the first failure.

    Raises:
        ParseError: If a record's fork version is not 4 bytes of hex
        VerificationError: If a signature does not verify
    """
    for record in records:
        try:
            fork_version = decode_hex(record.fork_version, "fork_version", FORK_VERSION_LENGTH)
        except ParseError as e:
            raise ParseError(f"failed to decode fork version for pubkey {record.pubkey_hex}: {e}") from e

        try:
            ok = is_valid_deposit_signature(
                pubkey=record.pubkey,
                withdrawal_credentials=record.withdrawal_credentials,
                amount=record.amount,
                signature=record.signature,
                fork_version=fork_version,
                domain_type=domain_type,
            )
        except ValueError as e:
            raise VerificationError(f"invalid deposit: {e}", pubkey=record.pubkey_hex) from e

        if not ok:
            raise VerificationError("invalid deposit signature", pubkey=record.pubkey_hex)

        deposits_verified.inc()
        logger.debug(f"Deposit signature verified for {record.pubkey_hex}")


def expected_pubkeys(records: Sequence[DepositRecord]) -> list[str]:
    """0x-prefixed pubkeys, in file order."""
    return ["0x" + record.pubkey_hex for record in records]


__all__ = [
    "DepositCriteria",
    "DepositRecord",
    "expected_pubkeys",
    "load_deposit_data",
    "parse_deposit_data",
    "validate",
    "validate_record",
    "verify",
]
