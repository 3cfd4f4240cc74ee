"""Deposit data verification."""

from .data import (
    DepositCriteria,
    DepositRecord,
    expected_pubkeys,
    load_deposit_data,
    parse_deposit_data,
    validate,
    verify,
)

__all__ = [
    "DepositCriteria",
    "DepositRecord",
    "expected_pubkeys",
    "load_deposit_data",
    "parse_deposit_data",
    "validate",
    "verify",
]
