"""Voluntary exit discovery, consistency checks and extraction."""

from .extract import extract
from .filename import decode_exit_filename, encode_exit_filename
from .registry import (
    ExitRecord,
    Parsed,
    Skipped,
    ValidatorExitSet,
    VoluntaryExits,
    load_exits,
    scan_exit_file,
)
from .validation import VerifyResponse, validate_count, validate_indices, verify

__all__ = [
    "ExitRecord",
    "Parsed",
    "Skipped",
    "ValidatorExitSet",
    "VerifyResponse",
    "VoluntaryExits",
    "decode_exit_filename",
    "encode_exit_filename",
    "extract",
    "load_exits",
    "scan_exit_file",
    "validate_count",
    "validate_indices",
    "verify",
]
