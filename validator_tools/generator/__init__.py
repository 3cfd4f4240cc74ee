"""Voluntary exit generation with an external signer."""

from .generator import VoluntaryExitGenerator
from .signer import EthdoSigner
from .types import ExitTask, GenerationRunState, PrepFile, ValidatorInfo

__all__ = [
    "EthdoSigner",
    "ExitTask",
    "GenerationRunState",
    "PrepFile",
    "ValidatorInfo",
    "VoluntaryExitGenerator",
]
