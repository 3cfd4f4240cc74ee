"""Beacon node access: REST client and live config assembly."""

from .client import BeaconClient
from .config import BeaconConfig, derive_exit_epoch, fetch_beacon_config

__all__ = [
    "BeaconClient",
    "BeaconConfig",
    "derive_exit_epoch",
    "fetch_beacon_config",
]
