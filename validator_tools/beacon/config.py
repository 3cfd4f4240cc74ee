"""Live network values fetched from a beacon node for exit generation."""

import asyncio
import logging
from dataclasses import dataclass, fields
from typing import Optional

from .client import BeaconClient
from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class BeaconConfig:
    """Genesis, fork and domain values written into every preparation context.

    Values are kept in the hex/decimal string form the beacon node serves
    them in, which is also the form the signing tool expects.
    """

    genesis_validators_root: str = ""
    genesis_fork_version: str = ""
    exit_fork_version: str = ""
    current_fork_version: str = ""
    epoch: str = ""
    bls_to_execution_change_domain_type: str = ""
    voluntary_exit_domain_type: str = ""

    def validate(self) -> None:
        """Every value must be present before any exit is generated."""
        for f in fields(self):
            if not getattr(self, f.name):
                raise ConfigError(f"{f.name.replace('_', ' ')} is required")


def _parse_epoch(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def derive_exit_epoch(spec: dict) -> str:
    """Epoch written into preparation contexts.

    The larger of MIN_VALIDATOR_WITHDRAWABILITY_DELAY and CAPELLA_FORK_EPOCH.
    Why the maximum of these two unrelated values is used is not documented
    upstream; the rule is kept as-is.
    """
    candidates = [
        epoch
        for epoch in (
            _parse_epoch(spec.get("CAPELLA_FORK_EPOCH")),
            _parse_epoch(spec.get("MIN_VALIDATOR_WITHDRAWABILITY_DELAY")),
        )
        if epoch is not None
    ]
    if not candidates:
        return ""
    return str(max(candidates))


async def fetch_beacon_config(client: BeaconClient) -> BeaconConfig:
    """Assemble a BeaconConfig from the genesis, fork and spec endpoints."""
    logger.info(f"Fetching beacon config from {client.base_url}")

    genesis, fork, spec = await asyncio.gather(
        client.get_genesis(),
        client.get_fork("head"),
        client.get_spec(),
    )

    config = BeaconConfig(
        genesis_validators_root=genesis.get("genesis_validators_root", ""),
        genesis_fork_version=genesis.get("genesis_fork_version", ""),
        exit_fork_version=spec.get("CAPELLA_FORK_VERSION", ""),
        current_fork_version=fork.get("current_version", ""),
        epoch=derive_exit_epoch(spec),
        bls_to_execution_change_domain_type=spec.get("DOMAIN_BLS_TO_EXECUTION_CHANGE", ""),
        voluntary_exit_domain_type=spec.get("DOMAIN_VOLUNTARY_EXIT", ""),
    )

    logger.info(f"Genesis validators root: {config.genesis_validators_root}")
    logger.info(f"Genesis version: {config.genesis_fork_version}")
    logger.info(f"Exit fork version: {config.exit_fork_version}")
    logger.info(f"Current fork version: {config.current_fork_version}")
    logger.info(f"Epoch: {config.epoch}")
    logger.info(f"BLS to execution change domain: {config.bls_to_execution_change_domain_type}")
    logger.info(f"Voluntary exit domain: {config.voluntary_exit_domain_type}")

    return config
