"""Pick, for every key, the exit whose index the key actually holds on chain."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from .filename import encode_exit_filename
from .registry import VoluntaryExits, normalize_pubkey
from ..beacon.client import BeaconClient
from ..exceptions import ConsistencyError, NetworkError

logger = logging.getLogger(__name__)

EXTRACTABLE_STATUSES = ("pending_initialized", "pending_queued")


def is_extractable_status(status: str) -> bool:
    return status.startswith("active") or status in EXTRACTABLE_STATUSES


def _index_validators(validators: list[dict]) -> dict[str, tuple[str, str]]:
    by_pubkey = {}
    for entry in validators:
        try:
            pubkey = normalize_pubkey(entry["validator"]["pubkey"])
            by_pubkey[pubkey] = (str(entry["index"]), str(entry.get("status", "")))
        except (KeyError, TypeError, AttributeError) as e:
            raise NetworkError(f"malformed validator entry in beacon response: {e}") from e
    return by_pubkey


async def extract(
    exits: VoluntaryExits,
    client: BeaconClient,
    output_dir: str | Path,
    log: Optional[logging.Logger] = None,
) -> list[Path]:
    """Copy the matching exit of every key into ``output_dir``.

    The finalized validator registry decides which index each key holds.
    A key the beacon node does not know, or whose status is not active or
    pending, aborts the extraction. Output files are named
    ``<index>-<pubkey>.json``.

    Returns:
        Paths of the files written
    """
    log = log or logger
    validators = await client.get_validators("finalized")
    by_pubkey = _index_validators(validators)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for pubkey, exit_set in exits.exits_by_pubkey.items():
        if pubkey not in by_pubkey:
            raise ConsistencyError(f"validator with pubkey {pubkey} not found in beacon state")

        index, status = by_pubkey[pubkey]
        if not is_extractable_status(status):
            raise ConsistencyError(f"validator with pubkey {pubkey} is not active (status: {status})")

        log.info(f"Extracting exit files for validator {pubkey} (index {index}, status {status})")

        for record in exit_set.exits:
            if str(record.validator_index) != index:
                continue

            dest = output_dir / encode_exit_filename(record.validator_index, pubkey)
            shutil.copyfile(record.path, dest)
            written.append(dest)
            log.debug(f"Copied {record.path} to {dest}")

    log.info(f"Extracted {len(written)} exit files for {len(exits)} validators")
    return written
