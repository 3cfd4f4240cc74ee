"""Consistency and signature checks over a loaded set of exits."""

import logging
from dataclasses import dataclass
from typing import Optional

from .registry import ValidatorExitSet, VoluntaryExits
from ..exceptions import (
    ConsistencyError,
    NoExitsFoundError,
    RangeMismatchError,
    VerificationError,
)
from ..log import get_logger
from ..metrics import exits_verified
from ..spec.verification import synthetic_validator, verify_exit_and_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifyResponse:
    """Index range of a verified batch."""

    first_index: int
    last_index: int

    def to_dict(self) -> dict:
        return {"first_index": self.first_index, "last_index": self.last_index}


def _require_exits(pubkey: str, exit_set: ValidatorExitSet) -> None:
    if not exit_set.exits:
        raise ConsistencyError(f"no exits found for pubkey {pubkey}")


def validate_count(exits: VoluntaryExits, num_exits: int = 0) -> None:
    """Every key must cover a gap-free index range, ``num_exits`` long if given.

    Raises:
        NoExitsFoundError: If the batch is empty
        ConsistencyError: On a gap, a duplicate or a count mismatch
    """
    if not exits.exits_by_pubkey:
        raise NoExitsFoundError()

    for pubkey, exit_set in exits.exits_by_pubkey.items():
        _require_exits(pubkey, exit_set)

        found = len(exit_set.exits)
        total = exit_set.max_index - exit_set.min_index + 1
        if total != found:
            raise ConsistencyError(f"{found} files found but expected {total} for pubkey {pubkey}")

        if num_exits > 0 and found != num_exits:
            raise ConsistencyError(f"expected {num_exits} exits for pubkey {pubkey} but found {found}")


def validate_indices(exits: VoluntaryExits) -> None:
    """All keys must share the same minimum and maximum validator index.

    The first key found is the reference.

    Raises:
        ConsistencyError: If a key has no exits
        RangeMismatchError: On the first key whose range differs
    """
    if len(exits.exits_by_pubkey) <= 1:
        return

    items = iter(exits.exits_by_pubkey.items())
    ref_pubkey, ref_set = next(items)
    _require_exits(ref_pubkey, ref_set)
    ref_min, ref_max = ref_set.min_index, ref_set.max_index

    for pubkey, exit_set in items:
        _require_exits(pubkey, exit_set)

        if exit_set.min_index != ref_min:
            raise RangeMismatchError("minimum", exit_set.min_index, pubkey, ref_min, ref_pubkey)
        if exit_set.max_index != ref_max:
            raise RangeMismatchError("maximum", exit_set.max_index, pubkey, ref_max, ref_pubkey)


def verify(
    exits: VoluntaryExits,
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> VerifyResponse:
    """Check every exit against its key's constructed state.

    Each exit adds an active, non-exiting validator with the exit's pubkey
    and the batch's withdrawal credentials, then the exit is checked the way
    a Deneb beacon node would process it. The first failure aborts.
    The constructed states grow with every call, so verify a batch once.

    Raises:
        NoExitsFoundError: If the batch is empty
        VerificationError: Naming the pubkey and validator index that failed
    """
    if not exits.exits_by_pubkey:
        raise NoExitsFoundError()

    first_set = next(iter(exits.exits_by_pubkey.values()))
    response = VerifyResponse(first_index=first_set.min_index, last_index=first_set.max_index)

    for pubkey, exit_set in exits.exits_by_pubkey.items():
        key_log = get_logger(__name__, log, pubkey=pubkey)
        state = exit_set.state
        verified = 0

        for record in exit_set.exits:
            state.append_validator(synthetic_validator(record.pubkey, exits.withdrawal_credentials))
            try:
                validator = state.validator_at(record.validator_index)
                verify_exit_and_signature(validator, state, record.to_signed_exit())
            except VerificationError as e:
                key_log.error(f"Failed to verify exit at validator index {record.validator_index}: {e}")
                raise VerificationError(str(e), pubkey=pubkey, validator_index=record.validator_index) from e

            verified += 1
            exits_verified.inc()
            key_log.debug(f"Exit verified for validator index {record.validator_index}")

        key_log.info(f"Exits verified: {verified}/{len(exit_set.exits)}")

    return response
