"""Domain and signing helper functions.

Implements domain computation and signing root generation.
Reference: https://github.com/ethereum/consensus-specs/blob/master/specs/phase0/beacon-chain.md
"""

from typing import Any, Optional

from .constants import FORK_VERSION_LENGTH, ROOT_LENGTH, ZERO_ROOT
from .types import ForkData, Root, SigningData, Version
from ..crypto import hash_tree_root


def compute_fork_data_root(
    current_version: bytes,
    genesis_validators_root: bytes,
) -> bytes:
    """Return the 32-byte fork data root for the current_version and
    genesis_validators_root.

    This is used as the domain separator in signatures.

    Args:
        current_version: 4-byte fork version
        genesis_validators_root: 32-byte genesis validators root

    Returns:
        32-byte fork data root
    """
    fork_data = ForkData(
        current_version=Version(current_version),
        genesis_validators_root=Root(genesis_validators_root),
    )
    return hash_tree_root(fork_data)


def compute_domain(
    domain_type: bytes,
    fork_version: Optional[bytes] = None,
    genesis_validators_root: Optional[bytes] = None,
) -> bytes:
    """Return the domain for signing.

    Args:
        domain_type: 4-byte domain type
        fork_version: 4-byte fork version (defaults to zeros)
        genesis_validators_root: 32-byte genesis validators root (defaults to zeros)

    Returns:
        32-byte domain

    Raises:
        ValueError: If any input has the wrong length
    """
    if fork_version is None:
        fork_version = b"\x00" * FORK_VERSION_LENGTH
    if genesis_validators_root is None:
        genesis_validators_root = ZERO_ROOT

    if len(domain_type) != 4:
        raise ValueError(f"domain type must be 4 bytes, got {len(domain_type)}")
    if len(fork_version) != FORK_VERSION_LENGTH:
        raise ValueError(f"fork version must be {FORK_VERSION_LENGTH} bytes, got {len(fork_version)}")
    if len(genesis_validators_root) != ROOT_LENGTH:
        raise ValueError(
            f"genesis validators root must be {ROOT_LENGTH} bytes, got {len(genesis_validators_root)}"
        )

    fork_data_root = compute_fork_data_root(fork_version, genesis_validators_root)
    return domain_type + fork_data_root[:28]


def compute_signing_root(ssz_object: Any, domain: bytes) -> bytes:
    """Return the signing root for an object and domain.

    Args:
        ssz_object: SSZ object to sign
        domain: 32-byte domain

    Returns:
        32-byte signing root
    """
    signing_data = SigningData(
        object_root=Root(hash_tree_root(ssz_object)),
        domain=domain,
    )
    return hash_tree_root(signing_data)
