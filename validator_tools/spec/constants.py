"""Consensus constants shared by every supported network.

Only the values needed to rebuild signing domains and to check voluntary
exits against a minimal state live here. Per-network values (fork versions,
genesis validators root, fork epochs) belong to ``network_config``.
"""

from typing import Final

# =============================================================================
# Phase 0
# =============================================================================

FAR_FUTURE_EPOCH: Final[int] = 2**64 - 1

SLOTS_PER_EPOCH: Final[int] = 32
SHARD_COMMITTEE_PERIOD: Final[int] = 256

# Sizes in bytes
BLS_PUBKEY_LENGTH: Final[int] = 48
BLS_SIGNATURE_LENGTH: Final[int] = 96
WITHDRAWAL_CREDENTIALS_LENGTH: Final[int] = 32
FORK_VERSION_LENGTH: Final[int] = 4
ROOT_LENGTH: Final[int] = 32

# =============================================================================
# Domain types
# =============================================================================

DOMAIN_DEPOSIT: Final[bytes] = bytes.fromhex("03000000")
DOMAIN_VOLUNTARY_EXIT: Final[bytes] = bytes.fromhex("04000000")

ZERO_ROOT: Final[bytes] = b"\x00" * ROOT_LENGTH

# =============================================================================
# Deposits
# =============================================================================

DEFAULT_DEPOSIT_AMOUNT: Final[int] = 32 * 10**9  # Gwei
