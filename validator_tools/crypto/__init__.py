"""Cryptographic utilities.

BLS operations use py_ecc's proof-of-possession ciphersuite, the one the
consensus layer signs deposits and voluntary exits with.
"""

import logging

from py_ecc.bls import G2ProofOfPossession as _bls

logger = logging.getLogger(__name__)


def hash_tree_root(obj) -> bytes:
    """Compute the hash tree root of an SSZ object or return bytes directly.

    Args:
        obj: SSZ object with hash_tree_root() method, or 32-byte root

    Returns:
        32-byte hash tree root
    """
    if isinstance(obj, bytes) and not hasattr(obj, "hash_tree_root"):
        if len(obj) == 32:
            return obj
        raise ValueError(f"Expected 32-byte root, got {len(obj)} bytes")

    if hasattr(obj, "hash_tree_root"):
        return bytes(obj.hash_tree_root())

    raise TypeError(f"Cannot compute hash_tree_root of {type(obj)}")


def sign(privkey: int, message: bytes) -> bytes:
    """Sign a message with a BLS private key."""
    return _bls.Sign(privkey, message)


def verify(pubkey: bytes, message: bytes, signature: bytes) -> bool:
    """Verify a BLS signature.

    Malformed points (wrong length, not on the curve) count as an invalid
    signature rather than an error.
    """
    try:
        return _bls.Verify(pubkey, message, signature)
    except Exception as e:
        logger.debug(f"BLS verification raised {type(e).__name__}: {e}")
        return False


def pubkey_from_privkey(privkey: int) -> bytes:
    """Derive public key from private key."""
    return _bls.SkToPk(privkey)


__all__ = [
    "hash_tree_root",
    "sign",
    "verify",
    "pubkey_from_privkey",
]
