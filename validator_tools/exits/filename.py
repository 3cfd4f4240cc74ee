"""The ``<prefix>-<pubkey>.json`` naming scheme for exit files.

Generated files use the validator index as prefix, so a directory listing
alone tells which index and key every artifact belongs to.
"""

from ..exceptions import MalformedFilenameError
from ..spec.constants import BLS_PUBKEY_LENGTH
from ..utils import strip_0x

EXIT_FILE_SUFFIX = ".json"


def encode_exit_filename(validator_index: int, pubkey: str | bytes) -> str:
    """Name of the file holding the exit for ``validator_index``."""
    if isinstance(pubkey, bytes):
        pubkey = pubkey.hex()
    return f"{validator_index}-{strip_0x(pubkey)}{EXIT_FILE_SUFFIX}"


def decode_exit_filename(name: str) -> tuple[str, bytes]:
    """Split an exit filename into its prefix and 48-byte pubkey.

    Raises:
        MalformedFilenameError: If the name has no ``.json`` suffix, does not
            have exactly one ``-`` separator, or the pubkey is not 48 bytes of hex
    """
    if not name.endswith(EXIT_FILE_SUFFIX):
        raise MalformedFilenameError(f"invalid filename format: {name}")

    parts = name[: -len(EXIT_FILE_SUFFIX)].split("-")
    if len(parts) != 2:
        raise MalformedFilenameError(f"invalid filename format: {name}")

    prefix, pubkey_hex = parts
    try:
        pubkey = bytes.fromhex(strip_0x(pubkey_hex))
    except ValueError as e:
        raise MalformedFilenameError(f"failed to decode pubkey in {name}: {e}") from e

    if len(pubkey) != BLS_PUBKEY_LENGTH:
        raise MalformedFilenameError(
            f"pubkey in {name} is {len(pubkey)} bytes, expected {BLS_PUBKEY_LENGTH}"
        )
    return prefix, pubkey
