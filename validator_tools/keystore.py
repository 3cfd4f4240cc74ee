"""EIP-2335 keystore helpers: pubkey lookup, discovery and decryption."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Union

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2, scrypt

from .crypto import pubkey_from_privkey
from .exceptions import ConfigError, ParseError
from .spec.constants import BLS_PUBKEY_LENGTH
from .utils import decode_hex

logger = logging.getLogger(__name__)

DEFAULT_KEYSTORE_PREFIX = "keystore-"


def _load_json(keystore_path: Union[str, Path]) -> dict:
    with open(keystore_path, "r") as f:
        try:
            keystore = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"failed to parse keystore JSON: {keystore_path}: {e}") from e

    if not isinstance(keystore, dict):
        raise ParseError(f"keystore is not a JSON object: {keystore_path}")
    return keystore


def read_keystore_pubkey(keystore_path: Union[str, Path]) -> str:
    """Return the ``pubkey`` field of a keystore as written in the file.

    Raises:
        ParseError: If the file is not JSON or the pubkey is missing or empty
        OSError: If the file cannot be read
    """
    keystore = _load_json(keystore_path)
    pubkey = keystore.get("pubkey")
    if not pubkey or not isinstance(pubkey, str):
        raise ParseError(f"empty or null pubkey in keystore: {keystore_path}")
    return pubkey


def find_keystores(directory: Union[str, Path], prefix: str = DEFAULT_KEYSTORE_PREFIX) -> list[Path]:
    """Keystore files in ``directory`` whose names start with ``prefix``, sorted.

    Raises:
        ConfigError: If the directory does not exist or holds no keystores
    """
    path = Path(directory)
    if not path.is_dir():
        raise ConfigError(f"keystore directory does not exist: {path}")

    keystores = sorted(p for p in path.iterdir() if p.is_file() and p.name.startswith(prefix))
    if not keystores:
        raise ConfigError(f"no keystores with prefix '{prefix}' found in {path}")

    logger.info(f"Found {len(keystores)} keystore files in {path}")
    return keystores


def _decrypt_keystore(keystore: dict, password: str) -> int:
    """Decrypt an EIP-2335 keystore and return the private key as int."""
    crypto = keystore["crypto"]
    kdf = crypto["kdf"]
    cipher = crypto["cipher"]
    checksum = crypto["checksum"]

    kdf_params = kdf["params"]
    if kdf["function"] == "scrypt":
        decryption_key = scrypt(
            password.encode("utf-8"),
            bytes.fromhex(kdf_params["salt"]),
            key_len=32,
            N=kdf_params["n"],
            r=kdf_params["r"],
            p=kdf_params["p"],
        )
    elif kdf["function"] == "pbkdf2":
        decryption_key = PBKDF2(
            password.encode("utf-8"),
            bytes.fromhex(kdf_params["salt"]),
            dkLen=32,
            count=kdf_params["c"],
            hmac_hash_module=SHA256,
        )
    else:
        raise ValueError(f"Unsupported KDF: {kdf['function']}")

    cipher_message = bytes.fromhex(cipher["message"])
    computed_checksum = hashlib.sha256(decryption_key[16:32] + cipher_message).digest()
    if computed_checksum != bytes.fromhex(checksum["message"]):
        raise ValueError("Invalid password or corrupted keystore")

    if cipher["function"] != "aes-128-ctr":
        raise ValueError(f"Unsupported cipher: {cipher['function']}")

    iv = bytes.fromhex(cipher["params"]["iv"])
    aes = AES.new(decryption_key[:16], AES.MODE_CTR, nonce=b"", initial_value=iv)
    return int.from_bytes(aes.decrypt(cipher_message), "big")


def unlock_keystore(keystore_path: Union[str, Path], password: str) -> bytes:
    """Decrypt a keystore and check the key matches its ``pubkey`` field.

    Only used to catch a wrong passphrase before any signing work starts;
    the private key is not kept.

    Returns:
        The 48-byte public key

    Raises:
        ConfigError: If the passphrase is wrong or the keystore cannot be decrypted
        ParseError: If the keystore is malformed
    """
    keystore = _load_json(keystore_path)
    expected_pubkey = decode_hex(read_keystore_pubkey(keystore_path), "keystore pubkey", BLS_PUBKEY_LENGTH)

    try:
        privkey = _decrypt_keystore(keystore, password)
    except (KeyError, TypeError) as e:
        raise ParseError(f"malformed keystore {keystore_path}: missing {e}") from e
    except ValueError as e:
        raise ConfigError(f"cannot decrypt keystore {keystore_path}: {e}") from e

    pubkey = pubkey_from_privkey(privkey)
    if pubkey != expected_pubkey:
        raise ConfigError(
            f"Public key mismatch in {keystore_path}: derived {pubkey.hex()}, expected {expected_pubkey.hex()}"
        )

    logger.debug(f"Unlocked keystore {keystore_path} for {pubkey.hex()[:16]}...")
    return pubkey
