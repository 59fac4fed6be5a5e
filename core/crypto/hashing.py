"""
Hashing Utilities
Hash primitive registry and hex boundary codecs for tree commitments.

This module provides:
- SHA-256 hashing for raw bytes (the default primitive)
- A registry of fixed-size hashlib primitives selectable by name
- Canonical hashing for structured objects (via dumps_canonical)
- Lowercase hex encoding/decoding used at the system boundary

Security/Determinism Notes:
- Always hash raw bytes exactly as given
- Internal combination operates on raw digests, never on hex strings
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
import re
from typing import Any, Callable

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import InvalidDigestException, UnsupportedAlgorithmException


HashFunction = Callable[[bytes], bytes]

DEFAULT_ALGORITHM = "sha256"

_HEX_RE = re.compile(r"[0-9a-f]*")


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def sha3_256(data: bytes) -> bytes:
    """Compute SHA3-256 hash of raw bytes."""
    return hashlib.sha3_256(data).digest()


def blake2b256(data: bytes) -> bytes:
    """Compute BLAKE2b hash of raw bytes truncated to a 32-byte digest size."""
    return hashlib.blake2b(data, digest_size=32).digest()


def blake2s256(data: bytes) -> bytes:
    """Compute BLAKE2s hash of raw bytes (32-byte digest)."""
    return hashlib.blake2s(data).digest()


HASH_FUNCTIONS: dict[str, HashFunction] = {
    "sha256": sha256,
    "sha3_256": sha3_256,
    "blake2b256": blake2b256,
    "blake2s256": blake2s256,
}


def get_hash_function(name: str | None = None) -> HashFunction:
    """
    Look up a hash primitive by name.

    Args:
        name: Registered algorithm name (defaults to sha256)

    Returns:
        Callable mapping bytes to a fixed-size digest

    Raises:
        UnsupportedAlgorithmException: If the name is not a registered string
    """
    if name is not None and not isinstance(name, str):
        raise UnsupportedAlgorithmException(
            message=f"Hash algorithm name must be a string, got {type(name).__name__}",
            algorithm=repr(name),
            supported=sorted(HASH_FUNCTIONS),
        )
    key = (name or DEFAULT_ALGORITHM).lower().replace("-", "_")
    try:
        return HASH_FUNCTIONS[key]
    except KeyError:
        raise UnsupportedAlgorithmException(
            message=f"Unsupported hash algorithm: {name}",
            algorithm=name,
            supported=sorted(HASH_FUNCTIONS),
        ) from None


def algorithm_name(hash_fn: HashFunction) -> str | None:
    """Return the registered name of a hash primitive, or None if unregistered."""
    for name, fn in HASH_FUNCTIONS.items():
        if fn is hash_fn:
            return name
    return None


def digest_size(hash_fn: HashFunction) -> int:
    """Digest length in bytes produced by a hash primitive."""
    return len(hash_fn(b""))


def hash_canonical(obj: Any, hash_fn: HashFunction = sha256) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = H(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)
        hash_fn: Hash primitive to apply

    Returns:
        Digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return hash_fn(canonical_json.encode("utf-8"))


def to_hex(data: bytes) -> str:
    """
    Convert a digest to its lowercase hexadecimal boundary form.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        'deadbeef'
    """
    return bytes(data).hex()


def from_hex(hex_string: str, expected_length: int | None = None) -> bytes:
    """
    Convert a lowercase hexadecimal digest string back to raw bytes.

    Args:
        hex_string: Lowercase hex string without prefix
        expected_length: Optional digest length in bytes to enforce

    Returns:
        Decoded bytes

    Raises:
        InvalidDigestException: If the string is not lowercase hex, has odd
            length, or does not decode to expected_length bytes
    """
    if not isinstance(hex_string, str):
        raise InvalidDigestException(
            message=f"Digest must be a hex string, got {type(hex_string).__name__}",
        )

    if len(hex_string) % 2 != 0:
        raise InvalidDigestException(
            message=f"Hex digest must have even length, got length {len(hex_string)}",
            value=hex_string,
        )

    if not _HEX_RE.fullmatch(hex_string):
        raise InvalidDigestException(
            message="Hex digest must contain only lowercase hex characters",
            value=hex_string,
        )

    data = bytes.fromhex(hex_string)
    if expected_length is not None and len(data) != expected_length:
        raise InvalidDigestException(
            message=f"Digest must be {expected_length} bytes, got {len(data)}",
            value=hex_string,
        )
    return data


def hash_concat(left: bytes, right: bytes, hash_fn: HashFunction = sha256) -> bytes:
    """
    Hash the concatenation of two byte sequences: H(left || right).

    Order is preserved; the operands are never sorted.
    """
    return hash_fn(bytes(left) + bytes(right))


__all__ = [
    "HashFunction",
    "DEFAULT_ALGORITHM",
    "HASH_FUNCTIONS",
    "sha256",
    "sha3_256",
    "blake2b256",
    "blake2s256",
    "get_hash_function",
    "algorithm_name",
    "digest_size",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "hash_concat",
]
