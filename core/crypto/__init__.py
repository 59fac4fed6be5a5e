"""
Core cryptographic utilities.

Hash primitive registry and hex boundary codecs.
"""
from .hashing import (
    DEFAULT_ALGORITHM,
    HASH_FUNCTIONS,
    HashFunction,
    algorithm_name,
    blake2b256,
    blake2s256,
    digest_size,
    from_hex,
    get_hash_function,
    hash_canonical,
    hash_concat,
    sha256,
    sha3_256,
    to_hex,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "HASH_FUNCTIONS",
    "HashFunction",
    "algorithm_name",
    "blake2b256",
    "blake2s256",
    "digest_size",
    "from_hex",
    "get_hash_function",
    "hash_canonical",
    "hash_concat",
    "sha256",
    "sha3_256",
    "to_hex",
]
