"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the error taxonomy and canonical serialization API.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    format_datetime_canonical,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    ErrorCodes,
    HashTreeError,
    HashTreeException,
    IndexOutOfRangeException,
    InvalidDigestException,
    InvalidInputException,
    ProofFormatException,
    UnsupportedAlgorithmException,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "format_datetime_canonical",
    # Errors
    "CanonicalizationException",
    "ErrorCodes",
    "HashTreeError",
    "HashTreeException",
    "IndexOutOfRangeException",
    "InvalidDigestException",
    "InvalidInputException",
    "ProofFormatException",
    "UnsupportedAlgorithmException",
]
