"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for tree construction and proofs.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Construction & Input Errors
    INVALID_INPUT = "INVALID_INPUT"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Hash Primitive Errors
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"
    INVALID_DIGEST = "INVALID_DIGEST"

    # Proof Errors
    PROOF_FORMAT_ERROR = "PROOF_FORMAT_ERROR"
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    ROOT_MISMATCH = "ROOT_MISMATCH"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class HashTreeError(BaseModel):
    """
    Base error model for structured error communication.

    Used when errors must be reported as data (CLI JSON output)
    rather than raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_INPUT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "HashTreeException":
        """Convert this error model to a raised exception."""
        return HashTreeException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class HashTreeException(Exception):
    """
    Base exception for all hash tree errors.

    Carries structured error information and can be converted
    to/from HashTreeError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "HASHTREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> HashTreeError:
        """Convert this exception to a HashTreeError model."""
        return HashTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidInputException(HashTreeException, ValueError):
    """Raised when tree construction receives an empty item sequence."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_INPUT,
            details=details,
            retryable=False,
        )


class IndexOutOfRangeException(HashTreeException, IndexError):
    """Raised when a leaf index lies outside [0, leaf_count)."""

    def __init__(
        self,
        message: str,
        index: Any = None,
        leaf_count: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["index"] = index
        if leaf_count is not None:
            full_details["leaf_count"] = leaf_count
        super().__init__(
            message=message,
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details=full_details,
            retryable=False,
        )


class UnsupportedAlgorithmException(HashTreeException, ValueError):
    """Raised when an unknown hash primitive is requested."""

    def __init__(
        self,
        message: str,
        algorithm: str | None = None,
        supported: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {"algorithm": algorithm}
        if supported:
            details["supported"] = supported
        super().__init__(
            message=message,
            code=ErrorCodes.UNSUPPORTED_ALGORITHM,
            details=details,
            retryable=False,
        )


class InvalidDigestException(HashTreeException, ValueError):
    """Raised when a boundary digest string cannot be decoded."""

    def __init__(
        self,
        message: str,
        value: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if value is not None:
            details["value"] = value[:80]
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_DIGEST,
            details=details,
            retryable=False,
        )


class ProofFormatException(HashTreeException):
    """Raised when a serialized proof cannot be parsed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_FORMAT_ERROR,
            details=details,
            retryable=False,
        )


class CanonicalizationException(HashTreeException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


__all__ = [
    "ErrorCodes",
    "HashTreeError",
    "HashTreeException",
    "InvalidInputException",
    "IndexOutOfRangeException",
    "UnsupportedAlgorithmException",
    "InvalidDigestException",
    "ProofFormatException",
    "CanonicalizationException",
]
