"""
Error handling for csmat.

Two failure classes exist:

- FormatError: malformed compressed arrays handed to a matrix constructor.
  This is the only recoverable error boundary.
- PreconditionError: a kernel was called with operands whose shapes,
  storage orders or workspace do not fit together. These are caller bugs
  and are raised before any output is touched.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    'CsmatError',
    'FormatError',
    'PreconditionError',
    'check_precondition',
]


# =============================================================================
# Error Codes
# =============================================================================

CSMAT_OK = 0

# Format errors (10-19)
CSMAT_ERROR_INVALID_SHAPE = 10
CSMAT_ERROR_INDPTR_LENGTH = 11
CSMAT_ERROR_INDPTR_START = 12
CSMAT_ERROR_INDPTR_MONOTONIC = 13
CSMAT_ERROR_NNZ_MISMATCH = 14
CSMAT_ERROR_UNSORTED_INDICES = 15
CSMAT_ERROR_INDEX_OUT_OF_BOUNDS = 16

# Precondition errors (20-29)
CSMAT_ERROR_DIMENSION_MISMATCH = 20
CSMAT_ERROR_STORAGE_MISMATCH = 21
CSMAT_ERROR_WORKSPACE_SIZE = 22
CSMAT_ERROR_WORKSPACE_TYPE = 23


_ERROR_MESSAGES = {
    CSMAT_OK: "Success",
    CSMAT_ERROR_INVALID_SHAPE: "Invalid shape",
    CSMAT_ERROR_INDPTR_LENGTH: "Outer pointer length does not match outer dimension",
    CSMAT_ERROR_INDPTR_START: "Outer pointer does not start at zero",
    CSMAT_ERROR_INDPTR_MONOTONIC: "Outer pointer is not non-decreasing",
    CSMAT_ERROR_NNZ_MISMATCH: "Non-zero count mismatch",
    CSMAT_ERROR_UNSORTED_INDICES: "Inner indices are not strictly ascending",
    CSMAT_ERROR_INDEX_OUT_OF_BOUNDS: "Inner index out of bounds",
    CSMAT_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    CSMAT_ERROR_STORAGE_MISMATCH: "Storage order mismatch",
    CSMAT_ERROR_WORKSPACE_SIZE: "Workspace size mismatch",
    CSMAT_ERROR_WORKSPACE_TYPE: "Workspace cannot hold empty slots",
}


# =============================================================================
# Exception Classes
# =============================================================================

class CsmatError(Exception):
    """
    Base exception for all csmat errors.

    Carries a numeric error code alongside the message so callers can
    branch on the failure kind without parsing text.
    """

    OK = CSMAT_OK
    ERROR_INVALID_SHAPE = CSMAT_ERROR_INVALID_SHAPE
    ERROR_INDPTR_LENGTH = CSMAT_ERROR_INDPTR_LENGTH
    ERROR_INDPTR_START = CSMAT_ERROR_INDPTR_START
    ERROR_INDPTR_MONOTONIC = CSMAT_ERROR_INDPTR_MONOTONIC
    ERROR_NNZ_MISMATCH = CSMAT_ERROR_NNZ_MISMATCH
    ERROR_UNSORTED_INDICES = CSMAT_ERROR_UNSORTED_INDICES
    ERROR_INDEX_OUT_OF_BOUNDS = CSMAT_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_DIMENSION_MISMATCH = CSMAT_ERROR_DIMENSION_MISMATCH
    ERROR_STORAGE_MISMATCH = CSMAT_ERROR_STORAGE_MISMATCH
    ERROR_WORKSPACE_SIZE = CSMAT_ERROR_WORKSPACE_SIZE
    ERROR_WORKSPACE_TYPE = CSMAT_ERROR_WORKSPACE_TYPE

    def __init__(self, code: int, message: Optional[str] = None):
        """
        Create a csmat exception.

        Args:
            code: One of the CSMAT_ERROR_* codes
            message: Optional detailed message (generic text used if omitted)
        """
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(f"csmat error {code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "CsmatError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(code, msg)


class FormatError(CsmatError, ValueError):
    """Compressed arrays violate the storage invariants."""


class PreconditionError(CsmatError, AssertionError):
    """Kernel operands do not satisfy the kernel's contract.

    Subclasses AssertionError since it always signals a caller bug, but is
    raised explicitly so it is not stripped under ``python -O``.
    """


# =============================================================================
# Checking Helpers
# =============================================================================

def check_precondition(condition: bool, code: int, message: str) -> None:
    """
    Raise PreconditionError unless condition holds.

    Args:
        condition: Result of the contract check
        code: Error code to report on failure
        message: Detailed message for the failure

    Raises:
        PreconditionError: If condition is false
    """
    if not condition:
        raise PreconditionError(code, message)
