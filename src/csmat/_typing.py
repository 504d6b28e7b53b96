"""
csmat Type Definitions and Protocols.

The kernels never look at concrete buffer or scalar types. They only rely
on capabilities:

    - Numeric: a scalar supporting ``+`` and ``*`` with the ring laws
      (Python int/float/Fraction, NumPy scalars, ...)
    - ReadOnlySequence: random-access read-only storage (list, tuple,
      numpy.ndarray, numpy.memmap, array.array, ...)
    - WritableSequence: storage the kernels may write through
      (output vectors and product workspaces)

This lets a matrix be backed by owned arrays, borrowed buffers or a memory
map without duplicating any kernel logic.
"""

from __future__ import annotations

from typing import (
    Any,
    Optional,
    Protocol,
    runtime_checkable,
)

import numpy as np

__all__ = [
    'Numeric',
    'ReadOnlySequence',
    'WritableSequence',
    'is_sparse_like',
    'value_dtype',
]


# =============================================================================
# Protocol Definitions
# =============================================================================

@runtime_checkable
class Numeric(Protocol):
    """Protocol for scalar types usable as matrix values."""

    def __add__(self, other: Any) -> Any:
        ...

    def __mul__(self, other: Any) -> Any:
        ...


@runtime_checkable
class ReadOnlySequence(Protocol):
    """Protocol for random-access read-only storage."""

    def __getitem__(self, key: Any) -> Any:
        ...

    def __len__(self) -> int:
        ...


@runtime_checkable
class WritableSequence(Protocol):
    """Protocol for storage a kernel writes into in place."""

    def __getitem__(self, key: Any) -> Any:
        ...

    def __setitem__(self, key: Any, value: Any) -> None:
        ...

    def __len__(self) -> int:
        ...


# =============================================================================
# Inspection Helpers
# =============================================================================

def is_sparse_like(obj: Any) -> bool:
    """Check whether obj exposes the scipy-style compressed attributes."""
    return all(
        hasattr(obj, attr) for attr in ('data', 'indices', 'indptr', 'shape')
    )


def value_dtype(seq: Any) -> Optional[np.dtype]:
    """NumPy dtype of a buffer, or None for plain Python sequences."""
    dtype = getattr(seq, 'dtype', None)
    if dtype is None:
        return None
    return np.dtype(dtype)
