"""Sparse Vector View.

A CsVecView is one outer slice of a compressed matrix: a dimension plus
two parallel read-only sequences of ascending inner indices and values.
Views never copy; they slice the parent's buffers.
"""

from typing import Any, Iterator, Tuple

import numpy as np

from .._typing import Numeric, ReadOnlySequence
from ..errors import CsmatError, check_precondition

__all__ = ['CsVecView']


class CsVecView:
    """Read-only sparse vector over borrowed index/value sequences.

    Attributes:
        dim: Logical length of the vector.
        indices: Ascending inner indices of the stored entries.
        data: Values, parallel to indices.

    Example:
        >>> v = CsVecView(5, [0, 3], [1.0, 2.0])
        >>> list(v.iter())
        [(0, 1.0), (3, 2.0)]
    """

    __slots__ = ('_dim', '_indices', '_data')

    def __init__(self, dim: int, indices: ReadOnlySequence, data: ReadOnlySequence):
        if len(indices) != len(data):
            raise ValueError(
                f"indices and data lengths differ: {len(indices)} != {len(data)}"
            )
        self._dim = dim
        self._indices = indices
        self._data = data

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def indices(self) -> ReadOnlySequence:
        return self._indices

    @property
    def data(self) -> ReadOnlySequence:
        return self._data

    @property
    def nnz(self) -> int:
        """Number of stored entries."""
        return len(self._indices)

    def __len__(self) -> int:
        return self._dim

    def iter(self) -> Iterator[Tuple[int, Any]]:
        """Yield (inner_index, value) pairs in ascending index order."""
        for k in range(len(self._indices)):
            yield int(self._indices[k]), self._data[k]

    __iter__ = iter

    def nnz_zip(self, other: 'CsVecView') -> Iterator[Tuple[int, Any, Any]]:
        """Sorted-merge intersection with another vector.

        Yields (index, self_value, other_value) for every index stored in
        both vectors, ascending. Indices present in only one are skipped.

        Raises:
            PreconditionError: If the dimensions differ.
        """
        check_precondition(
            self._dim == other._dim,
            CsmatError.ERROR_DIMENSION_MISMATCH,
            f"Vector dims must agree: {self._dim} != {other._dim}",
        )
        lind, ldat = self._indices, self._data
        rind, rdat = other._indices, other._data
        lpos, rpos = 0, 0
        lend, rend = len(lind), len(rind)
        while lpos < lend and rpos < rend:
            li = lind[lpos]
            ri = rind[rpos]
            if li < ri:
                lpos += 1
            elif ri < li:
                rpos += 1
            else:
                yield int(li), ldat[lpos], rdat[rpos]
                lpos += 1
                rpos += 1

    def dot(self, other: 'CsVecView') -> Numeric:
        """Dot product over the common support of both vectors."""
        acc = None
        for _, lval, rval in self.nnz_zip(other):
            prod = lval * rval
            acc = prod if acc is None else acc + prod
        return 0 if acc is None else acc

    def to_dense(self) -> np.ndarray:
        """Dense copy of the vector."""
        dtype = getattr(self._data, 'dtype', None)
        if dtype is None:
            dtype = np.asarray(list(self._data)).dtype if len(self._data) else np.float64
        out = np.zeros(self._dim, dtype=dtype)
        for idx, val in self.iter():
            out[idx] = val
        return out

    def __repr__(self) -> str:
        return f"CsVecView(dim={self._dim}, nnz={self.nnz})"
