"""Compressed Sparse Matrix.

This module provides CsMat, an immutable view over the three compressed
arrays, and CsMatBuilder, which assembles an owned matrix one outer slice
at a time.

Layout:
    indptr   length outer_dims + 1; slice i spans [indptr[i], indptr[i+1])
    indices  one inner index per stored entry, in [0, inner_dims)
    data     one value per stored entry

Invariants checked on construction from raw arrays:
    - indptr starts at 0, is non-decreasing and ends at nnz
    - indices and data have the same length
    - within each slice, indices are strictly ascending
    - every inner index lies in [0, inner_dims)

Example:
    >>> mat = CsMat.from_slices(CSR, 2, 3, [0, 2, 3], [0, 2, 1], [1., 2., 3.])
    >>> for row, vec in mat.outer_iterator():
    ...     print(row, list(vec.iter()))
    0 [(0, 1.0), (2, 2.0)]
    1 [(1, 3.0)]
"""

import bisect
import logging
import warnings
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from .._typing import ReadOnlySequence, WritableSequence, value_dtype
from ..config import settings
from ..errors import CsmatError, FormatError
from ._base import CompressedStorage, CSR, Ownership
from ._vec import CsVecView

__all__ = ['CsMat', 'CsMatBuilder']

logger = logging.getLogger("csmat.sparse")


# =============================================================================
# Validation
# =============================================================================

def _outer_inner(storage: CompressedStorage, rows: int, cols: int) -> Tuple[int, int]:
    return (rows, cols) if storage is CSR else (cols, rows)


def _validate(
    storage: CompressedStorage,
    rows: int,
    cols: int,
    indptr: ReadOnlySequence,
    indices: ReadOnlySequence,
    data: ReadOnlySequence,
) -> None:
    """Check the compressed invariants, raising FormatError on violation."""
    if rows < 0 or cols < 0:
        raise FormatError(
            CsmatError.ERROR_INVALID_SHAPE,
            f"Dimensions must be non-negative, got ({rows}, {cols})",
        )
    outer, inner = _outer_inner(storage, rows, cols)

    if len(indptr) != outer + 1:
        raise FormatError(
            CsmatError.ERROR_INDPTR_LENGTH,
            f"indptr has length {len(indptr)}, expected {outer + 1}",
        )
    if len(indices) != len(data):
        raise FormatError(
            CsmatError.ERROR_NNZ_MISMATCH,
            f"indices and data lengths differ: {len(indices)} != {len(data)}",
        )

    ptr = np.asarray(indptr, dtype=np.int64)
    nnz = len(indices)
    if ptr[0] != 0:
        raise FormatError(
            CsmatError.ERROR_INDPTR_START,
            f"indptr must start at 0, got {ptr[0]}",
        )
    if outer > 0 and np.any(np.diff(ptr) < 0):
        raise FormatError(
            CsmatError.ERROR_INDPTR_MONOTONIC,
            "indptr must be non-decreasing",
        )
    if ptr[-1] != nnz:
        raise FormatError(
            CsmatError.ERROR_NNZ_MISMATCH,
            f"indptr ends at {ptr[-1]} but there are {nnz} stored entries",
        )
    if nnz == 0:
        return

    idx = np.asarray(indices, dtype=np.int64)
    if settings.check_bounds and (idx.min() < 0 or idx.max() >= inner):
        raise FormatError(
            CsmatError.ERROR_INDEX_OUT_OF_BOUNDS,
            f"inner indices must lie in [0, {inner})",
        )

    if not settings.check_sorted:
        logger.debug("Skipping sorted-index scan (check_sorted disabled)")
        return
    if nnz > 1:
        # Pairs (k, k+1) straddling a slice boundary are not compared.
        within = np.ones(nnz - 1, dtype=bool)
        starts = ptr[1:-1]
        starts = starts[(starts > 0) & (starts < nnz)]
        within[starts - 1] = False
        if np.any(np.diff(idx)[within] <= 0):
            raise FormatError(
                CsmatError.ERROR_UNSORTED_INDICES,
                "inner indices must be strictly ascending within each outer slice",
            )


# =============================================================================
# CsMat
# =============================================================================

class CsMat:
    """Compressed sparse matrix (CSR or CSC).

    A read-only view over indptr/indices/data. The buffers may be any
    random-access sequences: numpy arrays, lists, memory maps or the arrays
    of a scipy matrix. Kernels never write through a CsMat.

    Attributes:
        storage: CompressedStorage.CSR or CompressedStorage.CSC.
        shape: Matrix dimensions (rows, cols).
        nnz: Number of stored entries.
        ownership: Whether csmat allocated the arrays.

    Example:
        >>> mat = CsMat.from_slices(CSC, 5, 5, indptr, indices, data)
        >>> mat.outer_dims  # number of columns
        5
    """

    __slots__ = (
        '_storage', '_shape',
        '_indptr', '_indices', '_data',
        '_ownership',
    )

    def __init__(
        self,
        storage: CompressedStorage,
        shape: Tuple[int, int],
        indptr: ReadOnlySequence,
        indices: ReadOnlySequence,
        data: ReadOnlySequence,
        *,
        ownership: Ownership = Ownership.BORROWED,
        validate: bool = True,
    ):
        """Initialize CsMat.

        Note:
            Prefer the factory methods (from_slices, from_vecs, empty, ...).

        Raises:
            FormatError: If validate is set and the arrays are malformed.
        """
        storage = CompressedStorage(storage)
        rows, cols = int(shape[0]), int(shape[1])
        if validate:
            _validate(storage, rows, cols, indptr, indices, data)
        self._storage = storage
        self._shape = (rows, cols)
        self._indptr = indptr
        self._indices = indices
        self._data = data
        self._ownership = ownership

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_slices(
        cls,
        storage: CompressedStorage,
        rows: int,
        cols: int,
        indptr: ReadOnlySequence,
        indices: ReadOnlySequence,
        data: ReadOnlySequence,
    ) -> 'CsMat':
        """Borrow existing buffers as a matrix.

        Args:
            storage: Storage order.
            rows: Number of rows.
            cols: Number of columns.
            indptr: Outer pointer array.
            indices: Inner index array.
            data: Value array.

        Raises:
            FormatError: If the arrays violate the compressed invariants.
        """
        return cls(storage, (rows, cols), indptr, indices, data,
                   ownership=Ownership.BORROWED)

    @classmethod
    def from_vecs(
        cls,
        storage: CompressedStorage,
        rows: int,
        cols: int,
        indptr: ReadOnlySequence,
        indices: ReadOnlySequence,
        data: ReadOnlySequence,
    ) -> 'CsMat':
        """Like from_slices, but copies the buffers into owned numpy arrays."""
        index_dtype = settings.index_dtype
        return cls(
            storage, (rows, cols),
            np.array(indptr, dtype=index_dtype),
            np.array(indices, dtype=index_dtype),
            np.array(data),
            ownership=Ownership.OWNED,
        )

    @classmethod
    def empty(cls, storage: CompressedStorage, inner_dim: int, dtype: Any = np.float64) -> 'CsMat':
        """Matrix with no outer slices and the given inner dimension."""
        storage = CompressedStorage(storage)
        shape = (0, inner_dim) if storage is CSR else (inner_dim, 0)
        index_dtype = settings.index_dtype
        return cls(
            storage, shape,
            np.zeros(1, dtype=index_dtype),
            np.zeros(0, dtype=index_dtype),
            np.zeros(0, dtype=dtype),
            ownership=Ownership.OWNED,
            validate=False,
        )

    @classmethod
    def eye(cls, n: int, storage: CompressedStorage = CSR, dtype: Any = np.float64) -> 'CsMat':
        """n x n identity matrix."""
        storage = CompressedStorage(storage)
        index_dtype = settings.index_dtype
        return cls(
            storage, (n, n),
            np.arange(n + 1, dtype=index_dtype),
            np.arange(n, dtype=index_dtype),
            np.ones(n, dtype=dtype),
            ownership=Ownership.OWNED,
            validate=False,
        )

    @classmethod
    def from_scipy(cls, mat: Any) -> 'CsMat':
        """Borrow the arrays of a scipy.sparse CSR or CSC matrix.

        Matrices with unsorted indices are sorted on a copy first.

        Raises:
            TypeError: If mat is not in CSR or CSC format.
        """
        fmt = getattr(mat, 'format', None)
        if fmt not in ('csr', 'csc'):
            raise TypeError(
                f"Expected a scipy CSR or CSC matrix, got format {fmt!r}; "
                "convert with .tocsr() or .tocsc() first"
            )
        if not mat.has_sorted_indices:
            warnings.warn(
                "scipy matrix has unsorted indices; sorting a copy",
                UserWarning,
                stacklevel=2,
            )
            mat = mat.sorted_indices()
        rows, cols = mat.shape
        return cls.from_slices(
            CompressedStorage(fmt), rows, cols, mat.indptr, mat.indices, mat.data
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def storage(self) -> CompressedStorage:
        return self._storage

    def storage_type(self) -> CompressedStorage:
        """Storage order of the matrix."""
        return self._storage

    @property
    def is_csr(self) -> bool:
        return self._storage is CSR

    @property
    def is_csc(self) -> bool:
        return self._storage is not CSR

    @property
    def shape(self) -> Tuple[int, int]:
        return self._shape

    @property
    def rows(self) -> int:
        return self._shape[0]

    @property
    def cols(self) -> int:
        return self._shape[1]

    @property
    def outer_dims(self) -> int:
        """Number of outer slices (rows for CSR, columns for CSC)."""
        return _outer_inner(self._storage, *self._shape)[0]

    @property
    def inner_dims(self) -> int:
        """Length of each outer slice."""
        return _outer_inner(self._storage, *self._shape)[1]

    @property
    def nnz(self) -> int:
        return int(self._indptr[-1])

    @property
    def indptr(self) -> ReadOnlySequence:
        return self._indptr

    @property
    def indices(self) -> ReadOnlySequence:
        return self._indices

    @property
    def data(self) -> ReadOnlySequence:
        return self._data

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def dtype(self) -> Optional[np.dtype]:
        """Value dtype, or None when data is a plain Python sequence."""
        return value_dtype(self._data)

    # =========================================================================
    # Outer Access
    # =========================================================================

    def outer_view(self, i: int) -> CsVecView:
        """Sparse view of outer slice i."""
        if not 0 <= i < self.outer_dims:
            raise IndexError(
                f"Outer index {i} out of range for {self.outer_dims} slices"
            )
        start = int(self._indptr[i])
        end = int(self._indptr[i + 1])
        return CsVecView(
            self.inner_dims, self._indices[start:end], self._data[start:end]
        )

    def outer_iterator(self) -> Iterator[Tuple[int, CsVecView]]:
        """Yield (outer_index, CsVecView) ascending by outer index.

        Each call returns a fresh iterator.
        """
        inner = self.inner_dims
        indptr, indices, data = self._indptr, self._indices, self._data
        for i in range(self.outer_dims):
            start = int(indptr[i])
            end = int(indptr[i + 1])
            yield i, CsVecView(inner, indices[start:end], data[start:end])

    def get(self, row: int, col: int) -> Any:
        """Stored value at (row, col), or None if not stored."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Index ({row}, {col}) out of range for shape {self.shape}")
        outer, inner = (row, col) if self._storage is CSR else (col, row)
        start = int(self._indptr[outer])
        end = int(self._indptr[outer + 1])
        pos = bisect.bisect_left(self._indices, inner, start, end)
        if pos < end and self._indices[pos] == inner:
            return self._data[pos]
        return None

    # =========================================================================
    # Derived Matrices
    # =========================================================================

    def append_outer(self, slots: ReadOnlySequence) -> 'CsMat':
        """New matrix with one more outer slice, compressed from dense slots.

        Args:
            slots: Sequence of length inner_dims; None marks an empty slot.

        Raises:
            FormatError: If len(slots) != inner_dims.
        """
        builder = CsMatBuilder.from_matrix(self)
        builder.append_outer(slots)
        return builder.build()

    def append_outer_csvec(self, indices: ReadOnlySequence, data: ReadOnlySequence) -> 'CsMat':
        """New matrix with one more outer slice given as sparse pairs.

        Raises:
            FormatError: If indices are not strictly ascending or out of bounds.
        """
        builder = CsMatBuilder.from_matrix(self)
        builder.append_outer_csvec(indices, data)
        return builder.build()

    def transpose_view(self) -> 'CsMat':
        """The transposed matrix over the same arrays, in the other storage order."""
        return CsMat(
            self._storage.other(),
            (self.cols, self.rows),
            self._indptr, self._indices, self._data,
            ownership=self._ownership,
            validate=False,
        )

    # =========================================================================
    # Export
    # =========================================================================

    def to_dense(self) -> np.ndarray:
        """Dense 2-D copy."""
        dtype = self.dtype
        if dtype is None:
            dtype = np.asarray(list(self._data)).dtype if self.nnz else np.float64
        dense = np.zeros(self._shape, dtype=dtype)
        for outer, vec in self.outer_iterator():
            for inner, value in vec.iter():
                if self._storage is CSR:
                    dense[outer, inner] = value
                else:
                    dense[inner, outer] = value
        return dense

    def to_scipy(self) -> Any:
        """scipy.sparse matrix sharing (numpy views of) this matrix's arrays."""
        from scipy import sparse as sp

        arrays = (np.asarray(self._data), np.asarray(self._indices), np.asarray(self._indptr))
        if self._storage is CSR:
            return sp.csr_matrix(arrays, shape=self._shape)
        return sp.csc_matrix(arrays, shape=self._shape)

    def __repr__(self) -> str:
        return (
            f"CsMat(storage={self._storage.value}, shape={self._shape}, "
            f"nnz={self.nnz}, ownership={self._ownership.value})"
        )


# =============================================================================
# CsMatBuilder
# =============================================================================

class CsMatBuilder:
    """Incremental builder appending one outer slice at a time.

    Example:
        >>> builder = CsMatBuilder(CSR, 3)
        >>> builder.append_outer([1.0, None, 2.0])
        >>> builder.append_outer_csvec([1], [5.0])
        >>> builder.build().shape
        (2, 3)
    """

    def __init__(self, storage: CompressedStorage, inner_dim: int, dtype: Any = None):
        """
        Args:
            storage: Storage order of the matrix being built.
            inner_dim: Length of every outer slice.
            dtype: Value dtype of the built matrix (inferred if None).
        """
        if inner_dim < 0:
            raise FormatError(
                CsmatError.ERROR_INVALID_SHAPE,
                f"inner dimension must be non-negative, got {inner_dim}",
            )
        self._storage = CompressedStorage(storage)
        self._inner_dim = inner_dim
        self._dtype = dtype
        self._indptr: List[int] = [0]
        self._indices: List[int] = []
        self._data: List[Any] = []

    @classmethod
    def from_matrix(cls, mat: CsMat) -> 'CsMatBuilder':
        """Builder pre-filled with a copy of mat's slices."""
        builder = cls(mat.storage, mat.inner_dims, mat.dtype)
        builder._indptr = [int(p) for p in mat.indptr]
        builder._indices = [int(i) for i in mat.indices]
        builder._data = list(mat.data)
        return builder

    @property
    def outer_dims(self) -> int:
        return len(self._indptr) - 1

    @property
    def nnz(self) -> int:
        return len(self._data)

    def append_outer(self, slots: WritableSequence, drain: bool = False) -> None:
        """Append a slice compressed from dense optional slots.

        Args:
            slots: Sequence of length inner_dim; None marks an empty slot.
            drain: Reset every occupied slot to None after reading it.
        """
        if len(slots) != self._inner_dim:
            raise FormatError(
                CsmatError.ERROR_INVALID_SHAPE,
                f"slot count {len(slots)} does not match inner dimension {self._inner_dim}",
            )
        for j in range(self._inner_dim):
            value = slots[j]
            if value is None:
                continue
            self._indices.append(j)
            self._data.append(value)
            if drain:
                slots[j] = None
        self._indptr.append(len(self._data))

    def append_outer_csvec(self, indices: ReadOnlySequence, data: ReadOnlySequence) -> None:
        """Append a slice given as ascending (index, value) pairs."""
        if len(indices) != len(data):
            raise FormatError(
                CsmatError.ERROR_NNZ_MISMATCH,
                f"indices and data lengths differ: {len(indices)} != {len(data)}",
            )
        previous = -1
        for idx in indices:
            idx = int(idx)
            if idx < 0 or idx >= self._inner_dim:
                raise FormatError(
                    CsmatError.ERROR_INDEX_OUT_OF_BOUNDS,
                    f"index {idx} out of bounds for inner dimension {self._inner_dim}",
                )
            if idx <= previous:
                raise FormatError(
                    CsmatError.ERROR_UNSORTED_INDICES,
                    "appended slice indices must be strictly ascending",
                )
            previous = idx
        self._indices.extend(int(i) for i in indices)
        self._data.extend(data)
        self._indptr.append(len(self._data))

    def build(self) -> CsMat:
        """Freeze the appended slices into an owned CsMat."""
        outer = self.outer_dims
        rows, cols = (outer, self._inner_dim) if self._storage is CSR else (self._inner_dim, outer)
        index_dtype = settings.index_dtype
        if self._dtype is not None:
            data = np.asarray(self._data, dtype=self._dtype)
        elif self._data:
            data = np.asarray(self._data)
        else:
            data = np.zeros(0, dtype=np.float64)
        return CsMat(
            self._storage, (rows, cols),
            np.asarray(self._indptr, dtype=index_dtype),
            np.asarray(self._indices, dtype=index_dtype),
            data,
            ownership=Ownership.OWNED,
            validate=False,
        )
