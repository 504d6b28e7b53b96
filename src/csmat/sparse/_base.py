"""Storage Order and Ownership Enumerations.

Storage order fixes which matrix dimension is "outer":

    CSR (row-major):    outer = rows,    inner = columns
    CSC (column-major): outer = columns, inner = rows

Ownership records whether a matrix allocated its arrays or reads a
caller's buffers in place. Kernels never mutate either kind.
"""

from enum import Enum

__all__ = [
    'CompressedStorage',
    'CSR',
    'CSC',
    'Ownership',
]


class CompressedStorage(Enum):
    """Compressed storage order.

    Attributes:
        CSR: Row-major; each outer slice is a row.
        CSC: Column-major; each outer slice is a column.
    """
    CSR = 'csr'
    CSC = 'csc'

    def other(self) -> 'CompressedStorage':
        """The opposite storage order."""
        return CompressedStorage.CSC if self is CompressedStorage.CSR else CompressedStorage.CSR


CSR = CompressedStorage.CSR
CSC = CompressedStorage.CSC


class Ownership(Enum):
    """Data ownership model.

    Attributes:
        OWNED: csmat allocated the arrays.
               Created by: from_vecs(), empty(), eye(), CsMatBuilder.build()

        BORROWED: Arrays belong to the caller (lists, numpy arrays,
                  memory maps, scipy matrices). The caller must keep them
                  alive and unmodified while the matrix is in use.
                  Created by: from_slices(), from_scipy()

    A transpose_view() shares its source arrays and keeps its ownership.
    """
    OWNED = 'owned'
    BORROWED = 'borrowed'
