"""csmat Sparse Matrix Module.

Compressed sparse containers consumed by the kernels:

    CsMat          Immutable CSR/CSC view over indptr/indices/data
    CsMatBuilder   Append-one-slice-at-a-time construction
    CsVecView      One outer slice; sorted-merge intersection (nnz_zip)

Quick Start:
    >>> from csmat.sparse import CsMat, CSR
    >>> mat = CsMat.from_slices(CSR, 2, 3, [0, 2, 3], [0, 2, 1], [1., 2., 3.])
    >>> mat.get(0, 2)
    2.0
"""

from ._base import (
    CompressedStorage,
    CSR,
    CSC,
    Ownership,
)

from ._vec import CsVecView

from ._matrix import (
    CsMat,
    CsMatBuilder,
)

__all__ = [
    'CompressedStorage',
    'CSR',
    'CSC',
    'Ownership',
    'CsVecView',
    'CsMat',
    'CsMatBuilder',
]
