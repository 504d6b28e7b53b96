"""
csmat - Compressed Sparse Matrix Kernels

Numeric kernels over compressed sparse (CSR/CSC) matrices:
- Accumulating sparse matrix x dense vector products (CSR and CSC)
- Row-at-a-time sparse x sparse products for CSR operands
- Storage-agnostic matrices: numpy arrays, lists or memory maps

Modules:
- sparse: CsMat container, CsMatBuilder, CsVecView
- math: spmv / matmul front end
- errors: FormatError, PreconditionError
- config: validation and index precision settings

Example:
    >>> import csmat
    >>> from csmat.sparse import CsMat, CSC
    >>>
    >>> mat = CsMat.from_slices(CSC, 5, 5, indptr, indices, data)
    >>> out = [0.0] * 5
    >>> csmat.mul_acc_mat_vec_csc(mat, x, out)   # out += mat * x
"""

__version__ = '0.1.0'

from . import config
from . import errors
from . import sparse
from . import math

from ._kernel import (
    mul_acc_mat_vec_csc,
    mul_acc_mat_vec_csr,
    csr_mul_csr,
)

from .errors import (
    CsmatError,
    FormatError,
    PreconditionError,
)

from .sparse import (
    CompressedStorage,
    CSR,
    CSC,
    Ownership,
    CsMat,
    CsMatBuilder,
    CsVecView,
)

from .math import (
    spmv,
    matmul,
    workspace,
    sparse_dot,
)

__all__ = [
    '__version__',

    # Modules
    'config',
    'errors',
    'sparse',
    'math',

    # Kernels
    'mul_acc_mat_vec_csc',
    'mul_acc_mat_vec_csr',
    'csr_mul_csr',

    # Errors
    'CsmatError',
    'FormatError',
    'PreconditionError',

    # Containers
    'CompressedStorage',
    'CSR',
    'CSC',
    'Ownership',
    'CsMat',
    'CsMatBuilder',
    'CsVecView',

    # Front end
    'spmv',
    'matmul',
    'workspace',
    'sparse_dot',
]
