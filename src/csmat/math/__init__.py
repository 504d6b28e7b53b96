"""
csmat Math Module.

Linear algebra front end for compressed sparse matrices:

    - spmv: matrix-vector product, accumulating into an output vector
    - matmul: sparse x sparse product for operands sharing a storage order
    - sparse_dot: dot product of two sparse vectors

Example:
    >>> import csmat.math as cmath
    >>> y = cmath.spmv(mat, x)
    >>> c = cmath.matmul(a, b)
"""

from csmat.math.linalg import (
    spmv,
    matmul,
    workspace,
    sparse_dot,
)

__all__ = [
    "spmv",
    "matmul",
    "workspace",
    "sparse_dot",
]
