"""
Linear Algebra Operations for Sparse Matrices.

Allocation-friendly front end over the product kernels: output vectors
and workspaces are created on demand, scipy matrices are borrowed, and
the kernel matching the operands' storage order is selected.

Implemented Operations:
    - Sparse matrix-dense vector multiplication (SpMV)
    - Sparse-sparse matrix multiplication
    - Sparse vector dot product
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Union

import numpy as np

from csmat._kernel import csr_mul_csr, mul_acc_mat_vec_csc, mul_acc_mat_vec_csr
from csmat._typing import ReadOnlySequence, WritableSequence, is_sparse_like
from csmat.errors import CsmatError, check_precondition
from csmat.sparse import CSR, CsMat, CsVecView

if TYPE_CHECKING:
    from scipy import sparse as sp

__all__ = [
    'spmv',
    'matmul',
    'workspace',
    'sparse_dot',
]

logger = logging.getLogger("csmat.math")

SparseInput = Union[CsMat, "sp.csr_matrix", "sp.csc_matrix"]


def _as_csmat(mat: SparseInput) -> CsMat:
    if isinstance(mat, CsMat):
        return mat
    if is_sparse_like(mat):
        return CsMat.from_scipy(mat)
    raise TypeError(f"Expected a CsMat or scipy CSR/CSC matrix, got {type(mat).__name__}")


def _inferred_dtype(seq: Any) -> Optional[np.dtype]:
    """dtype of a buffer, inferred from the values for plain sequences."""
    dtype = getattr(seq, 'dtype', None)
    if dtype is not None:
        return np.dtype(dtype)
    if len(seq) == 0:
        return None
    return np.asarray(list(seq)).dtype


def _spmv_dtype(mat: CsMat, x: Any) -> np.dtype:
    dtypes = [d for d in (_inferred_dtype(mat.data), _inferred_dtype(x)) if d is not None]
    return np.result_type(*dtypes) if dtypes else np.dtype(np.float64)


# =============================================================================
# Sparse Matrix-Vector Multiplication
# =============================================================================

def spmv(
    mat: SparseInput,
    x: ReadOnlySequence,
    out: Optional[WritableSequence] = None,
) -> WritableSequence:
    """Sparse matrix-vector multiplication (SpMV).

    Computes out += A * x. When out is None a zeroed numpy vector is
    allocated, so the call returns a fresh product.

    Mathematical Definition:
        out[i] += sum(A[i, j] * x[j] for j in range(n))

    Algorithm:
        CSR: one gather-dot per row, written to out[i] only.
        CSC: each column j scatters x[j] * A[:, j] into out.

    Args:
        mat: Sparse matrix of shape (m, n), CSR or CSC.
        x: Dense vector of length n.
        out: Optional dense vector of length m to accumulate into.

    Returns:
        The accumulated output vector (out itself when given).

    Raises:
        PreconditionError: If x or out lengths don't match the matrix.

    Examples:
        >>> mat = CsMat.from_slices(CSR, 2, 2, [0, 2, 4], [0, 1, 0, 1], [1., 2., 3., 4.])
        >>> spmv(mat, [1.0, 2.0])
        array([ 5., 11.])
    """
    csmat = _as_csmat(mat)
    if out is None:
        out = np.zeros(csmat.rows, dtype=_spmv_dtype(csmat, x))

    logger.debug("spmv: %s matrix %s", csmat.storage.value, csmat.shape)
    if csmat.storage is CSR:
        mul_acc_mat_vec_csr(csmat, x, out)
    else:
        mul_acc_mat_vec_csc(csmat, x, out)
    return out


# =============================================================================
# Sparse-Sparse Matrix Multiplication
# =============================================================================

def workspace(n: int) -> List[Any]:
    """A fresh product workspace of n empty slots."""
    return [None] * n


def matmul(
    lhs: SparseInput,
    rhs: SparseInput,
    workspace: Optional[WritableSequence] = None,
) -> CsMat:
    """Sparse-sparse matrix multiplication.

    Computes C = A * B for two matrices sharing a storage order.

    Algorithm (Row-by-Row, CSR):
        For each row i of A:
            For each non-zero A[i, k]:
                For each non-zero B[k, j]:
                    acc[j] += A[i, k] * B[k, j]
            Compress acc into row i of C

    CSC operands go through the same kernel on transposed views, using
    (A B)^T = B^T A^T; the result is returned in CSC.

    Args:
        lhs: Left sparse matrix of shape (m, k).
        rhs: Right sparse matrix of shape (k, p).
        workspace: Optional reusable workspace of length p (CSR) or m (CSC).

    Returns:
        Sparse matrix of shape (m, p) in the operands' storage order.

    Raises:
        PreconditionError: If inner dimensions or storage orders disagree.

    Examples:
        >>> A = CsMat.eye(3)
        >>> matmul(A, A).nnz
        3
    """
    a = _as_csmat(lhs)
    b = _as_csmat(rhs)
    check_precondition(
        a.storage is b.storage,
        CsmatError.ERROR_STORAGE_MISMATCH,
        f"Operands must share the same storage order: "
        f"{a.storage.value} x {b.storage.value}",
    )
    logger.debug("matmul: %s x %s (%s)", a.shape, b.shape, a.storage.value)

    if a.storage is CSR:
        ws = workspace if workspace is not None else [None] * b.cols
        return csr_mul_csr(a, b, ws)

    check_precondition(
        a.cols == b.rows,
        CsmatError.ERROR_DIMENSION_MISMATCH,
        f"Inner dims must agree: {a.shape} x {b.shape}",
    )
    ws = workspace if workspace is not None else [None] * a.rows
    product_t = csr_mul_csr(b.transpose_view(), a.transpose_view(), ws)
    return product_t.transpose_view()


# =============================================================================
# Sparse Vector Dot Product
# =============================================================================

def sparse_dot(a: CsVecView, b: CsVecView) -> Any:
    """Dot product of two sparse vectors over their common support."""
    return a.dot(b)
