"""
Sparse Product Kernels

Matrix-vector accumulation for both storage orders and the row-major
sparse x sparse product. All dimension checks run before any output is
touched; a failed check raises PreconditionError.
"""

import logging
from typing import Any, Optional

import numpy as np

from .._typing import ReadOnlySequence, WritableSequence
from ..errors import CsmatError, check_precondition
from ..sparse import CSC, CSR, CsMat, CsMatBuilder

__all__ = [
    'mul_acc_mat_vec_csc',
    'mul_acc_mat_vec_csr',
    'csr_mul_csr',
]

logger = logging.getLogger("csmat.kernel")


# =============================================================================
# Contract Checks
# =============================================================================

def _check_mat_vec(mat: CsMat, in_vec: ReadOnlySequence, res_vec: WritableSequence) -> None:
    check_precondition(
        mat.cols == len(in_vec),
        CsmatError.ERROR_DIMENSION_MISMATCH,
        f"Matrix and vector dims must agree: {mat.cols} != {len(in_vec)}",
    )
    check_precondition(
        mat.rows == len(res_vec),
        CsmatError.ERROR_DIMENSION_MISMATCH,
        f"Matrix and res vector dims must agree: {mat.rows} != {len(res_vec)}",
    )


# =============================================================================
# Matrix-Vector Accumulation
# =============================================================================

def mul_acc_mat_vec_csc(mat: CsMat, in_vec: ReadOnlySequence, res_vec: WritableSequence) -> None:
    """
    Accumulate res_vec += mat * in_vec for a CSC matrix.

    Each column c scatters in_vec[c] * value into the rows it touches.
    Existing contents of res_vec are added to, never overwritten.

    Args:
        mat: Column-major matrix of shape (R, C)
        in_vec: Dense input of length C
        res_vec: Dense output of length R, modified in place

    Raises:
        PreconditionError: On dimension or storage order mismatch
    """
    _check_mat_vec(mat, in_vec, res_vec)
    check_precondition(
        mat.storage is CSC,
        CsmatError.ERROR_STORAGE_MISMATCH,
        "Matrix must be in CSC format",
    )
    logger.debug("mul_acc_mat_vec_csc: shape=%s nnz=%d", mat.shape, mat.nnz)

    for col_ind, vec in mat.outer_iterator():
        multiplier = in_vec[col_ind]
        for row_ind, value in vec.iter():
            res_vec[row_ind] = res_vec[row_ind] + multiplier * value


def mul_acc_mat_vec_csr(mat: CsMat, in_vec: ReadOnlySequence, res_vec: WritableSequence) -> None:
    """
    Accumulate res_vec += mat * in_vec for a CSR matrix.

    Each row r gathers in_vec[c] * value over its entries into res_vec[r]
    alone, so rows never interfere with each other.

    Args:
        mat: Row-major matrix of shape (R, C)
        in_vec: Dense input of length C
        res_vec: Dense output of length R, modified in place

    Raises:
        PreconditionError: On dimension or storage order mismatch
    """
    _check_mat_vec(mat, in_vec, res_vec)
    check_precondition(
        mat.storage is CSR,
        CsmatError.ERROR_STORAGE_MISMATCH,
        "Matrix must be in CSR format",
    )
    logger.debug("mul_acc_mat_vec_csr: shape=%s nnz=%d", mat.shape, mat.nnz)

    for row_ind, vec in mat.outer_iterator():
        for col_ind, value in vec.iter():
            res_vec[row_ind] = res_vec[row_ind] + in_vec[col_ind] * value


# =============================================================================
# Sparse-Sparse Product
# =============================================================================

def _result_dtype(lhs: CsMat, rhs: CsMat) -> Optional[Any]:
    if lhs.dtype is None or rhs.dtype is None:
        return None
    return np.result_type(lhs.dtype, rhs.dtype)


def csr_mul_csr(lhs: CsMat, rhs: CsMat, workspace: WritableSequence) -> CsMat:
    """
    Multiply two CSR matrices, accumulating the result row by row.

    For each row i of lhs, every nonzero (k, lval) selects row k of rhs;
    each (j, rval) in that row adds lval * rval into workspace slot j.
    The occupied slots are then compressed, in ascending order, into row
    i of the result and reset to None. Explicit zeros produced by
    cancellation are kept; only empty slots are skipped.

    For CSC operands, use the transposed views: (A B)^T = B^T A^T.

    Args:
        lhs: Left matrix of shape (rows, k), CSR
        rhs: Right matrix of shape (k, cols), CSR
        workspace: Sequence of length cols holding None or a running sum,
                   i.e. a list or an object ndarray.
                   Overwritten; left all None on return.

    Returns:
        New owned CSR matrix of shape (rows, cols)

    Raises:
        PreconditionError: On dimension or storage mismatch, or a workspace
            of the wrong length or of a dtype that cannot hold None
    """
    res_cols = rhs.cols
    check_precondition(
        lhs.cols == rhs.rows,
        CsmatError.ERROR_DIMENSION_MISMATCH,
        f"Inner dims must agree: {lhs.shape} x {rhs.shape}",
    )
    check_precondition(
        res_cols == len(workspace),
        CsmatError.ERROR_WORKSPACE_SIZE,
        f"Workspace length {len(workspace)} must equal rhs cols {res_cols}",
    )
    # typed arrays coerce None (float -> nan, int -> TypeError)
    ws_dtype = getattr(workspace, 'dtype', None)
    check_precondition(
        ws_dtype is None or np.dtype(ws_dtype) == np.dtype(object),
        CsmatError.ERROR_WORKSPACE_TYPE,
        f"Workspace of dtype {ws_dtype} cannot hold empty slots; "
        "use a list or an object array",
    )
    check_precondition(
        lhs.storage is rhs.storage,
        CsmatError.ERROR_STORAGE_MISMATCH,
        "Operands must share the same storage order",
    )
    check_precondition(
        rhs.storage is CSR,
        CsmatError.ERROR_STORAGE_MISMATCH,
        "Operands must be in CSR format",
    )
    logger.debug(
        "csr_mul_csr: lhs=%s (nnz=%d) rhs=%s (nnz=%d)",
        lhs.shape, lhs.nnz, rhs.shape, rhs.nnz,
    )

    res = CsMatBuilder(CSR, res_cols, _result_dtype(lhs, rhs))
    for _, lvec in lhs.outer_iterator():
        # reset the accumulators
        for j in range(res_cols):
            workspace[j] = None
        # accumulate the row values
        for k, lval in lvec.iter():
            for col_ind, rval in rhs.outer_view(k).iter():
                prod = lval * rval
                acc = workspace[col_ind]
                workspace[col_ind] = prod if acc is None else acc + prod
        # compress the row into the result and drain the workspace
        res.append_outer(workspace, drain=True)

    return res.build()
