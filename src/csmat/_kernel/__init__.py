"""
csmat Kernel Module

Low-level product kernels operating directly on compressed matrices and
caller-owned dense buffers.
"""

from .prod import (
    mul_acc_mat_vec_csc,
    mul_acc_mat_vec_csr,
    csr_mul_csr,
)

__all__ = [
    'mul_acc_mat_vec_csc',
    'mul_acc_mat_vec_csr',
    'csr_mul_csr',
]
