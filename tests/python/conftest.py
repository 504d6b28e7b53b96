"""
Pytest configuration and shared fixtures for csmat tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest
import scipy.sparse as sp

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from csmat.sparse import CsMat, CSR, CSC  # noqa: E402


SCENARIO_VECTOR = [0.1, 0.2, -0.1, 0.3, 0.9]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def scenario_vector():
    """Dense input shared by both matrix-vector scenarios."""
    return list(SCENARIO_VECTOR)


@pytest.fixture
def scenario_csc_matrix():
    """5x5 CSC matrix with 7 stored entries."""
    indptr = [0, 2, 4, 5, 6, 7]
    indices = [2, 3, 3, 4, 2, 1, 3]
    data = [0.35310881, 0.42380633, 0.28035896, 0.58082095,
            0.53350123, 0.88132896, 0.72527863]
    return CsMat.from_slices(CSC, 5, 5, indptr, indices, data)


@pytest.fixture
def scenario_csr_matrix():
    """5x5 CSR matrix with 7 stored entries and an empty row 1."""
    indptr = [0, 3, 3, 5, 6, 7]
    indices = [1, 2, 3, 2, 3, 4, 4]
    data = [0.75672424, 0.1649078, 0.30140296, 0.10358244,
            0.6283315, 0.39244208, 0.57202407]
    return CsMat.from_slices(CSR, 5, 5, indptr, indices, data)


@pytest.fixture
def small_csr_matrix():
    """Create a small test CSR matrix (3x4).

    Matrix:
    [[1, 0, 2, 0],
     [0, 3, 0, 4],
     [5, 0, 0, 6]]
    """
    data = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    indices = np.array([0, 2, 1, 3, 0, 3], dtype=np.int64)
    indptr = np.array([0, 2, 4, 6], dtype=np.int64)
    return CsMat.from_slices(CSR, 3, 4, indptr, indices, data)


@pytest.fixture
def dense_matrix_small():
    """Dense counterpart of small_csr_matrix."""
    return np.array([
        [1, 0, 2, 0],
        [0, 3, 0, 4],
        [5, 0, 0, 6]
    ], dtype=np.float64)


@pytest.fixture
def random_scipy_csr():
    """Factory for seeded random scipy CSR matrices."""
    def make(rows, cols, density=0.3, seed=42):
        return sp.random(rows, cols, density=density, format='csr',
                         random_state=seed, dtype=np.float64)
    return make

