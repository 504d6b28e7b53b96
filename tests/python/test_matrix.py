"""
Tests for the CsMat container and CsMatBuilder.
"""

import warnings

import numpy as np
import pytest
import scipy.sparse as sp

from csmat import config
from csmat.errors import CsmatError, FormatError
from csmat.sparse import CsMat, CsMatBuilder, CSR, CSC, Ownership, CompressedStorage


class TestCsMatCreation:
    """Test CsMat creation."""

    def test_from_slices_borrows(self):
        """Test from_slices keeps the caller's buffers."""
        indptr = np.array([0, 2, 3, 3])
        indices = np.array([0, 2, 1])
        data = np.array([1.0, 2.0, 3.0])

        mat = CsMat.from_slices(CSR, 3, 4, indptr, indices, data)
        assert mat.shape == (3, 4)
        assert mat.nnz == 3
        assert mat.rows == 3
        assert mat.cols == 4
        assert mat.data is data
        assert mat.ownership == Ownership.BORROWED

    def test_from_vecs_copies(self):
        """Test from_vecs owns copies of the buffers."""
        data = [1.0, 2.0, 3.0]
        mat = CsMat.from_vecs(CSR, 3, 4, [0, 2, 3, 3], [0, 2, 1], data)
        data[0] = 100.0

        assert mat.ownership == Ownership.OWNED
        assert mat.get(0, 0) == pytest.approx(1.0)
        assert mat.indptr.dtype == config.settings.index_dtype

    def test_storage_from_string(self):
        """Test storage order accepts its string value."""
        mat = CsMat.from_slices('csc', 2, 2, [0, 1, 1], [0], [1.0])
        assert mat.storage is CSC
        assert mat.storage_type() is CompressedStorage.CSC
        assert mat.is_csc and not mat.is_csr

    def test_empty(self):
        """Test empty matrices for both storage orders."""
        csr = CsMat.empty(CSR, 5)
        assert csr.shape == (0, 5)
        assert csr.nnz == 0

        csc = CsMat.empty(CSC, 5)
        assert csc.shape == (5, 0)
        assert csc.outer_dims == 0
        assert csc.inner_dims == 5

    def test_eye(self):
        """Test identity construction."""
        mat = CsMat.eye(3, storage=CSC)
        np.testing.assert_array_equal(mat.to_dense(), np.eye(3))

    def test_memory_mapped_buffers(self, tmp_path):
        """Test memory-mapped arrays back a matrix unchanged."""
        np.save(tmp_path / "indptr.npy", np.array([0, 2, 4, 6]))
        np.save(tmp_path / "indices.npy", np.array([0, 2, 1, 3, 0, 3]))
        np.save(tmp_path / "data.npy", np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))

        mat = CsMat.from_slices(
            CSR, 3, 4,
            np.load(tmp_path / "indptr.npy", mmap_mode='r'),
            np.load(tmp_path / "indices.npy", mmap_mode='r'),
            np.load(tmp_path / "data.npy", mmap_mode='r'),
        )
        assert isinstance(mat.data, np.memmap)
        assert mat.get(2, 3) == pytest.approx(6.0)


class TestCsMatValidation:
    """Test FormatError on malformed arrays."""

    @pytest.mark.parametrize("indptr, indices, data, code", [
        ([0, 1], [0], [1.0], CsmatError.ERROR_INDPTR_LENGTH),
        ([1, 1, 1], [0], [1.0], CsmatError.ERROR_INDPTR_START),
        ([0, 2, 1], [0, 1], [1.0, 2.0], CsmatError.ERROR_INDPTR_MONOTONIC),
        ([0, 1, 1], [0, 1], [1.0, 2.0], CsmatError.ERROR_NNZ_MISMATCH),
        ([0, 1, 2], [0, 1], [1.0], CsmatError.ERROR_NNZ_MISMATCH),
        ([0, 2, 2], [1, 0], [1.0, 2.0], CsmatError.ERROR_UNSORTED_INDICES),
        ([0, 2, 2], [1, 1], [1.0, 2.0], CsmatError.ERROR_UNSORTED_INDICES),
        ([0, 1, 2], [0, 3], [1.0, 2.0], CsmatError.ERROR_INDEX_OUT_OF_BOUNDS),
        ([0, 1, 2], [0, -1], [1.0, 2.0], CsmatError.ERROR_INDEX_OUT_OF_BOUNDS),
    ])
    def test_malformed(self, indptr, indices, data, code):
        """Test each invariant violation reports its code."""
        with pytest.raises(FormatError) as excinfo:
            CsMat.from_slices(CSR, 2, 3, indptr, indices, data)
        assert excinfo.value.code == code

    def test_negative_shape(self):
        """Test negative dimensions."""
        with pytest.raises(FormatError):
            CsMat.from_slices(CSR, -1, 3, [0], [], [])

    def test_descending_across_slices_is_valid(self):
        """Test order is only required within a slice."""
        mat = CsMat.from_slices(CSR, 2, 3, [0, 1, 2], [2, 0], [1.0, 2.0])
        assert mat.get(1, 0) == pytest.approx(2.0)

    def test_format_error_is_value_error(self):
        """Test FormatError can be caught as ValueError."""
        with pytest.raises(ValueError):
            CsMat.from_slices(CSR, 1, 1, [0, 2], [0], [1.0])

    def test_check_sorted_disabled(self):
        """Test the sorted scan can be switched off for trusted input."""
        with config.override(check_sorted=False):
            mat = CsMat.from_slices(CSR, 1, 3, [0, 2], [2, 0], [1.0, 2.0])
        assert mat.nnz == 2

        with pytest.raises(FormatError):
            CsMat.from_slices(CSR, 1, 3, [0, 2], [2, 0], [1.0, 2.0])


class TestCsMatAccess:
    """Test outer and element access."""

    def test_outer_iterator_restartable(self, small_csr_matrix):
        """Test iterating twice yields the same slices."""
        first = [(i, list(vec.iter())) for i, vec in small_csr_matrix.outer_iterator()]
        second = [(i, list(vec.iter())) for i, vec in small_csr_matrix.outer_iterator()]

        assert first == second
        assert first[1] == (1, [(1, 3.0), (3, 4.0)])

    def test_outer_view(self, small_csr_matrix):
        """Test a single outer slice."""
        vec = small_csr_matrix.outer_view(2)
        assert vec.dim == 4
        assert vec.nnz == 2
        with pytest.raises(IndexError):
            small_csr_matrix.outer_view(3)

    def test_get(self, small_csr_matrix):
        """Test stored and missing entries."""
        assert small_csr_matrix.get(1, 3) == pytest.approx(4.0)
        assert small_csr_matrix.get(1, 2) is None
        with pytest.raises(IndexError):
            small_csr_matrix.get(3, 0)

    def test_get_csc(self, scenario_csc_matrix):
        """Test element access goes through the column slices."""
        assert scenario_csc_matrix.get(1, 3) == pytest.approx(0.88132896)

    def test_to_dense(self, small_csr_matrix, dense_matrix_small):
        """Test dense export."""
        np.testing.assert_array_equal(small_csr_matrix.to_dense(), dense_matrix_small)

    def test_transpose_view(self, small_csr_matrix, dense_matrix_small):
        """Test the transposed view shares arrays."""
        t = small_csr_matrix.transpose_view()
        assert t.storage is CSC
        assert t.shape == (4, 3)
        assert t.data is small_csr_matrix.data
        np.testing.assert_array_equal(t.to_dense(), dense_matrix_small.T)

    def test_repr(self, small_csr_matrix):
        assert "shape=(3, 4)" in repr(small_csr_matrix)


class TestAppendOuter:
    """Test appending outer slices."""

    def test_append_outer_returns_new_matrix(self, small_csr_matrix):
        """Test the original matrix is untouched."""
        grown = small_csr_matrix.append_outer([None, 7.0, None, 8.0])

        assert grown.shape == (4, 4)
        assert small_csr_matrix.shape == (3, 4)
        assert grown.get(3, 1) == pytest.approx(7.0)
        assert grown.get(3, 0) is None
        assert grown.ownership == Ownership.OWNED

    def test_append_outer_to_empty(self):
        """Test building a matrix from empty."""
        mat = CsMat.empty(CSC, 3).append_outer([1.0, None, 2.0])
        assert mat.shape == (3, 1)
        np.testing.assert_array_equal(mat.to_dense(), [[1.0], [0.0], [2.0]])

    def test_append_outer_wrong_length(self, small_csr_matrix):
        with pytest.raises(FormatError):
            small_csr_matrix.append_outer([None, 1.0])

    def test_append_outer_csvec(self, small_csr_matrix):
        """Test appending sparse pairs."""
        grown = small_csr_matrix.append_outer_csvec([0, 2], [9.0, 8.0])
        assert grown.get(3, 2) == pytest.approx(8.0)

    def test_append_outer_csvec_unsorted(self, small_csr_matrix):
        """Test non-ascending indices are rejected."""
        with pytest.raises(FormatError) as excinfo:
            small_csr_matrix.append_outer_csvec([2, 0], [9.0, 8.0])
        assert excinfo.value.code == CsmatError.ERROR_UNSORTED_INDICES

    def test_append_outer_csvec_out_of_bounds(self, small_csr_matrix):
        with pytest.raises(FormatError) as excinfo:
            small_csr_matrix.append_outer_csvec([4], [1.0])
        assert excinfo.value.code == CsmatError.ERROR_INDEX_OUT_OF_BOUNDS

    def test_append_outer_csvec_negative_index(self, small_csr_matrix):
        """Test a negative index is reported as out of bounds."""
        with pytest.raises(FormatError) as excinfo:
            small_csr_matrix.append_outer_csvec([-1, 2], [1.0, 2.0])
        assert excinfo.value.code == CsmatError.ERROR_INDEX_OUT_OF_BOUNDS


class TestCsMatBuilder:
    """Test the incremental builder."""

    def test_build(self):
        """Test mixed dense and sparse appends."""
        builder = CsMatBuilder(CSR, 3)
        builder.append_outer([1.0, None, 2.0])
        builder.append_outer_csvec([1], [5.0])
        mat = builder.build()

        assert mat.shape == (2, 3)
        assert builder.outer_dims == 2
        np.testing.assert_array_equal(mat.to_dense(), [[1.0, 0.0, 2.0], [0.0, 5.0, 0.0]])

    def test_drain(self):
        """Test draining resets consumed slots."""
        slots = [None, 3.0, 4.0]
        builder = CsMatBuilder(CSR, 3)
        builder.append_outer(slots, drain=True)

        assert slots == [None, None, None]
        assert builder.nnz == 2

    def test_dtype(self):
        """Test an explicit value dtype."""
        builder = CsMatBuilder(CSR, 2, dtype=np.float32)
        builder.append_outer([1.0, None])
        assert builder.build().dtype == np.float32


class TestScipyInterop:
    """Test scipy conversion."""

    def test_from_scipy(self, dense_matrix_small):
        """Test borrowing scipy arrays."""
        scipy_mat = sp.csr_matrix(dense_matrix_small)
        mat = CsMat.from_scipy(scipy_mat)

        assert mat.storage is CSR
        assert mat.data is scipy_mat.data
        np.testing.assert_array_equal(mat.to_dense(), dense_matrix_small)

    def test_to_scipy(self, scenario_csc_matrix):
        """Test export keeps storage order and values."""
        scipy_mat = scenario_csc_matrix.to_scipy()
        assert scipy_mat.format == 'csc'
        np.testing.assert_allclose(scipy_mat.toarray(), scenario_csc_matrix.to_dense())

    def test_unsorted_scipy_warns(self):
        """Test unsorted scipy indices are sorted on a copy."""
        scipy_mat = sp.csr_matrix(
            (np.array([1.0, 2.0]), np.array([2, 0]), np.array([0, 2])), shape=(1, 3)
        )
        with pytest.warns(UserWarning):
            mat = CsMat.from_scipy(scipy_mat)
        assert list(mat.indices) == [0, 2]
        assert list(scipy_mat.indices) == [2, 0]

    def test_sorted_scipy_no_warning(self, dense_matrix_small):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            CsMat.from_scipy(sp.csc_matrix(dense_matrix_small))

    def test_other_formats_rejected(self, dense_matrix_small):
        with pytest.raises(TypeError):
            CsMat.from_scipy(sp.coo_matrix(dense_matrix_small))
