import io

import pytest
import numpy as np
import scipy.sparse as sp
import torch

from sparsepm.sparse import SparseCSCTensor, SparseTripletTensor, load


@pytest.fixture(scope="module")
def dense_data():
    """Generate a random dense matrix with roughly 30% nonzero entries."""
    rng = np.random.default_rng(0)
    dense = rng.standard_normal((40, 30))
    dense[rng.random((40, 30)) < 0.7] = 0.0
    return dense


@pytest.fixture(scope="module")
def csc_tensor(dense_data):
    return SparseCSCTensor(sp.csc_array(dense_data))


class TestSparseTripletTensor:
    def test_shape_grows_with_entries(self):
        triplet = SparseTripletTensor()
        assert triplet.dims() == (0, 0)
        triplet.entry(2, 0, 1.0)
        triplet.entry(0, 4, 1.0)
        assert triplet.dims() == (3, 5)
        assert triplet.nnz == 2

    def test_entry_accepts_numpy_integers(self):
        triplet = SparseTripletTensor()
        triplet.entry(np.int64(1), np.int32(2), 1.0)
        assert triplet.dims() == (2, 3)
        np.testing.assert_array_equal(triplet.scipy().toarray()[1], [0.0, 0.0, 1.0])

    def test_is_uncompressed(self):
        triplet = SparseTripletTensor.from_entries([0], [0], [1.0])
        assert triplet.is_uncompressed()

    def test_compress_sums_repeated_entries(self):
        triplet = SparseTripletTensor.from_entries(
            [0, 0, 1, 1], [0, 0, 0, 1], [1.0, 2.0, 3.0, 4.0], shape=(2, 2)
        )
        csc = triplet.compress()
        assert not csc.is_uncompressed()
        assert csc.nnz == 3
        np.testing.assert_array_equal(
            csc.scipy().toarray(), np.array([[3.0, 0.0], [3.0, 4.0]])
        )

    def test_compress_empty(self):
        csc = SparseTripletTensor().compress()
        assert csc.dims() == (0, 0)
        assert csc.nnz == 0

    def test_from_scipy(self, dense_data):
        triplet = SparseTripletTensor.from_scipy(sp.coo_array(dense_data))
        assert triplet.dims() == dense_data.shape
        np.testing.assert_allclose(triplet.scipy().toarray(), dense_data)

    def test_to_dtype(self):
        triplet = SparseTripletTensor.from_entries([0, 1], [1, 0], [1.5, 2.5])
        moved = triplet.to(dtype=torch.float32)
        assert moved.dtype == torch.float32
        assert moved.dims() == (2, 2)

    @pytest.mark.parametrize(
        "entry,expected_error",
        [
            ((-1, 0, 1.0), IndexError),
            ((0, 3, 1.0), IndexError),
            ((1.0, 0, 1.0), TypeError),
            ((True, 0, 1.0), TypeError),
        ],
        ids=["negative", "outside_fixed_shape", "float_index", "bool_index"],
    )
    def test_invalid_entry(self, entry, expected_error):
        triplet = SparseTripletTensor(shape=(2, 2))
        with pytest.raises(expected_error):
            triplet.entry(*entry)

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            SparseTripletTensor.from_entries([0, 1], [0], [1.0, 2.0])


class TestSparseCSCTensor:
    def test_shape(self, csc_tensor, dense_data):
        assert csc_tensor.shape == dense_data.shape
        assert csc_tensor.dims() == dense_data.shape
        assert csc_tensor.ndim == 2

    def test_dtype(self, csc_tensor):
        assert csc_tensor.dtype == torch.float64

    def test_scipy_conversion(self, csc_tensor, dense_data):
        np.testing.assert_allclose(csc_tensor.scipy().toarray(), dense_data)

    def test_from_other_scipy_format(self, dense_data):
        csc = SparseCSCTensor(sp.csr_array(dense_data))
        np.testing.assert_allclose(csc.scipy().toarray(), dense_data)

    def test_from_torch_tensor(self, dense_data):
        data = torch.tensor(dense_data).to_sparse_csc()
        csc = SparseCSCTensor(data)
        np.testing.assert_allclose(csc.scipy().toarray(), dense_data)

    def test_from_torch_tensor_with_dtype(self, dense_data):
        data = torch.tensor(dense_data).to_sparse_csc()
        csc = SparseCSCTensor(data, dtype=torch.float32)
        assert csc.dtype == torch.float32

    @pytest.mark.parametrize(
        "data",
        [np.eye(3), torch.eye(3), torch.eye(3).to_sparse_csr()],
        ids=["numpy", "dense_torch", "torch_csr"],
    )
    def test_invalid_data(self, data):
        with pytest.raises(TypeError):
            SparseCSCTensor(data)

    def test_entries(self):
        csc = SparseCSCTensor(sp.csc_array(np.array([[1.0, 0.0], [2.0, 3.0]])))
        assert sorted(csc.entries()) == [(0, 0, 1.0), (1, 0, 2.0), (1, 1, 3.0)]

    def test_to_dtype(self, csc_tensor, dense_data):
        moved = csc_tensor.to(dtype=torch.float32)
        assert moved.dtype == torch.float32
        np.testing.assert_allclose(moved.scipy().toarray(), dense_data, rtol=1e-6)
        assert csc_tensor.to(dtype=torch.float64) is csc_tensor

    def test_multiply_accumulate(self, csc_tensor, dense_data):
        x = torch.randn(dense_data.shape[1], dtype=torch.float64)
        out = torch.full((dense_data.shape[0],), 7.0, dtype=torch.float64)
        result = csc_tensor.multiply_accumulate(x, out)
        assert result is out
        np.testing.assert_allclose(out.numpy(), dense_data @ x.numpy(), atol=1e-12)

    def test_multiply_accumulate_keeps_out(self, csc_tensor, dense_data):
        x = torch.randn(dense_data.shape[1], dtype=torch.float64)
        out = torch.ones(dense_data.shape[0], dtype=torch.float64)
        csc_tensor.multiply_accumulate(x, out, clear=False)
        np.testing.assert_allclose(
            out.numpy(), 1.0 + dense_data @ x.numpy(), atol=1e-12
        )

    def test_matmul(self, csc_tensor, dense_data):
        x = torch.randn(dense_data.shape[1], dtype=torch.float64)
        np.testing.assert_allclose(
            (csc_tensor @ x).numpy(), dense_data @ x.numpy(), atol=1e-12
        )

    @pytest.mark.parametrize(
        "x_len,out_len,dtype,expected_error",
        [
            (29, 40, torch.float64, ValueError),
            (30, 41, torch.float64, ValueError),
            (30, 40, torch.float32, TypeError),
        ],
        ids=["short_x", "long_out", "wrong_dtype"],
    )
    def test_multiply_accumulate_invalid(
        self, csc_tensor, x_len, out_len, dtype, expected_error
    ):
        x = torch.zeros(x_len, dtype=dtype)
        out = torch.zeros(out_len, dtype=dtype)
        with pytest.raises(expected_error):
            csc_tensor.multiply_accumulate(x, out)

    def test_empty_matrix_product(self):
        csc = SparseCSCTensor(sp.csc_array((3, 3)), dtype=torch.float64)
        out = torch.ones(3, dtype=torch.float64)
        csc.multiply_accumulate(torch.ones(3, dtype=torch.float64), out)
        assert torch.equal(out, torch.zeros(3, dtype=torch.float64))


class TestLoad:
    def test_load(self):
        triplet = load(io.StringIO("0 0 1\n 0 1 2\n 1 0 3\n 1 1 4"))
        assert triplet.is_uncompressed()
        assert triplet.dims() == (2, 2)
        np.testing.assert_array_equal(
            triplet.compress().scipy().toarray(), np.array([[1.0, 2.0], [3.0, 4.0]])
        )

    def test_load_skips_blank_lines(self):
        triplet = load(io.StringIO("\n0 2 1.5\n\n"))
        assert triplet.dims() == (1, 3)
        assert triplet.nnz == 1

    def test_load_empty(self):
        assert load(io.StringIO("")).dims() == (0, 0)

    @pytest.mark.parametrize(
        "text", ["0 0", "0 a 1.0", "-1 0 1.0"], ids=["short", "not_int", "negative"]
    )
    def test_load_invalid(self, text):
        with pytest.raises(ValueError, match="line 1"):
            load(io.StringIO(text))
