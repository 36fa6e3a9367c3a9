from typing import Iterable, Optional, TextIO, Tuple, Union

import numpy as np
from scipy.sparse import coo_array, csc_array, issparse
import torch

from .ops import _csc_column_indices, _csc_matvec_accumulate
from sparsepm.utils import _is_bool, _is_int, _is_torch_f32_f64, _is_vector

SP_NAME = "scipy.sparse"


__all__ = ["SparseTripletTensor", "SparseCSCTensor", "load"]


def _as_device(device: Optional[Union[str, torch.device]]) -> Optional[torch.device]:
    if device is None or isinstance(device, torch.device):
        return device
    if isinstance(device, str):
        return torch.device(device)
    raise TypeError(
        f"Unsupported device type {type(device).__name__}. "
        "Expected str or torch.device."
    )


class _SparseTensor:
    def __init__(self, data: torch.Tensor):
        self._data = data

    @property
    def data(self) -> torch.Tensor:
        return self._data

    @property
    def shape(self) -> torch.Size:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def dtype(self) -> torch.dtype:
        return self.data.dtype

    @property
    def device(self) -> torch.device:
        return self.data.device

    @property
    def nnz(self) -> int:
        return self.data.values().numel()

    def dims(self) -> Tuple[int, int]:
        """Return the number of rows and columns."""
        rows, cols = self.shape
        return int(rows), int(cols)

    def is_uncompressed(self) -> bool:
        """Whether the matrix is still in the triplet (coordinate) form."""
        raise NotImplementedError

    def cpu(self) -> "_SparseTensor":
        return self.to(device="cpu")

    def to(
        self,
        device: Optional[Union[str, torch.device]] = None,
        dtype: Optional[torch.dtype] = None,
    ) -> "_SparseTensor":
        raise NotImplementedError

    def scipy(self):
        raise NotImplementedError

    def __repr__(self) -> str:
        rows, cols = self.dims()
        return (
            f"{self.__class__.__name__}(shape=({rows}, {cols}), nnz={self.nnz}, "
            f"dtype={self.dtype}, device={self.device})"
        )


class SparseTripletTensor(_SparseTensor):
    """Sparse matrix in uncompressed triplet (coordinate) form.

    Entries are kept in insertion order and may repeat a coordinate; repeated
    coordinates are summed by :meth:`compress`. Without an explicit ``shape`` the
    matrix grows to fit every entry added.
    """

    def __init__(
        self,
        shape: Optional[Tuple[int, int]] = None,
        dtype: torch.dtype = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ):
        _is_torch_f32_f64(dtype, "dtype")
        self._device = _as_device(device) or torch.device("cpu")
        self._dtype = dtype
        self._fixed_shape = shape is not None
        if shape is None:
            self._shape = (0, 0)
        else:
            if len(shape) != 2:
                raise ValueError(
                    f"shape must have two elements. Received {len(shape)}"
                )
            for i, size in enumerate(shape):
                _is_int(size, f"shape[{i}]")
                if size < 0:
                    raise ValueError(
                        f"shape must contain non-negative integers. Received {shape}"
                    )
            self._shape = (shape[0], shape[1])
        self._rows = []
        self._cols = []
        self._values = []

    @classmethod
    def from_entries(
        cls,
        rows: Iterable[int],
        cols: Iterable[int],
        values: Iterable[float],
        shape: Optional[Tuple[int, int]] = None,
        dtype: torch.dtype = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "SparseTripletTensor":
        rows, cols, values = list(rows), list(cols), list(values)
        if not len(rows) == len(cols) == len(values):
            raise ValueError(
                "rows, cols and values must have the same length. Received "
                f"{len(rows)}, {len(cols)} and {len(values)}."
            )
        triplet = cls(shape=shape, dtype=dtype, device=device)
        for i, j, value in zip(rows, cols, values):
            triplet.entry(i, j, value)
        return triplet

    @classmethod
    def from_scipy(
        cls,
        data,
        dtype: torch.dtype = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "SparseTripletTensor":
        if not issparse(data):
            raise TypeError(
                f"Unsupported data type {type(data).__name__}. "
                f"Expected a {SP_NAME} matrix or array."
            )
        coo = coo_array(data)
        return cls.from_entries(
            coo.row.tolist(),
            coo.col.tolist(),
            coo.data.tolist(),
            shape=(int(coo.shape[0]), int(coo.shape[1])),
            dtype=dtype,
            device=device,
        )

    def entry(self, i: int, j: int, value: float) -> None:
        """Append the entry ``(i, j) = value``."""
        _is_int(i, "i")
        _is_int(j, "j")
        i, j = int(i), int(j)
        if i < 0 or j < 0:
            raise IndexError(f"Entry index must be non-negative. Received ({i}, {j})")
        if self._fixed_shape:
            if i >= self._shape[0] or j >= self._shape[1]:
                raise IndexError(
                    f"Entry ({i}, {j}) is outside the matrix of shape {self._shape}"
                )
        else:
            self._shape = (max(self._shape[0], i + 1), max(self._shape[1], j + 1))
        self._rows.append(i)
        self._cols.append(j)
        self._values.append(float(value))

    @property
    def data(self) -> torch.Tensor:
        indices = torch.tensor(
            [self._rows, self._cols], dtype=torch.int64, device=self._device
        ).reshape(2, -1)
        values = torch.tensor(self._values, dtype=self._dtype, device=self._device)
        return torch.sparse_coo_tensor(indices, values, size=self._shape)

    @property
    def shape(self) -> torch.Size:
        return torch.Size(self._shape)

    @property
    def dtype(self) -> torch.dtype:
        return self._dtype

    @property
    def device(self) -> torch.device:
        return self._device

    @property
    def nnz(self) -> int:
        return len(self._values)

    def is_uncompressed(self) -> bool:
        return True

    def to(
        self,
        device: Optional[Union[str, torch.device]] = None,
        dtype: Optional[torch.dtype] = None,
    ) -> "SparseTripletTensor":
        return SparseTripletTensor.from_entries(
            self._rows,
            self._cols,
            self._values,
            shape=self._shape if self._fixed_shape else None,
            dtype=dtype or self._dtype,
            device=device or self._device,
        )

    def scipy(self) -> coo_array:
        return coo_array(
            (
                np.asarray(self._values, dtype=np.float64),
                (
                    np.asarray(self._rows, dtype=np.int64),
                    np.asarray(self._cols, dtype=np.int64),
                ),
            ),
            shape=self._shape,
        )

    def compress(self) -> "SparseCSCTensor":
        """Convert to compressed sparse column form, summing repeated entries."""
        csc = self.scipy().tocsc()
        csc.sum_duplicates()
        return SparseCSCTensor(csc, device=self._device, dtype=self._dtype)


class SparseCSCTensor(_SparseTensor):
    """Sparse matrix in compressed sparse column form."""

    def __init__(
        self,
        data: Union[torch.Tensor, csc_array],
        device: Optional[Union[str, torch.device]] = None,
        dtype: Optional[torch.dtype] = None,
    ):
        device = _as_device(device)
        if dtype is not None:
            _is_torch_f32_f64(dtype, "dtype")

        if self._is_sparse_csc_tensor(data):
            if device is not None and data.device != device:
                raise ValueError(
                    f"Device mismatch. Data is on device {data.device}, "
                    f"but device argument is {device}."
                )
            if dtype is not None and data.dtype != dtype:
                data = self._rebuild(data, data.device, dtype)
        elif issparse(data):
            data = self._from_scipy(data, device or torch.device("cpu"), dtype)
        else:
            raise TypeError(
                f"Unsupported data type {type(data).__name__}. "
                f"Expected torch.sparse_csc_tensor or a {SP_NAME} matrix or array."
            )
        super().__init__(data=data)

    def _is_sparse_csc_tensor(self, data) -> bool:
        return isinstance(data, torch.Tensor) and data.layout == torch.sparse_csc

    def _from_scipy(
        self, data, device: torch.device, dtype: Optional[torch.dtype]
    ) -> torch.Tensor:
        data = csc_array(data, copy=True)
        data.sum_duplicates()
        ccol_indices = torch.tensor(data.indptr, dtype=torch.int64, device=device)
        row_indices = torch.tensor(data.indices, dtype=torch.int64, device=device)
        values = torch.tensor(data.data, device=device)
        if dtype is not None:
            values = values.to(dtype=dtype)
        return torch.sparse_csc_tensor(
            ccol_indices, row_indices, values, size=data.shape
        )

    @staticmethod
    def _rebuild(
        data: torch.Tensor, device: torch.device, dtype: torch.dtype
    ) -> torch.Tensor:
        return torch.sparse_csc_tensor(
            data.ccol_indices().to(device=device),
            data.row_indices().to(device=device),
            data.values().to(device=device, dtype=dtype),
            size=data.shape,
        )

    def is_uncompressed(self) -> bool:
        return False

    def to(
        self,
        device: Optional[Union[str, torch.device]] = None,
        dtype: Optional[torch.dtype] = None,
    ) -> "SparseCSCTensor":
        device = _as_device(device) or self.device
        dtype = dtype or self.dtype
        if device == self.device and dtype == self.dtype:
            return self
        return SparseCSCTensor(self._rebuild(self.data, device, dtype))

    def scipy(self) -> csc_array:
        ccol_indices = self.data.ccol_indices().cpu().numpy()
        row_indices = self.data.row_indices().cpu().numpy()
        values = self.data.values().cpu().numpy()
        return csc_array((values, row_indices, ccol_indices), shape=self.data.shape)

    def entries(self) -> Iterable[Tuple[int, int, float]]:
        """Iterate over the stored entries as ``(row, col, value)``."""
        rows = self.data.row_indices().tolist()
        cols = _csc_column_indices(self.data).tolist()
        values = self.data.values().tolist()
        return zip(rows, cols, values)

    def multiply_accumulate(
        self, x: torch.Tensor, out: torch.Tensor, clear: bool = True
    ) -> torch.Tensor:
        """Accumulate ``A @ x`` into ``out``.

        Args:
            x (torch.Tensor): Vector of length ``cols``.
            out (torch.Tensor): Vector of length ``rows``, updated in place.
            clear (bool, optional): Zero ``out`` before accumulating.
              Defaults to True.

        Returns:
            torch.Tensor: ``out``.

        Raises:
            TypeError: If ``x`` or ``out`` is not a tensor of the matrix dtype.
            ValueError: If ``x`` or ``out`` has the wrong shape.
        """
        rows, cols = self.dims()
        _is_vector(x, "x", cols)
        _is_vector(out, "out", rows)
        _is_bool(clear, "clear")
        for name, v in (("x", x), ("out", out)):
            if v.dtype != self.dtype:
                raise TypeError(
                    f"{name} has dtype {v.dtype}, but the matrix has dtype "
                    f"{self.dtype}"
                )

        if clear:
            out.zero_()
        return _csc_matvec_accumulate(self.data, x, out)

    def __matmul__(self, v: torch.Tensor) -> torch.Tensor:
        if not isinstance(v, torch.Tensor) or v.ndim != 1:
            raise ValueError("v must be a 1D tensor.")
        out = torch.zeros(self.shape[0], dtype=self.dtype, device=self.device)
        return self.multiply_accumulate(v, out, clear=False)


def load(
    stream: TextIO,
    dtype: torch.dtype = torch.float64,
    device: Optional[Union[str, torch.device]] = None,
) -> SparseTripletTensor:
    """Read a triplet matrix from a text stream.

    Each non-blank line holds one entry as ``row col value``. The shape is the
    smallest one that fits every entry; an empty stream gives a 0 x 0 matrix.

    Args:
        stream (TextIO): The text stream to read.
        dtype (torch.dtype, optional): Value dtype. Defaults to torch.float64.
        device (Optional[Union[str, torch.device]], optional): Device of the
          matrix. Defaults to CPU.

    Returns:
        SparseTripletTensor: The matrix read from the stream.

    Raises:
        ValueError: If a line is not a valid entry.
    """
    triplet = SparseTripletTensor(dtype=dtype, device=device)
    for line_no, line in enumerate(stream, start=1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 3:
            raise ValueError(
                f"line {line_no}: expected 'row col value', received {line.strip()!r}"
            )
        try:
            i, j, value = int(fields[0]), int(fields[1]), float(fields[2])
        except ValueError as err:
            raise ValueError(
                f"line {line_no}: cannot parse entry {line.strip()!r}"
            ) from err
        try:
            triplet.entry(i, j, value)
        except IndexError as err:
            raise ValueError(f"line {line_no}: {err}") from err
    return triplet
