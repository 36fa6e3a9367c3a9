import torch
from torch import Tensor

__all__ = ["_csc_column_indices", "_csc_matvec_accumulate"]


def _csc_column_indices(sparse_tensor: Tensor) -> Tensor:
    """Expand the compressed column pointers of a CSC tensor.

    Args:
        sparse_tensor (Tensor): The sparse CSC tensor.

    Returns:
        Tensor: The column index of every stored value, aligned with
        ``sparse_tensor.row_indices()``.
    """
    ccol_indices = sparse_tensor.ccol_indices()
    counts = ccol_indices[1:] - ccol_indices[:-1]
    columns = torch.arange(counts.shape[0], device=ccol_indices.device)
    return torch.repeat_interleave(columns, counts)


def _csc_matvec_accumulate(
    sparse_tensor: Tensor, dense_vector: Tensor, out: Tensor
) -> Tensor:
    """Accumulate the product of a sparse CSC tensor and a dense vector into out.

    For each stored entry ``(i, j, value)`` this performs
    ``out[i] += value * dense_vector[j]``.

    Args:
        sparse_tensor (Tensor): The sparse CSC tensor.
        dense_vector (Tensor): The dense vector, of length ``sparse_tensor.shape[1]``.
        out (Tensor): The output vector, of length ``sparse_tensor.shape[0]``.
            Updated in place.

    Returns:
        Tensor: ``out``.
    """
    values = sparse_tensor.values()
    if values.numel() == 0:
        return out
    columns = _csc_column_indices(sparse_tensor)
    rows = sparse_tensor.row_indices()
    return out.index_add_(0, rows, values * dense_vector[columns])
