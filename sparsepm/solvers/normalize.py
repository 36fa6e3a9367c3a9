"""In-place vector helpers shared by the power method."""

import torch


__all__ = ["one_max", "zeroize", "mask_indices"]


def one_max(x: torch.Tensor) -> torch.Tensor:
    """Rescale ``x`` in place so its element of largest magnitude becomes 1.

    The scale is the maximum element, or the minimum element when its magnitude is
    larger, so the sign of the dominant element is removed as well. An empty vector
    is left alone. A zero scale gives inf/NaN entries; detecting them is left to
    the caller.

    Args:
        x (torch.Tensor): The vector to rescale.

    Returns:
        torch.Tensor: ``x``.
    """
    if x.numel() == 0:
        return x
    hi = torch.max(x)
    lo = torch.min(x)
    scale = torch.where(torch.abs(lo) > hi, lo, hi)
    return x.div_(scale)


def zeroize(x: torch.Tensor) -> torch.Tensor:
    return x.zero_()


def mask_indices(x: torch.Tensor, index: torch.Tensor) -> torch.Tensor:
    """Set the entries of ``x`` at ``index`` to zero, in place."""
    if index.numel() > 0:
        x.index_fill_(0, index, 0.0)
    return x
