import numbers
from typing import Any

import torch


__all__ = [
    "_is_bool",
    "_is_callable",
    "_is_float",
    "_is_int",
    "_is_torch_tensor",
    "_is_torch_f32_f64",
    "_is_nonneg_int",
    "_is_pos_float",
    "_is_pos_int",
    "_is_vector",
]


def _is_bool(param: Any, param_name: str):
    if not isinstance(param, bool):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, but expected type bool"
        )


def _is_callable(param: Any, param_name: str):
    if not callable(param):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, but expected a callable"
        )


def _is_float(param: Any, param_name: str):
    if not isinstance(param, float):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, but expected type float"
        )


def _is_int(param: Any, param_name: str):
    # bool is a subclass of int, but never a valid index or count
    if not isinstance(param, numbers.Integral) or isinstance(param, bool):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, but expected type int"
        )


def _is_torch_tensor(param: Any, param_name: str):
    if not isinstance(param, torch.Tensor):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, "
            "but expected type torch.Tensor"
        )


def _is_torch_f32_f64(param: Any, param_name: str):
    if param not in (torch.float32, torch.float64):
        raise ValueError(
            f"{param_name} must be torch.float32 or torch.float64, "
            f"but received {param}"
        )


def _is_nonneg_int(param: Any, param_name: str):
    _is_int(param, param_name)
    if param < 0:
        raise ValueError(f"{param_name} must be non-negative, but received {param}")


def _is_pos_float(param: Any, param_name: str):
    _is_float(param, param_name)
    if param <= 0:
        raise ValueError(f"{param_name} must be positive, but received {param}")


def _is_pos_int(param: Any, param_name: str):
    _is_int(param, param_name)
    if param <= 0:
        raise ValueError(f"{param_name} must be positive, but received {param}")


def _is_vector(param: Any, param_name: str, length: int):
    _is_torch_tensor(param, param_name)
    if param.ndim != 1:
        raise ValueError(
            f"{param_name} must be a 1D tensor. Received {param.ndim}D tensor."
        )
    if param.shape[0] != length:
        raise ValueError(
            f"{param_name} must have length {length}. Received {param.shape[0]}."
        )
