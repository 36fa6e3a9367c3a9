from dataclasses import dataclass, asdict
import math
from typing import Any, Optional

import torch

from sparsepm.utils import (
    _is_int,
    _is_nonneg_int,
    _is_pos_float,
    _is_torch_f32_f64,
)


__all__ = [
    "PowerMethodConfig",
    "_is_solver_config",
    "_get_solver_name",
]


@dataclass(kw_only=True, frozen=True)
class PowerMethodConfig:
    """Configuration of the power method.

    Attributes:
        iteration_max (int): Maximal number of iterations. Defaults to 500.
        tolerance (float): The iteration stops once the change of the first-norm
          distance between consecutive normalized iterates is below this value.
          Defaults to 1e-5.
        seed (Optional[int]): Seed of the random starting vector. ``None`` seeds
          from the clock, so runs are not reproducible. Defaults to None.
        dtype (torch.dtype): Floating point type used for the iteration.
          Defaults to torch.float64.
    """

    iteration_max: int = 500
    tolerance: float = 1e-5
    seed: Optional[int] = None
    dtype: torch.dtype = torch.float64

    def __post_init__(self):
        _is_nonneg_int(self.iteration_max, "iteration_max")
        _is_pos_float(self.tolerance, "tolerance")
        if not math.isfinite(self.tolerance):
            raise ValueError(f"tolerance must be finite. Received {self.tolerance}")
        if self.seed is not None:
            _is_int(self.seed, "seed")
            # torch.Generator.manual_seed takes a 64-bit seed
            if not -(2**63) <= int(self.seed) < 2**64:
                raise ValueError(
                    f"seed must lie in [-2**63, 2**64). Received {self.seed}"
                )
        _is_torch_f32_f64(self.dtype, "dtype")

    def to_dict(self) -> dict:
        data_dict = asdict(self)
        data_dict["dtype"] = str(self.dtype)  # torch.dtype is not serializable
        return data_dict


def _is_solver_config(param: Any, param_name: str):
    if not isinstance(param, PowerMethodConfig):
        raise TypeError(
            f"{param_name} is of type {type(param).__name__}, "
            "but expected type PowerMethodConfig"
        )


CONFIG_TO_NAME = {
    PowerMethodConfig: "power_method",
}


def _get_solver_name(solver_config: PowerMethodConfig) -> str:
    return CONFIG_TO_NAME.get(solver_config.__class__)
