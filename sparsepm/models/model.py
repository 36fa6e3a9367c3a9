from abc import ABC, abstractmethod
from typing import Optional, Callable
from warnings import warn

from sparsepm.solvers import PowerMethodConfig


__all__ = ["Model"]


class Model(ABC):
    def __init__(self, *args, **kwargs):
        pass

    @abstractmethod
    def _check_inputs(self, *args, **kwargs):
        pass

    @abstractmethod
    def _compute_internal_metrics(self, *args, **kwargs):
        pass

    def _get_log_fn(
        self,
        callback_fn: Optional[Callable],
        callback_args: Optional[list],
        callback_kwargs: Optional[dict],
    ):
        if callback_fn is not None:

            def log_fn(x, delta):
                callback_log = callback_fn(x, self, *callback_args, **callback_kwargs)
                internal_metrics_log = self._compute_internal_metrics(x, delta)
                return {
                    "callback": callback_log,
                    "internal_metrics": internal_metrics_log,
                }

        else:

            def log_fn(x, delta):
                internal_metrics_log = self._compute_internal_metrics(x, delta)
                return {"internal_metrics": internal_metrics_log}

        return log_fn

    def _get_wandb_kwargs(
        self,
        log_in_wandb: bool,
        wandb_init_kwargs: Optional[dict],
        solver_name: str,
        solver_config: PowerMethodConfig,
        callback_freq: int,
    ):
        if not log_in_wandb:
            return None

        wandb_kwargs = {
            "config": {
                "solver_name": solver_name,
                "solver_config": solver_config.to_dict(),
                "callback_freq": callback_freq,
            },
        }

        for key, value in (wandb_init_kwargs or {}).items():
            if key == "config":
                warn(
                    "Found 'config' key in wandb_init_kwargs. "
                    "Merging with internally specified 'config' key."
                )
                wandb_kwargs["config"].update(value)
            else:
                wandb_kwargs[key] = value

        return wandb_kwargs

    @abstractmethod
    def solve(
        self,
        solver_config: Optional[PowerMethodConfig] = None,
        callback_fn: Optional[Callable] = None,
        callback_args: Optional[list] = [],
        callback_kwargs: Optional[dict] = {},
        callback_freq: Optional[int] = 10,
        log_in_wandb: Optional[bool] = False,
        wandb_init_kwargs: Optional[dict] = None,
    ):
        pass
