from typing import Any, Callable, Optional, Sequence, Tuple

import torch

from .model import Model
from sparsepm.solvers import PowerMethod, PowerMethodConfig, _get_solver_name
from sparsepm.sparse.sparse_tensor import _SparseTensor
from sparsepm.utils import Logger, _is_bool, _is_callable, _is_int, _is_pos_int


__all__ = ["DominantEig"]


class DominantEig(Model):
    """Model for the dominant eigenpair of a square sparse matrix A.

    Rows and columns listed in ``ignore`` are removed from the problem by holding
    their vector entries at zero.
    """

    def __init__(self, A: _SparseTensor, ignore: Sequence[int] = ()):
        """Initialize DominantEig model.

        Args:
            A (_SparseTensor): Square sparse matrix in compressed form.
            ignore (Sequence[int], optional): Indices to leave out of the problem.
              Defaults to ().
        """
        self._check_inputs(A, ignore)
        self._A = A
        self._ignore = tuple(ignore)

    @property
    def A(self):
        return self._A

    @property
    def ignore(self):
        return self._ignore

    def _check_inputs(self, A: Any, ignore: Any):
        if not isinstance(A, _SparseTensor):
            raise TypeError(
                f"A is of type {type(A).__name__}, but expected a sparse tensor"
            )
        if isinstance(ignore, (str, bytes)) or not isinstance(ignore, Sequence):
            raise TypeError(
                f"ignore is of type {type(ignore).__name__}, "
                "but expected a sequence of int"
            )
        for k, index in enumerate(ignore):
            _is_int(index, f"ignore[{k}]")

    def _compute_internal_metrics(self, x: torch.Tensor, delta: float):
        return {"delta": delta}

    def solve(
        self,
        solver_config: Optional[PowerMethodConfig] = None,
        callback_fn: Optional[Callable] = None,
        callback_args: Optional[list] = [],
        callback_kwargs: Optional[dict] = {},
        callback_freq: Optional[int] = 10,
        log_in_wandb: Optional[bool] = False,
        wandb_init_kwargs: Optional[dict] = None,
    ) -> Tuple[float, torch.Tensor, dict]:
        """Find the dominant eigenpair with the power method.

        Args:
            solver_config (Optional[PowerMethodConfig], optional): Solver
              configuration. Defaults to ``PowerMethodConfig()``.
            callback_fn (Optional[Callable], optional): Called as
              ``callback_fn(x, model, *callback_args, **callback_kwargs)`` on logged
              iterations. Defaults to None.
            callback_args (Optional[list], optional): Defaults to [].
            callback_kwargs (Optional[dict], optional): Defaults to {}.
            callback_freq (Optional[int], optional): Log every this many
              iterations. Defaults to 10.
            log_in_wandb (Optional[bool], optional): Send the log to Weights &
              Biases. Defaults to False.
            wandb_init_kwargs (Optional[dict], optional): Arguments of
              ``wandb.init``. Required if ``log_in_wandb`` is True.

        Returns:
            Tuple[float, torch.Tensor, dict]: Eigenvalue, eigenvector and the log
            keyed by iteration.
        """
        if callback_fn is not None:
            _is_callable(callback_fn, "callback_fn")
        _is_pos_int(callback_freq, "callback_freq")
        _is_bool(log_in_wandb, "log_in_wandb")
        if log_in_wandb and wandb_init_kwargs is None:
            raise ValueError(
                "wandb_init_kwargs must be specified if log_in_wandb is True"
            )

        pm = PowerMethod()
        pm.factorize(self.A, solver_config, *self.ignore)

        # Setup logging
        log_fn = self._get_log_fn(callback_fn, callback_args, callback_kwargs)
        wandb_kwargs = self._get_wandb_kwargs(
            log_in_wandb=log_in_wandb,
            wandb_init_kwargs=wandb_init_kwargs,
            solver_name=_get_solver_name(pm.config),
            solver_config=pm.config,
            callback_freq=callback_freq,
        )
        logger = Logger(
            log_freq=callback_freq,
            log_fn=log_fn,
            wandb_kwargs=wandb_kwargs,
        )

        pm.eigen(logger=logger)

        return pm.eigenvalue, pm.eigenvector, pm.log
