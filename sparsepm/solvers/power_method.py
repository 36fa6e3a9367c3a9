from contextlib import contextmanager
import math
import time
import traceback
from typing import Any, Callable, List, Optional, Sequence, Tuple

import torch

from .configs import PowerMethodConfig, _is_solver_config
from .normalize import mask_indices, one_max, zeroize
from .solver import Solver
from sparsepm.errors import (
    PowerMethodError,
    ValidationError,
    IterationLimitError,
    NumericalBreakdownError,
    NotFactorizedError,
    InternalFaultError,
)
from sparsepm.sparse.sparse_tensor import _SparseTensor, SparseCSCTensor
from sparsepm.utils import Logger, _is_int


__all__ = ["PowerMethod"]


@contextmanager
def _fault_boundary():
    """Turn any unexpected exception into an ``InternalFaultError``."""
    try:
        yield
    except PowerMethodError:
        raise
    except Exception as err:
        raise InternalFaultError(traceback.format_exc()) from err


def _collect(messages: List[str], check: Callable, *args: Any) -> bool:
    try:
        check(*args)
    except (TypeError, ValueError) as err:
        messages.append(str(err))
        return False
    return True


def _unique_sorted(ignore: Sequence[int]) -> Tuple[int, ...]:
    ordered = sorted(int(index) for index in ignore)
    unique = []
    for index in ordered:
        if unique and unique[-1] == index:
            continue
        unique.append(index)
    return tuple(unique)


class PowerMethod(Solver):
    r"""Power method for the dominant eigenpair of a square sparse matrix.

    Algorithm::

        x(0) = random vector
        k = 1
        until | d(k-1) - d(k) | < tolerance:
            x(k) = A x(k-1)
            d(k) = || x(k) - x(k-1) ||_1    (both rescaled to max-magnitude 1)
            k = k + 1
        eigenvalue = (A x . x) / (x . x)

    Rows and columns listed in ``ignore`` are held at zero in every iterate. This
    solves the eigenproblem of the principal submatrix without them, while the
    matrix and the vectors keep their full size.

    See Kamvar, Haveliwala, Manning and Golub, "Extrapolation Methods for
    Accelerating PageRank Computations".

    Example::

        pm = PowerMethod()
        pm.factorize(A, PowerMethodConfig(iteration_max=1000, tolerance=1e-8), 0, 4)
        pm.eigen()
        pm.eigenvalue, pm.eigenvector
    """

    def __init__(self):
        self._A = None
        self._ignore = ()
        self._ignore_index = None
        self._config = None
        self._clear_results()

    def _clear_results(self):
        self._eigenvalue = None
        self._eigenvector = None
        self._iterations = None
        self._log = {}

    @property
    def A(self) -> Optional[SparseCSCTensor]:
        return self._A

    @property
    def ignore(self) -> Tuple[int, ...]:
        return self._ignore

    @property
    def config(self) -> Optional[PowerMethodConfig]:
        return self._config

    @property
    def eigenvalue(self) -> Optional[float]:
        """Dominant eigenvalue, or None before a successful ``eigen``."""
        return self._eigenvalue

    @property
    def eigenvector(self) -> Optional[torch.Tensor]:
        """Eigenvector rescaled to max-magnitude 1, or None before ``eigen``."""
        return self._eigenvector

    @property
    def iterations(self) -> Optional[int]:
        """Number of products computed until convergence in the last solve."""
        return self._iterations

    @property
    def log(self) -> dict:
        return self._log

    def _check_inputs(
        self, A: Any, config: Any, ignore: Sequence[Any]
    ) -> List[str]:
        messages = []
        dims = None
        if A is None:
            messages.append("matrix A is None")
        elif not isinstance(A, _SparseTensor):
            messages.append(
                f"matrix A is of type {type(A).__name__}, "
                "but expected a sparse tensor"
            )
        else:
            rows, cols = A.dims()
            if rows <= 0:
                messages.append(f"matrix A has an invalid number of rows: {rows}")
            if cols <= 0:
                messages.append(f"matrix A has an invalid number of columns: {cols}")
            if A.is_uncompressed():
                messages.append("matrix A is not in compressed sparse column format")
            if rows != cols:
                messages.append(f"matrix A is not square: {rows} x {cols}")
            dims = (rows, cols)

        if config is not None:
            _collect(messages, _is_solver_config, config, "config")

        valid = [
            _collect(messages, _is_int, index, f"ignore[{k}]")
            for k, index in enumerate(ignore)
        ]
        if ignore and all(valid) and dims is not None:
            ordered = sorted(ignore)
            if ordered[0] < 0:
                messages.append(f"ignore list has an index less than zero: {ordered[0]}")
            if ordered[-1] >= dims[0] or ordered[-1] >= dims[1]:
                messages.append(
                    f"ignore list has an index outside the matrix: {ordered[-1]}"
                )
        return messages

    def factorize(
        self,
        A: SparseCSCTensor,
        config: Optional[PowerMethodConfig] = None,
        *ignore: int,
    ) -> None:
        """Validate and store the matrix, the configuration and the ignore list.

        Args:
            A (SparseCSCTensor): Square matrix in compressed sparse column form. It
              is only read, never modified.
            config (Optional[PowerMethodConfig], optional): Solver configuration.
              Defaults to ``PowerMethodConfig()``.
            *ignore (int): Indices of rows and columns to leave out of the
              calculation. Order and repetition do not matter.

        Raises:
            ValidationError: If any input is malformed. Every failing check is
              listed in the error.
            InternalFaultError: If an unexpected exception is raised during setup.
        """
        with _fault_boundary():
            messages = self._check_inputs(A, config, ignore)
            if messages:
                raise ValidationError(
                    messages, context="PowerMethod.factorize: check input data"
                )

            if config is None:
                config = PowerMethodConfig()
            ignore = _unique_sorted(ignore)
            A = A.to(dtype=config.dtype)

            self._A = A
            self._ignore = ignore
            self._ignore_index = torch.tensor(ignore, dtype=torch.int64, device=A.device)
            self._config = config
            self._clear_results()

    def _init_iterate(self) -> torch.Tensor:
        rows, _ = self._A.dims()
        seed = self._config.seed if self._config.seed is not None else time.time_ns()
        generator = torch.Generator(device=self._A.device)
        generator.manual_seed(int(seed))
        x = torch.rand(
            rows, generator=generator, dtype=self._config.dtype, device=self._A.device
        )
        return x.sub_(0.5)

    def _step(
        self, x: torch.Tensor, x_next: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        # returns (A x, x); x_next is overwritten
        one_max(x)
        mask_indices(x, self._ignore_index)
        zeroize(x_next)
        self._A.multiply_accumulate(x, x_next, clear=False)
        mask_indices(x_next, self._ignore_index)
        return x_next, x

    def _iterate(self, logger: Optional[Logger]) -> Tuple[float, torch.Tensor, int]:
        iteration_max = self._config.iteration_max
        tolerance = self._config.tolerance

        x = self._init_iterate()
        x_next = torch.zeros_like(x)
        one_max(x)
        d_last = 1.0

        iteration = 0
        while True:
            one_max(x)
            x, x_next = self._step(x, x_next)

            # first norm of the difference between normalized iterates
            one_max(x)
            one_max(x_next)
            d = torch.sum(torch.abs(x - x_next)).item()

            if logger is not None:
                logger._compute_log(iteration, x, d)

            if math.isnan(d):
                raise NumericalBreakdownError(
                    custom_msg=f"iterate collapsed to zero at iteration {iteration}."
                )
            if abs(d_last - d) < tolerance:
                break
            if iteration >= iteration_max:
                raise IterationLimitError(
                    iteration=iteration,
                    iteration_max=iteration_max,
                    delta=d_last - d,
                    tolerance=tolerance,
                )

            d_last = d
            iteration += 1

        # Rayleigh quotient: (A x . x) / (x . x)
        x, x_next = self._step(x, x_next)
        up = torch.dot(x, x_next).item()
        one_max(x)
        down = torch.dot(x, x).item()
        if down == 0.0 or not math.isfinite(down) or math.isnan(up):
            raise NumericalBreakdownError(up=up, down=down)

        one_max(x)
        return up / down, x, iteration + 1

    def eigen(self, logger: Optional[Logger] = None) -> None:
        """Run the power method and store the dominant eigenpair.

        On success ``eigenvalue`` and ``eigenvector`` are set together; on failure
        both stay None.

        Args:
            logger (Optional[Logger], optional): Receives ``(x, delta)`` after every
              iteration. It is terminated when the solve ends. Defaults to None.

        Raises:
            NotFactorizedError: If ``factorize`` has not succeeded before.
            IterationLimitError: If the tolerance is not reached within
              ``iteration_max`` iterations.
            NumericalBreakdownError: If the iterate collapses to zero.
            InternalFaultError: If an unexpected exception is raised.
        """
        if self._A is None:
            raise NotFactorizedError()
        self._clear_results()

        with _fault_boundary():
            summary = None
            try:
                eigenvalue, eigenvector, iterations = self._iterate(logger)
                summary = {"eigenvalue": eigenvalue, "iterations": iterations}
            finally:
                if logger is not None:
                    self._log = dict(logger.history)
                    logger._terminate(summary)

            self._eigenvalue = eigenvalue
            self._eigenvector = eigenvector
            self._iterations = iterations
