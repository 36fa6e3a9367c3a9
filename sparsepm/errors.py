from collections.abc import Sequence
from typing import Optional


__all__ = [
    "PowerMethodError",
    "ValidationError",
    "IterationLimitError",
    "NumericalBreakdownError",
    "NotFactorizedError",
    "InternalFaultError",
]


class PowerMethodError(Exception):
    def __init__(self, message: str) -> None:
        module_name = self.__class__.__module__
        class_name = self.__class__.__name__
        error_msg = f"{message} ({module_name}.{class_name})"
        super().__init__(error_msg)


class ValidationError(PowerMethodError):
    r"""Invalid Solver Input.

    This error occurs when the input of :meth:`PowerMethod.factorize` is malformed.
    Every failing check is collected, so a single error reports all of them.
    """

    def __init__(self, messages: Sequence[str], context: str = "check input data"):
        self.messages = list(messages)
        lines = "\n".join(f"- {m}" for m in self.messages)
        super().__init__(f"{context}:\n{lines}")


class IterationLimitError(PowerMethodError):
    r"""Iteration Limit Reached.

    This error occurs when the power iteration does not reach the requested tolerance
    within the configured number of iterations. It is recoverable by the caller, e.g.
    by solving again with a larger ``iteration_max`` or a looser ``tolerance``.
    """

    def __init__(
        self, iteration: int, iteration_max: int, delta: float, tolerance: float
    ) -> None:
        self.iteration = iteration
        self.iteration_max = iteration_max
        self.delta = delta
        self.tolerance = tolerance
        super().__init__(
            "iteration limit: "
            f"iteration {iteration}, max iteration {iteration_max}, "
            f"delta {delta:.5e}, tolerance {tolerance:.5e}"
        )


class NumericalBreakdownError(PowerMethodError):
    r"""Numerical Breakdown.

    This error occurs when the iterate collapses (e.g. every index is ignored or the
    matrix is zero), so the Rayleigh quotient has no usable value.
    """

    def __init__(
        self,
        up: Optional[float] = None,
        down: Optional[float] = None,
        custom_msg: str = "",
    ) -> None:
        self.up = up
        self.down = down
        if custom_msg:
            msg = custom_msg
        else:
            msg = f"Rayleigh quotient is not acceptable: up = {up}, down = {down}."
        super().__init__(msg)


class NotFactorizedError(PowerMethodError):
    r"""Solver Not Set Up.

    This error occurs when ``eigen`` is called before a successful ``factorize``.
    """

    def __init__(self) -> None:
        super().__init__("factorize must be called successfully before eigen.")


class InternalFaultError(PowerMethodError):
    r"""Unexpected Internal Fault.

    This error wraps an unexpected exception raised inside the solver. The original
    exception is chained as ``__cause__`` and its traceback is kept in ``trace``.
    """

    def __init__(self, trace: str) -> None:
        self.trace = trace
        super().__init__(f"unexpected fault inside the solver:\n{trace}")
