from typing import Callable, Optional
import time

import wandb


__all__ = ["Logger"]


class Logger:
    """Collects per-iteration metrics of an iterative solve.

    Metrics are computed by ``log_fn`` every ``log_freq`` iterations and kept in
    ``history`` keyed by iteration. When ``wandb_kwargs`` is given, a Weights & Biases
    run is started with it and every entry is also sent there.
    """

    def __init__(
        self, log_freq: int, log_fn: Callable, wandb_kwargs: Optional[dict] = None
    ):
        if log_freq <= 0:
            raise ValueError(f"log_freq must be positive, but received {log_freq}")
        self.log_freq = log_freq
        self.log_fn = log_fn
        self.history = {}

        self.log_in_wandb = wandb_kwargs is not None
        if self.log_in_wandb:
            wandb.init(**wandb_kwargs)

        self.start_time = time.perf_counter()
        self.iter_time = 0.0
        self.cum_time = 0.0

    def _tick(self):
        now = time.perf_counter()
        self.iter_time = now - self.start_time
        self.cum_time += self.iter_time
        self.start_time = now

    def _compute_log(self, i: int, *args, force: bool = False, **kwargs):
        if i % self.log_freq != 0 and not force:
            return None

        self._tick()
        log_dict = {
            "iter_time": self.iter_time,
            "cum_time": self.cum_time,
            "metrics": self.log_fn(*args, **kwargs),
        }
        self.history[i] = log_dict

        if self.log_in_wandb:
            wandb.log(log_dict, step=i)

        return log_dict

    def _terminate(self, summary: Optional[dict] = None):
        if not self.log_in_wandb:
            return
        if summary:
            wandb.summary.update(summary)
        wandb.finish()
