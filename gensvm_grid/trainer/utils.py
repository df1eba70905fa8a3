"""
Trainer Utilities

This module provides utility functions for the training backend:
- Trainer error hierarchy
- Seeding of the random number generators
- Stopwatch and time formatting helpers
"""

from __future__ import annotations

import logging
import random
import time

import numpy as np
import torch

logger = logging.getLogger(__name__)


class TrainerError(Exception):
    """Base class for failures while fitting a single configuration."""


class TrainingError(TrainerError):
    """Raised when the optimization diverges or produces non-finite values."""


class KernelError(TrainingError):
    """Raised when a kernel cannot be evaluated for the given parameters."""


def seed_everything(seed: int) -> np.random.Generator:
    """
    Seed Python, NumPy and PyTorch and return a fresh NumPy generator.

    The returned generator is the one to pass through the evaluation call
    chain; the global seeds only cover code outside that chain.

    Args:
        seed: Random seed value, any integer; reduced modulo 2**32

    Returns:
        numpy.random.Generator seeded with the reduced seed
    """
    seed %= 2**32
    random.seed(seed)
    np.random.seed(seed)  # noqa: NPY002 - legacy global seed
    torch.manual_seed(seed)
    logger.debug(f"Seeded random number generators with {seed}")
    return np.random.default_rng(seed)


def format_time(seconds: float) -> str:
    """Format seconds as a short human readable duration."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {secs:.0f}s"
    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h {int(minutes)}m"


class Stopwatch:
    """
    Simple stopwatch for timing operations.

    Example:
        >>> sw = Stopwatch()
        >>> sw.start()
        >>> # ... evaluate a task ...
        >>> per_task = sw.lap()
        >>> total = sw.stop()
    """

    def __init__(self):
        self.start_time: float | None = None
        self.elapsed: float = 0.0
        self.laps: list[float] = []

    @property
    def running(self) -> bool:
        return self.start_time is not None

    def start(self) -> Stopwatch:
        """Start or resume the stopwatch."""
        if self.start_time is None:
            self.start_time = time.perf_counter()
        return self

    def stop(self) -> float:
        """Stop the stopwatch and return the total elapsed time."""
        if self.start_time is not None:
            self.elapsed += time.perf_counter() - self.start_time
            self.start_time = None
        return self.elapsed

    def elapsed_time(self) -> float:
        """Elapsed time without stopping."""
        if self.start_time is not None:
            return self.elapsed + (time.perf_counter() - self.start_time)
        return self.elapsed

    def lap(self) -> float:
        """Record a lap and return the time since the previous one."""
        current = self.elapsed_time()
        lap_time = current - sum(self.laps)
        self.laps.append(lap_time)
        return lap_time
