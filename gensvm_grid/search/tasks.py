"""
Tasks and task generation.

A task is one fully bound parameter combination of the grid. The factory
expands a grid specification into the cartesian product of its axes, nested
in the order ``p, kappa, lambda, epsilon, weight_idx, gamma, coef, degree``
with the last axis varying fastest. Kernel axes that do not apply to the
chosen kernel contribute a single empty slot, so they never multiply the
number of tasks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import logging
from typing import TYPE_CHECKING, Any

from ..config.naming import TaskNaming
from ..config.schemas import KERNEL_AXES, GridSpecError, Kernel, LinearKernel
from ..trainer.base import SVMModel
from .queue import Queue

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..config.schemas import GridSpec
    from ..utils.dataset import Dataset

logger = logging.getLogger(__name__)

# Performance of a task that has not been (successfully) evaluated
PERFORMANCE_SENTINEL = -1.0

# Constants for grid size limits
MAX_QUEUE_SIZE = 100_000


@dataclass
class Task:
    """One parameter combination and its evaluation result.

    Attributes:
        id: Position in the queue, assigned by the queue
        p, kappa, lambda_, epsilon, weight_idx: Bound hyperparameters
        kernel: Bound kernel parameters
        folds: Number of cross-validation folds
        train_data: Shared training dataset (not owned by the task)
        test_data: Shared test dataset, if any
        performance: Accuracy in percent, or PERFORMANCE_SENTINEL
    """

    p: float
    kappa: float
    lambda_: float
    epsilon: float
    weight_idx: int
    kernel: Kernel = field(default_factory=LinearKernel)
    folds: int = 10
    id: int = -1
    train_data: Dataset | None = field(default=None, repr=False, compare=False)
    test_data: Dataset | None = field(default=None, repr=False, compare=False)
    performance: float = PERFORMANCE_SENTINEL

    def params(self) -> dict[str, Any]:
        """Hyperparameters in generation order."""
        return {
            "p": self.p,
            "kappa": self.kappa,
            "lambda": self.lambda_,
            "epsilon": self.epsilon,
            "weight_idx": self.weight_idx,
            "kernel": self.kernel.kernel_type.value,
            **self.kernel.params(),
        }

    @property
    def name(self) -> str:
        return TaskNaming.parameter_name(self.id, self.params())

    @property
    def key(self) -> str:
        """Hash identifying the configuration regardless of its ID."""
        return TaskNaming.hash_key(self.params())

    @property
    def is_evaluated(self) -> bool:
        return self.performance > PERFORMANCE_SENTINEL

    def reset_performance(self) -> None:
        self.performance = PERFORMANCE_SENTINEL

    def to_model(self, n_classes: int = 0) -> SVMModel:
        """Fresh, unfitted model for this configuration."""
        return SVMModel(
            p=self.p,
            kappa=self.kappa,
            lambda_=self.lambda_,
            epsilon=self.epsilon,
            weight_idx=self.weight_idx,
            kernel=self.kernel,
            n_classes=n_classes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.params(), "performance": self.performance}


class TaskFactory:
    """Expands a grid specification into a queue of tasks."""

    def __init__(self, spec: GridSpec):
        self.spec = spec

    def iter_parameters(self) -> Iterator[dict[str, Any]]:
        """Yield one parameter dict per combination, in generation order.

        Raises:
            GridSpecError: If a kernel-independent axis has no values
        """
        base_axes = self.spec.base_axes()
        empty = [name for name, values in base_axes.items() if not values]
        if empty:
            raise GridSpecError(f"No values for: {', '.join(empty)}")

        kernel_values = self.spec.kernel.axes()
        axes: dict[str, list[Any]] = {
            **base_axes,
            **{name: kernel_values.get(name) or [None] for name in KERNEL_AXES},
        }
        keys = list(axes)
        for combination in itertools.product(*axes.values()):
            yield dict(zip(keys, combination))

    def create_queue(
        self, train_data: Dataset | None = None, test_data: Dataset | None = None
    ) -> Queue:
        """Generate every task of the grid into a sealed queue.

        Args:
            train_data: Training dataset shared by all tasks
            test_data: Test dataset shared by all tasks, if any

        Returns:
            Sealed queue with IDs 0..N-1
        """
        expected = self.spec.n_tasks
        if expected > MAX_QUEUE_SIZE:
            logger.warning(
                f"Grid expands to {expected} tasks (more than {MAX_QUEUE_SIZE}); "
                "the search may take very long"
            )

        queue = Queue()
        for params in self.iter_parameters():
            kernel_params = {
                name: params[name] for name in KERNEL_AXES if params[name] is not None
            }
            queue.append(
                Task(
                    p=params["p"],
                    kappa=params["kappa"],
                    lambda_=params["lambda"],
                    epsilon=params["epsilon"],
                    weight_idx=params["weight_idx"],
                    kernel=self.spec.kernel.bind(**kernel_params),
                    folds=self.spec.folds,
                    train_data=train_data,
                    test_data=test_data,
                )
            )
        queue.seal()

        logger.info(f"Created queue with {len(queue)} tasks")
        return queue
