"""
Task queue.

The queue owns the tasks of one grid search and assigns their IDs: IDs are
contiguous from 0 in insertion order. Once sealed, no task can be added.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .tasks import Task

logger = logging.getLogger(__name__)


class QueueSealedError(RuntimeError):
    """Raised when adding a task to a queue whose generation is complete."""


class Queue:
    """Ordered collection of the tasks of a grid search."""

    def __init__(self):
        self._tasks: list[Task] = []
        self._sealed = False

    def append(self, task: Task) -> Task:
        """Add a task, assigning it the next ID.

        Raises:
            QueueSealedError: If the queue has been sealed
        """
        if self._sealed:
            raise QueueSealedError("Cannot add tasks to a sealed queue")
        task.id = len(self._tasks)
        self._tasks.append(task)
        return task

    def seal(self) -> Queue:
        """Fix the queue size; called once generation completes."""
        self._sealed = True
        logger.debug(f"Sealed queue with {len(self._tasks)} tasks")
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def __getitem__(self, task_id: int) -> Task:
        return self.get(task_id)

    def get(self, task_id: int) -> Task:
        """Task with the given ID.

        Raises:
            KeyError: If no task has this ID
        """
        if not 0 <= task_id < len(self._tasks):
            raise KeyError(f"No task with ID {task_id} in a queue of {len(self._tasks)}")
        return self._tasks[task_id]

    def performances(self) -> np.ndarray:
        """Performance of every task, in ID order."""
        return np.array([task.performance for task in self._tasks], dtype=np.float64)

    def evaluated(self) -> list[Task]:
        """Tasks that reached a valid performance."""
        return [task for task in self._tasks if task.is_evaluated]

    def reset_performance(self) -> None:
        for task in self._tasks:
            task.reset_performance()
