"""
Task evaluation.

Scores tasks either by cross-validation on the training data or by training
on the training data and predicting the test data. Scoring a task is a pure
function of the task, its data and the fold plan; only ``Evaluator.run``
writes the scores back into the queue.

Randomness comes exclusively from the generator passed to the evaluator, and
one fold plan is drawn per pass over the tasks, so a fixed seed reproduces
every fold assignment and every score.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from ..config.schemas import TrainType
from ..trainer.utils import Stopwatch, TrainerError, format_time
from ..utils.dataset import DataError
from .tasks import PERFORMANCE_SENTINEL

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..config.schemas import Kernel
    from ..trainer.base import SVMModel, Trainer
    from ..utils.dataset import Dataset
    from .queue import Queue
    from .tasks import Task

logger = logging.getLogger(__name__)


def make_cv_split(n: int, folds: int, rng: np.random.Generator) -> np.ndarray:
    """Assign each of ``n`` instances to one of ``folds`` folds at random.

    Fold sizes differ by at most one.

    Raises:
        DataError: If there are fewer instances than folds
    """
    if folds < 2:
        raise DataError(f"Cross-validation needs at least 2 folds, got {folds}")
    if n < folds:
        raise DataError(f"Cannot split {n} instances into {folds} folds")
    fold_idx = np.empty(n, dtype=np.int64)
    fold_idx[rng.permutation(n)] = np.arange(n) % folds
    return fold_idx


def prediction_accuracy(predictions: np.ndarray, labels: np.ndarray) -> float:
    """Percentage of predictions equal to the labels."""
    if labels.size == 0:
        return 0.0
    return 100.0 * float(np.mean(np.asarray(predictions) == labels))


@dataclass(frozen=True)
class FoldPlan:
    """Fold index of every training instance."""

    fold_idx: np.ndarray
    folds: int

    @classmethod
    def random(cls, n: int, folds: int, rng: np.random.Generator) -> FoldPlan:
        return cls(fold_idx=make_cv_split(n, folds, rng), folds=folds)

    def train_indices(self, fold: int) -> np.ndarray:
        return np.flatnonzero(self.fold_idx != fold)

    def test_indices(self, fold: int) -> np.ndarray:
        return np.flatnonzero(self.fold_idx == fold)

    def split(self, data: Dataset) -> list[tuple[Dataset, Dataset]]:
        """(train, held-out) datasets for every fold."""
        if data.n != self.fold_idx.shape[0]:
            raise DataError(
                f"Fold plan covers {self.fold_idx.shape[0]} instances, data has {data.n}"
            )
        return [
            (data.subset(self.train_indices(f)), data.subset(self.test_indices(f)))
            for f in range(self.folds)
        ]


class Evaluator:
    """Scores tasks with a trainer.

    Args:
        trainer: Fits and applies models
        rng: Source of all randomness (fold assignments)
        warm_start: Seed each fold's fit with the model of the previous task
            on the same fold when the kernel is unchanged
    """

    def __init__(
        self, trainer: Trainer, rng: np.random.Generator, warm_start: bool = False
    ):
        self.trainer = trainer
        self.rng = rng
        self.warm_start = warm_start

    @staticmethod
    def train_type(task: Task) -> TrainType:
        """Train/test only with labelled test data, cross-validation otherwise."""
        if task.test_data is not None and task.test_data.has_labels:
            return TrainType.TRAIN_TEST
        return TrainType.CV

    def make_plan(self, task: Task) -> FoldPlan:
        data = self._train_data(task)
        return FoldPlan.random(data.n, task.folds, self.rng)

    def evaluate_task(
        self,
        task: Task,
        plan: FoldPlan | None = None,
        warm_models: dict[int, SVMModel] | None = None,
    ) -> float:
        """Accuracy of one task in percent.

        With a fold plan the task is always cross-validated; without one, the
        task's own mode decides and cross-validation draws a new plan.

        Raises:
            TrainerError: If the trainer fails for this configuration
        """
        if plan is None:
            if self.train_type(task) == TrainType.TRAIN_TEST:
                return self._train_test(task)
            plan = self.make_plan(task)
        return self._cross_validate(task, plan.split(self._train_data(task)), warm_models)

    def evaluate_all(self, tasks: Iterable[Task], force_cv: bool = False) -> list[float]:
        """Score tasks in order without modifying them.

        All tasks of one call share a single fold plan. A task whose training
        fails scores PERFORMANCE_SENTINEL and evaluation continues.

        Args:
            tasks: Tasks sharing the same datasets and fold count
            force_cv: Cross-validate even when labelled test data is present
        """
        tasks = list(tasks)
        if not tasks:
            return []

        splits = None
        if force_cv or self.train_type(tasks[0]) == TrainType.CV:
            plan = self.make_plan(tasks[0])
            splits = plan.split(self._train_data(tasks[0]))
            logger.debug(f"Drew {plan.folds}-fold plan for {len(tasks)} tasks")

        warm_models: dict[int, SVMModel] | None = {} if self.warm_start else None
        previous_kernel: Kernel | None = None
        stopwatch = Stopwatch().start()
        scores: list[float] = []

        for task in tasks:
            if warm_models is not None and task.kernel != previous_kernel:
                warm_models.clear()
            previous_kernel = task.kernel

            try:
                if splits is None:
                    score = self._train_test(task)
                else:
                    score = self._cross_validate(task, splits, warm_models)
            except TrainerError as e:
                logger.warning(f"Task {task.id} failed and is skipped: {e}")
                score = PERFORMANCE_SENTINEL
                if warm_models is not None:
                    warm_models.clear()

            scores.append(score)
            logger.info(
                f"{task.name}: {score:3.2f}% ({format_time(stopwatch.lap())})"
            )

        logger.debug(f"Evaluated {len(tasks)} tasks in {format_time(stopwatch.stop())}")
        return scores

    def run(self, queue: Queue) -> Queue:
        """Evaluate every task of the queue in ID order and store the scores."""
        tasks = queue.tasks
        if tasks:
            logger.info(
                f"Evaluating {len(tasks)} tasks "
                f"({self.train_type(tasks[0]).value}, {tasks[0].folds} folds)"
            )
        for task, score in zip(tasks, self.evaluate_all(tasks)):
            task.performance = score
        n_failed = sum(not task.is_evaluated for task in tasks)
        if n_failed:
            logger.warning(f"{n_failed} of {len(tasks)} tasks could not be evaluated")
        return queue

    @staticmethod
    def _train_data(task: Task) -> Dataset:
        if task.train_data is None:
            raise DataError(f"Task {task.id} has no training data attached")
        return task.train_data

    def _cross_validate(
        self,
        task: Task,
        splits: list[tuple[Dataset, Dataset]],
        warm_models: dict[int, SVMModel] | None,
    ) -> float:
        data = self._train_data(task)
        n_classes = data.n_classes
        correct = 0
        for fold, (train, held_out) in enumerate(splits):
            model = task.to_model(n_classes)
            warm = warm_models.get(fold) if warm_models is not None else None
            self.trainer.train(model, train, warm_start=warm)
            predictions = self.trainer.predict(model, held_out)
            correct += int(np.sum(predictions == held_out.y))
            if warm_models is not None:
                warm_models[fold] = model
            logger.debug(f"Task {task.id} fold {fold}: {len(held_out.X)} held out")
        return 100.0 * correct / data.n

    def _train_test(self, task: Task) -> float:
        data = self._train_data(task)
        if task.test_data is None or task.test_data.y is None:
            raise DataError(f"Task {task.id} has no labelled test data")
        model = task.to_model(data.n_classes)
        self.trainer.train(model, data)
        predictions = self.trainer.predict(model, task.test_data)
        return prediction_accuracy(predictions, task.test_data.y)
