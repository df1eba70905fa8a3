"""
GenSVM Grid Search - Main API

This module provides the high-level API of the grid search:
- GridSearchRunner: orchestrates parsing, evaluation and selection
- Data loading and label checks for the grid's datasets
- Final training of the selected task and prediction of the test set
"""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import TYPE_CHECKING

import numpy as np

from .config import GridFileParser, GridSpec
from .search import (
    ConsistencyRepeater,
    Evaluator,
    SearchResult,
    Selector,
    TaskFactory,
    prediction_accuracy,
)
from .trainer import GenSVMTrainer, Stopwatch, format_time, seed_everything
from .utils import DataError, check_labels_contiguous, read_dataset

if TYPE_CHECKING:
    from .search import Queue, Task
    from .trainer import Trainer
    from .utils import Dataset

logger = logging.getLogger(__name__)


class GridSearchRunner:
    """
    High-level interface for a GenSVM grid search.

    Loads the datasets named by a grid specification, evaluates every task of
    the grid, selects the winner and, when the grid names a test set, trains
    the winner on the full training set and predicts the test set.
    """

    def __init__(
        self,
        spec: GridSpec,
        seed: int | None = None,
        libsvm_format: bool = False,
        trainer: Trainer | None = None,
        warm_start: bool = False,
    ):
        """
        Initialize the runner.

        Args:
            spec: Validated grid specification
            seed: Seed of all randomness (default: current time in seconds)
            libsvm_format: Read the datasets in LibSVM format
            trainer: Training backend (default: GenSVMTrainer)
            warm_start: Warm-start consecutive tasks with the same kernel
        """
        self.spec = spec
        self.seed = int(time.time()) if seed is None else seed
        self.libsvm_format = libsvm_format
        self.trainer = trainer if trainer is not None else GenSVMTrainer()
        self.warm_start = warm_start

        self.rng = seed_everything(self.seed)
        self.train_data: Dataset | None = None
        self.test_data: Dataset | None = None
        self.best_task: Task | None = None

        logger.info(
            f"Initialized grid search over {spec.n_tasks} tasks "
            f"({spec.kernel_type.value} kernel, seed {self.seed})"
        )

    @classmethod
    def from_grid_file(cls, path: str | Path, **kwargs) -> GridSearchRunner:
        """Create a runner from a grid file.

        Raises:
            GridFileError: If the file cannot be read or lacks required fields
            GridSpecError: If a value lies outside its domain
        """
        return cls(GridFileParser().parse_file(path), **kwargs)

    def load_data(self) -> tuple[Dataset, Dataset | None]:
        """Read the training and optional test dataset.

        Raises:
            DataError: If a file is malformed or the training labels have gaps
        """
        train = read_dataset(self.spec.train_file, self.libsvm_format)
        check_labels_contiguous(train)

        test = None
        if self.spec.test_file is not None:
            test = read_dataset(self.spec.test_file, self.libsvm_format, n_features=train.m)
            if test.m != train.m:
                raise DataError(
                    f"{test.source}: {test.m} features, training data has {train.m}"
                )

        self.train_data, self.test_data = train, test
        logger.info(
            f"Loaded {train.n} training instances with {train.m} features "
            f"and {train.n_classes} classes"
            + (f", {test.n} test instances" if test is not None else "")
        )
        return train, test

    def build_queue(self) -> Queue:
        if self.train_data is None:
            self.load_data()
        return TaskFactory(self.spec).create_queue(self.train_data, self.test_data)

    def run(self) -> SearchResult:
        """Evaluate every task and select the best one."""
        stopwatch = Stopwatch().start()
        queue = self.build_queue()

        evaluator = Evaluator(self.trainer, self.rng, warm_start=self.warm_start)
        evaluator.run(queue)

        repeater = None
        if self.spec.repeats > 0:
            repeater = ConsistencyRepeater(evaluator, self.spec.repeats, self.spec.percentile)
        selector = Selector(self.spec.repeats, self.spec.percentile, repeater)
        best_id = selector.select(queue)

        result = SearchResult(
            best_id=best_id,
            tasks=[task.to_dict() for task in queue],
            consistency=selector.records,
            threshold=selector.threshold,
            execution_time=stopwatch.stop(),
            seed=self.seed,
            train_type=evaluator.train_type(queue[0]).value,
        )
        self.best_task = queue[best_id]

        logger.info(
            f"Selected {self.best_task.name} with {self.best_task.performance:3.2f}% "
            f"after {format_time(result.execution_time)}"
        )
        return result

    def predict_test(self, result: SearchResult) -> np.ndarray | None:
        """Train the selected task on all training data and predict the test set.

        Returns:
            Predicted labels, or None when the grid has no test set
        """
        if self.test_data is None:
            return None
        if self.best_task is None:
            raise ValueError("run() must complete before predicting")

        task = self.best_task
        if task.id != result.best_id:
            raise ValueError(f"Result selects task {result.best_id}, runner holds {task.id}")

        model = task.to_model(self.train_data.n_classes)
        self.trainer.train(model, self.train_data)
        predictions = self.trainer.predict(model, self.test_data)

        if self.test_data.has_labels:
            accuracy = prediction_accuracy(predictions, self.test_data.y)
            logger.info(f"Test set accuracy: {accuracy:3.2f}%")
        return predictions
