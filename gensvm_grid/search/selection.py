"""
Selection of the best task.

This module provides:
- Selector: argmax over the first-pass performances, ties to the lowest ID
- ConsistencyRepeater: re-evaluates every candidate under fresh fold plans
  and ranks candidates by a percentile of their repeated scores
- ConsistencyRecord: repeated scores of one candidate
- SearchResult: outcome of a complete search, exportable as JSON or YAML
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import yaml

from ..utils.validation import validate_range
from .tasks import PERFORMANCE_SENTINEL

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .evaluator import Evaluator
    from .queue import Queue
    from .tasks import Task

logger = logging.getLogger(__name__)


class SelectionError(Exception):
    """Raised when no task can be selected."""


class RepeaterState(Enum):
    """Progress of a consistency run."""

    IDLE = "idle"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"


def _plain(value: Any) -> Any:
    """Numpy scalars as built-in Python values."""
    return value.item() if isinstance(value, np.generic) else value


def best_index(scores: Sequence[float]) -> int | None:
    """Index of the first strictly best score above the sentinel."""
    best, best_score = None, PERFORMANCE_SENTINEL
    for i, score in enumerate(scores):
        if score > best_score:
            best, best_score = i, score
    return best


@dataclass
class ConsistencyRecord:
    """Repeated cross-validation scores of one candidate task.

    Attributes:
        task_id: ID of the candidate
        samples: One score per repeat, PERFORMANCE_SENTINEL for failed repeats
        statistic: Percentile of the samples used for ranking
        passed: Whether the statistic reaches the global threshold. The threshold
            comes from the first-pass scores, which are test-set accuracies when
            the grid has a labelled test set, while the statistic is always a
            cross-validation accuracy; the flag is informational and plays no
            part in selection.
    """

    task_id: int
    samples: list[float] = field(default_factory=list)
    statistic: float = PERFORMANCE_SENTINEL
    passed: bool = False

    @property
    def mean(self) -> float:
        return float(np.mean(self.samples)) if self.samples else float("nan")

    @property
    def std(self) -> float:
        return float(np.std(self.samples)) if self.samples else float("nan")

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "samples": [float(s) for s in self.samples],
            "statistic": float(self.statistic),
            "mean": self.mean,
            "std": self.std,
            "passed": self.passed,
        }


class ConsistencyRepeater:
    """Ranks candidates by the stability of their cross-validation score.

    Every repeat draws a new fold plan from the evaluator's generator and
    re-scores all candidates under it. A candidate's statistic is the given
    percentile of its repeated scores, so a low percentile favours tasks that
    score well under every split.

    Args:
        evaluator: Scores the candidates
        repeats: Number of repetitions, at least 1
        percentile: Percentile in [0, 100] used for the statistic and threshold
    """

    def __init__(self, evaluator: Evaluator, repeats: int, percentile: float = 0.0):
        if repeats < 1:
            raise ValueError(f"repeats must be at least 1, got {repeats}")
        validate_range(percentile, 0.0, 100.0, "percentile")
        self.evaluator = evaluator
        self.repeats = repeats
        self.percentile = float(percentile)
        self.state = RepeaterState.IDLE
        self.records: list[ConsistencyRecord] = []
        self.threshold: float | None = None

    def run(self, tasks: Sequence[Task], first_pass: Sequence[float]) -> int:
        """Repeat the evaluation of the candidates and pick the most consistent.

        Args:
            tasks: Candidate tasks in ID order
            first_pass: First-pass performance of each candidate

        Returns:
            ID of the winning task

        Raises:
            SelectionError: If there are no candidates
        """
        if not tasks:
            raise SelectionError("No candidate tasks for consistency repeats")
        if len(first_pass) != len(tasks):
            raise ValueError("Need one first-pass performance per candidate")

        records = [ConsistencyRecord(task_id=task.id) for task in tasks]
        self.state = RepeaterState.RUNNING
        try:
            for repeat in range(1, self.repeats + 1):
                logger.info(
                    f"Consistency repeat {repeat}/{self.repeats} "
                    f"over {len(tasks)} candidates"
                )
                scores = self.evaluator.evaluate_all(tasks, force_cv=True)
                for record, score in zip(records, scores):
                    record.samples.append(score)

            self.state = RepeaterState.AGGREGATING
            threshold = float(np.percentile(np.asarray(first_pass), self.percentile))
            for record in records:
                record.statistic = float(np.percentile(record.samples, self.percentile))
                record.passed = record.statistic >= threshold
        except BaseException:
            self.state = RepeaterState.IDLE
            raise

        winner = best_index([record.statistic for record in records])
        if winner is None:
            self.state = RepeaterState.IDLE
            raise SelectionError("No candidate scored above the sentinel in consistency repeats")

        self.records = records
        self.threshold = threshold
        self.state = RepeaterState.DONE

        n_passed = sum(record.passed for record in records)
        best = records[winner]
        logger.info(
            f"{n_passed}/{len(records)} candidates reach the {self.percentile:g}th "
            f"percentile threshold {threshold:3.2f}%"
        )
        logger.info(
            f"Most consistent task: {best.task_id} "
            f"(statistic {best.statistic:3.2f}%, mean {best.mean:3.2f}% +/- {best.std:3.2f})"
        )
        return best.task_id


class Selector:
    """Picks the winning task of an evaluated queue.

    Args:
        repeats: Consistency repeats; 0 selects on the first pass alone
        percentile: Percentile for the consistency statistic
        repeater: Performs the repeats, required when ``repeats > 0``
    """

    def __init__(
        self,
        repeats: int = 0,
        percentile: float = 0.0,
        repeater: ConsistencyRepeater | None = None,
    ):
        if repeats < 0:
            raise ValueError(f"repeats must be non-negative, got {repeats}")
        if repeats > 0 and repeater is None:
            raise ValueError("Consistency repeats need a ConsistencyRepeater")
        self.repeats = repeats
        self.percentile = percentile
        self.repeater = repeater

    def best_single_run(self, queue: Queue) -> int:
        """ID of the highest first-pass performance.

        Raises:
            SelectionError: If no task beat the sentinel
        """
        tasks = queue.tasks
        winner = best_index([task.performance for task in tasks])
        if winner is None:
            raise SelectionError(f"None of the {len(tasks)} tasks was evaluated successfully")
        return tasks[winner].id

    def select(self, queue: Queue) -> int:
        best_id = self.best_single_run(queue)
        logger.info(
            f"Best first-pass task: {best_id} ({queue[best_id].performance:3.2f}%)"
        )
        if self.repeats == 0:
            return best_id

        candidates = queue.evaluated()
        return self.repeater.run(candidates, [task.performance for task in candidates])

    @property
    def records(self) -> list[ConsistencyRecord]:
        return self.repeater.records if self.repeater is not None else []

    @property
    def threshold(self) -> float | None:
        return self.repeater.threshold if self.repeater is not None else None


@dataclass
class SearchResult:
    """Outcome of a grid search.

    Attributes:
        best_id: ID of the selected task
        tasks: Snapshot of every task (parameters and first-pass performance)
        consistency: Records of the consistency repeats, empty without repeats
        threshold: Global consistency threshold, if repeats ran
        execution_time: Wall time of the search in seconds
        seed: Seed of the random generator
        train_type: How the tasks were scored
    """

    best_id: int
    tasks: list[dict[str, Any]] = field(default_factory=list)
    consistency: list[ConsistencyRecord] = field(default_factory=list)
    threshold: float | None = None
    execution_time: float = 0.0
    seed: int | None = None
    train_type: str = "cv"

    @property
    def best_task(self) -> dict[str, Any]:
        return self.tasks[self.best_id]

    @property
    def n_failed(self) -> int:
        return sum(task["performance"] <= PERFORMANCE_SENTINEL for task in self.tasks)

    def get_summary(self) -> dict[str, Any]:
        """Plain-dict summary suitable for JSON or YAML."""
        return {
            "best_id": self.best_id,
            "best_task": {k: _plain(v) for k, v in self.best_task.items()},
            "total_tasks": len(self.tasks),
            "failed_tasks": self.n_failed,
            "train_type": self.train_type,
            "seed": self.seed,
            "execution_time": round(self.execution_time, 3),
            "threshold": _plain(self.threshold),
            "consistency": [record.to_dict() for record in self.consistency],
            "tasks": [{k: _plain(v) for k, v in task.items()} for task in self.tasks],
        }

    def save_summary(self, path: str | Path) -> Path:
        """Write the summary as YAML (``.yaml``/``.yml``) or JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        summary = self.get_summary()
        with path.open("w") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(summary, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(summary, f, indent=2)

        logger.info(f"Saved search summary to {path}")
        return path
