"""
Tests for selection of the best task.

This module tests:
- First-pass argmax with ties to the lowest ID
- Consistency repeats and their percentile statistic
- Search summaries
"""

import json
from unittest.mock import MagicMock

import numpy as np
import pytest
import yaml

from gensvm_grid.config import GridSpec
from gensvm_grid.search import (
    PERFORMANCE_SENTINEL,
    ConsistencyRecord,
    ConsistencyRepeater,
    Evaluator,
    Queue,
    RepeaterState,
    SearchResult,
    SelectionError,
    Selector,
    Task,
    TaskFactory,
)


def queue_with(performances):
    queue = Queue()
    for i, performance in enumerate(performances):
        queue.append(
            Task(p=1.1 + 0.1 * i, kappa=0.0, lambda_=1.0, epsilon=1e-6, weight_idx=1, performance=performance)
        )
    return queue.seal()


def scripted_evaluator(rounds):
    """Evaluator double returning one list of scores per repeat."""
    evaluator = MagicMock(spec=Evaluator)
    evaluator.evaluate_all.side_effect = [list(scores) for scores in rounds]
    return evaluator


class TestSelector:
    """Test first-pass selection."""

    def test_highest_performance_wins(self):
        assert Selector().select(queue_with([50.0, 80.0, 70.0])) == 1

    def test_ties_go_to_lowest_id(self):
        assert Selector().select(queue_with([60.0, 90.0, 90.0, 90.0])) == 1

    def test_failed_tasks_are_skipped(self):
        queue = queue_with([PERFORMANCE_SENTINEL, 0.0, PERFORMANCE_SENTINEL])
        assert Selector().select(queue) == 1

    def test_all_failed_raises(self):
        with pytest.raises(SelectionError):
            Selector().select(queue_with([PERFORMANCE_SENTINEL] * 3))

    def test_repeats_require_repeater(self):
        with pytest.raises(ValueError):
            Selector(repeats=3)

    def test_no_records_without_repeats(self):
        selector = Selector()
        selector.select(queue_with([10.0]))
        assert selector.records == []
        assert selector.threshold is None


class TestConsistencyRepeater:
    """Test consistency repeats."""

    def test_records_one_sample_per_repeat(self):
        queue = queue_with([80.0, 90.0, 70.0])
        evaluator = scripted_evaluator([[80, 90, 70], [82, 88, 71], [78, 86, 69]])
        repeater = ConsistencyRepeater(evaluator, repeats=3, percentile=50)

        best = repeater.run(queue.tasks, [80.0, 90.0, 70.0])

        assert best == 1
        assert [len(record.samples) for record in repeater.records] == [3, 3, 3]
        assert repeater.records[1].statistic == 88.0
        assert repeater.state == RepeaterState.DONE
        for call in evaluator.evaluate_all.call_args_list:
            assert call.kwargs == {"force_cv": True}

    def test_low_percentile_prefers_stable_task(self):
        """Test that a volatile task loses at a low percentile and wins at a high one."""
        tasks = queue_with([90.0, 85.0]).tasks
        rounds = [[99, 85], [60, 86], [98, 84]]

        low = ConsistencyRepeater(scripted_evaluator(rounds), repeats=3, percentile=0)
        high = ConsistencyRepeater(scripted_evaluator(rounds), repeats=3, percentile=100)

        assert low.run(tasks, [90.0, 85.0]) == 1
        assert high.run(tasks, [90.0, 85.0]) == 0

    def test_statistic_is_monotone_in_percentile(self):
        tasks = queue_with([50.0]).tasks
        rounds = [[40.0], [55.0], [47.0], [62.0]]
        statistics = []
        for percentile in (0, 25, 50, 75, 100):
            repeater = ConsistencyRepeater(scripted_evaluator(rounds), 4, percentile)
            repeater.run(tasks, [50.0])
            statistics.append(repeater.records[0].statistic)

        assert statistics == sorted(statistics)
        assert statistics[0] == 40.0
        assert statistics[-1] == 62.0

    def test_ties_go_to_lowest_id(self):
        tasks = queue_with([70.0, 70.0, 70.0]).tasks
        repeater = ConsistencyRepeater(scripted_evaluator([[70, 75, 75]]), repeats=1)
        assert repeater.run(tasks, [70.0] * 3) == 1

    def test_threshold_and_passed(self):
        tasks = queue_with([60.0, 80.0]).tasks
        repeater = ConsistencyRepeater(scripted_evaluator([[55, 85]]), repeats=1, percentile=50)
        repeater.run(tasks, [60.0, 80.0])

        assert repeater.threshold == 70.0
        assert [record.passed for record in repeater.records] == [False, True]

    def test_failed_repeat_counts_as_sentinel(self):
        tasks = queue_with([90.0, 80.0]).tasks
        rounds = [[95, 80], [PERFORMANCE_SENTINEL, 81]]
        repeater = ConsistencyRepeater(scripted_evaluator(rounds), repeats=2, percentile=0)

        assert repeater.run(tasks, [90.0, 80.0]) == 1
        assert repeater.records[0].samples == [95, PERFORMANCE_SENTINEL]

    def test_no_candidates_raises(self):
        repeater = ConsistencyRepeater(scripted_evaluator([]), repeats=1)
        with pytest.raises(SelectionError):
            repeater.run([], [])

    def test_error_resets_state(self):
        evaluator = MagicMock(spec=Evaluator)
        evaluator.evaluate_all.side_effect = RuntimeError("boom")
        repeater = ConsistencyRepeater(evaluator, repeats=2)

        with pytest.raises(RuntimeError):
            repeater.run(queue_with([50.0]).tasks, [50.0])
        assert repeater.state == RepeaterState.IDLE
        assert repeater.records == []

    @pytest.mark.parametrize(("repeats", "percentile"), [(0, 50), (2, -1), (2, 101)])
    def test_invalid_settings_raise(self, repeats, percentile):
        with pytest.raises(ValueError):
            ConsistencyRepeater(scripted_evaluator([]), repeats, percentile)

    def test_selector_delegates_to_repeater(self):
        queue = queue_with([90.0, PERFORMANCE_SENTINEL, 85.0])
        evaluator = scripted_evaluator([[60, 86], [65, 84]])
        repeater = ConsistencyRepeater(evaluator, repeats=2, percentile=0)
        selector = Selector(repeats=2, percentile=0, repeater=repeater)

        assert selector.select(queue) == 2
        # only tasks with a first-pass score are candidates
        candidates = evaluator.evaluate_all.call_args.args[0]
        assert [task.id for task in candidates] == [0, 2]
        assert [record.task_id for record in selector.records] == [0, 2]

    def test_repeats_with_real_evaluator(self, blobs, centroid_trainer):
        """Test that every repeat draws a fresh fold plan from the generator."""
        spec = GridSpec(
            train_file="data.train",
            ps=[1.5, 2.0],
            kappas=[0.0],
            lambdas=[1.0],
            epsilons=[1e-6],
            weight_idxs=[1],
            folds=5,
        )
        queue = TaskFactory(spec).create_queue(blobs)
        rng = np.random.default_rng(3)
        evaluator = Evaluator(centroid_trainer, rng)
        evaluator.run(queue)

        repeater = ConsistencyRepeater(evaluator, repeats=3, percentile=5)
        best = Selector(3, 5, repeater).select(queue)

        assert best == 0
        assert len(centroid_trainer.train_calls) == 2 * 5 * 4
        assert all(record.samples == [100.0] * 3 for record in repeater.records)


class TestConsistencyRecord:
    def test_mean_and_std(self):
        record = ConsistencyRecord(task_id=0, samples=[80.0, 90.0])
        assert record.mean == 85.0
        assert record.std == 5.0

    def test_empty_record(self):
        record = ConsistencyRecord(task_id=0)
        assert np.isnan(record.mean)
        assert record.to_dict()["samples"] == []


class TestSearchResult:
    """Test search summaries."""

    def make_result(self):
        queue = queue_with([70.0, PERFORMANCE_SENTINEL, 90.0])
        return SearchResult(
            best_id=2,
            tasks=[task.to_dict() for task in queue],
            consistency=[ConsistencyRecord(task_id=2, samples=[90.0], statistic=90.0, passed=True)],
            threshold=np.float64(80.0),
            execution_time=1.23456,
            seed=42,
        )

    def test_summary(self):
        summary = self.make_result().get_summary()

        assert summary["best_id"] == 2
        assert summary["best_task"]["performance"] == 90.0
        assert summary["total_tasks"] == 3
        assert summary["failed_tasks"] == 1
        assert summary["seed"] == 42
        assert summary["execution_time"] == 1.235

    def test_save_json(self, tmp_path):
        path = self.make_result().save_summary(tmp_path / "summary.json")
        data = json.loads(path.read_text())
        assert data["best_id"] == 2
        assert data["consistency"][0]["passed"] is True

    def test_save_yaml(self, tmp_path):
        path = self.make_result().save_summary(tmp_path / "out" / "summary.yaml")
        data = yaml.safe_load(path.read_text())
        assert data["best_task"]["id"] == 2
        assert data["tasks"][1]["performance"] == PERFORMANCE_SENTINEL
