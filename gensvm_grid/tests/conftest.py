"""
Test configuration and fixtures for the GenSVM grid search test suite.

This module provides common fixtures and test utilities used across all test modules.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
import logging
from pathlib import Path

import numpy as np
import pytest

from gensvm_grid.trainer import SVMModel, TrainingError
from gensvm_grid.utils import Dataset


def make_blobs(
    n_per_class: int = 20,
    n_classes: int = 3,
    n_features: int = 2,
    spread: float = 0.5,
    seed: int = 0,
) -> Dataset:
    """Well separated Gaussian blobs with labels ``1..n_classes``."""
    rng = np.random.default_rng(seed)
    centers = 4.0 * np.eye(n_classes, n_features)
    X = np.vstack(
        [centers[k] + spread * rng.standard_normal((n_per_class, n_features)) for k in range(n_classes)]
    )
    y = np.repeat(np.arange(1, n_classes + 1), n_per_class)
    return Dataset(X=X, y=y, source="blobs")


def write_dense(path: Path, data: Dataset, with_labels: bool = True) -> Path:
    """Write a dataset in the dense format."""
    lines = [str(data.n), str(data.m)]
    for i in range(data.n):
        values = [repr(float(v)) for v in data.X[i]]
        if with_labels and data.y is not None:
            values.append(str(int(data.y[i])))
        lines.append(" ".join(values))
    path.write_text("\n".join(lines) + "\n")
    return path


class CentroidTrainer:
    """Nearest-centroid stand-in for the GenSVM trainer.

    Deterministic and fast; ignores every hyperparameter except that tasks
    matching ``fail_when`` raise a TrainingError.
    """

    def __init__(self, fail_when: Callable[[SVMModel], bool] | None = None):
        self.fail_when = fail_when
        self.train_calls: list[SVMModel] = []
        self.warm_starts: list[SVMModel | None] = []

    def train(self, model: SVMModel, data: Dataset, warm_start: SVMModel | None = None) -> None:
        if self.fail_when is not None and self.fail_when(model):
            raise TrainingError(f"configured failure for p={model.p}")
        self.train_calls.append(model)
        self.warm_starts.append(warm_start)
        n_classes = model.n_classes or data.n_classes
        model.n_classes = n_classes
        model.V = np.vstack(
            [
                data.X[data.y == k].mean(axis=0) if np.any(data.y == k) else np.full(data.m, np.inf)
                for k in range(1, n_classes + 1)
            ]
        )

    def predict(self, model: SVMModel, data: Dataset) -> np.ndarray:
        distances = ((data.X[:, None, :] - model.V[None, :, :]) ** 2).sum(axis=2)
        return distances.argmin(axis=1).astype(np.int64) + 1


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo logger changes made by setup_logging so caplog keeps working."""
    yield
    package_logger = logging.getLogger("gensvm_grid")
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()
    package_logger.disabled = False
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def blobs() -> Dataset:
    """Three separable classes, 20 instances each."""
    return make_blobs()


@pytest.fixture
def centroid_trainer() -> CentroidTrainer:
    return CentroidTrainer()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def train_file(tmp_path: Path, blobs: Dataset) -> Path:
    return write_dense(tmp_path / "blobs.train", blobs)


@pytest.fixture
def write_grid(tmp_path: Path) -> Callable[[str], Path]:
    """Write grid file text to a temporary file."""

    def _write(text: str, name: str = "grid.txt") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def basic_grid_text() -> str:
    """Linear grid of 3 * 2 * 2 = 12 tasks without data files."""
    return (
        "train: data.train\n"
        "p: 1.0001 1.5 2.0\n"
        "kappa: -0.9 0.5\n"
        "lambda: 1.0 0.01\n"
        "epsilon: 1e-6\n"
        "weight: 1\n"
        "folds: 5\n"
    )


@pytest.fixture
def blobs_factory() -> Callable[..., Dataset]:
    """Build blob datasets with custom size, spread or seed."""
    return make_blobs


@pytest.fixture
def trainer_factory() -> type[CentroidTrainer]:
    """Build centroid trainers, optionally failing for some models."""
    return CentroidTrainer


@pytest.fixture
def dense_writer() -> Callable[..., Path]:
    """Write datasets in the dense format."""
    return write_dense
