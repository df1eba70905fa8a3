"""
Datasets

In-memory datasets and the two on-disk formats the grid search reads:

- dense: first line holds the number of instances ``n``, the second line the
  number of features ``m``, followed by ``n`` rows of ``m`` feature values and
  an optional trailing class label.
- LibSVM/SVMlight: one instance per line, ``label index:value ...`` with
  1-based feature indices. The label may be omitted for unlabelled data.

Class labels are integers ``1..K``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from .validation import validate_path_exists

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class DataError(Exception):
    """Raised for unreadable or malformed datasets."""


@dataclass
class Dataset:
    """Feature matrix with optional labels.

    Attributes:
        X: Feature matrix of shape (n, m)
        y: Integer labels in ``1..K`` of shape (n,), or None when unlabelled
        source: Where the data was read from, for messages
    """

    X: np.ndarray
    y: np.ndarray | None = None
    source: str = "<memory>"

    def __post_init__(self) -> None:
        self.X = np.asarray(self.X, dtype=np.float64)
        if self.X.ndim != 2:
            raise DataError(f"{self.source}: feature matrix must be 2-D, got {self.X.ndim}-D")
        if self.y is not None:
            self.y = np.asarray(self.y, dtype=np.int64)
            if self.y.shape != (self.X.shape[0],):
                raise DataError(
                    f"{self.source}: {self.y.shape[0]} labels for {self.X.shape[0]} instances"
                )

    @property
    def n(self) -> int:
        return int(self.X.shape[0])

    @property
    def m(self) -> int:
        return int(self.X.shape[1])

    @property
    def has_labels(self) -> bool:
        return self.y is not None

    @property
    def n_classes(self) -> int:
        """Number of classes, taken as the largest label."""
        if self.y is None or self.y.size == 0:
            return 0
        return int(self.y.max())

    def subset(self, indices: np.ndarray | Sequence[int]) -> Dataset:
        """Return a new dataset holding the given rows (features are copied)."""
        idx = np.asarray(indices, dtype=np.int64)
        return Dataset(
            X=self.X[idx],
            y=None if self.y is None else self.y[idx],
            source=self.source,
        )


def _parse_label(token: str, path: Path, lineno: int) -> int:
    value = float(token)
    if not value.is_integer():
        raise DataError(f"{path}:{lineno}: class label {token!r} is not an integer")
    return int(value)


def read_dense(path: str | Path) -> Dataset:
    """Read a dataset in the dense format.

    Raises:
        DataError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        validate_path_exists(path, must_be_file=True, name="Data file")
        lines = path.read_text().splitlines()
    except (OSError, ValueError) as e:
        raise DataError(f"Cannot read data file {path}: {e}") from e

    rows = [line.split() for line in lines if line.strip()]
    if len(rows) < 2:
        raise DataError(f"{path}: expected instance and feature counts on the first two lines")

    try:
        n = int(rows[0][0])
        m = int(rows[1][0])
    except ValueError as e:
        raise DataError(f"{path}: invalid header: {e}") from e

    body = rows[2:]
    if len(body) != n:
        raise DataError(f"{path}: header announces {n} instances, found {len(body)}")

    X = np.empty((n, m), dtype=np.float64)
    labels: list[int] = []
    for i, tokens in enumerate(body):
        lineno = i + 3
        if len(tokens) not in (m, m + 1):
            raise DataError(
                f"{path}:{lineno}: expected {m} or {m + 1} values, found {len(tokens)}"
            )
        try:
            X[i] = [float(t) for t in tokens[:m]]
            if len(tokens) == m + 1:
                labels.append(_parse_label(tokens[m], path, lineno))
        except ValueError as e:
            raise DataError(f"{path}:{lineno}: {e}") from e

    if labels and len(labels) != n:
        raise DataError(f"{path}: labels are present on only some of the rows")

    y = np.asarray(labels, dtype=np.int64) if labels else None
    logger.debug(f"Read {n} instances with {m} features from {path}")
    return Dataset(X=X, y=y, source=str(path))


def read_libsvm(path: str | Path, n_features: int | None = None) -> Dataset:
    """Read a dataset in LibSVM/SVMlight format into a dense matrix.

    Args:
        path: File to read
        n_features: Force the number of features (e.g. to match training data)

    Raises:
        DataError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        validate_path_exists(path, must_be_file=True, name="Data file")
        lines = path.read_text().splitlines()
    except (OSError, ValueError) as e:
        raise DataError(f"Cannot read data file {path}: {e}") from e

    entries: list[dict[int, float]] = []
    labels: list[int] = []
    max_index = 0
    for lineno, line in enumerate(lines, start=1):
        # Trailing comments are allowed in SVMlight files
        content = line.split("#", 1)[0].strip()
        if not content:
            continue
        tokens = content.split()
        try:
            if ":" not in tokens[0]:
                labels.append(_parse_label(tokens[0], path, lineno))
                tokens = tokens[1:]
            row: dict[int, float] = {}
            for token in tokens:
                index, value = token.split(":", 1)
                col = int(index)
                if col < 1:
                    raise DataError(f"{path}:{lineno}: feature indices start at 1")
                row[col - 1] = float(value)
                max_index = max(max_index, col)
        except ValueError as e:
            raise DataError(f"{path}:{lineno}: {e}") from e
        entries.append(row)

    if labels and len(labels) != len(entries):
        raise DataError(f"{path}: labels are present on only some of the rows")

    m = max_index if n_features is None else n_features
    if max_index > m:
        raise DataError(f"{path}: feature index {max_index} exceeds {m} features")

    X = np.zeros((len(entries), m), dtype=np.float64)
    for i, row in enumerate(entries):
        for col, value in row.items():
            X[i, col] = value

    y = np.asarray(labels, dtype=np.int64) if labels else None
    logger.debug(f"Read {len(entries)} sparse instances with {m} features from {path}")
    return Dataset(X=X, y=y, source=str(path))


def read_dataset(
    path: str | Path, libsvm_format: bool = False, n_features: int | None = None
) -> Dataset:
    """Read a dataset in the dense or the LibSVM format."""
    if libsvm_format:
        return read_libsvm(path, n_features=n_features)
    return read_dense(path)


def check_labels_contiguous(data: Dataset) -> None:
    """Require labels ``1..K`` with every class present.

    Raises:
        DataError: If the dataset is unlabelled or the labels have gaps
    """
    if data.y is None:
        raise DataError(f"{data.source}: training data must be labelled")
    present = np.unique(data.y)
    expected = np.arange(1, present.size + 1)
    if present.size == 0 or not np.array_equal(present, expected):
        raise DataError(
            f"{data.source}: class labels should start from 1 and have no gaps, "
            f"found {present.tolist()}"
        )


def format_predictions(labels: np.ndarray | Sequence[int]) -> str:
    """Space-separated labels, newline-terminated."""
    return " ".join(str(int(label)) for label in labels) + "\n"


def write_predictions(path: str | Path, labels: np.ndarray | Sequence[int]) -> Path:
    """Write one predicted label per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        for label in labels:
            f.write(f"{int(label)}\n")
    logger.info(f"Predictions written to {path}")
    return path
