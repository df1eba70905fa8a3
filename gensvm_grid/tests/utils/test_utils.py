"""
Tests for utility components.

This module tests all utility functions including:
- Dataset readers and label checks
- Prediction output
- Logging setup
- Validation helpers
"""

import logging

import numpy as np
import pytest

from gensvm_grid.utils import (
    DataError,
    Dataset,
    check_labels_contiguous,
    format_predictions,
    read_dataset,
    read_dense,
    read_libsvm,
    setup_logging,
    validate_choices,
    validate_path_exists,
    validate_range,
    write_predictions,
)


class TestDataset:
    """Test the in-memory dataset."""

    def test_shapes_and_classes(self):
        data = Dataset(X=[[0, 1], [2, 3], [4, 5]], y=[1, 3, 2])
        assert (data.n, data.m, data.n_classes) == (3, 2, 3)
        assert data.X.dtype == np.float64
        assert data.has_labels

    def test_unlabelled(self):
        data = Dataset(X=np.zeros((2, 2)))
        assert not data.has_labels
        assert data.n_classes == 0

    def test_label_count_mismatch_raises(self):
        with pytest.raises(DataError):
            Dataset(X=np.zeros((3, 2)), y=[1, 2])

    def test_subset_copies_rows(self):
        data = Dataset(X=np.arange(8.0).reshape(4, 2), y=[1, 2, 1, 2])
        sub = data.subset([3, 0])
        assert sub.X.tolist() == [[6.0, 7.0], [0.0, 1.0]]
        assert sub.y.tolist() == [2, 1]
        sub.X[0, 0] = -1
        assert data.X[3, 0] == 6.0


class TestDenseFormat:
    """Test the dense data format."""

    def test_labelled(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("3\n2\n0.5 1.0 1\n-1 2e-1 2\n3 4 1\n")
        data = read_dense(path)

        assert data.X.tolist() == [[0.5, 1.0], [-1.0, 0.2], [3.0, 4.0]]
        assert data.y.tolist() == [1, 2, 1]

    def test_unlabelled(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("2\n3\n1 2 3\n4 5 6\n")
        data = read_dense(path)
        assert data.y is None
        assert data.m == 3

    def test_wrong_instance_count_raises(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("3\n2\n1 2 1\n")
        with pytest.raises(DataError, match="announces 3"):
            read_dense(path)

    def test_wrong_row_length_raises(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_text("1\n2\n1 2 3 4\n")
        with pytest.raises(DataError):
            read_dense(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DataError, match="Cannot read"):
            read_dense(tmp_path / "missing.txt")


class TestLibSVMFormat:
    """Test the LibSVM data format."""

    def test_sparse_rows(self, tmp_path):
        path = tmp_path / "data.svm"
        path.write_text("1 1:0.5 3:2\n2 2:1.5  # comment\n\n")
        data = read_libsvm(path)

        assert data.X.tolist() == [[0.5, 0.0, 2.0], [0.0, 1.5, 0.0]]
        assert data.y.tolist() == [1, 2]

    def test_unlabelled_with_forced_width(self, tmp_path):
        path = tmp_path / "data.svm"
        path.write_text("1:1 2:2\n3:3\n")
        data = read_libsvm(path, n_features=4)

        assert data.y is None
        assert data.X.shape == (2, 4)

    def test_zero_index_raises(self, tmp_path):
        path = tmp_path / "data.svm"
        path.write_text("1 0:1\n")
        with pytest.raises(DataError, match="start at 1"):
            read_libsvm(path)

    def test_read_dataset_dispatches(self, tmp_path):
        path = tmp_path / "data.svm"
        path.write_text("1 1:1\n2 1:2\n")
        assert read_dataset(path, libsvm_format=True).n == 2


class TestLabelChecks:
    """Test label contiguity."""

    def test_contiguous_labels_pass(self):
        check_labels_contiguous(Dataset(X=np.zeros((3, 1)), y=[2, 1, 3]))

    @pytest.mark.parametrize("labels", [[1, 3, 3], [0, 1, 2], [2, 2, 3]])
    def test_gaps_raise(self, labels):
        with pytest.raises(DataError, match="start from 1"):
            check_labels_contiguous(Dataset(X=np.zeros((3, 1)), y=labels))

    def test_unlabelled_raises(self):
        with pytest.raises(DataError):
            check_labels_contiguous(Dataset(X=np.zeros((3, 1))))


class TestPredictionOutput:
    def test_format_predictions(self):
        assert format_predictions(np.array([1, 3, 2])) == "1 3 2\n"

    def test_write_predictions(self, tmp_path):
        path = write_predictions(tmp_path / "out" / "pred.txt", [2, 1])
        assert path.read_text() == "2\n1\n"


class TestLoggingSetup:
    """Test logging configuration."""

    def test_console_handler(self):
        logger = setup_logging(level="DEBUG", use_colors=False)
        assert logger.name == "gensvm_grid"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert not logger.disabled

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "search.log"
        logger = setup_logging(log_file=log_file, use_colors=False)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "hello" in log_file.read_text()

    def test_quiet_disables_logger(self):
        logger = setup_logging(quiet=True)
        assert logger.disabled
        assert not logger.propagate


class TestValidation:
    """Test validation helpers."""

    def test_validate_range(self):
        assert validate_range(1.5, 1.0, 2.0, "p", min_inclusive=False)
        with pytest.raises(ValueError, match="must be > 1.0"):
            validate_range(1.0, 1.0, 2.0, "p", min_inclusive=False)
        with pytest.raises(ValueError, match="must be <= 2.0"):
            validate_range(2.5, 1.0, 2.0, "p")

    def test_validate_choices(self):
        assert validate_choices(1, {1, 2}, "weight")
        with pytest.raises(ValueError, match="must be one of"):
            validate_choices(3, {1, 2}, "weight")

    def test_validate_path_exists(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        assert validate_path_exists(path, must_be_file=True)
        with pytest.raises(ValueError):
            validate_path_exists(tmp_path, must_be_file=True)
        with pytest.raises(FileNotFoundError):
            validate_path_exists(tmp_path / "missing")
