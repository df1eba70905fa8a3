"""
Utilities Component

This module provides common utilities and helper functions:
- Logging setup and configuration
- Dataset readers, label checks and prediction output
- Validation helpers
"""

from .dataset import (
    DataError,
    Dataset,
    check_labels_contiguous,
    format_predictions,
    read_dataset,
    read_dense,
    read_libsvm,
    write_predictions,
)
from .logging import (
    setup_logging,
)
from .validation import (
    validate_choices,
    validate_path_exists,
    validate_range,
)

__all__ = [
    # Logging
    "setup_logging",
    # Datasets
    "DataError",
    "Dataset",
    "check_labels_contiguous",
    "format_predictions",
    "read_dataset",
    "read_dense",
    "read_libsvm",
    "write_predictions",
    # Validation
    "validate_choices",
    "validate_path_exists",
    "validate_range",
]
