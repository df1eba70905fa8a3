"""
GenSVM Grid Search - hyperparameter search for the generalized multiclass SVM.

This package provides:
- A grid file format describing the candidate parameter values
- Cross-validated or train/test evaluation of every parameter combination
- Selection of the best combination, optionally by the consistency of its
  score over repeated cross-validation
- Prediction of a test set with the selected combination

Main Components:
- config: Grid specification, grid file parser and validation
- search: Tasks, queue, evaluator and selection
- trainer: The GenSVM training backend
- utils: Datasets, logging and validation helpers

Usage:
    from gensvm_grid import GridSearchRunner

    runner = GridSearchRunner.from_grid_file("grid.txt", seed=42)
    runner.load_data()
    result = runner.run()
    predictions = runner.predict_test(result)
"""

__version__ = "1.0.0"

from .config import (
    GridFileError,
    GridFileParser,
    GridSpec,
    GridSpecError,
    KernelType,
    TrainType,
)
from .core import GridSearchRunner
from .search import (
    ConsistencyRecord,
    ConsistencyRepeater,
    Evaluator,
    Queue,
    SearchResult,
    SelectionError,
    Selector,
    Task,
    TaskFactory,
)
from .trainer import GenSVMTrainer, SVMModel, Trainer, TrainerError
from .utils import DataError, Dataset, read_dataset, setup_logging

__all__ = [
    # Main API
    "GridSearchRunner",
    # Configuration
    "GridFileError",
    "GridFileParser",
    "GridSpec",
    "GridSpecError",
    "KernelType",
    "TrainType",
    # Search
    "ConsistencyRecord",
    "ConsistencyRepeater",
    "Evaluator",
    "Queue",
    "SearchResult",
    "SelectionError",
    "Selector",
    "Task",
    "TaskFactory",
    # Training
    "GenSVMTrainer",
    "SVMModel",
    "Trainer",
    "TrainerError",
    # Data
    "DataError",
    "Dataset",
    "read_dataset",
    "setup_logging",
]
