"""
Trainer interface.

The grid search treats model fitting as an external collaborator: anything
that implements :class:`Trainer` can be plugged into the evaluator. A trainer
fits an :class:`SVMModel` in place and predicts class labels ``1..K``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from ..config.schemas import Kernel, LinearKernel

if TYPE_CHECKING:
    from ..utils.dataset import Dataset


@dataclass
class SVMModel:
    """Hyperparameters and fitted state of one multiclass SVM.

    Attributes:
        p: Margin-norm exponent in (1, 2]
        kappa: Hinge sharpness, > -1
        lambda_: Regularization strength, > 0
        epsilon: Relative convergence tolerance of the optimizer
        weight_idx: Instance weighting scheme (1 = unit, 2 = group-size corrected)
        kernel: Bound kernel
        n_classes: Number of classes K
        V: Fitted weights, shape (n_features + 1, K - 1), bias in the first row
        support_X: Training instances the kernel is evaluated against
        n_iter: Outer iterations used by the last fit
        loss: Objective value at the end of the last fit
    """

    p: float = 1.0
    kappa: float = 0.0
    lambda_: float = 1e-8
    epsilon: float = 1e-6
    weight_idx: int = 1
    kernel: Kernel = field(default_factory=LinearKernel)
    n_classes: int = 0
    V: np.ndarray | None = None
    support_X: np.ndarray | None = None
    n_iter: int = 0
    loss: float = math.nan

    @property
    def is_fitted(self) -> bool:
        return self.V is not None


@runtime_checkable
class Trainer(Protocol):
    """Fits and applies one model for one parameter setting."""

    def train(
        self, model: SVMModel, data: Dataset, warm_start: SVMModel | None = None
    ) -> None:
        """Fit ``model`` on ``data`` in place.

        Args:
            model: Fresh model carrying the hyperparameters
            data: Labelled training data
            warm_start: Previously fitted model whose weights may seed the fit

        Raises:
            TrainerError: If this configuration cannot be fitted
        """
        ...

    def predict(self, model: SVMModel, data: Dataset) -> np.ndarray:
        """Predict labels ``1..K`` for every instance of ``data``."""
        ...
