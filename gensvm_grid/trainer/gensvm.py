"""
GenSVM trainer.

Reference implementation of the generalized multiclass SVM objective used as
the default trainer of the grid search. Instances are projected into a
(K - 1)-dimensional space in which every class is a vertex of a regular
simplex; errors against the other classes go through a Huber hinge with
sharpness ``kappa`` and are aggregated with a ``p``-norm::

    L(V) = 1/n sum_i rho_i * (sum_{k != y_i} h(q_ik) ** p) ** (1 / p)
           + lambda * ||W||^2

where ``q_ik = s_i . (u_{y_i} - u_k)``, ``s_i`` is the projection of instance
i and ``W`` are the non-bias rows of ``V``. The objective is minimized with
L-BFGS in double precision until its relative change drops below ``epsilon``.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
import torch

from ..config.schemas import KernelType
from .base import SVMModel
from .kernels import kernel_features
from .utils import TrainingError

if TYPE_CHECKING:
    from ..utils.dataset import Dataset

logger = logging.getLogger(__name__)

# Lower bound inside the p-norm keeps the gradient defined at zero error
_NORM_FLOOR = 1e-300


def simplex_vertices(n_classes: int) -> np.ndarray:
    """Vertices of a regular simplex centred at the origin, one row per class.

    Returns:
        Array of shape (K, K - 1) with unit distance between any two vertices
    """
    K = n_classes
    U = np.zeros((K, K - 1), dtype=np.float64)
    for l in range(1, K):  # noqa: E741
        scale = math.sqrt(2 * (l * l + l))
        for k in range(1, K + 1):
            if k <= l:
                U[k - 1, l - 1] = -1.0 / scale
            elif k == l + 1:
                U[k - 1, l - 1] = l / scale
    return U


def huber_hinge(q: torch.Tensor, kappa: float) -> torch.Tensor:
    """Huber hinge error of the margins ``q``."""
    linear = 1.0 - q - (kappa + 1.0) / 2.0
    quadratic = (1.0 - q).pow(2) / (2.0 * (kappa + 1.0))
    return torch.where(
        q <= -kappa, linear, torch.where(q <= 1.0, quadratic, torch.zeros_like(q))
    )


def instance_weights(y: torch.Tensor, n_classes: int, weight_idx: int) -> torch.Tensor:
    """Per-instance weights: unit (1) or inversely proportional to class size (2)."""
    n = y.shape[0]
    if weight_idx == 1:
        return torch.ones(n, dtype=torch.float64)
    if weight_idx == 2:
        counts = torch.bincount(y, minlength=n_classes).to(torch.float64)
        return n / (n_classes * counts[y])
    raise TrainingError(f"Unknown weighting scheme: {weight_idx}")


def gensvm_loss(
    V: torch.Tensor,
    Z: torch.Tensor,
    y: torch.Tensor,
    U: torch.Tensor,
    rho: torch.Tensor,
    model: SVMModel,
) -> torch.Tensor:
    """GenSVM objective for weights ``V`` on augmented features ``Z``."""
    projections = (Z @ V) @ U.T  # (n, K)
    q = projections.gather(1, y.unsqueeze(1)) - projections
    errors = huber_hinge(q, model.kappa)
    errors = errors.masked_fill(
        torch.nn.functional.one_hot(y, U.shape[0]).bool(), 0.0
    )
    per_instance = errors.pow(model.p).sum(dim=1).clamp_min(_NORM_FLOOR).pow(1.0 / model.p)
    penalty = model.lambda_ * V[1:].pow(2).sum()
    return (rho * per_instance).mean() + penalty


def _augment(features: torch.Tensor) -> torch.Tensor:
    ones = torch.ones((features.shape[0], 1), dtype=features.dtype)
    return torch.cat([ones, features], dim=1)


class GenSVMTrainer:
    """Fits SVMModel instances with L-BFGS.

    Args:
        max_iter: Maximum number of outer L-BFGS steps
        lbfgs_iter: Inner iterations per L-BFGS step
    """

    def __init__(self, max_iter: int = 200, lbfgs_iter: int = 20):
        self.max_iter = max_iter
        self.lbfgs_iter = lbfgs_iter

    def train(
        self, model: SVMModel, data: Dataset, warm_start: SVMModel | None = None
    ) -> None:
        if data.y is None:
            raise TrainingError(f"{data.source}: training data must be labelled")

        n_classes = model.n_classes or data.n_classes
        if n_classes < 2:
            raise TrainingError(f"Need at least two classes, got {n_classes}")
        model.n_classes = n_classes

        support_X = None if model.kernel.kernel_type == KernelType.LINEAR else data.X
        Z = _augment(kernel_features(model.kernel, data.X, support_X))
        y = torch.as_tensor(data.y - 1, dtype=torch.int64)
        U = torch.as_tensor(simplex_vertices(n_classes))
        rho = instance_weights(y, n_classes, model.weight_idx)

        shape = (Z.shape[1], n_classes - 1)
        if warm_start is not None and warm_start.V is not None and warm_start.V.shape == shape:
            V = torch.tensor(warm_start.V, dtype=torch.float64, requires_grad=True)
        else:
            V = torch.zeros(shape, dtype=torch.float64, requires_grad=True)

        optimizer = torch.optim.LBFGS(
            [V], lr=1.0, max_iter=self.lbfgs_iter, line_search_fn="strong_wolfe"
        )

        def closure() -> torch.Tensor:
            optimizer.zero_grad()
            loss = gensvm_loss(V, Z, y, U, rho, model)
            loss.backward()
            return loss

        with torch.no_grad():
            previous = gensvm_loss(V, Z, y, U, rho, model).item()

        current = previous
        n_iter = 0
        for n_iter in range(1, self.max_iter + 1):
            optimizer.step(closure)
            with torch.no_grad():
                current = gensvm_loss(V, Z, y, U, rho, model).item()
            if not math.isfinite(current):
                raise TrainingError(
                    f"Optimization diverged after {n_iter} iterations (loss={current})"
                )
            if abs(previous - current) / max(abs(current), _NORM_FLOOR) < model.epsilon:
                break
            previous = current
        else:
            logger.debug(f"No convergence within {self.max_iter} iterations (loss={current:.6g})")

        model.V = V.detach().numpy().copy()
        model.support_X = support_X
        model.n_iter = n_iter
        model.loss = current
        logger.debug(f"Fitted model in {n_iter} iterations, loss={current:.6g}")

    def predict(self, model: SVMModel, data: Dataset) -> np.ndarray:
        if model.V is None:
            raise TrainingError("Model must be trained before predicting")

        Z = _augment(kernel_features(model.kernel, data.X, model.support_X))
        with torch.no_grad():
            S = Z @ torch.as_tensor(model.V)
            U = torch.as_tensor(simplex_vertices(model.n_classes))
            distances = torch.cdist(S, U)
        return distances.argmin(dim=1).numpy().astype(np.int64) + 1
