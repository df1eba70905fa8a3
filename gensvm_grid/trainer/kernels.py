"""
Kernel evaluation.

Computes kernel matrices between two sets of instances with torch. The linear
kernel never builds a matrix: the trainer works on the raw features instead.
"""

from __future__ import annotations

import logging

import numpy as np
import torch

from ..config.schemas import Kernel, KernelType
from .utils import KernelError

logger = logging.getLogger(__name__)


def kernel_matrix(kernel: Kernel, X: torch.Tensor, Y: torch.Tensor) -> torch.Tensor:
    """Kernel values between the rows of ``X`` and the rows of ``Y``.

    Args:
        kernel: Bound nonlinear kernel
        X: Tensor of shape (n, m)
        Y: Tensor of shape (r, m)

    Returns:
        Tensor of shape (n, r)

    Raises:
        KernelError: For the linear kernel or when values are not finite
    """
    kernel_type = kernel.kernel_type
    if kernel_type == KernelType.RBF:
        K = torch.exp(-kernel.gamma * torch.cdist(X, Y).pow(2))
    elif kernel_type == KernelType.POLY:
        K = (kernel.gamma * (X @ Y.T) + kernel.coef).pow(kernel.degree)
    elif kernel_type == KernelType.SIGMOID:
        K = torch.tanh(kernel.gamma * (X @ Y.T) + kernel.coef)
    else:
        raise KernelError(f"No kernel matrix for the {kernel_type.value} kernel")

    if not torch.isfinite(K).all():
        raise KernelError(
            f"{kernel_type.value} kernel with {kernel.params()} produced non-finite values"
        )
    return K


def kernel_features(
    kernel: Kernel, X: np.ndarray, support_X: np.ndarray | None = None
) -> torch.Tensor:
    """Feature representation the optimizer works on.

    Linear kernels use the instances themselves; nonlinear kernels use the
    kernel values against ``support_X`` (the training instances).
    """
    features = torch.as_tensor(X, dtype=torch.float64)
    if kernel.kernel_type == KernelType.LINEAR:
        return features
    if support_X is None:
        raise KernelError("Nonlinear kernels need the training instances")
    support = torch.as_tensor(support_X, dtype=torch.float64)
    logger.debug(
        f"Computing {kernel.kernel_type.value} kernel: {features.shape[0]} x {support.shape[0]}"
    )
    return kernel_matrix(kernel, features, support)
