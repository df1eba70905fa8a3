"""
Trainer Component

The training backend used to score a single parameter configuration:
- Trainer protocol and the SVMModel it fits
- GenSVMTrainer, the default torch implementation
- Kernel evaluation
- Error hierarchy, seeding and timing helpers
"""

from .base import (
    SVMModel,
    Trainer,
)
from .gensvm import (
    GenSVMTrainer,
    gensvm_loss,
    huber_hinge,
    instance_weights,
    simplex_vertices,
)
from .kernels import (
    kernel_features,
    kernel_matrix,
)
from .utils import (
    KernelError,
    Stopwatch,
    TrainerError,
    TrainingError,
    format_time,
    seed_everything,
)

__all__ = [
    # Interface
    "SVMModel",
    "Trainer",
    # GenSVM
    "GenSVMTrainer",
    "gensvm_loss",
    "huber_hinge",
    "instance_weights",
    "simplex_vertices",
    # Kernels
    "kernel_features",
    "kernel_matrix",
    # Utilities
    "KernelError",
    "Stopwatch",
    "TrainerError",
    "TrainingError",
    "format_time",
    "seed_everything",
]
