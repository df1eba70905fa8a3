"""
Configuration Component

This module provides the configuration side of a grid search:
- Grid specification schemas with kernel-specific parameter axes
- The grid file parser
- Specification validation
- Task naming
"""

from .grid_file import (
    GridFileError,
    GridFileParser,
)
from .naming import (
    TaskNaming,
)
from .schemas import (
    BOUND_KERNELS,
    KERNEL_AXES,
    KERNEL_GRIDS,
    GridSpec,
    GridSpecError,
    Kernel,
    KernelGrid,
    KernelType,
    LinearKernel,
    LinearKernelGrid,
    PolyKernel,
    PolyKernelGrid,
    RBFKernel,
    RBFKernelGrid,
    SigmoidKernel,
    SigmoidKernelGrid,
    TrainType,
    kernel_grid_from_values,
)
from .validators import (
    GridSpecValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = [  # noqa: RUF022
    # Parsing
    "GridFileError",
    "GridFileParser",
    # Validation
    "GridSpecValidator",
    "ValidationIssue",
    "ValidationResult",
    # Enums
    "KernelType",
    "TrainType",
    # Schemas
    "GridSpec",
    "GridSpecError",
    "KERNEL_AXES",
    "KERNEL_GRIDS",
    "BOUND_KERNELS",
    "Kernel",
    "KernelGrid",
    "LinearKernel",
    "LinearKernelGrid",
    "PolyKernel",
    "PolyKernelGrid",
    "RBFKernel",
    "RBFKernelGrid",
    "SigmoidKernel",
    "SigmoidKernelGrid",
    "kernel_grid_from_values",
    # Naming
    "TaskNaming",
]
