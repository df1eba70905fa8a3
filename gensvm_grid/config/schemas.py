"""
Configuration schemas for the grid search.

This module defines the enums and dataclasses describing one grid search:
the kernel choice as a tagged union whose variants carry only their own
parameter axes, the bound kernel parameters of a single task, and the
GridSpec holding every parameter range and search setting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

# Canonical order of the kernel axes, slowest varying first
KERNEL_AXES = ("gamma", "coef", "degree")


class GridSpecError(ValueError):
    """Raised when a grid specification violates its invariants."""


class KernelType(Enum):
    """Kernel functions, valued by their grid-file token."""

    LINEAR = "LINEAR"
    POLY = "POLY"
    RBF = "RBF"
    SIGMOID = "SIGMOID"

    @property
    def axes(self) -> tuple[str, ...]:
        """Kernel parameters that are meaningful for this kernel."""
        return _KERNEL_AXES[self]


_KERNEL_AXES: dict[KernelType, tuple[str, ...]] = {
    KernelType.LINEAR: (),
    KernelType.POLY: ("gamma", "coef", "degree"),
    KernelType.RBF: ("gamma",),
    KernelType.SIGMOID: ("gamma", "coef"),
}


class TrainType(Enum):
    """How a task's performance is measured."""

    CV = "cv"  # Cross-validation on the training data
    TRAIN_TEST = "train_test"  # Train on the training data, score the test data


# --- Bound kernels (one per task) ---------------------------------------------


@dataclass(frozen=True)
class Kernel:
    """Kernel with all of its parameters bound to single values."""

    kernel_type: ClassVar[KernelType]

    def params(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in self.kernel_type.axes}


@dataclass(frozen=True)
class LinearKernel(Kernel):
    kernel_type: ClassVar[KernelType] = KernelType.LINEAR


@dataclass(frozen=True)
class PolyKernel(Kernel):
    """k(x, y) = (gamma * <x, y> + coef) ** degree"""

    kernel_type: ClassVar[KernelType] = KernelType.POLY
    gamma: float = 1.0
    coef: float = 0.0
    degree: float = 2.0


@dataclass(frozen=True)
class RBFKernel(Kernel):
    """k(x, y) = exp(-gamma * ||x - y||^2)"""

    kernel_type: ClassVar[KernelType] = KernelType.RBF
    gamma: float = 1.0


@dataclass(frozen=True)
class SigmoidKernel(Kernel):
    """k(x, y) = tanh(gamma * <x, y> + coef)"""

    kernel_type: ClassVar[KernelType] = KernelType.SIGMOID
    gamma: float = 1.0
    coef: float = 0.0


BOUND_KERNELS: dict[KernelType, type[Kernel]] = {
    KernelType.LINEAR: LinearKernel,
    KernelType.POLY: PolyKernel,
    KernelType.RBF: RBFKernel,
    KernelType.SIGMOID: SigmoidKernel,
}


# --- Kernel grids (one per specification) -------------------------------------


@dataclass(frozen=True)
class KernelGrid:
    """Candidate values for the parameters of one kernel type.

    Subclasses declare one tuple field per relevant axis, named after the
    axis with a trailing ``s`` (``gammas``, ``coefs``, ``degrees``). Every
    declared axis must hold at least one value.
    """

    kernel_type: ClassVar[KernelType]

    def __post_init__(self) -> None:
        for name in self.kernel_type.axes:
            values = getattr(self, f"{name}s")
            if not values:
                raise GridSpecError(
                    f"Kernel {self.kernel_type.value} requires at least one "
                    f"value for '{name}'"
                )
            # Frozen dataclass: normalise through object.__setattr__
            object.__setattr__(self, f"{name}s", tuple(float(v) for v in values))

    def axes(self) -> dict[str, list[float]]:
        """Relevant axes in canonical order."""
        return {name: list(getattr(self, f"{name}s")) for name in self.kernel_type.axes}

    def size(self) -> int:
        return math.prod(len(values) for values in self.axes().values())

    def bind(self, **values: float) -> Kernel:
        """Bind one value per relevant axis into a task kernel."""
        return BOUND_KERNELS[self.kernel_type](**values)


@dataclass(frozen=True)
class LinearKernelGrid(KernelGrid):
    kernel_type: ClassVar[KernelType] = KernelType.LINEAR


@dataclass(frozen=True)
class PolyKernelGrid(KernelGrid):
    kernel_type: ClassVar[KernelType] = KernelType.POLY
    gammas: tuple[float, ...] = ()
    coefs: tuple[float, ...] = ()
    degrees: tuple[float, ...] = ()


@dataclass(frozen=True)
class RBFKernelGrid(KernelGrid):
    kernel_type: ClassVar[KernelType] = KernelType.RBF
    gammas: tuple[float, ...] = ()


@dataclass(frozen=True)
class SigmoidKernelGrid(KernelGrid):
    kernel_type: ClassVar[KernelType] = KernelType.SIGMOID
    gammas: tuple[float, ...] = ()
    coefs: tuple[float, ...] = ()


KERNEL_GRIDS: dict[KernelType, type[KernelGrid]] = {
    KernelType.LINEAR: LinearKernelGrid,
    KernelType.POLY: PolyKernelGrid,
    KernelType.RBF: RBFKernelGrid,
    KernelType.SIGMOID: SigmoidKernelGrid,
}


def kernel_grid_from_values(
    kernel_type: KernelType,
    gammas: list[float] | None = None,
    coefs: list[float] | None = None,
    degrees: list[float] | None = None,
) -> KernelGrid:
    """Build the kernel grid variant for ``kernel_type``.

    Axes that are irrelevant to the kernel are dropped with a warning.

    Raises:
        GridSpecError: If an axis the kernel needs has no values
    """
    supplied = {"gamma": gammas, "coef": coefs, "degree": degrees}
    kwargs: dict[str, Any] = {}
    for name in KERNEL_AXES:
        values = supplied[name]
        if name in kernel_type.axes:
            kwargs[f"{name}s"] = tuple(values or ())
        elif values:
            logger.warning(
                f'Field "{name}" ignored with {kernel_type.value} kernel.'
            )
    return KERNEL_GRIDS[kernel_type](**kwargs)


# --- Grid specification --------------------------------------------------------


@dataclass
class GridSpec:
    """Parameter ranges and settings of one grid search.

    Attributes:
        train_file: Path of the training dataset
        test_file: Optional path of a test dataset (selects train/test mode)
        ps: Candidate margin-norm exponents, each in (1, 2]
        kappas: Candidate hinge sharpness values, each > -1
        lambdas: Candidate regularization strengths, each > 0
        epsilons: Candidate convergence tolerances, each > 0
        weight_idxs: Candidate instance weighting schemes, each 1 or 2
        folds: Number of cross-validation folds (>= 2)
        kernel: Kernel grid variant
        repeats: Consistency repeats (0 disables them)
        percentile: Percentile used by consistency repeats, in [0, 100]
    """

    train_file: str
    ps: list[float] = field(default_factory=list)
    kappas: list[float] = field(default_factory=list)
    lambdas: list[float] = field(default_factory=list)
    epsilons: list[float] = field(default_factory=list)
    weight_idxs: list[int] = field(default_factory=list)
    folds: int = 10
    kernel: KernelGrid = field(default_factory=LinearKernelGrid)
    test_file: str | None = None
    repeats: int = 0
    percentile: float = 0.0

    @property
    def kernel_type(self) -> KernelType:
        return self.kernel.kernel_type

    @property
    def train_type(self) -> TrainType:
        return TrainType.CV if self.test_file is None else TrainType.TRAIN_TEST

    def base_axes(self) -> dict[str, list[Any]]:
        """The kernel-independent axes in generation order."""
        return {
            "p": list(self.ps),
            "kappa": list(self.kappas),
            "lambda": list(self.lambdas),
            "epsilon": list(self.epsilons),
            "weight_idx": list(self.weight_idxs),
        }

    @property
    def n_tasks(self) -> int:
        """Number of tasks the grid expands to."""
        base = math.prod(max(1, len(values)) for values in self.base_axes().values())
        return base * self.kernel.size()

    def validate(self) -> None:
        """Check every field against its domain.

        Raises:
            GridSpecError: Listing every violation found
        """
        from .validators import GridSpecValidator

        result = GridSpecValidator.validate(self)
        for issue in result.get_warnings():
            logger.warning(issue.message)
        if not result.is_valid:
            messages = "; ".join(issue.message for issue in result.get_errors())
            raise GridSpecError(f"Invalid grid specification: {messages}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "train_file": self.train_file,
            "test_file": self.test_file,
            "p": list(self.ps),
            "kappa": list(self.kappas),
            "lambda": list(self.lambdas),
            "epsilon": list(self.epsilons),
            "weight": list(self.weight_idxs),
            "folds": self.folds,
            "kernel": self.kernel_type.value,
            **{name: values for name, values in self.kernel.axes().items()},
            "repeats": self.repeats,
            "percentile": self.percentile,
        }

    def to_grid_text(self) -> str:
        """Render the specification in grid-file syntax."""

        def fmt(values: list[Any]) -> str:
            return " ".join(repr(v) for v in values)

        lines = [f"train: {self.train_file}"]
        if self.test_file is not None:
            lines.append(f"test: {self.test_file}")
        lines += [
            f"p: {fmt(self.ps)}",
            f"kappa: {fmt(self.kappas)}",
            f"lambda: {fmt(self.lambdas)}",
            f"epsilon: {fmt(self.epsilons)}",
            f"weight: {fmt(self.weight_idxs)}",
            f"folds: {self.folds}",
            f"repeats: {self.repeats}",
            f"percentile: {self.percentile!r}",
            f"kernel: {self.kernel_type.value}",
        ]
        lines += [f"{name}: {fmt(values)}" for name, values in self.kernel.axes().items()]
        return "\n".join(lines) + "\n"
