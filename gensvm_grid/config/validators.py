"""
Grid Specification Validation

This module checks a parsed grid specification before any task is generated:
- Parameter domains (margin exponent, sharpness, regularization, ...)
- Search settings (folds, repeats, percentile)
- Soft issues such as duplicated candidate values, reported as warnings
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from ..utils.validation import validate_choices, validate_range

if TYPE_CHECKING:
    from .schemas import GridSpec

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """Represents a validation issue."""

    level: str  # "error", "warning"
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    """Result of grid specification validation."""

    is_valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def get_errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == "error"]

    def get_warnings(self) -> list[ValidationIssue]:
        return list(self.warnings)

    def add_error(self, message: str, field: str | None = None) -> None:
        self.issues.append(ValidationIssue("error", message, field))
        self.is_valid = False

    def add_warning(self, message: str, field: str | None = None) -> None:
        self.warnings.append(ValidationIssue("warning", message, field))


class GridSpecValidator:
    """Validates grid specifications against the parameter domains."""

    # (min, max, min_inclusive, max_inclusive) per list field
    PARAMETER_DOMAINS: ClassVar[dict[str, tuple[Any, Any, bool, bool]]] = {
        "p": (1.0, 2.0, False, True),
        "kappa": (-1.0, None, False, True),
        "lambda": (0.0, None, False, True),
        "epsilon": (0.0, None, False, True),
    }

    VALID_WEIGHT_IDXS: ClassVar[set[int]] = {1, 2}
    MIN_FOLDS = 2

    @classmethod
    def validate(cls, spec: GridSpec) -> ValidationResult:
        """Validate a complete grid specification.

        Args:
            spec: Grid specification to validate

        Returns:
            ValidationResult with every error and warning found
        """
        result = ValidationResult()

        if not spec.train_file:
            result.add_error("Training data file is required", "train")

        cls._validate_parameters(spec, result)
        cls._validate_settings(spec, result)

        logger.debug(
            f"Validated grid specification: {len(result.get_errors())} errors, "
            f"{len(result.get_warnings())} warnings"
        )
        return result

    @classmethod
    def _validate_parameters(cls, spec: GridSpec, result: ValidationResult) -> None:
        axes = spec.base_axes()
        for name, values in axes.items():
            if not values:
                result.add_error(f"Field '{name}' requires at least one value", name)
                continue
            if len(set(values)) != len(values):
                result.add_warning(
                    f"Field '{name}' lists duplicate values {values}; "
                    "duplicated tasks will be generated",
                    name,
                )

        for name, (low, high, low_inc, high_inc) in cls.PARAMETER_DOMAINS.items():
            for value in axes[name]:
                try:
                    validate_range(value, low, high, name, low_inc, high_inc)
                except ValueError as e:
                    result.add_error(str(e), name)

        for value in axes["weight_idx"]:
            try:
                validate_choices(value, cls.VALID_WEIGHT_IDXS, "weight")
            except ValueError as e:
                result.add_error(str(e), "weight")

    @classmethod
    def _validate_settings(cls, spec: GridSpec, result: ValidationResult) -> None:
        try:
            validate_range(spec.folds, cls.MIN_FOLDS, name="folds")
        except ValueError as e:
            result.add_error(str(e), "folds")

        try:
            validate_range(spec.repeats, 0, name="repeats")
        except ValueError as e:
            result.add_error(str(e), "repeats")

        try:
            validate_range(spec.percentile, 0.0, 100.0, name="percentile")
        except ValueError as e:
            result.add_error(str(e), "percentile")
