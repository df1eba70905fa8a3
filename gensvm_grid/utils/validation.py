"""
Validation Utilities

This module provides common validation functions:
- Interval checks with open or closed bounds
- Membership checks against a set of choices
- Path existence checks
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Set, Union

Number = Union[int, float]


def validate_range(
    value: Number,
    min_val: Optional[Number] = None,
    max_val: Optional[Number] = None,
    name: str = "value",
    min_inclusive: bool = True,
    max_inclusive: bool = True,
) -> bool:
    """
    Validate that a numeric value is within specified range.

    Args:
        value: Value to validate
        min_val: Lower bound (None for unbounded)
        max_val: Upper bound (None for unbounded)
        name: Name of the value for error messages
        min_inclusive: Whether the lower bound itself is allowed
        max_inclusive: Whether the upper bound itself is allowed

    Returns:
        True if valid

    Raises:
        ValueError: If value is out of range
    """
    if min_val is not None:
        if min_inclusive and value < min_val:
            raise ValueError(f"{name} ({value}) must be >= {min_val}")
        if not min_inclusive and value <= min_val:
            raise ValueError(f"{name} ({value}) must be > {min_val}")

    if max_val is not None:
        if max_inclusive and value > max_val:
            raise ValueError(f"{name} ({value}) must be <= {max_val}")
        if not max_inclusive and value >= max_val:
            raise ValueError(f"{name} ({value}) must be < {max_val}")

    return True


def validate_choices(value: Any, choices: Set[Any], name: str = "value") -> bool:
    """
    Validate that a value is one of allowed choices.

    Raises:
        ValueError: If value is not in choices
    """
    if value not in choices:
        raise ValueError(f"{name} ({value}) must be one of {sorted(choices)}")
    return True


def validate_path_exists(
    path: Union[str, Path],
    must_be_file: bool = False,
    name: str = "path",
) -> bool:
    """
    Validate that a path exists and optionally is a regular file.

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If path is not a file when ``must_be_file`` is set
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"{name} does not exist: {path}")

    if must_be_file and not path.is_file():
        raise ValueError(f"{name} must be a file: {path}")

    return True
