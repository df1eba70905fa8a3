"""
Task Naming

Readable and hash-based names for grid search tasks:
- Parameter-based names for logs and summaries, e.g. ``task3_[p_1.5][k_0][l_1]``
- Hash-based keys that identify a configuration independently of its ID
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, ClassVar


class TaskNaming:
    """Standardized task naming system."""

    ABBREVIATIONS: ClassVar[dict[str, str]] = {
        "p": "p",
        "kappa": "k",
        "lambda": "l",
        "epsilon": "eps",
        "weight_idx": "w",
        "kernel": "ker",
        "gamma": "g",
        "coef": "c",
        "degree": "d",
    }

    # Constants for value formatting
    FLOAT_SCIENTIFIC_THRESHOLD = 0.001
    KEY_LENGTH = 12

    @staticmethod
    def parameter_name(task_id: int, parameters: dict[str, Any]) -> str:
        """Bracketed parameter name, keeping the parameter order given."""
        parts = [
            f"[{TaskNaming.ABBREVIATIONS.get(key, key)}_{TaskNaming.format_value(value)}]"
            for key, value in parameters.items()
        ]
        return f"task{task_id}_" + "".join(parts)

    @staticmethod
    def hash_key(parameters: dict[str, Any]) -> str:
        """Deterministic hash of the parameters, independent of key order."""
        param_str = json.dumps(parameters, sort_keys=True, default=str)
        return hashlib.sha256(param_str.encode()).hexdigest()[: TaskNaming.KEY_LENGTH]

    @staticmethod
    def format_value(value: Any) -> str:
        """Format a parameter value for inclusion in a name."""
        if isinstance(value, bool):
            return "T" if value else "F"
        if isinstance(value, float):
            # Small floats in scientific notation
            if abs(value) < TaskNaming.FLOAT_SCIENTIFIC_THRESHOLD and value != 0:
                return f"{value:.1e}".replace("e-0", "e-").replace("e+0", "e+")
            return f"{value:.4g}"
        return str(value)
