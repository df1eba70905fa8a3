"""
Grid File Parser

Reads the line-oriented grid file describing one search. Every line starts
with a keyword and a colon, followed by whitespace-separated values::

    train: ./data/iris.train
    test: ./data/iris.test
    p: 1.2 1.5 2.0
    kappa: -0.9 0.0 1.0
    lambda: 64 16 4 1 0.25
    epsilon: 1e-6
    weight: 1 2
    folds: 10
    repeats: 5
    percentile: 95
    kernel: RBF
    gamma: 1e-3 1e-1 1e1

Kernel parameter lines (``gamma``, ``coef``, ``degree``) are checked against
the kernel once the whole file has been read, so their position relative to
the ``kernel`` line does not matter.

Kernel names (``LINEAR``, ``POLY``, ``RBF``, ``SIGMOID``) are case-sensitive.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import math
from pathlib import Path
from typing import Any, ClassVar

from .schemas import GridSpec, KernelType, kernel_grid_from_values

logger = logging.getLogger(__name__)


class GridFileError(Exception):
    """Raised when a grid file cannot be read or lacks a required field."""


class GridFileParser:
    """Parses grid files into validated GridSpec instances."""

    PATH_FIELDS: ClassVar[tuple[str, ...]] = ("train", "test")
    # keyword -> whether values must be integral
    LIST_FIELDS: ClassVar[dict[str, bool]] = {
        "p": False,
        "kappa": False,
        "lambda": False,
        "epsilon": False,
        "weight": True,
        "gamma": False,
        "coef": False,
        "degree": False,
    }
    SINGLE_FIELDS: ClassVar[dict[str, bool]] = {
        "folds": True,
        "repeats": True,
        "percentile": False,
    }
    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "train",
        "p",
        "kappa",
        "lambda",
        "epsilon",
        "weight",
        "folds",
    )

    def parse_file(self, path: str | Path) -> GridSpec:
        """Read and parse a grid file.

        Raises:
            GridFileError: If the file is unreadable or a required field is missing
            GridSpecError: If a value violates its domain or the kernel lacks a parameter
        """
        path = Path(path)
        try:
            with path.open() as f:
                lines = f.readlines()
        except OSError as e:
            raise GridFileError(f"Error opening grid file {path}: {e.strerror or e}") from e

        logger.debug(f"Read {len(lines)} lines from grid file {path}")
        return self.parse_lines(lines, source=str(path))

    def parse_text(self, text: str, source: str = "<string>") -> GridSpec:
        return self.parse_lines(text.splitlines(), source=source)

    def parse_lines(self, lines: Iterable[str], source: str = "<string>") -> GridSpec:
        """Parse grid file lines into a validated GridSpec."""
        raw: dict[str, Any] = {}
        kernel_type = KernelType.LINEAR

        for lineno, line in enumerate(lines, start=1):
            content = line.strip()
            if not content or content.startswith("#"):
                continue

            where = f"{source}:{lineno}"
            keyword, sep, rest = content.partition(":")
            keyword = keyword.strip()
            tokens = rest.split()

            if not sep or not self._is_keyword(keyword):
                logger.warning(f"{where}: Cannot find any parameters on line: {content!r}")
            elif keyword in self.PATH_FIELDS:
                self._parse_path(keyword, tokens, where, raw)
            elif keyword == "kernel":
                kernel_type = self._parse_kernel(tokens, where)
            else:
                self._parse_numeric(keyword, tokens, where, raw)

        missing = [name for name in self.REQUIRED_FIELDS if name not in raw]
        if missing:
            raise GridFileError(
                f"{source}: missing required field(s): {', '.join(missing)}"
            )

        kernel = kernel_grid_from_values(
            kernel_type,
            gammas=raw.get("gamma"),
            coefs=raw.get("coef"),
            degrees=raw.get("degree"),
        )

        spec = GridSpec(
            train_file=raw["train"],
            test_file=raw.get("test"),
            ps=raw["p"],
            kappas=raw["kappa"],
            lambdas=raw["lambda"],
            epsilons=raw["epsilon"],
            weight_idxs=raw["weight"],
            folds=raw["folds"],
            kernel=kernel,
            repeats=raw.get("repeats", 0),
            percentile=raw.get("percentile", 0.0),
        )
        spec.validate()

        logger.info(
            f"Parsed grid {source}: {spec.kernel_type.value} kernel, "
            f"{spec.n_tasks} parameter combinations"
        )
        return spec

    def _is_keyword(self, keyword: str) -> bool:
        return (
            keyword in self.PATH_FIELDS
            or keyword in self.LIST_FIELDS
            or keyword in self.SINGLE_FIELDS
            or keyword == "kernel"
        )

    def _parse_path(
        self, keyword: str, tokens: list[str], where: str, raw: dict[str, Any]
    ) -> None:
        if not tokens:
            if keyword in self.REQUIRED_FIELDS:
                raise GridFileError(f'{where}: Field "{keyword}" requires a file name')
            logger.warning(f'{where}: Field "{keyword}" has no file name and is ignored.')
            return
        if len(tokens) > 1:
            logger.warning(
                f'{where}: Field "{keyword}" only takes one value. '
                "Additional fields are ignored."
            )
        raw[keyword] = tokens[0]

    def _parse_kernel(self, tokens: list[str], where: str) -> KernelType:
        if not tokens:
            raise GridFileError(f"{where}: No kernel specified on line")
        if len(tokens) > 1:
            logger.warning(
                f'{where}: Field "kernel" lists {len(tokens)} kernels; '
                f"only the last one ({tokens[-1]}) is used."
            )
        kernel_name = tokens[-1]
        if kernel_name not in KernelType.__members__:
            raise GridFileError(f"{where}: Unknown kernel specified: {tokens[-1]!r}")
        return KernelType[kernel_name]

    def _parse_numeric(
        self, keyword: str, tokens: list[str], where: str, raw: dict[str, Any]
    ) -> None:
        single = keyword in self.SINGLE_FIELDS
        integral = self.SINGLE_FIELDS[keyword] if single else self.LIST_FIELDS[keyword]
        values = self._parse_numbers(keyword, tokens, integral, where)

        if not values:
            if keyword in self.REQUIRED_FIELDS:
                raise GridFileError(
                    f'{where}: Field "{keyword}" requires at least one numeric value'
                )
            logger.warning(f'{where}: No values found for field "{keyword}"; left unset.')
            return

        if single:
            if len(values) > 1:
                logger.warning(
                    f'{where}: Field "{keyword}" only takes one value. '
                    "Additional fields are ignored."
                )
            raw[keyword] = values[0]
            return

        if keyword in raw:
            logger.warning(f'{where}: Field "{keyword}" given again; earlier values replaced.')
        raw[keyword] = values

    @staticmethod
    def _parse_numbers(
        keyword: str, tokens: list[str], integral: bool, where: str
    ) -> list[Any]:
        values: list[Any] = []
        for token in tokens:
            try:
                value = float(token)
            except ValueError:
                logger.warning(f'{where}: Skipping malformed value {token!r} for "{keyword}"')
                continue
            if not math.isfinite(value):
                logger.warning(f'{where}: Skipping non-finite value {token!r} for "{keyword}"')
                continue
            if integral:
                if not value.is_integer():
                    logger.warning(
                        f'{where}: Skipping non-integer value {token!r} for "{keyword}"'
                    )
                    continue
                values.append(int(value))
            else:
                values.append(value)
        return values
