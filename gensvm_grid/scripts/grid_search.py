"""
Command-line entry point of the grid search.

Usage::

    gensvm-grid [-o FILE] [-q] [-x] [-z SEED] [-s SUMMARY] grid_file

Predictions for the test set of the grid, if it names one, go to ``-o FILE``
(one label per line) or to standard output (space separated).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from ..config import GridFileError, GridSpecError
from ..core import GridSearchRunner
from ..search import SelectionError
from ..trainer import TrainerError
from ..utils import DataError, format_predictions, setup_logging, write_predictions

logger = logging.getLogger("gensvm_grid.scripts.grid_search")

DESCRIPTION = """\
Run a cross-validated grid search for GenSVM over the parameters in
grid_file. With a test file in the grid, the best configuration is trained
on the full training set and used to predict the test set."""


class _ArgumentParser(argparse.ArgumentParser):
    """Prints the usage and exits with status 1 on any argument error."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="gensvm-grid", description=DESCRIPTION, add_help=False)
    parser.add_argument("grid_file", help="grid file with the search parameters")
    parser.add_argument(
        "-o", dest="output", metavar="FILE", help="write test set predictions to FILE"
    )
    parser.add_argument("-q", dest="quiet", action="store_true", help="quiet mode (no output)")
    parser.add_argument(
        "-x", dest="libsvm", action="store_true", help="data files are in LibSVM format"
    )
    parser.add_argument(
        "-z", dest="seed", metavar="SEED", type=int, help="seed for the random number generator"
    )
    parser.add_argument(
        "-s", dest="summary", metavar="SUMMARY", help="write a search summary (.yaml/.yml or JSON)"
    )
    parser.add_argument("-h", "-help", dest="help", action="store_true", help="print this help and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    if any(arg in ("-h", "-help") for arg in argv):
        parser.print_help(sys.stderr)
        return 1
    args = parser.parse_args(argv)

    setup_logging(quiet=args.quiet)

    try:
        runner = GridSearchRunner.from_grid_file(
            args.grid_file, seed=args.seed, libsvm_format=args.libsvm
        )
        runner.load_data()
        result = runner.run()
        predictions = runner.predict_test(result)

        if args.summary:
            result.save_summary(args.summary)

        if predictions is not None:
            if args.output:
                write_predictions(args.output, predictions)
            else:
                sys.stdout.write(format_predictions(predictions))
                sys.stdout.flush()
    except (GridFileError, GridSpecError, DataError, SelectionError, TrainerError) as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
