"""
GenSVM Grid Search Example

This example demonstrates how to run a grid search from Python: it writes a
small synthetic dataset and a grid file, searches the grid with consistency
repeats, and predicts a held-out test set with the selected parameters.
"""

from pathlib import Path
import tempfile

import numpy as np

from gensvm_grid import GridSearchRunner, setup_logging

GRID = """\
train: {train}
test: {test}
p: 1.2 1.5 2.0
kappa: -0.5 0.0 1.0
lambda: 1.0 0.01 0.0001
epsilon: 1e-6
weight: 1 2
folds: 5
repeats: 3
percentile: 10
kernel: RBF
gamma: 0.1 1.0
"""


def write_blobs(path: Path, rng: np.random.Generator, n_per_class: int, labels: bool) -> None:
    """Write three Gaussian blobs in the dense data format."""
    centers = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 3.0]])
    rows = []
    for label, center in enumerate(centers, start=1):
        for x in center + rng.standard_normal((n_per_class, 2)):
            values = [f"{v:.6f}" for v in x] + ([str(label)] if labels else [])
            rows.append(" ".join(values))
    path.write_text(f"{len(rows)}\n2\n" + "\n".join(rows) + "\n")


def main():
    """Main grid search example."""
    setup_logging()
    rng = np.random.default_rng(0)

    with tempfile.TemporaryDirectory(prefix="gensvm_grid_") as tmp:
        workdir = Path(tmp)
        train, test = workdir / "blobs.train", workdir / "blobs.test"
        write_blobs(train, rng, n_per_class=30, labels=True)
        write_blobs(test, rng, n_per_class=10, labels=True)

        grid_file = workdir / "blobs.grid"
        grid_file.write_text(GRID.format(train=train, test=test))

        runner = GridSearchRunner.from_grid_file(grid_file, seed=42, warm_start=True)
        print(f"🔍 Searching {runner.spec.n_tasks} parameter combinations...")

        runner.load_data()
        result = runner.run()
        predictions = runner.predict_test(result)

        best = result.best_task
        print("\n📈 Grid Search Results:")
        print(f"   Best task: {best['id']} ({best['performance']:.2f}%)")
        print(f"   Parameters: p={best['p']}, kappa={best['kappa']}, lambda={best['lambda']}")
        print(f"   Failed tasks: {result.n_failed}")
        print(f"   Execution time: {result.execution_time:.2f}s")
        print(f"   Test predictions: {predictions.tolist()}")

        summary_path = result.save_summary(workdir / "summary.yaml")
        print(f"💾 Saved summary to {summary_path}")

    print("\n✅ Grid search example completed successfully!")


if __name__ == "__main__":
    main()
