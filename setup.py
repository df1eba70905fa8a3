"""
Setup script for GenSVM Grid Search.

This package runs cross-validated hyperparameter grid searches for the
generalized multiclass support vector machine, with optional selection by
consistency over repeated cross-validation.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

# Core requirements
install_requires = [
    "numpy>=1.21.0",
    "torch>=1.12.0",
    "pyyaml>=6.0",
    "colorlog>=6.7.0",
]

# Development requirements
dev_requires = [
    "pytest>=7.0.0",
    "pytest-cov>=4.0.0",
    "pytest-mock>=3.8.0",
    "ruff>=0.1.0",
    "mypy>=0.991",
    "pre-commit>=2.20.0",
]

extras_require = {
    "dev": dev_requires,
    "all": dev_requires,
}

setup(
    name="gensvm-grid",
    version="1.0.0",
    author="GenSVM Grid Search Team",
    description="Hyperparameter grid search for the generalized multiclass SVM",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["examples*", "docs*"]),
    package_data={
        "gensvm_grid": [
            "py.typed",  # PEP 561 marker file for type information
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "gensvm-grid=gensvm_grid.scripts.grid_search:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        "machine learning",
        "support vector machine",
        "multiclass classification",
        "hyperparameter optimization",
        "grid search",
        "cross-validation",
    ],
)
