"""Minimal setup.py for individual_claims package."""

import os
from pathlib import Path

from setuptools import find_packages, setup

# Read the version from _version.py
__version__ = ""
exec(open(os.path.join("individual_claims", "_version.py")).read())

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="individual_claims",
    version=__version__,
    description="Individual claim development models with Monte Carlo claim simulation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["individual_claims", "individual_claims.*"]),
    package_data={
        "individual_claims": ["data/parameters/*.yaml", "reporting/templates/*.j2"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "numpy>=2.3.2",
        "pandas>=2.3.2",
        "pydantic>=2.11.7",
        "pyyaml>=6.0.2",
        "matplotlib>=3.10.5",
        "seaborn>=0.13.2",
        "scipy>=1.16.1",
        "statsmodels>=0.14.5",
        "scikit-learn>=1.7.1",
        "jinja2>=3.1.6",
        "tabulate>=0.9.0",
        "plotly>=6.3.0",
        "tqdm>=4.67.1",
    ],
    extras_require={
        "dev": [
            "pytest>=8.4.1",
            "pytest-cov>=6.2.1",
        ],
        "parquet": [
            "pyarrow>=21.0.0",
        ],
    },
    entry_points={
        "console_scripts": ["individual-claims=individual_claims.__main__:main"],
    },
    include_package_data=True,
    zip_safe=False,
)
