"""
Setup script for modgmp.

modgmp binds the system GMP library at runtime through ctypes, so there is
nothing to compile.  GMP itself must be installed (libgmp10 / gmp).

To install:
    pip install .

To install in development mode:
    pip install -e ".[dev]"

To build wheel:
    pip wheel . --no-deps
"""

import os

from setuptools import setup, find_packages

setup(
    name="modgmp",
    version="0.3.0",
    author="modgmp contributors",
    author_email="",
    description="modgmp: GMP-backed modular exponentiation (fast and constant-time) for asymmetric crypto",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["modgmp", "modgmp.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "sympy>=1.9",
        ],
        "test": [
            "pytest>=6.0",
            "sympy>=1.9",
        ],
        "bench": [
            "sympy>=1.9",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security :: Cryptography",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    keywords="gmp modpow modular-exponentiation constant-time rsa bignum",
)
