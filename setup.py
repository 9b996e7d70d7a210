"""linspot package configuration."""

import importlib.util
import os.path
import site
import sys

from setuptools import find_namespace_packages, setup

# Import module linspot._version without executing __init__.py
spec = importlib.util.spec_from_file_location("_version", os.path.join("linspot", "_version.py"))
module = importlib.util.module_from_spec(spec)
sys.modules["_version"] = module
spec.loader.exec_module(module)
from _version import package_version

name = "linspot"
version = package_version()
# Add argument exclude=["test", "test.*"] to exclude test subpackage
packages = find_namespace_packages(where="linspot")
packages = ["linspot"] + [f"linspot.{m}" for m in packages]


longdesc = """
linspot is a Python package of matrix-free linear operators built on JAX. Operators are defined by their forward action, with adjoints derived automatically when not supplied, and can be combined into Kronecker products, weighted dictionaries, sums, products and compositions. Kronecker products are applied one factor at a time in a cost-minimizing order, and least squares problems are solved directly for operators with structured inverses and by LSQR otherwise.
"""

# Set install_requires from requirements.txt file
with open("requirements.txt") as f:
    lines = f.readlines()
install_requires = [line.strip() for line in lines if line.strip()]

python_requires = ">=3.12"
tests_require = ["pytest"]

extras_require = {"tests": tests_require}
with open("dev_requirements.txt") as f:
    lines = f.readlines()
extras_require["dev"] = [line.strip() for line in lines if line.strip() and line[0:2] != "-r"]

# PEP517 workaround, see https://www.scivision.dev/python-pip-devel-user-install/
site.ENABLE_USER_SITE = True

setup(
    name=name,
    version=version,
    description="Matrix-free linear operators with Kronecker and dictionary composites",
    long_description=longdesc,
    keywords=[
        "Linear Operator",
        "Matrix-Free",
        "Kronecker Product",
        "Least Squares",
        "LSQR",
        "Toeplitz",
        "DFT",
    ],
    platforms="Any",
    license="BSD-3-Clause",
    author="linspot Developers",
    packages=packages,
    python_requires=python_requires,
    install_requires=install_requires,
    extras_require=extras_require,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    zip_safe=False,
)
