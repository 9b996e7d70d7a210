# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""linspot is a Python package of matrix-free linear operators, with
structured composites such as Kronecker products and dictionaries, and
least squares solvers that exploit their structure.
"""

__version__ = "0.1.0"

import logging
import sys

# isort: off

# Suppress jax device warning. See https://github.com/google/jax/issues/6805
logging.getLogger("jax._src.xla_bridge").addFilter(  # jax 0.4.8 and later
    logging.Filter("No GPU/TPU found, falling back to CPU.")
)

# isort: on

import jax

from .exceptions import (
    DimensionMismatchError,
    InconsistentShapeError,
    InvalidOperatorError,
    LinearOperatorError,
    UnresolvedShapeError,
)

# See https://github.com/google/jax/issues/19444
jax.config.update("jax_default_matmul_precision", "highest")

__all__ = [
    "LinearOperatorError",
    "DimensionMismatchError",
    "InconsistentShapeError",
    "InvalidOperatorError",
    "UnresolvedShapeError",
]

# Imported items in __all__ appear to originate in top-level module
for name in __all__:
    getattr(sys.modules[__name__], name).__module__ = __name__
