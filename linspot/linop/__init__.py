# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Linear operator functions and classes."""

import sys

from ._dft import DFT
from ._diag import Diagonal, Identity, ScaledIdentity
from ._dictionary import Dictionary
from ._kron import Kron, best_permutation, kron
from ._linop import ComposedLinearOperator, LinearOperator, LinearOperatorLike
from ._matrix import MatrixOperator, as_linop
from ._toeplitz import Toeplitz, ToeplitzGauss
from ._util import operator_norm, power_iteration, valid_adjoint

__all__ = [
    "DFT",
    "Diagonal",
    "Identity",
    "ScaledIdentity",
    "Dictionary",
    "Kron",
    "MatrixOperator",
    "Toeplitz",
    "ToeplitzGauss",
    "LinearOperator",
    "LinearOperatorLike",
    "ComposedLinearOperator",
    "as_linop",
    "best_permutation",
    "kron",
    "operator_norm",
    "power_iteration",
    "valid_adjoint",
]

# Imported items in __all__ appear to originate in top-level linop module
for name in __all__:
    getattr(sys.modules[__name__], name).__module__ = __name__
