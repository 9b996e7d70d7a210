# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Type definitions."""

from typing import Literal, Tuple, TypeAlias, Union

import numpy as np

import jax.numpy as jnp
from jax import Array

PRNGKey: TypeAlias = Array
"""A key for jax random number generators (see :mod:`jax.random`)."""

DType: TypeAlias = Union[
    jnp.float16,
    jnp.float32,
    jnp.float64,
    jnp.complex64,
    jnp.complex128,
    np.dtype,
]
"""A jax dtype."""

ArrayLike: TypeAlias = Union[Array, np.ndarray]
"""An array accepted as an operator argument."""

Shape: TypeAlias = Tuple[int, ...]
"""A shape of a numpy or jax array."""

MatrixShape: TypeAlias = Tuple[int, int]
"""Shape `(rows, cols)` of a linear operator viewed as a matrix."""

Mode: TypeAlias = Literal["forward", "adjoint"]
"""Application mode of a linear operator."""
