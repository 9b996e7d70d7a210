# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Matrix linear operator classes."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import numpy as np

import jax
import jax.numpy as jnp

from linspot.exceptions import InvalidOperatorError
from linspot.typing import ArrayLike, Mode
from linspot.util import is_array

from ._linop import LinearOperator, LinearOperatorLike, _wrap_mul_div_scalar

__all__ = ["MatrixOperator", "as_linop"]


class MatrixOperator(LinearOperator):
    """Linear operator implementing matrix multiplication."""

    def __init__(self, A: ArrayLike, jit: bool = False):
        """
        Args:
            A: Dense 2D array. The action of the created LinearOperator
                will implement matrix multiplication with `A`.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        self.A: jax.Array  #: Dense array implementing this matrix

        # if A is an ndarray, make sure it gets converted to a jax array
        if isinstance(A, jax.Array):
            self.A = A
        elif isinstance(A, np.ndarray):
            self.A = jax.device_put(A)
        else:
            raise TypeError(f"Expected np.ndarray or jax.Array, got {type(A)}")

        # Can only do rank-2 arrays
        if self.A.ndim != 2:
            raise TypeError(f"Expected a 2-dimensional array, got array of shape {A.shape}")

        super().__init__(shape=self.A.shape, dtype=self.A.dtype, is_sweepable=True, jit=jit)

    def _eval(self, x: jax.Array) -> jax.Array:
        return self.A @ x

    def _adj(self, y: jax.Array) -> jax.Array:
        return self.A.conj().T @ y

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        M = self.A if mode == "forward" else self.A.conj().T
        return jnp.linalg.lstsq(M, b)[0]

    def to_array(self) -> jax.Array:
        return self.A

    @property
    def H(self) -> MatrixOperator:
        """Hermitian transpose of this :class:`MatrixOperator`."""
        return MatrixOperator(self.A.conj().T)

    @property
    def T(self) -> MatrixOperator:
        """Transpose of this :class:`MatrixOperator`."""
        return MatrixOperator(self.A.T)

    def conj(self) -> MatrixOperator:
        """Complex conjugate of this :class:`MatrixOperator`."""
        return MatrixOperator(self.A.conj())

    def __add__(self, other):
        if isinstance(other, MatrixOperator) and self.shape == other.shape:
            return MatrixOperator(self.A + other.A)
        return super().__add__(other)

    def __sub__(self, other):
        if isinstance(other, MatrixOperator) and self.shape == other.shape:
            return MatrixOperator(self.A - other.A)
        return super().__sub__(other)

    def __neg__(self):
        return MatrixOperator(-self.A)

    @_wrap_mul_div_scalar
    def __mul__(self, other):
        return MatrixOperator(other * self.A)

    @_wrap_mul_div_scalar
    def __rmul__(self, other):
        return MatrixOperator(other * self.A)

    @_wrap_mul_div_scalar
    def __truediv__(self, other):
        return MatrixOperator(self.A / other)


def as_linop(op, index: int = 0) -> LinearOperatorLike:
    """Lift a raw array to a :class:`MatrixOperator`.

    Args:
        op: Operator or 2D array.
        index: Zero-based position of `op` among the children of a composite
           operator, used in error messages.

    Returns:
        `op` itself if it already has the capabilities of a linear
        operator, otherwise a :class:`MatrixOperator` wrapping it.

    Raises:
        InvalidOperatorError: If `op` is neither an operator nor an
           array.
    """
    if isinstance(op, LinearOperatorLike):
        return op
    if is_array(op):
        return MatrixOperator(op)
    raise InvalidOperatorError(f"Operator {index + 1} of type {type(op)} is not a valid input")
