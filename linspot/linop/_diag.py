# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Diagonal linear operator definitions."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import operator
from functools import partial

import numpy as np

import jax
import jax.numpy as jnp

from linspot.exceptions import DimensionMismatchError
from linspot.typing import ArrayLike, DType, Mode

from ._linop import LinearOperator, _wrap_add_sub, _wrap_mul_div_scalar

__all__ = ["Diagonal", "Identity", "ScaledIdentity"]


class Diagonal(LinearOperator):
    """Diagonal linear operator.

    The direct solve divides by the diagonal; zero diagonal entries give
    infinite or undefined results rather than an exception.
    """

    def __init__(self, diagonal: ArrayLike, jit: bool = False):
        r"""
        Args:
            diagonal: Diagonal elements of this :class:`LinearOperator`.
               Arrays with more than one dimension are flattened.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        self._diagonal = jnp.ravel(jnp.asarray(diagonal))
        n = self._diagonal.size
        super().__init__(
            shape=(n, n), dtype=self._diagonal.dtype, is_sweepable=True, jit=jit
        )

    def _eval(self, x: jax.Array) -> jax.Array:
        return self._diagonal[:, None] * x

    def _adj(self, y: jax.Array) -> jax.Array:
        return self._diagonal.conj()[:, None] * y

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        d = self._diagonal if mode == "forward" else self._diagonal.conj()
        return b / d[:, None]

    @property
    def diagonal(self) -> jax.Array:
        """Return an array representing the diagonal component."""
        return self._diagonal

    def to_array(self) -> jax.Array:
        return jnp.diag(self.diagonal)

    @property
    def T(self) -> Diagonal:
        """Transpose of this :class:`Diagonal`."""
        return self

    def conj(self) -> Diagonal:
        """Complex conjugate of this :class:`Diagonal`."""
        return Diagonal(diagonal=self.diagonal.conj())

    @property
    def H(self) -> Diagonal:
        """Hermitian transpose of this :class:`Diagonal`."""
        return self.conj()

    @property
    def gram_op(self) -> Diagonal:
        """Gram operator of this :class:`Diagonal`.

        Return a new :class:`Diagonal` :code:`G` such that
        :code:`G(x) = A.adj(A(x)))`.
        """
        return Diagonal(diagonal=self.diagonal.conj() * self.diagonal)

    def __matmul__(self, other):
        # self @ other
        if isinstance(other, Diagonal):
            if self.shape != other.shape:
                raise DimensionMismatchError(f"Shapes {self.shape} and {other.shape} do not match")
            return Diagonal(diagonal=self.diagonal * other.diagonal)
        return super().__matmul__(other)

    @partial(_wrap_add_sub, op=operator.add)
    def __add__(self, other):
        return Diagonal(diagonal=self.diagonal + other.diagonal)

    @partial(_wrap_add_sub, op=operator.sub)
    def __sub__(self, other):
        return Diagonal(diagonal=self.diagonal - other.diagonal)

    @_wrap_mul_div_scalar
    def __mul__(self, scalar):
        return Diagonal(diagonal=self.diagonal * scalar)

    @_wrap_mul_div_scalar
    def __rmul__(self, scalar):
        return Diagonal(diagonal=self.diagonal * scalar)

    @_wrap_mul_div_scalar
    def __truediv__(self, scalar):
        return Diagonal(diagonal=self.diagonal / scalar)


class ScaledIdentity(Diagonal):
    """Scaled identity operator."""

    def __init__(self, scalar: complex, n: int, dtype: DType = np.float32, jit: bool = False):
        """
        Args:
            scalar: Scaling of the identity.
            n: Number of rows and columns.
            dtype: `dtype` of the operator.
        """
        self._scalar = scalar
        self._diagonal = scalar * jnp.ones((), dtype=dtype)
        LinearOperator.__init__(
            self, shape=(n, n), dtype=self._diagonal.dtype, is_sweepable=True, jit=jit
        )

    def _eval(self, x: jax.Array) -> jax.Array:
        return self._scalar * x

    def _adj(self, y: jax.Array) -> jax.Array:
        return np.conj(self._scalar) * y

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        return b / (self._scalar if mode == "forward" else np.conj(self._scalar))

    @property
    def scalar(self) -> complex:
        """Scaling of the identity."""
        return self._scalar

    @property
    def diagonal(self) -> jax.Array:
        return self._diagonal * jnp.ones(self.rows, dtype=self.dtype)

    def conj(self) -> ScaledIdentity:
        """Complex conjugate of this :class:`ScaledIdentity`."""
        return ScaledIdentity(np.conj(self._scalar), self.rows, dtype=self.dtype)

    @property
    def gram_op(self) -> ScaledIdentity:
        """Gram operator of this :class:`ScaledIdentity`."""
        return ScaledIdentity(abs(self._scalar) ** 2, self.rows, dtype=self.dtype)

    @partial(_wrap_add_sub, op=operator.add)
    def __add__(self, other):
        return ScaledIdentity(self._scalar + other._scalar, self.rows, dtype=self.dtype)

    @partial(_wrap_add_sub, op=operator.sub)
    def __sub__(self, other):
        return ScaledIdentity(self._scalar - other._scalar, self.rows, dtype=self.dtype)

    @_wrap_mul_div_scalar
    def __mul__(self, scalar):
        return ScaledIdentity(self._scalar * scalar, self.rows, dtype=self.dtype)

    @_wrap_mul_div_scalar
    def __rmul__(self, scalar):
        return ScaledIdentity(self._scalar * scalar, self.rows, dtype=self.dtype)

    @_wrap_mul_div_scalar
    def __truediv__(self, scalar):
        return ScaledIdentity(self._scalar / scalar, self.rows, dtype=self.dtype)


class Identity(ScaledIdentity):
    """Identity operator."""

    def __init__(self, n: int, dtype: DType = np.float32, jit: bool = False):
        """
        Args:
            n: Number of rows and columns.
            dtype: `dtype` of the operator.
        """
        super().__init__(1.0, n, dtype=dtype, jit=jit)

    def _eval(self, x: jax.Array) -> jax.Array:
        return x

    def _adj(self, y: jax.Array) -> jax.Array:
        return y

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        return b

    def conj(self) -> Identity:
        """Complex conjugate of this :class:`Identity`."""
        return self

    @property
    def gram_op(self) -> Identity:
        """Gram operator of this :class:`Identity`."""
        return self
