# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Kronecker tensor product of linear operators."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import math
from typing import Callable, Sequence, Tuple, Union

import numpy as np

import jax
import jax.numpy as jnp
from jax.dtypes import result_type

from linspot.exceptions import DimensionMismatchError, InvalidOperatorError
from linspot.typing import Mode, Shape

from ._linop import LinearOperator, LinearOperatorLike
from ._matrix import as_linop

__all__ = ["Kron", "kron"]


def best_permutation(shapes: Sequence[Tuple[int, int]]) -> Tuple[int, ...]:
    r"""Order in which the factors of a Kronecker product are applied.

    Each factor with shape :math:`(r_k, c_k)` is assigned the cost
    :math:`(r_k - c_k) / (r_k c_k)`, and factors are applied in order of
    increasing cost, ties being broken by position. Factors that shrink
    the working array the most are thus applied first.

    Args:
        shapes: Shapes of the factors.

    Returns:
        Zero-based factor indices in application order. If any factor has
        a zero dimension, the factors are applied in their original
        order.
    """
    if any(r == 0 or c == 0 for r, c in shapes):
        return tuple(range(len(shapes)))
    cost = [(r - c) / (r * c) for r, c in shapes]
    return tuple(sorted(range(len(shapes)), key=lambda k: (cost[k], k)))


class Kron(LinearOperator):
    r"""Kronecker tensor product of linear operators.

    Represents :math:`A_1 \otimes A_2 \otimes \dots \otimes A_N` without
    forming the product matrix. With vectors flattened in row-major
    order, :math:`A_N` acts on the fastest varying index. The product is
    applied one factor at a time, each step being the multiplication by
    :math:`I_a \otimes A_k \otimes I_b` for identity matrices
    :math:`I_a` and :math:`I_b` whose sizes are determined by the factors
    already applied. The order of the factors is chosen by
    :func:`best_permutation` and reversed in adjoint mode.

    If any factor has an unresolved shape, the product is unresolved
    until :meth:`~.LinearOperator.activate` distributes the implicit
    data dimensions over the factors: the first factor consumes the
    leading (slowest varying) dimensions.
    """

    def __init__(
        self,
        *ops: Union[LinearOperatorLike, jax.Array, np.ndarray, Sequence],
        jit: bool = False,
    ):
        r"""
        Args:
            *ops: Factors of the product, or a single list of factors.
                Raw 2D arrays are converted to :class:`.MatrixOperator`.
            jit: If ``True``, jit the forward and adjoint functions.

        Raises:
            InvalidOperatorError: If fewer than two factors are given, or
                if a factor is not a valid linear operator.
        """
        if len(ops) == 1 and isinstance(ops[0], (list, tuple)):
            ops = tuple(ops[0])
        if len(ops) < 2:
            raise InvalidOperatorError("At least two operators must be specified")

        #: Factors of the product
        self.ops = tuple(as_linop(op, i) for i, op in enumerate(ops))
        #: Zero-based order in which factors are applied in forward mode
        self.permutation: Tuple[int, ...] = tuple(range(len(self.ops)))

        super().__init__(
            shape=None,
            dtype=result_type(*[op.dtype for op in self.ops]),
            is_linear=all(op.is_linear for op in self.ops),
            is_sweepable=all(op.is_sweepable for op in self.ops),
            jit=jit,
        )

        if all(op.activated for op in self.ops):
            self._resolve()

    @property
    def takes_dim(self) -> int:
        return sum(op.takes_dim for op in self.ops)

    def _resolve(self):
        """Fix shape and factor order once all factor shapes are known."""
        shapes = [op.shape for op in self.ops]
        self.permutation = best_permutation(shapes)
        self._bind_shape((math.prod(r for r, _ in shapes), math.prod(c for _, c in shapes)))

    def _activate(self, dims: Shape, mode: Mode):
        if len(dims) != self.takes_dim:
            raise DimensionMismatchError(
                f"Kron takes {self.takes_dim} data dimensions; got {len(dims)}"
            )
        start = 0
        for op in self.ops:
            stop = start + op.takes_dim
            op.activate(dims[start:stop], mode)
            start = stop
        self._resolve()

    def _apply_factors(
        self,
        x: jax.Array,
        order: Sequence[int],
        in_sizes: Sequence[int],
        out_sizes: Sequence[int],
        fn: Callable,
    ) -> jax.Array:
        """Apply `fn(op, t)` for each factor `op` in the given order.

        The rows of `x` are viewed as a tensor with axis sizes `in_sizes`.
        For factor `k`, the array is reshaped to `(a, in_sizes[k], b)`,
        where `a` is the product of the current sizes of the preceding
        axes and `b` that of the following axes times the number of
        columns of `x`, the middle axis is moved to the front and `fn`
        replaces it by an axis of size `out_sizes[k]`.
        """
        ncol = x.shape[1]
        dims = list(in_sizes)
        for k in order:
            a = math.prod(dims[:k])
            b = math.prod(dims[k + 1 :]) * ncol
            c = dims[k]
            t = jnp.swapaxes(x.reshape(a, c, b), 0, 1).reshape(c, a * b)
            t = fn(self.ops[k], t)
            dims[k] = out_sizes[k]
            x = jnp.swapaxes(t.reshape(dims[k], a, b), 0, 1)
        return x.reshape(math.prod(dims), ncol)

    def _eval(self, x: jax.Array) -> jax.Array:
        rows, cols = zip(*[op.shape for op in self.ops])
        return self._apply_factors(
            x, self.permutation, cols, rows, lambda op, t: op.apply(t, "forward")
        )

    def _adj(self, y: jax.Array) -> jax.Array:
        rows, cols = zip(*[op.shape for op in self.ops])
        return self._apply_factors(
            y, self.permutation[::-1], rows, cols, lambda op, t: op.apply(t, "adjoint")
        )

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        # the pseudo-inverse of a Kronecker product is the Kronecker
        # product of the pseudo-inverses of its factors
        rows, cols = zip(*[op.shape for op in self.ops])
        if mode == "forward":
            return self._apply_factors(
                b, self.permutation[::-1], rows, cols, lambda op, t: op.direct_solve(t, "forward")
            )
        return self._apply_factors(
            b, self.permutation, cols, rows, lambda op, t: op.direct_solve(t, "adjoint")
        )


def kron(*ops: Union[LinearOperatorLike, jax.Array, np.ndarray]) -> Kron:
    """Construct the Kronecker tensor product of linear operators.

    See :class:`Kron`.
    """
    return Kron(*ops)
