# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Dictionary (horizontal concatenation) of linear operators."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

import jax
import jax.numpy as jnp
from jax.dtypes import result_type

from linspot.exceptions import (
    InconsistentShapeError,
    InvalidOperatorError,
    UnresolvedShapeError,
)
from linspot.util import is_scalar

from ._linop import LinearOperator, LinearOperatorLike
from ._matrix import as_linop

__all__ = ["Dictionary"]


class Dictionary(LinearOperator):
    r"""A horizontal concatenation of weighted linear operators.

    Given operators :math:`A_1, A_2, \dots, A_N` with equal numbers of
    rows and scalar weights :math:`w_1, \dots, w_N`, creates the operator

    .. math::
       D = \begin{pmatrix} w_1 A_1 & w_2 A_2 & \dots & w_N A_N
           \end{pmatrix} \;,

    so that :math:`D \mb{x} = \sum_i w_i A_i \mb{x}_i` where
    :math:`\mb{x}_i` is the block of rows of :math:`\mb{x}` matching the
    columns of :math:`A_i`. Children with no columns contribute nothing
    and are dropped, together with their weights.
    """

    def __init__(
        self,
        ops: Sequence[Union[LinearOperatorLike, jax.Array, np.ndarray]],
        weights: Optional[Union[complex, Sequence[complex], np.ndarray]] = None,
        jit: bool = False,
    ):
        r"""
        Args:
            ops: Operators to concatenate. Raw 2D arrays are converted to
                :class:`.MatrixOperator`.
            weights: Scalar weight for each operator. A single scalar is
                applied to every operator. Defaults to ``None``, meaning
                a weight of 1 for every operator.
            jit: If ``True``, jit the forward and adjoint functions.

        Raises:
            InvalidOperatorError: If no operators are given, or one of
                them is not a valid operator.
            InconsistentShapeError: If the operators do not have the
                same number of rows, or the number of weights does not
                match the number of operators.
            UnresolvedShapeError: If one of the operators has not been
                activated.
        """
        ops = [as_linop(op, i) for i, op in enumerate(ops)]
        if len(ops) == 0:
            raise InvalidOperatorError("At least one operator must be specified")
        for i, op in enumerate(ops):
            if not op.activated:
                raise UnresolvedShapeError(f"Operator {i + 1} of Dictionary has not been activated")

        if weights is None:
            weights = np.ones(len(ops))
        elif is_scalar(weights):
            weights = np.full(len(ops), np.asarray(weights).item())
        else:
            weights = np.ravel(np.asarray(weights))
            if weights.size != len(ops):
                raise InconsistentShapeError(
                    f"Number of weights {weights.size} does not match number of operators "
                    f"{len(ops)}"
                )

        # children without columns are exempt from the row check
        nonempty = [i for i, op in enumerate(ops) if op.shape[1] > 0]
        rows = ops[nonempty[0] if nonempty else 0].shape[0]
        for i in nonempty:
            if ops[i].shape[0] != rows:
                raise InconsistentShapeError(
                    f"Operator {i + 1} (index {i}) with shape {ops[i].shape} is not "
                    f"consistent with the previous operators, which have {rows} rows",
                    index=i,
                )

        #: Operators with at least one column, in order
        self.ops = tuple(ops[i] for i in nonempty)
        #: Weights of the operators in :attr:`ops`
        self.weights = weights[nonempty]
        # start offset of the column block of each operator, plus total
        self._offsets = np.cumsum([0] + [op.shape[1] for op in self.ops])

        dtype = result_type(*[op.dtype for op in ops])
        if np.iscomplexobj(self.weights):
            # complex weights make real children a complex operator
            dtype = result_type(dtype, np.complex64)

        super().__init__(
            shape=(rows, int(self._offsets[-1])),
            dtype=dtype,
            is_linear=all(op.is_linear for op in ops),
            jit=jit,
        )

    def _eval(self, x: jax.Array) -> jax.Array:
        offsets = self._offsets.tolist()
        y = None
        for op, w, start, stop in zip(self.ops, self.weights.tolist(), offsets, offsets[1:]):
            z = w * op.apply(x[start:stop], "forward")
            y = z if y is None else y + z
        if y is None:
            y = jnp.zeros((self.rows, x.shape[1]), dtype=result_type(x.dtype, self.dtype))
        return y

    def _adj(self, y: jax.Array) -> jax.Array:
        if not self.ops:
            return jnp.zeros((0, y.shape[1]), dtype=result_type(y.dtype, self.dtype))
        return jnp.concatenate(
            [
                w.conjugate() * op.apply(y, "adjoint")
                for op, w in zip(self.ops, self.weights.tolist())
            ],
            axis=0,
        )

    def to_array(self) -> jax.Array:
        if not self.ops:
            return jnp.zeros(self.shape, dtype=self.dtype)
        return jnp.concatenate(
            [w * jnp.asarray(op.to_array()) for op, w in zip(self.ops, self.weights.tolist())],
            axis=1,
        )
