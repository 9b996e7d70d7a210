# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Discrete Fourier transform linear operator class."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import math
from typing import Optional

import numpy as np

import jax
import jax.numpy as jnp

from linspot.typing import ArrayLike, DType, Mode, Shape

from ._linop import LinearOperator


class DFT(LinearOperator):
    r"""Unitary one-dimensional discrete Fourier transform.

    The transform is normalized by :math:`1 / \sqrt{n}` so that its
    adjoint is also its inverse. If the length `n` is not specified, the
    operator is unresolved until :meth:`~.LinearOperator.activate` binds
    it to the total size of the data dimensions it is given.
    """

    def __init__(
        self,
        n: Optional[int] = None,
        centered: bool = False,
        dtype: DType = np.complex64,
        jit: bool = False,
    ):
        r"""
        Args:
            n: Length of the transform. If ``None``, the shape is
                deferred to activation.
            centered: If ``True``, the zero frequency is shifted to the
                center of the spectrum (see :func:`jax.numpy.fft.fftshift`).
            dtype: Complex `dtype` of the operator.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        if centered not in (True, False):
            raise ValueError(f"Invalid centered argument of type {type(centered)}")
        self.centered = bool(centered)

        super().__init__(
            shape=None if n is None else (n, n),
            dtype=dtype,
            is_sweepable=True,
            jit=jit,
        )

    def _activate(self, dims: Shape, mode: Mode):
        n = math.prod(dims)
        self._bind_shape((n, n))

    def _eval(self, x: jax.Array) -> jax.Array:
        y = jnp.fft.fft(x, axis=0, norm="ortho")
        if self.centered:
            y = jnp.fft.fftshift(y, axes=0)
        return y

    def _adj(self, y: jax.Array) -> jax.Array:
        if self.centered:
            y = jnp.fft.ifftshift(y, axes=0)
        return jnp.fft.ifft(y, axis=0, norm="ortho")

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        # unitary: the inverse is the adjoint
        return self._adj(b) if mode == "forward" else self._eval(b)

    def inv(self, z: ArrayLike) -> jax.Array:
        """Compute the inverse of this LinearOperator.

        Compute the inverse of this LinearOperator applied to `z`.

        Args:
            z: Input array to inverse DFT.
        """
        return self.apply(z, "adjoint")
