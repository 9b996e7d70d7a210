# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Toeplitz and circulant linear operator classes."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import warnings
from typing import Optional

import numpy as np

import jax
import jax.numpy as jnp
from jax.dtypes import result_type

import scipy.linalg as spl
from linspot.random import randn
from linspot.typing import ArrayLike, DType, Mode, PRNGKey

from ._linop import LinearOperator

__all__ = ["Toeplitz", "ToeplitzGauss"]


class Toeplitz(LinearOperator):
    r"""Toeplitz matrix linear operator.

    The operator with first column `c` and first row `r` has entries
    :math:`T_{ij} = c_{i-j}` for :math:`i \geq j` and
    :math:`T_{ij} = r_{j-i}` for :math:`i < j`. Multiplication is
    computed with the FFT by embedding :math:`T` in a circulant matrix of
    size `m + n - 1`.

    A direct solve (Levinson recursion, via
    :func:`scipy.linalg.solve_toeplitz`) is only available for square
    operators; rectangular operators are not sweepable.
    """

    def __init__(
        self,
        c: ArrayLike,
        r: Optional[ArrayLike] = None,
        normalized: bool = False,
        jit: bool = False,
    ):
        """
        Args:
            c: First column of the matrix.
            r: First row of the matrix. If ``None``, `r = conj(c)` is
                assumed. If `r[0]` differs from `c[0]`, `c[0]` is used.
            normalized: If ``True``, the columns of the matrix are
                scaled to unit norm.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        c = jnp.ravel(jnp.asarray(c))
        r = c.conj() if r is None else jnp.ravel(jnp.asarray(r))
        if c.size == 0 or r.size == 0:
            raise ValueError("Arguments c and r must be non-empty")
        if bool(r[0] != c[0]):
            warnings.warn("First element of r does not match c; c[0] is used on the diagonal.")
            r = r.at[0].set(c[0])
        self.c = c
        self.r = r
        self.normalized = normalized

        m, n = c.size, r.size
        self._fft_len = m + n - 1
        # first column of the circulant embedding
        self._symbol = jnp.fft.fft(jnp.concatenate([c, r[:0:-1]]))

        self._scale: Optional[jax.Array] = None
        if normalized:
            w = jnp.fft.fft(jnp.abs(jnp.concatenate([c, r[:0:-1]])) ** 2)
            colnorm = jnp.sqrt(self._circulant(jnp.ones((m, 1)), w.conj(), n)[:, 0].real)
            self._scale = jnp.where(colnorm > 0, 1.0 / jnp.where(colnorm > 0, colnorm, 1.0), 1.0)

        super().__init__(
            shape=(m, n),
            dtype=result_type(c.dtype, r.dtype),
            is_sweepable=(m == n),
            jit=jit,
        )

    def _circulant(self, x: jax.Array, symbol: jax.Array, size: int) -> jax.Array:
        """Apply the circulant matrix with spectrum `symbol`, truncated to `size` rows."""
        y = jnp.fft.ifft(symbol[:, None] * jnp.fft.fft(x, n=self._fft_len, axis=0), axis=0)[:size]
        if not any(jnp.iscomplexobj(a) for a in (x, self.c, self.r)):
            y = y.real
        return y

    def _eval(self, x: jax.Array) -> jax.Array:
        if self._scale is not None:
            x = self._scale[:, None] * x
        return self._circulant(x, self._symbol, self.rows)

    def _adj(self, y: jax.Array) -> jax.Array:
        z = self._circulant(y, self._symbol.conj(), self.cols)
        if self._scale is not None:
            z = self._scale[:, None] * z
        return z

    def _solve(self, b: jax.Array, mode: Mode) -> jax.Array:
        c = np.asarray(self.c)
        r = np.asarray(self.r)
        b = np.asarray(b)
        scale = None if self._scale is None else np.asarray(self._scale)[:, None]
        if mode == "forward":
            x = spl.solve_toeplitz((c, r), b)
            if scale is not None:
                x = x / scale
        else:
            if scale is not None:
                b = b / scale
            x = spl.solve_toeplitz((r.conj(), c.conj()), b)
        return jnp.asarray(x)

    def to_array(self) -> jax.Array:
        T = jnp.asarray(spl.toeplitz(np.asarray(self.c), np.asarray(self.r)))
        if self._scale is not None:
            T = T * self._scale[None, :]
        return T


class ToeplitzGauss(Toeplitz):
    """Toeplitz matrix with Gaussian entries.

    For the "toeplitz" kind, `m + n - 1` generating entries are drawn at
    random; for the "circular" kind only `max(m, n)` are needed and the
    matrix is a (truncated) circulant. Random entries are drawn from the
    explicitly supplied PRNG key; the updated key is available as the
    :attr:`key` attribute.
    """

    def __init__(
        self,
        m: int,
        n: int,
        kind: str = "toeplitz",
        normalized: bool = False,
        dtype: DType = np.float32,
        key: Optional[PRNGKey] = None,
        seed: Optional[int] = None,
        jit: bool = False,
    ):
        """
        Args:
            m: Number of rows.
            n: Number of columns.
            kind: Either "toeplitz" or "circular".
            normalized: If ``True``, the columns of the matrix are
                scaled to unit norm.
            dtype: `dtype` of the random entries.
            key: JAX PRNGKey. If ``None``, a key is created from `seed`.
            seed: Seed for new PRNGKey. Default: 0.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        kind = kind.lower()
        if kind == "circular":
            if m < n:
                r, key = randn((n,), dtype=dtype, key=key, seed=seed)
                c = jnp.concatenate([r[:1], r[::-1][: m - 1]])
            else:
                c, key = randn((m,), dtype=dtype, key=key, seed=seed)
                r = jnp.concatenate([c[:1], c[::-1][: n - 1]])
        elif kind == "toeplitz":
            c, key = randn((m,), dtype=dtype, key=key, seed=seed)
            tail, key = randn((n - 1,), dtype=dtype, key=key)
            r = jnp.concatenate([c[:1], tail])
        else:
            raise ValueError(f"Unrecognized kind {kind!r}; expected 'toeplitz' or 'circular'")

        self.kind = kind
        #: Updated PRNGKey, for use in subsequent random draws
        self.key = key
        super().__init__(c, r, normalized=normalized, jit=jit)
