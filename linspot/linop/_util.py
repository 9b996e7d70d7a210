# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Linear operator utility functions."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

from typing import Optional, Union

import jax
import jax.numpy as jnp

from linspot.random import randn
from linspot.typing import PRNGKey

from ._linop import LinearOperator


def power_iteration(A: LinearOperator, maxiter: int = 100, key: Optional[PRNGKey] = None):
    """Compute largest eigenvalue of a diagonalizable :class:`.LinearOperator`.

    Compute largest eigenvalue of a diagonalizable
    :class:`.LinearOperator` using power iteration.

    Args:
        A: :class:`.LinearOperator` used for computation. Must be square
            and diagonalizable.
        maxiter: Maximum number of power iterations to use.
        key: Jax PRNG key. Defaults to ``None``, in which case a new key
            is created.

    Returns:
        tuple: A tuple (`mu`, `v`) containing:

            - **mu**: Estimate of largest eigenvalue of `A`.
            - **v**: Eigenvector of `A` with eigenvalue `mu`.
    """
    v, key = randn(shape=(A.cols,), key=key, dtype=A.dtype)
    v = v / jnp.linalg.norm(v)

    mu = jnp.zeros((), dtype=v.dtype)
    for _ in range(maxiter):
        Av = A @ v
        # v has unit norm
        mu = jnp.vdot(v, Av)
        norm = jnp.linalg.norm(Av)
        if norm == 0:
            # v is in the null space of A
            break
        v = Av / norm
    return mu, v


def operator_norm(A: LinearOperator, maxiter: int = 100, key: Optional[PRNGKey] = None):
    r"""Estimate the norm of a :class:`.LinearOperator`.

    Estimate the operator norm induced by the :math:`\ell_2` vector
    norm, i.e. the largest singular value of :math:`A`, as the square
    root of the largest eigenvalue of :math:`A^H A`, computed by
    :func:`power_iteration`.

    Args:
        A: :class:`.LinearOperator` for which operator norm is desired.
        maxiter: Maximum number of power iterations to use. Default: 100
        key: Jax PRNG key. Defaults to ``None``, in which case a new key
            is created.

    Returns:
        float: Norm of operator :math:`A`.
    """
    return jnp.sqrt(power_iteration(A.gram_op, maxiter, key)[0].real)


def valid_adjoint(
    A: LinearOperator,
    AT: LinearOperator,
    eps: Optional[float] = 1e-7,
    x: Optional[jax.Array] = None,
    y: Optional[jax.Array] = None,
    key: Optional[PRNGKey] = None,
) -> Union[bool, float]:
    r"""Check whether :class:`.LinearOperator` `AT` is the adjoint of `A`.

    The test exploits the identity

    .. math::
      \mathbf{y}^H (A \mathbf{x}) = (A^H \mathbf{y})^H \mathbf{x}

    by computing :math:`\mathbf{u} = \mathsf{A}(\mathbf{x})` and
    :math:`\mathbf{v} = \mathsf{AT}(\mathbf{y})` for random
    :math:`\mathbf{x}` and :math:`\mathbf{y}` and confirming that

    .. math::
      \frac{| \mathbf{y}^H \mathbf{u} - \mathbf{v}^H \mathbf{x} |}
      {\max \left\{ | \mathbf{y}^H \mathbf{u} |,
       | \mathbf{v}^H \mathbf{x} | \right\}}
      < \epsilon \;.

    Args:
        A: Primary :class:`.LinearOperator`.
        AT: Adjoint :class:`.LinearOperator`.
        eps: Error threshold for validation of :math:`\mathsf{AT}` as
           adjoint of :math:`\mathsf{A}`. If ``None``, the relative
           error is returned instead of a boolean value.
        x: If not the default ``None``, use the specified array instead
           of a random array as test vector :math:`\mb{x}`. If specified,
           the array must have `A.cols` rows.
        y: If not the default ``None``, use the specified array instead
           of a random array as test vector :math:`\mb{y}`. If specified,
           the array must have `AT.cols` rows.
        key: Jax PRNG key. Defaults to ``None``, in which case a new key
           is created.

    Returns:
      Boolean value indicating whether validation passed, or relative
      error of test, depending on type of parameter `eps`.
    """

    if x is None:
        x, key = randn(shape=(A.cols,), key=key, dtype=A.dtype)
    elif x.shape[0] != A.cols:
        raise ValueError("Shape of x array not appropriate as an input for operator A")
    if y is None:
        y, key = randn(shape=(AT.cols,), key=key, dtype=AT.dtype)
    elif y.shape[0] != AT.cols:
        raise ValueError("Shape of y array not appropriate as an input for operator AT")

    u = A(x)
    v = AT(y)
    yHu = jnp.vdot(y.ravel(), u.ravel())
    vHx = jnp.vdot(v.ravel(), x.ravel())
    err = jnp.abs(yHu - vHx) / max(jnp.abs(yHu), jnp.abs(vHx))
    if eps is None:
        return err
    return bool(err < eps)
