# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Linear least squares solvers.

:func:`solve` computes the least squares solution of :math:`A \\mb{x}
= \\mb{b}` or :math:`A^H \\mb{x} = \\mb{b}`. If the operator is
sweepable, the structured direct solve it exposes is used; otherwise the
problem is solved iteratively by :func:`lsqr`, which only requires the
forward and adjoint application of the operator.
"""

import math
import warnings
from typing import Optional, Tuple, Union

import jax
import jax.numpy as jnp

import linspot.linop
from linspot.diagnostics import IterationStats
from linspot.exceptions import DimensionMismatchError
from linspot.linop._linop import check_mode
from linspot.typing import ArrayLike, Mode

#: Default options of the iterative least squares solver
DEFAULT_LSQR_OPTIONS = {"atol": 1e-6, "btol": 1e-6, "maxiter": 1000}


def lsqr(
    A: linspot.linop.LinearOperator,
    b: ArrayLike,
    x0: Optional[ArrayLike] = None,
    *,
    atol: Optional[float] = None,
    btol: Optional[float] = None,
    maxiter: Optional[int] = None,
    info: bool = False,
    itstat_display: bool = False,
) -> Union[jax.Array, Tuple[jax.Array, dict]]:
    r"""LSQR least squares solver.

    Solve the least squares problem

    .. math::
        \argmin_{\mb{x}} \; \norm{ A \mb{x} - \mb{b} }_2^2

    by the LSQR algorithm of Paige and Saunders, using only applications
    of :math:`A` and :math:`A^H`. Real and complex problems are
    supported.

    Args:
        A: Linear operator :math:`A`.
        b: Right hand side vector :math:`\mb{b}`.
        x0: Initial solution. Defaults to a zero vector.
        atol: Tolerance on the relative accuracy of :math:`A`. Iterations
           stop when `norm(r) <= btol * norm(b) + atol * norm(A) *
           norm(x)` or `norm(A^H r) <= atol * norm(A) * norm(r)`.
           Defaults to `DEFAULT_LSQR_OPTIONS["atol"]`.
        btol: Tolerance on the relative accuracy of :math:`\mb{b}`.
           Defaults to `DEFAULT_LSQR_OPTIONS["btol"]`.
        maxiter: Maximum iterations. Defaults to
           `DEFAULT_LSQR_OPTIONS["maxiter"]`.
        info: If ``True`` return a tuple consisting of the solution array
           and a dictionary containing diagnostic information, otherwise
           just return the solution.
        itstat_display: If ``True``, display iteration statistics.

    Returns:
        Solution array `x`, or tuple (x, info) containing:

            - **x** : Solution array.
            - **info**: Dictionary with entries "num_iter", "rel_res"
              (residual norm relative to the norm of `b`), "istop" (0 if
              `b` needs no iterations, 1 or 2 for the stopping test that
              was met, 3 if `maxiter` was reached) and "itstat" (the
              :class:`.IterationStats` record).
    """
    atol = DEFAULT_LSQR_OPTIONS["atol"] if atol is None else atol
    btol = DEFAULT_LSQR_OPTIONS["btol"] if btol is None else btol
    maxiter = DEFAULT_LSQR_OPTIONS["maxiter"] if maxiter is None else maxiter

    b = jnp.asarray(b)
    dtype = jnp.result_type(A.dtype, b.dtype)
    x = jnp.zeros(A.cols, dtype=dtype) if x0 is None else jnp.asarray(x0, dtype=dtype)

    itstat = IterationStats(
        {"Iter": "%4d", "Residual": "%9.3e", "Norm A^H r": "%9.3e"}, display=itstat_display
    )

    bnorm = float(jnp.linalg.norm(b))
    u = b - A.apply(x, "forward")
    beta = float(jnp.linalg.norm(u))
    if beta > 0:
        u = u / beta
    v = A.apply(u, "adjoint")
    alpha = float(jnp.linalg.norm(v))
    if alpha > 0:
        v = v / alpha

    w = v
    phibar = beta
    rhobar = alpha
    anorm = 0.0
    istop = 0
    num_iter = 0

    if alpha * beta > 0:
        istop = 3
        while num_iter < maxiter:
            num_iter += 1
            # bidiagonalization step
            u = A.apply(v, "forward") - alpha * u
            beta = float(jnp.linalg.norm(u))
            if beta > 0:
                u = u / beta
            anorm = math.sqrt(anorm**2 + alpha**2 + beta**2)
            v = A.apply(u, "adjoint") - beta * v
            alpha = float(jnp.linalg.norm(v))
            if alpha > 0:
                v = v / alpha

            # plane rotation eliminating the subdiagonal element beta
            rho = math.hypot(rhobar, beta)
            c = rhobar / rho
            s = beta / rho
            theta = s * alpha
            rhobar = -c * alpha
            phi = c * phibar
            phibar = s * phibar

            x = x + (phi / rho) * w
            w = v - (theta / rho) * w

            rnorm = phibar
            arnorm = phibar * alpha * abs(c)
            xnorm = float(jnp.linalg.norm(x))
            itstat.insert((num_iter, rnorm, arnorm))

            if rnorm <= btol * bnorm + atol * anorm * xnorm:
                istop = 1
                break
            if arnorm <= atol * anorm * rnorm:
                istop = 2
                break
            if rhobar == 0:
                # exact breakdown: x is a least squares solution
                istop = 2
                break

        if istop == 3:
            warnings.warn(
                f"LSQR did not converge within {maxiter} iterations "
                f"(residual norm {phibar:.3e})",
                stacklevel=2,
            )

    if info:
        rel_res = phibar / bnorm if bnorm > 0 else 0.0
        return x, {"num_iter": num_iter, "rel_res": rel_res, "istop": istop, "itstat": itstat}
    return x


def solve(
    A: linspot.linop.LinearOperator,
    b: ArrayLike,
    mode: Mode = "forward",
    **kwargs,
) -> jax.Array:
    r"""Least squares solution of a linear system.

    Compute the least squares solution of :math:`A \mb{x} = \mb{b}`
    (forward mode) or :math:`A^H \mb{x} = \mb{b}` (adjoint mode). If
    `A.is_sweepable`, the direct solve exposed by the operator is used.
    Otherwise the problem is solved by :func:`lsqr`, each column of a 2D
    right hand side being solved independently.

    Args:
        A: Linear operator :math:`A`.
        b: Right hand side vector, or 2D array whose columns are
           independent right hand sides.
        mode: "forward" or "adjoint".
        **kwargs: Options passed to :func:`lsqr` on the iterative path.
           They are not used by a direct solve, and a warning is issued
           if any are given for a sweepable operator.

    Returns:
        Solution array, with the same number of dimensions as `b`.

    Raises:
        DimensionMismatchError: If the shape of `b` does not conform.
        UnresolvedShapeError: If `A` has not been activated.
    """
    check_mode(mode)
    rows, cols = A.shape
    b = jnp.asarray(b)
    expected = rows if mode == "forward" else cols
    if b.ndim not in (1, 2) or b.shape[0] != expected:
        raise DimensionMismatchError(
            f"Cannot solve with {type(A).__name__} of shape {A.shape} in {mode} mode "
            f"for right hand side with shape {b.shape}"
        )

    if A.is_sweepable:
        if kwargs:
            warnings.warn(
                f"Options {sorted(kwargs)} are ignored by the direct solve of "
                f"{type(A).__name__}",
                stacklevel=2,
            )
        return A.direct_solve(b, mode)

    system = A if mode == "forward" else A.H
    if b.ndim == 1:
        return lsqr(system, b, **kwargs)
    return jnp.stack([lsqr(system, b[:, k], **kwargs) for k in range(b.shape[1])], axis=1)
