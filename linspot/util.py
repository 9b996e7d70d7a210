# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Utility functions."""

import numpy as np

import jax

from linspot.typing import DType


def is_complex_dtype(dtype: DType) -> bool:
    """Determine whether a dtype is complex.

    Args:
        dtype: A :mod:`numpy` or :mod:`jax.numpy` dtype (e.g.
               :attr:`~numpy.float32`, :attr:`~numpy.complex64`).

    Returns:
        ``True`` if the dtype is complex, otherwise ``False``.
    """
    return np.dtype(dtype).kind == "c"


def is_array(x) -> bool:
    """Determine whether `x` is a numpy or jax array."""
    return isinstance(x, (np.ndarray, jax.Array))


def is_scalar(x) -> bool:
    """Determine whether `x` is a scalar or a zero-dimensional array."""
    return np.isscalar(x) or (is_array(x) and x.ndim == 0)
