# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Random number generation.

Thin wrappers around :mod:`jax.random` that manage the PRNG key
explicitly. Every function returns a `(result, key)` pair, where `key`
is an updated key to be passed to the next call:

::

   x, key = linspot.random.randn((2,), seed=1)
   y, key = linspot.random.randn((2,), key=key)

If neither `key` nor `seed` is given, a key is created from seed 0, so
that repeated calls without a key return the same numbers.
"""

from typing import Optional, Tuple, Union

import numpy as np

import jax

from linspot.typing import DType, PRNGKey, Shape


def _get_key(key: Optional[PRNGKey], seed: Optional[int]) -> PRNGKey:
    if key is not None and seed is not None:
        raise ValueError("Key and seed cannot both be specified")
    if key is None:
        key = jax.random.PRNGKey(0 if seed is None else seed)
    return key


def randn(
    shape: Union[int, Shape],
    dtype: DType = np.float32,
    key: Optional[PRNGKey] = None,
    seed: Optional[int] = None,
) -> Tuple[jax.Array, PRNGKey]:
    """Return an array drawn from the standard normal distribution.

    Args:
        shape: Shape of output array.
        dtype: dtype for returned value. If complex, the array is
            sampled from the complex normal distribution.
        key: JAX PRNGKey. Defaults to ``None``, in which case a new key
            is created using the `seed` argument.
        seed: Seed for new PRNGKey. Default: 0.

    Returns:
        tuple: A tuple (x, key) containing:

           - **x** : Generated random array.
           - **key** : Updated random PRNGKey.
    """
    if isinstance(shape, (int, np.integer)):
        shape = (int(shape),)
    key, subkey = jax.random.split(_get_key(key, seed))
    return jax.random.normal(subkey, shape, dtype=dtype), key
