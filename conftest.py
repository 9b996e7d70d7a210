"""
Configure pytest.
"""

import numpy as np

import pytest

import jax.numpy as jnp

import linspot.linop


@pytest.fixture(autouse=True)
def add_modules(doctest_namespace):
    """Add common modules for use in docstring examples.

    Allow `np`, `jnp` and `linop` to be used in docstring examples
    without explicitly importing them.
    """
    doctest_namespace["np"] = np
    doctest_namespace["jnp"] = jnp
    doctest_namespace["linop"] = linspot.linop
