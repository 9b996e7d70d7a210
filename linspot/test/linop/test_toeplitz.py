import numpy as np

from jax import config

import pytest

# enable 64-bit mode for output dtype checks
config.update("jax_enable_x64", True)

import jax
import jax.numpy as jnp

import scipy.linalg as spl
from test_linop import adjoint_test

from linspot import linop
from linspot.exceptions import InvalidOperatorError
from linspot.random import randn


class TestToeplitz:
    def setup_method(self, method):
        self.key = jax.random.PRNGKey(12345)

    @pytest.mark.parametrize("dtype", [np.float64, np.complex128])
    @pytest.mark.parametrize("shape", [(5, 5), (3, 6), (7, 2), (1, 4), (4, 1)])
    def test_eval(self, shape, dtype):
        m, n = shape
        c, key = randn((m,), dtype=dtype, key=self.key)
        r, key = randn((n,), dtype=dtype, key=key)
        r = r.at[0].set(c[0])
        T = linop.Toeplitz(c, r)
        M = spl.toeplitz(np.asarray(c), np.asarray(r))

        assert T.shape == shape
        np.testing.assert_allclose(T.to_array(), M, rtol=1e-12)

        x, key = randn((n, 3), dtype=dtype, key=key)
        np.testing.assert_allclose(T @ x, M @ x, rtol=1e-10, atol=1e-12)
        y, key = randn((m,), dtype=dtype, key=key)
        np.testing.assert_allclose(T.adj(y), M.conj().T @ y, rtol=1e-10, atol=1e-12)

    def test_real_output(self):
        T = linop.Toeplitz(jnp.array([1.0, 2.0, 3.0]), jnp.array([1.0, 4.0]))
        y = T @ jnp.ones(2)
        assert not jnp.iscomplexobj(y)
        np.testing.assert_allclose(y, [5.0, 3.0, 5.0], rtol=1e-12)

    def test_default_row(self):
        c = jnp.array([2.0, 1.0 + 1.0j, 0.5j])
        T = linop.Toeplitz(c)
        M = np.asarray(T.to_array())
        np.testing.assert_allclose(M, M.conj().T, rtol=1e-12)

    def test_diagonal_conflict(self):
        with pytest.warns(UserWarning):
            T = linop.Toeplitz(jnp.array([1.0, 2.0, 3.0]), jnp.array([9.0, 4.0, 5.0]))
        assert T.r[0] == 1.0
        np.testing.assert_allclose(np.diag(T.to_array()), [1.0, 1.0, 1.0])

    def test_empty(self):
        with pytest.raises(ValueError):
            linop.Toeplitz(jnp.array([]))

    @pytest.mark.parametrize("dtype", [np.float32, np.complex64])
    def test_adjoint(self, dtype):
        c, key = randn((6,), dtype=dtype, key=self.key)
        r, key = randn((4,), dtype=dtype, key=key)
        T = linop.Toeplitz(c, r.at[0].set(c[0]))
        adjoint_test(T)

    @pytest.mark.parametrize("shape", [(5, 5), (3, 6), (7, 2)])
    def test_normalized(self, shape):
        m, n = shape
        c, key = randn((m,), dtype=np.float64, key=self.key)
        r, key = randn((n,), dtype=np.float64, key=key)
        r = r.at[0].set(c[0])
        T = linop.Toeplitz(c, r, normalized=True)
        M = spl.toeplitz(np.asarray(c), np.asarray(r))
        M = M / np.linalg.norm(M, axis=0)

        np.testing.assert_allclose(np.linalg.norm(T.to_array(), axis=0), np.ones(n), rtol=1e-10)
        x, key = randn((n,), dtype=np.float64, key=key)
        np.testing.assert_allclose(T @ x, M @ x, rtol=1e-10, atol=1e-12)
        y, key = randn((m,), dtype=np.float64, key=key)
        np.testing.assert_allclose(T.adj(y), M.T @ y, rtol=1e-10, atol=1e-12)

    @pytest.mark.parametrize("normalized", [False, True])
    @pytest.mark.parametrize("dtype", [np.float64, np.complex128])
    def test_solve(self, dtype, normalized):
        c, key = randn((6,), dtype=dtype, key=self.key)
        r, key = randn((6,), dtype=dtype, key=key)
        c = c.at[0].set(10.0)
        r = r.at[0].set(10.0)
        T = linop.Toeplitz(c, r, normalized=normalized)
        assert T.is_sweepable

        x, key = randn((6, 2), dtype=dtype, key=key)
        np.testing.assert_allclose(T.direct_solve(T @ x), x, rtol=1e-8, atol=1e-10)
        np.testing.assert_allclose(T.direct_solve(T.adj(x), "adjoint"), x, rtol=1e-8, atol=1e-10)

    def test_rectangular_not_sweepable(self):
        T = linop.Toeplitz(jnp.ones(3), jnp.ones(4))
        assert not T.is_sweepable
        with pytest.raises(InvalidOperatorError):
            T.direct_solve(jnp.ones(3))


class TestToeplitzGauss:
    @pytest.mark.parametrize("shape", [(4, 6), (6, 4), (5, 5)])
    def test_circular(self, shape):
        m, n = shape
        T = linop.ToeplitzGauss(m, n, kind="circular", seed=1)
        M = np.asarray(T.to_array())
        p = max(m, n)
        # entries depend only on (j - i) mod p
        gen = M[0] if m < n else M[:, 0]
        for i in range(m):
            for j in range(n):
                k = (j - i) % p if m < n else (i - j) % p
                assert M[i, j] == gen[k]

    def test_toeplitz(self):
        T = linop.ToeplitzGauss(4, 6, seed=2)
        M = np.asarray(T.to_array())
        np.testing.assert_allclose(M, spl.toeplitz(M[:, 0], M[0]))
        assert T.kind == "toeplitz"
        assert T.shape == (4, 6)
        assert T.dtype == np.float32

    def test_deterministic(self):
        T1 = linop.ToeplitzGauss(5, 3, seed=4)
        T2 = linop.ToeplitzGauss(5, 3, key=jax.random.PRNGKey(4))
        np.testing.assert_array_equal(T1.to_array(), T2.to_array())
        T3 = linop.ToeplitzGauss(5, 3, key=T1.key)
        assert not np.array_equal(T1.to_array(), T3.to_array())

    def test_normalized(self):
        T = linop.ToeplitzGauss(6, 4, normalized=True, dtype=np.float64, seed=5)
        np.testing.assert_allclose(np.linalg.norm(T.to_array(), axis=0), np.ones(4), rtol=1e-10)

    def test_invalid(self):
        with pytest.raises(ValueError):
            linop.ToeplitzGauss(3, 3, kind="hankel")
        with pytest.raises(ValueError):
            linop.ToeplitzGauss(3, 3, key=jax.random.PRNGKey(0), seed=1)
