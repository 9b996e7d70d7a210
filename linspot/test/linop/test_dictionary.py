import numpy as np

from jax import config

import pytest

# enable 64-bit mode for output dtype checks
config.update("jax_enable_x64", True)

import jax
import jax.numpy as jnp

from test_linop import AbsMatOp, adjoint_test

from linspot import linop
from linspot.exceptions import (
    InconsistentShapeError,
    InvalidOperatorError,
    UnresolvedShapeError,
)
from linspot.random import randn


class DictionaryTestObj:
    def __init__(self, dtype):
        key = jax.random.PRNGKey(12345)
        self.A, key = randn((6, 2), dtype=dtype, key=key)
        self.B, key = randn((6, 3), dtype=dtype, key=key)
        self.C, key = randn((6, 4), dtype=dtype, key=key)
        self.x, key = randn((9,), dtype=dtype, key=key)
        self.X, key = randn((9, 2), dtype=dtype, key=key)
        self.y, key = randn((6,), dtype=dtype, key=key)
        self.ops = [linop.MatrixOperator(self.A), AbsMatOp(self.B), linop.MatrixOperator(self.C)]
        self.M = np.hstack([self.A, self.B, self.C])


@pytest.fixture(scope="module", params=[np.float64, np.complex128])
def testobj(request):
    yield DictionaryTestObj(request.param)


def test_shape(testobj):
    D = linop.Dictionary(testobj.ops)
    assert D.shape == (6, 9)
    assert len(D.ops) == 3
    np.testing.assert_allclose(D.weights, np.ones(3))


def test_eval(testobj):
    D = linop.Dictionary(testobj.ops)
    np.testing.assert_allclose(D @ testobj.x, testobj.M @ testobj.x, rtol=1e-10)
    np.testing.assert_allclose(D @ testobj.X, testobj.M @ testobj.X, rtol=1e-10)
    np.testing.assert_allclose(D.to_array(), testobj.M, rtol=1e-12)


def test_adjoint(testobj):
    D = linop.Dictionary(testobj.ops)
    np.testing.assert_allclose(D.adj(testobj.y), testobj.M.conj().T @ testobj.y, rtol=1e-10)
    adjoint_test(D)


def test_weights(testobj):
    w = [2.0, -1.0, 0.5]
    D = linop.Dictionary(testobj.ops, weights=w)
    M = np.hstack([w[0] * testobj.A, w[1] * testobj.B, w[2] * testobj.C])
    np.testing.assert_allclose(D @ testobj.x, M @ testobj.x, rtol=1e-10)
    np.testing.assert_allclose(D.adj(testobj.y), M.conj().T @ testobj.y, rtol=1e-10)
    np.testing.assert_allclose(D.to_array(), M, rtol=1e-12)

    D = linop.Dictionary(testobj.ops, weights=3.0)
    np.testing.assert_allclose(D.weights, [3.0, 3.0, 3.0])
    np.testing.assert_allclose(D @ testobj.x, 3.0 * testobj.M @ testobj.x, rtol=1e-10)


def test_complex_weights():
    A, key = randn((4, 2), dtype=np.complex128, seed=7)
    B, key = randn((4, 3), dtype=np.complex128, key=key)
    w = np.array([1.0 - 2.0j, 0.5j])
    D = linop.Dictionary([A, B], weights=w)
    M = np.hstack([w[0] * A, w[1] * B])
    y, key = randn((4,), dtype=np.complex128, key=key)
    np.testing.assert_allclose(D.adj(y), M.conj().T @ y, rtol=1e-10)
    adjoint_test(D)


def test_real_children_complex_weights():
    A = np.arange(6.0).reshape(2, 3)
    B, key = randn((2, 2), dtype=np.float64, seed=8)
    w = np.array([1j, 2.0 - 1.0j])
    D = linop.Dictionary([A, B], weights=w)
    assert D.is_complex
    assert D.dtype == np.complex128
    M = np.hstack([w[0] * A, w[1] * np.asarray(B)])
    y = jnp.array([1.0, 2.0])
    np.testing.assert_allclose(D.T @ y, M.T @ y, rtol=1e-12)
    np.testing.assert_allclose(D.H @ y, M.conj().T @ y, rtol=1e-12)
    np.testing.assert_allclose(D.to_array(), M, rtol=1e-12)

    D = linop.Dictionary([A], weights=[1j])
    np.testing.assert_allclose(D.T @ y, [6j, 9j, 12j], rtol=1e-12)


def test_inconsistent_rows():
    ops = [jnp.ones((4, 2)), jnp.ones((4, 3)), jnp.ones((5, 2))]
    with pytest.raises(InconsistentShapeError, match="Operator 3") as excinfo:
        linop.Dictionary(ops)
    assert excinfo.value.index == 2
    with pytest.raises(ValueError):
        linop.Dictionary(ops)


def test_zero_column_children(testobj):
    Z = jnp.zeros((11, 0))
    D = linop.Dictionary([testobj.ops[0], Z, testobj.ops[1], testobj.ops[2]], weights=[1, 5, 1, 1])
    assert D.shape == (6, 9)
    assert len(D.ops) == 3
    np.testing.assert_allclose(D.weights, np.ones(3))
    np.testing.assert_allclose(D @ testobj.x, testobj.M @ testobj.x, rtol=1e-10)

    E = linop.Dictionary([jnp.zeros((3, 0))])
    assert E.shape == (3, 0)
    np.testing.assert_allclose(E @ jnp.zeros((0,)), np.zeros(3))
    assert E.adj(jnp.ones(3)).shape == (0,)


def test_lift_arrays(testobj):
    D = linop.Dictionary([testobj.A, np.asarray(testobj.B)])
    assert all(isinstance(op, linop.MatrixOperator) for op in D.ops)
    assert D.shape == (6, 5)


def test_invalid():
    with pytest.raises(InvalidOperatorError):
        linop.Dictionary([])
    with pytest.raises(InvalidOperatorError, match="Operator 2"):
        linop.Dictionary([jnp.ones((2, 2)), "A"])
    with pytest.raises(InconsistentShapeError):
        linop.Dictionary([jnp.ones((2, 2)), jnp.ones((2, 2))], weights=[1.0, 2.0, 3.0])
    with pytest.raises(UnresolvedShapeError):
        linop.Dictionary([jnp.ones((2, 2)), linop.DFT()])


def test_flags(testobj):
    D = linop.Dictionary(testobj.ops)
    assert D.is_linear
    assert not D.is_sweepable
    assert D.dtype == testobj.A.dtype
    D = linop.Dictionary([jnp.ones((4, 2), dtype=np.float32), linop.DFT(4)])
    assert D.is_complex
    assert isinstance(D, linop.LinearOperatorLike)


def test_nested(testobj):
    D = linop.Dictionary([linop.Dictionary(testobj.ops[:2]), testobj.ops[2]])
    assert D.shape == (6, 9)
    np.testing.assert_allclose(D @ testobj.x, testobj.M @ testobj.x, rtol=1e-10)


def test_kron_children():
    mats = []
    key = jax.random.PRNGKey(4321)
    for shape in [(2, 3), (3, 2), (3, 2), (2, 2)]:
        A, key = randn(shape, dtype=np.complex128, key=key)
        mats.append(np.asarray(A))
    w = np.array([0.5 + 1.0j, -2.0j])
    D = linop.Dictionary(
        [linop.Kron(mats[0], mats[1]), linop.Kron(mats[2], mats[3])], weights=w
    )
    M = np.hstack([w[0] * np.kron(mats[0], mats[1]), w[1] * np.kron(mats[2], mats[3])])
    assert D.shape == M.shape == (6, 10)

    x, key = randn((10,), dtype=np.complex128, key=key)
    y, key = randn((6,), dtype=np.complex128, key=key)
    np.testing.assert_allclose(D @ x, M @ x, rtol=1e-10, atol=1e-12)
    np.testing.assert_allclose(D.adj(y), M.conj().T @ y, rtol=1e-10, atol=1e-12)
    adjoint_test(D, key=key)


def test_solve(testobj):
    # not sweepable: solved iteratively, giving the minimum norm solution
    D = linop.Dictionary(testobj.ops)
    b = testobj.M @ testobj.x
    x = D.solve(b, atol=1e-10, btol=1e-10)
    np.testing.assert_allclose(D @ x, b, rtol=1e-6, atol=1e-8)
