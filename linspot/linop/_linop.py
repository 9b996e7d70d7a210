# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Linear operator base class."""


# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import math
import operator
import threading
import warnings
from functools import partial, wraps
from typing import Callable, Optional, Protocol, Sequence, Union, runtime_checkable

import numpy as np

import jax
import jax.numpy as jnp
from jax.dtypes import result_type

from linspot.exceptions import (
    DimensionMismatchError,
    InvalidOperatorError,
    UnresolvedShapeError,
)
from linspot.typing import ArrayLike, DType, MatrixShape, Mode, Shape
from linspot.util import is_array, is_complex_dtype, is_scalar

MODES = ("forward", "adjoint")


def check_mode(mode: str) -> Mode:
    """Validate an application mode string."""
    if mode not in MODES:
        raise ValueError(f"Invalid mode {mode!r}; expected 'forward' or 'adjoint'")
    return mode  # type: ignore


def flip_mode(mode: Mode) -> Mode:
    """Return the mode opposite to `mode`."""
    return "adjoint" if check_mode(mode) == "forward" else "forward"


def _normalize_shape(shape: Sequence) -> MatrixShape:
    """Convert a `(rows, cols)` pair to non-negative integers."""
    if len(shape) != 2:
        raise ValueError(f"Operator shape must have two entries; got {shape}")
    out = []
    for s in shape:
        if s != math.floor(s):
            warnings.warn("Size parameters are not integer.", stacklevel=3)
        out.append(max(0, int(math.floor(s))))
    return (out[0], out[1])


@runtime_checkable
class LinearOperatorLike(Protocol):
    """Capabilities required of an operator used as a composite child."""

    shape: MatrixShape
    dtype: DType
    is_linear: bool
    is_sweepable: bool
    activated: bool
    takes_dim: int

    def apply(self, x: ArrayLike, mode: Mode = "forward") -> jax.Array: ...

    def direct_solve(self, b: ArrayLike, mode: Mode = "forward") -> jax.Array: ...

    def activate(self, dims: Union[int, Shape], mode: Mode = "forward") -> LinearOperatorLike: ...


def _wrap_mul_div_scalar(func: Callable) -> Callable:
    r"""Wrapper function for multiplication and division operators.

    Wrapper function for defining `__mul__`, `__rmul__`, and
    `__truediv__` between a scalar and a :class:`LinearOperator`.

    Raises:
        TypeError: If a binop with the form `binop(LinearOperator, other)`
        is called and `other` is not a scalar.
    """

    @wraps(func)
    def wrapper(a, b):
        if is_scalar(b):
            return func(a, b)

        raise TypeError(f"Operation {func.__name__} not defined between {type(a)} and {type(b)}")

    return wrapper


def _wrap_add_sub(func: Callable, op: Callable) -> Callable:
    r"""Wrapper function for defining `__add__`, `__sub__`.

    Handles shape checking and dispatching based on operand types:

    - If both operands are :class:`LinearOperator` of the same type, the
      wrapped method is called, allowing a specialized constructor.
    - If both operands are :class:`LinearOperator` of different types,
      a generic :class:`LinearOperator` is returned.

    Args:
        func: should be either `.__add__` or `.__sub__`.
        op: functional equivalent of func, ex. op.add for func =
           `__add__`.

    Raises:
        DimensionMismatchError: If the shapes of the operators differ.
        TypeError: If the second operand is not a
            :class:`LinearOperator`.
    """

    @wraps(func)
    def wrapper(a: LinearOperator, b: LinearOperator) -> LinearOperator:
        if isinstance(b, LinearOperator):
            if a.shape != b.shape:
                raise DimensionMismatchError(f"Shapes {a.shape} and {b.shape} do not match")
            if isinstance(b, type(a)):
                # same type of linop, eg Diagonal can have special behavior
                return func(a, b)
            return LinearOperator(
                shape=a.shape,
                eval_fn=lambda x: op(a.apply(x), b.apply(x)),
                adj_fn=lambda y: op(a.apply(y, "adjoint"), b.apply(y, "adjoint")),
                dtype=result_type(a.dtype, b.dtype),
                is_linear=a.is_linear and b.is_linear,
            )
        raise TypeError(f"Operation {func.__name__} not defined between {type(a)} and {type(b)}")

    return wrapper


class LinearOperator:
    """Generic linear operator base class.

    A :class:`LinearOperator` represents a matrix of shape `(rows, cols)`
    by its action on vectors. Arrays passed to :meth:`apply` are either
    a single vector or a 2D array whose columns are independent vectors.

    Derived classes implement `_eval` (forward action on a 2D array) and
    optionally `_adj` (adjoint action) and `_solve` (direct solution of
    `A x = b`, required if the operator is sweepable). If `_adj` is
    not provided it is derived from `_eval` via
    :func:`jax.linear_transpose`.

    An operator constructed with `shape=None` is unresolved: its shape is
    bound by a later call to :meth:`activate`, and any operation
    requiring the shape raises :class:`.UnresolvedShapeError` until then.
    """

    # See https://numpy.org/doc/stable/user/c-info.beyond-basics.html#ndarray.__array_priority__
    __array_priority__ = 1

    def __repr__(self):
        shape = self._shape if self.activated else "unresolved"
        return f"""{type(self)}
shape       : {shape}
dtype       : {self.dtype}
sweepable   : {self.is_sweepable}
        """

    def __init__(
        self,
        shape: Optional[MatrixShape] = None,
        eval_fn: Optional[Callable] = None,
        adj_fn: Optional[Callable] = None,
        dtype: DType = np.float32,
        is_linear: bool = True,
        is_sweepable: bool = False,
        solve_fn: Optional[Callable] = None,
        jit: bool = False,
    ):
        r"""
        Args:
            shape: Shape `(rows, cols)` of this operator. If ``None``,
                the operator is unresolved until :meth:`activate` is
                called.
            eval_fn: Function used in evaluating this
                :class:`LinearOperator` on a 2D array. Defaults to
                ``None``. If ``None``, then `_eval` must be defined in
                any derived classes.
            adj_fn: Function used to evaluate the adjoint of this
                :class:`LinearOperator`. Defaults to ``None``, in which
                case the adjoint is derived automatically at the first
                adjoint application.
            dtype: `dtype` of the operator entries. Complex operators
                must use a complex dtype.
            is_linear: Flag indicating whether the operator is linear.
            is_sweepable: Flag indicating whether the operator supports
                a direct (non-iterative) solve.
            solve_fn: Function `solve_fn(b, mode)` implementing the
                direct solve. Required unless `is_sweepable` is ``False``
                or a derived class defines `_solve`.
            jit: If ``True``, call :meth:`.jit()` on this
                :class:`LinearOperator` to jit the forward and adjoint
                functions.

        Raises:
            NotImplementedError: If the `eval_fn` parameter is not
               specified and the `_eval` method is not defined in a
               derived class.
            InvalidOperatorError: If the operator is declared sweepable
               without a direct solve function.
        """
        self._activation_lock = threading.Lock()
        self._shape: Optional[MatrixShape] = None
        if shape is not None:
            self._shape = _normalize_shape(shape)

        #: dtype of operator entries
        self.dtype = np.dtype(dtype)
        #: Flag indicating whether the operator is linear
        self.is_linear = bool(is_linear)
        #: Flag indicating whether the operator supports a direct solve
        self.is_sweepable = bool(is_sweepable)

        # Allows for dynamic creation of new LinearOperator, e.g. for adjoints
        if eval_fn:
            self._eval = eval_fn  # type: ignore
        elif not hasattr(self, "_eval"):
            raise NotImplementedError(
                "LinearOperator is an abstract base class when the eval_fn parameter "
                "is not specified."
            )

        if not hasattr(self, "_adj"):
            self._adj: Optional[Callable] = None
        if callable(adj_fn):
            self._adj = adj_fn
        elif adj_fn is not None:
            raise TypeError(f"Parameter adj_fn must be either a Callable or None; got {adj_fn}")

        if callable(solve_fn):
            self._solve = solve_fn
        elif not hasattr(self, "_solve"):
            self._solve: Optional[Callable] = None  # type: ignore
        if self.is_sweepable and self._solve is None:
            raise InvalidOperatorError("A sweepable operator requires a direct solve function")

        if jit:
            self.jit()

    @property
    def activated(self) -> bool:
        """``True`` if the shape of this operator has been resolved."""
        return self._shape is not None

    @property
    def shape(self) -> MatrixShape:
        """Shape `(rows, cols)` of this operator."""
        if self._shape is None:
            raise UnresolvedShapeError(f"Shape of {type(self).__name__} has not been activated")
        return self._shape

    @property
    def rows(self) -> int:
        """Number of rows of this operator."""
        return self.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns of this operator."""
        return self.shape[1]

    @property
    def is_complex(self) -> bool:
        """``True`` if this operator has complex entries."""
        return is_complex_dtype(self.dtype)

    @property
    def takes_dim(self) -> int:
        """Number of implicit data dimensions consumed by this operator."""
        return 1

    def activate(self, dims: Union[int, Shape], mode: Mode = "forward") -> LinearOperator:
        """Bind the shape of this operator to the dimensions of its data.

        Activation is performed at most once; activating an operator
        whose shape is already resolved only checks that `dims` is
        consistent with that shape.

        Args:
            dims: Implicit dimensions of the data to which the operator
                will be applied.
            mode: If "forward", `dims` describes the operator input,
                otherwise its output.

        Returns:
            This operator, with resolved shape.
        """
        check_mode(mode)
        dims = (dims,) if isinstance(dims, (int, np.integer)) else tuple(dims)
        with self._activation_lock:
            if self._shape is None:
                self._activate(dims, mode)
            else:
                expected = self._shape[1] if mode == "forward" else self._shape[0]
                if math.prod(dims) != expected:
                    raise DimensionMismatchError(
                        f"Data dimensions {dims} do not match {type(self).__name__} "
                        f"with shape {self._shape} in {mode} mode"
                    )
        return self

    def _activate(self, dims: Shape, mode: Mode):
        raise UnresolvedShapeError(f"{type(self).__name__} does not support deferred activation")

    def _bind_shape(self, shape: Sequence):
        """Set the shape of an unresolved operator."""
        self._shape = _normalize_shape(shape)

    def _set_adjoint(self):
        """Automatically create the adjoint from the forward evaluation."""

        def adj_fn(y: jax.Array) -> jax.Array:
            primal = jnp.zeros((self.cols, y.shape[1]), dtype=self.dtype)
            out_dtype = jax.eval_shape(self._eval, primal).dtype
            transpose = jax.linear_transpose(self._eval, primal)
            if self.is_complex:
                return transpose(y.conj().astype(out_dtype))[0].conj()
            if jnp.iscomplexobj(y):
                return (
                    transpose(y.real.astype(out_dtype))[0]
                    + 1j * transpose(y.imag.astype(out_dtype))[0]
                )
            return transpose(y.astype(out_dtype))[0]

        self._adj = adj_fn

    def jit(self):
        """Replace the private functions :meth:`._eval` and :meth:`._adj`
        with jitted versions.
        """
        if self._adj is None:
            self._set_adjoint()

        self._eval = jax.jit(self._eval)
        self._adj = jax.jit(self._adj)

    def _check_input(self, x: ArrayLike, size: int, what: str) -> jax.Array:
        x = jnp.asarray(x)
        if x.ndim not in (1, 2):
            raise DimensionMismatchError(
                f"Expected a vector or a 2D array of vectors; got array of shape {x.shape}"
            )
        if x.shape[0] != size:
            raise DimensionMismatchError(
                f"Cannot {what} {type(self).__name__} with shape {self.shape} "
                f"on array with shape {x.shape}"
            )
        return x

    def apply(self, x: ArrayLike, mode: Mode = "forward") -> jax.Array:
        """Apply this operator or its adjoint.

        Args:
            x: A vector, or a 2D array whose columns are independent
               vectors. Must have `cols` rows in forward mode and `rows`
               rows in adjoint mode.
            mode: "forward" to compute `A x`, "adjoint" to compute
               `A^H x`.

        Returns:
            Result array, with the same number of dimensions as `x`.

        Raises:
            DimensionMismatchError: If the shape of `x` does not conform.
            UnresolvedShapeError: If the operator has not been activated.
        """
        check_mode(mode)
        rows, cols = self.shape
        if mode == "forward":
            x = self._check_input(x, cols, "apply")
            fn = self._eval
        else:
            x = self._check_input(x, rows, "apply adjoint of")
            if self._adj is None:
                self._set_adjoint()
            fn = self._adj
        y = fn(x[:, None] if x.ndim == 1 else x)
        return y[:, 0] if x.ndim == 1 else y

    def direct_solve(self, b: ArrayLike, mode: Mode = "forward") -> jax.Array:
        """Solve `A x = b` (or `A^H x = b`) without iteration.

        Args:
            b: Right hand side vector or 2D array of vectors.
            mode: "forward" to solve with `A`, "adjoint" to solve with
               `A^H`.

        Returns:
            Least squares solution `x`.

        Raises:
            InvalidOperatorError: If this operator is not sweepable.
        """
        check_mode(mode)
        if not self.is_sweepable:
            raise InvalidOperatorError(f"{type(self).__name__} does not support a direct solve")
        rows, cols = self.shape
        size = rows if mode == "forward" else cols
        b = self._check_input(b, size, "solve")
        x = self._solve(b[:, None] if b.ndim == 1 else b, mode)  # type: ignore
        return x[:, 0] if b.ndim == 1 else x

    def solve(self, b: ArrayLike, mode: Mode = "forward", **kwargs) -> jax.Array:
        """Compute the least squares solution of `A x = b`.

        See :func:`linspot.solver.solve`.
        """
        from linspot.solver import solve

        return solve(self, b, mode=mode, **kwargs)

    def to_array(self) -> jax.Array:
        """Return the dense matrix represented by this operator.

        Intended for small operators only.
        """
        return self.apply(jnp.eye(self.cols, dtype=self.dtype))

    @partial(_wrap_add_sub, op=operator.add)
    def __add__(self, other):
        return LinearOperator(
            shape=self.shape,
            eval_fn=lambda x: self.apply(x) + other.apply(x),
            adj_fn=lambda y: self.apply(y, "adjoint") + other.apply(y, "adjoint"),
            dtype=result_type(self.dtype, other.dtype),
            is_linear=self.is_linear and other.is_linear,
        )

    @partial(_wrap_add_sub, op=operator.sub)
    def __sub__(self, other):
        return LinearOperator(
            shape=self.shape,
            eval_fn=lambda x: self.apply(x) - other.apply(x),
            adj_fn=lambda y: self.apply(y, "adjoint") - other.apply(y, "adjoint"),
            dtype=result_type(self.dtype, other.dtype),
            is_linear=self.is_linear and other.is_linear,
        )

    def _scaled(self, scalar) -> LinearOperator:
        sweepable = self.is_sweepable and bool(scalar != 0)
        return LinearOperator(
            shape=self.shape,
            eval_fn=lambda x: scalar * self.apply(x),
            adj_fn=lambda y: np.conj(scalar) * self.apply(y, "adjoint"),
            dtype=result_type(self.dtype, scalar),
            is_linear=self.is_linear,
            is_sweepable=sweepable,
            solve_fn=(
                (
                    lambda b, mode: self.direct_solve(b, mode)
                    / (scalar if mode == "forward" else np.conj(scalar))
                )
                if sweepable
                else None
            ),
        )

    @_wrap_mul_div_scalar
    def __mul__(self, other):
        return self._scaled(other)

    @_wrap_mul_div_scalar
    def __rmul__(self, other):
        return self._scaled(other)

    @_wrap_mul_div_scalar
    def __truediv__(self, other):
        return self._scaled(1.0 / other)

    def __neg__(self) -> LinearOperator:
        return -1.0 * self

    def __matmul__(self, other):
        # self @ other
        return self(other)

    def __rmatmul__(self, other):
        # other @ self
        if is_array(other):
            # for complex:  y @ self == (self.conj().T @ y.conj().T).conj().T
            # self.conj().T == self.adj
            return self.adj(other.conj().T).conj().T

        raise NotImplementedError(
            f"Operation __rmatmul__ not defined between {type(self)} and {type(other)}"
        )

    def __call__(self, x: Union[LinearOperator, ArrayLike]) -> Union[LinearOperator, jax.Array]:
        r"""Evaluate this :class:`LinearOperator` at the point :math:`\mb{x}`.

        Args:
            x: Point at which to evaluate this :class:`LinearOperator`.
               If `x` is an array, it is passed to :meth:`apply`. If `x`
               is a :class:`LinearOperator`, the composition of the two
               operators is returned.
        """
        if isinstance(x, LinearOperator):
            return ComposedLinearOperator(self, x)
        return self.apply(x, "forward")

    def adj(self, y: Union[LinearOperator, ArrayLike]) -> Union[LinearOperator, jax.Array]:
        """Adjoint of this :class:`LinearOperator`.

        Compute the adjoint of this :class:`LinearOperator` applied to
        input `y`.

        Args:
            y: Point at which to compute adjoint. If `y` is a
                :class:`LinearOperator`, the composition of the adjoint
                and `y` is returned.

        Returns:
            Adjoint evaluated at `y`.
        """
        if isinstance(y, LinearOperator):
            return ComposedLinearOperator(self.H, y)
        return self.apply(y, "adjoint")

    @property
    def H(self) -> LinearOperator:
        """Hermitian transpose of this :class:`LinearOperator`.

        Return a new :class:`LinearOperator` that implements the adjoint
        of this one. A direct solve, if available, is carried over.
        """
        rows, cols = self.shape
        return LinearOperator(
            shape=(cols, rows),
            eval_fn=lambda x: self.apply(x, "adjoint"),
            adj_fn=lambda y: self.apply(y, "forward"),
            dtype=self.dtype,
            is_linear=self.is_linear,
            is_sweepable=self.is_sweepable,
            solve_fn=(
                (lambda b, mode: self.direct_solve(b, flip_mode(mode)))
                if self.is_sweepable
                else None
            ),
        )

    @property
    def T(self) -> LinearOperator:
        """Transpose of this :class:`LinearOperator`.

        For a real operator this is the same as :attr:`H`; for a complex
        operator it is the non-conjugating transpose.
        """
        if not self.is_complex:
            return self.H
        rows, cols = self.shape
        return LinearOperator(
            shape=(cols, rows),
            eval_fn=lambda x: self.apply(x.conj(), "adjoint").conj(),
            adj_fn=lambda y: self.apply(y.conj(), "forward").conj(),
            dtype=self.dtype,
            is_linear=self.is_linear,
            is_sweepable=self.is_sweepable,
            solve_fn=(
                (lambda b, mode: self.direct_solve(b.conj(), flip_mode(mode)).conj())
                if self.is_sweepable
                else None
            ),
        )

    def conj(self) -> LinearOperator:
        """Complex conjugate of this :class:`LinearOperator`.

        Return a new :class:`LinearOperator` `Ac` such that
        `Ac(x) = conj(A)(x)`.
        """
        # A.conj() x == (A @ x.conj()).conj()
        return LinearOperator(
            shape=self.shape,
            eval_fn=lambda x: self.apply(x.conj()).conj(),
            adj_fn=lambda y: self.apply(y.conj(), "adjoint").conj(),
            dtype=self.dtype,
            is_linear=self.is_linear,
            is_sweepable=self.is_sweepable,
            solve_fn=(
                (lambda b, mode: self.direct_solve(b.conj(), mode).conj())
                if self.is_sweepable
                else None
            ),
        )

    @property
    def gram_op(self) -> LinearOperator:
        """Gram operator of this :class:`LinearOperator`.

        Return a new :class:`LinearOperator` `G` such that
        `G(x) = A.adj(A(x)))`.
        """
        cols = self.cols
        return LinearOperator(
            shape=(cols, cols),
            eval_fn=self.gram,
            adj_fn=self.gram,
            dtype=self.dtype,
            is_linear=self.is_linear,
        )

    def gram(self, x: ArrayLike) -> jax.Array:
        """Compute `A.adj(A(x)).`

        Args:
            x: Point at which to evaluate the gram operator.

        Returns:
            Result of `A.adj(A(x))`.
        """
        return self.apply(self.apply(x), "adjoint")


class ComposedLinearOperator(LinearOperator):
    """A composition of two :class:`LinearOperator` objects.

    A new :class:`LinearOperator` formed by the composition of two other
    :class:`LinearOperator` objects.
    """

    def __init__(self, A: LinearOperator, B: LinearOperator, jit: bool = False):
        r"""
        A :class:`ComposedLinearOperator` `AB` implements
        `AB @ x == A @ B @ x`. :class:`LinearOperator` `A` and `B` are
        stored as attributes of the :class:`ComposedLinearOperator`.

        Args:
            A: First (left) :class:`LinearOperator`.
            B: Second (right) :class:`LinearOperator`.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        if not isinstance(A, LinearOperator):
            raise TypeError(
                "The first argument to ComposedLinearOperator must be a LinearOperator; "
                f"got {type(A)}"
            )
        if not isinstance(B, LinearOperator):
            raise TypeError(
                "The second argument to ComposedLinearOperator must be a LinearOperator; "
                f"got {type(B)}"
            )
        if A.cols != B.rows:
            raise DimensionMismatchError(f"Incompatible LinearOperator shapes {A.shape}, {B.shape}")

        self.A = A
        self.B = B

        super().__init__(
            shape=(A.rows, B.cols),
            eval_fn=lambda x: self.A.apply(self.B.apply(x)),
            adj_fn=lambda z: self.B.apply(self.A.apply(z, "adjoint"), "adjoint"),
            dtype=result_type(A.dtype, B.dtype),
            is_linear=A.is_linear and B.is_linear,
            jit=jit,
        )
