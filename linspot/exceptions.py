# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Exceptions raised by linear operators.

All exceptions derive from :class:`LinearOperatorError` as well as from
the builtin exception that best describes the failure, so that callers
catching :class:`ValueError` or :class:`TypeError` keep working.
Composite operators never catch or rewrap exceptions raised by their
children.
"""

from typing import Optional


class LinearOperatorError(Exception):
    """Base class of all linear operator exceptions."""


class DimensionMismatchError(LinearOperatorError, ValueError):
    """Array or operator argument has a shape that does not conform."""


class InconsistentShapeError(LinearOperatorError, ValueError):
    """Shapes of the children of a composite operator are in conflict.

    Attributes:
        index: Zero-based index of the offending child, if known.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class InvalidOperatorError(LinearOperatorError, TypeError, ValueError):
    """Too few children, or a child lacking a required capability."""


class UnresolvedShapeError(LinearOperatorError, RuntimeError):
    """Operation attempted on an operator that has not been activated."""
