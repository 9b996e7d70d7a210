# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Diagnostic information for iterative solvers."""

import re
import warnings
from collections import namedtuple
from typing import Dict, List, Optional, Sequence

_FORMAT_RE = re.compile(r"%(\+?-?)(\d*)(\.?)(\d*)([a-z])")


def _identifier(name: str) -> str:
    """Convert a field name into a valid namedtuple field identifier."""
    ident = re.sub(r"\W+|^(?=\d)", "_", name).strip("_")
    return ident if ident else "field"


class IterationStats:
    """Display and record iterative algorithm statistics.

    Each call to :meth:`insert` records the values of a single
    iteration. If display is enabled, values are also printed to stdout
    as rows of a table whose header is printed before the first row.
    """

    def __init__(
        self,
        fields: Dict[str, str],
        display: bool = False,
        period: int = 1,
        colsep: int = 2,
    ):
        """
        Args:
            fields: A dictionary mapping field names, in display order,
                to `%`-style format strings for the corresponding values.
            display: Flag indicating whether results should be printed
                to stdout.
            period: Only display one result in every cycle of length
                `period`.
            colsep: Number of spaces separating displayed columns.

        Raises:
            TypeError: If `fields` is not a dict.
            ValueError: If a format string cannot be parsed.
        """
        if not isinstance(fields, dict):
            raise TypeError("Parameter fields must be an instance of dict")

        self.display = display
        self.period = period
        self.colsep = colsep
        self.iterations: List = []

        self.fieldname: List[str] = []
        self.fieldformat: List[str] = []
        for name, fmt in fields.items():
            match = _FORMAT_RE.match(fmt)
            if not match:
                raise ValueError(f'Format string "{fmt}" could not be parsed')
            flag, width, dot, prec, typ = match.groups()
            flen = len(fmt % 0)
            if width and flen > int(width):
                warnings.warn(
                    f'Actual length {flen} of format "{fmt}" for field "{name}" '
                    f"is longer than specified value {width}",
                    stacklevel=2,
                )
            # Widen the field so that it is at least as wide as its header
            if flen < len(name):
                fmt = f"%{flag}{len(name)}{dot}{prec}{typ}"
            self.fieldname.append(name)
            self.fieldformat.append(fmt)

        self.IterTuple = namedtuple(  # type: ignore
            "IterationStatsTuple", [_identifier(name) for name in self.fieldname]
        )
        self._header: Optional[str] = self._make_header() if display else None

    def _make_header(self) -> str:
        sep = " " * self.colsep
        widths = [
            max(len(fmt % 0), len(name)) for name, fmt in zip(self.fieldname, self.fieldformat)
        ]
        title = sep.join(f"{name:<{w}}" for name, w in zip(self.fieldname, widths))
        return title + "\n" + "-" * len(title)

    def insert(self, values: Sequence):
        """Insert a sequence of values for a single iteration.

        Args:
            values: Statistics for a single iteration, in field order.
        """
        self.iterations.append(self.IterTuple(*values))
        if self.display and (len(self.iterations) - 1) % self.period == 0:
            if self._header is not None:
                print(self._header)
                self._header = None
            print((" " * self.colsep).join(self.fieldformat) % tuple(values))

    def history(self, transpose: bool = False):
        """Retrieve record of all inserted iterations.

        Args:
            transpose: Flag indicating whether results should be returned
                as a namedtuple of lists rather than a list of
                namedtuples.

        Returns:
            list of namedtuple or namedtuple of lists: Record of all
            inserted iterations.
        """
        if transpose:
            if not self.iterations:
                return self.IterTuple(*[[] for _ in self.fieldname])
            return self.IterTuple(*[list(column) for column in zip(*self.iterations)])
        return self.iterations
