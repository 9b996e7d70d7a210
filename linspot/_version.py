# -*- coding: utf-8 -*-
# Copyright (C) 2024-2026 by linspot Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the linspot package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Support functions for determining the package version."""

import os
import re
from ast import parse
from subprocess import PIPE, Popen
from typing import Optional, Tuple, Union


def init_version_string() -> str:  # pragma: no cover
    """Get the value assigned to `__version__` in the package `__init__.py`.

    Raises:
        RuntimeError: If the assignment is not found.
    """
    path = os.path.join(os.path.dirname(__file__), "__init__.py")
    with open(path) as f:
        line = next(filter(lambda line: line.startswith("__version__"), f), None)
    if line is None:
        raise RuntimeError(f"Could not find initialization of __version__ in {path}")
    return parse(line).body[0].value.value  # type: ignore


def current_git_hash() -> Optional[str]:  # nosec  pragma: no cover
    """Get current short git hash, or ``None`` outside a git repo."""
    try:
        process = Popen(
            ["git", "rev-parse", "--short", "HEAD"],
            shell=False,
            stdout=PIPE,
            stderr=PIPE,
            cwd=os.path.dirname(os.path.abspath(__file__)),
        )
    except OSError:
        return None
    git_hash = process.communicate()[0].strip().decode("utf-8")
    return git_hash or None


def package_version(split: bool = False) -> Union[str, Tuple[str, str]]:  # pragma: no cover
    """Get current package version.

    Development versions (anything other than a purely numeric version,
    optionally ending in `post<n>`) are extended with the git hash.

    Args:
        split: Flag indicating whether to return the package version as a
           single string or split into a tuple of components.

    Returns:
        Package version string or tuple of strings.
    """
    version = init_version_string()
    git_hash = None if re.match(r"^[0-9\.]+(post[0-9]+)?$", version) else current_git_hash()
    suffix = "+" + git_hash if git_hash else ""
    if split:
        return (version, suffix)
    return version + suffix
