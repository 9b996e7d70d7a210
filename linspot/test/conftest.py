"""
Configure the --level pytest option and the slow test marker.
"""

import pytest


def pytest_addoption(parser, pluginmanager):
    """Add --level pytest option.

    Level definitions:
      1-3  Standard tests only
      4    All tests, including those marked as slow to run
    """
    parser.addoption(
        "--level", action="store", default=3, type=int, help="Set test level to be run"
    )


def pytest_configure(config):
    """Add marker description."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless the selected testing level is at least 4."""
    if config.getoption("--level") >= 4:
        return
    level_skip = pytest.mark.skip(reason="test not appropriate for selected level")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(level_skip)
