"""Pytest configuration for the dwint test suite."""

import sys
from pathlib import Path

import pytest
from hypothesis import settings

# Add the repository root to the path for dwint imports
sys.path.insert(0, str(Path(__file__).parent.parent))

DEFAULT_ROUNDS = 500

# Wide division runs one shift-and-subtract step per bit in pure Python.
settings.register_profile("dwint", deadline=None)
settings.load_profile("dwint")


def pytest_addoption(parser):
    """Add --rounds option."""
    parser.addoption(
        "--rounds",
        action="store",
        type=int,
        default=DEFAULT_ROUNDS,
        help="Random rounds per operation in the reference comparison tests",
    )


@pytest.fixture
def rounds(request) -> int:
    return request.config.getoption("rounds")
