"""
Configuration for pinvert unit testing structure.
"""
import numpy as np
import pytest
from _pytest.config.argparsing import Parser

from pinvert.utilities.config import pinvert_params

# @@ CONFIGURING SETTINGS @@ #
# The progress bars need to be disabled during unit testing
# because github actions console will not emulate them correctly.
pinvert_params["system.preferences.disable_progress_bars"] = True


# @@ PYTEST OPTIONS CONFIG @@ #
def pytest_addoption(parser: Parser) -> None:
    """
    Add custom command-line options to pytest for controlling test behavior.

    Args:
        parser (Parser): The pytest parser object.

    Returns:
        None
    """
    parser.addoption(
        "--seed",
        help="Seed of the random number generators used in the tests.",
        type=int,
        default=12345,
    )


# @@ SESSION FIXTURES @@ #
# These are the core fixtures which are present in every session of
# pytest.
@pytest.fixture()
def seed(request) -> int:
    """fetches the ``--seed`` option."""
    return request.config.getoption("--seed")


@pytest.fixture()
def rng(seed) -> np.random.Generator:
    """A freshly seeded random number generator."""
    return np.random.default_rng(seed)
