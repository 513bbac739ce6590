"""
pinvert utilities module.

The :py:mod:`pinvert.utilities` module provides the widely used utilities of the package: configuration,
logging and the numerical building blocks in :py:mod:`pinvert.utilities.math_utils`.
"""
from .config import pinvert_params
from .logging import devlog, mylog

__all__ = [
    "pinvert_params",
    "devlog",
    "mylog",
]
