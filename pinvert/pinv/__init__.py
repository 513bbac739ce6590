"""
Polynomial interpolation based inversion.

The :py:mod:`pinvert.pinv` module contains the :py:class:`~pinvert.pinv.generator.PINVGenerator` together with
the individual stages of its construction: the boundary and tail search (:py:mod:`~pinvert.pinv.boundary`), the
interpolation table (:py:mod:`~pinvert.pinv.intervals`) and the guide table (:py:mod:`~pinvert.pinv.guide`).
"""
from pinvert.pinv.config import PINVConfig
from pinvert.pinv.exceptions import (
    ConvergenceError,
    DistributionContractError,
    InvalidConfigurationError,
    PINVError,
)
from pinvert.pinv.generator import PINVGenerator

__all__ = [
    "PINVGenerator",
    "PINVConfig",
    "PINVError",
    "InvalidConfigurationError",
    "DistributionContractError",
    "ConvergenceError",
]
