"""
pinvert: random variate generation by polynomial interpolation of the inverse CDF.

>>> from scipy import stats
>>> from pinvert import PINVGenerator
>>> gen = PINVGenerator(stats.gamma(3.0), u_resolution=1e-10)
>>> gen.get_interval_count() > 0
True
"""
# The generator has to be imported before the distributions since
# pinvert.distributions depends on pinvert.pinv.exceptions.
from pinvert.pinv import (
    ConvergenceError,
    DistributionContractError,
    InvalidConfigurationError,
    PINVConfig,
    PINVError,
    PINVGenerator,
)
from pinvert.distributions import ContinuousDistribution

__version__ = "0.1.0"

__all__ = [
    "PINVGenerator",
    "PINVConfig",
    "ContinuousDistribution",
    "PINVError",
    "InvalidConfigurationError",
    "DistributionContractError",
    "ConvergenceError",
]
