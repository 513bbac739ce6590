"""Error classes for the :py:mod:`~pinvert.pinv` module."""


class PINVError(Exception):
    r"""Base exception class for errors raised while building or using a PINV generator."""

    pass


class InvalidConfigurationError(PINVError, ValueError):
    r"""Exception raised when the construction parameters (order, resolution, domain, boundary) are invalid."""

    pass


class DistributionContractError(PINVError):
    r"""Exception raised when the distribution violates the assumptions of the method.

    This includes a non-positive or ``NaN`` density at the center, a non-finite area below the
    density and a missing CDF where one is required.
    """

    pass


class ConvergenceError(PINVError):
    r"""Exception raised when one of the iterative setup routines exhausts its budget."""

    pass
