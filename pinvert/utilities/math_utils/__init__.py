""" Mathematics utilities for pinvert.

The :py:mod:`~pinvert.utilities.math_utils` module provides the numerical building blocks of the
setup: adaptive quadrature, Newton interpolation and the floating point helpers used by the
boundary searches.
"""
from .interpolation import (
    construction_points,
    eval_newton_polynomial,
    newton_coefficients,
    newton_test_points,
)
from .numeric import arcmean
from .quadrature import DBL_EPSILON, lobatto5

__all__ = [
    'lobatto5', 'DBL_EPSILON', 'arcmean',
    'construction_points', 'newton_coefficients', 'eval_newton_polynomial', 'newton_test_points',
]
