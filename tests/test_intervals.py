"""
Tests for the construction of the interpolation table.
"""
import math

import numpy as np
import pytest

from pinvert import ContinuousDistribution, PINVGenerator
from pinvert.pinv.intervals import newton_max_error


def uniform_pdf(x):
    return 1.0


class TestNewtonMaxError:
    # Order 2 on [0, 1] with nodes u = (0.5, 1) and construction points x = (0.5, 1).
    UI = np.array([0.5, 1.0])
    XVAL = np.array([0.5, 1.0])

    def test_exact_polynomial(self):
        # P(q) = q is the exact inverse CDF of the uniform density.
        zi = np.array([1.0, 0.0])
        assert newton_max_error(uniform_pdf, 0.0, self.UI, zi, self.XVAL, 1e-10, 1.0) < 1e-14

    def test_decreasing_polynomial(self):
        # P(q) = q (3 - 4q) turns over between the two nodes.
        zi = np.array([1.0, -4.0])
        assert newton_max_error(uniform_pdf, 0.0, self.UI, zi, self.XVAL, 1e-10, 1.0) == math.inf


class TestMonotoneTable:
    """Densities vanishing at the edge of the support have an inverse CDF with a square root singularity."""

    @pytest.mark.parametrize("order", [3, 5, 9])
    def test_linear_edge(self, order):
        dist = ContinuousDistribution(lambda x: x * (1 - x) ** 4, domain=(0, 1), center=0.2)
        gen = PINVGenerator(dist, order=order, u_resolution=1e-10)

        u = np.sort(np.concatenate([np.logspace(-13, -8, 5000), np.linspace(0, 1, 20_001)]))
        x = gen.ppf(u)
        assert np.all(np.diff(x) >= 0), "Approximate inverse CDF is not monotone near the left edge."
