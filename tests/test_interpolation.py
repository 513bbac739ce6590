"""
Tests for the Newton interpolation helpers.
"""
import math

import numpy as np
import pytest

from pinvert.utilities.math_utils import (
    arcmean,
    construction_points,
    eval_newton_polynomial,
    newton_coefficients,
    newton_test_points,
)


def _exponential_masses(x, h, order):
    # Exact masses of exp(-x) on the sub-segments.
    starts, widths = construction_points(x, h, order)
    return np.exp(-starts) * -np.expm1(-widths), widths, starts


class TestConstructionPoints:
    @pytest.mark.parametrize("order", [2, 5, 19])
    def test_cover_interval(self, order):
        starts, widths = construction_points(1.0, 2.0, order)
        assert starts.shape == widths.shape == (order,)
        assert starts[0] == 1.0
        assert starts[-1] + widths[-1] == pytest.approx(3.0, rel=1e-14)
        np.testing.assert_allclose(starts[1:], starts[:-1] + widths[:-1], rtol=1e-14)
        assert np.all(widths > 0)

    def test_denser_at_ends(self):
        _, widths = construction_points(0.0, 1.0, 9)
        assert widths[0] < widths[4] and widths[-1] < widths[4]


class TestNewtonPolynomial:
    @pytest.mark.parametrize("order", [2, 5, 11])
    def test_interpolates_nodes(self, order):
        """The polynomial passes through the construction points."""
        masses, widths, starts = _exponential_masses(0.5, 0.8, order)
        ui, zi = newton_coefficients(masses, widths)

        assert ui[-1] == pytest.approx(math.exp(-0.5) - math.exp(-1.3), rel=1e-13)
        for k in range(order):
            assert eval_newton_polynomial(ui[k], ui, zi) == pytest.approx(
                starts[k] + widths[k] - 0.5, rel=1e-10
            )
        assert eval_newton_polynomial(0.0, ui, zi) == 0.0

    def test_uniform_density_is_linear(self):
        _, widths = construction_points(0.0, 1.0, 5)
        ui, zi = newton_coefficients(widths.copy(), widths)
        assert zi[0] == pytest.approx(1.0)
        np.testing.assert_allclose(zi[1:], 0.0, atol=1e-12)
        assert eval_newton_polynomial(0.37, ui, zi) == pytest.approx(0.37, rel=1e-12)

    def test_approximates_inverse_cdf(self):
        """Between the nodes the polynomial is close to the exact inverse CDF."""
        masses, widths, _ = _exponential_masses(0.0, 0.01, 5)
        ui, zi = newton_coefficients(masses, widths)
        for q in np.linspace(0.0, ui[-1], 17):
            assert eval_newton_polynomial(q, ui, zi) == pytest.approx(-math.log1p(-q), abs=1e-13)

    def test_test_points_between_nodes(self):
        masses, widths, _ = _exponential_masses(0.0, 1.0, 7)
        ui, _ = newton_coefficients(masses, widths)
        nodes = np.concatenate(([0.0], ui))
        tests = newton_test_points(ui)

        assert tests.shape == (7,)
        assert np.all((tests > nodes[:-1]) & (tests < nodes[1:]))


class TestArcmean:
    def test_infinite_bounds(self):
        assert arcmean(0.0, math.inf) == pytest.approx(1.0)
        assert arcmean(-math.inf, math.inf) == pytest.approx(0.0, abs=1e-15)
        assert arcmean(math.inf, 0.0) == pytest.approx(1.0)

    def test_symmetric(self):
        assert arcmean(-3.0, -1e100) == pytest.approx(-arcmean(3.0, 1e100))

    def test_harmonic_far_away(self):
        assert arcmean(2e3, 4e3) == pytest.approx(2.0 / (1 / 2e3 + 1 / 4e3))
        assert arcmean(-4e3, -2e3) == pytest.approx(2.0 / (-1 / 2e3 - 1 / 4e3))

    def test_close_points(self):
        assert arcmean(1.0, 1.0 + 1e-8) == pytest.approx(1.0 + 5e-9, rel=1e-15)
