"""
Tests for the adaptive Gauss-Lobatto quadrature.
"""
import math

import pytest

from pinvert.utilities.math_utils.quadrature import DBL_EPSILON, lobatto5, lobatto5_rule


class TestLobatto:
    def test_rule_exact_for_polynomials(self):
        """The 5-point rule integrates polynomials up to degree 7 exactly."""
        f = lambda x: x**7 - 3 * x**4 + 1
        value = lobatto5_rule(f, 0.0, 2.0, f(0.0), f(1.0), f(2.0))
        assert value == pytest.approx(2.0**8 / 8 - 3 * 2.0**5 / 5 + 2.0, rel=1e-13)

    def test_normal_density(self):
        f = lambda x: math.exp(-0.5 * x * x)
        assert lobatto5(f, -10.0, 20.0, 1e-12) == pytest.approx(math.sqrt(2 * math.pi), rel=1e-12)

    def test_negative_width(self):
        f = lambda x: math.exp(x)
        forward = lobatto5(f, 0.0, 1.0, 1e-12)
        backward = lobatto5(f, 1.0, -1.0, 1e-12)
        assert forward == pytest.approx(math.e - 1, rel=1e-12)
        assert backward == pytest.approx(-forward, rel=1e-12)

    def test_zero_width(self):
        assert lobatto5(lambda x: 1.0 / x, 0.0, 0.0, 1e-10) == 0.0

    def test_peaked_integrand(self):
        """Adaptive refinement resolves a narrow peak."""
        f = lambda x: math.exp(-0.5 * ((x - 0.5) / 1e-2) ** 2)
        expected = 1e-2 * math.sqrt(2 * math.pi)
        assert lobatto5(f, 0.0, 1.0, 1e-14, area=expected) == pytest.approx(expected, rel=1e-9)

    def test_non_smooth_integrand(self):
        """Kinks and jumps converge (possibly with reduced accuracy) without raising."""
        f = lambda x: 1.0 if x < 1.0 / 3.0 else 0.0
        assert lobatto5(f, 0.0, 1.0, 1e-10) == pytest.approx(1.0 / 3.0, abs=1e-8)

    def test_tolerance_floor(self):
        """The tolerance never drops below area * DBL_EPSILON."""
        f = lambda x: math.sin(x) ** 2
        value = lobatto5(f, 0.0, math.pi, 0.0, area=math.pi / 2)
        assert value == pytest.approx(math.pi / 2, abs=1e3 * DBL_EPSILON)
