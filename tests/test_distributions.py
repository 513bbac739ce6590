"""
Tests for the distribution objects.
"""
import math

import numpy as np
import pytest
from scipy import stats

from pinvert import ContinuousDistribution, PINVGenerator
from pinvert.pinv.exceptions import DistributionContractError, InvalidConfigurationError


class TestContinuousDistribution:
    @pytest.mark.parametrize(
        "domain, center",
        [
            ((-np.inf, np.inf), 0.0),
            ((0.0, np.inf), 0.0),
            ((2.0, 4.0), 3.0),
            ((2.0, np.inf), 2.0),
            ((-np.inf, -1.0), -1.0),
        ],
    )
    def test_default_center(self, domain, center):
        dist = ContinuousDistribution(lambda x: 1.0, domain=domain)
        assert dist.center == center

    def test_pdf_outside_domain(self):
        dist = ContinuousDistribution(lambda x: 1.0 / x, domain=(1.0, 2.0))
        assert dist.pdf(0.0) == 0.0
        assert dist.pdf(3.0) == 0.0
        assert dist.pdf(2.0) == 0.5
        assert isinstance(dist.pdf(1.5), float)

    def test_missing_cdf(self):
        dist = ContinuousDistribution(lambda x: math.exp(-x), domain=(0, np.inf))
        assert not dist.has_cdf
        with pytest.raises(DistributionContractError):
            dist.cdf(1.0)

    def test_cdf_vectorized(self):
        dist = ContinuousDistribution(
            lambda x: math.exp(-x), domain=(0, np.inf), cdf=lambda x: -np.expm1(-x)
        )
        np.testing.assert_allclose(dist.cdf([0.0, 1.0]), [0.0, 1 - math.exp(-1)])

    @pytest.mark.parametrize("domain", [(1.0, 0.0), (0.0, 0.0), (np.nan, 1.0)])
    def test_invalid_domain(self, domain):
        with pytest.raises(InvalidConfigurationError):
            ContinuousDistribution(lambda x: 1.0, domain=domain)

    def test_center_outside_domain(self):
        with pytest.raises(InvalidConfigurationError):
            ContinuousDistribution(lambda x: 1.0, domain=(0.0, 1.0), center=2.0)

    def test_name(self):
        def triangle(x):
            return 1 - abs(x)

        assert ContinuousDistribution(triangle, domain=(-1, 1)).name == "triangle"
        assert "tri" in repr(ContinuousDistribution(triangle, domain=(-1, 1), name="tri"))


class TestFromScipy:
    def test_gamma(self):
        frozen = stats.gamma(3.0)
        dist = ContinuousDistribution.from_scipy(frozen)

        assert dist.name == "gamma"
        assert dist.domain == (0.0, np.inf)
        assert dist.center == pytest.approx(frozen.median())
        assert dist.pdf(2.0) == pytest.approx(frozen.pdf(2.0))
        assert dist.has_cdf

    def test_not_a_distribution(self):
        with pytest.raises(InvalidConfigurationError):
            ContinuousDistribution.from_scipy(lambda x: x)


class TestFromExpression:
    def test_exponential(self):
        dist = ContinuousDistribution.from_expression("exp(-x)", domain=(0, np.inf))
        assert dist.pdf(1.0) == pytest.approx(math.exp(-1))
        assert dist.has_cdf
        assert float(dist.cdf(1.0)) == pytest.approx(1 - math.exp(-1), rel=1e-12)

    def test_unnormalized_density(self):
        dist = ContinuousDistribution.from_expression("3*y**2", symbol="y", domain=(0, 2), center=1.0)
        assert float(dist.cdf(1.0)) == pytest.approx(1 / 8)
        assert float(dist.cdf(2.0)) == pytest.approx(1.0)

    def test_generator(self):
        dist = ContinuousDistribution.from_expression("exp(-x**2/2)", center=0.0)
        gen = PINVGenerator(dist, u_resolution=1e-9)
        max_error, _ = gen.estimate_error(5000, random_state=0)
        assert max_error <= 1.5e-9

    def test_extra_symbols(self):
        with pytest.raises(InvalidConfigurationError):
            ContinuousDistribution.from_expression("exp(-a*x)")
