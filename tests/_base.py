"""
Base test class for PINV generators of specific distributions.
"""
import numpy as np
import pytest
from scipy.integrate import quad

from pinvert import ContinuousDistribution, PINVGenerator


@pytest.mark.usefixtures("seed")
class _TestGenerator:
    # @@ TEST PARAMETERS @@ #
    # These are the parameters that are used to instantiate the
    # unit test class. DISTRIBUTION is a callable returning the distribution
    # (so that it is only built when the test class is collected).
    DISTRIBUTION = None
    PARAMETERS = dict(order=5, u_resolution=1.0e-10)
    ERROR_FACTOR = 1.5

    # @@ TRANSIENT PROPERTIES @@ #
    _GEN_INST = None

    # @@ PROPERTIES @@ #
    @property
    def generator(self) -> PINVGenerator:
        return self.__class__._GEN_INST

    @property
    def distribution(self) -> ContinuousDistribution:
        return self.generator.distribution

    @property
    def tolerance(self) -> float:
        return self.ERROR_FACTOR * self.generator.u_resolution

    # @@ FIXTURES @@ #
    @pytest.fixture(autouse=True)
    def setup_class(self):
        """Build the generator once per test class."""
        if self.__class__._GEN_INST is None:
            self.__class__._GEN_INST = PINVGenerator(
                self.__class__.DISTRIBUTION(), **self.__class__.PARAMETERS
            )

    @pytest.fixture
    def u_grid(self):
        """Dense grid of uniforms, including the extreme tails."""
        _tails = np.logspace(-14, -2, 200)
        return np.sort(np.concatenate([np.linspace(0, 1, 100_001)[1:-1], _tails, 1 - _tails]))

    def normalized_cdf(self, x):
        left, right = self.distribution.domain
        cmin = float(self.distribution.cdf(left)) if np.isfinite(left) else 0.0
        cmax = float(self.distribution.cdf(right)) if np.isfinite(right) else 1.0
        return (self.distribution.cdf(x) - cmin) / (cmax - cmin)

    # @@ TESTS @@ #
    def test_u_error(self, u_grid):
        """The u-error on a dense grid is bounded by the u-resolution."""
        x = self.generator.ppf(u_grid)
        uerror = np.abs(u_grid - self.normalized_cdf(x))
        assert uerror.max() <= self.tolerance, (
            f"Max u-error {uerror.max():g} exceeds {self.tolerance:g} (at u={u_grid[np.argmax(uerror)]:g})."
        )

    def test_monotone(self, u_grid):
        """The approximate inverse CDF is non-decreasing."""
        x = self.generator.ppf(u_grid)
        assert np.all(np.diff(x) >= 0), "Approximate inverse CDF is not monotone."

    def test_table_structure(self):
        """Boundaries increase, cumulative values are contiguous and match the interval masses."""
        table = self.generator.interval_table
        assert np.all(np.diff(table.xi) > 0), "Interval boundaries are not strictly increasing."
        assert table.cdfi[0] == 0.0
        # Contiguity holds up to the round-off of the cumulative sums.
        np.testing.assert_allclose(
            np.diff(table.cdfi),
            table.ui[:, -1],
            rtol=0,
            atol=64 * np.finfo(float).eps * table.umax,
            err_msg="cdfi is not contiguous.",
        )
        assert table.umax == pytest.approx(self.generator.area, rel=1e-4)

        # Compare a few masses with an independent integration.
        for i in np.linspace(0, len(table) - 1, 7).astype(int):
            mass, _ = quad(self.distribution.pdf, table.xi[i], table.xi[i + 1], epsabs=1e-14, epsrel=1e-12)
            assert mass == pytest.approx(table.ui[i, -1], abs=self.generator.u_resolution * self.generator.area)

    def test_tables_read_only(self):
        table = self.generator.interval_table
        for array in (table.xi, table.cdfi, table.ui, table.zi, self.generator.guide_table.guide):
            with pytest.raises(ValueError):
                array[0] = 0

    def test_guide_lookup(self, seed):
        """The guide table finds the unique interval containing u."""
        table, guide = self.generator.interval_table, self.generator.guide_table
        u = np.random.default_rng(seed).uniform(size=2000)

        expected = np.searchsorted(table.cdfi, u * table.umax, side="right") - 1
        found = np.array([guide.locate(table, _u) for _u in u])
        np.testing.assert_array_equal(found, np.minimum(expected, len(table) - 1))

    def test_compiled_matches_python(self, seed):
        """The vectorized kernel agrees with the scalar evaluation."""
        u = np.random.default_rng(seed).uniform(size=500)
        x_vec = self.generator.ppf(u)
        x_scalar = np.array([self.generator.eval_approx_inverse_cdf(_u) for _u in u])
        np.testing.assert_allclose(x_vec, x_scalar, rtol=1e-13)

    def test_samples(self, seed):
        """Samples lie in the computational domain and are reproducible."""
        x1 = self.generator.rvs(size=10_000, random_state=seed)
        x2 = self.generator.rvs(size=10_000, random_state=seed)
        np.testing.assert_array_equal(x1, x2)

        domain = self.generator.computational_domain
        _slack = 1e-9 * domain.width
        assert x1.shape == (10_000,)
        assert np.all((x1 >= domain.left - _slack) & (x1 <= domain.right + _slack))
        assert isinstance(self.generator.sample(random_state=seed), float)

    def test_deterministic_construction(self):
        """Rebuilding the generator yields identical tables."""
        other = PINVGenerator(self.distribution, **self.PARAMETERS)
        for name in ("xi", "cdfi", "ui", "zi"):
            np.testing.assert_array_equal(
                getattr(other.interval_table, name), getattr(self.generator.interval_table, name)
            )
        np.testing.assert_array_equal(other.guide_table.guide, self.generator.guide_table.guide)

    def test_estimate_error(self, seed):
        max_error, mean_error = self.generator.estimate_error(20_000, random_state=seed)
        assert max_error <= self.tolerance
        assert 0 <= mean_error <= max_error

        max_error, _ = self.generator.estimate_error(20_000, randomized=False)
        assert max_error <= self.tolerance
