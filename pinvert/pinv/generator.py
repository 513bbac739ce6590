r"""
Polynomial interpolation based inversion (PINV) generator.

The :py:class:`PINVGenerator` builds an approximation :math:`F_a^{-1}` of the inverse CDF of a continuous
distribution from nothing but its density. Random variates are then generated by inversion,
:math:`X = F_a^{-1}(U)` with :math:`U \sim \mathcal{U}(0, 1)`.

The accuracy of the approximation is controlled by the *u-resolution* :math:`\varepsilon_u`, the maximal
tolerated u-error

.. math::

    \varepsilon_u(u) = |u - F(F_a^{-1}(u))|.

The construction runs through the following stages, each of which is a pure function of the previous one:

1. :py:func:`~pinvert.pinv.boundary.search_support`: find the region where the density is not negligible.
2. :py:func:`~pinvert.pinv.boundary.estimate_area`: estimate the area below the density.
3. :py:func:`~pinvert.pinv.boundary.find_computational_domain`: cut off the tails.
4. :py:func:`~pinvert.pinv.intervals.build_interval_table`: interpolate the inverse CDF interval by interval.
5. :py:meth:`~pinvert.pinv.guide.GuideTable.build`: build the guide table for the interval lookup.

Examples
--------

>>> from scipy import stats
>>> from pinvert.pinv.generator import PINVGenerator
>>> gen = PINVGenerator(stats.norm(), order=5, u_resolution=1e-10)
>>> x = gen.rvs(size=1000, random_state=42)
>>> x.shape
(1000,)
"""
import math
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike
from tqdm.auto import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from pinvert.distributions import ContinuousDistribution
from pinvert.pinv._sampling_opt import eval_approx_invcdf
from pinvert.pinv.boundary import (
    ComputationalDomain,
    estimate_area,
    find_computational_domain,
    search_support,
)
from pinvert.pinv.config import PINVConfig
from pinvert.pinv.exceptions import DistributionContractError, PINVError
from pinvert.pinv.guide import GuideTable
from pinvert.pinv.intervals import Interval, IntervalTable, build_interval_table
from pinvert.utilities.config import pinvert_params
from pinvert.utilities.logging import LogDescriptor, devlog, mylog

RandomStateLike = Union[None, int, np.random.Generator, np.random.RandomState]


def check_random_state(random_state: RandomStateLike) -> Union[np.random.Generator, np.random.RandomState]:
    """
    Turn ``random_state`` into a numpy random number generator.

    ``None`` gives a freshly seeded :py:class:`numpy.random.Generator`, an integer a generator seeded with
    it. Existing ``Generator`` and ``RandomState`` instances are returned unchanged.
    """
    if random_state is None or isinstance(random_state, (int, np.integer)):
        return np.random.default_rng(random_state)
    if isinstance(random_state, (np.random.Generator, np.random.RandomState)):
        return random_state
    raise ValueError(f"{random_state!r} cannot be used to seed a random number generator.")


class PINVGenerator:
    r"""
    Random variate generator using polynomial interpolation of the inverse CDF.

    Parameters
    ----------
    dist : :py:class:`~pinvert.distributions.ContinuousDistribution` or frozen scipy distribution
        The distribution to sample from. Frozen :py:mod:`scipy.stats` distributions are converted
        with :py:meth:`~pinvert.distributions.ContinuousDistribution.from_scipy`.
    config : :py:class:`~pinvert.pinv.config.PINVConfig`, optional
        The construction parameters. If not provided, the defaults of the configuration file are used.
    **kwargs
        Individual construction parameters (``order``, ``u_resolution``, ``boundary``, ...). They take
        precedence over ``config``.

    Raises
    ------
    InvalidConfigurationError
        If the construction parameters are invalid.
    DistributionContractError
        If the density violates the assumptions of the method.
    ConvergenceError
        If one of the setup stages does not converge.

    Notes
    -----
    The generator is immutable once constructed: all tables are read-only numpy arrays, so a single generator
    may be shared between threads as long as each thread uses its own random number generator.
    """

    logger = LogDescriptor()

    def __init__(
        self,
        dist: ContinuousDistribution,
        config: Optional[PINVConfig] = None,
        **kwargs,
    ):
        if not isinstance(dist, ContinuousDistribution):
            dist = ContinuousDistribution.from_scipy(dist)

        if config is None:
            config = PINVConfig(**kwargs)
        elif kwargs:
            config = config.replace(**kwargs)

        self._dist: ContinuousDistribution = dist
        self._config: PINVConfig = config
        self._build()

    def _build(self):
        dist, config = self._dist, self._config
        self.logger.debug(
            "Building PINV generator for %s (order=%d, u_resolution=%g).",
            dist.name,
            config.order,
            config.u_resolution,
        )

        try:
            support = search_support(dist, config)
            area = estimate_area(dist, support, config.u_resolution)
            domain = find_computational_domain(dist, support, area, config)
            table = build_interval_table(dist, domain, area, config)
        except PINVError as error:
            self.logger.error("Failed to build PINV generator for %s: %s", dist.name, error)
            raise

        self._area: float = area
        self._domain: ComputationalDomain = domain
        self._table: IntervalTable = table
        self._guide: GuideTable = GuideTable.build(table, config.guide_factor)

        self.logger.info(
            "Built PINV generator for %s: %d intervals on [%g, %g].",
            dist.name,
            len(table),
            domain.left,
            domain.right,
        )

    def __repr__(self):
        return (
            f"<PINVGenerator: {self._dist.name}, order={self.order}, "
            f"u_resolution={self.u_resolution:g}, intervals={self.get_interval_count()}>"
        )

    # @@ PROPERTIES @@ #
    @property
    def distribution(self) -> ContinuousDistribution:
        """The distribution of the generator."""
        return self._dist

    @property
    def config(self) -> PINVConfig:
        """The construction parameters."""
        return self._config

    @property
    def order(self) -> int:
        """The order of the interpolating polynomials."""
        return self._config.order

    @property
    def u_resolution(self) -> float:
        """The maximal tolerated u-error."""
        return self._config.u_resolution

    @property
    def area(self) -> float:
        """The estimated area below the density."""
        return self._area

    @property
    def computational_domain(self) -> ComputationalDomain:
        """The interval on which the inverse CDF is interpolated."""
        return self._domain

    @property
    def interval_table(self) -> IntervalTable:
        """The frozen interpolation table."""
        return self._table

    @property
    def guide_table(self) -> GuideTable:
        """The frozen guide table."""
        return self._guide

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        """The intervals of the interpolation table."""
        return tuple(self._table)

    @property
    def umax(self) -> float:
        """The total mass of the interpolation table (close to :py:attr:`area`)."""
        return self._table.umax

    def get_interval_count(self) -> int:
        """Return the number of intervals of the interpolation table."""
        return len(self._table)

    # @@ EVALUATION @@ #
    def _eval_array(self, u: np.ndarray) -> np.ndarray:
        # u must lie in [0, 1].
        table = self._table
        _u = np.ascontiguousarray(u, dtype=np.float64).ravel()
        out = np.empty_like(_u)

        eval_approx_invcdf(
            _u, table.umax, self._guide.guide, table.xi, table.cdfi, table.ui, table.zi, out
        )
        np.clip(out, *self._dist.domain, out=out)
        return out.reshape(np.shape(u))

    def eval_approx_inverse_cdf(self, u: float) -> float:
        """
        Evaluate the approximate inverse CDF at a single point.

        Parameters
        ----------
        u : float
            The point, in :math:`[0, 1]`.

        Returns
        -------
        float
            The approximate quantile. For ``u <= 0`` (``u >= 1``) the left (right) edge of the domain
            of the distribution is returned; values outside :math:`[0, 1]` are reported in the log.
        """
        if not 0.0 <= u <= 1.0:
            self.logger.warning("Argument u=%g is out of the range [0, 1].", u)
            if math.isnan(u):
                return math.nan

        if u <= 0.0:
            return self._dist.domain[0]
        if u >= 1.0:
            return self._dist.domain[1]

        i = self._guide.locate(self._table, u)
        x = self._table[i].eval(u * self.umax - self._table.cdfi[i])
        return min(max(x, self._dist.domain[0]), self._dist.domain[1])

    def ppf(self, u: ArrayLike) -> np.ndarray:
        """
        Evaluate the approximate inverse CDF (percent point function) at ``u``.

        Parameters
        ----------
        u : array_like
            Points in :math:`[0, 1]`.

        Returns
        -------
        np.ndarray
            The approximate quantiles, with the same shape as ``u``. At ``0`` and ``1`` (and beyond) the edges
            of the domain of the distribution are returned, ``NaN`` stays ``NaN``.
        """
        u = np.asarray(u, dtype=np.float64)

        _invalid = ~((u >= 0.0) & (u <= 1.0))
        if np.any(_invalid):
            self.logger.warning("%d arguments are out of the range [0, 1].", int(_invalid.sum()))

        x = self._eval_array(np.clip(np.nan_to_num(u, nan=0.5), 0.0, 1.0))
        x[u <= 0.0] = self._dist.domain[0]
        x[u >= 1.0] = self._dist.domain[1]
        x[np.isnan(u)] = np.nan
        return x if x.ndim else x[()]

    # @@ SAMPLING @@ #
    def rvs(
        self, size: Union[None, int, Tuple[int, ...]] = None, random_state: RandomStateLike = None
    ) -> Union[float, np.ndarray]:
        """
        Draw random variates.

        Parameters
        ----------
        size : int or tuple of int, optional
            The shape of the output. If ``None`` (default) a single float is returned.
        random_state : int, numpy.random.Generator or numpy.random.RandomState, optional
            The source of uniform random numbers.

        Returns
        -------
        float or np.ndarray
            The random variates.
        """
        rng = check_random_state(random_state)
        u = rng.uniform(size=size)
        if size is None:
            return float(self._eval_array(np.asarray([u]))[0])
        return self._eval_array(u)

    def sample(self, random_state: RandomStateLike = None) -> float:
        """Draw a single random variate."""
        return self.rvs(random_state=random_state)

    # @@ DIAGNOSTICS @@ #
    def estimate_error(
        self,
        sample_size: Optional[int] = None,
        random_state: RandomStateLike = None,
        randomized: bool = True,
    ) -> Tuple[float, float]:
        r"""
        Estimate the u-error of the generator.

        The u-error :math:`|u - F(F_a^{-1}(u))|` is computed on ``sample_size`` points, where the CDF is
        normalized over the domain of the distribution.

        Parameters
        ----------
        sample_size : int, optional
            The number of points. Defaults to ``error_estimation.sample_size`` of the configuration.
        random_state : optional
            The source of uniform random numbers (only used if ``randomized``).
        randomized : bool
            If ``True`` (default), the points are uniform random numbers, otherwise the equidistant
            points :math:`(j + 1/2) / N`.

        Returns
        -------
        max_error : float
            The maximal observed u-error.
        mean_absolute_error : float
            The mean absolute u-error.

        Raises
        ------
        DistributionContractError
            If the distribution has no CDF.
        """
        dist = self._dist
        if not dist.has_cdf:
            raise DistributionContractError(
                f"Distribution {dist.name} has no CDF; cannot estimate the u-error."
            )

        if sample_size is None:
            sample_size = pinvert_params["error_estimation.sample_size"]
        sample_size = int(sample_size)
        if sample_size < 1:
            raise ValueError(f"sample_size must be positive, not {sample_size}.")
        chunk_size = int(pinvert_params["error_estimation.chunk_size"])

        left, right = dist.domain
        cdf_min = float(dist.cdf(left)) if math.isfinite(left) else 0.0
        cdf_max = float(dist.cdf(right)) if math.isfinite(right) else 1.0
        rng = check_random_state(random_state) if randomized else None

        max_error, sum_error = 0.0, 0.0
        with logging_redirect_tqdm(loggers=[self.logger, devlog, mylog]):
            with tqdm(
                total=sample_size,
                desc="[u-error]",
                leave=False,
                disable=pinvert_params["system.preferences.disable_progress_bars"],
            ) as pbar:
                for start in range(0, sample_size, chunk_size):
                    m = min(chunk_size, sample_size - start)
                    if randomized:
                        u = rng.uniform(size=m)
                    else:
                        u = (np.arange(start, start + m) + 0.5) / sample_size

                    x = self._eval_array(u)
                    uerror = np.abs(u - (dist.cdf(x) - cdf_min) / (cdf_max - cdf_min))

                    max_error = max(max_error, float(uerror.max()))
                    sum_error += float(uerror.sum())
                    pbar.update(m)

        self.logger.debug(
            "Estimated u-error of %s: max=%g, mean=%g (n=%d).",
            dist.name,
            max_error,
            sum_error / sample_size,
            sample_size,
        )
        return max_error, sum_error / sample_size

    def info(self) -> str:
        """
        Return a human readable summary of the generator.
        """
        dist, table = self._dist, self._table
        lines = [
            "generator: PINV (polynomial interpolation of the inverse CDF)",
            f"distribution: {dist.name}",
            f"   domain = ({dist.domain[0]:g}, {dist.domain[1]:g})",
            f"   center = {dist.center:g}",
            f"   has CDF = {dist.has_cdf}",
            "parameters:",
            f"   order = {self.order}",
            f"   u_resolution = {self.u_resolution:g}",
            f"   boundary = {self._config.boundary}",
            f"   search_boundary = {self._config.search_boundary}",
            f"   guide_factor = {self._config.guide_factor:g}",
            "performance characteristics:",
            f"   truncated domain = ({self._domain.left:g}, {self._domain.right:g})",
            f"   area below PDF = {self._area:g}",
            f"   number of intervals = {len(table)}",
            f"   guide table size = {self._guide.size}",
        ]
        return "\n".join(lines)

    def clone(self) -> "PINVGenerator":
        """
        Return a copy of the generator.

        The tables are copied; the distribution (which is immutable) is shared.
        """
        other = object.__new__(self.__class__)
        other._dist = self._dist
        other._config = self._config
        other._area = self._area
        other._domain = self._domain
        other._table = self._table.copy()
        other._guide = self._guide.copy()
        return other
