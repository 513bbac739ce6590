r"""
Setup of the computational domain of a PINV generator.

Before any interpolation can happen, the generator needs a finite interval :math:`[b_l, b_r]` on which the
inverse CDF is approximated. It is found in three steps:

1. :py:func:`search_support` looks for the region where the density is not negligible compared to the
   density at the center of the distribution (:math:`f(x) > 10^{-13} f(x_c)`). Along the way, points where
   the density vanishes shrink the support of the distribution.
2. :py:func:`estimate_area` computes a (rough) estimate of the area below the density on that region.
3. :py:func:`find_computational_domain` then cuts off the tails so that the probability mass left out on
   either side is a small fraction of the requested u-resolution.

The tail probability beyond a point :math:`x` is approximated by

.. math::

    \int_x^\infty f(t)\,dt \approx \frac{f(x)^2}{(\mathrm{lc}(x)+1)\,|f'(x)|},

where :math:`\mathrm{lc}` is the local concavity of the density. This is exact for densities with a
:math:`T_c`-concave tail and sufficiently accurate for the purpose of locating a cut-off point.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pinvert.pinv.config import DEFAULT_BOUND, PINVConfig
from pinvert.pinv.exceptions import (
    ConvergenceError,
    DistributionContractError,
    InvalidConfigurationError,
)
from pinvert.utilities._typing import PDFCallable
from pinvert.utilities.logging import devlog, mylog
from pinvert.utilities.math_utils.numeric import arcmean
from pinvert.utilities.math_utils.quadrature import DBL_EPSILON, lobatto5

# @@ CONSTANTS @@ #
PDF_LOWER_LIMIT: float = 1.0e-13
""" float: Relative density (w.r.t. the center) below which a point is considered negligible."""
MAX_SEARCH_STEPS: int = 100
MAX_SEARCH_BUDGET: int = 2048
UERROR_CORRECTION: float = 0.9
TAILCUTOFF_MAX: float = 1.0e-10
MAX_CUT_STEPS: int = 1000
MAX_SECANT_STEPS: int = 2048


@dataclass(frozen=True)
class SupportBounds:
    """
    Result of the boundary search.

    Attributes
    ----------
    left, right : float
        The region where the density is not negligible.
    domain_left, domain_right : float
        The support of the distribution. This is the domain of the distribution, possibly shrunk to
        points where the density was found to vanish.
    """

    left: float
    right: float
    domain_left: float
    domain_right: float


@dataclass(frozen=True)
class ComputationalDomain:
    """
    The interval on which the inverse CDF is interpolated.

    Attributes
    ----------
    left, right : float
        The cut-off points.
    tail_threshold : float
        The (unnormalized) probability mass tolerated in each of the cut off tails.
    """

    left: float
    right: float
    tail_threshold: float

    @property
    def width(self) -> float:
        return self.right - self.left


# @@ BOUNDARY SEARCH @@ #
def search_border(pdf: PDFCallable, x0: float, bound: float) -> Tuple[float, Optional[float]]:
    """
    Search from ``x0`` toward ``bound`` for the point where the density becomes negligible.

    Parameters
    ----------
    pdf : Callable[[float], float]
        The density. ``pdf(x0)`` must be clearly positive.
    x0 : float
        The starting point.
    bound : float
        The search stops at this point. Infinite domain edges should be replaced by
        ``+/- DEFAULT_BOUND``.

    Returns
    -------
    border : float
        A point with density just above ``PDF_LOWER_LIMIT * pdf(x0)``.
    xnull : float or None
        The last search point with vanishing density, if any. This is a boundary of the support.

    Raises
    ------
    ConvergenceError
        If the density does not become negligible within the step budget and ``bound`` is
        not a finite edge of the domain.
    """
    fllim = pdf(x0) * PDF_LOWER_LIMIT

    xold, x = x0, arcmean(x0, bound)
    xnull = None

    # Step toward the bound until the density is below the threshold.
    for _steps in range(MAX_SEARCH_STEPS):
        if not pdf(x) > fllim:
            break
        xold, x = x, arcmean(x, bound)
    else:
        if abs(bound) < DEFAULT_BOUND:
            devlog.debug("Density does not vanish toward %g; using the domain edge.", bound)
            return bound, None
        raise ConvergenceError(
            f"Density does not become negligible between {x0:g} and {bound:g}."
        )

    # The point found may be far beyond the relevant region. Bisect back
    # toward the previous search point until the density is above the threshold again.
    for _ in range(MAX_SEARCH_BUDGET - _steps):
        x = 0.5 * (x + xold)
        fx = pdf(x)
        if fx == 0.0:
            xnull = x
        if fx >= fllim:
            break

    if xnull is not None and abs(xnull) < 1.0e-300:
        xnull = 0.0

    devlog.debug("Border search from %g toward %g: border=%g, xnull=%s.", x0, bound, x, xnull)
    return x, xnull


def search_support(dist, config: PINVConfig) -> SupportBounds:
    """
    Find the region of computational relevance of ``dist``.

    Parameters
    ----------
    dist : :py:class:`~pinvert.distributions.ContinuousDistribution`
        The distribution.
    config : :py:class:`~pinvert.pinv.config.PINVConfig`
        The construction parameters. Only sides with enabled search are searched.

    Returns
    -------
    SupportBounds
        The relevant region and the (possibly shrunk) support.

    Raises
    ------
    DistributionContractError
        If the density at the center is not positive.
    InvalidConfigurationError
        If the center lies outside of the boundary.
    """
    left, right = config.resolve_bounds(dist.domain)
    domain_left, domain_right = dist.domain
    center = dist.center

    fc = dist.pdf(center)
    if not (fc > 0.0 and math.isfinite(fc)):
        raise DistributionContractError(
            f"Density at center {center:g} of {dist.name} is {fc}; expected a positive number."
        )
    if not left <= center <= right:
        raise InvalidConfigurationError(
            f"Center {center:g} is outside of the boundary [{left:g}, {right:g}]."
        )

    if config.search_left:
        left, xnull = search_border(dist.pdf, center, left)
        if xnull is not None:
            domain_left = xnull
    if config.search_right:
        right, xnull = search_border(dist.pdf, center, right)
        if xnull is not None:
            domain_right = xnull

    mylog.debug("Relevant region of %s: [%g, %g].", dist.name, left, right)
    return SupportBounds(left, right, domain_left, domain_right)


# @@ AREA @@ #
def estimate_area(dist, support: SupportBounds, u_resolution: float) -> float:
    """
    Estimate the area below the density on the relevant region.

    The integration runs from the center to the right border and from the left border to the center
    with absolute tolerance ``min(sqrt(u_resolution), 1e-3) * guess``. The initial guess is ``1``; if the
    area turns out to be much smaller than the guess, the integration is repeated once using the area as
    the new guess.

    Raises
    ------
    DistributionContractError
        If the area is not a positive finite number.
    """
    center = dist.center

    def _integrate(guess: float) -> float:
        tol = min(math.sqrt(u_resolution), 1.0e-3) * guess
        return lobatto5(dist.pdf, center, support.right - center, tol, area=guess) + lobatto5(
            dist.pdf, support.left, center - support.left, tol, area=guess
        )

    def _check(_area: float):
        if not (math.isfinite(_area) and _area > 0.0):
            raise DistributionContractError(
                f"Cannot estimate the area below the density of {dist.name} (got {_area})."
            )

    area = _integrate(1.0)
    _check(area)

    if area < 1.0e-2:
        area = _integrate(area)
        _check(area)

    mylog.debug("Area below the density of %s: %g.", dist.name, area)
    return area


# @@ TAIL CUT-OFF @@ #
def tail_probability(pdf: PDFCallable, x: float, dx: float) -> float:
    """
    Approximate the probability mass beyond ``x`` using finite differences with step ``dx``.

    The sign of ``dx`` is irrelevant. If the density vanishes at ``x`` the tail is assumed to be empty and
    ``0`` is returned. A ``NaN`` estimate (extremely flat densities) is also reported as ``0``.
    """
    fx = pdf(x)
    if fx == 0.0:
        return 0.0

    fp, fm = pdf(x + dx), pdf(x - dx)
    if fm - 2.0 * fx + fp < 0.0 or min(fm, fx, fp) < 1.0e-100:
        devlog.warning("Numerical problems with the tail probability at x=%g.", x)

    fx, fp, fm = np.float64(fx), np.float64(fp), np.float64(fm)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        lcplus1 = fp / (fp - fx) + fm / (fm - fx)
        df = (fp - fm) / (2.0 * dx)
        area = (fx * fx) / (lcplus1 * abs(df))

    if area < 0.0:
        devlog.warning("Tail probability at x=%g might be negative (%g).", x, area)
    if np.isnan(area):
        mylog.warning("Tail probability at x=%g is NaN; assuming 0.", x)
        return 0.0

    return float(area)


def cut(pdf: PDFCallable, dom: float, w: float, dw: float, crit: float) -> float:
    """
    Find a cut-off point with tail probability (approximately) ``crit``.

    Parameters
    ----------
    pdf : Callable[[float], float]
        The density.
    dom : float
        The edge of the support in the search direction. It is returned if the search passes it.
    w : float
        The starting point.
    dw : float
        The initial step. The sign gives the search direction (``dw < 0`` for the left tail).
    crit : float
        The tolerated tail probability.

    Returns
    -------
    float
        The cut-off point.

    Raises
    ------
    ConvergenceError
        If no cut-off point is found within the iteration budgets or the tail probability
        estimate becomes negative during the secant iteration.
    """
    s = 1.0 if dw > 0 else -1.0
    u = math.inf

    # Step outward until the tail probability is below the threshold.
    for j in range(1, MAX_CUT_STEPS):
        if s * dom <= s * w:
            return dom

        u = tail_probability(pdf, w, dw / 64.0)
        if 0.0 <= u < crit:
            break

        # Tail too heavy (or the estimate not usable here): keep stepping.
        w += dw
        if j > 32:
            dw *= 1.5
    else:
        raise ConvergenceError(f"Could not find a valid cut-off point (last point {w:g}).")

    if u == 0.0:
        return w

    # Secant iteration on 1/u so that u(w) = crit.
    dx = dw / 64.0
    for _ in range(MAX_SECANT_STEPS):
        if abs(crit / u - 1.0) < 1.0e-7:
            return w

        uplus = tail_probability(pdf, w + dx, dx)
        if uplus < 0.0:
            raise ConvergenceError(f"Negative tail probability at x={w + dx:g}.")
        if uplus == 0.0:
            return w

        denominator = 1.0 / uplus - 1.0 / u
        if denominator == 0.0:
            raise ConvergenceError(f"Secant iteration for the cut-off point stalled at x={w:g}.")
        w -= dx * (1.0 / u - 1.0 / crit) / denominator

        if s * dom <= s * w:
            return dom

        u = tail_probability(pdf, w, dx)
        if u < 0.0:
            raise ConvergenceError(f"Negative tail probability at x={w:g}.")
        if u == 0.0:
            return w

    raise ConvergenceError(f"Could not find a cut-off point (last iterate {w:g}).")


def tail_cutoff_threshold(u_resolution: float, area: float) -> float:
    """
    The probability mass that may be cut off in each tail.
    """
    factor = 0.5 if u_resolution <= 9.0e-13 else 0.1
    crit = min(max(u_resolution * factor, 2.0 * DBL_EPSILON), TAILCUTOFF_MAX)
    return crit * area * UERROR_CORRECTION


def find_computational_domain(
    dist, support: SupportBounds, area: float, config: PINVConfig
) -> ComputationalDomain:
    """
    Cut off the tails of the relevant region.

    Parameters
    ----------
    dist : :py:class:`~pinvert.distributions.ContinuousDistribution`
        The distribution.
    support : SupportBounds
        The result of :py:func:`search_support`.
    area : float
        The result of :py:func:`estimate_area`.
    config : :py:class:`~pinvert.pinv.config.PINVConfig`
        The construction parameters. Tails are only cut on sides with enabled search.

    Returns
    -------
    ComputationalDomain

    Raises
    ------
    ConvergenceError
        If a cut-off point cannot be found or the resulting domain is not a finite interval.
    """
    crit = tail_cutoff_threshold(config.u_resolution, area)
    left, right = support.left, support.right

    if config.search_left:
        left = cut(dist.pdf, support.domain_left, left, (left - right) / 128.0, crit)
    if config.search_right:
        right = cut(dist.pdf, support.domain_right, right, (right - left) / 128.0, crit)

    if not (math.isfinite(left) and math.isfinite(right) and left < right):
        raise ConvergenceError(
            f"Cannot find a finite computational domain for {dist.name} (got [{left:g}, {right:g}])."
        )

    mylog.debug("Computational domain of %s: [%g, %g].", dist.name, left, right)
    return ComputationalDomain(left, right, crit)
