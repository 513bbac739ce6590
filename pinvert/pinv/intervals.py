r"""
Construction of the interpolation table.

The computational domain :math:`[b_l, b_r]` is split into intervals :math:`[x_i, x_{i+1}]`. On each of them
the inverse CDF is approximated by a Newton interpolation polynomial (see
:py:mod:`pinvert.utilities.math_utils.interpolation`) which maps the local cumulative probability
:math:`u - F(x_i)` to the offset :math:`x - x_i`.

The intervals are built from left to right. Every candidate interval is accepted if its polynomial is increasing
and the estimated u-error is below the tolerance, otherwise it is shortened and tried again. The step size adapts to
the observed errors so that (for smooth densities) most candidates are accepted at the first attempt.
"""
import math
from dataclasses import dataclass
from typing import Iterator, List

import numpy as np
from numpy.typing import NDArray

from pinvert.pinv.boundary import UERROR_CORRECTION, ComputationalDomain
from pinvert.pinv.config import PINVConfig
from pinvert.pinv.exceptions import ConvergenceError
from pinvert.utilities._typing import PDFCallable
from pinvert.utilities.logging import devlog, mylog
from pinvert.utilities.math_utils.interpolation import (
    construction_points,
    eval_newton_polynomial,
    newton_coefficients,
    newton_test_points,
)
from pinvert.utilities.math_utils.quadrature import lobatto5

# @@ CONSTANTS @@ #
MIN_SEGMENT_MASS: float = 1.0e-50
INITIAL_STEP_FRACTION: float = 1.0 / 128.0


@dataclass(frozen=True, eq=False)
class Interval:
    """
    A single interval of the interpolation table.

    Attributes
    ----------
    xi : float
        Left boundary of the interval.
    cdfi : float
        Cumulative (unnormalized) probability at ``xi``.
    ui, zi : np.ndarray
        Nodes and coefficients of the Newton polynomial.
    """

    xi: float
    cdfi: float
    ui: NDArray[np.floating]
    zi: NDArray[np.floating]

    @property
    def mass(self) -> float:
        """The probability mass of the interval."""
        return float(self.ui[-1])

    def eval(self, q: float) -> float:
        """Approximate inverse CDF at local cumulative probability ``q``."""
        return self.xi + eval_newton_polynomial(q, self.ui, self.zi)


@dataclass(frozen=True, eq=False)
class IntervalTable:
    r"""
    The frozen interpolation table.

    Attributes
    ----------
    xi : np.ndarray
        ``(n+1,)`` left boundaries of the intervals. The last entry is the right edge of the
        computational domain.
    cdfi : np.ndarray
        ``(n+1,)`` cumulative probabilities at ``xi``. ``cdfi[0] == 0`` and ``cdfi[n]`` is :py:attr:`umax`.
    ui, zi : np.ndarray
        ``(n, order)`` Newton nodes and coefficients of each interval.

    Notes
    -----
    All arrays are copied on construction and flagged read-only.
    """

    xi: NDArray[np.floating]
    cdfi: NDArray[np.floating]
    ui: NDArray[np.floating]
    zi: NDArray[np.floating]

    def __post_init__(self):
        for _name in ("xi", "cdfi", "ui", "zi"):
            _array = np.array(getattr(self, _name), dtype=np.float64, order="C")
            _array.flags.writeable = False
            object.__setattr__(self, _name, _array)

        n = self.ui.shape[0]
        if self.xi.shape != (n + 1,) or self.cdfi.shape != (n + 1,) or self.zi.shape != self.ui.shape:
            raise ValueError(
                f"Inconsistent table shapes: xi{self.xi.shape}, cdfi{self.cdfi.shape}, "
                f"ui{self.ui.shape}, zi{self.zi.shape}."
            )

    def __len__(self) -> int:
        return self.ui.shape[0]

    def __getitem__(self, index: int) -> Interval:
        n = len(self)
        if index < 0:
            index += n
        if not 0 <= index < n:
            raise IndexError(f"Interval index {index} out of range for {n} intervals.")
        return Interval(
            float(self.xi[index]), float(self.cdfi[index]), self.ui[index], self.zi[index]
        )

    def __iter__(self) -> Iterator[Interval]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self):
        return f"<IntervalTable: n={len(self)}, order={self.order}, umax={self.umax:g}>"

    @property
    def order(self) -> int:
        """The order of the Newton polynomials."""
        return self.ui.shape[1]

    @property
    def umax(self) -> float:
        """The total (unnormalized) probability mass of the table."""
        return float(self.cdfi[-1])

    def copy(self) -> "IntervalTable":
        return IntervalTable(self.xi, self.cdfi, self.ui, self.zi)


# @@ CONSTRUCTION @@ #
def newton_interpolation(pdf: PDFCallable, x: float, h: float, order: int, uerrcrit: float, area: float):
    """
    Build the Newton polynomial of the inverse CDF on ``[x, x+h]``.

    Returns
    -------
    ui, zi : np.ndarray
        The nodes and coefficients.
    xval : np.ndarray
        The construction points ``x_1, ..., x_order`` (right ends of the sub-segments).

    Raises
    ------
    ConvergenceError
        If the mass of a sub-segment underflows (interval too short or density zero).
    """
    starts, widths = construction_points(x, h, order)
    masses = np.array(
        [lobatto5(pdf, _s, _w, 0.1 * uerrcrit, area) for _s, _w in zip(starts, widths)]
    )

    if np.any(masses < MIN_SEGMENT_MASS):
        raise ConvergenceError(
            f"Interval [{x:g}, {x + h:g}] is too short or the density vanishes on it."
        )

    ui, zi = newton_coefficients(masses, widths)
    return ui, zi, starts + widths


def newton_max_error(
    pdf: PDFCallable,
    x: float,
    ui: NDArray[np.floating],
    zi: NDArray[np.floating],
    xval: NDArray[np.floating],
    uerrcrit: float,
    area: float,
) -> float:
    """
    Estimate the maximal u-error of the Newton polynomial on the interval starting at ``x``.

    The polynomial is evaluated at the test points of :py:func:`newton_test_points` and the mass up to the
    resulting points is re-integrated, starting at the closest construction point to the left.

    Returns
    -------
    float
        The estimated maximal u-error. It is ``inf`` if the polynomial is not increasing on the interval,
        i.e. if the value at a test point does not lie strictly between the neighboring construction points.
    """
    maxerror = 0.0
    for i, _u in enumerate(newton_test_points(ui)):
        _x = eval_newton_polynomial(_u, ui, zi)

        _lower = 0.0 if i == 0 else xval[i - 1] - x
        if not _lower < _x < xval[i] - x:
            devlog.debug("Polynomial on the interval starting at %g is not monotone.", x)
            return math.inf

        if i == 0:
            _uerror = abs(lobatto5(pdf, x, _x, 0.1 * uerrcrit, area) - _u)
        else:
            _uerror = abs(
                ui[i - 1] + lobatto5(pdf, xval[i - 1], _x + x - xval[i - 1], 0.1 * uerrcrit, area) - _u
            )
        # NaN has to propagate so that the caller can reject the interval.
        if _uerror > maxerror or math.isnan(_uerror):
            maxerror = _uerror
    return float(maxerror)


def build_interval_table(
    dist, domain: ComputationalDomain, area: float, config: PINVConfig
) -> IntervalTable:
    r"""
    Build the interpolation table on the computational domain.

    Parameters
    ----------
    dist : :py:class:`~pinvert.distributions.ContinuousDistribution`
        The distribution.
    domain : ComputationalDomain
        The interval to cover.
    area : float
        The estimated area below the density.
    config : :py:class:`~pinvert.pinv.config.PINVConfig`
        The construction parameters (``order``, ``u_resolution``, ``max_intervals`` and ``max_iterations``
        are used).

    Returns
    -------
    IntervalTable

    Raises
    ------
    ConvergenceError
        If the number of intervals or iterations exceeds its cap, or a sub-segment mass underflows.

    Notes
    -----
    The tolerated error is :math:`0.9\,\varepsilon_u A` where :math:`A` is the area. After a rejected
    candidate, the step size is multiplied by ``0.81`` (error above 4 times the tolerance) or ``0.9``. After an
    accepted candidate it is multiplied by ``1.2`` if the error is below 30% of the tolerance and by another
    factor ``2`` if it is below 10%. A polynomial which is not increasing counts as an infinite error.
    """
    pdf, order = dist.pdf, config.order
    uerrcrit = config.u_resolution * area * UERROR_CORRECTION

    x, cdf = domain.left, 0.0
    h = domain.width * INITIAL_STEP_FRACTION

    xi: List[float] = [x]
    cdfi: List[float] = [cdf]
    ui_rows: List[NDArray[np.floating]] = []
    zi_rows: List[NDArray[np.floating]] = []

    _rejected = 0
    last = False
    for _iteration in range(config.max_iterations):
        if x + h >= domain.right:
            h = domain.right - x
            last = True

        ui, zi, xval = newton_interpolation(pdf, x, h, order, uerrcrit, area)
        maxerror = newton_max_error(pdf, x, ui, zi, xval, uerrcrit, area)

        if not maxerror <= uerrcrit:
            # Error too large (NaN included) or polynomial not monotone: shorten the interval.
            devlog.debug("Rejected [%g, %g]: error %g > %g.", x, x + h, maxerror, uerrcrit)
            h *= 0.81 if not maxerror <= 4.0 * uerrcrit else 0.9
            last = False
            _rejected += 1
            continue

        if len(ui_rows) + 1 >= config.max_intervals:
            raise ConvergenceError(
                f"Maximal number of intervals ({config.max_intervals}) exceeded."
            )

        ui_rows.append(ui)
        zi_rows.append(zi)
        x, cdf = (domain.right if last else x + h), cdf + ui[-1]
        xi.append(x)
        cdfi.append(cdf)

        if last:
            break

        if maxerror < 0.3 * uerrcrit:
            h *= 1.2
        if maxerror < 0.1 * uerrcrit:
            h *= 2.0
    else:
        raise ConvergenceError(
            f"Maximal number of iterations ({config.max_iterations}) exceeded."
        )

    mylog.debug(
        "Built %d intervals of order %d for %s (%d rejected candidates).",
        len(ui_rows),
        order,
        dist.name,
        _rejected,
    )
    return IntervalTable(
        np.asarray(xi), np.asarray(cdfi), np.vstack(ui_rows), np.vstack(zi_rows)
    )
