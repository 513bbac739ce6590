r"""
Adaptive Gauss-Lobatto quadrature.

This is the only integration primitive used during the construction of a generator. The rule is the
5-point Gauss-Lobatto rule on :math:`[x, x+h]`,

.. math::

    \int_x^{x+h} f(t)\,dt \approx \frac{h}{180}\left[9\left(f(x)+f(x+h)\right)
    + 49\left(f(x+w_1h)+f(x+w_2h)\right) + 64 f(x+h/2)\right],

with :math:`w_1 = 1/2 - \sqrt{3/28}` and :math:`w_2 = 1-w_1`. The rule is applied to the whole interval
and to each half; if the two estimates agree within the tolerance the refined estimate is accepted,
otherwise both halves are refined in turn.
"""
import math

import numpy as np

from pinvert.utilities._typing import PDFCallable
from pinvert.utilities.logging import devlog

# @@ CONSTANTS @@ #
DBL_EPSILON: float = float(np.finfo(np.float64).eps)

_W1: float = 0.5 - math.sqrt(3.0 / 28.0)
_W2: float = 1.0 - _W1

MAX_DEPTH: int = 50
""" int: Maximal bisection depth of :py:func:`lobatto5`. At this depth ``h`` has been reduced by ``2**50``."""


def lobatto5_rule(pdf: PDFCallable, x: float, h: float, fx: float, fc: float, fr: float) -> float:
    """
    Apply the 5-point Gauss-Lobatto rule to ``[x, x+h]`` given the already evaluated
    values at the left end, the center and the right end of the interval.
    """
    return (
        9.0 * (fx + fr) + 49.0 * (pdf(x + h * _W1) + pdf(x + h * _W2)) + 64.0 * fc
    ) * h / 180.0


def lobatto5(
    pdf: PDFCallable,
    x: float,
    h: float,
    tol: float,
    area: float = 1.0,
) -> float:
    r"""
    Integrate ``pdf`` over ``[x, x+h]`` using adaptive 5-point Gauss-Lobatto quadrature.

    Parameters
    ----------
    pdf : Callable[[float], float]
        The integrand.
    x : float
        The left point of the interval.
    h : float
        The width of the interval. Negative widths integrate "backwards" and return the
        negated integral over ``[x+h, x]``.
    tol : float
        The maximal tolerated absolute difference between the coarse and the refined estimate
        of a sub-interval.
    area : float, optional
        The (approximate) total area below ``pdf``. The tolerance is never allowed to drop below
        ``area * DBL_EPSILON`` since no better accuracy can be expected in double precision.

    Returns
    -------
    float
        The estimated integral.

    Notes
    -----
    The refinement is done with an explicit work stack rather than recursion. A sub-interval is no
    longer split when its midpoint cannot be distinguished from its left end in floating point or when
    :py:data:`MAX_DEPTH` is reached; in that case the best available estimate is accepted and a warning
    is logged. This is not an error.
    """
    if h == 0.0:
        return 0.0

    _tol = max(tol, abs(area) * DBL_EPSILON)
    _precision_lost = False
    result = 0.0

    # Each entry of the stack is a sub-interval together with the PDF values
    # at its left end, center and right end and its coarse estimate, so that
    # nothing is evaluated twice.
    fl, fc, fr = pdf(x), pdf(x + 0.5 * h), pdf(x + h)
    stack = [(x, h, fl, fc, fr, lobatto5_rule(pdf, x, h, fl, fc, fr), 0)]

    while stack:
        _x, _h, _fl, _fc, _fr, int1, _depth = stack.pop()
        _h2 = 0.5 * _h

        _flc, _fcr = pdf(_x + 0.5 * _h2), pdf(_x + 1.5 * _h2)
        intl = lobatto5_rule(pdf, _x, _h2, _fl, _flc, _fc)
        intr = lobatto5_rule(pdf, _x + _h2, _h2, _fc, _fcr, _fr)
        int2 = intl + intr

        if abs(int2 - int1) <= _tol or not math.isfinite(int2):
            # Non-finite values cannot be refined; they propagate to the caller.
            result += int2
            continue

        if _x + 0.5 * _h2 == _x or _depth >= MAX_DEPTH:
            # We cannot split this interval any further.
            _precision_lost = True
            result += int2
            continue

        stack.append((_x + _h2, _h2, _fc, _fcr, _fr, intr, _depth + 1))
        stack.append((_x, _h2, _fl, _flc, _fc, intl, _depth + 1))

    if _precision_lost:
        devlog.warning(
            "Numeric integration on [%g, %g] did not reach full accuracy (tol=%g).",
            x,
            x + h,
            _tol,
        )

    return result
