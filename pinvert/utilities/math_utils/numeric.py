"""
Small floating point helpers shared by the setup routines.
"""
import math


def arcmean(x0: float, x1: float) -> float:
    r"""
    Compute the "arctan mean" of two points.

    The mean is taken in the :math:`\arctan` scale, i.e.

    .. math::

        \tan\left(\frac{\arctan x_0 + \arctan x_1}{2}\right).

    This makes it possible to step toward infinite (or very large) bounds: with one
    point at infinity the mean grows roughly geometrically. Far away from the origin
    (both points beyond :math:`\pm 10^3`) the harmonic mean is used instead since the
    :math:`\arctan` scale no longer resolves the points.

    Parameters
    ----------
    x0, x1 : float
        The two points. Either may be infinite.

    Returns
    -------
    float
        The mean of the two points.
    """
    if x0 > x1:
        x0, x1 = x1, x0

    if x1 < -1.0e3 or x0 > 1.0e3:
        return 2.0 / (1.0 / x0 + 1.0 / x1)

    a0 = -0.5 * math.pi if x0 == -math.inf else math.atan(x0)
    a1 = 0.5 * math.pi if x1 == math.inf else math.atan(x1)

    if abs(a0 - a1) < 1.0e-6:
        return 0.5 * x0 + 0.5 * x1

    return math.tan(0.5 * (a0 + a1))
