r"""
Newton interpolation of the inverse CDF on a single interval.

On an interval :math:`[x_0, x_0+h]` we place ``order+1`` construction points :math:`x_0 < x_1 < \dots < x_g`
and compute the probability mass :math:`u_i = \int_{x_0}^{x_i} f(t)\,dt` up to each of them. The inverse
CDF on the interval is then approximated by the Newton form interpolation polynomial :math:`P(u)` through the
points :math:`(u_i, x_i - x_0)`,

.. math::

    P(u) = u\left(z_1 + (u-u_1)\left(z_2 + (u-u_2)\left(\dots + (u-u_{g-1})\,z_g\right)\right)\right),

where the :math:`z_k` are divided differences. Note that :math:`u_0 = 0` and :math:`P(0)=0`, which is why neither
:math:`u_0` nor :math:`z_0` is stored.

All arrays handled by this module have length ``order`` and hold :math:`u_1, \dots, u_g` and :math:`z_1, \dots, z_g`.
"""
from typing import Tuple

import numpy as np
from numpy.typing import NDArray


def construction_points(x: float, h: float, order: int) -> Tuple[NDArray[np.floating], NDArray[np.floating]]:
    r"""
    Compute the Chebyshev-like construction points on ``[x, x+h]``.

    Parameters
    ----------
    x : float
        Left boundary of the interval.
    h : float
        Length of the interval.
    order : int
        Order of the interpolating polynomial.

    Returns
    -------
    starts : np.ndarray
        The left point of each of the ``order`` sub-segments between consecutive construction points.
    widths : np.ndarray
        The width of each sub-segment.

    Notes
    -----
    With :math:`\phi = \pi / (2(g+1))` the points are

    .. math::

        x_i = x + h\,\frac{\sin((i-1)\phi)\sin(i\phi)}{\cos\phi},\qquad
        x_{i+1} - x_i = h\,\sin(2i\phi)\tan\phi,

    which are the Chebyshev points of the interval mapped so that the end points are included. The spacing is
    densest close to both ends of the interval.
    """
    phi = 0.5 * np.pi / (order + 1)
    i = np.arange(1, order + 1)

    starts = x + h * np.sin((i - 1) * phi) * np.sin(i * phi) / np.cos(phi)
    widths = h * np.sin(2 * i * phi) * np.tan(phi)
    return starts, widths


def newton_coefficients(
    masses: NDArray[np.floating], widths: NDArray[np.floating]
) -> Tuple[NDArray[np.floating], NDArray[np.floating]]:
    """
    Compute the nodes and coefficients of the Newton interpolation polynomial.

    Parameters
    ----------
    masses : np.ndarray
        The probability mass in each of the sub-segments between construction points.
    widths : np.ndarray
        The width (in ``x``) of each sub-segment.

    Returns
    -------
    ui : np.ndarray
        Cumulative probability mass at the right end of each sub-segment. ``ui[-1]`` is the
        mass of the whole interval.
    zi : np.ndarray
        The divided differences (coefficients of the Newton form).
    """
    order = masses.size

    # Pad with u_0 = 0 so that the recursion can be written without
    # special cases. z_0 is never read.
    u = np.concatenate(([0.0], np.cumsum(masses)))
    z = np.concatenate(([0.0], widths / masses))

    for k in range(2, order + 1):
        # The right hand side is evaluated before assignment, which is
        # equivalent to running the recursion from i = order down to k.
        z[k:] = (z[k:] - z[k - 1 : -1]) / (u[k:] - u[:-k])

    return u[1:], z[1:]


def eval_newton_polynomial(q: float, ui: NDArray[np.floating], zi: NDArray[np.floating]) -> float:
    """
    Evaluate the Newton interpolation polynomial at ``q`` using nested multiplication.

    Parameters
    ----------
    q : float
        The local cumulative probability (offset from the left end of the interval).
    ui, zi : np.ndarray
        Nodes and coefficients as returned by :py:func:`newton_coefficients`.

    Returns
    -------
    float
        The x-offset from the left end of the interval.
    """
    chi = zi[-1]
    for k in range(zi.size - 2, -1, -1):
        chi = chi * (q - ui[k]) + zi[k]
    return chi * q


def newton_test_points(ui: NDArray[np.floating]) -> NDArray[np.floating]:
    r"""
    Locate the points where the interpolation error is expected to be maximal.

    The error of the interpolation is (up to a smooth factor) proportional to
    :math:`\omega(u) = \prod_{i=0}^{g} (u - u_i)`. Its extrema between consecutive nodes are the roots of

    .. math::

        \frac{\omega'(u)}{\omega(u)} = \sum_{i=0}^g \frac{1}{u-u_i} = 0,

    which are found with two Newton steps starting at the midpoint between consecutive nodes.

    Parameters
    ----------
    ui : np.ndarray
        The interpolation nodes :math:`u_1,\dots,u_g`.

    Returns
    -------
    np.ndarray
        The ``order`` test points, one between each pair of consecutive nodes.
    """
    nodes = np.concatenate(([0.0], ui))
    x = 0.5 * (nodes[:-1] + nodes[1:])

    for _ in range(2):
        _inv = 1.0 / (x[:, None] - nodes[None, :])
        x = x + _inv.sum(axis=1) / (_inv**2).sum(axis=1)

    return x
