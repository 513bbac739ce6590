"""
Construction parameters of the PINV generator.

The defaults of every parameter are read from the ``generator`` section of the ``pinvert``
configuration file (see :py:mod:`pinvert.utilities.config`) at the time the :py:class:`PINVConfig`
is created, so runtime overrides of :py:attr:`~pinvert.utilities.config.pinvert_params` are honored.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from pinvert.pinv.exceptions import InvalidConfigurationError
from pinvert.utilities.config import pinvert_params
from pinvert.utilities.logging import mylog
from pinvert.utilities.math_utils.quadrature import DBL_EPSILON

# @@ CONSTANTS @@ #
MIN_ORDER: int = 2
MAX_ORDER: int = 19
MAX_U_RESOLUTION: float = 1.0e-2
MIN_U_RESOLUTION: float = 5.0 * DBL_EPSILON
DEFAULT_BOUND: float = 1.0e100
""" float: Search limit used in place of an infinite domain edge."""


def _from_params(key: str):
    return field(default_factory=lambda: pinvert_params[f"generator.{key}"])


@dataclass(frozen=True)
class PINVConfig:
    r"""
    Validated construction parameters of a :py:class:`~pinvert.pinv.generator.PINVGenerator`.

    Parameters
    ----------
    order : int
        Order of the interpolating Newton polynomials. Must be between 2 and 19.
    u_resolution : float
        The maximal tolerated u-error :math:`|U - F(F_a^{-1}(U))|`. Must not exceed ``1e-2``. Values
        below ``5 * DBL_EPSILON`` are raised to that value with a warning.
    boundary : tuple of (float or None)
        Optional override of the left and / or right boundary of the computational domain. A side which
        is given explicitly is not searched.
    search_boundary : tuple of bool
        Whether to search for the boundary of the computational domain on the left and right side.
    guide_factor : float
        Relative size of the guide table.
    max_intervals : int
        Maximal number of intervals of the interpolation table.
    max_iterations : int
        Maximal number of iterations of the interval construction.

    Raises
    ------
    InvalidConfigurationError
        If any parameter is out of range.
    """

    order: int = _from_params("order")
    u_resolution: float = _from_params("u_resolution")
    boundary: Tuple[Optional[float], Optional[float]] = (None, None)
    search_boundary: Tuple[bool, bool] = (True, True)
    guide_factor: float = _from_params("guide_factor")
    max_intervals: int = _from_params("max_intervals")
    max_iterations: int = _from_params("max_iterations")

    def __post_init__(self):
        # -- Polynomial order -- #
        if isinstance(self.order, bool) or not isinstance(self.order, (int, np.integer)):
            raise InvalidConfigurationError(f"Order must be an integer, not {self.order!r}.")
        if not MIN_ORDER <= self.order <= MAX_ORDER:
            raise InvalidConfigurationError(
                f"Order {self.order} is not in [{MIN_ORDER}, {MAX_ORDER}]."
            )

        # -- u-resolution -- #
        u_resolution = float(self.u_resolution)
        if not np.isfinite(u_resolution) or u_resolution <= 0:
            raise InvalidConfigurationError(
                f"u-resolution must be a positive number, not {self.u_resolution!r}."
            )
        if u_resolution > MAX_U_RESOLUTION:
            raise InvalidConfigurationError(
                f"u-resolution {u_resolution:g} is too large (maximum {MAX_U_RESOLUTION:g})."
            )
        if u_resolution < MIN_U_RESOLUTION:
            mylog.warning(
                "u-resolution %g is too small; using %g instead.",
                u_resolution,
                MIN_U_RESOLUTION,
            )
            u_resolution = MIN_U_RESOLUTION
        object.__setattr__(self, "u_resolution", u_resolution)

        # -- Boundary -- #
        if len(self.boundary) != 2 or len(self.search_boundary) != 2:
            raise InvalidConfigurationError(
                "boundary and search_boundary must both have exactly two entries."
            )
        boundary = tuple(None if _b is None else float(_b) for _b in self.boundary)
        for _b in boundary:
            if _b is not None and not np.isfinite(_b):
                raise InvalidConfigurationError(f"Boundary {_b} is not finite.")
        if None not in boundary and not boundary[0] < boundary[1]:
            raise InvalidConfigurationError(
                f"Invalid boundary {boundary}: expected left < right."
            )
        object.__setattr__(self, "boundary", boundary)
        object.__setattr__(self, "search_boundary", tuple(bool(_s) for _s in self.search_boundary))

        # -- Tables and budgets -- #
        if not float(self.guide_factor) > 0:
            raise InvalidConfigurationError(
                f"Guide factor must be positive, not {self.guide_factor!r}."
            )
        for _name in ("max_intervals", "max_iterations"):
            if int(getattr(self, _name)) < 1:
                raise InvalidConfigurationError(f"{_name} must be at least 1.")
            object.__setattr__(self, _name, int(getattr(self, _name)))

    @property
    def search_left(self) -> bool:
        """``True`` if the left boundary is searched for."""
        return self.search_boundary[0] and self.boundary[0] is None

    @property
    def search_right(self) -> bool:
        """``True`` if the right boundary is searched for."""
        return self.search_boundary[1] and self.boundary[1] is None

    def resolve_bounds(self, domain: Tuple[float, float]) -> Tuple[float, float]:
        """
        Combine the boundary overrides with the domain of the distribution.

        Infinite domain edges are replaced by ``-/+ DEFAULT_BOUND``.

        Raises
        ------
        InvalidConfigurationError
            If the resulting interval is empty, or if a side is unbounded (no boundary override and an
            infinite domain edge) while the search on it is disabled.
        """
        for _side, _i in (("left", 0), ("right", 1)):
            if not self.search_boundary[_i] and self.boundary[_i] is None and not np.isfinite(domain[_i]):
                raise InvalidConfigurationError(
                    f"The {_side} side of the domain {domain} is unbounded but its search is disabled; "
                    f"provide a finite {_side} boundary or enable the search."
                )

        left = -DEFAULT_BOUND if self.boundary[0] is None else self.boundary[0]
        right = DEFAULT_BOUND if self.boundary[1] is None else self.boundary[1]
        left, right = max(left, domain[0]), min(right, domain[1])

        if not left < right:
            raise InvalidConfigurationError(
                f"Boundary {self.boundary} does not intersect the domain {domain}."
            )
        return left, right

    def replace(self, **kwargs) -> "PINVConfig":
        """Return a copy of this configuration with some parameters changed."""
        return replace(self, **kwargs)
