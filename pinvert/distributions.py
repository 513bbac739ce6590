"""
Continuous univariate distributions accepted by the PINV generator.

The generator only needs very little from a distribution: a way to evaluate the (possibly
unnormalized) density, the domain of the density and a point in the "center" of the distribution
where the density is clearly positive. The cumulative distribution function is optional and is only
used to estimate the accuracy of a finished generator.

The :py:class:`ContinuousDistribution` class bundles these pieces together. It may be built directly from
Python callables, from a frozen :py:mod:`scipy.stats` distribution or from a :py:mod:`sympy` expression.

Examples
--------

>>> import numpy as np
>>> from pinvert.distributions import ContinuousDistribution
>>> dist = ContinuousDistribution(lambda x: np.exp(-x), domain=(0, np.inf))
>>> dist.center
0.0
>>> dist.pdf(-1.0)
0.0
"""
from typing import Callable, Optional, Tuple, Union

import numpy as np
import sympy as sp
from numpy.typing import ArrayLike

from pinvert.pinv.exceptions import DistributionContractError, InvalidConfigurationError
from pinvert.utilities._typing import Bounds, PDFCallable
from pinvert.utilities.logging import mylog


class ContinuousDistribution:
    r"""
    A continuous univariate distribution described by its density.

    Parameters
    ----------
    pdf : Callable[[float], float]
        The probability density function. The density need not be normalized. It is only ever
        called inside of ``domain``.
    domain : tuple of float, optional
        The (closed) domain of the distribution. Either end may be infinite. By default, the whole
        real line.
    center : float, optional
        A point with "typical" (clearly positive) density, e.g. the mode, mean or median. If not provided,
        the center is ``0`` when ``0`` lies in the domain, the midpoint of the domain when the domain is
        bounded and the finite edge of the domain otherwise.
    cdf : Callable, optional
        The cumulative distribution function. It must accept numpy arrays. Only required by
        :py:meth:`~pinvert.pinv.generator.PINVGenerator.estimate_error`.
    name : str, optional
        A name for the distribution used in log messages and representations.

    Raises
    ------
    InvalidConfigurationError
        If the domain is empty or contains ``NaN``, or if the center lies outside of the domain.
    """

    def __init__(
        self,
        pdf: PDFCallable,
        domain: Bounds = (-np.inf, np.inf),
        center: Optional[float] = None,
        cdf: Optional[Callable[[ArrayLike], ArrayLike]] = None,
        name: Optional[str] = None,
    ):
        left, right = float(domain[0]), float(domain[1])
        if np.isnan(left) or np.isnan(right) or not left < right:
            raise InvalidConfigurationError(
                f"Invalid domain ({left}, {right}): expected left < right."
            )

        self._pdf = pdf
        self._cdf = cdf
        self._domain: Tuple[float, float] = (left, right)
        self.name: str = name if name is not None else getattr(pdf, "__name__", "pdf")

        if center is None:
            center = self._default_center(left, right)
        center = float(center)
        if not left <= center <= right:
            raise InvalidConfigurationError(
                f"Center {center} is outside of the domain ({left}, {right})."
            )
        self._center: float = center

    @staticmethod
    def _default_center(left: float, right: float) -> float:
        if left <= 0.0 <= right:
            return 0.0
        if np.isfinite(left) and np.isfinite(right):
            return 0.5 * (left + right)
        return left if np.isfinite(left) else right

    def __repr__(self):
        return f"<ContinuousDistribution: {self.name}, domain={self._domain}>"

    # @@ PROPERTIES @@ #
    @property
    def domain(self) -> Tuple[float, float]:
        """The domain ``(left, right)`` of the distribution."""
        return self._domain

    @property
    def center(self) -> float:
        """A point of the domain with clearly positive density."""
        return self._center

    @property
    def has_cdf(self) -> bool:
        """``True`` if a CDF was supplied."""
        return self._cdf is not None

    # @@ EVALUATION @@ #
    def pdf(self, x: float) -> float:
        """
        Evaluate the density at ``x``. Points outside of the domain have density ``0``.
        """
        if not self._domain[0] <= x <= self._domain[1]:
            return 0.0
        return float(self._pdf(x))

    def cdf(self, x: ArrayLike) -> np.ndarray:
        """
        Evaluate the CDF at ``x``.

        Raises
        ------
        DistributionContractError
            If the distribution was constructed without a CDF.
        """
        if self._cdf is None:
            raise DistributionContractError(
                f"Distribution {self.name} does not provide a CDF."
            )
        return np.asarray(self._cdf(np.asarray(x, dtype=float)), dtype=float)

    # @@ ALTERNATIVE CONSTRUCTORS @@ #
    @classmethod
    def from_scipy(cls, frozen, name: Optional[str] = None) -> "ContinuousDistribution":
        """
        Build a distribution from a frozen :py:mod:`scipy.stats` continuous distribution.

        The domain is the support of the distribution, the center is its median and both the PDF
        and the CDF are taken from the frozen distribution.

        Parameters
        ----------
        frozen : scipy.stats.rv_continuous frozen instance
            e.g. ``scipy.stats.gamma(3.0)``.
        name : str, optional
            The name of the distribution. Defaults to the scipy name.

        Examples
        --------

        >>> from scipy import stats
        >>> dist = ContinuousDistribution.from_scipy(stats.norm())
        >>> dist.domain
        (-inf, inf)
        """
        if not hasattr(frozen, "pdf") or not hasattr(frozen, "support"):
            raise InvalidConfigurationError(
                f"{frozen} is not a frozen continuous scipy.stats distribution."
            )

        left, right = frozen.support()
        if name is None:
            name = getattr(getattr(frozen, "dist", None), "name", "scipy")

        return cls(
            frozen.pdf,
            domain=(float(left), float(right)),
            center=float(frozen.median()),
            cdf=frozen.cdf,
            name=name,
        )

    @classmethod
    def from_expression(
        cls,
        expression: Union[str, sp.Basic],
        symbol: Union[str, sp.Symbol] = "x",
        domain: Bounds = (-np.inf, np.inf),
        center: Optional[float] = None,
        name: Optional[str] = None,
    ) -> "ContinuousDistribution":
        r"""
        Build a distribution from a symbolic density.

        The density is lambdified with :py:func:`sympy.lambdify`. The CDF is obtained by integrating the
        expression symbolically from the left edge of the domain and normalizing by the total integral. If
        sympy cannot evaluate either integral in closed form, the distribution is created without a CDF.

        Parameters
        ----------
        expression : str or sp.Basic
            The density, e.g. ``"exp(-x**2/2)"``.
        symbol : str or sp.Symbol
            The free variable of ``expression``.
        domain : tuple of float, optional
            The domain of the distribution.
        center : float, optional
            See :py:class:`ContinuousDistribution`.
        name : str, optional
            The name of the distribution. Defaults to the string form of the expression.

        Examples
        --------

        >>> dist = ContinuousDistribution.from_expression("exp(-x)", "x", domain=(0, np.inf))
        >>> float(dist.cdf(1.0))  # doctest: +ELLIPSIS
        0.632...
        """
        expression = sp.sympify(expression)
        symbol = sp.Symbol(symbol) if isinstance(symbol, str) else symbol

        if expression.free_symbols - {symbol}:
            raise InvalidConfigurationError(
                f"Expression {expression} has free symbols other than {symbol}."
            )

        left, right = float(domain[0]), float(domain[1])
        _pdf = sp.lambdify(symbol, expression, ["scipy", "numpy"])
        _cdf = cls._symbolic_cdf(expression, symbol, left, right)

        return cls(
            _pdf,
            domain=(left, right),
            center=center,
            cdf=_cdf,
            name=name if name is not None else str(expression),
        )

    @staticmethod
    def _symbolic_cdf(
        expression: sp.Basic, symbol: sp.Symbol, left: float, right: float
    ) -> Optional[Callable]:
        _t = sp.Dummy("t")
        _left, _right = sp.sympify(left), sp.sympify(right)

        # Infinite limits are handed to sympy as oo.
        if not np.isfinite(left):
            _left = -sp.oo
        if not np.isfinite(right):
            _right = sp.oo

        _integrand = expression.subs(symbol, _t)
        _total = sp.integrate(_integrand, (_t, _left, _right))
        _partial = sp.integrate(_integrand, (_t, _left, symbol))

        if _total.has(sp.Integral) or _partial.has(sp.Integral):
            mylog.debug("Could not integrate %s in closed form; no CDF available.", expression)
            return None

        _total = complex(sp.N(_total))
        if _total.imag != 0 or not np.isfinite(_total.real) or _total.real <= 0:
            mylog.debug("Total integral of %s is %s; no CDF available.", expression, _total)
            return None

        return sp.lambdify(symbol, sp.simplify(_partial / _total.real), ["scipy", "numpy"])
