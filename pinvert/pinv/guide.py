"""
Guide table for constant time interval lookup.

The guide table divides :math:`[0, 1)` into ``size`` equal slots. Slot ``j`` stores the index of the first
interval whose right cumulative value reaches ``j / size * umax``. To find the interval containing a
uniform ``u`` we start at ``guide[int(u * size)]`` and scan forward; the expected number of steps of this
scan is bounded by a constant which only depends on the guide factor.
"""
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pinvert.pinv.intervals import IntervalTable


@dataclass(frozen=True, eq=False)
class GuideTable:
    """
    The frozen guide table.

    Attributes
    ----------
    guide : np.ndarray
        The ``int32`` array of starting intervals.
    """

    guide: NDArray[np.int32]

    def __post_init__(self):
        _guide = np.array(self.guide, dtype=np.int32, order="C")
        _guide.flags.writeable = False
        object.__setattr__(self, "guide", _guide)

    def __len__(self) -> int:
        return self.guide.size

    def __repr__(self):
        return f"<GuideTable: size={self.size}>"

    @property
    def size(self) -> int:
        """The number of slots of the table."""
        return self.guide.size

    @classmethod
    def build(cls, table: IntervalTable, guide_factor: float = 1) -> "GuideTable":
        """
        Build the guide table for ``table``.

        Parameters
        ----------
        table : :py:class:`~pinvert.pinv.intervals.IntervalTable`
            The interpolation table.
        guide_factor : float
            The number of slots per interval. The table has at least one slot.
        """
        n = len(table)
        size = max(1, int(n * guide_factor))

        targets = np.arange(size) / size * table.umax
        guide = np.searchsorted(table.cdfi[1:], targets, side="left")

        # Round-off in the cumulative sums can push a target past the last interval.
        return cls(np.minimum(guide, n - 1))

    def locate(self, table: IntervalTable, u: float) -> int:
        """
        Find the interval containing the uniform ``u`` in ``[0, 1]``.

        Returns
        -------
        int
            The index ``i`` with ``cdfi[i] <= u * umax < cdfi[i+1]`` (the last interval for ``u = 1``).
        """
        n, cdfi = len(table), table.cdfi
        un = u * table.umax

        i = int(self.guide[min(int(u * self.size), self.size - 1)])
        while i < n - 1 and cdfi[i + 1] < un:
            i += 1
        return i

    def copy(self) -> "GuideTable":
        return GuideTable(self.guide)
