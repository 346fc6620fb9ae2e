"""
Interval Censoring
==================

An interval-censored (discretized) distribution reports only the bin an
observation fell into. Bins are either a regular grid ``[k w, (k + 1) w)``
anchored at zero or the consecutive intervals ``[b_i, b_{i+1})`` of an
increasing list of breakpoints. All mass of a bin sits on its left edge, the
bin's representative point. With breakpoints the outer bins are open-ended:
the first one also holds the mass below ``b_0`` and the last breakpoint
carries the mass above it, the same values :meth:`IntervalCensoredDistribution.snap`
clamps there.

Bin masses are formed with
:func:`~pysatl_censored.numerics.logspace.log_interval_mass`, so both tails of
the wrapped distribution keep their relative precision.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import cached_property
from math import exp, inf, isfinite, isnan, nan
from numbers import Real
from typing import TYPE_CHECKING, Any, ClassVar, cast

import numpy as np

from pysatl_censored.config import DEFAULT_SETTINGS, NumericalSettings
from pysatl_censored.distributions.computation import AnalyticalComputation
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.support import (
    ExplicitTableDiscreteSupport,
    RegularGridSupport,
)
from pysatl_censored.numerics.logspace import log_interval_mass
from pysatl_censored.types import CharacteristicName, UnivariateDiscrete
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from pysatl_censored.distributions.distribution import Distribution, Evaluated
    from pysatl_censored.distributions.strategies import SamplingStrategy
    from pysatl_censored.distributions.support import Support
    from pysatl_censored.types import ArrayLike, DistributionType, GenericCharacteristicName


class _SnapSampler:
    """Draws from the wrapped distribution and snaps each draw to its bin."""

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> ArraySample:
        ic = cast(IntervalCensoredDistribution, distr)
        return ArraySample(ic.snap(ic.dist.sample(n, rng=rng).values))


_SNAP_SAMPLER = _SnapSampler()


@dataclass(frozen=True)
class IntervalCensoredDistribution(UnivariateDistribution):
    """
    Distribution observed only up to the bin containing each value.

    Parameters
    ----------
    dist : Distribution
        Wrapped continuous distribution.
    boundaries : float or sequence of float
        A positive width for a regular grid anchored at zero, or at least two
        strictly increasing finite breakpoints.
    settings : NumericalSettings, optional
        Monotonicity tolerance used when forming bin masses.

    Raises
    ------
    ValueError
        If the width is not positive and finite, or the breakpoints are not
        finite and strictly increasing or fewer than two.

    Notes
    -----
    ``cdf(x)`` is the wrapped CDF at the edge returned by
    :meth:`bin_containing` and reaches one at :meth:`maximum`. It is a
    right-continuous step function that jumps at every bin boundary by the
    mass of the bin ending there.
    """

    distribution_type: ClassVar[DistributionType] = UnivariateDiscrete

    dist: Distribution
    boundaries: float | tuple[float, ...]
    settings: NumericalSettings = field(default=DEFAULT_SETTINGS, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.boundaries, Real):
            object.__setattr__(self, "boundaries", float(self.boundaries))
        else:
            breakpoints = cast(Iterable[float], self.boundaries)
            object.__setattr__(self, "boundaries", tuple(float(b) for b in breakpoints))
        validate_constraints(self)

    @constraint(description="interval width is positive and finite")
    def check_width(self) -> bool:
        width = self.interval_width
        return width is None or (isfinite(width) and width > 0.0)

    @constraint(description="at least two breakpoints")
    def check_breakpoint_count(self) -> bool:
        return self.is_regular or len(self.breakpoints) >= 2

    @constraint(description="breakpoints are finite and strictly increasing")
    def check_breakpoints_increasing(self) -> bool:
        if self.is_regular:
            return True
        arr = np.asarray(self.breakpoints, dtype=np.float64)
        return bool(np.all(np.isfinite(arr)) and np.all(np.diff(arr) > 0.0))

    @property
    def is_regular(self) -> bool:
        """``True`` for a regular grid."""
        return isinstance(self.boundaries, float)

    @property
    def interval_width(self) -> float | None:
        """Grid width, or ``None`` for breakpoints."""
        return self.boundaries if isinstance(self.boundaries, float) else None

    @property
    def breakpoints(self) -> tuple[float, ...]:
        """Breakpoints, empty for a regular grid."""
        return () if isinstance(self.boundaries, float) else self.boundaries

    @cached_property
    def _table(self) -> ExplicitTableDiscreteSupport:
        return ExplicitTableDiscreteSupport(self.breakpoints, assume_sorted=True)

    def _grid_floor(self, x: float) -> float:
        width = cast(float, self.boundaries)
        return float(np.floor(x / width) * width)

    def bin_containing(self, x: float) -> float | None:
        """
        Left edge of the bin containing ``x``.

        On a regular grid this is ``floor(x / w) * w``. With breakpoints it
        is the greatest breakpoint not exceeding ``x``, or ``None`` below the
        first one.
        """
        if isnan(x):
            return None
        if self.is_regular:
            return self._grid_floor(x)
        return self._table.floor(x)

    def bin_edges(self, k: int) -> tuple[float, float] | None:
        """
        Edges of bin ``k``; ``None`` when bin ``k`` does not exist.

        With ``n`` breakpoints bin ``n - 1`` is ``[b_last, inf)``.
        """
        if self.is_regular:
            width = cast(float, self.boundaries)
            return k * width, (k + 1) * width
        points = self.breakpoints
        if 0 <= k < len(points) - 1:
            return points[k], points[k + 1]
        if k == len(points) - 1:
            return points[k], inf
        return None

    def _mass_edges(self, k: int) -> tuple[float, float] | None:
        edges = self.bin_edges(k)
        if edges is not None and k == 0 and not self.is_regular:
            # values below the first breakpoint are clamped onto it
            return -inf, edges[1]
        return edges

    def _bin_index(self, x: float) -> int | None:
        if isnan(x):
            return None
        if self.is_regular:
            if not isfinite(x):
                return None
            return int(np.floor(x / cast(float, self.boundaries)))
        return self._table.index(x)

    def _log_mass(self, edges: tuple[float, float] | None) -> float:
        if edges is None:
            return -inf
        return log_interval_mass(
            self.dist, edges[0], edges[1], tolerance=self.settings.monotonicity_tolerance
        )

    def logpmf_at_bin(self, k: int) -> float:
        """Log-mass of bin ``k``."""
        return self._log_mass(self._mass_edges(int(k)))

    def pmf_at_bin(self, k: int) -> float:
        """
        Mass of bin ``k``: ``[k w, (k + 1) w)`` or ``[b_k, b_{k+1})``.

        With breakpoints, bin 0 also holds the mass below ``b_0`` and the last
        bin holds the mass above ``b_last``, so the masses add up to one.
        """
        return exp(self.logpmf_at_bin(k))

    def _logpmf(self, x: float, **_: Any) -> float:
        if isnan(x):
            return nan
        k = self._bin_index(x)
        return -inf if k is None else self.logpmf_at_bin(k)

    def _pmf(self, x: float, **_: Any) -> float:
        return exp(self._logpmf(x))

    def _edge(self, x: float) -> float | None:
        """Edge for the cumulative functions; ``None`` outside ``[minimum, maximum)``."""
        if x < self.minimum() or x >= self.maximum():
            return None
        return self.bin_containing(x)

    def _logcdf(self, x: float, **_: Any) -> float:
        edge = self._edge(x)
        if edge is None:
            return -inf if x < self.minimum() else 0.0
        return float(self.dist.logcdf(edge))

    def _logccdf(self, x: float, **_: Any) -> float:
        edge = self._edge(x)
        if edge is None:
            return 0.0 if x < self.minimum() else -inf
        return float(self.dist.logccdf(edge))

    def _cdf(self, x: float, **_: Any) -> float:
        edge = self._edge(x)
        if edge is None:
            return 0.0 if x < self.minimum() else 1.0
        return float(self.dist.cdf(edge))

    def _ccdf(self, x: float, **_: Any) -> float:
        edge = self._edge(x)
        if edge is None:
            return 1.0 if x < self.minimum() else 0.0
        return float(self.dist.ccdf(edge))

    def _ppf(self, q: float, **_: Any) -> float:
        if isnan(q) or not 0.0 <= q <= 1.0:
            return nan
        return float(self.snap(float(self.dist.ppf(q))))

    def snap(self, values: ArrayLike) -> Evaluated:
        """
        Map values to the representative points of their bins.

        With breakpoints, values are first clamped into
        ``[b_0, b_last]``. Infinite values are returned unchanged on a
        regular grid.
        """
        arr = np.asarray(values, dtype=np.float64)
        if self.is_regular:
            width = cast(float, self.boundaries)
            with np.errstate(invalid="ignore"):
                out = np.where(np.isfinite(arr), np.floor(arr / width) * width, arr)
        else:
            points = np.asarray(self.breakpoints, dtype=np.float64)
            clamped = np.clip(arr, points[0], points[-1])
            idx = np.searchsorted(points, clamped, side="right") - 1
            out = np.where(np.isnan(arr), np.nan, points[np.clip(idx, 0, points.size - 1)])
        return float(out) if out.ndim == 0 else cast("NDArray[np.float64]", out)

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        return {
            name: AnalyticalComputation(name, func)
            for name, func in (
                (CharacteristicName.LOGPMF, self._logpmf),
                (CharacteristicName.PMF, self._pmf),
                (CharacteristicName.LOGPDF, self._logpmf),
                (CharacteristicName.PDF, self._pmf),
                (CharacteristicName.LOGCDF, self._logcdf),
                (CharacteristicName.CDF, self._cdf),
                (CharacteristicName.LOGCCDF, self._logccdf),
                (CharacteristicName.CCDF, self._ccdf),
                (CharacteristicName.PPF, self._ppf),
            )
        }

    def pmf(self, x: ArrayLike) -> Evaluated:
        """Mass of the bin containing ``x``; alias of :meth:`pdf`."""
        return self.calculate_characteristic(CharacteristicName.PMF, x)

    def logpmf(self, x: ArrayLike) -> Evaluated:
        """Log-mass of the bin containing ``x``."""
        return self.calculate_characteristic(CharacteristicName.LOGPMF, x)

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _SNAP_SAMPLER

    @property
    def support(self) -> Support | None:
        if not self.is_regular:
            return self._table
        width = cast(float, self.boundaries)
        lower, upper = self.minimum(), self.maximum()
        return RegularGridSupport(
            width,
            min_k=round(lower / width) if isfinite(lower) else None,
            max_k=round(upper / width) if isfinite(upper) else None,
        )

    def minimum(self) -> float:
        if self.is_regular:
            return self._grid_floor(float(self.dist.minimum()))
        return self.breakpoints[0]

    def maximum(self) -> float:
        if self.is_regular:
            return self._grid_floor(float(self.dist.maximum()))
        return self.breakpoints[-1]

    def parameters(self) -> tuple[Any, ...]:
        return (*self.dist.parameters(), self.boundaries)

    def unwrap(self) -> Distribution:
        return self.dist


DiscretizedDistribution = IntervalCensoredDistribution
"""Alias of :class:`IntervalCensoredDistribution`."""


def interval_censored(
    dist: Distribution,
    boundaries: float | Iterable[float],
    *,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> IntervalCensoredDistribution:
    """
    Censor ``dist`` to a regular grid or to arbitrary breakpoints.

    Parameters
    ----------
    dist : Distribution
        Continuous distribution to censor.
    boundaries : float or iterable of float
        Grid width, or strictly increasing breakpoints.
    settings : NumericalSettings, optional
        Numerical tolerances.

    Examples
    --------
    >>> from pysatl_censored import Normal
    >>> d = interval_censored(Normal(0.0, 1.0), 1.0)
    >>> round(d.pmf_at_bin(0), 4)
    0.3413
    """
    if isinstance(boundaries, Real):
        return IntervalCensoredDistribution(dist, float(boundaries), settings=settings)
    return IntervalCensoredDistribution(
        dist, tuple(float(b) for b in boundaries), settings=settings
    )


discretise = interval_censored
discretize = interval_censored


__all__ = [
    "IntervalCensoredDistribution",
    "DiscretizedDistribution",
    "interval_censored",
    "discretise",
    "discretize",
]
