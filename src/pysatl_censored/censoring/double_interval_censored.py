"""
Double Interval Censoring
=========================

The usual model of epidemiological delays: the primary event is known only
up to a window, observation is restricted to a window of delays, and the
secondary event is reported per interval. :class:`DoubleIntervalCensoredDistribution`
composes the three wrappers in that fixed order,

.. code-block:: text

    event -> primary_censored -> truncated -> interval_censored

skipping truncation when no bound is given and interval censoring when
neither an interval nor breakpoints are given, and delegates every
evaluation to the composition.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, field
from functools import cached_property
from math import inf
from typing import TYPE_CHECKING, Any

from pysatl_censored.censoring.interval_censored import IntervalCensoredDistribution
from pysatl_censored.censoring.primary_censored import PrimaryCensoredDistribution
from pysatl_censored.config import DEFAULT_SETTINGS, NumericalSettings
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.scipy_adapter import Uniform
from pysatl_censored.distributions.strategies import DelegatingSamplingStrategy
from pysatl_censored.distributions.truncated import TruncatedDistribution
from pysatl_censored.types import CharacteristicName
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from pysatl_censored.distributions.computation import AnalyticalComputation
    from pysatl_censored.distributions.distribution import Distribution, Evaluated
    from pysatl_censored.distributions.strategies import Method, SamplingStrategy
    from pysatl_censored.distributions.support import Support
    from pysatl_censored.types import ArrayLike, DistributionType, GenericCharacteristicName

_DELEGATING_SAMPLER = DelegatingSamplingStrategy()


def _default_primary() -> Distribution:
    return Uniform(0.0, 1.0)


@dataclass(frozen=True)
class DoubleIntervalCensoredDistribution(UnivariateDistribution):
    """
    Primary-censored, optionally truncated and interval-censored delay.

    Parameters
    ----------
    event : Distribution
        Delay distribution between the primary and the secondary event.
    primary_event : Distribution, default Uniform(0, 1)
        Primary event window.
    lower, upper : float, optional
        Truncation bounds of the observed delay; a missing bound is infinite.
    interval : float, optional
        Width of a regular reporting grid.
    breakpoints : tuple of float, optional
        Arbitrary reporting intervals.
    force_numeric : bool, default False
        Ignore closed-form primary-censored solutions.
    settings : NumericalSettings, optional
        Numerical tolerances shared by all stages.

    Raises
    ------
    ValueError
        If both ``interval`` and ``breakpoints`` are given, if
        ``lower >= upper``, or if any stage rejects its arguments.
    """

    event: Distribution
    primary_event: Distribution = field(default_factory=_default_primary)
    lower: float | None = None
    upper: float | None = None
    interval: float | None = None
    breakpoints: tuple[float, ...] | None = None
    force_numeric: bool = False
    settings: NumericalSettings = field(default=DEFAULT_SETTINGS, compare=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("lower", "upper", "interval"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, float(value))
        if self.breakpoints is not None:
            object.__setattr__(self, "breakpoints", tuple(float(b) for b in self.breakpoints))
        validate_constraints(self)
        # builds every stage so that their own validation runs now
        _ = self.pipeline

    @constraint(description="at most one of interval and breakpoints")
    def check_single_grid(self) -> bool:
        return self.interval is None or self.breakpoints is None

    @constraint(description="lower < upper")
    def check_bounds_order(self) -> bool:
        return self.lower is None or self.upper is None or self.lower < self.upper

    @cached_property
    def pipeline(self) -> Distribution:
        """The composed distribution every evaluation delegates to."""
        dist: Distribution = PrimaryCensoredDistribution(
            self.event,
            self.primary_event,
            force_numeric=self.force_numeric,
            settings=self.settings,
        )
        if self.lower is not None or self.upper is not None:
            dist = TruncatedDistribution(
                dist,
                -inf if self.lower is None else self.lower,
                inf if self.upper is None else self.upper,
                settings=self.settings,
            )
        if self.interval is not None:
            dist = IntervalCensoredDistribution(dist, self.interval, settings=self.settings)
        elif self.breakpoints is not None:
            dist = IntervalCensoredDistribution(dist, self.breakpoints, settings=self.settings)
        return dist

    @property
    def is_discretized(self) -> bool:
        return isinstance(self.pipeline, IntervalCensoredDistribution)

    @property
    def distribution_type(self) -> DistributionType:  # type: ignore[override]
        return self.pipeline.distribution_type

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        return self.pipeline.analytical_computations

    def query_method(
        self, characteristic_name: GenericCharacteristicName, **options: Any
    ) -> Method[float, float]:
        return self.pipeline.query_method(characteristic_name, **options)

    def _interval_censored(self) -> IntervalCensoredDistribution:
        if not isinstance(self.pipeline, IntervalCensoredDistribution):
            raise TypeError("Bin masses require an interval or breakpoints.")
        return self.pipeline

    def pmf(self, x: ArrayLike) -> Evaluated:
        """Mass of the reporting bin containing ``x``."""
        return self._interval_censored().pmf(x)

    def logpmf(self, x: ArrayLike) -> Evaluated:
        """Log-mass of the reporting bin containing ``x``."""
        return self._interval_censored().logpmf(x)

    def pmf_at_bin(self, k: int) -> float:
        """Mass of reporting bin ``k``."""
        return self._interval_censored().pmf_at_bin(k)

    def logpmf_at_bin(self, k: int) -> float:
        """Log-mass of reporting bin ``k``."""
        return self._interval_censored().logpmf_at_bin(k)

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _DELEGATING_SAMPLER

    @property
    def support(self) -> Support | None:
        return self.pipeline.support

    def minimum(self) -> float:
        return float(self.pipeline.minimum())

    def maximum(self) -> float:
        return float(self.pipeline.maximum())

    def parameters(self) -> tuple[Any, ...]:
        grid: tuple[Any, ...] = ()
        if self.interval is not None:
            grid = (self.interval,)
        elif self.breakpoints is not None:
            grid = (self.breakpoints,)
        return (*self.event.parameters(), *self.primary_event.parameters(), *grid)

    def unwrap(self) -> Distribution:
        return self.pipeline


def double_interval_censored(
    event: Distribution,
    primary_event: Distribution | None = None,
    *,
    lower: float | None = None,
    upper: float | None = None,
    interval: float | None = None,
    breakpoints: Iterable[float] | None = None,
    force_numeric: bool = False,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> DoubleIntervalCensoredDistribution:
    """
    Build a :class:`DoubleIntervalCensoredDistribution`.

    Examples
    --------
    >>> from pysatl_censored import Gamma
    >>> d = double_interval_censored(Gamma(2.0, 1.0), lower=1.0, upper=8.0, interval=0.5)
    >>> d.minimum(), d.maximum()
    (1.0, 8.0)
    """
    return DoubleIntervalCensoredDistribution(
        event,
        _default_primary() if primary_event is None else primary_event,
        lower=lower,
        upper=upper,
        interval=interval,
        breakpoints=None if breakpoints is None else tuple(breakpoints),
        force_numeric=force_numeric,
        settings=settings,
    )


__all__ = [
    "DoubleIntervalCensoredDistribution",
    "double_interval_censored",
]
