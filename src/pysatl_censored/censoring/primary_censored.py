"""
Primary-Event Censoring
=======================

An observed delay ``X = P + D`` is the sum of a primary event time ``P``,
known only to lie in a bounded window, and a delay ``D``. Its CDF

.. math::

    F_X(x) = \\int f_P(t)\\, F_D(x - t)\\,dt

is taken from the closed-form register of
:mod:`pysatl_censored.censoring.analytical` when one applies and otherwise by
adaptive quadrature. Once the CDF passes one half the survival integral is
computed directly, so both tails keep their relative precision. Each integrand
is divided by its largest delay factor, which keeps tails far beyond the
window representable in log space.

The density has an analytic form for uniform primary windows; for other
windows it is the finite-difference fallback of the conversion registry.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, field
from functools import cached_property
from math import exp, inf, isfinite, log
from typing import TYPE_CHECKING, Any, cast

from pysatl_censored.censoring.analytical import analytical_solution_register
from pysatl_censored.config import DEFAULT_SETTINGS, NumericalSettings
from pysatl_censored.distributions.computation import AnalyticalComputation
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.scipy_adapter import Uniform
from pysatl_censored.numerics.logspace import (
    LOG_HALF,
    MonotonicityError,
    log1mexp,
    log_interval_mass,
    logaddexp,
)
from pysatl_censored.numerics.quadrature import integrate
from pysatl_censored.types import CharacteristicName, FamilyName
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Mapping

    import numpy as np

    from pysatl_censored.censoring.analytical import UniformPrimarySolution
    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.distributions.strategies import SamplingStrategy
    from pysatl_censored.types import GenericCharacteristicName


def _log(value: float) -> float:
    return log(value) if value > 0.0 else -inf


class _CompositionSampler:
    """Draws ``primary_event + delay``."""

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> ArraySample:
        pc = cast(PrimaryCensoredDistribution, distr)
        primary = pc.primary_event.sample(n, rng=rng).values
        delay = pc.delay.sample(n, rng=rng).values
        return ArraySample(primary + delay)


_COMPOSITION_SAMPLER = _CompositionSampler()


@dataclass(frozen=True)
class PrimaryCensoredDistribution(UnivariateDistribution):
    """
    Delay observed from a primary event known only up to a bounded window.

    Parameters
    ----------
    delay : Distribution
        Distribution of the delay from the primary event to observation.
    primary_event : Distribution
        Distribution of the primary event time; its support must be bounded.
    force_numeric : bool, default False
        Ignore closed-form solutions and always integrate numerically.
    settings : NumericalSettings, optional
        Quadrature tolerances and finite-difference step.

    Raises
    ------
    ValueError
        If the primary event has an unbounded support.
    """

    delay: Distribution
    primary_event: Distribution
    force_numeric: bool = False
    settings: NumericalSettings = field(default=DEFAULT_SETTINGS, compare=False, repr=False)

    def __post_init__(self) -> None:
        validate_constraints(self)

    @constraint(description="primary event has a bounded support")
    def check_primary_bounded(self) -> bool:
        return isfinite(float(self.primary_event.minimum())) and isfinite(
            float(self.primary_event.maximum())
        )

    @cached_property
    def closed_form(self) -> UniformPrimarySolution | None:
        """Closed-form solution in use, or ``None`` on the numeric path."""
        if self.force_numeric:
            return None
        return analytical_solution_register().solve(self.delay, self.primary_event)

    @cached_property
    def _bounds(self) -> tuple[float, float]:
        return (
            float(self.delay.minimum()) + float(self.primary_event.minimum()),
            float(self.delay.maximum()) + float(self.primary_event.maximum()),
        )

    def _numeric_log_tails(self, x: float) -> tuple[float, float]:
        p_min = float(self.primary_event.minimum())
        p_max = float(self.primary_event.maximum())
        upper = min(p_max, x - float(self.delay.minimum()))
        primary_pdf = self.primary_event.query_method(CharacteristicName.PDF)
        delay_logcdf = self.delay.query_method(CharacteristicName.LOGCDF)

        # integrands are divided by their largest delay factor so far tails do not underflow
        log_scale = float(delay_logcdf(x - p_min))
        if log_scale == -inf:
            return -inf, 0.0

        def _cdf_integrand(t: float) -> float:
            return float(primary_pdf(t)) * exp(min(float(delay_logcdf(x - t)) - log_scale, 0.0))

        mass = integrate(_cdf_integrand, p_min, upper, self.settings).value
        log_cdf = min(log_scale + _log(mass), 0.0)
        if log_cdf <= LOG_HALF:
            return log_cdf, float(log1mexp(log_cdf))

        delay_logccdf = self.delay.query_method(CharacteristicName.LOGCCDF)
        log_scale = float(delay_logccdf(x - upper))
        log_ccdf = -inf
        if log_scale > -inf:

            def _ccdf_integrand(t: float) -> float:
                return float(primary_pdf(t)) * exp(
                    min(float(delay_logccdf(x - t)) - log_scale, 0.0)
                )

            mass = integrate(_ccdf_integrand, p_min, upper, self.settings).value
            log_ccdf = log_scale + _log(mass)
        # past ``upper`` the delay has not started yet, so it survives with certainty
        log_ccdf = min(float(logaddexp(log_ccdf, float(self.primary_event.logccdf(upper)))), 0.0)
        return float(log1mexp(log_ccdf)), log_ccdf

    def log_tails(self, x: float) -> tuple[float, float]:
        """
        Return ``(log F(x), log S(x))``.

        Exact ``(-inf, 0)`` at or below the minimum and ``(0, -inf)`` at or
        above the maximum. The closed form is used where it is reliable and
        quadrature everywhere else.
        """
        lower, upper = self._bounds
        if x <= lower:
            return -inf, 0.0
        if x >= upper:
            return 0.0, -inf
        solution = self.closed_form
        if solution is None:
            return self._numeric_log_tails(x)
        try:
            tails = solution.log_tails(x)
        except MonotonicityError:
            tails = None
        return self._numeric_log_tails(x) if tails is None else tails

    def _logcdf(self, x: float, **_: Any) -> float:
        return self.log_tails(x)[0]

    def _logccdf(self, x: float, **_: Any) -> float:
        return self.log_tails(x)[1]

    def _uniform_logpdf(self, x: float, **_: Any) -> float:
        lower, upper = self._bounds
        if x < lower or x > upper:
            return -inf
        p_min = float(self.primary_event.minimum())
        width = float(self.primary_event.maximum()) - p_min
        t = x - p_min
        mass = log_interval_mass(
            self.delay, t - width, t, tolerance=self.settings.monotonicity_tolerance
        )
        return mass - log(width)

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        computations = {
            CharacteristicName.LOGCDF: AnalyticalComputation[float, float](
                target=CharacteristicName.LOGCDF, func=self._logcdf
            ),
            CharacteristicName.LOGCCDF: AnalyticalComputation[float, float](
                target=CharacteristicName.LOGCCDF, func=self._logccdf
            ),
        }
        uniform_primary = getattr(self.primary_event, "family", None) == FamilyName.UNIFORM
        if uniform_primary and not self.force_numeric:
            computations[CharacteristicName.LOGPDF] = AnalyticalComputation[float, float](
                target=CharacteristicName.LOGPDF, func=self._uniform_logpdf
            )
        return computations

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _COMPOSITION_SAMPLER

    def minimum(self) -> float:
        return self._bounds[0]

    def maximum(self) -> float:
        return self._bounds[1]

    def parameters(self) -> tuple[Any, ...]:
        return (*self.delay.parameters(), *self.primary_event.parameters())

    def unwrap(self) -> Distribution:
        return self.delay


def primary_censored(
    delay: Distribution,
    primary_event: Distribution | None = None,
    *,
    force_numeric: bool = False,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> PrimaryCensoredDistribution:
    """
    Build a :class:`PrimaryCensoredDistribution`.

    Parameters
    ----------
    delay : Distribution
        Delay distribution.
    primary_event : Distribution, optional
        Primary event window; ``Uniform(0, 1)`` when omitted.
    force_numeric : bool, default False
        Ignore closed-form solutions.
    settings : NumericalSettings, optional
        Numerical tolerances.

    Examples
    --------
    >>> from pysatl_censored import Exponential
    >>> round(primary_censored(Exponential(1.0)).cdf(1.0), 6)
    0.367879
    """
    return PrimaryCensoredDistribution(
        delay,
        Uniform(0.0, 1.0) if primary_event is None else primary_event,
        force_numeric=force_numeric,
        settings=settings,
    )


__all__ = ["PrimaryCensoredDistribution", "primary_censored"]
