"""
Truncated distributions.

A :class:`TruncatedDistribution` conditions any distribution on
``lower <= X <= upper``. Every probability is the wrapped distribution's
probability of a sub-window divided by the probability of the whole window,
and both are formed in log space with
:func:`~pysatl_censored.numerics.logspace.logdiffexp` from whichever tail of
the wrapped distribution keeps the operands away from one. At the bounds the
cumulative functions return exact values instead of the result of a
floating-point subtraction.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, field
from functools import cached_property
from math import exp, inf, log
from typing import TYPE_CHECKING, Any, cast

import numpy as np

from pysatl_censored.config import DEFAULT_SETTINGS, NumericalSettings
from pysatl_censored.distributions.computation import AnalyticalComputation
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.strategies import DefaultSamplingUnivariateStrategy
from pysatl_censored.numerics.logspace import LOG_HALF, logaddexp, logdiffexp
from pysatl_censored.types import CharacteristicName
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.distributions.strategies import SamplingStrategy
    from pysatl_censored.types import GenericCharacteristicName


class _RejectionSampler:
    """
    Rejection sampling from the wrapped distribution.

    After ``settings.rejection_rounds`` rounds the missing draws come from
    inverse transform sampling through the truncated ``ppf``.
    """

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> ArraySample:
        trunc = cast(TruncatedDistribution, distr)
        accepted: list[np.ndarray] = []
        count = 0
        for _ in range(trunc.settings.rejection_rounds):
            if count >= n:
                break
            draws = trunc.dist.sample(n - count, rng=rng).values
            keep = draws[(draws >= trunc.lower) & (draws <= trunc.upper)]
            accepted.append(keep)
            count += keep.size
        if count < n:
            rest = DefaultSamplingUnivariateStrategy().sample(n - count, distr, rng=rng)
            accepted.append(rest.values)
        values = np.concatenate(accepted) if accepted else np.empty(0)
        return ArraySample(values[:n])


_REJECTION_SAMPLER = _RejectionSampler()


@dataclass(frozen=True)
class TruncatedDistribution(UnivariateDistribution):
    """
    Distribution conditioned on an observation window.

    Parameters
    ----------
    dist : Distribution
        Wrapped distribution.
    lower, upper : float
        Window bounds; infinite bounds leave that side open.
    settings : NumericalSettings, optional
        Monotonicity tolerance and sampling caps.

    Raises
    ------
    ValueError
        If ``lower >= upper`` or the window has zero probability.
    """

    dist: Distribution
    lower: float = -inf
    upper: float = inf
    settings: NumericalSettings = field(default=DEFAULT_SETTINGS, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lower", float(self.lower))
        object.__setattr__(self, "upper", float(self.upper))
        validate_constraints(self)
        if self.log_mass == -inf:
            raise ValueError(
                f"Truncation window [{self.lower}, {self.upper}] has zero probability."
            )

    @constraint(description="lower < upper")
    def check_bounds_order(self) -> bool:
        return self.lower < self.upper

    @cached_property
    def _log_tails(self) -> tuple[float, float, float, float]:
        """``log F(lower), log S(lower), log F(upper), log S(upper)``."""
        return (
            float(self.dist.logcdf(self.lower)),
            float(self.dist.logccdf(self.lower)),
            float(self.dist.logcdf(self.upper)),
            float(self.dist.logccdf(self.upper)),
        )

    @cached_property
    def log_mass(self) -> float:
        """Log-probability of the window under the wrapped distribution."""
        lf_lo, ls_lo, lf_hi, ls_hi = self._log_tails
        tol = self.settings.monotonicity_tolerance
        if lf_lo <= LOG_HALF:
            return float(logdiffexp(lf_hi, lf_lo, tolerance=tol))
        return float(logdiffexp(ls_lo, ls_hi, tolerance=tol))

    def _logcdf(self, x: float, **_: Any) -> float:
        if x <= self.lower:
            return -inf
        if x >= self.upper:
            return 0.0
        lf_lo, ls_lo, _, _ = self._log_tails
        tol = self.settings.monotonicity_tolerance
        if lf_lo <= LOG_HALF:
            num = logdiffexp(float(self.dist.logcdf(x)), lf_lo, tolerance=tol)
        else:
            num = logdiffexp(ls_lo, float(self.dist.logccdf(x)), tolerance=tol)
        return min(float(num) - self.log_mass, 0.0)

    def _logccdf(self, x: float, **_: Any) -> float:
        if x <= self.lower:
            return 0.0
        if x >= self.upper:
            return -inf
        _, _, lf_hi, ls_hi = self._log_tails
        tol = self.settings.monotonicity_tolerance
        lf_x = float(self.dist.logcdf(x))
        if lf_x <= LOG_HALF:
            num = logdiffexp(lf_hi, lf_x, tolerance=tol)
        else:
            num = logdiffexp(float(self.dist.logccdf(x)), ls_hi, tolerance=tol)
        return min(float(num) - self.log_mass, 0.0)

    def _logpdf(self, x: float, **_: Any) -> float:
        if x < self.lower or x > self.upper:
            return -inf
        return float(self.dist.logpdf(x)) - self.log_mass

    def _ppf(self, q: float, **_: Any) -> float:
        if not 0.0 <= q <= 1.0:
            return float("nan")
        if q == 0.0:
            return self.minimum()
        if q == 1.0:
            return self.maximum()
        lf_lo, ls_lo, _, _ = self._log_tails
        log_share = log(q) + self.log_mass
        if lf_lo <= LOG_HALF:
            p = exp(float(logaddexp(lf_lo, log_share)))
        else:
            tol = self.settings.monotonicity_tolerance
            p = -float(np.expm1(float(logdiffexp(ls_lo, log_share, tolerance=tol))))
        x = float(self.dist.ppf(min(p, 1.0)))
        return min(max(x, self.minimum()), self.maximum())

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        return {
            name: AnalyticalComputation(name, func)
            for name, func in (
                (CharacteristicName.LOGCDF, self._logcdf),
                (CharacteristicName.LOGCCDF, self._logccdf),
                (CharacteristicName.LOGPDF, self._logpdf),
                (CharacteristicName.PPF, self._ppf),
            )
        }

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _REJECTION_SAMPLER

    def minimum(self) -> float:
        return max(self.lower, float(self.dist.minimum()))

    def maximum(self) -> float:
        return min(self.upper, float(self.dist.maximum()))

    def parameters(self) -> tuple[Any, ...]:
        return (*self.dist.parameters(), self.lower, self.upper)

    def unwrap(self) -> Distribution:
        return self.dist


def truncated(
    dist: Distribution,
    lower: float | None = None,
    upper: float | None = None,
    *,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> TruncatedDistribution:
    """Build a :class:`TruncatedDistribution`; ``None`` bounds are infinite."""
    return TruncatedDistribution(
        dist,
        -inf if lower is None else lower,
        inf if upper is None else upper,
        settings=settings,
    )


__all__ = ["TruncatedDistribution", "truncated"]
