"""
Closed-Form Primary-Censored CDFs
=================================

For a delay ``D`` supported on ``[0, inf)`` and a uniform primary event on
``[p_min, p_min + w]`` the primary-censored CDF reduces to expressions in the
delay's own CDF and its partial expectation

.. math::

    M(a, b) = \\int_a^b u f_D(u)\\,du.

With ``t = x - p_min`` and ``a = max(t - w, 0)``:

.. math::

    F(x) &= \\frac{t F_D(t) - a F_D(a) - M(a, t)}{w}, \\\\
    S(x) &= \\frac{t S_D(t) - a S_D(a) + M(a, t) + \\max(w - t, 0)}{w}.

For the supported families ``M`` is the probability mass of a related
"moment" distribution ``G`` scaled by a constant:

=================  ======================  ===========================  ======================
Delay              ``G``                   ``log_scale``                ``z(u)``
=================  ======================  ===========================  ======================
Gamma(k, theta)    Gamma(k + 1, theta)     ``log(k * theta)``           ``u``
Exponential(rate)  Gamma(2, 1 / rate)      ``-log(rate)``               ``u``
LogNormal(mu, s)   LogNormal(mu + s^2, s)  ``mu + s^2 / 2``             ``u``
Weibull(k, lam)    Gamma(1 + 1 / k, 1)     ``log(lam) + lgamma(1+1/k)`` ``(u / lam) ** k``
=================  ======================  ===========================  ======================

so ``M(a, b) = exp(log_scale) * P(z(a) < G <= z(b))``.

Both tails are assembled in log space. The numerators lose about
``eps * t / w`` to cancellation, so only the tail below one half is taken from
them and the solution declines points with ``t / w`` above
:attr:`UniformPrimarySolution.max_ratio`. A cancellation that makes a
numerator negative raises
:class:`~pysatl_censored.numerics.logspace.MonotonicityError`. Callers answer
both cases by switching to quadrature.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from math import inf, isfinite, lgamma, log
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pysatl_censored.distributions.scipy_adapter import Gamma, LogNormal
from pysatl_censored.numerics.logspace import (
    LOG_HALF,
    log1mexp,
    log_interval_mass,
    logaddexp,
    logdiffexp,
)
from pysatl_censored.types import FamilyName

if TYPE_CHECKING:
    from pysatl_censored.distributions.distribution import Distribution


def _log(value: float) -> float:
    return log(value) if value > 0.0 else -inf


@dataclass(frozen=True, slots=True)
class PartialExpectation:
    """
    Partial expectation ``M(a, b)`` of a delay distribution.

    Parameters
    ----------
    log_scale : float
        Logarithm of the constant multiplying the moment-distribution mass.
    moment : Distribution
        Moment distribution ``G``.
    transform : Callable[[float], float] or None
        Map from the delay axis to the axis of ``G``; ``None`` is identity.
    """

    log_scale: float
    moment: Distribution
    transform: Callable[[float], float] | None = None

    def log_value(self, a: float, b: float) -> float:
        """Return ``log M(a, b)`` for ``0 <= a <= b``."""
        if self.transform is not None:
            a, b = self.transform(a), self.transform(b)
        return self.log_scale + log_interval_mass(self.moment, a, b)


type PartialExpectationBuilder = Callable[[Any], PartialExpectation]


@dataclass(frozen=True, slots=True)
class UniformPrimarySolution:
    """
    Closed-form tails of a delay convolved with a uniform primary window.

    Parameters
    ----------
    delay : Distribution
        Delay distribution supported on ``[0, inf)``.
    lower : float
        Left end ``p_min`` of the primary window.
    width : float
        Window width ``w``.
    moments : PartialExpectation
        Partial expectation of the delay.
    """

    max_ratio: ClassVar[float] = 1e4
    """Largest ``(x - p_min) / w`` at which :meth:`log_tails` answers."""

    delay: Distribution
    lower: float
    width: float
    moments: PartialExpectation

    def _terms(self, x: float) -> tuple[float, float, float] | None:
        t = x - self.lower
        if t <= 0.0:
            return None
        a = max(t - self.width, 0.0)
        return t, a, self.moments.log_value(a, t)

    def log_cdf(self, x: float) -> float:
        """``log F(x)``."""
        terms = self._terms(x)
        if terms is None:
            return -inf
        t, a, log_m = terms
        positive = log(t) + float(self.delay.logcdf(t))
        negative = float(logaddexp(_log(a) + float(self.delay.logcdf(a)), log_m))
        return min(float(logdiffexp(positive, negative)) - log(self.width), 0.0)

    def log_ccdf(self, x: float) -> float:
        """``log S(x)``."""
        terms = self._terms(x)
        if terms is None:
            return 0.0
        t, a, log_m = terms
        positive = float(
            logaddexp(
                logaddexp(log(t) + float(self.delay.logccdf(t)), log_m),
                _log(self.width - t),
            )
        )
        negative = _log(a) + float(self.delay.logccdf(a))
        return min(float(logdiffexp(positive, negative)) - log(self.width), 0.0)

    def log_tails(self, x: float) -> tuple[float, float] | None:
        """
        Return ``(log F(x), log S(x))``, or ``None`` where the closed form is unreliable.

        The tail below one half comes from the closed form and the other is
        its :func:`~pysatl_censored.numerics.logspace.log1mexp`, so the pair
        always sums to one. ``None`` is returned when ``(x - p_min) / w``
        exceeds :attr:`max_ratio` or the small tail is not finite.

        Raises
        ------
        MonotonicityError
            If a numerator cancels to a negative value.
        """
        if x <= self.lower:
            return -inf, 0.0
        if x - self.lower > self.max_ratio * self.width:
            return None
        small = self.log_cdf(x)
        if small <= LOG_HALF:
            tails = small, float(log1mexp(small))
        else:
            small = self.log_ccdf(x)
            tails = float(log1mexp(small)), small
        return tails if isfinite(small) else None


class AnalyticalSolutionRegister:
    """
    Singleton-like registry of partial expectations keyed by delay family.

    Entries are builders that read the delay's parameters and return its
    :class:`PartialExpectation`.
    """

    _instance: ClassVar[Self | None] = None
    _builders: dict[FamilyName, PartialExpectationBuilder]

    def __new__(cls) -> Self:
        if cls._instance is None:
            self = super().__new__(cls)
            self._builders = {}
            cls._instance = self
        return cls._instance

    def register(self, family: FamilyName, builder: PartialExpectationBuilder) -> None:
        """Register (or replace) the partial expectation of a delay family."""
        self._builders[family] = builder

    def families(self) -> frozenset[FamilyName]:
        """Delay families with a registered partial expectation."""
        return frozenset(self._builders)

    def partial_expectation(self, delay: Distribution) -> PartialExpectation | None:
        """Partial expectation of ``delay``, or ``None`` for unknown families."""
        builder = self._builders.get(getattr(delay, "family", None))  # type: ignore[arg-type]
        return None if builder is None else builder(delay)

    def solve(
        self, delay: Distribution, primary_event: Distribution
    ) -> UniformPrimarySolution | None:
        """
        Closed-form solution for the pair, if one is known.

        Returns
        -------
        UniformPrimarySolution or None
            ``None`` unless the primary event is uniform and the delay family
            is registered.
        """
        if getattr(primary_event, "family", None) != FamilyName.UNIFORM:
            return None
        moments = self.partial_expectation(delay)
        if moments is None:
            return None
        lower = float(primary_event.minimum())
        return UniformPrimarySolution(
            delay=delay,
            lower=lower,
            width=float(primary_event.maximum()) - lower,
            moments=moments,
        )

    @classmethod
    def _reset(cls) -> None:
        cls._instance = None


def _gamma_moments(delay: Any) -> PartialExpectation:
    return PartialExpectation(
        log_scale=log(delay.shape * delay.scale),
        moment=Gamma(delay.shape + 1.0, delay.scale),
    )


def _exponential_moments(delay: Any) -> PartialExpectation:
    return PartialExpectation(
        log_scale=-log(delay.rate),
        moment=Gamma(2.0, 1.0 / delay.rate),
    )


def _lognormal_moments(delay: Any) -> PartialExpectation:
    variance = delay.sigma**2
    return PartialExpectation(
        log_scale=delay.mu + 0.5 * variance,
        moment=LogNormal(delay.mu + variance, delay.sigma),
    )


def _weibull_moments(delay: Any) -> PartialExpectation:
    shape, scale = delay.shape, delay.scale

    def _z(u: float) -> float:
        return (u / scale) ** shape if u > 0.0 else 0.0

    return PartialExpectation(
        log_scale=log(scale) + lgamma(1.0 + 1.0 / shape),
        moment=Gamma(1.0 + 1.0 / shape, 1.0),
        transform=_z,
    )


def _configure(reg: AnalyticalSolutionRegister) -> None:
    reg.register(FamilyName.GAMMA, _gamma_moments)
    reg.register(FamilyName.EXPONENTIAL, _exponential_moments)
    reg.register(FamilyName.LOGNORMAL, _lognormal_moments)
    reg.register(FamilyName.WEIBULL, _weibull_moments)


@lru_cache(maxsize=1)
def analytical_solution_register() -> AnalyticalSolutionRegister:
    """Return the cached register configured with the built-in families."""
    reg = AnalyticalSolutionRegister()
    _configure(reg)
    return reg


def _reset_analytical_solution_register_for_tests() -> None:
    """Reset the cached closed-form register (test helper)."""
    AnalyticalSolutionRegister._reset()
    analytical_solution_register.cache_clear()


__all__ = [
    "PartialExpectation",
    "UniformPrimarySolution",
    "AnalyticalSolutionRegister",
    "analytical_solution_register",
]
