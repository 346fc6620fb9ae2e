"""
Base distributions backed by :mod:`scipy.stats`.

The censoring layer does not implement distribution families itself. This
module adapts frozen :mod:`scipy.stats` distributions to the
:class:`~pysatl_censored.distributions.distribution.Distribution` capability
set and provides parametrised families that the closed-form solution register
recognises:

=============  ===================  ==========================================
Family         Parameters           scipy distribution
=============  ===================  ==========================================
``Normal``     ``mu, sigma``        ``norm(loc=mu, scale=sigma)``
``Uniform``    ``a, b``             ``uniform(loc=a, scale=b - a)``
``Exponential`` ``rate``            ``expon(scale=1 / rate)``
``Gamma``      ``shape, scale``     ``gamma(a=shape, scale=scale)``
``LogNormal``  ``mu, sigma``        ``lognorm(s=sigma, scale=exp(mu))``
``Weibull``    ``shape, scale``     ``weibull_min(c=shape, scale=scale)``
=============  ===================  ==========================================

Arbitrary frozen scipy distributions are wrapped with :func:`from_scipy`.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from abc import abstractmethod
from dataclasses import dataclass, fields
from functools import cached_property
from math import exp, isfinite
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np
from scipy import stats

from pysatl_censored.distributions.computation import AnalyticalComputation
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.types import CharacteristicName, FamilyName
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.distributions.strategies import SamplingStrategy
    from pysatl_censored.types import ArrayLike, GenericCharacteristicName

_SCIPY_METHODS: dict[GenericCharacteristicName, str] = {
    CharacteristicName.PDF: "pdf",
    CharacteristicName.LOGPDF: "logpdf",
    CharacteristicName.CDF: "cdf",
    CharacteristicName.LOGCDF: "logcdf",
    CharacteristicName.CCDF: "sf",
    CharacteristicName.LOGCCDF: "logsf",
    CharacteristicName.PPF: "ppf",
}


class _ScipySampler:
    """Draws through the frozen distribution's ``rvs``."""

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> ArraySample:
        frozen = distr.frozen  # type: ignore[attr-defined]
        return ArraySample(np.asarray(frozen.rvs(size=n, random_state=rng), dtype=np.float64))


_SCIPY_SAMPLER = _ScipySampler()


class ScipyDistribution(UnivariateDistribution):
    """
    Adapter from a frozen :mod:`scipy.stats` continuous distribution.

    Subclasses provide :meth:`_freeze`. Characteristics are evaluated by
    scipy directly and are vectorised.
    """

    family: ClassVar[FamilyName | None] = None

    @abstractmethod
    def _freeze(self) -> Any:
        """Return the frozen scipy distribution."""

    @cached_property
    def frozen(self) -> Any:
        """The frozen scipy distribution."""
        return self._freeze()

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        def bind(
            name: GenericCharacteristicName, method: str
        ) -> AnalyticalComputation[float, float]:
            func = getattr(self.frozen, method)
            return AnalyticalComputation[float, float](
                target=name, func=lambda x, **_: float(func(x))
            )

        return {name: bind(name, method) for name, method in _SCIPY_METHODS.items()}

    def calculate_characteristic(
        self, characteristic_name: GenericCharacteristicName, value: ArrayLike, **options: Any
    ) -> float | NDArray[np.float64]:
        method = _SCIPY_METHODS.get(characteristic_name)
        if method is None:
            return super().calculate_characteristic(characteristic_name, value, **options)
        out = np.asarray(getattr(self.frozen, method)(np.asarray(value, dtype=np.float64)))
        return float(out) if out.ndim == 0 else out.astype(np.float64)

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _SCIPY_SAMPLER

    def minimum(self) -> float:
        return float(self.frozen.support()[0])

    def maximum(self) -> float:
        return float(self.frozen.support()[1])

    def mean(self) -> float:
        return float(self.frozen.mean())

    def std(self) -> float:
        return float(self.frozen.std())


class ParametricScipyDistribution(ScipyDistribution):
    """
    Named family with validated parameters.

    Parameters are dataclass fields in their natural order; constraints are
    methods decorated with :func:`~pysatl_censored.validation.constraint`.
    """

    positive_parameters: ClassVar[tuple[str, ...]] = ()
    """Parameters that must be strictly positive."""

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            object.__setattr__(self, f.name, float(getattr(self, f.name)))
        validate_constraints(self)

    @constraint(description="parameters are finite")
    def check_finite(self) -> bool:
        return all(isfinite(v) for v in self.parameters())

    def parameters(self) -> tuple[float, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))  # type: ignore[arg-type]


@dataclass(frozen=True)
class Normal(ParametricScipyDistribution):
    """Normal distribution with mean ``mu`` and standard deviation ``sigma``."""

    mu: float = 0.0
    sigma: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.NORMAL
    positive_parameters: ClassVar[tuple[str, ...]] = ("sigma",)

    @constraint(description="sigma > 0")
    def check_sigma_positive(self) -> bool:
        return self.sigma > 0

    def _freeze(self) -> Any:
        return stats.norm(loc=self.mu, scale=self.sigma)


@dataclass(frozen=True)
class Uniform(ParametricScipyDistribution):
    """Continuous uniform distribution on ``[a, b]``."""

    a: float = 0.0
    b: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.UNIFORM

    @constraint(description="a < b")
    def check_bounds_order(self) -> bool:
        return self.a < self.b

    @property
    def width(self) -> float:
        return self.b - self.a

    def _freeze(self) -> Any:
        return stats.uniform(loc=self.a, scale=self.b - self.a)


@dataclass(frozen=True)
class Exponential(ParametricScipyDistribution):
    """Exponential distribution with the given ``rate``."""

    rate: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.EXPONENTIAL
    positive_parameters: ClassVar[tuple[str, ...]] = ("rate",)

    @constraint(description="rate > 0")
    def check_rate_positive(self) -> bool:
        return self.rate > 0

    def _freeze(self) -> Any:
        return stats.expon(scale=1.0 / self.rate)


@dataclass(frozen=True)
class Gamma(ParametricScipyDistribution):
    """Gamma distribution with ``shape`` k and ``scale`` theta."""

    shape: float
    scale: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.GAMMA
    positive_parameters: ClassVar[tuple[str, ...]] = ("shape", "scale")

    @constraint(description="shape > 0")
    def check_shape_positive(self) -> bool:
        return self.shape > 0

    @constraint(description="scale > 0")
    def check_scale_positive(self) -> bool:
        return self.scale > 0

    def _freeze(self) -> Any:
        return stats.gamma(a=self.shape, scale=self.scale)


@dataclass(frozen=True)
class LogNormal(ParametricScipyDistribution):
    """Log-normal distribution; ``mu`` and ``sigma`` describe ``log X``."""

    mu: float = 0.0
    sigma: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.LOGNORMAL
    positive_parameters: ClassVar[tuple[str, ...]] = ("sigma",)

    @constraint(description="sigma > 0")
    def check_sigma_positive(self) -> bool:
        return self.sigma > 0

    def _freeze(self) -> Any:
        return stats.lognorm(s=self.sigma, scale=exp(self.mu))


@dataclass(frozen=True)
class Weibull(ParametricScipyDistribution):
    """Weibull distribution with ``shape`` k and ``scale`` lambda."""

    shape: float
    scale: float = 1.0

    family: ClassVar[FamilyName | None] = FamilyName.WEIBULL
    positive_parameters: ClassVar[tuple[str, ...]] = ("shape", "scale")

    @constraint(description="shape > 0")
    def check_shape_positive(self) -> bool:
        return self.shape > 0

    @constraint(description="scale > 0")
    def check_scale_positive(self) -> bool:
        return self.scale > 0

    def _freeze(self) -> Any:
        return stats.weibull_min(c=self.shape, scale=self.scale)


@dataclass(frozen=True, eq=False)
class FrozenScipyDistribution(ScipyDistribution):
    """Wrapper around an arbitrary frozen scipy continuous distribution."""

    wrapped: Any

    def _freeze(self) -> Any:
        return self.wrapped

    def parameters(self) -> tuple[Any, ...]:
        return (*self.wrapped.args, *self.wrapped.kwds.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrozenScipyDistribution):
            return NotImplemented
        return (
            self.wrapped.dist.name == other.wrapped.dist.name
            and self.wrapped.args == other.wrapped.args
            and self.wrapped.kwds == other.wrapped.kwds
        )

    def __hash__(self) -> int:
        return hash((self.wrapped.dist.name, self.wrapped.args))


FAMILIES: dict[FamilyName, type[ParametricScipyDistribution]] = {
    FamilyName.NORMAL: Normal,
    FamilyName.UNIFORM: Uniform,
    FamilyName.EXPONENTIAL: Exponential,
    FamilyName.GAMMA: Gamma,
    FamilyName.LOGNORMAL: LogNormal,
    FamilyName.WEIBULL: Weibull,
}
"""Parametric families by name."""


def from_scipy(frozen: Any) -> FrozenScipyDistribution:
    """
    Wrap a frozen :mod:`scipy.stats` continuous distribution.

    Raises
    ------
    TypeError
        If ``frozen`` is not a frozen continuous distribution.
    """
    if not isinstance(getattr(frozen, "dist", None), stats.rv_continuous):
        raise TypeError("from_scipy expects a frozen scipy.stats continuous distribution.")
    return FrozenScipyDistribution(frozen)


__all__ = [
    "ScipyDistribution",
    "ParametricScipyDistribution",
    "FrozenScipyDistribution",
    "Normal",
    "Uniform",
    "Exponential",
    "Gamma",
    "LogNormal",
    "Weibull",
    "FAMILIES",
    "from_scipy",
]
