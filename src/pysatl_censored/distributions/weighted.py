"""
Observation weights.

A :class:`WeightedDistribution` scales the log-density of the wrapped
distribution by a non-negative weight, e.g. the number of times a value was
observed. Only ``logpdf`` is affected; every other characteristic and sampling
are those of the wrapped distribution.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Sequence
from dataclasses import dataclass
from math import inf, isnan
from typing import TYPE_CHECKING, Any, overload

import numpy as np

from pysatl_censored.distributions.computation import AnalyticalComputation
from pysatl_censored.distributions.distribution import UnivariateDistribution
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.strategies import DelegatingSamplingStrategy
from pysatl_censored.types import CharacteristicName, Kind
from pysatl_censored.validation import constraint, validate_constraints

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.distributions.sampling import Sample
    from pysatl_censored.distributions.strategies import SamplingStrategy
    from pysatl_censored.distributions.support import Support
    from pysatl_censored.types import ArrayLike, DistributionType, GenericCharacteristicName

_DELEGATED_CONTINUOUS = (
    CharacteristicName.PDF,
    CharacteristicName.CDF,
    CharacteristicName.LOGCDF,
    CharacteristicName.CCDF,
    CharacteristicName.LOGCCDF,
    CharacteristicName.PPF,
)
_DELEGATED_DISCRETE = (CharacteristicName.PMF, CharacteristicName.LOGPMF)

_DELEGATING_SAMPLER = DelegatingSamplingStrategy()


@dataclass(frozen=True)
class WeightedDistribution(UnivariateDistribution):
    """
    Distribution whose log-density is multiplied by an observation weight.

    Parameters
    ----------
    dist : Distribution
        Wrapped distribution.
    weight : float or None
        Non-negative weight. ``None`` marks a missing weight; like a zero
        weight it makes ``logpdf`` return ``-inf``.

    Raises
    ------
    ValueError
        If the weight is negative or NaN.
    """

    dist: Distribution
    weight: float | None

    def __post_init__(self) -> None:
        if self.weight is not None:
            object.__setattr__(self, "weight", float(self.weight))
        validate_constraints(self)

    @constraint(description="weight >= 0")
    def check_weight_non_negative(self) -> bool:
        return self.weight is None or (not isnan(self.weight) and self.weight >= 0)

    @property
    def distribution_type(self) -> DistributionType:  # type: ignore[override]
        return self.dist.distribution_type

    def _logpdf(self, x: float, **_: Any) -> float:
        if not self.weight:
            return -inf
        return self.weight * float(self.dist.logpdf(x))

    def _delegate(self, name: GenericCharacteristicName) -> AnalyticalComputation[float, float]:
        method = self.dist.query_method(name)
        return AnalyticalComputation[float, float](
            target=name, func=lambda x, **_: float(method(x))
        )

    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        names: tuple[CharacteristicName, ...] = _DELEGATED_CONTINUOUS
        if getattr(self.distribution_type, "kind", None) == Kind.DISCRETE:
            names += _DELEGATED_DISCRETE
        computations = {name: self._delegate(name) for name in names}
        computations[CharacteristicName.LOGPDF] = AnalyticalComputation[float, float](
            target=CharacteristicName.LOGPDF, func=self._logpdf
        )
        return computations

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _DELEGATING_SAMPLER

    @property
    def support(self) -> Support | None:
        return self.dist.support

    def minimum(self) -> float:
        return float(self.dist.minimum())

    def maximum(self) -> float:
        return float(self.dist.maximum())

    def parameters(self) -> tuple[Any, ...]:
        return (*self.dist.parameters(), self.weight)

    def unwrap(self) -> Distribution:
        return self.dist


@overload
def weight(dist: Distribution, w: float | None) -> WeightedDistribution: ...
@overload
def weight(dist: Distribution, w: Sequence[float | None]) -> list[WeightedDistribution]: ...


def weight(
    dist: Distribution, w: float | None | Sequence[float | None]
) -> WeightedDistribution | list[WeightedDistribution]:
    """
    Attach observation weights to ``dist``.

    A scalar (or ``None``) gives one :class:`WeightedDistribution`; a sequence
    gives one wrapper per weight, in order.
    """
    if isinstance(w, Sequence | np.ndarray):
        return [WeightedDistribution(dist, wi) for wi in w]
    return WeightedDistribution(dist, w)


def weighted_loglikelihood(
    dist: Distribution, values: Sample | ArrayLike, weights: ArrayLike | None = None
) -> float:
    """
    Compute ``sum(w_i * logpdf(x_i))``.

    Observations with zero weight contribute nothing, even where the density
    vanishes.

    Parameters
    ----------
    dist : Distribution
        Model distribution.
    values : Sample or array_like
        Observations.
    weights : array_like, optional
        Non-negative weights, one per observation; all ones when omitted.

    Raises
    ------
    ValueError
        If ``weights`` does not match ``values`` in length or is negative.
    """
    data = values.values if isinstance(values, ArraySample) else np.ravel(values)
    logp = np.atleast_1d(np.asarray(dist.logpdf(np.asarray(data, dtype=np.float64))))
    if weights is None:
        return float(np.sum(logp))
    w = np.ravel(np.asarray(weights, dtype=np.float64))
    if w.shape != logp.shape:
        raise ValueError("weights must have the same length as the data.")
    if np.any(w < 0):
        raise ValueError("weights must be non-negative.")
    terms = np.zeros_like(logp, dtype=np.float64)
    mask = w > 0
    terms[mask] = w[mask] * logp[mask]
    return float(np.sum(terms))


__all__ = ["WeightedDistribution", "weight", "weighted_loglikelihood"]
