"""
Distribution Interfaces
=======================

- :class:`Distribution` -- the capability protocol shared by base and derived
  distributions. Every wrapper in this package accepts any object that
  implements it, so wrappers compose recursively.
- :class:`UnivariateDistribution` -- abstract base implementing the protocol
  on top of a mapping of analytical computations. Characteristics a subclass
  does not provide are resolved through the computation strategy and the
  conversion registry.

Notes
-----
- Evaluation methods accept floats or arrays; scalar input yields a
  ``float``. NaN input yields NaN.
- ``sample`` accepts a :class:`numpy.random.Generator`, a seed, or ``None``
  for a fresh default generator.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from abc import ABC, abstractmethod
from functools import cached_property
from math import inf, isnan, nan
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

import numpy as np

from pysatl_censored.config import DEFAULT_SETTINGS
from pysatl_censored.distributions.strategies import (
    DefaultComputationStrategy,
    DefaultSamplingUnivariateStrategy,
)
from pysatl_censored.distributions.support import ContinuousSupport
from pysatl_censored.types import CharacteristicName, UnivariateContinuous

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

    from numpy.typing import NDArray

    from pysatl_censored.config import NumericalSettings
    from pysatl_censored.distributions.computation import AnalyticalComputation
    from pysatl_censored.distributions.sampling import Sample
    from pysatl_censored.distributions.strategies import (
        ComputationStrategy,
        Method,
        RandomSource,
        SamplingStrategy,
    )
    from pysatl_censored.distributions.support import Support
    from pysatl_censored.types import (
        ArrayLike,
        DistributionType,
        GenericCharacteristicName,
    )


@runtime_checkable
class Distribution(Protocol):
    """Capability set required from every distribution."""

    @property
    def distribution_type(self) -> DistributionType: ...

    @property
    def analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[Any, Any]]: ...

    @property
    def support(self) -> Support | None: ...

    def query_method(
        self, characteristic_name: GenericCharacteristicName, **options: Any
    ) -> Method[Any, Any]: ...

    def pdf(self, x: ArrayLike) -> Evaluated: ...
    def logpdf(self, x: ArrayLike) -> Evaluated: ...
    def cdf(self, x: ArrayLike) -> Evaluated: ...
    def logcdf(self, x: ArrayLike) -> Evaluated: ...
    def ccdf(self, x: ArrayLike) -> Evaluated: ...
    def logccdf(self, x: ArrayLike) -> Evaluated: ...
    def ppf(self, q: ArrayLike) -> Evaluated: ...

    def minimum(self) -> float: ...
    def maximum(self) -> float: ...
    def parameters(self) -> tuple[Any, ...]: ...

    def sample(self, n: int, rng: RandomSource = None, **options: Any) -> Sample: ...
    def truncate(self, lower: float | None = None, upper: float | None = None) -> Distribution: ...


type Evaluated = float | NDArray[np.float64]


_DEFAULT_COMPUTATION: DefaultComputationStrategy[float, float] = DefaultComputationStrategy()
_DEFAULT_SAMPLING = DefaultSamplingUnivariateStrategy()


def _evaluate(method: Method[float, float], x: ArrayLike) -> Evaluated:
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim == 0:
        value = float(arr)
        return nan if isnan(value) else float(method(value))
    out = np.empty(arr.shape, dtype=np.float64)
    for idx, value in np.ndenumerate(arr):
        out[idx] = nan if isnan(value) else method(float(value))
    return out


class UnivariateDistribution(ABC):
    """
    Base class of all univariate distributions in the package.

    Subclasses implement :meth:`_analytical_computations`, the support bounds
    and :meth:`parameters`; everything else follows from the computation
    strategy.
    """

    distribution_type: ClassVar[DistributionType] = UnivariateContinuous
    settings: NumericalSettings = DEFAULT_SETTINGS

    @abstractmethod
    def _analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        """Characteristics the distribution evaluates itself."""

    @abstractmethod
    def minimum(self) -> float:
        """Lower bound of the support."""

    @abstractmethod
    def maximum(self) -> float:
        """Upper bound of the support."""

    @abstractmethod
    def parameters(self) -> tuple[Any, ...]:
        """Parameters that, together with the type, reconstruct the distribution."""

    @cached_property
    def analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[float, float]]:
        return dict(self._analytical_computations())

    @property
    def computation_strategy(self) -> ComputationStrategy[float, float]:
        return _DEFAULT_COMPUTATION

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return _DEFAULT_SAMPLING

    @property
    def support(self) -> Support | None:
        return ContinuousSupport(self.minimum(), self.maximum())

    @property
    def computation_options(self) -> dict[str, Any]:
        """Options forwarded to conversion fitters."""
        return {
            "step": self.settings.derivative_step,
            "tolerance": self.settings.monotonicity_tolerance,
            **self.settings.ppf_options,
        }

    def query_method(
        self, characteristic_name: GenericCharacteristicName, **options: Any
    ) -> Method[float, float]:
        merged = {**self.computation_options, **options}
        return self.computation_strategy.query_method(characteristic_name, self, **merged)

    def calculate_characteristic(
        self, characteristic_name: GenericCharacteristicName, value: ArrayLike, **options: Any
    ) -> Evaluated:
        return _evaluate(self.query_method(characteristic_name, **options), value)

    def pdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.PDF, x)

    def logpdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.LOGPDF, x)

    def cdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.CDF, x)

    def logcdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.LOGCDF, x)

    def ccdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.CCDF, x)

    def logccdf(self, x: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.LOGCCDF, x)

    def ppf(self, q: ArrayLike) -> Evaluated:
        return self.calculate_characteristic(CharacteristicName.PPF, q)

    def quantile(self, q: ArrayLike) -> Evaluated:
        """Alias of :meth:`ppf`."""
        return self.ppf(q)

    def sample(self, n: int, rng: RandomSource = None, **options: Any) -> Sample:
        """
        Draw ``n`` independent values.

        Parameters
        ----------
        n : int
            Sample size (non-negative).
        rng : numpy.random.Generator, int or None
            Random source; a seed or ``None`` creates a new generator.

        Returns
        -------
        Sample
            Sample of shape ``(n, 1)``.
        """
        if n < 0:
            raise ValueError("Sample size must be non-negative.")
        generator = np.random.default_rng(rng)
        return self.sampling_strategy.sample(int(n), self, rng=generator, **options)

    def truncate(
        self, lower: float | None = None, upper: float | None = None
    ) -> UnivariateDistribution:
        """
        Condition the distribution on ``lower <= X <= upper``.

        Returns ``self`` when both bounds are missing or infinite.
        """
        from pysatl_censored.distributions.truncated import TruncatedDistribution

        lo = -inf if lower is None else float(lower)
        hi = inf if upper is None else float(upper)
        if lo == -inf and hi == inf:
            return self
        return TruncatedDistribution(self, lo, hi, settings=self.settings)

    def unwrap(self) -> Distribution:
        """Distribution directly wrapped by this one; ``self`` for base distributions."""
        return self

    def log_likelihood(
        self, data: Sample | ArrayLike, weights: ArrayLike | None = None
    ) -> float:
        """
        Weighted log-likelihood ``sum(w_i * logpdf(x_i))``.

        Observations with zero weight contribute nothing even where the
        density vanishes.

        Raises
        ------
        ValueError
            If ``weights`` does not match the data length or is negative.
        """
        from pysatl_censored.distributions.weighted import weighted_loglikelihood

        return weighted_loglikelihood(self, data, weights)


__all__ = ["Distribution", "UnivariateDistribution"]
