from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

from mypy_extensions import KwArg

from pysatl_censored.distributions.computation import (
    AnalyticalComputation,
    ComputationMethod,
    FittedComputationMethod,
)
from pysatl_censored.types import CharacteristicName
from tests.utils.mocks import StandaloneUnivariateDistribution

if TYPE_CHECKING:
    from collections.abc import Sequence


class DistributionTestBase:
    PDF = CharacteristicName.PDF
    LOGPDF = CharacteristicName.LOGPDF
    CDF = CharacteristicName.CDF
    LOGCDF = CharacteristicName.LOGCDF
    CCDF = CharacteristicName.CCDF
    LOGCCDF = CharacteristicName.LOGCCDF
    PPF = CharacteristicName.PPF

    @staticmethod
    def _computation(
        target: str, func: Callable[..., float]
    ) -> AnalyticalComputation[float, float]:
        return AnalyticalComputation[float, float](
            target=target, func=cast(Callable[[float, KwArg(Any)], float], func)
        )

    def make_uniform_cdf_distribution(self) -> StandaloneUnivariateDistribution:
        def uniform_cdf(x: float, **_: Any) -> float:
            return min(max(x, 0.0), 1.0)

        return StandaloneUnivariateDistribution(
            [self._computation(self.CDF, uniform_cdf)], lower=0.0, upper=1.0
        )

    def make_uniform_ppf_distribution(self) -> StandaloneUnivariateDistribution:
        return StandaloneUnivariateDistribution(
            [self._computation(self.PPF, lambda q, **_: q)], lower=0.0, upper=1.0
        )

    def make_logistic_logcdf_distribution(self) -> StandaloneUnivariateDistribution:
        def logistic_logcdf(x: float, **_: Any) -> float:
            return -math.log1p(math.exp(-x)) if x > -700.0 else x

        return StandaloneUnivariateDistribution([self._computation(self.LOGCDF, logistic_logcdf)])

    def make_exponential_logccdf_distribution(
        self, rate: float = 1.0
    ) -> StandaloneUnivariateDistribution:
        return StandaloneUnivariateDistribution(
            [self._computation(self.LOGCCDF, lambda x, **_: -rate * max(x, 0.0))],
            lower=0.0,
        )

    @staticmethod
    def logistic_pdf(x: float) -> float:
        f = 1.0 / (1.0 + math.exp(-x))
        return f * (1.0 - f)

    @staticmethod
    def make_fictitious_computation_method(
        target: str, sources: Sequence[str]
    ) -> ComputationMethod[Any, Any]:
        def _fitted_const(val: Any) -> FittedComputationMethod[Any, Any]:
            return FittedComputationMethod[Any, Any](
                target=target, sources=list(sources), func=lambda *_a, **_k: val
            )

        return ComputationMethod(
            target=target, sources=sources, fitter=lambda *_a, **_k: _fitted_const(None)
        )
