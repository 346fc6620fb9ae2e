"""
Distributions subpackage

Distribution interfaces, base families and generic wrappers used by the
censoring layer:

- distribution protocol and abstract base (:mod:`.distribution`);
- scipy-backed base families (:mod:`.scipy_adapter`);
- numerical fitters and the conversion registry (:mod:`.fitters`,
  :mod:`.registry`);
- sampling containers and pluggable strategies (:mod:`.sampling`,
  :mod:`.strategies`);
- support descriptors (:mod:`.support`);
- truncation and observation weights (:mod:`.truncated`, :mod:`.weighted`).
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from .computation import (
    AnalyticalComputation,
    ComputationMethod,
    FittedComputationMethod,
)
from .distribution import Distribution, UnivariateDistribution
from .registry import DEFAULT_COMPUTATION_KEY, distribution_type_register
from .sampling import ArraySample, Sample
from .scipy_adapter import (
    FAMILIES,
    Exponential,
    FrozenScipyDistribution,
    Gamma,
    LogNormal,
    Normal,
    ParametricScipyDistribution,
    ScipyDistribution,
    Uniform,
    Weibull,
    from_scipy,
)
from .strategies import (
    ComputationStrategy,
    DefaultComputationStrategy,
    DefaultSamplingUnivariateStrategy,
    DelegatingSamplingStrategy,
    SamplingStrategy,
)
from .support import (
    ContinuousSupport,
    DiscreteSupport,
    ExplicitTableDiscreteSupport,
    RegularGridSupport,
    Support,
)
from .truncated import TruncatedDistribution, truncated
from .utils import get_dist, get_dist_recursive, quantile
from .weighted import WeightedDistribution, weight, weighted_loglikelihood

__all__ = [
    # computation primitives
    "AnalyticalComputation",
    "ComputationMethod",
    "FittedComputationMethod",
    # distribution
    "Distribution",
    "UnivariateDistribution",
    # base families
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
    # sampling
    "Sample",
    "ArraySample",
    # strategies
    "ComputationStrategy",
    "DefaultComputationStrategy",
    "SamplingStrategy",
    "DefaultSamplingUnivariateStrategy",
    "DelegatingSamplingStrategy",
    # supports
    "Support",
    "ContinuousSupport",
    "DiscreteSupport",
    "ExplicitTableDiscreteSupport",
    "RegularGridSupport",
    # wrappers
    "TruncatedDistribution",
    "truncated",
    "WeightedDistribution",
    "weight",
    "weighted_loglikelihood",
    # utilities
    "get_dist",
    "get_dist_recursive",
    "quantile",
    # registry
    "DEFAULT_COMPUTATION_KEY",
    "distribution_type_register",
]
