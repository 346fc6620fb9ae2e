"""
Censoring subpackage

Wrappers modelling how delays are observed:

- primary-event censoring and its closed-form solutions
  (:mod:`.primary_censored`, :mod:`.analytical`);
- interval censoring on regular grids or breakpoints
  (:mod:`.interval_censored`);
- the composed double-interval-censored model
  (:mod:`.double_interval_censored`);
- maximum likelihood fitting of censored models (:mod:`.fit`).
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from .analytical import (
    AnalyticalSolutionRegister,
    PartialExpectation,
    UniformPrimarySolution,
    analytical_solution_register,
)
from .double_interval_censored import (
    DoubleIntervalCensoredDistribution,
    double_interval_censored,
)
from .fit import FitResult, fit_double_interval_censored, fit_interval_censored
from .interval_censored import (
    DiscretizedDistribution,
    IntervalCensoredDistribution,
    discretise,
    discretize,
    interval_censored,
)
from .primary_censored import PrimaryCensoredDistribution, primary_censored

__all__ = [
    # primary censoring
    "PrimaryCensoredDistribution",
    "primary_censored",
    "AnalyticalSolutionRegister",
    "PartialExpectation",
    "UniformPrimarySolution",
    "analytical_solution_register",
    # interval censoring
    "IntervalCensoredDistribution",
    "DiscretizedDistribution",
    "interval_censored",
    "discretise",
    "discretize",
    # composition
    "DoubleIntervalCensoredDistribution",
    "double_interval_censored",
    # fitting
    "FitResult",
    "fit_interval_censored",
    "fit_double_interval_censored",
]
