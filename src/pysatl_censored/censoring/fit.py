"""
Maximum Likelihood Fitting
==========================

Fits the delay parameters of interval-censored and double-interval-censored
models to (optionally weighted) observations.

The optimizer is :func:`scipy.optimize.minimize` with the Nelder-Mead method
over an unconstrained vector: positive parameters are optimized on the log
scale. Parameter vectors for which the model cannot be built or evaluated
score a fixed penalty instead of raising. Repeated observations are
collapsed into unique values with summed weights before optimization.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from dataclasses import dataclass, fields
from math import isfinite, log, sqrt
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import minimize

from pysatl_censored.censoring.double_interval_censored import DoubleIntervalCensoredDistribution
from pysatl_censored.censoring.interval_censored import IntervalCensoredDistribution
from pysatl_censored.config import DEFAULT_SETTINGS, NumericalSettings
from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.scipy_adapter import (
    FAMILIES,
    ParametricScipyDistribution,
    Uniform,
)
from pysatl_censored.distributions.weighted import weighted_loglikelihood
from pysatl_censored.numerics.logspace import MonotonicityError
from pysatl_censored.types import FamilyName

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from numpy.typing import NDArray

    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.distributions.sampling import Sample
    from pysatl_censored.types import ArrayLike

PENALTY = 1e10
"""Objective value of parameter vectors that do not define a valid model."""

type FamilySpec = type[ParametricScipyDistribution] | FamilyName | str
type ModelBuilder = Callable[[ParametricScipyDistribution], Distribution]


@dataclass(frozen=True)
class FitResult:
    """
    Outcome of a maximum likelihood fit.

    Parameters
    ----------
    distribution : Distribution
        The fitted model.
    parameters : tuple of float
        Fitted delay parameters in the family's natural order.
    log_likelihood : float
        Weighted log-likelihood of the data at the optimum.
    converged : bool
        Whether the optimizer reported success.
    iterations : int
        Number of optimizer iterations.
    """

    distribution: Distribution
    parameters: tuple[float, ...]
    log_likelihood: float
    converged: bool
    iterations: int


def _resolve_family(family: FamilySpec) -> type[ParametricScipyDistribution]:
    if isinstance(family, type):
        if not issubclass(family, ParametricScipyDistribution):
            raise TypeError(f"{family.__name__} is not a parametric family.")
        return family
    try:
        return FAMILIES[FamilyName(family)]
    except ValueError as e:
        raise ValueError(f"Unknown distribution family: {family!r}") from e


def _prepare_data(
    data: Sample | ArrayLike, weights: ArrayLike | None
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Validate observations and collapse repeats into ``(values, weights)``."""
    values = data.values if isinstance(data, ArraySample) else np.ravel(np.asarray(data))
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        raise ValueError("Cannot fit a model to empty data.")
    if not np.all(np.isfinite(values)):
        raise ValueError("Data must be finite.")
    if weights is None:
        w = np.ones_like(values)
    else:
        w = np.ravel(np.asarray(weights, dtype=np.float64))
        if w.shape != values.shape:
            raise ValueError("weights must have the same length as the data.")
        if not np.all(np.isfinite(w)) or np.any(w < 0):
            raise ValueError("weights must be finite and non-negative.")
    unique, inverse = np.unique(values, return_inverse=True)
    return unique, np.bincount(inverse.ravel(), weights=w).astype(np.float64)


def _moment_guess(
    family: type[ParametricScipyDistribution],
    values: NDArray[np.float64],
    weights: NDArray[np.float64],
    shift: float,
) -> tuple[float, ...]:
    """Starting point matching the weighted mean and spread of the data."""
    total = float(np.sum(weights))
    mean = float(np.sum(weights * values)) / total + shift
    spread = sqrt(float(np.sum(weights * (values + shift - mean) ** 2)) / total)
    mean = mean if mean > 0.0 else 1.0
    spread = spread if spread > 0.0 else max(shift, 1.0)

    name = family.family
    if name == FamilyName.NORMAL:
        return mean, spread
    if name == FamilyName.UNIFORM:
        return float(values.min()), float(values.max()) + 2.0 * max(shift, spread)
    if name == FamilyName.EXPONENTIAL:
        return (1.0 / mean,)
    if name == FamilyName.GAMMA:
        return (mean / spread) ** 2, spread**2 / mean
    if name == FamilyName.LOGNORMAL:
        sigma2 = log(1.0 + (spread / mean) ** 2)
        return log(mean) - 0.5 * sigma2, sqrt(sigma2)
    if name == FamilyName.WEIBULL:
        return 1.0, mean
    raise ValueError(f"No starting point for family {family.__name__}; pass init.")


def _maximize(
    family: type[ParametricScipyDistribution],
    build: ModelBuilder,
    values: NDArray[np.float64],
    weights: NDArray[np.float64],
    init: Sequence[float],
) -> FitResult:
    names = [f.name for f in fields(family)]  # type: ignore[arg-type]
    if len(init) != len(names):
        raise ValueError(f"init must have {len(names)} values ({', '.join(names)}).")
    positive = np.array([name in family.positive_parameters for name in names])
    start = np.asarray(init, dtype=np.float64)
    if np.any(start[positive] <= 0.0):
        raise ValueError(f"init must be positive for {', '.join(family.positive_parameters)}.")
    free0 = np.where(positive, np.log(np.where(positive, start, 1.0)), start)

    def _natural(free: NDArray[np.float64]) -> tuple[float, ...]:
        with np.errstate(over="ignore"):
            return tuple(float(v) for v in np.where(positive, np.exp(free), free))

    def _objective(free: NDArray[np.float64]) -> float:
        try:
            model = build(family(*_natural(free)))
            ll = weighted_loglikelihood(model, values, weights)
        except (ValueError, MonotonicityError):
            return PENALTY
        return -ll if isfinite(ll) else PENALTY

    result = minimize(
        _objective,
        free0,
        method="Nelder-Mead",
        options={"xatol": 1e-6, "fatol": 1e-8, "maxiter": 1000 * len(names)},
    )
    parameters = _natural(np.asarray(result.x, dtype=np.float64))
    model = build(family(*parameters))
    return FitResult(
        distribution=model,
        parameters=parameters,
        log_likelihood=weighted_loglikelihood(model, values, weights),
        converged=bool(result.success),
        iterations=int(result.nit),
    )


def fit_interval_censored(
    data: Sample | ArrayLike,
    family: FamilySpec,
    boundaries: float | Iterable[float],
    *,
    weights: ArrayLike | None = None,
    init: Sequence[float] | None = None,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> FitResult:
    """
    Fit ``interval_censored(family(...), boundaries)`` by maximum likelihood.

    Parameters
    ----------
    data : Sample or array_like
        Observed bin representatives.
    family : type, FamilyName or str
        Parametric family of the uncensored distribution.
    boundaries : float or iterable of float
        Grid width or breakpoints.
    weights : array_like, optional
        Non-negative observation weights.
    init : sequence of float, optional
        Starting parameters; a moment-matching guess when omitted.
    settings : NumericalSettings, optional
        Numerical tolerances of the model.

    Returns
    -------
    FitResult

    Raises
    ------
    ValueError
        For empty or non-finite data, mismatched weights or an invalid
        starting point.
    """
    cls = _resolve_family(family)
    grid: float | tuple[float, ...] = (
        float(boundaries) if isinstance(boundaries, int | float) else tuple(boundaries)
    )
    values, w = _prepare_data(data, weights)
    shift = 0.5 * grid if isinstance(grid, float) else 0.0
    start = tuple(init) if init is not None else _moment_guess(cls, values, w, shift)

    def _build(dist: ParametricScipyDistribution) -> Distribution:
        return IntervalCensoredDistribution(dist, grid, settings=settings)

    return _maximize(cls, _build, values, w, start)


def fit_double_interval_censored(
    data: Sample | ArrayLike,
    family: FamilySpec,
    *,
    primary_event: Distribution | None = None,
    lower: float | None = None,
    upper: float | None = None,
    interval: float | None = None,
    breakpoints: Iterable[float] | None = None,
    weights: ArrayLike | None = None,
    init: Sequence[float] | None = None,
    force_numeric: bool = False,
    settings: NumericalSettings = DEFAULT_SETTINGS,
) -> FitResult:
    """
    Fit the delay of a double-interval-censored model by maximum likelihood.

    The primary event window, the truncation bounds and the reporting grid
    are held fixed; only the parameters of ``family`` are optimized.

    Returns
    -------
    FitResult

    Raises
    ------
    ValueError
        For empty or non-finite data, mismatched weights, an invalid model
        specification or an invalid starting point.
    """
    cls = _resolve_family(family)
    primary = Uniform(0.0, 1.0) if primary_event is None else primary_event
    grid = None if breakpoints is None else tuple(float(b) for b in breakpoints)
    values, w = _prepare_data(data, weights)

    def _build(dist: ParametricScipyDistribution) -> Distribution:
        return DoubleIntervalCensoredDistribution(
            dist,
            primary,
            lower=lower,
            upper=upper,
            interval=interval,
            breakpoints=grid,
            force_numeric=force_numeric,
            settings=settings,
        )

    if init is None:
        primary_mid = 0.5 * (float(primary.minimum()) + float(primary.maximum()))
        shift = (0.5 * interval if interval is not None else 0.0) - primary_mid
        start = _moment_guess(cls, values, w, shift)
    else:
        start = tuple(init)
    # surfaces invalid model specifications before optimization
    _build(cls(*start))
    return _maximize(cls, _build, values, w, start)


__all__ = [
    "PENALTY",
    "FitResult",
    "fit_interval_censored",
    "fit_double_interval_censored",
]
