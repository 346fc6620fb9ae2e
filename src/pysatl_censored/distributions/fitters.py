"""
Conversion fitters.

Each ``fit_*`` function takes a distribution, resolves the source
characteristic through the distribution's computation strategy and returns a
:class:`~pysatl_censored.distributions.computation.FittedComputationMethod`
for the target characteristic.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from math import exp, inf, isfinite, isnan, log, nan
from typing import TYPE_CHECKING, Any, cast

from mypy_extensions import KwArg

from pysatl_censored.distributions.computation import FittedComputationMethod
from pysatl_censored.numerics.logspace import log1mexp, logdiffexp
from pysatl_censored.types import CharacteristicName

if TYPE_CHECKING:
    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.types import GenericCharacteristicName, ScalarFunc

type Fitter = Callable[..., FittedComputationMethod[float, float]]


def _resolve(distribution: Distribution, name: GenericCharacteristicName) -> ScalarFunc:
    """
    Resolve a scalar characteristic from the distribution.

    Raises
    ------
    RuntimeError
        If the distribution does not provide a computation strategy.
    """
    try:
        fn = distribution.query_method(name)
    except AttributeError as e:
        raise RuntimeError(
            "Distribution must provide query_method(name) backed by a computation strategy."
        ) from e

    def _wrap(x: float, **kwargs: Any) -> float:
        return float(fn(x, **kwargs))

    return _wrap


def _safe_log(value: float) -> float:
    if isnan(value):
        return nan
    return log(value) if value > 0.0 else -inf


def _safe_log1mexp(value: float) -> float:
    return float(log1mexp(value))


def _complement(value: float) -> float:
    return 1.0 - value


def pointwise_fitter(
    source: CharacteristicName, target: CharacteristicName, transform: ScalarFunc
) -> Fitter:
    """
    Build a fitter applying ``transform`` to the source characteristic point by point.

    Parameters
    ----------
    source, target : CharacteristicName
        Characteristic read and characteristic produced.
    transform : Callable[[float], float]
        Scalar map from a source value to a target value.
    """

    def fitter(distribution: Distribution, /, **_: Any) -> FittedComputationMethod[float, float]:
        source_func = _resolve(distribution, source)

        def _target(x: float, **options: Any) -> float:
            return transform(source_func(x, **options))

        return FittedComputationMethod[float, float](
            target=target,
            sources=[source],
            func=cast(Callable[[float, KwArg(Any)], float], _target),
        )

    fitter.__name__ = f"fit_{source}_to_{target}"
    return fitter


fit_logcdf_to_cdf = pointwise_fitter(CharacteristicName.LOGCDF, CharacteristicName.CDF, exp)
fit_cdf_to_logcdf = pointwise_fitter(CharacteristicName.CDF, CharacteristicName.LOGCDF, _safe_log)
fit_logccdf_to_ccdf = pointwise_fitter(CharacteristicName.LOGCCDF, CharacteristicName.CCDF, exp)
fit_ccdf_to_logccdf = pointwise_fitter(
    CharacteristicName.CCDF, CharacteristicName.LOGCCDF, _safe_log
)
fit_logcdf_to_logccdf = pointwise_fitter(
    CharacteristicName.LOGCDF, CharacteristicName.LOGCCDF, _safe_log1mexp
)
fit_logccdf_to_logcdf = pointwise_fitter(
    CharacteristicName.LOGCCDF, CharacteristicName.LOGCDF, _safe_log1mexp
)
fit_cdf_to_ccdf = pointwise_fitter(CharacteristicName.CDF, CharacteristicName.CCDF, _complement)
fit_logpdf_to_pdf = pointwise_fitter(CharacteristicName.LOGPDF, CharacteristicName.PDF, exp)
fit_pdf_to_logpdf = pointwise_fitter(CharacteristicName.PDF, CharacteristicName.LOGPDF, _safe_log)
fit_logpmf_to_pmf = pointwise_fitter(CharacteristicName.LOGPMF, CharacteristicName.PMF, exp)


def _log_central_difference(
    logcdf: ScalarFunc,
    x: float,
    *,
    lower: float,
    upper: float,
    step: float,
    tolerance: float,
) -> float:
    """
    Log of ``(F(r) - F(l)) / (r - l)`` around ``x`` with ``r - l == step``.

    The stencil is centred on ``x`` and shifted inside ``[lower, upper]`` at
    the support edges, which turns it into a forward (backward) difference
    there.
    """
    if isnan(x):
        return nan
    if x < lower or x > upper:
        return -inf
    left = max(x - 0.5 * step, lower)
    right = min(left + step, upper)
    left = max(min(left, right - step), lower)
    width = right - left
    if not width > 0.0:
        return -inf
    diff = float(logdiffexp(logcdf(right), logcdf(left), tolerance=tolerance))
    return diff - log(width)


def fit_logcdf_to_logpdf_1C(
    distribution: Distribution, /, **options: Any
) -> FittedComputationMethod[float, float]:
    """
    Fit ``logpdf`` as a log-space finite difference of ``logcdf``.

    Parameters
    ----------
    distribution : Distribution
        Continuous distribution with a resolvable ``logcdf``.
    **options
        ``step`` (default ``1e-5``) is the stencil width and ``tolerance``
        (default ``0.0``) the monotonicity slack forwarded to
        :func:`~pysatl_censored.numerics.logspace.logdiffexp`.

    Returns
    -------
    FittedComputationMethod[float, float]
        Fitted ``logcdf -> logpdf`` conversion; ``-inf`` outside the support.
    """
    logcdf_func = _resolve(distribution, CharacteristicName.LOGCDF)
    step = float(options.get("step", 1e-5))
    tolerance = float(options.get("tolerance", 0.0))
    lower = float(distribution.minimum())
    upper = float(distribution.maximum())

    def _logpdf(x: float, **kwargs: Any) -> float:
        return _log_central_difference(
            lambda t: logcdf_func(t, **kwargs),
            x,
            lower=lower,
            upper=upper,
            step=step,
            tolerance=tolerance,
        )

    return FittedComputationMethod[float, float](
        target=CharacteristicName.LOGPDF,
        sources=[CharacteristicName.LOGCDF],
        func=cast(Callable[[float, KwArg(Any)], float], _logpdf),
    )


def _ppf_bisection_from_cdf(
    cdf: ScalarFunc,
    *,
    lower: float = -inf,
    upper: float = inf,
    x0: float = 0.0,
    init_step: float = 1.0,
    expand_factor: float = 2.0,
    max_expand: int = 60,
    x_tol: float = 1e-12,
    max_iter: int = 200,
) -> ScalarFunc:
    """
    Build a scalar ``ppf`` returning the leftmost ``x`` with ``cdf(x) >= q``.

    The bracket starts at the support bounds when they are finite and grows
    geometrically from ``x0`` otherwise; bisection then narrows it until its
    relative width drops below ``x_tol`` or ``max_iter`` steps are spent.

    Notes
    -----
    ``q <= 0`` maps to ``lower`` and ``q >= 1`` to ``upper``.
    """

    def _bracket(q: float) -> tuple[float, float]:
        step = init_step
        left = lower if isfinite(lower) else min(x0, upper) - step
        right = upper if isfinite(upper) else max(x0, lower) + step
        for _ in range(max_expand):
            if cdf(left) < q or left == lower:
                break
            step *= expand_factor
            left -= step
        for _ in range(max_expand):
            if cdf(right) >= q or right == upper:
                break
            step *= expand_factor
            right += step
        return left, right

    def _ppf(q: float, **kwargs: Any) -> float:
        if isnan(q) or q < 0.0 or q > 1.0:
            return nan
        if q == 0.0:
            return lower
        if q == 1.0:
            return upper

        left, right = _bracket(q)
        for _ in range(max_iter):
            if right - left <= x_tol * (1.0 + max(abs(left), abs(right))):
                break
            mid = 0.5 * (left + right)
            if cdf(mid) >= q:
                right = mid
            else:
                left = mid
        return right

    return _ppf


def fit_cdf_to_ppf_1C(
    distribution: Distribution, /, **options: Any
) -> FittedComputationMethod[float, float]:
    """
    Fit ``ppf`` by numerically inverting a resolvable ``cdf``.

    Parameters
    ----------
    distribution : Distribution
    **options
        ``x_tol`` and ``max_iter`` of the bisection and ``x0`` of the
        bracket search.

    Returns
    -------
    FittedComputationMethod[float, float]
        Fitted ``cdf -> ppf`` conversion.
    """
    cdf_func = _resolve(distribution, CharacteristicName.CDF)
    search_keys = ("x0", "init_step", "expand_factor", "max_expand", "x_tol", "max_iter")
    ppf_func = _ppf_bisection_from_cdf(
        cdf_func,
        lower=float(distribution.minimum()),
        upper=float(distribution.maximum()),
        **{k: v for k, v in options.items() if k in search_keys},
    )

    def _ppf(q: float, **kwargs: Any) -> float:
        return ppf_func(q)

    return FittedComputationMethod[float, float](
        target=CharacteristicName.PPF,
        sources=[CharacteristicName.CDF],
        func=cast(Callable[[float, KwArg(Any)], float], _ppf),
    )


__all__ = [
    "pointwise_fitter",
    "fit_logcdf_to_cdf",
    "fit_cdf_to_logcdf",
    "fit_logccdf_to_ccdf",
    "fit_ccdf_to_logccdf",
    "fit_logcdf_to_logccdf",
    "fit_logccdf_to_logcdf",
    "fit_cdf_to_ccdf",
    "fit_logpdf_to_pdf",
    "fit_pdf_to_logpdf",
    "fit_logpmf_to_pmf",
    "fit_logcdf_to_logpdf_1C",
    "fit_cdf_to_ppf_1C",
]
