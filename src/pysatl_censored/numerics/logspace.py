"""
Log-Space Arithmetic
====================

Helpers that combine log-probabilities without leaving the log domain:

- :func:`log1mexp` -- ``log(1 - exp(a))``;
- :func:`logdiffexp` -- ``log(exp(a) - exp(b))`` for ``a >= b``;
- :func:`logaddexp` -- ``log(exp(a) + exp(b))``;
- :func:`log_interval_mass` -- ``log P(a < X <= b)`` taken from the tail of
  ``X`` where the subtraction does not cancel.

All helpers accept scalars or NumPy arrays; scalar input yields a Python
``float``.

Notes
-----
:func:`logdiffexp` raises :class:`MonotonicityError` when ``a < b``. A
decreasing pair of cumulative probabilities means that a caller broke the
monotonicity contract; returning NaN would hide the bug.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from math import inf, isnan, log
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

LOG_HALF = -log(2.0)
"""Branch point of :func:`log1mexp` and tail switch of :func:`log_interval_mass`."""


class MonotonicityError(ArithmeticError):
    """Raised when a log-difference receives a decreasing pair of operands."""


class _TailEvaluable(Protocol):
    def logcdf(self, x: float) -> Any: ...
    def logccdf(self, x: float) -> Any: ...


def _as_output(values: NDArray[np.float64]) -> float | NDArray[np.float64]:
    if values.ndim == 0:
        return float(values)
    return values


def _log1mexp(x: NDArray[np.float64]) -> NDArray[np.float64]:
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return np.where(x < LOG_HALF, np.log1p(-np.exp(x)), np.log(-np.expm1(x)))


def log1mexp(a: ArrayLike) -> float | NDArray[np.float64]:
    """
    Compute ``log(1 - exp(a))`` for ``a <= 0``.

    Parameters
    ----------
    a : array_like
        Log-probability (non-positive).

    Returns
    -------
    float or numpy.ndarray
        ``-inf`` for ``a == 0``, ``0`` for ``a == -inf`` and NaN for
        ``a > 0`` or NaN input.
    """
    return _as_output(_log1mexp(np.asarray(a, dtype=np.float64)))


def logdiffexp(
    a: ArrayLike, b: ArrayLike, *, tolerance: float = 0.0
) -> float | NDArray[np.float64]:
    """
    Compute ``log(exp(a) - exp(b))`` for ``a >= b``.

    Parameters
    ----------
    a, b : array_like
        Log-domain operands, broadcast against each other.
    tolerance : float, default 0.0
        Slack for ``a < b``: pairs with ``b - tolerance <= a < b`` give
        ``-inf`` instead of raising.

    Returns
    -------
    float or numpy.ndarray
        ``-inf`` when ``a == b`` and ``a`` when ``b == -inf``.

    Raises
    ------
    MonotonicityError
        If ``a < b - tolerance`` for any element.
    """
    x, y = np.broadcast_arrays(
        np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    )
    violated = x < y - tolerance
    if np.any(violated):
        bad_a = x[violated].flat[0]
        bad_b = y[violated].flat[0]
        raise MonotonicityError(
            f"logdiffexp requires a >= b, got a={bad_a!r} < b={bad_b!r}"
        )
    with np.errstate(invalid="ignore"):
        gap = np.minimum(y - x, 0.0)
        out = np.where(
            np.isneginf(y),
            x,
            np.where(x <= y, -inf, x + _log1mexp(gap)),
        )
    return _as_output(out)


def logaddexp(a: ArrayLike, b: ArrayLike) -> float | NDArray[np.float64]:
    """Compute ``log(exp(a) + exp(b))`` without overflow or underflow."""
    return _as_output(
        np.logaddexp(np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64))
    )


def log_interval_mass(
    dist: _TailEvaluable, a: float, b: float, *, tolerance: float = 0.0
) -> float:
    """
    Log-probability that ``dist`` falls in ``(a, b]``.

    The difference is taken between left-tail probabilities while
    ``cdf(a) <= 1/2`` and between right-tail probabilities otherwise, so both
    operands stay far from one.

    Parameters
    ----------
    dist
        Anything exposing scalar ``logcdf`` and ``logccdf``.
    a, b : float
        Interval endpoints; ``b <= a`` gives ``-inf``.
    tolerance : float, default 0.0
        Forwarded to :func:`logdiffexp`.
    """
    if isnan(a) or isnan(b):
        return float("nan")
    if b <= a:
        return -inf
    log_lower = float(dist.logcdf(a))
    if log_lower <= LOG_HALF:
        return float(logdiffexp(float(dist.logcdf(b)), log_lower, tolerance=tolerance))
    return float(
        logdiffexp(float(dist.logccdf(a)), float(dist.logccdf(b)), tolerance=tolerance)
    )


__all__ = [
    "LOG_HALF",
    "MonotonicityError",
    "log1mexp",
    "logdiffexp",
    "logaddexp",
    "log_interval_mass",
]
