"""
Helpers for navigating composed distributions.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pysatl_censored.distributions.distribution import Distribution, Evaluated
    from pysatl_censored.types import ArrayLike


def get_dist(d: Any) -> Any:
    """
    Return the distribution directly wrapped by ``d``.

    Primary-censored distributions yield their delay, truncated, weighted and
    interval-censored distributions the distribution they wrap. Anything
    without an ``unwrap`` method is returned unchanged.
    """
    unwrap = getattr(d, "unwrap", None)
    return d if unwrap is None else unwrap()


def get_dist_recursive(d: Any) -> Any:
    """
    Apply :func:`get_dist` until the result no longer changes.

    Examples
    --------
    >>> from pysatl_censored import LogNormal, double_interval_censored
    >>> delay = LogNormal(1.5, 0.75)
    >>> get_dist_recursive(double_interval_censored(delay, upper=10, interval=1)) == delay
    True
    """
    current = d
    while True:
        inner = get_dist(current)
        if inner is current:
            return current
        current = inner


def quantile(dist: Distribution, q: ArrayLike) -> Evaluated:
    """Quantile function of ``dist``; an alias of ``dist.ppf(q)``."""
    return dist.ppf(q)


__all__ = ["get_dist", "get_dist_recursive", "quantile"]
