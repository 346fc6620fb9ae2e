"""
Log-scale and linear-scale evaluations must agree for every distribution
built by the library, and the two tails must add up to one.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import numpy as np
import pytest

from pysatl_censored.censoring.double_interval_censored import double_interval_censored
from pysatl_censored.censoring.interval_censored import interval_censored
from pysatl_censored.censoring.primary_censored import primary_censored
from pysatl_censored.distributions.scipy_adapter import (
    Exponential,
    Gamma,
    LogNormal,
    Normal,
    Weibull,
)
from pysatl_censored.distributions.truncated import truncated

POINTS = np.array([0.3, 1.0, 1.7, 2.5, 4.2, 7.9])

DISTRIBUTIONS = [
    Normal(1.0, 2.0),
    Gamma(2.0, 1.5),
    truncated(LogNormal(0.5, 0.8), 0.2, 12.0),
    primary_censored(Weibull(1.5, 2.0)),
    primary_censored(Gamma(2.0, 1.0), force_numeric=True),
    interval_censored(Exponential(0.7), 0.5),
    interval_censored(Gamma(3.0, 1.0), [0.0, 1.0, 2.0, 5.0, 9.0]),
    double_interval_censored(LogNormal(1.0, 0.5), lower=0.5, upper=10.0, interval=1.0),
]
IDS = [
    "normal",
    "gamma",
    "truncated",
    "primary_censored",
    "primary_censored_numeric",
    "regular_grid",
    "breakpoints",
    "double_interval_censored",
]


@pytest.mark.parametrize("dist", DISTRIBUTIONS, ids=IDS)
class TestLogConsistency:
    def test_cdf(self, dist) -> None:
        np.testing.assert_allclose(np.exp(dist.logcdf(POINTS)), dist.cdf(POINTS), rtol=1e-10)

    def test_ccdf(self, dist) -> None:
        np.testing.assert_allclose(
            np.exp(dist.logccdf(POINTS)), dist.ccdf(POINTS), rtol=1e-10, atol=1e-300
        )

    def test_density(self, dist) -> None:
        np.testing.assert_allclose(np.exp(dist.logpdf(POINTS)), dist.pdf(POINTS), rtol=1e-10)

    def test_tails_sum_to_one(self, dist) -> None:
        np.testing.assert_allclose(dist.cdf(POINTS) + dist.ccdf(POINTS), 1.0, atol=1e-10)

    def test_cdf_is_non_decreasing(self, dist) -> None:
        values = dist.cdf(np.linspace(-1.0, 15.0, 81))
        assert np.all(np.diff(values) >= -1e-12)
        assert np.all((values >= 0.0) & (values <= 1.0))

    def test_scalar_and_vector_agree(self, dist) -> None:
        vector = dist.cdf(POINTS)
        assert isinstance(dist.cdf(float(POINTS[2])), float)
        assert dist.cdf(float(POINTS[2])) == pytest.approx(vector[2], rel=1e-14)


FAR_POINTS = np.array([15.0, 50.0, 1e3, 1e5, 1e7])


@pytest.mark.parametrize("dist", DISTRIBUTIONS, ids=IDS)
class TestFarTails:
    def test_no_nan(self, dist) -> None:
        assert not np.any(np.isnan(dist.logcdf(FAR_POINTS)))
        assert not np.any(np.isnan(dist.logccdf(FAR_POINTS)))

    def test_log_tails_sum_to_one(self, dist) -> None:
        total = np.exp(dist.logcdf(FAR_POINTS)) + np.exp(dist.logccdf(FAR_POINTS))
        np.testing.assert_allclose(total, 1.0, rtol=0.0, atol=1e-10)

    def test_log_cdf_is_non_decreasing(self, dist) -> None:
        grid = np.geomspace(1e-2, 1e7, 50)
        log_cdf = dist.logcdf(grid)
        log_ccdf = dist.logccdf(grid)
        assert np.all(log_cdf <= 0.0)
        assert np.all(log_cdf[1:] >= log_cdf[:-1] - 1e-12)
        assert np.all(log_ccdf[1:] <= log_ccdf[:-1] + 1e-12)
