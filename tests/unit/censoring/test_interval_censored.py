from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from math import exp, inf, nan

import numpy as np
import pytest
from scipy import stats

from pysatl_censored.censoring.interval_censored import (
    DiscretizedDistribution,
    IntervalCensoredDistribution,
    discretise,
    discretize,
    interval_censored,
)
from pysatl_censored.distributions.scipy_adapter import Exponential, Gamma, Normal
from pysatl_censored.distributions.support import (
    ExplicitTableDiscreteSupport,
    RegularGridSupport,
)
from pysatl_censored.distributions.truncated import truncated
from pysatl_censored.types import UnivariateDiscrete
from tests.unit.censoring.base import BaseCensoringTest


class TestRegularGrid(BaseCensoringTest):
    dist = discretize(Normal(0.0, 1.0), 1.0)

    def test_cdf_at_bin_edge_is_exact(self) -> None:
        assert self.dist.cdf(0.0) == stats.norm.cdf(0.0)
        assert self.dist.cdf(0.0) == 0.5

    def test_unit_bin_mass(self) -> None:
        assert self.dist.pmf_at_bin(0) == pytest.approx(0.3413447460685429, rel=1e-12)
        assert round(self.dist.pmf_at_bin(0), 4) == 0.3413

    @pytest.mark.parametrize(
        "x, k",
        [(0.0, 0), (0.7, 0), (0.999, 0), (1.0, 1), (-0.3, -1), (-1.0, -1), (2.5, 2)],
        ids=["edge", "inside", "right_edge", "next_edge", "negative", "negative_edge", "2.5"],
    )
    def test_pmf_is_mass_of_containing_bin(self, x: float, k: int) -> None:
        assert self.dist.pmf(x) == self.dist.pmf_at_bin(k)
        assert self.dist.logpmf(x) == self.dist.logpmf_at_bin(k)
        assert self.dist.pdf(x) == self.dist.pmf(x)

    def test_bin_masses_sum_to_one(self) -> None:
        total = sum(self.dist.pmf_at_bin(k) for k in range(-12, 12))
        assert total == pytest.approx(1.0, abs=1e-12)

    def test_cdf_is_right_continuous_step(self) -> None:
        assert self.dist.cdf(0.99) == self.dist.cdf(0.0)
        assert self.dist.cdf(1.0) == stats.norm.cdf(1.0)
        assert self.dist.cdf(1.0) - self.dist.cdf(0.0) == pytest.approx(
            self.dist.pmf_at_bin(0), rel=1e-12
        )

    def test_tails_are_complementary(self) -> None:
        for x in (-2.3, 0.4, 3.1):
            assert self.dist.cdf(x) + self.dist.ccdf(x) == pytest.approx(1.0, abs=1e-15)
            assert exp(self.dist.logcdf(x)) == pytest.approx(self.dist.cdf(x), rel=1e-14)

    def test_far_tail_mass_keeps_precision(self) -> None:
        assert self.dist.logpmf_at_bin(40) == pytest.approx(stats.norm.logsf(40.0), rel=1e-10)
        assert self.dist.logpmf_at_bin(-41) == pytest.approx(stats.norm.logcdf(-40.0), rel=1e-10)

    @pytest.mark.parametrize(
        "x, edge",
        [(0.2, 0.0), (-0.5, -1.0), (3.0, 3.0), (nan, None)],
        ids=["0.2", "-0.5", "3", "nan"],
    )
    def test_bin_containing(self, x: float, edge: float | None) -> None:
        assert self.dist.bin_containing(x) == edge

    def test_bin_edges(self) -> None:
        grid = discretize(Normal(), 0.5)
        assert grid.bin_edges(3) == (1.5, 2.0)
        assert grid.bin_edges(-1) == (-0.5, 0.0)

    def test_ppf_is_snapped(self) -> None:
        assert self.dist.ppf(0.5) == 0.0
        assert self.dist.ppf(0.9) == 1.0
        assert self.dist.ppf(0.1) == -2.0
        assert math.isnan(self.dist.ppf(1.5))

    def test_snap_vectorised(self) -> None:
        grid = discretize(Exponential(1.0), 0.5)
        np.testing.assert_array_equal(
            grid.snap(np.array([0.1, 0.5, 1.74, inf])), [0.0, 0.5, 1.5, inf]
        )
        assert grid.snap(0.74) == 0.5

    def test_sample_lies_on_grid(self) -> None:
        grid = discretize(Gamma(2.0, 1.0), 0.5)
        values = grid.sample(500, rng=4).values
        assert np.all(values >= 0.0)
        np.testing.assert_array_equal(values, np.floor(values / 0.5) * 0.5)

    def test_support_and_bounds(self) -> None:
        grid = discretize(Exponential(1.0), 0.5)
        assert grid.minimum() == 0.0
        assert grid.maximum() == inf
        support = grid.support
        assert isinstance(support, RegularGridSupport)
        assert support.min_k == 0
        assert support.max_k is None
        assert 1.5 in support
        assert -0.5 not in support

    def test_bounded_support(self) -> None:
        grid = discretize(truncated(Normal(), -1.2, 2.3), 0.5)
        assert grid.minimum() == -1.5
        assert grid.maximum() == 2.0
        assert grid.cdf(-2.0) == 0.0
        assert grid.cdf(2.7) == 1.0
        assert grid.support == RegularGridSupport(0.5, min_k=-3, max_k=4)

    def test_cdf_reaches_one_at_off_grid_maximum(self) -> None:
        grid = discretize(truncated(Gamma(2.0, 1.0), 0.0, 7.7), 0.5)
        assert grid.maximum() == 7.5
        assert grid.cdf(7.5) == 1.0
        assert grid.ccdf(7.5) == 0.0
        assert grid.cdf(np.nextafter(7.5, -inf)) == pytest.approx(grid.dist.cdf(7.0), rel=1e-15)
        assert grid.pmf(7.5) == pytest.approx(grid.dist.ccdf(7.5), rel=1e-10)
        total = sum(grid.pmf(x) for x in grid.support.iter_points())
        assert total == pytest.approx(1.0, abs=1e-12)

    def test_type_and_parameters(self) -> None:
        assert self.dist.distribution_type == UnivariateDiscrete
        assert self.dist.is_regular
        assert self.dist.interval_width == 1.0
        assert self.dist.breakpoints == ()
        assert self.dist.parameters() == (0.0, 1.0, 1.0)

    def test_log_likelihood_sums_bin_masses(self) -> None:
        data = [0.0, 1.0, 1.0, -2.0]
        expected = sum(math.log(self.dist.pmf(x)) for x in data)
        assert self.dist.log_likelihood(data) == pytest.approx(expected, rel=1e-14)


class TestBreakpoints(BaseCensoringTest):
    dist = interval_censored(Exponential(1.0), [0.0, 1.0, 3.0, 7.0])

    @pytest.mark.parametrize(
        "k, expected",
        [(0, 1.0 - exp(-1.0)), (1, exp(-1.0) - exp(-3.0)), (2, exp(-3.0) - exp(-7.0))],
        ids=["first", "middle", "last_bounded"],
    )
    def test_bin_masses(self, k: int, expected: float) -> None:
        assert self.dist.pmf_at_bin(k) == pytest.approx(expected, rel=1e-13)

    @pytest.mark.parametrize("k", [-1, 4, 10], ids=["below", "past_last", "far"])
    def test_missing_bins_have_no_mass(self, k: int) -> None:
        assert self.dist.pmf_at_bin(k) == 0.0
        assert self.dist.bin_edges(k) is None

    @pytest.mark.parametrize(
        "x, expected",
        [(0.5, 1.0 - exp(-1.0)), (5.0, exp(-3.0) - exp(-7.0)), (7.5, exp(-7.0)), (-1.0, 0.0)],
        ids=["first_bin", "last_bounded_bin", "past_last_breakpoint", "below_first_breakpoint"],
    )
    def test_pmf(self, x: float, expected: float) -> None:
        assert self.dist.pmf(x) == pytest.approx(expected, rel=1e-13)

    def test_cumulative_functions(self) -> None:
        assert self.dist.cdf(-1.0) == 0.0
        assert self.dist.cdf(2.0) == pytest.approx(1.0 - exp(-1.0), rel=1e-15)
        assert self.dist.cdf(8.0) == 1.0
        assert self.dist.ccdf(-1.0) == 1.0
        assert self.dist.ccdf(8.0) == 0.0

    def test_last_breakpoint_holds_remaining_mass(self) -> None:
        assert self.dist.bin_edges(3) == (7.0, inf)
        assert self.dist.pmf_at_bin(3) == pytest.approx(exp(-7.0), rel=1e-13)
        assert self.dist.pmf(7.0) == self.dist.pmf_at_bin(3)
        assert self.dist.pmf(100.0) == self.dist.pmf_at_bin(3)

    def test_cdf_reaches_one_at_maximum(self) -> None:
        assert self.dist.cdf(7.0) == 1.0
        assert self.dist.logcdf(7.0) == 0.0
        assert self.dist.ccdf(7.0) == 0.0
        assert self.dist.logccdf(7.0) == -inf
        just_below = np.nextafter(7.0, -inf)
        assert self.dist.cdf(just_below) == pytest.approx(1.0 - exp(-3.0), rel=1e-15)
        jump = self.dist.cdf(7.0) - self.dist.cdf(just_below)
        assert jump == pytest.approx(self.dist.pmf_at_bin(2) + self.dist.pmf_at_bin(3), rel=1e-12)

    def test_masses_over_support_sum_to_one(self) -> None:
        total = sum(self.dist.pmf(x) for x in self.dist.support)
        assert total == pytest.approx(1.0, abs=1e-14)

    def test_bin_containing(self) -> None:
        assert self.dist.bin_containing(-0.1) is None
        assert self.dist.bin_containing(3.0) == 3.0
        assert self.dist.bin_containing(100.0) == 7.0

    def test_snap_clamps_into_breakpoints(self) -> None:
        np.testing.assert_array_equal(
            self.dist.snap([-1.0, 0.5, 2.0, 9.0]), [0.0, 0.0, 1.0, 7.0]
        )
        assert math.isnan(self.dist.snap(nan))

    def test_sample_and_ppf_within_breakpoints(self) -> None:
        values = self.dist.sample(300, rng=9).values
        assert set(np.unique(values)).issubset({0.0, 1.0, 3.0, 7.0})
        assert self.dist.ppf(0.999999) == 7.0
        assert self.dist.ppf(0.2) == 0.0

    def test_support_is_table(self) -> None:
        support = self.dist.support
        assert isinstance(support, ExplicitTableDiscreteSupport)
        assert list(support) == [0.0, 1.0, 3.0, 7.0]
        assert self.dist.minimum() == 0.0
        assert self.dist.maximum() == 7.0
        assert not self.dist.is_regular
        assert self.dist.interval_width is None


class TestOuterBins(BaseCensoringTest):
    @pytest.mark.parametrize(
        "dist",
        [
            interval_censored(Gamma(3.0, 1.0), [0.0, 1.0, 2.0, 5.0, 9.0]),
            interval_censored(Normal(0.0, 1.0), [-1.0, 0.0, 1.0]),
            discretize(truncated(Exponential(0.4), 0.3, 6.2), 0.5),
        ],
        ids=["gamma_breakpoints", "normal_breakpoints", "truncated_grid"],
    )
    def test_cdf_is_right_continuous_at_maximum(self, dist) -> None:
        top = dist.maximum()
        assert dist.cdf(top) == 1.0
        assert dist.cdf(np.nextafter(top, inf)) == 1.0
        assert dist.cdf(np.nextafter(top, -inf)) < 1.0
        total = sum(dist.pmf(x) for x in dist.support.iter_points())
        assert total == pytest.approx(1.0, abs=1e-12)

    def test_first_breakpoint_holds_mass_below_it(self) -> None:
        dist = interval_censored(Normal(0.0, 1.0), [-1.0, 0.0, 1.0])
        assert dist.pmf(-1.0) == pytest.approx(0.5, rel=1e-14)
        assert dist.pmf(1.0) == pytest.approx(stats.norm.sf(1.0), rel=1e-12)
        assert dist.pmf(-1.5) == 0.0
        assert dist.bin_edges(0) == (-1.0, 0.0)

    def test_masses_match_sample_frequencies(self) -> None:
        dist = interval_censored(Normal(0.0, 1.0), [-1.0, 0.0, 1.0])
        values = dist.sample(20000, rng=11).values
        for point in (-1.0, 0.0, 1.0):
            frequency = float(np.mean(values == point))
            assert frequency == pytest.approx(dist.pmf(point), abs=0.015)


class TestConstruction:
    @pytest.mark.parametrize(
        "boundaries, description",
        [
            (0.0, "interval width is positive and finite"),
            (-1.0, "interval width is positive and finite"),
            (inf, "interval width is positive and finite"),
            ([1.0], "at least two breakpoints"),
            ([0.0, 2.0, 1.0], "breakpoints are finite and strictly increasing"),
            ([0.0, 1.0, 1.0], "breakpoints are finite and strictly increasing"),
            ([0.0, nan], "breakpoints are finite and strictly increasing"),
        ],
        ids=["zero", "negative", "infinite", "single", "unsorted", "repeated", "nan"],
    )
    def test_invalid_boundaries(self, boundaries, description: str) -> None:
        with pytest.raises(ValueError, match=f'Constraint "{description}" does not hold'):
            interval_censored(Normal(), boundaries)

    def test_integer_width_and_tuple_breakpoints(self) -> None:
        assert interval_censored(Normal(), 2).boundaries == 2.0
        assert interval_censored(Normal(), (0, 1)).boundaries == (0.0, 1.0)
        assert IntervalCensoredDistribution(Normal(), [0, 1]).breakpoints == (0.0, 1.0)

    def test_aliases(self) -> None:
        assert DiscretizedDistribution is IntervalCensoredDistribution
        assert discretise is interval_censored
        assert discretize is interval_censored

    def test_unwrap(self) -> None:
        base = Normal()
        assert discretize(base, 1.0).unwrap() is base

    def test_value_semantics(self) -> None:
        assert discretize(Normal(), 1) == discretize(Normal(), 1.0)
        assert discretize(Normal(), 1.0) != discretize(Normal(), 0.5)
