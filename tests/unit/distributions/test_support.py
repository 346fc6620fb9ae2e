from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from math import inf, nan

import numpy as np
import pytest

from pysatl_censored.distributions.support import (
    ContinuousSupport,
    DiscreteSupport,
    ExplicitTableDiscreteSupport,
    RegularGridSupport,
)


class TestContinuousSupport:
    support_example = ContinuousSupport(left=0.0, right=1.0, left_closed=True, right_closed=False)

    @pytest.mark.parametrize(
        "point, expected_result",
        [
            (0, True),
            (1, False),
            (0.5, True),
            (-0.1, False),
            (inf, False),
            (-inf, False),
        ],
        ids=[
            "left_bound_closed",
            "right_bound_open",
            "inside_interval",
            "outside_interval",
            "+inf",
            "-inf",
        ],
    )
    def test_contains_scalar(self, point, expected_result):
        assert (point in self.support_example) is expected_result
        assert self.support_example.contains(point) is expected_result

    @pytest.mark.parametrize("infinity", [-inf, inf])
    def test_real_line_doesnt_contain_inf(self, infinity):
        support = ContinuousSupport()
        assert infinity not in support
        assert support.contains(infinity) is False

    def test_contains_array(self):
        result = self.support_example.contains(np.array([-1.0, 0.0, 0.5, 1.0]))
        assert isinstance(result, np.ndarray)
        assert result.tolist() == [False, True, True, False]

    def test_is_bounded(self):
        assert self.support_example.is_bounded
        assert not ContinuousSupport(left=0.0).is_bounded


class TestExplicitTableDiscreteSupport:
    support_example = ExplicitTableDiscreteSupport([3, 1, 2, 2, 5])
    x_examples = [0, 1, 1.5, 2, 4.9, 5, 10]

    def test_is_discrete_support(self):
        assert isinstance(self.support_example, DiscreteSupport)

    def test_table_is_sorted_and_deduplicated(self):
        np.testing.assert_array_equal(self.support_example.points, np.array([1, 2, 3, 5]))
        assert len(self.support_example) == 4

    @pytest.mark.parametrize(
        "point, expected_result",
        [(2, True), (4, False), (2.0, True), (2.5, False)],
    )
    def test_contains_scalar(self, point, expected_result):
        assert (point in self.support_example) is expected_result
        assert self.support_example.contains(point) is expected_result

    def test_contains_array(self):
        result = self.support_example.contains(np.array([0, 1, 2, 3, 4, 5]))
        assert result.tolist() == [False, True, True, True, False, True]

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            ExplicitTableDiscreteSupport([])

    def test_assume_sorted_keeps_order(self):
        support = ExplicitTableDiscreteSupport([5, 1, 3, 2], assume_sorted=True)
        np.testing.assert_array_equal(support.points, np.array([5, 1, 3, 2]))

    @pytest.mark.parametrize(
        "x, expected_floor",
        zip(x_examples, [None, 1, 1, 2, 3, 5, 5], strict=True),
    )
    def test_floor(self, x, expected_floor):
        assert self.support_example.floor(x) == expected_floor

    @pytest.mark.parametrize(
        "x, expected_index",
        zip(x_examples, [None, 0, 0, 1, 2, 3, 3], strict=True),
    )
    def test_index(self, x, expected_index):
        assert self.support_example.index(x) == expected_index

    def test_nan_has_no_floor(self):
        assert self.support_example.floor(nan) is None
        assert self.support_example.index(nan) is None

    @pytest.mark.parametrize(
        "x, expected_next",
        zip(x_examples, [1, 2, 2, 3, 5, None, None], strict=True),
    )
    def test_next(self, x, expected_next):
        assert self.support_example.next(x) == expected_next

    def test_first_and_last(self):
        assert self.support_example.first() == 1
        assert self.support_example.last() == 5

    def test_iter_points_and_iter(self):
        assert list(self.support_example.iter_points()) == [1, 2, 3, 5]
        assert list(iter(self.support_example)) == [1, 2, 3, 5]

    def test_points_property_returns_copy(self):
        pts_copy = self.support_example.points
        pts_copy[0] = -999
        np.testing.assert_array_equal(self.support_example.points, np.array([1, 2, 3, 5]))


class TestRegularGridSupport:
    support_examples = {
        "boundless": RegularGridSupport(width=1.0),
        "half_bounded": RegularGridSupport(width=0.5, min_k=2, max_k=16),
        "bounded_left": RegularGridSupport(width=2.0, min_k=-1),
    }

    @pytest.mark.parametrize("width", [0.0, -1.0, nan], ids=["zero", "negative", "nan"])
    def test_invalid_width_raises(self, width):
        with pytest.raises(ValueError, match="width must be positive"):
            RegularGridSupport(width=width)

    @pytest.mark.parametrize(
        "support_name, point, expected_result",
        [
            ("boundless", -3.0, True),
            ("boundless", 2.5, False),
            ("half_bounded", 1.5, True),
            ("half_bounded", 1.25, False),
            ("half_bounded", 0.5, False),
            ("half_bounded", 8.0, True),
            ("half_bounded", 8.5, False),
            ("bounded_left", -2.0, True),
            ("bounded_left", -4.0, False),
        ],
    )
    def test_contains_scalar(self, support_name, point, expected_result):
        support = self.support_examples[support_name]
        assert (point in support) is expected_result
        assert support.contains(point) is expected_result

    def test_contains_tolerates_rounding(self):
        assert 0.1 * 3 in RegularGridSupport(width=0.1)

    def test_contains_array(self):
        support = self.support_examples["half_bounded"]
        result = support.contains(np.array([0.5, 1.0, 1.25, 8.0, inf, nan]))
        assert result.tolist() == [False, True, False, True, False, False]

    @pytest.mark.parametrize(
        "support_name, x, expected_floor",
        [
            ("boundless", -2.5, -3.0),
            ("boundless", 2.0, 2.0),
            ("half_bounded", 1.2, 1.0),
            ("half_bounded", 0.9, None),
            ("half_bounded", 100.0, 8.0),
            ("half_bounded", inf, 8.0),
            ("half_bounded", -inf, None),
            ("bounded_left", 3.9, 2.0),
        ],
    )
    def test_floor(self, support_name, x, expected_floor):
        assert self.support_examples[support_name].floor(x) == expected_floor

    def test_nan_has_no_floor(self):
        assert self.support_examples["boundless"].floor(nan) is None

    @pytest.mark.parametrize(
        "support_name, expected_first, expected_last",
        [
            ("boundless", None, None),
            ("half_bounded", 1.0, 8.0),
            ("bounded_left", -2.0, None),
        ],
    )
    def test_first_and_last(self, support_name, expected_first, expected_last):
        support = self.support_examples[support_name]
        assert support.first() == expected_first
        assert support.last() == expected_last

    @pytest.mark.parametrize(
        "support_name, x, expected_next",
        [
            ("half_bounded", 1.0, 1.5),
            ("half_bounded", 8.0, None),
            ("half_bounded", -5.0, 1.0),
            ("boundless", 0.3, 1.0),
        ],
    )
    def test_next(self, support_name, x, expected_next):
        assert self.support_examples[support_name].next(x) == expected_next

    def test_iter_points(self):
        with pytest.raises(RuntimeError):
            list(self.support_examples["boundless"].iter_points())

        assert list(self.support_examples["half_bounded"]) == [0.5 * k for k in range(2, 17)]

        it = self.support_examples["bounded_left"].iter_points()
        assert [next(it) for _ in range(3)] == [-2.0, 0.0, 2.0]
