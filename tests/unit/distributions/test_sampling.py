from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import numpy as np
import pytest

from pysatl_censored.distributions.sampling import ArraySample
from pysatl_censored.distributions.scipy_adapter import Normal
from pysatl_censored.distributions.weighted import weight
from tests.unit.distributions.test_basic import DistributionTestBase


class TestArraySample:
    def test_one_dimensional_input_is_a_column(self) -> None:
        sample = ArraySample([1.0, 2.0, 3.0])
        assert sample.shape == (3, 1)
        assert len(sample) == 3
        np.testing.assert_array_equal(sample.values, [1.0, 2.0, 3.0])

    def test_two_dimensional_input(self) -> None:
        sample = ArraySample(np.zeros((4, 2)))
        assert sample.shape == (4, 2)
        assert sample.dimension == 2
        with pytest.raises(ValueError, match="univariate"):
            _ = sample.values

    def test_three_dimensional_input_raises(self) -> None:
        with pytest.raises(ValueError):
            ArraySample(np.zeros((2, 2, 2)))

    def test_iteration_yields_rows(self) -> None:
        rows = list(ArraySample([[1.0, 2.0], [3.0, 4.0]]))
        assert [r.tolist() for r in rows] == [[1.0, 2.0], [3.0, 4.0]]


class TestSampling(DistributionTestBase):
    def test_inverse_transform_shape_bounds_and_mean(self) -> None:
        distr = self.make_uniform_ppf_distribution()

        n = 1000
        sample = distr.sample(n, rng=0)

        assert sample.shape == (n, 1)
        arr = sample.array
        assert np.isfinite(arr).all()
        assert ((arr >= 0.0) & (arr <= 1.0)).all()
        assert float(arr.mean()) == pytest.approx(0.5, abs=0.05)

    def test_inverse_transform_through_fitted_ppf(self) -> None:
        distr = self.make_logistic_logcdf_distribution()
        values = distr.sample(400, rng=np.random.default_rng(3)).values
        assert float(np.median(values)) == pytest.approx(0.0, abs=0.3)

    def test_seed_reproducibility(self) -> None:
        distr = self.make_uniform_ppf_distribution()
        np.testing.assert_array_equal(distr.sample(10, rng=42).array, distr.sample(10, rng=42).array)

    def test_shared_generator_advances(self) -> None:
        distr = self.make_uniform_ppf_distribution()
        rng = np.random.default_rng(7)
        first = distr.sample(5, rng=rng).values
        second = distr.sample(5, rng=rng).values
        assert not np.array_equal(first, second)

    def test_empty_sample(self) -> None:
        assert self.make_uniform_ppf_distribution().sample(0).shape == (0, 1)

    def test_negative_size_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            self.make_uniform_ppf_distribution().sample(-1)

    def test_scipy_family_uses_rvs(self) -> None:
        sample = Normal(10.0, 2.0).sample(2000, rng=1)
        assert sample.shape == (2000, 1)
        assert float(sample.values.mean()) == pytest.approx(10.0, abs=0.2)
        assert float(sample.values.std()) == pytest.approx(2.0, abs=0.2)

    def test_delegating_strategy_draws_from_wrapped(self) -> None:
        base = Normal(1.0, 0.5)
        np.testing.assert_array_equal(
            weight(base, 3.0).sample(8, rng=11).values, base.sample(8, rng=11).values
        )
