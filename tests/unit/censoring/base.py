"""
Common fixtures and utilities for censored distribution tests.
"""

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from math import exp
from typing import Any

import numpy as np
from scipy import integrate

from pysatl_censored.distributions.scipy_adapter import (
    Exponential,
    Gamma,
    LogNormal,
    Weibull,
)


class BaseCensoringTest:
    """Base class for censoring tests"""

    # Agreement required between closed-form and quadrature results
    CALCULATION_PRECISION = 1e-8

    CLOSED_FORM_DELAYS = [
        Gamma(2.0, 1.0),
        Exponential(1.5),
        LogNormal(0.5, 0.6),
        Weibull(1.5, 2.0),
    ]
    CLOSED_FORM_IDS = ["gamma", "exponential", "lognormal", "weibull"]

    @staticmethod
    def assert_arrays_almost_equal(
        actual: np.ndarray[Any, Any], expected: np.ndarray[Any, Any], precision: float | None = None
    ) -> None:
        """Helper method to assert arrays are almost equal."""
        if precision is None:
            precision = BaseCensoringTest.CALCULATION_PRECISION
        np.testing.assert_allclose(actual, expected, rtol=0.0, atol=precision)

    @staticmethod
    def reference_primary_censored_cdf(
        delay: Any, primary: Any, x: float
    ) -> float:
        """``int f_P(t) F_D(x - t) dt`` evaluated directly with scipy."""
        lower, upper = primary.minimum(), primary.maximum()
        value, _ = integrate.quad(
            lambda t: primary.frozen.pdf(t) * delay.frozen.cdf(x - t),
            lower,
            upper,
            epsabs=0.0,
            epsrel=1e-12,
            limit=200,
        )
        return float(value)

    @staticmethod
    def exponential_uniform_cdf(rate: float, x: float) -> float:
        """Closed form of ``primary_censored(Exponential(rate))`` for ``0 <= x <= 1``."""
        return x - (1.0 - exp(-rate * x)) / rate
