"""
Numerical configuration shared by the censored distributions.

Every derived distribution carries a :class:`NumericalSettings` instance; the
module-level :data:`DEFAULT_SETTINGS` is used when none is given. Settings are
immutable so distributions stay safe to share between threads.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, replace
from typing import Any

import numpy as np

# smallest relative target scipy.integrate.quad accepts without an absolute one
MIN_QUADRATURE_EPSREL = 50.0 * float(np.finfo(np.float64).eps)


@dataclass(frozen=True, slots=True)
class NumericalSettings:
    """
    Tolerances and iteration caps of the numerical routines.

    Parameters
    ----------
    quadrature_epsabs : float, default 0.0
        Absolute error target of the adaptive quadrature. Zero keeps the
        relative target meaningful for tail probabilities.
    quadrature_epsrel : float, default 1e-10
        Relative error target of the adaptive quadrature. Without a positive
        absolute target it must be at least :data:`MIN_QUADRATURE_EPSREL`.
    quadrature_limit : int, default 200
        Upper bound on the number of adaptive subintervals.
    fallback_panels : int, default 64
        Number of equal panels of the Gauss-Legendre fallback rule.
    fallback_order : int, default 16
        Number of Gauss-Legendre nodes per fallback panel.
    derivative_step : float, default 1e-5
        Step of the log-space finite difference used when a density has no
        analytic form. It does not adapt to the magnitude of ``x``.
    monotonicity_tolerance : float, default 1e-8
        Log-space slack within which a decreasing pair of quadrature results
        is read as a zero difference instead of a monotonicity violation.
    ppf_x_tol : float, default 1e-12
        Relative bracket width at which numeric quantile search stops.
    ppf_max_iter : int, default 200
        Maximum bisection steps of numeric quantile search.
    rejection_rounds : int, default 100
        Rejection-sampling rounds for truncated distributions before the
        remaining draws switch to inverse-transform sampling.
    """

    quadrature_epsabs: float = 0.0
    quadrature_epsrel: float = 1e-10
    quadrature_limit: int = 200
    fallback_panels: int = 64
    fallback_order: int = 16
    derivative_step: float = 1e-5
    monotonicity_tolerance: float = 1e-8
    ppf_x_tol: float = 1e-12
    ppf_max_iter: int = 200
    rejection_rounds: int = 100

    def __post_init__(self) -> None:
        if self.quadrature_epsrel <= 0.0 and self.quadrature_epsabs <= 0.0:
            raise ValueError("At least one quadrature tolerance must be positive.")
        if self.quadrature_epsabs <= 0.0 and self.quadrature_epsrel < MIN_QUADRATURE_EPSREL:
            raise ValueError(
                f"quadrature_epsrel must be at least {MIN_QUADRATURE_EPSREL:.3g} "
                "when quadrature_epsabs is not positive."
            )
        if self.quadrature_limit < 1 or self.fallback_panels < 1 or self.fallback_order < 1:
            raise ValueError("Quadrature limits must be positive integers.")
        if self.derivative_step <= 0.0:
            raise ValueError("derivative_step must be positive.")
        if self.monotonicity_tolerance < 0.0:
            raise ValueError("monotonicity_tolerance must be non-negative.")
        if self.rejection_rounds < 0:
            raise ValueError("rejection_rounds must be non-negative.")

    def evolve(self, **changes: Any) -> NumericalSettings:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    @property
    def ppf_options(self) -> dict[str, Any]:
        """Keyword options forwarded to the ``cdf -> ppf`` fitter."""
        return {"x_tol": self.ppf_x_tol, "max_iter": self.ppf_max_iter}


DEFAULT_SETTINGS = NumericalSettings()
"""Settings used by distributions constructed without explicit ``settings``."""


__all__ = ["NumericalSettings", "DEFAULT_SETTINGS", "MIN_QUADRATURE_EPSREL"]
