"""
Numerical primitives

Log-space arithmetic (:mod:`.logspace`) and bounded quadrature
(:mod:`.quadrature`) used by every censored distribution.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from .logspace import (
    LOG_HALF,
    MonotonicityError,
    log1mexp,
    log_interval_mass,
    logaddexp,
    logdiffexp,
)
from .quadrature import DegradedPrecisionWarning, QuadratureResult, integrate

__all__ = [
    "LOG_HALF",
    "MonotonicityError",
    "log1mexp",
    "logdiffexp",
    "logaddexp",
    "log_interval_mass",
    "DegradedPrecisionWarning",
    "QuadratureResult",
    "integrate",
]
