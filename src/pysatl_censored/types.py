"""
Core Type Definitions
=====================

Type aliases, distribution type descriptors and characteristic names shared
by the censoring layer.
"""

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from math import inf, isfinite
from typing import Any, cast, overload

import numpy as np
from numpy.typing import NDArray


class Kind(StrEnum):
    """Whether a distribution has a density or places its mass on bins."""

    DISCRETE = "discrete"
    CONTINUOUS = "continuous"


class DistributionType:
    """Key under which the conversion registry stores a graph."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class EuclideanDistributionType(DistributionType):
    """
    Distribution type on R^d.

    Parameters
    ----------
    kind : Kind
        Density-based or bin-based.
    dimension : int
        Number of coordinates of a draw; every censored model here is 1.
    """

    kind: Kind
    dimension: int


UnivariateContinuous = EuclideanDistributionType(kind=Kind.CONTINUOUS, dimension=1)
"""Base families, primary-censored and truncated delays."""

UnivariateDiscrete = EuclideanDistributionType(kind=Kind.DISCRETE, dimension=1)
"""Interval-censored models, whose mass sits on bin representatives."""

NumPyNumber = np.floating[Any] | np.integer[Any]
Number = NumPyNumber | int | float
"""Scalar accepted wherever a single value is expected."""

NumericArray = NDArray[NumPyNumber]
BoolArray = NDArray[np.bool_]
type ArrayLike = Number | NumericArray | list[float] | tuple[float, ...]
"""Anything accepted by the vectorised evaluation methods."""


@dataclass(frozen=True, slots=True)
class Interval1D:
    """
    Interval of the real line, such as the support of a delay.

    Parameters
    ----------
    left, right : float
        Endpoints; infinite by default.
    left_closed, right_closed : bool, default True
        Whether the endpoint belongs to the interval. Infinite endpoints are
        always open.
    """

    left: float = -inf
    right: float = inf
    left_closed: bool = True
    right_closed: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "left_closed", self.left_closed and isfinite(self.left))
        object.__setattr__(self, "right_closed", self.right_closed and isfinite(self.right))

    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...

    def contains(self, x: Number | NumericArray) -> bool | BoolArray:
        """Membership test, elementwise for arrays; NaN is never contained."""
        arr = np.asarray(x, dtype=np.float64)
        above = arr >= self.left if self.left_closed else arr > self.left
        below = arr <= self.right if self.right_closed else arr < self.right
        inside = np.logical_and(above, below)
        return bool(inside) if inside.ndim == 0 else cast(BoolArray, inside)

    def __contains__(self, x: object) -> bool:
        return bool(self.contains(cast(Number, x)))

    @property
    def is_bounded(self) -> bool:
        """``True`` when both endpoints are finite."""
        return isfinite(self.left) and isfinite(self.right)


type GenericCharacteristicName = str
"""Characteristic name as stored in the conversion graph."""

ScalarFunc = Callable[[float], float]
"""A characteristic evaluated at one point."""


class CharacteristicName(StrEnum):
    """
    Names of the characteristics resolvable through the conversion registry.

    Notes
    -----
    Interval-censored distributions report their bin masses through both
    ``pdf`` and ``pmf`` so that likelihood code can treat every distribution
    uniformly.
    """

    PDF = "pdf"
    LOGPDF = "logpdf"
    CDF = "cdf"
    LOGCDF = "logcdf"
    CCDF = "ccdf"
    LOGCCDF = "logccdf"
    PPF = "ppf"
    PMF = "pmf"
    LOGPMF = "logpmf"


class FamilyName(StrEnum):
    """Base distribution families known to the closed-form solution register."""

    NORMAL = "Normal"
    UNIFORM = "Uniform"
    EXPONENTIAL = "Exponential"
    GAMMA = "Gamma"
    LOGNORMAL = "LogNormal"
    WEIBULL = "Weibull"


__all__ = [
    "Kind",
    "EuclideanDistributionType",
    "UnivariateContinuous",
    "UnivariateDiscrete",
    "GenericCharacteristicName",
    "DistributionType",
    "ScalarFunc",
    "Interval1D",
    "ArrayLike",
    "BoolArray",
    "NumPyNumber",
    "Number",
    "NumericArray",
    "CharacteristicName",
    "FamilyName",
]
