"""
Computation Primitives
======================

Building blocks through which a distribution exposes its characteristics:

- :class:`AnalyticalComputation` -- a callable the distribution implements
  itself (closed form, quadrature, delegation to a wrapped distribution);
- :class:`ComputationMethod` -- a registered conversion (e.g. ``logcdf`` to
  ``logpdf``) that still has to be fitted to a concrete distribution;
- :class:`FittedComputationMethod` -- the result of fitting a conversion.

Notes
-----
Callables are scalar (``float -> float``). Vectorisation over arrays is done
by :class:`~pysatl_censored.distributions.distribution.UnivariateDistribution`.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mypy_extensions import KwArg

if TYPE_CHECKING:
    from pysatl_censored.distributions.distribution import Distribution
    from pysatl_censored.types import GenericCharacteristicName


@dataclass(frozen=True, slots=True)
class AnalyticalComputation[In, Out]:
    """
    Computation provided directly by the distribution.

    Parameters
    ----------
    target : str
        Characteristic name (e.g., ``"logcdf"``).
    func : Callable[[In, KwArg(Any)], Out]
        Scalar callable.
    """

    target: GenericCharacteristicName
    func: Callable[[In, KwArg(Any)], Out]

    def __call__(self, data: In, **options: Any) -> Out:
        return self.func(data, **options)


@dataclass(frozen=True, slots=True)
class FittedComputationMethod[In, Out]:
    """
    Conversion bound to a concrete distribution and ready to evaluate.

    Parameters
    ----------
    target : str
        Destination characteristic name.
    sources : Sequence[str]
        Characteristics the conversion reads (one for unary conversions).
    func : Callable[[In, KwArg(Any)], Out]
        Scalar callable implementing the conversion.
    """

    target: GenericCharacteristicName
    sources: Sequence[GenericCharacteristicName]
    func: Callable[[In, KwArg(Any)], Out]

    def __call__(self, data: In, **options: Any) -> Out:
        return self.func(data, **options)


@dataclass(frozen=True, slots=True)
class ComputationMethod[In, Out]:
    """
    Registered conversion between characteristics.

    Parameters
    ----------
    target : str
        Destination characteristic name.
    sources : Sequence[str]
        Source characteristic names.
    fitter : Callable[[Distribution, KwArg(Any)], FittedComputationMethod]
        Prepares the conversion for a distribution; free-form ``options``
        carry numeric tolerances such as ``step`` or ``x_tol``.
    """

    target: GenericCharacteristicName
    sources: Sequence[GenericCharacteristicName]
    fitter: Callable[[Distribution, KwArg(Any)], FittedComputationMethod[In, Out]]

    def fit(self, distribution: Distribution, **options: Any) -> FittedComputationMethod[In, Out]:
        """Fit and return a :class:`FittedComputationMethod`."""
        return self.fitter(distribution, **options)


__all__ = ["AnalyticalComputation", "FittedComputationMethod", "ComputationMethod"]
