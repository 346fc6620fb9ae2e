"""
Computation and Sampling Strategies
===================================

- :class:`ComputationStrategy` -- resolves characteristic methods.
- :class:`DefaultComputationStrategy` -- returns analytical computations and
  otherwise fits the shortest conversion chain from the conversion registry.
- :class:`SamplingStrategy` -- draws samples from a distribution.
- :class:`DefaultSamplingUnivariateStrategy` -- inverse transform sampling
  through the resolved ``ppf``.

Notes
-----
Sampling strategies receive the caller's random source explicitly; they hold
no generator of their own.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import threading
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np

from pysatl_censored.distributions.computation import (
    AnalyticalComputation,
    FittedComputationMethod,
)
from pysatl_censored.types import CharacteristicName

from .registry import distribution_type_register
from .sampling import ArraySample, Sample

if TYPE_CHECKING:
    from pysatl_censored.types import GenericCharacteristicName

    from .computation import ComputationMethod
    from .distribution import Distribution

type Method[In, Out] = AnalyticalComputation[In, Out] | FittedComputationMethod[In, Out]
type RandomSource = np.random.Generator | int | None


class ComputationStrategy[In, Out](Protocol):
    """Protocol for characteristic resolution strategies."""

    enable_caching: bool

    def query_method(
        self, state: GenericCharacteristicName, distr: Distribution, **options: Any
    ) -> Method[In, Out]: ...


class DefaultComputationStrategy[In, Out]:
    """
    Default characteristic resolver.

    Resolution order
    ----------------
    1. If the distribution provides an analytical implementation, return it.
    2. Else, if caching is enabled and the method is cached, return it.
    3. Else find the shortest conversion chain from any analytical
       characteristic to the target in the graph of the distribution's type
       and fit its edges in order. Fitters resolve their own sources through
       the distribution, so intermediate characteristics are resolved the
       same way.

    Parameters
    ----------
    enable_caching : bool, default False
        If ``True``, cache fitted conversions keyed by target characteristic.
        A caching strategy must not be shared between distributions.

    Raises
    ------
    RuntimeError
        If the distribution has no analytical base, no conversion path exists,
        or a cycle is detected during resolution.
    """

    def __init__(self, enable_caching: bool = False) -> None:
        self.enable_caching = enable_caching
        self._cache: dict[GenericCharacteristicName, FittedComputationMethod[In, Out]] = {}
        self._local = threading.local()

    def _resolving(self) -> dict[int, set[GenericCharacteristicName]]:
        resolving: dict[int, set[GenericCharacteristicName]] | None = getattr(
            self._local, "resolving", None
        )
        if resolving is None:
            resolving = {}
            self._local.resolving = resolving
        return resolving

    def _push_guard(self, distr: Distribution, state: GenericCharacteristicName) -> None:
        seen = self._resolving().setdefault(id(distr), set())
        if state in seen:
            raise RuntimeError(
                f"Cycle detected while resolving '{state}'. "
                "Provide at least one analytical base characteristic in the distribution."
            )
        seen.add(state)

    def _pop_guard(self, distr: Distribution, state: GenericCharacteristicName) -> None:
        resolving = self._resolving()
        seen = resolving.get(id(distr))
        if seen is not None:
            seen.discard(state)
            if not seen:
                resolving.pop(id(distr), None)

    def query_method(
        self, state: GenericCharacteristicName, distr: Distribution, **options: Any
    ) -> Method[In, Out]:
        """
        Resolve an analytical or fitted method for ``state``.

        Parameters
        ----------
        state : str
            Target characteristic name.
        distr : Distribution
            Distribution providing the analytical base and the type.
        **options
            Passed to the fitters along the conversion chain.
        """
        analytical = distr.analytical_computations
        if state in analytical:
            return analytical[state]

        if self.enable_caching:
            cached = self._cache.get(state)
            if cached is not None:
                return cached

        if not analytical:
            raise RuntimeError(
                "Distribution provides no analytical computations to ground conversions."
            )

        graph = distribution_type_register().get(distr.distribution_type)
        best: list[ComputationMethod[Any, Any]] | None = None
        for src in analytical:
            path = graph.find_path(src, state)
            if path and (best is None or len(path) < len(best)):
                best = path
        if best is None:
            raise RuntimeError(
                f"No conversion path from any analytical characteristic to '{state}'."
            )

        self._push_guard(distr, state)
        try:
            fitted: FittedComputationMethod[In, Out] | None = None
            for edge in best:
                fitted = edge.fit(distr, **options)
            if fitted is None:
                raise RuntimeError(f"Empty path when resolving '{state}'.")
            if self.enable_caching:
                self._cache[state] = fitted
            return fitted
        finally:
            self._pop_guard(distr, state)


class SamplingStrategy(Protocol):
    """Protocol for sampling strategies (return a :class:`Sample`)."""

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> Sample: ...


class DefaultSamplingUnivariateStrategy(SamplingStrategy):
    """
    Univariate inverse transform sampling.

    Resolves the distribution's ``ppf`` and applies it to i.i.d. uniforms
    drawn from ``rng``.

    Returns
    -------
    ArraySample
        A 2D sample of shape ``(n, 1)``.
    """

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> ArraySample:
        ppf = distr.query_method(CharacteristicName.PPF, **options)
        u = rng.random(n)
        return ArraySample(np.array([ppf(float(ui)) for ui in u], dtype=np.float64))


class DelegatingSamplingStrategy(SamplingStrategy):
    """Draws from the distribution returned by ``distr.unwrap()``."""

    def sample(
        self, n: int, distr: Distribution, *, rng: np.random.Generator, **options: Any
    ) -> Sample:
        inner = distr.unwrap()  # type: ignore[attr-defined]
        return inner.sample(n, rng=rng, **options)  # type: ignore[no-any-return]


__all__ = [
    "Method",
    "RandomSource",
    "ComputationStrategy",
    "DefaultComputationStrategy",
    "SamplingStrategy",
    "DefaultSamplingUnivariateStrategy",
    "DelegatingSamplingStrategy",
]
