"""
Conversion Registry
===================

A directed graph over characteristic names for a fixed
:class:`~pysatl_censored.types.DistributionType`. Edges are unary
:class:`~pysatl_censored.distributions.computation.ComputationMethod`
conversions (``1 source -> 1 target``); the computation strategy walks the
graph from whatever a distribution implements analytically to the
characteristic that was asked for.

The module also exposes a singleton-like :class:`DistributionTypeRegister`
and its cached, pre-configured accessor :func:`distribution_type_register`.

Default conversions
-------------------
Continuous, univariate:

- ``logcdf <-> cdf``, ``logccdf <-> ccdf``, ``logpdf <-> pdf`` (exp / log);
- ``logcdf <-> logccdf`` (:func:`~pysatl_censored.numerics.logspace.log1mexp`);
- ``cdf -> ccdf`` (complement);
- ``logcdf -> logpdf`` (log-space finite difference, the density fallback);
- ``cdf -> ppf`` (bracketing bisection).

Discrete (interval-censored), univariate: the same set without the
finite-difference density, plus ``logpmf -> pmf``.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import warnings
from collections import deque
from functools import lru_cache
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pysatl_censored.distributions.computation import ComputationMethod
from pysatl_censored.distributions.fitters import (
    fit_ccdf_to_logccdf,
    fit_cdf_to_ccdf,
    fit_cdf_to_logcdf,
    fit_cdf_to_ppf_1C,
    fit_logccdf_to_ccdf,
    fit_logccdf_to_logcdf,
    fit_logcdf_to_cdf,
    fit_logcdf_to_logccdf,
    fit_logcdf_to_logpdf_1C,
    fit_logpdf_to_pdf,
    fit_logpmf_to_pmf,
    fit_pdf_to_logpdf,
)
from pysatl_censored.types import (
    CharacteristicName,
    DistributionType,
    UnivariateContinuous,
    UnivariateDiscrete,
)

if TYPE_CHECKING:
    from pysatl_censored.distributions.fitters import Fitter
    from pysatl_censored.types import GenericCharacteristicName

DEFAULT_COMPUTATION_KEY = "PySATL_default_computation"
"""Label of the conversion preferred when several connect the same pair."""


class ConversionGraph:
    """
    Labeled unary conversions between characteristics of one distribution type.

    Parameters
    ----------
    distribution_type : DistributionType
        Type whose characteristics the graph connects.
    """

    def __init__(self, distribution_type: DistributionType) -> None:
        self.distribution_type = distribution_type
        self.__adj: dict[
            GenericCharacteristicName,
            dict[GenericCharacteristicName, dict[str, ComputationMethod[Any, Any]]],
        ] = {}

    def add_conversion(
        self, method: ComputationMethod[Any, Any], *, name: str = DEFAULT_COMPUTATION_KEY
    ) -> None:
        """
        Add a unary conversion ``source -> target`` under label ``name``.

        Raises
        ------
        ValueError
            If the method is not unary.

        Notes
        -----
        A second conversion under an existing label is ignored with a warning.
        """
        if len(method.sources) != 1:
            raise ValueError("Only unary conversions can be registered.")
        source = method.sources[0]
        labels = self.__adj.setdefault(source, {}).setdefault(method.target, {})
        if name in labels:
            warnings.warn(
                f"Conversion {source} -> {method.target} labelled {name!r} has already "
                "been added. The new method will not be taken into account",
                UserWarning,
                stacklevel=2,
            )
            return
        labels[name] = method
        self.__adj.setdefault(method.target, {})

    def nodes(self) -> frozenset[GenericCharacteristicName]:
        """Return the set of characteristics mentioned by any conversion."""
        return frozenset(self.__adj)

    @staticmethod
    def _pick_method(
        methods: dict[str, ComputationMethod[Any, Any]],
    ) -> ComputationMethod[Any, Any]:
        if DEFAULT_COMPUTATION_KEY in methods:
            return methods[DEFAULT_COMPUTATION_KEY]
        return methods[sorted(methods)[0]]

    def find_path(
        self,
        src: GenericCharacteristicName,
        dst: GenericCharacteristicName,
    ) -> list[ComputationMethod[Any, Any]] | None:
        """
        Find the shortest conversion chain ``src -> ... -> dst`` (BFS).

        Returns
        -------
        list[ComputationMethod] or None
            Conversions to apply in order, or ``None`` if ``dst`` is
            unreachable from ``src``.
        """
        if src == dst:
            return []

        visited: set[GenericCharacteristicName] = {src}
        parent: dict[
            GenericCharacteristicName, tuple[GenericCharacteristicName, ComputationMethod[Any, Any]]
        ] = {}
        q: deque[GenericCharacteristicName] = deque([src])

        while q:
            v = q.popleft()
            for w, methods in self.__adj.get(v, {}).items():
                if w in visited or not methods:
                    continue
                visited.add(w)
                parent[w] = (v, self._pick_method(methods))
                if w == dst:
                    path: list[ComputationMethod[Any, Any]] = []
                    cur = dst
                    while cur != src:
                        pv, m = parent[cur]
                        path.append(m)
                        cur = pv
                    path.reverse()
                    return path
                q.append(w)
        return None


class DistributionTypeRegister:
    """Singleton-like registry that maps :class:`DistributionType` to its graph."""

    _instance: ClassVar[Self | None] = None
    _graphs: dict[DistributionType, ConversionGraph]

    def __new__(cls) -> Self:
        if cls._instance is None:
            self = super().__new__(cls)
            self._graphs = {}
            cls._instance = self
        return cls._instance

    def get(self, distribution_type: DistributionType) -> ConversionGraph:
        """Get (or create) the :class:`ConversionGraph` for a distribution type."""
        graph = self._graphs.get(distribution_type)
        if graph is None:
            graph = ConversionGraph(distribution_type)
            self._graphs[distribution_type] = graph
        if graph.distribution_type != distribution_type:
            raise TypeError(
                f"Inconsistent registry under key ({distribution_type}): "
                f"got ({graph.distribution_type}) inside"
            )
        return graph

    __call__ = get

    @classmethod
    def _reset(cls) -> None:
        cls._instance = None


def _edge(
    source: CharacteristicName, target: CharacteristicName, fitter: Fitter
) -> ComputationMethod[float, float]:
    return ComputationMethod[float, float](target=target, sources=[source], fitter=fitter)


_SHARED_CONVERSIONS = (
    (CharacteristicName.LOGCDF, CharacteristicName.CDF, fit_logcdf_to_cdf),
    (CharacteristicName.CDF, CharacteristicName.LOGCDF, fit_cdf_to_logcdf),
    (CharacteristicName.LOGCCDF, CharacteristicName.CCDF, fit_logccdf_to_ccdf),
    (CharacteristicName.CCDF, CharacteristicName.LOGCCDF, fit_ccdf_to_logccdf),
    (CharacteristicName.LOGCDF, CharacteristicName.LOGCCDF, fit_logcdf_to_logccdf),
    (CharacteristicName.LOGCCDF, CharacteristicName.LOGCDF, fit_logccdf_to_logcdf),
    (CharacteristicName.CDF, CharacteristicName.CCDF, fit_cdf_to_ccdf),
    (CharacteristicName.LOGPDF, CharacteristicName.PDF, fit_logpdf_to_pdf),
    (CharacteristicName.PDF, CharacteristicName.LOGPDF, fit_pdf_to_logpdf),
    (CharacteristicName.CDF, CharacteristicName.PPF, fit_cdf_to_ppf_1C),
)


def _configure(reg: DistributionTypeRegister) -> None:
    """Seed the continuous and discrete univariate graphs with the default conversions."""
    continuous = reg.get(UnivariateContinuous)
    discrete = reg.get(UnivariateDiscrete)

    for source, target, fitter in _SHARED_CONVERSIONS:
        continuous.add_conversion(_edge(source, target, fitter))
        discrete.add_conversion(_edge(source, target, fitter))

    continuous.add_conversion(
        _edge(CharacteristicName.LOGCDF, CharacteristicName.LOGPDF, fit_logcdf_to_logpdf_1C)
    )
    discrete.add_conversion(
        _edge(CharacteristicName.LOGPMF, CharacteristicName.PMF, fit_logpmf_to_pmf)
    )


@lru_cache(maxsize=1)
def distribution_type_register() -> DistributionTypeRegister:
    """Return a cached :class:`DistributionTypeRegister` configured with defaults."""
    reg = DistributionTypeRegister()
    _configure(reg)
    return reg


def _reset_distribution_type_register_for_tests() -> None:
    """Reset the cached distribution type register (test helper)."""
    DistributionTypeRegister._reset()
    distribution_type_register.cache_clear()


__all__ = [
    "DEFAULT_COMPUTATION_KEY",
    "ConversionGraph",
    "DistributionTypeRegister",
    "distribution_type_register",
]
