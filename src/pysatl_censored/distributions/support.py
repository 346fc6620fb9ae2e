"""
Support Descriptors
===================

- :class:`ContinuousSupport` -- an interval of the real line.
- :class:`ExplicitTableDiscreteSupport` -- a finite sorted table of points,
  used for interval censoring on arbitrary breakpoints.
- :class:`RegularGridSupport` -- the points ``k * width`` for integer ``k`` in
  an optional range, used for interval censoring on a regular grid.

Both discrete supports answer :meth:`DiscreteSupport.floor`, the greatest
support point not exceeding ``x``, which is the bin lookup of interval
censoring.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass
from math import floor, inf, isnan
from typing import TYPE_CHECKING, Protocol, cast, overload, runtime_checkable

import numpy as np

from pysatl_censored.types import BoolArray, Interval1D, Number, NumericArray

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_GRID_ATOL = 1e-9


@runtime_checkable
class Support(Protocol):
    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...


class ContinuousSupport(Interval1D, Support): ...


@runtime_checkable
class DiscreteSupport(Support, Protocol):
    def iter_points(self) -> Iterator[float]: ...

    def floor(self, x: float) -> float | None: ...

    def first(self) -> float | None: ...

    def last(self) -> float | None: ...


class ExplicitTableDiscreteSupport(DiscreteSupport):
    """
    Finite table of support points.

    Parameters
    ----------
    points : Iterable[Number]
        Support points; sorted and deduplicated on construction.
    assume_sorted : bool, default False
        Skip sorting when the caller guarantees ascending order.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[Number], assume_sorted: bool = False) -> None:
        arr = np.array(points, dtype=np.float64)

        if arr.size == 0:
            raise ValueError("Points must be non-empty")

        if not assume_sorted:
            arr.sort()

        unique_mask = np.empty(arr.size, dtype=bool)
        unique_mask[0] = True
        unique_mask[1:] = arr[1:] != arr[:-1]

        self._points = arr[unique_mask]

    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...

    def contains(self, x: Number | NumericArray) -> bool | BoolArray:
        arr = np.asarray(x, dtype=np.float64)
        idx = np.searchsorted(self._points, arr, side="left")

        size = self._points.size
        in_bounds = idx < size

        idx_clipped = np.minimum(idx, size - 1)
        result = in_bounds & (self._points[idx_clipped] == arr)

        if np.ndim(arr) == 0:
            return bool(result)
        return cast(BoolArray, result)

    def __contains__(self, x: object) -> bool:
        return bool(self.contains(cast(Number, x)))

    def iter_points(self) -> Iterator[float]:
        return (float(p) for p in self._points)

    def floor(self, x: float) -> float | None:
        """Greatest point ``<= x``, or ``None`` below the first point."""
        if isnan(x):
            return None
        idx = int(np.searchsorted(self._points, x, side="right"))
        if idx == 0:
            return None
        return float(self._points[idx - 1])

    def index(self, x: float) -> int | None:
        """Position of :meth:`floor` in the table."""
        if isnan(x):
            return None
        idx = int(np.searchsorted(self._points, x, side="right"))
        return None if idx == 0 else idx - 1

    def first(self) -> float:
        return float(self._points[0])

    def last(self) -> float:
        return float(self._points[-1])

    def next(self, current: float) -> float | None:
        idx = int(np.searchsorted(self._points, current, side="right"))
        if idx == self._points.size:
            return None
        return float(self._points[idx])

    @property
    def points(self) -> NumericArray:
        return cast(NumericArray, self._points.copy())

    def __len__(self) -> int:
        return int(self._points.size)

    __iter__ = iter_points


@dataclass(slots=True, frozen=True)
class RegularGridSupport(DiscreteSupport):
    """
    Points ``k * width`` for integer ``k`` with ``min_k <= k <= max_k``.

    Parameters
    ----------
    width : float
        Grid spacing (positive).
    min_k, max_k : int or None
        Optional index bounds; ``None`` leaves that side unbounded.
    """

    width: float
    min_k: int | None = None
    max_k: int | None = None

    def __post_init__(self) -> None:
        if not self.width > 0.0:
            raise ValueError("width must be positive.")

    def _index(self, x: float) -> int:
        return floor(x / self.width)

    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...

    def contains(self, x: Number | NumericArray) -> bool | BoolArray:
        xf = np.asarray(x, dtype=np.float64)
        with np.errstate(invalid="ignore"):
            q = xf / self.width
            k = np.round(q)
            mask = np.isfinite(q) & (np.abs(q - k) <= _GRID_ATOL)
            if self.min_k is not None:
                mask &= k >= self.min_k
            if self.max_k is not None:
                mask &= k <= self.max_k

        if np.ndim(xf) == 0:
            return bool(mask)
        return cast(BoolArray, mask)

    def __contains__(self, x: object) -> bool:
        return bool(self.contains(cast(Number, x)))

    def floor(self, x: float) -> float | None:
        """``floor(x / width) * width`` clipped to the index range."""
        if isnan(x):
            return None
        if x == inf:
            return self.last()
        if x == -inf:
            return None
        k = self._index(x)
        if self.min_k is not None and k < self.min_k:
            return None
        if self.max_k is not None and k > self.max_k:
            k = self.max_k
        return k * self.width

    def first(self) -> float | None:
        return None if self.min_k is None else self.min_k * self.width

    def last(self) -> float | None:
        return None if self.max_k is None else self.max_k * self.width

    def iter_points(self) -> Iterator[float]:
        if self.min_k is None:
            raise RuntimeError(
                "Cannot iterate points of a left-unbounded RegularGridSupport. "
                "Provide min_k to enable enumeration."
            )

        def _gen() -> Iterator[float]:
            k = cast(int, self.min_k)
            while self.max_k is None or k <= self.max_k:
                yield k * self.width
                k += 1

        return _gen()

    def next(self, current: float) -> float | None:
        k = self._index(current) + 1
        if self.max_k is not None and k > self.max_k:
            return None
        if self.min_k is not None and k < self.min_k:
            k = self.min_k
        return k * self.width

    __iter__ = iter_points


__all__ = [
    "Support",
    "ContinuousSupport",
    "DiscreteSupport",
    "ExplicitTableDiscreteSupport",
    "RegularGridSupport",
]
