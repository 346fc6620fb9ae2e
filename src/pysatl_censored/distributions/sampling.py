"""
Sample containers returned by :meth:`Distribution.sample`.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import Any

    import numpy.typing as npt


class Sample(Protocol):
    """
    Protocol for sample containers.

    Attributes
    ----------
    array : numpy.ndarray
        Array representation of the samples, shape ``(n, d)``.
    values : numpy.ndarray
        Flat view of a univariate sample, shape ``(n,)``.
    """

    def __len__(self) -> int: ...
    @property
    def array(self) -> npt.NDArray[np.floating[Any]]: ...
    @property
    def values(self) -> npt.NDArray[np.floating[Any]]: ...
    @property
    def shape(self) -> tuple[int, ...]: ...


class ArraySample:
    """
    Array-backed sample container of shape ``(n_samples, n_dimensions)``.

    Parameters
    ----------
    data : array_like
        Either a 2D array of shape ``(n, d)`` or a 1D array of ``n`` univariate
        draws, which is stored as ``(n, 1)``.

    Raises
    ------
    ValueError
        If data has more than two dimensions.
    """

    __slots__ = ("data", "dimension")

    dimension: int
    data: npt.NDArray[np.floating[Any]]

    def __init__(self, data: npt.ArrayLike) -> None:
        arr = np.asarray(data, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        if arr.ndim != 2:
            raise ValueError("ArraySample expects a 1D array or a 2D array of shape (n, d).")
        self.data = arr
        self.dimension = int(arr.shape[1])

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def __iter__(self) -> Iterator[npt.NDArray[np.floating[Any]]]:
        yield from self.data

    @property
    def array(self) -> npt.NDArray[np.floating[Any]]:
        """Return the backing array."""
        return self.data

    @property
    def values(self) -> npt.NDArray[np.floating[Any]]:
        """
        Return the draws of a univariate sample as a 1D array.

        Raises
        ------
        ValueError
            If the sample is multivariate.
        """
        if self.dimension != 1:
            raise ValueError("values is only defined for univariate samples.")
        return self.data[:, 0]

    @property
    def shape(self) -> tuple[int, ...]:
        n, d = self.data.shape
        return int(n), int(d)

    def __repr__(self) -> str:
        return f"ArraySample(n={len(self)}, dimension={self.dimension})"


__all__ = ["Sample", "ArraySample"]
