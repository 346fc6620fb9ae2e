"""
Construction-time constraints.

Distributions declare their invariants as predicate methods decorated with
:func:`constraint`; :func:`validate_constraints` evaluates them (including the
ones inherited from base classes) and raises :class:`ValueError` on the first
failure. Invalid arguments therefore fail when the object is built, never
later during evaluation.
"""

from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass
from functools import wraps
from inspect import isfunction
from typing import TYPE_CHECKING, ParamSpec

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from typing import Any


@dataclass(slots=True, frozen=True)
class ParameterConstraint:
    """
    Constraint on the parameters of a distribution.

    Parameters
    ----------
    description : str
        Human-readable description of the constraint.
    check : Callable[[Any], bool]
        Predicate that returns True if the constraint is satisfied.
    """

    description: str
    check: Callable[[Any], bool]

    def enforce(self, subject: Any) -> None:
        """Raise :class:`ValueError` if ``subject`` violates the constraint."""
        if not self.check(subject):
            raise ValueError(f'Constraint "{self.description}" does not hold')


P = ParamSpec("P")


def constraint(description: str) -> Callable[[Callable[P, bool]], Callable[P, bool]]:
    """
    Decorator to mark an instance method as a construction constraint.

    Parameters
    ----------
    description : str
        Human-readable description of the constraint.

    Returns
    -------
    Callable[[Callable[P, bool]], Callable[P, bool]]
        Decorator that marks the function as a constraint.
    """

    def decorator(func: Callable[P, bool]) -> Callable[P, bool]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> bool:
            return func(*args, **kwargs)

        setattr(wrapper, "__is_constraint", True)
        setattr(wrapper, "__constraint_description", description)
        return wrapper

    return decorator


def collect_constraints(cls: type) -> list[ParameterConstraint]:
    """
    Collect ``@constraint`` methods of ``cls`` and its bases.

    An override in a subclass replaces the inherited constraint of the same
    name; overriding without the decorator removes it.

    Raises
    ------
    TypeError
        If a constraint is declared as a static or class method.
    """
    constraints: list[ParameterConstraint] = []
    seen: set[str] = set()
    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, staticmethod | classmethod):
                if getattr(attr.__func__, "__is_constraint", False):
                    raise TypeError(f"@constraint '{name}' must be an instance method")
                continue
            if isfunction(attr) and getattr(attr, "__is_constraint", False):
                desc = getattr(attr, "__constraint_description", name)
                constraints.append(ParameterConstraint(description=desc, check=attr))
    return constraints


def validate_constraints(subject: Any) -> None:
    """
    Validate every constraint declared on the class of ``subject``.

    Raises
    ------
    ValueError
        If any constraint is not satisfied.
    """
    for item in collect_constraints(type(subject)):
        item.enforce(subject)


def enforce_all(constraints: Iterable[ParameterConstraint], subject: Any) -> None:
    """Validate an explicit list of constraints against ``subject``."""
    for item in constraints:
        item.enforce(subject)


__all__ = [
    "ParameterConstraint",
    "constraint",
    "collect_constraints",
    "validate_constraints",
    "enforce_all",
]
