from __future__ import annotations

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Generator
from typing import Any

import pytest

from pysatl_censored.censoring.analytical import _reset_analytical_solution_register_for_tests
from pysatl_censored.distributions.registry import _reset_distribution_type_register_for_tests

pytest.importorskip("scipy")


@pytest.fixture(autouse=True)
def _fresh_registries() -> Generator[None, Any, None]:
    _reset_distribution_type_register_for_tests()
    _reset_analytical_solution_register_for_tests()
    yield
