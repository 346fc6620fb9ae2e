"""
PySATL Censored
===============

Composable censored and discretized probability distributions: primary-event
censoring, truncation, interval censoring and their double-interval-censored
composition, built on log-space numerics and scipy base distributions.
"""

__author__ = "PySATL project"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from importlib.metadata import version

from .censoring import *
from .censoring import __all__ as _censoring_all
from .config import *
from .config import __all__ as _config_all
from .distributions import *
from .distributions import __all__ as _distr_all
from .numerics import *
from .numerics import __all__ as _numerics_all
from .types import *
from .types import __all__ as _types_all

__version__ = version("pysatl-censored")
__all__ = [
    "__version__",
    *_censoring_all,
    *_config_all,
    *_distr_all,
    *_numerics_all,
    *_types_all,
]

del _censoring_all
del _config_all
del _distr_all
del _numerics_all
del _types_all
