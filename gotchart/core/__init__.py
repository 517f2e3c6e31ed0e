"""
Core definition model: states, transitions, events, the chart that validates
and indexes them, the guard/action registry and tracing hooks.
"""

from .errors import (
    ConfigurationError,
    GotchartError,
    LifecycleError,
    StabilizationError,
    UnresolvedReferenceError,
)
from .events import Event
from .transitions import Transition
from .states import DEEP, SHALLOW, State
from .validations import Validator
from .chart import Chart
from .registry import Registry
from .hooks import HookManager, HookProtocol

__all__ = [
    "GotchartError",
    "ConfigurationError",
    "UnresolvedReferenceError",
    "LifecycleError",
    "StabilizationError",
    "Event",
    "Transition",
    "State",
    "SHALLOW",
    "DEEP",
    "Validator",
    "Chart",
    "Registry",
    "HookManager",
    "HookProtocol",
]
