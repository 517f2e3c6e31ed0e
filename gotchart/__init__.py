"""gotchart: statechart interpreter with run-to-completion semantics

Charts are described declaratively with :class:`State` and
:class:`Transition`, validated once by :class:`Chart`, and executed by an
:class:`Interpreter` that calls the guards and actions bound by name in a
:class:`Registry`.

Responsibilities:
    - Immutable, validated chart definitions (nested and parallel states,
      history, eventless and targetless transitions)
    - Eager verification of guard/action bindings
    - Run-to-completion event processing with bounded eventless cascades
    - Thread-safe event queueing and delayed events
    - Reporting of the active configuration by polling or subscription

Logging:
    Every module logs through ``logging.getLogger(__name__)``; the package
    installs only a ``NullHandler``.
"""

import logging

from .core import (
    DEEP,
    SHALLOW,
    Chart,
    ConfigurationError,
    Event,
    GotchartError,
    HookManager,
    HookProtocol,
    LifecycleError,
    Registry,
    StabilizationError,
    State,
    Transition,
    UnresolvedReferenceError,
    Validator,
)
from .runtime import (
    DEFAULT_MAX_MICROSTEPS,
    AsyncExecutor,
    ConfigurationObserver,
    EventQueue,
    Executor,
    Interpreter,
    InterpreterStatus,
    TimeoutScheduler,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "State",
    "Transition",
    "Event",
    "Chart",
    "Validator",
    "Registry",
    "HookManager",
    "HookProtocol",
    "SHALLOW",
    "DEEP",
    "Interpreter",
    "InterpreterStatus",
    "DEFAULT_MAX_MICROSTEPS",
    "EventQueue",
    "ConfigurationObserver",
    "TimeoutScheduler",
    "Executor",
    "AsyncExecutor",
    "GotchartError",
    "ConfigurationError",
    "UnresolvedReferenceError",
    "LifecycleError",
    "StabilizationError",
]
