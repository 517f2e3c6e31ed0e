"""
Runtime package: the interpreter, its event queue, configuration observer,
delayed events and the thread/asyncio executors that drive it.
"""

from .event_queue import EventQueue
from .observer import ConfigurationObserver
from .timers import TimeoutScheduler
from .interpreter import DEFAULT_MAX_MICROSTEPS, Interpreter, InterpreterStatus
from .executor import Executor
from .async_support import AsyncExecutor

__all__ = [
    "EventQueue",
    "ConfigurationObserver",
    "TimeoutScheduler",
    "Interpreter",
    "InterpreterStatus",
    "DEFAULT_MAX_MICROSTEPS",
    "Executor",
    "AsyncExecutor",
]
