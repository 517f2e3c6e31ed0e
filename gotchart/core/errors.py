# gotchart/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details


class GotchartError(Exception):
    """
    Base exception class for errors within the statechart library.
    """


class ConfigurationError(GotchartError):
    """
    Raised when a chart definition is invalid: a transition target that does
    not exist, a compound state without an initial child, duplicate sibling
    names and similar structural problems. Always raised at construction time.
    """

    def __init__(self, message: str, problems=None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])


class UnresolvedReferenceError(GotchartError):
    """
    Raised when a guard or action name referenced by a chart has no binding
    in the registry.
    """

    def __init__(self, message: str, guards=(), actions=()) -> None:
        super().__init__(message)
        self.guards = tuple(guards)
        self.actions = tuple(actions)


class LifecycleError(GotchartError):
    """
    Raised when an interpreter operation is called in the wrong lifecycle
    phase, e.g. starting twice or sending after stop.
    """


class StabilizationError(GotchartError):
    """
    Raised when a cascade of eventless transitions does not settle within the
    configured number of microsteps.
    """
