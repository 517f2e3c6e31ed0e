# gotchart/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any


class Event:
    """
    Represents a named occurrence delivered to the interpreter. Events cause
    the interpreter to evaluate transitions and possibly change states.
    """

    __slots__ = ("_name", "_payload")

    def __init__(self, name: str, payload: Any = None) -> None:
        """
        Create an event identified by a name, with an optional opaque payload.

        :param name: A non-empty string identifying this event.
        :param payload: Optional data handed through to guards and actions.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Event must have a non-empty string name.")
        self._name = name
        self._payload = payload

    @property
    def name(self) -> str:
        """The name of the event."""
        return self._name

    @property
    def payload(self) -> Any:
        """Optional data attached by the sender."""
        return self._payload

    def __repr__(self) -> str:
        if self._payload is None:
            return f"Event({self._name!r})"
        return f"Event({self._name!r}, payload={self._payload!r})"
