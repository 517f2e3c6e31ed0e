# gotchart/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

WILDCARD = "*"
PREFIX_SUFFIX = ".*"


@dataclass(frozen=True)
class Transition:
    """
    Defines a possible path out of the state that declares it. A transition is
    triggered by an event descriptor (or by nothing, for eventless
    transitions), optionally guarded by a named predicate, and runs a list of
    named actions between the exits and the entries it causes.

    A transition without a target is internal: it runs its actions and leaves
    the active configuration unchanged.
    """

    event: Optional[str] = None
    target: Optional[str] = None
    guard: Optional[str] = None
    actions: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.actions, str):
            object.__setattr__(self, "actions", (self.actions,))
        else:
            object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def eventless(self) -> bool:
        """True if this transition fires without an event."""
        return self.event is None

    @property
    def targetless(self) -> bool:
        """True if this transition does not change the configuration."""
        return self.target is None

    def matches(self, event_name: Optional[str]) -> bool:
        """
        Check whether this transition is triggered by the given event name.
        Eventless transitions only match ``None``.

        :param event_name: Name of the current event, or None for the
            eventless pass.
        """
        if self.event is None or event_name is None:
            return self.event is None and event_name is None
        return descriptor_matches(self.event, event_name)


def descriptor_matches(descriptor: str, event_name: str) -> bool:
    """
    Match an event descriptor against an event name. Names are opaque:
    ``"*"`` matches any name, ``"error.*"`` matches any name that extends
    ``"error"`` by dotted tokens, and any other descriptor matches only the
    identical name.
    """
    if descriptor == WILDCARD:
        return True
    if descriptor.endswith(PREFIX_SUFFIX):
        prefix = descriptor[:-1]
        return len(event_name) > len(prefix) and event_name.startswith(prefix)
    return event_name == descriptor
