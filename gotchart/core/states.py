# gotchart/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from gotchart.core.transitions import Transition

SHALLOW = "shallow"
DEEP = "deep"
HISTORY_KINDS = (SHALLOW, DEEP)


def _as_tuple(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, State, Transition)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class State:
    """
    Declarative description of one state in a chart. A state with children is
    compound (exactly one child active at a time, starting from ``initial``)
    or, if ``parallel`` is set, a set of orthogonal regions that are all active
    together.

    Actions and guards are referenced by name and resolved against a
    :class:`~gotchart.core.registry.Registry` when the interpreter starts.
    """

    name: str
    states: Tuple["State", ...] = ()
    initial: Optional[str] = None
    parallel: bool = False
    history: Optional[str] = None
    entry_actions: Tuple[str, ...] = ()
    exit_actions: Tuple[str, ...] = ()
    transitions: Tuple[Transition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", _as_tuple(self.states))
        object.__setattr__(self, "entry_actions", _as_tuple(self.entry_actions))
        object.__setattr__(self, "exit_actions", _as_tuple(self.exit_actions))
        object.__setattr__(self, "transitions", _as_tuple(self.transitions))

    @property
    def atomic(self) -> bool:
        """True if this state has no children."""
        return not self.states

    @property
    def compound(self) -> bool:
        """True if this state has children and is not parallel."""
        return bool(self.states) and not self.parallel

    def child(self, name: str) -> Optional["State"]:
        """Return the direct child with the given name, if any."""
        for state in self.states:
            if state.name == name:
                return state
        return None
