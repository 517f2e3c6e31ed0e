# gotchart/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gotchart.core.events import Event


@runtime_checkable
class HookProtocol(Protocol):
    """
    Tracing hook called synchronously while the interpreter runs. A hook may
    implement any subset of these methods; missing ones are skipped.
    """

    def on_enter(self, state_id: str, event: Optional["Event"]) -> None: ...

    def on_exit(self, state_id: str, event: Optional["Event"]) -> None: ...

    def on_transition(self, source_id: str, target_id: Optional[str], event: Optional["Event"]) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class HookManager:
    """
    Manages the registration and execution of hooks that listen to
    interpreter lifecycle events (state entered, state exited, transition
    taken, error raised). Users can attach logging, tracing or test probes
    without altering chart logic.
    """

    def __init__(self, hooks: Optional[List[object]] = None) -> None:
        self._hooks: List[object] = list(hooks or [])

    def register_hook(self, hook: object) -> None:
        """
        Add a new hook to the manager's list of hooks.

        :param hook: An object implementing some HookProtocol methods.
        """
        self._hooks.append(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    def execute_on_enter(self, state_id: str, event: Optional["Event"]) -> None:
        for hook in self._hooks:
            if hasattr(hook, "on_enter"):
                hook.on_enter(state_id, event)

    def execute_on_exit(self, state_id: str, event: Optional["Event"]) -> None:
        for hook in self._hooks:
            if hasattr(hook, "on_exit"):
                hook.on_exit(state_id, event)

    def execute_on_transition(self, source_id: str, target_id: Optional[str], event: Optional["Event"]) -> None:
        for hook in self._hooks:
            if hasattr(hook, "on_transition"):
                hook.on_transition(source_id, target_id, event)

    def execute_on_error(self, error: Exception) -> None:
        for hook in self._hooks:
            if hasattr(hook, "on_error"):
                hook.on_error(error)
