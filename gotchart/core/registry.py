# gotchart/core/registry.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from gotchart.core.errors import UnresolvedReferenceError

if TYPE_CHECKING:
    from gotchart.core.chart import Chart
    from gotchart.core.events import Event

Guard = Callable[[Optional["Event"]], Any]
Action = Callable[[Optional["Event"]], None]


class Registry:
    """
    Maps the symbolic guard and action names used by a chart to the callables
    supplied by the embedding component. Guards and actions share one
    namespace; both are called with the triggering event (or None for the
    actions run by ``start()`` and ``stop()``).

    Example:
        registry = Registry()

        @registry.register("startHttpRequest")
        def start_http_request(event):
            ...
    """

    def __init__(self, bindings: Optional[Dict[str, Callable]] = None) -> None:
        self._bindings: Dict[str, Callable] = {}
        self._lock = threading.Lock()
        for name, function in (bindings or {}).items():
            self.register(name, function)

    def register(self, name: str, function: Optional[Callable] = None):
        """
        Bind ``name`` to ``function``. Without ``function``, return a
        decorator that registers the decorated callable. Registering an
        existing name replaces the previous binding.

        :raises ValueError: If the name is empty.
        :raises TypeError: If the function is not callable.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Registry names must be non-empty strings.")
        if function is None:

            def decorator(fn: Callable) -> Callable:
                self.register(name, fn)
                return fn

            return decorator
        if not callable(function):
            raise TypeError(f"Binding for '{name}' must be callable, got {type(function).__name__}.")
        with self._lock:
            self._bindings[name] = function
        return function

    def resolve_guard(self, name: str) -> Guard:
        """Return the guard bound to ``name``."""
        return self._resolve(name, "guard")

    def resolve_action(self, name: str) -> Action:
        """Return the action bound to ``name``."""
        return self._resolve(name, "action")

    def _resolve(self, name: str, kind: str) -> Callable:
        with self._lock:
            function = self._bindings.get(name)
        if function is None:
            if kind == "guard":
                raise UnresolvedReferenceError(f"No guard registered under '{name}'.", guards=[name])
            raise UnresolvedReferenceError(f"No action registered under '{name}'.", actions=[name])
        return function

    def verify(self, chart: "Chart") -> None:
        """
        Check that every guard and action the chart references is bound.

        :raises UnresolvedReferenceError: Naming every missing reference.
        """
        with self._lock:
            bound = set(self._bindings)
        missing_guards = sorted(chart.guard_names() - bound)
        missing_actions = sorted(chart.action_names() - bound)
        if missing_guards or missing_actions:
            parts: List[str] = []
            if missing_guards:
                parts.append("guards " + ", ".join(missing_guards))
            if missing_actions:
                parts.append("actions " + ", ".join(missing_actions))
            raise UnresolvedReferenceError(
                "Unresolved references: " + "; ".join(parts), guards=missing_guards, actions=missing_actions
            )

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._bindings)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
