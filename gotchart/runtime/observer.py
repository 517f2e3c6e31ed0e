# gotchart/runtime/observer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from typing import Callable, FrozenSet, List

Listener = Callable[[FrozenSet[str]], None]


class ConfigurationObserver:
    """
    Read-only projection of an interpreter's active configuration.

    The interpreter publishes a new configuration only once it is stable (no
    eventless transition left to take), so both polling ``current`` and
    subscribing see the same consistent snapshots and never a configuration
    from the middle of a cascade.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: FrozenSet[str] = frozenset()
        self._listeners: List[Listener] = []

    @property
    def current(self) -> FrozenSet[str]:
        """The last published configuration."""
        with self._lock:
            return self._current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call ``listener`` with every new configuration.

        :return: A callable that removes the subscription.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, configuration: FrozenSet[str]) -> bool:
        """
        Replace the current configuration and notify listeners if it
        changed. Listener errors propagate to the caller.

        :return: True if the configuration changed.
        """
        with self._lock:
            changed = configuration != self._current
            self._current = configuration
            listeners = list(self._listeners)
        if changed:
            for listener in listeners:
                listener(configuration)
        return changed
