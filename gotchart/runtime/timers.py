# gotchart/runtime/timers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List

from gotchart.core.errors import LifecycleError

logger = logging.getLogger(__name__)

Sender = Callable[[str, Any], None]


class TimeoutScheduler:
    """
    Schedules delayed events. Each scheduled event runs on its own timer
    thread and is handed to ``sender`` (normally ``Interpreter.send``) when its
    delay elapses, unless it was cancelled first.
    """

    def __init__(self, sender: Sender) -> None:
        self._sender = sender
        self._lock = threading.Lock()
        self._timers: Dict[int, threading.Timer] = {}
        self._handles = itertools.count(1)

    def schedule(self, delay: float, name: str, payload: Any = None) -> int:
        """
        Send ``name`` after ``delay`` seconds.

        :return: A handle that can be passed to :meth:`cancel`.
        :raises ValueError: If the delay is negative.
        """
        if delay < 0:
            raise ValueError("Delay must not be negative.")
        with self._lock:
            handle = next(self._handles)
            timer = threading.Timer(delay, self._fire, args=(handle, name, payload))
            timer.daemon = True
            self._timers[handle] = timer
        timer.start()
        logger.debug(f"Scheduled '{name}' in {delay:.3f}s (handle {handle})")
        return handle

    def cancel(self, handle: int) -> bool:
        """
        Cancel a pending delayed event.

        :return: True if the event was still pending.
        """
        with self._lock:
            timer = self._timers.pop(handle, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending delayed event and return how many there were."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        return len(timers)

    def pending(self) -> List[int]:
        """Handles of the delayed events that have not fired yet."""
        with self._lock:
            return sorted(self._timers)

    def _fire(self, handle: int, name: str, payload: Any) -> None:
        with self._lock:
            if self._timers.pop(handle, None) is None:
                return
        try:
            self._sender(name, payload)
        except LifecycleError:
            logger.warning(f"Dropped delayed event '{name}' (handle {handle}): interpreter is not running")
        except Exception as error:
            logger.exception(f"Delayed event '{name}' (handle {handle}) failed: {error}")
