# gotchart/runtime/event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

from gotchart.core.events import Event


class EventQueue:
    """
    Thread-safe FIFO of events waiting for the interpreter. Any number of
    producers may enqueue concurrently; the interpreter is the only consumer.
    """

    def __init__(self) -> None:
        self._queue: Deque[Event] = deque()
        self._condition = threading.Condition(threading.Lock())

    def enqueue(self, event: Event) -> None:
        """
        Add an event to the back of the queue and wake one waiting consumer.

        :param event: The event to enqueue.
        """
        with self._condition:
            self._queue.append(event)
            self._condition.notify()

    def dequeue(self, timeout: Optional[float] = None) -> Optional[Event]:
        """
        Remove and return the next event.

        :param timeout: Seconds to wait for an event; None returns at once.
        :return: The event, or None if the queue stayed empty.
        """
        with self._condition:
            if not self._queue and timeout is not None:
                self._condition.wait_for(lambda: self._queue, timeout)
            if self._queue:
                return self._queue.popleft()
            return None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the queue holds an event, ``wake`` is called or the
        timeout elapses.

        :return: True if an event is waiting.
        """
        with self._condition:
            if not self._queue:
                self._condition.wait(timeout)
            return bool(self._queue)

    def wake(self) -> None:
        """Wake every waiting consumer without adding an event."""
        with self._condition:
            self._condition.notify_all()

    def clear(self) -> int:
        """
        Remove all events from the queue.

        :return: The number of events dropped.
        """
        with self._condition:
            dropped = len(self._queue)
            self._queue.clear()
            return dropped

    def is_empty(self) -> bool:
        with self._condition:
            return not self._queue

    def __len__(self) -> int:
        with self._condition:
            return len(self._queue)
