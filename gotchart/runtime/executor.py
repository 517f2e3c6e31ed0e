# gotchart/runtime/executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import threading
from typing import Optional

from gotchart.runtime.interpreter import Interpreter, InterpreterStatus

logger = logging.getLogger(__name__)


class Executor:
    """
    Runs the event processing loop for an interpreter on a dedicated thread,
    so producers on other threads only ever enqueue. Intended for
    interpreters created with ``synchronous=False``.
    """

    def __init__(self, interpreter: Interpreter, poll_interval: float = 0.1) -> None:
        """
        Initialize with an interpreter.

        :param interpreter: Interpreter whose queue this executor drains.
        :param poll_interval: Longest time the loop waits before re-checking
            whether it was asked to stop.
        """
        self.interpreter = interpreter
        self.poll_interval = poll_interval
        self.error: Optional[BaseException] = None
        self._running = False
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def run(self) -> None:
        """
        Start the blocking loop that processes events until ``stop()`` is
        called, the interpreter stops, or processing raises. The interpreter
        is started first if it has not been.
        """
        with self._lock:
            self._running = True

        try:
            if self.interpreter.status is InterpreterStatus.NOT_STARTED:
                self.interpreter.start()
            while self.running and self.interpreter.status is InterpreterStatus.RUNNING:
                if not self.interpreter.run_pending():
                    self.interpreter.wait_for_events(self.poll_interval)
        except Exception as error:
            self.error = error
            logger.exception(f"Executor loop stopped by error: {error}")
        finally:
            with self._lock:
                self._running = False

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread and return the thread."""
        self._thread = threading.Thread(target=self.run, name="gotchart-executor", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """
        Signal the event loop to stop after finishing the current event.
        """
        with self._lock:
            self._running = False
        self.interpreter.queue.wake()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
