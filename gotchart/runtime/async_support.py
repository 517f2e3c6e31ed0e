# gotchart/runtime/async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio

from gotchart.runtime.interpreter import Interpreter, InterpreterStatus


class AsyncExecutor:
    """
    Drains an interpreter's queue from an asyncio task. Events may be sent
    from coroutines or from other threads; each one is still processed to
    completion before the next, and the loop yields to other tasks while idle.
    """

    def __init__(self, interpreter: Interpreter, poll_interval: float = 0.01) -> None:
        """
        :param interpreter: Interpreter whose queue this executor drains,
            normally created with ``synchronous=False``.
        :param poll_interval: Seconds to sleep when no event is queued.
        """
        self.interpreter = interpreter
        self.poll_interval = poll_interval
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Process events until ``stop()`` is called or the interpreter stops."""
        self._running = True
        try:
            if self.interpreter.status is InterpreterStatus.NOT_STARTED:
                self.interpreter.start()
            while self._running and self.interpreter.status is InterpreterStatus.RUNNING:
                if not self.interpreter.run_pending():
                    await asyncio.sleep(self.poll_interval)
        finally:
            self._running = False

    def stop(self) -> None:
        """Ask the loop to exit after the current event."""
        self._running = False
