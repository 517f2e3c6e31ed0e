# tests/unit/test_executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
import time

import pytest

from gotchart.core.chart import Chart
from gotchart.core.errors import UnresolvedReferenceError
from gotchart.core.registry import Registry
from gotchart.core.states import State
from gotchart.core.transitions import Transition
from gotchart.runtime.executor import Executor
from gotchart.runtime.interpreter import Interpreter, InterpreterStatus


@pytest.fixture
def counter_chart():
    return Chart(
        states=[
            State(
                "counting",
                transitions=[Transition("tick", actions=["count"]), Transition("fail", actions=["explode"])],
            )
        ],
        initial="counting",
    )


@pytest.fixture
def ticks():
    return []


@pytest.fixture
def counter_registry(ticks):
    registry = Registry()

    @registry.register("count")
    def count(event):
        ticks.append(threading.current_thread().name)

    @registry.register("explode")
    def explode(event):
        raise RuntimeError("action failed")

    return registry


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_executor_starts_interpreter_and_processes_on_its_thread(counter_chart, counter_registry, ticks):
    interpreter = Interpreter(counter_chart, counter_registry, synchronous=False)
    executor = Executor(interpreter, poll_interval=0.01)
    executor.start()
    assert wait_until(lambda: interpreter.status is InterpreterStatus.RUNNING)

    for _ in range(5):
        interpreter.send("tick")
    assert wait_until(lambda: len(ticks) == 5)
    assert set(ticks) == {"gotchart-executor"}

    executor.stop()
    executor.join(timeout=2.0)
    assert not executor.running
    assert executor.error is None


def test_events_from_many_producers_are_all_processed(counter_chart, counter_registry, ticks):
    interpreter = Interpreter(counter_chart, counter_registry, synchronous=False)
    interpreter.start()
    executor = Executor(interpreter, poll_interval=0.01)
    executor.start()

    def produce():
        for _ in range(50):
            interpreter.send("tick")

    producers = [threading.Thread(target=produce) for _ in range(4)]
    for producer in producers:
        producer.start()
    for producer in producers:
        producer.join()

    assert wait_until(lambda: len(ticks) == 200)
    executor.stop()
    executor.join(timeout=2.0)


def test_stopping_interpreter_ends_executor_loop(counter_chart, counter_registry):
    interpreter = Interpreter(counter_chart, counter_registry, synchronous=False)
    executor = Executor(interpreter, poll_interval=0.5)
    thread = executor.start()
    assert wait_until(lambda: interpreter.status is InterpreterStatus.RUNNING)
    interpreter.stop()
    thread.join(timeout=2.0)
    assert not thread.is_alive()
    assert executor.error is None


def test_processing_error_is_recorded(counter_chart, counter_registry):
    interpreter = Interpreter(counter_chart, counter_registry, synchronous=False)
    interpreter.start()
    executor = Executor(interpreter, poll_interval=0.01)
    interpreter.send("fail")
    executor.start()
    executor.join(timeout=2.0)
    assert isinstance(executor.error, RuntimeError)
    assert not executor.running
    assert interpreter.current_states() == {"counting"}


def test_run_blocks_until_stopped(counter_chart, counter_registry):
    interpreter = Interpreter(counter_chart, counter_registry, synchronous=False)
    executor = Executor(interpreter, poll_interval=0.01)
    timer = threading.Timer(0.1, executor.stop)
    timer.start()
    executor.run()
    timer.join()
    assert not executor.running
    assert interpreter.status is InterpreterStatus.RUNNING


def test_failed_start_is_recorded(counter_chart):
    interpreter = Interpreter(counter_chart, Registry({"count": lambda event: None}), synchronous=False)
    executor = Executor(interpreter, poll_interval=0.01)
    thread = executor.start()
    thread.join(timeout=2.0)
    assert not thread.is_alive()
    assert not executor.running
    assert isinstance(executor.error, UnresolvedReferenceError)
    assert executor.error.actions == ("explode",)
    assert interpreter.status is InterpreterStatus.NOT_STARTED
