# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading

import pytest

from gotchart.core.chart import Chart
from gotchart.core.registry import Registry
from gotchart.core.states import State
from gotchart.core.transitions import Transition


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "stress: mark test as a stress test")
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class Recorder:
    """
    Registry wrapper that binds every action a chart references to a function
    recording its name, and every guard to a configurable boolean.
    """

    def __init__(self, chart, guards=None):
        self.calls = []
        self.events = []
        self.guards = dict(guards or {})
        self.registry = Registry()
        for name in chart.action_names():
            self.registry.register(name, self._action(name))
        for name in chart.guard_names():
            self.registry.register(name, self._guard(name))

    def _action(self, name):
        def action(event):
            self.calls.append(name)
            self.events.append(event)

        return action

    def _guard(self, name):
        def guard(event):
            return self.guards.get(name, True)

        return guard

    def clear(self):
        del self.calls[:]
        del self.events[:]


class TraceHook:
    """Hook appending ENTER/EXIT/TRANSITION/ERROR records to a list."""

    def __init__(self):
        self.trace = []

    def on_enter(self, state_id, event):
        self.trace.append(f"ENTER:{state_id}")

    def on_exit(self, state_id, event):
        self.trace.append(f"EXIT:{state_id}")

    def on_transition(self, source_id, target_id, event):
        self.trace.append(f"TRANSITION:{source_id}->{target_id}")

    def on_error(self, error):
        self.trace.append(f"ERROR:{type(error).__name__}")


@pytest.fixture
def recorder_factory():
    """Returns a factory building a Recorder for a chart."""

    def _factory(chart, guards=None):
        return Recorder(chart, guards)

    return _factory


@pytest.fixture
def trace_hook():
    return TraceHook()


@pytest.fixture
def search_chart():
    """
    The search UI chart: initial -> searching -> displaying_results <-> zoomed_in.
    There is deliberately no transition from displaying_results back to searching.
    """
    return Chart(
        states=[
            State("initial", transitions=[Transition("search", target="searching")]),
            State(
                "searching",
                entry_actions=["startHttpRequest"],
                exit_actions=["cancelHttpRequest"],
                transitions=[Transition("results", target="displaying_results")],
            ),
            State(
                "displaying_results",
                entry_actions=["showResults"],
                transitions=[Transition("zoom", target="zoomed_in")],
            ),
            State(
                "zoomed_in",
                entry_actions=["zoomIn"],
                exit_actions=["zoomOut"],
                transitions=[Transition("zoom_out", target="displaying_results")],
            ),
        ],
        initial="initial",
    )


@pytest.fixture
def nested_chart():
    """
    Two sibling branches with nested states and entry/exit actions named after
    the state they belong to:

        a (initial a1)          b (initial b1)
          a1 (initial a11)        b1
            a11                   b2
          a2
    """

    def actions(name):
        return {"entry_actions": [f"enter_{name}"], "exit_actions": [f"exit_{name}"]}

    return Chart(
        states=[
            State(
                "a",
                initial="a1",
                states=[
                    State(
                        "a1",
                        initial="a11",
                        states=[State("a11", transitions=[Transition("go_b2", target="b2")], **actions("a11"))],
                        **actions("a1"),
                    ),
                    State("a2", **actions("a2")),
                ],
                transitions=[Transition("go_a2", target="a2")],
                **actions("a"),
            ),
            State(
                "b",
                initial="b1",
                states=[State("b1", **actions("b1")), State("b2", **actions("b2"))],
                transitions=[Transition("go_a", target="a")],
                **actions("b"),
            ),
        ],
        initial="a",
    )


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Give executor and timer threads started by a test a chance to finish
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and thread.daemon:
            thread.join(timeout=1.0)
