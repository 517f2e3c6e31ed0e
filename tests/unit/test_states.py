import dataclasses

import pytest

from gotchart.core.states import DEEP, HISTORY_KINDS, SHALLOW, State
from gotchart.core.transitions import Transition


def test_atomic_state_defaults():
    state = State("idle")
    assert state.atomic
    assert not state.compound
    assert state.states == ()
    assert state.initial is None
    assert state.history is None


def test_lists_are_stored_as_tuples():
    state = State(
        "s",
        states=[State("a")],
        initial="a",
        entry_actions=["open"],
        exit_actions="close",
        transitions=Transition("go", target="a"),
    )
    assert state.states == (State("a"),)
    assert state.entry_actions == ("open",)
    assert state.exit_actions == ("close",)
    assert state.transitions == (Transition("go", target="a"),)


def test_compound_and_parallel():
    compound = State("c", states=[State("a"), State("b")], initial="a")
    parallel = State("p", states=[State("a"), State("b")], parallel=True)
    assert compound.compound and not compound.atomic
    assert not parallel.compound and not parallel.atomic


def test_child_lookup():
    state = State("s", states=[State("a"), State("b")], initial="a")
    assert state.child("b").name == "b"
    assert state.child("missing") is None


def test_states_are_frozen_and_hashable():
    state = State("s", entry_actions=["x"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.name = "t"
    assert hash(state) == hash(State("s", entry_actions=("x",)))


def test_history_kinds():
    assert HISTORY_KINDS == (SHALLOW, DEEP)
