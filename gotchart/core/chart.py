# gotchart/core/chart.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Immutable, validated definition model of a statechart.

The state tree handed to :class:`Chart` is flattened into an arena of nodes
addressed by integer index. Indices follow document (pre-order) order, so a
parent always has a smaller index than its descendants; the interpreter relies
on that to order entries (ascending) and exits (descending).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from gotchart.core.errors import ConfigurationError
from gotchart.core.states import State
from gotchart.core.transitions import Transition
from gotchart.core.validations import Validator

SEPARATOR = "."
ROOT = 0


@dataclass(frozen=True)
class ChartNode:
    """A state placed in the arena."""

    index: int
    id: str
    state: State
    parent: Optional[int]
    children: Tuple[int, ...]
    initial: Optional[int]
    depth: int

    @property
    def atomic(self) -> bool:
        return not self.children

    @property
    def parallel(self) -> bool:
        return self.state.parallel and bool(self.children)

    @property
    def compound(self) -> bool:
        return bool(self.children) and not self.state.parallel


@dataclass(frozen=True)
class ResolvedTransition:
    """A transition with its source and target replaced by arena indices."""

    source: int
    order: int
    definition: Transition
    target: Optional[int]

    @property
    def event(self) -> Optional[str]:
        return self.definition.event

    @property
    def guard(self) -> Optional[str]:
        return self.definition.guard

    @property
    def actions(self) -> Tuple[str, ...]:
        return self.definition.actions

    def matches(self, event_name: Optional[str]) -> bool:
        return self.definition.matches(event_name)


class Chart:
    """
    Read-only description of a statechart: the state hierarchy, the
    transitions between states and the names of the guards and actions they
    use. Validation happens in the constructor; an invalid definition raises
    :class:`ConfigurationError` listing every problem found.
    """

    def __init__(
        self,
        states: Sequence[State],
        initial: Optional[str] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        """
        :param states: Top-level states, in document order.
        :param initial: Name of the top-level state entered on start.
        :param validator: Optional validator carrying extra rules.
        """
        self._root_state = State(name="", states=states, initial=initial)
        self._ids: Dict[str, int] = {}
        self._by_name: Dict[str, List[int]] = {}
        self._nodes: List[ChartNode] = []
        self._build(self._root_state)

        problems = (validator or Validator()).validate_chart(self)
        if problems:
            raise ConfigurationError(
                "Invalid chart definition:\n  " + "\n  ".join(problems), problems
            )

        self._transitions: Tuple[Tuple[ResolvedTransition, ...], ...] = self._resolve_transitions()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build(self, root: State) -> None:
        pending: List[Tuple[State, Optional[int], str, int]] = [(root, None, "", 0)]
        children: Dict[int, List[int]] = {}
        flat: List[Tuple[State, Optional[int], str, int]] = []

        # Iterative pre-order walk; children pushed reversed to keep document order.
        while pending:
            state, parent, qualified, depth = pending.pop()
            index = len(flat)
            flat.append((state, parent, qualified, depth))
            if parent is not None:
                children.setdefault(parent, []).append(index)
            for child in reversed(state.states):
                child_id = f"{qualified}{SEPARATOR}{child.name}" if qualified else child.name
                pending.append((child, index, child_id, depth + 1))

        for index, (state, parent, qualified, depth) in enumerate(flat):
            kids = tuple(children.get(index, ()))
            initial = None
            if state.initial is not None:
                for kid in kids:
                    if flat[kid][0].name == state.initial:
                        initial = kid
                        break
            self._nodes.append(
                ChartNode(
                    index=index,
                    id=qualified,
                    state=state,
                    parent=parent,
                    children=kids,
                    initial=initial,
                    depth=depth,
                )
            )
            if index != ROOT:
                self._ids.setdefault(qualified, index)
                self._by_name.setdefault(state.name, []).append(index)

    def _resolve_transitions(self) -> Tuple[Tuple[ResolvedTransition, ...], ...]:
        resolved: List[Tuple[ResolvedTransition, ...]] = []
        order = 0
        for node in self._nodes:
            per_state = []
            for definition in node.state.transitions:
                target = None
                if definition.target is not None:
                    target, _ = self.resolve_reference(definition.target)
                per_state.append(ResolvedTransition(node.index, order, definition, target))
                order += 1
            resolved.append(tuple(per_state))
        return tuple(resolved)

    def resolve_reference(self, reference: str) -> Tuple[Optional[int], List[int]]:
        """
        Resolve a state reference to an arena index. A qualified id wins;
        otherwise a bare name must be unique in the whole chart.

        :return: ``(index, candidates)``; index is None when the reference is
            unknown (no candidates) or ambiguous (several candidates).
        """
        if reference in self._ids:
            return self._ids[reference], [self._ids[reference]]
        candidates = list(self._by_name.get(reference, ()))
        if len(candidates) == 1:
            return candidates[0], candidates
        return None, candidates

    # ------------------------------------------------------------------
    # Id-level queries
    # ------------------------------------------------------------------

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self.state_ids())

    def __len__(self) -> int:
        return len(self._nodes) - 1

    def state_ids(self) -> List[str]:
        """Qualified ids of all states, in document order."""
        return [node.id for node in self._nodes[1:]]

    def get(self, state_id: str) -> State:
        """Return the definition of the state with the given qualified id."""
        return self._nodes[self.index_of(state_id)].state

    def parent_of(self, state_id: str) -> Optional[str]:
        parent = self._nodes[self.index_of(state_id)].parent
        return None if parent == ROOT else self._nodes[parent].id

    def children_of(self, state_id: Optional[str] = None) -> List[str]:
        """Qualified ids of the children of a state, or of the top level."""
        index = ROOT if state_id is None else self.index_of(state_id)
        return [self._nodes[child].id for child in self._nodes[index].children]

    def is_atomic(self, state_id: str) -> bool:
        return self._nodes[self.index_of(state_id)].atomic

    def is_parallel(self, state_id: str) -> bool:
        return self._nodes[self.index_of(state_id)].parallel

    def guard_names(self) -> Set[str]:
        """Names of all guards referenced by the chart."""
        return {t.guard for node in self._nodes for t in node.state.transitions if t.guard is not None}

    def action_names(self) -> Set[str]:
        """Names of all actions referenced by the chart."""
        names: Set[str] = set()
        for node in self._nodes:
            names.update(node.state.entry_actions)
            names.update(node.state.exit_actions)
            for transition in node.state.transitions:
                names.update(transition.actions)
        return names

    # ------------------------------------------------------------------
    # Index-level queries used by the interpreter
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Tuple[ChartNode, ...]:
        return tuple(self._nodes)

    def node(self, index: int) -> ChartNode:
        return self._nodes[index]

    def index_of(self, state_id: str) -> int:
        try:
            return self._ids[state_id]
        except KeyError:
            raise KeyError(f"Unknown state '{state_id}'") from None

    def ids_of(self, indices: Iterable[int]) -> List[str]:
        return [self._nodes[i].id for i in sorted(indices) if i != ROOT]

    def transitions_from(self, index: int) -> Tuple[ResolvedTransition, ...]:
        return self._transitions[index]

    def ancestors(self, index: int, upto: Optional[int] = None) -> List[int]:
        """Proper ancestors from the parent outwards, stopping before ``upto``."""
        result = []
        current = self._nodes[index].parent
        while current is not None and current != upto:
            result.append(current)
            current = self._nodes[current].parent
        return result

    def is_descendant(self, index: int, ancestor: int) -> bool:
        """True if ``index`` lies strictly below ``ancestor``."""
        current = self._nodes[index].parent
        while current is not None:
            if current == ancestor:
                return True
            current = self._nodes[current].parent
        return False

    def lcca(self, source: int, target: int) -> int:
        """
        Least common compound ancestor: the nearest proper ancestor of
        ``source`` that is compound (or the root) and contains ``target``.
        """
        for ancestor in self.ancestors(source):
            node = self._nodes[ancestor]
            if (ancestor == ROOT or node.compound) and self.is_descendant(target, ancestor):
                return ancestor
        return ROOT

    def __repr__(self) -> str:
        return f"Chart(states={len(self)}, initial={self._root_state.initial!r})"
