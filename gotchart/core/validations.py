# gotchart/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional

from gotchart.core.states import HISTORY_KINDS

if TYPE_CHECKING:
    from gotchart.core.chart import Chart, ChartNode

Rule = Callable[["Chart"], List[str]]


class Validator:
    """
    Performs construction-time validation of a chart definition, collecting
    every structural problem instead of stopping at the first one.
    """

    def __init__(self, rules: Optional[List[Rule]] = None) -> None:
        """
        :param rules: Extra rules run after the built-in ones. A rule takes
            the chart and returns a list of problem descriptions.
        """
        self._rules_engine = _ValidationRulesEngine(rules)

    def add_rule(self, rule: Rule) -> None:
        """Register an additional rule."""
        self._rules_engine.add_rule(rule)

    def validate_chart(self, chart: "Chart") -> List[str]:
        """
        Check a chart's states and transitions for consistency.

        :param chart: The chart under construction.
        :return: Problem descriptions; empty if the chart is valid.
        """
        return self._rules_engine.validate(chart)


class _ValidationRulesEngine:
    """
    Internal engine applying the built-in rules followed by any custom ones.
    """

    def __init__(self, rules: Optional[List[Rule]] = None) -> None:
        self._default_rules = _DefaultValidationRules
        self._custom_rules: List[Rule] = list(rules or [])

    def add_rule(self, rule: Rule) -> None:
        self._custom_rules.append(rule)

    def validate(self, chart: "Chart") -> List[str]:
        problems: List[str] = []
        nodes = chart.nodes
        if not nodes[0].children:
            return ["Chart must declare at least one state."]
        for node in nodes:
            problems.extend(self._default_rules.validate_names(node))
            problems.extend(self._default_rules.validate_siblings(node, nodes))
            problems.extend(self._default_rules.validate_initial(node))
            problems.extend(self._default_rules.validate_history(node))
            problems.extend(self._default_rules.validate_references(node))
            problems.extend(self._default_rules.validate_targets(node, chart))
            problems.extend(self._default_rules.validate_ambiguity(node))
        for rule in self._custom_rules:
            problems.extend(rule(chart))
        return problems


def _label(node: "ChartNode") -> str:
    return f"'{node.id}'" if node.id else "chart root"


class _DefaultValidationRules:
    """
    Built-in rules ensuring basic correctness of the state hierarchy and the
    transitions declared on it.
    """

    @staticmethod
    def validate_names(node: "ChartNode") -> List[str]:
        if node.parent is None:
            return []
        name = node.state.name
        if not isinstance(name, str) or not name:
            return [f"State under {node.id.rpartition('.')[0] or 'chart root'} must have a non-empty name."]
        if "." in name:
            return [f"State name '{name}' must not contain '.'."]
        return []

    @staticmethod
    def validate_siblings(node: "ChartNode", nodes) -> List[str]:
        seen = set()
        problems = []
        for child in node.children:
            name = nodes[child].state.name
            if name in seen:
                problems.append(f"Duplicate state name '{name}' under {_label(node)}.")
            seen.add(name)
        return problems

    @staticmethod
    def validate_initial(node: "ChartNode") -> List[str]:
        state = node.state
        if node.atomic:
            if state.initial is not None:
                return [f"Atomic state {_label(node)} declares initial '{state.initial}' but has no children."]
            return []
        if state.parallel:
            if state.initial is not None:
                return [f"Parallel state {_label(node)} must not declare an initial child."]
            return []
        if state.initial is None:
            return [f"Compound state {_label(node)} has children but no initial child."]
        if node.initial is None:
            return [f"Initial '{state.initial}' of {_label(node)} is not one of its children."]
        return []

    @staticmethod
    def validate_history(node: "ChartNode") -> List[str]:
        history = node.state.history
        if history is None:
            return []
        if history not in HISTORY_KINDS:
            return [f"State {_label(node)} has unknown history kind '{history}'."]
        if node.atomic:
            return [f"Atomic state {_label(node)} cannot keep history."]
        return []

    @staticmethod
    def validate_references(node: "ChartNode") -> List[str]:
        problems = []
        state = node.state
        for name in state.entry_actions + state.exit_actions:
            if not isinstance(name, str) or not name:
                problems.append(f"State {_label(node)} references an action that is not a non-empty name: {name!r}.")
        for transition in state.transitions:
            for name in transition.actions:
                if not isinstance(name, str) or not name:
                    problems.append(
                        f"Transition on {_label(node)} references an action that is not a non-empty name: {name!r}."
                    )
            if transition.guard is not None and (not isinstance(transition.guard, str) or not transition.guard):
                problems.append(f"Transition on {_label(node)} has an invalid guard reference {transition.guard!r}.")
            if transition.event is not None and (not isinstance(transition.event, str) or not transition.event):
                problems.append(f"Transition on {_label(node)} has an invalid event descriptor {transition.event!r}.")
        return problems

    @staticmethod
    def validate_targets(node: "ChartNode", chart: "Chart") -> List[str]:
        problems = []
        for transition in node.state.transitions:
            if transition.target is None:
                continue
            if not isinstance(transition.target, str):
                problems.append(f"Transition on {_label(node)} has a non-string target {transition.target!r}.")
                continue
            index, candidates = chart.resolve_reference(transition.target)
            if index is not None:
                continue
            if candidates:
                found = ", ".join(chart.node(c).id for c in candidates)
                problems.append(
                    f"Transition on {_label(node)} targets ambiguous state '{transition.target}' "
                    f"(matches {found}); use a qualified id."
                )
            else:
                problems.append(f"Transition on {_label(node)} targets unknown state '{transition.target}'.")
        return problems

    @staticmethod
    def validate_ambiguity(node: "ChartNode") -> List[str]:
        """
        Within one state, a transition that can never fire because an earlier
        one on the same event is unguarded, or carries the same guard, makes
        the definition ambiguous.
        """
        problems = []
        earlier = {}
        for position, transition in enumerate(node.state.transitions):
            key = transition.event
            if key is not None and not isinstance(key, str):
                continue
            for previous_position, previous in earlier.get(key, []):
                if previous.guard is None or previous.guard == transition.guard:
                    trigger = "eventless" if key is None else f"event '{key}'"
                    problems.append(
                        f"State {_label(node)} has ambiguous {trigger} transitions "
                        f"#{previous_position} and #{position}; the later one can never fire."
                    )
                    break
            earlier.setdefault(key, []).append((position, transition))
        return problems
