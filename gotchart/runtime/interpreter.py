# gotchart/runtime/interpreter.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Run-to-completion statechart interpreter.

Each event is handled in one macrostep: the enabled transitions are selected
from the active atomic states outwards, executed as a microstep (exits,
transition actions, entries), and then eventless transitions are taken until
none is enabled. Only the stable configuration at the end of a macrostep is
published to observers.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from gotchart.core.chart import ROOT, Chart, ResolvedTransition
from gotchart.core.errors import LifecycleError, StabilizationError
from gotchart.core.events import Event
from gotchart.core.hooks import HookManager
from gotchart.core.registry import Registry
from gotchart.core.states import DEEP
from gotchart.runtime.event_queue import EventQueue
from gotchart.runtime.observer import ConfigurationObserver
from gotchart.runtime.timers import TimeoutScheduler

logger = logging.getLogger(__name__)

DEFAULT_MAX_MICROSTEPS = 100


class InterpreterStatus(Enum):
    """Lifecycle of an interpreter. A failed start() leaves it NOT_STARTED."""

    NOT_STARTED = auto()
    RUNNING = auto()
    STOPPED = auto()


class Interpreter:
    """
    Executes a :class:`Chart` against a stream of events, calling the guards
    and actions bound in a :class:`Registry`.

    In synchronous mode (the default) ``send`` processes the event, and any
    events queued while doing so, before returning. Actions that call
    ``send`` only enqueue: their events are handled after the current
    macrostep. In deferred mode ``send`` only enqueues and processing is left
    to :meth:`run_pending` or an executor.
    """

    def __init__(
        self,
        chart: Chart,
        registry: Optional[Registry] = None,
        *,
        hooks: Optional[List[object]] = None,
        max_microsteps: int = DEFAULT_MAX_MICROSTEPS,
        synchronous: bool = True,
    ) -> None:
        """
        :param chart: The validated chart definition.
        :param registry: Guard and action bindings; verified on ``start()``.
        :param hooks: Optional tracing hooks (see :class:`HookManager`).
        :param max_microsteps: Bound on eventless microsteps per macrostep.
        :param synchronous: Process events on the sending thread.
        """
        if max_microsteps < 1:
            raise ValueError("max_microsteps must be at least 1.")
        self._chart = chart
        self._registry = registry if registry is not None else Registry()
        self._hooks = HookManager(hooks)
        self._max_microsteps = max_microsteps
        self._synchronous = synchronous

        self._queue = EventQueue()
        self._observer = ConfigurationObserver()
        self._timers = TimeoutScheduler(self.send)

        self._status = InterpreterStatus.NOT_STARTED
        self._status_lock = threading.Lock()
        self._processing = threading.Lock()
        self._processing_thread: Optional[int] = None

        self._configuration: Set[int] = set()
        self._history: Dict[int, FrozenSet[int]] = {}
        self._guards: Dict[str, Callable] = {}
        self._actions: Dict[str, Callable] = {}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def chart(self) -> Chart:
        return self._chart

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def hooks(self) -> HookManager:
        return self._hooks

    @property
    def observer(self) -> ConfigurationObserver:
        """Read-only view of the active configuration, with subscriptions."""
        return self._observer

    @property
    def timers(self) -> TimeoutScheduler:
        return self._timers

    @property
    def status(self) -> InterpreterStatus:
        return self._status

    @property
    def synchronous(self) -> bool:
        return self._synchronous

    @property
    def queue(self) -> EventQueue:
        return self._queue

    # ------------------------------------------------------------------
    # Public lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Verify the registry, enter the initial configuration and settle any
        eventless transitions enabled in it.

        :raises UnresolvedReferenceError: If a guard or action is unbound.
        :raises LifecycleError: If the interpreter was already started.
        """
        with self._processing:
            with self._status_lock:
                if self._status is not InterpreterStatus.NOT_STARTED:
                    raise LifecycleError(f"Interpreter cannot be started: status is {self._status.name}.")
                self._registry.verify(self._chart)
                self._guards = {name: self._registry.resolve_guard(name) for name in self._chart.guard_names()}
                self._actions = {name: self._registry.resolve_action(name) for name in self._chart.action_names()}
                self._status = InterpreterStatus.RUNNING

            self._processing_thread = threading.get_ident()
            try:
                try:
                    to_enter: Set[int] = set()
                    self._add_descendants(ROOT, to_enter)
                    to_enter.discard(ROOT)
                    self._configuration = {ROOT}
                    self._enter(sorted(to_enter), None)
                    self._stabilize(None)
                except Exception as error:
                    self._configuration = set()
                    self._history = {}
                    self._queue.clear()
                    self._status = InterpreterStatus.NOT_STARTED
                    logger.error(f"Interpreter failed to start: {error}")
                    self._hooks.execute_on_error(error)
                    raise
                configuration = self._publish()
            finally:
                self._processing_thread = None
            logger.info(f"Interpreter started in {sorted(configuration)}")

        if self._synchronous:
            self._drain()

    def stop(self) -> None:
        """
        Exit every active state innermost-first, drop queued and delayed
        events and make the interpreter terminal.

        :raises LifecycleError: If not running, or if called from inside an
            action or guard while an event is being processed.
        """
        if self._processing_thread == threading.get_ident():
            raise LifecycleError("Interpreter cannot be stopped from inside an action or guard.")
        with self._processing:
            with self._status_lock:
                if self._status is not InterpreterStatus.RUNNING:
                    raise LifecycleError(f"Interpreter cannot be stopped: status is {self._status.name}.")
                self._status = InterpreterStatus.STOPPED

            cancelled = self._timers.cancel_all()
            dropped = self._queue.clear()
            if cancelled or dropped:
                logger.warning(f"Stopping with {dropped} queued and {cancelled} delayed events dropped")

            self._processing_thread = threading.get_ident()
            try:
                self._exit(sorted(self._configuration - {ROOT}, reverse=True), None)
            finally:
                self._configuration = set()
                self._queue.wake()
                try:
                    self._publish()
                finally:
                    self._processing_thread = None
            logger.info("Interpreter stopped")

    def send(self, name: str, payload: Any = None) -> None:
        """
        Queue an event. In synchronous mode it is processed before this call
        returns unless another call is already processing events, in which
        case that call picks it up.

        :raises LifecycleError: If the interpreter is not running.
        """
        event = Event(name, payload)
        if self._status is not InterpreterStatus.RUNNING:
            raise LifecycleError(f"Cannot send '{name}': interpreter status is {self._status.name}.")
        self._queue.enqueue(event)
        if self._synchronous:
            self._drain()

    def send_after(self, delay: float, name: str, payload: Any = None) -> int:
        """
        Send an event after ``delay`` seconds.

        :return: A handle for :meth:`cancel`.
        :raises LifecycleError: If the interpreter is not running.
        """
        if self._status is not InterpreterStatus.RUNNING:
            raise LifecycleError(f"Cannot schedule '{name}': interpreter status is {self._status.name}.")
        return self._timers.schedule(delay, name, payload)

    def cancel(self, handle: int) -> bool:
        """Cancel a delayed event; True if it had not fired yet."""
        return self._timers.cancel(handle)

    def run_pending(self) -> int:
        """
        Process queued events on the calling thread.

        :return: The number of events processed; 0 if another thread is
            already processing or the interpreter is not running.
        """
        return self._drain()

    def wait_for_events(self, timeout: Optional[float] = None) -> bool:
        """Block until an event is queued, the interpreter stops or the timeout elapses."""
        if self._status is not InterpreterStatus.RUNNING:
            return False
        return self._queue.wait(timeout)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def current_states(self) -> FrozenSet[str]:
        """
        Qualified ids of the active states after the last completed
        macrostep. Empty before start and after stop.
        """
        return self._observer.current

    def is_active(self, state_id: str) -> bool:
        return state_id in self._observer.current

    def subscribe(self, listener: Callable[[FrozenSet[str]], None]) -> Callable[[], None]:
        """Shortcut for ``interpreter.observer.subscribe``."""
        return self._observer.subscribe(listener)

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def _drain(self) -> int:
        processed = 0
        while True:
            if not self._processing.acquire(blocking=False):
                return processed
            self._processing_thread = threading.get_ident()
            try:
                while self._status is InterpreterStatus.RUNNING:
                    event = self._queue.dequeue()
                    if event is None:
                        break
                    self._macrostep(event)
                    processed += 1
            finally:
                self._processing_thread = None
                self._processing.release()
            # An event enqueued after the inner loop saw an empty queue, but
            # before the lock was released, would otherwise be stranded.
            if self._status is not InterpreterStatus.RUNNING or self._queue.is_empty():
                return processed

    def _macrostep(self, event: Event) -> None:
        snapshot = (set(self._configuration), dict(self._history))
        logger.debug(f"Processing {event!r} in {self._chart.ids_of(self._configuration)}")
        try:
            transitions = self._select_transitions(event.name, event)
            if not transitions:
                logger.debug(f"Discarded {event!r}: no enabled transition")
                return
            self._microstep(transitions, event)
            self._stabilize(event)
        except Exception as error:
            self._configuration, self._history = snapshot
            logger.error(f"Processing {event!r} failed, configuration rolled back: {error}")
            self._hooks.execute_on_error(error)
            raise
        self._publish()

    def _stabilize(self, event: Optional[Event]) -> None:
        steps = 0
        while True:
            transitions = self._select_transitions(None, event)
            if not transitions:
                return
            steps += 1
            if steps > self._max_microsteps:
                raise StabilizationError(
                    f"Eventless transitions did not settle within {self._max_microsteps} microsteps; "
                    f"still enabled from {self._chart.ids_of(t.source for t in transitions)}."
                )
            logger.debug(f"Eventless microstep {steps}")
            self._microstep(transitions, event)

    def _publish(self) -> FrozenSet[str]:
        configuration = frozenset(self._chart.ids_of(self._configuration))
        self._observer.publish(configuration)
        return configuration

    # ------------------------------------------------------------------
    # Transition selection
    # ------------------------------------------------------------------

    def _select_transitions(self, event_name: Optional[str], event: Optional[Event]) -> List[ResolvedTransition]:
        enabled: List[ResolvedTransition] = []
        atomic = sorted(s for s in self._configuration if self._chart.node(s).atomic and s != ROOT)
        for state in atomic:
            transition = self._first_enabled(state, event_name, event)
            if transition is not None and transition not in enabled:
                enabled.append(transition)
        return self._remove_conflicts(enabled)

    def _first_enabled(
        self, state: int, event_name: Optional[str], event: Optional[Event]
    ) -> Optional[ResolvedTransition]:
        for candidate in [state] + self._chart.ancestors(state):
            for transition in self._chart.transitions_from(candidate):
                if transition.matches(event_name) and self._guard_allows(transition, event):
                    return transition
        return None

    def _guard_allows(self, transition: ResolvedTransition, event: Optional[Event]) -> bool:
        if transition.guard is None:
            return True
        return bool(self._guards[transition.guard](event))

    def _remove_conflicts(self, enabled: List[ResolvedTransition]) -> List[ResolvedTransition]:
        """
        Drop transitions whose exit sets overlap an earlier selection. A
        transition from a descendant state preempts one from its ancestor;
        otherwise the earlier one wins.
        """
        filtered: List[Tuple[ResolvedTransition, Set[int]]] = []
        for transition in enabled:
            exits = self._exit_set(transition)
            preempted = False
            displaced = []
            for other, other_exits in filtered:
                if exits & other_exits:
                    if self._chart.is_descendant(transition.source, other.source):
                        displaced.append(other)
                    else:
                        preempted = True
                        break
            if not preempted:
                filtered = [(t, e) for t, e in filtered if t not in displaced]
                filtered.append((transition, exits))
        return [t for t, _ in filtered]

    def _domain(self, transition: ResolvedTransition) -> int:
        return self._chart.lcca(transition.source, transition.target)

    def _exit_set(self, transition: ResolvedTransition) -> Set[int]:
        if transition.target is None:
            return set()
        domain = self._domain(transition)
        return {s for s in self._configuration if self._chart.is_descendant(s, domain)}

    # ------------------------------------------------------------------
    # Microstep
    # ------------------------------------------------------------------

    def _microstep(self, transitions: List[ResolvedTransition], event: Optional[Event]) -> None:
        to_exit: Set[int] = set()
        for transition in transitions:
            to_exit |= self._exit_set(transition)
        self._record_history(to_exit)
        self._exit(sorted(to_exit, reverse=True), event)

        for transition in transitions:
            source_id = self._chart.node(transition.source).id
            target_id = None if transition.target is None else self._chart.node(transition.target).id
            logger.debug(f"Transition {source_id} -> {target_id} on {event!r}")
            self._hooks.execute_on_transition(source_id, target_id, event)
            self._run_actions(transition.actions, event)

        to_enter: Set[int] = set()
        targeted = [t for t in transitions if t.target is not None]
        for transition in targeted:
            self._add_descendants(transition.target, to_enter)
        for transition in targeted:
            self._add_ancestors(transition.target, self._domain(transition), to_enter)
        self._enter(sorted(to_enter), event)

    def _record_history(self, to_exit: Set[int]) -> None:
        for state in to_exit:
            kind = self._chart.node(state).state.history
            if kind is None:
                continue
            if kind == DEEP:
                recorded = frozenset(
                    s for s in self._configuration if self._chart.node(s).atomic and self._chart.is_descendant(s, state)
                )
            else:
                recorded = frozenset(s for s in self._configuration if self._chart.node(s).parent == state)
            self._history[state] = recorded

    def _exit(self, states: Iterable[int], event: Optional[Event]) -> None:
        for state in states:
            node = self._chart.node(state)
            self._run_actions(node.state.exit_actions, event)
            self._configuration.discard(state)
            self._hooks.execute_on_exit(node.id, event)

    def _enter(self, states: Iterable[int], event: Optional[Event]) -> None:
        for state in states:
            node = self._chart.node(state)
            self._configuration.add(state)
            self._run_actions(node.state.entry_actions, event)
            self._hooks.execute_on_enter(node.id, event)

    def _run_actions(self, names: Iterable[str], event: Optional[Event]) -> None:
        for name in names:
            self._actions[name](event)

    def _add_descendants(self, state: int, to_enter: Set[int]) -> None:
        """Add ``state`` and whatever default or historic entry puts below it."""
        to_enter.add(state)
        node = self._chart.node(state)
        if node.atomic:
            return
        recorded = self._history.get(state) if node.state.history else None
        if recorded:
            if node.state.history == DEEP:
                to_enter.update(recorded)
                for leaf in recorded:
                    self._add_ancestors(leaf, state, to_enter)
            else:
                for child in sorted(recorded):
                    self._add_descendants(child, to_enter)
        elif node.compound:
            self._add_descendants(node.initial, to_enter)
        else:
            self._add_regions(node.children, to_enter)

    def _add_ancestors(self, state: int, upto: int, to_enter: Set[int]) -> None:
        for ancestor in self._chart.ancestors(state, upto=upto):
            to_enter.add(ancestor)
            node = self._chart.node(ancestor)
            if node.parallel:
                self._add_regions(node.children, to_enter)

    def _add_regions(self, regions: Iterable[int], to_enter: Set[int]) -> None:
        for region in regions:
            if not any(s == region or self._chart.is_descendant(s, region) for s in to_enter):
                self._add_descendants(region, to_enter)

    def __repr__(self) -> str:
        return f"Interpreter(status={self._status.name}, states={sorted(self.current_states())})"
