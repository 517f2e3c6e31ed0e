# tests/unit/test_event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
import time

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gotchart.core.events import Event
from gotchart.runtime.event_queue import EventQueue


def test_fifo_order():
    queue = EventQueue()
    for name in ["a", "b", "c"]:
        queue.enqueue(Event(name))
    assert len(queue) == 3
    assert [queue.dequeue().name for _ in range(3)] == ["a", "b", "c"]
    assert queue.dequeue() is None
    assert queue.is_empty()


def test_clear_returns_dropped_count():
    queue = EventQueue()
    queue.enqueue(Event("a"))
    queue.enqueue(Event("b"))
    assert queue.clear() == 2
    assert queue.is_empty()


def test_wait_times_out_when_empty():
    queue = EventQueue()
    started = time.monotonic()
    assert queue.wait(timeout=0.05) is False
    assert time.monotonic() - started >= 0.04


def test_wait_returns_when_event_arrives():
    queue = EventQueue()
    timer = threading.Timer(0.05, queue.enqueue, args=(Event("late"),))
    timer.start()
    assert queue.wait(timeout=2.0) is True
    assert queue.dequeue().name == "late"


def test_dequeue_with_timeout_blocks_until_event():
    queue = EventQueue()
    assert queue.dequeue(timeout=0.02) is None
    timer = threading.Timer(0.05, queue.enqueue, args=(Event("late"),))
    timer.start()
    event = queue.dequeue(timeout=2.0)
    assert event is not None and event.name == "late"


def test_wake_releases_waiter():
    queue = EventQueue()
    result = []
    waiter = threading.Thread(target=lambda: result.append(queue.wait(timeout=5.0)))
    waiter.start()
    time.sleep(0.05)
    queue.wake()
    waiter.join(timeout=2.0)
    assert result == [False]


@pytest.mark.stress
def test_concurrent_producers_lose_nothing():
    queue = EventQueue()

    def produce(prefix):
        for i in range(200):
            queue.enqueue(Event(f"{prefix}.{i}"))

    threads = [threading.Thread(target=produce, args=(f"p{n}",)) for n in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    names = []
    while not queue.is_empty():
        names.append(queue.dequeue().name)
    assert len(names) == 1000
    # Per-producer order is preserved
    for n in range(5):
        own = [name for name in names if name.startswith(f"p{n}.")]
        assert own == [f"p{n}.{i}" for i in range(200)]


@pytest.mark.property
@given(names=st.lists(st.text(min_size=1, max_size=10), max_size=50))
def test_queue_preserves_order_and_count(names):
    queue = EventQueue()
    for name in names:
        queue.enqueue(Event(name))
    dequeued = []
    event = queue.dequeue()
    while event is not None:
        dequeued.append(event.name)
        event = queue.dequeue()
    assert dequeued == names
