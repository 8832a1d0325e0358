import threading

import pytest

from wordstop.game.dispatch import Dispatcher
from wordstop.game.errors import RoomError


def test_call_returns_result():
    dispatcher = Dispatcher()
    assert dispatcher.call(lambda a, b: a + b, 2, 3) == 5
    assert not dispatcher.in_event()


def test_call_inside_event_runs_after_it():
    dispatcher = Dispatcher()
    order = []

    def inner():
        order.append('inner')

    def outer():
        assert dispatcher.in_event()
        assert dispatcher.call(inner) is None
        order.append('outer')

    dispatcher.call(outer)

    assert order == ['outer', 'inner']


def test_run_inside_event_runs_inline():
    dispatcher = Dispatcher()
    order = []

    def outer():
        dispatcher.run(order.append, 'inner')
        order.append('outer')

    dispatcher.call(outer)

    assert order == ['inner', 'outer']


def test_rejected_queued_event_does_not_stop_the_queue():
    dispatcher = Dispatcher()
    order = []

    def rejected():
        raise RoomError('nope')

    def outer():
        dispatcher.call(rejected)
        dispatcher.call(order.append, 'after')

    dispatcher.call(outer)

    assert order == ['after']


def test_queue_drains_even_if_event_raises():
    dispatcher = Dispatcher()
    order = []

    def outer():
        dispatcher.call(order.append, 'queued')
        raise RoomError('outer failed')

    with pytest.raises(RoomError):
        dispatcher.call(outer)

    assert order == ['queued']
    assert not dispatcher.in_event()


def test_events_from_other_threads_wait_their_turn():
    dispatcher = Dispatcher()
    order = []
    started = threading.Event()

    def other_thread():
        dispatcher.call(order.append, 'other')

    def outer():
        worker = threading.Thread(target=other_thread)
        worker.start()
        started.set()
        # The other thread can't get in while this event runs.
        worker.join(timeout=0.2)
        order.append('outer')
        return worker

    worker = dispatcher.call(outer)
    worker.join(timeout=5)

    assert started.is_set()
    assert order == ['outer', 'other']
