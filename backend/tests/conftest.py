import heapq
import itertools
import os
import sys

import pytest

# Ensure the backend root (containing the `wordstop` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wordstop.game.models import RoomParameters, RoomSettings
from wordstop.game.registry import RoomRegistry
from wordstop.game.timers import Timer
from wordstop.server import create_app


class ManualScheduler:
    """Scheduler driven by `advance()` instead of the wall clock."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay, callback, *args, timer=None):
        timer = timer or Timer()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), timer, None, callback, args))
        return timer

    def call_every(self, interval, callback, *args, timer=None):
        timer = timer or Timer()
        heapq.heappush(self._queue, (self.now + interval, next(self._seq), timer, interval, callback, args))
        return timer

    def advance(self, seconds):
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, timer, interval, callback, args = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = when
            if interval is not None:
                heapq.heappush(self._queue, (when + interval, next(self._seq), timer, interval, callback, args))
            callback(*args)
        self.now = target

    @property
    def pending(self):
        return sum(1 for entry in self._queue if not entry[2].cancelled)


class FakeConnection:
    """Connection that records traffic; closing it reports the close back like a socket would."""

    def __init__(self):
        self.sent = []
        self.close_code = None
        self.close_reason = None
        self._on_message = None
        self._on_close = None

    @property
    def closed(self):
        return self.close_code is not None

    def bind(self, on_message, on_close):
        self._on_message = on_message
        self._on_close = on_close

    def send(self, message):
        if not self.closed:
            self.sent.append(message)

    def close(self, code, reason):
        if self.closed:
            return
        self.close_code = code
        self.close_reason = reason
        self._on_close()

    # Client side
    def receive(self, data):
        self._on_message(data)

    def drop(self):
        self._on_close()

    def types(self):
        return [m['type'] for m in self.sent]

    def of_type(self, kind):
        return [m for m in self.sent if m['type'] == kind]

    def last(self, kind):
        found = self.of_type(kind)
        return found[-1] if found else None


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def settings():
    # Long enough that players never time out in round tests.
    return RoomSettings(inactivity_timeout=120)


@pytest.fixture()
def registry(scheduler, settings):
    return RoomRegistry(scheduler, settings)


@pytest.fixture()
def make_room(registry):
    def _make(categories=('Animal', 'Food'), letters=('B',), password='secret'):
        room_id = registry.create(RoomParameters.build(password, letters, categories))
        return registry.get(room_id)

    return _make


@pytest.fixture()
def room(make_room):
    return make_room()


@pytest.fixture()
def join():
    def _join(room, name):
        connection = FakeConnection()
        player = room.add_player(name, connection)
        return player, connection

    return _join


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    # Keep background timers out of the way of socket tests.
    ROUND_START_DELAY_SEC = 600
    EMPTY_ROOM_TTL_SEC = 600
    PLAYER_INACTIVITY_TIMEOUT_SEC = 600


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def rooms(flask_app):
    return flask_app.extensions['wordstop.rooms']
