from __future__ import annotations

import logging
import uuid
from threading import RLock

from .models import RoomParameters, RoomSettings
from .room import Room
from .timers import Scheduler


_logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory rooms of this process, by id."""

    def __init__(self, scheduler: Scheduler, settings: RoomSettings | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._scheduler = scheduler
        self._settings = settings or RoomSettings()

    def create(self, parameters: RoomParameters) -> str:
        with self._lock:
            room_id = uuid.uuid4().hex
            while room_id in self._rooms:
                room_id = uuid.uuid4().hex

            room = Room(room_id, parameters, self, self._scheduler, self._settings)
            self._rooms[room_id] = room

        _logger.info(
            "Room %s created with %d letter(s) and %d categories",
            room_id,
            len(parameters.letters),
            len(parameters.categories),
        )
        room.open()
        return room_id

    def get(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def remove(self, room: Room) -> bool:
        with self._lock:
            if self._rooms.get(room.id) is room:
                del self._rooms[room.id]
                return True
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._rooms
