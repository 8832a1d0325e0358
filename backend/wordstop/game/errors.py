from __future__ import annotations


class RoomError(Exception):
    """A room operation was requested in a state that doesn't allow it."""


class RoomClosedError(RoomError):
    pass


class DuplicateNameError(RoomError):
    pass


class NotAMemberError(RoomError):
    pass


class RoundInProgressError(RoomError):
    pass


class NoRoundInProgressError(RoomError):
    pass


class StopNotAvailableError(RoomError):
    pass


class AlreadyStoppingError(RoomError):
    pass
