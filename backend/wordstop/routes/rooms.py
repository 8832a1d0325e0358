from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from ..game.models import RoomParameters
from ..game.registry import RoomRegistry
from ..messages import CreateRoomRequest

bp = Blueprint("rooms", __name__)


def _rooms() -> RoomRegistry:
    return current_app.extensions["wordstop.rooms"]


@bp.post("/rooms/create")
def create_room():
    try:
        body = CreateRoomRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({"error": "invalid_payload", "details": exc.errors(include_url=False, include_context=False)}), 400

    room_id = _rooms().create(
        RoomParameters.build(
            password=body.password,
            letters=body.letters,
            categories=body.categories,
        )
    )
    return jsonify({"id": room_id}), 201


@bp.get("/rooms/<room_id>")
def get_room(room_id: str):
    room = _rooms().get(room_id)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room.public_state())
