from __future__ import annotations

import os
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.models import RoomSettings
from .game.registry import RoomRegistry
from .game.timers import SocketIOScheduler
from .realtime.handlers import register_socketio_handlers
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


def _async_mode() -> str:
    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        return env_async_mode

    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class: type = Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE") or _async_mode(),
        # Join messages are emitted from the connect handler.
        always_connect=True,
    )

    rooms = RoomRegistry(SocketIOScheduler(socketio), RoomSettings.from_config(app.config))
    app.extensions["wordstop.rooms"] = rooms

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, rooms)

    return app, socketio
