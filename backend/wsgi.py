import logging
import os

try:
    from backend.wordstop.server import create_app
except ImportError:  # pragma: no cover
    from wordstop.server import create_app

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

app, socketio = create_app()
