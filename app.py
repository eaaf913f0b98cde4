"""
StreamQueue application entry point.
Builds the Flask app, its configuration, routes and Socket.IO server.
"""

import logging
import os
from flask import Flask, jsonify

from streamqueue.models import Base, engine, init_db  # noqa: F401
from streamqueue.routes.queue import queue_bp
from streamqueue.routes.session import session_bp
from streamqueue.services import QueueServices
from streamqueue.utils import config
from streamqueue.websockets.handlers import init_socketio


logger = logging.getLogger(__name__)

app = Flask(__name__)

cache, redis_client = config.init_app(app)
app.cache = cache

init_db()
app.queue_services = QueueServices.from_app(app, cache=cache, redis_client=redis_client)

app.register_blueprint(queue_bp)
app.register_blueprint(session_bp)

socketio = init_socketio(app)


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting StreamQueue on port {port}")
    socketio.run(app, host="0.0.0.0", port=port, debug=os.getenv("FLASK_ENV") != "production", allow_unsafe_werkzeug=True)
