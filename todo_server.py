#!/usr/bin/env python3
"""
Todo Board Server
-----------------
JSON API over the shared task list, plus a Server-Sent Events stream that
announces every committed mutation to all connected clients.

Usage:
    python todo_server.py --port 3000 --db /tmp/todos.db

    # Or, once installed
    todoboard-server --config config.yaml

API:
    GET    /              → welcome text
    GET    /health        → JSON: { status, db, connections }
    GET    /todos         → JSON: [ task, ... ]
    GET    /todos/<id>    → JSON: task | null
    POST   /todos         → JSON body: { title, description, category, email }
                            Returns: 201 + created task
    PUT    /todos/<id>    → JSON body: { category }
                            Returns: { success, message }
    DELETE /todos/<id>    → Returns: { success, message }
    POST   /user          → JSON body: any object
                            Returns: { acknowledged, insertedId }
    GET    /events        → text/event-stream of taskAdded / taskUpdated / taskDeleted
"""

import argparse
import json
import logging
from typing import Iterator, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import InternalServerError

from todoboard.channel import NotificationChannel
from todoboard.config import Config, setup_logging
from todoboard.coordinator import MutationCoordinator
from todoboard.errors import NotFound, StoreUnavailable, TodoBoardError
from todoboard.schema import BoardEvent
from todoboard.store import TaskStore

logger = logging.getLogger("todoboard.server")


# ── Event stream framing ─────────────────────────────────────────────────────

def format_sse(event: BoardEvent) -> str:
    """Frame one event as a Server-Sent Event."""
    return f"event: {event.name}\ndata: {json.dumps(event.payload)}\n\n"


def event_stream(channel: NotificationChannel, keepalive: float) -> Iterator[str]:
    """
    Yield SSE frames for one client until the connection is closed.

    The client is registered when the stream starts and removed when the
    generator is closed (Werkzeug closes it on disconnect).
    """
    sub = channel.connect()
    try:
        yield f": connected {sub.id}\n\n"
        while True:
            event = sub.get(timeout=keepalive)
            if event is None:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
    finally:
        sub.close()


def _json_object() -> dict:
    """Request body as a JSON object; absent bodies, arrays and scalars read as empty."""
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(config: Optional[Config] = None,
               coordinator: Optional[MutationCoordinator] = None) -> Flask:
    cfg = config or Config.load()
    if coordinator is None:
        coordinator = MutationCoordinator(
            TaskStore(cfg.db_path), NotificationChannel(queue_size=cfg.queue_size)
        )

    app = Flask(__name__)
    app.extensions["todoboard"] = coordinator
    board = coordinator

    # ── Errors ──

    @app.errorhandler(TodoBoardError)
    def handle_board_error(e: TodoBoardError):
        if e.status < 500:
            logger.info(f"{request.method} {request.path} rejected: {e.code}")
        elif isinstance(e, StoreUnavailable) and e.reason:
            logger.error(f"{request.method} {request.path} failed: {e.reason}")
        body = e.to_dict()
        if isinstance(e, NotFound) and request.method == "DELETE":
            body["success"] = False
        return jsonify(body), e.status

    @app.errorhandler(InternalServerError)
    def handle_internal_error(e):
        return jsonify({"error": "Internal server error", "code": "InternalError"}), 500

    # ── Cross-origin ──

    @app.after_request
    def add_cors_headers(resp):
        resp.headers["Access-Control-Allow-Origin"] = cfg.cors_origin
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

    # ── Routes ──

    @app.route("/")
    def index():
        return "Welcome to Todo Server"

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "db": board.store.db_path,
            "connections": board.channel.connection_count,
        })

    @app.route("/todos", methods=["GET"])
    def list_todos():
        return jsonify([t.to_dict() for t in board.fetch_all()])

    @app.route("/todos/<task_id>", methods=["GET"])
    def get_todo(task_id):
        task = board.fetch_one(task_id)
        return jsonify(task.to_dict() if task else None)

    @app.route("/todos", methods=["POST"])
    def create_todo():
        data = _json_object()
        task = board.submit_create(data)
        return jsonify(task.to_dict()), 201

    @app.route("/todos/<task_id>", methods=["PUT"])
    def update_todo(task_id):
        data = _json_object()
        return jsonify(board.submit_category_update(task_id, data.get("category")))

    @app.route("/todos/<task_id>", methods=["DELETE"])
    def delete_todo(task_id):
        return jsonify(board.submit_delete(task_id))

    @app.route("/user", methods=["POST"])
    def create_user():
        profile = request.get_json(force=True, silent=True)
        return jsonify(board.submit_user(profile))

    @app.route("/events")
    def events():
        return Response(
            event_stream(board.channel, cfg.keepalive_seconds),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Todo Board Server")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to todos.db (overrides TODOBOARD_DB env var)")
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.db:
        cfg.db_path = args.db

    setup_logging(cfg.log_level)
    app = create_app(cfg)
    logger.info(f"Server is running on http://{cfg.host}:{cfg.port} (db={cfg.db_path})")

    # threaded=True: each event-stream client holds a worker thread
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
