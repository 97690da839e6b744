"""Shared test fixtures for todo board tests."""

import sys
from pathlib import Path

import pytest

# Ensure todo_server.py at the repo root is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from todoboard.channel import NotificationChannel
from todoboard.config import Config
from todoboard.coordinator import MutationCoordinator
from todoboard.store import TaskStore


VALID_FIELDS = {
    "title": "A",
    "description": "d",
    "category": "todo",
    "email": "x@y.com",
}


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "todos.db")


@pytest.fixture
def store(db_path):
    return TaskStore(db_path)


@pytest.fixture
def channel():
    return NotificationChannel(queue_size=16)


@pytest.fixture
def board(store, channel):
    return MutationCoordinator(store, channel)


@pytest.fixture
def app(db_path, board):
    from todo_server import create_app
    cfg = Config(db_path=db_path, keepalive_seconds=0.05)
    return create_app(cfg, coordinator=board)


@pytest.fixture
def client(app):
    return app.test_client()
