#!/usr/bin/env python3
"""
Quick verification that the todo board works end-to-end.

Runs the create → recategorize → delete scenario through the HTTP surface
while a second client listens on the notification channel.
"""
import tempfile
from pathlib import Path

from todo_server import create_app
from todoboard.channel import NotificationChannel
from todoboard.config import Config
from todoboard.coordinator import MutationCoordinator
from todoboard.store import TaskStore


def main():
    print("=" * 60)
    print("Todo Board Verification")
    print("=" * 60)

    db_path = str(Path(tempfile.mkdtemp()) / "verify_todos.db")

    print("\n[1/5] Creating store, channel and app...")
    channel = NotificationChannel()
    board = MutationCoordinator(TaskStore(db_path), channel)
    client = create_app(Config(db_path=db_path), coordinator=board).test_client()
    listener = channel.connect()
    print(f"✅ Ready ({channel.connection_count} listener connected)")

    print("\n[2/5] Creating task...")
    resp = client.post("/todos", json={
        "title": "A", "description": "d", "category": "todo", "email": "x@y.com",
    })
    task_id = resp.get_json()["_id"]
    event = listener.get(timeout=1)
    if resp.status_code != 201 or event is None or event.payload["_id"] != task_id:
        print(f"❌ Create failed: {resp.status_code} {resp.get_json()}")
        return
    print(f"✅ Task {task_id} created, listener saw {event.name}")

    print("\n[3/5] Moving task to 'done'...")
    resp = client.put(f"/todos/{task_id}", json={"category": "done"})
    event = listener.get(timeout=1)
    current = client.get(f"/todos/{task_id}").get_json()
    if resp.status_code != 200 or event is None or current["category"] != "done":
        print(f"❌ Update failed: {resp.status_code} {resp.get_json()}")
        return
    print(f"✅ {event.name} {event.payload}")

    print("\n[4/5] Deleting task...")
    resp = client.delete(f"/todos/{task_id}")
    event = listener.get(timeout=1)
    if resp.status_code != 200 or event is None or client.get(f"/todos/{task_id}").get_json() is not None:
        print(f"❌ Delete failed: {resp.status_code} {resp.get_json()}")
        return
    print(f"✅ {event.name} {event.payload}")

    print("\n[5/5] Deleting again...")
    resp = client.delete(f"/todos/{task_id}")
    if resp.status_code != 404 or listener.pending():
        print(f"❌ Expected 404 and no event, got {resp.status_code}")
        return
    print("✅ 404, nothing broadcast")

    listener.close()
    print("\n" + "=" * 60)
    print("✅ ALL CHECKS PASSED")
    print("=" * 60)
    print(f"Test database: {db_path}")


if __name__ == "__main__":
    main()
