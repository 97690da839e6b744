# Todo board: shared task list with live change notifications
#
# Components:
#   schema.py      - Data model (Task, BoardEvent, EventKind) and id helpers
#   errors.py      - Failure taxonomy (MissingField, NotFound, ...)
#   store.py       - SQLite persistence for tasks and user profiles
#   channel.py     - Fan-out of events to connected clients
#   coordinator.py - Commit-then-broadcast mutation pipeline
#   config.py      - YAML/env configuration and logging setup
#   client.py      - Listening client with a reloadable local cache
