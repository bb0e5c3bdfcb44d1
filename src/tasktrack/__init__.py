"""An in-memory task-tracking service."""
