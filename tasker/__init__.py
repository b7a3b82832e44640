"""Minimalist command-line task tracker."""

from tasker.task import Task
from tasker.store import MemoryTaskStore, TaskStore, next_id

__all__ = ["Task", "TaskStore", "MemoryTaskStore", "next_id"]
