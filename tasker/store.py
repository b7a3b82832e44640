"""Persistence for the task list (load/save/id generation)."""

import contextlib
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

from tasker.errors import ParseError, StorageError
from tasker.task import Task

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "tasks.json"


def next_id(tasks: Iterable[Task]) -> int:
    """Return one more than the highest id in use, or 1 for an empty list."""
    return max((task.id for task in tasks), default=0) + 1


class TaskStore:
    """JSON file backed task list.

    The whole list is read on ``load`` and written back on ``save``;
    nothing is cached between the two.

    Attributes:
        path: Location of the data file
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_DATA_FILE):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"TaskStore({str(self.path)!r})"

    def load(self) -> List[Task]:
        """Read every task from the data file.

        A missing or empty file yields an empty list.

        Raises:
            ParseError: If the file does not contain a JSON array of tasks.
            StorageError: If the file cannot be read.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug("No data file at %s, starting empty", self.path)
            return []
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}", e) from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise ParseError(f"{self.path} must contain a JSON array of tasks")

        tasks = []
        seen = set()
        for index, entry in enumerate(data):
            try:
                task = Task.from_dict(entry)
            except ValueError as e:
                raise ParseError(f"{self.path}: entry {index}: {e}") from e
            if task.id in seen:
                raise ParseError(f"{self.path}: duplicate task id {task.id}")
            seen.add(task.id)
            tasks.append(task)

        logger.debug("Loaded %d tasks from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: List[Task]) -> None:
        """Write the full list, replacing the data file in one step.

        The content goes to a temporary file next to the target, which is
        then renamed over it.

        Raises:
            StorageError: If the file cannot be written.
        """
        payload = json.dumps([task.to_dict() for task in tasks], indent=2, ensure_ascii=False)
        directory = self.path.parent
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}", e) from e
        finally:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)

        logger.debug("Saved %d tasks to %s", len(tasks), self.path)


class MemoryTaskStore:
    """In-memory stand-in for TaskStore.

    ``load`` hands out copies, so changes are only visible after ``save``.
    """

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks: List[Task] = copy.deepcopy(tasks) if tasks else []
        self.save_count = 0

    def load(self) -> List[Task]:
        return copy.deepcopy(self.tasks)

    def save(self, tasks: List[Task]) -> None:
        self.tasks = copy.deepcopy(tasks)
        self.save_count += 1
