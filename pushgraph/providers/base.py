"""Abstract base classes for the push log and task queue collaborators."""

from abc import ABC, abstractmethod
from typing import Any

from pushgraph.models import Push


class PushLog(ABC):
    @abstractmethod
    def get_one(self, repo_url: str, push_id: int | str) -> Push: ...


class TaskQueue(ABC):
    @abstractmethod
    def create_task(self, task_id: str, definition: dict[str, Any]) -> None: ...
