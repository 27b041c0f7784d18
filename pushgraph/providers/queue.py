"""Taskcluster queue provider."""

from typing import Any

import taskcluster

from pushgraph.providers.base import TaskQueue
from pushgraph.settings import PushgraphSettings


class TaskclusterQueue(TaskQueue):
    """Queue client restricted to an authorized-scope allowlist."""

    def __init__(self, settings: PushgraphSettings, authorized_scopes: list[str]) -> None:
        if not settings.taskcluster_root_url:
            raise RuntimeError("taskcluster_root_url is required. Set PUSHGRAPH_TASKCLUSTER_ROOT_URL")
        options: dict[str, Any] = {
            "rootUrl": settings.taskcluster_root_url,
            "authorizedScopes": list(authorized_scopes),
        }
        if settings.taskcluster_client_id and settings.taskcluster_access_token:
            options["credentials"] = {
                "clientId": settings.taskcluster_client_id,
                "accessToken": settings.taskcluster_access_token.get_secret_value(),
            }
        self._queue = taskcluster.Queue(options)

    def create_task(self, task_id: str, definition: dict[str, Any]) -> None:
        self._queue.createTask(task_id, definition)
