"""Submit a rendered task graph to the queue as one task group."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import slugid

from pushgraph.errors import TaskSubmissionError
from pushgraph.models import TaskGraph
from pushgraph.providers.base import TaskQueue
from pushgraph.render import unwrap_task

logger = logging.getLogger(__name__)


def merge_scopes(declared: Iterable[str], granted: Iterable[str]) -> list[str]:
    """Union of template-declared and project scopes, first occurrence wins."""
    return list(dict.fromkeys([*declared, *granted]))


def prepare_task(entry: Mapping[str, Any], scopes: Iterable[str], group_id: str) -> dict[str, Any]:
    """Return a new task definition carrying the merged scopes and the group id.

    taskGroupId can't be chosen by the template; any value there is replaced.
    """
    definition = unwrap_task(entry)
    definition["scopes"] = merge_scopes(definition.get("scopes") or [], scopes)
    definition["taskGroupId"] = group_id
    return definition


def schedule_task_group(
    client: TaskQueue,
    project: str,
    graph: TaskGraph,
    scopes: list[str],
    revision: str | None = None,
) -> str | None:
    """Create every task in graph, in order, and return the task group id.

    The group id is the id generated for the first task. Submission stops at the
    first failure; tasks already created are left in place.
    """
    group_id: str | None = None

    for entry in graph.tasks:
        task_id = slugid.nice()
        if group_id is None:
            group_id = task_id

        definition = prepare_task(entry, scopes, group_id)

        logger.info("Creating task. Project: %s Revision: %s Task ID: %s", project, revision, task_id)
        try:
            client.create_task(task_id, definition)
        except Exception as exc:
            logger.error("Error creating task %s for project %s: %s", task_id, project, exc)
            raise TaskSubmissionError(task_id, project, exc) from exc
        logger.info("Created task. Project: %s Revision: %s Task ID: %s", project, revision, task_id)

    return group_id
