"""Schedule the task graph for one push.

fetching-push-metadata → fetching-template → rendering → submitting → done

Any failure moves the job to failed and propagates, except template render
failures, which the renderer turns into an error task.
"""

import logging
from collections.abc import Callable
from enum import Enum

from pushgraph.fetcher import fetch_template
from pushgraph.models import Push, PushJob, TaskGraph, TemplateVariables
from pushgraph.projects import ProjectRegistry
from pushgraph.providers.base import PushLog, TaskQueue
from pushgraph.render import render_task_graph
from pushgraph.submit import schedule_task_group
from pushgraph.variables import build_template_variables, url_variables

logger = logging.getLogger(__name__)

QueueFactory = Callable[[list[str]], TaskQueue]


class JobState(str, Enum):
    FETCHING_PUSH_METADATA = "fetching-push-metadata"
    FETCHING_TEMPLATE = "fetching-template"
    RENDERING = "rendering"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


def notify_scope(user: str) -> str:
    """Every push may email the user who submitted it."""
    return f"queue:route:notify.email.{user}.*"


class TaskGraphJob:
    def __init__(
        self,
        job: PushJob,
        pushlog: PushLog,
        registry: ProjectRegistry,
        queue_factory: QueueFactory,
        fetch: Callable[[str], str] = fetch_template,
    ) -> None:
        self.job = job
        self.state = JobState.FETCHING_PUSH_METADATA
        self.group_id: str | None = None
        self._pushlog = pushlog
        self._registry = registry
        self._queue_factory = queue_factory
        self._fetch = fetch
        self._revision: str | None = None

    def _enter(self, state: JobState) -> None:
        logger.debug(
            "Job for %s push %s: %s → %s", self.job.repo.alias, self.job.push_id, self.state.value, state.value
        )
        self.state = state

    def scopes(self, push: Push) -> list[str]:
        return [*self._registry.scopes(self.job.repo.alias), notify_scope(push.user)]

    def render(self) -> tuple[Push, TaskGraph]:
        """Fetch push metadata and the template, and render it. Nothing is submitted."""
        repo = self.job.repo

        self._enter(JobState.FETCHING_PUSH_METADATA)
        push = self._pushlog.get_one(repo.url, self.job.push_id)
        self._revision = push.tip.node
        level = self._registry.level(repo.alias)

        self._enter(JobState.FETCHING_TEMPLATE)
        template_url = self._registry.template_url(url_variables(repo, push.tip.node))
        logger.info("Fetching '.taskcluster.yml' url %s for '%s' push id %s", template_url, repo.alias, push.id)
        template = self._fetch(template_url)

        self._enter(JobState.RENDERING)
        variables: TemplateVariables = build_template_variables(
            push, repo, level, source=template_url, revision_hash=self.job.revision_hash
        )
        graph = render_task_graph(template, variables, self._registry.error_template)
        return push, graph

    def run(self) -> str | None:
        """Run the whole pipeline and return the task group id."""
        try:
            push, graph = self.render()

            self._enter(JobState.SUBMITTING)
            scopes = self.scopes(push)
            queue = self._queue_factory(scopes)
            self.group_id = schedule_task_group(queue, self.job.repo.alias, graph, scopes, revision=push.tip.node)
        except Exception:
            failed_in = self.state
            self.state = JobState.FAILED
            logger.exception(
                "Job failed while %s. Project: %s Revision: %s Push: %s",
                failed_in.value,
                self.job.repo.alias,
                self._revision,
                self.job.push_id,
            )
            raise

        self._enter(JobState.DONE)
        logger.info("Scheduled task group %s for %s push %s", self.group_id, self.job.repo.alias, push.id)
        return self.group_id


def run_job(
    job: PushJob,
    pushlog: PushLog,
    registry: ProjectRegistry,
    queue_factory: QueueFactory,
    fetch: Callable[[str], str] = fetch_template,
) -> str | None:
    return TaskGraphJob(job, pushlog, registry, queue_factory, fetch=fetch).run()
