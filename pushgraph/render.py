"""Render .taskcluster.yml into a task graph.

Templates are mustache documents that become YAML once variables are
substituted. Substitution is NOT HTML-escaped: templates come from vetted
per-project repositories listed in the project registry, never from end users.

Version detection is two-phase. A strict YAML parse is tried first; if that
fails and the raw text contains "version: 0" the template is treated as
version 0, since legacy templates only become valid YAML after substitution.
No other heuristic is applied.

When the project template cannot be rendered, the project's error template is
rendered instead so the push owner still gets a task explaining what went
wrong.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import pystache
import slugid
import taskcluster
import yaml
from pydantic import ValidationError

from pushgraph.errors import TemplateParseError, UnsupportedTemplateVersionError
from pushgraph.models import TaskGraph, TemplateV0, TemplateVariables

logger = logging.getLogger(__name__)

LEGACY_VERSION_MARKER = "version: 0"
ERROR_MSG_KEY = "ERROR_MSG"

_renderer = pystache.Renderer(escape=lambda text: text)


# ---------------------------------------------------------------------------
# Mustache helpers
# ---------------------------------------------------------------------------


def json_date(moment: datetime) -> str:
    """Format like JavaScript's Date.toJSON(): 2016-01-01T00:00:00.000Z"""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def relative_time(expression: str, now: datetime | None = None) -> str:
    """Resolve a Taskcluster offset ("1 day", "2h", "-1 hour") against now as a JSON date."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(tzinfo=None)
    try:
        return taskcluster.stringDate(taskcluster.fromNow(expression.strip(), now))
    except ValueError as exc:
        raise TemplateParseError(f"Invalid relative time expression: {expression!r}") from exc


def render_text(template: str, variables: Mapping[str, Any], now: datetime | None = None) -> str:
    """Substitute variables into a mustache template without HTML escaping."""
    now = now or datetime.now(timezone.utc)
    labels: dict[str, str] = {}

    # Section helpers; a plain {{from_now}} tag calls them without text.
    def from_now(text: str | None = None) -> str:
        if text is None:
            raise TemplateParseError("from_now must be used as a section: {{#from_now}}1 day{{/from_now}}")
        return relative_time(text, now)

    def as_slugid(label: str | None = None) -> str:
        if label is None:
            raise TemplateParseError("as_slugid must be used as a section: {{#as_slugid}}label{{/as_slugid}}")
        # same label → same id within one render
        return labels.setdefault(label.strip(), slugid.nice())

    # None renders as a missing tag (empty) rather than "None"
    context = {k: v for k, v in variables.items() if v is not None}
    context = {"now": json_date(now), "from_now": from_now, "as_slugid": as_slugid, **context}
    try:
        return _renderer.render(template, context)
    except TemplateParseError:
        raise
    except Exception as exc:
        raise TemplateParseError(f"Invalid template syntax: {exc}") from exc


def instantiate(template: str, variables: TemplateVariables) -> Any:
    """Render a mustache template and load the result as YAML."""
    content = render_text(template, variables.model_dump())
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise TemplateParseError(f"Invalid YAML after substitution: {exc}") from exc


# ---------------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------------


def detect_version(template: str) -> Any:
    try:
        doc = yaml.safe_load(template)
    except yaml.YAMLError as exc:
        if LEGACY_VERSION_MARKER in template:
            return 0
        raise TemplateParseError(f"Invalid .taskcluster.yml: {exc}") from exc
    if not isinstance(doc, dict):
        raise TemplateParseError(".taskcluster.yml must be a mapping with a version field")
    return doc.get("version")


def unwrap_task(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Version 0 lists tasks as {taskId: ..., task: <definition>}; bare definitions are accepted too."""
    inner = entry.get("task")
    if isinstance(inner, Mapping):
        return dict(inner)
    return dict(entry)


def _load_v0(template: str, variables: TemplateVariables) -> TemplateV0:
    doc = instantiate(template, variables)
    try:
        return TemplateV0.model_validate(doc)
    except ValidationError as exc:
        raise TemplateParseError(f"Invalid version 0 .taskcluster.yml: {exc}") from exc


def render_template_v0(template: str, variables: TemplateVariables) -> TaskGraph:
    scheduler_id = f"gecko-level-{variables.level}"
    parsed = _load_v0(template, variables)
    tasks = [{**unwrap_task(entry), "schedulerId": scheduler_id} for entry in parsed.tasks]
    return TaskGraph(version=0, tasks=tasks)


def render_template(template: str, variables: TemplateVariables) -> TaskGraph:
    """Render a project template. Raises TemplateError subclasses on malformed input."""
    version = detect_version(template)
    if version == 0 and not isinstance(version, bool):
        return render_template_v0(template, variables)
    raise UnsupportedTemplateVersionError(version)


# ---------------------------------------------------------------------------
# Error task fallback
# ---------------------------------------------------------------------------


def render_error_graph(error_template: str, variables: TemplateVariables, error: BaseException) -> TaskGraph:
    """Render the project's error template and attach the error message.

    Only the first task receives ERROR_MSG, and only when its payload env does
    not already define one.
    """
    parsed = _load_v0(error_template, variables)
    tasks = [unwrap_task(entry) for entry in parsed.tasks]

    first = tasks[0]
    payload = first.get("payload") or {}
    if not isinstance(payload, Mapping):
        raise TemplateParseError("Error template task payload must be a mapping")
    env = payload.get("env") or {}
    if not isinstance(env, Mapping):
        raise TemplateParseError("Error template task payload.env must be a mapping")
    env = dict(env)
    env.setdefault(ERROR_MSG_KEY, str(error))
    tasks[0] = {**first, "payload": {**payload, "env": env}}
    return TaskGraph(version=parsed.version, tasks=tasks)


def render_task_graph(template: str, variables: TemplateVariables, error_template: str) -> TaskGraph:
    """Render the project template, falling back to the error template on any failure.

    Failures of the error template itself propagate.
    """
    try:
        return render_template(template, variables)
    except Exception as exc:
        logger.warning(
            "Error interpreting .taskcluster.yml for %s at %s: %s",
            variables.project,
            variables.revision,
            exc,
        )
        return render_error_graph(error_template, variables, exc)
