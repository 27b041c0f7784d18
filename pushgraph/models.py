"""Shared pydantic models — the contract between collaborators, the pipeline and main.py."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Changeset(BaseModel):
    model_config = ConfigDict(frozen=True)

    node: str  # revision identifier
    desc: str = ""


class Push(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | str
    user: str
    changesets: list[Changeset]
    date: int  # unix timestamp

    @property
    def tip(self) -> Changeset:
        """Last changeset of the push, the one the template is fetched at."""
        return self.changesets[-1]


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    alias: str


class PushJob(BaseModel):
    """One unit of work: schedule the task graph for a single push."""

    model_config = ConfigDict(frozen=True)

    push_id: int | str
    repo: Repository
    revision_hash: str | None = None


class RepositoryUrl(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str  # "" for the root
    host: str  # scheme://hostname[:port]


class TemplateVariables(BaseModel):
    """Values substituted into .taskcluster.yml. Built once per job."""

    model_config = ConfigDict(frozen=True)

    owner: str
    revision: str
    project: str
    level: int
    revision_hash: str | None = None
    comment: str = " "  # never empty, see variables.build_template_variables
    pushlog_id: str
    url: str
    pushdate: int
    source: str


class TemplateV0(BaseModel):
    """Legacy template shape after substitution."""

    model_config = ConfigDict(extra="allow")

    version: Literal[0]
    tasks: list[dict[str, Any]] = Field(min_length=1)


class TaskGraph(BaseModel):
    """Ordered task definitions from one rendered template."""

    version: int
    tasks: list[dict[str, Any]]
