"""Project registry: per-project level, scopes and template location.

The registry is a TOML file:

    default_url = "{{host}}{{path}}/raw-file/{{revision}}/.taskcluster.yml"
    default_level = 1
    default_scopes = []

    [projects.try]
    level = 1
    scopes = ["assume:repo:hg.mozilla.org/try:*"]

Aliases without a [projects.<alias>] table use the defaults.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit

from pushgraph.errors import ProjectConfigError
from pushgraph.render import render_text

DEFAULT_URL = "{{host}}{{path}}/raw-file/{{revision}}/.taskcluster.yml"
DEFAULT_LEVEL = 1

DEFAULT_ERROR_TASK = """\
version: 0
metadata:
  name: 'Taskcluster .taskcluster.yml error'
  owner: '{{owner}}'
  source: '{{source}}'
tasks:
  - task:
      provisionerId: 'aws-provisioner-v1'
      workerType: 'gecko-decision'
      created: '{{now}}'
      deadline: '{{#from_now}}1 day{{/from_now}}'
      routes:
        - 'notify.email.{{owner}}.on-any'
      payload:
        image: 'ubuntu:22.04'
        maxRunTime: 600
        command:
          - /bin/bash
          - -c
          - 'echo "$ERROR_MSG" && exit 1'
      metadata:
        name: '.taskcluster.yml error'
        description: 'Could not interpret .taskcluster.yml for {{project}} at {{revision}}'
        owner: '{{owner}}'
        source: '{{source}}'
"""


@lru_cache(maxsize=8)
def _load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load the registry file, returning an empty document if missing."""
    if not path.exists():
        return tomlkit.document()
    with path.open() as fh:
        return tomlkit.load(fh)


class ProjectRegistry:
    def __init__(self, config: Mapping) -> None:
        self._config = config

    @classmethod
    def from_path(cls, path: Path) -> "ProjectRegistry":
        return cls(_load_toml(path))

    def _project(self, alias: str) -> Mapping:
        projects = self._config.get("projects", {})
        project = projects.get(alias, {})
        if not isinstance(project, Mapping):
            raise ProjectConfigError(f"[projects.{alias}] must be a table")
        return project

    def aliases(self) -> list[str]:
        return list(self._config.get("projects", {}))

    def level(self, alias: str) -> int:
        value = self._project(alias).get("level", self._config.get("default_level", DEFAULT_LEVEL))
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ProjectConfigError(f"Invalid level {value!r} for project {alias}") from exc

    def scopes(self, alias: str) -> list[str]:
        """Scopes granted to the project. Always a new list."""
        value = self._project(alias).get("scopes", self._config.get("default_scopes", []))
        if isinstance(value, str) or not all(isinstance(s, str) for s in value):
            raise ProjectConfigError(f"scopes for project {alias} must be a list of strings")
        return [str(s) for s in value]

    def template_url(self, url_variables: Mapping[str, str]) -> str:
        alias = url_variables["alias"]
        pattern = self._project(alias).get("url", self._config.get("default_url", DEFAULT_URL))
        return render_text(str(pattern), url_variables)

    @property
    def error_template(self) -> str:
        return str(self._config.get("error_task", DEFAULT_ERROR_TASK))
