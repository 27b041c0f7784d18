"""Shared test fixtures."""

import pytest

from pushgraph.models import Changeset, Push, PushJob, Repository, TemplateVariables
from pushgraph.projects import ProjectRegistry

TEMPLATE_V0 = """\
---
version: 0
metadata:
  name: 'Decision task'
  owner: '{{owner}}'
tasks:
  - taskId: '{{#as_slugid}}decision task{{/as_slugid}}'
    task:
      created: '{{now}}'
      deadline: '{{#from_now}}1 day{{/from_now}}'
      scopes:
        - 'queue:create-task:aws-provisioner-v1/gecko-decision'
      payload:
        env:
          GECKO_HEAD_REV: '{{revision}}'
          TRY_COMMENT: '{{comment}}'
          PUSHLOG_ID: '{{pushlog_id}}'
      metadata:
        owner: '{{owner}}'
        source: '{{source}}'
"""


@pytest.fixture
def push() -> Push:
    return Push(
        id=42,
        user="jane@example.com",
        date=1700000000,
        changesets=[
            Changeset(node="aaaa1111", desc="Bug 1 - first part"),
            Changeset(node="bbbb2222", desc="Bug 1 - second part\ntry: -b do -p all"),
        ],
    )


@pytest.fixture
def repo() -> Repository:
    return Repository(url="https://hg.mozilla.org/try/", alias="try")


@pytest.fixture
def push_job(repo: Repository) -> PushJob:
    return PushJob(push_id=42, repo=repo, revision_hash="rh123")


@pytest.fixture
def variables() -> TemplateVariables:
    return TemplateVariables(
        owner="jane@example.com",
        revision="bbbb2222",
        project="try",
        level=3,
        revision_hash="rh123",
        comment="try: -b do -p all",
        pushlog_id="42",
        url="https://hg.mozilla.org/try/",
        pushdate=1700000000,
        source="https://hg.mozilla.org/try/raw-file/bbbb2222/.taskcluster.yml",
    )


@pytest.fixture
def registry() -> ProjectRegistry:
    return ProjectRegistry(
        {
            "default_level": 1,
            "default_scopes": ["queue:route:index.default.*"],
            "projects": {
                "try": {"level": 1, "scopes": ["assume:repo:hg.mozilla.org/try:*"]},
                "mozilla-central": {
                    "level": 3,
                    "scopes": ["assume:repo:hg.mozilla.org/mozilla-central:*"],
                    "url": "https://example.com/{{alias}}/{{revision}}/.taskcluster.yml",
                },
            },
        }
    )


@pytest.fixture
def template_v0() -> str:
    return TEMPLATE_V0
