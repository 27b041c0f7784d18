"""Smoke tests for CLI commands using typer CliRunner."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

import pushgraph.settings as settings_module
from pushgraph.errors import TemplateFetchError
from pushgraph.main import app, build_job
from pushgraph.models import TaskGraph

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_lru_cache():
    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


def _mock_job(group_id: str = "group-1") -> MagicMock:
    job = MagicMock()
    job.run.return_value = group_id
    job.render.return_value = (MagicMock(), TaskGraph(version=0, tasks=[{"payload": {}, "schedulerId": "x"}]))
    job.scopes.return_value = ["scope:a"]
    return job


class TestSchedule:
    def test_prints_group_id(self) -> None:
        with patch("pushgraph.main.build_job", return_value=_mock_job()) as build:
            result = runner.invoke(app, ["schedule", "https://hg.mozilla.org/try", "42", "--alias", "try"])
        assert result.exit_code == 0
        assert "group-1" in result.output
        build.assert_called_once_with("https://hg.mozilla.org/try", 42, "try", None)

    def test_failure_exits_nonzero(self) -> None:
        job = _mock_job()
        job.run.side_effect = TemplateFetchError("https://x", RuntimeError("timeout"))
        with patch("pushgraph.main.build_job", return_value=job):
            result = runner.invoke(app, ["schedule", "https://hg.mozilla.org/try", "42", "--alias", "try"])
        assert result.exit_code == 1
        assert "Could not fetch template" in result.output


class TestRender:
    def test_prints_graph_json(self) -> None:
        job = _mock_job()
        with patch("pushgraph.main.build_job", return_value=job):
            result = runner.invoke(app, ["render", "https://hg.mozilla.org/try", "42", "--alias", "try"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["scopes"] == ["scope:a"]
        assert data["tasks"] == [{"payload": {}, "schedulerId": "x"}]
        job.run.assert_not_called()


class TestConfigShow:
    def test_masks_token(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PUSHGRAPH_TASKCLUSTER_ACCESS_TOKEN", "supersecrettoken")
        monkeypatch.setenv("PUSHGRAPH_PROJECTS_PATH", str(tmp_path / "missing.toml"))
        result = runner.invoke(app, ["config-show"])
        assert result.exit_code == 0
        assert "supersecrettoken" not in result.output


def test_build_job_wires_collaborators(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PUSHGRAPH_PROJECTS_PATH", str(tmp_path / "missing.toml"))
    job = build_job("https://hg.mozilla.org/try", 42, "try", "rh")
    assert job.job.push_id == 42
    assert job.job.repo.alias == "try"
    assert job.job.revision_hash == "rh"
