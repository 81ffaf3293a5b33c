"""Tests for Pydantic value models, file snapshots and run records."""

from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from actionmap.models.runs import WorkflowJobRecord, WorkflowRunRecord, parse_workflow_run_url
from actionmap.models.source import FileContent
from actionmap.models.values import CompositeActionValue, JobValue, StepValue, WorkflowValue


class TestValues:
    def test_step_aliases(self) -> None:
        step = StepValue.model_validate({"uses": "actions/cache@v4", "with": {"path": "~/.npm"}})
        assert step.with_ == {"path": "~/.npm"}
        assert step.extras == {}

    def test_unknown_keys_kept_in_extras(self) -> None:
        step = StepValue.model_validate({"run": "make", "shell": "bash", "env": {"A": "1"}})
        assert step.extras == {"shell": "bash", "env": {"A": "1"}}

    def test_job_runs_on_forms(self) -> None:
        assert JobValue.model_validate({"runs-on": "ubuntu-latest"}).runs_on == "ubuntu-latest"
        assert JobValue.model_validate({"runs-on": ["self-hosted", "linux"]}).runs_on == ["self-hosted", "linux"]
        assert JobValue.model_validate({"runs-on": {"group": "large"}}).runs_on == {"group": "large"}

    def test_matrix_presence(self) -> None:
        assert JobValue.model_validate({"strategy": {"matrix": None}}).strategy.has_matrix  # type: ignore[union-attr]
        assert not JobValue.model_validate({"strategy": {}}).strategy.has_matrix  # type: ignore[union-attr]

    def test_workflow_requires_jobs(self) -> None:
        with pytest.raises(ValidationError):
            WorkflowValue.model_validate({"name": "x"})

    def test_workflow_jobs_keep_order(self) -> None:
        value = WorkflowValue.model_validate({"jobs": {"z": {}, "a": {}, "m": {}}})
        assert list(value.jobs) == ["z", "a", "m"]

    def test_composite_action(self) -> None:
        value = CompositeActionValue.model_validate(
            {"name": "x", "runs": {"using": "composite", "steps": [{"run": "echo"}]}}
        )
        assert value.runs.using == "composite"
        assert value.runs.steps[0].run == "echo"

    def test_numeric_scalars_become_strings(self) -> None:
        job = JobValue.model_validate({"name": 42, "runs-on": ["self-hosted", 1], "steps": [{"name": 3.12}]})
        assert job.name == "42"
        assert job.runs_on == ["self-hosted", "1"]
        assert job.steps is not None and job.steps[0].name == "3.12"
        action = CompositeActionValue.model_validate(
            {"name": 7, "description": 2024, "runs": {"using": "composite", "steps": []}}
        )
        assert (action.name, action.description) == ("7", "2024")

    def test_values_are_frozen(self) -> None:
        step = StepValue(name="a")
        with pytest.raises(ValidationError):
            step.name = "b"  # type: ignore[misc]


class TestFileContent:
    def test_from_contents_response(self) -> None:
        text = "name: CI\njobs: {}\n# ✓ 日本語\n"
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        # The API wraps base64 at 60 characters.
        wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
        content = FileContent.from_contents_response(
            {
                "type": "file",
                "path": ".github/workflows/ci.yml",
                "name": "ci.yml",
                "content": wrapped,
                "html_url": "https://github.com/o/r/blob/main/.github/workflows/ci.yml",
                "download_url": None,
            }
        )
        assert content.content == text
        assert content.path == ".github/workflows/ci.yml"
        assert content.html_url == "https://github.com/o/r/blob/main/.github/workflows/ci.yml"

    def test_from_text(self) -> None:
        content = FileContent.from_text("a: 1\n", "a.yml")
        assert content.path == "a.yml"
        assert content.html_url is None

    def test_path_required(self) -> None:
        with pytest.raises(ValidationError):
            FileContent.model_validate({"content": "", "raw": {}})


class TestRunRecords:
    def test_run_ignores_unknown_fields(self) -> None:
        run = WorkflowRunRecord.model_validate(
            {
                "id": 42,
                "path": ".github/workflows/ci.yml",
                "head_sha": "abc123",
                "run_attempt": 2,
                "repository": {"name": "repo", "full_name": "octo/repo", "private": False},
                "display_title": "ignored",
            }
        )
        assert run.path == ".github/workflows/ci.yml"
        assert run.run_attempt == 2
        assert run.repository is not None and run.repository.full_name == "octo/repo"

    def test_job_steps_default_empty(self) -> None:
        job = WorkflowJobRecord.model_validate({"name": "build"})
        assert job.steps == []


class TestParseWorkflowRunUrl:
    def test_run_url(self) -> None:
        url = parse_workflow_run_url("https://github.com/octo-org/octo-repo/actions/runs/123456")
        assert url.origin == "https://github.com"
        assert url.owner == "octo-org"
        assert url.repo == "octo-repo"
        assert url.run_id == 123456
        assert url.run_attempt is None

    def test_run_url_with_attempt(self) -> None:
        url = parse_workflow_run_url("https://ghe.example.com/octo/repo/actions/runs/99/attempts/3")
        assert url.origin == "https://ghe.example.com"
        assert url.run_id == 99
        assert url.run_attempt == 3

    def test_not_a_run_url(self) -> None:
        with pytest.raises(ValueError):
            parse_workflow_run_url("https://github.com/octo/repo/pulls/1")
