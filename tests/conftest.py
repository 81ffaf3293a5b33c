"""Shared test fixtures for actionmap."""

from __future__ import annotations

from pathlib import Path

import pytest

from actionmap.models.source import FileContent
from actionmap.models.workflow import CompositeStepModel, ReusableWorkflowModel, WorkflowModel
from actionmap.parser.loader import StructuralLoader, ValueLoader

FIXTURES_DIR = Path(__file__).parent / "fixtures"
WORKFLOWS_DIR = FIXTURES_DIR / "workflows"
ACTIONS_DIR = FIXTURES_DIR / "actions"

HTML_URL = "https://github.com/octo-org/octo-repo/blob/main/.github/workflows/ci.yml"


def workflow_file(name: str, html_url: str | None = None) -> FileContent:
    """Load a fixture as if it were fetched from ``.github/workflows/<name>``."""
    return FileContent.from_file(WORKFLOWS_DIR / name, f".github/workflows/{name}", html_url)


@pytest.fixture
def value_loader() -> ValueLoader:
    return ValueLoader()


@pytest.fixture
def structural_loader() -> StructuralLoader:
    return StructuralLoader()


@pytest.fixture
def ci_file() -> FileContent:
    return workflow_file("ci.yml", HTML_URL)


@pytest.fixture
def ci_workflow(ci_file: FileContent) -> WorkflowModel:
    return WorkflowModel(ci_file)


@pytest.fixture
def release_workflow() -> ReusableWorkflowModel:
    return ReusableWorkflowModel(workflow_file("release.yml"))


@pytest.fixture
def composite_file() -> FileContent:
    return FileContent.from_file(
        ACTIONS_DIR / "setup-python-cache" / "action.yml",
        ".github/actions/setup-python-cache/action.yml",
    )


@pytest.fixture
def composite_action(composite_file: FileContent) -> CompositeStepModel:
    return CompositeStepModel(composite_file)


SAMPLE_WORKFLOW_YAML = """\
name: Sample

on: push

jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - name: Unit tests
        run: pytest -q
      - run: deno fmt --check
  docs:
    name: Build docs
    runs-on: ubuntu-latest
    steps:
      - run: make html
"""
