"""Typed values for workflow, job, step and composite action YAML.

Each model declares the keys this package reads. Every other key is kept in
``extras`` so callers can still reach it without dynamic attribute access.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _YamlValue(BaseModel):
    # ``name: 2024`` or ``runs-on: [self-hosted, 1]`` load as numbers.
    model_config = ConfigDict(
        extra="allow", populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    @property
    def extras(self) -> dict[str, Any]:
        """Unrecognized keys, in declaration order."""
        return dict(self.model_extra or {})


class StepValue(_YamlValue):
    """A single entry of a ``steps`` sequence."""

    id: str | None = None
    name: str | None = None
    uses: str | None = None
    run: str | None = None
    with_: dict[str, Any] | None = Field(None, alias="with")


class StrategyValue(_YamlValue):
    # ``matrix`` may be a mapping, an expression string, or explicitly null.
    matrix: Any = None

    @property
    def has_matrix(self) -> bool:
        return "matrix" in self.model_fields_set


class JobValue(_YamlValue):
    """A job: either a run job (``steps``) or a call job (``uses``)."""

    name: str | None = None
    runs_on: str | list[str] | dict[str, Any] | None = Field(None, alias="runs-on")
    uses: str | None = None
    steps: list[StepValue] | None = None
    strategy: StrategyValue | None = None


class WorkflowValue(_YamlValue):
    name: str | None = None
    on: Any = None
    jobs: dict[str, JobValue]


class ReusableWorkflowValue(WorkflowValue):
    """A workflow meant to be called through ``on: workflow_call``."""

    def is_workflow_call(self) -> bool:
        if isinstance(self.on, str):
            return self.on == "workflow_call"
        if isinstance(self.on, (list, dict)):
            return "workflow_call" in self.on
        return False


class CompositeRunsValue(_YamlValue):
    using: str
    steps: list[StepValue]


class CompositeActionValue(_YamlValue):
    """An ``action.yml`` with ``runs.using: composite``."""

    name: str | None = None
    description: str | None = None
    runs: CompositeRunsValue
