"""Position-aware domain model of workflows, jobs, steps and composite actions.

Every model reads the same ``FileContent`` twice: once through ``ValueLoader``
into typed values, once through the node tree for line numbers. Jobs and steps
from the two views are paired by declaration order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ValidationError

from actionmap.ast.nodes import CompositeActionAst, JobAst, StepAst, WorkflowAst
from actionmap.models.errors import WorkflowParseError
from actionmap.models.source import FileContent
from actionmap.models.values import (
    CompositeActionValue,
    JobValue,
    ReusableWorkflowValue,
    StepValue,
    WorkflowValue,
)
from actionmap.parser.loader import ValueLoader
from actionmap.settings import Settings

logger = logging.getLogger("actionmap.models")

_V = TypeVar("_V", bound=BaseModel)

# GitHub injects these around every job; they have no YAML counterpart.
_PSEUDO_STEP_NAMES = frozenset({"Set up job", "Complete job"})
# Longest prefixes first so "Pre Run " wins over "Pre ".
_STEP_PREFIX_RE = re.compile(r"^(Pre Run |Post Run |Pre |Run |Post )")
# Greedy on purpose: strips from the first "${{" to the last "}}".
_EXPRESSION_RE = re.compile(r"\$\{\{.+\}\}")

NOT_SHOWABLE_STEP = "Error: Not showable step"


def _load_values(value_type: type[_V], file_content: FileContent, settings: Settings | None) -> _V:
    data = ValueLoader(settings).load_string(file_content.content, file_content.path)
    jobs = data.get("jobs")
    if isinstance(jobs, dict):
        data = {**data, "jobs": {str(job_id): job for job_id, job in jobs.items()}}
    try:
        return value_type.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
        )
        raise WorkflowParseError(
            f"not a valid {value_type.__name__}: {details}", path=file_content.path
        ) from exc


def _with_line(html_url: str | None, line: int) -> str | None:
    if html_url is None:
        return None
    return f"{html_url}#L{line}"


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------


class _WorkflowFileModel:
    value_type: ClassVar[type[WorkflowValue]] = WorkflowValue

    def __init__(self, file_content: FileContent, settings: Settings | None = None) -> None:
        self.file_content = file_content
        self.ast = WorkflowAst(file_content.content, file_content.path, settings)
        self.raw = _load_values(self.value_type, file_content, settings)
        self.html_url = file_content.html_url
        self._jobs = tuple(self._pair_jobs())
        logger.debug("Built %s for %s with %d jobs", type(self).__name__, self.path, len(self._jobs))

    def _pair_jobs(self) -> Iterable[JobModel]:
        job_asts = self.ast.job_asts()
        if len(job_asts) != len(self.raw.jobs):
            raise WorkflowParseError(
                f"found {len(self.raw.jobs)} jobs but {len(job_asts)} job nodes", path=self.path
            )
        for (job_id, job), job_ast in zip(self.raw.jobs.items(), job_asts):
            if job_ast.job_id != job_id:
                raise WorkflowParseError(
                    f"job '{job_id}' is paired with node '{job_ast.job_id}'",
                    path=self.path,
                    line=job_ast.start_line(),
                )
            yield JobModel(job_id, job, self.file_content, job_ast)

    @property
    def path(self) -> str:
        return self.file_content.path

    @property
    def name(self) -> str:
        """Declared name, or the file path as GitHub shows for unnamed workflows."""
        return self.raw.name if self.raw.name is not None else self.path

    @property
    def jobs(self) -> list[JobModel]:
        return list(self._jobs)

    def find_job(self, raw_name: str) -> JobModel | None:
        return JobModel.match(self._jobs, raw_name)


class WorkflowModel(_WorkflowFileModel):
    """A workflow file under ``.github/workflows``.

    Example::

        workflow = WorkflowModel(file_content)
        workflow.name
        [job.id for job in workflow.jobs]
    """

    raw: WorkflowValue

    @staticmethod
    def create_workflow_name_map(workflow_models: Iterable[WorkflowModel]) -> dict[str, WorkflowModel]:
        """Index models by workflow name.

        When two files share a name the later one wins.
        """
        return {model.name: model for model in workflow_models}


class ReusableWorkflowModel(_WorkflowFileModel):
    """A workflow called from another one through ``on: workflow_call``."""

    value_type = ReusableWorkflowValue
    raw: ReusableWorkflowValue

    def is_workflow_call(self) -> bool:
        return self.raw.is_workflow_call()


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobModel:
    """A job paired with its position in the workflow file."""

    def __init__(self, id: str, obj: JobValue, file_content: FileContent, ast: JobAst) -> None:
        self.id = id
        self.name = obj.name
        self.raw = obj
        self.ast = ast
        self.file_content = file_content
        self.html_url = file_content.html_url
        self._steps = tuple(_pair_steps(obj.steps, ast.step_asts(), file_content))

    def __repr__(self) -> str:
        return f"JobModel(id={self.id!r}, name={self.name!r}, start_line={self.start_line})"

    @property
    def start_line(self) -> int:
        return self.ast.start_line()

    @property
    def html_url_with_line(self) -> str | None:
        return _with_line(self.html_url, self.start_line)

    @property
    def steps(self) -> list[StepModel]:
        """Steps in order; empty for jobs that call a reusable workflow."""
        return list(self._steps)

    def is_matrix(self) -> bool:
        return self.raw.strategy is not None and self.raw.strategy.has_matrix

    def is_reusable(self) -> bool:
        """True for a local reusable workflow call (``uses: ./...``).

        Remote references such as ``org/repo/.github/workflows/x.yml@v1`` are
        not detected.
        """
        return self.raw.uses is not None and self.raw.uses.startswith("./")

    @staticmethod
    def match(job_models: Iterable[JobModel] | None, raw_name: str) -> JobModel | None:
        """Find the job an API job name was produced from.

        Tried per job, in order: the job id, the declared name, then for
        matrix jobs GitHub's expanded naming. Without a declared name GitHub
        shows ``id (value1, value2, ...)``; with one, the name has its
        ``${{ ... }}`` expressions evaluated, so only the literal remainder is
        searched for. Matrices with several keys can match loosely.
        """
        if job_models is None:
            return None

        for job_model in job_models:
            if job_model.id == raw_name:
                return job_model
            if job_model.name == raw_name:
                return job_model

            if job_model.is_matrix():
                if job_model.name is None:
                    if raw_name.startswith(job_model.id):
                        return job_model
                    continue
                trimmed_name = _EXPRESSION_RE.sub("", job_model.name).strip()
                if trimmed_name in raw_name:
                    return job_model

        return None


# ---------------------------------------------------------------------------
# Composite actions
# ---------------------------------------------------------------------------


class CompositeStepModel:
    """Steps of a local composite action (``action.yml``).

    The file has no ``jobs``; its ``runs.steps`` are paired with the
    synthetic job node from ``CompositeActionAst.synthetic_job_ast``.
    """

    def __init__(self, file_content: FileContent, settings: Settings | None = None) -> None:
        self.file_content = file_content
        self.raw = _load_values(CompositeActionValue, file_content, settings)
        self.ast = CompositeActionAst(file_content.content, file_content.path, settings).synthetic_job_ast()
        self._steps = tuple(_pair_steps(self.raw.runs.steps, self.ast.step_asts(), file_content))

    @property
    def name(self) -> str | None:
        return self.raw.name

    @property
    def description(self) -> str | None:
        return self.raw.description

    @property
    def steps(self) -> list[StepModel]:
        return list(self._steps)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActionRef:
    """``actions/checkout@v4`` split into ``action`` and ``ref``."""

    action: str
    ref: str | None = None

    @classmethod
    def parse(cls, uses: str) -> ActionRef:
        action, sep, ref = uses.rpartition("@")
        if not sep:
            return cls(action=uses)
        return cls(action=action, ref=ref)


def _pair_steps(
    steps: list[StepValue] | None,
    step_asts: list[StepAst] | None,
    file_content: FileContent,
) -> Iterable[StepModel]:
    if steps is None and step_asts is None:
        return []
    if steps is None or step_asts is None:
        raise WorkflowParseError(
            "'steps' found in only one of the value and node views", path=file_content.path
        )
    if len(steps) != len(step_asts):
        raise WorkflowParseError(
            f"found {len(steps)} steps but {len(step_asts)} step nodes", path=file_content.path
        )
    return [StepModel(step, file_content, step_ast) for step, step_ast in zip(steps, step_asts)]


class StepModel:
    """A step paired with its position in the file."""

    def __init__(self, obj: StepValue, file_content: FileContent, ast: StepAst) -> None:
        self.raw = obj
        self.uses = ActionRef.parse(obj.uses) if obj.uses else None
        name = _first_defined(obj.name, obj.run, self.uses.action if self.uses else None)
        self.name: str = name if name is not None else ""
        self.ast = ast
        self.file_content = file_content
        self.html_url = file_content.html_url

    def __repr__(self) -> str:
        return f"StepModel(name={self.name!r}, start_line={self.start_line})"

    @property
    def id(self) -> str | None:
        return self.raw.id

    @property
    def start_line(self) -> int:
        return self.ast.start_line()

    @property
    def html_url_with_line(self) -> str | None:
        return _with_line(self.html_url, self.start_line)

    @property
    def showable(self) -> str:
        """Label for display: declared name, else raw ``uses``, else raw ``run``."""
        showable = _first_defined(self.raw.name, self.raw.uses, self.raw.run)
        return showable if showable is not None else NOT_SHOWABLE_STEP

    def is_composite(self) -> bool:
        """True for a local composite action (``uses: ./path``).

        ``uses: ./`` runs the repository itself as an action and is not
        composite. Remote composite actions are not detected.
        """
        if self.raw.uses == "./":
            return False
        return self.raw.uses is not None and self.raw.uses.startswith("./")

    @staticmethod
    def match(step_models: Iterable[StepModel] | None, raw_name: str) -> StepModel | None:
        """Find the step an API step name was produced from.

        The API reports a declared ``name`` as is and otherwise ``Run <run>``
        or ``Run <uses>``. Action hooks add ``Pre ``/``Post `` (``Pre Run ``/
        ``Post Run `` for unnamed ``uses`` steps).
        """
        if step_models is None:
            return None
        if raw_name in _PSEUDO_STEP_NAMES:
            return None

        name = _STEP_PREFIX_RE.sub("", raw_name, count=1)
        action = name.split("@", 1)[0]
        for step_model in step_models:
            # rawName comes from step.name or step.run
            if step_model.name == name:
                return step_model
            # rawName comes from step.uses
            if step_model.uses is not None and step_model.uses.action == action:
                return step_model
        return None


def _first_defined(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None
