"""Maps jobs and steps of live workflow runs back to their YAML definitions."""

from __future__ import annotations

import logging
import posixpath
import threading
from dataclasses import dataclass, field

from actionmap.models.errors import ParseError
from actionmap.models.runs import WorkflowJobRecord, WorkflowRunRecord, WorkflowStepRecord
from actionmap.models.source import FileContent
from actionmap.models.workflow import (
    CompositeStepModel,
    JobModel,
    ReusableWorkflowModel,
    StepModel,
    WorkflowModel,
)
from actionmap.settings import Settings

logger = logging.getLogger("actionmap.service")

# GitHub names jobs of a called workflow "<caller job> / <callee job>".
REUSABLE_JOB_SEPARATOR = " / "
_ACTION_FILENAMES = ("action.yml", "action.yaml")

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class StepMapping:
    """An API step and the YAML step it came from, if any."""

    record: WorkflowStepRecord
    step: StepModel | None
    composite_steps: list[StepModel] = field(default_factory=list)


@dataclass
class JobMapping:
    """An API job and the YAML job it came from, if any.

    For jobs run by a local reusable workflow, ``job`` is the job inside the
    called workflow and ``caller`` the job that called it.
    """

    record: WorkflowJobRecord
    job: JobModel | None
    caller: JobModel | None = None
    steps: list[StepMapping] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.job is not None


def _local_path(uses: str) -> str:
    """``./.github/actions/setup/`` -> ``.github/actions/setup``."""
    return posixpath.normpath(uses[2:]) if uses.startswith("./") else uses


# ---------------------------------------------------------------------------
# RunMapper
# ---------------------------------------------------------------------------


class RunMapper:
    """Registry of parsed files of one repository at one ref.

    Workflows are keyed by their repository path, which is what a run's
    ``path`` field holds. Files that fail to parse are logged and skipped so
    a single broken file does not stop a batch.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._lock = threading.Lock()
        self._workflows: dict[str, WorkflowModel] = {}
        self._reusable_workflows: dict[str, ReusableWorkflowModel] = {}
        self._composite_actions: dict[str, CompositeStepModel] = {}

    # -- registration --------------------------------------------------------

    def add_workflow(self, file_content: FileContent) -> WorkflowModel | None:
        try:
            model = WorkflowModel(file_content, self._settings)
        except ParseError as exc:
            logger.warning("Skipping workflow %s: %s", file_content.path, exc.message)
            return None
        with self._lock:
            self._workflows[file_content.path] = model
        return model

    def add_reusable_workflow(self, file_content: FileContent) -> ReusableWorkflowModel | None:
        try:
            model = ReusableWorkflowModel(file_content, self._settings)
        except ParseError as exc:
            logger.warning("Skipping reusable workflow %s: %s", file_content.path, exc.message)
            return None
        if not model.is_workflow_call():
            logger.debug("Reusable workflow %s does not declare workflow_call", file_content.path)
        with self._lock:
            self._reusable_workflows[posixpath.normpath(file_content.path)] = model
        return model

    def add_composite_action(self, file_content: FileContent) -> CompositeStepModel | None:
        """Register an ``action.yml``; it is looked up by its directory."""
        try:
            model = CompositeStepModel(file_content, self._settings)
        except ParseError as exc:
            logger.warning("Skipping composite action %s: %s", file_content.path, exc.message)
            return None
        directory, filename = posixpath.split(file_content.path)
        key = posixpath.normpath(directory) if filename in _ACTION_FILENAMES else posixpath.normpath(file_content.path)
        with self._lock:
            self._composite_actions[key] = model
        return model

    # -- lookups -------------------------------------------------------------

    def workflow_for(self, run: WorkflowRunRecord) -> WorkflowModel | None:
        with self._lock:
            return self._workflows.get(run.path)

    def workflow_name_map(self) -> dict[str, WorkflowModel]:
        with self._lock:
            models = list(self._workflows.values())
        return WorkflowModel.create_workflow_name_map(models)

    def reusable_workflow_for(self, job: JobModel) -> ReusableWorkflowModel | None:
        if not job.is_reusable() or job.raw.uses is None:
            return None
        with self._lock:
            return self._reusable_workflows.get(_local_path(job.raw.uses))

    def composite_action_for(self, step: StepModel) -> CompositeStepModel | None:
        if not step.is_composite() or step.uses is None:
            return None
        with self._lock:
            return self._composite_actions.get(_local_path(step.uses.action))

    # -- mapping -------------------------------------------------------------

    def map_jobs(self, run: WorkflowRunRecord, jobs: list[WorkflowJobRecord]) -> list[JobMapping]:
        return [self.map_job(run, job) for job in jobs]

    def map_job(self, run: WorkflowRunRecord, record: WorkflowJobRecord) -> JobMapping:
        """Resolve one API job (and its steps) against the run's workflow."""
        workflow = self.workflow_for(run)
        if workflow is None:
            logger.debug("No workflow registered for %s", run.path)
            return JobMapping(record=record, job=None)

        caller, job = self._resolve_job(workflow, record.name)
        if job is None:
            logger.debug("Job %r has no definition in %s", record.name, run.path)
            return JobMapping(record=record, job=None)

        steps = [self._map_step(job, step_record) for step_record in record.steps]
        return JobMapping(record=record, job=job, caller=caller, steps=steps)

    def _resolve_job(self, workflow: WorkflowModel, raw_name: str) -> tuple[JobModel | None, JobModel | None]:
        caller_name, sep, callee_name = raw_name.partition(REUSABLE_JOB_SEPARATOR)
        if sep:
            caller = JobModel.match(workflow.jobs, caller_name)
            reusable = self.reusable_workflow_for(caller) if caller is not None else None
            if reusable is not None:
                return caller, JobModel.match(reusable.jobs, callee_name)
        return None, JobModel.match(workflow.jobs, raw_name)

    def _map_step(self, job: JobModel, record: WorkflowStepRecord) -> StepMapping:
        step = StepModel.match(job.steps, record.name)
        if step is None:
            return StepMapping(record=record, step=None)
        composite = self.composite_action_for(step)
        composite_steps = composite.steps if composite is not None else []
        return StepMapping(record=record, step=step, composite_steps=composite_steps)
