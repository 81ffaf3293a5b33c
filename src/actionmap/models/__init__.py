"""Pydantic value models and errors for actionmap.

The position-aware domain models live in ``actionmap.models.workflow``.
"""

from actionmap.models.errors import ParseError, WorkflowParseError, YAMLParseError, YAMLSafetyError
from actionmap.models.runs import WorkflowJobRecord, WorkflowRunRecord, WorkflowStepRecord, parse_workflow_run_url
from actionmap.models.source import FileContent, FileContentResponse
from actionmap.models.values import (
    CompositeActionValue,
    JobValue,
    ReusableWorkflowValue,
    StepValue,
    StrategyValue,
    WorkflowValue,
)

__all__ = [
    "CompositeActionValue",
    "FileContent",
    "FileContentResponse",
    "JobValue",
    "ParseError",
    "ReusableWorkflowValue",
    "StepValue",
    "StrategyValue",
    "WorkflowJobRecord",
    "WorkflowParseError",
    "WorkflowRunRecord",
    "WorkflowStepRecord",
    "WorkflowValue",
    "YAMLParseError",
    "YAMLSafetyError",
    "parse_workflow_run_url",
]
