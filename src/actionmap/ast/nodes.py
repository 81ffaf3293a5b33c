"""Position view of workflow and composite action files.

These wrappers walk the ruamel node tree composed from the raw text and
answer one question: on which line does a job or step start?

Example::

    ast = WorkflowAst(yaml_text)
    job_asts = ast.job_asts()
    job_asts[0].start_line()  # line of the first job key
"""

from __future__ import annotations

from ruamel.yaml.nodes import MappingNode, Node, SequenceNode

from actionmap.models.errors import WorkflowParseError
from actionmap.parser.loader import StructuralLoader, mapping_get, mapping_items
from actionmap.parser.positions import SourceIndex
from actionmap.settings import Settings


class WorkflowAst:
    """Node tree of a workflow file plus its line index."""

    def __init__(
        self,
        yaml: str,
        filename: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.filename = filename
        self.root: MappingNode = StructuralLoader(settings).compose(yaml, filename)
        self.src = SourceIndex(yaml)

    def job_asts(self) -> list[JobAst]:
        """One node per entry of the top-level ``jobs`` mapping, in file order."""
        found = mapping_get(self.root, "jobs")
        if found is None:
            raise WorkflowParseError("workflow has no 'jobs' key", path=self.filename)
        _, jobs_node = found
        if not isinstance(jobs_node, MappingNode):
            raise WorkflowParseError(
                "'jobs' must be a mapping",
                path=self.filename,
                line=self.src.index_to_line(jobs_node.start_mark.index),
            )
        return [JobAst(key_node, value_node, self.src) for key_node, value_node in mapping_items(jobs_node)]


class CompositeActionAst:
    """Node tree of a composite action (``action.yml``).

    Composite actions have no ``jobs``. ``synthetic_job_ast`` wraps the
    ``runs`` mapping in a ``JobAst`` so its ``steps`` sequence can be walked
    with the same code as a real job.
    """

    def __init__(
        self,
        yaml: str,
        filename: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.filename = filename
        self.root: MappingNode = StructuralLoader(settings).compose(yaml, filename)
        self.src = SourceIndex(yaml)

    def synthetic_job_ast(self) -> JobAst:
        found = mapping_get(self.root, "runs")
        if found is None or not isinstance(found[1], MappingNode):
            raise WorkflowParseError("composite action has no 'runs' mapping", path=self.filename)
        key_node, runs_node = found
        return JobAst(key_node, runs_node, self.src)


class JobAst:
    """A ``job_id: {...}`` pair inside ``jobs``."""

    def __init__(self, key: Node, value: Node, src: SourceIndex) -> None:
        self.key = key
        self.value = value
        self.src = src

    @property
    def job_id(self) -> str:
        return str(self.key.value)

    def step_asts(self) -> list[StepAst] | None:
        """Step nodes in order, or ``None`` when the job has no ``steps`` key.

        Jobs that call a reusable workflow have no steps.
        """
        if not isinstance(self.value, MappingNode):
            return None
        found = mapping_get(self.value, "steps")
        if found is None:
            return None
        _, steps_node = found
        if not isinstance(steps_node, SequenceNode):
            return None
        return [StepAst(item, self.src) for item in steps_node.value]

    def start_line(self) -> int:
        return self.src.index_to_line(self.key.start_mark.index)


class StepAst:
    """One item of a ``steps`` sequence."""

    def __init__(self, node: Node, src: SourceIndex) -> None:
        self.node = node
        self.src = src

    def start_line(self) -> int:
        return self.src.index_to_line(self.node.start_mark.index)
