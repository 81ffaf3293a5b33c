"""Workflow run and job records as reported by the Actions API."""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict


class _ApiRecord(BaseModel):
    # API payloads carry far more fields than are read here.
    model_config = ConfigDict(extra="ignore", frozen=True)


class RepositoryRecord(_ApiRecord):
    name: str
    full_name: str | None = None


class WorkflowRunRecord(_ApiRecord):
    """A workflow run; ``path`` is the workflow file, e.g. ``.github/workflows/ci.yml``."""

    path: str
    id: int | None = None
    name: str | None = None
    head_sha: str | None = None
    run_attempt: int | None = None
    event: str | None = None
    repository: RepositoryRecord | None = None


class WorkflowStepRecord(_ApiRecord):
    name: str
    number: int | None = None
    status: str | None = None
    conclusion: str | None = None


class WorkflowJobRecord(_ApiRecord):
    name: str
    id: int | None = None
    run_id: int | None = None
    steps: list[WorkflowStepRecord] = []


class WorkflowRunUrl(_ApiRecord):
    origin: str
    owner: str
    repo: str
    run_id: int
    run_attempt: int | None = None


def parse_workflow_run_url(run_url: str) -> WorkflowRunUrl:
    """Parse ``https://<host>/<owner>/<repo>/actions/runs/<id>[/attempts/<n>]``.

    Raises ``ValueError`` when the path is not a workflow run URL.
    """
    url = urlsplit(run_url)
    parts = url.path.split("/")
    # ["", owner, repo, "actions", "runs", run_id, ("attempts", n)?]
    if len(parts) < 6 or parts[3] != "actions" or parts[4] != "runs" or not parts[5].isdigit():
        raise ValueError(f"not a workflow run URL: {run_url}")
    run_attempt = None
    if len(parts) > 7 and parts[6] == "attempts" and parts[7].isdigit():
        run_attempt = int(parts[7])
    return WorkflowRunUrl(
        origin=f"{url.scheme}://{url.netloc}",
        owner=parts[1],
        repo=parts[2],
        run_id=int(parts[5]),
        run_attempt=run_attempt,
    )
