"""File snapshots handed over by the code-hosting API client."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict


class FileContentResponse(BaseModel):
    """The ``raw`` metadata of a fetched file.

    Mirrors the "get repository content" response; unknown fields are kept.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    path: str
    html_url: str | None = None
    name: str | None = None
    sha: str | None = None
    type: str = "file"


class FileContent(BaseModel):
    """Decoded text of one file at one git ref, plus its API metadata."""

    model_config = ConfigDict(frozen=True)

    content: str
    raw: FileContentResponse

    @classmethod
    def from_text(cls, content: str, path: str, html_url: str | None = None) -> FileContent:
        return cls(content=content, raw=FileContentResponse(path=path, html_url=html_url))

    @classmethod
    def from_contents_response(cls, payload: dict[str, Any]) -> FileContent:
        """Build from a contents API payload whose ``content`` is base64 encoded."""
        encoded = payload.get("content") or ""
        text = base64.b64decode(encoded).decode("utf-8")
        return cls(content=text, raw=FileContentResponse.model_validate(payload))

    @classmethod
    def from_file(cls, path: Path, repo_path: str | None = None, html_url: str | None = None) -> FileContent:
        """Read a local file; ``repo_path`` defaults to the given path."""
        with path.open("r", encoding="utf-8", newline="") as handle:
            content = handle.read()
        return cls.from_text(content, repo_path or path.as_posix(), html_url)

    @property
    def path(self) -> str:
        return self.raw.path

    @property
    def html_url(self) -> str | None:
        return self.raw.html_url
