"""Exceptions raised while parsing workflow and action files."""

from __future__ import annotations


class ParseError(Exception):
    """Raised when a file cannot be turned into a workflow model.

    Nothing in this package recovers from it: callers decide whether to skip
    the file or abort the batch.
    """

    def __init__(self, message: str, *, path: str | None = None, line: int | None = None) -> None:
        self.path = path
        self.line = line
        location = path or "<string>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
        self.message = message


class YAMLParseError(ParseError):
    """The text is not valid YAML, or its root is not a mapping."""


class WorkflowParseError(ParseError):
    """Valid YAML that does not have the shape of a workflow or action file."""


class YAMLSafetyError(ParseError):
    """Raised when YAML input exceeds the configured size limits.

    Distinct from parse errors: these indicate oversized or pathological
    input rather than a syntax problem.
    """
