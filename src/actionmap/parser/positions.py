"""Character offset to line number lookup for YAML source text."""

from __future__ import annotations

import re
from bisect import bisect_right

# A CRLF pair is a single terminator; a lone CR is treated like LF.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class SourceIndex:
    """Maps character offsets in a source text to 1-based line numbers.

    Offsets are code point offsets into the decoded ``str`` (the unit
    ``ruamel.yaml`` reports in ``Mark.index``), so multi-byte characters
    before a line do not shift the result.
    """

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._line_starts: list[int] = [0]
        self._line_starts.extend(m.end() for m in _LINE_BREAK_RE.finditer(text))

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def index_to_line(self, offset: int) -> int:
        """Return the 1-based line containing ``offset``."""
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        return bisect_right(self._line_starts, offset)
