"""YAML loaders: a value view and a position-tracking structural view.

Workflow files are read twice from the same text. ``ValueLoader`` builds plain
Python values (mappings keep declaration order); ``StructuralLoader`` composes
the literal node tree, where every node carries the character offset it starts
at. The domain model pairs the two views by order.
"""

from __future__ import annotations

import logging
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from actionmap.models.errors import YAMLParseError, YAMLSafetyError
from actionmap.settings import Settings

logger = logging.getLogger("actionmap.parser")


class _BaseLoader:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        # YAML 1.2 (ruamel's default) keeps ``on:`` as a string key.
        self._yaml = YAML(typ="safe", pure=True)

    # -- safety checks -------------------------------------------------------

    def _check_yaml_safety(self, content: str, filename: str | None) -> None:
        """Pre-parse safety check on raw YAML text."""
        limit = self._settings.max_document_size
        if len(content) > limit:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size ({len(content):,} chars > {limit:,} limit)",
                path=filename,
            )

    def _node_count_exceeded(self, filename: str | None) -> YAMLSafetyError:
        return YAMLSafetyError(
            f"YAML document exceeds maximum node count ({self._settings.max_node_count:,})",
            path=filename,
        )

    @staticmethod
    def _wrap_yaml_error(error: YAMLError, filename: str | None) -> YAMLParseError:
        line = None
        if isinstance(error, MarkedYAMLError) and error.problem_mark is not None:
            line = error.problem_mark.line + 1
        problem = getattr(error, "problem", None) or str(error)
        return YAMLParseError(f"invalid YAML: {problem}", path=filename, line=line)


class ValueLoader(_BaseLoader):
    """Decodes YAML text into plain dicts, lists and scalars."""

    def load_string(self, content: str, filename: str | None = None) -> dict[str, Any]:
        """Load a YAML document whose root must be a mapping."""
        self._check_yaml_safety(content, filename)
        logger.debug("Loading YAML values from %s (%d chars)", filename or "<string>", len(content))
        try:
            data = self._yaml.load(content)
        except YAMLError as error:
            raise self._wrap_yaml_error(error, filename) from error
        if not isinstance(data, dict):
            raise YAMLParseError(
                f"root of the document must be a mapping, got {type(data).__name__}",
                path=filename,
            )
        self._check_node_count(data, filename)
        return data

    def _check_node_count(self, data: Any, filename: str | None) -> None:
        """Post-parse defense-in-depth: reject documents with too many nodes."""
        limit = self._settings.max_node_count
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise self._node_count_exceeded(filename)
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)


class StructuralLoader(_BaseLoader):
    """Composes YAML text into a ruamel node tree with source marks."""

    def compose(self, content: str, filename: str | None = None) -> MappingNode:
        """Compose a document whose root must be a mapping node."""
        self._check_yaml_safety(content, filename)
        logger.debug("Composing YAML nodes from %s (%d chars)", filename or "<string>", len(content))
        try:
            root = self._yaml.compose(content)
        except YAMLError as error:
            raise self._wrap_yaml_error(error, filename) from error
        if not isinstance(root, MappingNode):
            kind = "empty document" if root is None else type(root).__name__
            raise YAMLParseError(f"root of the document must be a mapping, got {kind}", path=filename)
        self._check_node_count(root, filename)
        return root

    def _check_node_count(self, root: Node, filename: str | None) -> None:
        limit = self._settings.max_node_count
        count = 0
        stack: list[Node] = [root]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise self._node_count_exceeded(filename)
            if isinstance(node, MappingNode):
                for _key_node, value_node in node.value:
                    stack.append(value_node)
            elif isinstance(node, SequenceNode):
                stack.extend(node.value)


_MERGE_TAG = "tag:yaml.org,2002:merge"


def mapping_items(node: MappingNode) -> list[tuple[Node, Node]]:
    """Effective ``(key_node, value_node)`` pairs of a mapping node.

    ``<<`` merge keys are expanded the way the value loader expands them.
    A key keeps the position it first appears at, with merged pairs ahead of
    explicit ones. Explicit keys override merged ones, and earlier merge
    sources override later ones.
    """
    merged: list[tuple[Node, Node]] = []
    own: list[tuple[Node, Node]] = []
    for key_node, value_node in node.value:
        if key_node.tag != _MERGE_TAG:
            own.append((key_node, value_node))
        elif isinstance(value_node, MappingNode):
            merged.extend(mapping_items(value_node))
        elif isinstance(value_node, SequenceNode):
            for source in reversed(value_node.value):
                if isinstance(source, MappingNode):
                    merged.extend(mapping_items(source))

    pairs: dict[Any, tuple[Node, Node]] = {}
    for key_node, value_node in merged + own:
        key = key_node.value if isinstance(key_node, ScalarNode) else id(key_node)
        pairs[key] = (key_node, value_node)
    return list(pairs.values())


def mapping_get(node: MappingNode, key: str) -> tuple[Node, Node] | None:
    """Return the effective ``(key_node, value_node)`` pair whose key is ``key``."""
    for key_node, value_node in mapping_items(node):
        if isinstance(key_node, ScalarNode) and key_node.value == key:
            return key_node, value_node
    return None
