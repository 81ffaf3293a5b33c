"""YAML parsing with line fidelity for actionmap."""

from actionmap.parser.loader import StructuralLoader, ValueLoader
from actionmap.parser.positions import SourceIndex

__all__ = [
    "SourceIndex",
    "StructuralLoader",
    "ValueLoader",
]
