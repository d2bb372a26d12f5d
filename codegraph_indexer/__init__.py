"""Static code graph indexer for multi-language source trees."""

from __future__ import annotations

__version__ = "0.1.0"

from .graph import CodeGraph
from .models import Node, NodeType, Relationship, RelationshipType
from .pipeline import analyze_codebase, process_codebase

__all__ = [
    "CodeGraph",
    "Node",
    "NodeType",
    "Relationship",
    "RelationshipType",
    "analyze_codebase",
    "process_codebase",
    "__version__",
]
