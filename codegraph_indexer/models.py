"""Core data models shared by extraction, inference, and export layers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Recognized metadata keys.  add_metadata rejects anything else.
PARENT_CLASS = "parent_class"

CALL_NAME = "call_name"
IMPORT_NAME = "import_name"
CONTAINMENT = "containment"

NODE_METADATA_KEYS = frozenset({PARENT_CLASS})
RELATIONSHIP_METADATA_KEYS = frozenset({CALL_NAME, IMPORT_NAME, CONTAINMENT})


class NodeType(str, Enum):
    FUNCTION = "Function"
    METHOD = "Method"
    CLASS = "Class"
    INTERFACE = "Interface"
    MODULE = "Module"
    TYPE_DEFINITION = "TypeDefinition"
    UNKNOWN = "Unknown"


class RelationshipType(str, Enum):
    CALLS = "Calls"
    IMPORTS = "Imports"
    INHERITS = "Inherits"
    REFERENCES = "References"
    IMPLEMENTS = "Implements"
    CONTAINS = "Contains"
    DEPENDS_ON = "DependsOn"


@dataclass(eq=False)
class Node:
    node_id: str
    node_type: NodeType
    name: str
    file_path: str
    line_range: Tuple[int, int]
    content: str
    summary: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def start_line(self) -> int:
        return self.line_range[0]

    @property
    def end_line(self) -> int:
        return self.line_range[1]

    def add_metadata(self, key: str, value: str) -> None:
        if key not in NODE_METADATA_KEYS:
            raise ValueError(f"Unknown node metadata key: {key!r}")
        self.metadata[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.node_id,
            "node_type": self.node_type.value,
            "name": self.name,
            "file_path": self.file_path,
            "line_range": [self.line_range[0], self.line_range[1]],
            "content": self.content,
            "summary": self.summary,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Node":
        start, end = payload["line_range"]
        return cls(
            node_id=payload["id"],
            node_type=NodeType(payload["node_type"]),
            name=payload["name"],
            file_path=payload["file_path"],
            line_range=(int(start), int(end)),
            content=payload.get("content", ""),
            summary=payload.get("summary"),
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass
class Relationship:
    relationship_type: RelationshipType
    from_id: str
    to_id: str
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> Tuple[str, str, RelationshipType]:
        return (self.from_id, self.to_id, self.relationship_type)

    def add_metadata(self, key: str, value: str) -> None:
        if key not in RELATIONSHIP_METADATA_KEYS:
            raise ValueError(f"Unknown relationship metadata key: {key!r}")
        self.metadata[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relationship_type": self.relationship_type.value,
            "from_id": self.from_id,
            "to_id": self.to_id,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Relationship":
        return cls(
            relationship_type=RelationshipType(payload["relationship_type"]),
            from_id=payload["from_id"],
            to_id=payload["to_id"],
            metadata=dict(payload.get("metadata") or {}),
        )


def create_node(
    node_type: NodeType,
    name: str,
    file_path: str,
    line_range: Tuple[int, int],
    content: str,
) -> Node:
    """Build a :class:`Node` with a fresh process-unique id."""
    return Node(
        node_id=str(uuid.uuid4()),
        node_type=node_type,
        name=name,
        file_path=file_path,
        line_range=line_range,
        content=content,
    )
