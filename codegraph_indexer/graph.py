"""In-memory code graph: nodes, typed directed relationships, and lookup indices.

The store is a plain data structure with no I/O and no locking.  Callers that
mutate it from several threads must serialize access themselves (see
:mod:`codegraph_indexer.processor`).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterator, List, Optional, Set

from .models import Node, NodeType, Relationship, RelationshipType

logger = logging.getLogger(__name__)


class CodeGraph:
    """Nodes plus outgoing/incoming adjacency and three secondary indices.

    Every node added gets one entry in ``nodes_by_type``, ``nodes_by_file``
    and ``nodes_by_name`` and an adjacency bucket in both edge maps.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, Node] = {}
        self.outgoing_edges: Dict[str, List[Relationship]] = {}
        self.incoming_edges: Dict[str, List[Relationship]] = {}

        self.nodes_by_type: Dict[NodeType, Set[str]] = {}
        self.nodes_by_file: Dict[str, Set[str]] = {}
        self.nodes_by_name: Dict[str, Set[str]] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> None:
        self.nodes_by_type.setdefault(node.node_type, set()).add(node.node_id)
        self.nodes_by_file.setdefault(node.file_path, set()).add(node.node_id)
        self.nodes_by_name.setdefault(node.name, set()).add(node.node_id)

        self.outgoing_edges.setdefault(node.node_id, [])
        self.incoming_edges.setdefault(node.node_id, [])

        self.nodes[node.node_id] = node

    def add_relationship(self, relationship: Relationship) -> None:
        self.outgoing_edges.setdefault(relationship.from_id, []).append(relationship)
        self.incoming_edges.setdefault(relationship.to_id, []).append(relationship)

    def rename_node(self, node_id: str, new_name: str) -> bool:
        """Change a node's display name, keeping ``nodes_by_name`` in step."""
        node = self.nodes.get(node_id)
        if node is None:
            return False
        if node.name == new_name:
            return True

        bucket = self.nodes_by_name.get(node.name)
        if bucket is not None:
            bucket.discard(node_id)
            if not bucket:
                del self.nodes_by_name[node.name]
        self.nodes_by_name.setdefault(new_name, set()).add(node_id)
        node.name = new_name
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def all_nodes(self) -> Iterator[Node]:
        return iter(list(self.nodes.values()))

    def all_relationships(self) -> Iterator[Relationship]:
        for bucket in self.outgoing_edges.values():
            yield from bucket

    def find_callers(self, node_id: str) -> List[Node]:
        """Nodes with a ``Calls`` edge into *node_id*."""
        return [
            self.nodes[rel.from_id]
            for rel in self.incoming_edges.get(node_id, [])
            if rel.relationship_type == RelationshipType.CALLS and rel.from_id in self.nodes
        ]

    def find_called(self, node_id: str) -> List[Node]:
        """Nodes that *node_id* has a ``Calls`` edge to."""
        return [
            self.nodes[rel.to_id]
            for rel in self.outgoing_edges.get(node_id, [])
            if rel.relationship_type == RelationshipType.CALLS and rel.to_id in self.nodes
        ]

    def find_by_kind(self, kind: NodeType) -> List[Node]:
        return self._resolve(self.nodes_by_type.get(kind))

    def find_by_name(self, name: str) -> List[Node]:
        return self._resolve(self.nodes_by_name.get(name))

    def find_in_file(self, file_path: str) -> List[Node]:
        return self._resolve(self.nodes_by_file.get(file_path))

    def find_related(self, node_id: str, depth: int) -> Set[str]:
        """Ids of nodes within *depth* hops of *node_id*, ignoring direction.

        Breadth-first, one frontier per hop.  Ids that are referenced by an
        edge but absent from the store are neither returned nor expanded.
        """
        if node_id not in self.nodes:
            return set()

        visited: Set[str] = {node_id}
        frontier = [node_id]
        for _ in range(max(depth, 0)):
            next_frontier: List[str] = []
            for current in frontier:
                neighbours = [rel.to_id for rel in self.outgoing_edges.get(current, [])]
                neighbours += [rel.from_id for rel in self.incoming_edges.get(current, [])]
                for neighbour in neighbours:
                    if neighbour in visited or neighbour not in self.nodes:
                        continue
                    visited.add(neighbour)
                    next_frontier.append(neighbour)
            if not next_frontier:
                break
            frontier = next_frontier
        return visited

    def node_count(self) -> int:
        return len(self.nodes)

    def relationship_count(self) -> int:
        return sum(len(bucket) for bucket in self.outgoing_edges.values())

    def stats(self) -> Dict[str, Any]:
        node_counts: Counter = Counter(n.node_type.value for n in self.nodes.values())
        edge_counts: Counter = Counter(
            rel.relationship_type.value for rel in self.all_relationships()
        )
        return {
            "total_nodes": self.node_count(),
            "total_relationships": self.relationship_count(),
            "node_counts": dict(node_counts),
            "relationship_counts": dict(edge_counts),
        }

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": {node_id: node.to_dict() for node_id, node in self.nodes.items()},
            "outgoing_edges": {
                node_id: [rel.to_dict() for rel in bucket]
                for node_id, bucket in self.outgoing_edges.items()
            },
            "incoming_edges": {
                node_id: [rel.to_dict() for rel in bucket]
                for node_id, bucket in self.incoming_edges.items()
            },
            "nodes_by_type": {
                kind.value: sorted(ids) for kind, ids in self.nodes_by_type.items()
            },
            "nodes_by_file": {path: sorted(ids) for path, ids in self.nodes_by_file.items()},
            "nodes_by_name": {name: sorted(ids) for name, ids in self.nodes_by_name.items()},
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CodeGraph":
        """Rebuild a graph from :meth:`to_dict` output.

        Indices are recomputed from the node records; incoming edges are
        recomputed from the outgoing ones.
        """
        graph = cls()
        for record in payload.get("nodes", {}).values():
            graph.add_node(Node.from_dict(record))
        for bucket in payload.get("outgoing_edges", {}).values():
            for record in bucket:
                graph.add_relationship(Relationship.from_dict(record))
        logger.debug(
            "Loaded graph with %d nodes and %d relationships",
            graph.node_count(), graph.relationship_count(),
        )
        return graph

    # ------------------------------------------------------------------

    def _resolve(self, ids: Optional[Set[str]]) -> List[Node]:
        if not ids:
            return []
        return [self.nodes[i] for i in sorted(ids) if i in self.nodes]

    def __repr__(self) -> str:
        return (
            f"CodeGraph(nodes={self.node_count()}, "
            f"relationships={self.relationship_count()})"
        )
