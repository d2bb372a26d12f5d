"""Graph export: JSON (round-trippable) and Graphviz DOT."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Set, Tuple, Union

from .graph import CodeGraph
from .models import Node, Relationship

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "dot")


class GraphExportError(RuntimeError):
    """Raised when a graph cannot be serialized or written."""


def graph_to_json(graph: CodeGraph) -> str:
    return json.dumps(graph.to_dict(), indent=2)


def export_graph_to_json(graph: CodeGraph, output_path: Union[str, Path]) -> Path:
    """Write *graph* as JSON.

    The document is fully serialized before the file is opened, so a
    serialization error never leaves a partial file behind.
    """
    output_path = Path(output_path)
    try:
        payload = graph_to_json(graph)
    except (TypeError, ValueError) as exc:
        raise GraphExportError(f"Failed to serialize graph: {exc}") from exc

    _write(output_path, payload)
    logger.info("Graph exported to %s", output_path)
    return output_path


def load_graph_from_json(input_path: Union[str, Path]) -> CodeGraph:
    input_path = Path(input_path)
    try:
        payload = json.loads(input_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise GraphExportError(f"Cannot read graph file {input_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise GraphExportError(f"Invalid graph file {input_path}: {exc}") from exc

    try:
        return CodeGraph.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise GraphExportError(f"Malformed graph file {input_path}: {exc}") from exc


def export_graph_to_dot(
    graph: CodeGraph,
    output_path: Union[str, Path],
    focus: str = "",
) -> Path:
    """Write *graph* as a Graphviz digraph.

    With *focus*, only nodes whose name or id contains it, plus their direct
    neighbours, are written.  A focus that matches nothing writes the whole
    graph.
    """
    output_path = Path(output_path)
    node_ids, edges = _focused_subgraph(graph, focus)

    lines = ["digraph CodeGraph {", "  rankdir=LR;"]
    for node_id in node_ids:
        node = graph.nodes[node_id]
        label = f"{node.node_type.value}\\n{node.name}"
        lines.append(f'  "{node_id}" [label="{_esc(label)}"];')
    for rel in edges:
        lines.append(
            f'  "{rel.from_id}" -> "{rel.to_id}" '
            f'[label="{_esc(rel.relationship_type.value)}"];'
        )
    lines.append("}")

    _write(output_path, "\n".join(lines) + "\n")
    logger.info("Graph exported to %s", output_path)
    return output_path


def _focused_subgraph(graph: CodeGraph, focus: str) -> Tuple[List[str], List[Relationship]]:
    edges: List[Relationship] = [
        rel for rel in graph.all_relationships()
        if rel.from_id in graph.nodes and rel.to_id in graph.nodes
    ]
    if not focus:
        return sorted(graph.nodes), edges

    focus_ids: Set[str] = {
        node_id for node_id, node in graph.nodes.items() if _matches(node, focus)
    }
    if not focus_ids:
        return sorted(graph.nodes), edges

    edge_subset = [e for e in edges if e.from_id in focus_ids or e.to_id in focus_ids]
    node_subset = set(focus_ids)
    for rel in edge_subset:
        node_subset.add(rel.from_id)
        node_subset.add(rel.to_id)
    return sorted(node_subset), edge_subset


def _matches(node: Node, focus: str) -> bool:
    return focus in node.node_id or focus in node.name


def _write(output_path: Path, payload: str) -> None:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise GraphExportError(f"Failed to write {output_path}: {exc}") from exc


def _esc(text: str) -> str:
    return text.replace('"', '\\"')

