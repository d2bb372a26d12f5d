"""Name-based relationship inference.

Relationships are inferred from names alone: a call to ``save`` links the
caller to every function or method called ``save`` anywhere in the code
base, and an import of ``graph`` links the importing file to the first
module, class or interface named ``graph``.  There is no scope, type or
overload resolution, so some edges are false positives.

All candidate edges are gathered first and deduplicated once, by
``(from_id, to_id, type)``, before anything is written to the graph.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Set, Tuple

from . import config
from .extractors import LanguageExtractor, detect_language, get_extractor
from .graph import CodeGraph
from .models import (
    CALL_NAME,
    CONTAINMENT,
    IMPORT_NAME,
    PARENT_CLASS,
    Node,
    NodeType,
    Relationship,
    RelationshipType,
)

logger = logging.getLogger(__name__)

CALLABLE_TYPES = (NodeType.FUNCTION, NodeType.METHOD)
IMPORT_TARGET_TYPES = (NodeType.MODULE, NodeType.CLASS, NodeType.INTERFACE)
TYPE_CONTAINER_TYPES = (NodeType.CLASS, NodeType.INTERFACE)

NameIndex = Dict[str, List[str]]


def identify_relationships(graph: CodeGraph) -> int:
    """Infer Calls, Imports and Contains edges and add them to *graph*.

    Returns the number of edges added.
    """
    logger.info("Identifying relationships between code units...")

    nodes_by_file = _group_by_file(graph)
    call_index = build_call_index(graph)
    import_targets = _import_targets(graph)
    candidates: List[Relationship] = []

    logger.info("Processing %d files for relationship detection", len(nodes_by_file))
    for file_idx, file_path in enumerate(sorted(nodes_by_file)):
        nodes = nodes_by_file[file_path]
        logger.debug("Processing file %d/%d: %s", file_idx + 1, len(nodes_by_file), file_path)

        extractor = get_extractor(detect_language(file_path))
        if extractor is None:
            logger.warning("Could not determine language for file: %s", file_path)
        else:
            try:
                content = Path(file_path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Failed to read file %s: %s", file_path, exc)
            else:
                candidates.extend(find_call_relationships(extractor, content, nodes, call_index))
                candidates.extend(
                    find_import_relationships(extractor, file_path, content, nodes, import_targets)
                )

        candidates.extend(find_nested_type_relationships(nodes))

    candidates.extend(find_method_class_relationships(graph))

    added = 0
    seen: Set[Tuple[str, str, RelationshipType]] = set()
    for rel in candidates:
        if rel.key in seen:
            continue
        seen.add(rel.key)
        graph.add_relationship(rel)
        added += 1

    logger.info("Added %d relationships (%d candidates)", added, len(candidates))
    return added


# ------------------------------------------------------------------
# Call resolution
# ------------------------------------------------------------------

def build_call_index(graph: CodeGraph) -> NameIndex:
    """Name -> ids of every function and method long enough to be resolved."""
    index: NameIndex = {}
    for kind in CALLABLE_TYPES:
        for node in graph.find_by_kind(kind):
            if len(node.name) >= config.MIN_NAME_LENGTH:
                index.setdefault(node.name, []).append(node.node_id)
    for ids in index.values():
        ids.sort()
    return index


def resolve_call_candidates(name: str, index: NameIndex) -> List[str]:
    """Ids a call to *name* may refer to.

    Every function or method with that exact name is a candidate.
    """
    if len(name) < config.MIN_NAME_LENGTH:
        return []
    return index.get(name, [])


def find_call_relationships(
    extractor: LanguageExtractor,
    content: str,
    nodes: List[Node],
    index: NameIndex,
) -> List[Relationship]:
    relationships: List[Relationship] = []
    for node in nodes:
        if node.node_type not in CALLABLE_TYPES:
            continue
        for called in extractor.extract_called_names(content, node.line_range, node.name):
            for target_id in resolve_call_candidates(called, index):
                if target_id == node.node_id:
                    continue
                rel = Relationship(RelationshipType.CALLS, node.node_id, target_id)
                rel.add_metadata(CALL_NAME, called)
                relationships.append(rel)
    return relationships


# ------------------------------------------------------------------
# Import resolution
# ------------------------------------------------------------------

def _import_targets(graph: CodeGraph) -> List[Node]:
    """Modules, classes and interfaces in a fixed scan order.

    A file's module node sorts ahead of a class starting on the same line.
    """
    targets = [n for kind in IMPORT_TARGET_TYPES for n in graph.find_by_kind(kind)]
    targets.sort(key=lambda n: (n.file_path, n.start_line, -n.end_line, n.node_id))
    return targets


def find_import_relationships(
    extractor: LanguageExtractor,
    file_path: str,
    content: str,
    nodes: List[Node],
    targets: List[Node],
) -> List[Relationship]:
    """One Imports edge from every node of *file_path* per resolved import.

    Each imported name resolves to the first target outside the file whose
    name or file stem equals it.
    """
    relationships: List[Relationship] = []
    for imported in extractor.extract_imported_names(content):
        if not imported:
            continue
        for target in targets:
            if target.file_path == file_path:
                continue
            if target.name != imported and Path(target.file_path).stem != imported:
                continue
            for node in nodes:
                rel = Relationship(RelationshipType.IMPORTS, node.node_id, target.node_id)
                rel.add_metadata(IMPORT_NAME, imported)
                relationships.append(rel)
            break
    return relationships


# ------------------------------------------------------------------
# Containment
# ------------------------------------------------------------------

def find_nested_type_relationships(nodes: List[Node]) -> List[Relationship]:
    """Contains edges between classes/interfaces of one file that nest textually."""
    types = sorted(
        (n for n in nodes if n.node_type in TYPE_CONTAINER_TYPES),
        key=lambda n: (n.start_line, n.node_id),
    )
    relationships: List[Relationship] = []
    if len(types) < 2:
        return relationships

    for outer in types:
        for inner in types:
            if inner is outer:
                continue
            if inner.start_line > outer.start_line and inner.end_line < outer.end_line:
                rel = Relationship(RelationshipType.CONTAINS, outer.node_id, inner.node_id)
                rel.add_metadata(CONTAINMENT, "nested_type")
                relationships.append(rel)
    return relationships


def find_method_class_relationships(graph: CodeGraph) -> List[Relationship]:
    """Contains edges from each class or interface to the methods it owns by name."""
    relationships: List[Relationship] = []
    for method in graph.find_by_kind(NodeType.METHOD):
        parent_class = method.metadata.get(PARENT_CLASS)
        if not parent_class:
            continue
        for owner in graph.find_by_name(parent_class):
            if owner.node_type not in TYPE_CONTAINER_TYPES:
                continue
            rel = Relationship(RelationshipType.CONTAINS, owner.node_id, method.node_id)
            rel.add_metadata(CONTAINMENT, "member")
            relationships.append(rel)
    return relationships


def _group_by_file(graph: CodeGraph) -> Dict[str, List[Node]]:
    """Nodes per file, leaving out names shorter than ``MIN_NAME_LENGTH``."""
    grouped: Dict[str, List[Node]] = {}
    for file_path in graph.nodes_by_file:
        nodes = [
            n for n in graph.find_in_file(file_path)
            if len(n.name) >= config.MIN_NAME_LENGTH
        ]
        if nodes:
            grouped[file_path] = nodes
    return grouped
