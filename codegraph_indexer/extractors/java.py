"""Java extractor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import field_text, find_ancestor, iter_nodes, make_module_node, make_node, node_text

logger = logging.getLogger(__name__)

CLASS_TYPES = frozenset({"class_declaration", "enum_declaration", "record_declaration"})
OWNER_TYPES = CLASS_TYPES | {"interface_declaration"}


class JavaExtractor(LanguageExtractor):
    language = "java"
    call_types = frozenset({"method_invocation", "method_reference"})
    reference_types = frozenset({"identifier", "type_identifier"})

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse Java file: %s", file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            kind = ts_node.type
            if kind in ("method_declaration", "constructor_declaration"):
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                node = make_node(NodeType.METHOD, name, file_path, ts_node, source)
                owner = find_ancestor(ts_node, OWNER_TYPES)
                if owner is not None:
                    parent_class = field_text(owner, "name", source)
                    if parent_class:
                        node.add_metadata(PARENT_CLASS, parent_class)
                nodes.append(node)

            elif kind in CLASS_TYPES:
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.CLASS, name, file_path, ts_node, source))

            elif kind == "interface_declaration":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.INTERFACE, name, file_path, ts_node, source))

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        if call_node.type == "method_invocation":
            return call_node.child_by_field_name("name")
        # Foo::bar
        named = call_node.named_children
        if len(named) >= 2 and named[-1].type == "identifier":
            return named[-1]
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type != "import_declaration":
                continue
            name = java_import_name(node_text(ts_node, parsed.source))
            if name:
                names.append(name)
        return names


def java_import_name(statement: str) -> str:
    """``import com.acme.util.*;`` -> ``util``; ``import a.b.Graph;`` -> ``Graph``."""
    text = statement.strip().rstrip(";").strip()
    if text.startswith("import"):
        text = text[len("import"):].strip()
    if text.startswith("static "):
        text = text[len("static "):].strip()
    parts = [part.strip() for part in text.split(".") if part.strip()]
    if parts and parts[-1] == "*":
        parts.pop()
    return parts[-1] if parts else ""
