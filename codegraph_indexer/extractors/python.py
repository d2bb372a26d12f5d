"""Python extractor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import field_text, find_ancestor, iter_nodes, make_module_node, make_node, node_text

logger = logging.getLogger(__name__)


class PythonExtractor(LanguageExtractor):
    """Functions, methods and classes from ``.py`` sources.

    A function is a method when the nearest enclosing definition is a class
    body; functions nested inside other functions stay plain functions.
    """

    language = "python"
    call_types = frozenset({"call"})
    reference_types = frozenset({"identifier"})

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse Python file: %s", file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type == "function_definition":
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                owner = find_ancestor(
                    ts_node, ("class_definition",), stop=("function_definition",),
                )
                node_type = NodeType.METHOD if owner is not None else NodeType.FUNCTION
                node = make_node(node_type, name, file_path, ts_node, source)
                if owner is not None:
                    parent_class = field_text(owner, "name", source)
                    if parent_class:
                        node.add_metadata(PARENT_CLASS, parent_class)
                nodes.append(node)

            elif ts_node.type == "class_definition":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.CLASS, name, file_path, ts_node, source))

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        func = call_node.child_by_field_name("function")
        if func is None:
            return None
        if func.type == "identifier":
            return func
        if func.type == "attribute":
            return func.child_by_field_name("attribute")
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        source = parsed.source
        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type == "import_statement":
                for child in ts_node.children_by_field_name("name"):
                    name = self._imported_name(child, source)
                    if name:
                        names.append(name)

            elif ts_node.type == "import_from_statement":
                module = ts_node.child_by_field_name("module_name")
                dotted = node_text(module, source).lstrip(".") if module is not None else ""
                if dotted:
                    names.append(dotted.split(".")[-1])
                    continue
                # from . import sibling
                for child in ts_node.children_by_field_name("name"):
                    name = self._imported_name(child, source)
                    if name:
                        names.append(name)

        return names

    @staticmethod
    def _imported_name(node: Any, source: bytes) -> str:
        if node.type == "aliased_import":
            node = node.child_by_field_name("name")
            if node is None:
                return ""
        return node_text(node, source).split(".")[-1]
