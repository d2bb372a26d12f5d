"""Go extractor.

Go has no classes; struct types stand in for them and interface types for
interfaces.  A method's owner is its receiver type, pointer or not.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import (
    field_text,
    iter_nodes,
    make_module_node,
    make_node,
    module_name_from_path,
    node_text,
)

logger = logging.getLogger(__name__)

_RECEIVER_NOISE = re.compile(r"[\s*()]")


class GoExtractor(LanguageExtractor):
    language = "go"
    call_types = frozenset({"call_expression"})
    reference_types = frozenset({"identifier", "field_identifier"})

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse Go file: %s", file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            kind = ts_node.type
            if kind == "function_declaration":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.FUNCTION, name, file_path, ts_node, source))

            elif kind == "method_declaration":
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                node = make_node(NodeType.METHOD, name, file_path, ts_node, source)
                receiver = self._receiver_type(ts_node, source)
                if receiver:
                    node.add_metadata(PARENT_CLASS, receiver)
                nodes.append(node)

            elif kind == "type_spec":
                name = field_text(ts_node, "name", source)
                type_node = ts_node.child_by_field_name("type")
                if not name or type_node is None:
                    continue
                if type_node.type == "struct_type":
                    nodes.append(make_node(NodeType.CLASS, name, file_path, ts_node, source))
                elif type_node.type == "interface_type":
                    nodes.append(make_node(NodeType.INTERFACE, name, file_path, ts_node, source))

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        func = call_node.child_by_field_name("function")
        if func is None:
            return None
        if func.type == "identifier":
            return func
        if func.type == "selector_expression":
            return func.child_by_field_name("field")
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type != "import_spec":
                continue
            path_node = ts_node.child_by_field_name("path")
            if path_node is None:
                continue
            name = module_name_from_path(node_text(path_node, parsed.source))
            if name:
                names.append(name)
        return names

    @staticmethod
    def _receiver_type(method_node: Any, source: bytes) -> Optional[str]:
        """``(s *Stack[T])`` -> ``Stack``."""
        receiver = method_node.child_by_field_name("receiver")
        if receiver is None:
            return None
        for param in receiver.named_children:
            if param.type != "parameter_declaration":
                continue
            type_node = param.child_by_field_name("type")
            if type_node is None:
                continue
            text = _RECEIVER_NOISE.sub("", node_text(type_node, source))
            text = text.split("[", 1)[0]
            return text or None
        return None
