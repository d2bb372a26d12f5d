"""JavaScript / TypeScript / TSX extractor.

The TypeScript grammars are a superset of the JavaScript one, so a single
extractor serves all three tags; TypeScript-only node types (interfaces,
type aliases, abstract classes) simply never occur in JavaScript trees.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import (
    field_text,
    iter_nodes,
    make_module_node,
    make_node,
    node_text,
    strip_source_extension,
)

logger = logging.getLogger(__name__)

FUNCTION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
})
CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration"})
SOURCE_EXTENSIONS = (".d.ts", ".tsx", ".ts", ".jsx", ".mjs", ".cjs", ".js")


class JavaScriptExtractor(LanguageExtractor):
    language = "javascript"
    call_types = frozenset({"call_expression"})
    reference_types = frozenset({
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "type_identifier",
    })

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse %s file: %s", self.language, file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            kind = ts_node.type
            if kind in FUNCTION_TYPES:
                name = self._function_name(ts_node, source)
                if name:
                    nodes.append(make_node(NodeType.FUNCTION, name, file_path, ts_node, source))

            elif kind == "method_definition":
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                node = make_node(NodeType.METHOD, name, file_path, ts_node, source)
                parent_class = self._enclosing_class_name(ts_node, source)
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

            elif kind == "type_alias_declaration":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(
                        make_node(NodeType.TYPE_DEFINITION, name, file_path, ts_node, source)
                    )

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        func = call_node.child_by_field_name("function")
        if func is None:
            return None
        if func.type == "identifier":
            return func
        if func.type == "member_expression":
            return func.child_by_field_name("property")
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        source = parsed.source
        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            spec: Optional[Any] = None
            if ts_node.type == "import_statement":
                spec = ts_node.child_by_field_name("source")
            elif ts_node.type == "call_expression" and self._is_require(ts_node, source):
                args = ts_node.child_by_field_name("arguments")
                if args is not None and args.named_children:
                    spec = args.named_children[0]
            if spec is None or spec.type not in ("string", "template_string"):
                continue

            cleaned = node_text(spec, source).strip("\"'`")
            last = cleaned.split("/")[-1]
            name = strip_source_extension(last, SOURCE_EXTENSIONS)
            if name:
                names.append(name)
        return names

    # ------------------------------------------------------------------

    @staticmethod
    def _function_name(ts_node: Any, source: bytes) -> Optional[str]:
        """Own name, else the variable or assignment target it is bound to."""
        name = field_text(ts_node, "name", source)
        if name:
            return name

        parent = ts_node.parent
        if parent is None:
            return None
        if parent.type == "variable_declarator":
            target = parent.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                return node_text(target, source)
        elif parent.type == "assignment_expression":
            target = parent.child_by_field_name("left")
            if target is not None and target.type == "identifier":
                return node_text(target, source)
            if target is not None and target.type == "member_expression":
                return field_text(target, "property", source)
        return None

    @staticmethod
    def _enclosing_class_name(method_node: Any, source: bytes) -> Optional[str]:
        body = method_node.parent
        if body is None or body.type != "class_body":
            return None
        owner = body.parent
        if owner is None:
            return None
        name = field_text(owner, "name", source)
        if name:
            return name
        # const Foo = class { ... }
        if owner.parent is not None and owner.parent.type == "variable_declarator":
            return field_text(owner.parent, "name", source)
        return None

    @staticmethod
    def _is_require(call_node: Any, source: bytes) -> bool:
        func = call_node.child_by_field_name("function")
        return (
            func is not None
            and func.type == "identifier"
            and node_text(func, source) == "require"
        )
