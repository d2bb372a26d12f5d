"""C and C++ extractor.

One extractor serves both grammars; the node types it relies on are shared
by ``tree-sitter-c`` and ``tree-sitter-cpp``.  A method is a function
defined inside a class or struct body, or defined out of line with a
qualified name (``void Engine::run() {...}``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import (
    field_text,
    find_ancestor,
    iter_nodes,
    make_module_node,
    make_node,
    module_name_from_path,
    node_text,
    strip_source_extension,
)

logger = logging.getLogger(__name__)

CLASS_TYPES = frozenset({"class_specifier", "struct_specifier"})
SOURCE_EXTENSIONS = (".hpp", ".hxx", ".hh", ".h", ".cpp", ".cxx", ".cc", ".c")


class CppExtractor(LanguageExtractor):
    language = "cpp"
    call_types = frozenset({"call_expression"})
    reference_types = frozenset({"identifier", "field_identifier", "type_identifier"})

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
            if kind == "function_definition":
                node = self._function_node(ts_node, file_path, source)
                if node is not None:
                    nodes.append(node)

            elif kind in CLASS_TYPES or kind == "enum_specifier":
                # Forward declarations and ``struct point p;`` have no body.
                if ts_node.child_by_field_name("body") is None:
                    continue
                name = cpp_type_name(field_text(ts_node, "name", source) or "")
                if not name:
                    continue
                node_type = NodeType.TYPE_DEFINITION if kind == "enum_specifier" else NodeType.CLASS
                nodes.append(make_node(node_type, name, file_path, ts_node, source))

        return nodes

    def _function_node(self, ts_node: Any, file_path: str, source: bytes) -> Optional[Node]:
        name_node = _declarator_name_node(ts_node)
        if name_node is None:
            return None
        name, scope = split_qualified_name(name_node, source)
        if not name:
            return None

        parent_class = scope
        owner = find_ancestor(ts_node, CLASS_TYPES, stop=("function_definition",))
        if owner is not None:
            parent_class = cpp_type_name(field_text(owner, "name", source) or "") or None

        if parent_class:
            node = make_node(NodeType.METHOD, name, file_path, ts_node, source)
            node.add_metadata(PARENT_CLASS, parent_class)
            return node
        return make_node(NodeType.FUNCTION, name, file_path, ts_node, source)

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        func = call_node.child_by_field_name("function")
        while func is not None:
            if func.type in ("identifier", "field_identifier"):
                return func
            if func.type == "field_expression":
                func = func.child_by_field_name("field")
            elif func.type in ("qualified_identifier", "template_function", "template_method"):
                func = func.child_by_field_name("name")
            else:
                return None
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type != "preproc_include":
                continue
            path_node = ts_node.child_by_field_name("path")
            if path_node is None:
                continue
            name = include_name(node_text(path_node, parsed.source))
            if name:
                names.append(name)
        return names


def _declarator_name_node(func_def: Any) -> Optional[Any]:
    """Name node of a function definition, under any pointer/reference wrappers."""
    current = func_def.child_by_field_name("declarator")
    while current is not None and current.type != "function_declarator":
        inner = current.child_by_field_name("declarator")
        if inner is None:
            named = current.named_children
            inner = named[-1] if named else None
        current = inner
    if current is None:
        return None
    return current.child_by_field_name("declarator")


def split_qualified_name(name_node: Any, source: bytes) -> Tuple[str, Optional[str]]:
    """``ns::Stack<T>::push`` -> (``push``, ``Stack``); plain names have no scope."""
    scope: Optional[str] = None
    while name_node.type == "qualified_identifier":
        scope_node = name_node.child_by_field_name("scope")
        if scope_node is not None:
            scope = cpp_type_name(node_text(scope_node, source)) or None
        inner = name_node.child_by_field_name("name")
        if inner is None:
            break
        name_node = inner
    return node_text(name_node, source).strip(), scope


def cpp_type_name(text: str) -> str:
    """``ns::Stack<std::string>`` -> ``Stack``."""
    text = text.split("<", 1)[0].strip()
    return text.split("::")[-1].strip()


def include_name(path_text: str) -> str:
    """``<sys/types.h>`` -> ``types``; ``"util/strings.hpp"`` -> ``strings``."""
    text = path_text.strip().strip('"<>')
    return module_name_from_path(strip_source_extension(text, SOURCE_EXTENSIONS))
