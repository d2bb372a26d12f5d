"""Rust extractor."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from ..models import PARENT_CLASS, Node, NodeType
from .base import LanguageExtractor
from .common import field_text, find_ancestor, iter_nodes, make_module_node, make_node, node_text

logger = logging.getLogger(__name__)

_PATH_KEYWORDS = frozenset({"crate", "self", "super"})
_LIFETIME = re.compile(r"'\w+")


class RustExtractor(LanguageExtractor):
    """Functions, methods, structs, traits, enums and type aliases.

    A ``fn`` directly inside an ``impl`` or ``trait`` block is a method owned
    by the implementing type or the trait.  ``impl Trait for Type`` is owned
    by ``Type``.
    """

    language = "rust"
    call_types = frozenset({"call_expression"})
    reference_types = frozenset({"identifier", "field_identifier"})

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse Rust file: %s", file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            kind = ts_node.type
            if kind == "function_item":
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                owner = find_ancestor(ts_node, ("impl_item", "trait_item"), stop=("function_item",))
                parent_class = self._owner_name(owner, source) if owner is not None else None
                node_type = NodeType.METHOD if owner is not None else NodeType.FUNCTION
                node = make_node(node_type, name, file_path, ts_node, source)
                if parent_class:
                    node.add_metadata(PARENT_CLASS, parent_class)
                nodes.append(node)

            elif kind == "struct_item":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.CLASS, name, file_path, ts_node, source))

            elif kind == "trait_item":
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(make_node(NodeType.INTERFACE, name, file_path, ts_node, source))

            elif kind in ("enum_item", "type_item"):
                name = field_text(ts_node, "name", source)
                if name:
                    nodes.append(
                        make_node(NodeType.TYPE_DEFINITION, name, file_path, ts_node, source)
                    )

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        func = call_node.child_by_field_name("function")
        while func is not None and func.type == "generic_function":
            func = func.child_by_field_name("function")
        if func is None:
            return None
        if func.type == "identifier":
            return func
        if func.type == "field_expression":
            return func.child_by_field_name("field")
        if func.type == "scoped_identifier":
            return func.child_by_field_name("name")
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type != "use_declaration":
                continue
            argument = ts_node.child_by_field_name("argument")
            if argument is not None:
                names.extend(use_tree_names(node_text(argument, parsed.source)))
        return names

    @staticmethod
    def _owner_name(owner: Any, source: bytes) -> Optional[str]:
        if owner.type == "trait_item":
            return field_text(owner, "name", source)
        type_node = owner.child_by_field_name("type")
        if type_node is None:
            return None
        return impl_type_name(node_text(type_node, source))


def impl_type_name(text: str) -> str:
    """``&'a mut crate::graph::Graph<T>`` -> ``Graph``."""
    text = _LIFETIME.sub("", text.split("<", 1)[0]).replace("&", " ")
    words = [word for word in text.split() if word not in ("mut", "dyn")]
    return words[-1].rsplit("::", 1)[-1] if words else ""


def use_tree_names(text: str) -> List[str]:
    """Last path segment of every item brought into scope by a ``use`` tree.

    ``crate::graph::{CodeGraph, node::Node as N}`` -> ``["CodeGraph", "Node"]``.
    """
    text = text.strip()
    if "{" in text:
        prefix, _, rest = text.partition("{")
        inner = rest.rsplit("}", 1)[0]
        names: List[str] = []
        for item in _split_top_level(inner):
            item = item.strip()
            if item == "self":
                names.extend(use_tree_names(prefix.rstrip(":")))
            elif item:
                names.extend(use_tree_names(item))
        return names

    path = text.split(" as ", 1)[0].strip()
    segments = [seg for seg in path.split("::") if seg and seg != "*"]
    if not segments or segments[-1] in _PATH_KEYWORDS:
        return []
    return [segments[-1]]


def _split_top_level(text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts
