"""Ruby extractor.

Classes and modules both become ``Class`` nodes.  A ``def`` inside either
is a method of the nearest one; a top-level ``def`` is a function.
Imports are the string arguments of ``require``-style calls.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

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

OWNER_TYPES = frozenset({"class", "module"})
METHOD_TYPES = frozenset({"method", "singleton_method"})
REQUIRE_METHODS = frozenset({"require", "require_relative", "load"})


class RubyExtractor(LanguageExtractor):
    language = "ruby"
    call_types = frozenset({"call", "method_call"})
    reference_types = frozenset({"identifier", "constant", "instance_variable", "class_variable"})

    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        file_path = str(path)
        parsed = self.parse(content)
        if parsed is None:
            logger.warning("Failed to parse Ruby file: %s", file_path)
            return []

        source = parsed.source
        nodes: List[Node] = [make_module_node(file_path, content)]

        for ts_node in iter_nodes(parsed.tree.root_node):
            kind = ts_node.type
            if kind in METHOD_TYPES:
                name = field_text(ts_node, "name", source)
                if not name:
                    continue
                owner = find_ancestor(ts_node, OWNER_TYPES)
                parent_class = None
                if owner is not None:
                    parent_class = ruby_constant_name(field_text(owner, "name", source) or "")
                if parent_class:
                    node = make_node(NodeType.METHOD, name, file_path, ts_node, source)
                    node.add_metadata(PARENT_CLASS, parent_class)
                else:
                    node = make_node(NodeType.FUNCTION, name, file_path, ts_node, source)
                nodes.append(node)

            elif kind in OWNER_TYPES:
                name = ruby_constant_name(field_text(ts_node, "name", source) or "")
                if name:
                    nodes.append(make_node(NodeType.CLASS, name, file_path, ts_node, source))

        return nodes

    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        method = call_node.child_by_field_name("method")
        if method is not None and method.type == "identifier":
            return method
        return None

    def extract_imported_names(self, content: str) -> List[str]:
        parsed = self.parse(content)
        if parsed is None:
            return []

        source = parsed.source
        names: List[str] = []
        for ts_node in iter_nodes(parsed.tree.root_node):
            if ts_node.type not in self.call_types:
                continue
            if ts_node.child_by_field_name("receiver") is not None:
                continue
            if field_text(ts_node, "method", source) not in REQUIRE_METHODS:
                continue
            arguments = ts_node.child_by_field_name("arguments")
            if arguments is None or not arguments.named_children:
                continue
            first = arguments.named_children[0]
            if first.type != "string":
                continue
            name = require_name(node_text(first, source))
            if name:
                names.append(name)
        return names


def ruby_constant_name(text: str) -> str:
    """``Billing::Invoice`` -> ``Invoice``."""
    return text.split("::")[-1].strip()


def require_name(text: str) -> str:
    """``"../lib/store.rb"`` -> ``store``; ``'active_support/core_ext'`` -> ``core_ext``."""
    text = text.strip().strip("\"'")
    return module_name_from_path(strip_source_extension(text, (".rb",)))
