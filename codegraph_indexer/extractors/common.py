"""Tree-sitter helpers shared by every language extractor.

Grammars come from the per-language ``tree-sitter-<lang>`` packages, which
expose a ``language()`` capsule (``tree-sitter >= 0.22``).  Grammar objects
are loaded once and shared; a fresh :class:`tree_sitter.Parser` is built for
every parse so no parser is ever used from two threads at once.
"""

from __future__ import annotations

import importlib
import logging
import re
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, NamedTuple, Optional, Tuple

from tree_sitter import Language, Parser

from ..models import Node, NodeType, create_node

logger = logging.getLogger(__name__)

# language tag -> (grammar module, factory attribute)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "python": ("tree_sitter_python", "language"),
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "go": ("tree_sitter_go", "language"),
    "rust": ("tree_sitter_rust", "language"),
    "java": ("tree_sitter_java", "language"),
    "c": ("tree_sitter_c", "language"),
    "cpp": ("tree_sitter_cpp", "language"),
    "ruby": ("tree_sitter_ruby", "language"),
}

_languages: Dict[str, Optional[Language]] = {}
_languages_lock = threading.Lock()


class ParsedSource(NamedTuple):
    tree: Any
    source: bytes


# ------------------------------------------------------------------
# Grammar loading / parsing
# ------------------------------------------------------------------

def load_language(language: str) -> Optional[Language]:
    """Return the tree-sitter grammar for *language*, or None if unavailable."""
    with _languages_lock:
        if language in _languages:
            return _languages[language]

        ts_lang: Optional[Language] = None
        spec = _GRAMMAR_MODULES.get(language)
        if spec is None:
            logger.warning("No grammar module mapped for language '%s'", language)
        else:
            mod_name, attr = spec
            try:
                mod = importlib.import_module(mod_name)
                ts_lang = Language(getattr(mod, attr)())
                logger.debug("Loaded tree-sitter grammar for %s", language)
            except ImportError:
                logger.warning(
                    "Grammar package '%s' not installed for language '%s'. "
                    "Install with: pip install %s",
                    mod_name, language, mod_name.replace("_", "-"),
                )
            except Exception as exc:
                logger.warning("Could not load tree-sitter grammar for %s: %s", language, exc)

        _languages[language] = ts_lang
        return ts_lang


@lru_cache(maxsize=32)
def parse_source(language: str, content: str) -> Optional[ParsedSource]:
    """Parse *content* with the grammar for *language*.

    The inference pass asks the same extractor about the same file many
    times, so recent parses are cached.  Trees are only read, never edited.
    """
    ts_lang = load_language(language)
    if ts_lang is None:
        return None
    source = content.encode("utf-8")
    try:
        tree = Parser(ts_lang).parse(source)
    except Exception as exc:
        logger.warning("tree-sitter failed to parse %s source: %s", language, exc)
        return None
    return ParsedSource(tree=tree, source=source)


# ------------------------------------------------------------------
# Tree helpers
# ------------------------------------------------------------------

def iter_nodes(root: Any) -> Iterator[Any]:
    """Pre-order walk over named nodes, without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))


def node_text(node: Any, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def field_text(node: Any, field_name: str, source: bytes) -> Optional[str]:
    child = node.child_by_field_name(field_name)
    if child is None:
        return None
    return node_text(child, source)


def node_lines(node: Any) -> Tuple[int, int]:
    """1-based inclusive line range of a syntax node."""
    return node.start_point[0] + 1, node.end_point[0] + 1


def find_ancestor(node: Any, types: Iterable[str], stop: Iterable[str] = ()) -> Optional[Any]:
    """Nearest ancestor whose type is in *types*; None if a *stop* type comes first."""
    wanted = set(types)
    barrier = set(stop)
    current = node.parent
    while current is not None:
        if current.type in wanted:
            return current
        if current.type in barrier:
            return None
        current = current.parent
    return None


# ------------------------------------------------------------------
# Node construction
# ------------------------------------------------------------------

def make_node(
    node_type: NodeType,
    name: str,
    file_path: str,
    ts_node: Any,
    source: bytes,
) -> Node:
    return create_node(
        node_type,
        name,
        file_path,
        node_lines(ts_node),
        node_text(ts_node, source),
    )


def make_module_node(file_path: str, content: str) -> Node:
    """One ``Module`` node spanning the whole file, named after its stem."""
    line_count = max(len(content.splitlines()), 1)
    return create_node(
        NodeType.MODULE,
        Path(file_path).stem,
        file_path,
        (1, line_count),
        content,
    )


# ------------------------------------------------------------------
# Import path helpers
# ------------------------------------------------------------------

_PATH_SPLIT = re.compile(r"[/\\.:;]")


def module_name_from_path(path: str) -> str:
    """Last component of an import path, reduced to identifier characters."""
    path = path.strip().strip("\"'`")
    last = _PATH_SPLIT.split(path)[-1] if path else ""
    return "".join(c for c in last if c.isalnum() or c == "_")


def strip_source_extension(name: str, extensions: Iterable[str]) -> str:
    for ext in extensions:
        if name.endswith(ext):
            return name[: -len(ext)]
    return name
