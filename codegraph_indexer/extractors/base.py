"""Abstract interface implemented by every language extractor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, FrozenSet, List, Optional, Tuple, Union

from ..models import Node
from .common import ParsedSource, iter_nodes, node_text, parse_source


class LanguageExtractor(ABC):
    """Turns file content into entities and name lists for one language.

    Subclasses describe their grammar with ``call_types`` (syntax node types
    that represent a call) and ``reference_types`` (identifier-like tokens),
    and implement :meth:`callee_name_node` to pick the callee name out of a
    call node.  Extractors hold no per-file state and may be shared between
    threads.
    """

    language: str = ""
    call_types: FrozenSet[str] = frozenset()
    reference_types: FrozenSet[str] = frozenset({"identifier"})

    def __init__(self, language: Optional[str] = None) -> None:
        if language is not None:
            self.language = language

    # ------------------------------------------------------------------
    # Language-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def extract_entities(self, content: str, path: Union[str, Path]) -> List[Node]:
        """Return every entity defined in *content*."""
        ...

    @abstractmethod
    def extract_imported_names(self, content: str) -> List[str]:
        """Return the module/type names imported by *content*."""
        ...

    @abstractmethod
    def callee_name_node(self, call_node: Any) -> Optional[Any]:
        """Return the syntax node holding the called name, if any."""
        ...

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    def parse(self, content: str) -> Optional[ParsedSource]:
        return parse_source(self.language, content)

    def extract_called_names(
        self,
        content: str,
        line_range: Tuple[int, int],
        owner_name: str,
    ) -> List[str]:
        """Names called textually inside *line_range*.

        *owner_name* is the enclosing entity's name; it is accepted for
        extractors that want it but the default implementation ignores it.
        """
        parsed = self.parse(content)
        if parsed is None:
            return []

        start, end = line_range
        names: List[str] = []
        for node in iter_nodes(parsed.tree.root_node):
            if node.type not in self.call_types:
                continue
            name_node = self.callee_name_node(node)
            if name_node is None:
                continue
            if start <= name_node.start_point[0] + 1 <= end:
                name = node_text(name_node, parsed.source)
                if name:
                    names.append(name)
        return names

    def extract_referenced_ranges(
        self,
        content: str,
        line_range: Tuple[int, int],
        identifier: str,
    ) -> List[Tuple[int, int]]:
        """Line ranges of every token equal to *identifier* inside *line_range*."""
        parsed = self.parse(content)
        if parsed is None:
            return []

        start, end = line_range
        ranges: List[Tuple[int, int]] = []
        for node in iter_nodes(parsed.tree.root_node):
            if node.type not in self.reference_types:
                continue
            line = node.start_point[0] + 1
            if start <= line <= end and node_text(node, parsed.source) == identifier:
                ranges.append((line, node.end_point[0] + 1))
        return ranges

    def __repr__(self) -> str:
        return f"{type(self).__name__}(language={self.language!r})"
