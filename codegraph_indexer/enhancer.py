"""Post-inference passes: qualified method names and summaries."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict

from .graph import CodeGraph
from .models import PARENT_CLASS, Node, NodeType

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATES: Dict[NodeType, str] = {
    NodeType.FUNCTION: "Function that handles {name}",
    NodeType.METHOD: "Method that implements {name}",
    NodeType.CLASS: "Class that represents {name}",
    NodeType.INTERFACE: "Interface for {name}",
    NodeType.MODULE: "Module containing {name}",
    NodeType.TYPE_DEFINITION: "Type definition for {name}",
}
DEFAULT_TEMPLATE = "Code unit: {name}"


def enhance_method_names(graph: CodeGraph) -> int:
    """Rename every method with a known owner to ``Owner::name``.

    Must run after relationship inference, which resolves calls by the bare
    name.  Running it twice does not double the prefix.  Returns the number
    of methods renamed.
    """
    logger.info("Enhancing method names with parent class information...")
    renamed = 0
    for method in graph.find_by_kind(NodeType.METHOD):
        owner = method.metadata.get(PARENT_CLASS)
        if not owner:
            continue
        prefix = f"{owner}::"
        if method.name.startswith(prefix):
            continue
        qualified = prefix + method.name
        logger.debug("Updating method name from '%s' to '%s'", method.name, qualified)
        graph.rename_node(method.node_id, qualified)
        renamed += 1

    logger.info("Qualified %d method names", renamed)
    return renamed


def summarize(node: Node) -> str:
    template = SUMMARY_TEMPLATES.get(node.node_type, DEFAULT_TEMPLATE)
    return template.format(name=node.name)


def generate_summaries(graph: CodeGraph) -> Dict[NodeType, int]:
    logger.info("Generating summaries for %d nodes", graph.node_count())
    counts: Counter = Counter()
    for node in graph.all_nodes():
        node.summary = summarize(node)
        counts[node.node_type] += 1

    for kind, count in counts.items():
        logger.debug("Generated %s summaries for %d nodes", kind.value, count)
    return dict(counts)
