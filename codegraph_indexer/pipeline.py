"""End-to-end indexing: extract, infer, qualify, summarize, export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .analyzer import identify_relationships
from .enhancer import enhance_method_names, generate_summaries
from .exporter import EXPORT_FORMATS, export_graph_to_dot, export_graph_to_json
from .graph import CodeGraph
from .processor import ProgressCallback, process_codebase_parallel

logger = logging.getLogger(__name__)


def process_codebase(
    root: Union[str, Path],
    num_threads: int,
    progress: Optional[ProgressCallback] = None,
    skip_dirs: Optional[Iterable[str]] = None,
) -> CodeGraph:
    """Extract entities, infer relationships, then qualify method names.

    Qualification has to come last: call resolution matches bare names.
    """
    graph = process_codebase_parallel(root, num_threads, progress=progress, skip_dirs=skip_dirs)
    identify_relationships(graph)
    enhance_method_names(graph)
    return graph


def analyze_codebase(
    root: Union[str, Path],
    output_path: Union[str, Path],
    num_threads: int,
    fmt: str = "json",
    progress: Optional[ProgressCallback] = None,
    skip_dirs: Optional[Iterable[str]] = None,
) -> CodeGraph:
    fmt = (fmt or "json").lower()
    if fmt not in EXPORT_FORMATS:
        logger.warning("Unsupported output format '%s', using json", fmt)
        fmt = "json"

    graph = process_codebase(root, num_threads, progress=progress, skip_dirs=skip_dirs)
    generate_summaries(graph)

    if fmt == "dot":
        export_graph_to_dot(graph, output_path)
    else:
        export_graph_to_json(graph, output_path)

    logger.info(
        "Indexed %d nodes and %d relationships",
        graph.node_count(), graph.relationship_count(),
    )
    return graph
