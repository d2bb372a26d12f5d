"""Parallel entity extraction.

Each discovered file is handed to a worker thread that reads, parses and
extracts it without touching shared state.  The worker then takes the one
graph lock exactly once to insert its whole batch, so a file's nodes are
never interleaved with another file's.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from .discovery import collect_files
from .extractors import detect_language, get_extractor
from .graph import CodeGraph
from .models import Node

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Path], None]


def resolve_thread_count(value: Any) -> int:
    """Positive ints pass through; anything else means one thread per CPU."""
    fallback = os.cpu_count() or 1
    if value is None:
        return fallback
    try:
        count = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid thread count %r, using %d threads", value, fallback)
        return fallback
    if count <= 0:
        if count < 0:
            logger.warning("Invalid thread count %r, using %d threads", value, fallback)
        return fallback
    return count


def extract_file(path: Union[str, Path]) -> List[Node]:
    """Read *path* and return its entities.

    Raises :class:`OSError` or :class:`UnicodeDecodeError` when the file
    cannot be read as UTF-8.  Files in an unrecognised language give ``[]``.
    """
    path = Path(path)
    language = detect_language(path)
    extractor = get_extractor(language)
    if extractor is None:
        logger.warning("Unsupported language for file: %s", path)
        return []

    content = path.read_text(encoding="utf-8")
    return extractor.extract_entities(content, path)


def process_codebase_parallel(
    root: Union[str, Path],
    num_threads: int,
    progress: Optional[ProgressCallback] = None,
    skip_dirs: Optional[Iterable[str]] = None,
) -> CodeGraph:
    """Build a graph of every entity under *root* using *num_threads* workers.

    Returns only after every worker has finished.  Files that fail to read
    or extract are logged and skipped; a failure while inserting into the
    graph is re-raised.
    """
    num_threads = resolve_thread_count(num_threads)
    logger.info("Starting parallel codebase processing with %d threads", num_threads)

    files = collect_files(root, skip_dirs=skip_dirs)
    graph = CodeGraph()
    lock = threading.Lock()

    def _work(path: Path) -> int:
        logger.debug("Processing file: %s", path)
        try:
            nodes = extract_file(path)
        except Exception as exc:
            logger.warning("Error processing file %s: %s", path, exc)
            return 0

        with lock:
            for node in nodes:
                graph.add_node(node)
        logger.debug("Extracted %d code units from %s", len(nodes), path)
        return len(nodes)

    with ThreadPoolExecutor(max_workers=num_threads) as pool:
        futures = {pool.submit(_work, path): path for path in files}
        for future in as_completed(futures):
            future.result()
            if progress is not None:
                progress(futures[future])

    counts = Counter(node.node_type.value for node in graph.all_nodes())
    logger.info("File processing complete: %d nodes", graph.node_count())
    for kind, count in sorted(counts.items()):
        logger.info("  %s: %d", kind, count)

    return graph
