"""Source file discovery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from . import config
from .extractors import supported_extensions

logger = logging.getLogger(__name__)


def collect_files(
    root: Union[str, Path],
    extensions: Optional[Iterable[str]] = None,
    skip_dirs: Optional[Iterable[str]] = None,
) -> List[Path]:
    """Canonical paths of every source file under *root*, sorted.

    Directories named in *skip_dirs* (default :data:`config.SKIP_DIRS`) are
    ignored wherever they appear below *root*.  Symlinks and other aliases
    are resolved, so each physical file is listed once.
    """
    root = Path(root).expanduser()
    if not root.exists():
        raise FileNotFoundError(f"Root path does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    allowed = {ext.lower() for ext in (extensions or supported_extensions())}
    skipped = set(config.SKIP_DIRS if skip_dirs is None else skip_dirs)

    seen: Set[Path] = set()
    files: List[Path] = []
    for file_path in sorted(root.rglob("*")):
        relative_parts = file_path.relative_to(root).parts
        if any(part in skipped for part in relative_parts[:-1]):
            continue
        if file_path.suffix.lower() not in allowed:
            continue
        try:
            if not file_path.is_file():
                continue
            canonical = file_path.resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            logger.warning("Skipping %s: cannot canonicalize path (%s)", file_path, exc)
            continue
        if canonical in seen:
            logger.debug("Skipping duplicate path %s -> %s", file_path, canonical)
            continue
        seen.add(canonical)
        files.append(canonical)

    logger.info("Found %d source files under %s", len(files), root)
    return files
