"""Language extractor registry.

Maps file extensions to language tags and language tags to the shared
extractor instance for that language.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

from .base import LanguageExtractor
from .cpp import CppExtractor
from .go import GoExtractor
from .java import JavaExtractor
from .javascript import JavaScriptExtractor
from .python import PythonExtractor
from .ruby import RubyExtractor
from .rust import RustExtractor

# Extension -> language tag
LANGUAGE_MAP: Dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".rb": "ruby",
}

_EXTRACTORS: Dict[str, LanguageExtractor] = {
    "python": PythonExtractor(),
    "javascript": JavaScriptExtractor(),
    "typescript": JavaScriptExtractor("typescript"),
    "tsx": JavaScriptExtractor("tsx"),
    "go": GoExtractor(),
    "rust": RustExtractor(),
    "java": JavaExtractor(),
    "c": CppExtractor("c"),
    "cpp": CppExtractor(),
    "ruby": RubyExtractor(),
}


def detect_language(path: Union[str, Path]) -> Optional[str]:
    """Language tag for *path* based on its extension, or None."""
    return LANGUAGE_MAP.get(Path(path).suffix.lower())


def get_extractor(language: Optional[str]) -> Optional[LanguageExtractor]:
    if not language:
        return None
    return _EXTRACTORS.get(language)


def supported_extensions() -> List[str]:
    return sorted(LANGUAGE_MAP)


__all__ = [
    "LANGUAGE_MAP",
    "LanguageExtractor",
    "detect_language",
    "get_extractor",
    "supported_extensions",
]
