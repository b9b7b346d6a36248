"""
File classification.

Derives a language tag, binary flag, and test/doc membership for a
file purely from its workspace-relative path.
"""

import posixpath
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Pattern, Tuple

DEFAULT_LANGUAGE = "text"


@dataclass(frozen=True)
class FileClassification:
    """Classification of a single candidate file."""
    path: str
    extension: str
    language: str
    is_binary: bool
    is_test: bool
    is_doc: bool


class FileClassifier:
    """
    Classifies files by path.

    All lookups are table-driven; nothing here opens a file, so binary
    files are recognised before any content is read.
    """

    EXTENSION_MAP: Dict[str, str] = {
        ".js": "javascript",
        ".jsx": "javascript",
        ".ts": "typescript",
        ".tsx": "typescript",
        ".py": "python",
        ".java": "java",
        ".c": "c",
        ".cpp": "cpp",
        ".cs": "csharp",
        ".go": "go",
        ".rs": "rust",
        ".php": "php",
        ".rb": "ruby",
        ".swift": "swift",
        ".kt": "kotlin",
        ".scala": "scala",
        ".sh": "bash",
        ".yml": "yaml",
        ".yaml": "yaml",
        ".json": "json",
        ".xml": "xml",
        ".html": "html",
        ".css": "css",
        ".scss": "scss",
        ".md": "markdown",
        ".sql": "sql",
        ".dockerfile": "dockerfile",
    }

    BINARY_EXTENSIONS: FrozenSet[str] = frozenset({
        # images
        ".jpg", ".jpeg", ".png", ".gif", ".ico", ".svg", ".bmp", ".webp", ".tiff",
        # documents
        ".pdf",
        # archives
        ".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".jar",
        # executables and libraries
        ".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".a", ".class", ".pyc", ".wasm",
        # fonts
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        # audio and video
        ".mp3", ".wav", ".ogg", ".flac", ".mp4", ".avi", ".mov", ".mkv", ".webm",
    })

    TEST_PATTERNS: Tuple[Pattern, ...] = (
        re.compile(r"test", re.IGNORECASE),
        re.compile(r"spec", re.IGNORECASE),
        re.compile(r"__tests__"),
        re.compile(r"\.test\."),
        re.compile(r"\.spec\."),
        re.compile(r"tests?/", re.IGNORECASE),
        re.compile(r"spec/", re.IGNORECASE),
    )

    DOC_PATTERNS: Tuple[Pattern, ...] = (
        re.compile(r"readme", re.IGNORECASE),
        re.compile(r"\.md$", re.IGNORECASE),
        re.compile(r"docs?/", re.IGNORECASE),
        re.compile(r"documentation", re.IGNORECASE),
        re.compile(r"changelog", re.IGNORECASE),
        re.compile(r"license", re.IGNORECASE),
        re.compile(r"contributing", re.IGNORECASE),
    )

    def classify(self, relative_path: str) -> FileClassification:
        """
        Classify a file by its slash-delimited relative path.

        Args:
            relative_path: Workspace-relative path.

        Returns:
            FileClassification for the path.
        """
        extension = extension_of(relative_path)
        return FileClassification(
            path=relative_path,
            extension=extension,
            language=self.detect_language(relative_path),
            is_binary=self.is_binary(relative_path),
            is_test=self.is_test_file(relative_path),
            is_doc=self.is_doc_file(relative_path),
        )

    def detect_language(self, relative_path: str) -> str:
        """Map a file extension to a language tag; unmapped is ``text``."""
        return self.EXTENSION_MAP.get(extension_of(relative_path), DEFAULT_LANGUAGE)

    def is_binary(self, relative_path: str) -> bool:
        name = posixpath.basename(relative_path).lower()
        return name.endswith(tuple(self.BINARY_EXTENSIONS))

    def is_test_file(self, relative_path: str) -> bool:
        return any(p.search(relative_path) for p in self.TEST_PATTERNS)

    def is_doc_file(self, relative_path: str) -> bool:
        return any(p.search(relative_path) for p in self.DOC_PATTERNS)

    def get_supported_languages(self) -> List[str]:
        """Get list of all mapped languages."""
        return sorted(set(self.EXTENSION_MAP.values()))

    def get_extensions_for_language(self, language: str) -> List[str]:
        """Get all file extensions associated with a language."""
        return [
            ext for ext, lang in self.EXTENSION_MAP.items()
            if lang == language
        ]


def extension_of(relative_path: str) -> str:
    """Lower-cased extension of the final path component, ``""`` if none."""
    name = posixpath.basename(relative_path)
    return posixpath.splitext(name)[1].lower()
