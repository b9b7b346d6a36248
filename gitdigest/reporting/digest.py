"""
Digest data structures.

Statistics and DigestResult are built once per request and returned to
the caller; their dictionary forms are the response contract.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from gitdigest.core.options import OutputFormat
from gitdigest.ingestion.repository import FileRecord


@dataclass(frozen=True)
class Statistics:
    """Summary statistics over the surviving files."""

    total_files: int
    total_size: int
    languages: Tuple[str, ...]
    test_files: int
    doc_files: int

    @property
    def total_size_kb(self) -> float:
        return self.total_size / 1024

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "totalSize": self.total_size,
            "languages": list(self.languages),
            "testFiles": self.test_files,
            "docFiles": self.doc_files,
        }


@dataclass(frozen=True)
class DigestResult:
    """
    Final digest for one repository.

    Structured digests carry ``files``; plaintext and markdown digests
    carry the rendered ``content``.
    """

    repository: str
    stats: Statistics
    output_format: OutputFormat
    content: Optional[str] = None
    files: Tuple[FileRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response body."""
        data: Dict[str, Any] = {
            "repository": self.repository,
            "stats": self.stats.to_dict(),
        }
        if self.output_format is OutputFormat.STRUCTURED:
            data["files"] = [record.to_dict() for record in self.files]
        else:
            data["content"] = self.content
        return data

    def render(self) -> str:
        """Text form of the digest, as written to a file or terminal."""
        if self.output_format is OutputFormat.STRUCTURED:
            return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        return self.content or ""

    @property
    def file_paths(self) -> List[str]:
        return [record.path for record in self.files]
