"""
Per-file records carried from filtering into the digest.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class FileRecord:
    """
    One file that survived filtering.

    ``size`` is the on-disk byte size; ``len(content)`` is the decoded
    character count and may differ.
    """

    path: str
    content: str
    size: int
    language: str
    is_test: bool = False
    is_doc: bool = False

    @property
    def char_count(self) -> int:
        return len(self.content)

    def to_dict(self) -> Dict:
        """Convert to the structured-output file entry."""
        return {
            "path": self.path,
            "content": self.content,
            "language": self.language,
            "size": self.size,
        }
