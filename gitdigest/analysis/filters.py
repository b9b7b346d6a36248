"""
Inclusion filtering.

The FilterEngine applies its checks in a fixed order: byte size,
binary type, test flag, doc flag, then the optional smart filter. All
but the smart filter need only the path and size, so most rejected
files are never read. A rejection is a policy
decision, not an error: callers just drop the file.
"""

import re
from typing import Optional, Pattern, Tuple

from gitdigest.analysis.classifier import FileClassification
from gitdigest.core.config import SmartFilterConfig
from gitdigest.core.options import ProcessOptions

# Rejection reasons
TOO_LARGE = "too_large"
BINARY = "binary"
TEST_FILE = "test_file"
DOC_FILE = "doc_file"
TOO_SHORT = "too_short"
TOO_LONG = "too_long"
GENERATED = "generated"


class SmartFilter:
    """Heuristic rejection of noise and generated files."""

    GENERATED_PATTERNS: Tuple[Pattern, ...] = (
        re.compile(r"generated", re.IGNORECASE),
        re.compile(r"auto-generated", re.IGNORECASE),
        re.compile(r"do not edit", re.IGNORECASE),
        re.compile(r"\.min\.js$"),
        re.compile(r"\.bundle\.js$"),
    )

    def __init__(self, config: SmartFilterConfig = None):
        self.config = config or SmartFilterConfig()

    def check(self, relative_path: str, content: str) -> Optional[str]:
        """
        Return a rejection reason for noisy content, or None to keep it.

        Length limits count decoded characters, independently of the
        byte-size ceiling applied earlier.
        """
        if len(content) < self.config.min_content_length:
            return TOO_SHORT
        if len(content) > self.config.max_content_length:
            return TOO_LONG
        if self.looks_generated(relative_path, content):
            return GENERATED
        return None

    def looks_generated(self, relative_path: str, content: str) -> bool:
        head = content[: self.config.head_length]
        return any(
            pattern.search(relative_path) or pattern.search(head)
            for pattern in self.GENERATED_PATTERNS
        )


class FilterEngine:
    """Decides whether a classified file survives into the digest."""

    def __init__(self, options: ProcessOptions, smart_filter: SmartFilter = None):
        self.options = options
        self.smart_filter = smart_filter or SmartFilter()

    def check_metadata(self, classification: FileClassification, size: int) -> Optional[str]:
        """
        Apply every check that does not need file content.

        Returns:
            Rejection reason, or None if the file may be read.
        """
        if size > self.options.max_file_size:
            return TOO_LARGE
        if classification.is_binary:
            return BINARY
        if not self.options.include_tests and classification.is_test:
            return TEST_FILE
        if not self.options.include_docs and classification.is_doc:
            return DOC_FILE
        return None

    def check_content(self, classification: FileClassification, content: str) -> Optional[str]:
        """Apply the smart filter when enabled."""
        if not self.options.smart_filter:
            return None
        return self.smart_filter.check(classification.path, content)

    def accepts(self, classification: FileClassification, size: int, content: str) -> bool:
        """Run the full check chain on an already-read file."""
        return (
            self.check_metadata(classification, size) is None
            and self.check_content(classification, content) is None
        )
