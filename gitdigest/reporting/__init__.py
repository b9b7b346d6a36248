"""
Digest aggregation and output generation.
"""

from gitdigest.reporting.digest import DigestResult, Statistics
from gitdigest.reporting.aggregator import compute_statistics
from gitdigest.reporting.formatter import (
    DigestFormatter,
    StructuredFormatter,
    PlaintextFormatter,
    MarkdownFormatter,
    format_digest,
)

__all__ = [
    "DigestResult",
    "Statistics",
    "compute_statistics",
    "DigestFormatter",
    "StructuredFormatter",
    "PlaintextFormatter",
    "MarkdownFormatter",
    "format_digest",
]
