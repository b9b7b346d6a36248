"""
Statistics aggregation over surviving files.
"""

from typing import Any, Dict, Iterable, List, Tuple

from gitdigest.core.pipeline import PipelineStage, PipelineState
from gitdigest.ingestion.repository import FileRecord
from gitdigest.reporting.digest import Statistics


def compute_statistics(records: Iterable[FileRecord]) -> Statistics:
    """
    Summarise a set of FileRecords.

    Counts and sizes do not depend on input order. Languages are
    deduplicated and listed in first-encounter order so that rendering
    the same walk twice gives the same text.
    """
    total_files = 0
    total_size = 0
    test_files = 0
    doc_files = 0
    languages: Dict[str, None] = {}

    for record in records:
        total_files += 1
        total_size += record.size
        languages.setdefault(record.language)
        if record.is_test:
            test_files += 1
        if record.is_doc:
            doc_files += 1

    return Statistics(
        total_files=total_files,
        total_size=total_size,
        languages=tuple(languages),
        test_files=test_files,
        doc_files=doc_files,
    )


class AggregationStage(PipelineStage):
    """Pipeline stage computing Statistics for the collected files."""

    @property
    def name(self) -> str:
        return "aggregate"

    @property
    def dependencies(self) -> List[str]:
        return ["collect"]

    def execute(self, state: PipelineState) -> Tuple[Statistics, Dict[str, Any]]:
        stats = compute_statistics(state.data["collect"])
        return stats, {
            "total_files": stats.total_files,
            "total_size_bytes": stats.total_size,
            "languages": len(stats.languages),
        }
