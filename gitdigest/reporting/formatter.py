"""
Digest formatters for the supported output encodings.

Every formatter is a pure function of its inputs: the same records,
statistics and repository identifier always render to the same text.
"""

import logging
import re
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from gitdigest.core.options import OutputFormat
from gitdigest.core.pipeline import PipelineStage, PipelineState
from gitdigest.ingestion.repository import FileRecord
from gitdigest.reporting.digest import DigestResult, Statistics

logger = logging.getLogger(__name__)

_BACKTICK_RUN = re.compile(r"`+")


class DigestFormatter(ABC):
    """Abstract base class for digest formatters."""

    output_format: OutputFormat

    @abstractmethod
    def format(
        self, repository: str, records: Sequence[FileRecord], stats: Statistics
    ) -> DigestResult:
        """Build the digest for a set of records."""
        pass

    def save(self, result: DigestResult, path: Path) -> None:
        """Write a rendered digest to a file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(result.render())

        logger.info(f"Digest saved to {path}")


class StructuredFormatter(DigestFormatter):
    """
    Machine-readable digest.

    Keeps the records themselves; ``DigestResult.to_dict`` exposes
    ``path``, ``content``, ``language`` and ``size`` per file.
    """

    output_format = OutputFormat.STRUCTURED

    def format(
        self, repository: str, records: Sequence[FileRecord], stats: Statistics
    ) -> DigestResult:
        return DigestResult(
            repository=repository,
            stats=stats,
            output_format=self.output_format,
            files=tuple(records),
        )


class PlaintextFormatter(DigestFormatter):
    """Concatenates files under ``=== path ===`` headers."""

    output_format = OutputFormat.PLAINTEXT

    def format(
        self, repository: str, records: Sequence[FileRecord], stats: Statistics
    ) -> DigestResult:
        content = "".join(
            f"=== {record.path} ===\n{record.content}\n\n" for record in records
        )
        return DigestResult(
            repository=repository,
            stats=stats,
            output_format=self.output_format,
            content=content,
            files=tuple(records),
        )


class MarkdownFormatter(DigestFormatter):
    """
    Formats a digest as a Markdown document.

    A title, a statistics list, then one section per file with its
    content in a fenced block tagged with the file's language.
    """

    output_format = OutputFormat.MARKDOWN

    def format(
        self, repository: str, records: Sequence[FileRecord], stats: Statistics
    ) -> DigestResult:
        content = self._format_header(repository, stats) + "".join(
            self._format_file(record) for record in records
        )
        return DigestResult(
            repository=repository,
            stats=stats,
            output_format=self.output_format,
            content=content,
            files=tuple(records),
        )

    def _format_header(self, repository: str, stats: Statistics) -> str:
        lines = [
            f"# Repository: {repository}",
            "",
            "## Statistics",
            f"- **Total Files**: {stats.total_files}",
            f"- **Total Size**: {format_kilobytes(stats.total_size)} KB",
            f"- **Languages**: {', '.join(stats.languages)}",
            f"- **Test Files**: {stats.test_files}",
            f"- **Documentation Files**: {stats.doc_files}",
            "",
            "## Files",
        ]
        return "\n".join(lines) + "\n\n"

    def _format_file(self, record: FileRecord) -> str:
        fence = code_fence(record.content)
        return (
            f"### {record.path}\n\n"
            f"{fence}{record.language}\n"
            f"{record.content}\n"
            f"{fence}\n\n"
        )


def format_kilobytes(size: int) -> str:
    """Bytes as kilobytes with two decimals, rounding halves up."""
    kilobytes = Decimal(size) / 1024
    return str(kilobytes.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def code_fence(content: str) -> str:
    """Backtick fence longer than any backtick run inside ``content``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    return "`" * max(3, longest + 1)


FORMATTERS: Dict[OutputFormat, DigestFormatter] = {
    OutputFormat.STRUCTURED: StructuredFormatter(),
    OutputFormat.PLAINTEXT: PlaintextFormatter(),
    OutputFormat.MARKDOWN: MarkdownFormatter(),
}


def format_digest(
    repository: str,
    records: Sequence[FileRecord],
    stats: Statistics,
    output_format: OutputFormat = OutputFormat.MARKDOWN,
) -> DigestResult:
    """
    Render a digest in the requested encoding.

    Args:
        repository: Repository identifier shown in the digest.
        records: Surviving files in walk order.
        stats: Statistics for ``records``.
        output_format: Encoding to produce.

    Returns:
        The DigestResult.
    """
    formatter = FORMATTERS[OutputFormat.parse(output_format)]
    return formatter.format(repository, records, stats)


class SerializationStage(PipelineStage):
    """Pipeline stage rendering the final DigestResult."""

    @property
    def name(self) -> str:
        return "serialize"

    @property
    def dependencies(self) -> List[str]:
        return ["collect", "aggregate"]

    def execute(self, state: PipelineState) -> Tuple[DigestResult, Dict[str, Any]]:
        result = format_digest(
            state.source.identifier,
            state.data["collect"],
            state.data["aggregate"],
            state.options.output_format,
        )
        metrics = {"format": result.output_format.value}
        if result.content is not None:
            metrics["content_chars"] = len(result.content)
        return result, metrics
