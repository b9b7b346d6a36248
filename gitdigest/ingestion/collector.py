"""
Ingestion pipeline stages.

The fetch stage clones the repository into the request's workspace;
the collect stage walks the checkout and keeps the files that pass
classification and filtering, in walk order.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from gitdigest.analysis.classifier import FileClassifier
from gitdigest.analysis.filters import FilterEngine, SmartFilter
from gitdigest.core.config import DigestConfig
from gitdigest.core.exceptions import FileAccessError
from gitdigest.core.options import ProcessOptions
from gitdigest.core.pipeline import PipelineStage, PipelineState
from gitdigest.ingestion.git_handler import GitHandler
from gitdigest.ingestion.repository import FileRecord
from gitdigest.ingestion.source import RepositorySource
from gitdigest.ingestion.walker import TreeWalker, file_size, read_text


class Fetcher(Protocol):
    """Anything that can materialise a repository into a directory."""

    def fetch(self, source: RepositorySource, destination: Path) -> Path:
        ...


class FetchStage(PipelineStage):
    """Pipeline stage producing the local checkout."""

    def __init__(self, config: DigestConfig, fetcher: Fetcher = None):
        super().__init__(config)
        self.fetcher = fetcher or GitHandler(config.fetch)

    @property
    def name(self) -> str:
        return "fetch"

    def execute(self, state: PipelineState) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        checkout = self.fetcher.fetch(state.source, state.workspace)
        return {"root": Path(checkout)}, {"repository": state.source.full_name}


class FileCollector(PipelineStage):
    """
    Pipeline stage turning a checkout into FileRecords.

    Per-file access failures are skipped; they never end the request.
    """

    def __init__(self, config: DigestConfig, classifier: FileClassifier = None):
        super().__init__(config)
        self.classifier = classifier or FileClassifier()

    @property
    def name(self) -> str:
        return "collect"

    @property
    def dependencies(self) -> List[str]:
        return ["fetch"]

    def execute(self, state: PipelineState) -> Tuple[List[FileRecord], Dict[str, Any]]:
        root = state.data["fetch"]["root"]
        records, metrics = self.collect(root, state.options)
        return records, metrics

    def collect(
        self, root: Path, options: ProcessOptions
    ) -> Tuple[List[FileRecord], Dict[str, Any]]:
        """
        Walk ``root`` and keep the files that pass every filter.

        Args:
            root: Checkout root.
            options: Request options.

        Returns:
            Tuple of (records in walk order, metrics).
        """
        filter_engine = FilterEngine(options, SmartFilter(self.config.smart_filter))
        records: List[FileRecord] = []
        rejected: Dict[str, int] = {}
        metrics = {"files_seen": 0, "files_kept": 0, "files_unreadable": 0}

        for relative_path, absolute_path in TreeWalker(root):
            metrics["files_seen"] += 1
            try:
                record, reason = self._collect_file(
                    relative_path, absolute_path, filter_engine
                )
            except FileAccessError as e:
                self.logger.debug(f"Skipping unreadable file: {e}")
                metrics["files_unreadable"] += 1
                continue

            if record is None:
                self.logger.debug(f"Rejected {relative_path}: {reason}")
                rejected[reason] = rejected.get(reason, 0) + 1
                continue

            records.append(record)

        metrics["files_kept"] = len(records)
        metrics["rejected"] = rejected
        return records, metrics

    def _collect_file(
        self, relative_path: str, absolute_path: Path, filter_engine: FilterEngine
    ) -> Tuple[Optional[FileRecord], Optional[str]]:
        classification = self.classifier.classify(relative_path)

        size = file_size(absolute_path, relative_path)
        reason = filter_engine.check_metadata(classification, size)
        if reason:
            return None, reason

        content = read_text(absolute_path, relative_path)
        reason = filter_engine.check_content(classification, content)
        if reason:
            return None, reason

        return FileRecord(
            path=relative_path,
            content=content,
            size=size,
            language=classification.language,
            is_test=classification.is_test,
            is_doc=classification.is_doc,
        ), None
