"""
Main engine for repository digests.

Provides a high-level interface validating a request and running the
complete fetch/collect/aggregate/serialize pipeline.
"""

import logging
from typing import Any, Dict, Optional, Union

from gitdigest.core.config import Config, DigestConfig
from gitdigest.core.exceptions import InvalidInputError
from gitdigest.core.options import ProcessOptions
from gitdigest.core.pipeline import Pipeline
from gitdigest.ingestion.collector import FetchStage, FileCollector, Fetcher
from gitdigest.ingestion.source import RepositorySource
from gitdigest.reporting.aggregator import AggregationStage
from gitdigest.reporting.digest import DigestResult
from gitdigest.reporting.formatter import SerializationStage

logger = logging.getLogger(__name__)


class DigestEngine:
    """
    Turns a repository URL into a DigestResult.

    Each call is independent: it gets its own pipeline state and its
    own workspace, so one engine can serve concurrent requests.
    """

    def __init__(self, config: DigestConfig = None, fetcher: Fetcher = None):
        self.config = config or Config.get()
        self.fetcher = fetcher
        self.pipeline = self._create_pipeline()

    def _create_pipeline(self) -> Pipeline:
        """Create and configure the digest pipeline."""
        pipeline = Pipeline(self.config)

        pipeline.register_stage(FetchStage(self.config, self.fetcher))
        pipeline.register_stage(FileCollector(self.config))
        pipeline.register_stage(AggregationStage(self.config))
        pipeline.register_stage(SerializationStage(self.config))

        pipeline.set_execution_order([
            "fetch",
            "collect",
            "aggregate",
            "serialize",
        ])

        return pipeline

    @property
    def default_options(self) -> ProcessOptions:
        return self.config.defaults.to_options()

    def digest(
        self,
        url: Union[str, RepositorySource],
        options: ProcessOptions,
        credential: Optional[str] = None,
        private: bool = False,
    ) -> DigestResult:
        """
        Produce a digest for one repository.

        Args:
            url: Repository URL (or an already validated source).
            options: Filtering and output options.
            credential: Optional access token for private repositories.
            private: Whether the repository requires the credential.

        Returns:
            The complete DigestResult.

        Raises:
            InvalidInputError: If the URL or options are not acceptable.
                Raised before any filesystem or network activity.
            DigestError: If the request fails after validation.
        """
        if isinstance(url, RepositorySource):
            source = url
        else:
            source = RepositorySource.parse(url, credential=credential, private=private)

        if not isinstance(options, ProcessOptions):
            raise InvalidInputError("options must be a ProcessOptions instance")

        logger.info(f"Generating digest: repository={source.identifier}, options={options.to_dict()}")

        state = self.pipeline.run(source, options)
        result = state.data["serialize"]

        logger.info(
            f"Digest ready for {source.identifier}: "
            f"{result.stats.total_files} files, "
            f"{result.stats.total_size_kb:.1f} KB"
        )
        return result

    def process_request(
        self, payload: Dict[str, Any], apply_defaults: bool = True
    ) -> DigestResult:
        """
        Handle a ``{"url": ..., "options": {...}}`` request body.

        ``options`` may also carry ``credential`` and ``private``; they are
        handed to the source, not to ProcessOptions.
        """
        if not isinstance(payload, dict):
            raise InvalidInputError("request body must be an object")

        raw_options = payload.get("options")
        if raw_options is None:
            raw_options = {}
        if not isinstance(raw_options, dict):
            raise InvalidInputError("options must be an object")

        private = raw_options.get("private", False)
        if not isinstance(private, bool):
            raise InvalidInputError("private must be a boolean")

        source = RepositorySource.parse(
            payload.get("url"),
            credential=raw_options.get("credential"),
            private=private,
        )
        defaults = self.default_options if apply_defaults else None
        options = ProcessOptions.from_dict(raw_options, defaults=defaults)

        return self.digest(source, options)


def digest_repository(
    url: str,
    options: ProcessOptions = None,
    credential: Optional[str] = None,
    private: bool = False,
    config: DigestConfig = None,
) -> DigestResult:
    """
    Convenience function to digest a single repository.

    Args:
        url: Repository URL.
        options: Options; the configured defaults when omitted.
        credential: Optional access token.
        private: Whether the repository requires the credential.
        config: Optional configuration.

    Returns:
        DigestResult for the repository.
    """
    engine = DigestEngine(config)
    if options is None:
        options = engine.default_options
    return engine.digest(url, options, credential=credential, private=private)
