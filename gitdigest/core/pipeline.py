"""
Pipeline orchestration for repository digests.

Runs the fetch, collect, aggregate and serialize stages in order
inside a single ephemeral workspace, recording per-stage status and
metrics. Any stage failure ends the request.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from gitdigest.core.config import DigestConfig, Config
from gitdigest.core.exceptions import DigestError, ProcessingError, SerializationError
from gitdigest.core.options import ProcessOptions
from gitdigest.ingestion.source import RepositorySource
from gitdigest.ingestion.workspace import Workspace

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """Status of a pipeline stage."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageResult:
    """Result from a pipeline stage execution."""

    stage_name: str
    status: StageStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stage_name": self.stage_name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
            "metrics": self.metrics,
        }


@dataclass
class PipelineState:
    """
    State of one digest request.

    Lives only for the duration of the request; nothing is persisted.
    """

    request_id: str
    source: RepositorySource
    options: ProcessOptions
    created_at: datetime = field(default_factory=datetime.now)
    workspace: Optional[Path] = None
    stage_results: Dict[str, StageResult] = field(default_factory=dict)
    current_stage: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def get_stage_status(self, stage_name: str) -> StageStatus:
        """Get the status of a specific stage."""
        if stage_name in self.stage_results:
            return self.stage_results[stage_name].status
        return StageStatus.PENDING

    def is_stage_completed(self, stage_name: str) -> bool:
        """Check if a stage has completed successfully."""
        return self.get_stage_status(stage_name) == StageStatus.COMPLETED

    def record_stage_start(self, stage_name: str) -> None:
        """Record that a stage has started."""
        self.current_stage = stage_name
        self.stage_results[stage_name] = StageResult(
            stage_name=stage_name,
            status=StageStatus.RUNNING,
            started_at=datetime.now(),
        )

    def record_stage_completion(
        self, stage_name: str, output: Any, metrics: Dict[str, Any] = None
    ) -> None:
        """Record that a stage has completed successfully."""
        if stage_name in self.stage_results:
            result = self.stage_results[stage_name]
            result.status = StageStatus.COMPLETED
            result.completed_at = datetime.now()
            result.metrics = metrics or {}
        self.data[stage_name] = output

    def record_stage_failure(self, stage_name: str, error: str) -> None:
        """Record that a stage has failed."""
        if stage_name in self.stage_results:
            result = self.stage_results[stage_name]
            result.status = StageStatus.FAILED
            result.completed_at = datetime.now()
            result.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for logging."""
        return {
            "request_id": self.request_id,
            "repository": self.source.identifier,
            "options": self.options.to_dict(),
            "created_at": self.created_at.isoformat(),
            "current_stage": self.current_stage,
            "stage_results": {
                name: result.to_dict()
                for name, result in self.stage_results.items()
            },
        }


class PipelineStage(ABC):
    """
    Abstract base class for pipeline stages.

    Each stage reads what it needs from the state (including outputs
    of earlier stages) and returns its own output plus metrics.
    """

    def __init__(self, config: DigestConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this stage."""
        pass

    @property
    def dependencies(self) -> List[str]:
        """List of stage names that must complete before this stage."""
        return []

    @abstractmethod
    def execute(self, state: PipelineState) -> Tuple[Any, Dict[str, Any]]:
        """
        Execute the stage processing.

        Args:
            state: Current pipeline state with data from previous stages.

        Returns:
            Tuple of (output_data, metrics_dict).

        Raises:
            DigestError: If stage execution fails.
        """
        pass

    def validate_inputs(self, state: PipelineState) -> bool:
        """Check that every dependency has completed."""
        for dep in self.dependencies:
            if not state.is_stage_completed(dep):
                self.logger.error(f"Dependency not met: {dep}")
                return False
        return True


class Pipeline:
    """
    Orchestrator for one digest request.

    Executes registered stages in order inside a Workspace that is
    removed however the run ends.
    """

    def __init__(self, config: DigestConfig = None):
        self.config = config or Config.get()
        self.stages: Dict[str, PipelineStage] = {}
        self.execution_order: List[str] = []
        self.logger = logging.getLogger(__name__)

    def register_stage(self, stage: PipelineStage) -> None:
        """Register a stage with the pipeline."""
        self.stages[stage.name] = stage
        self.logger.debug(f"Registered stage: {stage.name}")

    def set_execution_order(self, order: List[str]) -> None:
        """
        Set the order in which stages should execute.

        Raises:
            ValueError: If a stage in the order is not registered.
        """
        for stage_name in order:
            if stage_name not in self.stages:
                raise ValueError(f"Unknown stage: {stage_name}")
        self.execution_order = order

    def run(self, source: RepositorySource, options: ProcessOptions) -> PipelineState:
        """
        Run every stage for a validated source.

        Args:
            source: Validated repository locator.
            options: Options for this request.

        Returns:
            Final pipeline state; stage outputs are in ``state.data``.

        Raises:
            DigestError: If any stage fails. The workspace is removed first.
        """
        state = PipelineState(
            request_id=str(uuid.uuid4())[:8],
            source=source,
            options=options,
        )

        self.logger.info(f"Starting request {state.request_id} for {source.identifier}")

        with Workspace(self.config.workspace) as workspace:
            state.workspace = workspace.path

            for stage_name in self.execution_order:
                stage = self.stages[stage_name]

                if not stage.validate_inputs(state):
                    raise ProcessingError(
                        f"Dependencies of stage {stage_name} not met",
                        stage=stage_name,
                    )

                self.logger.debug(f"Executing stage: {stage_name}")
                state.record_stage_start(stage_name)

                try:
                    output, metrics = stage.execute(state)
                except DigestError as e:
                    state.record_stage_failure(stage_name, str(e))
                    self.logger.error(f"Request {state.request_id}: stage {stage_name} failed: {e}")
                    raise
                except Exception as e:
                    state.record_stage_failure(stage_name, str(e))
                    self.logger.exception(f"Unexpected error in stage {stage_name}")
                    if stage_name == "serialize":
                        raise SerializationError(f"Failed to render digest: {e}") from e
                    raise ProcessingError(
                        f"Stage {stage_name} failed unexpectedly: {e}",
                        stage=stage_name,
                    ) from e

                state.record_stage_completion(stage_name, output, metrics)
                self.logger.info(f"Stage {stage_name} completed: {metrics}")

        self.logger.debug(f"Request {state.request_id} finished: {state.to_dict()}")
        return state

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a registered stage by name."""
        return self.stages.get(name)

    def list_stages(self) -> List[str]:
        """List all registered stage names."""
        return list(self.stages.keys())
