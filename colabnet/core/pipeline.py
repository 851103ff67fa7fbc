"""
Pipeline orchestration for colabnet scans.

A scan is a fixed chain of stages (ingestion, parsing, aggregation,
storage). Each stage reads the outputs of the stages before it from the
shared PipelineState and contributes one output plus a metrics dict.
Any failure aborts the scan; there is nothing to resume because every
scan rebuilds the snapshot from scratch.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from colabnet.core.config import ColabNetConfig, Config

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """Status of a pipeline stage."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageResult:
    """Outcome of one stage within a scan."""

    stage_name: str
    status: StageStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    elapsed: float = 0.0
    output: Any = None
    error: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage_name": self.stage_name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "elapsed_seconds": round(self.elapsed, 6),
            "error": self.error,
            "metrics": self.metrics,
        }


@dataclass
class PipelineState:
    """
    State of one scan.

    ``data`` maps stage name to that stage's output and is how later
    stages find their inputs.
    """

    pipeline_id: str
    repo_root: Path
    log_args: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    stage_results: Dict[str, StageResult] = field(default_factory=dict)
    current_stage: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def get_stage_status(self, stage_name: str) -> StageStatus:
        result = self.stage_results.get(stage_name)
        return result.status if result else StageStatus.PENDING

    def is_stage_completed(self, stage_name: str) -> bool:
        return self.get_stage_status(stage_name) == StageStatus.COMPLETED

    def record_stage_start(self, stage_name: str) -> None:
        self.current_stage = stage_name
        self.stage_results[stage_name] = StageResult(
            stage_name=stage_name,
            status=StageStatus.RUNNING,
            started_at=datetime.now(),
        )

    def record_stage_completion(
        self,
        stage_name: str,
        output: Any,
        metrics: Dict[str, Any] = None,
        elapsed: float = 0.0,
    ) -> None:
        result = self.stage_results.get(stage_name)
        if result is None:
            return
        result.status = StageStatus.COMPLETED
        result.completed_at = datetime.now()
        result.elapsed = elapsed
        result.output = output
        result.metrics = metrics or {}
        self.data[stage_name] = output

    def record_stage_failure(self, stage_name: str, error: str, elapsed: float = 0.0) -> None:
        result = self.stage_results.get(stage_name)
        if result is None:
            return
        result.status = StageStatus.FAILED
        result.completed_at = datetime.now()
        result.elapsed = elapsed
        result.error = error

    def timings(self) -> List[Tuple[str, float]]:
        """``(stage, seconds)`` for every stage that ran, in execution order."""
        return [(name, result.elapsed) for name, result in self.stage_results.items()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pipeline_id": self.pipeline_id,
            "repo_root": str(self.repo_root),
            "log_args": list(self.log_args),
            "created_at": self.created_at.isoformat(),
            "current_stage": self.current_stage,
            "stage_results": {
                name: result.to_dict()
                for name, result in self.stage_results.items()
            },
        }


class PipelineStage(ABC):
    """
    Base class for scan stages.

    A stage names the stages whose output it reads in ``dependencies``
    and returns ``(output, metrics)`` from ``execute``.
    """

    def __init__(self, config: ColabNetConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this stage."""

    @property
    def dependencies(self) -> List[str]:
        return []

    @abstractmethod
    def execute(self, state: PipelineState) -> Tuple[Any, Dict[str, Any]]:
        """
        Run the stage.

        Args:
            state: Scan state holding the outputs of earlier stages.

        Returns:
            Tuple of (output_data, metrics_dict).

        Raises:
            ColabNetError: If the stage cannot complete.
        """

    def validate_inputs(self, state: PipelineState) -> bool:
        """Check that every dependency has completed."""
        missing = [dep for dep in self.dependencies if not state.is_stage_completed(dep)]
        for dep in missing:
            self.logger.error(f"Dependency not met: {dep}")
        return not missing


class Pipeline:
    """
    Runs registered stages in a fixed order against one repository.

    A failing stage is recorded on the state and its exception propagates
    to the caller unchanged.
    """

    def __init__(self, config: ColabNetConfig = None):
        self.config = config or Config.get()
        self.stages: Dict[str, PipelineStage] = {}
        self.execution_order: List[str] = []
        self.logger = logging.getLogger(__name__)

    def register_stage(self, stage: PipelineStage) -> None:
        self.stages[stage.name] = stage
        self.logger.debug(f"Registered stage: {stage.name}")

    def set_execution_order(self, order: List[str]) -> None:
        """
        Fix the order stages run in.

        Raises:
            ValueError: If a stage is not registered, or is placed before
                one of its dependencies.
        """
        seen: List[str] = []
        for stage_name in order:
            stage = self.stages.get(stage_name)
            if stage is None:
                raise ValueError(f"Unknown stage: {stage_name}")

            for dep in stage.dependencies:
                if dep in self.stages and dep not in seen:
                    raise ValueError(f"Stage {stage_name} must run after {dep}")
            seen.append(stage_name)

        self.execution_order = list(order)

    def run(self, repo_root: Path, log_args: List[str] = None) -> PipelineState:
        """
        Scan one repository.

        Args:
            repo_root: Root directory of the git repository.
            log_args: Extra arguments for ``git log``.

        Returns:
            Final state; ``state.data`` holds every stage's output.
        """
        state = PipelineState(
            pipeline_id=uuid.uuid4().hex[:8],
            repo_root=Path(repo_root),
            log_args=list(log_args or []),
        )

        self.logger.info(f"Starting scan {state.pipeline_id} of {state.repo_root}")
        started = time.perf_counter()

        for stage_name in self.execution_order:
            self._run_stage(self.stages[stage_name], state)

        self.logger.info(
            f"Scan {state.pipeline_id} finished in {time.perf_counter() - started:.2f}s"
        )
        return state

    def _run_stage(self, stage: PipelineStage, state: PipelineState) -> None:
        if not stage.validate_inputs(state):
            raise ValueError(f"Stage {stage.name} dependencies not met")

        self.logger.info(f"Executing stage: {stage.name}")
        state.record_stage_start(stage.name)
        started = time.perf_counter()

        try:
            output, metrics = stage.execute(state)
        except Exception as e:
            state.record_stage_failure(stage.name, str(e), time.perf_counter() - started)
            self.logger.error(f"Stage {stage.name} failed: {e}")
            raise

        elapsed = time.perf_counter() - started
        state.record_stage_completion(stage.name, output, metrics, elapsed)
        self.logger.info(f"Stage {stage.name} completed in {elapsed:.2f}s: {metrics}")

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        return self.stages.get(name)

    def list_stages(self) -> List[str]:
        return list(self.stages)
