"""Orchestration models - StepResult, WorkflowExecution."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from core.domain.enums.execution_status import ExecutionStatus, StepStatus
from core.domain.value_objects.execution_id import ExecutionID


@dataclass
class StepResult:
    """Result of a workflow step execution."""

    step_id: str
    status: StepStatus
    started_at: datetime
    finished_at: datetime | None = None
    output: dict[str, Any] | None = None
    error: str | None = None

    @property
    def duration_ms(self) -> int | None:
        if self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_id": self.step_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "output": self.output,
            "error": self.error,
        }


@dataclass
class WorkflowExecution:
    """One run of a workflow against an initial input."""

    id: ExecutionID
    workflow_id: str
    status: ExecutionStatus
    started_at: datetime
    input: dict[str, Any]
    step_results: dict[str, StepResult] = field(default_factory=dict)
    finished_at: datetime | None = None
    output: dict[str, Any] | None = None

    @property
    def duration_ms(self) -> int | None:
        """Wall time of the execution, None while still running."""
        if self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    @property
    def failed_step(self) -> StepResult | None:
        """The failing step's result, if the execution failed."""
        for result in self.step_results.values():
            if result.status == StepStatus.FAILED:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert execution to a dictionary for serialization.

        Returns:
            Dictionary representation of the execution
        """
        return {
            "id": str(self.id),
            "workflow_id": self.workflow_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "input": self.input,
            "output": self.output,
            "step_results": {
                step_id: result.to_dict() for step_id, result in self.step_results.items()
            },
        }
