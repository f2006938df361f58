"""Orchestration events - Event, EventMetadata."""

from dataclasses import dataclass
from datetime import datetime

WORKFLOW_STARTED = "workflow.started"
WORKFLOW_FINISHED = "workflow.finished"
STEP_STARTED = "workflow.step.started"
STEP_RETRYING = "workflow.step.retrying"
STEP_SUCCEEDED = "workflow.step.succeeded"
STEP_FAILED = "workflow.step.failed"


@dataclass
class EventMetadata:
    """Metadata for an event."""

    execution_id: str
    workflow_id: str
    timestamp: datetime


@dataclass
class Event:
    """Lifecycle event of a workflow execution."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
