"""Orchestration layer - DAG workflow execution with retries and eventing."""

from core.settings import EngineSettings, get_app_settings

from .bus import EventBusProtocol, InMemoryEventBus
from .composition import compose_input, merge_outputs
from .engine import WorkflowEngine
from .errors import (
    CircularDependencyError,
    CycleError,
    DuplicateStepError,
    DuplicateWorkflowError,
    StepFailure,
    UnknownDependencyError,
    WorkflowError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)
from .events import Event, EventMetadata
from .graph import ReadyQueue, find_cycle, validate_workflow
from .models import StepResult, WorkflowExecution
from .planner import plan_execution_order
from .registry import WorkflowRegistry
from .retry import RetryPolicy, linear_backoff, run_with_retry
from .scheduler import Scheduler
from .workflow import StepAction, StepRunner, WorkflowDefinition, WorkflowStep

__all__ = [
    "CircularDependencyError",
    "CycleError",
    "DuplicateStepError",
    "DuplicateWorkflowError",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "InMemoryEventBus",
    "ReadyQueue",
    "RetryPolicy",
    "Scheduler",
    "StepAction",
    "StepFailure",
    "StepResult",
    "StepRunner",
    "UnknownDependencyError",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowError",
    "WorkflowExecution",
    "WorkflowNotFoundError",
    "WorkflowRegistry",
    "WorkflowStep",
    "WorkflowValidationError",
    "compose_input",
    "create_default_engine",
    "find_cycle",
    "linear_backoff",
    "merge_outputs",
    "plan_execution_order",
    "run_with_retry",
    "validate_workflow",
]


def create_default_engine(settings: EngineSettings | None = None) -> WorkflowEngine:
    """Create a workflow engine with its own registry and in-memory event bus.

    Args:
        settings: EngineSettings; the cached application settings by default

    Returns:
        WorkflowEngine instance
    """
    settings = settings or get_app_settings().engine
    return WorkflowEngine(
        registry=WorkflowRegistry(allow_overwrite=settings.allow_overwrite),
        event_bus=InMemoryEventBus(),
        settings=settings,
    )
