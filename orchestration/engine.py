"""Workflow engine - registration, lookup and execution of workflows."""

from collections.abc import Mapping
from typing import Any

from core.infrastructure.logging import get_logger
from core.settings import EngineSettings

from .bus import EventBusProtocol, InMemoryEventBus
from .models import WorkflowExecution
from .planner import plan_execution_order
from .registry import WorkflowRegistry
from .scheduler import Scheduler
from .workflow import WorkflowDefinition


class WorkflowEngine:
    """Registers workflow definitions and executes them by id."""

    def __init__(
        self,
        registry: WorkflowRegistry | None = None,
        event_bus: EventBusProtocol | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            registry: WorkflowRegistry to use; a private one by default
            event_bus: EventBusProtocol for lifecycle events; in-memory by default
            settings: EngineSettings; read from the environment by default
        """
        self._settings = settings or EngineSettings()
        if registry is None:
            registry = WorkflowRegistry(allow_overwrite=self._settings.allow_overwrite)
        self._registry = registry
        self._event_bus = event_bus if event_bus is not None else InMemoryEventBus()
        self._scheduler = Scheduler(
            event_bus=self._event_bus,
            backoff_seconds=self._settings.retry_backoff_seconds,
            max_concurrency=self._settings.max_concurrency,
        )
        self._logger = get_logger("orchestration.engine")

    @property
    def registry(self) -> WorkflowRegistry:
        return self._registry

    @property
    def event_bus(self) -> EventBusProtocol:
        return self._event_bus

    def register_workflow(self, workflow: WorkflowDefinition, *, replace: bool = False) -> None:
        """Validate and register a workflow definition.

        Raises:
            WorkflowValidationError: If the definition is invalid (e.g. CycleError)
            DuplicateWorkflowError: If the id is taken and replace is False
        """
        self._registry.register(workflow, replace=replace)

    async def execute(
        self, workflow_id: str, input_: Mapping[str, Any] | None = None
    ) -> WorkflowExecution:
        """Execute a registered workflow.

        Args:
            workflow_id: Id of a registered workflow
            input_: Initial input record

        Returns:
            WorkflowExecution with per-step results and, on success, the
            aggregate output

        Raises:
            WorkflowNotFoundError: If workflow_id is not registered
            CircularDependencyError: If execution stalls on unreachable steps
        """
        workflow = self._registry.require(workflow_id)
        return await self._scheduler.run(workflow, input_)

    def get_workflow(self, workflow_id: str) -> WorkflowDefinition | None:
        """Get workflow by id."""
        return self._registry.get(workflow_id)

    def list_workflows(self) -> list[str]:
        """List registered workflow ids in registration order."""
        return self._registry.list_ids()

    def plan(self, workflow_id: str) -> list[str]:
        """Step ids of a registered workflow in the order execute() runs them."""
        return plan_execution_order(self._registry.require(workflow_id))
