"""Workflow registry - validated workflow definitions by id."""

import threading

from core.infrastructure.logging import get_logger

from .errors import DuplicateWorkflowError, WorkflowNotFoundError
from .graph import validate_workflow
from .workflow import WorkflowDefinition


class WorkflowRegistry:
    """Stores workflow definitions by id, in registration order.

    Every stored definition has passed validate_workflow. Reads and writes are
    guarded by a lock, so one registry can serve executions on several
    threads.

    Usage:
        registry = WorkflowRegistry()
        registry.register(definition)
        workflow = registry.require("ingest")
    """

    def __init__(self, allow_overwrite: bool = False) -> None:
        """Initialize registry.

        Args:
            allow_overwrite: Replace an existing id on register instead of
                raising DuplicateWorkflowError
        """
        self._workflows: dict[str, WorkflowDefinition] = {}
        self._lock = threading.RLock()
        self._allow_overwrite = allow_overwrite
        self._logger = get_logger("orchestration.registry")

    def register(self, workflow: WorkflowDefinition, *, replace: bool = False) -> None:
        """Validate and store a workflow definition.

        Args:
            workflow: WorkflowDefinition to store
            replace: Overwrite an existing definition with the same id. A
                replaced workflow keeps its place in list_ids().

        Raises:
            WorkflowValidationError: If the definition is invalid; nothing is stored
            DuplicateWorkflowError: If the id is taken and overwriting is off
        """
        validate_workflow(workflow)

        with self._lock:
            exists = workflow.id in self._workflows
            if exists and not (replace or self._allow_overwrite):
                raise DuplicateWorkflowError(workflow.id)
            self._workflows[workflow.id] = workflow

        self._logger.info(
            "workflow_registered workflow_id=%s steps=%d replaced=%s",
            workflow.id,
            len(workflow.steps),
            exists,
        )

    def get(self, workflow_id: str) -> WorkflowDefinition | None:
        """Return the workflow with `workflow_id`, or None."""
        with self._lock:
            return self._workflows.get(workflow_id)

    def require(self, workflow_id: str) -> WorkflowDefinition:
        """Return the workflow with `workflow_id`.

        Raises:
            WorkflowNotFoundError: If no such workflow is registered
        """
        workflow = self.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    def list_ids(self) -> list[str]:
        """Registered workflow ids in registration order."""
        with self._lock:
            return list(self._workflows)

    def __contains__(self, workflow_id: object) -> bool:
        with self._lock:
            return workflow_id in self._workflows

    def __len__(self) -> int:
        with self._lock:
            return len(self._workflows)
