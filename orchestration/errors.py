"""Orchestration errors - registration, lookup and execution failures.

Hierarchy::

    WorkflowError
      ├── WorkflowValidationError    ── definition rejected at registration
      │     ├── CycleError             ── dependency graph has a cycle
      │     ├── DuplicateStepError     ── two steps share an identifier
      │     └── UnknownDependencyError ── dependency names no step
      ├── DuplicateWorkflowError     ── workflow id already registered
      ├── WorkflowNotFoundError      ── workflow id not registered
      ├── CircularDependencyError    ── scheduler found no runnable step
      └── StepFailure                ── step exhausted its retries
"""


class WorkflowError(Exception):
    """Base exception for all workflow engine errors."""

    pass


class WorkflowValidationError(WorkflowError):
    """Raised when a workflow definition is rejected before registration."""

    def __init__(self, message: str, workflow_id: str | None = None):
        self.workflow_id = workflow_id
        super().__init__(message)


class CycleError(WorkflowValidationError):
    """Raised when the dependency graph contains a cycle.

    `source` depends (directly or transitively) on `target`, and the edge
    source -> target closes the cycle.
    """

    def __init__(self, source: str, target: str, workflow_id: str | None = None):
        self.source = source
        self.target = target
        self.cycle = (source, target)
        super().__init__(f"Circular dependency detected: {source} -> {target}", workflow_id)


class DuplicateStepError(WorkflowValidationError):
    """Raised when two steps of one workflow share an identifier."""

    def __init__(self, step_id: str, workflow_id: str | None = None):
        self.step_id = step_id
        super().__init__(f"Duplicate step id: {step_id}", workflow_id)


class UnknownDependencyError(WorkflowValidationError):
    """Raised when a step depends on an identifier absent from the workflow."""

    def __init__(self, step_id: str, dependency_id: str, workflow_id: str | None = None):
        self.step_id = step_id
        self.dependency_id = dependency_id
        super().__init__(f"Step '{step_id}' depends on unknown step '{dependency_id}'", workflow_id)


class DuplicateWorkflowError(WorkflowError):
    """Raised when registering an id that is already registered."""

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow {workflow_id} already registered")


class WorkflowNotFoundError(WorkflowError):
    """Raised when a workflow id is not registered."""

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow {workflow_id} not found")


class CircularDependencyError(WorkflowError):
    """Raised when execution stalls with steps whose dependencies never complete.

    Only reachable with a definition that bypassed validation.
    """

    def __init__(self, pending: list[str], workflow_id: str | None = None):
        self.pending = pending
        self.workflow_id = workflow_id
        super().__init__(
            f"Circular dependency detected: no runnable step among {', '.join(pending)}"
        )


class StepFailure(WorkflowError):
    """Raised by the retry runner once a step's attempts are exhausted.

    The scheduler turns it into a failed StepResult; it never escapes
    WorkflowEngine.execute.
    """

    def __init__(self, step_id: str, attempts: int, cause: BaseException):
        self.step_id = step_id
        self.attempts = attempts
        self.cause = cause
        self.message = str(cause) or type(cause).__name__
        super().__init__(self.message)
