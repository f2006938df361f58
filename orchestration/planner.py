"""Execution planner - the order a workflow's steps would run in, without running them."""

from .errors import CircularDependencyError
from .graph import ReadyQueue
from .workflow import WorkflowDefinition


def plan_execution_order(workflow: WorkflowDefinition) -> list[str]:
    """Return step ids in the order the serial scheduler runs them.

    The order depends only on the definition, so it also fixes the merge
    order of outputs when steps run concurrently.

    Args:
        workflow: WorkflowDefinition to plan

    Returns:
        Step ids in execution order

    Raises:
        CircularDependencyError: If some steps can never become runnable
    """
    queue = ReadyQueue(workflow.steps)
    order: list[str] = []
    while (step := queue.pop()) is not None:
        order.append(step.id)
        queue.complete(step.id)

    if queue.pending:
        raise CircularDependencyError(queue.pending, workflow.id)
    return order
