"""Dependency graph - cycle detection, validation and the ready queue."""

import heapq
from collections.abc import Sequence

from .errors import CycleError, DuplicateStepError, UnknownDependencyError
from .workflow import WorkflowDefinition, WorkflowStep


def find_cycle(steps: Sequence[WorkflowStep]) -> tuple[str, str] | None:
    """Find a dependency cycle among `steps`.

    Depth-first search from every unvisited step in declared order, keeping a
    visited set and the set of steps on the current path. Dependencies that
    name no step are not followed.

    Args:
        steps: Steps of one workflow

    Returns:
        The edge (step_id, dependency_id) that closes a cycle, or None
    """
    dependencies = {step.id: step.dependencies for step in steps}
    visited: set[str] = set()
    on_path: set[str] = set()

    for root in dependencies:
        if root in visited:
            continue
        visited.add(root)
        on_path.add(root)
        stack = [(root, iter(dependencies[root]))]

        while stack:
            step_id, remaining = stack[-1]
            for dep in remaining:
                if dep in on_path:
                    return step_id, dep
                if dep not in visited and dep in dependencies:
                    visited.add(dep)
                    on_path.add(dep)
                    stack.append((dep, iter(dependencies[dep])))
                    break
            else:
                # All dependencies explored
                on_path.discard(step_id)
                stack.pop()

    return None


def validate_workflow(workflow: WorkflowDefinition) -> None:
    """Validate a workflow definition before it is stored.

    Args:
        workflow: WorkflowDefinition to validate

    Raises:
        DuplicateStepError: Two steps share an identifier
        CycleError: The dependency graph has a cycle
        UnknownDependencyError: A dependency names no step of the workflow
    """
    seen: set[str] = set()
    for step in workflow.steps:
        if step.id in seen:
            raise DuplicateStepError(step.id, workflow.id)
        seen.add(step.id)

    cycle = find_cycle(workflow.steps)
    if cycle is not None:
        raise CycleError(cycle[0], cycle[1], workflow.id)

    for step in workflow.steps:
        for dep in step.dependencies:
            if dep not in seen:
                raise UnknownDependencyError(step.id, dep, workflow.id)


class ReadyQueue:
    """Runnable steps in repeated declared-order scan order.

    Each step keeps a count of unfinished dependencies. A step whose count
    reaches zero joins the current pass if its declared position is after
    the last step handed out, otherwise the next pass. This hands out steps
    in the same order as scanning the step list from the top again and again,
    without the rescans.
    """

    def __init__(self, steps: Sequence[WorkflowStep]) -> None:
        self._steps = list(steps)
        self._position = {step.id: index for index, step in enumerate(self._steps)}
        self._remaining: dict[str, int] = {}
        self._dependents: dict[str, list[str]] = {}
        self._current: list[int] = []
        self._next: list[int] = []
        self._cursor = -1
        self._popped: set[str] = set()

        for index, step in enumerate(self._steps):
            self._remaining[step.id] = len(step.dependencies)
            for dep in step.dependencies:
                self._dependents.setdefault(dep, []).append(step.id)
            if not step.dependencies:
                self._current.append(index)
        heapq.heapify(self._current)

    def pop(self) -> WorkflowStep | None:
        """Return the next runnable step, or None if nothing is runnable now."""
        if not self._current:
            if not self._next:
                return None
            self._current, self._next = self._next, []
            self._cursor = -1

        index = heapq.heappop(self._current)
        self._cursor = index
        step = self._steps[index]
        self._popped.add(step.id)
        return step

    def complete(self, step_id: str) -> None:
        """Mark `step_id` completed and release the steps waiting on it."""
        for dependent in self._dependents.get(step_id, ()):
            self._remaining[dependent] -= 1
            if self._remaining[dependent] == 0:
                index = self._position[dependent]
                heapq.heappush(self._current if index > self._cursor else self._next, index)

    @property
    def pending(self) -> list[str]:
        """Steps never handed out, in declared order."""
        return [step.id for step in self._steps if step.id not in self._popped]
