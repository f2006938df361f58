"""Workflow definitions - StepAction, WorkflowStep, WorkflowDefinition."""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

# Records flowing between steps: string keys, arbitrary values
StepInput = dict[str, Any]
StepOutput = Mapping[str, Any]


@runtime_checkable
class StepRunner(Protocol):
    """Object form of a step action."""

    async def run(self, input_: StepInput) -> StepOutput | None:
        """Run the step against its composed input.

        Args:
            input_: Composed input record

        Returns:
            Output record (None counts as an empty record)
        """
        ...


# Type alias for step actions: a coroutine function or a StepRunner
StepAction = Callable[[StepInput], Awaitable[StepOutput | None]] | StepRunner


async def invoke_action(action: StepAction, input_: StepInput) -> dict[str, Any]:
    """Call a step action and normalize its output to a dict.

    Args:
        action: Coroutine function or StepRunner
        input_: Composed input record

    Returns:
        Output record

    Raises:
        TypeError: If the action returns something other than a mapping or None
    """
    if isinstance(action, StepRunner):
        output = await action.run(input_)
    else:
        output = await action(input_)

    if output is None:
        return {}
    if not isinstance(output, Mapping):
        raise TypeError(f"Step action must return a mapping, got {type(output).__name__}")
    return dict(output)


def _unique(ids: Iterable[str]) -> tuple[str, ...]:
    # Keep first occurrence, drop repeats
    return tuple(dict.fromkeys(ids))


@dataclass(frozen=True)
class WorkflowStep:
    """A single step in a workflow."""

    id: str
    name: str
    action: StepAction
    dependencies: tuple[str, ...] = field(default_factory=tuple)
    retryable: bool = False
    max_retries: int = 0

    def __post_init__(self):
        object.__setattr__(self, "dependencies", _unique(self.dependencies or ()))
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got: {self.max_retries}")


@dataclass(frozen=True)
class WorkflowDefinition:
    """Definition of a workflow: an ordered collection of steps."""

    id: str
    name: str
    steps: tuple[WorkflowStep, ...]

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def step_ids(self) -> list[str]:
        """Step identifiers in declared order."""
        return [step.id for step in self.steps]

    def step(self, step_id: str) -> WorkflowStep | None:
        """Return the step with `step_id`, or None."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
